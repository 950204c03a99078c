# src/maliang_i18n/containers/__init__.py
"""
应用的组合根 (Composition Root)。

`ApplicationContainer` 聚合所有子容器。缓存与翻译历史是进程级单例，
编排器则按调用方作用域（每次请求一个）创建。
"""

from __future__ import annotations

from dependency_injector import containers, providers

from maliang_i18n.config import MaliangI18nConfig

from .cache import CacheContainer
from .core import CoreContainer
from .engines import EnginesContainer
from .persistence import PersistenceContainer
from .services import ServicesContainer


class ApplicationContainer(containers.DeclarativeContainer):
    """应用的顶层 DI 容器。"""

    # 整块配置对象，向下传递的唯一事实来源
    pydantic_config = providers.Dependency(instance_of=MaliangI18nConfig)
    # 字段级配置，用于日志、记录存储选择等细粒度场景
    config = providers.Configuration()

    core = providers.Container(
        CoreContainer,
        config=config,
    )
    cache = providers.Container(
        CacheContainer,
        config=pydantic_config,
    )
    engines = providers.Container(
        EnginesContainer,
        config=pydantic_config,
    )
    persistence = providers.Container(
        PersistenceContainer,
        config=config,
    )
    services = providers.Container(
        ServicesContainer,
        config=pydantic_config,
        engine=engines.active_engine,
        cache=cache.translation_cache,
        history=cache.translation_history,
        record_store=persistence.record_store,
    )
