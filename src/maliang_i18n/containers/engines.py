# src/maliang_i18n/containers/engines.py
"""翻译引擎容器：提供当前激活的翻译引擎。"""

from dependency_injector import containers, providers

from maliang_i18n.config import MaliangI18nConfig
from maliang_i18n.infrastructure.engines.factory import create_engine_or_none


class EnginesContainer(containers.DeclarativeContainer):
    config = providers.Dependency(instance_of=MaliangI18nConfig)

    # 进程内只创建一个引擎实例；缺少凭据时为 None，客户端据此报告“服务未初始化”
    active_engine = providers.Singleton(
        create_engine_or_none,
        config=config,
        engine_name=config.provided.active_engine,
    )
