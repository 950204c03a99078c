# src/maliang_i18n/infrastructure/engines/factory.py
"""
翻译引擎工厂

根据应用配置，发现、加载并实例化具体的翻译引擎。
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from maliang_i18n.core.exceptions import (
    ConfigurationError,
    EngineNotFoundError,
    ServiceNotInitializedError,
)

from . import ENGINE_REGISTRY, discover_engines

if TYPE_CHECKING:
    from maliang_i18n.config import MaliangI18nConfig

    from .base import BaseTranslationEngine

logger = structlog.get_logger(__name__)


def create_engine_instance(
    config: MaliangI18nConfig, engine_name: str | None = None
) -> BaseTranslationEngine[Any]:
    """
    根据引擎名称创建翻译引擎实例（尚未 initialize）。

    Args:
        config: 完整的应用配置对象。
        engine_name: 引擎名称 (如 'debug', 'openai')，缺省取 `config.active_engine`。

    Raises:
        EngineNotFoundError: 请求的引擎未注册。
        ServiceNotInitializedError: 引擎缺少必要凭据（例如 API 密钥）。
        ConfigurationError: 引擎配置缺失或无效。
    """
    discover_engines()
    engine_name = engine_name or config.active_engine

    engine_class = ENGINE_REGISTRY.get(engine_name)
    if not engine_class:
        raise EngineNotFoundError(
            f"引擎 '{engine_name}' 未找到。已注册的引擎: {sorted(ENGINE_REGISTRY)}"
        )

    # 'openai' -> config.openai，'debug' -> config.debug_engine
    config_attr_name = f"{engine_name}_engine" if engine_name == "debug" else engine_name
    engine_config_data = getattr(config, config_attr_name, None)
    if engine_config_data is None:
        raise ConfigurationError(
            f"引擎 '{engine_name}' 的配置部分 (属性: {config_attr_name}) 在主配置中不存在。"
        )

    try:
        engine_config = engine_class.CONFIG_MODEL.model_validate(
            engine_config_data.model_dump()
        )
        engine_instance = engine_class(config=engine_config)
    except ServiceNotInitializedError:
        raise
    except Exception as e:
        raise ConfigurationError(
            f"创建引擎 '{engine_name}' 实例时配置验证失败: {e}"
        ) from e

    logger.info("翻译引擎已成功创建", engine=engine_name)
    return engine_instance


def create_engine_or_none(
    config: MaliangI18nConfig, engine_name: str | None = None
) -> BaseTranslationEngine[Any] | None:
    """
    与 `create_engine_instance` 相同，但引擎缺少凭据时返回 None。

    翻译服务未配置不会阻止应用启动，翻译客户端会对每个请求报告“服务未初始化”。
    """
    try:
        return create_engine_instance(config, engine_name)
    except ServiceNotInitializedError as e:
        logger.warning("翻译服务未初始化，翻译功能不可用", reason=str(e))
        return None
