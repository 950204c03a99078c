# src/maliang_i18n/infrastructure/engines/__init__.py
"""
翻译引擎注册表。

引擎类用 `@register_engine` 登记自己；`discover_engines` 导入内置引擎模块，
使其中的登记生效。
"""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING, Any, TypeVar

import structlog

if TYPE_CHECKING:
    from .base import BaseTranslationEngine

logger = structlog.get_logger(__name__)

_E = TypeVar("_E", bound="type[BaseTranslationEngine[Any]]")

ENGINE_REGISTRY: dict[str, type[BaseTranslationEngine[Any]]] = {}

BUILTIN_ENGINE_MODULES = ("debug", "openai")


def register_engine(engine_class: _E) -> _E:
    """类装饰器：以 `engine_class.name()` 为键登记引擎。"""
    name = engine_class.name()
    existing = ENGINE_REGISTRY.get(name)
    if existing is not None and existing is not engine_class:
        raise ValueError(f"引擎名称 '{name}' 已被 {existing.__qualname__} 占用")
    ENGINE_REGISTRY[name] = engine_class
    return engine_class


def discover_engines() -> None:
    """导入全部内置引擎模块。重复调用没有额外效果。"""
    for module_name in BUILTIN_ENGINE_MODULES:
        importlib.import_module(f"{__name__}.{module_name}")
    logger.debug("可用引擎", engines=sorted(ENGINE_REGISTRY))
