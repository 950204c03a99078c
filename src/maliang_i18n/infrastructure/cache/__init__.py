# src/maliang_i18n/infrastructure/cache/__init__.py
from .memory import CacheConfig, CacheStats, TranslationCache

__all__ = ["CacheConfig", "CacheStats", "TranslationCache"]
