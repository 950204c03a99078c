# src/maliang_i18n/containers/cache.py
"""缓存容器：进程级共享的翻译缓存与翻译历史。"""

from dependency_injector import containers, providers

from maliang_i18n.application.history import TranslationHistory
from maliang_i18n.config import MaliangI18nConfig
from maliang_i18n.infrastructure.cache.memory import TranslationCache


class CacheContainer(containers.DeclarativeContainer):
    config = providers.Dependency(instance_of=MaliangI18nConfig)

    translation_cache: providers.Singleton[TranslationCache] = providers.Singleton(
        TranslationCache,
        config=config.provided.cache,
    )
    translation_history: providers.Singleton[TranslationHistory] = providers.Singleton(
        TranslationHistory,
        limit=config.provided.orchestrator.history_limit,
    )
