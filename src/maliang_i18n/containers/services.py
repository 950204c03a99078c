# src/maliang_i18n/containers/services.py
"""
应用服务层容器。

翻译客户端是单例；编排器和工作流服务是工厂，每次调用都得到新实例，
但共享同一个缓存、历史和记录存储。
"""

from dependency_injector import containers, providers

from maliang_i18n.application.client import TranslationClient
from maliang_i18n.application.history import TranslationHistory
from maliang_i18n.application.orchestrator import (
    OrchestratorOptions,
    TranslationOrchestrator,
)
from maliang_i18n.application.workflow import TranslationWorkflowService
from maliang_i18n.config import MaliangI18nConfig
from maliang_i18n.infrastructure.cache.memory import TranslationCache


class ServicesContainer(containers.DeclarativeContainer):
    config = providers.Dependency(instance_of=MaliangI18nConfig)
    engine = providers.Dependency()
    cache = providers.Dependency(instance_of=TranslationCache)
    history = providers.Dependency(instance_of=TranslationHistory)
    record_store = providers.Dependency()

    translation_client = providers.Singleton(
        TranslationClient,
        engine=engine,
        request_timeout=config.provided.client.request_timeout,
    )

    orchestrator_options = providers.Factory(
        OrchestratorOptions,
        auto_save=config.provided.orchestrator.auto_save,
        cache_enabled=config.provided.cache.enabled,
        batch_size=config.provided.orchestrator.batch_size,
    )

    orchestrator = providers.Factory(
        TranslationOrchestrator,
        client=translation_client,
        cache=cache,
        history=history,
        options=orchestrator_options,
    )

    workflow = providers.Factory(
        TranslationWorkflowService,
        store=record_store,
    )
