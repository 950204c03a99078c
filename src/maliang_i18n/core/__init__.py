# src/maliang_i18n/core/__init__.py
"""核心契约：数据类型、接口协议与异常。"""

from .exceptions import (
    ConfigurationError,
    EngineNotFoundError,
    MaliangI18nError,
    RecordNotFoundError,
    RecordStoreError,
    ServiceNotInitializedError,
)
from .interfaces import RecordStore, TranslationListener, TranslationSink
from .types import (
    CacheEntry,
    ContentKind,
    EngineError,
    EngineResult,
    EngineSuccess,
    ErrorInfo,
    Page,
    SessionOutcome,
    TextFormat,
    TranslationHistoryItem,
    TranslationOutcome,
    TranslationProgressReport,
    TranslationRequest,
    TranslationResponse,
    TranslationStatus,
    WorkflowResult,
)

__all__ = [
    "CacheEntry",
    "ConfigurationError",
    "ContentKind",
    "EngineError",
    "EngineNotFoundError",
    "EngineResult",
    "EngineSuccess",
    "ErrorInfo",
    "MaliangI18nError",
    "Page",
    "RecordNotFoundError",
    "RecordStore",
    "RecordStoreError",
    "ServiceNotInitializedError",
    "SessionOutcome",
    "TextFormat",
    "TranslationHistoryItem",
    "TranslationListener",
    "TranslationOutcome",
    "TranslationProgressReport",
    "TranslationRequest",
    "TranslationResponse",
    "TranslationSink",
    "TranslationStatus",
    "WorkflowResult",
]
