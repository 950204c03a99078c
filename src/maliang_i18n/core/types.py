# src/maliang_i18n/core/types.py
"""
本模块定义了翻译管理核心的数据类型。
这些类型是系统各层（缓存、客户端、编排器、工作流）之间数据交换的契约。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from maliang_i18n.domain.languages import SupportedLanguage


class TextFormat(str, Enum):
    """源文本在翻译时的解释方式（编排层的“内容类型”）。"""

    PLAIN = "plain"
    MARKDOWN = "markdown"
    HTML = "html"


class ContentKind(str, Enum):
    """
    工作流层的内容类型，对应记录存储中的一张表。

    与 `TextFormat` 是两个互不相关的枚举，不可混用。
    """

    PRODUCT = "product"
    ARTICLE = "article"
    PAGE = "page"
    JOB_POSTING = "job_posting"
    CATEGORY = "category"

    @property
    def table(self) -> str:
        return _CONTENT_TABLES[self]

    @property
    def translatable_fields(self) -> tuple[str, ...]:
        return _TRANSLATABLE_FIELDS[self]


_CONTENT_TABLES: dict[ContentKind, str] = {
    ContentKind.PRODUCT: "products",
    ContentKind.ARTICLE: "articles",
    ContentKind.PAGE: "static_pages",
    ContentKind.JOB_POSTING: "job_postings",
    ContentKind.CATEGORY: "content_categories",
}

_TRANSLATABLE_FIELDS: dict[ContentKind, tuple[str, ...]] = {
    ContentKind.PRODUCT: ("name", "description", "specifications"),
    ContentKind.ARTICLE: ("title", "content", "excerpt"),
    ContentKind.PAGE: ("title", "content", "meta_title", "meta_description"),
    ContentKind.JOB_POSTING: ("title", "description", "requirements", "location"),
    ContentKind.CATEGORY: ("name", "description"),
}

# 计算完整度时使用的“主字段”偏好顺序
PRIMARY_FIELD_PREFERENCE: tuple[str, ...] = ("name", "title", "description")


class TranslationStatus(str, Enum):
    """内容记录的发布工作流状态。"""

    DRAFT = "draft"
    PENDING_REVIEW = "pending_review"
    PUBLISHED = "published"

    @classmethod
    def parse(cls, value: str | TranslationStatus) -> TranslationStatus:
        """校验并转换状态值，拒绝未知取值。"""
        try:
            return cls(value)
        except ValueError as e:
            raise ValueError(f"未知的翻译状态: {value!r}") from e

    def can_transition_to(self, target: TranslationStatus) -> bool:
        return target in _ALLOWED_TRANSITIONS[self]


_ALLOWED_TRANSITIONS: dict[TranslationStatus, frozenset[TranslationStatus]] = {
    TranslationStatus.DRAFT: frozenset({TranslationStatus.PENDING_REVIEW}),
    TranslationStatus.PENDING_REVIEW: frozenset(
        {TranslationStatus.DRAFT, TranslationStatus.PUBLISHED}
    ),
    TranslationStatus.PUBLISHED: frozenset({TranslationStatus.DRAFT}),
}


class TranslationOutcome(str, Enum):
    """一次翻译响应的三态结果。"""

    FULL = "full"
    PARTIAL = "partial"
    FAILED = "failed"


class SessionOutcome(str, Enum):
    """编排器中一次翻译会话的终止状态。"""

    COMPLETED = "completed"
    PARTIALLY_COMPLETED = "partially_completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


def _dedupe_languages(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        seen: list[Any] = []
        for item in value:
            if item not in seen:
                seen.append(item)
        return seen
    return value


class TranslationRequest(BaseModel):
    """一次翻译调用的值对象：一段源文本翻译到一组目标语言。"""

    model_config = ConfigDict(frozen=True)

    source_text: str
    source_language: SupportedLanguage
    target_languages: list[SupportedLanguage] = Field(min_length=1)
    text_format: TextFormat = TextFormat.PLAIN

    @field_validator("target_languages", mode="before")
    @classmethod
    def _dedupe_targets(cls, v: Any) -> Any:
        return _dedupe_languages(v)


class TranslationResponse(BaseModel):
    """
    翻译结果。

    `success=True` 但 `translations` 少于请求的目标语言时表示“部分成功”，
    此时 `failed_languages` 列出缺失的语言，`error` 描述差额。
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    translations: dict[SupportedLanguage, str] | None = None
    error: str | None = None
    failed_languages: list[SupportedLanguage] = Field(default_factory=list)

    @property
    def outcome(self) -> TranslationOutcome:
        if not self.success or not self.translations:
            return TranslationOutcome.FAILED
        if self.failed_languages:
            return TranslationOutcome.PARTIAL
        return TranslationOutcome.FULL

    @classmethod
    def failure(cls, error: str) -> TranslationResponse:
        return cls(success=False, error=error)


class EngineSuccess(BaseModel):
    """翻译引擎成功返回的结果：每个成功语言一条译文。"""

    translations: dict[SupportedLanguage, str]


class EngineError(BaseModel):
    """翻译引擎返回的失败结果，并指明是否可重试。"""

    error_message: str
    is_retryable: bool


EngineResult = Union[EngineSuccess, EngineError]


@dataclass(frozen=True)
class CacheEntry:
    """缓存条目，由 `TranslationCache` 独占。timestamp 取自缓存的计时器。"""

    key: str
    response: TranslationResponse
    timestamp: float


class TranslationHistoryItem(BaseModel):
    """编排器的只追加历史记录条目。"""

    model_config = ConfigDict(frozen=True)

    id: str
    source_text: str
    source_language: SupportedLanguage
    target_languages: list[SupportedLanguage]
    text_format: TextFormat
    translations: dict[SupportedLanguage, str]
    timestamp: datetime
    duration: float


class TranslationProgressReport(BaseModel):
    """单条内容记录的翻译完整度报告。"""

    content_id: str
    content_kind: ContentKind
    total_languages: int
    completed_languages: list[SupportedLanguage]
    pending_languages: list[SupportedLanguage]
    completion_percentage: int


class ErrorInfo(BaseModel):
    code: str
    message: str


class WorkflowResult(BaseModel):
    """工作流操作的带标签结果；失败时 `error` 必有值。"""

    success: bool
    data: Any = None
    error: ErrorInfo | None = None

    @classmethod
    def ok(cls, data: Any = None) -> WorkflowResult:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, code: str, message: str) -> WorkflowResult:
        return cls(success=False, error=ErrorInfo(code=code, message=message))


@dataclass
class Page:
    """记录存储分页查询的结果。"""

    rows: list[dict[str, Any]] = field(default_factory=list)
    total: int = 0
