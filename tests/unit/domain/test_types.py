# tests/unit/domain/test_types.py
"""核心数据类型（请求/响应、状态枚举、内容类型）的单元测试。"""

import pytest
from pydantic import ValidationError

from maliang_i18n.core.types import (
    ContentKind,
    TextFormat,
    TranslationOutcome,
    TranslationRequest,
    TranslationResponse,
    TranslationStatus,
    WorkflowResult,
)
from maliang_i18n.domain.languages import SupportedLanguage as L


def test_request_dedupes_targets_and_rejects_empty() -> None:
    request = TranslationRequest(
        source_text="你好", source_language="zh", target_languages=["en", "ja", "en"]
    )
    assert request.target_languages == [L.EN, L.JA]
    assert request.text_format is TextFormat.PLAIN

    with pytest.raises(ValidationError):
        TranslationRequest(source_text="你好", source_language="zh", target_languages=[])


def test_response_outcome() -> None:
    assert TranslationResponse(success=True, translations={L.EN: "Hi"}).outcome is TranslationOutcome.FULL
    partial = TranslationResponse(
        success=True,
        translations={L.EN: "Hi"},
        error="Partial translation",
        failed_languages=[L.JA],
    )
    assert partial.outcome is TranslationOutcome.PARTIAL
    assert TranslationResponse.failure("boom").outcome is TranslationOutcome.FAILED


def test_status_parse_and_transitions() -> None:
    assert TranslationStatus.parse("pending_review") is TranslationStatus.PENDING_REVIEW
    with pytest.raises(ValueError, match="未知的翻译状态"):
        TranslationStatus.parse("archived")

    draft, pending, published = (
        TranslationStatus.DRAFT,
        TranslationStatus.PENDING_REVIEW,
        TranslationStatus.PUBLISHED,
    )
    assert draft.can_transition_to(pending)
    assert not draft.can_transition_to(published)
    assert pending.can_transition_to(published)
    assert pending.can_transition_to(draft)
    assert published.can_transition_to(draft)


def test_content_kind_tables_and_fields() -> None:
    assert ContentKind.PAGE.table == "static_pages"
    assert ContentKind.CATEGORY.table == "content_categories"
    assert ContentKind.PRODUCT.translatable_fields == ("name", "description", "specifications")
    # 两个“内容类型”枚举互不相通
    with pytest.raises(ValueError):
        ContentKind("markdown")


def test_workflow_result_helpers() -> None:
    ok = WorkflowResult.ok({"id": "1"})
    assert ok.success and ok.error is None
    failed = WorkflowResult.fail("NOT_FOUND", "missing")
    assert not failed.success
    assert failed.error is not None and failed.error.code == "NOT_FOUND"
