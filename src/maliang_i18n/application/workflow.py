# src/maliang_i18n/application/workflow.py
"""
翻译工作流 / 状态跟踪服务。

基于外部记录存储计算内容记录的翻译完整度，并管理
draft -> pending_review -> published 的发布状态流转。本服务不调用翻译引擎。

所有操作都返回 `WorkflowResult`，记录存储抛出的异常会被捕获并转为错误码：
- 存储异常自带的 code，缺省为 `UNKNOWN_ERROR`；
- 记录不存在为 `NOT_FOUND`；
- 输入无效（未知语言、驳回时未填写意见等）为 `VALIDATION_ERROR`。
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime, timezone
from typing import Any

import structlog

from maliang_i18n.core.exceptions import RecordNotFoundError, RecordStoreError
from maliang_i18n.core.interfaces import RecordStore
from maliang_i18n.core.types import (
    PRIMARY_FIELD_PREFERENCE,
    ContentKind,
    TranslationProgressReport,
    TranslationStatus,
    WorkflowResult,
)
from maliang_i18n.domain.fallback import (
    available_languages,
    completeness_percent,
    is_available,
    missing_languages,
)
from maliang_i18n.domain.languages import SUPPORTED_LANGUAGES, SupportedLanguage, parse_language

logger = structlog.get_logger(__name__)

UNKNOWN_ERROR = "UNKNOWN_ERROR"
VALIDATION_ERROR = "VALIDATION_ERROR"

STATUS_FIELD = "translation_status"
LIST_PAGE_SIZE = 100


class WorkflowValidationError(ValueError):
    """工作流输入无效。"""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def primary_field(record: Mapping[str, Any]) -> Mapping[str, str] | None:
    """按 name -> title -> description 的顺序返回记录的主翻译字段。"""
    for name in PRIMARY_FIELD_PREFERENCE:
        value = record.get(name)
        if isinstance(value, Mapping):
            return value
    return None


def _parse_kind(kind: str | ContentKind) -> ContentKind:
    try:
        return ContentKind(kind)
    except ValueError as e:
        raise WorkflowValidationError(f"未知的内容类型: {kind!r}") from e


def _parse_lang(lang: str | SupportedLanguage) -> SupportedLanguage:
    try:
        return parse_language(lang)
    except ValueError as e:
        raise WorkflowValidationError(str(e)) from e


class TranslationWorkflowService:
    """内容记录的翻译审计与状态流转。"""

    def __init__(
        self,
        store: RecordStore,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self._clock = clock

    async def _guard(
        self, operation: str, action: Callable[[], Awaitable[Any]]
    ) -> WorkflowResult:
        try:
            return WorkflowResult.ok(await action())
        except WorkflowValidationError as e:
            logger.warning("工作流输入无效", operation=operation, error=str(e))
            return WorkflowResult.fail(VALIDATION_ERROR, str(e))
        except RecordStoreError as e:
            logger.warning(
                "记录存储操作失败", operation=operation, code=e.code, error=e.message
            )
            return WorkflowResult.fail(e.code or UNKNOWN_ERROR, e.message)
        except Exception as e:
            logger.error("工作流操作发生未知错误", operation=operation, exc_info=True)
            return WorkflowResult.fail(UNKNOWN_ERROR, str(e) or e.__class__.__name__)

    async def _load(self, kind: ContentKind, content_id: str) -> dict[str, Any]:
        record = await self.store.get_by_id(kind.table, content_id)
        if record is None:
            raise RecordNotFoundError(kind.table, content_id)
        return record

    async def _list_all(
        self, table: str, filters: Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        rows: list[dict[str, Any]] = []
        page = 1
        while True:
            result = await self.store.list(table, filters, page, LIST_PAGE_SIZE)
            rows.extend(result.rows)
            if not result.rows or len(rows) >= result.total:
                return rows
            page += 1

    async def _transition(
        self,
        kind: ContentKind,
        content_id: str,
        target: TranslationStatus,
        fields: dict[str, Any],
        **actors: Any,
    ) -> dict[str, Any]:
        record = await self._load(kind, content_id)
        current = record.get(STATUS_FIELD) or TranslationStatus.DRAFT.value
        try:
            allowed = TranslationStatus.parse(current).can_transition_to(target)
        except ValueError:
            allowed = False
        if not allowed:
            # 不强制状态机，只记录非常规的流转
            logger.warning(
                "非常规的状态流转",
                content_kind=kind.value,
                content_id=content_id,
                from_status=current,
                to_status=target.value,
            )
        updated = await self.store.update(
            kind.table, content_id, {STATUS_FIELD: target.value, **fields}
        )
        logger.info(
            "翻译状态已变更",
            content_kind=kind.value,
            content_id=content_id,
            from_status=current,
            to_status=target.value,
            **actors,
        )
        return updated

    async def get_progress(
        self, content_id: str, kind: str | ContentKind
    ) -> WorkflowResult:
        """根据主字段计算一条记录的翻译完整度。"""

        async def action() -> TranslationProgressReport:
            content_kind = _parse_kind(kind)
            record = await self._load(content_kind, content_id)
            content = primary_field(record)
            return TranslationProgressReport(
                content_id=content_id,
                content_kind=content_kind,
                total_languages=len(SUPPORTED_LANGUAGES),
                completed_languages=available_languages(content),
                pending_languages=missing_languages(content),
                completion_percentage=completeness_percent(content),
            )

        return await self._guard("get_progress", action)

    async def submit_for_review(
        self,
        content_id: str,
        kind: str | ContentKind,
        translator_id: str,
        notes: str | None = None,
    ) -> WorkflowResult:
        """提交审核：状态变为 pending_review。不检查翻译是否完整。"""

        async def action() -> dict[str, Any]:
            return await self._transition(
                _parse_kind(kind),
                content_id,
                TranslationStatus.PENDING_REVIEW,
                {
                    "submitted_at": self._clock().isoformat(),
                    "translator_id": translator_id,
                    "review_notes": notes,
                },
                translator_id=translator_id,
            )

        return await self._guard("submit_for_review", action)

    async def approve_translation(
        self,
        content_id: str,
        kind: str | ContentKind,
        reviewer_id: str,
        feedback: str | None = None,
    ) -> WorkflowResult:
        """审核通过：状态变为 published。"""

        async def action() -> dict[str, Any]:
            now = self._clock().isoformat()
            fields: dict[str, Any] = {
                "reviewer_id": reviewer_id,
                "reviewed_at": now,
                "published_at": now,
                "is_published": True,
            }
            if feedback:
                fields["review_notes"] = feedback
            return await self._transition(
                _parse_kind(kind),
                content_id,
                TranslationStatus.PUBLISHED,
                fields,
                reviewer_id=reviewer_id,
            )

        return await self._guard("approve_translation", action)

    async def reject_translation(
        self,
        content_id: str,
        kind: str | ContentKind,
        reviewer_id: str,
        feedback: str,
    ) -> WorkflowResult:
        """驳回：状态退回 draft，必须填写驳回意见。"""

        async def action() -> dict[str, Any]:
            if not feedback or not feedback.strip():
                raise WorkflowValidationError("驳回时必须填写审核意见")
            return await self._transition(
                _parse_kind(kind),
                content_id,
                TranslationStatus.DRAFT,
                {
                    "reviewer_id": reviewer_id,
                    "reviewed_at": self._clock().isoformat(),
                    "review_notes": feedback,
                    "is_published": False,
                },
                reviewer_id=reviewer_id,
            )

        return await self._guard("reject_translation", action)

    async def update_language(
        self,
        content_id: str,
        kind: str | ContentKind,
        lang: str | SupportedLanguage,
        field_values: Mapping[str, str],
    ) -> WorkflowResult:
        """
        把 `field_values` 中各字段的文本合并到记录对应字段的 `lang` 键下。

        只处理记录上已有的字段，其他语言的内容保持不变。
        """

        async def action() -> dict[str, Any]:
            content_kind = _parse_kind(kind)
            language = _parse_lang(lang)
            record = await self._load(content_kind, content_id)

            updates: dict[str, Any] = {}
            for name, text in field_values.items():
                if name not in record:
                    continue
                current = record[name]
                merged = dict(current) if isinstance(current, Mapping) else {}
                merged[language.value] = text
                updates[name] = merged
            if not updates:
                return record
            logger.info(
                "更新单语言内容",
                content_kind=content_kind.value,
                content_id=content_id,
                language=language.value,
                fields=sorted(updates),
            )
            return await self.store.update(content_kind.table, content_id, updates)

        return await self._guard("update_language", action)

    async def copy_translation(
        self,
        content_id: str,
        kind: str | ContentKind,
        from_lang: str | SupportedLanguage,
        to_lang: str | SupportedLanguage,
    ) -> WorkflowResult:
        """把各可翻译字段中 `from_lang` 的文本原样复制到 `to_lang`（不做翻译）。"""

        async def action() -> dict[str, Any]:
            content_kind = _parse_kind(kind)
            source = _parse_lang(from_lang)
            target = _parse_lang(to_lang)
            record = await self._load(content_kind, content_id)

            updates: dict[str, Any] = {}
            for name in content_kind.translatable_fields:
                current = record.get(name)
                if isinstance(current, Mapping) and is_available(current, source):
                    updates[name] = {**current, target.value: current[source.value]}
            if not updates:
                return record
            return await self.store.update(content_kind.table, content_id, updates)

        return await self._guard("copy_translation", action)

    async def get_pending_reviews(
        self, kind: str | ContentKind | None = None
    ) -> WorkflowResult:
        """列出所有待审核的记录，每条带上 `content_kind`。"""

        async def action() -> list[dict[str, Any]]:
            kinds = [_parse_kind(kind)] if kind else list(ContentKind)
            pending: list[dict[str, Any]] = []
            for content_kind in kinds:
                rows = await self._list_all(
                    content_kind.table,
                    {STATUS_FIELD: TranslationStatus.PENDING_REVIEW.value},
                )
                pending.extend({**row, "content_kind": content_kind.value} for row in rows)
            return pending

        return await self._guard("get_pending_reviews", action)

    async def get_incomplete_translations(
        self, kind: str | ContentKind | None = None
    ) -> WorkflowResult:
        """列出主字段至少缺少一种语言的记录。"""

        async def action() -> list[dict[str, Any]]:
            kinds = [_parse_kind(kind)] if kind else list(ContentKind)
            incomplete: list[dict[str, Any]] = []
            for content_kind in kinds:
                for row in await self._list_all(content_kind.table):
                    content = primary_field(row)
                    missing = missing_languages(content)
                    if not missing:
                        continue
                    incomplete.append(
                        {
                            **row,
                            "content_kind": content_kind.value,
                            "completion_percentage": completeness_percent(content),
                            "missing_languages": [lang.value for lang in missing],
                        }
                    )
            return incomplete

        return await self._guard("get_incomplete_translations", action)
