# src/maliang_i18n/application/orchestrator.py
"""
翻译编排器：供表单、编辑器等调用方使用的有状态门面。

负责缓存读写、翻译历史、逐语言进度和“正在翻译”集合的维护，
并支持取消正在进行的翻译。每个调用方持有自己的编排器实例，
缓存与历史则由容器提供、在所有实例间共享。

一次翻译会话的状态流转：

    idle -> in_flight -> {completed | partially_completed | failed | cancelled} -> idle

被取消的会话不会写入缓存或历史，也不会通过 `on_error` 报告为翻译失败。
"""

from __future__ import annotations

import asyncio
import time
import uuid
from collections import Counter
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel, Field

from maliang_i18n.core.interfaces import TranslationListener, TranslationSink
from maliang_i18n.core.types import (
    SessionOutcome,
    TextFormat,
    TranslationHistoryItem,
    TranslationRequest,
    TranslationResponse,
)
from maliang_i18n.domain.languages import (
    SUPPORTED_LANGUAGES,
    SupportedLanguage,
    parse_language,
    parse_languages,
)
from maliang_i18n.infrastructure.cache.memory import TranslationCache

from .client import SERVICE_NOT_INITIALIZED, SOURCE_TEXT_EMPTY, TranslationClient
from .history import TranslationHistory

logger = structlog.get_logger(__name__)

_R = TypeVar("_R")

NO_TARGET_LANGUAGES = "no target languages to translate"
TRANSLATION_CANCELLED = "translation cancelled"
TRANSLATION_FAILED = "translation failed"
SERVICE_NOT_INITIALIZED_HINT = (
    "Translation service is not initialized. "
    "Check the configuration or reload and try again."
)


class OrchestratorOptions(BaseModel):
    """编排器选项。"""

    auto_save: bool = True
    cache_enabled: bool = True
    batch_size: int = Field(default=5, gt=0)


class _CallbackListener:
    """把以关键字参数传入的普通回调包装成监听器。"""

    def __init__(
        self,
        on_success: Callable[[dict[str, str]], Any] | None,
        on_error: Callable[[str], Any] | None,
        on_progress: Callable[[str, int], Any] | None,
    ):
        self._on_success = on_success
        self._on_error = on_error
        self._on_progress = on_progress

    def on_success(self, translations: dict[str, str]) -> None:
        if self._on_success:
            self._on_success(translations)

    def on_error(self, message: str) -> None:
        if self._on_error:
            self._on_error(message)

    def on_progress(self, language: str, progress: int) -> None:
        if self._on_progress:
            self._on_progress(language, progress)


@dataclass(eq=False)
class _Session:
    languages: tuple[SupportedLanguage, ...]
    task: asyncio.Task[Any] | None = None
    cancelled: bool = False
    # 进度与计数已由 cancel_translation 统一清空，结束时不再扣减
    released: bool = False
    started_at: float = 0.0


def _percent(done: int, total: int) -> int:
    """四舍五入（half-up）的整数百分比，封顶 100。"""
    return min(100, (200 * done + total) // (2 * total))


def _as_plain(translations: dict[SupportedLanguage, str] | None) -> dict[str, str]:
    return {lang.value: text for lang, text in (translations or {}).items()}


def _merge_successes(results: Iterable[TranslationResponse]) -> dict[str, str]:
    merged: dict[str, str] = {}
    for result in results:
        if result.success:
            merged.update(_as_plain(result.translations))
    return merged


class TranslationOrchestrator:
    """有状态的翻译门面，一个调用方作用域一个实例。"""

    def __init__(
        self,
        client: TranslationClient,
        cache: TranslationCache,
        history: TranslationHistory,
        options: OrchestratorOptions | None = None,
        *,
        on_success: Callable[[dict[str, str]], Any] | None = None,
        on_error: Callable[[str], Any] | None = None,
        on_progress: Callable[[str, int], Any] | None = None,
        on_accept: TranslationSink | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.client = client
        self.cache = cache
        self.history = history
        self.options = options or OrchestratorOptions()
        self._on_accept = on_accept
        self._clock = clock

        self._listeners: list[Any] = []
        if on_success or on_error or on_progress:
            self._listeners.append(_CallbackListener(on_success, on_error, on_progress))

        self._translating: Counter[SupportedLanguage] = Counter()
        self._progress: dict[SupportedLanguage, int] = {}
        self._error: str | None = None
        self._last_outcome: SessionOutcome | None = None
        self._sessions: set[_Session] = set()

    # ------------------------------------------------------------------
    # 监听器
    # ------------------------------------------------------------------

    def add_listener(self, listener: TranslationListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: TranslationListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def set_accept_sink(self, sink: TranslationSink | None) -> None:
        self._on_accept = sink

    def _emit(self, hook: str, *args: Any) -> None:
        for listener in list(self._listeners):
            callback = getattr(listener, hook, None)
            if callback is None:
                continue
            try:
                callback(*args)
            except Exception:
                logger.exception("翻译监听器回调失败，已忽略", hook=hook)

    # ------------------------------------------------------------------
    # 只读状态
    # ------------------------------------------------------------------

    @property
    def is_translating(self) -> bool:
        return bool(self._translating)

    @property
    def translating_languages(self) -> frozenset[SupportedLanguage]:
        return frozenset(self._translating)

    @property
    def translation_progress(self) -> dict[SupportedLanguage, int]:
        return dict(self._progress)

    @property
    def translation_error(self) -> str | None:
        return self._error

    @property
    def last_outcome(self) -> SessionOutcome | None:
        return self._last_outcome

    def is_language_translating(self, language: str | SupportedLanguage) -> bool:
        return parse_language(language) in self._translating

    def get_translation_progress(self, language: str | SupportedLanguage) -> int:
        return self._progress.get(parse_language(language), 0)

    def get_translation_history(self) -> list[TranslationHistoryItem]:
        """最近的翻译记录（最新的在前，最多 `history.limit` 条）。"""
        return self.history.items()

    # ------------------------------------------------------------------
    # 状态控制
    # ------------------------------------------------------------------

    def clear_error(self) -> None:
        self._error = None

    def clear_history(self) -> None:
        self.history.clear()

    def cancel_translation(self) -> None:
        """
        取消所有进行中的翻译，并同步把进度与“正在翻译”状态重置为空闲。

        任务已经执行完毕、只是调用方尚未拿到结果的会话不会被取消：
        它的缓存与历史已经写入，结果照常返回。空闲时调用不产生任何效果。
        """
        if not self._sessions and not self._translating and not self._progress:
            return

        cancelled = 0
        for session in list(self._sessions):
            session.released = True
            if session.task is not None and session.task.done():
                continue
            session.cancelled = True
            if session.task is not None:
                session.task.cancel()
            self._sessions.discard(session)
            cancelled += 1
        self._translating.clear()
        self._progress.clear()
        if cancelled:
            self._last_outcome = SessionOutcome.CANCELLED
            logger.info("翻译已取消", sessions=cancelled)

    async def close(self) -> None:
        """释放编排器：取消进行中的会话并等待其结束。"""
        tasks = [s.task for s in self._sessions if s.task is not None]
        self.cancel_translation()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def __aenter__(self) -> TranslationOrchestrator:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # 内部辅助
    # ------------------------------------------------------------------

    @property
    def _cache_enabled(self) -> bool:
        return self.options.cache_enabled

    def _set_progress(self, language: SupportedLanguage, progress: int) -> None:
        self._progress[language] = progress
        self._emit("on_progress", language.value, progress)

    def _begin(self, session: _Session) -> None:
        self._translating.update(session.languages)
        self._error = None
        session.started_at = self._clock()

    def _finish(self, session: _Session) -> None:
        self._translating.subtract(session.languages)
        self._translating += Counter()  # 去掉计数为 0 的语言
        if not self._translating:
            self._progress.clear()
        else:
            for lang in session.languages:
                if lang not in self._translating:
                    self._progress.pop(lang, None)

    async def _run_session(
        self,
        languages: Iterable[SupportedLanguage],
        body: Callable[[_Session], Awaitable[_R]],
        on_cancel: Callable[[], _R],
    ) -> _R:
        """在独立任务中执行一次会话，使 `cancel_translation` 可以中断它。"""
        session = _Session(languages=tuple(languages))
        self._begin(session)
        session.task = asyncio.create_task(body(session))
        self._sessions.add(session)
        try:
            result = await session.task
        except asyncio.CancelledError:
            if not session.cancelled:
                raise
            logger.info(
                "会话被取消，结果已丢弃",
                languages=[lang.value for lang in session.languages],
            )
            return on_cancel()
        finally:
            self._sessions.discard(session)
            if not session.released:
                self._finish(session)
        if session.cancelled:
            return on_cancel()
        return result

    def _user_facing(self, message: str | None) -> str:
        if not message:
            return TRANSLATION_FAILED
        if SERVICE_NOT_INITIALIZED in message:
            return SERVICE_NOT_INITIALIZED_HINT
        return message

    async def _call_client(self, request: TranslationRequest) -> TranslationResponse:
        try:
            response = await self.client.translate(request)
        except Exception as e:
            logger.error("翻译客户端抛出异常", exc_info=True)
            return TranslationResponse.failure(self._user_facing(str(e)))
        if not response.success:
            return TranslationResponse.failure(self._user_facing(response.error))
        return response

    def _fail(self, message: str) -> TranslationResponse:
        self._error = message
        self._last_outcome = SessionOutcome.FAILED
        self._emit("on_error", message)
        return TranslationResponse.failure(message)

    def _record(
        self,
        session: _Session,
        request: TranslationRequest,
        response: TranslationResponse,
    ) -> None:
        self.history.append(
            TranslationHistoryItem(
                id=uuid.uuid4().hex,
                source_text=request.source_text,
                source_language=request.source_language,
                target_languages=list(request.target_languages),
                text_format=request.text_format,
                translations=dict(response.translations or {}),
                timestamp=datetime.now(timezone.utc),
                duration=self._clock() - session.started_at,
            )
        )

    async def _accept(self, translations: dict[str, str]) -> None:
        """`auto_save` 开启时把已接受的译文交给持久化钩子。"""
        if not (self.options.auto_save and self._on_accept and translations):
            return
        try:
            await self._on_accept(translations)
        except Exception:
            logger.exception("自动保存译文失败", languages=sorted(translations))

    # ------------------------------------------------------------------
    # 翻译操作
    # ------------------------------------------------------------------

    async def translate_to_language(
        self,
        source_language: str | SupportedLanguage,
        target_language: str | SupportedLanguage,
        source_text: str,
        text_format: str | TextFormat = TextFormat.PLAIN,
    ) -> TranslationResponse:
        """把文本翻译到单个目标语言。"""
        source = parse_language(source_language)
        target = parse_language(target_language)
        fmt = TextFormat(text_format)

        if not source_text.strip():
            return self._fail(SOURCE_TEXT_EMPTY)

        cache_key = self.cache.generate_key(source_text, source, target, fmt)
        if self._cache_enabled:
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug("单语言缓存命中", target_lang=target.value)
                self._last_outcome = SessionOutcome.COMPLETED
                self._emit(
                    "on_success",
                    {target.value: (cached.translations or {}).get(target, "")},
                )
                return cached

        request = TranslationRequest(
            source_text=source_text,
            source_language=source,
            target_languages=[target],
            text_format=fmt,
        )

        async def body(session: _Session) -> TranslationResponse:
            try:
                self._set_progress(target, 0)
                self._set_progress(target, 50)
                response = await self._call_client(request)
                self._set_progress(target, 100)

                if not (response.success and response.translations):
                    return self._fail(self._user_facing(response.error))

                if self._cache_enabled:
                    self.cache.set(cache_key, response)
                self._record(session, request, response)
                self._last_outcome = SessionOutcome.COMPLETED
                self._emit("on_success", _as_plain(response.translations))
                return response
            finally:
                # 其他会话仍在翻译该语言时保留它的进度
                if not session.cancelled and self._translating[target] <= 1:
                    self._set_progress(target, 0)

        response = await self._run_session(
            [target], body, lambda: TranslationResponse.failure(TRANSLATION_CANCELLED)
        )
        if response.success:
            await self._accept(_as_plain(response.translations))
        return response

    async def translate_to_all(
        self,
        source_language: str | SupportedLanguage,
        source_text: str,
        text_format: str | TextFormat = TextFormat.PLAIN,
        target_languages: Sequence[str | SupportedLanguage] | None = None,
    ) -> TranslationResponse:
        """
        一次调用把文本翻译到全部目标语言。

        未指定目标语言时使用目录中除源语言以外的所有语言。
        只有部分语言成功时返回 `success=True`，同时在 `translation_error`
        和响应的 `error` 中说明失败的语言及成功比例。
        """
        source = parse_language(source_language)
        fmt = TextFormat(text_format)

        if not source_text.strip():
            return self._fail(SOURCE_TEXT_EMPTY)

        if target_languages is None:
            targets = [lang for lang in SUPPORTED_LANGUAGES if lang != source]
        else:
            targets = [lang for lang in parse_languages(target_languages) if lang != source]
        if not targets:
            return self._fail(NO_TARGET_LANGUAGES)

        batch_key = self.cache.generate_key(source_text, source, targets, fmt)
        if self._cache_enabled:
            cached = self.cache.get(batch_key)
            if cached is not None:
                logger.debug("批量缓存命中", target_langs=[lang.value for lang in targets])
                self._last_outcome = (
                    SessionOutcome.PARTIALLY_COMPLETED
                    if cached.failed_languages
                    else SessionOutcome.COMPLETED
                )
                self._emit("on_success", _as_plain(cached.translations))
                return cached

        request = TranslationRequest(
            source_text=source_text,
            source_language=source,
            target_languages=targets,
            text_format=fmt,
        )

        async def body(session: _Session) -> TranslationResponse:
            for lang in targets:
                self._set_progress(lang, 0)
            response = await self._call_client(request)
            for lang in targets:
                self._set_progress(lang, 100)

            if not (response.success and response.translations):
                return self._fail(self._user_facing(response.error))

            # 缓存与历史只在完整响应到达后写入
            if response.failed_languages:
                self._error = response.error
                self._last_outcome = SessionOutcome.PARTIALLY_COMPLETED
                logger.warning(
                    "部分翻译成功",
                    translated=len(response.translations),
                    total=len(targets),
                    failed_langs=[lang.value for lang in response.failed_languages],
                )
                self._emit("on_error", response.error)
            else:
                self._error = None
                self._last_outcome = SessionOutcome.COMPLETED

            if self._cache_enabled:
                self.cache.set_batch(source_text, source, targets, fmt, response)
            self._record(session, request, response)
            self._emit("on_success", _as_plain(response.translations))
            return response

        response = await self._run_session(
            targets, body, lambda: TranslationResponse.failure(TRANSLATION_CANCELLED)
        )
        if response.success:
            await self._accept(_as_plain(response.translations))
        return response

    async def batch_translate(
        self, requests: Sequence[TranslationRequest]
    ) -> list[TranslationResponse]:
        """
        按 `batch_size` 分块、严格顺序地处理多个请求。

        每块完成后按已处理请求数更新该块涉及语言的进度，
        最后用合并后的全部成功译文触发一次 `on_success`。结果与输入按位置对应。
        """
        if not requests:
            return []

        total = len(requests)
        languages = parse_languages(
            [lang for request in requests for lang in request.target_languages]
        )
        chunk_size = self.options.batch_size

        async def body(session: _Session) -> list[TranslationResponse]:
            results: list[TranslationResponse] = []
            for start in range(0, total, chunk_size):
                chunk = list(requests[start : start + chunk_size])
                try:
                    chunk_results = await self.client.batch_translate(chunk)
                except Exception as e:
                    logger.error("批量翻译分块失败", chunk_start=start, exc_info=True)
                    message = self._user_facing(str(e))
                    chunk_results = [TranslationResponse.failure(message)] * len(chunk)
                results.extend(chunk_results)

                progress = _percent(len(results), total)
                for lang in parse_languages(
                    [lang for request in chunk for lang in request.target_languages]
                ):
                    self._set_progress(lang, progress)

            merged = _merge_successes(results)
            failures = [r for r in results if not r.success]
            if not merged:
                self._fail(self._user_facing(failures[0].error if failures else None))
                return results
            self._last_outcome = (
                SessionOutcome.PARTIALLY_COMPLETED if failures else SessionOutcome.COMPLETED
            )
            logger.info(
                "批量翻译完成",
                total=total,
                succeeded=total - len(failures),
                failed=len(failures),
            )
            self._emit("on_success", merged)
            return results

        results = await self._run_session(
            languages,
            body,
            lambda: [TranslationResponse.failure(TRANSLATION_CANCELLED)] * total,
        )
        await self._accept(_merge_successes(results))
        return results
