# src/maliang_i18n/application/client.py
"""
翻译客户端：把一次翻译请求交给翻译引擎执行，并把引擎结果规整为
`TranslationResponse`。

- 每个请求只调用一次引擎（所有目标语言一次完成）；
- 引擎只返回部分语言时视为“部分成功”，保留已得到的译文；
- 请求受超时约束，超时按普通失败处理；
- 不做任何自动重试。
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

import structlog

from maliang_i18n.core.types import (
    EngineError,
    TranslationRequest,
    TranslationResponse,
)
from maliang_i18n.domain.languages import SupportedLanguage
from maliang_i18n.infrastructure.engines.base import BaseTranslationEngine

logger = structlog.get_logger(__name__)

SERVICE_NOT_INITIALIZED = "Translation service not initialized"
SOURCE_TEXT_EMPTY = "source text empty"
NO_VALID_TARGETS = "no valid target languages"
NO_TRANSLATIONS_FOUND = "No translations found in response"

DEFAULT_REQUEST_TIMEOUT = 30.0


def partial_failure_message(
    translated: int, total: int, failed: Sequence[SupportedLanguage]
) -> str:
    """部分成功时的说明文字，包含成功比例和失败语言。"""
    return (
        f"Partial translation: {translated}/{total} languages translated. "
        f"Failed languages: {', '.join(lang.value for lang in failed)}"
    )


class TranslationClient:
    """翻译引擎的适配器。"""

    def __init__(
        self,
        engine: BaseTranslationEngine[Any] | None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ):
        self.engine = engine
        self.request_timeout = request_timeout

    def is_configured(self) -> bool:
        return self.engine is not None and self.engine.initialized

    async def translate(self, request: TranslationRequest) -> TranslationResponse:
        if not request.source_text.strip():
            return TranslationResponse.failure(SOURCE_TEXT_EMPTY)

        targets = [
            lang for lang in request.target_languages if lang != request.source_language
        ]
        if not targets:
            return TranslationResponse.failure(NO_VALID_TARGETS)

        if self.engine is None or not self.engine.initialized:
            logger.warning("翻译服务未初始化，无法处理请求")
            return TranslationResponse.failure(SERVICE_NOT_INITIALIZED)

        log = logger.bind(
            engine=self.engine.name(),
            source_lang=request.source_language.value,
            target_langs=[lang.value for lang in targets],
        )
        log.debug("正在调用翻译引擎")
        try:
            result = await asyncio.wait_for(
                self.engine.atranslate(
                    request.source_text,
                    request.source_language,
                    targets,
                    request.text_format,
                ),
                timeout=self.request_timeout,
            )
        except asyncio.TimeoutError:
            message = f"translation request timed out after {self.request_timeout:g}s"
            log.warning("翻译请求超时", timeout=self.request_timeout)
            return TranslationResponse.failure(message)

        if isinstance(result, EngineError):
            log.warning("翻译引擎返回错误", error=result.error_message)
            return TranslationResponse.failure(result.error_message)

        translations = {
            lang: result.translations[lang]
            for lang in targets
            if result.translations.get(lang)
        }
        if not translations:
            log.warning("翻译引擎未返回任何译文")
            return TranslationResponse.failure(NO_TRANSLATIONS_FOUND)

        failed = [lang for lang in targets if lang not in translations]
        if failed:
            message = partial_failure_message(len(translations), len(targets), failed)
            log.warning(
                "部分语言翻译失败",
                translated=len(translations),
                failed_langs=[lang.value for lang in failed],
            )
            return TranslationResponse(
                success=True,
                translations=translations,
                error=message,
                failed_languages=failed,
            )

        log.info("翻译请求完成", translated=len(translations))
        return TranslationResponse(success=True, translations=translations)

    async def batch_translate(
        self, requests: Sequence[TranslationRequest]
    ) -> list[TranslationResponse]:
        """并发处理多个请求，结果与输入按位置一一对应。"""
        results = await asyncio.gather(
            *(self.translate(request) for request in requests),
            return_exceptions=True,
        )
        responses: list[TranslationResponse] = []
        for result in results:
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                logger.error("批量翻译中的单个请求失败", exc_info=result)
                responses.append(
                    TranslationResponse.failure(str(result) or "Unknown error")
                )
            else:
                responses.append(result)
        return responses
