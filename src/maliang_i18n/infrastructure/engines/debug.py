# src/maliang_i18n/infrastructure/engines/debug.py
"""提供一个用于开发和测试的调试翻译引擎。"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Literal

from pydantic import Field

from maliang_i18n.core.types import EngineError, EngineResult, EngineSuccess, TextFormat
from maliang_i18n.domain.languages import SupportedLanguage

from . import register_engine
from .base import BaseEngineConfig, BaseTranslationEngine


class DebugEngineConfig(BaseEngineConfig):
    """Debug 引擎的配置模型。"""

    mode: Literal["SUCCESS", "FAIL", "PARTIAL_FAIL"] = "SUCCESS"
    fail_languages: list[SupportedLanguage] = Field(
        default_factory=list,
        description="PARTIAL_FAIL 模式下丢弃的语言；为空时丢弃最后一个目标语言",
    )
    fail_is_retryable: bool = True
    translation_map: dict[str, str] = Field(default_factory=dict)
    delay: float = Field(default=0.0, ge=0)


@register_engine
class DebugEngine(BaseTranslationEngine[DebugEngineConfig]):
    """一个确定性的调试翻译引擎实现。"""

    CONFIG_MODEL = DebugEngineConfig
    VERSION = "1.0.0"

    async def _execute_translation(
        self,
        text: str,
        source_lang: SupportedLanguage,
        target_langs: Sequence[SupportedLanguage],
        text_format: TextFormat,
    ) -> EngineResult:
        if self.config.delay:
            await asyncio.sleep(self.config.delay)

        if self.config.mode == "FAIL":
            return EngineError(
                error_message="DebugEngine is in FAIL mode.",
                is_retryable=self.config.fail_is_retryable,
            )

        targets = list(target_langs)
        if self.config.mode == "PARTIAL_FAIL":
            dropped = set(self.config.fail_languages) or set(targets[-1:])
            targets = [lang for lang in targets if lang not in dropped]
            if not targets:
                return EngineError(
                    error_message="No translations found in response",
                    is_retryable=self.config.fail_is_retryable,
                )

        return EngineSuccess(
            translations={
                lang: self.config.translation_map.get(
                    text, f"Translated({text}) to {lang.value}"
                )
                for lang in targets
            }
        )
