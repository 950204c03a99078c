# src/maliang_i18n/infrastructure/engines/openai.py
"""
提供一个使用 OpenAI 兼容 Chat Completions 接口的翻译引擎。

默认指向 ModelScope 推理端点。一次请求即把源文本翻译到全部目标语言，
要求模型返回以语言代码为键的 JSON 对象，再用多种策略容错解析。
"""

from __future__ import annotations

import json
import re
from collections.abc import Sequence
from typing import Any

import httpx
import structlog
from openai import (
    APIConnectionError,
    APIStatusError,
    AsyncOpenAI,
    AuthenticationError,
    InternalServerError,
    PermissionDeniedError,
    RateLimitError,
)
from openai.types.chat import ChatCompletionUserMessageParam
from pydantic import Field, SecretStr

from maliang_i18n.core.exceptions import ServiceNotInitializedError
from maliang_i18n.core.types import (
    EngineError,
    EngineResult,
    EngineSuccess,
    TextFormat,
)
from maliang_i18n.domain.languages import LANGUAGE_CONFIG, SupportedLanguage

from . import register_engine
from .base import BaseEngineConfig, BaseTranslationEngine

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://api-inference.modelscope.cn/v1"
DEFAULT_MODEL = "ZhipuAI/GLM-4.5"

_FORMAT_RULES: dict[TextFormat, tuple[str, list[str]]] = {
    TextFormat.PLAIN: ("文本", []),
    TextFormat.MARKDOWN: (
        "Markdown内容",
        [
            "保持所有Markdown语法标记不变（# * ` ```等）",
            "只翻译文本内容，不翻译代码块内容",
            "保持原有的格式和结构",
        ],
    ),
    TextFormat.HTML: (
        "HTML内容",
        [
            "保持所有HTML标签和属性不变",
            "只翻译标签内的文本内容",
            "不翻译HTML属性值（如href、src、class等）",
            "保持原有的HTML结构",
        ],
    ),
}

_FENCE_PATTERNS = (
    re.compile(r"```json\s*([\s\S]*?)\s*```"),
    re.compile(r"```\s*([\s\S]*?)\s*```"),
)


class OpenAIEngineConfig(BaseEngineConfig):
    """OpenAI 兼容引擎的配置模型。"""

    api_key: SecretStr | None = None
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    temperature: float = Field(default=0.3, ge=0, le=2)
    max_tokens: int = Field(default=4000, gt=0)
    timeout: float = Field(default=30.0, gt=0)
    connect_timeout: float = Field(default=5.0, gt=0)


def build_batch_prompt(
    text: str,
    source_lang: SupportedLanguage,
    target_langs: Sequence[SupportedLanguage],
    text_format: TextFormat,
) -> str:
    """生成一次性翻译到全部目标语言的提示词。"""
    kind, format_rules = _FORMAT_RULES[text_format]
    source_name = LANGUAGE_CONFIG[source_lang].native_name
    target_names = "、".join(LANGUAGE_CONFIG[lang].native_name for lang in target_langs)
    json_shape = json.dumps(
        {lang.value: "翻译结果" for lang in target_langs}, ensure_ascii=False
    )
    rules = [
        *format_rules,
        "只返回JSON格式的翻译结果，不要添加任何解释",
        f"JSON格式：{json_shape}",
        "确保所有语言都有翻译结果",
    ]
    numbered = "\n".join(f"{i}. {rule}" for i, rule in enumerate(rules, start=1))
    return (
        f"请将以下{kind}从{source_name}一次性翻译为{target_names}，返回JSON格式：\n\n"
        f"要求：\n{numbered}\n\n原文：\n{text}"
    )


def _pick(
    parsed: Any, target_langs: Sequence[SupportedLanguage]
) -> dict[SupportedLanguage, str]:
    if not isinstance(parsed, dict):
        return {}
    found: dict[SupportedLanguage, str] = {}
    for lang in target_langs:
        value = parsed.get(lang.value)
        if isinstance(value, str) and value.strip():
            found[lang] = value.strip()
    return found


def parse_translation_response(
    content: str, target_langs: Sequence[SupportedLanguage]
) -> dict[SupportedLanguage, str]:
    """
    从模型回复中提取各语言译文，依次尝试：

    1. 回复中第一个 `{` 到最后一个 `}` 之间的 JSON 对象；
    2. ```json / ``` 代码块中的 JSON；
    3. 按语言代码逐个正则提取 `"xx": "..."`。

    只保留请求语言中非空的字符串值。全部失败时返回空字典。
    """
    match = re.search(r"\{[\s\S]*\}", content)
    if match:
        try:
            found = _pick(json.loads(match.group(0)), target_langs)
            if found:
                return found
        except json.JSONDecodeError:
            logger.debug("标准 JSON 解析失败，尝试代码块")

    for pattern in _FENCE_PATTERNS:
        fenced = pattern.search(content)
        if not fenced:
            continue
        try:
            found = _pick(json.loads(fenced.group(1).strip()), target_langs)
        except json.JSONDecodeError:
            continue
        if found:
            return found

    found = {}
    for lang in target_langs:
        code = re.escape(lang.value)
        for pattern in (
            rf'"{code}"\s*:\s*"([^"]*)"',
            rf"\"{code}\"\s*:\s*'([^']*)'",
            rf'{code}\s*[:=]\s*"([^"]*)"',
        ):
            m = re.search(pattern, content, re.IGNORECASE)
            if m and m.group(1).strip():
                found[lang] = m.group(1).strip()
                break
    if not found:
        logger.warning(
            "所有解析策略均失败",
            target_langs=[lang.value for lang in target_langs],
            response_preview=content[:200],
        )
    return found


@register_engine
class OpenAIEngine(BaseTranslationEngine[OpenAIEngineConfig]):
    """使用 OpenAI 兼容 API 的批量翻译引擎。不做自动重试。"""

    CONFIG_MODEL = OpenAIEngineConfig
    VERSION = "1.0.0"

    def __init__(self, config: OpenAIEngineConfig):
        super().__init__(config)
        if not config.api_key or not config.api_key.get_secret_value():
            raise ServiceNotInitializedError(
                "OpenAI 引擎缺少 API 密钥 (MALIANG_OPENAI__API_KEY 或 TRANSLATION_API_KEY)。"
            )
        timeout = httpx.Timeout(config.timeout, connect=config.connect_timeout)
        self.client = AsyncOpenAI(
            api_key=config.api_key.get_secret_value(),
            base_url=config.base_url,
            timeout=timeout,
            max_retries=0,
        )

    async def initialize(self) -> None:
        logger.info(
            "OpenAI 引擎已就绪", base_url=self.config.base_url, model=self.config.model
        )
        await super().initialize()

    async def close(self) -> None:
        if not self.client.is_closed():
            try:
                await self.client.close()
                logger.info("OpenAI 引擎的 HTTP 客户端已成功关闭。")
            except RuntimeError as e:
                if "Event loop is closed" in str(e):
                    logger.warning("尝试关闭 OpenAI 客户端时事件循环已关闭, 可安全忽略。")
                else:
                    raise
        await super().close()

    async def _execute_translation(
        self,
        text: str,
        source_lang: SupportedLanguage,
        target_langs: Sequence[SupportedLanguage],
        text_format: TextFormat,
    ) -> EngineResult:
        prompt = build_batch_prompt(text, source_lang, target_langs, text_format)
        messages = [ChatCompletionUserMessageParam(role="user", content=prompt)]

        try:
            response = await self.client.chat.completions.create(
                model=self.config.model,
                messages=messages,
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
            )
        except (RateLimitError, InternalServerError, APIConnectionError) as e:
            return EngineError(error_message=str(e), is_retryable=True)
        except (PermissionDeniedError, AuthenticationError, APIStatusError) as e:
            error_msg = (
                e.body.get("message", str(e)) if isinstance(e.body, dict) else str(e)
            )
            return EngineError(
                error_message=f"API request failed: {e.status_code} {error_msg}",
                is_retryable=False,
            )

        if not response.choices or not response.choices[0].message.content:
            return EngineError(
                error_message="Invalid API response format", is_retryable=True
            )

        content = response.choices[0].message.content.strip()
        translations = parse_translation_response(content, target_langs)
        if not translations:
            return EngineError(
                error_message="No translations found in response", is_retryable=True
            )
        return EngineSuccess(translations=translations)
