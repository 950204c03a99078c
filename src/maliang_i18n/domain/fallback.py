# src/maliang_i18n/domain/fallback.py
"""
语言回退解析与翻译完整度计算。

全部为纯函数，对 None 内容做防御性处理，永不抛出异常（未知语言代码除外，
那属于调用方错误）。回退顺序是全系统统一的规则：

    请求语言 → 英文 → 中文 → 按插入顺序的第一个可用值 → 空字符串
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Literal

from langcodes import Language
from langcodes.tag_parser import LanguageTagError

from .languages import (
    DEFAULT_FRONTEND_LANGUAGE,
    LANGUAGE_CONFIG,
    SUPPORTED_LANGUAGES,
    SupportedLanguage,
    TextDirection,
)

MultiLanguageText = Mapping[str, str]


def _lookup(content: MultiLanguageText | None, lang: str) -> str:
    if not content:
        return ""
    value = content.get(str(lang))
    return value if isinstance(value, str) and value else ""


def is_available(content: MultiLanguageText | None, lang: str) -> bool:
    """当且仅当 `content[lang]` 是非空字符串时返回 True。"""
    return bool(_lookup(content, lang))


def resolve_content(
    content: MultiLanguageText | None, requested: str | SupportedLanguage
) -> str:
    """按系统回退规则返回最合适的文本。"""
    for lang in (str(requested), SupportedLanguage.EN.value, SupportedLanguage.ZH.value):
        value = _lookup(content, lang)
        if value:
            return value
    if not content:
        return ""
    for value in content.values():
        if isinstance(value, str) and value:
            return value
    return ""


def available_languages(content: MultiLanguageText | None) -> list[SupportedLanguage]:
    """按目录顺序返回已有非空文本的语言。"""
    return [lang for lang in SUPPORTED_LANGUAGES if is_available(content, lang)]


def missing_languages(content: MultiLanguageText | None) -> list[SupportedLanguage]:
    """按目录顺序返回缺失（不存在或为空）的语言；None 视为全部缺失。"""
    return [lang for lang in SUPPORTED_LANGUAGES if not is_available(content, lang)]


def completeness_percent(content: MultiLanguageText | None) -> int:
    """
    计算翻译完整度百分比 (0-100)。

    使用四舍五入（ROUND_HALF_UP），例如 1/6 -> 17，5/6 -> 83。
    """
    present = len(available_languages(content))
    ratio = Decimal(100 * present) / Decimal(len(SUPPORTED_LANGUAGES))
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def direction(lang: str | SupportedLanguage) -> TextDirection:
    """返回语言的书写方向，未知语言默认 'ltr'。"""
    try:
        return LANGUAGE_CONFIG[SupportedLanguage(str(lang))].direction
    except ValueError:
        return "ltr"


def is_valid_language(code: str) -> bool:
    """判断语言代码是否在支持目录中。"""
    return code in {lang.value for lang in SUPPORTED_LANGUAGES}


def display_name(
    lang: str | SupportedLanguage,
    in_language: Literal["native", "english"] = "native",
) -> str:
    """返回语言的展示名称；未知代码原样返回。"""
    try:
        info = LANGUAGE_CONFIG[SupportedLanguage(str(lang))]
    except ValueError:
        return str(lang)
    return info.native_name if in_language == "native" else info.name


def detect_language_from_accept_header(header: str | None) -> SupportedLanguage:
    """
    解析 HTTP `Accept-Language` 头，返回权重最高且受支持的语言。

    区域子标签会被剥离（`zh-CN` -> `zh`）。无法匹配时返回前台默认语言。
    """
    if not header:
        return DEFAULT_FRONTEND_LANGUAGE

    candidates: list[tuple[float, int, str]] = []
    for index, part in enumerate(header.split(",")):
        tag, _, params = part.strip().partition(";")
        tag = tag.strip()
        if not tag or tag == "*":
            continue
        quality = 1.0
        params = params.strip()
        if params.startswith("q="):
            try:
                quality = float(params[2:])
            except ValueError:
                quality = 0.0
        try:
            base = Language.get(tag).language
        except (LanguageTagError, ValueError):
            continue
        if base:
            candidates.append((quality, index, base.lower()))

    # 权重降序；同权重保持头部中的原始顺序
    for _, _, code in sorted(candidates, key=lambda c: (-c[0], c[1])):
        if is_valid_language(code):
            return SupportedLanguage(code)
    return DEFAULT_FRONTEND_LANGUAGE
