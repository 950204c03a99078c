# src/maliang_i18n/domain/languages.py
"""
语言目录：系统支持的固定语言集合及其元数据。

目录在进程启动时定义一次，之后不可变。顺序即“目录顺序”，
完整度、缺失语言等计算都按此顺序输出。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Literal

TextDirection = Literal["ltr", "rtl"]


class SupportedLanguage(str, Enum):
    """系统支持的语言代码（封闭集合）。"""

    ZH = "zh"
    EN = "en"
    JA = "ja"
    KO = "ko"
    AR = "ar"
    ES = "es"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class LanguageInfo:
    """单个语言的展示元数据。"""

    name: str
    native_name: str
    direction: TextDirection


SUPPORTED_LANGUAGES: tuple[SupportedLanguage, ...] = tuple(SupportedLanguage)

LANGUAGE_CONFIG: MappingProxyType[SupportedLanguage, LanguageInfo] = MappingProxyType(
    {
        SupportedLanguage.ZH: LanguageInfo("Chinese", "中文", "ltr"),
        SupportedLanguage.EN: LanguageInfo("English", "English", "ltr"),
        SupportedLanguage.JA: LanguageInfo("Japanese", "日本語", "ltr"),
        SupportedLanguage.KO: LanguageInfo("Korean", "한국어", "ltr"),
        SupportedLanguage.AR: LanguageInfo("Arabic", "العربية", "rtl"),
        SupportedLanguage.ES: LanguageInfo("Spanish", "Español", "ltr"),
    }
)

DEFAULT_ADMIN_LANGUAGE = SupportedLanguage.ZH
DEFAULT_FRONTEND_LANGUAGE = SupportedLanguage.EN


def parse_language(code: str | SupportedLanguage) -> SupportedLanguage:
    """
    将语言代码转换为 `SupportedLanguage`。

    未知代码属于调用方错误，直接抛出 ValueError。
    """
    if isinstance(code, SupportedLanguage):
        return code
    try:
        return SupportedLanguage(str(code).strip().lower())
    except ValueError as e:
        raise ValueError(
            f"不支持的语言代码: {code!r}，仅支持 {', '.join(SUPPORTED_LANGUAGES)}"
        ) from e


def parse_languages(codes: object) -> list[SupportedLanguage]:
    """解析语言代码序列，保持首次出现顺序并去重。"""
    if isinstance(codes, (str, SupportedLanguage)):
        codes = [codes]
    result: list[SupportedLanguage] = []
    for code in codes:  # type: ignore[union-attr]
        lang = parse_language(code)
        if lang not in result:
            result.append(lang)
    return result
