# src/maliang_i18n/domain/__init__.py
"""领域层：语言目录与回退/完整度规则（纯函数，无 I/O）。"""

from .fallback import (
    MultiLanguageText,
    available_languages,
    completeness_percent,
    detect_language_from_accept_header,
    direction,
    display_name,
    is_available,
    is_valid_language,
    missing_languages,
    resolve_content,
)
from .languages import (
    DEFAULT_ADMIN_LANGUAGE,
    DEFAULT_FRONTEND_LANGUAGE,
    LANGUAGE_CONFIG,
    SUPPORTED_LANGUAGES,
    LanguageInfo,
    SupportedLanguage,
    parse_language,
    parse_languages,
)

__all__ = [
    "DEFAULT_ADMIN_LANGUAGE",
    "DEFAULT_FRONTEND_LANGUAGE",
    "LANGUAGE_CONFIG",
    "SUPPORTED_LANGUAGES",
    "LanguageInfo",
    "MultiLanguageText",
    "SupportedLanguage",
    "available_languages",
    "completeness_percent",
    "detect_language_from_accept_header",
    "direction",
    "display_name",
    "is_available",
    "is_valid_language",
    "missing_languages",
    "parse_language",
    "parse_languages",
    "resolve_content",
]
