# tests/unit/domain/test_fallback.py
"""
针对 `maliang_i18n.domain.fallback` 的单元测试：回退解析、完整度与语言检测。
"""

import pytest

from maliang_i18n.domain.fallback import (
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
from maliang_i18n.domain.languages import SUPPORTED_LANGUAGES, SupportedLanguage as L


def test_resolve_prefers_requested_language() -> None:
    content = {"zh": "你好", "en": "Hello", "ja": "こんにちは"}
    assert resolve_content(content, "ja") == "こんにちは"


def test_resolve_falls_back_to_english_then_chinese() -> None:
    """回退顺序：请求语言 → 英文 → 中文。"""
    assert resolve_content({"zh": "你好", "en": "Hello", "ja": "こんにちは"}, "ko") == "Hello"
    assert resolve_content({"zh": "你好", "ja": "こんにちは"}, "ko") == "你好"


def test_resolve_uses_first_non_empty_value_in_insertion_order() -> None:
    content = {"ar": "", "es": "Hola", "ja": "こんにちは"}
    assert resolve_content(content, L.KO) == "Hola"


@pytest.mark.parametrize("content", [None, {}, {"zh": "", "en": ""}])
def test_resolve_returns_empty_string_when_nothing_available(content) -> None:
    assert resolve_content(content, "en") == ""


def test_empty_string_counts_as_absent() -> None:
    content = {"en": "", "zh": "你好"}
    assert not is_available(content, "en")
    assert is_available(content, "zh")
    assert resolve_content(content, "en") == "你好"


def test_completeness_and_missing_languages() -> None:
    content = {"zh": "a", "en": "b", "ja": "c"}
    assert completeness_percent(content) == 50
    assert missing_languages(content) == [L.KO, L.AR, L.ES]
    assert available_languages(content) == [L.ZH, L.EN, L.JA]


@pytest.mark.parametrize(
    "present, expected",
    [(0, 0), (1, 17), (2, 33), (3, 50), (4, 67), (5, 83), (6, 100)],
)
def test_completeness_rounds_half_up(present: int, expected: int) -> None:
    content = {lang.value: "x" for lang in SUPPORTED_LANGUAGES[:present]}
    assert completeness_percent(content) == expected


def test_none_content_is_fully_missing() -> None:
    assert completeness_percent(None) == 0
    assert missing_languages(None) == list(SUPPORTED_LANGUAGES)


def test_unknown_keys_do_not_count_towards_completeness() -> None:
    assert completeness_percent({"fr": "Bonjour", "zh": "你好"}) == 17


def test_direction() -> None:
    assert direction("ar") == "rtl"
    assert direction(L.ZH) == "ltr"
    assert direction("xx") == "ltr"


def test_language_validation_and_display_names() -> None:
    assert is_valid_language("ko")
    assert not is_valid_language("fr")
    assert display_name("ja") == "日本語"
    assert display_name(L.AR, "english") == "Arabic"
    assert display_name("fr") == "fr"


@pytest.mark.parametrize(
    "header, expected",
    [
        ("ja-JP,ja;q=0.9,en;q=0.8", L.JA),
        ("fr-FR,fr;q=0.9,ko;q=0.5,en;q=0.4", L.KO),
        ("en;q=0.3, zh-CN;q=0.8", L.ZH),
        ("fr, de", L.EN),
        ("", L.EN),
        (None, L.EN),
        ("*", L.EN),
    ],
)
def test_detect_language_from_accept_header(header, expected) -> None:
    assert detect_language_from_accept_header(header) == expected
