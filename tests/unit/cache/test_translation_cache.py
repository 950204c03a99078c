# tests/unit/cache/test_translation_cache.py
"""
针对 `maliang_i18n.infrastructure.cache.memory` 的单元测试。

使用可控计时器验证 TTL 过期、FIFO 淘汰以及缓存键的确定性。
"""

import pytest

from maliang_i18n.core.types import TextFormat, TranslationResponse
from maliang_i18n.domain.languages import SupportedLanguage as L
from maliang_i18n.infrastructure.cache.memory import CacheConfig, TranslationCache


class FakeTimer:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


def _response(text: str = "Hello") -> TranslationResponse:
    return TranslationResponse(success=True, translations={L.EN: text})


def test_generate_key_is_deterministic_and_text_sensitive() -> None:
    key1 = TranslationCache.generate_key("你好", "zh", "en", "plain")
    key2 = TranslationCache.generate_key("你好", L.ZH, L.EN, TextFormat.PLAIN)
    assert key1 == key2
    assert TranslationCache.generate_key("你好!", "zh", "en", "plain") != key1
    assert TranslationCache.generate_key("你好", "zh", "en", "markdown") != key1
    assert TranslationCache.generate_key("你好", "zh", "ja", "plain") != key1


def test_generate_key_distinguishes_long_texts_sharing_a_prefix() -> None:
    prefix = "前缀" * 500
    assert TranslationCache.generate_key(
        prefix + "A", "zh", "en", "plain"
    ) != TranslationCache.generate_key(prefix + "B", "zh", "en", "plain")


def test_batch_key_is_order_insensitive_and_disjoint_from_single_key() -> None:
    batch1 = TranslationCache.generate_key("hi", "zh", ["ja", "en"], "plain")
    batch2 = TranslationCache.generate_key("hi", "zh", [L.EN, L.JA, L.EN], "plain")
    assert batch1 == batch2
    assert batch1.startswith("batch|")
    single = TranslationCache.generate_key("hi", "zh", ["en"], "plain")
    assert single != TranslationCache.generate_key("hi", "zh", "en", "plain")


def test_generate_key_rejects_unknown_language() -> None:
    with pytest.raises(ValueError):
        TranslationCache.generate_key("hi", "zh", "fr", "plain")


def test_get_returns_stored_response_and_counts_hits() -> None:
    cache = TranslationCache()
    cache.set("k", _response())
    assert cache.get("k") == _response()
    assert cache.get("missing") is None
    stats = cache.stats()
    assert (stats.hits, stats.misses, stats.size) == (1, 1, 1)


def test_mutating_stored_or_returned_response_leaves_entry_intact() -> None:
    cache = TranslationCache()
    original = _response()
    cache.set("k", original)
    assert original.translations is not None
    original.translations[L.EN] = "changed"

    returned = cache.get("k")
    assert returned is not None and returned.translations is not None
    returned.translations.clear()

    assert cache.get("k") == _response()


def test_expired_entry_is_removed_on_read() -> None:
    timer = FakeTimer()
    cache = TranslationCache(CacheConfig(ttl=60), timer=timer)
    cache.set("k", _response())

    timer.now += 60
    assert cache.get("k") is not None

    timer.now += 1
    assert cache.get("k") is None
    assert cache.size() == 0
    assert "k" not in cache


def test_inserting_beyond_capacity_evicts_first_inserted() -> None:
    cache = TranslationCache()
    for i in range(1000):
        cache.set(f"k{i}", _response(str(i)))
    # 读取不会刷新淘汰顺序
    assert cache.get("k0") is not None

    cache.set("k1000", _response("1000"))

    assert len(cache) == 1000
    assert "k0" not in cache
    assert "k1" in cache
    assert "k1000" in cache


def test_overwrite_refreshes_insertion_position() -> None:
    cache = TranslationCache(CacheConfig(maxsize=2))
    cache.set("a", _response("a1"))
    cache.set("b", _response("b"))
    cache.set("a", _response("a2"))
    cache.set("c", _response("c"))

    assert "b" not in cache
    assert cache.get("a") == _response("a2")


def test_set_batch_writes_batch_and_single_language_entries() -> None:
    cache = TranslationCache()
    response = TranslationResponse(
        success=True,
        translations={L.EN: "Hello", L.JA: "こんにちは"},
        error="Partial translation: 2/3 languages translated. Failed languages: ko",
        failed_languages=[L.KO],
    )
    targets = [L.EN, L.JA, L.KO]
    cache.set_batch("你好", L.ZH, targets, TextFormat.PLAIN, response)

    assert cache.get(cache.generate_key("你好", L.ZH, targets, "plain")) == response
    single = cache.get(cache.generate_key("你好", L.ZH, L.JA, "plain"))
    assert single == TranslationResponse(success=True, translations={L.JA: "こんにちは"})
    assert cache.get(cache.generate_key("你好", L.ZH, L.KO, "plain")) is None
    assert cache.size() == 3


def test_clear_empties_cache() -> None:
    cache = TranslationCache()
    cache.set("a", _response())
    cache.clear()
    assert cache.size() == 0
