# src/maliang_i18n/infrastructure/cache/memory.py
"""
进程内翻译缓存：按 (源文本, 源语言, 目标语言/集合, 文本格式) 缓存翻译响应。

- 容量上限（默认 1000 条），超出时淘汰“最早插入”的条目（FIFO，非 LRU，
  读取不会刷新位置）。
- 条目存活超过 TTL（默认 24 小时）后在读取时视为缺失并被移除。
- 写入时保存响应的深拷贝，读取时返回新的深拷贝，调用方修改拿到的对象不会影响缓存。
- 所有操作都是同步的，不包含任何挂起点，因此在单事件循环内无需加锁。
"""

from __future__ import annotations

import hashlib
import time
from collections.abc import Callable, Iterable

import structlog
from cachetools import FIFOCache
from pydantic import BaseModel, Field

from maliang_i18n.core.types import CacheEntry, TextFormat, TranslationResponse
from maliang_i18n.domain.languages import SupportedLanguage, parse_language

logger = structlog.get_logger(__name__)

DEFAULT_MAXSIZE = 1000
DEFAULT_TTL_SECONDS = 24 * 60 * 60


class CacheConfig(BaseModel):
    """缓存配置模型。"""

    maxsize: int = Field(default=DEFAULT_MAXSIZE, gt=0)
    ttl: float = Field(default=DEFAULT_TTL_SECONDS, gt=0)


class CacheStats(BaseModel):
    size: int
    maxsize: int
    ttl: float
    hits: int
    misses: int


def _digest(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class TranslationCache:
    """一个有界、带 TTL、按插入顺序淘汰的翻译结果缓存。"""

    def __init__(
        self,
        config: CacheConfig | None = None,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.config = config or CacheConfig()
        self._timer = timer
        self._entries: FIFOCache[str, CacheEntry] = FIFOCache(
            maxsize=self.config.maxsize
        )
        self._hits = 0
        self._misses = 0

    @staticmethod
    def generate_key(
        source_text: str,
        source_language: str | SupportedLanguage,
        target: str | SupportedLanguage | Iterable[str | SupportedLanguage],
        text_format: str | TextFormat,
    ) -> str:
        """
        为翻译请求生成确定性的缓存键。

        `target` 为单个语言时生成单语言键；为语言集合时生成批量键
        （排序去重）。两类键位于不同的命名空间，永不相同。
        源文本以完整的 SHA-256 摘要参与，长度有界且不含明文。
        """
        source = parse_language(source_language).value
        fmt = TextFormat(text_format).value
        if isinstance(target, (str, SupportedLanguage)):
            scope = "single"
            targets = parse_language(target).value
        else:
            scope = "batch"
            targets = ",".join(sorted({parse_language(t).value for t in target}))
        return "|".join([scope, source, targets, fmt, _digest(source_text)])

    def get(self, key: str) -> TranslationResponse | None:
        """获取缓存的响应；不存在或已过期时返回 None（过期条目会被移除）。"""
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None
        if self._timer() - entry.timestamp > self.config.ttl:
            del self._entries[key]
            self._misses += 1
            logger.debug("缓存条目已过期并被移除", key=key)
            return None
        self._hits += 1
        return entry.response.model_copy(deep=True)

    def set(self, key: str, response: TranslationResponse) -> None:
        """写入（或覆盖）一条缓存；已满时先淘汰最早插入的条目。"""
        self._entries[key] = CacheEntry(
            key=key, response=response.model_copy(deep=True), timestamp=self._timer()
        )

    def set_batch(
        self,
        source_text: str,
        source_language: str | SupportedLanguage,
        target_languages: Iterable[str | SupportedLanguage],
        text_format: str | TextFormat,
        response: TranslationResponse,
    ) -> None:
        """
        写入批量翻译结果。

        除批量键外，还为每个成功的语言写入单语言条目，
        使之后针对其中某个语言的单语言请求也能命中缓存。
        """
        targets = list(target_languages)
        self.set(
            self.generate_key(source_text, source_language, targets, text_format),
            response,
        )
        for lang, translation in (response.translations or {}).items():
            if not translation:
                continue
            self.set(
                self.generate_key(source_text, source_language, lang, text_format),
                TranslationResponse(success=True, translations={lang: translation}),
            )

    def clear(self) -> None:
        """清空整个缓存。"""
        self._entries.clear()
        logger.info("翻译缓存已清空")

    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def stats(self) -> CacheStats:
        return CacheStats(
            size=len(self._entries),
            maxsize=self.config.maxsize,
            ttl=self.config.ttl,
            hits=self._hits,
            misses=self._misses,
        )
