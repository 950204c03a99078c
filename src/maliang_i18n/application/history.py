# src/maliang_i18n/application/history.py
"""有界的翻译历史记录，在所有编排器之间共享。"""

from __future__ import annotations

from collections import deque

from maliang_i18n.core.types import TranslationHistoryItem

DEFAULT_HISTORY_LIMIT = 50


class TranslationHistory:
    """只保留最近 `limit` 条记录，按完成顺序追加，读取时最新的在前。"""

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT):
        if limit <= 0:
            raise ValueError("历史记录上限必须为正数")
        self.limit = limit
        self._items: deque[TranslationHistoryItem] = deque(maxlen=limit)

    def append(self, item: TranslationHistoryItem) -> None:
        self._items.append(item)

    def items(self) -> list[TranslationHistoryItem]:
        return list(reversed(self._items))

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)
