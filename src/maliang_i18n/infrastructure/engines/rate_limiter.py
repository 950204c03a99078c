# src/maliang_i18n/infrastructure/engines/rate_limiter.py
"""按“每个时间窗口最多 N 次请求”限制引擎调用频率。"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable


class RateLimiter:
    """
    允许突发 `max_requests` 次调用，之后按 `max_requests / period` 的速度恢复额度。

    每次 `acquire` 消耗一次额度。额度不足时在锁外等待，
    醒来后重新检查，因此多个等待者不会超发。
    """

    def __init__(
        self,
        max_requests: int,
        period: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests <= 0 or period <= 0:
            raise ValueError("请求数和时间窗口必须为正数")
        self.max_requests = max_requests
        self.period = period
        self._clock = clock
        self._allowance = float(max_requests)
        self._checked_at = clock()
        self._lock = asyncio.Lock()

    @property
    def interval(self) -> float:
        """恢复一次额度所需的秒数。"""
        return self.period / self.max_requests

    @property
    def available(self) -> float:
        self._replenish()
        return self._allowance

    def _replenish(self) -> None:
        now = self._clock()
        elapsed = now - self._checked_at
        if elapsed > 0:
            self._allowance = min(
                float(self.max_requests), self._allowance + elapsed / self.interval
            )
            self._checked_at = now

    async def acquire(self) -> None:
        """占用一次调用额度，不足时等待。"""
        while True:
            async with self._lock:
                self._replenish()
                if self._allowance >= 1:
                    self._allowance -= 1
                    return
                wait = (1 - self._allowance) * self.interval
            await asyncio.sleep(wait)
