# src/maliang_i18n/infrastructure/engines/base.py
"""
定义了所有翻译引擎的抽象基类和通用配置。

与逐条翻译的引擎不同，这里的引擎一次调用即把一段源文本翻译到
全部目标语言，返回 `EngineSuccess`（每个成功语言一条译文）或 `EngineError`。
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Generic, TypeVar

import structlog
from pydantic import BaseModel, Field

from maliang_i18n.core.types import EngineError, EngineResult, TextFormat
from maliang_i18n.domain.languages import SupportedLanguage

from .rate_limiter import RateLimiter

_ConfigType = TypeVar("_ConfigType", bound="BaseEngineConfig")

logger = structlog.get_logger(__name__)


class BaseEngineConfig(BaseModel):
    """所有引擎配置模型的基类，提供了通用的速率与并发控制选项。"""

    rpm: int | None = Field(
        default=None, description="每分钟最大请求数 (Requests Per Minute)", gt=0
    )
    rps: int | None = Field(
        default=None, description="每秒最大请求数 (Requests Per Second)", gt=0
    )
    max_concurrency: int | None = Field(
        default=None, description="最大并发请求数", gt=0
    )

    def build_rate_limiter(self) -> RateLimiter | None:
        """`rpm` 优先于 `rps`；两者都未配置时不限速。"""
        if self.rpm:
            return RateLimiter(self.rpm, period=60.0)
        if self.rps:
            return RateLimiter(self.rps, period=1.0)
        return None


class BaseTranslationEngine(ABC, Generic[_ConfigType]):
    """翻译引擎的纯异步抽象基类，内置速率限制和并发控制。"""

    CONFIG_MODEL: type[_ConfigType]
    VERSION: str = "1.0.0"

    def __init__(self, config: _ConfigType):
        self.config = config
        self.initialized = False
        self._rate_limiter = config.build_rate_limiter()
        self._semaphore: asyncio.Semaphore | None = None
        if config.max_concurrency:
            self._semaphore = asyncio.Semaphore(config.max_concurrency)

    @classmethod
    def name(cls) -> str:
        """从类名自动推断引擎的名称。"""
        return cls.__name__.removesuffix("Engine").lower()

    async def initialize(self) -> None:
        """引擎的异步初始化钩子，用于设置连接池等。"""
        self.initialized = True

    async def close(self) -> None:
        """引擎的异步关闭钩子，用于安全释放资源。"""
        self.initialized = False

    @abstractmethod
    async def _execute_translation(
        self,
        text: str,
        source_lang: SupportedLanguage,
        target_langs: Sequence[SupportedLanguage],
        text_format: TextFormat,
    ) -> EngineResult:
        """[子类实现] 一次性把文本翻译到全部目标语言。"""
        raise NotImplementedError

    async def atranslate(
        self,
        text: str,
        source_lang: SupportedLanguage,
        target_langs: Sequence[SupportedLanguage],
        text_format: TextFormat = TextFormat.PLAIN,
    ) -> EngineResult:
        """
        [公共 API] 应用速率与并发限制后执行一次翻译。

        子类抛出的普通异常会被转换为 `EngineError`；
        `asyncio.CancelledError` 不属于 `Exception`，始终向上传播。
        """
        if self._rate_limiter:
            await self._rate_limiter.acquire()
        try:
            if self._semaphore:
                async with self._semaphore:
                    return await self._execute_translation(
                        text, source_lang, target_langs, text_format
                    )
            return await self._execute_translation(
                text, source_lang, target_langs, text_format
            )
        except Exception as e:
            logger.warning("引擎执行时发生未知异常", engine=self.name(), exc_info=True)
            return EngineError(
                error_message=f"引擎执行时发生未知异常: {e}", is_retryable=True
            )
