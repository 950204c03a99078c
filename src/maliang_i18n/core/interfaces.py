# src/maliang_i18n/core/interfaces.py
"""
定义了翻译管理核心所依赖的外部协作者的抽象接口协议 (Protocols)。
高层模块（如 Application 层）应依赖这些抽象，而不是具体的实现类。
"""

from __future__ import annotations

from collections.abc import Awaitable, Mapping
from typing import Any, Protocol

from .types import Page


class RecordStore(Protocol):
    """
    通用记录存储接口（外部持久化层）。

    可翻译字段以“语言代码 -> 文本”的映射存储，核心不假设任何具体编码。
    失败时应抛出 `RecordStoreError`。
    """

    async def create(self, table: str, fields: Mapping[str, Any]) -> dict[str, Any]:
        """创建一条记录并返回完整记录（含 id）。"""
        ...

    async def get_by_id(self, table: str, record_id: str) -> dict[str, Any] | None:
        """按 id 读取记录，不存在时返回 None。"""
        ...

    async def list(
        self,
        table: str,
        filters: Mapping[str, Any] | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> Page:
        """按等值过滤条件分页列出记录。"""
        ...

    async def update(
        self, table: str, record_id: str, fields: Mapping[str, Any]
    ) -> dict[str, Any]:
        """部分更新一条记录并返回更新后的记录。"""
        ...

    async def delete(self, table: str, record_id: str) -> None:
        """删除一条记录。"""
        ...


class TranslationListener(Protocol):
    """
    编排器事件的观察者。

    三个钩子都是可选的；实现者只需定义关心的方法。
    钩子在对应的生命周期节点被同步调用，抛出的异常会被隔离并记录。
    """

    def on_success(self, translations: dict[str, str]) -> None: ...

    def on_error(self, message: str) -> None: ...

    def on_progress(self, language: str, progress: int) -> None: ...


class TranslationSink(Protocol):
    """`auto_save` 开启时接收已接受译文的持久化钩子。"""

    def __call__(self, translations: dict[str, str]) -> Awaitable[None]: ...
