# src/maliang_i18n/infrastructure/persistence/sqlalchemy_store.py
"""
基于 SQLAlchemy Core (async) 的记录存储实现。

每种内容类型一张表，记录以 `id` + JSON `data` 列保存，
多语言字段保持“语言代码 -> 文本”的映射原样存入 JSON。
等值过滤在解码后的记录上进行。

- SQLite (sqlite+aiosqlite)：NullPool
- PostgreSQL (postgresql+asyncpg)：默认连接池
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy import JSON, Column, DateTime, MetaData, String, Table, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from maliang_i18n.core.exceptions import RecordNotFoundError, RecordStoreError
from maliang_i18n.core.types import ContentKind, Page

logger = structlog.get_logger(__name__)

DATABASE_ERROR = "DATABASE_ERROR"

metadata = MetaData()


def _content_table(name: str) -> Table:
    return Table(
        name,
        metadata,
        Column("id", String(64), primary_key=True),
        Column("data", JSON, nullable=False),
        Column(
            "created_at",
            DateTime(timezone=True),
            nullable=False,
            default=lambda: datetime.now(timezone.utc),
        ),
    )


CONTENT_TABLES: dict[str, Table] = {
    kind.table: _content_table(kind.table) for kind in ContentKind
}


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite+aiosqlite") or url.startswith("sqlite://")


def create_async_db_engine(url: str, echo: bool = False) -> AsyncEngine:
    """创建 AsyncEngine；SQLite 使用 NullPool。"""
    kwargs: dict[str, Any] = {"echo": echo}
    if _is_sqlite(url):
        kwargs["poolclass"] = NullPool
    return create_async_engine(url, **kwargs)


class SqlAlchemyRecordStore:
    """`RecordStore` 的 SQLAlchemy 实现。数据库异常统一转换为 `RecordStoreError`。"""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    @classmethod
    def from_url(cls, url: str, echo: bool = False) -> SqlAlchemyRecordStore:
        return cls(create_async_db_engine(url, echo=echo))

    async def create_all(self) -> None:
        """创建所有内容表（已存在则跳过）。"""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(metadata.create_all)
        except SQLAlchemyError as e:
            raise RecordStoreError(f"创建数据表失败: {e}", code=DATABASE_ERROR) from e
        logger.info("内容数据表已就绪", tables=sorted(CONTENT_TABLES))

    async def dispose(self) -> None:
        await self.engine.dispose()

    @staticmethod
    def _table(name: str) -> Table:
        table = CONTENT_TABLES.get(name)
        if table is None:
            raise RecordStoreError(f"未知的数据表: {name}", code="UNKNOWN_TABLE")
        return table

    @staticmethod
    def _to_record(record_id: str, data: Mapping[str, Any]) -> dict[str, Any]:
        return {**data, "id": record_id}

    async def create(self, table: str, fields: Mapping[str, Any]) -> dict[str, Any]:
        t = self._table(table)
        data = {k: v for k, v in fields.items() if k != "id"}
        record_id = str(fields.get("id") or uuid.uuid4().hex)
        try:
            async with self.engine.begin() as conn:
                await conn.execute(t.insert().values(id=record_id, data=data))
        except SQLAlchemyError as e:
            raise RecordStoreError(f"创建记录失败: {e}", code=DATABASE_ERROR) from e
        return self._to_record(record_id, data)

    async def get_by_id(self, table: str, record_id: str) -> dict[str, Any] | None:
        t = self._table(table)
        try:
            async with self.engine.connect() as conn:
                row = (
                    await conn.execute(select(t.c.data).where(t.c.id == record_id))
                ).first()
        except SQLAlchemyError as e:
            raise RecordStoreError(f"读取记录失败: {e}", code=DATABASE_ERROR) from e
        return self._to_record(record_id, row.data) if row is not None else None

    async def list(
        self,
        table: str,
        filters: Mapping[str, Any] | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> Page:
        if page < 1 or page_size < 1:
            raise RecordStoreError("分页参数必须为正数", code="INVALID_PAGINATION")
        t = self._table(table)
        stmt = select(t.c.id, t.c.data).order_by(t.c.created_at, t.c.id)
        try:
            async with self.engine.connect() as conn:
                rows = (await conn.execute(stmt)).all()
        except SQLAlchemyError as e:
            raise RecordStoreError(f"查询记录失败: {e}", code=DATABASE_ERROR) from e

        records = [self._to_record(row.id, row.data) for row in rows]
        matched = [
            r for r in records if all(r.get(k) == v for k, v in (filters or {}).items())
        ]
        start = (page - 1) * page_size
        return Page(rows=matched[start : start + page_size], total=len(matched))

    async def update(
        self, table: str, record_id: str, fields: Mapping[str, Any]
    ) -> dict[str, Any]:
        t = self._table(table)
        try:
            async with self.engine.begin() as conn:
                row = (
                    await conn.execute(select(t.c.data).where(t.c.id == record_id))
                ).first()
                if row is None:
                    raise RecordNotFoundError(table, record_id)
                data = {**row.data, **{k: v for k, v in fields.items() if k != "id"}}
                await conn.execute(t.update().where(t.c.id == record_id).values(data=data))
        except SQLAlchemyError as e:
            raise RecordStoreError(f"更新记录失败: {e}", code=DATABASE_ERROR) from e
        return self._to_record(record_id, data)

    async def delete(self, table: str, record_id: str) -> None:
        t = self._table(table)
        try:
            async with self.engine.begin() as conn:
                result = await conn.execute(t.delete().where(t.c.id == record_id))
        except SQLAlchemyError as e:
            raise RecordStoreError(f"删除记录失败: {e}", code=DATABASE_ERROR) from e
        if result.rowcount == 0:
            raise RecordNotFoundError(table, record_id)
