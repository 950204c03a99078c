# src/maliang_i18n/infrastructure/persistence/memory.py
"""
基于内存的记录存储实现，用于开发和测试环境。
"""

from __future__ import annotations

import copy
import uuid
from collections.abc import Mapping
from typing import Any

from maliang_i18n.core.exceptions import RecordNotFoundError, RecordStoreError
from maliang_i18n.core.types import Page


class InMemoryRecordStore:
    """按表名分组、以 id 为键保存记录。读写都做深拷贝，调用方拿不到内部引用。"""

    def __init__(self, tables: Mapping[str, list[Mapping[str, Any]]] | None = None):
        self._tables: dict[str, dict[str, dict[str, Any]]] = {}
        for table, rows in (tables or {}).items():
            for row in rows:
                self._insert(table, row)

    def _insert(self, table: str, fields: Mapping[str, Any]) -> dict[str, Any]:
        record = copy.deepcopy(dict(fields))
        record_id = str(record.get("id") or uuid.uuid4().hex)
        rows = self._tables.setdefault(table, {})
        if record_id in rows:
            raise RecordStoreError(f"记录已存在: {table}/{record_id}", code="CONFLICT")
        record["id"] = record_id
        rows[record_id] = record
        return copy.deepcopy(record)

    async def create(self, table: str, fields: Mapping[str, Any]) -> dict[str, Any]:
        return self._insert(table, fields)

    async def get_by_id(self, table: str, record_id: str) -> dict[str, Any] | None:
        record = self._tables.get(table, {}).get(record_id)
        return copy.deepcopy(record) if record is not None else None

    async def list(
        self,
        table: str,
        filters: Mapping[str, Any] | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> Page:
        if page < 1 or page_size < 1:
            raise RecordStoreError("分页参数必须为正数", code="INVALID_PAGINATION")
        matched = [
            row
            for row in self._tables.get(table, {}).values()
            if all(row.get(k) == v for k, v in (filters or {}).items())
        ]
        start = (page - 1) * page_size
        return Page(
            rows=copy.deepcopy(matched[start : start + page_size]), total=len(matched)
        )

    async def update(
        self, table: str, record_id: str, fields: Mapping[str, Any]
    ) -> dict[str, Any]:
        record = self._tables.get(table, {}).get(record_id)
        if record is None:
            raise RecordNotFoundError(table, record_id)
        record.update(copy.deepcopy({k: v for k, v in fields.items() if k != "id"}))
        return copy.deepcopy(record)

    async def delete(self, table: str, record_id: str) -> None:
        if self._tables.get(table, {}).pop(record_id, None) is None:
            raise RecordNotFoundError(table, record_id)
