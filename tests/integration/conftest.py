# tests/integration/conftest.py
"""
集成测试 Fixtures：每个测试使用独立的临时 SQLite 文件数据库。
"""

import os
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio

from maliang_i18n.infrastructure.persistence.sqlalchemy_store import SqlAlchemyRecordStore
from maliang_i18n.observability.logging_config import setup_logging

setup_logging(log_level=os.getenv("TEST_LOG_LEVEL", "WARNING"), log_format="console")


@pytest_asyncio.fixture
async def sql_store(tmp_path: Path) -> AsyncGenerator[SqlAlchemyRecordStore, None]:
    """提供一个已建表的 SQLAlchemy 记录存储。"""
    store = SqlAlchemyRecordStore.from_url(f"sqlite+aiosqlite:///{tmp_path / 'maliang.db'}")
    await store.create_all()
    yield store
    await store.dispose()
