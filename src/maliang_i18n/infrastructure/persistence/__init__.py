# src/maliang_i18n/infrastructure/persistence/__init__.py
"""记录存储的具体实现。"""

from .memory import InMemoryRecordStore
from .sqlalchemy_store import SqlAlchemyRecordStore

__all__ = ["InMemoryRecordStore", "SqlAlchemyRecordStore"]
