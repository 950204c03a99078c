# tests/unit/persistence/test_memory_store.py
"""内存记录存储的单元测试。"""

import pytest

from maliang_i18n.core.exceptions import RecordNotFoundError, RecordStoreError
from maliang_i18n.infrastructure.persistence.memory import InMemoryRecordStore


@pytest.mark.asyncio
async def test_create_get_update_delete(record_store: InMemoryRecordStore) -> None:
    created = await record_store.create("products", {"name": {"zh": "标题"}})
    record_id = created["id"]
    assert created["name"] == {"zh": "标题"}

    updated = await record_store.update("products", record_id, {"name": {"zh": "新标题"}})
    assert updated["name"] == {"zh": "新标题"}
    assert updated["id"] == record_id

    await record_store.delete("products", record_id)
    assert await record_store.get_by_id("products", record_id) is None


@pytest.mark.asyncio
async def test_returned_records_are_copies(record_store: InMemoryRecordStore) -> None:
    created = await record_store.create("products", {"id": "p1", "name": {"zh": "标题"}})
    created["name"]["en"] = "mutated"
    stored = await record_store.get_by_id("products", "p1")
    assert stored == {"id": "p1", "name": {"zh": "标题"}}


@pytest.mark.asyncio
async def test_list_filters_and_paginates(record_store: InMemoryRecordStore) -> None:
    for i in range(5):
        status = "pending_review" if i % 2 == 0 else "draft"
        await record_store.create("articles", {"id": f"a{i}", "translation_status": status})

    page = await record_store.list("articles", {"translation_status": "pending_review"}, 1, 2)
    assert page.total == 3
    assert [row["id"] for row in page.rows] == ["a0", "a2"]

    page = await record_store.list("articles", {"translation_status": "pending_review"}, 2, 2)
    assert [row["id"] for row in page.rows] == ["a4"]

    empty = await record_store.list("job_postings")
    assert empty.rows == [] and empty.total == 0


@pytest.mark.asyncio
async def test_errors_carry_codes(record_store: InMemoryRecordStore) -> None:
    await record_store.create("products", {"id": "p1"})
    with pytest.raises(RecordStoreError) as exc_info:
        await record_store.create("products", {"id": "p1"})
    assert exc_info.value.code == "CONFLICT"

    with pytest.raises(RecordNotFoundError) as not_found:
        await record_store.update("products", "missing", {"x": 1})
    assert not_found.value.code == "NOT_FOUND"

    with pytest.raises(RecordNotFoundError):
        await record_store.delete("products", "missing")

    with pytest.raises(RecordStoreError) as bad_page:
        await record_store.list("products", page=0)
    assert bad_page.value.code == "INVALID_PAGINATION"
