import json

import pytest

from conftest import make_record
from utils import qr_config
from utils.flat_storage import FlatStorageProvider, JsonFileStore, MemoryStore
from utils.qr_schema import ListOptions, serialize_records
from utils.qr_storage import RecordNotFoundError


async def _fill(storage, count=5):
    records = [make_record(i) for i in range(1, count + 1)]
    for record in records:
        await storage.save(record)
    return records


# ---------------------------------------------------------------------------
# 💾 Verhalten beider Provider
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_save_and_get_roundtrip(storage):
    record = make_record(1, metadata={"tags": ["work"], "favorite": True})
    await storage.save(record)
    assert await storage.get("qr-1") == record
    assert await storage.get("missing") is None


@pytest.mark.asyncio
async def test_save_replaces_existing_id(storage):
    await _fill(storage, 3)
    await storage.save(make_record(2, content="replaced"))

    records = await storage.list(ListOptions(sort_order="asc"))
    assert [r.id for r in records] == ["qr-1", "qr-2", "qr-3"]
    assert records[1].content == "replaced"


@pytest.mark.asyncio
async def test_list_default_sort_newest_first(storage):
    await _fill(storage)
    assert [r.id for r in await storage.list()] == ["qr-5", "qr-4", "qr-3", "qr-2", "qr-1"]


@pytest.mark.asyncio
async def test_list_pagination(storage):
    await _fill(storage)
    records = await storage.list({"limit": 2, "offset": 1})
    assert [r.id for r in records] == ["qr-4", "qr-3"]
    assert await storage.list({"offset": 10}) == []
    assert await storage.list({"limit": 0}) == []


@pytest.mark.asyncio
async def test_list_sort_by_name_and_updated(storage):
    await storage.save(make_record(1, metadata={"name": "beta"}, updated_at=5))
    await storage.save(make_record(2, metadata={"name": "alpha"}, updated_at=9))
    await storage.save(make_record(3, metadata={"name": None}, updated_at=1))

    by_name = await storage.list(ListOptions(sort_by="name", sort_order="asc"))
    assert [r.id for r in by_name] == ["qr-3", "qr-2", "qr-1"]

    by_updated = await storage.list({"sortBy": "updatedAt", "sortOrder": "desc"})
    assert [r.id for r in by_updated] == ["qr-2", "qr-1", "qr-3"]


@pytest.mark.asyncio
async def test_list_equal_keys_keep_insertion_order(storage):
    for i in (1, 2, 3):
        await storage.save(make_record(i, created_at=500))
    asc = await storage.list(ListOptions(sort_order="asc"))
    desc = await storage.list(ListOptions(sort_order="desc"))
    assert [r.id for r in asc] == ["qr-1", "qr-2", "qr-3"]
    assert [r.id for r in desc] == ["qr-1", "qr-2", "qr-3"]


@pytest.mark.asyncio
async def test_list_filters(storage):
    await storage.save(make_record(1, content_type="url", metadata={"tags": ["work", "x"], "favorite": True}))
    await storage.save(make_record(2, content_type="text", metadata={"tags": ["home"], "favorite": False}))
    await storage.save(make_record(3, content_type="url"))

    assert [r.id for r in await storage.list({"contentType": "url"})] == ["qr-3", "qr-1"]
    assert [r.id for r in await storage.list({"tags": ["home", "nope"]})] == ["qr-2"]
    assert [r.id for r in await storage.list({"favorite": True})] == ["qr-1"]
    assert [r.id for r in await storage.list({"favorite": False})] == ["qr-2"]
    assert await storage.list({"contentType": "text", "favorite": True}) == []


@pytest.mark.asyncio
async def test_update_merges_and_bumps_timestamp(storage):
    await _fill(storage, 2)
    updated = await storage.update("qr-1", {"content": "new", "id": "hijack"})
    assert updated.id == "qr-1"
    assert updated.content == "new"
    assert updated.updated_at > 1_001
    assert updated.created_at == 1_001
    assert await storage.get("qr-1") == updated
    assert await storage.get("hijack") is None


@pytest.mark.asyncio
async def test_update_metadata_replaces_whole_block(storage):
    await storage.save(make_record(1, metadata={"tags": ["a"]}))
    updated = await storage.update("qr-1", {"metadata": {"size": 200, "errorCorrectionLevel": "H", "favorite": True}})
    assert updated.metadata.size == 200
    assert updated.metadata.error_correction_level == "H"
    assert updated.metadata.tags is None
    assert updated.metadata.favorite is True


@pytest.mark.asyncio
async def test_update_missing_raises(storage):
    with pytest.raises(RecordNotFoundError) as excinfo:
        await storage.update("missing", {"content": "x"})
    assert str(excinfo.value) == "Record not found"
    assert excinfo.value.record_id == "missing"


@pytest.mark.asyncio
async def test_delete_is_idempotent(storage):
    await _fill(storage, 2)
    await storage.delete("qr-1")
    await storage.delete("qr-1")
    await storage.delete("never-existed")
    assert [r.id for r in await storage.list()] == ["qr-2"]


@pytest.mark.asyncio
async def test_clear_and_stats(storage):
    empty = await storage.get_stats()
    assert empty.count == 0
    assert empty.oldest_record is None
    assert empty.newest_record is None

    records = await _fill(storage, 3)
    stats = await storage.get_stats()
    assert stats.count == 3
    assert stats.oldest_record == 1_001
    assert stats.newest_record == 1_003
    assert stats.size == len(serialize_records(sorted(records, key=lambda r: -r.created_at)))

    await storage.clear()
    assert await storage.list() == []
    assert (await storage.get_stats()).count == 0


@pytest.mark.asyncio
async def test_export_import_roundtrip(storage):
    await _fill(storage, 2)
    exported = await storage.export()
    assert [r.id for r in exported] == ["qr-2", "qr-1"]

    payload = json.loads(serialize_records(exported))
    payload[0]["content"] = "imported"
    payload.append(make_record(9).model_dump(by_alias=True))

    await storage.import_records(payload)
    assert (await storage.get("qr-2")).content == "imported"
    assert (await storage.get("qr-9")) is not None
    assert (await storage.get_stats()).count == 3


# ---------------------------------------------------------------------------
# 📄 Flacher Speicher
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_flat_store_uses_single_key():
    store = MemoryStore()
    provider = FlatStorageProvider(store)
    await provider.save(make_record(1))

    blob = json.loads(store.get_item(qr_config.STORAGE_KEY))
    assert blob[0]["id"] == "qr-1"
    assert blob[0]["createdAt"] == 1_001
    assert blob[0]["metadata"]["errorCorrectionLevel"] == "M"

    await provider.clear()
    assert store.get_item(qr_config.STORAGE_KEY) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["{not json", '{"a": 1}', '[{"id": "x"}]'])
async def test_flat_store_corrupt_blob_reads_empty(raw):
    store = MemoryStore()
    store.set_item(qr_config.STORAGE_KEY, raw)
    provider = FlatStorageProvider(store)
    assert await provider.list() == []
    assert (await provider.get_stats()).count == 0

    # Schreiben überschreibt den beschädigten Blob
    await provider.save(make_record(1))
    assert [r.id for r in await provider.list()] == ["qr-1"]


@pytest.mark.asyncio
async def test_json_file_store_persists(tmp_path):
    path = tmp_path / "store.json"
    await FlatStorageProvider(JsonFileStore(path)).save(make_record(1))
    assert path.exists()

    reopened = FlatStorageProvider(JsonFileStore(path))
    assert [r.id for r in await reopened.list()] == ["qr-1"]


@pytest.mark.asyncio
async def test_json_file_store_corrupt_file(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("garbage", encoding="utf-8")
    provider = FlatStorageProvider(JsonFileStore(path))
    assert await provider.list() == []
    await provider.save(make_record(1))
    assert [r.id for r in await provider.list()] == ["qr-1"]


@pytest.mark.asyncio
async def test_update_producing_invalid_record_keeps_original(storage):
    original = make_record(1)
    await storage.save(original)
    with pytest.raises(ValueError):
        await storage.update("qr-1", {"metadata": {"favorite": True}})
    assert await storage.get("qr-1") == original
