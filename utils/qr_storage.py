# utils/qr_storage.py
# =============================================================================
# 💾 Speicher-Vertrag für QR-Codes
# - ein Protokoll, zwei Implementierungen (SQL / flacher Key-Value-Speicher)
# - gemeinsame Filter-, Sortier- und Merge-Logik, damit beide Backends
#   exakt gleich reagieren
# =============================================================================

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Union

from utils.qr_schema import ListOptions, QRCodeRecord, StorageStats, serialize_records
from utils.qr_utils import now_ms

RECORD_NOT_FOUND = "Record not found"


class RecordNotFoundError(LookupError):
    """Wird von update() geworfen, wenn die ID nicht existiert."""

    def __init__(self, record_id: str) -> None:
        super().__init__(RECORD_NOT_FOUND)
        self.record_id = record_id


class StorageProvider(Protocol):
    async def save(self, record: QRCodeRecord) -> None: ...

    async def get(self, record_id: str) -> Optional[QRCodeRecord]: ...

    async def list(self, options: Optional[ListOptions] = None) -> List[QRCodeRecord]: ...

    async def update(self, record_id: str, updates: Mapping[str, Any]) -> QRCodeRecord: ...

    async def delete(self, record_id: str) -> None: ...

    async def clear(self) -> None: ...

    async def export(self) -> List[QRCodeRecord]: ...

    async def import_records(self, records: Sequence[Union[QRCodeRecord, Mapping[str, Any]]]) -> None: ...

    async def get_stats(self) -> StorageStats: ...


# =============================================================================
# ✅ Hilfsfunktionen
# =============================================================================
def coerce_options(options: Union[ListOptions, Mapping[str, Any], None]) -> ListOptions:
    if options is None:
        return ListOptions()
    if isinstance(options, ListOptions):
        return options
    return ListOptions.model_validate(dict(options))


def coerce_record(record: Union[QRCodeRecord, Mapping[str, Any]]) -> QRCodeRecord:
    if isinstance(record, QRCodeRecord):
        return record
    return QRCodeRecord.model_validate(dict(record))


def matches_filters(record: QRCodeRecord, options: ListOptions) -> bool:
    """Alle gesetzten Filter müssen zutreffen; bei Tags reicht ein Treffer."""
    if options.content_type and record.content_type != options.content_type:
        return False
    if options.favorite is not None and record.metadata.favorite != options.favorite:
        return False
    if options.tags:
        tags = record.metadata.tags or []
        if not any(tag in tags for tag in options.tags):
            return False
    return True


def sort_key(record: QRCodeRecord, sort_by: str) -> Union[int, str]:
    if sort_by == "name":
        return record.metadata.name or ""
    if sort_by == "updatedAt":
        return record.updated_at
    return record.created_at


def apply_list_options(records: Sequence[QRCodeRecord], options: ListOptions) -> List[QRCodeRecord]:
    """
    Filtern → sortieren → paginieren.
    ``records`` muss in Einfügereihenfolge vorliegen; sorted() ist stabil,
    auch mit reverse=True.
    """
    results = [r for r in records if matches_filters(r, options)]
    results = sorted(
        results,
        key=lambda r: sort_key(r, options.sort_by),
        reverse=options.sort_order == "desc",
    )
    start = options.offset or 0
    if options.limit is None:
        return results[start:]
    return results[start:start + options.limit]


def _field_name(key: str) -> str:
    for name, field in QRCodeRecord.model_fields.items():
        if key in (name, field.alias):
            return name
    return key


def merge_record(existing: QRCodeRecord, updates: Mapping[str, Any]) -> QRCodeRecord:
    """Flaches Merge: ID bleibt, updated_at wird immer neu gesetzt."""
    merged: Dict[str, Any] = existing.model_dump()
    for key, value in updates.items():
        if hasattr(value, "model_dump"):
            value = value.model_dump()
        merged[_field_name(key)] = value
    merged["id"] = existing.id
    merged["updated_at"] = now_ms()
    return QRCodeRecord.model_validate(merged)


def build_stats(records: Sequence[QRCodeRecord]) -> StorageStats:
    timestamps = sorted(r.created_at for r in records)
    return StorageStats(
        count=len(records),
        size=len(serialize_records(records)),
        oldest_record=timestamps[0] if timestamps else None,
        newest_record=timestamps[-1] if timestamps else None,
    )
