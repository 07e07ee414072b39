# utils/flat_storage.py
# =============================================================================
# 📄 Flacher Speicher (Fallback)
# - alle QR-Codes als EIN JSON-Array unter einem festen Schlüssel
# - Key-Value-Backend: JSON-Datei auf der Platte oder Arbeitsspeicher
# - beschädigte / fehlende Daten → leere Sammlung, Schreibfehler → Exception
# =============================================================================

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Union

from pydantic import ValidationError

from utils import qr_config
from utils.qr_schema import ListOptions, QRCodeRecord, StorageStats, serialize_records
from utils.qr_storage import (
    RecordNotFoundError,
    apply_list_options,
    build_stats,
    coerce_options,
    coerce_record,
    merge_record,
)

logger = logging.getLogger(__name__)


# =============================================================================
# 🔑 Key-Value-Backends
# =============================================================================
class KeyValueStore(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStore:
    def __init__(self) -> None:
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStore:
    """Key-Value-Speicher als JSON-Objekt in einer Datei."""

    def __init__(self, path: Union[str, Path, None] = None) -> None:
        self.path = Path(path or qr_config.FLAT_STORE_PATH)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} enthält kein JSON-Objekt")
        return data

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp, self.path)

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        try:
            data = self._read()
        except ValueError:
            logger.warning(f"⚠️ {self.path} beschädigt – wird überschrieben")
            data = {}
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        try:
            data = self._read()
        except ValueError:
            data = {}
        if key in data:
            del data[key]
            self._write(data)


# =============================================================================
# 💾 Provider
# =============================================================================
class FlatStorageProvider:
    """StorageProvider, der alle Datensätze als einen Blob speichert."""

    def __init__(self, store: Optional[KeyValueStore] = None, key: str = qr_config.STORAGE_KEY) -> None:
        self.store = store if store is not None else JsonFileStore()
        self.key = key

    def _get_all(self) -> List[QRCodeRecord]:
        try:
            raw = self.store.get_item(self.key)
            if not raw:
                return []
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError("stored collection is not a list")
            return [QRCodeRecord.model_validate(item) for item in data]
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(f"⚠️ Gespeicherte QR-Codes unlesbar, starte leer: {e}")
            return []

    def _save_all(self, records: Sequence[QRCodeRecord]) -> None:
        self.store.set_item(self.key, serialize_records(records))

    @staticmethod
    def _upsert(records: List[QRCodeRecord], record: QRCodeRecord) -> None:
        for i, existing in enumerate(records):
            if existing.id == record.id:
                records[i] = record
                return
        records.append(record)

    # ---------------------------------------------------------------------
    # ✅ CRUD
    # ---------------------------------------------------------------------
    async def save(self, record: QRCodeRecord) -> None:
        records = self._get_all()
        self._upsert(records, record)
        self._save_all(records)

    async def get(self, record_id: str) -> Optional[QRCodeRecord]:
        return next((r for r in self._get_all() if r.id == record_id), None)

    async def list(self, options: Union[ListOptions, Mapping[str, Any], None] = None) -> List[QRCodeRecord]:
        return apply_list_options(self._get_all(), coerce_options(options))

    async def update(self, record_id: str, updates: Mapping[str, Any]) -> QRCodeRecord:
        existing = await self.get(record_id)
        if existing is None:
            raise RecordNotFoundError(record_id)
        updated = merge_record(existing, updates)
        await self.save(updated)
        logger.info(f"✏️ QR-Code aktualisiert ({record_id})")
        return updated

    async def delete(self, record_id: str) -> None:
        records = self._get_all()
        remaining = [r for r in records if r.id != record_id]
        if len(remaining) != len(records):
            self._save_all(remaining)

    async def clear(self) -> None:
        self.store.remove_item(self.key)
        logger.info("🧹 Alle QR-Codes gelöscht")

    # ---------------------------------------------------------------------
    # 📤 Export / Import / Statistik
    # ---------------------------------------------------------------------
    async def export(self) -> List[QRCodeRecord]:
        return await self.list()

    async def import_records(self, records: Sequence[Union[QRCodeRecord, Mapping[str, Any]]]) -> None:
        items = [coerce_record(r) for r in records]
        merged = self._get_all()
        for record in items:
            self._upsert(merged, record)
        self._save_all(merged)
        logger.info(f"📥 {len(items)} QR-Codes importiert")

    async def get_stats(self) -> StorageStats:
        return build_stats(self._get_all())
