# utils/sql_storage.py
# =============================================================================
# 🗄️ Strukturierter Speicher (SQLAlchemy)
# - Tabelle qr_records, Schlüssel = id
# - Indizes auf created_at, content_type, favorite
# - Datenbankfehler werden NICHT verschluckt
# =============================================================================

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Sequence, Union

from sqlalchemy import func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from database import Base, create_db_engine, create_session_factory
from models.qr_record import QRRecordRow
from utils.qr_schema import ListOptions, QRCodeRecord, RecordMetadata, StorageStats
from utils.qr_storage import (
    RecordNotFoundError,
    apply_list_options,
    build_stats,
    coerce_options,
    coerce_record,
    merge_record,
)

logger = logging.getLogger(__name__)


def _row_to_record(row: QRRecordRow) -> QRCodeRecord:
    return QRCodeRecord(
        id=row.id,
        content=row.content,
        content_type=row.content_type,
        data_url=row.data_url,
        created_at=row.created_at,
        updated_at=row.updated_at,
        metadata=RecordMetadata(
            size=row.size,
            error_correction_level=row.error_correction_level,
            name=row.name,
            tags=list(row.tags) if row.tags is not None else None,
            favorite=row.favorite,
        ),
    )


def _apply_record(row: QRRecordRow, record: QRCodeRecord) -> None:
    row.content = record.content
    row.content_type = record.content_type
    row.data_url = record.data_url
    row.created_at = record.created_at
    row.updated_at = record.updated_at
    row.size = record.metadata.size
    row.error_correction_level = record.metadata.error_correction_level
    row.name = record.metadata.name
    row.tags = list(record.metadata.tags) if record.metadata.tags is not None else None
    row.favorite = record.metadata.favorite


class SQLStorageProvider:
    """StorageProvider auf Basis einer SQL-Datenbank."""

    def __init__(self, engine: Union[Engine, str, None] = None) -> None:
        if engine is None or isinstance(engine, str):
            engine = create_db_engine(engine)
        self.engine = engine
        self.SessionLocal = create_session_factory(engine)
        self._initialized = False

    def _init(self) -> None:
        if self._initialized:
            return
        Base.metadata.create_all(bind=self.engine, tables=[QRRecordRow.__table__])
        self._initialized = True
        logger.info(f"🛠️ Tabelle '{QRRecordRow.__tablename__}' bereit ({self.engine.url.render_as_string()})")

    def _session(self) -> Session:
        self._init()
        return self.SessionLocal()

    @staticmethod
    def _upsert(db: Session, record: QRCodeRecord) -> None:
        row = db.get(QRRecordRow, record.id)
        if row is None:
            last = db.scalar(select(func.max(QRRecordRow.position)))
            row = QRRecordRow(id=record.id, position=(last or 0) + 1)
            db.add(row)
        _apply_record(row, record)

    # ---------------------------------------------------------------------
    # ✅ CRUD
    # ---------------------------------------------------------------------
    async def save(self, record: QRCodeRecord) -> None:
        with self._session() as db:
            self._upsert(db, record)
            db.commit()
        logger.debug(f"💾 Gespeichert: {record.id}")

    async def get(self, record_id: str) -> Optional[QRCodeRecord]:
        with self._session() as db:
            row = db.get(QRRecordRow, record_id)
            return _row_to_record(row) if row is not None else None

    async def list(self, options: Union[ListOptions, Mapping[str, Any], None] = None) -> List[QRCodeRecord]:
        opts = coerce_options(options)
        stmt = select(QRRecordRow).order_by(QRRecordRow.position)
        # Indizierte Filter direkt in SQL, der Rest gemeinsam mit dem Flat-Store
        if opts.content_type:
            stmt = stmt.where(QRRecordRow.content_type == opts.content_type)
        if opts.favorite is not None:
            stmt = stmt.where(QRRecordRow.favorite == opts.favorite)
        with self._session() as db:
            records = [_row_to_record(row) for row in db.scalars(stmt)]
        return apply_list_options(records, opts)

    async def update(self, record_id: str, updates: Mapping[str, Any]) -> QRCodeRecord:
        existing = await self.get(record_id)
        if existing is None:
            raise RecordNotFoundError(record_id)
        updated = merge_record(existing, updates)
        await self.save(updated)
        logger.info(f"✏️ QR-Code aktualisiert ({record_id})")
        return updated

    async def delete(self, record_id: str) -> None:
        with self._session() as db:
            row = db.get(QRRecordRow, record_id)
            if row is not None:
                db.delete(row)
                db.commit()

    async def clear(self) -> None:
        with self._session() as db:
            db.query(QRRecordRow).delete()
            db.commit()
        logger.info("🧹 Alle QR-Codes gelöscht")

    # ---------------------------------------------------------------------
    # 📤 Export / Import / Statistik
    # ---------------------------------------------------------------------
    async def export(self) -> List[QRCodeRecord]:
        return await self.list()

    async def import_records(self, records: Sequence[Union[QRCodeRecord, Mapping[str, Any]]]) -> None:
        items = [coerce_record(r) for r in records]
        with self._session() as db:
            for record in items:
                self._upsert(db, record)
                db.flush()
            db.commit()
        logger.info(f"📥 {len(items)} QR-Codes importiert")

    async def get_stats(self) -> StorageStats:
        return build_stats(await self.list())
