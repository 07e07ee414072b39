# =============================================================================
# 📦 QRRecordRow – persistierte QR-Codes (SQLAlchemy 2.0)
# =============================================================================

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import JSON, BigInteger, Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from database import Base


class QRRecordRow(Base):
    """
    Ein gespeicherter QR-Code.
    Zeitstempel sind Millisekunden seit Epoch; 'position' hält die
    Einfügereihenfolge fest (stabile Sortierung bei gleichen Werten).
    """
    __tablename__ = "qr_records"

    # ---------------------------------------------------------------------
    # 🧾 Basisattribute
    # ---------------------------------------------------------------------
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    content_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    data_url: Mapped[str] = mapped_column(Text, nullable=False)

    # ---------------------------------------------------------------------
    # 🏷️ Metadaten
    # ---------------------------------------------------------------------
    size: Mapped[int] = mapped_column(Integer, nullable=False)
    error_correction_level: Mapped[str] = mapped_column(String(1), nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    tags: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    favorite: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True, index=True)

    # ---------------------------------------------------------------------
    # 🕒 Zeitstempel & Reihenfolge
    # ---------------------------------------------------------------------
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<QRRecordRow(id='{self.id}', type='{self.content_type}', name='{self.name}')>"
