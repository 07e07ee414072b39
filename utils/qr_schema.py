# utils/qr_schema.py
"""
Datenmodelle der Content- & Generierungs-Pipeline (pydantic v2).

Attribute sind snake_case, serialisiert wird mit camelCase-Aliasen
(createdAt, dataUrl, errorCorrectionLevel, ...), damit Exporte und
Importe das gleiche JSON-Format wie die Browser-Variante verwenden.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from utils import qr_config

ContentType = Literal["url", "text", "contact", "email", "phone", "wifi", "sms"]
ErrorCorrectionLevel = Literal["L", "M", "Q", "H"]
SortBy = Literal["createdAt", "updatedAt", "name"]
SortOrder = Literal["asc", "desc"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# 🎨 Branding
# =============================================================================
class BrandingColors(CamelModel):
    foreground: str = "#000000"
    background: str = "#FFFFFF"


class BrandingLogo(CamelModel):
    url: str
    size: Optional[int] = Field(default=None, gt=0)


class Branding(CamelModel):
    colors: Optional[BrandingColors] = None
    logo: Optional[BrandingLogo] = None


# =============================================================================
# 🧾 Generierung
# =============================================================================
class GenerationRequest(CamelModel):
    """Eingabe für GenerationEngine.generate – unveränderlich pro Aufruf."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    content: str
    content_type: ContentType = "text"
    size: int = Field(default=qr_config.DEFAULT_SIZE, gt=0)
    error_correction_level: ErrorCorrectionLevel = "M"
    branding: Optional[Branding] = None
    margin: Optional[int] = Field(default=None, ge=0)


class GenerationMetadata(CamelModel):
    size: int
    error_correction_level: ErrorCorrectionLevel
    content_type: ContentType
    content_length: int


class GenerationResult(CamelModel):
    success: bool
    data: Optional[str] = None
    data_url: Optional[str] = None
    error: Optional[str] = None
    strategy_name: Optional[str] = None
    timestamp: int
    metadata: Optional[GenerationMetadata] = None

    @model_validator(mode="after")
    def _check_outcome(self) -> "GenerationResult":
        if self.success and not self.data_url:
            raise ValueError("successful result requires data_url")
        if not self.success and not self.error:
            raise ValueError("failed result requires error")
        return self


class ValidationResult(CamelModel):
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    sanitized: Optional[str] = None

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"valid": self.valid, "errors": self.errors, "warnings": self.warnings}
        if self.sanitized is not None:
            payload["sanitized"] = self.sanitized
        return payload


# =============================================================================
# 👤 Kontakt & strukturierte Inhalte
# =============================================================================
class Address(CamelModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None


class ContactInfo(CamelModel):
    first_name: str = ""
    last_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    organization: Optional[str] = None
    url: Optional[str] = None
    address: Optional[Address] = None
    birthday: Optional[str] = None
    notes: Optional[str] = None


class WifiInfo(CamelModel):
    ssid: str
    password: Optional[str] = None
    encryption: Literal["WPA", "WEP", "nopass"] = "WPA"
    hidden: bool = False


class SmsInfo(CamelModel):
    phone: str
    message: Optional[str] = None


class EmailInfo(CamelModel):
    email: str
    subject: Optional[str] = None
    body: Optional[str] = None


# =============================================================================
# 💾 Persistenz
# =============================================================================
class RecordMetadata(CamelModel):
    size: int
    error_correction_level: ErrorCorrectionLevel
    name: Optional[str] = None
    tags: Optional[List[str]] = None
    favorite: Optional[bool] = None


class QRCodeRecord(CamelModel):
    id: str
    content: str
    content_type: ContentType
    data_url: str
    created_at: int
    updated_at: int
    metadata: RecordMetadata


class ListOptions(CamelModel):
    limit: Optional[int] = Field(default=None, ge=0)
    offset: int = Field(default=0, ge=0)
    sort_by: SortBy = "createdAt"
    sort_order: SortOrder = "desc"
    content_type: Optional[ContentType] = None
    tags: Optional[List[str]] = None
    favorite: Optional[bool] = None


class StorageStats(CamelModel):
    count: int
    size: int
    oldest_record: Optional[int] = None
    newest_record: Optional[int] = None


def record_to_json(record: QRCodeRecord) -> Dict[str, Any]:
    """Serialisiert einen Datensatz wie JSON.stringify (camelCase, ohne leere Felder)."""
    return record.model_dump(by_alias=True, exclude_none=True)


def serialize_records(records: Iterable[QRCodeRecord]) -> str:
    return json.dumps(
        [record_to_json(r) for r in records],
        ensure_ascii=False,
        separators=(",", ":"),
    )
