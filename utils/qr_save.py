# utils/qr_save.py
# =============================================================================
# ✅ Pipeline: Eingabe → Validierung → Inhalt → QR-Bild → (optional) Speicher
# - Validierungsfehler stoppen vor der Generierung
# - Warnungen werden durchgereicht, blockieren aber nicht
# - Speichern nur bei erfolgreicher Generierung
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from utils.content_encoder import encode_content
from utils.content_validator import validate_contact, validate_qr_content, validate_text
from utils.qr_engine import GenerationEngine
from utils.qr_schema import (
    Branding,
    GenerationRequest,
    GenerationResult,
    QRCodeRecord,
    RecordMetadata,
    ValidationResult,
)
from utils.qr_storage import StorageProvider
from utils.qr_utils import generate_id, now_ms

logger = logging.getLogger("qr_save")


@dataclass
class QRCreation:
    validation: ValidationResult
    result: Optional[GenerationResult] = None
    record: Optional[QRCodeRecord] = None

    @property
    def success(self) -> bool:
        return self.validation.valid and self.result is not None and self.result.success


# =============================================================================
# ✅ Hilfsfunktion: Validierung der Eingabe
# =============================================================================
def prepare_content(content_type: str, value: Any) -> ValidationResult:
    """
    Prüft die Eingabe und liefert im Feld ``sanitized`` den kanonischen Inhalt.
    Kontakte werden zur vCard, strukturierte WIFI/SMS/E-Mail/Telefon-Daten
    zum jeweiligen Payload.
    """
    if content_type == "contact":
        if isinstance(value, str):
            return validate_text(value)
        return validate_contact(value)

    if isinstance(value, Mapping) or hasattr(value, "model_dump"):
        try:
            payload = encode_content(content_type, value)
        except ValueError as e:
            return ValidationResult(errors=[f"Invalid {content_type} data: {e}"])
        return validate_text(payload)

    return validate_qr_content(value or "", content_type)


# =============================================================================
# ✅ ERSTELLEN
# =============================================================================
async def create_qr(
    engine: GenerationEngine,
    content: Any,
    content_type: str = "text",
    *,
    size: Optional[int] = None,
    error_correction_level: str = "M",
    branding: Optional[Union[Branding, Dict[str, Any]]] = None,
    margin: Optional[int] = None,
    storage: Optional[StorageProvider] = None,
    name: Optional[str] = None,
    tags: Optional[List[str]] = None,
    favorite: Optional[bool] = None,
) -> QRCreation:
    validation = prepare_content(content_type, content)
    if not validation.valid:
        logger.info(f"🚫 Eingabe ungültig ({content_type}): {validation.errors}")
        return QRCreation(validation=validation)

    request_data: Dict[str, Any] = {
        "content": validation.sanitized or "",
        "content_type": content_type,
        "error_correction_level": error_correction_level,
        "branding": branding,
        "margin": margin,
    }
    if size is not None:
        request_data["size"] = size
    request = GenerationRequest.model_validate(request_data)

    result = await engine.generate(request)
    if not result.success or storage is None:
        return QRCreation(validation=validation, result=result)

    # ✅ Speichern
    timestamp = now_ms()
    record = QRCodeRecord(
        id=generate_id(),
        content=request.content,
        content_type=request.content_type,
        data_url=result.data_url or "",
        created_at=timestamp,
        updated_at=timestamp,
        metadata=RecordMetadata(
            size=request.size,
            error_correction_level=request.error_correction_level,
            name=name,
            tags=tags,
            favorite=favorite,
        ),
    )
    await storage.save(record)
    logger.info(f"📦 QR-Code gespeichert: id={record.id}, type={content_type}, strategy={result.strategy_name}")

    return QRCreation(validation=validation, result=result, record=record)
