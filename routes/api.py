from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import RedirectResponse, Response
from pydantic import Field, ValidationError

from utils import qr_config
from utils.qr_engine import GenerationEngine
from utils.qr_generator import data_url_to_bytes
from utils.qr_save import create_qr, prepare_content
from utils.qr_schema import (
    Branding,
    CamelModel,
    ContactInfo,
    ContentType,
    ErrorCorrectionLevel,
    ListOptions,
    QRCodeRecord,
    SortBy,
    SortOrder,
    record_to_json,
)
from utils.qr_storage import RecordNotFoundError, StorageProvider
from utils.qr_utils import sanitize_filename

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["QR Pipeline"])


class ValidateIn(CamelModel):
    content_type: ContentType = "text"
    content: Optional[str] = None
    contact: Optional[ContactInfo] = None
    data: Optional[Dict[str, Any]] = None

    def value(self) -> Any:
        if self.contact is not None:
            return self.contact
        if self.data is not None:
            return self.data
        return self.content or ""


class GenerateIn(ValidateIn):
    size: int = Field(default=qr_config.DEFAULT_SIZE, gt=0)
    error_correction_level: ErrorCorrectionLevel = "M"
    branding: Optional[Branding] = None
    style: Optional[str] = None
    margin: Optional[int] = Field(default=None, ge=0)
    save: bool = False
    name: Optional[str] = None
    tags: Optional[List[str]] = None
    favorite: Optional[bool] = None


def get_engine(request: Request) -> GenerationEngine:
    return request.app.state.generation_engine


async def get_storage(request: Request) -> StorageProvider:
    return await request.app.state.storage_factory.get_provider()


# =============================================================================
# ✅ Validierung & Generierung
# =============================================================================

@router.post("/validate")
def validate(body: ValidateIn) -> Dict[str, Any]:
    return prepare_content(body.content_type, body.value()).to_dict()


@router.post("/generate")
async def generate(
    body: GenerateIn,
    engine: GenerationEngine = Depends(get_engine),
    storage: StorageProvider = Depends(get_storage),
) -> Dict[str, Any]:
    branding = body.branding
    if branding is None and body.style:
        branding = Branding.model_validate(qr_config.get_branding(body.style))

    creation = await create_qr(
        engine,
        body.value(),
        body.content_type,
        size=body.size,
        error_correction_level=body.error_correction_level,
        branding=branding,
        margin=body.margin,
        storage=storage if body.save else None,
        name=body.name,
        tags=body.tags,
        favorite=body.favorite,
    )

    if not creation.validation.valid:
        raise HTTPException(status_code=422, detail=creation.validation.to_dict())
    if creation.result is None or not creation.result.success:
        error = creation.result.error if creation.result else "Generation failed"
        raise HTTPException(status_code=503, detail=error)

    return {
        "validation": creation.validation.to_dict(),
        "result": creation.result.model_dump(by_alias=True, exclude_none=True),
        "record": record_to_json(creation.record) if creation.record else None,
    }


@router.get("/strategies")
async def strategies(engine: GenerationEngine = Depends(get_engine)) -> Dict[str, Any]:
    return {
        "registered": [{"name": s.name, "priority": s.priority} for s in engine.strategies],
        "available": await engine.get_available_strategies(),
        "lastSuccessful": engine.last_successful_strategy,
    }


# =============================================================================
# 💾 Gespeicherte QR-Codes
# =============================================================================

@router.get("/qrs")
async def list_qrs(
    limit: Optional[int] = Query(default=None, ge=0),
    offset: int = Query(default=0, ge=0),
    sort_by: SortBy = Query(default="createdAt", alias="sortBy"),
    sort_order: SortOrder = Query(default="desc", alias="sortOrder"),
    content_type: Optional[ContentType] = Query(default=None, alias="contentType"),
    tags: Optional[List[str]] = Query(default=None),
    favorite: Optional[bool] = None,
    storage: StorageProvider = Depends(get_storage),
) -> List[Dict[str, Any]]:
    options = ListOptions(
        limit=limit,
        offset=offset,
        sort_by=sort_by,
        sort_order=sort_order,
        content_type=content_type,
        tags=tags,
        favorite=favorite,
    )
    return [record_to_json(r) for r in await storage.list(options)]


@router.get("/qrs/export")
async def export_qrs(storage: StorageProvider = Depends(get_storage)) -> List[Dict[str, Any]]:
    return [record_to_json(r) for r in await storage.export()]


@router.post("/qrs/import")
async def import_qrs(
    records: List[QRCodeRecord],
    storage: StorageProvider = Depends(get_storage),
) -> Dict[str, Any]:
    await storage.import_records(records)
    return {"imported": len(records)}


@router.get("/qrs/{record_id}")
async def get_qr(record_id: str, storage: StorageProvider = Depends(get_storage)) -> Dict[str, Any]:
    record = await storage.get(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Record not found")
    return record_to_json(record)


@router.get("/qrs/{record_id}/image")
async def get_qr_image(record_id: str, storage: StorageProvider = Depends(get_storage)):
    record = await storage.get(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Record not found")

    # Remote-Strategien speichern nur die Bild-URL
    if not record.data_url.startswith("data:"):
        return RedirectResponse(record.data_url)

    filename = sanitize_filename(f"{record.metadata.name or record.id}.png")
    return Response(
        content=data_url_to_bytes(record.data_url),
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.patch("/qrs/{record_id}")
async def update_qr(
    record_id: str,
    updates: Dict[str, Any] = Body(...),
    storage: StorageProvider = Depends(get_storage),
) -> Dict[str, Any]:
    try:
        record = await storage.update(record_id, updates)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Record not found")
    except ValidationError as e:
        # Merge ergibt keinen gültigen Datensatz → nichts gespeichert
        raise HTTPException(status_code=422, detail=jsonable_encoder(e.errors(include_url=False)))
    return record_to_json(record)


@router.delete("/qrs/{record_id}")
async def delete_qr(record_id: str, storage: StorageProvider = Depends(get_storage)) -> Dict[str, Any]:
    await storage.delete(record_id)
    return {"deleted": record_id}


@router.delete("/qrs")
async def clear_qrs(storage: StorageProvider = Depends(get_storage)) -> Dict[str, Any]:
    await storage.clear()
    logger.info("🧹 Verlauf per API geleert")
    return {"cleared": True}


@router.get("/stats")
async def stats(storage: StorageProvider = Depends(get_storage)) -> Dict[str, Any]:
    return (await storage.get_stats()).model_dump(by_alias=True, exclude_none=True)
