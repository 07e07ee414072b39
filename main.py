# =============================================================================
# 🚀 QR Studio – Hauptapplikation (main.py)
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from fastapi import FastAPI

from routes import api
from utils import qr_config
from utils.environment import Environment, detect_environment
from utils.qr_engine import GenerationEngine, create_default_engine, get_generation_engine
from utils.storage_factory import StorageFactory, get_storage_factory

# -------------------------------------------------------------------------
# 1️⃣ Logging
# -------------------------------------------------------------------------
logging.basicConfig(
    level=qr_config.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


# -------------------------------------------------------------------------
# 2️⃣ App-Fabrik – hier werden Engine und Speicher zusammengesetzt
# -------------------------------------------------------------------------
def create_app(
    environment: Optional[Environment] = None,
    generation_engine: Optional[GenerationEngine] = None,
    storage_factory: Optional[StorageFactory] = None,
) -> FastAPI:
    environment = environment or detect_environment()

    app = FastAPI(title="QR Studio", version="1.0")
    app.state.environment = environment
    app.state.generation_engine = generation_engine or create_default_engine(environment)
    app.state.storage_factory = storage_factory or StorageFactory(environment)

    app.include_router(api.router)

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {"status": "ok", "environment": asdict(environment)}

    @app.get("/debug/routes")
    def debug_routes() -> List[Dict[str, str]]:
        # Neuere FastAPI-Versionen legen eingebundene Router als eigene
        # Einträge ohne .path ab, daher zusätzlich die API-Routen direkt
        listing: List[Dict[str, str]] = []
        for r in [*app.routes, *api.router.routes]:
            path = getattr(r, "path", None)
            if path is None:
                continue
            entry = {"path": path, "name": getattr(r, "name", "") or ""}
            if entry not in listing:
                listing.append(entry)
        return listing

    return app


# -------------------------------------------------------------------------
# 3️⃣ Prozessweite App (ASGI-Einstieg main:app)
# -------------------------------------------------------------------------
app = create_app(
    generation_engine=get_generation_engine(),
    storage_factory=get_storage_factory(),
)
