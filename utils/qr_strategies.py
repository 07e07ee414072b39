"""
utils/qr_strategies.py
────────────────────────────────────────────
Austauschbare Backends für die QR-Erzeugung.

- qrcode-pil     (Priorität 1): lokales Rendering mit qrcode + Pillow
- google-charts  (Priorität 2): Bild-URL der Google Chart API
- qr-server      (Priorität 3): Bild-URL von api.qrserver.com

Jede Strategie erfüllt das Protokoll GenerationStrategy und wirft
in generate() niemals: Fehler werden zu {success: False, error}.
────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
import importlib
import logging
from abc import ABC, abstractmethod
from types import ModuleType
from typing import Dict, Optional, Protocol, runtime_checkable
from urllib.parse import quote, urlsplit

import httpx

from utils import qr_config
from utils.environment import Environment
from utils.qr_schema import GenerationMetadata, GenerationRequest, GenerationResult
from utils.qr_utils import now_ms

logger = logging.getLogger(__name__)


@runtime_checkable
class GenerationStrategy(Protocol):
    name: str
    priority: int

    async def is_available(self) -> bool: ...

    async def generate(self, request: GenerationRequest) -> GenerationResult: ...


def encode_uri_component(value: str) -> str:
    """Prozent-Kodierung wie encodeURIComponent im Browser."""
    return quote(value, safe="-_.!~*'()")


def success_result(strategy_name: str, url: str, request: GenerationRequest) -> GenerationResult:
    return GenerationResult(
        success=True,
        data=url,
        data_url=url,
        strategy_name=strategy_name,
        timestamp=now_ms(),
        metadata=GenerationMetadata(
            size=request.size,
            error_correction_level=request.error_correction_level,
            content_type=request.content_type,
            content_length=len(request.content),
        ),
    )


def failure_result(error: str) -> GenerationResult:
    return GenerationResult(success=False, error=error, timestamp=now_ms())


def _colors(request: GenerationRequest) -> tuple[str, str]:
    colors = request.branding.colors if request.branding else None
    if colors is None:
        return "#000000", "#FFFFFF"
    return colors.foreground, colors.background


# =============================================================================
# 🖼️ Lokales Rendering (qrcode + Pillow)
# =============================================================================
class LocalRenderStrategy:
    """Rendert PNGs lokal; der Renderer wird beim ersten Bedarf geladen."""

    name = "qrcode-pil"
    priority = 1

    renderer_module = "utils.qr_generator"

    def __init__(self, environment: Optional[Environment] = None) -> None:
        self.environment = environment or Environment()
        self._renderer: Optional[ModuleType] = None

    def _load_renderer(self) -> ModuleType:
        if self._renderer is None:
            self._renderer = importlib.import_module(self.renderer_module)
            logger.info(f"🧩 Renderer geladen: {self.renderer_module}")
        return self._renderer

    async def is_available(self) -> bool:
        if not self.environment.local_renderer:
            return False
        if self._renderer is not None:
            return True
        try:
            self._load_renderer()
            return True
        except ImportError as e:
            logger.warning(f"⚠️ Lokaler Renderer nicht verfügbar: {e}")
            return False

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        try:
            renderer = self._load_renderer()
            fg, bg = _colors(request)
            logo = request.branding.logo if request.branding else None
            png = await asyncio.to_thread(
                renderer.render_qr_png,
                request.content,
                size=request.size,
                error_correction=request.error_correction_level,
                fg=fg,
                bg=bg,
                border=request.margin if request.margin is not None else qr_config.DEFAULT_MARGIN,
                logo_path=logo.url if logo else None,
                logo_size=logo.size if logo else None,
            )
            return success_result(self.name, renderer.to_data_url(png), request)
        except Exception as e:
            logger.warning(f"⚠️ {self.name}: Rendering fehlgeschlagen: {e}")
            return failure_result(str(e) or f"{self.name} generation failed")


# =============================================================================
# 🌐 Remote-Dienste (URL als Bild)
# =============================================================================
class RemoteImageStrategy(ABC):
    """Gemeinsame Basis für Dienste, deren Bild-URL direkt angezeigt wird."""

    name: str
    priority: int
    base_url = ""

    def __init__(self, environment: Optional[Environment] = None) -> None:
        self.environment = environment or Environment()
        self._probe_result: Optional[bool] = None

    @abstractmethod
    def build_url(self, request: GenerationRequest) -> str: ...

    async def _probe(self) -> bool:
        parts = urlsplit(self.base_url)
        target = f"{parts.scheme}://{parts.netloc}/"
        try:
            async with httpx.AsyncClient(
                timeout=self.environment.remote_probe_timeout, follow_redirects=True
            ) as client:
                resp = await client.head(target)
            return resp.status_code < 500
        except httpx.HTTPError as e:
            logger.warning(f"⚠️ {self.name}: Dienst nicht erreichbar ({e})")
            return False

    async def is_available(self) -> bool:
        if not self.environment.network:
            return False
        if not self.environment.remote_probe:
            return True
        if self._probe_result is None:
            self._probe_result = await self._probe()
        return self._probe_result

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        try:
            return success_result(self.name, self.build_url(request), request)
        except Exception as e:
            logger.warning(f"⚠️ {self.name}: URL konnte nicht erstellt werden: {e}")
            return failure_result(str(e) or f"{self.name} generation failed")


class GoogleChartsStrategy(RemoteImageStrategy):
    name = "google-charts"
    priority = 2
    base_url = qr_config.GOOGLE_CHARTS_URL

    def build_url(self, request: GenerationRequest) -> str:
        size = request.size
        return (
            f"{self.base_url}?chs={size}x{size}&cht=qr"
            f"&chl={encode_uri_component(request.content)}"
            f"&choe=UTF-8&chld={request.error_correction_level}"
        )


class QRServerStrategy(RemoteImageStrategy):
    name = "qr-server"
    priority = 3
    base_url = qr_config.QR_SERVER_URL

    def build_url(self, request: GenerationRequest) -> str:
        size = request.size
        margin = request.margin if request.margin is not None else qr_config.REMOTE_DEFAULT_MARGIN
        url = (
            f"{self.base_url}?size={size}x{size}"
            f"&data={encode_uri_component(request.content)}"
            f"&format=png&ecc={request.error_correction_level}&margin={margin}"
        )
        if request.branding and request.branding.colors:
            fg, bg = _colors(request)
            url += f"&color={fg.lstrip('#')}&bgcolor={bg.lstrip('#')}"
        return url


def default_strategies(environment: Optional[Environment] = None) -> Dict[str, GenerationStrategy]:
    environment = environment or Environment()
    strategies = (
        LocalRenderStrategy(environment),
        GoogleChartsStrategy(environment),
        QRServerStrategy(environment),
    )
    return {s.name: s for s in strategies}
