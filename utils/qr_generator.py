# =============================================================================
# 🧠 QR-Code Renderer – QR Studio
# -----------------------------------------------------------------------------
# Rendert QR-Codes lokal mit qrcode + Pillow: Farben, Rand, Fehlerkorrektur,
# optionales Logo. Ergebnis als PNG-Bytes oder Data-URI.
# =============================================================================

from __future__ import annotations

import base64
import logging
import os
from io import BytesIO
from typing import Optional, Tuple

import qrcode
import qrcode.image.styledpil
import qrcode.image.styles.colormasks as mask
import qrcode.image.styles.moduledrawers as mod
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q
from PIL import Image, ImageColor

# ---------------------------------------------------------------------------
# ⚙️ Logging konfigurieren
# ---------------------------------------------------------------------------
logger = logging.getLogger(__name__)

ERROR_CORRECTION = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}


def _to_rgb(value: str) -> Tuple[int, int, int]:
    """Konvertiert eine CSS-Farbe (#RRGGBB, Name, ...) in RGB."""
    return ImageColor.getrgb(value)[:3]


# ---------------------------------------------------------------------------
# 🧩 Hauptfunktion: render_qr_png
# ---------------------------------------------------------------------------

def render_qr_png(
    payload: str,
    size: int = 400,
    error_correction: str = "M",
    fg: str = "#000000",
    bg: str = "#FFFFFF",
    border: int = 4,
    logo_path: Optional[str] = None,
    logo_size: Optional[int] = None,
) -> bytes:
    """
    Erzeugt einen QR-Code als PNG und gibt die Bilddaten als Bytes zurück.
    Ungültige Farben (ValueError) oder ein zu großer Inhalt
    (DataOverflowError) werden an den Aufrufer weitergereicht.
    """

    # === 1️⃣ QR-Code Basis ===
    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECTION.get(error_correction, ERROR_CORRECT_M),
        box_size=10,
        border=border,
    )
    qr.add_data(payload)
    qr.make(fit=True)

    # === 2️⃣ Farben ===
    color_mask = mask.SolidFillColorMask(
        front_color=_to_rgb(fg),
        back_color=_to_rgb(bg),
    )

    # === 3️⃣ QR-Code-Bild erzeugen ===
    img = qr.make_image(
        image_factory=qrcode.image.styledpil.StyledPilImage,
        module_drawer=mod.SquareModuleDrawer(),
        color_mask=color_mask,
    ).get_image().convert("RGBA")

    # === 4️⃣ Logo einfügen ===
    if logo_path and os.path.exists(logo_path):
        try:
            logo = Image.open(logo_path).convert("RGBA")
            target = logo_size or int(img.width * 0.2)
            logo.thumbnail((target, target), Image.Resampling.LANCZOS)
            pos = ((img.width - logo.width) // 2, (img.height - logo.height) // 2)
            img.alpha_composite(logo, dest=pos)
        except OSError as e:
            logger.warning(f"⚠️ Logo konnte nicht eingebettet werden: {e}")

    # === 5️⃣ Finale Skalierung ===
    img = img.resize((size, size), Image.Resampling.NEAREST)

    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def to_data_url(png_bytes: bytes, mime: str = "image/png") -> str:
    return f"data:{mime};base64,{base64.b64encode(png_bytes).decode('ascii')}"


def data_url_to_bytes(data_url: str) -> bytes:
    """Gegenstück zu to_data_url – für Downloads gespeicherter QR-Codes."""
    header, _, encoded = data_url.partition(",")
    if not header.startswith("data:") or ";base64" not in header:
        raise ValueError("Not a base64 data URL")
    return base64.b64decode(encoded)
