"""
utils/qr_config.py
────────────────────────────────────────────
Globale Konfiguration für QR Studio.

- Standardwerte für die QR-Erzeugung (Größe, Fehlerkorrektur, Rand)
- Speicher-Einstellungen (SQL-Datenbank / JSON-Datei)
- Schalter für die Laufzeitumgebung (Netzwerk, lokaler Renderer)
- Branding-Presets (Farben) für QR-Codes

Alle Werte können über Umgebungsvariablen bzw. eine .env-Datei
überschrieben werden.
────────────────────────────────────────────
"""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

from dotenv import load_dotenv

# 🔹 .env laden (z. B. aus .env-Datei im Projektverzeichnis)
load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


# ─────────────────────────────────────────────
# ⚙️ QR-STANDARDWERTE
# ─────────────────────────────────────────────
DEFAULT_SIZE: int = int(os.getenv("QR_DEFAULT_SIZE", "400"))
DEFAULT_MARGIN: int = int(os.getenv("QR_DEFAULT_MARGIN", "4"))
REMOTE_DEFAULT_MARGIN: int = 10

# ─────────────────────────────────────────────
# 💾 SPEICHER
# ─────────────────────────────────────────────
DATABASE_URL: str = os.getenv("QR_DATABASE_URL", "sqlite:///./qr_studio.db")
FLAT_STORE_PATH: str = os.getenv("QR_FLAT_STORE_PATH", "./qr_studio_store.json")
STORAGE_KEY: str = "qr-generator-records"

# ─────────────────────────────────────────────
# 🌐 UMGEBUNG & REMOTE-DIENSTE
# ─────────────────────────────────────────────
ENABLE_SQL_STORE: bool = _env_flag("QR_ENABLE_SQL_STORE", True)
ENABLE_NETWORK: bool = _env_flag("QR_ENABLE_NETWORK", True)
ENABLE_LOCAL_RENDERER: bool = _env_flag("QR_ENABLE_LOCAL_RENDERER", True)
REMOTE_PROBE: bool = _env_flag("QR_REMOTE_PROBE", False)
REMOTE_PROBE_TIMEOUT: float = float(os.getenv("QR_REMOTE_PROBE_TIMEOUT", "3.0"))

GOOGLE_CHARTS_URL: str = "https://chart.googleapis.com/chart"
QR_SERVER_URL: str = "https://api.qrserver.com/v1/create-qr-code/"

LOG_LEVEL: str = os.getenv("QR_LOG_LEVEL", "INFO").upper()

# ─────────────────────────────────────────────
# 🎨 STANDARDDESIGN (Basis)
# ─────────────────────────────────────────────
QR_DEFAULT_STYLE: Dict[str, Any] = {
    "fg": "#000000",
    "bg": "#FFFFFF",
}

# ─────────────────────────────────────────────
# 🪄 THEMES – Farbvarianten
# ─────────────────────────────────────────────
QR_THEMES: Dict[str, Dict[str, Any]] = {
    "classic": {"fg": "#000000", "bg": "#FFFFFF"},
    "modern": {"fg": "#0D2A78", "bg": "#FFFFFF"},
    "dots": {"fg": "#2563EB", "bg": "#E0E7FF"},
    "soft": {"fg": "#4F46E5", "bg": "#EEF2FF"},
    "premium": {"fg": "#B8860B", "bg": "#FFFBEA"},
    "neon": {"fg": "#22D3EE", "bg": "#0F172A"},
    "dark": {"fg": "#FFFFFF", "bg": "#0D0D0D"},
    "sunset": {"fg": "#F97316", "bg": "#FFF7ED"},
    "ocean": {"fg": "#0EA5E9", "bg": "#E0F2FE"},
    "forest": {"fg": "#15803D", "bg": "#ECFDF5"},
    "rose": {"fg": "#BE185D", "bg": "#FFF1F2"},
}


# ─────────────────────────────────────────────
# 🧠 FUNKTION: Design abrufen
# ─────────────────────────────────────────────
def get_qr_style(style_name: Optional[str] = "classic") -> Dict[str, Any]:
    """
    Gibt das gewünschte QR-Design als Dictionary zurück.
    Wenn das angegebene Theme nicht existiert, wird automatisch
    das Standard-Design verwendet.
    """
    style = QR_THEMES.get(style_name or "", {})
    return {**QR_DEFAULT_STYLE, **style, "name": style_name if style else "default"}


def get_branding(style_name: Optional[str]) -> Dict[str, Any]:
    """Übersetzt ein Theme in das Branding-Format einer GenerationRequest."""
    style = get_qr_style(style_name)
    return {"colors": {"foreground": style["fg"], "background": style["bg"]}}
