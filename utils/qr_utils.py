"""Kleine Hilfsfunktionen: Zeitstempel, IDs, Dateinamen."""

from __future__ import annotations

import re
import time
import uuid


def now_ms() -> int:
    return int(time.time() * 1000)


def generate_id() -> str:
    return f"qr-{now_ms()}-{uuid.uuid4().hex[:9]}"


def sanitize_filename(filename: str) -> str:
    return re.sub(r"[^a-zA-Z0-9.\-]", "_", filename)
