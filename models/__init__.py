# =============================================================================
# 📦 models/__init__.py
# =============================================================================

from .qr_record import QRRecordRow

__all__ = [
    "QRRecordRow",
]
