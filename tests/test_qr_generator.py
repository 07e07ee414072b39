from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from utils.qr_generator import data_url_to_bytes, render_qr_png, to_data_url


def _open(png: bytes) -> Image.Image:
    return Image.open(BytesIO(png))


def test_render_creates_png_of_requested_size():
    png = render_qr_png(payload="https://example.com/test", size=300)
    assert png.startswith(b"\x89PNG")
    assert _open(png).size == (300, 300)


def test_render_uses_colors():
    png = render_qr_png(payload="x", size=200, fg="#ff0000", bg="#00ff00", border=4)
    img = _open(png).convert("RGB")
    # Ecke liegt im Rand → Hintergrundfarbe
    assert img.getpixel((0, 0)) == (0, 255, 0)


def test_render_with_logo(tmp_path: Path):
    logo = tmp_path / "logo.png"
    Image.new("RGBA", (50, 50), (0, 0, 255, 255)).save(logo)
    png = render_qr_png(payload="logo test", size=300, error_correction="H", logo_path=str(logo))
    img = _open(png).convert("RGB")
    assert img.getpixel((150, 150)) == (0, 0, 255)


def test_render_missing_logo_is_ignored():
    png = render_qr_png(payload="x", size=100, logo_path="/nonexistent/logo.png")
    assert png.startswith(b"\x89PNG")


def test_render_invalid_color_raises():
    with pytest.raises(ValueError):
        render_qr_png(payload="x", fg="definitely-not-a-color")


def test_data_url_helpers():
    png = render_qr_png(payload="x", size=64)
    data_url = to_data_url(png)
    assert data_url.startswith("data:image/png;base64,")
    assert data_url_to_bytes(data_url) == png


def test_data_url_to_bytes_rejects_remote_urls():
    with pytest.raises(ValueError):
        data_url_to_bytes("https://img.test/qr.png")
