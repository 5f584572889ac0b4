"""Shared fixtures: in-memory test images."""
import io

import pytest
from PIL import Image, features

from transcoder.conversion.service import reset_conversion_service

AVIF_AVAILABLE = features.check("avif")

requires_avif = pytest.mark.skipif(not AVIF_AVAILABLE, reason="Pillow built without AVIF support")


def image_bytes(img: Image.Image, fmt: str = "PNG", **save_kw) -> bytes:
    buffer = io.BytesIO()
    img.save(buffer, format=fmt, **save_kw)
    return buffer.getvalue()


def make_photo(size: tuple[int, int] = (128, 128)) -> Image.Image:
    """Gradients plus noise: enough detail for lossy encoders to show a quality difference."""
    red = Image.linear_gradient("L").resize(size)
    green = Image.radial_gradient("L").resize(size)
    blue = Image.effect_noise(size, 48)
    return Image.merge("RGB", (red, green, blue))


def sniff(data: bytes) -> str:
    with Image.open(io.BytesIO(data)) as img:
        return img.format


@pytest.fixture
def tiny_png() -> bytes:
    """2x2 RGB PNG."""
    img = Image.new("RGB", (2, 2))
    img.putdata([(255, 0, 0), (0, 255, 0), (0, 0, 255), (255, 255, 255)])
    return image_bytes(img, "PNG")


@pytest.fixture
def photo_png() -> bytes:
    return image_bytes(make_photo(), "PNG")


@pytest.fixture
def rgba_png() -> bytes:
    return image_bytes(Image.new("RGBA", (8, 8), (10, 20, 30, 128)), "PNG")


@pytest.fixture
def palette_gif() -> bytes:
    return image_bytes(make_photo((16, 16)).convert("P"), "GIF")


@pytest.fixture(autouse=True)
def _fresh_service():
    yield
    reset_conversion_service()
