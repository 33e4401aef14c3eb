import io

import pytest
from PIL import Image


def _make_png(width: int = 40, height: int = 20, color=(0, 128, 0, 255)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def make_png():
    """Factory returning the bytes of a small solid-color RGBA PNG."""
    return _make_png


@pytest.fixture
def png_bytes() -> bytes:
    return _make_png()
