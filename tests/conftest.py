"""
Shared pytest fixtures for the pixshop test suite
"""
import io

import pytest
from PIL import Image

from pixshop.schema import ImagePart, ModelResponse, ResponsePart


class FakeGateway:
    """Records every request and replies with a canned ModelResponse"""

    def __init__(self, response=None):
        self.response = response or ModelResponse(
            parts=[ResponsePart(inline_data=ImagePart(mime_type="image/png", data="AAAA"))],
            finish_reason="STOP",
        )
        self.calls = []

    def generate(self, images, instruction):
        self.calls.append((list(images), instruction))
        return self.response


def _encode(img, fmt):
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    """A small opaque RGB PNG (4x3)"""
    return _encode(Image.new("RGB", (4, 3), (200, 30, 30)), "PNG")


@pytest.fixture
def jpeg_bytes():
    return _encode(Image.new("RGB", (8, 8), (10, 120, 250)), "JPEG")


@pytest.fixture
def transparent_border_png():
    """6x6 RGBA image: opaque 2x2 centre, fully transparent border"""
    img = Image.new("RGBA", (6, 6), (0, 0, 0, 0))
    img.paste((255, 255, 255, 255), (2, 2, 4, 4))
    return _encode(img, "PNG")


@pytest.fixture
def png_file(tmp_path, png_bytes):
    path = tmp_path / "photo.png"
    path.write_bytes(png_bytes)
    return path


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def gateway_factory():
    """Build a FakeGateway around a custom response"""
    return FakeGateway
