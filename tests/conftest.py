"""
Pytest fixtures shared by the picbed tests.
"""

import io

import pytest
from PIL import Image


def _make_image(size=(640, 480), fmt="JPEG", mode="RGB", color="red") -> bytes:
    img = Image.new(mode, size, color=color)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def make_image():
    """Fixture returning a factory for encoded test images."""
    return _make_image


@pytest.fixture
def jpeg_bytes():
    return _make_image()


@pytest.fixture
def png_bytes():
    return _make_image((300, 900), "PNG", mode="RGBA", color=(0, 0, 255, 128))


@pytest.fixture
def mpo_bytes():
    """Two-frame MPO, the container many phones and cameras write for .jpg files."""
    first = Image.new("RGB", (640, 480), color="red")
    second = Image.new("RGB", (640, 480), color="blue")
    buffer = io.BytesIO()
    first.save(buffer, format="MPO", save_all=True, append_images=[second])
    return buffer.getvalue()
