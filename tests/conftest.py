import io
from typing import Sequence

import numpy as np
import pytest
from PIL import Image

from imagemanip.models.color import PixelFormat
from imagemanip.models.image_buffer import ImageBuffer

DARK = (200, 30, 60)
LIGHT = (10, 220, 90)


def encode_image(image: Image.Image, fmt: str) -> bytes:
    out = io.BytesIO()
    image.save(out, format=fmt)
    return out.getvalue()


def make_buffer(rows: Sequence[Sequence[Sequence[int]]], pixel_format: PixelFormat = PixelFormat.RGB) -> ImageBuffer:
    """Буфер из вложенного списка строк пикселей (r, g, b) или (r, g, b, a)."""
    arr = np.zeros((len(rows), len(rows[0]), 4), dtype=np.uint8)
    for y, row in enumerate(rows):
        for x, px in enumerate(row):
            arr[y, x, : len(px)] = px
    return ImageBuffer(arr, pixel_format)


def random_buffer(width: int, height: int, pixel_format: PixelFormat = PixelFormat.RGB, seed: int = 0) -> ImageBuffer:
    rng = np.random.default_rng(seed)
    arr = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
    return ImageBuffer(arr, pixel_format)


def checkerboard(width: int = 4, height: int = 4) -> Image.Image:
    image = Image.new("RGBA", (width, height))
    for y in range(height):
        for x in range(width):
            color = DARK if (x + y) % 2 == 0 else LIGHT
            image.putpixel((x, y), (*color, 255))
    return image


@pytest.fixture
def checker_png() -> bytes:
    """4x4 непрозрачная шахматка двух цветов в PNG."""
    return encode_image(checkerboard(), "PNG")


@pytest.fixture
def rgb_png() -> bytes:
    return encode_image(Image.new("RGB", (6, 4), (120, 60, 30)), "PNG")


@pytest.fixture
def small_jpeg() -> bytes:
    return encode_image(Image.new("RGB", (8, 5), (90, 140, 200)), "JPEG")


@pytest.fixture
def small_gif() -> bytes:
    return encode_image(Image.new("RGB", (5, 3), (255, 0, 0)), "GIF")


@pytest.fixture
def bmp_bytes() -> bytes:
    return encode_image(Image.new("RGB", (2, 2), (1, 2, 3)), "BMP")
