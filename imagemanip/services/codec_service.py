"""Граница кодека: байты <-> `ImageBuffer` через Pillow.

Принципы:
- SRP: только декодирование/кодирование и перевод альфы между соглашениями
  (Pillow хранит непрозрачность, буфер хранит прозрачность).
- OCP: параметры качества задаются в конструкторе, без правки методов.
"""
from __future__ import annotations

import base64
import io
from typing import Tuple, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from imagemanip.models.color import Color, ImageFormat, PixelFormat
from imagemanip.models.errors import ImageDecodeError, OperationFailedError, UnsupportedFormatError
from imagemanip.models.image_buffer import ImageBuffer

_PIL_FORMATS = {
    ImageFormat.JPEG: "JPEG",
    ImageFormat.PNG: "PNG",
    ImageFormat.GIF: "GIF",
}

# JPEG с заголовком MPF (снимки камер и телефонов) Pillow открывает как MPO
_DECODED_FORMATS = {
    "JPEG": ImageFormat.JPEG,
    "MPO": ImageFormat.JPEG,
    "PNG": ImageFormat.PNG,
    "GIF": ImageFormat.GIF,
}


def color_to_pil(color: Color, pixel_format: PixelFormat) -> Tuple[int, ...]:
    """Цвет буфера в кортеж PIL (непрозрачность вместо прозрачности для RGBA)."""
    if pixel_format.supports_alpha:
        return color.red, color.green, color.blue, 255 - color.alpha
    return color.red, color.green, color.blue


def buffer_to_pil(buffer: ImageBuffer) -> Image.Image:
    """Преобразует буфер в изображение PIL (RGBA или RGB по формату буфера)."""
    pixels = buffer.pixels
    if buffer.pixel_format.supports_alpha:
        arr = pixels.copy()
        arr[..., 3] = 255 - arr[..., 3]
        return Image.fromarray(arr)
    return Image.fromarray(np.ascontiguousarray(pixels[..., :3]))


def pil_to_buffer(image: Image.Image, pixel_format: PixelFormat) -> ImageBuffer:
    """Строит буфер из изображения PIL, приводя режим к нужному формату."""
    if pixel_format.supports_alpha:
        arr = np.array(image.convert("RGBA"), dtype=np.uint8)
        arr[..., 3] = 255 - arr[..., 3]
        return ImageBuffer(arr, pixel_format)
    return ImageBuffer.from_array(np.asarray(image.convert("RGB")), pixel_format)


def pil_pixel_to_color(pixel: Union[int, Tuple[int, ...]], mode: str) -> Color:
    """Значение `Image.getpixel` в цвет модели (прозрачность вместо непрозрачности)."""
    if isinstance(pixel, int):
        return Color(pixel, pixel, pixel)
    r, g, b = pixel[:3]
    if mode == "RGBA":
        return Color(r, g, b, 255 - pixel[3])
    return Color(r, g, b)


class ImageCodec:
    def __init__(self, jpeg_quality: int = 100, png_compress_level: int = 0) -> None:
        self.jpeg_quality = jpeg_quality
        self.png_compress_level = png_compress_level

    def decode(self, data: bytes) -> Tuple[ImageBuffer, ImageFormat]:
        """Декодирует байты JPEG/PNG/GIF.

        Returns:
            Пара (буфер, обнаруженный формат).

        Raises:
            ImageDecodeError: если байты не распознаны как изображение или повреждены.
            UnsupportedFormatError: если формат не JPEG, PNG или GIF.
        """
        try:
            pil_image = Image.open(io.BytesIO(data))
        except UnidentifiedImageError as exc:
            raise ImageDecodeError("Не удалось определить формат изображения") from exc

        image_format = _DECODED_FORMATS.get(pil_image.format)
        if image_format is None:
            mime = pil_image.get_format_mimetype() or pil_image.format
            raise UnsupportedFormatError(f"Неподдерживаемый тип изображения: {mime}")

        try:
            pil_image.load()
            buffer = pil_to_buffer(pil_image, image_format.pixel_format)
        except (OSError, ValueError) as exc:
            raise ImageDecodeError(f"Не удалось декодировать {image_format.mime_type}") from exc
        return buffer, image_format

    def encode(self, buffer: ImageBuffer, image_format: ImageFormat) -> bytes:
        """Кодирует буфер в байты выбранного формата.

        JPEG с качеством `jpeg_quality`, PNG без смешивания альфы и с уровнем
        сжатия `png_compress_level`, GIF без параметров.
        """
        if image_format not in _PIL_FORMATS:
            raise UnsupportedFormatError(f"Неподдерживаемый формат для сохранения: {image_format}")

        pil_image = buffer_to_pil(buffer)
        if not image_format.pixel_format.supports_alpha and pil_image.mode != "RGB":
            pil_image = pil_image.convert("RGB")

        params = {}
        if image_format is ImageFormat.JPEG:
            params["quality"] = self.jpeg_quality
        elif image_format is ImageFormat.PNG:
            params["compress_level"] = self.png_compress_level

        out = io.BytesIO()
        try:
            pil_image.save(out, format=_PIL_FORMATS[image_format], **params)
        except (OSError, ValueError) as exc:
            raise OperationFailedError(f"Не удалось закодировать {image_format.mime_type}") from exc
        return out.getvalue()

    def to_data_uri(self, buffer: ImageBuffer, image_format: ImageFormat) -> str:
        """Возвращает `data:<mime>;base64,<payload>` для закодированного буфера."""
        payload = base64.b64encode(self.encode(buffer, image_format)).decode("ascii")
        return f"data:{image_format.mime_type};base64,{payload}"
