"""Геометрические операции: каждая строит новый буфер и возвращает его.

Принципы:
- SRP: сервис не владеет буфером; замену выполняет вызывающий (манипулятор),
  поэтому старый буфер никогда не изменяется частично.
- Заливка новых буферов берётся из `PixelFormat.background` / `paper`,
  без ветвления по формату в каждой операции.
"""
from __future__ import annotations

import math
from typing import Optional

import numpy as np
from PIL import Image, ImageDraw

from imagemanip.models.color import Color
from imagemanip.models.errors import InvalidParameterError, OperationFailedError
from imagemanip.models.image_buffer import ImageBuffer
from imagemanip.models.image_model import FlipMode
from imagemanip.services.codec_service import buffer_to_pil, color_to_pil, pil_to_buffer

HALFTONE_INK = Color(0, 0, 0)


def round_half_away(value: float) -> int:
    """Округление половин от нуля (2.5 -> 3, -2.5 -> -3)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


class GeometryService:
    def crop(self, buffer: ImageBuffer, x: int, y: int, width: int, height: int) -> Optional[ImageBuffer]:
        """Вырезает прямоугольник, ограничивая его границами изображения.

        Returns:
            Новый буфер или None, если после ограничения размер неположительный
            (операция ничего не меняет).
        """
        x = max(0, x)
        y = max(0, y)
        width = min(width, buffer.width() - x)
        height = min(height, buffer.height() - y)
        if width <= 0 or height <= 0:
            return None
        region = buffer.pixels[y:y + height, x:x + width].copy()
        return ImageBuffer(region, buffer.pixel_format)

    def downscale(self, buffer: ImageBuffer, factor: float) -> ImageBuffer:
        """Уменьшает изображение с усреднением по площади (BOX), без алиасинга."""
        if not 0 < factor < 1:
            raise InvalidParameterError(f"Коэффициент масштаба должен быть в (0, 1), получено {factor}")
        new_w = round_half_away(buffer.width() * factor)
        new_h = round_half_away(buffer.height() * factor)
        if new_w < 1 or new_h < 1:
            raise OperationFailedError(f"Масштабирование даёт пустое изображение {new_w}x{new_h}")
        resized = buffer_to_pil(buffer).resize((new_w, new_h), Image.Resampling.BOX)
        return pil_to_buffer(resized, buffer.pixel_format)

    def rotate(self, buffer: ImageBuffer, angle: float) -> ImageBuffer:
        """Поворачивает по часовой стрелке на `angle` градусов с расширением холста.

        PIL поворачивает против часовой, поэтому угол инвертируется. Открывшиеся
        углы заливаются фоном формата.
        """
        if not math.isfinite(angle):
            raise OperationFailedError(f"Недопустимый угол поворота: {angle}")
        fmt = buffer.pixel_format
        rotated = buffer_to_pil(buffer).rotate(
            -angle,
            resample=Image.Resampling.BICUBIC,
            expand=True,
            fillcolor=color_to_pil(fmt.background, fmt),
        )
        if rotated is None or rotated.width == 0 or rotated.height == 0:
            raise OperationFailedError("Поворот не дал результата")
        return pil_to_buffer(rotated, fmt)

    def flip(self, buffer: ImageBuffer, mode: FlipMode | str = FlipMode.HORIZONTAL) -> ImageBuffer:
        """Зеркалирует по горизонтали, вертикали или обеим осям."""
        if not isinstance(mode, FlipMode):
            try:
                mode = FlipMode(str(mode).lower())
            except ValueError as exc:
                raise InvalidParameterError(
                    f"Неизвестный режим отражения {mode!r}: используйте horizontal, vertical или both"
                ) from exc

        src = buffer.pixels
        if mode is FlipMode.HORIZONTAL:
            out = src[:, ::-1]
        elif mode is FlipMode.VERTICAL:
            out = src[::-1, :]
        else:
            out = src[::-1, ::-1]
        return ImageBuffer(out.copy(), buffer.pixel_format)

    def wave(self, buffer: ImageBuffer, amplitude: float = 5.0, frequency: float = 0.05) -> ImageBuffer:
        """Сдвигает каждую строку на round(sin(y * frequency) * amplitude) пикселей.

        Источник для (x, y) берётся из (x - offset, y); вне границ остаётся заливка фона,
        поэтому у краёв открываются пустые полосы.
        """
        w, h = buffer.width(), buffer.height()
        output = ImageBuffer.blank(w, h, buffer.pixel_format)
        src, dst = buffer.pixels, output.pixels
        for y in range(h):
            offset = round_half_away(math.sin(y * frequency) * amplitude)
            if abs(offset) >= w:
                continue
            if offset >= 0:
                dst[y, offset:] = src[y, :w - offset]
            else:
                dst[y, :w + offset] = src[y, -offset:]
        return output

    def pixelate(self, buffer: ImageBuffer, block_size: int) -> ImageBuffer:
        """Заменяет каждый блок block_size x block_size его средним цветом."""
        if block_size < 1:
            raise InvalidParameterError(f"Размер блока должен быть >= 1, получено {block_size}")
        src = buffer.pixels
        out = src.copy()
        h, w = src.shape[:2]
        for y0 in range(0, h, block_size):
            for x0 in range(0, w, block_size):
                cell = src[y0:y0 + block_size, x0:x0 + block_size].reshape(-1, 4).astype(np.int64)
                out[y0:y0 + block_size, x0:x0 + block_size] = cell.sum(axis=0) // len(cell)
        return ImageBuffer(out, buffer.pixel_format)

    def halftone(self, buffer: ImageBuffer, dot_size: int = 6) -> ImageBuffer:
        """Полутоновый растр: чёрный круг в каждой ячейке, тем больше, чем темнее ячейка.

        Радиус = dot_size * (1 - средняя_яркость / 255) / 2; белые ячейки дают 0.
        Точки всегда чёрные, исходный оттенок не сохраняется.
        """
        if dot_size < 1:
            raise InvalidParameterError(f"Размер точки должен быть >= 1, получено {dot_size}")
        fmt = buffer.pixel_format
        w, h = buffer.width(), buffer.height()
        rgb = buffer.pixels[..., :3].astype(np.int64)
        gray = (30 * rgb[..., 0] + 59 * rgb[..., 1] + 11 * rgb[..., 2]) / 100.0

        canvas = Image.new(fmt.value, (w, h), color_to_pil(fmt.paper, fmt))
        draw = ImageDraw.Draw(canvas)
        ink = color_to_pil(HALFTONE_INK, fmt)
        half = dot_size / 2.0
        for y0 in range(0, h, dot_size):
            for x0 in range(0, w, dot_size):
                avg = float(gray[y0:y0 + dot_size, x0:x0 + dot_size].mean())
                radius = dot_size * (1.0 - avg / 255.0) / 2.0
                if radius <= 0:
                    continue
                cx, cy = x0 + half, y0 + half
                draw.ellipse((cx - radius, cy - radius, cx + radius, cy + radius), fill=ink)
        return pil_to_buffer(canvas, fmt)
