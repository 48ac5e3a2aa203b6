"""Буфер изображения: изменяемая сетка цветов width x height.

Принципы:
- SRP: хранит пиксели и проверяет границы; алгоритмов обработки нет.
- Данные лежат в numpy-массиве `(height, width, 4)` `uint8`, каналы R, G, B, A
  (A хранит прозрачность, см. `models.color`).
"""
from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from imagemanip.models.color import Color, PixelFormat, clamp_channel
from imagemanip.models.errors import InvalidParameterError, OutOfBoundsError


class ImageBuffer:
    """Растровый буфер, принадлежащий ровно одному манипулятору."""

    def __init__(self, pixels: np.ndarray, pixel_format: PixelFormat) -> None:
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise InvalidParameterError(f"Ожидался массив (H, W, 4), получено {pixels.shape}")
        if pixels.shape[0] <= 0 or pixels.shape[1] <= 0:
            raise InvalidParameterError("Размеры буфера должны быть положительными")
        self._pixels = np.ascontiguousarray(pixels, dtype=np.uint8)
        self._format = pixel_format
        if not pixel_format.supports_alpha:
            self._pixels[..., 3] = 0

    @classmethod
    def blank(
        cls,
        width: int,
        height: int,
        pixel_format: PixelFormat,
        fill: Optional[Color] = None,
    ) -> "ImageBuffer":
        """Создаёт буфер, предварительно залитый фоном формата (или цветом `fill`)."""
        if width <= 0 or height <= 0:
            raise InvalidParameterError(f"Недопустимый размер буфера: {width}x{height}")
        color = fill if fill is not None else pixel_format.background
        buffer = cls(np.empty((height, width, 4), dtype=np.uint8), pixel_format)
        buffer.fill(color)
        return buffer

    @classmethod
    def from_array(cls, array: np.ndarray, pixel_format: PixelFormat) -> "ImageBuffer":
        """Строит буфер из массива `(H, W, 3)` или `(H, W, 4)` любого числового типа.

        Каналы ограничиваются [0, 255]; у трёхканального массива альфа равна 0.
        """
        arr = np.asarray(array)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise InvalidParameterError(f"Ожидался массив (H, W, 3|4), получено {arr.shape}")
        pixels = np.zeros(arr.shape[:2] + (4,), dtype=np.uint8)
        pixels[..., :arr.shape[2]] = np.clip(arr, 0, 255)
        return cls(pixels, pixel_format)

    # ---- Properties ----
    @property
    def pixel_format(self) -> PixelFormat:
        return self._format

    @property
    def pixels(self) -> np.ndarray:
        """Прямой доступ к массиву `(H, W, 4)`; изменения видны буферу."""
        return self._pixels

    def width(self) -> int:
        return int(self._pixels.shape[1])

    def height(self) -> int:
        return int(self._pixels.shape[0])

    # ---- Pixel access ----
    def get(self, x: int, y: int) -> Color:
        self._check_bounds(x, y)
        r, g, b, a = (int(v) for v in self._pixels[y, x])
        return Color(r, g, b, a)

    def set(self, x: int, y: int, color: Color) -> None:
        self._check_bounds(x, y)
        self._pixels[y, x] = self._channels(color)

    def fill(self, color: Color) -> None:
        self._pixels[...] = self._channels(color)

    def replace_pixels(self, pixels: np.ndarray) -> None:
        """Записывает готовый массив той же формы целиком (для операций «на месте»)."""
        if pixels.shape != self._pixels.shape:
            raise InvalidParameterError(f"Форма {pixels.shape} не совпадает с {self._pixels.shape}")
        self._pixels[...] = pixels
        if not self._format.supports_alpha:
            self._pixels[..., 3] = 0

    def copy(self) -> "ImageBuffer":
        return ImageBuffer(self._pixels.copy(), self._format)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ImageBuffer):
            return NotImplemented
        return self._format is other._format and np.array_equal(self._pixels, other._pixels)

    def __repr__(self) -> str:
        return f"ImageBuffer({self.width()}x{self.height()}, {self._format.value})"

    # ---- Helpers ----
    def _check_bounds(self, x: int, y: int) -> None:
        if x < 0 or y < 0 or x >= self.width() or y >= self.height():
            raise OutOfBoundsError(
                f"Координаты ({x}, {y}) вне изображения {self.width()}x{self.height()}"
            )

    def _channels(self, color: Color) -> Tuple[int, int, int, int]:
        """Каналы цвета, ограниченные [0, 255], по альфа-политике формата."""
        alpha = clamp_channel(color.alpha) if self._format.supports_alpha else 0
        return clamp_channel(color.red), clamp_channel(color.green), clamp_channel(color.blue), alpha
