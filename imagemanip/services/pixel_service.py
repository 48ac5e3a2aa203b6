"""Цветовые операции над буфером «на месте».

Принципы:
- SRP: только пересчёт цветов; буфер не пересоздаётся, размеры не меняются.
- Каждая операция считает новый массив целиком и фиксирует его одним
  `replace_pixels`, поэтому при ошибке буфер остаётся прежним.
- Альфа-канал не трогается (кроме пикселизации, см. `GeometryService`).
"""
from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from imagemanip.models.color import clamp_channel
from imagemanip.models.errors import InvalidParameterError
from imagemanip.models.image_buffer import ImageBuffer

RGB = Tuple[int, int, int]

EDGE_KERNEL = ((-1, 0, -1), (0, 4, 0), (-1, 0, -1))
GAUSSIAN_KERNEL = ((1, 2, 1), (2, 4, 2), (1, 2, 1))


class PixelService:
    # ---------- Вспомогательные функции ----------
    def _rgb(self, buffer: ImageBuffer) -> np.ndarray:
        """Каналы RGB как int32-массив (H, W, 3) для арифметики без переполнения."""
        return buffer.pixels[..., :3].astype(np.int32)

    def _luma(self, rgb: np.ndarray) -> np.ndarray:
        """Целочисленная яркость 0.3R + 0.59G + 0.11B (усечение)."""
        return (30 * rgb[..., 0] + 59 * rgb[..., 1] + 11 * rgb[..., 2]) // 100

    def _commit(self, buffer: ImageBuffer, rgb: np.ndarray) -> None:
        """Ограничивает каналы [0..255] и записывает их, сохраняя альфу."""
        out = buffer.pixels.copy()
        out[..., :3] = np.clip(rgb, 0, 255).astype(np.uint8)
        buffer.replace_pixels(out)

    def _convolve(self, rgb: np.ndarray, kernel: Sequence[Sequence[int]], divisor: float, offset: float) -> np.ndarray:
        """Свёртка 3x3 по каждому каналу через сдвиги, края дублируются."""
        h, w = rgb.shape[:2]
        p = np.pad(rgb.astype(np.float64), ((1, 1), (1, 1), (0, 0)), mode="edge")
        acc = np.zeros((h, w, 3), dtype=np.float64)
        for ky, row in enumerate(kernel):
            for kx, k in enumerate(row):
                if k:
                    acc += k * p[ky:ky + h, kx:kx + w]
        acc = acc / divisor + offset
        # усечение к целому, как у целочисленного фильтра
        return np.clip(acc, 0.0, 255.0).astype(np.int32)

    @staticmethod
    def _check_tolerance(tolerance: int) -> None:
        if tolerance < 0:
            raise InvalidParameterError(f"Допуск должен быть >= 0, получено {tolerance}")

    # ---------- Перекраска ----------
    def replace_color(self, buffer: ImageBuffer, target: RGB, new: RGB, tolerance: int) -> None:
        """Заменяет цвет в пределах допуска, сохраняя локальную светотень.

        Пиксель подходит, если |канал - target| <= tolerance по всем трём каналам;
        новый канал = clamp(new + (канал - target)).
        """
        self._check_tolerance(tolerance)
        rgb = self._rgb(buffer)
        diff = rgb - np.asarray(target, dtype=np.int32)
        mask = np.all(np.abs(diff) <= tolerance, axis=-1)
        replaced = np.asarray(new, dtype=np.int32) + diff
        self._commit(buffer, np.where(mask[..., None], replaced, rgb))

    def invert_colors(self, buffer: ImageBuffer) -> None:
        self._commit(buffer, 255 - self._rgb(buffer))

    def grayscale(self, buffer: ImageBuffer) -> None:
        gray = self._luma(self._rgb(buffer))
        self._commit(buffer, np.repeat(gray[..., None], 3, axis=-1))

    def colorize(self, buffer: ImageBuffer, red: int, green: int, blue: int) -> None:
        """Аддитивный оттенок; компоненты оттенка ограничиваются [0..255] до применения."""
        tint = np.array([clamp_channel(red), clamp_channel(green), clamp_channel(blue)], dtype=np.int32)
        self._commit(buffer, self._rgb(buffer) + tint)

    def duotone(self, buffer: ImageBuffer, dark: RGB, light: RGB) -> None:
        """Отображает яркость пикселя в градиент dark -> light."""
        rgb = self._rgb(buffer).astype(np.float64)
        gray = (30 * rgb[..., 0] + 59 * rgb[..., 1] + 11 * rgb[..., 2]) / (100.0 * 255.0)
        lo = np.asarray(dark, dtype=np.float64)
        hi = np.asarray(light, dtype=np.float64)
        out = lo + (hi - lo) * gray[..., None]
        self._commit(buffer, np.trunc(out).astype(np.int32))

    def selective_desaturate(self, buffer: ImageBuffer, target: RGB, tolerance: int = 50) -> None:
        """Обесцвечивает всё, кроме пикселей, близких к целевому цвету."""
        self._check_tolerance(tolerance)
        rgb = self._rgb(buffer)
        far = np.any(np.abs(rgb - np.asarray(target, dtype=np.int32)) > tolerance, axis=-1)
        gray = np.repeat(self._luma(rgb)[..., None], 3, axis=-1)
        self._commit(buffer, np.where(far[..., None], gray, rgb))

    def posterize(self, buffer: ImageBuffer, levels: int = 4) -> None:
        """Квантует каналы до `levels` уровней; levels молча приводится к [2, 256]."""
        levels = max(2, min(256, int(levels)))
        step = 256 // levels
        rgb = self._rgb(buffer).astype(np.float64)
        # round half away from zero; каналы неотрицательны
        out = np.floor(rgb / step + 0.5) * step
        self._commit(buffer, out.astype(np.int32))

    # ---------- Тон ----------
    def adjust_brightness(self, buffer: ImageBuffer, level: int) -> None:
        if level < -255 or level > 255:
            raise InvalidParameterError(f"Яркость должна быть в [-255, 255], получено {level}")
        self._commit(buffer, self._rgb(buffer) + int(level))

    def adjust_contrast(self, buffer: ImageBuffer, level: int) -> None:
        """Контраст: положительный level уменьшает контраст, отрицательный усиливает.

        f = ((100 - level) / 100)^2; c' = ((c/255 - 0.5) * f + 0.5) * 255.
        """
        if level < -100 or level > 100:
            raise InvalidParameterError(f"Контраст должен быть в [-100, 100], получено {level}")
        factor = ((100.0 - level) / 100.0) ** 2
        rgb = self._rgb(buffer).astype(np.float64)
        out = ((rgb / 255.0 - 0.5) * factor + 0.5) * 255.0
        self._commit(buffer, np.clip(out, 0.0, 255.0).astype(np.int32))

    def vignette(self, buffer: ImageBuffer, strength: float = 0.5) -> None:
        """Затемняет края пропорционально расстоянию от центра.

        fade = clamp(1 - strength * d / d_max, 0, 1), где d_max это расстояние до угла.
        Сила вне [0, 1] не отклоняется, ограничивается только итоговый fade.
        """
        h, w = buffer.height(), buffer.width()
        cx, cy = w / 2.0, h / 2.0
        max_distance = float(np.hypot(cx, cy))
        ys, xs = np.mgrid[0:h, 0:w]
        distance = np.hypot(xs - cx, ys - cy)
        fade = np.clip(1.0 - strength * (distance / max_distance), 0.0, 1.0)
        out = self._rgb(buffer) * fade[..., None]
        self._commit(buffer, np.trunc(out).astype(np.int32))

    # ---------- Свёртки ----------
    def edge_detect(self, buffer: ImageBuffer) -> None:
        self._commit(buffer, self._convolve(self._rgb(buffer), EDGE_KERNEL, 1.0, 127.0))

    def blur(self, buffer: ImageBuffer, passes: int = 1) -> None:
        """Гауссово размытие 3x3; `passes` < 1 приводится к 1, проходы накапливаются."""
        passes = max(1, int(passes))
        rgb = self._rgb(buffer)
        for _ in range(passes):
            rgb = self._convolve(rgb, GAUSSIAN_KERNEL, 16.0, 0.0)
        self._commit(buffer, rgb)
