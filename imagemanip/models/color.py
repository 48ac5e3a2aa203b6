"""Цветовая модель: значение цвета, форматы и политика альфа-канала.

Принципы:
- Одна таблица возможностей (`PixelFormat`) вместо ветвления «есть альфа / нет альфы»
  в каждой операции.
- Альфа хранится как *прозрачность*: 0 означает непрозрачный пиксель, 255 полностью
  прозрачный. Для форматов без альфы она всегда 0.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

ALPHA_OPAQUE = 0
ALPHA_TRANSPARENT = 255


def clamp_channel(value: float) -> int:
    """Ограничивает значение канала диапазоном [0, 255]."""
    return int(max(0, min(255, value)))


def luma(red: int, green: int, blue: int) -> int:
    """Яркость по ITU-R 601 (0.3R + 0.59G + 0.11B), усечённая до целого.

    Считается в целых числах, чтобы белый давал ровно 255.
    """
    return (30 * red + 59 * green + 11 * blue) // 100


@dataclass(frozen=True)
class Color:
    """Неизменяемый цвет из четырёх 8-битных каналов."""
    red: int
    green: int
    blue: int
    alpha: int = ALPHA_OPAQUE

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return self.red, self.green, self.blue, self.alpha


class PixelFormat(Enum):
    RGB = "RGB"
    RGBA = "RGBA"

    @property
    def supports_alpha(self) -> bool:
        return self is PixelFormat.RGBA

    @property
    def background(self) -> Color:
        """Заливка новых буферов: прозрачная для RGBA, непрозрачный чёрный иначе."""
        if self.supports_alpha:
            return Color(0, 0, 0, ALPHA_TRANSPARENT)
        return Color(0, 0, 0)

    @property
    def paper(self) -> Color:
        """Фон полутонового растра: прозрачный для RGBA, белый иначе."""
        if self.supports_alpha:
            return Color(0, 0, 0, ALPHA_TRANSPARENT)
        return Color(255, 255, 255)

    def allocate_color(self, red: int, green: int, blue: int, alpha: int = ALPHA_OPAQUE) -> Color:
        return allocate_color(self, red, green, blue, alpha)


class ImageFormat(Enum):
    """Поддерживаемые форматы контейнера и их MIME-типы."""
    JPEG = "image/jpeg"
    PNG = "image/png"
    GIF = "image/gif"

    @property
    def mime_type(self) -> str:
        return self.value

    @property
    def pixel_format(self) -> PixelFormat:
        # Прозрачность сохраняется только в PNG
        return PixelFormat.RGBA if self is ImageFormat.PNG else PixelFormat.RGB

    @classmethod
    def from_mime(cls, mime: str) -> "ImageFormat":
        """Возвращает формат по MIME-типу.

        Raises:
            ValueError: если MIME-тип не поддерживается.
        """
        return cls(mime)


def allocate_color(pixel_format: PixelFormat, red: int, green: int, blue: int, alpha: int = ALPHA_OPAQUE) -> Color:
    """Создаёт цвет с учётом альфа-политики формата.

    Каналы ограничиваются [0, 255]; для форматов без альфы `alpha` принудительно 0.
    """
    a = clamp_channel(alpha) if pixel_format.supports_alpha else ALPHA_OPAQUE
    return Color(clamp_channel(red), clamp_channel(green), clamp_channel(blue), a)
