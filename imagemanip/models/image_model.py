"""Модели данных для загруженных изображений.

Принципы:
- SRP: только структура данных, без логики обработки.
- Чистый код: неизменяемость (`frozen=True`) для предсказуемости.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from imagemanip.models.color import ImageFormat
from imagemanip.models.image_buffer import ImageBuffer


@dataclass(frozen=True)
class ImageData:
    """Результат загрузки изображения с диска.

    Fields:
        path: Путь к исходному файлу (None, если загружено из байтов).
        buffer: Декодированный буфер пикселей.
        image_format: Обнаруженный формат контейнера.
        width: Ширина, px.
        height: Высота, px.
        size_bytes: Размер файла, если доступен.
    """
    path: Optional[Path]
    buffer: ImageBuffer
    image_format: ImageFormat
    width: int
    height: int
    size_bytes: Optional[int]


class ManipulatorState(Enum):
    UNLOADED = "unloaded"
    LOADED = "loaded"
    DESTROYED = "destroyed"


class FlipMode(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    BOTH = "both"
