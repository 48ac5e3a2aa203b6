"""Фасад манипулятора: владеет одним буфером и форматом, оркестрирует сервисы.

SOLID:
- SRP: жизненный цикл (загрузка/сохранение/уничтожение) и фиксация результатов;
  сами алгоритмы живут в `PixelService` и `GeometryService`.
- DIP: сервисы передаются в конструктор, по умолчанию создаются стандартные.
Clean Code:
- Цветовые операции изменяют буфер на месте, геометрические возвращают новый
  буфер, который подменяет старый целиком (`_swap`).
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from imagemanip.models.color import Color, ImageFormat
from imagemanip.models.errors import (
    ImageManipulatorError,
    NoImageLoadedError,
    OperationFailedError,
)
from imagemanip.models.image_buffer import ImageBuffer
from imagemanip.models.image_model import FlipMode, ImageData, ManipulatorState
from imagemanip.services.geometry_service import GeometryService
from imagemanip.services.image_service import ImageService
from imagemanip.services.pixel_service import PixelService

logger = logging.getLogger(__name__)


class ImageManipulator:
    """Одно загруженное изображение и все операции над ним.

    Состояния: UNLOADED -> LOADED -> DESTROYED (конечное). Любая операция,
    кроме загрузки и `destroy()`, требует LOADED.
    """

    def __init__(
        self,
        image_service: Optional[ImageService] = None,
        pixel_service: Optional[PixelService] = None,
        geometry_service: Optional[GeometryService] = None,
    ) -> None:
        self._image_service = image_service or ImageService()
        self._pixel_service = pixel_service or PixelService()
        self._geometry_service = geometry_service or GeometryService()
        self._state = ManipulatorState.UNLOADED
        self._buffer: Optional[ImageBuffer] = None
        self._format: Optional[ImageFormat] = None
        self._source: Optional[ImageData] = None

    # ---- Construction ----
    @classmethod
    def from_file(cls, file_path: str | Path, **kwargs) -> "ImageManipulator":
        return cls(**kwargs).load_file(file_path)

    @classmethod
    def from_bytes(cls, data: bytes, **kwargs) -> "ImageManipulator":
        return cls(**kwargs).load_bytes(data)

    def load_file(self, file_path: str | Path) -> "ImageManipulator":
        """Загружает файл; при ошибке состояние манипулятора не меняется."""
        self._check_not_destroyed()
        self._accept(self._image_service.load_image(file_path))
        return self

    def load_bytes(self, data: bytes) -> "ImageManipulator":
        self._check_not_destroyed()
        self._accept(self._image_service.load_bytes(data))
        return self

    def __enter__(self) -> "ImageManipulator":
        return self

    def __exit__(self, *exc_info) -> None:
        self.destroy()

    # ---- Accessors ----
    @property
    def state(self) -> ManipulatorState:
        return self._state

    @property
    def image_format(self) -> ImageFormat:
        self._require_loaded()
        return self._format

    @property
    def source(self) -> Optional[ImageData]:
        """Метаданные исходной загрузки (путь, размер файла)."""
        return self._source

    @property
    def buffer(self) -> ImageBuffer:
        """Текущий буфер изображения; требует LOADED."""
        return self._require_loaded()

    def get_image(self) -> ImageBuffer:
        return self.buffer

    def get_type(self) -> str:
        return self.image_format.mime_type

    def get_width(self) -> int:
        return self._require_loaded().width()

    def get_height(self) -> int:
        return self._require_loaded().height()

    def get_pixel_color(self, x: int, y: int) -> Color:
        return self._require_loaded().get(x, y)

    def set_pixel_color(self, x: int, y: int, red: int, green: int, blue: int, alpha: int = 0) -> None:
        """Записывает один пиксель с учётом альфа-политики формата.

        Raises:
            OutOfBoundsError: если (x, y) вне изображения.
        """
        buffer = self._require_loaded()
        buffer.set(x, y, buffer.pixel_format.allocate_color(red, green, blue, alpha))

    # ---- Color operations (in place) ----
    def replace_color(
        self,
        target_r: int,
        target_g: int,
        target_b: int,
        new_r: int,
        new_g: int,
        new_b: int,
        tolerance: int,
    ) -> None:
        buffer = self._require_loaded()
        with self._primitive("replace_color"):
            self._pixel_service.replace_color(buffer, (target_r, target_g, target_b), (new_r, new_g, new_b), tolerance)

    def invert_colors(self) -> None:
        buffer = self._require_loaded()
        with self._primitive("invert_colors"):
            self._pixel_service.invert_colors(buffer)

    def grayscale(self) -> None:
        buffer = self._require_loaded()
        with self._primitive("grayscale"):
            self._pixel_service.grayscale(buffer)

    def adjust_brightness(self, level: int) -> None:
        buffer = self._require_loaded()
        with self._primitive("adjust_brightness"):
            self._pixel_service.adjust_brightness(buffer, level)

    def adjust_contrast(self, level: int) -> None:
        buffer = self._require_loaded()
        with self._primitive("adjust_contrast"):
            self._pixel_service.adjust_contrast(buffer, level)

    def colorize(self, red: int, green: int, blue: int) -> None:
        buffer = self._require_loaded()
        with self._primitive("colorize"):
            self._pixel_service.colorize(buffer, red, green, blue)

    def edge_detect(self) -> None:
        buffer = self._require_loaded()
        with self._primitive("edge_detect"):
            self._pixel_service.edge_detect(buffer)

    def posterize(self, levels: int = 4) -> None:
        buffer = self._require_loaded()
        with self._primitive("posterize"):
            self._pixel_service.posterize(buffer, levels)

    def duotone(self, dark_r: int, dark_g: int, dark_b: int, light_r: int, light_g: int, light_b: int) -> None:
        buffer = self._require_loaded()
        with self._primitive("duotone"):
            self._pixel_service.duotone(buffer, (dark_r, dark_g, dark_b), (light_r, light_g, light_b))

    def selective_desaturate(self, red: int, green: int, blue: int, tolerance: int = 50) -> None:
        buffer = self._require_loaded()
        with self._primitive("selective_desaturate"):
            self._pixel_service.selective_desaturate(buffer, (red, green, blue), tolerance)

    def vignette(self, strength: float = 0.5) -> None:
        buffer = self._require_loaded()
        with self._primitive("vignette"):
            self._pixel_service.vignette(buffer, strength)

    def blur(self, passes: int = 1) -> None:
        buffer = self._require_loaded()
        with self._primitive("blur"):
            self._pixel_service.blur(buffer, passes)

    # ---- Geometric operations (buffer replaced) ----
    def crop(self, x: int, y: int, width: int, height: int) -> None:
        buffer = self._require_loaded()
        with self._primitive("crop"):
            cropped = self._geometry_service.crop(buffer, x, y, width, height)
        if cropped is not None:
            self._swap(cropped)

    def downscale(self, factor: float) -> None:
        buffer = self._require_loaded()
        with self._primitive("downscale"):
            resized = self._geometry_service.downscale(buffer, factor)
        self._swap(resized)

    def rotate(self, angle: float) -> None:
        """Поворот по часовой стрелке (положительный угол)."""
        buffer = self._require_loaded()
        with self._primitive("rotate"):
            rotated = self._geometry_service.rotate(buffer, angle)
        self._swap(rotated)

    def flip(self, mode: FlipMode | str = FlipMode.HORIZONTAL) -> None:
        buffer = self._require_loaded()
        with self._primitive("flip"):
            flipped = self._geometry_service.flip(buffer, mode)
        self._swap(flipped)

    def wave(self, amplitude: float = 5.0, frequency: float = 0.05) -> None:
        buffer = self._require_loaded()
        with self._primitive("wave"):
            waved = self._geometry_service.wave(buffer, amplitude, frequency)
        self._swap(waved)

    def pixelate(self, block_size: int) -> None:
        buffer = self._require_loaded()
        with self._primitive("pixelate"):
            pixelated = self._geometry_service.pixelate(buffer, block_size)
        self._swap(pixelated)

    def halftone(self, dot_size: int = 6) -> None:
        buffer = self._require_loaded()
        with self._primitive("halftone"):
            screened = self._geometry_service.halftone(buffer, dot_size)
        self._swap(screened)

    # ---- Output ----
    def save(self, file_path: str | Path) -> Path:
        """Кодирует текущий буфер в обнаруженном при загрузке формате и пишет в файл."""
        buffer = self._require_loaded()
        path = self._image_service.save_image(buffer, self._format, file_path)
        logger.debug("Saved %s (%s) to %s", buffer, self._format.mime_type, path)
        return path

    def to_bytes(self) -> bytes:
        buffer = self._require_loaded()
        return self._image_service.codec.encode(buffer, self._format)

    def to_data_uri(self) -> str:
        """`data:<mime>;base64,...` для текущего буфера."""
        buffer = self._require_loaded()
        return self._image_service.codec.to_data_uri(buffer, self._format)

    def destroy(self) -> None:
        """Освобождает буфер; повторный вызов ничего не делает."""
        if self._state is ManipulatorState.DESTROYED:
            return
        self._buffer = None
        self._format = None
        self._source = None
        self._state = ManipulatorState.DESTROYED
        logger.debug("Manipulator destroyed")

    # ---- Helpers ----
    def _accept(self, image_data: ImageData) -> None:
        self._buffer = image_data.buffer
        self._format = image_data.image_format
        self._source = image_data
        self._state = ManipulatorState.LOADED
        logger.debug(
            "Loaded %s image %dx%d from %s",
            image_data.image_format.mime_type,
            image_data.width,
            image_data.height,
            image_data.path or "bytes",
        )

    def _check_not_destroyed(self) -> None:
        if self._state is ManipulatorState.DESTROYED:
            raise NoImageLoadedError("Манипулятор уничтожен")

    def _require_loaded(self) -> ImageBuffer:
        if self._state is not ManipulatorState.LOADED or self._buffer is None:
            raise NoImageLoadedError("Изображение не загружено")
        return self._buffer

    def _swap(self, new_buffer: ImageBuffer) -> None:
        self._buffer = new_buffer

    @contextmanager
    def _primitive(self, operation: str) -> Iterator[None]:
        """Переводит сбои numpy/PIL внутри операции в `OperationFailedError`."""
        try:
            yield
        except ImageManipulatorError:
            raise
        except (ValueError, OSError, MemoryError) as exc:
            raise OperationFailedError(f"{operation}: {exc}") from exc
