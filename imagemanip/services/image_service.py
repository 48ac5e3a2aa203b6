"""Загрузка изображений с диска и сохранение результата.

Принципы:
- SRP: класс отвечает только за файловый доступ и упаковку метаданных;
  разбор байтов делегируется `ImageCodec`.
- OCP: новые источники (стрим, URL) можно добавить отдельными методами.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from imagemanip.models.color import ImageFormat
from imagemanip.models.errors import ImageFileNotFoundError, OperationFailedError
from imagemanip.models.image_buffer import ImageBuffer
from imagemanip.models.image_model import ImageData
from imagemanip.services.codec_service import ImageCodec


class ImageService:
    def __init__(self, codec: Optional[ImageCodec] = None) -> None:
        self.codec = codec or ImageCodec()

    def load_image(self, file_path: str | Path) -> ImageData:
        """Загружает изображение с диска и возвращает его вместе с метаданными.

        Args:
            file_path: Путь до файла изображения.

        Returns:
            `ImageData` c буфером, обнаруженным форматом, размерами и размером файла.

        Raises:
            ImageFileNotFoundError: если путь не существует или не указывает на файл.
            UnsupportedFormatError: если формат не JPEG, PNG или GIF.
            ImageDecodeError: если файл не удалось декодировать.
        """
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise ImageFileNotFoundError(f"Файл не найден: {path}")

        data = path.read_bytes()
        loaded = self.load_bytes(data)
        return ImageData(
            path=path,
            buffer=loaded.buffer,
            image_format=loaded.image_format,
            width=loaded.width,
            height=loaded.height,
            size_bytes=len(data),
        )

    def load_bytes(self, data: bytes) -> ImageData:
        """Декодирует изображение из байтов (без файла на диске)."""
        if not data:
            raise ImageFileNotFoundError("Пустые данные изображения")
        buffer, image_format = self.codec.decode(data)
        return ImageData(
            path=None,
            buffer=buffer,
            image_format=image_format,
            width=buffer.width(),
            height=buffer.height(),
            size_bytes=len(data),
        )

    def save_image(self, buffer: ImageBuffer, image_format: ImageFormat, file_path: str | Path) -> Path:
        """Кодирует буфер и записывает его в файл; возвращает путь."""
        path = Path(file_path)
        data = self.codec.encode(buffer, image_format)
        try:
            path.write_bytes(data)
        except OSError as exc:
            raise OperationFailedError(f"Не удалось записать файл: {path}") from exc
        return path
