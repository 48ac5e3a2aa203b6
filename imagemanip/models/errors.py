"""Иерархия исключений манипулятора изображений.

Каждый класс дополнительно наследует подходящее встроенное исключение, чтобы
вызывающий код мог ловить как `ImageManipulatorError`, так и привычные
`ValueError` / `FileNotFoundError` / `IndexError`.
"""
from __future__ import annotations


class ImageManipulatorError(Exception):
    """Базовое исключение пакета."""


class ImageFileNotFoundError(ImageManipulatorError, FileNotFoundError):
    """Исходный файл отсутствует или не является файлом."""


class UnsupportedFormatError(ImageManipulatorError, ValueError):
    """Тип медиа не входит в {jpeg, png, gif}."""


class ImageDecodeError(ImageManipulatorError, ValueError):
    """Кодек не смог разобрать байты изображения."""


class NoImageLoadedError(ImageManipulatorError, RuntimeError):
    """Операция вызвана до загрузки или после `destroy()`."""


class OutOfBoundsError(ImageManipulatorError, IndexError):
    """Координата пикселя вне `[0, width) x [0, height)`."""


class InvalidParameterError(ImageManipulatorError, ValueError):
    """Параметр вне допустимой области значений."""


class OperationFailedError(ImageManipulatorError, RuntimeError):
    """Низкоуровневый примитив (фильтр, ресемплинг, поворот, кодек) не отработал."""
