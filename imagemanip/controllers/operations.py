"""Реестр операций манипулятора для интерфейса: подписи, параметры, значения по умолчанию.

UI строит поля ввода по этому описанию, контроллер разбирает введённые строки
и вызывает одноимённый метод `ImageManipulator`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple

from imagemanip.controllers.manipulator import ImageManipulator
from imagemanip.models.errors import InvalidParameterError


@dataclass(frozen=True)
class Operation:
    """Описание одной операции.

    Fields:
        name: Имя метода `ImageManipulator`.
        label: Подпись кнопки.
        group: Вкладка боковой панели.
        params: Пары (имя параметра, значение по умолчанию); тип значения
            по умолчанию определяет разбор ввода.
    """
    name: str
    label: str
    group: str
    params: Tuple[Tuple[str, Any], ...] = field(default_factory=tuple)


OPERATIONS: List[Operation] = [
    Operation("invert_colors", "Инвертировать", "Цвет"),
    Operation("grayscale", "Оттенки серого", "Цвет"),
    Operation(
        "replace_color",
        "Заменить цвет",
        "Цвет",
        (("target_r", 255), ("target_g", 0), ("target_b", 0), ("new_r", 0), ("new_g", 0), ("new_b", 255), ("tolerance", 30)),
    ),
    Operation("colorize", "Тонировать", "Цвет", (("red", 40), ("green", 0), ("blue", 0))),
    Operation(
        "duotone",
        "Дуотон",
        "Цвет",
        (("dark_r", 20), ("dark_g", 20), ("dark_b", 80), ("light_r", 250), ("light_g", 220), ("light_b", 150)),
    ),
    Operation(
        "selective_desaturate",
        "Выборочное обесцвечивание",
        "Цвет",
        (("red", 255), ("green", 0), ("blue", 0), ("tolerance", 50)),
    ),
    Operation("adjust_brightness", "Яркость", "Тон", (("level", 30),)),
    Operation("adjust_contrast", "Контраст", "Тон", (("level", -20),)),
    Operation("posterize", "Постеризация", "Тон", (("levels", 4),)),
    Operation("vignette", "Виньетка", "Тон", (("strength", 0.5),)),
    Operation("crop", "Кадрировать", "Геометрия", (("x", 0), ("y", 0), ("width", 100), ("height", 100))),
    Operation("downscale", "Уменьшить", "Геометрия", (("factor", 0.5),)),
    Operation("rotate", "Повернуть", "Геометрия", (("angle", 90.0),)),
    Operation("flip", "Отразить", "Геометрия", (("mode", "horizontal"),)),
    Operation("edge_detect", "Края", "Стиль"),
    Operation("blur", "Размытие", "Стиль", (("passes", 1),)),
    Operation("pixelate", "Пикселизация", "Стиль", (("block_size", 8),)),
    Operation("wave", "Волна", "Стиль", (("amplitude", 5.0), ("frequency", 0.05))),
    Operation("halftone", "Полутон", "Стиль", (("dot_size", 6),)),
]

OPERATIONS_BY_NAME: Dict[str, Operation] = {op.name: op for op in OPERATIONS}


def groups() -> List[str]:
    """Вкладки в порядке первого появления."""
    seen: List[str] = []
    for op in OPERATIONS:
        if op.group not in seen:
            seen.append(op.group)
    return seen


def parse_params(operation: Operation, raw: Mapping[str, str]) -> Dict[str, Any]:
    """Приводит строки из полей ввода к типам значений по умолчанию.

    Пустое или отсутствующее поле означает значение по умолчанию.

    Raises:
        InvalidParameterError: если строку нельзя разобрать.
    """
    parsed: Dict[str, Any] = {}
    for name, default in operation.params:
        text = str(raw.get(name, "")).strip()
        if not text:
            parsed[name] = default
            continue
        try:
            if isinstance(default, int):
                parsed[name] = int(text)
            elif isinstance(default, float):
                parsed[name] = float(text)
            else:
                parsed[name] = text
        except ValueError as exc:
            raise InvalidParameterError(f"{operation.label}: некорректное значение {name}={text!r}") from exc
    return parsed


def apply_operation(manipulator: ImageManipulator, name: str, raw: Mapping[str, str]) -> None:
    """Разбирает параметры и вызывает операцию на манипуляторе."""
    try:
        operation = OPERATIONS_BY_NAME[name]
    except KeyError as exc:
        raise InvalidParameterError(f"Неизвестная операция: {name}") from exc
    getattr(manipulator, operation.name)(**parse_params(operation, raw))
