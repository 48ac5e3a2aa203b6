"""Боковая панель: файл, информация, курсор и параметры операций.

Принципы:
- SRP: управляет только UI параметров, не содержит алгоритмов.
- ISP: события наружу через `on_*`, поля операций строятся по реестру `OPERATIONS`.
"""
from __future__ import annotations

from typing import Callable, Dict, Mapping, Optional, Tuple

import customtkinter as ctk

from imagemanip.controllers.operations import OPERATIONS, Operation, groups
from imagemanip.models.image_model import ImageData


def _rgba_to_hex(rgba: Tuple[int, ...]) -> str:
    """Преобразует RGB(A) в HEX (без альфа)."""
    r, g, b = rgba[:3]
    return f"#{r:02X}{g:02X}{b:02X}"


def _bold(master, text: str) -> ctk.CTkLabel:
    return ctk.CTkLabel(master, text=text, font=ctk.CTkFont(size=16, weight="bold"))


class Sidebar(ctk.CTkFrame):
    """Панель инструментов с блоками: файл, информация, курсор, операции."""
    def __init__(self, master: ctk.CTk, **kwargs) -> None:
        super().__init__(master, width=300, **kwargs)
        self.grid_columnconfigure(0, weight=1)

        # Callbacks
        self.on_open_file: Optional[Callable[[], None]] = None
        self.on_save_file: Optional[Callable[[], None]] = None
        self.on_copy_data_uri: Optional[Callable[[], None]] = None
        self.on_reset: Optional[Callable[[], None]] = None
        self.on_operation: Optional[Callable[[str, Mapping[str, str]], None]] = None

        _bold(self, "Файл").grid(row=0, column=0, padx=8, pady=(8, 4), sticky="w")
        buttons = ctk.CTkFrame(self, fg_color="transparent")
        buttons.grid(row=1, column=0, padx=8, pady=(0, 8), sticky="ew")
        buttons.grid_columnconfigure((0, 1), weight=1)
        ctk.CTkButton(buttons, text="Открыть…", command=lambda: self._emit(self.on_open_file)).grid(
            row=0, column=0, padx=(0, 4), pady=2, sticky="ew"
        )
        ctk.CTkButton(buttons, text="Сохранить…", command=lambda: self._emit(self.on_save_file)).grid(
            row=0, column=1, padx=(4, 0), pady=2, sticky="ew"
        )
        ctk.CTkButton(buttons, text="Data URI в буфер", command=lambda: self._emit(self.on_copy_data_uri)).grid(
            row=1, column=0, padx=(0, 4), pady=2, sticky="ew"
        )
        ctk.CTkButton(buttons, text="Сбросить", command=lambda: self._emit(self.on_reset)).grid(
            row=1, column=1, padx=(4, 0), pady=2, sticky="ew"
        )

        # Info section
        _bold(self, "Информация").grid(row=2, column=0, padx=8, pady=(8, 4), sticky="w")
        self._info_vars = {key: ctk.StringVar(value="—") for key in ("path", "size", "dims", "format")}
        for i, key in enumerate(self._info_vars):
            ctk.CTkLabel(self, textvariable=self._info_vars[key], wraplength=270, anchor="w", justify="left").grid(
                row=3 + i, column=0, padx=8, pady=(0, 2), sticky="ew"
            )

        # Cursor section
        _bold(self, "Курсор").grid(row=7, column=0, padx=8, pady=(8, 4), sticky="w")
        self._cursor_val = ctk.StringVar(value="—")
        ctk.CTkLabel(self, textvariable=self._cursor_val, anchor="w", justify="left").grid(
            row=8, column=0, padx=8, pady=(0, 2), sticky="ew"
        )

        # Operations
        _bold(self, "Операции").grid(row=9, column=0, padx=8, pady=(8, 4), sticky="w")
        self._tabs = ctk.CTkTabview(self)
        self._tabs.grid(row=10, column=0, padx=8, pady=(0, 8), sticky="nsew")
        self.grid_rowconfigure(10, weight=1)

        self._entries: Dict[str, Dict[str, ctk.StringVar]] = {}
        frames = {}
        for group in groups():
            self._tabs.add(group)
            container = self._tabs.tab(group)
            container.grid_rowconfigure(0, weight=1)
            container.grid_columnconfigure(0, weight=1)
            frame = ctk.CTkScrollableFrame(container)
            frame.grid(row=0, column=0, sticky="nsew")
            frame.grid_columnconfigure(1, weight=1)
            frames[group] = [frame, 0]
        for op in OPERATIONS:
            frame, row = frames[op.group]
            frames[op.group][1] = self._build_operation(frame, row, op)

    # ---- Public API ----
    def set_image_info(self, image: Optional[ImageData], width: int, height: int, mime: str) -> None:
        path = image.path if image is not None and image.path is not None else "—"
        size = image.size_bytes if image is not None else None
        self._info_vars["path"].set(f"Файл: {path}")
        self._info_vars["size"].set(f"Размер: {size / 1024:.1f} КБ" if size else "Размер: —")
        self._info_vars["dims"].set(f"Разрешение: {width}×{height}")
        self._info_vars["format"].set(f"Формат: {mime}")

    def update_cursor_info(self, x: Optional[int], y: Optional[int], rgba: Optional[Tuple[int, ...]]) -> None:
        if x is None or y is None or rgba is None:
            self._cursor_val.set("—")
            return
        self._cursor_val.set(f"({x}, {y})  {tuple(rgba)}  {_rgba_to_hex(rgba)}")

    # ---- Internals ----
    def _build_operation(self, frame: ctk.CTkScrollableFrame, row: int, op: Operation) -> int:
        ctk.CTkButton(frame, text=op.label, command=lambda name=op.name: self._emit_operation(name)).grid(
            row=row, column=0, columnspan=2, padx=6, pady=(8, 2), sticky="ew"
        )
        row += 1
        values: Dict[str, ctk.StringVar] = {}
        for name, default in op.params:
            values[name] = ctk.StringVar(value=str(default))
            ctk.CTkLabel(frame, text=name).grid(row=row, column=0, padx=6, pady=1, sticky="w")
            ctk.CTkEntry(frame, textvariable=values[name], width=90).grid(row=row, column=1, padx=6, pady=1, sticky="ew")
            row += 1
        self._entries[op.name] = values
        return row

    def _emit_operation(self, name: str) -> None:
        if self.on_operation:
            self.on_operation(name, {k: v.get() for k, v in self._entries[name].items()})

    @staticmethod
    def _emit(callback: Optional[Callable[[], None]]) -> None:
        if callback:
            callback()
