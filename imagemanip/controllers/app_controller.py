"""Контроллер приложения: оркестрация UI и манипулятора.

SOLID:
- SRP: класс управляет связями между UI и `ImageManipulator` (без логики обработки изображений).
- DIP: операции вызываются через реестр `operations`, UI о манипуляторе не знает.
Clean Code:
- Обработчики компактны; ошибки манипулятора показываются пользователю, а не глушатся.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from tkinter import TclError, filedialog, messagebox
from typing import Mapping, Optional

import customtkinter as ctk

from imagemanip.controllers.manipulator import ImageManipulator
from imagemanip.controllers.operations import apply_operation
from imagemanip.models.errors import ImageManipulatorError
from imagemanip.services.codec_service import buffer_to_pil
from imagemanip.ui.bottom_bar import BottomBar
from imagemanip.ui.image_viewer import ImageViewer
from imagemanip.ui.sidebar import Sidebar

logger = logging.getLogger(__name__)

FILETYPES = (
    ("Images", "*.png *.jpg *.jpeg *.gif"),
    ("All files", "*.*"),
)


@dataclass
class AppController:
    """Связывает элементы UI с манипулятором.

    Ответственности:
    - Инициализация и бинд событий (UI -> контроллер).
    - Загрузка/сохранение через `ImageManipulator`.
    - Применение операций и обновление просмотра и информации.
    """
    viewer: ImageViewer
    sidebar: Sidebar
    bottom: BottomBar
    window: ctk.CTk

    _manipulator: Optional[ImageManipulator] = None
    _path: Optional[Path] = None

    def bind_events(self) -> None:
        """Регистрирует обработчики событий между UI-компонентами."""
        self.sidebar.on_open_file = self._handle_open_file
        self.sidebar.on_save_file = self._handle_save_file
        self.sidebar.on_copy_data_uri = self._handle_copy_data_uri
        self.sidebar.on_reset = self._handle_reset
        self.sidebar.on_operation = self._handle_operation

        self.viewer.on_cursor_move = self.sidebar.update_cursor_info
        self.viewer.on_zoom_change = self.bottom.set_zoom_percent

        self.bottom.on_zoom_change = self.viewer.set_zoom_percent
        self.bottom.on_zoom_fit = self._handle_zoom_fit
        self.bottom.on_compare_change = self.viewer.set_side_by_side

    # ---- Handlers ----
    def _handle_open_file(self) -> None:
        try:
            file_path = filedialog.askopenfilename(title="Выберите изображение", filetypes=FILETYPES)
        except TclError:
            return
        if file_path:
            self.open(Path(file_path))

    def open(self, path: Path) -> None:
        try:
            manipulator = ImageManipulator.from_file(path)
        except ImageManipulatorError as exc:
            self._show_error("Не удалось открыть изображение", exc)
            return
        if self._manipulator is not None:
            self._manipulator.destroy()
        self._manipulator = manipulator
        self._path = path
        self.viewer.set_image(buffer_to_pil(manipulator.get_image()))
        self._refresh(result=False)
        self.bottom.set_zoom_percent(self.viewer.get_zoom_percent())

    def _handle_save_file(self) -> None:
        if self._manipulator is None:
            return
        suffix = self._path.suffix if self._path is not None else ".png"
        try:
            file_path = filedialog.asksaveasfilename(title="Сохранить как", defaultextension=suffix, filetypes=FILETYPES)
        except TclError:
            return
        if not file_path:
            return
        try:
            self._manipulator.save(file_path)
        except ImageManipulatorError as exc:
            self._show_error("Не удалось сохранить изображение", exc)

    def _handle_copy_data_uri(self) -> None:
        if self._manipulator is None:
            return
        try:
            uri = self._manipulator.to_data_uri()
        except ImageManipulatorError as exc:
            self._show_error("Не удалось закодировать изображение", exc)
            return
        self.window.clipboard_clear()
        self.window.clipboard_append(uri)
        logger.info("Data URI copied (%d chars)", len(uri))

    def _handle_reset(self) -> None:
        if self._path is not None:
            self.open(self._path)

    def _handle_operation(self, name: str, params: Mapping[str, str]) -> None:
        if self._manipulator is None:
            return
        try:
            apply_operation(self._manipulator, name, params)
        except ImageManipulatorError as exc:
            self._show_error("Операция не выполнена", exc)
            return
        self._refresh(result=True)

    def _handle_zoom_fit(self) -> None:
        self.viewer.set_zoom_to_fit()
        self.bottom.set_zoom_percent(self.viewer.get_zoom_percent())

    # ---- Helpers ----
    def _refresh(self, result: bool) -> None:
        m = self._manipulator
        if result:
            self.viewer.set_processed_image(buffer_to_pil(m.get_image()))
        self.sidebar.set_image_info(m.source, m.get_width(), m.get_height(), m.get_type())

    def _show_error(self, title: str, exc: Exception) -> None:
        logger.warning("%s: %s", title, exc)
        messagebox.showerror(title, str(exc), parent=self.window)
