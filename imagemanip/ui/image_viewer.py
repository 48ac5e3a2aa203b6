"""Виджет просмотра: масштабирование, панорамирование и сравнение с оригиналом.

Принципы:
- SRP: отвечает только за представление и интеракции с изображением.
- Чистый код: чёткое разделение публичного API и внутренних обработчиков событий.
"""
from __future__ import annotations

from typing import Callable, Optional, Tuple

import customtkinter as ctk
import tkinter as tk
from PIL import Image, ImageTk

from imagemanip.services.codec_service import pil_pixel_to_color

GAP = 16


class ImageViewer(ctk.CTkFrame):
    """Канва «оригинал / результат» с режимом 2-up и просмотром оригинала по пробелу."""
    def __init__(self, master: ctk.CTk | tk.Misc, **kwargs) -> None:
        super().__init__(master, **kwargs)
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(0, weight=1)

        self._canvas = tk.Canvas(self, highlightthickness=0, bg=self._get_canvas_bg())
        self._canvas.grid(row=0, column=0, sticky="nsew")

        self._original_image: Optional[Image.Image] = None
        self._processed_image: Optional[Image.Image] = None
        self._tk_images: list[ImageTk.PhotoImage] = []

        self._scale_factor: float = 1.0
        self._top_left: Optional[Tuple[int, int]] = None
        self._pan_anchor: Optional[Tuple[int, int, int, int]] = None
        self._side_by_side: bool = False
        self._hold_original: bool = False

        self.on_cursor_move: Optional[Callable[[Optional[int], Optional[int], Optional[Tuple[int, ...]]], None]] = None
        self.on_zoom_change: Optional[Callable[[int], None]] = None

        self._canvas.bind("<Configure>", lambda _e: self._render_image())
        self._canvas.bind("<Motion>", self._on_mouse_move)
        self._canvas.bind("<Leave>", lambda _e: self._emit_cursor(None, None, None))
        self._canvas.bind("<MouseWheel>", self._on_mouse_wheel)      # Windows/macOS
        self._canvas.bind("<Button-4>", self._on_mouse_wheel)        # Linux scroll up
        self._canvas.bind("<Button-5>", self._on_mouse_wheel)        # Linux scroll down
        self._canvas.bind("<ButtonPress-1>", self._on_pan_start)
        self._canvas.bind("<B1-Motion>", self._on_pan_move)
        self._canvas.bind("<ButtonRelease-1>", lambda _e: setattr(self, "_pan_anchor", None))
        self._canvas.bind("<KeyPress-space>", lambda _e: self._set_hold_original(True))
        self._canvas.bind("<KeyRelease-space>", lambda _e: self._set_hold_original(False))

    # ---- Public API ----
    def set_image(self, image: Image.Image) -> None:
        """Устанавливает оригинал, сбрасывает результат и подгоняет масштаб."""
        self._original_image = image
        self._processed_image = None
        self.set_zoom_to_fit()

    def set_processed_image(self, image: Optional[Image.Image]) -> None:
        """Устанавливает результат обработки (может быть None) и перерисовывает виджет."""
        self._processed_image = image
        self._render_image()

    def set_zoom_to_fit(self) -> None:
        image = self._displayed_image()
        if image is None:
            return
        canvas_w = max(1, int(self._canvas.winfo_width()))
        canvas_h = max(1, int(self._canvas.winfo_height()))
        self._scale_factor = max(0.1, min(4.0, canvas_w / image.width, canvas_h / image.height))
        self._top_left = None
        self._render_image()

    def set_zoom_percent(self, zoom_percent: int) -> None:
        """Устанавливает масштаб в процентах (10–400%)."""
        self._scale_factor = max(0.1, min(4.0, zoom_percent / 100.0))
        self._render_image()

    def get_zoom_percent(self) -> int:
        return int(round(self._scale_factor * 100))

    def set_side_by_side(self, enabled: bool) -> None:
        self._side_by_side = enabled
        self._top_left = None
        self._render_image()

    # ---- Internals ----
    def _displayed_image(self) -> Optional[Image.Image]:
        if self._processed_image is not None and not self._hold_original:
            return self._processed_image
        return self._original_image

    def _scaled(self, image: Image.Image) -> Image.Image:
        size = (max(1, int(image.width * self._scale_factor)), max(1, int(image.height * self._scale_factor)))
        return image.resize(size, Image.Resampling.LANCZOS)

    def _render_image(self) -> None:
        self._canvas.delete("all")
        self._tk_images.clear()
        if self._original_image is None:
            return

        if self._side_by_side and self._processed_image is not None:
            frames = [self._scaled(self._original_image), self._scaled(self._processed_image)]
        else:
            frames = [self._scaled(self._displayed_image())]

        content_w = sum(f.width for f in frames) + GAP * (len(frames) - 1)
        content_h = max(f.height for f in frames)
        canvas_w = int(self._canvas.winfo_width())
        canvas_h = int(self._canvas.winfo_height())
        if self._top_left is None:
            self._top_left = (max(0, (canvas_w - content_w) // 2), max(0, (canvas_h - content_h) // 2))

        x, y = self._top_left
        for frame in frames:
            tk_image = ImageTk.PhotoImage(frame)
            self._tk_images.append(tk_image)
            self._canvas.create_image(x, y, image=tk_image, anchor="nw")
            x += frame.width + GAP

    def _on_mouse_move(self, event: tk.Event) -> None:
        image = self._displayed_image()
        if image is None or self._top_left is None:
            return
        ox, oy = self._top_left
        ix = int((event.x - ox) / self._scale_factor)
        iy = int((event.y - oy) / self._scale_factor)
        if 0 <= ix < image.width and 0 <= iy < image.height:
            color = pil_pixel_to_color(image.getpixel((ix, iy)), image.mode)
            self._emit_cursor(ix, iy, color.as_tuple())
        else:
            self._emit_cursor(None, None, None)

    def _emit_cursor(self, x: Optional[int], y: Optional[int], rgba: Optional[Tuple[int, ...]]) -> None:
        if self.on_cursor_move:
            self.on_cursor_move(x, y, rgba)

    def _get_canvas_bg(self) -> str:
        return "#1f1f1f" if ctk.get_appearance_mode().lower() == "dark" else "#f2f2f2"

    def _on_mouse_wheel(self, event: tk.Event) -> None:
        if self._original_image is None or self._top_left is None:
            return
        # On X11, Button-4 is up, Button-5 is down
        up = event.num == 4 if getattr(event, "num", None) in (4, 5) else event.delta > 0
        old_scale = self._scale_factor
        new_scale = max(0.1, min(4.0, old_scale * (1.1 if up else 1.0 / 1.1)))
        if abs(new_scale - old_scale) < 1e-6:
            return
        ox, oy = self._top_left
        # keep the point under the cursor fixed
        ix, iy = (event.x - ox) / old_scale, (event.y - oy) / old_scale
        self._scale_factor = new_scale
        self._top_left = (int(round(event.x - ix * new_scale)), int(round(event.y - iy * new_scale)))
        self._render_image()
        if self.on_zoom_change:
            self.on_zoom_change(self.get_zoom_percent())

    def _on_pan_start(self, event: tk.Event) -> None:
        if self._top_left is None:
            return
        self._canvas.focus_set()
        self._pan_anchor = (event.x, event.y, *self._top_left)

    def _on_pan_move(self, event: tk.Event) -> None:
        if self._pan_anchor is None:
            return
        sx, sy, ox, oy = self._pan_anchor
        self._top_left = (ox + event.x - sx, oy + event.y - sy)
        self._render_image()

    def _set_hold_original(self, active: bool) -> None:
        if self._side_by_side or self._hold_original == active:
            return
        self._hold_original = active
        self._render_image()
