"""Виджет просмотра: рамка кадрирования с фиксированными пропорциями и превью сетки.

Принципы:
- SRP: отвечает только за представление и интеракции с изображением.
- Геометрия кадра считается `centered_crop`, поэтому рамка всегда лежит внутри изображения.
"""
from __future__ import annotations

from typing import Callable, Optional, Tuple

import customtkinter as ctk
import tkinter as tk
from PIL import Image, ImageTk

from gridcutter.config import get_defaults
from gridcutter.models.geometry import CropRect, TargetSize, centered_crop

_CROP_COLOR = "#4f46e5"
_GRID_COLOR = "#818cf8"


class CropViewer(ctk.CTkFrame):
    """Канва с двумя режимами: «crop» (рамка кадра) и «grid» (линии сетки поверх результата)."""
    def __init__(self, master: ctk.CTk | tk.Misc, **kwargs) -> None:
        super().__init__(master, **kwargs)
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(0, weight=1)

        self._canvas = tk.Canvas(self, highlightthickness=0, bg=self._get_canvas_bg())
        self._canvas.grid(row=0, column=0, sticky="nsew")

        self._image: Optional[Image.Image] = None
        self._tk_image: Optional[ImageTk.PhotoImage] = None
        self._scale_factor: float = 1.0
        self._image_top_left: Tuple[int, int] = (0, 0)

        # "crop" | "grid"
        self._mode: str = "crop"

        # crop state, in source pixels
        self._target: TargetSize = TargetSize(get_defaults().target_width, get_defaults().target_height)
        self._crop_zoom: float = 1.0
        self._crop_center: Optional[Tuple[float, float]] = None

        # drag state
        self._drag_start_canvas_xy: Optional[Tuple[int, int]] = None
        self._drag_start_center: Optional[Tuple[float, float]] = None

        # grid preview state
        self._rows: int = 1
        self._cols: int = 1
        self._first_label: str = ""
        self._last_label: str = ""

        self.on_crop_zoom_change: Optional[Callable[[float], None]] = None

        self._canvas.bind("<Configure>", self._on_canvas_resize)

        # Mouse wheel zoom (cross-platform)
        self._canvas.bind("<MouseWheel>", self._on_mouse_wheel)      # Windows/macOS
        self._canvas.bind("<Button-4>", self._on_mouse_wheel_linux)  # Linux scroll up
        self._canvas.bind("<Button-5>", self._on_mouse_wheel_linux)  # Linux scroll down

        # Drag the crop frame with left mouse button
        self._canvas.bind("<ButtonPress-1>", self._on_drag_start)
        self._canvas.bind("<B1-Motion>", self._on_drag_move)
        self._canvas.bind("<ButtonRelease-1>", self._on_drag_end)

    # ---- Public API ----
    def set_image(self, image: Image.Image) -> None:
        """Показывает исходник в режиме кадрирования и сбрасывает рамку в центр."""
        self._mode = "crop"
        self._image = image
        self._crop_zoom = 1.0
        self._crop_center = None
        self._render()

    def set_target(self, target: TargetSize) -> None:
        """Меняет пропорции рамки под новый целевой размер."""
        self._target = target
        self._render()

    def set_crop_zoom(self, zoom: float) -> None:
        defaults = get_defaults()
        self._crop_zoom = max(defaults.min_crop_zoom, min(defaults.max_crop_zoom, zoom))
        self._render()

    def get_crop_zoom(self) -> float:
        return self._crop_zoom

    def get_crop(self) -> Optional[CropRect]:
        """Текущий кадр в пикселях исходника или None, если изображения нет."""
        if self._image is None or self._mode != "crop":
            return None
        return centered_crop(self._image.width, self._image.height, self._target,
                             zoom=self._crop_zoom, center=self._crop_center)

    def set_grid_preview(self, image: Image.Image, rows: int, cols: int, first_label: str, last_label: str) -> None:
        """Показывает результат кадрирования с линиями сетки и подписями первой/последней ячейки."""
        self._mode = "grid"
        self._image = image
        self._rows, self._cols = max(1, rows), max(1, cols)
        self._first_label, self._last_label = first_label, last_label
        self._render()

    def clear(self) -> None:
        self._image = None
        self._tk_image = None
        self._canvas.delete("all")

    # ---- Internals ----
    def _on_canvas_resize(self, _event: tk.Event) -> None:
        self._render()

    def _render(self) -> None:
        self._canvas.delete("all")
        if self._image is None:
            return

        self._compute_fit_scale()
        canvas_w = int(self._canvas.winfo_width())
        canvas_h = int(self._canvas.winfo_height())
        img_w, img_h = self._image.size
        scaled_w = max(1, int(img_w * self._scale_factor))
        scaled_h = max(1, int(img_h * self._scale_factor))

        resized = self._image.resize((scaled_w, scaled_h), Image.Resampling.LANCZOS)
        ox = (canvas_w - scaled_w) // 2
        oy = (canvas_h - scaled_h) // 2
        self._image_top_left = (ox, oy)

        self._tk_image = ImageTk.PhotoImage(resized)
        self._canvas.create_image(ox, oy, image=self._tk_image, anchor="nw")

        if self._mode == "crop":
            self._draw_crop_frame()
        else:
            self._draw_grid_overlay(ox, oy, scaled_w, scaled_h)

    def _draw_crop_frame(self) -> None:
        crop = self.get_crop()
        if crop is None:
            return
        x0, y0 = self._image_to_canvas(crop.x, crop.y)
        x1, y1 = self._image_to_canvas(crop.x + crop.width, crop.y + crop.height)
        # dim everything outside the frame
        ix0, iy0 = self._image_to_canvas(0, 0)
        ix1, iy1 = self._image_to_canvas(self._image.width, self._image.height)
        for rect in ((ix0, iy0, ix1, y0), (ix0, y1, ix1, iy1), (ix0, y0, x0, y1), (x1, y0, ix1, y1)):
            self._canvas.create_rectangle(*rect, fill="black", stipple="gray50", width=0)
        self._canvas.create_rectangle(x0, y0, x1, y1, outline=_CROP_COLOR, width=2)
        # rule-of-thirds guides
        for i in (1, 2):
            gx = x0 + (x1 - x0) * i / 3
            gy = y0 + (y1 - y0) * i / 3
            self._canvas.create_line(gx, y0, gx, y1, fill="white", dash=(2, 4))
            self._canvas.create_line(x0, gy, x1, gy, fill="white", dash=(2, 4))

    def _draw_grid_overlay(self, ox: int, oy: int, scaled_w: int, scaled_h: int) -> None:
        self._canvas.create_rectangle(ox, oy, ox + scaled_w, oy + scaled_h, outline=_GRID_COLOR)
        for i in range(1, self._rows):
            y = oy + scaled_h * i / self._rows
            self._canvas.create_line(ox, y, ox + scaled_w, y, fill=_GRID_COLOR)
        for i in range(1, self._cols):
            x = ox + scaled_w * i / self._cols
            self._canvas.create_line(x, oy, x, oy + scaled_h, fill=_GRID_COLOR)
        self._draw_badge(ox + 6, oy + 6, self._first_label, anchor="nw")
        self._draw_badge(ox + scaled_w - 6, oy + scaled_h - 6, self._last_label, anchor="se")

    def _draw_badge(self, x: int, y: int, text: str, anchor: str) -> None:
        if not text:
            return
        item = self._canvas.create_text(x, y, text=text, fill="white", anchor=anchor)
        bbox = self._canvas.bbox(item)
        if bbox:
            bg = self._canvas.create_rectangle(bbox[0] - 4, bbox[1] - 2, bbox[2] + 4, bbox[3] + 2, fill="black", width=0)
            self._canvas.tag_lower(bg, item)

    def _compute_fit_scale(self) -> None:
        if self._image is None:
            self._scale_factor = 1.0
            return
        canvas_w = max(1, int(self._canvas.winfo_width()))
        canvas_h = max(1, int(self._canvas.winfo_height()))
        img_w, img_h = self._image.size
        if img_w == 0 or img_h == 0:
            self._scale_factor = 1.0
            return
        self._scale_factor = max(0.01, min(canvas_w / img_w, canvas_h / img_h))

    def _image_to_canvas(self, x: float, y: float) -> Tuple[float, float]:
        ox, oy = self._image_top_left
        return ox + x * self._scale_factor, oy + y * self._scale_factor

    def _get_canvas_bg(self) -> str:
        # CTk does not expose canvas theme, so pick neutral
        return "#1f1f1f" if ctk.get_appearance_mode().lower() == "dark" else "#f2f2f2"

    # ---- Mouse wheel zoom ----
    def _on_mouse_wheel(self, event: tk.Event) -> None:
        if event.delta == 0:
            return
        self._zoom_crop(1.1 if event.delta > 0 else 1.0 / 1.1)

    def _on_mouse_wheel_linux(self, event: tk.Event) -> None:
        # On X11, Button-4 is up, Button-5 is down
        self._zoom_crop(1.1 if getattr(event, "num", None) == 4 else 1.0 / 1.1)

    def _zoom_crop(self, factor: float) -> None:
        if self._image is None or self._mode != "crop":
            return
        old_zoom = self._crop_zoom
        self.set_crop_zoom(old_zoom * factor)
        if abs(self._crop_zoom - old_zoom) > 1e-6 and self.on_crop_zoom_change:
            self.on_crop_zoom_change(self._crop_zoom)

    # ---- Dragging ----
    def _on_drag_start(self, event: tk.Event) -> None:
        crop = self.get_crop()
        if crop is None:
            return
        self._drag_start_canvas_xy = (event.x, event.y)
        self._drag_start_center = (crop.x + crop.width / 2, crop.y + crop.height / 2)

    def _on_drag_move(self, event: tk.Event) -> None:
        if self._drag_start_canvas_xy is None or self._drag_start_center is None or self._image is None:
            return
        sx, sy = self._drag_start_canvas_xy
        cx, cy = self._drag_start_center
        dx = (event.x - sx) / self._scale_factor
        dy = (event.y - sy) / self._scale_factor
        # store the clamped center so the frame does not "stick" past the edge
        crop = centered_crop(self._image.width, self._image.height, self._target,
                             zoom=self._crop_zoom, center=(cx + dx, cy + dy))
        self._crop_center = (crop.x + crop.width / 2, crop.y + crop.height / 2)
        self._render()

    def _on_drag_end(self, _event: tk.Event) -> None:
        self._drag_start_canvas_xy = None
        self._drag_start_center = None
