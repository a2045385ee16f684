from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from gridcutter.config import get_defaults


class BottomBar(ctk.CTkFrame):
    def __init__(self, master: ctk.CTk, **kwargs) -> None:
        super().__init__(master, height=48, **kwargs)

        # callbacks
        self.on_crop_zoom_change: Optional[Callable[[float], None]] = None

        # layout
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(1, weight=1)  # slider stretches
        self.grid_columnconfigure(3, weight=0)

        defaults = get_defaults()

        # Crop zoom controls
        self._zoom_label = ctk.CTkLabel(self, text="Масштаб кадра")
        self._zoom_label.grid(row=0, column=0, padx=(10, 6), pady=8, sticky="w")

        self._zoom_value = ctk.StringVar(value="1.0×")
        self._zoom_slider = ctk.CTkSlider(
            self,
            from_=defaults.min_crop_zoom,
            to=defaults.max_crop_zoom,
            number_of_steps=int(round((defaults.max_crop_zoom - defaults.min_crop_zoom) * 10)),
            command=self._on_slider_change,
        )
        self._zoom_slider.set(defaults.min_crop_zoom)
        self._zoom_slider.grid(row=0, column=1, padx=6, pady=8, sticky="ew")
        self._zoom_value_label = ctk.CTkLabel(self, textvariable=self._zoom_value, width=48, anchor="w")
        self._zoom_value_label.grid(row=0, column=2, padx=(6, 12), pady=8, sticky="w")

        # Status
        self._status = ctk.StringVar(value="Откройте изображение, чтобы начать")
        self._status_label = ctk.CTkLabel(self, textvariable=self._status, anchor="e")
        self._status_label.grid(row=0, column=3, padx=(6, 12), pady=8, sticky="e")

    # public API (sync from controller)
    def set_crop_zoom(self, zoom: float) -> None:
        self._zoom_slider.set(zoom)
        self._zoom_value.set(f"{zoom:.1f}×")

    def set_zoom_enabled(self, enabled: bool) -> None:
        self._zoom_slider.configure(state="normal" if enabled else "disabled")

    def set_status(self, text: str) -> None:
        self._status.set(text)

    # events
    def _on_slider_change(self, value: float) -> None:
        zoom = round(float(value), 1)
        self._zoom_value.set(f"{zoom:.1f}×")
        if self.on_crop_zoom_change:
            self.on_crop_zoom_change(zoom)
