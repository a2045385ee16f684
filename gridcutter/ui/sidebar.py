"""Боковая панель: открытие файла, информация, параметры кадрирования и сетки.

Принципы:
- SRP: управляет только UI параметров, не содержит алгоритмов.
- ISP: выдаёт параметры через компактные методы `get_*`, события через `on_*`.
"""
from __future__ import annotations

from typing import Callable, Optional, Tuple

import customtkinter as ctk

from gridcutter.config import clamp, get_defaults
from gridcutter.models.geometry import GridSpec, OutputFormat, TargetSize
from gridcutter.models.image_model import ImageData
from gridcutter.models.wizard import Step


def _format_size(size_bytes: Optional[int]) -> str:
    if size_bytes is None:
        return "—"
    if size_bytes < 1024:
        return f"{size_bytes} Б"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} КБ"
    return f"{size_bytes / (1024 * 1024):.1f} МБ"


class Sidebar(ctk.CTkFrame):
    """Панель инструментов с блоками: файл, информация, кадрирование, сетка."""
    def __init__(self, master: ctk.CTk, **kwargs) -> None:
        super().__init__(master, width=300, **kwargs)

        self.grid_columnconfigure(0, weight=1)
        defaults = get_defaults()

        # Callbacks
        self.on_open_file: Optional[Callable[[], None]] = None
        self.on_target_change: Optional[Callable[[TargetSize], None]] = None
        self.on_download_single: Optional[Callable[[], None]] = None
        self.on_next: Optional[Callable[[], None]] = None
        self.on_grid_change: Optional[Callable[[], None]] = None
        self.on_download_grid: Optional[Callable[[], None]] = None
        self.on_reset: Optional[Callable[[], None]] = None

        # last valid values, used when an entry holds garbage
        self._target = TargetSize(defaults.target_width, defaults.target_height)
        self._grid = GridSpec(defaults.rows, defaults.cols)

        # Controls
        self._title = ctk.CTkLabel(self, text="Инструменты", font=ctk.CTkFont(size=16, weight="bold"))
        self._title.grid(row=0, column=0, padx=8, pady=(8, 4), sticky="w")

        self._open_btn = ctk.CTkButton(self, text="Открыть изображение…", command=self._emit(lambda: self.on_open_file))
        self._open_btn.grid(row=1, column=0, padx=8, pady=(0, 12), sticky="ew")

        # Info section
        self._info_title = ctk.CTkLabel(self, text="Информация", font=ctk.CTkFont(size=16, weight="bold"))
        self._info_title.grid(row=2, column=0, padx=8, pady=(8, 4), sticky="w")

        self._path_val = ctk.StringVar(value="—")
        self._size_val = ctk.StringVar(value="—")
        self._dims_val = ctk.StringVar(value="—")

        self._info_path = ctk.CTkLabel(self, textvariable=self._path_val, wraplength=270, anchor="w", justify="left")
        self._info_size = ctk.CTkLabel(self, textvariable=self._size_val, anchor="w", justify="left")
        self._info_dims = ctk.CTkLabel(self, textvariable=self._dims_val, anchor="w", justify="left")

        self._info_path.grid(row=3, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._info_size.grid(row=4, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._info_dims.grid(row=5, column=0, padx=8, pady=(0, 10), sticky="ew")

        # filler
        self.grid_rowconfigure(99, weight=1)

        self._crop_panel = self._build_crop_panel(defaults.filename_prefix)
        self._grid_panel = self._build_grid_panel(defaults.filename_prefix)
        self.set_step(Step.UPLOAD)

    # ---- Panels ----
    def _build_crop_panel(self, prefix: str) -> ctk.CTkFrame:
        panel = ctk.CTkFrame(self)
        panel.grid_columnconfigure((0, 1), weight=1)

        title = ctk.CTkLabel(panel, text="Параметры вывода", font=ctk.CTkFont(size=16, weight="bold"))
        title.grid(row=0, column=0, columnspan=2, padx=6, pady=(6, 4), sticky="w")

        ctk.CTkLabel(panel, text="Префикс имени файла:").grid(row=1, column=0, columnspan=2, padx=6, sticky="w")
        self._crop_prefix = ctk.StringVar(value=prefix)
        ctk.CTkEntry(panel, textvariable=self._crop_prefix).grid(
            row=2, column=0, columnspan=2, padx=6, pady=(0, 6), sticky="ew"
        )

        ctk.CTkLabel(panel, text="Ширина, px:").grid(row=3, column=0, padx=6, sticky="w")
        ctk.CTkLabel(panel, text="Высота, px:").grid(row=3, column=1, padx=6, sticky="w")
        self._width_val = ctk.StringVar(value=str(self._target.width))
        self._height_val = ctk.StringVar(value=str(self._target.height))
        width_entry = ctk.CTkEntry(panel, textvariable=self._width_val, width=90)
        height_entry = ctk.CTkEntry(panel, textvariable=self._height_val, width=90)
        width_entry.grid(row=4, column=0, padx=6, pady=(0, 6), sticky="ew")
        height_entry.grid(row=4, column=1, padx=6, pady=(0, 6), sticky="ew")
        for entry in (width_entry, height_entry):
            entry.bind("<FocusOut>", self._on_target_commit)
            entry.bind("<Return>", self._on_target_commit)

        ctk.CTkLabel(panel, text="Формат:").grid(row=5, column=0, columnspan=2, padx=6, sticky="w")
        self._crop_format = ctk.CTkSegmentedButton(panel, values=["PNG", "JPG"])
        self._crop_format.set("JPG")
        self._crop_format.grid(row=6, column=0, columnspan=2, padx=6, pady=(0, 6), sticky="ew")

        self._aspect_hint = ctk.StringVar()
        ctk.CTkLabel(panel, textvariable=self._aspect_hint, wraplength=260, justify="left", anchor="w").grid(
            row=7, column=0, columnspan=2, padx=6, pady=(0, 6), sticky="ew"
        )
        self._update_aspect_hint()

        self._download_single_btn = ctk.CTkButton(
            panel, text="Скачать текущее изображение", command=self._emit(lambda: self.on_download_single)
        )
        self._download_single_btn.grid(row=8, column=0, columnspan=2, padx=6, pady=(6, 4), sticky="ew")
        self._next_btn = ctk.CTkButton(panel, text="Далее: нарезка сеткой →", command=self._emit(lambda: self.on_next))
        self._next_btn.grid(row=9, column=0, columnspan=2, padx=6, pady=(0, 8), sticky="ew")
        return panel

    def _build_grid_panel(self, prefix: str) -> ctk.CTkFrame:
        panel = ctk.CTkFrame(self)
        panel.grid_columnconfigure((0, 1), weight=1)

        title = ctk.CTkLabel(panel, text="Параметры сетки", font=ctk.CTkFont(size=16, weight="bold"))
        title.grid(row=0, column=0, columnspan=2, padx=6, pady=(6, 4), sticky="w")

        ctk.CTkLabel(panel, text="Префикс имён ячеек:").grid(row=1, column=0, columnspan=2, padx=6, sticky="w")
        self._grid_prefix = ctk.StringVar(value=prefix)
        prefix_entry = ctk.CTkEntry(panel, textvariable=self._grid_prefix)
        prefix_entry.grid(row=2, column=0, columnspan=2, padx=6, pady=(0, 6), sticky="ew")
        prefix_entry.bind("<KeyRelease>", self._on_grid_commit)

        ctk.CTkLabel(panel, text="Строк:").grid(row=3, column=0, padx=6, sticky="w")
        ctk.CTkLabel(panel, text="Столбцов:").grid(row=3, column=1, padx=6, sticky="w")
        self._rows_val = ctk.StringVar(value=str(self._grid.rows))
        self._cols_val = ctk.StringVar(value=str(self._grid.cols))
        rows_entry = ctk.CTkEntry(panel, textvariable=self._rows_val, width=90)
        cols_entry = ctk.CTkEntry(panel, textvariable=self._cols_val, width=90)
        rows_entry.grid(row=4, column=0, padx=6, pady=(0, 6), sticky="ew")
        cols_entry.grid(row=4, column=1, padx=6, pady=(0, 6), sticky="ew")
        for entry in (rows_entry, cols_entry):
            entry.bind("<FocusOut>", self._on_grid_commit)
            entry.bind("<Return>", self._on_grid_commit)

        ctk.CTkLabel(panel, text="Формат:").grid(row=5, column=0, columnspan=2, padx=6, sticky="w")
        self._grid_format = ctk.CTkSegmentedButton(
            panel, values=["PNG", "JPG"], command=lambda _v: self._on_grid_commit()
        )
        self._grid_format.set("JPG")
        self._grid_format.grid(row=6, column=0, columnspan=2, padx=6, pady=(0, 6), sticky="ew")

        self._names_preview = ctk.StringVar(value="—")
        self._count_preview = ctk.StringVar(value="—")
        ctk.CTkLabel(panel, textvariable=self._names_preview, wraplength=260, justify="left", anchor="w").grid(
            row=7, column=0, columnspan=2, padx=6, sticky="ew"
        )
        ctk.CTkLabel(panel, textvariable=self._count_preview, anchor="w").grid(
            row=8, column=0, columnspan=2, padx=6, pady=(0, 6), sticky="ew"
        )

        self._download_grid_btn = ctk.CTkButton(
            panel, text="Скачать нарезку (.zip)", command=self._emit(lambda: self.on_download_grid)
        )
        self._download_grid_btn.grid(row=9, column=0, columnspan=2, padx=6, pady=(6, 4), sticky="ew")
        self._reset_btn = ctk.CTkButton(
            panel, text="Начать заново", fg_color="transparent", border_width=1,
            command=self._emit(lambda: self.on_reset),
        )
        self._reset_btn.grid(row=10, column=0, columnspan=2, padx=6, pady=(0, 8), sticky="ew")
        return panel

    # ---- Public API ----
    def set_step(self, step: Step) -> None:
        """Показывает панель параметров, соответствующую шагу мастера."""
        self._crop_panel.grid_remove()
        self._grid_panel.grid_remove()
        if step == Step.CROP_RESIZE:
            self._crop_panel.grid(row=20, column=0, padx=8, pady=(0, 8), sticky="new")
        elif step == Step.GRID_SPLIT:
            self._grid_panel.grid(row=20, column=0, padx=8, pady=(0, 8), sticky="new")

    def set_image_info(self, image_data: ImageData) -> None:
        self._path_val.set(f"Файл: {image_data.display_name}")
        self._size_val.set(f"Размер файла: {_format_size(image_data.size_bytes)}")
        self._dims_val.set(f"Разрешение: {image_data.width}×{image_data.height}")

    def clear_image_info(self) -> None:
        for var in (self._path_val, self._size_val, self._dims_val):
            var.set("—")

    def set_grid_prefix(self, prefix: str) -> None:
        self._grid_prefix.set(prefix)

    def set_grid_preview_text(self, first_name: str, last_name: str, count: int) -> None:
        self._names_preview.set(f"Имена: {first_name} … {last_name}")
        self._count_preview.set(f"Будет создано файлов: {count}")

    def set_busy(self, busy: bool) -> None:
        state = "disabled" if busy else "normal"
        for btn in (self._open_btn, self._download_single_btn, self._next_btn, self._download_grid_btn, self._reset_btn):
            btn.configure(state=state)

    def get_crop_settings(self) -> Tuple[str, TargetSize, OutputFormat]:
        self._commit_target()
        return self._crop_prefix.get(), self._target, OutputFormat.from_name(self._crop_format.get())

    def get_grid_settings(self) -> Tuple[str, GridSpec, OutputFormat]:
        self._commit_grid()
        return self._grid_prefix.get(), self._grid, OutputFormat.from_name(self._grid_format.get())

    # ---- Events ----
    def _emit(self, getter: Callable[[], Optional[Callable[[], None]]]) -> Callable[[], None]:
        def handler() -> None:
            callback = getter()
            if callback:
                callback()
        return handler

    def _on_target_commit(self, _event=None) -> None:
        previous = self._target
        self._commit_target()
        if self._target != previous and self.on_target_change:
            self.on_target_change(self._target)

    def _on_grid_commit(self, _event=None) -> None:
        self._commit_grid()
        if self.on_grid_change:
            self.on_grid_change()

    # ---- Helpers ----
    def _commit_target(self) -> None:
        defaults = get_defaults()
        width = self._read_int(self._width_val, self._target.width, defaults.min_target_side, defaults.max_target_side)
        height = self._read_int(self._height_val, self._target.height, defaults.min_target_side, defaults.max_target_side)
        self._target = TargetSize(width, height)
        self._update_aspect_hint()

    def _commit_grid(self) -> None:
        defaults = get_defaults()
        rows = self._read_int(self._rows_val, self._grid.rows, defaults.min_grid_side, defaults.max_grid_side)
        cols = self._read_int(self._cols_val, self._grid.cols, defaults.min_grid_side, defaults.max_grid_side)
        self._grid = GridSpec(rows, cols)

    def _read_int(self, var: ctk.StringVar, fallback: int, low: int, high: int) -> int:
        try:
            value = clamp(int(var.get().strip()), low, high)
        except ValueError:
            value = fallback
        var.set(str(value))
        return value

    def _update_aspect_hint(self) -> None:
        w, h = self._target.width, self._target.height
        self._aspect_hint.set(
            f"Рамка зафиксирована в пропорции {w}:{h}. Результат будет ровно {w}×{h} px."
        )
