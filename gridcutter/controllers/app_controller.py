"""Контроллер приложения: оркестрация UI, состояния мастера и сервисов.

SOLID:
- SRP: класс управляет связями между UI и сервисами (без логики обработки изображений).
- DIP: зависит от сервисов как от абстрактных ролей; конкретные реализации инкапсулированы.
Clean Code:
- Обработчики компактны; тяжёлая логика вынесена в сервисы.
- Долгие операции (масштабирование, нарезка) выполняются в фоновом потоке,
  результат возвращается в Tk через `after`.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from tkinter import filedialog, messagebox, TclError
from typing import Callable, TypeVar

import customtkinter as ctk
from PIL import Image

from gridcutter.errors import GridCutterError
from gridcutter.models.geometry import TargetSize
from gridcutter.models.wizard import Step, WizardState
from gridcutter.services.export_service import (
    ExportService,
    archive_name,
    sequence_name,
    single_export_name,
)
from gridcutter.services.grid_service import GridService
from gridcutter.services.image_service import ImageService
from gridcutter.services.resample_service import ResampleService
from gridcutter.ui.bottom_bar import BottomBar
from gridcutter.ui.crop_viewer import CropViewer
from gridcutter.ui.sidebar import Sidebar
from gridcutter.ui.step_indicator import StepIndicator

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class AppController:
    """Связывает элементы UI с прикладной логикой.

    Ответственности:
    - Инициализация и бинд событий (UI -> контроллер).
    - Переходы мастера через `WizardState`.
    - Кадрирование через `ResampleService`, нарезка через `GridService`, сохранение через `ExportService`.
    """
    steps: StepIndicator
    viewer: CropViewer
    sidebar: Sidebar
    bottom: BottomBar
    window: ctk.CTk

    _image_service: ImageService = field(default_factory=ImageService)
    _resample_service: ResampleService = field(default_factory=ResampleService)
    _grid_service: GridService = field(default_factory=GridService)
    _export_service: ExportService = field(default_factory=ExportService)
    _state: WizardState = field(default_factory=WizardState)
    _busy: bool = False

    def bind_events(self) -> None:
        """Регистрирует обработчики событий между UI-компонентами.

        Сохраняет слабую связность: компоненты UI ничего не знают друг о друге,
        общаются через контроллер.
        """
        self.steps.on_step_click = self._handle_step_click

        self.sidebar.on_open_file = self._handle_open_file
        self.sidebar.on_target_change = self._handle_target_change
        self.sidebar.on_download_single = self._handle_download_single
        self.sidebar.on_next = self._handle_next
        self.sidebar.on_grid_change = self._refresh_grid_preview
        self.sidebar.on_download_grid = self._handle_download_grid
        self.sidebar.on_reset = self._handle_reset

        self.viewer.on_crop_zoom_change = self.bottom.set_crop_zoom
        self.bottom.on_crop_zoom_change = self.viewer.set_crop_zoom

        self._sync_step()

    # ---- Handlers ----
    def _handle_open_file(self) -> None:
        try:
            file_path = filedialog.askopenfilename(
                title="Выберите изображение",
                filetypes=(
                    ("Images", "*.png *.jpg *.jpeg *.webp"),
                    ("All files", "*.*"),
                ),
            )
        except TclError:
            # Silent fail if dialog cannot open
            return

        if not file_path:
            return

        try:
            image_data = self._image_service.load_image(file_path)
        except (GridCutterError, FileNotFoundError) as exc:
            self._show_error("Не удалось открыть изображение", exc)
            return

        self._state.image_loaded(image_data)
        self.sidebar.set_image_info(image_data)
        _prefix, target, _fmt = self.sidebar.get_crop_settings()
        self.viewer.set_target(target)
        self.viewer.set_image(image_data.pil_image)
        self.bottom.set_crop_zoom(self.viewer.get_crop_zoom())
        self._sync_step()

    def _handle_step_click(self, step: Step) -> None:
        if self._busy or not self._state.can_go_to(step):
            return
        self._state.go_to(step)
        if step == Step.CROP_RESIZE and self._state.original is not None:
            self.viewer.set_image(self._state.original.pil_image)
            self.bottom.set_crop_zoom(self.viewer.get_crop_zoom())
        self._sync_step()

    def _handle_target_change(self, target: TargetSize) -> None:
        self.viewer.set_target(target)

    def _handle_download_single(self) -> None:
        prefix, target, fmt = self.sidebar.get_crop_settings()
        crop = self.viewer.get_crop()
        if crop is None or self._state.original is None:
            return
        try:
            path = filedialog.asksaveasfilename(
                title="Сохранить изображение",
                initialfile=single_export_name(prefix, target, fmt),
                defaultextension=f".{fmt.extension}",
            )
        except TclError:
            return
        if not path:
            return

        source = self._state.original.pil_image

        def work() -> Path:
            processed = self._resample_service.resample(source, crop, target, fmt)
            data = self._image_service.encode(processed, fmt)
            out = Path(path)
            out.write_bytes(data)
            return out

        self._run_in_background("Обработка изображения…", work, self._on_file_saved)

    def _handle_next(self) -> None:
        prefix, target, fmt = self.sidebar.get_crop_settings()
        crop = self.viewer.get_crop()
        if crop is None or self._state.original is None:
            return
        source = self._state.original.pil_image

        def work() -> Image.Image:
            return self._resample_service.resample(source, crop, target, fmt)

        def done(processed: Image.Image) -> None:
            self._state.crop_completed(processed, target, prefix)
            self.sidebar.set_grid_prefix(prefix)
            self.bottom.set_status(f"Кадр готов: {target.width}×{target.height}")
            self._sync_step()

        self._run_in_background("Кадрирование…", work, done)

    def _handle_download_grid(self) -> None:
        processed = self._state.processed
        if processed is None:
            return
        prefix, spec, fmt = self.sidebar.get_grid_settings()
        try:
            path = filedialog.asksaveasfilename(
                title="Сохранить нарезку",
                initialfile=archive_name(prefix, spec),
                defaultextension=".zip",
                filetypes=(("ZIP", "*.zip"),),
            )
        except TclError:
            return
        if not path:
            return

        def work() -> Path:
            tiles = self._grid_service.split_grid(processed, spec, fmt)
            out = Path(path)
            out.write_bytes(self._export_service.build_archive(tiles, prefix, fmt))
            return out

        self._run_in_background(f"Нарезка {spec.rows}×{spec.cols}…", work, self._on_file_saved)

    def _handle_reset(self) -> None:
        if self._busy:
            return
        self._state.reset()
        self.viewer.clear()
        self.sidebar.clear_image_info()
        self.bottom.set_status("Откройте изображение, чтобы начать")
        self._sync_step()

    # ---- Helpers ----
    def _sync_step(self) -> None:
        """Приводит индикатор шагов, панели и канву к текущему шагу мастера."""
        step = self._state.current
        self.steps.set_state(step, self._state.max_reached)
        self.sidebar.set_step(step)
        self.bottom.set_zoom_enabled(step == Step.CROP_RESIZE)
        if step == Step.GRID_SPLIT:
            self._refresh_grid_preview()

    def _refresh_grid_preview(self) -> None:
        processed = self._state.processed
        if processed is None or self._state.current != Step.GRID_SPLIT:
            return
        prefix, spec, fmt = self.sidebar.get_grid_settings()
        first = sequence_name(prefix, 1, spec.count)
        last = sequence_name(prefix, spec.count, spec.count)
        self.sidebar.set_grid_preview_text(f"{first}.{fmt.extension}", f"{last}.{fmt.extension}", spec.count)
        self.viewer.set_grid_preview(processed, spec.rows, spec.cols, first, last)

    def _run_in_background(self, status: str, work: Callable[[], T], on_done: Callable[[T], None]) -> None:
        """Выполняет `work` в фоновом потоке и передаёт результат в `on_done` в потоке Tk."""
        if self._busy:
            return
        self._set_busy(True, status)

        def execute() -> None:
            try:
                result = work()
            except Exception as exc:  # any failure must release the busy state
                self.window.after(0, lambda error=exc: self._on_failed(error))
                return
            self.window.after(0, lambda: self._on_succeeded(on_done, result))

        threading.Thread(target=execute, daemon=True).start()

    def _on_succeeded(self, on_done: Callable[[T], None], result: T) -> None:
        self._set_busy(False, "Готово")
        on_done(result)

    def _on_failed(self, exc: Exception) -> None:
        self._set_busy(False, "Ошибка")
        self._show_error("Не удалось обработать изображение", exc)

    def _on_file_saved(self, path: Path) -> None:
        self.bottom.set_status(f"Сохранено: {path.name}")

    def _set_busy(self, busy: bool, status: str) -> None:
        self._busy = busy
        self.sidebar.set_busy(busy)
        self.bottom.set_status(status)

    def _show_error(self, title: str, exc: Exception) -> None:
        logger.error("%s: %s", title, exc, exc_info=exc)
        messagebox.showerror(title, str(exc), parent=self.window)
