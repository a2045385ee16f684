"""Состояние мастера «загрузка → кадрирование → сетка».

Принципы:
- SRP: только переходы между шагами и данные, которые шаги передают друг другу.
- Переходы вперёд происходят по событиям (`image_loaded`, `crop_completed`),
  назад или на уже пройденный шаг — через `go_to`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

from PIL import Image

from gridcutter.config import get_defaults
from gridcutter.models.geometry import TargetSize
from gridcutter.models.image_model import ImageData


class Step(IntEnum):
    UPLOAD = 0
    CROP_RESIZE = 1
    GRID_SPLIT = 2

    @property
    def label(self) -> str:
        return _STEP_LABELS[self]


_STEP_LABELS = {
    Step.UPLOAD: "Загрузка",
    Step.CROP_RESIZE: "Кадрирование и размер",
    Step.GRID_SPLIT: "Нарезка сеткой",
}


def _default_target() -> TargetSize:
    defaults = get_defaults()
    return TargetSize(defaults.target_width, defaults.target_height)


@dataclass
class WizardState:
    """Текущий шаг, максимальный достигнутый шаг и данные между шагами."""
    current: Step = Step.UPLOAD
    max_reached: Step = Step.UPLOAD
    original: Optional[ImageData] = None
    processed: Optional[Image.Image] = None
    target: TargetSize = field(default_factory=_default_target)
    filename_prefix: str = field(default_factory=lambda: get_defaults().filename_prefix)

    def image_loaded(self, image: ImageData) -> None:
        # a new source invalidates any earlier crop result
        self.original = image
        self.processed = None
        self.current = Step.CROP_RESIZE
        self.max_reached = Step.CROP_RESIZE

    def crop_completed(self, processed: Image.Image, target: TargetSize, prefix: str) -> None:
        if self.original is None:
            raise ValueError("Кадрирование без исходного изображения")
        self.processed = processed
        self.target = target
        self.filename_prefix = prefix
        self.current = Step.GRID_SPLIT
        self.max_reached = Step.GRID_SPLIT

    def can_go_to(self, step: Step) -> bool:
        return step <= self.max_reached

    def go_to(self, step: Step) -> None:
        if not self.can_go_to(step):
            raise ValueError(f"Шаг {step.name} ещё недоступен")
        self.current = Step(step)

    def reset(self) -> None:
        """Возврат к загрузке; последние размеры и префикс сохраняются."""
        self.original = None
        self.processed = None
        self.current = Step.UPLOAD
        self.max_reached = Step.UPLOAD
