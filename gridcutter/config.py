"""Значения по умолчанию и ограничения полей ввода.

Конфигурация не читается из окружения: всё, что нужно ядру, передаётся
явными аргументами, а здесь лишь собраны стартовые значения для UI и CLI.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class Defaults:
    target_width: int = 812
    target_height: int = 1421
    filename_prefix: str = "grid_image"
    rows: int = 7
    cols: int = 4
    jpeg_quality: float = 0.92
    background: Tuple[int, int, int] = (255, 255, 255)

    # UI limits
    min_target_side: int = 10
    max_target_side: int = 10000
    min_grid_side: int = 1
    max_grid_side: int = 50
    min_crop_zoom: float = 1.0
    max_crop_zoom: float = 3.0


_DEFAULTS = Defaults()


def get_defaults() -> Defaults:
    return _DEFAULTS


def clamp(value: int, low: int, high: int) -> int:
    """Ограничивает значение поля ввода диапазоном [low, high]."""
    return max(low, min(high, value))


def setup_logging(level: int = logging.INFO) -> None:
    """Настраивает корневой логгер для GUI и CLI."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
