"""Геометрические модели конвейера: кадр, целевой размер, сетка, формат вывода.

Принципы:
- SRP: структуры данных и их инварианты, без работы с пикселями.
- Чистый код: все модели неизменяемы (`frozen=True`), проверки явные и
  выбрасывают `InvalidGeometry`, ничего молча не подрезается.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from gridcutter.errors import InvalidGeometry

Number = Union[int, float]

DEFAULT_JPEG_QUALITY = 0.92


def round_half_up(value: float) -> int:
    """Округление с половиной вверх: 0.5 -> 1, 1.5 -> 2 (в отличие от `round`)."""
    return int(math.floor(value + 0.5))


def _is_positive_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


@dataclass(frozen=True)
class TargetSize:
    """Точный размер холста результата, px."""
    width: int
    height: int

    def validate(self) -> None:
        if not (_is_positive_int(self.width) and _is_positive_int(self.height)):
            raise InvalidGeometry(f"Целевой размер должен быть положительным: {self.width}x{self.height}")

    @property
    def aspect(self) -> float:
        return self.width / self.height

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height


@dataclass(frozen=True)
class CropRect:
    """Прямоугольник кадрирования в координатах исходного изображения.

    Допускает дробные значения (субпиксельный выбор мышью). Ядро не подрезает
    прямоугольник: вызывающий код обязан передать корректный кадр.
    """
    x: Number
    y: Number
    width: Number
    height: Number

    @property
    def box(self) -> Tuple[Number, Number, Number, Number]:
        """Кортеж (left, top, right, bottom) для PIL."""
        return self.x, self.y, self.x + self.width, self.y + self.height

    def validate(self, source_width: int, source_height: int) -> None:
        """Проверяет, что кадр целиком лежит внутри изображения `source_width × source_height`."""
        if not all(math.isfinite(v) for v in (self.x, self.y, self.width, self.height)):
            raise InvalidGeometry(f"Координаты кадра должны быть конечными числами: {self}")
        if self.width <= 0 or self.height <= 0:
            raise InvalidGeometry(f"Размер кадра должен быть положительным: {self}")
        if self.x < 0 or self.y < 0:
            raise InvalidGeometry(f"Кадр начинается за пределами изображения: {self}")
        if self.x + self.width > source_width or self.y + self.height > source_height:
            raise InvalidGeometry(
                f"Кадр выходит за пределы изображения {source_width}x{source_height}: {self}"
            )

    @classmethod
    def full(cls, width: int, height: int) -> "CropRect":
        return cls(0, 0, width, height)

    @classmethod
    def parse(cls, text: str) -> "CropRect":
        """Разбирает строку вида "X,Y,W,H"."""
        parts = [p.strip() for p in text.split(",")]
        if len(parts) != 4:
            raise InvalidGeometry(f"Ожидается X,Y,W,H, получено: {text!r}")
        try:
            x, y, w, h = (float(p) for p in parts)
        except ValueError as exc:
            raise InvalidGeometry(f"Нечисловые координаты кадра: {text!r}") from exc
        values = [int(v) if v.is_integer() else v for v in (x, y, w, h)]
        return cls(*values)


@dataclass(frozen=True)
class GridSpec:
    rows: int
    cols: int

    def validate(self) -> None:
        if not (_is_positive_int(self.rows) and _is_positive_int(self.cols)):
            raise InvalidGeometry(f"Число строк и столбцов должно быть положительным: {self.rows}x{self.cols}")

    @property
    def count(self) -> int:
        return self.rows * self.cols


@dataclass(frozen=True)
class CellRect:
    """Прямоугольник выборки одной ячейки сетки."""
    row: int
    col: int
    x: int
    y: int
    width: int
    height: int

    @property
    def box(self) -> Tuple[int, int, int, int]:
        return self.x, self.y, self.x + self.width, self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class OutputFormat:
    """Формат вывода: PNG без потерь или JPEG с качеством 0.0–1.0.

    JPEG не хранит прозрачность, поэтому такие растры всегда заливаются
    белым фоном перед отрисовкой.
    """
    lossy: bool
    quality: float = 1.0

    @classmethod
    def lossless(cls) -> "OutputFormat":
        return cls(lossy=False)

    @classmethod
    def jpeg(cls, quality: float = DEFAULT_JPEG_QUALITY) -> "OutputFormat":
        if not 0.0 < quality <= 1.0:
            raise ValueError(f"Качество JPEG должно быть в (0, 1]: {quality}")
        return cls(lossy=True, quality=quality)

    @classmethod
    def from_name(cls, name: str) -> "OutputFormat":
        """'png' | 'jpg' | 'jpeg' (без учёта регистра, допускается ведущая точка)."""
        key = name.strip().lower().lstrip(".")
        if key == "png":
            return cls.lossless()
        if key in ("jpg", "jpeg"):
            return cls.jpeg()
        raise ValueError(f"Неизвестный формат: {name!r}")

    @property
    def extension(self) -> str:
        return "jpg" if self.lossy else "png"

    @property
    def pil_format(self) -> str:
        return "JPEG" if self.lossy else "PNG"

    @property
    def mime_type(self) -> str:
        return "image/jpeg" if self.lossy else "image/png"

    @property
    def pil_quality(self) -> int:
        """Качество в шкале PIL (1–100)."""
        return max(1, min(100, round_half_up(self.quality * 100)))

    @property
    def label(self) -> str:
        return "JPG" if self.lossy else "PNG"


@dataclass(frozen=True)
class EncodedTile:
    """Закодированная ячейка сетки; порядок выдачи — построчный."""
    data: bytes
    row: int
    col: int


def centered_crop(
    source_width: int,
    source_height: int,
    target: TargetSize,
    zoom: float = 1.0,
    center: Optional[Tuple[float, float]] = None,
) -> CropRect:
    """Наибольший кадр с пропорциями `target`, уменьшенный в `zoom` раз.

    Кадр центрируется на `center` (по умолчанию центр изображения) и
    сдвигается так, чтобы целиком остаться внутри исходника. Координаты
    целочисленные, поэтому результат всегда проходит `CropRect.validate`.
    """
    target.validate()
    if source_width <= 0 or source_height <= 0:
        raise InvalidGeometry(f"Пустое изображение: {source_width}x{source_height}")
    if zoom < 1.0:
        raise InvalidGeometry(f"Масштаб кадра не может быть меньше 1: {zoom}")

    if source_width / source_height > target.aspect:
        base_w, base_h = source_height * target.aspect, float(source_height)
    else:
        base_w, base_h = float(source_width), source_width / target.aspect

    width = max(1, min(source_width, round_half_up(base_w / zoom)))
    height = max(1, min(source_height, round_half_up(base_h / zoom)))

    cx, cy = center if center is not None else (source_width / 2, source_height / 2)
    x = max(0, min(source_width - width, round_half_up(cx - width / 2)))
    y = max(0, min(source_height - height, round_half_up(cy - height / 2)))
    return CropRect(x, y, width, height)
