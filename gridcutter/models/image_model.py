"""Модели данных для изображений.

Принципы:
- SRP: только структура данных, без логики обработки.
- Чистый код: неизменяемость (`frozen=True`) для предсказуемости.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PIL import Image


@dataclass(frozen=True)
class ImageData:
    """Неизменяемая модель растра и его метаданные.

    Fields:
        pil_image: Изображение PIL (после декодирования всегда RGBA).
        width: Ширина, px.
        height: Высота, px.
        mode: Режим PIL, например "RGBA".
        source: Путь к исходному файлу, если растр загружен с диска.
        size_bytes: Размер исходных данных, если известен.
    """
    pil_image: Image.Image
    width: int
    height: int
    mode: str
    source: Optional[Path] = None
    size_bytes: Optional[int] = None

    @classmethod
    def from_image(
        cls,
        image: Image.Image,
        source: Optional[Path] = None,
        size_bytes: Optional[int] = None,
    ) -> "ImageData":
        width, height = image.size
        return cls(
            pil_image=image,
            width=width,
            height=height,
            mode=image.mode,
            source=source,
            size_bytes=size_bytes,
        )

    @property
    def display_name(self) -> str:
        return self.source.name if self.source is not None else "—"
