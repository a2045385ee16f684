"""Декодирование и кодирование растров.

Принципы:
- SRP: класс отвечает только за преобразование байтов/файлов в растр и обратно.
- OCP: новые источники (стрим, URL) можно добавить отдельными методами.
- LSP/ISP: возвращает `ImageData` с предсказуемыми полями; интерфейс узкий и конкретный.
"""
from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from gridcutter.config import get_defaults
from gridcutter.errors import DecodeFailure, EncodeFailure
from gridcutter.models.geometry import OutputFormat
from gridcutter.models.image_model import ImageData

logger = logging.getLogger(__name__)


class ImageService:
    def load_image(self, file_path: str | Path) -> ImageData:
        """Загружает изображение с диска и возвращает его вместе с метаданными.

        Args:
            file_path: Путь до файла изображения.

        Returns:
            `ImageData` c `PIL.Image.Image` (в режиме RGBA), размерами, режимом и размером файла.

        Raises:
            FileNotFoundError: если путь не существует или не указывает на файл.
            DecodeFailure: если файл не распознан как изображение.
        """
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"Файл не найден: {path}")

        try:
            with Image.open(path) as opened:
                pil_image = opened.convert("RGBA")
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
            raise DecodeFailure(f"Файл не является изображением: {path}") from exc

        try:
            size_bytes: Optional[int] = path.stat().st_size
        except OSError:
            size_bytes = None

        logger.info("Загружено %s (%dx%d)", path, pil_image.width, pil_image.height)
        return ImageData.from_image(pil_image, source=path, size_bytes=size_bytes)

    def decode_bytes(self, data: bytes) -> ImageData:
        """Декодирует байты JPEG/PNG/WEBP в RGBA-растр.

        Raises:
            DecodeFailure: если байты не являются изображением.
        """
        try:
            with Image.open(io.BytesIO(data)) as opened:
                pil_image = opened.convert("RGBA")
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
            raise DecodeFailure("Данные не являются изображением") from exc
        return ImageData.from_image(pil_image, size_bytes=len(data))

    def encode(self, image: Image.Image, fmt: OutputFormat) -> bytes:
        """Сериализует растр в PNG или JPEG.

        Для JPEG прозрачность заливается фоном, качество берётся из `fmt`.

        Raises:
            EncodeFailure: если PIL не смог сохранить изображение.
        """
        buffer = io.BytesIO()
        try:
            if fmt.lossy:
                flatten_on_background(image).save(buffer, format="JPEG", quality=fmt.pil_quality)
            else:
                image.save(buffer, format="PNG")
        except (OSError, ValueError) as exc:
            raise EncodeFailure(f"Не удалось сохранить {image.width}x{image.height} в {fmt.label}") from exc
        return buffer.getvalue()


def new_canvas(size: Tuple[int, int], fmt: OutputFormat) -> Image.Image:
    """Пустой холст под формат: белый RGB для JPEG, прозрачный RGBA для PNG."""
    if fmt.lossy:
        return Image.new("RGB", size, color=get_defaults().background)
    return Image.new("RGBA", size, color=(0, 0, 0, 0))


def flatten_on_background(image: Image.Image) -> Image.Image:
    """Накладывает изображение на белый фон и возвращает непрозрачный RGB.

    Полностью прозрачные пиксели становятся цветом фона. Исходник не меняется.
    """
    if image.mode == "RGB":
        return image.copy()
    rgba = image if image.mode == "RGBA" else image.convert("RGBA")
    background = Image.new("RGBA", rgba.size, color=get_defaults().background + (255,))
    return Image.alpha_composite(background, rgba).convert("RGB")
