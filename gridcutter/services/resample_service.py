"""Кадрирование с масштабированием до точного целевого размера.

Принципы:
- SRP: только перенос области кадра на холст заданного размера.
- Чистый код: исходное изображение не изменяется, всегда возвращается новый растр.
"""
from __future__ import annotations

import logging
import math

from PIL import Image

from gridcutter.models.geometry import CropRect, OutputFormat, TargetSize
from gridcutter.services.image_service import new_canvas

logger = logging.getLogger(__name__)


class ResampleService:
    def resample(
        self,
        source: Image.Image,
        crop: CropRect,
        target: TargetSize,
        fmt: OutputFormat,
    ) -> Image.Image:
        """Растягивает область `crop` исходника на холст `target` (без сохранения пропорций).

        Углы кадра переходят в углы холста, преобразование аффинное
        (масштаб + сдвиг), интерполяция билинейная. Для JPEG холст сначала
        целиком заливается белым, для PNG остаётся прозрачным.

        Returns:
            Новый растр ровно `target.width × target.height`: RGB для JPEG, RGBA для PNG.

        Raises:
            InvalidGeometry: если кадр выходит за изображение или размеры неположительны.
        """
        target.validate()
        crop.validate(source.width, source.height)

        canvas = new_canvas(target.size, fmt)

        rgba = source if source.mode == "RGBA" else source.convert("RGBA")
        # cut the enclosing integer region first so the filter never samples outside the crop
        left, top = math.floor(crop.x), math.floor(crop.y)
        right = math.ceil(crop.x + crop.width)
        bottom = math.ceil(crop.y + crop.height)
        region = rgba.crop((left, top, right, bottom))
        scaled = region.resize(
            target.size,
            Image.Resampling.BILINEAR,
            box=(crop.x - left, crop.y - top, crop.x + crop.width - left, crop.y + crop.height - top),
        )

        if fmt.lossy:
            canvas.paste(scaled, (0, 0), mask=scaled)
        else:
            canvas.alpha_composite(scaled)

        logger.info(
            "Кадр %s -> %dx%d (%s)", crop.box, target.width, target.height, fmt.label
        )
        return canvas
