"""Нарезка растра на сетку rows × cols равных ячеек.

Принципы:
- SRP: геометрия ячеек и их кодирование; упаковка и имена файлов — в export_service.
- Границы ячеек считаются от абсолютных накопленных смещений, а не сложением
  округлённого размера ячейки, поэтому ячейки покрывают растр без щелей и
  перекрытий при любом остатке от деления.
"""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional

import numpy as np
from PIL import Image

from gridcutter.errors import InvalidGeometry
from gridcutter.models.geometry import CellRect, EncodedTile, GridSpec, OutputFormat
from gridcutter.services.image_service import ImageService, new_canvas

logger = logging.getLogger(__name__)


def axis_edges(length: int, parts: int) -> np.ndarray:
    """Границы `parts` отрезков на оси длины `length`, всего `parts + 1` значений.

    edge(i) = round_half_up(i * length / parts), посчитано в целых числах:
    floor((2*i*length + parts) / (2*parts)). Первая граница 0, последняя `length`.
    """
    idx = np.arange(parts + 1, dtype=np.int64)
    return (2 * idx * length + parts) // (2 * parts)


class GridService:
    def __init__(self, image_service: Optional[ImageService] = None, max_workers: Optional[int] = None) -> None:
        self._image_service = image_service or ImageService()
        self._max_workers = max_workers

    def cell_rects(self, width: int, height: int, spec: GridSpec) -> List[CellRect]:
        """Прямоугольники выборки всех ячеек в построчном порядке.

        Raises:
            InvalidGeometry: если сетка неположительна или ячеек по оси больше, чем пикселей.
        """
        spec.validate()
        if spec.cols > width or spec.rows > height:
            raise InvalidGeometry(
                f"Сетка {spec.rows}x{spec.cols} мельче пикселя для растра {width}x{height}"
            )
        xs = axis_edges(width, spec.cols)
        ys = axis_edges(height, spec.rows)
        return [
            CellRect(
                row=r,
                col=c,
                x=int(xs[c]),
                y=int(ys[r]),
                width=int(xs[c + 1] - xs[c]),
                height=int(ys[r + 1] - ys[r]),
            )
            for r in range(spec.rows)
            for c in range(spec.cols)
        ]

    def split_grid(self, source: Image.Image, spec: GridSpec, fmt: OutputFormat) -> List[EncodedTile]:
        """Режет растр на `spec.count` ячеек и кодирует каждую в `fmt`.

        Ячейки кодируются параллельно, но результат всегда упорядочен построчно:
        (0,0), (0,1), …, (1,0), …. Ошибка любой ячейки прерывает всю операцию.

        Raises:
            InvalidGeometry: при неположительных rows/cols.
            EncodeFailure: если какую-либо ячейку не удалось закодировать.
        """
        cells = self.cell_rects(source.width, source.height, spec)
        if source.mode not in ("RGB", "RGBA"):
            source = source.convert("RGBA")
        # make sure pixel data is loaded before worker threads read it
        source.load()

        slots: List[Optional[EncodedTile]] = [None] * len(cells)
        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            futures: Dict[Future, int] = {
                executor.submit(self._encode_cell, source, cell, fmt): index
                for index, cell in enumerate(cells)
            }
            try:
                for future in as_completed(futures):
                    slots[futures[future]] = future.result()
            except Exception:
                for pending in futures:
                    pending.cancel()
                raise

        logger.info(
            "Сетка %dx%d: %d ячеек %s из %dx%d",
            spec.rows, spec.cols, len(cells), fmt.label, source.width, source.height,
        )
        return [tile for tile in slots if tile is not None]

    def _render_cell(self, source: Image.Image, cell: CellRect, fmt: OutputFormat) -> Image.Image:
        piece = source.crop(cell.box)
        if not fmt.lossy:
            return piece
        canvas = new_canvas((cell.width, cell.height), fmt)
        canvas.paste(piece, (0, 0), mask=piece if piece.mode == "RGBA" else None)
        return canvas

    def _encode_cell(self, source: Image.Image, cell: CellRect, fmt: OutputFormat) -> EncodedTile:
        logger.debug("Ячейка (%d, %d): %s", cell.row, cell.col, cell.box)
        data = self._image_service.encode(self._render_cell(source, cell, fmt), fmt)
        return EncodedTile(data=data, row=cell.row, col=cell.col)
