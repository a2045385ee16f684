"""Имена выходных файлов и упаковка ячеек в zip.

Имена ячеек: префикс + порядковый номер (с 1) с ведущими нулями до
max(2, число цифр в N). Так все имена одной нарезки одной длины и
сортируются лексикографически в том же построчном порядке, в котором
их выдаёт `GridService.split_grid`.
"""
from __future__ import annotations

import io
import logging
import zipfile
from pathlib import Path
from typing import List, Sequence

from gridcutter.models.geometry import EncodedTile, GridSpec, OutputFormat, TargetSize

logger = logging.getLogger(__name__)


def pad_width(total: int) -> int:
    return max(2, len(str(total)))


def sequence_name(prefix: str, index: int, total: int) -> str:
    """`prefix` + номер `index` (1..total) с ведущими нулями."""
    if not 1 <= index <= total:
        raise ValueError(f"Номер {index} вне диапазона 1..{total}")
    return f"{prefix}{str(index).zfill(pad_width(total))}"


def tile_filenames(prefix: str, total: int, fmt: OutputFormat) -> List[str]:
    return [f"{sequence_name(prefix, i, total)}.{fmt.extension}" for i in range(1, total + 1)]


def single_export_name(prefix: str, target: TargetSize, fmt: OutputFormat) -> str:
    return f"{prefix}_{target.width}x{target.height}.{fmt.extension}"


def archive_name(prefix: str, spec: GridSpec) -> str:
    return f"{prefix}_grid_{spec.rows}x{spec.cols}.zip"


def archive_folder(prefix: str) -> str:
    return f"{prefix}_grid"


class ExportService:
    def build_archive(
        self,
        tiles: Sequence[EncodedTile],
        prefix: str,
        fmt: OutputFormat,
    ) -> bytes:
        """Упаковывает ячейки в zip: `{prefix}_grid/{prefix}{NN}.{ext}` в порядке выдачи."""
        folder = archive_folder(prefix)
        names = tile_filenames(prefix, len(tiles), fmt)
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for name, tile in zip(names, tiles):
                archive.writestr(f"{folder}/{name}", tile.data)
        return buffer.getvalue()

    def write_archive(
        self,
        tiles: Sequence[EncodedTile],
        prefix: str,
        fmt: OutputFormat,
        spec: GridSpec,
        output_dir: str | Path,
    ) -> Path:
        """Сохраняет zip в `output_dir` под именем `{prefix}_grid_{rows}x{cols}.zip`."""
        if len(tiles) != spec.count:
            raise ValueError(f"Ожидалось {spec.count} ячеек, получено {len(tiles)}")
        path = Path(output_dir) / archive_name(prefix, spec)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.build_archive(tiles, prefix, fmt))
        logger.info("Архив сохранён: %s", path)
        return path

    def write_single(
        self,
        data: bytes,
        prefix: str,
        target: TargetSize,
        fmt: OutputFormat,
        output_dir: str | Path,
    ) -> Path:
        """Сохраняет одно изображение под именем `{prefix}_{w}x{h}.{ext}`."""
        path = Path(output_dir) / single_export_name(prefix, target, fmt)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.info("Изображение сохранено: %s", path)
        return path
