"""Консольный режим: кадрирование, нарезка сеткой и упаковка без GUI."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from textwrap import dedent
from typing import Optional, Sequence, Tuple

from gridcutter.config import get_defaults, setup_logging
from gridcutter.errors import GridCutterError
from gridcutter.models.geometry import CropRect, GridSpec, OutputFormat, TargetSize, centered_crop
from gridcutter.services.export_service import ExportService
from gridcutter.services.grid_service import GridService
from gridcutter.services.image_service import ImageService
from gridcutter.services.resample_service import ResampleService

logger = logging.getLogger(__name__)


def _parse_pair(text: str, sep: str = "x") -> Tuple[int, int]:
    parts = text.lower().split(sep)
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"ожидается A{sep}B, получено {text!r}")
    try:
        return int(parts[0]), int(parts[1])
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"нечисловое значение: {text!r}") from exc


def _parse_crop(text: str) -> CropRect:
    try:
        return CropRect.parse(text)
    except GridCutterError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    defaults = get_defaults()
    parser = argparse.ArgumentParser(
        prog="gridcutter-cli",
        description=dedent("""\
            Кадрирует изображение до точного размера и режет результат на сетку rows x cols.
            Ячейки нумеруются построчно и упаковываются в {prefix}_grid_{rows}x{cols}.zip.
        """),
    )
    parser.add_argument("image", help="путь к исходному изображению (JPG, PNG, WEBP)")
    parser.add_argument("--crop", type=_parse_crop, default=None,
                        help="кадр X,Y,W,H в пикселях исходника (по умолчанию центральный кадр с пропорциями --size)")
    parser.add_argument("--size", type=_parse_pair, default=(defaults.target_width, defaults.target_height),
                        help="целевой размер WxH (по умолчанию %(default)s)")
    parser.add_argument("--grid", type=_parse_pair, default=(defaults.rows, defaults.cols),
                        help="сетка ROWSxCOLS (по умолчанию %(default)s)")
    parser.add_argument("--format", choices=("png", "jpg"), default="jpg", help="формат вывода")
    parser.add_argument("--prefix", default=defaults.filename_prefix, help="префикс имён файлов")
    parser.add_argument("--output-dir", type=Path, default=Path("."), help="каталог для результатов")
    parser.add_argument("--single", action="store_true", help="также сохранить кадрированное изображение целиком")
    parser.add_argument("-v", "--verbose", action="store_true", help="подробный лог")
    return parser


def run(args: argparse.Namespace) -> list[Path]:
    fmt = OutputFormat.from_name(args.format)
    target = TargetSize(*args.size)
    spec = GridSpec(*args.grid)

    image_service = ImageService()
    source = image_service.load_image(args.image)
    crop = args.crop or centered_crop(source.width, source.height, target)

    processed = ResampleService().resample(source.pil_image, crop, target, fmt)
    tiles = GridService(image_service).split_grid(processed, spec, fmt)

    export = ExportService()
    written = [export.write_archive(tiles, args.prefix, fmt, spec, args.output_dir)]
    if args.single:
        data = image_service.encode(processed, fmt)
        written.append(export.write_single(data, args.prefix, target, fmt, args.output_dir))
    return written


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        written = run(args)
    except (GridCutterError, FileNotFoundError) as exc:
        logger.error("Ошибка обработки: %s", exc, exc_info=args.verbose)
        print(f"Ошибка: {exc}", file=sys.stderr)
        return 2

    for path in written:
        print(path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
