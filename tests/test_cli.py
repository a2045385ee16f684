"""End-to-end pipeline through the console entry point."""

import zipfile

import pytest
from PIL import Image

from gridcutter.cli import build_parser, main
from helpers import make_quadrants


def _source(tmp_path):
    path = tmp_path / "card.png"
    make_quadrants(200, 300).save(path)
    return path


def test_cli_writes_archive_and_single(tmp_path, capsys):
    source = _source(tmp_path)
    out_dir = tmp_path / "out"

    code = main([
        str(source), "--size", "40x60", "--grid", "2x3", "--format", "png",
        "--prefix", "p_", "--output-dir", str(out_dir), "--single",
    ])

    assert code == 0
    archive_path = out_dir / "p__grid_2x3.zip"
    single_path = out_dir / "p__40x60.png"
    assert capsys.readouterr().out.split() == [str(archive_path), str(single_path)]

    with zipfile.ZipFile(archive_path) as archive:
        assert archive.namelist() == [f"p__grid/p_0{i}.png" for i in range(1, 7)]
    with Image.open(single_path) as single:
        assert single.size == (40, 60)


def test_cli_explicit_crop_and_jpeg(tmp_path):
    source = _source(tmp_path)
    code = main([str(source), "--crop", "0,0,100,150", "--size", "20x20", "--grid", "1x1", "--output-dir", str(tmp_path)])
    assert code == 0
    with zipfile.ZipFile(tmp_path / "grid_image_grid_1x1.zip") as archive:
        assert archive.namelist() == ["grid_image_grid/grid_image01.jpg"]


@pytest.mark.parametrize("crop", ["150,0,100,100", "nan,0,10,10", "0,0,inf,10"])
def test_cli_reports_invalid_crop(tmp_path, capsys, crop):
    source = _source(tmp_path)
    code = main([str(source), "--crop", crop, "--output-dir", str(tmp_path)])
    assert code == 2
    assert "Ошибка" in capsys.readouterr().err
    assert not list(tmp_path.glob("*.zip"))


def test_cli_reports_missing_file(tmp_path):
    assert main([str(tmp_path / "missing.png"), "--output-dir", str(tmp_path)]) == 2


def test_parser_defaults():
    args = build_parser().parse_args(["x.png"])
    assert args.size == (812, 1421)
    assert args.grid == (7, 4)
    assert args.format == "jpg"
    assert args.prefix == "grid_image"
