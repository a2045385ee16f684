"""Grid partitioner: exact tiling, row-major order, encoding and failure handling."""

import io

import numpy as np
import pytest
from PIL import Image

from gridcutter.errors import EncodeFailure, InvalidGeometry
from gridcutter.models.geometry import GridSpec, OutputFormat
from gridcutter.services.grid_service import GridService, axis_edges
from gridcutter.services.image_service import ImageService


@pytest.mark.parametrize(
    "width,height,rows,cols",
    [(100, 100, 1, 1), (812, 1421, 7, 4), (10, 10, 3, 3), (101, 57, 4, 6), (29, 1000, 7, 13), (50, 50, 50, 50)],
)
def test_cells_partition_raster_exactly(width, height, rows, cols):
    cells = GridService().cell_rects(width, height, GridSpec(rows, cols))

    coverage = np.zeros((height, width), dtype=np.int32)
    for cell in cells:
        coverage[cell.y:cell.y + cell.height, cell.x:cell.x + cell.width] += 1
    assert (coverage == 1).all()
    assert sum(cell.area for cell in cells) == width * height

    grid = {(cell.row, cell.col): cell for cell in cells}
    for r in range(rows):
        for c in range(cols - 1):
            left, right = grid[(r, c)], grid[(r, c + 1)]
            assert left.x + left.width == right.x
    for r in range(rows - 1):
        for c in range(cols):
            top, bottom = grid[(r, c)], grid[(r + 1, c)]
            assert top.y + top.height == bottom.y


def test_cell_sizes_differ_by_at_most_one_pixel():
    cells = GridService().cell_rects(101, 57, GridSpec(4, 6))
    widths = {cell.width for cell in cells}
    heights = {cell.height for cell in cells}
    assert max(widths) - min(widths) <= 1
    assert max(heights) - min(heights) <= 1


def test_even_grid_has_equal_cells():
    cells = GridService().cell_rects(812, 1421, GridSpec(7, 4))
    assert {(cell.width, cell.height) for cell in cells} == {(203, 203)}


def test_boundaries_round_half_up():
    # 10 / 4 = 2.5: edges 0, 2.5, 5, 7.5, 10 -> 0, 3, 5, 8, 10
    assert axis_edges(10, 4).tolist() == [0, 3, 5, 8, 10]
    cells = GridService().cell_rects(10, 1, GridSpec(1, 4))
    assert [cell.width for cell in cells] == [3, 2, 3, 2]


def test_axis_edges_start_and_end():
    edges = axis_edges(1421, 7)
    assert edges[0] == 0
    assert edges[-1] == 1421
    assert (np.diff(edges) > 0).all()


def test_cells_are_row_major():
    cells = GridService().cell_rects(60, 40, GridSpec(2, 3))
    assert [(cell.row, cell.col) for cell in cells] == [(0, 0), (0, 1), (0, 2), (1, 0), (1, 1), (1, 2)]


def test_split_grid_emits_row_major(gradient_image):
    tiles = GridService(max_workers=4).split_grid(gradient_image, GridSpec(2, 3), OutputFormat.lossless())
    assert [(tile.row, tile.col) for tile in tiles] == [(0, 0), (0, 1), (0, 2), (1, 0), (1, 1), (1, 2)]


def test_split_grid_tiles_match_source_pixels(gradient_image):
    service = GridService()
    spec = GridSpec(3, 4)
    tiles = service.split_grid(gradient_image, spec, OutputFormat.lossless())
    cells = service.cell_rects(gradient_image.width, gradient_image.height, spec)
    source = np.asarray(gradient_image)

    for tile, cell in zip(tiles, cells):
        decoded = np.asarray(Image.open(io.BytesIO(tile.data)))
        assert decoded.shape[:2] == (cell.height, cell.width)
        np.testing.assert_array_equal(decoded, source[cell.y:cell.y + cell.height, cell.x:cell.x + cell.width])


def test_single_cell_equals_source(gradient_image):
    tiles = GridService().split_grid(gradient_image, GridSpec(1, 1), OutputFormat.lossless())
    assert len(tiles) == 1
    decoded = ImageService().decode_bytes(tiles[0].data).pil_image
    np.testing.assert_array_equal(np.asarray(decoded), np.asarray(gradient_image))


def test_lossy_tiles_have_no_transparency(transparent_image):
    tiles = GridService().split_grid(transparent_image, GridSpec(2, 2), OutputFormat.jpeg())
    assert len(tiles) == 4
    for tile in tiles:
        assert tile.data[:2] == b"\xff\xd8"
        with Image.open(io.BytesIO(tile.data)) as decoded:
            assert decoded.mode == "RGB"
            assert (np.asarray(decoded) >= 250).all()


def test_lossy_tiles_preserve_cell_dimensions(gradient_image):
    service = GridService()
    spec = GridSpec(4, 6)
    tiles = service.split_grid(gradient_image, spec, OutputFormat.jpeg())
    cells = service.cell_rects(gradient_image.width, gradient_image.height, spec)
    for tile, cell in zip(tiles, cells):
        with Image.open(io.BytesIO(tile.data)) as decoded:
            assert decoded.size == (cell.width, cell.height)


def test_split_grid_does_not_mutate_source(gradient_image):
    before = gradient_image.tobytes()
    GridService().split_grid(gradient_image, GridSpec(2, 2), OutputFormat.jpeg())
    assert gradient_image.tobytes() == before


@pytest.mark.parametrize("spec", [GridSpec(0, 4), GridSpec(4, 0), GridSpec(-1, 1)])
def test_non_positive_grid_fails(gradient_image, spec):
    with pytest.raises(InvalidGeometry):
        GridService().split_grid(gradient_image, spec, OutputFormat.lossless())


def test_grid_finer_than_pixels_fails():
    with pytest.raises(InvalidGeometry):
        GridService().cell_rects(3, 10, GridSpec(1, 4))


class _FailingImageService(ImageService):
    """Fails for every cell of one width."""

    def __init__(self, fail_width):
        self.fail_width = fail_width

    def encode(self, image, fmt):
        if image.width == self.fail_width:
            raise EncodeFailure("boom")
        return super().encode(image, fmt)


def test_encode_failure_aborts_whole_split():
    # 10 px over 4 columns -> widths 3, 2, 3, 2; fail the 2 px wide ones
    image = Image.new("RGBA", (10, 4), (1, 2, 3, 255))
    service = GridService(image_service=_FailingImageService(fail_width=2), max_workers=2)
    with pytest.raises(EncodeFailure):
        service.split_grid(image, GridSpec(1, 4), OutputFormat.lossless())
