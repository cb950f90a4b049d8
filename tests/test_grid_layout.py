import pytest

from minimal_life.grid_layout import CollageGrid, compute_grid


@pytest.mark.parametrize(
    "count, expected",
    [
        (1, (1, 1)),
        (2, (1, 2)),
        (3, (2, 2)),
        (4, (2, 2)),
        (5, (2, 3)),
        (9, (3, 3)),
        (10, (3, 4)),
    ],
)
def test_compute_grid_known_sizes(count, expected):
    assert compute_grid(count) == expected


def test_compute_grid_has_no_redundant_row_or_column():
    for n in range(1, 300):
        rows, cols = compute_grid(n)
        assert rows * cols >= n
        assert (rows - 1) * cols < n
        assert rows * (cols - 1) < n


def test_compute_grid_zero_and_negative():
    assert compute_grid(0) == (0, 0)
    with pytest.raises(ValueError):
        compute_grid(-1)


def test_collage_grid_canvas_size():
    grid = CollageGrid.for_count(5, thumb=200, padding=10, header_height=80)
    assert (grid.rows, grid.columns) == (2, 3)
    assert grid.width == 3 * 210 + 10
    assert grid.height == 2 * 210 + 10 + 80


def test_collage_grid_cells_are_row_major():
    grid = CollageGrid.for_count(5, thumb=200, padding=10, header_height=80)
    cells = grid.cells()
    assert len(cells) == 5
    assert (cells[0].x, cells[0].y) == (10, 90)
    assert (cells[2].row, cells[2].column) == (0, 2)
    assert (cells[2].x, cells[2].y) == (430, 90)
    assert (cells[3].row, cells[3].column) == (1, 0)
    assert (cells[3].x, cells[3].y) == (10, 300)
    assert cells[4].box == (220, 300, 420, 500)


def test_collage_grid_rejects_empty_and_out_of_range():
    with pytest.raises(ValueError):
        CollageGrid.for_count(0)
    grid = CollageGrid.for_count(2)
    with pytest.raises(IndexError):
        grid.cell(2)
