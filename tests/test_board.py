import os
import sys

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from world.board import Board
from world.cell import Cell, Position
from world.settings import WorldSettings


def make_board(tile_size=1.0, radius=8):
    return Board(WorldSettings(tile_size=tile_size, visibility_radius=radius))


def test_canonicalize_returns_same_object():
    board = make_board()
    first = board.canonicalize(Cell(3, -4))
    for _ in range(5):
        assert board.canonicalize(Cell(3, -4)) is first
    assert board.cell_at(3, -4) is first


def test_cell_for_position_returns_canonical_cell():
    board = make_board()
    a = board.cell_for_position(Position(2.25, 7.75))
    b = board.cell_for_position(Position(2.9, 7.1))
    assert a is b
    assert a.key == (2, 7)


def test_negative_coordinates_use_floor():
    board = make_board()
    assert board.cell_for_position(Position(-0.5, -1.5)).key == (-1, -2)
    assert board.cell_for_position(Position(-0.0001, 0.0001)).key == (-1, 0)
    assert board.cell_for_position(Position(-1.0, 0.0)).key == (-1, 0)


def test_distinct_signs_are_distinct_cells():
    board = make_board()
    assert board.cell_at(-1, 2) is not board.cell_at(1, -2)


def test_bounds_and_center():
    board = make_board(tile_size=0.5)
    cell = board.cell_at(-2, 3)
    (min_lat, min_lng), (max_lat, max_lng) = board.bounds_of(cell)
    assert (min_lat, min_lng) == (-1.0, 1.5)
    assert (max_lat, max_lng) == (-0.5, 2.0)
    assert board.center_of(cell) == Position(-0.75, 1.75)
    # the centre maps back into the same cell
    assert board.cell_for_position(board.center_of(cell)) is cell


def test_cells_within_radius_is_a_square():
    board = make_board(radius=2)
    cells = board.cells_within_radius(Position(0.5, 0.5))
    assert len(cells) == 25
    keys = {c.key for c in cells}
    assert (2, 2) in keys and (-2, -2) in keys and (2, -2) in keys
    assert (3, 0) not in keys
    for cell in cells:
        assert board.canonicalize(Cell(cell.i, cell.j)) is cell


def test_cells_within_radius_override():
    board = make_board(radius=8)
    cells = board.cells_within_radius(Position(10.5, -3.5), radius=0)
    assert {c.key for c in cells} == {(10, -4)}


def test_chebyshev_distance():
    board = make_board()
    assert Board.chebyshev_distance(board.cell_at(0, 0), board.cell_at(3, -1)) == 3
    assert Board.chebyshev_distance(board.cell_at(2, 2), board.cell_at(2, 2)) == 0
