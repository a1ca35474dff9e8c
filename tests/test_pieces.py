"""Unit tests for pieces: transforms, orientations, and the standard set."""

import pytest

from blokus_rules.grid import Coord
from blokus_rules.pieces import (
    STANDARD_SHAPES,
    Piece,
    normalize,
    piece_name,
    standard_piece,
    standard_set,
)


def cells(piece):
    return {(c.x, c.y) for c in piece.shape}


class TestTransforms:
    def test_rotate_l_tromino(self):
        piece = standard_piece(4)  # (0,0) (1,0) (0,1)
        assert cells(piece.rotated_90()) == {(0, 0), (0, 1), (1, 1)}

    def test_flip_l_tromino(self):
        piece = standard_piece(4)
        assert cells(piece.flipped_horizontal()) == {(0, 0), (1, 0), (1, 1)}

    def test_four_rotations_return_to_start(self):
        for piece_id in STANDARD_SHAPES:
            piece = standard_piece(piece_id)
            turned = piece
            for _ in range(4):
                turned = turned.rotated_90()
            assert cells(turned) == cells(piece)

    def test_transforms_do_not_mutate(self):
        piece = standard_piece(7)
        before = list(piece.shape)
        piece.rotated_90()
        piece.flipped_horizontal()
        piece.transformed(3, True)
        assert piece.shape == before

    def test_transformed_identity(self):
        piece = standard_piece(13)
        assert cells(piece.transformed(0, False)) == cells(piece)

    def test_transformed_matches_manual_steps(self):
        piece = standard_piece(20)
        manual = piece.flipped_horizontal().rotated_90().rotated_90()
        assert cells(piece.transformed(2, True)) == cells(manual)

    def test_transforms_are_normalized(self):
        for piece_id in STANDARD_SHAPES:
            for oriented in standard_piece(piece_id).orientations():
                assert min(c.x for c in oriented.shape) == 0
                assert min(c.y for c in oriented.shape) == 0

    def test_transforms_keep_placed_flag(self):
        piece = standard_piece(2)
        piece.placed = True
        assert piece.rotated_90().placed is True


class TestOrientations:
    @pytest.mark.parametrize(
        "piece_id, expected",
        [(1, 1), (2, 2), (4, 4), (6, 1), (7, 8), (8, 4), (9, 4), (10, 2), (20, 8), (21, 1)],
    )
    def test_distinct_orientation_counts(self, piece_id, expected):
        assert len(list(standard_piece(piece_id).orientations())) == expected

    def test_all_pentominoes(self):
        total = sum(
            len(list(standard_piece(pid).orientations()))
            for pid in STANDARD_SHAPES
            if standard_piece(pid).size == 5
        )
        assert total == 63


class TestShapes:
    def test_standard_set(self):
        pieces = standard_set()
        assert sorted(pieces) == list(range(1, 22))
        assert sum(p.size for p in pieces.values()) == 89
        assert not any(p.placed for p in pieces.values())

    def test_standard_pieces_connected(self):
        for piece in standard_set().values():
            assert piece.is_connected()

    def test_unknown_piece_id(self):
        with pytest.raises(KeyError):
            standard_piece(22)

    def test_disconnected_shape_rejected(self):
        with pytest.raises(ValueError):
            Piece.from_cells(99, [(0, 0), (1, 1)])

    def test_duplicate_cells_rejected(self):
        with pytest.raises(ValueError):
            Piece.from_cells(99, [(0, 0), (0, 0)])

    def test_occupied_cells(self):
        piece = standard_piece(3)
        assert piece.occupied_cells(Coord(5, 7)) == [Coord(5, 7), Coord(6, 7), Coord(7, 7)]

    def test_normalize(self):
        assert normalize([Coord(-2, 3), Coord(-1, 4)]) == [Coord(0, 0), Coord(1, 1)]
        assert normalize([]) == []

    def test_piece_name(self):
        assert piece_name(21) == "pentomino-x"
        assert piece_name(0) == "unknown"
