"""Tests for valid-placement enumeration and the has-moves query.

The cache-driven search is compared against a brute-force scan of every
anchor on small boards while random games are played out.
"""

import random

import pytest

from blokus_rules.engine import BoardEngine
from blokus_rules.enumerator import orientations
from blokus_rules.grid import PLAYER_IDS, Coord
from blokus_rules.pieces import Piece, standard_piece, standard_set

SAMPLE_PIECES = [1, 2, 4, 8, 9, 21]


def brute_force(engine, piece, player_id):
    n = engine.board_size
    return sorted(
        Coord(x, y)
        for x in range(-2, n + 1)
        for y in range(-2, n + 1)
        if engine.is_valid_placement(piece, Coord(x, y), player_id)
    )


def same_player_edge_pairs(placements):
    """Edge-adjacent cell pairs owned by one player but belonging to different pieces."""
    owner = {}
    for index, (pid, cells) in enumerate(placements):
        for cell in cells:
            owner[cell] = (pid, index)
    pairs = []
    for cell, (pid, index) in owner.items():
        for step in (Coord(1, 0), Coord(0, 1)):
            other = owner.get(cell + step)
            if other is not None and other[0] == pid and other[1] != index:
                pairs.append((cell, cell + step))
    return pairs


def play_random_game(engine, rng, on_step):
    """Place random legal pieces until nobody can move, calling ``on_step`` after each."""
    inventories = {pid: standard_set() for pid in PLAYER_IDS}
    stuck = set()
    while len(stuck) < len(PLAYER_IDS):
        for pid in PLAYER_IDS:
            if pid in stuck:
                continue
            options = []
            for piece in inventories[pid].values():
                if piece.placed:
                    continue
                for oriented in piece.orientations():
                    for anchor in engine.get_valid_placements(oriented, pid):
                        options.append((piece, oriented, anchor))
            if not options:
                stuck.add(pid)
                continue
            piece, oriented, anchor = rng.choice(options)
            had_placed = not engine.is_first_placement(pid)
            before = engine.get_board_state()
            assert engine.is_valid_placement(oriented, anchor, pid)
            assert engine.place_piece(oriented, anchor, pid)
            piece.placed = True
            on_step(engine, pid, oriented.occupied_cells(anchor), before, had_placed)


class TestGetValidPlacements:
    def test_first_monomino(self):
        engine = BoardEngine(20)
        assert engine.get_valid_placements(standard_piece(1), 1) == [Coord(0, 0)]

    def test_first_straight_four(self):
        engine = BoardEngine(20)
        piece = standard_piece(5)
        assert engine.get_valid_placements(piece, 1) == [Coord(0, 0)]
        assert engine.get_valid_placements(piece, 2) == [Coord(16, 0)]

    def test_after_straight_four(self):
        engine = BoardEngine(20)
        assert engine.place_piece(standard_piece(5), Coord(0, 0), 1)
        assert engine.get_valid_placements(standard_piece(1), 1) == [Coord(4, 1)]

    def test_invalid_inputs(self):
        engine = BoardEngine(20)
        assert engine.get_valid_placements(None, 1) == []
        assert engine.get_valid_placements(Piece(piece_id=0, shape=[]), 1) == []
        assert engine.get_valid_placements(standard_piece(1), 0) == []
        assert engine.get_valid_placements(standard_piece(1), 5) == []

    def test_results_unique(self):
        engine = BoardEngine(20)
        engine.place_piece(standard_piece(1), Coord(0, 0), 1)
        anchors = engine.get_valid_placements(standard_piece(21), 1)
        assert len(anchors) == len(set(anchors))


class TestCacheSoundness:
    @pytest.mark.parametrize("size, seed", [(5, 1), (6, 2), (6, 7)])
    def test_matches_brute_force(self, size, seed):
        engine = BoardEngine(size)
        samples = [
            oriented for pid in SAMPLE_PIECES for oriented in standard_piece(pid).orientations()
        ]

        def check(engine, *_):
            for pid in PLAYER_IDS:
                for piece in samples:
                    expected = brute_force(engine, piece, pid)
                    assert engine.get_valid_placements(piece, pid) == expected

        check(engine)
        play_random_game(engine, random.Random(seed), check)

    @pytest.mark.parametrize("seed", [3, 11])
    def test_game_invariants(self, seed):
        engine = BoardEngine(8)
        placements = []

        def check(engine, pid, cells, before, had_placed):
            placements.append((pid, list(cells)))
            assert same_player_edge_pairs(placements) == []
            if had_placed:
                assert any(
                    0 <= c.x + dx < engine.board_size
                    and 0 <= c.y + dy < engine.board_size
                    and before[c.x + dx][c.y + dy] == pid
                    for c in cells
                    for dx, dy in ((1, 1), (1, -1), (-1, 1), (-1, -1))
                )
            else:
                assert engine.get_starting_corner(pid) in cells

        play_random_game(engine, random.Random(seed), check)


class TestHasValidMoves:
    def test_fresh_board(self):
        engine = BoardEngine(20)
        assert engine.has_valid_moves(1, [standard_piece(20)])
        assert engine.has_valid_moves(3, [standard_piece(5)])

    def test_cross_cannot_open(self):
        # No orientation of the X pentomino covers a corner cell
        engine = BoardEngine(20)
        for pid in PLAYER_IDS:
            assert not engine.has_valid_moves(pid, [standard_piece(21)])

    def test_no_pieces(self):
        engine = BoardEngine(20)
        assert not engine.has_valid_moves(1, [])
        assert not engine.has_valid_moves(1, None)

    def test_invalid_player(self):
        assert not BoardEngine(20).has_valid_moves(9, [standard_piece(1)])

    def test_placed_pieces_skipped(self):
        engine = BoardEngine(20)
        piece = standard_piece(1)
        piece.placed = True
        assert not engine.has_valid_moves(1, [piece])

    def test_needs_rotation(self):
        engine = BoardEngine(3)
        # Player 2 takes (1, 0) and (2, 0), blocking a horizontal line from (0, 0)
        assert engine.place_piece(standard_piece(2), Coord(1, 0), 2)
        line = standard_piece(3)
        assert engine.get_valid_placements(line, 1) == []
        assert engine.has_valid_moves(1, [line])
        assert engine.get_valid_placements(line.rotated_90(), 1) == [Coord(0, 0)]

    def test_other_orientation_fits(self):
        engine = BoardEngine(4)
        # Player 2 holds (1, 0)..(3, 0); the L as given cannot reach (0, 0)
        assert engine.place_piece(standard_piece(3), Coord(1, 0), 2)
        l_piece = Piece.from_cells(7, [(1, 0), (1, 1), (1, 2), (0, 2)])
        fitting = [o for o in orientations(l_piece) if engine.get_valid_placements(o, 1)]
        assert fitting
        assert not engine.get_valid_placements(l_piece, 1)
        assert engine.has_valid_moves(1, [l_piece])

    def test_no_moves_when_corner_taken(self):
        engine = BoardEngine(3)
        assert engine.place_piece(standard_piece(3), Coord(0, 0), 2)
        pieces = list(standard_set().values())
        assert not engine.has_valid_moves(1, pieces)
        for piece in pieces:
            for oriented in orientations(piece):
                assert engine.get_valid_placements(oriented, 1) == []

    def test_orientations_are_eight_transforms(self):
        shapes = [frozenset(o.shape) for o in orientations(standard_piece(20))]
        assert len(shapes) == 8
        assert len(set(shapes)) == 8
