"""Legal-anchor enumeration driven by the connectable position cache."""

from __future__ import annotations

from typing import Iterable, Iterator

from blokus_rules.cache import ConnectablePositionCache
from blokus_rules.grid import Coord, Grid, is_valid_player
from blokus_rules.validator import is_valid_placement, piece_cells


def get_valid_placements(
    grid: Grid, cache: ConnectablePositionCache, piece, player_id: int
) -> list[Coord]:
    """Every anchor at which ``piece`` can legally be placed by ``player_id``.

    Each candidate cell is tried under each piece cell in turn, i.e. the
    anchor is ``candidate - offset``. Every such anchor is re-validated.
    """
    offsets = piece_cells(piece, Coord(0, 0))
    if offsets is None or not is_valid_player(player_id):
        return []

    anchors: set[Coord] = set()
    for candidate in cache.positions(player_id):
        for offset in offsets:
            anchor = candidate - offset
            if anchor in anchors:
                continue
            if is_valid_placement(grid, piece, anchor, player_id):
                anchors.add(anchor)
    return sorted(anchors)


def orientations(piece) -> Iterator:
    """The 8 orientations of ``piece``: four quarter turns, then the same for its mirror."""
    for base in (piece, piece.flipped_horizontal()):
        current = base
        for _ in range(4):
            yield current
            current = current.rotated_90()


def has_valid_moves(
    grid: Grid, cache: ConnectablePositionCache, player_id: int, pieces: Iterable | None
) -> bool:
    if not pieces or not is_valid_player(player_id):
        return False
    for piece in pieces:
        if piece is None or getattr(piece, "placed", False):
            continue
        for oriented in orientations(piece):
            if get_valid_placements(grid, cache, oriented, player_id):
                return True
    return False
