"""Placement validation: bounds, overlap, edge-adjacency, and corner rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from blokus_rules.grid import DIAGONAL, ORTHOGONAL, Coord, Grid, is_valid_player


class RuleViolation(str, Enum):
    NONE = "none"
    INVALID_PIECE = "invalid_piece"
    INVALID_PLAYER = "invalid_player"
    OUT_OF_BOUNDS = "out_of_bounds"
    OVERLAP = "overlap"
    EDGE_CONTACT = "edge_contact"
    CORNER_CONTACT = "corner_contact"
    FIRST_PLACEMENT_CORNER = "first_placement_corner"


MESSAGES = {
    RuleViolation.NONE: "Placement is legal",
    RuleViolation.INVALID_PIECE: "Piece is missing or has no cells",
    RuleViolation.INVALID_PLAYER: "Player id must be between 1 and 4",
    RuleViolation.OUT_OF_BOUNDS: "Piece extends past the board edge",
    RuleViolation.OVERLAP: "Piece overlaps an occupied cell",
    RuleViolation.EDGE_CONTACT: "Piece cannot share an edge with your own pieces",
    RuleViolation.CORNER_CONTACT: "Piece must touch a corner of one of your pieces",
    RuleViolation.FIRST_PLACEMENT_CORNER: "First piece must cover your starting corner",
}


@dataclass(frozen=True)
class PlacementResult:
    rule: RuleViolation = RuleViolation.NONE
    conflicts: tuple[Coord, ...] = field(default=())

    @property
    def is_valid(self) -> bool:
        return self.rule is RuleViolation.NONE

    @property
    def message(self) -> str:
        return MESSAGES[self.rule]

    def __bool__(self) -> bool:
        return self.is_valid


OK = PlacementResult()


def _reject(rule: RuleViolation, conflicts: list[Coord] | None = None) -> PlacementResult:
    return PlacementResult(rule=rule, conflicts=tuple(conflicts or ()))


def piece_cells(piece, anchor: Coord) -> list[Coord] | None:
    """Absolute cells of ``piece`` at ``anchor``, or None if the piece is unusable."""
    if piece is None:
        return None
    shape = getattr(piece, "shape", None)
    if not shape:
        return None
    try:
        return [anchor + Coord.of(offset) for offset in shape]
    except (TypeError, ValueError):
        return None


def edge_contacts(grid: Grid, cells: list[Coord], player_id: int) -> list[Coord]:
    """Own cells sharing an edge with any of ``cells``."""
    contacts = []
    for pos in cells:
        for direction in ORTHOGONAL:
            neighbour = pos + direction
            if grid.is_owned_by(neighbour, player_id) and neighbour not in contacts:
                contacts.append(neighbour)
    return contacts


def has_corner_contact(grid: Grid, cells: list[Coord], player_id: int) -> bool:
    for pos in cells:
        for direction in DIAGONAL:
            if grid.is_owned_by(pos + direction, player_id):
                return True
    return False


def validate_placement(grid: Grid, piece, anchor: Coord, player_id: int) -> PlacementResult:
    """Check a candidate placement and report the first rule it breaks.

    Rules are evaluated in a fixed order: bounds, overlap, same-player edge
    contact, then the corner rule. The corner rule has two branches: before
    the player's first placement the piece must cover their starting corner,
    afterwards it must touch one of their cells diagonally. Touching another
    player's piece along an edge is always allowed.
    """
    if not is_valid_player(player_id):
        return _reject(RuleViolation.INVALID_PLAYER)

    cells = piece_cells(piece, Coord.of(anchor))
    if cells is None:
        return _reject(RuleViolation.INVALID_PIECE)

    for pos in cells:
        if not grid.in_bounds(pos):
            return _reject(RuleViolation.OUT_OF_BOUNDS, [pos])

    occupied = [pos for pos in cells if grid.owner(pos) != 0]
    if occupied:
        return _reject(RuleViolation.OVERLAP, occupied)

    contacts = edge_contacts(grid, cells, player_id)
    if contacts:
        return _reject(RuleViolation.EDGE_CONTACT, contacts)

    if grid.has_placed(player_id):
        if not has_corner_contact(grid, cells, player_id):
            return _reject(RuleViolation.CORNER_CONTACT)
    elif grid.corners[player_id] not in cells:
        return _reject(RuleViolation.FIRST_PLACEMENT_CORNER)

    return OK


def is_valid_placement(grid: Grid, piece, anchor: Coord, player_id: int) -> bool:
    return validate_placement(grid, piece, anchor, player_id).is_valid
