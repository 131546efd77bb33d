from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from .move import CASTLE_KINGSIDE, CASTLE_QUEENSIDE
from .piece import BLACK, WHITE


# Castling-rights bits
WHITE_KINGSIDE = 1
WHITE_QUEENSIDE = 2
BLACK_KINGSIDE = 4
BLACK_QUEENSIDE = 8
ALL_RIGHTS = WHITE_KINGSIDE | WHITE_QUEENSIDE | BLACK_KINGSIDE | BLACK_QUEENSIDE

RIGHTS_ORDER: Tuple[Tuple[str, int], ...] = (
    ("K", WHITE_KINGSIDE),
    ("Q", WHITE_QUEENSIDE),
    ("k", BLACK_KINGSIDE),
    ("q", BLACK_QUEENSIDE),
)

KING_HOME: Dict[int, int] = {WHITE: 60, BLACK: 4}

# Moving from or capturing on a corner square clears the matching right.
CORNER_RIGHTS: Tuple[Tuple[int, int], ...] = (
    (63, WHITE_KINGSIDE),
    (56, WHITE_QUEENSIDE),
    (7, BLACK_KINGSIDE),
    (0, BLACK_QUEENSIDE),
)


@dataclass(frozen=True)
class CastleSide:
    """Fixed geometry of one castle (color + wing).

    Attributes:
        right (int): Castling-rights bit that permits it.
        king_from (int): King home square.
        king_to (int): King destination.
        rook_from (int): Rook corner square.
        rook_to (int): Rook destination.
        empty (Tuple[int, ...]): Squares between king and rook.
        safe (Tuple[int, ...]): Squares the king crosses or lands on.
    """

    right: int
    king_from: int
    king_to: int
    rook_from: int
    rook_to: int
    empty: Tuple[int, ...]
    safe: Tuple[int, ...]


CASTLES: Dict[Tuple[int, int], CastleSide] = {
    (WHITE, CASTLE_KINGSIDE): CastleSide(WHITE_KINGSIDE, 60, 62, 63, 61, (61, 62), (61, 62)),
    (WHITE, CASTLE_QUEENSIDE): CastleSide(WHITE_QUEENSIDE, 60, 58, 56, 59, (59, 58, 57), (59, 58)),
    (BLACK, CASTLE_KINGSIDE): CastleSide(BLACK_KINGSIDE, 4, 6, 7, 5, (5, 6), (5, 6)),
    (BLACK, CASTLE_QUEENSIDE): CastleSide(BLACK_QUEENSIDE, 4, 2, 0, 3, (3, 2, 1), (3, 2)),
}


def castle_side(color: int, flags: int) -> CastleSide:
    """Return the castle geometry for ``color`` matching the castle bit in ``flags``."""
    wing = CASTLE_KINGSIDE if flags & CASTLE_KINGSIDE else CASTLE_QUEENSIDE
    return CASTLES[(color, wing)]


def has_right(rights: int, right: int) -> bool:
    return (rights & right) == right


def rights_for(color: int) -> int:
    return WHITE_KINGSIDE | WHITE_QUEENSIDE if color == WHITE else BLACK_KINGSIDE | BLACK_QUEENSIDE


def rights_to_str(rights: int) -> str:
    """FEN castling field, ``"-"`` when no rights remain."""
    text = "".join(ch for ch, bit in RIGHTS_ORDER if rights & bit)
    return text or "-"


def rights_from_str(text: str) -> int:
    """Parse a FEN castling field.

    Raises:
        ValueError: On characters outside ``KQkq-``.
    """
    if text == "-":
        return 0
    lookup = dict(RIGHTS_ORDER)
    rights = 0
    for ch in text:
        if ch not in lookup:
            raise ValueError(f"invalid castling right: {ch!r}")
        rights |= lookup[ch]
    return rights
