from __future__ import annotations

from typing import Dict


# Piece types. Bishop/rook/queen are chosen so that the slider tests below are
# single masks: bit 0b100 marks a slider, 0b001 diagonal, 0b010 straight.
NONE = 0
KING = 1
PAWN = 2
KNIGHT = 3
BISHOP = 5
ROOK = 6
QUEEN = 7

# Colors
WHITE = 8
BLACK = 16

EMPTY = 0

TYPE_MASK = 0b00111
WHITE_MASK = 0b01000
BLACK_MASK = 0b10000
COLOR_MASK = WHITE_MASK | BLACK_MASK

_DIAGONAL_MASK = 0b101
_STRAIGHT_MASK = 0b110

CHAR_TO_PIECE: Dict[str, int] = {
    "P": WHITE | PAWN,
    "N": WHITE | KNIGHT,
    "B": WHITE | BISHOP,
    "R": WHITE | ROOK,
    "Q": WHITE | QUEEN,
    "K": WHITE | KING,
    "p": BLACK | PAWN,
    "n": BLACK | KNIGHT,
    "b": BLACK | BISHOP,
    "r": BLACK | ROOK,
    "q": BLACK | QUEEN,
    "k": BLACK | KING,
}
PIECE_TO_CHAR: Dict[int, str] = {v: k for k, v in CHAR_TO_PIECE.items()}

TYPE_TO_LETTER: Dict[int, str] = {
    KING: "K",
    PAWN: "P",
    KNIGHT: "N",
    BISHOP: "B",
    ROOK: "R",
    QUEEN: "Q",
}
LETTER_TO_TYPE: Dict[str, int] = {v: k for k, v in TYPE_TO_LETTER.items()}

TYPE_NAMES: Dict[int, str] = {
    NONE: "none",
    KING: "king",
    PAWN: "pawn",
    KNIGHT: "knight",
    BISHOP: "bishop",
    ROOK: "rook",
    QUEEN: "queen",
}


def type_of(piece: int) -> int:
    return piece & TYPE_MASK


def color_of(piece: int) -> int:
    """Return WHITE, BLACK, or 0 for an empty square."""
    return piece & COLOR_MASK


def is_color(piece: int, color: int) -> bool:
    return (piece & COLOR_MASK) == color


def is_diagonal_slider(piece: int) -> bool:
    """True for bishops and queens of either color."""
    return (piece & _DIAGONAL_MASK) == _DIAGONAL_MASK


def is_straight_slider(piece: int) -> bool:
    """True for rooks and queens of either color."""
    return (piece & _STRAIGHT_MASK) == _STRAIGHT_MASK


def opposite(color: int) -> int:
    return BLACK if color == WHITE else WHITE


def piece_from_char(ch: str) -> int:
    """Convert a FEN piece letter (upper=white) to a piece value.

    Raises:
        KeyError: If ``ch`` is not one of ``PNBRQKpnbrqk``.
    """
    return CHAR_TO_PIECE[ch]


def piece_to_char(piece: int) -> str:
    """Return the FEN letter for ``piece``; empty squares give ``"."``."""
    return PIECE_TO_CHAR.get(piece, ".")


def color_name(color: int) -> str:
    if color == WHITE:
        return "white"
    if color == BLACK:
        return "black"
    return "none"
