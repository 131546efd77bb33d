from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from .errors import InvalidMoveError, NotationError
from .piece import (
    BISHOP,
    KING,
    KNIGHT,
    LETTER_TO_TYPE,
    PAWN,
    QUEEN,
    ROOK,
    TYPE_TO_LETTER,
    type_of,
)


# Move flags. Not mutually exclusive: a capturing promotion carries both
# CAPTURE and one PROMOTION_* bit.
NORMAL = 1
CAPTURE = 2
EN_PASSANT = 4
DOUBLE_PUSH = 8
CASTLE_KINGSIDE = 16
CASTLE_QUEENSIDE = 32
PROMOTION_QUEEN = 64
PROMOTION_ROOK = 128
PROMOTION_BISHOP = 256
PROMOTION_KNIGHT = 512

CASTLE = CASTLE_KINGSIDE | CASTLE_QUEENSIDE
PROMOTION = PROMOTION_QUEEN | PROMOTION_ROOK | PROMOTION_BISHOP | PROMOTION_KNIGHT

# Generation order for the four promotion variants.
PROMOTION_FLAGS = (PROMOTION_BISHOP, PROMOTION_KNIGHT, PROMOTION_ROOK, PROMOTION_QUEEN)

PROMOTION_TO_TYPE: Dict[int, int] = {
    PROMOTION_QUEEN: QUEEN,
    PROMOTION_ROOK: ROOK,
    PROMOTION_BISHOP: BISHOP,
    PROMOTION_KNIGHT: KNIGHT,
}
_LETTER_TO_PROMOTION: Dict[str, int] = {
    "Q": PROMOTION_QUEEN,
    "R": PROMOTION_ROOK,
    "B": PROMOTION_BISHOP,
    "N": PROMOTION_KNIGHT,
}

_MIN_LAN_LENGTH = 5


@dataclass(frozen=True)
class Move:
    """One ply.

    Attributes:
        from_sq (int): Origin square, 0 (a8) .. 63 (h1).
        to_sq (int): Destination square.
        piece (int): Moving piece including its color bits.
        flags (int): Bitwise OR of the move flag constants.

    Raises:
        InvalidMoveError: If a square is out of range or both squares match.
    """

    from_sq: int
    to_sq: int
    piece: int
    flags: int = NORMAL

    def __post_init__(self) -> None:
        if not (0 <= self.from_sq <= 63 and 0 <= self.to_sq <= 63):
            raise InvalidMoveError(f"invalid start or end square: {self.from_sq}->{self.to_sq}")
        if self.from_sq == self.to_sq:
            raise InvalidMoveError(f"start and end square are equal: {self.from_sq}")

    @property
    def is_capture(self) -> bool:
        return (self.flags & CAPTURE) == CAPTURE

    @property
    def is_en_passant(self) -> bool:
        return (self.flags & EN_PASSANT) == EN_PASSANT

    @property
    def is_double_push(self) -> bool:
        return (self.flags & DOUBLE_PUSH) == DOUBLE_PUSH

    @property
    def is_castle_kingside(self) -> bool:
        return (self.flags & CASTLE_KINGSIDE) == CASTLE_KINGSIDE

    @property
    def is_castle_queenside(self) -> bool:
        return (self.flags & CASTLE_QUEENSIDE) == CASTLE_QUEENSIDE

    @property
    def is_castle(self) -> bool:
        return (self.flags & CASTLE) != 0

    @property
    def is_promotion(self) -> bool:
        return (self.flags & PROMOTION) != 0

    @property
    def promotion_type(self) -> Optional[int]:
        """Piece type promoted to, or ``None`` for non-promotions."""
        for flag, ptype in PROMOTION_TO_TYPE.items():
            if self.flags & flag:
                return ptype
        return None

    def to_lan(self) -> str:
        """Serialize into long algebraic notation.

        Returns:
            str: ``"e2-e4"``, ``"Nc3xd5"``, ``"e7-e8=Q"``, ``"O-O"``,
                ``"O-O-O"`` or ``"e5xd6 e.p."``.
        """
        if self.is_castle_kingside:
            return "O-O"
        if self.is_castle_queenside:
            return "O-O-O"
        sep = "x" if (self.is_capture or self.is_en_passant) else "-"
        text = square_to_str(self.from_sq) + sep + square_to_str(self.to_sq)
        ptype = type_of(self.piece)
        if ptype != PAWN:
            return TYPE_TO_LETTER[ptype] + text
        promo = self.promotion_type
        if promo is not None:
            return text + "=" + TYPE_TO_LETTER[promo]
        if self.is_en_passant:
            return text + " e.p."
        return text

    def to_uci(self) -> str:
        """Compact coordinate form used as perft divide key, e.g. ``"e7e8q"``."""
        promo = self.promotion_type
        suffix = TYPE_TO_LETTER[promo].lower() if promo is not None else ""
        return square_to_str(self.from_sq) + square_to_str(self.to_sq) + suffix

    def __str__(self) -> str:
        return self.to_lan()


@dataclass(frozen=True)
class LanMove:
    """Result of parsing a LAN string, before it is bound to a position.

    Castles carry ``None`` squares; the consumer resolves them from the side
    to move. ``piece_type`` has no color bits.
    """

    from_sq: Optional[int]
    to_sq: Optional[int]
    piece_type: int
    flags: int


def parse_lan(text: str) -> LanMove:
    """Parse a move in long algebraic notation.

    Args:
        text (str): ``"e2-e4"``, ``"Ng1-f3"``, ``"Bc4xf7"``, ``"e7-e8=Q"``,
            ``"e5xd6 e.p."``, ``"O-O"`` or ``"O-O-O"``.

    Returns:
        LanMove: Parsed squares, piece type and flags.

    Raises:
        NotationError: If the string is too short, names an unknown piece or
            promotion letter, or has malformed squares or separator.
    """
    if not isinstance(text, str):
        raise NotationError("move must be a string")
    text = text.strip()
    if text == "O-O":
        return LanMove(None, None, KING, CASTLE_KINGSIDE)
    if text == "O-O-O":
        return LanMove(None, None, KING, CASTLE_QUEENSIDE)
    if len(text) < _MIN_LAN_LENGTH:
        raise NotationError(f"invalid move: {text!r}")

    if text[0].islower():
        piece_type = PAWN
        start = 0
    else:
        piece_type = LETTER_TO_TYPE.get(text[0], 0)
        if piece_type in (0, PAWN):
            raise NotationError(f"invalid piece: {text[0]!r}")
        start = 1

    body = text[start : start + 5]
    if len(body) < 5:
        raise NotationError(f"invalid move: {text!r}")
    from_sq = str_to_square(body[0:2])
    sep = body[2]
    to_sq = str_to_square(body[3:5])
    if sep not in ("-", "x"):
        raise NotationError(f"invalid separator {sep!r} in move {text!r}")

    rest = text[start + 5 :]
    flags = 0
    if piece_type == PAWN:
        if rest.startswith("="):
            if len(rest) < 2 or rest[1] not in _LETTER_TO_PROMOTION:
                raise NotationError(f"invalid promotion piece in move {text!r}")
            flags = _LETTER_TO_PROMOTION[rest[1]]
            rest = rest[2:]
        if abs(rank_of(from_sq) - rank_of(to_sq)) == 2:
            flags = DOUBLE_PUSH
    rest = rest.strip().rstrip("+#")
    if rest in ("e.p", "e.p.") and piece_type == PAWN:
        flags = EN_PASSANT
    elif rest:
        raise NotationError(f"unexpected trailing text in move {text!r}")

    if sep == "x" and flags != EN_PASSANT:
        flags |= CAPTURE
    if flags == 0:
        flags = NORMAL
    return LanMove(from_sq, to_sq, piece_type, flags)


def rank_of(sq: int) -> int:
    """Chess rank 1..8 of ``sq``; square 0 is a8."""
    return 8 - (sq // 8)


def file_of(sq: int) -> int:
    """File 1..8 (a..h) of ``sq``."""
    return (sq % 8) + 1


def str_to_square(s: str) -> int:
    """Convert algebraic notation into a square index.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        int: Square index, a8 = 0 .. h1 = 63.

    Raises:
        NotationError: If ``s`` is not a valid square.
    """
    if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise NotationError(f"invalid square: {s!r}")
    file = ord(s[0]) - ord("a")
    rank = int(s[1])
    return (8 - rank) * 8 + file


def square_to_str(idx: int) -> str:
    """Convert a square index into algebraic notation.

    Raises:
        NotationError: If ``idx`` is outside 0..63.
    """
    if idx < 0 or idx > 63:
        raise NotationError(f"invalid square index: {idx}")
    return chr(ord("a") + idx % 8) + str(8 - idx // 8)
