from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from .move import Move
from .movegen import (
    generate_diagonal_sliding_moves,
    generate_king_moves,
    generate_knight_moves,
    generate_pseudo_legal_moves,
    generate_straight_sliding_moves,
)
from .piece import BISHOP, EMPTY, KING, KNIGHT, QUEEN, ROOK, TYPE_NAMES, WHITE


@dataclass
class ScratchBoard:
    """Bare board for running generators outside a real position.

    It has no kings and no castling rights, so king tables hold plain steps.
    """

    board: List[int] = field(default_factory=lambda: [EMPTY] * 64)
    ep_square: Optional[int] = None
    castling_rights: int = 0


_GENERATORS: Dict[int, Callable[[ScratchBoard, int], List[Move]]] = {
    KNIGHT: generate_knight_moves,
    BISHOP: generate_diagonal_sliding_moves,
    ROOK: generate_straight_sliding_moves,
    QUEEN: generate_pseudo_legal_moves,
    KING: generate_king_moves,
}

TABLE_PIECES: Tuple[int, ...] = (KNIGHT, BISHOP, ROOK, QUEEN, KING)


def piece_type_from_name(name: str) -> int:
    """Map ``"knight"`` etc. to a piece type usable with :func:`reachability_table`.

    Raises:
        ValueError: For names without a table (pawns, unknown words).
    """
    for ptype in TABLE_PIECES:
        if TYPE_NAMES[ptype] == name.lower():
            return ptype
    raise ValueError(f"no reachability table for piece {name!r}")


def reachability_table(piece_type: int) -> Tuple[int, ...]:
    """Targets of a lone white piece on each square of an empty board.

    Args:
        piece_type (int): One of KNIGHT, BISHOP, ROOK, QUEEN or KING.

    Returns:
        Tuple[int, ...]: 64 bitmasks; bit ``n`` of entry ``sq`` is set when
            square ``n`` is reachable from ``sq``.

    Raises:
        ValueError: If ``piece_type`` has no table.
    """
    generate = _GENERATORS.get(piece_type)
    if generate is None:
        raise ValueError(f"no reachability table for piece type {piece_type}")
    scratch = ScratchBoard()
    table: List[int] = []
    for sq in range(64):
        scratch.board[sq] = piece_type | WHITE
        mask = 0
        for move in generate(scratch, sq):
            mask |= 1 << move.to_sq
        scratch.board[sq] = EMPTY
        table.append(mask)
    return tuple(table)


def targets(mask: int) -> List[int]:
    """Square indices set in ``mask``, ascending."""
    return [sq for sq in range(64) if (mask >> sq) & 1]


def format_table(name: str, table: Tuple[int, ...]) -> str:
    """Render ``table`` as an importable Python constant."""
    lines = [f"{name.upper()}_TABLE = ("]
    for entry in table:
        lines.append(f"    0b{entry:064b},")
    lines.append(")")
    return "\n".join(lines) + "\n"
