from __future__ import annotations

from typing import List, Optional, Protocol, Sequence, Tuple

from .castling import CASTLES, has_right
from .move import (
    CAPTURE,
    CASTLE_KINGSIDE,
    CASTLE_QUEENSIDE,
    DOUBLE_PUSH,
    EN_PASSANT,
    NORMAL,
    PROMOTION_FLAGS,
    Move,
    file_of,
    rank_of,
)
from .piece import (
    BISHOP,
    EMPTY,
    KING,
    KNIGHT,
    PAWN,
    ROOK,
    WHITE,
    color_of,
    is_color,
    is_diagonal_slider,
    is_straight_slider,
    opposite,
    type_of,
)


# Square 0 is a8, so "up" (towards rank 8) is negative.
UP = -8
DOWN = 8
LEFT = -1
RIGHT = 1

# (offset, min_file, max_file, min_rank, max_rank): an offset is only usable
# from squares inside its file/rank window, which keeps jumps from wrapping.
KNIGHT_STEPS: Tuple[Tuple[int, int, int, int, int], ...] = (
    (2 * UP + LEFT, 2, 8, 1, 6),
    (UP + 2 * LEFT, 3, 8, 1, 7),
    (2 * DOWN + RIGHT, 1, 7, 3, 8),
    (DOWN + 2 * RIGHT, 1, 6, 2, 8),
    (2 * UP + RIGHT, 1, 7, 1, 6),
    (UP + 2 * RIGHT, 1, 6, 1, 7),
    (2 * DOWN + LEFT, 2, 8, 3, 8),
    (DOWN + 2 * LEFT, 3, 8, 2, 8),
)

KING_STEPS: Tuple[Tuple[int, int, int, int, int], ...] = (
    (UP + LEFT, 2, 8, 1, 7),
    (UP, 1, 8, 1, 7),
    (UP + RIGHT, 1, 7, 1, 7),
    (RIGHT, 1, 7, 1, 8),
    (DOWN + RIGHT, 1, 7, 2, 8),
    (DOWN, 1, 8, 2, 8),
    (DOWN + LEFT, 2, 8, 2, 8),
    (LEFT, 2, 8, 1, 8),
)

# (step, edge file): a ray stops after reaching its edge file and is skipped
# entirely when it starts there. Vertical rays only need the array bounds.
STRAIGHT_RAYS: Tuple[Tuple[int, int], ...] = ((LEFT, 1), (RIGHT, 8), (UP, 0), (DOWN, 0))
DIAGONAL_RAYS: Tuple[Tuple[int, int], ...] = (
    (UP + LEFT, 1),
    (DOWN + LEFT, 1),
    (UP + RIGHT, 8),
    (DOWN + RIGHT, 8),
)


class BoardView(Protocol):
    """What the generators read from a position."""

    board: List[int]
    ep_square: Optional[int]
    castling_rights: int


def generate_pseudo_legal_moves(pos: BoardView, sq: int) -> List[Move]:
    """Return every geometrically valid move of the piece on ``sq``."""
    piece = pos.board[sq]
    ptype = type_of(piece)
    if ptype == PAWN:
        return generate_pawn_moves(pos, sq)
    if ptype == KNIGHT:
        return generate_knight_moves(pos, sq)
    if ptype == KING:
        return generate_king_moves(pos, sq)
    moves: List[Move] = []
    if is_straight_slider(piece):
        moves.extend(generate_straight_sliding_moves(pos, sq))
    if is_diagonal_slider(piece):
        moves.extend(generate_diagonal_sliding_moves(pos, sq))
    return moves


def generate_pawn_moves(pos: BoardView, sq: int, color: Optional[int] = None) -> List[Move]:
    """Pushes, double pushes, captures, promotions and en passant for a pawn.

    Args:
        pos (BoardView): Position to read.
        sq (int): Origin square.
        color (Optional[int]): Treat the pawn as this color instead of the
            color of the piece on ``sq``.

    Returns:
        List[Move]: Pseudo-legal pawn moves. Each promotion produces four
            moves, one per promotion piece.
    """
    board = pos.board
    col = color if color else color_of(board[sq])
    piece = PAWN | col
    enemy = opposite(col)
    step = UP if col == WHITE else DOWN
    rank = rank_of(sq)
    file = file_of(sq)
    promoting = rank == (7 if col == WHITE else 2)
    start_rank = 2 if col == WHITE else 7

    moves: List[Move] = []
    one = sq + step
    if not 0 <= one < 64:
        return moves

    if board[one] == EMPTY:
        if promoting:
            for flag in PROMOTION_FLAGS:
                moves.append(Move(sq, one, piece, flag))
        else:
            moves.append(Move(sq, one, piece, NORMAL))
            if rank == start_rank and board[one + step] == EMPTY:
                moves.append(Move(sq, one + step, piece, DOUBLE_PUSH))

    for target, on_edge in ((one + LEFT, file == 1), (one + RIGHT, file == 8)):
        if on_edge:
            continue
        if is_color(board[target], enemy):
            if promoting:
                for flag in PROMOTION_FLAGS:
                    moves.append(Move(sq, target, piece, flag | CAPTURE))
            else:
                moves.append(Move(sq, target, piece, CAPTURE))
        elif target == pos.ep_square and board[target] == EMPTY:
            moves.append(Move(sq, target, piece, EN_PASSANT))
    return moves


def generate_knight_moves(pos: BoardView, sq: int, color: Optional[int] = None) -> List[Move]:
    col = color if color else color_of(pos.board[sq])
    return _step_moves(pos.board, sq, KNIGHT | col, col, KNIGHT_STEPS)


def generate_straight_sliding_moves(
    pos: BoardView, sq: int, color: Optional[int] = None
) -> List[Move]:
    """Rook-wise rays (rooks and queens)."""
    board = pos.board
    col = color if color else color_of(board[sq])
    piece = board[sq] if _is_own_slider(board[sq], col, straight=True) else ROOK | col
    return _ray_moves(board, sq, piece, col, STRAIGHT_RAYS)


def generate_diagonal_sliding_moves(
    pos: BoardView, sq: int, color: Optional[int] = None
) -> List[Move]:
    """Bishop-wise rays (bishops and queens)."""
    board = pos.board
    col = color if color else color_of(board[sq])
    piece = board[sq] if _is_own_slider(board[sq], col, straight=False) else BISHOP | col
    return _ray_moves(board, sq, piece, col, DIAGONAL_RAYS)


def generate_king_moves(pos: BoardView, sq: int, color: Optional[int] = None) -> List[Move]:
    """Adjacent king steps plus castle candidates.

    Castles are emitted when the right is held, the king stands on its home
    square and the squares up to the rook are empty. Whether the king passes
    through check is decided by the legality filter.
    """
    board = pos.board
    col = color if color else color_of(board[sq])
    piece = KING | col
    moves = _step_moves(board, sq, piece, col, KING_STEPS)
    for wing in (CASTLE_KINGSIDE, CASTLE_QUEENSIDE):
        side = CASTLES[(col, wing)]
        if (
            sq == side.king_from
            and has_right(pos.castling_rights, side.right)
            and all(board[s] == EMPTY for s in side.empty)
        ):
            moves.append(Move(sq, side.king_to, piece, wing))
    return moves


def _step_moves(
    board: Sequence[int],
    sq: int,
    piece: int,
    col: int,
    steps: Tuple[Tuple[int, int, int, int, int], ...],
) -> List[Move]:
    file = file_of(sq)
    rank = rank_of(sq)
    moves: List[Move] = []
    for offset, min_file, max_file, min_rank, max_rank in steps:
        if not (min_file <= file <= max_file and min_rank <= rank <= max_rank):
            continue
        target = sq + offset
        occupant = color_of(board[target])
        if occupant == 0:
            moves.append(Move(sq, target, piece, NORMAL))
        elif occupant != col:
            moves.append(Move(sq, target, piece, CAPTURE))
    return moves


def _ray_moves(
    board: Sequence[int],
    sq: int,
    piece: int,
    col: int,
    rays: Tuple[Tuple[int, int], ...],
) -> List[Move]:
    moves: List[Move] = []
    for step, edge in rays:
        if edge and file_of(sq) == edge:
            continue
        target = sq + step
        while 0 <= target < 64:
            occupant = color_of(board[target])
            if occupant == 0:
                moves.append(Move(sq, target, piece, NORMAL))
            elif occupant != col:
                moves.append(Move(sq, target, piece, CAPTURE))
                break
            else:
                break
            if edge and file_of(target) == edge:
                break
            target += step
    return moves


def _is_own_slider(piece: int, col: int, *, straight: bool) -> bool:
    if not is_color(piece, col):
        return False
    return is_straight_slider(piece) if straight else is_diagonal_slider(piece)
