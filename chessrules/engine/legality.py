from __future__ import annotations

from typing import List, TYPE_CHECKING

from .attacks import is_square_attacked
from .castling import castle_side, has_right
from .move import Move
from .movegen import DOWN, UP, generate_king_moves, generate_pseudo_legal_moves
from .piece import EMPTY, KING, WHITE, color_of, is_color, type_of

if TYPE_CHECKING:  # pragma: no cover
    from .position import Position


def generate_legal_moves(pos: "Position", color: int) -> List[Move]:
    """Return the legal moves of ``color`` in ``pos``.

    Every friendly square is expanded into pseudo-legal candidates, which are
    then filtered: king moves (including castles) by
    :func:`is_king_move_legal`, everything else by
    :func:`is_figure_move_legal`. King moves come last in the result.
    """
    board = pos.board
    legal: List[Move] = []
    king_moves: List[Move] = []
    for sq in range(64):
        piece = board[sq]
        if not is_color(piece, color):
            continue
        if type_of(piece) == KING:
            king_moves.extend(m for m in generate_king_moves(pos, sq) if is_king_move_legal(pos, m))
        else:
            legal.extend(
                m for m in generate_pseudo_legal_moves(pos, sq) if is_figure_move_legal(pos, m)
            )
    legal.extend(king_moves)
    return legal


def is_figure_move_legal(pos: "Position", move: Move) -> bool:
    """Check a non-king move by playing it on the board and looking at the king.

    The en passant victim is lifted as well: taking two pawns off one rank can
    uncover a rook or queen that neither pawn blocked alone. The board is
    restored exactly, whatever the outcome.
    """
    board = pos.board
    col = color_of(board[move.from_sq])
    king_sq = pos.king_square(col)

    dest_piece = board[move.to_sq]
    board[move.to_sq] = board[move.from_sq]
    board[move.from_sq] = EMPTY
    victim_sq = -1
    victim = EMPTY
    if move.is_en_passant:
        victim_sq = move.to_sq - (UP if col == WHITE else DOWN)
        victim = board[victim_sq]
        board[victim_sq] = EMPTY
    try:
        in_check = is_square_attacked(pos, king_sq, col)
    finally:
        board[move.from_sq] = board[move.to_sq]
        board[move.to_sq] = dest_piece
        if victim_sq >= 0:
            board[victim_sq] = victim
    return not in_check


def is_king_move_legal(pos: "Position", move: Move) -> bool:
    """Check a king step or castle.

    The king may not land on an attacked square. A castle additionally needs
    the king out of check, the castling right still held, and every square it
    crosses unattacked. Empty squares were already required by the generator.
    """
    board = pos.board
    col = color_of(board[move.from_sq])

    previous = board[move.to_sq]
    board[move.to_sq] = board[move.from_sq]
    board[move.from_sq] = EMPTY
    try:
        dest_attacked = is_square_attacked(pos, move.to_sq, col)
    finally:
        board[move.from_sq] = board[move.to_sq]
        board[move.to_sq] = previous
    if dest_attacked:
        return False
    if not move.is_castle:
        return True

    if is_square_attacked(pos, move.from_sq, col):
        return False
    side = castle_side(col, move.flags)
    if not has_right(pos.castling_rights, side.right):
        return False
    for sq in side.safe:
        if is_square_attacked(pos, sq, col):
            return False
    return True
