from __future__ import annotations

from typing import Callable, Iterator, List, Optional, Tuple

from .move import Move, file_of, rank_of
from .movegen import (
    DOWN,
    LEFT,
    RIGHT,
    UP,
    BoardView,
    generate_diagonal_sliding_moves,
    generate_king_moves,
    generate_knight_moves,
    generate_straight_sliding_moves,
)
from .piece import (
    BLACK,
    KING,
    KNIGHT,
    PAWN,
    WHITE,
    is_diagonal_slider,
    is_straight_slider,
    opposite,
)


ProbeGenerator = Callable[[BoardView, int, Optional[int]], List[Move]]


def is_square_attacked(pos: BoardView, square: int, color: int) -> bool:
    """Return True if any piece of the side opposing ``color`` attacks ``square``.

    Args:
        pos (BoardView): Position to inspect; left untouched.
        square (int): Target square.
        color (int): Defending color, i.e. the color of the piece on
            ``square`` (or that would stand there).

    Notes:
        Pawns are checked through their two capture offsets. For the other
        pieces a piece of ``color`` is imagined on ``square`` and the regular
        generators are run from there: a capture that lands on an enemy piece
        of the same kind means that piece attacks ``square``.
    """
    for _ in _attackers(pos, square, color, first_only=True):
        return True
    return False


def attackers_of(pos: BoardView, square: int, color: int) -> List[int]:
    """Squares of all enemy pieces attacking ``square``, sorted ascending."""
    return sorted(set(_attackers(pos, square, color, first_only=False)))


def _attackers(
    pos: BoardView, square: int, color: int, *, first_only: bool
) -> Iterator[int]:
    board = pos.board
    enemy = opposite(color)

    for origin in _pawn_attack_origins(square, color):
        if board[origin] == enemy | PAWN:
            yield origin
            if first_only:
                return

    def enemy_straight(p: int) -> bool:
        return (p & enemy) == enemy and is_straight_slider(p)

    def enemy_diagonal(p: int) -> bool:
        return (p & enemy) == enemy and is_diagonal_slider(p)

    probes: Tuple[Tuple[ProbeGenerator, Callable[[int], bool]], ...] = (
        (generate_knight_moves, lambda p: p == enemy | KNIGHT),
        (generate_straight_sliding_moves, enemy_straight),
        (generate_diagonal_sliding_moves, enemy_diagonal),
        (generate_king_moves, lambda p: p == enemy | KING),
    )
    for generate, matches in probes:
        for move in generate(pos, square, color):
            if move.is_capture and matches(board[move.to_sq]):
                yield move.to_sq
                if first_only:
                    return


def _pawn_attack_origins(square: int, color: int) -> List[int]:
    # An enemy pawn attacking ``square`` stands one rank further along its
    # own direction of travel, on an adjacent file.
    file = file_of(square)
    rank = rank_of(square)
    origins: List[int] = []
    if color == WHITE:
        if rank == 8:
            return origins
        if file != 1:
            origins.append(square + UP + LEFT)
        if file != 8:
            origins.append(square + UP + RIGHT)
    elif color == BLACK:
        if rank == 1:
            return origins
        if file != 1:
            origins.append(square + DOWN + LEFT)
        if file != 8:
            origins.append(square + DOWN + RIGHT)
    return origins
