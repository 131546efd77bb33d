from __future__ import annotations

from typing import Dict

from .position import Position


def perft(pos: Position, depth: int) -> int:
    """Compute perft node count for ``pos`` at ``depth``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth == 1 returns the number of legal moves without playing them.
    - depth > 1 returns the sum over all legal child positions' perft(depth-1).

    Children are visited with apply/undo, so ``pos`` is back in its original
    state when this returns.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1
    moves = pos.legal_moves
    if depth == 1:
        return len(moves)

    nodes = 0
    for m in moves:
        pos.apply(m)
        try:
            nodes += perft(pos, depth - 1)
        finally:
            pos.undo()
    return nodes


def divide(pos: Position, depth: int) -> Dict[str, int]:
    """Per-root-move node counts, keyed by the move in coordinate form.

    Raises:
        ValueError: If ``depth`` is smaller than 1.
    """
    if depth < 1:
        raise ValueError("depth must be >= 1")
    result: Dict[str, int] = {}
    for m in pos.legal_moves:
        pos.apply(m)
        try:
            result[m.to_uci()] = perft(pos, depth - 1)
        finally:
            pos.undo()
    return result
