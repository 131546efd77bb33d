from __future__ import annotations

import threading
import uuid
from typing import Dict, Optional, Tuple

from ...engine.move import Move
from ...engine.position import Position


class UnknownPositionError(KeyError):
    """No session is stored under the given ``position_id``."""

    def __init__(self, position_id: str) -> None:
        super().__init__(position_id)
        self.position_id = position_id

    def __str__(self) -> str:
        return f"position not found: {self.position_id}"


class PositionStore:
    """In-memory position sessions keyed by ``position_id``.

    Every mutating operation runs under the store lock, so two requests
    against one session never interleave an apply with an undo. Engine
    errors raised inside an operation propagate unchanged and leave the
    stored position as it was.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._positions: Dict[str, Position] = {}

    def create(self, fen: Optional[str] = None) -> Tuple[str, Position]:
        """Open a session at ``fen`` (the start position when omitted).

        Raises:
            FenError: If ``fen`` does not parse.
            PositionError: If the parsed board is not a valid position.
        """
        position = Position.from_fen(fen) if fen else Position.startpos()
        return self._add(position), position

    def get(self, position_id: str) -> Position:
        with self._lock:
            try:
                return self._positions[position_id]
            except KeyError:
                raise UnknownPositionError(position_id) from None

    def reset(self, position_id: str, fen: str) -> Position:
        """Replace the session's position with ``fen``; its history is dropped."""
        position = Position.from_fen(fen)
        with self._lock:
            self.get(position_id)
            self._positions[position_id] = position
        return position

    def play(self, position_id: str, lan: str) -> Position:
        with self._lock:
            position = self.get(position_id)
            position.apply_lan(lan)
            return position

    def take_back(self, position_id: str) -> Tuple[Move, Position]:
        with self._lock:
            position = self.get(position_id)
            move = position.undo()
            return move, position

    def fork(self, position_id: str) -> Tuple[str, Position]:
        """Open a new session on a copy of ``position_id`` with empty history."""
        with self._lock:
            clone = self.get(position_id).copy()
        return self._add(clone), clone

    def delete(self, position_id: str) -> None:
        with self._lock:
            if self._positions.pop(position_id, None) is None:
                raise UnknownPositionError(position_id)

    def _add(self, position: Position) -> str:
        pid = str(uuid.uuid4())
        with self._lock:
            self._positions[pid] = position
        return pid

    def __len__(self) -> int:
        with self._lock:
            return len(self._positions)
