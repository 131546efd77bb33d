from __future__ import annotations


class EngineError(ValueError):
    """Base class for every failure reported by the rules engine."""


class FenError(EngineError):
    """Raised for a malformed position description."""


class NotationError(EngineError):
    """Raised for malformed move notation or square coordinates."""


class IllegalMoveError(EngineError):
    """Raised when a move is not in the legal-move list of the position."""


class InvalidMoveError(EngineError):
    """Raised when a move is structurally invalid (bad or equal squares)."""


class PositionError(EngineError):
    """Raised when a board cannot form a position."""


class MissingKingError(PositionError):
    """Raised when either side has no king on the board."""


class EmptyHistoryError(EngineError):
    """Raised by undo when no move has been applied."""
