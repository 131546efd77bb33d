from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from . import attacks
from .castling import (
    ALL_RIGHTS,
    CASTLES,
    CORNER_RIGHTS,
    KING_HOME,
    castle_side,
    rights_for,
    rights_from_str,
    rights_to_str,
)
from .errors import (
    EmptyHistoryError,
    FenError,
    IllegalMoveError,
    MissingKingError,
    NotationError,
    PositionError,
)
from .legality import generate_legal_moves
from .move import CAPTURE, EN_PASSANT, Move, parse_lan, rank_of, square_to_str, str_to_square
from .movegen import DOWN, UP
from .piece import (
    BLACK,
    EMPTY,
    KING,
    PAWN,
    WHITE,
    color_name,
    opposite,
    piece_from_char,
    piece_to_char,
    type_of,
)


logger = logging.getLogger(__name__)

STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


@dataclass(frozen=True)
class HistoryEntry:
    """State that a move destroys and undo needs back."""

    castling_rights: int
    ep_square: Optional[int]
    white_king_square: int
    black_king_square: int
    captured: int
    halfmove_clock: int
    fullmove_number: int


@dataclass
class Position:
    """Mutable game position with reversible make/undo.

    Notes:
    - Squares are 0..63 (a8=0 .. h1=63), row-major from Black's side.
    - The legal moves of the side to move are computed eagerly after every
      construction, apply and undo, so reads are free.
    - Equality compares the board and the public metadata only.
    """

    board: List[int]
    turn: int = WHITE
    castling_rights: int = 0
    ep_square: Optional[int] = None
    halfmove_clock: int = 0
    fullmove_number: int = 1
    white_king_square: int = field(init=False, default=-1, compare=False)
    black_king_square: int = field(init=False, default=-1, compare=False)
    _legal_moves: Tuple[Move, ...] = field(init=False, default=(), repr=False, compare=False)
    _moves_played: List[Move] = field(init=False, default_factory=list, repr=False, compare=False)
    _history: List[HistoryEntry] = field(
        init=False, default_factory=list, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if len(self.board) != 64:
            raise PositionError(f"board must have 64 squares, got {len(self.board)}")
        self.board = list(self.board)
        if self.turn not in (WHITE, BLACK):
            raise PositionError(f"invalid side to move: {self.turn}")
        if not 0 <= self.castling_rights <= ALL_RIGHTS:
            raise PositionError(f"invalid castling rights: {self.castling_rights}")
        if self.ep_square is not None and not 0 <= self.ep_square <= 63:
            raise PositionError(f"invalid en passant square: {self.ep_square}")
        self.white_king_square = self._find_king(WHITE)
        self.black_king_square = self._find_king(BLACK)
        self._refresh_legal_moves()

    def _find_king(self, color: int) -> int:
        squares = [sq for sq, p in enumerate(self.board) if p == KING | color]
        if not squares:
            raise MissingKingError(f"no {color_name(color)} king on the board")
        if len(squares) > 1:
            raise PositionError(f"more than one {color_name(color)} king on the board")
        return squares[0]

    def _refresh_legal_moves(self) -> None:
        self._legal_moves = tuple(generate_legal_moves(self, self.turn))

    @classmethod
    def startpos(cls) -> "Position":
        """Create the standard chess starting position."""
        return cls.from_fen(STARTPOS_FEN)

    @classmethod
    def from_fen(cls, fen: str) -> "Position":
        """Create a position from a Forsyth-Edwards Notation string.

        Args:
            fen (str): Six space-separated fields.

        Returns:
            Position: Position described by ``fen``.

        Raises:
            FenError: If any field is malformed: wrong field or rank count,
                unknown piece letters, ranks not summing to 8, bad side to move,
                castling characters outside ``KQkq``, an en passant square on
                the wrong rank, or negative/zero counters.
            MissingKingError: If a king is absent.
        """
        if not fen or not isinstance(fen, str):
            raise FenError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) != 6:
            raise FenError("FEN must have 6 fields")
        placement, stm, castling, ep, halfmove, fullmove = parts

        ranks = placement.split("/")
        if len(ranks) != 8:
            raise FenError("FEN board must have 8 ranks")
        board: List[int] = []
        for rank in ranks:
            count = 0
            for ch in rank:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise FenError("invalid empty count in FEN rank")
                    board.extend([EMPTY] * n)
                    count += n
                else:
                    try:
                        board.append(piece_from_char(ch))
                    except KeyError:
                        raise FenError(f"invalid piece in FEN: {ch!r}") from None
                    count += 1
            if count != 8:
                raise FenError("rank does not sum to 8 squares in FEN")

        if stm not in ("w", "b"):
            raise FenError("side to move must be 'w' or 'b'")
        turn = WHITE if stm == "w" else BLACK

        try:
            rights = rights_from_str(castling)
        except ValueError as e:
            raise FenError("invalid castling rights") from e

        ep_square: Optional[int]
        if ep == "-":
            ep_square = None
        else:
            try:
                ep_square = str_to_square(ep)
            except NotationError as e:
                raise FenError("invalid en passant square") from e
            # The target lies behind a pawn the opponent just pushed.
            if rank_of(ep_square) != (6 if turn == WHITE else 3):
                raise FenError("invalid en passant square rank")

        try:
            halfmove_clock = int(halfmove)
            fullmove_number = int(fullmove)
        except ValueError as e:
            raise FenError("invalid move counters in FEN") from e
        if halfmove_clock < 0 or fullmove_number <= 0:
            raise FenError("invalid move counters in FEN")

        pos = cls(
            board=board,
            turn=turn,
            castling_rights=rights,
            ep_square=ep_square,
            halfmove_clock=halfmove_clock,
            fullmove_number=fullmove_number,
        )
        logger.debug("position loaded fen=%s legal=%d", fen, len(pos._legal_moves))
        return pos

    def to_fen(self) -> str:
        """Serialize the position into a FEN string."""
        rows: List[str] = []
        for start in range(0, 64, 8):
            run = 0
            row = []
            for p in self.board[start : start + 8]:
                if p == EMPTY:
                    run += 1
                    continue
                if run:
                    row.append(str(run))
                    run = 0
                row.append(piece_to_char(p))
            if run:
                row.append(str(run))
            rows.append("".join(row))
        ep = "-" if self.ep_square is None else square_to_str(self.ep_square)
        return " ".join(
            [
                "/".join(rows),
                "w" if self.turn == WHITE else "b",
                rights_to_str(self.castling_rights),
                ep,
                str(self.halfmove_clock),
                str(self.fullmove_number),
            ]
        )

    @property
    def legal_moves(self) -> Tuple[Move, ...]:
        return self._legal_moves

    @property
    def moves_played(self) -> Tuple[Move, ...]:
        return tuple(self._moves_played)

    @property
    def history_depth(self) -> int:
        return len(self._history)

    def king_square(self, color: int) -> int:
        return self.white_king_square if color == WHITE else self.black_king_square

    def piece_at(self, square: int) -> int:
        if not 0 <= square <= 63:
            raise PositionError(f"invalid square index: {square}")
        return self.board[square]

    def in_check(self) -> bool:
        """Return True if the side to move is in check."""
        return attacks.is_square_attacked(self, self.king_square(self.turn), self.turn)

    def is_square_attacked(self, square: int, color: int) -> bool:
        """Return True if the opponent of ``color`` attacks ``square``."""
        if not 0 <= square <= 63:
            raise PositionError(f"invalid square index: {square}")
        return attacks.is_square_attacked(self, square, color)

    def copy(self) -> "Position":
        """Independent clone of the current state with an empty history."""
        return Position(
            board=list(self.board),
            turn=self.turn,
            castling_rights=self.castling_rights,
            ep_square=self.ep_square,
            halfmove_clock=self.halfmove_clock,
            fullmove_number=self.fullmove_number,
        )

    def apply(self, move: Move) -> None:
        """Play ``move`` in place.

        Args:
            move (Move): Must equal one of :attr:`legal_moves`.

        Raises:
            IllegalMoveError: If ``move`` is not legal here. The position is
                left untouched.
        """
        if move not in self._legal_moves:
            logger.debug("rejected move %s in %s", move, self.to_fen())
            raise IllegalMoveError(f"illegal move: {move}")

        board = self.board
        mover = self.turn
        frm, to = move.from_sq, move.to_sq
        moving = board[frm]
        entry = HistoryEntry(
            castling_rights=self.castling_rights,
            ep_square=self.ep_square,
            white_king_square=self.white_king_square,
            black_king_square=self.black_king_square,
            captured=board[to],
            halfmove_clock=self.halfmove_clock,
            fullmove_number=self.fullmove_number,
        )

        board[to] = moving
        board[frm] = EMPTY
        promo = move.promotion_type
        if promo is not None:
            board[to] = promo | mover

        step = UP if mover == WHITE else DOWN
        self.ep_square = to - step if move.is_double_push else None

        if move.is_castle:
            side = castle_side(mover, move.flags)
            board[side.rook_to] = board[side.rook_from]
            board[side.rook_from] = EMPTY

        if move.is_en_passant:
            board[to - step] = EMPTY

        rights = self.castling_rights
        if type_of(moving) == KING:
            rights &= ~rights_for(mover)
            if mover == WHITE:
                self.white_king_square = to
            else:
                self.black_king_square = to
        for corner, right in CORNER_RIGHTS:
            if frm == corner or to == corner:
                rights &= ~right
        self.castling_rights = rights

        if move.is_capture or move.is_en_passant:
            self.halfmove_clock = 0
        else:
            self.halfmove_clock += 1
        if mover == BLACK:
            self.fullmove_number += 1

        self.turn = opposite(mover)
        self._history.append(entry)
        self._moves_played.append(move)
        self._refresh_legal_moves()

    def apply_lan(self, text: str) -> Move:
        """Parse a LAN move, bind it to this position and play it.

        Returns:
            Move: The move that was applied.

        Raises:
            NotationError: If ``text`` cannot be parsed.
            IllegalMoveError: If the origin is empty, holds a different piece
                than named, or the move is not legal.
        """
        lan = parse_lan(text)
        if lan.from_sq is None or lan.to_sq is None:
            frm = KING_HOME[self.turn]
            to = CASTLES[(self.turn, lan.flags)].king_to
        else:
            frm, to = lan.from_sq, lan.to_sq
        piece = self.board[frm]
        if piece == EMPTY:
            raise IllegalMoveError(f"no piece on {square_to_str(frm)}")
        if type_of(piece) != lan.piece_type:
            raise IllegalMoveError(f"{text!r} does not match the piece on {square_to_str(frm)}")
        flags = lan.flags
        # "e5xd6" without the e.p. marker still names the en passant capture.
        if (
            lan.piece_type == PAWN
            and to == self.ep_square
            and self.board[to] == EMPTY
            and flags == CAPTURE
        ):
            flags = EN_PASSANT
        move = Move(frm, to, piece, flags)
        self.apply(move)
        return move

    def undo(self) -> Move:
        """Take back the last applied move.

        Returns:
            Move: The move that was undone.

        Raises:
            EmptyHistoryError: If no move has been applied.
        """
        if not self._history:
            raise EmptyHistoryError("no move to undo")
        entry = self._history.pop()
        move = self._moves_played.pop()

        board = self.board
        mover = opposite(self.turn)
        frm, to = move.from_sq, move.to_sq
        step = UP if mover == WHITE else DOWN

        self.turn = mover
        self.castling_rights = entry.castling_rights
        self.ep_square = entry.ep_square
        self.white_king_square = entry.white_king_square
        self.black_king_square = entry.black_king_square
        self.halfmove_clock = entry.halfmove_clock
        self.fullmove_number = entry.fullmove_number

        if move.is_en_passant:
            board[to - step] = PAWN | opposite(mover)
        if move.is_castle:
            side = castle_side(mover, move.flags)
            board[side.rook_from] = board[side.rook_to]
            board[side.rook_to] = EMPTY
        board[frm] = board[to]
        board[to] = entry.captured
        if move.is_promotion:
            board[frm] = PAWN | mover

        logger.debug("undo %s", move)
        self._refresh_legal_moves()
        return move
