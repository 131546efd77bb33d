from __future__ import annotations

import pytest

from chessrules.engine.errors import InvalidMoveError, NotationError
from chessrules.engine.move import (
    CAPTURE,
    CASTLE_KINGSIDE,
    CASTLE_QUEENSIDE,
    DOUBLE_PUSH,
    EN_PASSANT,
    NORMAL,
    PROMOTION_KNIGHT,
    PROMOTION_QUEEN,
    Move,
    parse_lan,
    square_to_str,
    str_to_square,
)
from chessrules.engine.piece import BISHOP, KING, KNIGHT, PAWN, QUEEN, WHITE
from chessrules.engine.position import Position


@pytest.mark.parametrize(
    ("name", "index"),
    [("a8", 0), ("h8", 7), ("e4", 36), ("e2", 52), ("a1", 56), ("h1", 63)],
)
def test_square_names(name: str, index: int) -> None:
    assert str_to_square(name) == index
    assert square_to_str(index) == name


@pytest.mark.parametrize("bad", ["", "e", "i1", "a0", "a9", "e44", "E4"])
def test_bad_square_name(bad: str) -> None:
    with pytest.raises(NotationError):
        str_to_square(bad)


@pytest.mark.parametrize("bad", [-1, 64])
def test_bad_square_index(bad: int) -> None:
    with pytest.raises(NotationError):
        square_to_str(bad)


@pytest.mark.parametrize(
    ("text", "from_sq", "to_sq", "piece_type", "flags"),
    [
        ("e2-e4", 52, 36, PAWN, DOUBLE_PUSH),
        ("e2-e3", 52, 44, PAWN, NORMAL),
        ("Ng1-f3", 62, 45, KNIGHT, NORMAL),
        ("Bc4xf7", 34, 13, BISHOP, CAPTURE),
        ("e4xd5", 36, 27, PAWN, CAPTURE),
        ("e7-e8=Q", 12, 4, PAWN, PROMOTION_QUEEN),
        ("d7xc8=N", 11, 2, PAWN, PROMOTION_KNIGHT | CAPTURE),
        ("e5xd6 e.p.", 28, 19, PAWN, EN_PASSANT),
        ("e5xd6 e.p", 28, 19, PAWN, EN_PASSANT),
        ("Qd1xd8+", 59, 3, QUEEN, CAPTURE),
    ],
)
def test_parse_lan(text: str, from_sq: int, to_sq: int, piece_type: int, flags: int) -> None:
    lan = parse_lan(text)
    assert lan.from_sq == from_sq
    assert lan.to_sq == to_sq
    assert lan.piece_type == piece_type
    assert lan.flags == flags


@pytest.mark.parametrize(("text", "flag"), [("O-O", CASTLE_KINGSIDE), ("O-O-O", CASTLE_QUEENSIDE)])
def test_parse_castles(text: str, flag: int) -> None:
    lan = parse_lan(text)
    assert lan.from_sq is None and lan.to_sq is None
    assert lan.piece_type == KING
    assert lan.flags == flag


@pytest.mark.parametrize(
    "text",
    [
        "",
        "e2e4",
        "O-O-O-O",
        "Xe2-e4",
        "Pe2-e4",
        "e2?e4",
        "e9-e4",
        "Ng1-f",
        "e7-e8=K",
        "e7-e8=",
        "e2-e4 junk",
    ],
)
def test_parse_lan_rejects(text: str) -> None:
    with pytest.raises(NotationError):
        parse_lan(text)


@pytest.mark.parametrize(
    ("move", "lan", "uci"),
    [
        (Move(57, 42, WHITE | KNIGHT), "Nb1-c3", "b1c3"),
        (Move(36, 27, WHITE | PAWN, CAPTURE), "e4xd5", "e4d5"),
        (Move(12, 4, WHITE | PAWN, PROMOTION_QUEEN), "e7-e8=Q", "e7e8q"),
        (Move(11, 2, WHITE | PAWN, PROMOTION_KNIGHT | CAPTURE), "d7xc8=N", "d7c8n"),
        (Move(28, 19, WHITE | PAWN, EN_PASSANT), "e5xd6 e.p.", "e5d6"),
        (Move(60, 62, WHITE | KING, CASTLE_KINGSIDE), "O-O", "e1g1"),
        (Move(60, 58, WHITE | KING, CASTLE_QUEENSIDE), "O-O-O", "e1c1"),
    ],
)
def test_move_serialization(move: Move, lan: str, uci: str) -> None:
    assert move.to_lan() == lan
    assert str(move) == lan
    assert move.to_uci() == uci


def test_move_predicates() -> None:
    m = Move(11, 2, WHITE | PAWN, PROMOTION_KNIGHT | CAPTURE)
    assert m.is_capture and m.is_promotion
    assert m.promotion_type == KNIGHT
    assert not m.is_en_passant and not m.is_castle

    castle = Move(60, 62, WHITE | KING, CASTLE_KINGSIDE)
    assert castle.is_castle and castle.is_castle_kingside and not castle.is_castle_queenside
    assert castle.promotion_type is None


def test_moves_compare_structurally() -> None:
    assert Move(52, 36, WHITE | PAWN, DOUBLE_PUSH) == Move(52, 36, WHITE | PAWN, DOUBLE_PUSH)
    assert Move(52, 36, WHITE | PAWN, DOUBLE_PUSH) != Move(52, 36, WHITE | PAWN, NORMAL)


@pytest.mark.parametrize(("from_sq", "to_sq"), [(0, 0), (-1, 5), (10, 64)])
def test_invalid_move_squares(from_sq: int, to_sq: int) -> None:
    with pytest.raises(InvalidMoveError):
        Move(from_sq, to_sq, WHITE | PAWN)


def test_generated_moves_parse_back_to_themselves() -> None:
    pos = Position.from_fen("r3k2r/Pppp1ppp/1b3nbN/nP6/BBP1P3/q4N2/Pp1P2PP/R2Q1RK1 b kq - 0 1")
    for m in pos.legal_moves:
        lan = parse_lan(m.to_lan())
        assert lan.flags == m.flags
        if not m.is_castle:
            assert (lan.from_sq, lan.to_sq) == (m.from_sq, m.to_sq)
