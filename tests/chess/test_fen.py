"""Unit tests for chessduel/chess/fen.py"""

import pytest

from chessduel.chess.fen import (
    STARTING_FEN,
    FENState,
    is_valid_castling_rights,
    is_valid_fen,
    is_valid_square,
)
from chessduel.chess.square import Square
from chessduel.core.exceptions import InvalidFENError
from chessduel.core.shared_types import Color


@pytest.mark.parametrize(
    "fen",
    [
        STARTING_FEN,
        "r3k2r/pppq1ppp/2npbn2/4p3/2B1P3/2NP1N2/PPP2PPP/R1BQ1RK1 b kq - 3 9",
        "rnbqkbnr/ppp1p1pp/8/3pPp2/8/8/PPPP1PPP/RNBQKBNR w KQkq f6 0 3",
        # move counters are optional
        "8/8/8/4k3/8/8/4K3/8 w - -",
    ],
)
def test_valid_fen(fen: str) -> None:
    assert is_valid_fen(fen)


@pytest.mark.parametrize(
    "fen",
    [
        "",
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq -  0",  # 5 fields
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR x KQkq - 0 1",  # color
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkx - 0 1",  # castling
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w kqKQ - 0 1",  # castling order
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq z9 0 1",  # en passant
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - a 1",  # counter
        "rnbq1bnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1",  # no black king
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBKKBNR w KQkq - 0 1",  # two white kings
    ],
)
def test_invalid_fen(fen: str) -> None:
    assert not is_valid_fen(fen)
    with pytest.raises(InvalidFENError):
        FENState.from_fen(fen)


@pytest.mark.parametrize("castling", ["-", "K", "Qk", "KQkq", "kq"])
def test_valid_castling_rights(castling: str) -> None:
    assert is_valid_castling_rights(castling)


@pytest.mark.parametrize("square, valid", [("e4", True), ("h8", True), ("i1", False), ("a9", False), ("a", False), ("a0", False)])
def test_is_valid_square(square: str, valid: bool) -> None:
    assert is_valid_square(square) == valid


def test_parsing_fen_state() -> None:
    fen = "rnbqkbnr/ppp1p1pp/8/3pPp2/8/8/PPPP1PPP/RNBQKBNR w Kq f6 0 3"
    state = FENState.from_fen(fen)
    assert state.position == "rnbqkbnr/ppp1p1pp/8/3pPp2/8/8/PPPP1PPP/RNBQKBNR"
    assert state.color_to_move == Color.WHITE
    assert state.castling_rights[Color.WHITE].kingside
    assert not state.castling_rights[Color.WHITE].queenside
    assert not state.castling_rights[Color.BLACK].kingside
    assert state.castling_rights[Color.BLACK].queenside
    assert state.en_passant_square == Square.from_algebraic("f6")
    assert state.num_turns == 3
    assert state.to_fen() == fen


def test_four_field_fen_gets_default_counters() -> None:
    state = FENState.from_fen("8/8/8/4k3/8/8/4K3/8 b - -")
    assert state.color_to_move == Color.BLACK
    assert (state.half_move_clock, state.num_turns) == (0, 1)
    assert state.to_fen() == "8/8/8/4k3/8/8/4K3/8 b - - 0 1"


def test_starting_position() -> None:
    assert FENState.starting_position().to_fen() == STARTING_FEN
