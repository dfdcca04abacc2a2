"""Unit tests for chessduel/chess/castling.py"""

import pytest

from chessduel.chess.castling import (
    CASTLING_RULES,
    CastlingRights,
    castling_from_fen,
    castling_to_fen,
    full_castling_rights,
)
from chessduel.chess.square import Square
from chessduel.core.shared_types import CastlingSide, Color


def squares(*names: str) -> list[Square]:
    return [Square.from_algebraic(name) for name in names]


@pytest.mark.parametrize(
    "color, side, between, king_path",
    [
        (Color.WHITE, CastlingSide.KINGSIDE, ["f1", "g1"], ["e1", "f1", "g1"]),
        (Color.WHITE, CastlingSide.QUEENSIDE, ["b1", "c1", "d1"], ["e1", "d1", "c1"]),
        (Color.BLACK, CastlingSide.KINGSIDE, ["f8", "g8"], ["e8", "f8", "g8"]),
        (Color.BLACK, CastlingSide.QUEENSIDE, ["b8", "c8", "d8"], ["e8", "d8", "c8"]),
    ],
)
def test_castling_squares(
    color: Color, side: CastlingSide, between: list[str], king_path: list[str]
) -> None:
    """b1/b8 must be empty for the long castle, but the king never crosses it."""
    rule = CASTLING_RULES[(color, side)]
    assert rule.squares_between() == squares(*between)
    assert rule.king_path() == squares(*king_path)


def test_revoking_rights() -> None:
    rights = CastlingRights()
    assert rights.allows(CastlingSide.KINGSIDE)
    assert rights.allows(CastlingSide.QUEENSIDE)

    rights.revoke(CastlingSide.QUEENSIDE)
    assert rights.allows(CastlingSide.KINGSIDE)
    assert not rights.allows(CastlingSide.QUEENSIDE)

    rights.revoke_all()
    assert not rights.allows(CastlingSide.KINGSIDE)


@pytest.mark.parametrize(
    "castling_fen, white, black",
    [
        ("KQkq", (True, True), (True, True)),
        ("-", (False, False), (False, False)),
        ("Kq", (True, False), (False, True)),
        ("k", (False, False), (True, False)),
    ],
)
def test_castling_fen_roundtrip(
    castling_fen: str, white: tuple[bool, bool], black: tuple[bool, bool]
) -> None:
    rights = castling_from_fen(castling_fen)
    assert (rights[Color.WHITE].kingside, rights[Color.WHITE].queenside) == white
    assert (rights[Color.BLACK].kingside, rights[Color.BLACK].queenside) == black
    assert castling_to_fen(rights) == castling_fen


def test_full_rights_are_independent() -> None:
    rights = full_castling_rights()
    rights[Color.WHITE].revoke_all()
    assert castling_to_fen(rights) == "kq"
