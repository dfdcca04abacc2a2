"""Unit tests for chessduel/api/models.py"""

import pytest

from chessduel.api.models import (
    LegalMovesRequest,
    MoveRequest,
    SaveCredentialRequest,
    StartMatchRequest,
)
from chessduel.core.exceptions import InvalidRequestError


def start_request(**overrides: object) -> StartMatchRequest:
    data: dict = dict(api_key="key", white_model="openai/gpt-4o", black_model="google/gemini-pro")
    data.update(overrides)
    return StartMatchRequest(**data)


# -- Validation - StartMatchRequest --
def test_valid_fen() -> None:
    valid_fen = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
    assert start_request(starting_fen=valid_fen).starting_fen == valid_fen


def test_starting_fen_is_optional() -> None:
    """Should be able to not supply a starting FEN, and validator just returns None."""
    assert start_request().starting_fen is None


@pytest.mark.parametrize(
    "invalid_fen",
    [
        "",
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP w KQkq - 0 1",
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0",
        "rnbq1bnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1",
    ],
)
def test_invalid_fen(invalid_fen: str) -> None:
    with pytest.raises(InvalidRequestError):
        start_request(starting_fen=invalid_fen)


@pytest.mark.parametrize("field", ["api_key", "white_model", "black_model"])
def test_required_fields_must_not_be_blank(field: str) -> None:
    with pytest.raises(InvalidRequestError):
        start_request(**{field: "   "})


def test_values_are_stripped() -> None:
    request = start_request(api_key=" key ", white_model=" openai/gpt-4o ")
    assert request.api_key == "key"
    assert request.white_model == "openai/gpt-4o"


# -- Validation - MoveRequest / LegalMovesRequest --
@pytest.mark.parametrize("square", ["e4", "E4", " a1 ", "h8"])
def test_valid_squares(square: str) -> None:
    request = MoveRequest(from_square=square, to_square="e5")
    assert request.from_square == square.strip().lower()
    assert LegalMovesRequest(square=square).square == square.strip().lower()


@pytest.mark.parametrize("square", ["", "e", "e9", "i1", "4e", "e44"])
def test_invalid_squares(square: str) -> None:
    with pytest.raises(InvalidRequestError):
        MoveRequest(from_square="e2", to_square=square)
    with pytest.raises(InvalidRequestError):
        LegalMovesRequest(square=square)


def test_blank_credential() -> None:
    with pytest.raises(InvalidRequestError):
        SaveCredentialRequest(api_key="")
