"""Requests and Response models"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from chessduel.chess.fen import is_valid_fen, is_valid_square
from chessduel.core.exceptions import InvalidRequestError
from chessduel.core.shared_types import Color, GameResult

ModelId = str


# --- REQUEST MODELS ---
class StartMatchRequest(BaseModel):
    api_key: str
    white_model: ModelId
    black_model: ModelId
    starting_fen: Optional[str] = None

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise InvalidRequestError("Please enter your API key first.")
        return value

    @field_validator(*["white_model", "black_model"])
    @classmethod
    def validate_model(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise InvalidRequestError("Please select a model for both White and Black.")
        return value

    @field_validator("starting_fen")
    @classmethod
    def validate_starting_fen(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value

        value = value.strip()
        if not is_valid_fen(value):
            raise InvalidRequestError(f"Cannot interpret {value!r} as a FEN string.")
        return value


class MoveRequest(BaseModel):
    from_square: str
    to_square: str

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        value = value.strip().lower()
        if not is_valid_square(value):
            raise InvalidRequestError(
                f"Cannot interpret {value!r} as a valid square name."
            )
        return value


class LegalMovesRequest(BaseModel):
    square: str

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        value = value.strip().lower()
        if not is_valid_square(value):
            raise InvalidRequestError(
                f"Cannot interpret {value!r} as a valid square name."
            )
        return value


class SaveCredentialRequest(BaseModel):
    api_key: str

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise InvalidRequestError("API key must not be empty.")
        return value


# --- RESPONSE MODELS ---
class GameStateResponse(BaseModel):
    match_id: Optional[UUID]
    fen: str
    full_fen: str
    board_text: str
    side_to_move: Color
    check_status: dict[Color, bool]
    result: GameResult
    move_history: list[str]
    last_move: Optional[str]
    white_model: Optional[ModelId]
    black_model: Optional[ModelId]
    running: bool


class LegalMovesResponse(BaseModel):
    square: str
    legal_moves: list[str]


class MoveResponse(BaseModel):
    accepted: bool
    state: GameStateResponse


class ModelEntry(BaseModel):
    id: ModelId
    display_name: str
    priority: int


class ModelListResponse(BaseModel):
    models: list[ModelEntry]


class MatchSummary(BaseModel):
    match_id: UUID
    white_model: ModelId
    black_model: ModelId
    result: GameResult
    num_moves: int
