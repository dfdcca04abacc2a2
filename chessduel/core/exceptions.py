"""
Custom exceptions, one base class per layer concern.

NOTE: Illegal move attempts are NOT exceptions. `Game.apply_move()` simply reports failure.
"""

from typing import Optional


class ChessDuelError(Exception):
    """Top-level exception for anything raised on purpose by this package."""


# --- DOMAIN LAYER ---
class GameError(ChessDuelError):
    """Base for the rules engine."""


class InvalidFENError(GameError):
    """String could not be interpreted as a FEN."""


class GameStateError(GameError):
    """Operation not allowed in the current state of the game."""


class NoLegalMovesError(GameError):
    """A move was requested for a side that has none (game already over)."""


# --- ADAPTER LAYER ---
class AdapterError(ChessDuelError):
    """Base for everything talking to the language model provider."""


class CompletionError(AdapterError):
    """
    A single completion request failed.
    ---
    Always recoverable: the move adapter counts it as one failed attempt.
    """

    def __init__(
        self, reason: str, message: str = "", status_code: Optional[int] = None
    ) -> None:
        self.reason = reason
        self.status_code = status_code
        super().__init__(message or reason)


class CatalogError(AdapterError):
    """Listing the available models failed. `classification` is meant to be shown to the user."""

    def __init__(self, classification: str, detail: str = "") -> None:
        self.classification = classification
        self.detail = detail
        super().__init__(f"{classification}: {detail}" if detail else classification)


# --- PERSISTENCE / SERVICE ---
class RepositoryError(ChessDuelError):
    """Record not found / could not be stored."""


class InvalidRequestError(ChessDuelError):
    """Request coming from the UI layer failed validation."""
