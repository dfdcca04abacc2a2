"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Hence, both the API layer (higher) and db layer (lower) use the model(s) defined here to send to/receive from the Service.
"""

from dataclasses import dataclass, field
from typing import Optional

ModelId = str


@dataclass
class MatchModel:
    """Transport-safe representation of one AI vs AI match."""

    white_model: ModelId
    black_model: ModelId
    current_fen: str
    moves: list[str] = field(default_factory=list)
    result: str = "in_progress"
    last_move: Optional[str] = None
