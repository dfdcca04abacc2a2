"""
Turning a free-text model reply into a candidate move.

Interpretations are tried most specific first, the first one that matches wins:

1. labeled      "from:e2 to:e4"
2. unlabeled    "from e2 to e4"
3. separated    "e2-e4" / "e2 to e4"
4. verbal       "move e2 to e4"
5. compact      "e2e4"
6. any squares  the first two square names found anywhere in the text

NOTE: parsing says nothing about legality. That is checked against the Game afterwards.
"""

import re
from dataclasses import dataclass
from typing import Optional

from loguru import logger

from chessduel.chess.square import Square

SQUARE = r"([a-h][1-8])"

MOVE_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("labeled", re.compile(rf"from\s*:\s*{SQUARE}\s+to\s*:\s*{SQUARE}")),
    ("unlabeled", re.compile(rf"from\s+{SQUARE}\s+to\s+{SQUARE}")),
    ("separated", re.compile(rf"{SQUARE}\s*(?:-|to)\s*{SQUARE}")),
    ("verbal", re.compile(rf"move\s+{SQUARE}\s+to\s+{SQUARE}")),
    ("compact", re.compile(rf"\b{SQUARE}{SQUARE}\b")),
]
ANY_SQUARE = re.compile(r"\b[a-h][1-8]\b")


@dataclass(frozen=True)
class ParsedMove:
    from_square: Square
    to_square: Square
    format: str

    def describe(self) -> str:
        return f"from:{self.from_square.to_algebraic()} to:{self.to_square.to_algebraic()}"


def parse_move(response: Optional[str]) -> Optional[ParsedMove]:
    """Returns None if nothing that looks like a move could be found."""
    if not response or not response.strip():
        return None

    clean_response = response.strip().lower()

    for name, pattern in MOVE_PATTERNS:
        match = pattern.search(clean_response)
        if match:
            return _parsed(match.group(1), match.group(2), name)

    squares = ANY_SQUARE.findall(clean_response)
    if len(squares) >= 2:
        return _parsed(squares[0], squares[1], "squares")

    logger.debug("No move format matched (reply length {})", len(response))
    return None


def _parsed(origin: str, destination: str, format_name: str) -> ParsedMove:
    return ParsedMove(
        from_square=Square.from_algebraic(origin),
        to_square=Square.from_algebraic(destination),
        format=format_name,
    )
