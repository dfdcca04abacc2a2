"""
Prompt builders for move requests.

The prompt carries everything the model needs about the position (board drawing, FEN, side to move, recent moves),
the legal moves for the first few attempts, and, after a failed attempt, what went wrong.
"""

from dataclasses import dataclass
from typing import Optional

from chessduel.chess.game import Game
from chessduel.core.shared_types import Color

SYSTEM_PROMPT = (
    "You are a chess engine. Respond ONLY with a chess move in this exact format: from:e2 to:e4. "
    "No explanations, analysis, reasoning, or other text. Only the move format."
)

RECENT_MOVES_SHOWN = 5


@dataclass
class PromptContext:
    """Everything that changes from one attempt to the next."""

    attempt: int = 1
    last_invalid_move: Optional[str] = None
    last_error: Optional[str] = None


def describe_board(game: Game) -> str:
    return "\n" + game.position_text() + "\n"


def describe_legal_moves(game: Game, limit: int = 20) -> str:
    """Legal moves as `from:X to:Y`, at most `limit` of them plus a count of the rest."""
    moves = [move.describe() for move in game.all_legal_moves()]
    if not moves:
        return "No valid moves available (checkmate or stalemate)"

    result = ", ".join(moves[:limit])
    if len(moves) > limit:
        result += f" ... ({len(moves) - limit} more)"
    return result


def build_prompt(
    game: Game,
    context: PromptContext,
    history_window: int = 10,
    legal_moves: Optional[str] = None,
    legal_moves_attempts: int = 3,
) -> str:
    player = "White" if game.side_to_move == Color.WHITE else "Black"
    history = game.move_history[-history_window:] if history_window else []
    recent = " ".join(history[-RECENT_MOVES_SHOWN:]) if history else "Start"

    sections = [
        f"You are playing chess as {player}.\n\n"
        f"BOARD:\n{describe_board(game)}\n"
        f"FEN: {game.to_fen()}\n"
        f"TO MOVE: {player}\n"
        f"RECENT: {recent}"
    ]

    if context.attempt > 1 and (context.last_invalid_move or context.last_error):
        feedback = [f"PREVIOUS ATTEMPT FAILED (Attempt #{context.attempt}):"]
        if context.last_invalid_move:
            feedback.append(f"Invalid move attempted: {context.last_invalid_move}")
        if context.last_error:
            feedback.append(f"Error: {context.last_error}")
        feedback.append("You MUST provide a DIFFERENT, LEGAL move this time!")
        sections.append("\n".join(feedback))

    if legal_moves and context.attempt <= legal_moves_attempts:
        sections.append(f"VALID MOVES AVAILABLE:\n{legal_moves}")

    rules = [
        "Think silently about your best move, then respond with ONLY this exact format:",
        "",
        "from:e2 to:e4",
        "",
        "Examples:",
        "from:e2 to:e4 (pawn)",
        "from:g1 to:f3 (knight)",
        "from:f1 to:c4 (bishop)",
        "from:e1 to:g1 (castle)",
        "",
        "CRITICAL RULES:",
        "- NO explanations, analysis, reasoning, or other text",
        "- ONLY the exact move format: from:X to:Y",
        "- Must be a LEGAL move according to chess rules",
        f"- Must be YOUR piece ({player})",
        "- Cannot leave your king in check",
    ]
    if context.attempt > 1:
        rules.append(
            f"- This is attempt #{context.attempt} - provide a DIFFERENT valid move!"
        )
    sections.append("\n".join(rules))
    sections.append("Your move:")

    return "\n\n".join(sections)
