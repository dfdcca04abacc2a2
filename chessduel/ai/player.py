"""
The move-proposal adapter for one side of the board.

`request_move()` keeps asking the model until it names a legal move, telling it what was wrong with
the previous answer. After `max_attempts` failures a uniformly random legal move is played instead,
so the caller always gets a playable move.
"""

import asyncio
import random
from typing import Awaitable, Callable, Optional, Protocol

from loguru import logger

from chessduel.ai.completions import CompletionClient
from chessduel.ai.events import AttemptOutcome, EventCallback, MoveAttemptEvent
from chessduel.ai.parsing import ParsedMove, parse_move
from chessduel.ai.prompts import (
    SYSTEM_PROMPT,
    PromptContext,
    build_prompt,
    describe_legal_moves,
)
from chessduel.chess.game import Game
from chessduel.chess.moves import Move
from chessduel.core.config import Settings, get_settings
from chessduel.core.exceptions import CompletionError, NoLegalMovesError

TRANSPORT_ERROR_PAUSE_S = 0.5
SHORT_BACKOFF_S = 0.8
LONG_BACKOFF_S = 2.0
BACKOFF_EVERY = 3
LONG_BACKOFF_AFTER = 15

UNPARSEABLE_REPLY = "Could not understand the move format"

Sleep = Callable[[float], Awaitable[None]]


class Completer(Protocol):
    async def complete(self, system: str, prompt: str) -> str: ...


class MovePlayer(Protocol):
    """Anything that can pick a move for the side to move."""

    model: str

    async def request_move(self, game: Game) -> Move: ...


def explain_rejection(game: Game, parsed: ParsedMove) -> str:
    """Why the parsed move is not playable, in words the model can act on."""
    origin, destination = parsed.from_square, parsed.to_square
    if origin == destination:
        return "Origin and destination are the same square"

    piece = game.piece_at(origin)
    if piece is None:
        return f"There is no piece on {origin}"
    if piece.color != game.side_to_move:
        return f"The piece on {origin} is not yours ({piece.color} {piece.type})"

    legal = game.legal_moves(origin)
    if not legal:
        return f"Your {piece.type} on {origin} has no legal moves"
    return f"Your {piece.type} on {origin} cannot legally move to {destination}"


def backoff_delay(attempt: int) -> Optional[float]:
    """Pause after every 3rd failed attempt; longer once past attempt 15."""
    if attempt % BACKOFF_EVERY != 0:
        return None
    return LONG_BACKOFF_S if attempt > LONG_BACKOFF_AFTER else SHORT_BACKOFF_S


class AIChessPlayer:
    """Bound to one credential and one model."""

    def __init__(
        self,
        api_key: str,
        model: str,
        settings: Optional[Settings] = None,
        completer: Optional[Completer] = None,
        rng: Optional[random.Random] = None,
        on_event: Optional[EventCallback] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.model = model
        self.settings = settings or get_settings()
        self.completer = completer or CompletionClient(api_key, model, self.settings)
        self.rng = rng or random.Random()
        self.on_event = on_event
        self._sleep = sleep

    async def request_move(self, game: Game) -> Move:
        """
        Ask the model for a move
        ----

        1. build the prompt (legal moves listed for the first attempts, previous failure fed back)
        2. send it; transport failures count as a failed attempt
        3. parse the reply
        4. validate against the game, with the same rule `apply_move()` uses
        5. on failure: remember what went wrong, pause now and then, try again
        6. out of attempts: random legal move
        """
        if game.is_over:
            raise NoLegalMovesError(f"Game is already over ({game.result}), no move to request")

        context = PromptContext()

        for attempt in range(1, self.settings.max_attempts + 1):
            context.attempt = attempt
            log = logger.bind(model=self.model, attempt=attempt)
            prompt = build_prompt(
                game,
                context,
                history_window=self.settings.history_window,
                legal_moves=describe_legal_moves(game, self.settings.legal_moves_shown),
                legal_moves_attempts=self.settings.legal_moves_attempts,
            )

            log.debug("{} thinking... (attempt #{})", self.model, attempt)
            try:
                reply = await self.completer.complete(SYSTEM_PROMPT, prompt)
            except CompletionError as exc:
                context.last_error = f"API error: {exc}"
                log.warning("Request failed (attempt #{}): {}", attempt, exc.reason)
                self._emit(attempt, AttemptOutcome.TRANSPORT_ERROR, reason=exc.reason)
                await self._sleep(TRANSPORT_ERROR_PAUSE_S)
                continue

            parsed = parse_move(reply)
            if parsed is not None:
                move = game.find_legal_move(parsed.from_square, parsed.to_square)
                if move is not None:
                    log.info("Valid move from {}: {}", self.model, move.describe())
                    self._emit(
                        attempt,
                        AttemptOutcome.ACCEPTED,
                        raw_reply=reply,
                        move=move.describe(),
                    )
                    return move

                context.last_invalid_move = parsed.describe()
                context.last_error = explain_rejection(game, parsed)
                outcome = AttemptOutcome.ILLEGAL_MOVE
            else:
                context.last_error = UNPARSEABLE_REPLY
                outcome = AttemptOutcome.UNPARSEABLE

            log.warning("Invalid move (attempt #{}): {}", attempt, context.last_error)
            self._emit(
                attempt,
                outcome,
                reason=context.last_error,
                raw_reply=reply,
                move=parsed.describe() if parsed else None,
            )

            delay = backoff_delay(attempt)
            if delay is not None:
                await self._sleep(delay)

        return self.random_move(game)

    def random_move(self, game: Game) -> Move:
        """Uniformly random legal move. Only valid while the game is still in progress."""
        legal_moves = game.all_legal_moves()
        if not legal_moves:
            raise NoLegalMovesError(
                f"No legal moves for {game.side_to_move}, the game is over ({game.result})"
            )

        move = self.rng.choice(legal_moves)
        logger.bind(model=self.model).error(
            "No valid move after {} attempts, playing random move {}",
            self.settings.max_attempts,
            move.describe(),
        )
        self._emit(
            self.settings.max_attempts,
            AttemptOutcome.FALLBACK,
            reason="attempts exhausted",
            move=move.describe(),
        )
        return move

    def _emit(
        self,
        attempt: int,
        outcome: AttemptOutcome,
        reason: Optional[str] = None,
        raw_reply: Optional[str] = None,
        move: Optional[str] = None,
    ) -> None:
        if self.on_event is None:
            return
        self.on_event(
            MoveAttemptEvent(
                model=self.model,
                attempt=attempt,
                outcome=outcome,
                reason=reason,
                raw_reply=raw_reply,
                move=move,
            )
        )
