"""Orchestration of one AI vs AI match: the game, the two players, and the match record (and the reverse direction)."""

import asyncio
from typing import Awaitable, Callable, Optional
from uuid import UUID

from loguru import logger

from chessduel.ai.manager import AIManager
from chessduel.api.models import (
    GameStateResponse,
    LegalMovesRequest,
    LegalMovesResponse,
    MatchSummary,
    MoveRequest,
    MoveResponse,
    StartMatchRequest,
)
from chessduel.chess.game import Game
from chessduel.core.config import Settings, get_settings
from chessduel.core.exceptions import ChessDuelError, RepositoryError
from chessduel.core.models import MatchModel
from chessduel.core.shared_types import Color, GameResult
from chessduel.db.repository import MatchRepository

BUSY_RETRY_S = 0.5

Sleep = Callable[[float], Awaitable[None]]
MoveHook = Callable[[GameStateResponse], None]


class MatchService:
    """
    Orchestration of layers for an AI vs AI match.
    ----
    `run()` is the auto-play loop: one AI move, a short pause, the next AI move, until the game is over or paused.
    Every applied move is written to the repository.
    """

    def __init__(
        self,
        repository: MatchRepository,
        manager: Optional[AIManager] = None,
        settings: Optional[Settings] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.repo = repository
        self.manager = manager or AIManager()
        self.settings = settings or get_settings()
        self.game = Game.new_game()
        self.match_id: Optional[UUID] = None
        self.running = False
        self._sleep = sleep

    # -- controls --
    def start(self, request: StartMatchRequest) -> GameStateResponse:
        """
        Configure both players and (re)start auto-play.

        A paused match is resumed where it stopped. A finished match (or no match at all) starts a new one.
        """
        self.manager.set_white_ai(request.api_key, request.white_model)
        self.manager.set_black_ai(request.api_key, request.black_model)
        if request.white_model == request.black_model:
            logger.warning("Both sides use the same model: {}", request.white_model)

        if self.match_id is None or self.game.is_over:
            self.game = (
                Game.from_fen(request.starting_fen)
                if request.starting_fen
                else Game.new_game()
            )
            _, self.match_id = self.repo.create_match(self._to_model())
            logger.info(
                "Match {} started: {} vs {}",
                self.match_id,
                request.white_model,
                request.black_model,
            )
        else:
            self._store()
            logger.info("Match {} resumed", self.match_id)

        self.running = not self.game.is_over
        return self.state()

    def pause(self) -> GameStateResponse:
        """Stop scheduling moves. A move already being requested still completes."""
        self.running = False
        logger.info(
            "Match paused ({} moves)", (len(self.game.move_history) + 1) // 2
        )
        return self.state()

    def reset(self) -> GameStateResponse:
        """
        Back to the initial position. The players stay configured, the old record is kept as is.

        The board is replaced, not cleared: a move still being requested lands on the discarded game.
        """
        self.running = False
        self.game = Game.new_game()
        self.match_id = None
        logger.info("Board reset")
        return self.state()

    # -- auto-play --
    async def play_next_move(self) -> bool:
        """
        Let the side to move play one move.

        Returns False when nothing was played: not running, game over, a request still in flight, or
        the move failed (which also pauses the match).
        """
        if not self.running or self.game.is_over:
            return False

        if not self.manager.can_make_move():
            return False

        game = self.game
        try:
            moved = await self.manager.make_ai_move(game)
        except ChessDuelError as exc:
            logger.error("Move error: {}", exc)
            if game is self.game:
                self.pause()
            return False

        if game is not self.game:
            logger.info("Board was reset while the AI was thinking, move dropped")
            return False

        if not moved:
            logger.error("AI could not make a move, match paused")
            self.pause()
            return False

        self._store()
        if self.game.is_over:
            self._end()
        elif self.game.check_status[self.game.side_to_move]:
            logger.info(
                "{} in check, move {}",
                self.game.side_to_move,
                (len(self.game.move_history) + 1) // 2,
            )
        return True

    async def run(self, on_move: Optional[MoveHook] = None) -> GameStateResponse:
        """Auto-play until the game is over or the match is paused. `on_move` sees the state after every move."""
        while self.running and not self.game.is_over:
            if not self.manager.can_make_move():
                await self._sleep(BUSY_RETRY_S)
                continue

            moved = await self.play_next_move()
            if moved and on_move is not None:
                on_move(self.state())
            if moved and self.running:
                await self._sleep(self.settings.move_delay_s)
        return self.state()

    # -- queries / manual play --
    def state(self) -> GameStateResponse:
        ai_info = self.manager.ai_info()
        last_move = self.game.last_move
        return GameStateResponse(
            match_id=self.match_id,
            fen=self.game.to_fen(),
            full_fen=self.game.to_full_fen(),
            board_text=self.game.position_text(),
            side_to_move=self.game.side_to_move,
            check_status=self.game.check_status,
            result=self.game.result,
            move_history=self.game.move_history,
            last_move=last_move.to_uci() if last_move else None,
            white_model=ai_info[Color.WHITE],
            black_model=ai_info[Color.BLACK],
            running=self.running,
        )

    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        moves = self.game.legal_moves(request.square)
        return LegalMovesResponse(
            square=request.square,
            legal_moves=[move.to_square.to_algebraic() for move in moves],
        )

    def manual_move(self, request: MoveRequest) -> MoveResponse:
        """Play a move by hand. Refused (not raised) if illegal or while an AI is thinking."""
        accepted = self.manager.can_make_move() and self.game.apply_move(
            request.from_square, request.to_square
        )
        if accepted:
            self._store()
            if self.game.is_over:
                self._end()
        return MoveResponse(accepted=accepted, state=self.state())

    def list_matches(self) -> list[MatchSummary]:
        """Show all recorded matches."""
        return [
            MatchSummary(
                match_id=match_id,
                white_model=model.white_model,
                black_model=model.black_model,
                result=GameResult(model.result),
                num_moves=len(model.moves),
            )
            for match_id, model in self.repo.list_matches()
        ]

    def delete_match(self, match_id: UUID) -> None:
        if self.repo.delete_match(match_id) is None:
            raise RepositoryError(f"Match with {match_id=} not found.")
        if match_id == self.match_id:
            self.running = False
            self.match_id = None

    # -- Internal helpers --
    def _end(self) -> None:
        self.running = False
        ai_info = self.manager.ai_info()
        match self.game.result:
            case GameResult.WHITE_WINS:
                outcome = f"White wins by checkmate ({ai_info[Color.WHITE] or 'AI'})"
            case GameResult.BLACK_WINS:
                outcome = f"Black wins by checkmate ({ai_info[Color.BLACK] or 'AI'})"
            case GameResult.STALEMATE:
                outcome = "Draw by stalemate"
            case _:
                outcome = "Game over"
        logger.info(
            "{}. {} moves played.", outcome, (len(self.game.move_history) + 1) // 2
        )

    def _to_model(self) -> MatchModel:
        ai_info = self.manager.ai_info()
        last_move = self.game.last_move
        return MatchModel(
            white_model=ai_info[Color.WHITE] or "",
            black_model=ai_info[Color.BLACK] or "",
            current_fen=self.game.to_full_fen(),
            moves=self.game.move_history,
            result=str(self.game.result),
            last_move=last_move.to_uci() if last_move else None,
        )

    def _store(self) -> None:
        """Write the current state to the match record, if there is one."""
        if self.match_id is None:
            return
        if self.repo.update_match(self.match_id, self._to_model()) is None:
            raise RepositoryError(f"Match with {self.match_id=} not found.")
