"""AIManager: one player per color, and the busy flag that keeps a single move request in flight."""

from typing import Callable, Optional

from loguru import logger

from chessduel.ai.player import AIChessPlayer, MovePlayer
from chessduel.chess.game import Game
from chessduel.core.exceptions import GameStateError
from chessduel.core.shared_types import Color

PlayerFactory = Callable[[str, str], MovePlayer]


def default_player_factory(api_key: str, model: str) -> MovePlayer:
    return AIChessPlayer(api_key, model)


class AIManager:
    def __init__(self, player_factory: PlayerFactory = default_player_factory) -> None:
        self.player_factory = player_factory
        self.players: dict[Color, Optional[MovePlayer]] = {
            Color.WHITE: None,
            Color.BLACK: None,
        }
        self.is_thinking = False

    def set_player(self, color: Color, api_key: str, model: str) -> None:
        self.players[color] = self.player_factory(api_key, model)

    def set_white_ai(self, api_key: str, model: str) -> None:
        self.set_player(Color.WHITE, api_key, model)

    def set_black_ai(self, api_key: str, model: str) -> None:
        self.set_player(Color.BLACK, api_key, model)

    def can_make_move(self) -> bool:
        return not self.is_thinking

    def has_valid_ais(self) -> bool:
        return all(player is not None for player in self.players.values())

    def ai_info(self) -> dict[Color, Optional[str]]:
        return {
            color: player.model if player else None
            for color, player in self.players.items()
        }

    async def make_ai_move(self, game: Game) -> bool:
        """
        Let the side to move pick a move and play it.

        Returns False without doing anything if a request is already outstanding.
        NOTE: the caller checks `game.is_over` first; asking for a move in a finished game raises NoLegalMovesError.
        """
        if self.is_thinking:
            return False

        player = self.players[game.side_to_move]
        if player is None:
            raise GameStateError(f"No AI configured for {game.side_to_move}")

        self.is_thinking = True
        try:
            logger.info("{} to move ({})", game.side_to_move, player.model)
            move = await player.request_move(game)
            success = game.apply_move(move.from_square, move.to_square)
            if not success:
                logger.error("Game refused move {} from {}", move.describe(), player.model)
            return success
        finally:
            self.is_thinking = False
