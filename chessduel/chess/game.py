"""
The Game class is the entrypoint into the rules engine.
It owns the GameState and is the only thing allowed to change it (through `apply_move()`).
Callers (the move adapter, the match service) only query it and submit moves.
"""

from dataclasses import dataclass, field
from typing import Optional, Self

from loguru import logger

from chessduel.chess.board import Board
from chessduel.chess.castling import (
    CASTLING_RULES,
    CastlingRights,
    full_castling_rights,
)
from chessduel.chess.fen import STARTING_FEN, FENState, is_valid_square
from chessduel.chess.moves import (
    Move,
    en_passant_capture_square,
    en_passant_moves,
    is_pawn_push_to_promotion_square,
    opponent_of,
    pawn_direction,
)
from chessduel.chess.notation import to_notation
from chessduel.chess.pieces import Piece
from chessduel.chess.square import Square
from chessduel.core.shared_types import CastlingSide, Color, GameResult, PieceType

# Auto-promotion: no UI path offers a choice, so pawns always become queens.
PROMOTION_PIECE = PieceType.QUEEN

SquareLike = Square | str


def as_square(square: SquareLike) -> Optional[Square]:
    """None for anything that does not name a square on the board ('e', 'ex', 'e9', ...)."""
    if isinstance(square, str):
        square = square.strip().lower()
        return Square.from_algebraic(square) if is_valid_square(square) else None
    return square if square.is_within_bounds() else None


@dataclass
class GameState:
    """Single mutable aggregate. Only Game mutates it."""

    board: Board
    side_to_move: Color = Color.WHITE
    castling_rights: dict[Color, CastlingRights] = field(
        default_factory=full_castling_rights
    )
    en_passant_target: Optional[Square] = None
    move_history: list[str] = field(default_factory=list)
    last_move: Optional[Move] = None
    check_status: dict[Color, bool] = field(
        default_factory=lambda: {Color.WHITE: False, Color.BLACK: False}
    )
    result: GameResult = GameResult.IN_PROGRESS
    # full move number, only needed to write a complete FEN
    num_turns: int = 1


class Game:
    # --- RULES ENGINE API ---

    def __init__(self, state: Optional[GameState] = None) -> None:
        self.state = state or GameState(board=Board.starting_position())
        self._update_game_status()

    @classmethod
    def new_game(cls) -> Self:
        return cls()

    @classmethod
    def from_fen(cls, fen: str) -> Self:
        """Start from a custom position. Move counters (if given) are only used for the full move number."""
        fen_state = FENState.from_fen(fen)
        state = GameState(
            board=Board.from_fen(fen_state.position),
            side_to_move=fen_state.color_to_move,
            castling_rights=fen_state.castling_rights,
            en_passant_target=fen_state.en_passant_square,
            num_turns=fen_state.num_turns,
        )
        return cls(state)

    def reset(self) -> None:
        """Throw the whole state away and start over from the initial position."""
        self.state = GameState(board=Board.starting_position())
        self._update_game_status()

    # -- queries --
    @property
    def board(self) -> Board:
        return self.state.board

    @property
    def side_to_move(self) -> Color:
        return self.state.side_to_move

    @property
    def result(self) -> GameResult:
        return self.state.result

    @property
    def is_over(self) -> bool:
        return self.state.result != GameResult.IN_PROGRESS

    @property
    def check_status(self) -> dict[Color, bool]:
        return dict(self.state.check_status)

    @property
    def move_history(self) -> list[str]:
        return list(self.state.move_history)

    @property
    def last_move(self) -> Optional[Move]:
        return self.state.last_move

    def piece_at(self, square: SquareLike) -> Optional[Piece]:
        square = as_square(square)
        return self.board.piece(square) if square is not None else None

    def legal_moves(self, square: SquareLike) -> list[Move]:
        """
        Legal moves of the piece on `square`
        ----

        Empty if the square is empty or holds a piece of the side NOT to move.

        1. candidate moves from the movement geometry of the piece (the board does this calculation)
        2. add castling candidates (king only) and en passant candidates (pawn only)
        3. remove every move that would leave your own king attacked
        4. tag pawn moves to the far rank with the (automatic) promotion
        """
        square = as_square(square)
        if square is None:
            return []
        piece = self.board.piece(square)
        if piece is None or piece.color != self.side_to_move:
            return []

        candidate_moves = self.board.candidate_moves(square)

        if piece.type == PieceType.KING:
            candidate_moves.extend(self._castling_moves(piece.color, square))

        if piece.type == PieceType.PAWN and self.state.en_passant_target is not None:
            candidate_moves.extend(
                move
                for move in en_passant_moves(
                    self.state.en_passant_target, piece.color, self.board
                )
                if move.from_square == square
            )

        legal_moves: list[Move] = []
        for move in candidate_moves:
            if self._is_putting_yourself_in_check(move, piece.color):
                continue
            if is_pawn_push_to_promotion_square(move, self.board):
                move = Move(
                    move.from_square,
                    move.to_square,
                    is_en_passant=move.is_en_passant,
                    promote_to=PROMOTION_PIECE,
                )
            legal_moves.append(move)
        return legal_moves

    def all_legal_moves(self) -> list[Move]:
        """Every legal move of the side to move, pieces in reading order (a8 ... h1)."""
        moves: list[Move] = []
        for square in self.board.locate_color(self.side_to_move):
            moves.extend(self.legal_moves(square))
        return moves

    def find_legal_move(
        self, from_square: SquareLike, to_square: SquareLike
    ) -> Optional[Move]:
        """The legal move with these squares (incl. its tags), if there is one."""
        to_square = as_square(to_square)
        if to_square is None:
            return None
        return next(
            (
                move
                for move in self.legal_moves(from_square)
                if move.to_square == to_square
            ),
            None,
        )

    def is_legal(self, from_square: SquareLike, to_square: SquareLike) -> bool:
        """Same legality rule `apply_move()` uses."""
        return not self.is_over and self.find_legal_move(from_square, to_square) is not None

    def has_legal_moves(self) -> bool:
        return any(
            self.legal_moves(square)
            for square in self.board.locate_color(self.side_to_move)
        )

    def is_attacked(self, square: SquareLike, by_color: Color) -> bool:
        """Could any piece of `by_color` capture on this square (pseudo-legally)?"""
        square = as_square(square)
        return square is not None and self.board.is_under_attack(square, by_color)

    def can_castle(self, color: Color, side: CastlingSide) -> bool:
        """
        you are allowed to castle if
        ---

        * castling rights for this side are not yet revoked.
        * you are not currently in check (you cannot castle out of check).
        * king and rook still stand on their home squares.
        * every square in between the king and the rook is empty.
        * none of the squares the king stands on, passes over, or lands on is under attack.
        """
        if not self.state.castling_rights[color].allows(side):
            return False

        if self.board.is_check(color):
            return False

        squares = CASTLING_RULES[(color, side)]
        if self.board.piece(squares.king_from) != Piece(PieceType.KING, color):
            return False
        if self.board.piece(squares.rook_from) != Piece(PieceType.ROOK, color):
            return False

        if self.board.is_any_occupied(squares.squares_between()):
            return False

        return not self.board.is_any_under_attack(squares.king_path(), opponent_of(color))

    # -- export --
    def position_text(self) -> str:
        return self.board.to_text()

    def to_fen(self) -> str:
        """Compact export for the language model: piece placement + side to move."""
        active_color = "w" if self.side_to_move == Color.WHITE else "b"
        return f"{self.board.to_fen()} {active_color}"

    def to_full_fen(self) -> str:
        """Standard six-field FEN. The half-move clock is not tracked and always written as 0."""
        return FENState(
            position=self.board.to_fen(),
            color_to_move=self.side_to_move,
            castling_rights=self.state.castling_rights,
            en_passant_square=self.state.en_passant_target,
            half_move_clock=0,
            num_turns=self.state.num_turns,
        ).to_fen()

    # --- THE ONLY MUTATION ---
    def apply_move(self, from_square: SquareLike, to_square: SquareLike) -> bool:
        """
        Attempt to make a move
        -----

        Returns False (and changes nothing) if the game is over or the move is not legal.

        1. update the board (incl. en passant capture, rook relocation, promotion)
        2. update castling rights and the en passant target
        3. log the move, flip the side to move
        4. recompute check status and the result
        """
        if self.is_over:
            logger.debug("Move refused, game is over: {}", self.result)
            return False

        from_square, to_square = as_square(from_square), as_square(to_square)
        if from_square is None or to_square is None:
            logger.debug("Move refused, not a square on the board")
            return False

        move = self.find_legal_move(from_square, to_square)
        if move is None:
            logger.debug("Illegal move refused: {}-{}", from_square, to_square)
            return False

        moving_piece = self.board.piece(from_square)
        assert moving_piece is not None
        notation = to_notation(move, self.board)

        captured = self._execute(self.board, move)
        self._revoke_castling_rights_if_needed(move, moving_piece, captured)
        self.state.en_passant_target = self._determine_en_passant_square(
            move, moving_piece
        )

        self.state.move_history.append(notation)
        self.state.last_move = move
        if self.side_to_move == Color.BLACK:
            self.state.num_turns += 1
        self.state.side_to_move = opponent_of(self.side_to_move)

        self._update_game_status()
        logger.debug("Applied {} -> {} to move", notation, self.side_to_move)
        return True

    # -- PRIVATE HELPERS ---
    def _execute(self, board: Board, move: Move) -> Optional[Piece]:
        """Make the move on the given board (the real one, or a copy for look-ahead). Returns the captured piece."""
        captured: Optional[Piece]
        if move.castling is not None:
            color = board.piece(move.from_square).color  # type: ignore[union-attr]
            squares = CASTLING_RULES[(color, move.castling)]
            board.move_piece(Move(squares.king_from, squares.king_to))
            board.move_piece(Move(squares.rook_from, squares.rook_to))
            return None

        if move.is_en_passant:
            board.move_piece(move)
            captured = board.remove_piece(en_passant_capture_square(move))
        else:
            captured = board.move_piece(move)

        if move.promote_to is not None:
            pawn = board.piece(move.to_square)
            assert pawn is not None
            board.place_piece(pawn.promoted(move.promote_to), move.to_square)
        return captured

    def _is_putting_yourself_in_check(self, move: Move, color: Color) -> bool:
        """Look-ahead on a copy of the board: make the move, then see if the king is attacked."""
        board = self.board.copy()
        self._execute(board, move)
        return board.is_check(color)

    def _castling_moves(self, color: Color, king_square: Square) -> list[Move]:
        moves: list[Move] = []
        for side in CastlingSide:
            squares = CASTLING_RULES[(color, side)]
            if king_square == squares.king_from and self.can_castle(color, side):
                moves.append(
                    Move(squares.king_from, squares.king_to, castling=side)
                )
        return moves

    def _revoke_castling_rights_if_needed(
        self, move: Move, moving_piece: Piece, captured: Optional[Piece]
    ) -> None:
        """
        Checks which rights should get revoked
        ----

        1. moving your king (castling included) --> revoke both
        2. moving a rook away from its home square --> revoke that side
        3. capturing the opponent's rook on its home square --> revoke that side for the opponent
        """
        color = moving_piece.color
        rights = self.state.castling_rights

        if moving_piece.type == PieceType.KING:
            rights[color].revoke_all()

        for side in CastlingSide:
            if moving_piece.type == PieceType.ROOK:
                if move.from_square == CASTLING_RULES[(color, side)].rook_from:
                    rights[color].revoke(side)

            opponent = opponent_of(color)
            if captured == Piece(PieceType.ROOK, opponent):
                if move.to_square == CASTLING_RULES[(opponent, side)].rook_from:
                    rights[opponent].revoke(side)

    def _determine_en_passant_square(
        self, move: Move, moving_piece: Piece
    ) -> Optional[Square]:
        """Only set right after a two-square pawn advance: the square that was passed over."""
        ranks_moved = abs(move.from_square.rank - move.to_square.rank)
        if moving_piece.type == PieceType.PAWN and ranks_moved == 2:
            return move.from_square.offset(0, pawn_direction(moving_piece.color))
        return None

    def _update_game_status(self) -> None:
        """
        Performs checks to see if game has ended and changes the result accordingly.

        The side that is now to move: no legal moves + in check = checkmate, no legal moves otherwise = stalemate.
        """
        self.state.check_status = {
            color: self.board.is_check(color) for color in Color
        }
        if self.has_legal_moves():
            return

        if self.state.check_status[self.side_to_move]:
            self.state.result = (
                GameResult.BLACK_WINS
                if self.side_to_move == Color.WHITE
                else GameResult.WHITE_WINS
            )
        else:
            self.state.result = GameResult.STALEMATE
        logger.info("Game over: {}", self.state.result)


__all__ = ["Game", "GameState", "STARTING_FEN", "as_square"]
