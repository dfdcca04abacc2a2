"""The Game board implements all rules that effect the `position` (in chess: the configuration of pieces on the board)"""

from dataclasses import dataclass, field
from typing import Optional, Self

from chessduel.chess.moves import (
    MOVEMENT_RULES,
    CandidateMovesFn,
    Move,
    is_square_attacked,
)
from chessduel.chess.pieces import Piece
from chessduel.chess.square import BOARD_DIMENSIONS, FILES, Square, all_squares
from chessduel.core.exceptions import InvalidFENError
from chessduel.core.shared_types import Color, PieceType

STARTING_POSITION = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"
EMPTY_SQUARE_MARKER = "."


@dataclass
class Board:
    """Occupied squares only: a square missing from `position` is empty."""

    position: dict[Square, Piece] = field(default_factory=dict)

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(STARTING_POSITION)

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board using the placement part of a FEN string.

        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank, read from the a-file to the h-file
        * pawns cover 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank are the white pieces.
        """
        position: dict[Square, Piece] = {}
        fen_by_ranks = fen_str.split("/")
        if len(fen_by_ranks) != BOARD_DIMENSIONS[1]:
            raise InvalidFENError(f"Expected {BOARD_DIMENSIONS[1]} ranks in {fen_str!r}")

        for rank_idx, fen_one_rank in enumerate(fen_by_ranks):
            # FEN string is read from top rank (8th) to bottom rank (1st)
            rank = BOARD_DIMENSIONS[1] - rank_idx
            file = 1
            for character in fen_one_rank:
                if character.isdigit():
                    # A number denotes the amount of empty squares after each other
                    file += int(character)
                    continue
                try:
                    position[Square(file, rank)] = Piece.from_fen(character)
                except KeyError as exc:
                    raise InvalidFENError(
                        f"Unknown piece {character!r} in {fen_str!r}"
                    ) from exc
                file += 1
            if file - 1 != BOARD_DIMENSIONS[0]:
                raise InvalidFENError(f"Rank {rank} has the wrong width in {fen_str!r}")
        return cls(position)

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(
            self._rank_to_fen(rank) for rank in range(BOARD_DIMENSIONS[1], 0, -1)
        )

    def _rank_to_fen(self, rank: int) -> str:
        """FEN string of a single rank"""
        fen_characters: list[str] = []
        empty_count = 0
        for file in range(1, BOARD_DIMENSIONS[0] + 1):
            piece = self.piece(Square(file, rank))
            if piece is None:
                empty_count += 1
                continue
            if empty_count > 0:
                fen_characters.append(str(empty_count))
                empty_count = 0
            fen_characters.append(piece.to_fen())

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    def to_text(self) -> str:
        """
        One line per rank (8 down to 1), files a to h left to right.
        Occupied squares show the piece symbol, empty squares a dot.
        """
        lines: list[str] = []
        for rank in range(BOARD_DIMENSIONS[1], 0, -1):
            cells = []
            for file in range(1, BOARD_DIMENSIONS[0] + 1):
                piece = self.piece(Square(file, rank))
                cells.append(piece.symbol if piece else EMPTY_SQUARE_MARKER)
            lines.append(f"{rank}: {' '.join(cells)}")
        lines.append("   " + " ".join(FILES[: BOARD_DIMENSIONS[0]]))
        return "\n".join(lines)

    def copy(self) -> "Board":
        # Pieces are frozen, a shallow copy of the mapping is enough
        return Board(dict(self.position))

    def piece(self, square: Square) -> Optional[Piece]:
        return self.position.get(square)

    def place_piece(self, piece: Piece, square: Square) -> None:
        self.position[square] = piece

    def remove_piece(self, square: Square) -> Optional[Piece]:
        return self.position.pop(square, None)

    def move_piece(self, move: Move) -> Optional[Piece]:
        """Update the position on the board. Returns whatever got captured on the target square."""
        piece_that_moved = self.position.pop(move.from_square)
        captured = self.position.get(move.to_square)
        self.position[move.to_square] = piece_that_moved
        return captured

    def is_empty(self, square: Square) -> bool:
        return square not in self.position

    def is_any_occupied(self, squares: list[Square]) -> bool:
        return any(not self.is_empty(square) for square in squares)

    def locate_color(self, color: Color) -> list[Square]:
        """Squares of all pieces of this color, in reading order (a8 ... h1)"""
        return [
            square
            for square in all_squares()
            if (piece := self.piece(square)) is not None and piece.color == color
        ]

    def locate_king(self, color: Color) -> Optional[Square]:
        king = Piece(PieceType.KING, color)
        return next(
            (square for square, piece in self.position.items() if piece == king), None
        )

    def is_under_attack(self, square: Square, by_color: Color) -> bool:
        return is_square_attacked(square, by_color, self)

    def is_any_under_attack(self, squares: list[Square], by_color: Color) -> bool:
        return any(self.is_under_attack(square, by_color) for square in squares)

    def is_check(self, color: Color) -> bool:
        """Is the king of this color attacked?"""
        king_square = self.locate_king(color)
        if king_square is None:
            return False
        opponent = Color.WHITE if color == Color.BLACK else Color.BLACK
        return self.is_under_attack(king_square, opponent)

    def candidate_moves(self, square: Square) -> list[Move]:
        """
        Pseudo-legal moves of the piece on `square` (pure geometry).

        ---
        NOTE: Castling and en passant are added by Game. Legality is also tested there.
        """
        piece = self.piece(square)
        if piece is None:
            return []
        movement_rule: CandidateMovesFn = MOVEMENT_RULES[piece.type]
        return movement_rule(square, self)
