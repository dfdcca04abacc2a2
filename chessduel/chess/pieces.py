"""Defines the types of chess pieces"""

from dataclasses import dataclass
from typing import Self

from chessduel.core.shared_types import Color, PieceType

FEN_TO_PIECE: dict[str, PieceType] = {
    "p": PieceType.PAWN,
    "n": PieceType.KNIGHT,
    "b": PieceType.BISHOP,
    "r": PieceType.ROOK,
    "q": PieceType.QUEEN,
    "k": PieceType.KING,
}

PIECE_TO_FEN: dict[PieceType, str] = {value: key for key, value in FEN_TO_PIECE.items()}

# Used when the board gets drawn as text for the language model
PIECE_SYMBOLS: dict[Color, dict[PieceType, str]] = {
    Color.WHITE: {
        PieceType.KING: "♔",
        PieceType.QUEEN: "♕",
        PieceType.ROOK: "♖",
        PieceType.BISHOP: "♗",
        PieceType.KNIGHT: "♘",
        PieceType.PAWN: "♙",
    },
    Color.BLACK: {
        PieceType.KING: "♚",
        PieceType.QUEEN: "♛",
        PieceType.ROOK: "♜",
        PieceType.BISHOP: "♝",
        PieceType.KNIGHT: "♞",
        PieceType.PAWN: "♟",
    },
}


@dataclass(frozen=True)
class Piece:
    type: PieceType
    color: Color

    @classmethod
    def from_fen(cls, character: str) -> Self:
        # lower case: Black pieces, upper case: White pieces
        color = Color.WHITE if character.isupper() else Color.BLACK
        piece_type = FEN_TO_PIECE[character.lower()]
        return cls(piece_type, color)

    def to_fen(self) -> str:
        return (
            PIECE_TO_FEN[self.type].upper()
            if self.color == Color.WHITE
            else PIECE_TO_FEN[self.type]
        )

    @property
    def symbol(self) -> str:
        return PIECE_SYMBOLS[self.color][self.type]

    def promoted(self, new_type: PieceType) -> "Piece":
        return Piece(new_type, self.color)
