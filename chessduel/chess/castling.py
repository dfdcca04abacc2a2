"""Helpers for implementing Castling rules. Need to be imported by multiple sources"""

from dataclasses import dataclass
from typing import Self

from chessduel.chess.square import Square
from chessduel.core.shared_types import CastlingSide, Color

# Fixed notation tokens for the two castling moves
CASTLING_NOTATION: dict[CastlingSide, str] = {
    CastlingSide.KINGSIDE: "O-O",
    CastlingSide.QUEENSIDE: "O-O-O",
}


@dataclass(frozen=True)
class CastlingSquares:
    """
    Store the squares where king/rook start from/end up in by castling.
    NOTE: If castling rights have not been revoked, the king / rook should still be at their starting squares. Game double-checks.
    """

    king_from: Square
    king_to: Square
    rook_from: Square
    rook_to: Square

    @classmethod
    def from_algebraic(cls, k_from: str, k_to: str, r_from: str, r_to: str) -> Self:
        """Convenience method: to make mapping shown below more readable"""
        king_from = Square.from_algebraic(k_from)
        king_to = Square.from_algebraic(k_to)
        rook_from = Square.from_algebraic(r_from)
        rook_to = Square.from_algebraic(r_to)
        return cls(king_from, king_to, rook_from, rook_to)

    def squares_between(self) -> list[Square]:
        """All squares strictly between king and rook. These must be empty to castle."""
        low, high = sorted((self.king_from.file, self.rook_from.file))
        return [Square(file, self.king_from.rank) for file in range(low + 1, high)]

    def king_path(self) -> list[Square]:
        """Squares the king stands on / passes over / lands on. None of them may be attacked."""
        step = 1 if self.king_to.file > self.king_from.file else -1
        return [
            Square(file, self.king_from.rank)
            for file in range(self.king_from.file, self.king_to.file + step, step)
        ]


# The moves (in classical chess) made when castling
CASTLING_RULES: dict[tuple[Color, CastlingSide], CastlingSquares] = {
    (Color.WHITE, CastlingSide.KINGSIDE): CastlingSquares.from_algebraic(
        "e1", "g1", "h1", "f1"
    ),
    (Color.WHITE, CastlingSide.QUEENSIDE): CastlingSquares.from_algebraic(
        "e1", "c1", "a1", "d1"
    ),
    (Color.BLACK, CastlingSide.KINGSIDE): CastlingSquares.from_algebraic(
        "e8", "g8", "h8", "f8"
    ),
    (Color.BLACK, CastlingSide.QUEENSIDE): CastlingSquares.from_algebraic(
        "e8", "c8", "a8", "d8"
    ),
}

# FEN letters for the castling rights. Upper case for white.
CASTLING_FEN: dict[tuple[Color, CastlingSide], str] = {
    (Color.WHITE, CastlingSide.KINGSIDE): "K",
    (Color.WHITE, CastlingSide.QUEENSIDE): "Q",
    (Color.BLACK, CastlingSide.KINGSIDE): "k",
    (Color.BLACK, CastlingSide.QUEENSIDE): "q",
}


@dataclass
class CastlingRights:
    """Rights of a single color. Once revoked, never restored."""

    kingside: bool = True
    queenside: bool = True

    def allows(self, side: CastlingSide) -> bool:
        return self.kingside if side == CastlingSide.KINGSIDE else self.queenside

    def revoke(self, side: CastlingSide) -> None:
        if side == CastlingSide.KINGSIDE:
            self.kingside = False
        else:
            self.queenside = False

    def revoke_all(self) -> None:
        self.kingside = False
        self.queenside = False


def full_castling_rights() -> dict[Color, CastlingRights]:
    return {color: CastlingRights() for color in Color}


def castling_from_fen(castle_fen: str) -> dict[Color, CastlingRights]:
    """parse the part of the FEN string that encodes castling rights"""
    rights = {color: CastlingRights(False, False) for color in Color}
    for (color, side), letter in CASTLING_FEN.items():
        if letter in castle_fen:
            if side == CastlingSide.KINGSIDE:
                rights[color].kingside = True
            else:
                rights[color].queenside = True
    return rights


def castling_to_fen(castling_rights: dict[Color, CastlingRights]) -> str:
    """create the part of the FEN string that encodes castling rights"""
    castling_chars = "".join(
        letter
        for (color, side), letter in CASTLING_FEN.items()
        if castling_rights[color].allows(side)
    )
    return castling_chars or "-"

