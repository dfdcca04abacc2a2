"""
Forsyth-Edwards Notation: parsing/validating a full FEN into the parts Game needs, and writing it back.
"""

from dataclasses import dataclass
from string import ascii_lowercase
from typing import Optional, Self

from chessduel.chess.castling import CastlingRights, castling_from_fen, castling_to_fen
from chessduel.chess.pieces import FEN_TO_PIECE
from chessduel.chess.square import BOARD_DIMENSIONS, Square
from chessduel.core.exceptions import InvalidFENError
from chessduel.core.shared_types import Color

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
VALID_CASTLING_LETTERS = "KQkq"


def is_valid_fen(fen: str) -> bool:
    """
    Check if given string follows proper FEN notation.

    The move counters are optional: a 4-field FEN is accepted as well.
    """
    parts = fen.split()
    if len(parts) not in (4, 6):
        return False

    position, color, castling, en_passant = parts[:4]
    if not is_valid_position(position):
        return False
    if not is_valid_color_code(color):
        return False
    if not is_valid_castling_rights(castling):
        return False
    if not is_valid_en_passant(en_passant):
        return False
    if len(parts) == 6 and not all(is_valid_move_counter(c) for c in parts[4:]):
        return False
    return True


def is_valid_position(position: str) -> bool:
    """Only check the part of the FEN encoding for the board position."""
    num_files, num_ranks = BOARD_DIMENSIONS
    rank_fens = position.split("/")
    if len(rank_fens) != num_ranks:
        return False

    for rank_fen in rank_fens:
        file_count = 0
        for character in rank_fen:
            if character.isdigit():
                file_count += int(character)
            elif character.lower() in FEN_TO_PIECE:
                file_count += 1
            else:
                return False

        if file_count != num_files:
            return False

    # exactly one king per color
    return position.count("K") == 1 and position.count("k") == 1


def is_valid_color_code(color: str) -> bool:
    return color in {"w", "b"}


def is_valid_castling_rights(castling: str) -> bool:
    """Either '-' or a subset of KQkq, written in that order."""
    if castling == "-":
        return True
    letters_in_order = [c for c in VALID_CASTLING_LETTERS if c in castling]
    return bool(castling) and "".join(letters_in_order) == castling


def is_valid_en_passant(en_passant: str) -> bool:
    """Valid en passant square encoding should be a square that exists on the board or a '-'"""
    return (en_passant == "-") or is_valid_square(en_passant)


def is_valid_square(square: str) -> bool:
    """Valid square should be a letter for the file + a number for the rank"""
    num_files, num_ranks = BOARD_DIMENSIONS
    if len(square) < 2:
        return False

    file_char, rank_char = square[0], square[1:]
    if file_char not in ascii_lowercase[:num_files]:
        return False
    if not rank_char.isdigit():
        return False
    return 1 <= int(rank_char) <= num_ranks


def is_valid_move_counter(counter: str) -> bool:
    return counter.isdigit()


@dataclass
class FENState:
    """
    Data that can be constructed from a FEN string.
    ----

    <board position string> <active color> <castling rights> <en passant square> [<half move clock> <full move number>]

    ex) The standard starting position has a FEN
    rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1

    NOTE: the move counters are read, but the engine does not implement the fifty-move rule.
    """

    position: str
    color_to_move: Color
    castling_rights: dict[Color, CastlingRights]
    en_passant_square: Optional[Square]
    half_move_clock: int = 0
    num_turns: int = 1

    @classmethod
    def from_fen(cls, fen: str) -> Self:
        if not is_valid_fen(fen):
            raise InvalidFENError(f"Cannot interpret supplied string as FEN: {fen}")

        parts = fen.split()
        position, active_color, castling_str, en_passant_algebraic = parts[:4]
        half_move_clock, num_turns = (
            (int(parts[4]), int(parts[5])) if len(parts) == 6 else (0, 1)
        )

        return cls(
            position=position,
            color_to_move=Color.WHITE if active_color == "w" else Color.BLACK,
            castling_rights=castling_from_fen(castling_str),
            en_passant_square=(
                Square.from_algebraic(en_passant_algebraic)
                if en_passant_algebraic != "-"
                else None
            ),
            half_move_clock=half_move_clock,
            num_turns=num_turns,
        )

    def to_fen(self) -> str:
        active_color = "w" if self.color_to_move == Color.WHITE else "b"
        en_passant_algebraic = (
            self.en_passant_square.to_algebraic()
            if self.en_passant_square is not None
            else "-"
        )
        return (
            f"{self.position} {active_color} {castling_to_fen(self.castling_rights)} "
            f"{en_passant_algebraic} {self.half_move_clock} {self.num_turns}"
        )

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(STARTING_FEN)
