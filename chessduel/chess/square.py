"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

BOARD_DIMENSIONS = (8, 8)
FILES = "abcdefgh"


@dataclass(frozen=True)
class Square:
    file: int
    rank: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (1,1) - (8,8)"""
        file = ord(sq[0].lower()) - ord("a") + 1
        rank = int(sq[1:])
        return cls(file, rank)

    def to_algebraic(self) -> str:
        return f"{chr(self.file + ord('a') - 1)}{self.rank}"

    @classmethod
    def from_row_col(cls, row: int, col: int) -> Square:
        """
        Grid coordinates as the board is drawn: row 0 is the 8th rank (black's back rank), column 0 is the a-file.
        """
        return cls(file=col + 1, rank=BOARD_DIMENSIONS[1] - row)

    @property
    def row(self) -> int:
        return BOARD_DIMENSIONS[1] - self.rank

    @property
    def col(self) -> int:
        return self.file - 1

    def offset(self, df: int, dr: int) -> Square:
        return Square(self.file + df, self.rank + dr)

    def is_within_bounds(self) -> bool:
        return (1 <= self.file <= BOARD_DIMENSIONS[0]) and (
            1 <= self.rank <= BOARD_DIMENSIONS[1]
        )

    def __str__(self) -> str:
        return self.to_algebraic()


def all_squares() -> list[Square]:
    """Every square, in reading order: a8..h8, a7..h7, ..., a1..h1"""
    num_files, num_ranks = BOARD_DIMENSIONS
    return [
        Square(file, rank)
        for rank in range(num_ranks, 0, -1)
        for file in range(1, num_files + 1)
    ]
