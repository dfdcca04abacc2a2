"""
Geometry/Base movement and capturing/attacking rules

Key idea: Use strategy pattern to define pseudo-legal move sets for each piece type.


Legality (not leaving your own king in check) is checked later by Game
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Self

from chessduel.chess.pieces import FEN_TO_PIECE, PIECE_TO_FEN, Piece
from chessduel.chess.square import BOARD_DIMENSIONS, Square
from chessduel.core.shared_types import CastlingSide, Color, PieceType


class Board(Protocol):
    """Just the parts the movement strategies need"""

    def piece(self, square: Square) -> Optional[Piece]: ...


Vector = tuple[int, int]

KNIGHT_DELTAS: list[Vector] = [
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
]
KING_DELTAS: list[Vector] = [
    (0, 1),
    (0, -1),
    (1, 0),
    (-1, 0),
    (1, 1),
    (1, -1),
    (-1, 1),
    (-1, -1),
]
DIAGONALS: list[Vector] = [(1, 1), (-1, 1), (1, -1), (-1, -1)]
STRAIGHTS: list[Vector] = [(1, 0), (-1, 0), (0, 1), (0, -1)]


@dataclass(frozen=True)
class Move:
    """
    basic definition of a move to be made

    Two moves are the same move if they go from/to the same squares; the tags only describe side effects.
    """

    from_square: Square
    to_square: Square
    is_en_passant: bool = False
    castling: Optional[CastlingSide] = None
    promote_to: Optional[PieceType] = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Move):
            return NotImplemented
        return (self.from_square, self.to_square) == (
            other.from_square,
            other.to_square,
        )

    def __hash__(self) -> int:
        return hash((self.from_square, self.to_square))

    @classmethod
    def from_uci(cls, uci: str) -> Self:
        """
        Universal Chess Interface:
        ---
        * "e2e4": move the piece that was on e2 to e4
        * "e7e8q" : (pawn) moves from e7 to e8 and promotes to a queen (the q)

        NOTE: Castling / En Passant tags are only known to Game.
        """
        from_sq = Square.from_algebraic(uci[:2])
        to_sq = Square.from_algebraic(uci[2:4])
        promote_to = FEN_TO_PIECE[uci[4].lower()] if len(uci) == 5 else None
        return cls(from_sq, to_sq, promote_to=promote_to)

    def to_uci(self) -> str:
        piece_char = PIECE_TO_FEN[self.promote_to] if self.promote_to else ""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}{piece_char}"

    def describe(self) -> str:
        """The shorthand the language model gets to see (and is asked to answer in)."""
        return f"from:{self.from_square.to_algebraic()} to:{self.to_square.to_algebraic()}"


def opponent_of(color: Color) -> Color:
    return Color.WHITE if color == Color.BLACK else Color.BLACK


def pawn_direction(color: Color) -> int:
    """White moves UP the board (towards rank 8), black moves DOWN"""
    return 1 if color == Color.WHITE else -1


def pawn_starting_rank(color: Color) -> int:
    return 2 if color == Color.WHITE else BOARD_DIMENSIONS[1] - 1


def promotion_rank(color: Color) -> int:
    return BOARD_DIMENSIONS[1] if color == Color.WHITE else 1


# --- MOVEMENT RULES ---
def raycasting_move(
    square: Square, board: Board, directions: list[Vector]
) -> list[Move]:
    """
    Raycasting algorithm
    -----

    ---
    The main trick we use to check the 'line of sight of a piece'.
    We define move directions and move along them until we hit another piece or
    the edge of the board.
    """
    mover = board.piece(square)
    assert mover is not None

    moves: list[Move] = []
    for df, dr in directions:
        target_square = square
        while True:
            target_square = target_square.offset(df, dr)
            if not target_square.is_within_bounds():
                break

            blocker = board.piece(target_square)
            if blocker is not None:
                # only need to add the first occupied square found if it is the opponent's: then it can be captured.
                if blocker.color != mover.color:
                    moves.append(Move(from_square=square, to_square=target_square))
                break

            moves.append(Move(from_square=square, to_square=target_square))
    return moves


def single_step_move(square: Square, board: Board, deltas: list[Vector]) -> list[Move]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just can move a single step along a direction"""
    mover = board.piece(square)
    assert mover is not None

    moves: list[Move] = []
    for df, dr in deltas:
        target_square = square.offset(df, dr)
        if not target_square.is_within_bounds():
            continue

        occupant = board.piece(target_square)
        if occupant is None or occupant.color != mover.color:
            moves.append(Move(from_square=square, to_square=target_square))

    return moves


def candidate_pawn_moves(square: Square, board: Board) -> list[Move]:
    """
    A pawn:
    - moves by a single square forward, onto an empty square.
    - It can move by two in their first move (so when on their starting rank), if both squares are empty
    - takes diagonally

    NOTE: En passant will be taken care of by `en_passant_moves()`
    """
    pawn = board.piece(square)
    assert pawn is not None
    direction = pawn_direction(pawn.color)

    moves: list[Move] = []
    one_step = square.offset(0, direction)
    if one_step.is_within_bounds() and board.piece(one_step) is None:
        moves.append(Move(from_square=square, to_square=one_step))

        two_steps = square.offset(0, 2 * direction)
        if square.rank == pawn_starting_rank(pawn.color) and (
            board.piece(two_steps) is None
        ):
            moves.append(Move(from_square=square, to_square=two_steps))

    for df in (-1, 1):
        target_square = square.offset(df, direction)
        if not target_square.is_within_bounds():
            continue
        occupant = board.piece(target_square)
        if occupant is not None and occupant.color != pawn.color:
            moves.append(Move(from_square=square, to_square=target_square))
    return moves


def candidate_knight_moves(square: Square, board: Board) -> list[Move]:
    """Knights always move such that |delta_rank| + |delta_file| = 3"""
    return single_step_move(square, board, KNIGHT_DELTAS)


def candidate_bishop_moves(square: Square, board: Board) -> list[Move]:
    """Bishops move diagonally: |delta_rank| = |delta_file|"""
    return raycasting_move(square, board, DIAGONALS)


def candidate_rook_moves(square: Square, board: Board) -> list[Move]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(square, board, STRAIGHTS)


def candidate_queen_moves(square: Square, board: Board) -> list[Move]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return candidate_rook_moves(square, board) + candidate_bishop_moves(square, board)


def candidate_king_moves(square: Square, board: Board) -> list[Move]:
    """
    The king can move by a single square at the time.

    Castling is modelled as a special king move (handled by Game).
    """
    return single_step_move(square, board, KING_DELTAS)


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Square, Board], list[Move]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


# --- CAPTURING RULES / ATTACKING RULES ---
def raycasting_attack(
    square: Square,
    by_color: Color,
    by_piece_types: tuple[PieceType, ...],
    board: Board,
    directions: list[Vector],
) -> bool:
    """
    Raycasting algorithm for attacks.
    ---

    Where `raycasting_move()` determines
    _"What is the line-of-sight of the piece standing on the specified square?"_

    This function determines:
    _"Is the specified square in the line-of-sight of a piece of the specified color and type(s)?"_

    ---
    Returns TRUE if the first piece encountered along a ray is of the given color and one of the given types.
    """
    for df, dr in directions:
        target_square = square
        while True:
            target_square = target_square.offset(df, dr)
            if not target_square.is_within_bounds():
                break

            piece_found = board.piece(target_square)
            if piece_found is not None:
                if piece_found.color == by_color and piece_found.type in by_piece_types:
                    return True
                break
    return False


def single_step_attack(
    square: Square,
    by_color: Color,
    by_piece_type: PieceType,
    board: Board,
    deltas: list[Vector],
) -> bool:
    """
    The equivalent for pawns, kings, and knights: they can only attack a single step along a direction.
    """
    for df, dr in deltas:
        target_square = square.offset(df, dr)
        if not target_square.is_within_bounds():
            continue

        piece_found = board.piece(target_square)
        if piece_found == Piece(by_piece_type, by_color):
            return True

    return False


def is_attacked_by_pawn(square: Square, by_color: Color, board: Board) -> bool:
    """
    Pawns take diagonally
    ----

    NOTE: Pawn moves are not symmetric, so to check IF a white pawn could take on your square -->
    Must look one rank DOWN the board. A pawn never attacks the square in front of it.
    """
    dr = -pawn_direction(by_color)
    inverse_pawn_take_deltas: list[Vector] = [(1, dr), (-1, dr)]
    return single_step_attack(
        square, by_color, PieceType.PAWN, board, inverse_pawn_take_deltas
    )


def is_attacked_by_knight(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KNIGHT, board, KNIGHT_DELTAS)


def is_attacked_diagonally(square: Square, by_color: Color, board: Board) -> bool:
    """Bishops and the queen"""
    return raycasting_attack(
        square, by_color, (PieceType.BISHOP, PieceType.QUEEN), board, DIAGONALS
    )


def is_attacked_straight(square: Square, by_color: Color, board: Board) -> bool:
    """Rooks and the queen"""
    return raycasting_attack(
        square, by_color, (PieceType.ROOK, PieceType.QUEEN), board, STRAIGHTS
    )


def is_attacked_by_king(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KING, board, KING_DELTAS)


# --- STRATEGY PATTERN: ATTACKING RULES ---
IsAttackedFn = Callable[[Square, Color, Board], bool]
ATTACK_RULES: list[IsAttackedFn] = [
    is_attacked_by_pawn,
    is_attacked_by_knight,
    is_attacked_diagonally,
    is_attacked_straight,
    is_attacked_by_king,
]


def is_square_attacked(square: Square, by_color: Color, board: Board) -> bool:
    """True if any piece of `by_color` could capture on `square` (ignoring whether that would expose its own king)."""
    return any(rule(square, by_color, board) for rule in ATTACK_RULES)


# -- EN PASSANT MOVES ---
def en_passant_moves(
    en_passant_square: Square, color: Color, board: Board
) -> list[Move]:
    """Given a target en passant square, check the adjacent files (one rank behind the target, seen from the mover) for own pawns."""
    behind = -pawn_direction(color)
    own_pawn = Piece(PieceType.PAWN, color)

    moves: list[Move] = []
    for df in (-1, 1):
        maybe_pawn_square = en_passant_square.offset(df, behind)
        if not maybe_pawn_square.is_within_bounds():
            continue
        if board.piece(maybe_pawn_square) == own_pawn:
            moves.append(
                Move(
                    from_square=maybe_pawn_square,
                    to_square=en_passant_square,
                    is_en_passant=True,
                )
            )
    return moves


def en_passant_capture_square(move: Move) -> Square:
    """The captured pawn stands on the destination file, on the rank the capturing pawn came from."""
    return Square(file=move.to_square.file, rank=move.from_square.rank)


# -- PAWN PROMOTION MOVES --
def is_pawn_push_to_promotion_square(move: Move, board: Board) -> bool:
    """check if the move is a pawn move that reaches the far rank"""
    moving_piece = board.piece(move.from_square)
    if moving_piece is None or moving_piece.type != PieceType.PAWN:
        return False
    return move.to_square.rank == promotion_rank(moving_piece.color)
