"""
Per-move notation for the move log.

This is a human/LLM-facing log, loosely algebraic. Not meant to be parsed back.

* castling: O-O / O-O-O
* otherwise: [piece letter] origin ('x' capture | '-' quiet) destination [=Q]
  e.g. e2-e4, Ng1-f3, e5xd6 (en passant), Qd1xd7, e7-e8=Q
"""

from chessduel.chess.castling import CASTLING_NOTATION
from chessduel.chess.moves import Board, Move
from chessduel.chess.pieces import PIECE_TO_FEN
from chessduel.core.shared_types import PieceType

CAPTURE_MARKER = "x"
QUIET_MARKER = "-"


def to_notation(move: Move, board: Board) -> str:
    """Render the move. NOTE: must be called BEFORE the move is applied to `board`."""
    if move.castling is not None:
        return CASTLING_NOTATION[move.castling]

    piece = board.piece(move.from_square)
    assert piece is not None

    piece_letter = "" if piece.type == PieceType.PAWN else PIECE_TO_FEN[piece.type].upper()
    is_capture = move.is_en_passant or board.piece(move.to_square) is not None
    separator = CAPTURE_MARKER if is_capture else QUIET_MARKER
    promotion = f"={PIECE_TO_FEN[move.promote_to].upper()}" if move.promote_to else ""

    return (
        f"{piece_letter}{move.from_square.to_algebraic()}{separator}"
        f"{move.to_square.to_algebraic()}{promotion}"
    )
