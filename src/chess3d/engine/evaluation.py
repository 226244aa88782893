"""Static position evaluation (white-positive centipawns)."""

from __future__ import annotations

import random

from chess3d.core.board import Board
from chess3d.core.enums import Color, PieceType
from chess3d.core.move_generator import MoveGenerator
from chess3d.core.rules import Rules
from chess3d.core.types import Square, file_of, rank_of
from chess3d.game.session import MATERIAL_UNITS, GameSession

MATE_SCORE = 20_000
CHECK_PENALTY = 50
MOBILITY_WEIGHT = 2
# Noise is added below this difficulty to imitate weaker play.
NOISE_MAX_DIFFICULTY = 3
# Compared against material units (pawn = 1, queen = 9) of both sides, so
# the endgame king table is used in every reachable position.
ENDGAME_MATERIAL_THRESHOLD = 1500

PIECE_VALUES: dict[PieceType, int] = {
    PieceType.PAWN: 100,
    PieceType.KNIGHT: 320,
    PieceType.BISHOP: 330,
    PieceType.ROOK: 500,
    PieceType.QUEEN: 900,
    PieceType.KING: 20_000,
}

# Piece-square tables, written with the board's rank 8 as the first row.
PAWN_TABLE: tuple[tuple[int, ...], ...] = (
    (0, 0, 0, 0, 0, 0, 0, 0),
    (50, 50, 50, 50, 50, 50, 50, 50),
    (10, 10, 20, 30, 30, 20, 10, 10),
    (5, 5, 10, 25, 25, 10, 5, 5),
    (0, 0, 0, 20, 20, 0, 0, 0),
    (5, -5, -10, 0, 0, -10, -5, 5),
    (5, 10, 10, -20, -20, 10, 10, 5),
    (0, 0, 0, 0, 0, 0, 0, 0),
)

KNIGHT_TABLE: tuple[tuple[int, ...], ...] = (
    (-50, -40, -30, -30, -30, -30, -40, -50),
    (-40, -20, 0, 0, 0, 0, -20, -40),
    (-30, 0, 10, 15, 15, 10, 0, -30),
    (-30, 5, 15, 20, 20, 15, 5, -30),
    (-30, 0, 15, 20, 20, 15, 0, -30),
    (-30, 5, 10, 15, 15, 10, 5, -30),
    (-40, -20, 0, 5, 5, 0, -20, -40),
    (-50, -40, -30, -30, -30, -30, -40, -50),
)

BISHOP_TABLE: tuple[tuple[int, ...], ...] = (
    (-20, -10, -10, -10, -10, -10, -10, -20),
    (-10, 0, 0, 0, 0, 0, 0, -10),
    (-10, 0, 5, 10, 10, 5, 0, -10),
    (-10, 5, 5, 10, 10, 5, 5, -10),
    (-10, 0, 10, 10, 10, 10, 0, -10),
    (-10, 10, 10, 10, 10, 10, 10, -10),
    (-10, 5, 0, 0, 0, 0, 5, -10),
    (-20, -10, -10, -10, -10, -10, -10, -20),
)

ROOK_TABLE: tuple[tuple[int, ...], ...] = (
    (0, 0, 0, 0, 0, 0, 0, 0),
    (5, 10, 10, 10, 10, 10, 10, 5),
    (-5, 0, 0, 0, 0, 0, 0, -5),
    (-5, 0, 0, 0, 0, 0, 0, -5),
    (-5, 0, 0, 0, 0, 0, 0, -5),
    (-5, 0, 0, 0, 0, 0, 0, -5),
    (-5, 0, 0, 0, 0, 0, 0, -5),
    (0, 0, 0, 5, 5, 0, 0, 0),
)

QUEEN_TABLE: tuple[tuple[int, ...], ...] = (
    (-20, -10, -10, -5, -5, -10, -10, -20),
    (-10, 0, 0, 0, 0, 0, 0, -10),
    (-10, 0, 5, 5, 5, 5, 0, -10),
    (-5, 0, 5, 5, 5, 5, 0, -5),
    (0, 0, 5, 5, 5, 5, 0, -5),
    (-10, 5, 5, 5, 5, 5, 0, -10),
    (-10, 0, 5, 0, 0, 0, 0, -10),
    (-20, -10, -10, -5, -5, -10, -10, -20),
)

KING_MIDDLE_TABLE: tuple[tuple[int, ...], ...] = (
    (-30, -40, -40, -50, -50, -40, -40, -30),
    (-30, -40, -40, -50, -50, -40, -40, -30),
    (-30, -40, -40, -50, -50, -40, -40, -30),
    (-30, -40, -40, -50, -50, -40, -40, -30),
    (-20, -30, -30, -40, -40, -30, -30, -20),
    (-10, -20, -20, -20, -20, -20, -20, -10),
    (20, 20, 0, 0, 0, 0, 20, 20),
    (20, 30, 10, 0, 0, 10, 30, 20),
)

KING_END_TABLE: tuple[tuple[int, ...], ...] = (
    (-50, -40, -30, -20, -20, -30, -40, -50),
    (-30, -20, -10, 0, 0, -10, -20, -30),
    (-30, -10, 20, 30, 30, 20, -10, -30),
    (-30, -10, 30, 40, 40, 30, -10, -30),
    (-30, -10, 30, 40, 40, 30, -10, -30),
    (-30, -10, 20, 30, 30, 20, -10, -30),
    (-30, -30, 0, 0, 0, 0, -30, -30),
    (-50, -30, -30, -30, -30, -30, -30, -50),
)

_PIECE_TABLES: dict[PieceType, tuple[tuple[int, ...], ...]] = {
    PieceType.PAWN: PAWN_TABLE,
    PieceType.KNIGHT: KNIGHT_TABLE,
    PieceType.BISHOP: BISHOP_TABLE,
    PieceType.ROOK: ROOK_TABLE,
    PieceType.QUEEN: QUEEN_TABLE,
}


def table_row(color: Color, sq: Square) -> int:
    """Row of a piece-square table read for *color*'s piece on *sq*.

    ``row`` counts from rank 8; white reads ``7 - row`` and black reads
    ``row``.
    """
    row = 7 - rank_of(sq)
    return 7 - row if color == Color.WHITE else row


def piece_square_value(
    piece_type: PieceType, color: Color, sq: Square, endgame: bool
) -> int:
    if piece_type == PieceType.KING:
        table = KING_END_TABLE if endgame else KING_MIDDLE_TABLE
    else:
        table = _PIECE_TABLES[piece_type]
    return table[table_row(color, sq)][file_of(sq)]


def _signed(color: Color, value: float) -> float:
    return value if color == Color.WHITE else -value


class Evaluator:
    """Sum of material, piece-square, king-safety and mobility terms.

    At difficulty 3 and below a uniform random term of width
    ``(5 - difficulty) * 20`` is added; higher levels are deterministic.
    """

    __slots__ = ("difficulty", "_rng")

    def __init__(self, difficulty: int = 3, rng: random.Random | None = None) -> None:
        self.difficulty = difficulty
        self._rng = rng or random.Random()

    def evaluate(self, session: GameSession) -> float:
        position = session.position
        side = position.side_to_move
        gen = MoveGenerator(position)

        # Side-to-move moves serve both terminal detection and mobility.
        own_moves = gen.generate_legal_moves()
        if position.board.king_square(side) is None or (
            not own_moves and gen.is_in_check(side)
        ):
            return _signed(side, -MATE_SCORE)
        if (
            not own_moves
            or Rules.is_insufficient_material(position)
            or Rules.is_threefold_repetition(position)
        ):
            return 0.0

        board = position.board
        evaluation = float(self.material(board))
        evaluation += self.positional(board, self.is_endgame(board))
        evaluation += self.king_safety(session)
        evaluation += self.pawn_structure(board)
        evaluation += self.piece_activity(session, len(own_moves))
        evaluation += self.noise()
        return evaluation

    # -- Terms --------------------------------------------------------------

    def material(self, board: Board) -> int:
        value = 0
        for _, piece in board.occupied():
            value += int(_signed(piece.color, PIECE_VALUES[piece.piece_type]))
        return value

    def positional(self, board: Board, endgame: bool) -> int:
        value = 0
        for sq, piece in board.occupied():
            bonus = piece_square_value(piece.piece_type, piece.color, sq, endgame)
            value += int(_signed(piece.color, bonus))
        return value

    def king_safety(self, session: GameSession) -> int:
        if not session.in_check():
            return 0
        return -CHECK_PENALTY if session.turn == Color.WHITE else CHECK_PENALTY

    def pawn_structure(self, board: Board) -> int:
        # TODO: doubled, isolated and passed pawn terms.
        return 0

    def piece_activity(
        self, session: GameSession, own_move_count: int | None = None
    ) -> float:
        """Mobility differential, positive when white has more moves."""
        position = session.position
        side = position.side_to_move
        if own_move_count is None:
            own_move_count = len(position.legal_moves())
        flipped = position.with_side_to_move(side.opposite)
        other_move_count = len(flipped.legal_moves())
        return _signed(side, (own_move_count - other_move_count) * MOBILITY_WEIGHT)

    def is_endgame(self, board: Board) -> bool:
        units = sum(MATERIAL_UNITS[piece.piece_type] for _, piece in board.occupied())
        return units < ENDGAME_MATERIAL_THRESHOLD

    def noise(self) -> float:
        if self.difficulty > NOISE_MAX_DIFFICULTY:
            return 0.0
        width = (5 - self.difficulty) * 20
        return (self._rng.random() - 0.5) * width
