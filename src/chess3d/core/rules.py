"""High-level chess rules: checkmate, stalemate, draw detection."""

from __future__ import annotations

from typing import TYPE_CHECKING

from chess3d.core.enums import GameStatus, PieceType
from chess3d.core.move_generator import MoveGenerator

if TYPE_CHECKING:
    from chess3d.core.position import Position

_MINOR_PIECES = (PieceType.KNIGHT, PieceType.BISHOP)


class Rules:
    """Static rule-checker that operates on a :class:`Position`.

    Game state is never stored: every query is recomputed from the board,
    the side to move and the recorded history.
    """

    @staticmethod
    def is_in_check(position: Position) -> bool:
        gen = MoveGenerator(position)
        return gen.is_in_check(position.side_to_move)

    @staticmethod
    def is_checkmate(position: Position) -> bool:
        return Rules.status(position) == GameStatus.CHECKMATE

    @staticmethod
    def is_stalemate(position: Position) -> bool:
        if Rules._king_missing(position) or Rules.is_in_check(position):
            return False
        return not MoveGenerator(position).generate_legal_moves()

    @staticmethod
    def is_insufficient_material(position: Position) -> bool:
        """Bare kings, or exactly three pieces where the third is a minor.

        No other material patterns are recognised.
        """
        board = position.board
        total = board.piece_count()
        if total == 2:
            return True
        if total == 3:
            return any(
                piece.piece_type in _MINOR_PIECES for _, piece in board.occupied()
            )
        return False

    @staticmethod
    def is_threefold_repetition(position: Position) -> bool:
        return position.max_repetition_count() >= 3

    @staticmethod
    def is_draw(position: Position) -> bool:
        return Rules.status(position).is_draw

    @staticmethod
    def is_game_over(position: Position) -> bool:
        return Rules.status(position).is_terminal

    @staticmethod
    def status(position: Position) -> GameStatus:
        """Classify the position.

        A side to move without a king has already lost and is reported as
        checkmated.
        """
        if Rules._king_missing(position):
            return GameStatus.CHECKMATE

        gen = MoveGenerator(position)
        if not gen.generate_legal_moves():
            if gen.is_in_check(position.side_to_move):
                return GameStatus.CHECKMATE
            return GameStatus.STALEMATE

        if Rules.is_insufficient_material(position):
            return GameStatus.DRAW_INSUFFICIENT_MATERIAL
        if Rules.is_threefold_repetition(position):
            return GameStatus.DRAW_THREEFOLD_REPETITION
        return GameStatus.IN_PROGRESS

    @staticmethod
    def _king_missing(position: Position) -> bool:
        return position.board.king_square(position.side_to_move) is None
