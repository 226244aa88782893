"""Core domain layer: pure chess logic with zero external dependencies.

Quick start::

    from chess3d.core import Position, MoveGenerator

    pos = Position()
    for move in MoveGenerator(pos).generate_legal_moves():
        print(move)
"""

from chess3d.core.board import Board
from chess3d.core.enums import Color, GameStatus, PieceType, RuleVariant
from chess3d.core.move import Move, MoveResult
from chess3d.core.move_generator import MoveGenerator
from chess3d.core.notation import (
    STARTING_FEN,
    board_to_fen,
    move_to_san,
    parse_fen,
    pgn_movetext,
    position_to_fen,
)
from chess3d.core.piece import Piece
from chess3d.core.position import Position
from chess3d.core.rules import Rules
from chess3d.core.types import (
    Square,
    file_of,
    is_square_name,
    make_square,
    parse_square,
    rank_of,
    square_name,
)

__all__ = [
    # Enums
    "Color",
    "GameStatus",
    "PieceType",
    "RuleVariant",
    # Types / helpers
    "Square",
    "file_of",
    "is_square_name",
    "make_square",
    "parse_square",
    "rank_of",
    "square_name",
    # Domain objects
    "Board",
    "Move",
    "MoveGenerator",
    "MoveResult",
    "Piece",
    "Position",
    "Rules",
    # Notation
    "STARTING_FEN",
    "board_to_fen",
    "move_to_san",
    "parse_fen",
    "pgn_movetext",
    "position_to_fen",
]
