"""Position: board + side to move + move history, with apply/undo."""

from __future__ import annotations

import logging

from chess3d.core.board import Board
from chess3d.core.enums import Color, PieceType, RuleVariant
from chess3d.core.move import Move, MoveResult
from chess3d.core.move_generator import MoveGenerator
from chess3d.core.notation import board_to_fen, move_to_san, parse_fen, repetition_key
from chess3d.core.piece import Piece
from chess3d.core.types import Square, is_valid_square, rank_of

_LOGGER = logging.getLogger(__name__)

_LAST_RANK: tuple[int, int] = (7, 0)
_PROMOTABLE: frozenset[PieceType] = frozenset(
    (PieceType.KNIGHT, PieceType.BISHOP, PieceType.ROOK, PieceType.QUEEN)
)


class Position:
    """Full game position: board, side to move and the ordered history.

    The history is append-only from the outside: only :meth:`make_move`
    pushes and only :meth:`undo` pops.  Each :class:`MoveResult` holds
    enough to restore the previous placement.
    """

    __slots__ = (
        "board",
        "side_to_move",
        "variant",
        "repetition_ignores_counters",
        "_history",
    )

    def __init__(
        self,
        board: Board | None = None,
        side_to_move: Color = Color.WHITE,
        variant: RuleVariant = RuleVariant.MINIMAL,
        *,
        repetition_ignores_counters: bool = False,
    ) -> None:
        self.board = board if board is not None else Board.initial()
        self.side_to_move = side_to_move
        self.variant = variant
        # Off: repetition compares whole FEN strings, counters included.
        self.repetition_ignores_counters = repetition_ignores_counters
        self._history: list[MoveResult] = []

    @classmethod
    def from_fen(
        cls,
        fen: str,
        variant: RuleVariant = RuleVariant.MINIMAL,
        *,
        repetition_ignores_counters: bool = False,
    ) -> Position:
        board, side = parse_fen(fen)
        return cls(
            board,
            side,
            variant,
            repetition_ignores_counters=repetition_ignores_counters,
        )

    # ── Core move operations ─────────────────────────────────────────────

    def make_move(self, move: Move) -> MoveResult | None:
        """Validate and apply *move*; ``None`` when it is rejected."""
        reason = self._rejection_reason(move)
        if reason is not None:
            _LOGGER.debug("Rejected move %s: %s", move, reason)
            return None

        board = self.board
        piece = board[move.from_sq]
        assert piece is not None
        captured = board[move.to_sq]

        promotion = self._promotion_for(piece, move)
        san = move_to_san(piece, move, captured, promotion)

        board[move.from_sq] = None
        board[move.to_sq] = (
            Piece(piece.color, promotion) if promotion is not None else piece
        )
        self.side_to_move = self.side_to_move.opposite

        result = MoveResult(
            from_sq=move.from_sq,
            to_sq=move.to_sq,
            piece=piece.piece_type,
            color=piece.color,
            captured=captured.piece_type if captured is not None else None,
            san=san,
            fen=board_to_fen(board, self.side_to_move, len(self._history) + 1),
            promotion=promotion,
        )
        self._history.append(result)
        return result

    def undo(self) -> MoveResult | None:
        """Pop the last move and restore the board; ``None`` if no history."""
        if not self._history:
            return None

        last = self._history.pop()
        self.board[last.from_sq] = Piece(last.color, last.piece)
        if last.captured is not None:
            self.board[last.to_sq] = Piece(last.color.opposite, last.captured)
        else:
            self.board[last.to_sq] = None
        self.side_to_move = last.color
        return last

    def _rejection_reason(self, move: Move) -> str | None:
        if not (is_valid_square(move.from_sq) and is_valid_square(move.to_sq)):
            return "square off the board"
        piece = self.board[move.from_sq]
        if piece is None:
            return "no piece on origin"
        if piece.color != self.side_to_move:
            return "not this side's turn"
        target = self.board[move.to_sq]
        if target is not None and target.color == piece.color:
            return "destination holds own piece"
        gen = MoveGenerator(self)
        if not gen.is_pseudo_legal(move):
            return "piece cannot move that way"
        if gen.leaves_king_in_check(move):
            return "leaves own king in check"
        promotion = self._promotion_for(piece, move)
        if promotion is not None and promotion not in _PROMOTABLE:
            return f"cannot promote to {promotion}"
        return None

    def _promotion_for(self, piece: Piece, move: Move) -> PieceType | None:
        if self.variant != RuleVariant.PROMOTION:
            return None
        if piece.piece_type != PieceType.PAWN:
            return None
        if rank_of(move.to_sq) != _LAST_RANK[int(piece.color)]:
            return None
        return move.promotion or PieceType.QUEEN

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def history(self) -> tuple[MoveResult, ...]:
        return tuple(self._history)

    @property
    def ply_count(self) -> int:
        return len(self._history)

    @property
    def fullmove_number(self) -> int:
        return len(self._history) // 2 + 1

    @property
    def last_move(self) -> MoveResult | None:
        return self._history[-1] if self._history else None

    def fen(self) -> str:
        return board_to_fen(self.board, self.side_to_move, len(self._history))

    def max_repetition_count(self) -> int:
        """Highest number of recorded moves sharing one position."""
        counts: dict[str, int] = {}
        for record in self._history:
            key = (
                repetition_key(record.fen)
                if self.repetition_ignores_counters
                else record.fen
            )
            counts[key] = counts.get(key, 0) + 1
        return max(counts.values(), default=0)

    def legal_moves(self, square: Square | None = None) -> list[Move]:
        return MoveGenerator(self).generate_legal_moves(square)

    def is_in_check(self, color: Color | None = None) -> bool:
        return MoveGenerator(self).is_in_check(
            self.side_to_move if color is None else color
        )

    # ── Utilities ────────────────────────────────────────────────────────

    def copy(self) -> Position:
        """Independent deep copy including history."""
        pos = Position(
            self.board.copy(),
            self.side_to_move,
            self.variant,
            repetition_ignores_counters=self.repetition_ignores_counters,
        )
        pos._history = self._history.copy()
        return pos

    def with_side_to_move(self, color: Color) -> Position:
        """Copy of this position with *color* to move."""
        pos = self.copy()
        pos.side_to_move = color
        return pos

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return (
            self.board == other.board
            and self.side_to_move == other.side_to_move
            and self._history == other._history
        )

    def __repr__(self) -> str:
        return f"Position({self.fen()!r})"
