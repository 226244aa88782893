"""GameSession: the rules engine plus captured-piece bookkeeping.

This is the object the presentation layer and the search engine talk to.
It is a pure data/logic class: no threading, no UI.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal, overload

from chess3d.core.enums import Color, GameStatus, PieceType, RuleVariant
from chess3d.core.move import Move, MoveResult
from chess3d.core.move_generator import MoveGenerator
from chess3d.core.notation import move_to_san, normalize_san, pgn_movetext
from chess3d.core.piece import Piece
from chess3d.core.position import Position
from chess3d.core.rules import Rules
from chess3d.core.types import is_square_name, make_square, parse_square, square_name

_LOGGER = logging.getLogger(__name__)

_UCI_RE = re.compile(r"^[a-h][1-8][a-h][1-8][nbrq]?$")

# Material on the pawn=1 scale (king does not count).
MATERIAL_UNITS: dict[PieceType, int] = {
    PieceType.PAWN: 1,
    PieceType.KNIGHT: 3,
    PieceType.BISHOP: 3,
    PieceType.ROOK: 5,
    PieceType.QUEEN: 9,
    PieceType.KING: 0,
}

MoveInput = Move | Mapping[str, str] | str


@dataclass(frozen=True, slots=True)
class CapturedPiece:
    """A piece lost by one side, with the ply that captured it."""

    piece_type: PieceType
    ply: int


class GameSession:
    """One game: a :class:`Position` plus two captured-piece lists.

    ``clone()`` returns a fully independent session; the search engine
    relies on that to explore branches without touching the root.
    """

    __slots__ = ("_position", "_captured", "_variant", "_relaxed_repetition")

    def __init__(
        self,
        variant: RuleVariant = RuleVariant.MINIMAL,
        fen: str | None = None,
        *,
        repetition_ignores_counters: bool = False,
    ) -> None:
        self._variant = variant
        self._relaxed_repetition = repetition_ignores_counters
        self._position = self._new_position(fen or None)
        self._captured: dict[Color, list[CapturedPiece]] = {
            Color.WHITE: [],
            Color.BLACK: [],
        }

    # ── Lifecycle ────────────────────────────────────────────────────────

    def reset(self) -> None:
        """Back to the standard starting position with empty history."""
        self._position = self._new_position(None)
        self._captured = {Color.WHITE: [], Color.BLACK: []}

    def load_fen(self, fen: str) -> bool:
        """Replace the position; history and captures are cleared."""
        try:
            position = self._new_position(fen)
        except ValueError:
            _LOGGER.warning("Invalid FEN ignored: %r", fen)
            return False
        self._position = position
        self._captured = {Color.WHITE: [], Color.BLACK: []}
        return True

    def _new_position(self, fen: str | None) -> Position:
        if fen is None:
            return Position(
                variant=self._variant,
                repetition_ignores_counters=self._relaxed_repetition,
            )
        return Position.from_fen(
            fen,
            self._variant,
            repetition_ignores_counters=self._relaxed_repetition,
        )

    def clone(self) -> GameSession:
        session = GameSession.__new__(GameSession)
        session._variant = self._variant
        session._relaxed_repetition = self._relaxed_repetition
        session._position = self._position.copy()
        session._captured = {
            color: entries.copy() for color, entries in self._captured.items()
        }
        return session

    # ── Move application ─────────────────────────────────────────────────

    def move(self, move: MoveInput) -> MoveResult | None:
        """Apply *move* if legal; ``None`` means the move was rejected.

        Accepts a :class:`Move`, a ``{"from", "to", "promotion"}`` mapping,
        a UCI string (``"e2e4"``) or short algebraic (``"Nf3"``).
        """
        parsed = self._coerce_move(move)
        if parsed is None:
            _LOGGER.debug("Unparseable move input: %r", move)
            return None

        result = self._position.make_move(parsed)
        if result is None:
            return None

        if result.captured is not None:
            self._captured[result.color.opposite].append(
                CapturedPiece(result.captured, self._position.ply_count)
            )
        return result

    def undo(self) -> MoveResult | None:
        """Take back the last move; ``None`` when there is no history."""
        ply = self._position.ply_count
        undone = self._position.undo()
        if undone is None:
            return None

        if undone.captured is not None:
            losses = self._captured[undone.color.opposite]
            if losses and losses[-1].ply == ply:
                losses.pop()
        return undone

    def is_legal_move(self, move: MoveInput) -> bool:
        parsed = self._coerce_move(move)
        if parsed is None:
            return False
        return MoveGenerator(self._position).is_legal(parsed)

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def position(self) -> Position:
        return self._position

    @property
    def variant(self) -> RuleVariant:
        return self._variant

    @property
    def turn(self) -> Color:
        return self._position.side_to_move

    @overload
    def moves(
        self, square: str | None = None, *, verbose: Literal[False] = ...
    ) -> list[str]: ...

    @overload
    def moves(
        self, square: str | None = None, *, verbose: Literal[True]
    ) -> list[Move]: ...

    def moves(
        self, square: str | None = None, *, verbose: bool = False
    ) -> list[str] | list[Move]:
        """Legal moves of the side to move.

        Plain form lists destination square names; verbose form lists
        :class:`Move` objects.  Both come from the same generation.
        """
        if square is not None and not is_square_name(square):
            return []
        origin = parse_square(square) if square is not None else None
        legal = self._position.legal_moves(origin)
        if verbose:
            return legal
        return [m.to_square for m in legal]

    @overload
    def history(self, *, verbose: Literal[False] = ...) -> list[str]: ...

    @overload
    def history(self, *, verbose: Literal[True]) -> list[MoveResult]: ...

    def history(self, *, verbose: bool = False) -> list[str] | list[MoveResult]:
        records = list(self._position.history)
        if verbose:
            return records
        return [r.san for r in records]

    def get_captured_pieces(self) -> dict[Color, list[PieceType]]:
        """Piece types lost by each color, in capture order."""
        return {
            color: [entry.piece_type for entry in entries]
            for color, entries in self._captured.items()
        }

    def get_material_count(self) -> dict[Color, int]:
        counts = {Color.WHITE: 0, Color.BLACK: 0}
        for _, piece in self._position.board.occupied():
            counts[piece.color] += MATERIAL_UNITS[piece.piece_type]
        return counts

    def attacked_squares(self, color: Color) -> list[str]:
        """Destinations of *color*'s legal moves, as if *color* were to move."""
        view = self._position
        if view.side_to_move != color:
            view = view.with_side_to_move(color)
        seen: dict[str, None] = {}
        for move in view.legal_moves():
            seen.setdefault(move.to_square)
        return list(seen)

    def get(self, square: str) -> Piece | None:
        if not is_square_name(square):
            return None
        return self._position.board[parse_square(square)]

    def board(self) -> list[list[Piece | None]]:
        return self._position.board.rows()

    def fen(self) -> str:
        return self._position.fen()

    def pgn(self) -> str:
        return pgn_movetext(self.history())

    # ── Derived game state ───────────────────────────────────────────────

    def in_check(self) -> bool:
        return Rules.is_in_check(self._position)

    def status(self) -> GameStatus:
        return Rules.status(self._position)

    def is_game_over(self) -> bool:
        return self.status().is_terminal

    def is_checkmate(self) -> bool:
        return self.status() == GameStatus.CHECKMATE

    def is_stalemate(self) -> bool:
        return Rules.is_stalemate(self._position)

    def is_draw(self) -> bool:
        return self.status().is_draw

    def is_insufficient_material(self) -> bool:
        return Rules.is_insufficient_material(self._position)

    def is_threefold_repetition(self) -> bool:
        return Rules.is_threefold_repetition(self._position)

    def status_message(self) -> str:
        """Human-readable status for the game-over banner."""
        status = self.status()
        if status == GameStatus.CHECKMATE:
            winner = "Black" if self.turn == Color.WHITE else "White"
            return f"Checkmate! {winner} wins!"
        if status == GameStatus.STALEMATE:
            return "Stalemate!"
        if status == GameStatus.DRAW_THREEFOLD_REPETITION:
            return "Draw by repetition!"
        if status == GameStatus.DRAW_INSUFFICIENT_MATERIAL:
            return "Draw by insufficient material!"
        if self.in_check():
            return f"{self.turn.name.capitalize()} is in check"
        return f"{self.turn.name.capitalize()} to move"

    # ── Coordinates ──────────────────────────────────────────────────────

    @staticmethod
    def square_to_coords(square: str) -> tuple[int, int]:
        """``'e4'`` → ``(file, rank)`` = ``(4, 3)``."""
        sq = parse_square(square)
        return sq & 7, sq >> 3

    @staticmethod
    def coords_to_square(file: int, rank: int) -> str:
        return square_name(make_square(file, rank))

    # ── Internal ─────────────────────────────────────────────────────────

    def _coerce_move(self, value: MoveInput) -> Move | None:
        if isinstance(value, Move):
            return value
        if isinstance(value, Mapping):
            return self._move_from_mapping(value)
        if isinstance(value, str):
            text = value.strip()
            if _UCI_RE.match(text):
                return Move.from_uci(text)
            return self._move_from_san(text)
        return None

    @staticmethod
    def _move_from_mapping(data: Mapping[str, str]) -> Move | None:
        origin = data.get("from")
        target = data.get("to")
        if not (is_square_name(origin) and is_square_name(target)):
            return None
        promotion: PieceType | None = None
        promo_letter = data.get("promotion")
        if promo_letter:
            try:
                promotion = PieceType.from_letter(promo_letter)
            except ValueError:
                return None
        return Move(parse_square(origin), parse_square(target), promotion)

    def _move_from_san(self, san: str) -> Move | None:
        wanted, _, promo_letter = normalize_san(san).partition("=")
        promotion: PieceType | None = None
        if promo_letter:
            try:
                promotion = PieceType.from_letter(promo_letter)
            except ValueError:
                return None
        board = self._position.board
        for move in self._position.legal_moves():
            piece = board[move.from_sq]
            assert piece is not None
            if move_to_san(piece, move, board[move.to_sq]) == wanted:
                return Move(move.from_sq, move.to_sq, promotion)
        return None
