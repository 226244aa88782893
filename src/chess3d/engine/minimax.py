"""Minimax search with alpha-beta pruning over cloned game sessions."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from time import perf_counter

from chess3d.core.board import Board
from chess3d.core.enums import Color
from chess3d.core.move import Move
from chess3d.core.move_generator import (
    apply_to_board,
    is_king_attacked,
    revert_on_board,
)
from chess3d.core.rules import Rules
from chess3d.engine.evaluation import MATE_SCORE, PIECE_VALUES, Evaluator
from chess3d.engine.search import (
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    CancelCheck,
    IEngine,
    PositionAnalysis,
    SearchCancelled,
    SearchResult,
    depth_for_difficulty,
)
from chess3d.game.session import GameSession

_LOGGER = logging.getLogger(__name__)

_CAPTURE_BONUS = 1_000
_CHECK_BONUS = 500
_KILLER_BONUS = 100
_MAX_KILLERS = 2
_WINNING_MARGIN = 500

_BOUND_EXACT = 0
_BOUND_LOWER = 1
_BOUND_UPPER = 2

CacheKey = tuple[str, int, bool]


def _never_cancelled() -> bool:
    return False


@dataclass(slots=True)
class _CacheEntry:
    score: float
    bound: int


class MinimaxEngine(IEngine):
    """Depth-limited minimax with alpha-beta pruning.

    Every node works on its own cloned :class:`GameSession`, so sibling
    branches never share mutable state.  The transposition cache, killer
    table and history table belong to this instance and are reset at the
    start of every top-level search.
    """

    __slots__ = (
        "_difficulty",
        "_max_depth",
        "_rng",
        "_evaluator",
        "_cache",
        "_killer_moves",
        "_history_scores",
        "_nodes",
        "_cancel_check",
    )

    def __init__(
        self,
        difficulty: int = 3,
        *,
        max_depth: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._rng = rng or random.Random()
        self._difficulty = difficulty
        self._max_depth = max_depth or depth_for_difficulty(difficulty)
        self._evaluator = Evaluator(difficulty, self._rng)
        self._cache: dict[CacheKey, _CacheEntry] = {}
        self._killer_moves: dict[int, list[Move]] = {}
        self._history_scores: dict[tuple[int, int], int] = {}
        self._nodes = 0
        self._cancel_check: CancelCheck = _never_cancelled

    # ── Configuration ────────────────────────────────────────────────────

    @property
    def difficulty(self) -> int:
        return self._difficulty

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def evaluator(self) -> Evaluator:
        return self._evaluator

    def set_difficulty(self, difficulty: int) -> None:
        if not (MIN_DIFFICULTY <= difficulty <= MAX_DIFFICULTY):
            raise ValueError(
                f"Difficulty must be {MIN_DIFFICULTY}-{MAX_DIFFICULTY}, "
                f"got {difficulty}"
            )
        self._difficulty = difficulty
        self._max_depth = depth_for_difficulty(difficulty)
        self._evaluator.difficulty = difficulty
        self._cache.clear()

    # ── Public API ───────────────────────────────────────────────────────

    def get_best_move(self, session: GameSession) -> Move | None:
        """Best move for the side to move, or ``None`` if there is none.

        Never raises: an unexpected failure falls back to a random legal
        move.
        """
        try:
            return self.search(session).best_move
        except Exception:
            _LOGGER.exception("Search failed; playing a random legal move")
            moves = session.moves(verbose=True)
            return self._rng.choice(moves) if moves else None

    def get_hint(self, session: GameSession) -> Move | None:
        return self.get_best_move(session)

    def analyze_position(self, session: GameSession) -> PositionAnalysis:
        evaluation = self._evaluator.evaluate(session)
        return PositionAnalysis(
            evaluation=evaluation,
            best_move=self.get_best_move(session),
            color=session.turn,
            is_winning=abs(evaluation) > _WINNING_MARGIN,
            advantage=Color.WHITE if evaluation > 0 else Color.BLACK,
        )

    def search(
        self,
        session: GameSession,
        is_cancelled: CancelCheck | None = None,
    ) -> SearchResult:
        started = perf_counter()
        self._reset_search_state()
        self._cancel_check = is_cancelled or _never_cancelled

        root_moves = session.moves(verbose=True)
        if not root_moves:
            return SearchResult(None, self._evaluator.evaluate(session), 0, 0)
        if len(root_moves) == 1:
            return SearchResult(root_moves[0], 0.0, 0, 0)

        maximizing = session.turn == Color.WHITE
        best_move: Move | None = None
        best_value = -math.inf if maximizing else math.inf
        alpha = -math.inf
        beta = math.inf
        cancelled = False

        ordered = self._order_moves(session, root_moves, self._max_depth)
        try:
            for move in ordered:
                child = self._child(session, move)
                value = self.minimax(
                    child, self._max_depth - 1, alpha, beta, not maximizing
                )
                if maximizing:
                    if value > best_value:
                        best_value = value
                        best_move = move
                    alpha = max(alpha, value)
                else:
                    if value < best_value:
                        best_value = value
                        best_move = move
                    beta = min(beta, value)
        except SearchCancelled:
            cancelled = True
            if best_move is None:
                best_move = ordered[0]
                best_value = 0.0

        elapsed_ms = (perf_counter() - started) * 1000.0
        _LOGGER.info(
            "AI search: %.0f ms, best value %s, nodes %d, depth %d%s",
            elapsed_ms,
            best_value,
            self._nodes,
            self._max_depth,
            " (cancelled)" if cancelled else "",
        )
        _LOGGER.debug("Transposition cache entries: %d", len(self._cache))
        return SearchResult(
            best_move,
            best_value,
            self._max_depth,
            self._nodes,
            elapsed_ms,
            cancelled,
        )

    # ── Tree search ──────────────────────────────────────────────────────

    def minimax(
        self,
        session: GameSession,
        depth: int,
        alpha: float,
        beta: float,
        maximizing: bool,
    ) -> float:
        if self._cancel_check():
            raise SearchCancelled
        self._nodes += 1

        key: CacheKey = (session.fen(), depth, maximizing)
        cached = self._cache.get(key)
        if cached is not None:
            if cached.bound == _BOUND_EXACT:
                return cached.score
            if cached.bound == _BOUND_LOWER and cached.score >= beta:
                return cached.score
            if cached.bound == _BOUND_UPPER and cached.score <= alpha:
                return cached.score

        moves = session.moves(verbose=True) if depth > 0 else []
        if depth == 0 or self._is_terminal(session, moves):
            score = self._leaf_score(session, depth)
            self._cache[key] = _CacheEntry(score, _BOUND_EXACT)
            return score

        alpha_orig = alpha
        beta_orig = beta
        best = -math.inf if maximizing else math.inf
        for move in self._order_moves(session, moves, depth):
            child = self._child(session, move)
            value = self.minimax(child, depth - 1, alpha, beta, not maximizing)
            if maximizing:
                best = max(best, value)
                alpha = max(alpha, value)
            else:
                best = min(best, value)
                beta = min(beta, value)
            if beta <= alpha:
                self._record_killer(move, depth)
                self._update_history(move, depth)
                break

        if best <= alpha_orig:
            bound = _BOUND_UPPER
        elif best >= beta_orig:
            bound = _BOUND_LOWER
        else:
            bound = _BOUND_EXACT
        self._cache[key] = _CacheEntry(best, bound)
        return best

    @staticmethod
    def _child(session: GameSession, move: Move) -> GameSession:
        child = session.clone()
        if child.move(move) is None:
            raise RuntimeError(f"Generated move {move} was rejected")
        return child

    @staticmethod
    def _is_terminal(session: GameSession, moves: list[Move]) -> bool:
        position = session.position
        return (
            not moves
            or position.board.king_square(position.side_to_move) is None
            or Rules.is_insufficient_material(position)
            or Rules.is_threefold_repetition(position)
        )

    def _leaf_score(self, session: GameSession, depth: int) -> float:
        score = self._evaluator.evaluate(session)
        # Mates found with more depth left are closer to the root.
        if score >= MATE_SCORE:
            return score + depth
        if score <= -MATE_SCORE:
            return score - depth
        return score

    # ── Move ordering ────────────────────────────────────────────────────

    def _order_moves(
        self, session: GameSession, moves: list[Move], depth: int
    ) -> list[Move]:
        board = session.position.board
        scratch = board.copy()
        scores: dict[Move, int] = {}
        for move in moves:
            scores[move] = self._move_order_score(scratch, move, depth)
        return sorted(moves, key=scores.__getitem__, reverse=True)

    def _move_order_score(self, scratch: Board, move: Move, depth: int) -> int:
        score = 0
        target = scratch[move.to_sq]
        if target is not None:
            score += _CAPTURE_BONUS + PIECE_VALUES[target.piece_type]

        piece, captured = apply_to_board(scratch, move)
        if is_king_attacked(scratch, piece.color.opposite):
            score += _CHECK_BONUS
        revert_on_board(scratch, move, piece, captured)

        if self._is_killer(move, depth):
            score += _KILLER_BONUS
        score += self._history_score(move)
        return score

    def _reset_search_state(self) -> None:
        self._cache.clear()
        self._killer_moves = {}
        self._history_scores = {}
        self._nodes = 0

    def _record_killer(self, move: Move, depth: int) -> None:
        killers = self._killer_moves.setdefault(depth, [])
        if any(k.same_squares(move) for k in killers):
            return
        killers.insert(0, move)
        del killers[_MAX_KILLERS:]

    def _is_killer(self, move: Move, depth: int) -> bool:
        return any(k.same_squares(move) for k in self._killer_moves.get(depth, ()))

    def _history_score(self, move: Move) -> int:
        return self._history_scores.get((move.from_sq, move.to_sq), 0)

    def _update_history(self, move: Move, depth: int) -> None:
        key = (move.from_sq, move.to_sq)
        self._history_scores[key] = self._history_scores.get(key, 0) + depth * depth
