"""Shared engine search models and protocol."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from chess3d.core.enums import Color
    from chess3d.core.move import Move
    from chess3d.game.session import GameSession

CancelCheck = Callable[[], bool]

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 6

# Difficulty level -> full search depth in plies.
DIFFICULTY_DEPTHS: dict[int, int] = {
    1: 2,  # Beginner
    2: 3,  # Amateur
    3: 4,  # Intermediate
    4: 5,  # Advanced
    5: 6,  # Expert
    6: 7,  # Master
}
DEFAULT_DEPTH = 4


def depth_for_difficulty(difficulty: int) -> int:
    return DIFFICULTY_DEPTHS.get(difficulty, DEFAULT_DEPTH)


class SearchCancelled(Exception):
    """Raised inside the search tree to unwind when cancellation is requested."""


@dataclass(slots=True, frozen=True)
class SearchResult:
    """Result produced by the engine search.

    ``score`` is white-positive; mate scores have a magnitude of at least
    :data:`chess3d.engine.evaluation.MATE_SCORE`.
    """

    best_move: Move | None
    score: float
    depth: int
    nodes: int
    elapsed_ms: float = 0.0
    cancelled: bool = False


@dataclass(slots=True, frozen=True)
class PositionAnalysis:
    """Static evaluation plus the engine's preferred move."""

    evaluation: float
    best_move: Move | None
    color: Color
    is_winning: bool
    advantage: Color


class IEngine(Protocol):
    """Protocol for chess engines used by the game layer."""

    def search(
        self,
        session: GameSession,
        is_cancelled: CancelCheck | None = None,
    ) -> SearchResult: ...

    def get_best_move(self, session: GameSession) -> Move | None: ...

    def set_difficulty(self, difficulty: int) -> None: ...
