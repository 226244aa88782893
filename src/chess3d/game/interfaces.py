"""Abstract interfaces for the game layer.

Follows Dependency Inversion: the high-level GameController depends on
these ABCs, not on concrete players or engines.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import IntEnum, auto
from typing import TYPE_CHECKING

from chess3d.core.enums import Color

if TYPE_CHECKING:
    from chess3d.core.move import Move, MoveResult
    from chess3d.game.session import GameSession, MoveInput

MoveReadyCallback = Callable[["Move | None"], None]


# ── Game phase FSM states ────────────────────────────────────────────────────


class GamePhase(IntEnum):
    """Finite-state-machine states for a chess game."""

    NOT_STARTED = auto()
    AWAITING_MOVE = auto()
    THINKING = auto()  # AI is computing
    GAME_OVER = auto()


# ── Abstract interfaces ─────────────────────────────────────────────────────


class IPlayer(ABC):
    """Interface for a game participant (human or AI)."""

    @property
    @abstractmethod
    def color(self) -> Color: ...

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def is_human(self) -> bool: ...

    @abstractmethod
    def request_move(self, session: GameSession) -> None:
        """Begin the move-selection process.

        For humans this is a no-op (they interact via the board).
        For AI this starts the search; the move is delivered through the
        callback installed with :meth:`set_move_callback`.
        """

    @abstractmethod
    def set_move_callback(self, callback: MoveReadyCallback | None) -> None:
        """Install the callable that receives this player's chosen move."""

    @abstractmethod
    def cancel(self) -> None:
        """Cancel an ongoing move computation (AI only, no-op for human)."""


class IGameController(ABC):
    """Interface for the game orchestrator."""

    @abstractmethod
    def new_game(self, white: IPlayer, black: IPlayer, fen: str | None = None) -> None:
        """Set up a new game."""

    @abstractmethod
    def submit_move(self, move: MoveInput) -> MoveResult | None:
        """Submit a move. Returns the result if legal and applied."""

    @abstractmethod
    def undo_move(self) -> bool:
        """Undo the last move (and the AI reply). Returns True on success."""

    @abstractmethod
    def request_hint(self) -> Move | None:
        """Suggest a move for the human on turn."""
