"""Concrete player implementations."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from chess3d.core.enums import Color
from chess3d.game.interfaces import IPlayer, MoveReadyCallback

if TYPE_CHECKING:
    from chess3d.core.move import Move
    from chess3d.engine.search import IEngine
    from chess3d.game.session import GameSession

_LOGGER = logging.getLogger(__name__)


class _Seat(IPlayer):
    """Color, display name and the controller's move callback."""

    __slots__ = ("_color", "_name", "_move_callback")

    def __init__(self, color: Color, name: str) -> None:
        self._color = color
        self._name = name
        self._move_callback: MoveReadyCallback | None = None

    @property
    def color(self) -> Color:
        return self._color

    @property
    def name(self) -> str:
        return self._name

    def set_move_callback(self, callback: MoveReadyCallback | None) -> None:
        self._move_callback = callback

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._color}, {self._name!r})"


class HumanPlayer(_Seat):
    """Moves arrive through ``GameController.submit_move`` from the UI."""

    __slots__ = ()

    def __init__(self, color: Color, name: str = "") -> None:
        super().__init__(color, name or f"Player ({color})")

    @property
    def is_human(self) -> bool:
        return True

    def request_move(self, session: GameSession) -> None:
        pass

    def cancel(self) -> None:
        pass


class AIPlayer(_Seat):
    """An AI participant backed by an engine.

    By default the search runs synchronously inside :meth:`request_move`
    and the move is delivered straight away.  A host application with an
    event loop passes *on_request_move* instead (e.g. posting to an
    ``EngineWorker`` on a ``QThread``) and later calls :meth:`deliver`.

    Args:
        color: Side the AI plays.
        engine: Engine used for synchronous searches.
        name: Display name.
        on_request_move: ``(GameSession) -> None``: replaces the
            synchronous search when given.
        on_cancel: ``() -> None``: called to abort a running search.
    """

    __slots__ = ("_engine", "_on_request_move", "_on_cancel")

    def __init__(
        self,
        color: Color,
        engine: IEngine | None = None,
        name: str = "Engine",
        on_request_move: Callable[[GameSession], None] | None = None,
        on_cancel: Callable[[], None] | None = None,
    ) -> None:
        if engine is None and on_request_move is None:
            raise ValueError("AIPlayer needs an engine or an on_request_move hook")
        super().__init__(color, name)
        self._engine = engine
        self._on_request_move = on_request_move
        self._on_cancel = on_cancel

    @property
    def is_human(self) -> bool:
        return False

    @property
    def engine(self) -> IEngine | None:
        return self._engine

    def request_move(self, session: GameSession) -> None:
        if self._on_request_move is not None:
            self._on_request_move(session)
            return
        assert self._engine is not None
        self.deliver(self._engine.get_best_move(session))

    def deliver(self, move: Move | None) -> None:
        """Hand the chosen move (or ``None``) to the controller."""
        if self._move_callback is None:
            _LOGGER.warning("%s produced a move with no listener attached", self._name)
            return
        self._move_callback(move)

    def cancel(self) -> None:
        if self._on_cancel is not None:
            self._on_cancel()
