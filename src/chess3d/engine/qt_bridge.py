"""Qt bridge to run engine search in a worker thread."""

from __future__ import annotations

import logging
import random
import threading

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot

from chess3d.engine.minimax import MinimaxEngine
from chess3d.engine.search import IEngine
from chess3d.game.session import GameSession

_LOGGER = logging.getLogger(__name__)


class EngineWorker(QObject):
    """Thread-affine worker that computes engine moves on demand.

    Move it to a ``QThread`` and connect :meth:`request_move` to a queued
    signal; results come back through the signals below.  The session is
    cloned before searching so the caller may keep using its own copy.
    """

    best_move_ready = pyqtSignal(int, object, float, int, int)
    search_cancelled = pyqtSignal(int)
    search_no_move = pyqtSignal(int, float)
    search_error = pyqtSignal(int, str)

    __slots__ = ("_cancel_event", "_engine", "_rng")

    def __init__(
        self,
        engine: IEngine | None = None,
        *,
        difficulty: int = 3,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__()
        self._engine: IEngine = engine or MinimaxEngine(difficulty)
        self._rng = rng or random.Random()
        self._cancel_event = threading.Event()

    @pyqtSlot(object, int)
    def request_move(self, session_obj: object, request_id: int) -> None:
        """Search for the best move in *session_obj* and emit the result."""
        if not isinstance(session_obj, GameSession):
            self.search_error.emit(request_id, "Engine received invalid session")
            return

        self._cancel_event.clear()
        try:
            result = self._engine.search(
                session_obj.clone(),
                is_cancelled=self._cancel_event.is_set,
            )
        except Exception:
            _LOGGER.exception(
                "Engine search failed for request %d; playing a random move",
                request_id,
            )
            self._emit_random_move(session_obj, request_id)
            return

        if self._cancel_event.is_set() or result.cancelled:
            self.search_cancelled.emit(request_id)
            return

        if result.best_move is None:
            self.search_no_move.emit(request_id, float(result.score))
            return

        self.best_move_ready.emit(
            request_id,
            result.best_move,
            float(result.score),
            result.depth,
            result.nodes,
        )

    def _emit_random_move(self, session: GameSession, request_id: int) -> None:
        moves = session.moves(verbose=True)
        if not moves:
            self.search_no_move.emit(request_id, 0.0)
            return
        self.best_move_ready.emit(request_id, self._rng.choice(moves), 0.0, 0, 0)

    @pyqtSlot()
    def cancel(self) -> None:
        """Request cancellation of the current search."""
        self._cancel_event.set()

    @pyqtSlot(int)
    def set_difficulty(self, difficulty: int) -> None:
        """Update the difficulty (takes effect on the next search)."""
        self._engine.set_difficulty(difficulty)
