"""GameController: the central orchestrator of a chess game.

Coordinates: Players, GameSession, hint engine.
Emits events via simple callbacks so the UI / tests can subscribe.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from chess3d.core.enums import Color, GameStatus, RuleVariant
from chess3d.core.move import Move, MoveResult
from chess3d.game.interfaces import GamePhase, IGameController, IPlayer
from chess3d.game.session import GameSession, MoveInput

if TYPE_CHECKING:
    from chess3d.engine.search import IEngine

_LOGGER = logging.getLogger(__name__)

# ── Event definitions ────────────────────────────────────────────────────────

MoveCallback = Callable[[MoveResult, GameSession], None]
GameOverCallback = Callable[[GameStatus, str], None]  # status, message
PhaseCallback = Callable[[GamePhase], None]
Scheduler = Callable[[int, Callable[[], None]], None]  # delay_ms, callback


def run_immediately(delay_ms: int, callback: Callable[[], None]) -> None:
    callback()


@dataclass
class GameEvents:
    """Observable callbacks. Multiple handlers per event."""

    on_move: list[MoveCallback] = field(default_factory=list)
    on_game_over: list[GameOverCallback] = field(default_factory=list)
    on_phase_changed: list[PhaseCallback] = field(default_factory=list)


# ── Controller ───────────────────────────────────────────────────────────────


class GameController(IGameController):
    """Orchestrates a full chess game: validates moves, switches turns,
    notifies listeners.

    Thread-safety: methods are designed to be called from a single thread
    (the main/UI thread).  AI moves arrive through the player's move
    callback, which a Qt host connects via a queued signal/slot.

    Args:
        variant: Rule variant for new games.
        hint_engine: Engine used by :meth:`request_hint`.
        ai_move_delay_ms: Pause before an AI move is applied.
        scheduler: ``(delay_ms, callback) -> None``; defaults to calling
            the callback at once.  A Qt host passes ``QTimer.singleShot``.
    """

    __slots__ = (
        "_session",
        "_players",
        "_phase",
        "_variant",
        "_hint_engine",
        "_ai_move_delay_ms",
        "_scheduler",
        "_prompting",
        "_reprompt",
        "events",
    )

    def __init__(
        self,
        variant: RuleVariant = RuleVariant.MINIMAL,
        hint_engine: IEngine | None = None,
        ai_move_delay_ms: int = 0,
        scheduler: Scheduler = run_immediately,
    ) -> None:
        self._variant = variant
        self._session = GameSession(variant)
        self._players: dict[Color, IPlayer] = {}
        self._phase = GamePhase.NOT_STARTED
        self._hint_engine = hint_engine
        self._ai_move_delay_ms = ai_move_delay_ms
        self._scheduler = scheduler
        self._prompting = False
        self._reprompt = False
        self.events = GameEvents()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def session(self) -> GameSession:
        return self._session

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def current_player(self) -> IPlayer | None:
        return self._players.get(self._session.turn)

    def player(self, color: Color) -> IPlayer | None:
        return self._players.get(color)

    def is_human_turn(self) -> bool:
        cp = self.current_player
        return (
            cp is not None
            and cp.is_human
            and self._phase == GamePhase.AWAITING_MOVE
        )

    # ── IGameController impl ─────────────────────────────────────────────

    def new_game(
        self,
        white: IPlayer,
        black: IPlayer,
        fen: str | None = None,
    ) -> None:
        if white.color != Color.WHITE or black.color != Color.BLACK:
            raise ValueError("Players must be passed as (white, black)")
        for old in self._players.values():
            old.cancel()
            old.set_move_callback(None)

        session = GameSession(self._variant)
        if fen is not None and not session.load_fen(fen):
            raise ValueError(f"Invalid FEN: {fen!r}")
        self._session = session
        self._players = {Color.WHITE: white, Color.BLACK: black}
        for p in self._players.values():
            p.set_move_callback(self._on_player_move)

        _LOGGER.info("New game: %s vs %s", white.name, black.name)
        if self._finish_if_over():
            return
        self._prompt_current_player()

    def submit_move(self, move: MoveInput) -> MoveResult | None:
        if self._phase not in (GamePhase.AWAITING_MOVE, GamePhase.THINKING):
            return None

        result = self._session.move(move)
        if result is None:
            return None

        self._emit_move(result)
        if self._finish_if_over():
            return result

        self._prompt_current_player()
        return result

    def undo_move(self) -> bool:
        """Take back the last move.

        Against an AI the AI's reply is taken back too, so the human is on
        turn again.  Allowed after the game has ended.
        """
        if not self._session.history():
            return False

        cp = self.current_player
        if cp is not None and not cp.is_human:
            cp.cancel()

        self._session.undo()
        cp = self.current_player
        if cp is not None and not cp.is_human and self._has_human():
            if self._session.history():
                self._session.undo()

        self._prompt_current_player()
        return True

    def request_hint(self) -> Move | None:
        if self._hint_engine is None or not self.is_human_turn():
            return None
        return self._hint_engine.get_best_move(self._session.clone())

    # ── Internal helpers ─────────────────────────────────────────────────

    def _has_human(self) -> bool:
        return any(p.is_human for p in self._players.values())

    def _on_player_move(self, move: Move | None) -> None:
        if self._phase != GamePhase.THINKING:
            _LOGGER.debug("Discarding late AI move %s", move)
            return
        if move is None:
            _LOGGER.warning("AI returned no move in a live position")
            return

        def apply() -> None:
            if self._phase == GamePhase.THINKING and self.submit_move(move) is None:
                _LOGGER.error("AI move %s rejected", move)

        self._scheduler(self._ai_move_delay_ms, apply)

    def _finish_if_over(self) -> bool:
        if not self._session.is_game_over():
            return False
        status = self._session.status()
        message = self._session.status_message()
        _LOGGER.info("Game over: %s", message)
        self._emit_game_over(status, message)
        return True

    def _prompt_current_player(self) -> None:
        """Ask the current player to move.

        Synchronous AI players call back into :meth:`submit_move` from
        inside ``request_move``; those re-entrant prompts are replayed by
        the outer loop so AI-vs-AI games keep a flat call stack.
        """
        if self._prompting:
            self._reprompt = True
            return

        self._prompting = True
        try:
            while True:
                self._reprompt = False
                cp = self.current_player
                if cp is None or self._session.is_game_over():
                    return
                if cp.is_human:
                    self._emit_phase(GamePhase.AWAITING_MOVE)
                else:
                    self._emit_phase(GamePhase.THINKING)
                    cp.request_move(self._session.clone())
                if not self._reprompt:
                    return
        finally:
            self._prompting = False

    def _emit_move(self, result: MoveResult) -> None:
        for cb in self.events.on_move:
            cb(result, self._session)

    def _emit_game_over(self, status: GameStatus, message: str) -> None:
        self._emit_phase(GamePhase.GAME_OVER)
        for cb in self.events.on_game_over:
            cb(status, message)

    def _emit_phase(self, phase: GamePhase) -> None:
        self._phase = phase
        for cb in self.events.on_phase_changed:
            cb(phase)
