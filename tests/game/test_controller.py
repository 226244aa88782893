"""Tests for GameController: the orchestrator."""

from collections.abc import Callable

import pytest

from chess3d.core.enums import Color, GameStatus
from chess3d.core.move import Move
from chess3d.core.notation import STARTING_FEN
from chess3d.core.types import E2, E4
from chess3d.engine.minimax import MinimaxEngine
from chess3d.engine.search import CancelCheck, SearchResult
from chess3d.game.controller import GameController
from chess3d.game.interfaces import GamePhase
from chess3d.game.player import AIPlayer, HumanPlayer
from chess3d.game.session import GameSession

BACK_RANK_MATE_IN_ONE = "6k1/5ppp/8/8/8/8/8/R5K1 w"


class _FirstMoveEngine:
    """Plays the first legal move; records every request."""

    def __init__(self) -> None:
        self.requests: list[str] = []

    def search(
        self, session: GameSession, is_cancelled: CancelCheck | None = None
    ) -> SearchResult:
        del is_cancelled
        moves = session.moves(verbose=True)
        return SearchResult(moves[0] if moves else None, 0.0, 1, 1)

    def get_best_move(self, session: GameSession) -> Move | None:
        self.requests.append(session.fen())
        return self.search(session).best_move

    def set_difficulty(self, difficulty: int) -> None:
        pass


class _KnightShuffleEngine:
    """Shuffles both knights out and back for a fixed number of plies."""

    CYCLE = ("g1f3", "g8f6", "f3g1", "f6g8")

    def __init__(self, plies: int) -> None:
        self.plies = plies

    def search(
        self, session: GameSession, is_cancelled: CancelCheck | None = None
    ) -> SearchResult:
        del is_cancelled
        ply = len(session.history())
        if ply >= self.plies:
            return SearchResult(None, 0.0, 0, 0)
        return SearchResult(Move.from_uci(self.CYCLE[ply % 4]), 0.0, 1, 1)

    def get_best_move(self, session: GameSession) -> Move | None:
        return self.search(session).best_move

    def set_difficulty(self, difficulty: int) -> None:
        pass


def _make_hh_controller(fen: str | None = None) -> GameController:
    """Helper: human vs human game."""
    ctrl = GameController()
    ctrl.new_game(
        HumanPlayer(Color.WHITE, "W"),
        HumanPlayer(Color.BLACK, "B"),
        fen=fen,
    )
    return ctrl


def _make_ha_controller(
    engine: _FirstMoveEngine | None = None,
) -> tuple[GameController, _FirstMoveEngine]:
    """Helper: human (white) vs synchronous AI (black)."""
    engine = engine or _FirstMoveEngine()
    ctrl = GameController(hint_engine=engine)
    ctrl.new_game(HumanPlayer(Color.WHITE), AIPlayer(Color.BLACK, engine))
    return ctrl, engine


class TestNewGame:
    def test_phase_awaiting(self) -> None:
        ctrl = _make_hh_controller()
        assert ctrl.phase == GamePhase.AWAITING_MOVE

    def test_not_started_before_new_game(self) -> None:
        assert GameController().phase == GamePhase.NOT_STARTED

    def test_players_assigned(self) -> None:
        ctrl = _make_hh_controller()
        assert ctrl.player(Color.WHITE) is not None
        assert ctrl.player(Color.BLACK) is not None

    def test_current_player_is_white(self) -> None:
        ctrl = _make_hh_controller()
        cp = ctrl.current_player
        assert cp is not None and cp.color == Color.WHITE

    def test_custom_fen(self) -> None:
        ctrl = _make_hh_controller(fen="4k3/8/8/8/8/8/8/R3K3 b")
        assert ctrl.session.turn == Color.BLACK

    def test_invalid_fen(self) -> None:
        with pytest.raises(ValueError):
            _make_hh_controller(fen="garbage")

    def test_players_must_match_colors(self) -> None:
        ctrl = GameController()
        with pytest.raises(ValueError):
            ctrl.new_game(HumanPlayer(Color.BLACK), HumanPlayer(Color.WHITE))

    def test_finished_position_reports_game_over(self) -> None:
        ctrl = GameController()
        statuses: list[GameStatus] = []
        ctrl.events.on_game_over.append(lambda status, msg: statuses.append(status))
        ctrl.new_game(
            HumanPlayer(Color.WHITE),
            HumanPlayer(Color.BLACK),
            fen="8/8/8/4k3/8/8/8/4K3 w",
        )
        assert statuses == [GameStatus.DRAW_INSUFFICIENT_MATERIAL]
        assert ctrl.phase == GamePhase.GAME_OVER


class TestSubmitMove:
    def test_legal_move_accepted(self) -> None:
        ctrl = _make_hh_controller()
        result = ctrl.submit_move(Move(E2, E4))
        assert result is not None and result.san == "e4"
        assert ctrl.session.turn == Color.BLACK

    def test_illegal_move_rejected(self) -> None:
        ctrl = _make_hh_controller()
        assert ctrl.submit_move("e2e5") is None
        assert ctrl.session.turn == Color.WHITE

    def test_move_event_fires(self) -> None:
        ctrl = _make_hh_controller()
        sans: list[str] = []
        ctrl.events.on_move.append(lambda result, session: sans.append(result.san))
        ctrl.submit_move("e4")
        assert sans == ["e4"]

    def test_game_over_event_on_checkmate(self) -> None:
        ctrl = _make_hh_controller()
        results: list[tuple[GameStatus, str]] = []
        ctrl.events.on_game_over.append(lambda s, m: results.append((s, m)))
        for text in ("f2f3", "e7e5", "g2g4", "d8h4"):
            ctrl.submit_move(text)
        assert results == [(GameStatus.CHECKMATE, "Checkmate! Black wins!")]
        assert ctrl.phase == GamePhase.GAME_OVER

    def test_no_moves_after_game_over(self) -> None:
        ctrl = _make_hh_controller()
        for text in ("f2f3", "e7e5", "g2g4", "d8h4"):
            ctrl.submit_move(text)
        assert ctrl.submit_move("a2a3") is None

    def test_not_before_new_game(self) -> None:
        assert GameController().submit_move("e2e4") is None


class TestAIPlayer:
    def test_ai_replies_immediately(self) -> None:
        ctrl, engine = _make_ha_controller()
        ctrl.submit_move("e2e4")
        assert len(ctrl.session.history()) == 2
        assert ctrl.session.turn == Color.WHITE
        assert ctrl.phase == GamePhase.AWAITING_MOVE
        assert len(engine.requests) == 1

    def test_phase_sequence(self) -> None:
        ctrl, _ = _make_ha_controller()
        phases: list[GamePhase] = []
        ctrl.events.on_phase_changed.append(phases.append)
        ctrl.submit_move("e2e4")
        assert phases == [GamePhase.THINKING, GamePhase.AWAITING_MOVE]

    def test_ai_as_white_moves_first(self) -> None:
        engine = _FirstMoveEngine()
        ctrl = GameController()
        ctrl.new_game(AIPlayer(Color.WHITE, engine), HumanPlayer(Color.BLACK))
        assert len(ctrl.session.history()) == 1
        assert ctrl.session.turn == Color.BLACK

    def test_engine_vs_engine_finds_mate(self) -> None:
        engine = MinimaxEngine(4, max_depth=2)
        ctrl = GameController()
        messages: list[str] = []
        ctrl.events.on_game_over.append(lambda s, m: messages.append(m))
        ctrl.new_game(
            AIPlayer(Color.WHITE, engine),
            AIPlayer(Color.BLACK, engine),
            fen=BACK_RANK_MATE_IN_ONE,
        )
        assert ctrl.session.history() == ["Ra8"]
        assert messages == ["Checkmate! White wins!"]

    def test_engine_vs_engine_stack_stays_flat(self) -> None:
        ctrl = GameController()
        engine = _KnightShuffleEngine(plies=600)
        ctrl.new_game(AIPlayer(Color.WHITE, engine), AIPlayer(Color.BLACK, engine))
        # Every AI reply arrives while the controller is still prompting;
        # nested prompting would overflow the recursion limit long before this.
        assert len(ctrl.session.history()) == 600
        assert ctrl.phase == GamePhase.THINKING
        assert not ctrl.session.is_game_over()

    def test_needs_engine_or_hook(self) -> None:
        with pytest.raises(ValueError):
            AIPlayer(Color.BLACK)


class TestAsyncAIPlayer:
    def _make(self) -> tuple[GameController, AIPlayer, list[GameSession], list[int]]:
        requested: list[GameSession] = []
        cancels: list[int] = []
        ai = AIPlayer(
            Color.BLACK,
            on_request_move=requested.append,
            on_cancel=lambda: cancels.append(1),
        )
        ctrl = GameController()
        ctrl.new_game(HumanPlayer(Color.WHITE), ai)
        return ctrl, ai, requested, cancels

    def test_request_dispatched_to_hook(self) -> None:
        ctrl, _, requested, _ = self._make()
        ctrl.submit_move("e2e4")
        assert ctrl.phase == GamePhase.THINKING
        assert len(requested) == 1
        assert requested[0] is not ctrl.session
        assert requested[0].fen() == ctrl.session.fen()

    def test_delivered_move_is_applied(self) -> None:
        ctrl, ai, _, _ = self._make()
        ctrl.submit_move("e2e4")
        ai.deliver(Move.from_uci("e7e5"))
        assert ctrl.session.history() == ["e4", "e5"]
        assert ctrl.phase == GamePhase.AWAITING_MOVE

    def test_late_move_after_undo_is_discarded(self) -> None:
        ctrl, ai, _, cancels = self._make()
        ctrl.submit_move("e2e4")
        assert ctrl.undo_move()
        assert cancels == [1]
        ai.deliver(Move.from_uci("e7e5"))
        assert ctrl.session.fen() == STARTING_FEN
        assert ctrl.phase == GamePhase.AWAITING_MOVE

    def test_scheduler_delays_ai_move(self) -> None:
        pending: list[tuple[int, Callable[[], None]]] = []
        ai = AIPlayer(Color.BLACK, _FirstMoveEngine())
        ctrl = GameController(
            ai_move_delay_ms=1000,
            scheduler=lambda delay, cb: pending.append((delay, cb)),
        )
        ctrl.new_game(HumanPlayer(Color.WHITE), ai)
        ctrl.submit_move("e2e4")
        assert len(ctrl.session.history()) == 1
        assert [delay for delay, _ in pending] == [1000]
        pending[0][1]()
        assert len(ctrl.session.history()) == 2


class TestUndo:
    def test_undo_human_vs_human(self) -> None:
        ctrl = _make_hh_controller()
        ctrl.submit_move("e2e4")
        assert ctrl.undo_move()
        assert ctrl.session.fen() == STARTING_FEN
        assert ctrl.session.turn == Color.WHITE

    def test_undo_nothing(self) -> None:
        ctrl = _make_hh_controller()
        assert not ctrl.undo_move()

    def test_undo_takes_back_ai_reply(self) -> None:
        ctrl, _ = _make_ha_controller()
        ctrl.submit_move("e2e4")
        assert ctrl.undo_move()
        assert ctrl.session.history() == []
        assert ctrl.session.turn == Color.WHITE
        assert ctrl.phase == GamePhase.AWAITING_MOVE

    def test_undo_after_checkmate(self) -> None:
        ctrl = _make_hh_controller()
        for text in ("f2f3", "e7e5", "g2g4", "d8h4"):
            ctrl.submit_move(text)
        assert ctrl.undo_move()
        assert ctrl.phase == GamePhase.AWAITING_MOVE
        assert ctrl.session.turn == Color.BLACK


class TestHint:
    def test_hint_on_human_turn(self) -> None:
        ctrl, _ = _make_ha_controller()
        hint = ctrl.request_hint()
        assert hint is not None
        assert ctrl.session.is_legal_move(hint)
        assert ctrl.session.history() == []

    def test_no_hint_without_engine(self) -> None:
        assert _make_hh_controller().request_hint() is None

    def test_no_hint_while_ai_thinks(self) -> None:
        requested: list[GameSession] = []
        ctrl = GameController(hint_engine=_FirstMoveEngine())
        ctrl.new_game(
            HumanPlayer(Color.WHITE),
            AIPlayer(Color.BLACK, on_request_move=requested.append),
        )
        ctrl.submit_move("e2e4")
        assert ctrl.request_hint() is None
