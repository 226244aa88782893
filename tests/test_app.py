"""Tests for the terminal entry point wiring."""

from collections.abc import Callable, Iterator

from chess3d.app import _parse_args, build_game, main, render_board, run_terminal
from chess3d.core.enums import Color
from chess3d.engine.minimax import MinimaxEngine
from chess3d.game.interfaces import GamePhase
from chess3d.game.session import GameSession
from chess3d.settings import AppSettings


def _reader(lines: list[str]) -> Callable[[str], str]:
    feed: Iterator[str] = iter(lines)

    def read(prompt: str) -> str:
        try:
            return next(feed)
        except StopIteration:
            raise EOFError from None

    return read


class TestBuildGame:
    def test_human_vs_ai(self) -> None:
        ctrl = build_game(
            AppSettings(ai_move_delay_ms=0),
            engine=MinimaxEngine(4, max_depth=1),
        )
        white, black = ctrl.player(Color.WHITE), ctrl.player(Color.BLACK)
        assert white is not None and white.is_human
        assert black is not None and not black.is_human
        assert ctrl.phase == GamePhase.AWAITING_MOVE

    def test_ai_as_white_moves_first(self) -> None:
        ctrl = build_game(
            AppSettings(ai_color="white", ai_move_delay_ms=0),
            engine=MinimaxEngine(4, max_depth=1),
        )
        assert len(ctrl.session.history()) == 1

    def test_human_vs_human(self) -> None:
        ctrl = build_game(AppSettings(ai_color=None))
        assert all(ctrl.player(c).is_human for c in Color)

    def test_custom_fen(self) -> None:
        ctrl = build_game(AppSettings(ai_color=None), "4k3/8/8/8/8/8/8/R3K3 b")
        assert ctrl.session.turn == Color.BLACK


class TestTerminal:
    def test_render_board(self) -> None:
        text = render_board(GameSession())
        lines = text.splitlines()
        assert lines[0] == "8 r n b q k b n r"
        assert lines[-1] == "  a b c d e f g h"

    def test_play_to_checkmate(self) -> None:
        ctrl = build_game(AppSettings(ai_color=None))
        out: list[str] = []
        code = run_terminal(
            ctrl, _reader(["f3", "e5", "bogus", "g4", "Qh4"]), out.append
        )
        assert code == 0
        assert "Illegal move: bogus" in out
        assert "Checkmate! Black wins!" in out
        assert "1. f3 e5 2. g4 Qh4" in out

    def test_commands(self) -> None:
        ctrl = build_game(AppSettings(ai_color=None))
        out: list[str] = []
        run_terminal(
            ctrl, _reader(["moves e2", "e4", "undo", "undo", "fen", "quit"]), out.append
        )
        assert "e2e3 e2e4" in out
        assert "Nothing to undo" in out
        assert ctrl.session.history() == []

    def test_main_rejects_bad_settings(self) -> None:
        assert main(["--difficulty", "9"]) == 2

    def test_main_rejects_bad_fen(self) -> None:
        assert main(["--fen", "nonsense", "--ai-color", "none"]) == 2

    def test_delay_defaults_to_settings(self) -> None:
        assert _parse_args([]).delay_ms == AppSettings().ai_move_delay_ms == 1000
        assert _parse_args(["--delay-ms", "0"]).delay_ms == 0
