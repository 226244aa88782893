"""Application entry point.

Wires settings, engine, players and controller together and runs a
terminal game loop.  A graphical front-end builds the same objects via
:func:`build_game` and subscribes to ``controller.events`` instead.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from collections.abc import Callable, Sequence

from chess3d.core.enums import Color, GameStatus
from chess3d.core.move import MoveResult
from chess3d.engine.minimax import MinimaxEngine
from chess3d.game.controller import GameController, Scheduler, run_immediately
from chess3d.game.interfaces import IPlayer
from chess3d.game.player import AIPlayer, HumanPlayer
from chess3d.game.session import GameSession
from chess3d.settings import AppSettings

_LOGGER = logging.getLogger(__name__)

_HELP = (
    "Commands: <move> (e2e4, Nf3, e7e8q), undo, hint, moves [square], "
    "fen, pgn, board, help, quit"
)


def sleep_scheduler(delay_ms: int, callback: Callable[[], None]) -> None:
    """Blocking scheduler for the terminal loop."""
    if delay_ms > 0:
        time.sleep(delay_ms / 1000.0)
    callback()


def build_game(
    settings: AppSettings,
    fen: str | None = None,
    *,
    engine: MinimaxEngine | None = None,
    scheduler: Scheduler = run_immediately,
) -> GameController:
    """Create a controller with players for *settings* and start a game."""
    engine = engine or MinimaxEngine(settings.difficulty)
    controller = GameController(
        settings.variant,
        hint_engine=engine,
        ai_move_delay_ms=settings.ai_move_delay_ms,
        scheduler=scheduler,
    )

    def make_player(color: Color) -> IPlayer:
        if color == settings.ai_side:
            return AIPlayer(color, engine, name=f"Engine (level {settings.difficulty})")
        return HumanPlayer(color)

    controller.new_game(make_player(Color.WHITE), make_player(Color.BLACK), fen)
    return controller


def render_board(session: GameSession) -> str:
    lines = []
    for index, row in enumerate(session.board()):
        rank = 8 - index
        cells = " ".join(str(piece) if piece else "." for piece in row)
        lines.append(f"{rank} {cells}")
    lines.append("  a b c d e f g h")
    return "\n".join(lines)


def run_terminal(
    controller: GameController,
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> int:
    """Read commands until the game ends or the user quits."""

    def on_move(result: MoveResult, session: GameSession) -> None:
        write(f"{result.color}: {result.san}")

    def on_game_over(status: GameStatus, message: str) -> None:
        write(message)

    controller.events.on_move.append(on_move)
    controller.events.on_game_over.append(on_game_over)

    session = controller.session
    write(render_board(session))
    while True:
        session = controller.session
        if session.is_game_over():
            write(f"Final position:\n{render_board(session)}")
            write(session.pgn())
            return 0
        try:
            line = read(f"{session.status_message()} > ").strip()
        except EOFError:
            return 0
        if not line:
            continue

        command, _, arg = line.partition(" ")
        if command in ("quit", "exit"):
            return 0
        if command == "help":
            write(_HELP)
        elif command == "board":
            write(render_board(session))
        elif command == "fen":
            write(session.fen())
        elif command == "pgn":
            write(session.pgn() or "(no moves)")
        elif command == "moves":
            legal = session.moves(arg.strip() or None, verbose=True)
            write(" ".join(str(m) for m in legal) or "(none)")
        elif command == "undo":
            if controller.undo_move():
                write(render_board(controller.session))
            else:
                write("Nothing to undo")
        elif command == "hint":
            hint = controller.request_hint()
            write(f"Hint: {hint}" if hint else "No hint available")
        elif controller.submit_move(line) is None:
            write(f"Illegal move: {line}")
        else:
            write(render_board(controller.session))


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play chess against a minimax engine")
    parser.add_argument(
        "--difficulty", type=int, default=3, help="Engine level 1-6 (default: 3)"
    )
    parser.add_argument(
        "--ai-color",
        choices=("white", "black", "none"),
        default="black",
        help="Side played by the engine, or 'none' for two humans",
    )
    parser.add_argument(
        "--variant",
        choices=("minimal", "promotion"),
        default="minimal",
        help="Rule set: 'promotion' lets pawns promote",
    )
    parser.add_argument("--fen", type=str, default=None, help="Start from this FEN")
    parser.add_argument(
        "--delay-ms",
        type=int,
        default=AppSettings.ai_move_delay_ms,
        help="Pause before each engine move (default: %(default)s)",
    )
    parser.add_argument("--log-level", type=str, default="WARNING")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Launch the terminal game."""
    args = _parse_args(argv)
    try:
        settings = AppSettings(
            difficulty=args.difficulty,
            ai_color=None if args.ai_color == "none" else args.ai_color,
            ai_move_delay_ms=args.delay_ms,
            rule_variant=args.variant,
            log_level=args.log_level,
        )
    except ValueError as exc:
        print(f"Invalid settings: {exc}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=settings.logging_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        controller = build_game(settings, args.fen, scheduler=sleep_scheduler)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    _LOGGER.info("Starting game with %s", settings)
    return run_terminal(controller)


if __name__ == "__main__":
    sys.exit(main())
