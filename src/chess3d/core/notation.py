"""FEN, SAN-like and PGN-movetext helpers (the minimal subset the game needs).

FEN output never tracks castling or en passant: those fields are always
``- -`` and the halfmove clock is always ``0``.  The fullmove counter is
derived from the number of plies played.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from chess3d.core.board import Board
from chess3d.core.enums import Color, PieceType
from chess3d.core.piece import Piece
from chess3d.core.types import make_square, square_name

if TYPE_CHECKING:
    from chess3d.core.move import Move
    from chess3d.core.position import Position

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w - - 0 1"

_SAN_SUFFIX_RE = re.compile(r"[+#!?]+$")


# ── FEN ──────────────────────────────────────────────────────────────────────


def board_to_fen(board: Board, side_to_move: Color, ply_count: int) -> str:
    """Serialise placement + side to move; rank 8 is written first."""
    rows: list[str] = []
    for rank in range(7, -1, -1):
        empty = 0
        row = ""
        for file in range(8):
            piece = board[make_square(file, rank)]
            if piece is None:
                empty += 1
            else:
                if empty:
                    row += str(empty)
                    empty = 0
                row += str(piece)
        if empty:
            row += str(empty)
        rows.append(row)
    board_str = "/".join(rows)
    return f"{board_str} {side_to_move.fen_char} - - 0 {ply_count // 2 + 1}"


def position_to_fen(pos: Position) -> str:
    """Serialise a :class:`Position` to FEN."""
    return board_to_fen(pos.board, pos.side_to_move, pos.ply_count)


def parse_fen(fen: str) -> tuple[Board, Color]:
    """Parse the placement and side-to-move fields of *fen*.

    Castling, en passant and clock fields are tolerated and ignored.
    Raises ValueError on malformed input.
    """
    parts = fen.split()
    if not (1 <= len(parts) <= 6):
        raise ValueError(f"Invalid FEN (need 1-6 fields): {fen!r}")

    ranks = parts[0].split("/")
    if len(ranks) != 8:
        raise ValueError(f"Invalid FEN board (must contain 8 ranks): {fen!r}")
    board = Board()
    for rank_idx, rank_text in enumerate(ranks):
        rank = 7 - rank_idx
        file = 0
        for ch in rank_text:
            if ch.isdigit():
                step = int(ch)
                if not (1 <= step <= 8):
                    raise ValueError(f"Invalid FEN digit {ch!r}: {fen!r}")
                file += step
            else:
                if file >= 8:
                    raise ValueError(f"Invalid FEN rank width: {fen!r}")
                board[make_square(file, rank)] = Piece.from_char(ch)
                file += 1
            if file > 8:
                raise ValueError(f"Invalid FEN rank width: {fen!r}")
        if file != 8:
            raise ValueError(f"Invalid FEN rank width: {fen!r}")

    side = Color.WHITE
    if len(parts) > 1:
        if parts[1] not in ("w", "b"):
            raise ValueError(f"Invalid FEN side-to-move field: {parts[1]!r}")
        side = Color.parse(parts[1])

    return board, side


def repetition_key(fen: str) -> str:
    """The part of *fen* that identifies a position for repetition counting."""
    return " ".join(fen.split()[:4])


# ── SAN-like notation ────────────────────────────────────────────────────────


def move_to_san(
    piece: Piece,
    move: Move,
    captured: Piece | None,
    promotion: PieceType | None = None,
) -> str:
    """Short notation: piece letter (none for pawns), ``x`` on capture,
    destination square, ``=Q`` style suffix on promotion.

    Pawn captures are prefixed with the origin file, e.g. ``exd5``.  No
    disambiguation and no check markers.
    """
    san = ""
    if piece.piece_type != PieceType.PAWN:
        san += piece.piece_type.letter.upper()
    if captured is not None:
        if piece.piece_type == PieceType.PAWN:
            san += square_name(move.from_sq)[0]
        san += "x"
    san += square_name(move.to_sq)
    if promotion is not None:
        san += "=" + promotion.letter.upper()
    return san


def normalize_san(san: str) -> str:
    """Strip check/annotation suffixes so ``Qh4#`` matches ``Qh4``."""
    return _SAN_SUFFIX_RE.sub("", san.strip())


# ── PGN movetext ─────────────────────────────────────────────────────────────


def pgn_movetext(sans: list[str], result_token: str | None = None) -> str:
    """Numbered movetext, e.g. ``1. e4 e5 2. Nf3``."""
    parts: list[str] = []
    for ply, san in enumerate(sans):
        if ply % 2 == 0:
            parts.append(f"{(ply // 2) + 1}.")
        parts.append(san)
    if result_token:
        parts.append(result_token)
    return " ".join(parts)
