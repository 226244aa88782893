"""Tests for FEN, SAN-like and PGN helpers."""

import pytest

from chess3d.core.board import Board
from chess3d.core.enums import Color, PieceType
from chess3d.core.move import Move
from chess3d.core.notation import (
    STARTING_FEN,
    board_to_fen,
    move_to_san,
    normalize_san,
    parse_fen,
    pgn_movetext,
    repetition_key,
)
from chess3d.core.piece import Piece
from chess3d.core.types import D5, E4, G1, parse_square


class TestFen:
    def test_starting_position(self) -> None:
        assert board_to_fen(Board.initial(), Color.WHITE, 0) == STARTING_FEN

    def test_fullmove_from_ply_count(self) -> None:
        fen = board_to_fen(Board.initial(), Color.BLACK, 3)
        assert fen.endswith(" b - - 0 2")

    def test_parse_round_trip(self) -> None:
        board, side = parse_fen(STARTING_FEN)
        assert board == Board.initial()
        assert side == Color.WHITE

    def test_placement_only(self) -> None:
        board, side = parse_fen("4k3/8/8/8/8/8/8/4K3")
        assert side == Color.WHITE
        assert board.piece_count() == 2

    def test_extra_fields_ignored(self) -> None:
        _, side = parse_fen("4k3/8/8/8/8/8/8/4K3 b KQkq e3 12 40")
        assert side == Color.BLACK

    @pytest.mark.parametrize(
        "fen",
        [
            "",
            "4k3/8/8/8/8/8/4K3 w",  # seven ranks
            "4k3/8/8/8/8/8/8/4K4 w",  # nine files
            "4k3/8/8/8/8/8/8/4K2 w",  # seven files
            "4k3/8/8/8/8/8/8/4X3 w",  # unknown piece
            "4k3/8/8/8/8/8/8/4K3 x",  # bad side
            "4k3/8/8/8/8/8/8/4K3 w - - 0 1 extra",
        ],
    )
    def test_invalid(self, fen: str) -> None:
        with pytest.raises(ValueError):
            parse_fen(fen)

    def test_repetition_key_drops_counters(self) -> None:
        assert repetition_key("8/8/8/8/8/8/8/8 w - - 0 7") == "8/8/8/8/8/8/8/8 w - -"


class TestSan:
    def test_pawn_push(self) -> None:
        pawn = Piece(Color.WHITE, PieceType.PAWN)
        assert move_to_san(pawn, Move(parse_square("e2"), E4), None) == "e4"

    def test_pawn_capture_names_file(self) -> None:
        pawn = Piece(Color.WHITE, PieceType.PAWN)
        black_pawn = Piece(Color.BLACK, PieceType.PAWN)
        assert move_to_san(pawn, Move(E4, D5), black_pawn) == "exd5"

    def test_piece_moves(self) -> None:
        knight = Piece(Color.WHITE, PieceType.KNIGHT)
        assert move_to_san(knight, Move(G1, parse_square("f3")), None) == "Nf3"
        queen = Piece(Color.BLACK, PieceType.QUEEN)
        rook = Piece(Color.WHITE, PieceType.ROOK)
        assert move_to_san(queen, Move(D5, parse_square("a2")), rook) == "Qxa2"

    def test_promotion_suffix(self) -> None:
        pawn = Piece(Color.WHITE, PieceType.PAWN)
        move = Move(parse_square("a7"), parse_square("a8"))
        assert move_to_san(pawn, move, None, PieceType.QUEEN) == "a8=Q"

    def test_normalize(self) -> None:
        assert normalize_san("Qh4#") == "Qh4"
        assert normalize_san(" Nf3+!? ") == "Nf3"


class TestPgn:
    def test_movetext(self) -> None:
        assert pgn_movetext(["e4", "e5", "Nf3"]) == "1. e4 e5 2. Nf3"

    def test_result_token(self) -> None:
        assert pgn_movetext(["f3", "e5", "g4", "Qh4"], "0-1") == (
            "1. f3 e5 2. g4 Qh4 0-1"
        )

    def test_empty(self) -> None:
        assert pgn_movetext([]) == ""


class TestMoveObjects:
    def test_uci(self) -> None:
        move = Move.from_uci("e7e8q")
        assert move.promotion == PieceType.QUEEN
        assert str(move) == "e7e8q"
        assert Move(parse_square("e2"), E4).uci == "e2e4"

    def test_bad_uci(self) -> None:
        with pytest.raises(ValueError):
            Move.from_uci("e2")
        with pytest.raises(ValueError):
            Move.from_uci("e2e4x")

    def test_to_dict(self) -> None:
        assert Move(parse_square("e2"), E4).to_dict() == {"from": "e2", "to": "e4"}
