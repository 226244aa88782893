"""Legal and pseudo-legal move generation + attack detection."""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

from chess3d.core.board import Board
from chess3d.core.enums import Color, PieceType
from chess3d.core.move import Move
from chess3d.core.piece import Piece
from chess3d.core.types import Square, file_of, rank_of

if TYPE_CHECKING:
    from chess3d.core.position import Position

Ray = tuple[Square, ...]
RayTable = tuple[tuple[Ray, ...], ...]

_DIAGONAL: tuple[tuple[int, int], ...] = ((1, 1), (1, -1), (-1, -1), (-1, 1))
_ORTHOGONAL: tuple[tuple[int, int], ...] = ((0, 1), (1, 0), (0, -1), (-1, 0))
_KNIGHT_JUMPS: tuple[tuple[int, int], ...] = (
    (1, 2),
    (2, 1),
    (2, -1),
    (1, -2),
    (-1, -2),
    (-2, -1),
    (-2, 1),
    (-1, 2),
)

# Indexed by Color: rank delta of a pawn step, home rank, promotion rank.
_PAWN_DIRECTION = (1, -1)
_PAWN_HOME_RANK = (1, 6)
_PAWN_LAST_RANK = (7, 0)


# -- Geometry tables ----------------------------------------------------------


def _walk(sq: Square, df: int, dr: int, limit: int) -> Ray:
    """Squares from *sq* (exclusive) in direction ``(df, dr)``, up to *limit*."""
    file, rank = file_of(sq), rank_of(sq)
    path: list[Square] = []
    while len(path) < limit:
        file += df
        rank += dr
        if not (0 <= file < 8 and 0 <= rank < 8):
            break
        path.append(rank * 8 + file)
    return tuple(path)


def _rays(directions: tuple[tuple[int, int], ...]) -> RayTable:
    """Per square, one sliding ray per direction (empty rays dropped)."""
    table = []
    for sq in range(64):
        rays = (_walk(sq, df, dr, 7) for df, dr in directions)
        table.append(tuple(ray for ray in rays if ray))
    return tuple(table)


def _steps(directions: tuple[tuple[int, int], ...]) -> tuple[Ray, ...]:
    """Per square, every on-board square one step away in *directions*."""
    return tuple(
        tuple(to for df, dr in directions for to in _walk(sq, df, dr, 1))
        for sq in range(64)
    )


_KNIGHT_STEPS = _steps(_KNIGHT_JUMPS)
_KING_STEPS = _steps(_DIAGONAL + _ORTHOGONAL)
_STEPPERS: dict[PieceType, tuple[Ray, ...]] = {
    PieceType.KNIGHT: _KNIGHT_STEPS,
    PieceType.KING: _KING_STEPS,
}

_DIAGONAL_RAYS = _rays(_DIAGONAL)
_ORTHOGONAL_RAYS = _rays(_ORTHOGONAL)
_SLIDERS: dict[PieceType, RayTable] = {
    PieceType.BISHOP: _DIAGONAL_RAYS,
    PieceType.ROOK: _ORTHOGONAL_RAYS,
    PieceType.QUEEN: _rays(_DIAGONAL + _ORTHOGONAL),
}

# [color][sq] -> the two (or one) diagonal squares a pawn of that color hits.
_PAWN_HITS: RayTable = tuple(
    _steps(((-1, _PAWN_DIRECTION[color]), (1, _PAWN_DIRECTION[color])))
    for color in Color
)

# Sliding attackers checked by ray: rays, then the piece types moving along them.
_RAY_ATTACKERS: tuple[tuple[RayTable, tuple[PieceType, ...]], ...] = (
    (_DIAGONAL_RAYS, (PieceType.BISHOP, PieceType.QUEEN)),
    (_ORTHOGONAL_RAYS, (PieceType.ROOK, PieceType.QUEEN)),
)


# -- Scratch-board helpers --------------------------------------------------


def apply_to_board(board: Board, move: Move) -> tuple[Piece, Piece | None]:
    """Move the piece on *board* and return ``(moved, captured)``.

    Only placement changes; promotion and history are the caller's concern.
    """
    piece = board[move.from_sq]
    if piece is None:
        raise ValueError(f"No piece on {move.from_square}")
    captured = board[move.to_sq]
    board[move.from_sq] = None
    board[move.to_sq] = piece
    return piece, captured


def revert_on_board(
    board: Board, move: Move, piece: Piece, captured: Piece | None
) -> None:
    board[move.from_sq] = piece
    board[move.to_sq] = captured


def is_king_attacked(board: Board, color: Color) -> bool:
    """Is *color*'s king attacked on *board*?  A missing king is never attacked."""
    king_sq = board.king_square(color)
    if king_sq is None:
        return False
    return is_square_attacked(board, king_sq, color.opposite)


def _holds(board: Board, sq: Square, color: Color, piece_type: PieceType) -> bool:
    piece = board[sq]
    return piece is not None and piece.color == color and piece.piece_type == piece_type


def is_square_attacked(board: Board, sq: Square, by_color: Color) -> bool:
    """Could any piece of *by_color* capture on *sq*?

    Looks outward from *sq*: a pawn of *by_color* attacks it exactly when a
    pawn of the other color on *sq* would hit the attacker's square.
    """
    for origin in _PAWN_HITS[by_color.opposite][sq]:
        if _holds(board, origin, by_color, PieceType.PAWN):
            return True
    for piece_type, steps in _STEPPERS.items():
        if board.has_piece(by_color, piece_type) and any(
            _holds(board, origin, by_color, piece_type) for origin in steps[sq]
        ):
            return True

    for rays, attackers in _RAY_ATTACKERS:
        if not any(board.has_piece(by_color, kind) for kind in attackers):
            continue
        for ray in rays[sq]:
            for origin in ray:
                blocker = board[origin]
                if blocker is None:
                    continue
                if blocker.color == by_color and blocker.piece_type in attackers:
                    return True
                break
    return False


class MoveGenerator:
    """Generates legal moves for a given :class:`Position`.

    The live position is never touched: king safety is tested on a private
    scratch copy of the board, so there is no window in which the caller's
    board is transiently invalid.
    """

    __slots__ = ("_pos", "_board")

    def __init__(self, position: Position) -> None:
        self._pos = position
        self._board = position.board

    # -- Public API ---------------------------------------------------------

    def generate_legal_moves(self, square: Square | None = None) -> list[Move]:
        """All strictly legal moves for the side to move.

        With *square*, only moves of the side to move's piece on that
        square (empty list if the square holds no such piece).
        """
        color = self._pos.side_to_move
        candidates = self.generate_pseudo_legal_moves(color, square)
        if not candidates:
            return candidates

        scratch = self._board.copy()
        legal: list[Move] = []
        for move in candidates:
            piece, captured = apply_to_board(scratch, move)
            if not is_king_attacked(scratch, color):
                legal.append(move)
            revert_on_board(scratch, move, piece, captured)
        return legal

    def generate_pseudo_legal_moves(
        self,
        color: Color | None = None,
        square: Square | None = None,
    ) -> list[Move]:
        """Moves obeying piece movement only (may leave own king in check)."""
        if color is None:
            color = self._pos.side_to_move
        board = self._board
        if square is None:
            origins = board.all_pieces(color)
        else:
            piece = board[square]
            origins = [square] if piece is not None and piece.color == color else []

        return [
            Move(origin, target)
            for origin in origins
            for target in self._targets(origin, board[origin])
        ]

    def is_pseudo_legal(self, move: Move) -> bool:
        """Does *move* obey the movement shape of the piece on its origin?"""
        piece = self._board[move.from_sq]
        if piece is None:
            return False
        return move.to_sq in self._targets(move.from_sq, piece)

    def is_legal(self, move: Move) -> bool:
        """Pseudo-legal for the side to move and leaves its own king safe."""
        piece = self._board[move.from_sq]
        if piece is None or piece.color != self._pos.side_to_move:
            return False
        return self.is_pseudo_legal(move) and not self.leaves_king_in_check(move)

    def leaves_king_in_check(self, move: Move) -> bool:
        scratch = self._board.copy()
        piece, _ = apply_to_board(scratch, move)
        return is_king_attacked(scratch, piece.color)

    def gives_check(self, move: Move) -> bool:
        """Would *move* put the opponent's king in check?"""
        scratch = self._board.copy()
        piece, _ = apply_to_board(scratch, move)
        return is_king_attacked(scratch, piece.color.opposite)

    def is_in_check(self, color: Color) -> bool:
        return is_king_attacked(self._board, color)

    def is_square_attacked(self, sq: Square, by_color: Color) -> bool:
        return is_square_attacked(self._board, sq, by_color)

    # -- Per-piece targets --------------------------------------------------

    def _targets(self, sq: Square, piece: Piece | None) -> Iterator[Square]:
        if piece is None:
            return
        board = self._board
        kind = piece.piece_type
        if kind == PieceType.PAWN:
            yield from self._pawn_targets(sq, piece.color)
        elif kind in _STEPPERS:
            for to in _STEPPERS[kind][sq]:
                occupant = board[to]
                if occupant is None or occupant.color != piece.color:
                    yield to
        else:
            for ray in _SLIDERS[kind][sq]:
                for to in ray:
                    occupant = board[to]
                    if occupant is not None:
                        if occupant.color != piece.color:
                            yield to
                        break
                    yield to

    def _pawn_targets(self, sq: Square, color: Color) -> Iterator[Square]:
        board = self._board
        rank = rank_of(sq)
        # A pawn left on the last rank (no promotion) has no forward move.
        if rank != _PAWN_LAST_RANK[color]:
            ahead = sq + 8 * _PAWN_DIRECTION[color]
            if board.is_empty(ahead):
                yield ahead
                if rank == _PAWN_HOME_RANK[color]:
                    two_ahead = ahead + 8 * _PAWN_DIRECTION[color]
                    if board.is_empty(two_ahead):
                        yield two_ahead
        for to in _PAWN_HITS[color][sq]:
            occupant = board[to]
            if occupant is not None and occupant.color != color:
                yield to
