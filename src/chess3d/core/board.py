"""Board - piece placement on an 8x8 board."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterator

from chess3d.core.enums import Color, PieceType
from chess3d.core.piece import Piece
from chess3d.core.types import Square, make_square

_HOME_ROW: tuple[PieceType, ...] = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


class Board:
    """Mutable placement of pieces, cells indexed ``a1=0 … h8=63``.

    Every write also updates a per-color tally of piece types and the king
    squares, so material and king lookups never scan the cells.  The board
    knows nothing about whose turn it is or which moves are legal.
    """

    __slots__ = ("_cells", "_tally", "_kings")

    def __init__(self) -> None:
        self._cells: list[Piece | None] = [None] * 64
        self._tally: list[Counter[PieceType]] = [Counter(), Counter()]
        self._kings: list[Square | None] = [None, None]

    # -- Cells --------------------------------------------------------------

    def __getitem__(self, sq: Square) -> Piece | None:
        return self._cells[sq]

    def __setitem__(self, sq: Square, piece: Piece | None) -> None:
        previous = self._cells[sq]
        if previous == piece:
            return
        if previous is not None:
            self._tally[previous.color][previous.piece_type] -= 1
            kings = self._kings
            if previous.piece_type == PieceType.KING and kings[previous.color] == sq:
                kings[previous.color] = None
        self._cells[sq] = piece
        if piece is not None:
            self._tally[piece.color][piece.piece_type] += 1
            if piece.piece_type == PieceType.KING:
                self._kings[piece.color] = sq

    def is_empty(self, sq: Square) -> bool:
        return self._cells[sq] is None

    def occupied(self) -> Iterator[tuple[Square, Piece]]:
        """Yield ``(square, piece)`` for every occupied square, a1 first."""
        for sq, piece in enumerate(self._cells):
            if piece is not None:
                yield sq, piece

    # -- Material -----------------------------------------------------------

    def count(self, color: Color, piece_type: PieceType) -> int:
        return self._tally[color][piece_type]

    def has_piece(self, color: Color, piece_type: PieceType) -> bool:
        return self._tally[color][piece_type] > 0

    def piece_count(self) -> int:
        """Pieces of both colors, kings included."""
        return self._tally[Color.WHITE].total() + self._tally[Color.BLACK].total()

    def pieces(self, color: Color, piece_type: PieceType) -> list[Square]:
        return [
            sq
            for sq, piece in self.occupied()
            if piece.color == color and piece.piece_type == piece_type
        ]

    def all_pieces(self, color: Color) -> list[Square]:
        return [sq for sq, piece in self.occupied() if piece.color == color]

    def king_square(self, color: Color) -> Square | None:
        """Where *color*'s king stands, ``None`` once it has been captured."""
        return self._kings[color]

    # -- Whole-board operations ---------------------------------------------

    def copy(self) -> Board:
        clone = Board.__new__(Board)
        clone._cells = self._cells.copy()
        clone._tally = [tally.copy() for tally in self._tally]
        clone._kings = self._kings.copy()
        return clone

    def clear(self) -> None:
        self._cells = [None] * 64
        self._tally = [Counter(), Counter()]
        self._kings = [None, None]

    @classmethod
    def initial(cls) -> Board:
        """Standard starting position."""
        board = cls()
        for file, piece_type in enumerate(_HOME_ROW):
            board[make_square(file, 0)] = Piece(Color.WHITE, piece_type)
            board[make_square(file, 1)] = Piece(Color.WHITE, PieceType.PAWN)
            board[make_square(file, 6)] = Piece(Color.BLACK, PieceType.PAWN)
            board[make_square(file, 7)] = Piece(Color.BLACK, piece_type)
        return board

    def rows(self) -> list[list[Piece | None]]:
        """8×8 grid as the presentation layer draws it: rank 8 first."""
        return [self._cells[rank * 8 : rank * 8 + 8] for rank in range(7, -1, -1)]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._cells == other._cells

    def __repr__(self) -> str:
        lines = [
            f"{8 - i} " + " ".join(str(p) if p else "." for p in row)
            for i, row in enumerate(self.rows())
        ]
        lines.append("  a b c d e f g h")
        return "\n".join(lines)
