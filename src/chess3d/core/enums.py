"""Core enumerations for the chess domain."""

from __future__ import annotations

from enum import Enum, IntEnum


class Color(IntEnum):
    """Side color."""

    WHITE = 0
    BLACK = 1

    @property
    def opposite(self) -> Color:
        return Color(1 - self.value)

    @property
    def fen_char(self) -> str:
        """``'w'`` or ``'b'``."""
        return "w" if self == Color.WHITE else "b"

    @classmethod
    def parse(cls, value: str) -> Color:
        """Accept ``'w'``/``'b'`` as well as ``'white'``/``'black'``."""
        key = value.strip().lower()
        if key in ("w", "white"):
            return cls.WHITE
        if key in ("b", "black"):
            return cls.BLACK
        raise ValueError(f"Unknown color: {value!r}")

    def __str__(self) -> str:
        return self.name.lower()


class PieceType(IntEnum):
    """Chess piece types ordered by conventional value."""

    PAWN = 1
    KNIGHT = 2
    BISHOP = 3
    ROOK = 4
    QUEEN = 5
    KING = 6

    @property
    def letter(self) -> str:
        """Lowercase letter, e.g. ``'n'`` for a knight."""
        return _PIECE_LETTERS[self]

    @classmethod
    def from_letter(cls, letter: str) -> PieceType:
        try:
            return _LETTER_PIECES[letter.lower()]
        except KeyError:
            raise ValueError(f"Invalid piece letter: {letter!r}") from None

    def __str__(self) -> str:
        return self.name.lower()


_PIECE_LETTERS: dict[PieceType, str] = {
    PieceType.PAWN: "p",
    PieceType.KNIGHT: "n",
    PieceType.BISHOP: "b",
    PieceType.ROOK: "r",
    PieceType.QUEEN: "q",
    PieceType.KING: "k",
}
_LETTER_PIECES: dict[str, PieceType] = {v: k for k, v in _PIECE_LETTERS.items()}


class GameStatus(IntEnum):
    """Derived game state; always recomputed from the position."""

    IN_PROGRESS = 0
    CHECKMATE = 1
    STALEMATE = 2
    DRAW_INSUFFICIENT_MATERIAL = 3
    DRAW_THREEFOLD_REPETITION = 4

    @property
    def is_draw(self) -> bool:
        return self in (
            GameStatus.STALEMATE,
            GameStatus.DRAW_INSUFFICIENT_MATERIAL,
            GameStatus.DRAW_THREEFOLD_REPETITION,
        )

    @property
    def is_terminal(self) -> bool:
        return self != GameStatus.IN_PROGRESS


class RuleVariant(str, Enum):
    """Which optional rules the engine models.

    ``MINIMAL`` has no castling, no en passant and ignores the requested
    promotion piece.  ``PROMOTION`` adds pawn promotion on the last rank.
    """

    MINIMAL = "minimal"
    PROMOTION = "promotion"
