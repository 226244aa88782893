"""Move and MoveResult value objects."""

from __future__ import annotations

from dataclasses import dataclass

from chess3d.core.enums import Color, PieceType
from chess3d.core.types import Square, parse_square, square_name

_PROMO_CHARS: dict[PieceType, str] = {
    PieceType.KNIGHT: "n",
    PieceType.BISHOP: "b",
    PieceType.ROOK: "r",
    PieceType.QUEEN: "q",
}


@dataclass(frozen=True, slots=True)
class Move:
    """Immutable value object representing a single chess move.

    ``promotion`` is only honoured under :attr:`RuleVariant.PROMOTION`;
    the minimal rules accept and ignore it.
    """

    from_sq: Square
    to_sq: Square
    promotion: PieceType | None = None

    # ── Display ──────────────────────────────────────────────────────────

    def __str__(self) -> str:
        base = f"{square_name(self.from_sq)}{square_name(self.to_sq)}"
        if self.promotion is not None:
            base += _PROMO_CHARS.get(self.promotion, "")
        return base

    @property
    def uci(self) -> str:
        """UCI long-algebraic notation."""
        return str(self)

    @property
    def from_square(self) -> str:
        return square_name(self.from_sq)

    @property
    def to_square(self) -> str:
        return square_name(self.to_sq)

    def same_squares(self, other: Move) -> bool:
        """Whether both moves share origin and destination."""
        return self.from_sq == other.from_sq and self.to_sq == other.to_sq

    @classmethod
    def from_uci(cls, text: str) -> Move:
        """Parse ``"e2e4"`` / ``"e7e8q"``; raises ValueError if malformed."""
        if len(text) not in (4, 5):
            raise ValueError(f"Invalid UCI move: {text!r}")
        promotion = PieceType.from_letter(text[4]) if len(text) == 5 else None
        return cls(parse_square(text[:2]), parse_square(text[2:4]), promotion)

    def to_dict(self) -> dict[str, str]:
        data = {"from": self.from_square, "to": self.to_square}
        if self.promotion is not None:
            data["promotion"] = self.promotion.letter
        return data


@dataclass(frozen=True, slots=True)
class MoveResult:
    """One entry of the move history.

    Carries everything needed to undo the move and to describe it:
    the moved piece type and color, the captured piece type (its color is
    always the opposite of ``color``), the SAN-like notation and the FEN
    of the resulting position.
    """

    from_sq: Square
    to_sq: Square
    piece: PieceType
    color: Color
    captured: PieceType | None
    san: str
    fen: str
    promotion: PieceType | None = None

    @property
    def move(self) -> Move:
        return Move(self.from_sq, self.to_sq, self.promotion)

    @property
    def from_square(self) -> str:
        return square_name(self.from_sq)

    @property
    def to_square(self) -> str:
        return square_name(self.to_sq)

    @property
    def is_capture(self) -> bool:
        return self.captured is not None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "from": self.from_square,
            "to": self.to_square,
            "piece": self.piece.letter,
            "color": self.color.fen_char,
            "captured": self.captured.letter if self.captured else None,
            "promotion": self.promotion.letter if self.promotion else None,
            "san": self.san,
            "fen": self.fen,
        }
