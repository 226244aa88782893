"""Piece value object."""

from __future__ import annotations

from dataclasses import dataclass

from chess3d.core.enums import Color, PieceType


@dataclass(frozen=True, slots=True)
class Piece:
    """A colored piece. Captures and promotions replace it, never mutate it."""

    color: Color
    piece_type: PieceType

    def __str__(self) -> str:
        """FEN character: uppercase for white, lowercase for black."""
        letter = self.piece_type.letter
        return letter.upper() if self.color == Color.WHITE else letter

    @classmethod
    def from_char(cls, char: str) -> Piece:
        """``'N'`` is a white knight, ``'n'`` a black one."""
        try:
            piece_type = PieceType.from_letter(char)
        except ValueError:
            raise ValueError(f"Invalid piece character: {char!r}") from None
        return cls(Color.WHITE if char.isupper() else Color.BLACK, piece_type)

    def to_dict(self) -> dict[str, str]:
        """``{"type": "n", "color": "w"}`` as the presentation layer expects."""
        return {"type": self.piece_type.letter, "color": self.color.fen_char}
