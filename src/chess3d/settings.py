"""Application settings."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields, replace
from typing import Any

from chess3d.core.enums import Color, RuleVariant
from chess3d.engine.search import MAX_DIFFICULTY, MIN_DIFFICULTY

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class AppSettings:
    """All user-configurable settings."""

    # Engine
    difficulty: int = 3
    ai_color: str | None = "black"  # None → human vs human

    # Presentation timing
    ai_move_delay_ms: int = 1000
    hint_highlight_ms: int = 3000

    # Rules
    rule_variant: str = RuleVariant.MINIMAL.value

    # Diagnostics
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if not (MIN_DIFFICULTY <= self.difficulty <= MAX_DIFFICULTY):
            raise ValueError(
                f"difficulty must be {MIN_DIFFICULTY}-{MAX_DIFFICULTY}, "
                f"got {self.difficulty}"
            )
        if self.ai_color is not None:
            Color.parse(self.ai_color)
        RuleVariant(self.rule_variant)
        if self.ai_move_delay_ms < 0 or self.hint_highlight_ms < 0:
            raise ValueError("Delays must be non-negative")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level!r}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> AppSettings:
        """Build settings from a plain dict; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def with_overrides(self, **changes: Any) -> AppSettings:
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    # ── Derived values ───────────────────────────────────────────────────

    @property
    def ai_side(self) -> Color | None:
        return None if self.ai_color is None else Color.parse(self.ai_color)

    @property
    def variant(self) -> RuleVariant:
        return RuleVariant(self.rule_variant)

    @property
    def logging_level(self) -> int:
        return logging.getLevelNamesMapping()[self.log_level.upper()]
