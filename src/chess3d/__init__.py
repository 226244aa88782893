"""chess3d: chess rules, game session and minimax engine."""

__version__ = "0.1.0"
