"""Chess engine package: minimax search, evaluation and Qt worker bridge.

The Qt bridge is imported lazily so the search can be used without PyQt6
being importable (e.g. from the terminal entry point)::

    from chess3d.engine.qt_bridge import EngineWorker
"""

from chess3d.engine.evaluation import MATE_SCORE, PIECE_VALUES, Evaluator
from chess3d.engine.minimax import MinimaxEngine
from chess3d.engine.search import (
    DIFFICULTY_DEPTHS,
    IEngine,
    PositionAnalysis,
    SearchResult,
    depth_for_difficulty,
)

__all__ = [
    "DIFFICULTY_DEPTHS",
    "Evaluator",
    "IEngine",
    "MATE_SCORE",
    "MinimaxEngine",
    "PIECE_VALUES",
    "PositionAnalysis",
    "SearchResult",
    "depth_for_difficulty",
]
