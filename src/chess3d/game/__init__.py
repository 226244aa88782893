"""Game layer: session, players and the controller that runs a game."""

from chess3d.game.controller import GameController, GameEvents
from chess3d.game.interfaces import GamePhase, IGameController, IPlayer
from chess3d.game.player import AIPlayer, HumanPlayer
from chess3d.game.session import MATERIAL_UNITS, CapturedPiece, GameSession, MoveInput

__all__ = [
    "AIPlayer",
    "CapturedPiece",
    "GameController",
    "GameEvents",
    "GamePhase",
    "GameSession",
    "HumanPlayer",
    "IGameController",
    "IPlayer",
    "MATERIAL_UNITS",
    "MoveInput",
]
