"""
Engine for "25", the Irish trick-taking card game.
"""

from twentyfive.card import Card, Rank, Suit
from twentyfive.config import Difficulty, GameConfig, TeamMode
from twentyfive.game import ActionResult, GamePhase, GameStateError, TwentyFiveGame

__version__ = "0.1.0"

__all__ = [
    "ActionResult", "Card", "Difficulty", "GameConfig", "GamePhase",
    "GameStateError", "Rank", "Suit", "TeamMode", "TwentyFiveGame",
]
