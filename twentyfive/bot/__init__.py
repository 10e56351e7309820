"""
AI players for the "25" card game.
"""

import random
from typing import Optional
from twentyfive.card import Card
from twentyfive.config import Difficulty
from twentyfive.bot.base import AIGameContext, BotInterface, context_for, weakest_card
from twentyfive.bot.random_bot import RandomBot
from twentyfive.bot.heuristic_bot import AdvancedHeuristicBot, HeuristicBot

# Base pause plus random spread, in seconds
_THINKING_TIME = {
    Difficulty.EASY: (1.5, 0.3),
    Difficulty.MEDIUM: (1.5, 0.4),
    Difficulty.HARD: (1.5, 0.5),
}


def create_bot(difficulty: Difficulty, rng: random.Random = None) -> BotInterface:
    """Create the bot playing at a given difficulty."""
    if difficulty == Difficulty.EASY:
        return RandomBot(rng=rng)
    if difficulty == Difficulty.MEDIUM:
        return HeuristicBot()
    if difficulty == Difficulty.HARD:
        return AdvancedHeuristicBot()
    raise ValueError(f"Unknown difficulty: {difficulty}")


def select_ai_card(context: AIGameContext, difficulty: Difficulty,
                   rng: Optional[random.Random] = None) -> Card:
    """
    Select a card for an AI seat.

    Raises:
        ValueError: If the seat has no legal move, which means the game
            asked an AI to play out of turn or with an empty hand
    """
    valid_moves = context.valid_moves()
    if not valid_moves:
        raise ValueError("AI has no valid moves")
    if len(valid_moves) == 1:
        return valid_moves[0]
    return create_bot(difficulty, rng).choose_card(context, valid_moves)


def get_ai_delay(difficulty: Difficulty, rng: Optional[random.Random] = None) -> float:
    """Advisory thinking time in seconds, for pacing only."""
    base, spread = _THINKING_TIME.get(difficulty, (1.5, 0.0))
    return base + (rng or random).random() * spread


__all__ = [
    "AIGameContext", "AdvancedHeuristicBot", "BotInterface", "HeuristicBot",
    "RandomBot", "context_for", "create_bot", "get_ai_delay", "select_ai_card",
    "weakest_card",
]
