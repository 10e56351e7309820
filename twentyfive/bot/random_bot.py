"""
Random bot implementation for the "25" card game.
The easy tier: any legal card, chosen uniformly.
"""

import random
from typing import List
from twentyfive.card import Card
from twentyfive.bot.base import AIGameContext, BotInterface


class RandomBot(BotInterface):
    """Bot that makes completely random legal moves."""

    def __init__(self, name: str = "RandomBot", rng: random.Random = None):
        self.name = name
        self.rng = rng or random.Random()

    def choose_card(self, context: AIGameContext, valid_plays: List[Card]) -> Card:
        if not valid_plays:
            raise ValueError("No valid plays available")
        return self.rng.choice(valid_plays)
