"""
Heuristic bot implementations for the "25" card game.
Rule-based play for the medium and hard tiers.
"""

from typing import Dict, List
from twentyfive.card import Card, Suit, is_trump, non_trump_rank, trump_rank
from twentyfive.rules import is_top_three_trump
from twentyfive.bot.base import AIGameContext, BotInterface


class HeuristicBot(BotInterface):
    """Medium tier: lead trumps when long in them, save cards for partners, win cheaply."""

    def __init__(self, name: str = "HeuristicBot"):
        self.name = name

    def choose_card(self, context: AIGameContext, valid_plays: List[Card]) -> Card:
        """Strategic card selection."""
        if not valid_plays:
            raise ValueError("No valid plays available")

        if len(valid_plays) == 1:
            return valid_plays[0]

        if context.is_leading:
            return self._choose_lead_card(context, valid_plays)
        return self._choose_follow_card(context, valid_plays)

    def _choose_lead_card(self, context: AIGameContext, valid_plays: List[Card]) -> Card:
        """Choose card when leading the trick."""
        trump_suit = context.trump_suit
        trumps_in_hand = [c for c in context.hand if is_trump(c, trump_suit)]
        trump_plays = [c for c in valid_plays if is_trump(c, trump_suit)]

        # Two or more trumps: draw trumps with the best one
        if len(trumps_in_hand) >= 2 and trump_plays:
            return max(trump_plays, key=lambda c: trump_rank(c, trump_suit))

        # Otherwise open the longest plain suit from the bottom
        by_suit: Dict[Suit, List[Card]] = {}
        for card in valid_plays:
            if not is_trump(card, trump_suit):
                by_suit.setdefault(card.suit, []).append(card)
        if by_suit:
            longest = max(by_suit.values(), key=len)
            return min(longest, key=lambda c: non_trump_rank(c, c.suit))

        return min(trump_plays, key=lambda c: trump_rank(c, trump_suit))

    def _choose_follow_card(self, context: AIGameContext, valid_plays: List[Card]) -> Card:
        """Choose card when following in a trick."""
        if context.teammate_winning():
            return self._cheapest(context, valid_plays)

        winners = [c for c in valid_plays if context.would_beat_trick(c)]
        if winners:
            return self._cheapest(context, winners)
        return self._cheapest(context, valid_plays)

    @staticmethod
    def _cheapest(context: AIGameContext, cards: List[Card]) -> Card:
        return min(cards, key=lambda c: (context.strength(c), c.rank.value))


class AdvancedHeuristicBot(HeuristicBot):
    """Hard tier: press with the biggest trump when behind, hoard top trumps otherwise."""

    def __init__(self, name: str = "AdvancedHeuristicBot"):
        super().__init__(name)

    def choose_card(self, context: AIGameContext, valid_plays: List[Card]) -> Card:
        if not valid_plays:
            raise ValueError("No valid plays available")

        medium_choice = super().choose_card(context, valid_plays)
        if len(valid_plays) == 1 or context.is_leading:
            return medium_choice

        trump_suit = context.trump_suit
        if context.is_behind():
            trump_winners = [c for c in valid_plays
                             if is_trump(c, trump_suit) and context.would_beat_trick(c)]
            if trump_winners:
                return max(trump_winners, key=lambda c: trump_rank(c, trump_suit))
            return medium_choice

        if is_top_three_trump(medium_choice, trump_suit):
            others = [c for c in valid_plays if not is_top_three_trump(c, trump_suit)]
            if others:
                return super().choose_card(context, others)
        return medium_choice
