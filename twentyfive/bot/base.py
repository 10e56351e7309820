"""
Shared bot plumbing for the "25" card game.
The decision context an AI sees and the interface every bot implements.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from twentyfive.card import (
    Card, Suit, card_strength, effective_suit, is_trump, non_trump_rank,
    trump_rank, winning_index,
)
from twentyfive.rules import RuleOptions, get_valid_moves
from twentyfive.scoring import ScoreBoard


@dataclass
class AIGameContext:
    """Everything one seat may legitimately know when choosing a card."""
    hand: List[Card]
    trick: List[Tuple[int, Card]]
    trump_suit: Suit
    current_player: int
    leader: int
    num_players: int
    score_board: ScoreBoard
    rule_options: RuleOptions = field(default_factory=RuleOptions)

    @property
    def trick_cards(self) -> List[Card]:
        return [card for _, card in self.trick]

    @property
    def is_leading(self) -> bool:
        return not self.trick

    @property
    def led_suit(self) -> Optional[Suit]:
        if not self.trick:
            return None
        return effective_suit(self.trick[0][1], self.trump_suit)

    @property
    def is_team_mode(self) -> bool:
        return self.score_board.mode == "team"

    def valid_moves(self) -> List[Card]:
        return get_valid_moves(self.hand, self.trick_cards, self.trump_suit, self.rule_options)

    def winning_seat(self) -> Optional[int]:
        """Seat currently winning the trick."""
        if not self.trick:
            return None
        return self.trick[winning_index(self.trick_cards, self.led_suit, self.trump_suit)][0]

    def winning_card(self) -> Optional[Card]:
        if not self.trick:
            return None
        return self.trick_cards[winning_index(self.trick_cards, self.led_suit, self.trump_suit)]

    def teammate_winning(self) -> bool:
        return self.is_team_mode and self.winning_seat() in self.score_board.teammates(self.current_player)

    def is_behind(self) -> bool:
        return self.score_board.is_behind(self.current_player)

    def strength(self, card: Card) -> int:
        """Trick value of a card in this context (led suit of the card itself when leading)."""
        led = self.led_suit or card.suit
        return card_strength(card, led, self.trump_suit)

    def would_beat_trick(self, card: Card) -> bool:
        """Check if playing ``card`` now would take the lead in the trick."""
        current = self.winning_card()
        if current is None:
            return True
        return self.strength(card) > self.strength(current)


def context_for(game, player_index: int) -> AIGameContext:
    """
    Build the decision context for one seat from a running game.

    Only the seat's own hand is copied; other hands stay hidden.
    """
    return AIGameContext(
        hand=list(game.players[player_index].hand),
        trick=[(entry.player_index, entry.card) for entry in game.trick],
        trump_suit=game.trump_suit,
        current_player=player_index,
        leader=game.leader,
        num_players=game.num_players,
        score_board=game.score_board,
        rule_options=game.config.rule_options,
    )


def weakest_card(cards: List[Card], trump_suit: Suit) -> Card:
    """Lowest non-trump card (by rank within its own suit), else the lowest trump."""
    non_trumps = [c for c in cards if not is_trump(c, trump_suit)]
    if non_trumps:
        return min(non_trumps, key=lambda c: non_trump_rank(c, c.suit))
    return min(cards, key=lambda c: trump_rank(c, trump_suit))


class BotInterface(ABC):
    """Abstract interface that all bots must implement."""

    name = "Bot"

    @abstractmethod
    def choose_card(self, context: AIGameContext, valid_plays: List[Card]) -> Card:
        """
        Choose which card to play.

        Args:
            context: What this seat can see
            valid_plays: Cards that can legally be played (never empty)

        Returns:
            Card to play
        """

    def should_rob(self, hand: List[Card], trump_card: Card) -> bool:
        """Robbing is always worth it: the turned-up card replaces the weakest card."""
        return True

    def choose_rob_discard(self, hand: List[Card], trump_card: Card) -> Card:
        """Pick the card given up when robbing."""
        return weakest_card(hand, trump_card.suit)
