"""
Rules module for the "25" card game.
Contains play validation, the reneging privilege and robbing eligibility.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, NamedTuple, Optional
from twentyfive.card import (
    ACE_OF_HEARTS, FIVE_OF_HEARTS, Card, Rank, Suit,
    effective_suit, is_always_trump, is_trump,
)


# Game constants
MIN_PLAYERS = 2
MAX_PLAYERS = 10
POINTS_PER_TRICK = 5
DEFAULT_TARGET_SCORE = 25
ALLOWED_TARGET_SCORES = (25, 45)
HANDS_TO_WIN_GAME = 5

# Rejection reasons
NOT_IN_HAND = "Card is not in your hand"
MUST_PLAY_TRUMP = "You must play trump when trump was led"
MUST_FOLLOW_SUIT = "You must follow the led suit or play trump"


@dataclass
class RuleOptions:
    """Toggleable rule variations."""
    allow_rob_with_five_hearts: bool = False
    allow_renege: bool = True

    def to_dict(self) -> Dict[str, bool]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'RuleOptions':
        data = data or {}
        return cls(
            allow_rob_with_five_hearts=bool(data.get("allow_rob_with_five_hearts", False)),
            allow_renege=bool(data.get("allow_renege", True)),
        )


class PlayValidation(NamedTuple):
    """Result of checking a single play."""
    valid: bool
    reason: Optional[str] = None


def is_top_three_trump(card: Card, trump_suit: Suit) -> bool:
    """5♥, the jack of trumps and A♥ carry the reneging privilege."""
    if card == FIVE_OF_HEARTS or card == ACE_OF_HEARTS:
        return True
    return card.suit == trump_suit and card.rank == Rank.JACK


def has_only_top_three_trumps(hand: List[Card], trump_suit: Suit) -> bool:
    """Check if a non-empty hand holds nothing but top-three trumps."""
    if not hand:
        return False
    return all(is_top_three_trump(card, trump_suit) for card in hand)


def can_renege(hand: List[Card], trump_suit: Suit, options: Optional[RuleOptions] = None) -> bool:
    """
    Check if a player may decline to follow suit.

    Only a hand made entirely of top-three trumps may renege.

    Args:
        hand: Player's current hand
        trump_suit: Current trump suit
        options: Rule variations

    Returns:
        True if the reneging privilege applies
    """
    options = options or RuleOptions()
    return options.allow_renege and has_only_top_three_trumps(hand, trump_suit)


def is_legal_play(card: Card, hand: List[Card], trick: List[Card], trump_suit: Suit,
                  options: Optional[RuleOptions] = None) -> PlayValidation:
    """
    Validate that a card play is legal.

    Args:
        card: Card being played
        hand: Player's current hand
        trick: Cards played so far this trick, in order
        trump_suit: Current trump suit
        options: Rule variations

    Returns:
        PlayValidation with a reason when the play is refused
    """
    options = options or RuleOptions()

    if card not in hand:
        return PlayValidation(False, NOT_IN_HAND)

    # Leading - any card is legal
    if not trick:
        return PlayValidation(True)

    led_card = trick[0]
    led_suit = effective_suit(led_card, trump_suit)

    if is_trump(led_card, trump_suit):
        holds_trump = any(is_trump(c, trump_suit) for c in hand)
        if holds_trump and not is_trump(card, trump_suit):
            if can_renege(hand, trump_suit, options):
                return PlayValidation(True)
            return PlayValidation(False, MUST_PLAY_TRUMP)
        return PlayValidation(True)

    # Non-trump lead: 5♥ and A♥ never count as following hearts
    holds_led_suit = any(c.suit == led_suit and not is_always_trump(c) for c in hand)
    if not holds_led_suit or is_trump(card, trump_suit):
        return PlayValidation(True)
    if card.suit == led_suit:
        return PlayValidation(True)
    return PlayValidation(False, MUST_FOLLOW_SUIT)


def get_valid_moves(hand: List[Card], trick: List[Card], trump_suit: Suit,
                    options: Optional[RuleOptions] = None) -> List[Card]:
    """
    Get all legal card plays for current situation.

    Args:
        hand: Player's current hand
        trick: Cards played so far this trick
        trump_suit: Current trump suit
        options: Rule variations

    Returns:
        List of cards that can legally be played
    """
    return [card for card in hand if is_legal_play(card, hand, trick, trump_suit, options).valid]


def is_trump_card_ace(trump_card: Card) -> bool:
    """A turned-up ace must be taken by the dealer."""
    return trump_card.rank == Rank.ACE


def can_rob_ace(hand: List[Card], trump_card: Card, options: Optional[RuleOptions] = None) -> bool:
    """
    Check if a player may rob the pack (take the face-up trump card).

    Args:
        hand: Player's hand
        trump_card: The turned-up trump card
        options: Rule variations

    Returns:
        True if the hand holds the ace of trumps (or 5♥ with hearts trump
        under the five-of-hearts variation)
    """
    options = options or RuleOptions()
    trump_suit = trump_card.suit

    if Card(trump_suit, Rank.ACE) in hand:
        return True
    if options.allow_rob_with_five_hearts and trump_suit == Suit.HEARTS:
        return FIVE_OF_HEARTS in hand
    return False


def find_players_who_can_rob(hands: List[List[Card]], trump_card: Card, dealer: int,
                             options: Optional[RuleOptions] = None) -> List[int]:
    """
    Find every player entitled to rob, in the order they are offered the chance.

    Args:
        hands: Hands indexed by seat
        trump_card: The turned-up trump card
        dealer: Dealer's seat
        options: Rule variations

    Returns:
        Seats starting after the dealer (dealer last), or just the dealer
        when the trump card is an ace
    """
    if is_trump_card_ace(trump_card):
        return [dealer]

    num_players = len(hands)
    eligible = []
    for offset in range(1, num_players + 1):
        seat = (dealer + offset) % num_players
        if can_rob_ace(hands[seat], trump_card, options):
            eligible.append(seat)
    return eligible
