"""
Card module for the "25" card game.
Defines Card, Suit, and Rank classes and the trump hierarchy used to resolve tricks.
"""

from enum import Enum
from typing import Any, Dict, List


class Suit(Enum):
    """Card suits. The value is the display symbol."""
    HEARTS = "♥"
    DIAMONDS = "♦"
    CLUBS = "♣"
    SPADES = "♠"

    def __str__(self):
        return self.value

    @property
    def is_red(self) -> bool:
        return self in (Suit.HEARTS, Suit.DIAMONDS)

    @property
    def is_black(self) -> bool:
        return not self.is_red

    @classmethod
    def from_name(cls, name: str) -> 'Suit':
        """Look up a suit from its lower-case name ("hearts")."""
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"Unknown suit: {name}")


class Rank(Enum):
    """Card ranks by face value (Ace stored high)."""
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    def __str__(self):
        if self.value <= 10:
            return str(self.value)
        return {11: "J", 12: "Q", 13: "K", 14: "A"}[self.value]

    @classmethod
    def from_label(cls, label: str) -> 'Rank':
        """Look up a rank from its short label ("10", "J", "A")."""
        for rank in cls:
            if str(rank) == label:
                return rank
        raise ValueError(f"Unknown rank: {label}")


class Card:
    """An immutable playing card."""

    __slots__ = ("_suit", "_rank")

    def __init__(self, suit: Suit, rank: Rank):
        object.__setattr__(self, "_suit", suit)
        object.__setattr__(self, "_rank", rank)

    @property
    def suit(self) -> Suit:
        return self._suit

    @property
    def rank(self) -> Rank:
        return self._rank

    def __setattr__(self, name, value):
        raise AttributeError("Card is immutable")

    def __str__(self):
        return f"{self.rank}{self.suit}"

    def __repr__(self):
        return f"Card({self.suit.name}, {self.rank.name})"

    def __eq__(self, other):
        if not isinstance(other, Card):
            return False
        return self.suit == other.suit and self.rank == other.rank

    def __hash__(self):
        return hash((self.suit, self.rank))

    def __reduce__(self):
        return (Card, (self.suit, self.rank))

    @property
    def card_id(self) -> str:
        """Stable identifier, e.g. "hearts-5"."""
        return f"{self.suit.name.lower()}-{self.rank}"

    def to_dict(self) -> Dict[str, str]:
        return {"suit": self.suit.name.lower(), "rank": str(self.rank)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Card':
        return cls(Suit.from_name(data["suit"]), Rank.from_label(str(data["rank"])))


FIVE_OF_HEARTS = Card(Suit.HEARTS, Rank.FIVE)
ACE_OF_HEARTS = Card(Suit.HEARTS, Rank.ACE)

# Trump ranks (higher wins). Numerals occupy TRUMP_NUMERAL_BASE + 0..8.
FIVE_OF_HEARTS_RANK = 1000
TRUMP_JACK_RANK = 900
ACE_OF_HEARTS_RANK = 800
TRUMP_ACE_RANK = 700
TRUMP_KING_RANK = 600
TRUMP_QUEEN_RANK = 500
TRUMP_NUMERAL_BASE = 100

# Non-trump ranks within the led suit: K, Q, J, A, then 10 down to 2.
_NON_TRUMP_FACE_RANKS = {
    Rank.KING: 13,
    Rank.QUEEN: 12,
    Rank.JACK: 11,
    Rank.ACE: 10,
}


def is_always_trump(card: Card) -> bool:
    """The five and ace of hearts are trump whatever suit is turned."""
    return card == FIVE_OF_HEARTS or card == ACE_OF_HEARTS


def is_trump(card: Card, trump_suit: Suit) -> bool:
    """Check if a card is trump (trump suit or always-trump)."""
    return card.suit == trump_suit or is_always_trump(card)


def effective_suit(card: Card, trump_suit: Suit) -> Suit:
    """Suit a card counts as when led: trump cards count as the trump suit."""
    return trump_suit if is_trump(card, trump_suit) else card.suit


def trump_rank(card: Card, trump_suit: Suit) -> int:
    """
    Rank of a card within the trump hierarchy.

    Order (high to low): 5♥, J of trumps, A♥, A of trumps, K, Q, then the
    numerals 10 down to 2.

    Args:
        card: Card to rank
        trump_suit: Current trump suit

    Returns:
        Positive rank for trump cards, 0 for non-trump cards
    """
    if card == FIVE_OF_HEARTS:
        return FIVE_OF_HEARTS_RANK
    if card.suit == trump_suit and card.rank == Rank.JACK:
        return TRUMP_JACK_RANK
    if card == ACE_OF_HEARTS:
        return ACE_OF_HEARTS_RANK
    if card.suit != trump_suit:
        return 0

    if card.rank == Rank.ACE:
        return TRUMP_ACE_RANK
    if card.rank == Rank.KING:
        return TRUMP_KING_RANK
    if card.rank == Rank.QUEEN:
        return TRUMP_QUEEN_RANK
    return TRUMP_NUMERAL_BASE + (card.rank.value - 2)


def non_trump_rank(card: Card, led_suit: Suit) -> int:
    """
    Rank of a non-trump card following the led suit.

    Args:
        card: Card to rank
        led_suit: Suit that was led

    Returns:
        1-13 for cards of the led suit, 0 for anything else (off-suit or always-trump)
    """
    if is_always_trump(card) or card.suit != led_suit:
        return 0
    if card.rank in _NON_TRUMP_FACE_RANKS:
        return _NON_TRUMP_FACE_RANKS[card.rank]
    return card.rank.value - 1


def card_strength(card: Card, led_suit: Suit, trump_suit: Suit) -> int:
    """Single comparable value for a card in a trick context (trump beats everything else)."""
    if is_trump(card, trump_suit):
        return trump_rank(card, trump_suit)
    return non_trump_rank(card, led_suit)


def winning_index(trick: List[Card], led_suit: Suit, trump_suit: Suit) -> int:
    """
    Determine which card wins a trick.

    Args:
        trick: Cards in play order
        led_suit: Effective suit of the first card
        trump_suit: Current trump suit

    Returns:
        Index into ``trick`` of the winning card
    """
    if not trick:
        raise ValueError("No cards played")

    winner_idx = 0
    best = card_strength(trick[0], led_suit, trump_suit)
    for i, card in enumerate(trick[1:], start=1):
        strength = card_strength(card, led_suit, trump_suit)
        if strength > best:
            best = strength
            winner_idx = i
    return winner_idx


def create_deck() -> List[Card]:
    """Create a standard 52-card deck."""
    deck = []
    for suit in Suit:
        for rank in Rank:
            deck.append(Card(suit, rank))
    return deck
