"""
Shared builders for tests: short card labels and arranged deals.
"""

from typing import List, Optional
from twentyfive.card import Card, Rank, Suit, create_deck
from twentyfive.deck import DealResult

_SUITS = {"h": Suit.HEARTS, "d": Suit.DIAMONDS, "c": Suit.CLUBS, "s": Suit.SPADES}


def card(label: str) -> Card:
    """card("5h") -> 5♥, card("10c") -> 10♣, card("Jd") -> J♦."""
    return Card(_SUITS[label[-1].lower()], Rank.from_label(label[:-1].upper()))


def cards(labels: str) -> List[Card]:
    return [card(label) for label in labels.split()]


def make_deal(hands: List[str], trump: str, pack: Optional[str] = None) -> DealResult:
    """
    Arrange a deal. Unless a pack is given, every card not dealt goes into
    the pack so the full deck stays accounted for.
    """
    dealt = [cards(hand) for hand in hands]
    trump_card = card(trump)
    if pack is None:
        used = {c for hand in dealt for c in hand} | {trump_card}
        rest = [c for c in create_deck() if c not in used]
    else:
        rest = cards(pack) if pack else []
    return DealResult(hands=dealt, trump_card=trump_card, pack=rest)
