"""
Deck module for the "25" card game.
Handles shuffling, the initial deal with trump reveal, and redeals from the pack.
"""

import random
from typing import Dict, List, NamedTuple, Optional, Tuple
from twentyfive.card import Card, Suit, create_deck


CARDS_PER_PLAYER = 5
DECK_SIZE = 52


class DealResult(NamedTuple):
    """Outcome of a deal: one hand per seat, the face-up trump card and the pack."""
    hands: List[List[Card]]
    trump_card: Card
    pack: List[Card]

    @property
    def trump_suit(self) -> Suit:
        return self.trump_card.suit


def shuffle(cards: List[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """
    Fisher-Yates shuffle, in place.

    Args:
        cards: Cards to shuffle
        rng: Random source (module-level random if omitted)

    Returns:
        The same list, shuffled
    """
    rng = rng or random
    for i in range(len(cards) - 1, 0, -1):
        j = rng.randrange(i + 1)
        cards[i], cards[j] = cards[j], cards[i]
    return cards


def can_deal(player_count: int) -> bool:
    """Check the deck holds five cards per player plus the trump card."""
    return player_count > 0 and player_count * CARDS_PER_PLAYER + 1 <= DECK_SIZE


def _deal_round_robin(cards: List[Card], player_count: int) -> List[List[Card]]:
    hands: List[List[Card]] = [[] for _ in range(player_count)]
    for i, card in enumerate(cards):
        hands[i % player_count].append(card)
    return hands


def deal(player_count: int, rng: Optional[random.Random] = None) -> Optional[DealResult]:
    """
    Deal a new hand of 25.

    Five cards go to each player round-robin from a shuffled deck, the next
    card is turned face-up for trump and the remainder forms the pack.

    Args:
        player_count: Number of players
        rng: Random source for the shuffle

    Returns:
        DealResult, or None if the deck cannot serve that many players
    """
    if not can_deal(player_count):
        return None

    deck = shuffle(create_deck(), rng)
    dealt = player_count * CARDS_PER_PLAYER
    hands = _deal_round_robin(deck[:dealt], player_count)
    return DealResult(hands=hands, trump_card=deck[dealt], pack=deck[dealt + 1:])


def redeal(pack: List[Card], player_count: int) -> Optional[Tuple[List[List[Card]], List[Card]]]:
    """
    Deal five more cards per player from the pack.

    Args:
        pack: Remaining undealt cards
        player_count: Number of players

    Returns:
        (hands, remaining_pack), or None if the pack is exhausted
    """
    needed = player_count * CARDS_PER_PLAYER
    if len(pack) < needed:
        return None
    return _deal_round_robin(pack[:needed], player_count), list(pack[needed:])


def sort_hand(hand: List[Card]) -> List[Card]:
    """Sort a hand by suit and rank for display purposes."""
    return sorted(hand, key=lambda card: (card.suit.name, card.rank.value))


def get_cards_by_suit(hand: List[Card]) -> Dict[Suit, List[Card]]:
    """
    Group cards in hand by suit.

    Args:
        hand: List of cards

    Returns:
        Dictionary mapping suits to lists of cards, sorted by rank
    """
    by_suit: Dict[Suit, List[Card]] = {}
    for card in hand:
        by_suit.setdefault(card.suit, []).append(card)

    for suit in by_suit:
        by_suit[suit] = sorted(by_suit[suit], key=lambda c: c.rank.value)

    return by_suit
