"""
Unit tests for shuffling and dealing.
"""

import random
from twentyfive.card import Suit, create_deck
from twentyfive.deck import (
    CARDS_PER_PLAYER, can_deal, deal, get_cards_by_suit, redeal, shuffle, sort_hand,
)
from tests.helpers import cards


class TestShuffle:

    def test_shuffle_keeps_every_card(self):
        deck = create_deck()
        shuffled = shuffle(list(deck), random.Random(3))
        assert sorted(map(str, shuffled)) == sorted(map(str, deck))

    def test_seeded_shuffle_repeats(self):
        a = shuffle(create_deck(), random.Random(7))
        b = shuffle(create_deck(), random.Random(7))
        assert a == b


class TestDeal:

    def test_deal_accounts_for_the_deck(self):
        result = deal(4, random.Random(1))
        assert len(result.hands) == 4
        assert all(len(hand) == CARDS_PER_PLAYER for hand in result.hands)
        everything = [c for hand in result.hands for c in hand] + [result.trump_card] + result.pack
        assert len(everything) == 52
        assert len(set(everything)) == 52
        assert result.trump_suit == result.trump_card.suit

    def test_ten_players_leave_one_card(self):
        result = deal(10, random.Random(1))
        assert len(result.pack) == 1

    def test_too_many_players(self):
        assert not can_deal(11)
        assert deal(11) is None
        assert not can_deal(0)

    def test_redeal(self):
        pack = create_deck()[:23]
        hands, remaining = redeal(pack, 4)
        assert [len(h) for h in hands] == [5, 5, 5, 5]
        assert len(remaining) == 3

    def test_redeal_exhausted(self):
        assert redeal(create_deck()[:9], 2) is None


class TestHandHelpers:

    def test_sort_hand(self):
        hand = cards("Ks 2h 3s")
        assert sort_hand(hand) == cards("2h 3s Ks")

    def test_cards_by_suit(self):
        by_suit = get_cards_by_suit(cards("Ks 2h 3s"))
        assert by_suit[Suit.SPADES] == cards("3s Ks")
        assert by_suit[Suit.HEARTS] == cards("2h")
        assert Suit.CLUBS not in by_suit
