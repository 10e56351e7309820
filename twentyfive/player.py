"""
Player module for the "25" card game.
Defines per-seat state held by the game controller.
"""

from typing import Any, Dict, List, Optional
from twentyfive.card import Card
from twentyfive.config import Difficulty


class Player:
    """Represents a seat at the table."""

    def __init__(self, player_id: int, name: str = None, team_id: int = None,
                 is_ai: bool = False, difficulty: Optional[Difficulty] = None):
        self.player_id = player_id
        self.name = name or f"Player {player_id + 1}"
        self.team_id = player_id if team_id is None else team_id
        self.is_ai = is_ai
        self.difficulty = difficulty
        self.hand: List[Card] = []

    def receive_cards(self, cards: List[Card]):
        """Replace the player's hand."""
        self.hand = list(cards)

    def play_card(self, card: Card) -> Card:
        """
        Remove and return a card from hand.

        Args:
            card: Card to play

        Returns:
            The played card

        Raises:
            ValueError: If card not in hand
        """
        if card not in self.hand:
            raise ValueError(f"Card {card} not in hand")
        self.hand.remove(card)
        return card

    def swap_card(self, discard: Card, taken: Card) -> Card:
        """Exchange a card in hand for another (robbing). Returns the discard."""
        idx = self.hand.index(discard)
        self.hand[idx] = taken
        return discard

    def has_card(self, card: Card) -> bool:
        return card in self.hand

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "name": self.name,
            "team_id": self.team_id,
            "is_ai": self.is_ai,
            "difficulty": self.difficulty.value if self.difficulty else None,
            "hand": [card.to_dict() for card in self.hand],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Player':
        difficulty = data.get("difficulty")
        player = cls(
            data["player_id"], data.get("name"), data.get("team_id"),
            bool(data.get("is_ai", False)),
            Difficulty(difficulty) if difficulty else None,
        )
        player.hand = [Card.from_dict(c) for c in data.get("hand", [])]
        return player

    def __str__(self):
        return f"{self.name} ({len(self.hand)} cards)"
