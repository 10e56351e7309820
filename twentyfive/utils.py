"""
Utility module for the "25" card game.
Contains logging, formatting, and save/load helpers.
"""

import json
import logging
from collections import deque
from typing import Any, Deque, Dict, List, Optional
from twentyfive.card import Card, Suit
from twentyfive.deck import get_cards_by_suit
from twentyfive.events import EventType, GameEvent
from twentyfive.game import GamePhase, TwentyFiveGame


def setup_logging(log_file: Optional[str] = None, level: int = logging.INFO):
    """Set up logging configuration for the game."""
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.insert(0, logging.FileHandler(log_file))
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def format_hand(hand: List[Card]) -> str:
    """
    Format a hand of cards for display, grouped by suit.

    Args:
        hand: List of cards

    Returns:
        Formatted string representation
    """
    if not hand:
        return "Empty hand"

    by_suit = get_cards_by_suit(hand)
    suit_strings = []
    for suit in [Suit.SPADES, Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS]:
        if suit in by_suit:
            cards_str = ' '.join(str(card) for card in by_suit[suit])
            suit_strings.append(f"{suit}: {cards_str}")
    return ' | '.join(suit_strings)


def format_scores(game: TwentyFiveGame) -> str:
    """Format current hand scores and hands won for display."""
    lines = []
    for entity, score in game.scores.items():
        lines.append(f"{game.entity_label(entity)}: {score} points, "
                     f"{game.hands_won[entity]} hands")
    return '\n'.join(lines)


def save_game(game: TwentyFiveGame, filename: str) -> bool:
    """
    Save a game in progress to a JSON file.

    Games that have not started or have finished are not saved.

    Returns:
        True if a file was written
    """
    if game.phase in (GamePhase.SETUP, GamePhase.GAME_OVER):
        return False
    with open(filename, 'w') as f:
        json.dump(game.serialize(), f, indent=2)
    return True


def load_game(filename: str) -> Optional[TwentyFiveGame]:
    """Load a saved game. Returns None if the file holds no usable game."""
    with open(filename, 'r') as f:
        try:
            snapshot = json.load(f)
        except json.JSONDecodeError:
            logging.getLogger(__name__).warning(f"Saved game {filename} is not valid JSON")
            return None
    return TwentyFiveGame.restore(snapshot)


class GameLogger:
    """Logs game events and keeps a short history for display."""

    def __init__(self, game: Optional[TwentyFiveGame] = None, max_logs: int = 100,
                 log_file: Optional[str] = None):
        self.logger = logging.getLogger("TwentyFive")
        self.history: Deque[Dict[str, Any]] = deque(maxlen=max_logs)
        self._unsubscribe = None
        self.game: Optional[TwentyFiveGame] = None

        if log_file:
            fh = logging.FileHandler(log_file)
            fh.setLevel(logging.DEBUG)
            fh.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            ))
            self.logger.addHandler(fh)

        if game is not None:
            self.attach(game)

    def attach(self, game: TwentyFiveGame):
        """Start listening to a game's events."""
        self.detach()
        self.game = game
        self._unsubscribe = game.events.subscribe(self.log_event)

    def detach(self):
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None
            self.game = None

    def log_event(self, event: GameEvent):
        entry = {"type": event.type.value, "message": event.message}
        if event.player_index is not None:
            entry["player_index"] = event.player_index
        if event.card is not None:
            entry["card"] = str(event.card)
        if event.points is not None:
            entry["points"] = event.points
        self.history.append(entry)

        if event.type == EventType.INVALID_PLAY:
            self.logger.warning(event.message)
        elif event.type in (EventType.HAND_START, EventType.GAME_START, EventType.GAME_WON):
            self.logger.info(f"=== {event.message} ===")
            if event.type == EventType.HAND_START and self.game is not None:
                self.log_hands(self.game)
        else:
            self.logger.info(event.message)

    def log_hands(self, game: TwentyFiveGame):
        """Debug dump of every hand."""
        for player in game.players:
            self.logger.debug(f"{player.name} hand: {format_hand(player.hand)}")

    def recent(self, count: int = 10) -> List[Dict[str, Any]]:
        return list(self.history)[-count:]

    def clear(self):
        self.history.clear()
