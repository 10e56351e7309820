"""
Game events for the "25" card game.
Semantic notifications for log, audio and UI collaborators.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional
from twentyfive.card import Card

logger = logging.getLogger(__name__)


class EventType(Enum):
    GAME_START = "game_start"
    HAND_START = "hand_start"
    TRUMP_REVEALED = "trump_revealed"
    ROB_OFFERED = "rob_offered"
    ROB_ACCEPTED = "rob_accepted"
    ROB_DECLINED = "rob_declined"
    CARD_PLAYED = "card_played"
    TRICK_WON = "trick_won"
    REDEAL = "redeal"
    HAND_WON = "hand_won"
    GAME_WON = "game_won"
    INVALID_PLAY = "invalid_play"


@dataclass
class GameEvent:
    """A single thing that happened at the table."""
    type: EventType
    message: str
    player_index: Optional[int] = None
    card: Optional[Card] = None
    points: Optional[int] = None
    entity: Optional[int] = None


Listener = Callable[[GameEvent], None]


class EventBus:
    """Fire-and-forget fan-out of game events."""

    def __init__(self):
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, event: GameEvent):
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # Listeners never get a say in game state
                logger.exception("Event listener failed on %s", event.type.value)
