"""
Networked play for the "25" card game.

One host owns the authoritative TwentyFiveGame. It publishes a public
document (no hands) plus each seat's private hand to a DocumentStore,
drains the action queue that clients push to, and is the only
participant that resolves tricks and hands. Clients mirror the document
and derive their own legal moves locally.
"""

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
from twentyfive.card import Card, Suit
from twentyfive.deck import DealResult
from twentyfive.game import (
    NO_ROB_OFFER, NOT_YOUR_TURN, ActionResult, GamePhase, TwentyFiveGame,
)
from twentyfive.rules import NOT_IN_HAND, RuleOptions, get_valid_moves, is_legal_play

logger = logging.getLogger(__name__)

ACTION_PLAY = "play"
ACTION_ROB = "rob"
ACTION_DECLINE = "decline"

HOST_ONLY = "Only the host can resolve tricks and hands"
UNKNOWN_ACTION = "Unknown action"
ACTION_PENDING = "Waiting for the host to confirm your last move"

# Document changes and queued actions are announced with these kinds
DOCUMENT_CHANGED = "document"
ACTION_QUEUED = "action"

MAX_RESULTS = 64

StoreListener = Callable[[str, str], None]


@dataclass
class GameAction:
    """A player intent sent from a client to the host."""
    type: str
    player_index: int
    card: Optional[Card] = None
    action_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action_id": self.action_id,
            "type": self.type,
            "player_index": self.player_index,
            "card": self.card.to_dict() if self.card else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GameAction':
        card = data.get("card")
        return cls(
            type=data["type"],
            player_index=int(data["player_index"]),
            card=Card.from_dict(card) if card else None,
            action_id=data.get("action_id") or uuid.uuid4().hex,
        )


class DocumentStore(ABC):
    """Replicated storage shared by the host and every client of a room."""

    @abstractmethod
    def publish(self, room_id: str, document: Dict[str, Any],
                hands: Dict[int, List[Dict[str, str]]]):
        """Replace the room's public document and private hands, then notify subscribers."""

    @abstractmethod
    def read(self, room_id: str, seat: Optional[int] = None) -> Optional[Dict[str, Any]]:
        """
        Read the room as one seat sees it.

        Returns:
            The public document with that seat's cards under ``"hand"``,
            or None if nothing has been published
        """

    @abstractmethod
    def push_action(self, room_id: str, action: Dict[str, Any]):
        """Queue an action for the host."""

    @abstractmethod
    def pop_actions(self, room_id: str) -> List[Dict[str, Any]]:
        """Remove and return every queued action, oldest first."""

    @abstractmethod
    def subscribe(self, room_id: str, listener: StoreListener) -> Callable[[], None]:
        """
        Register ``listener(room_id, kind)`` for changes to a room.

        Returns:
            A function that removes the listener
        """


class InMemoryDocumentStore(DocumentStore):
    """Process-local store; listeners are called synchronously."""

    def __init__(self):
        self._documents: Dict[str, Dict[str, Any]] = {}
        self._hands: Dict[str, Dict[int, List[Dict[str, str]]]] = {}
        self._actions: Dict[str, List[Dict[str, Any]]] = {}
        self._listeners: Dict[str, List[StoreListener]] = {}
        self._lock = threading.RLock()

    def publish(self, room_id, document, hands):
        with self._lock:
            self._documents[room_id] = document
            self._hands[room_id] = {int(seat): list(cards) for seat, cards in hands.items()}
        self._notify(room_id, DOCUMENT_CHANGED)

    def read(self, room_id, seat=None):
        with self._lock:
            document = self._documents.get(room_id)
            if document is None:
                return None
            view = dict(document)
            if seat is not None:
                view["hand"] = list(self._hands.get(room_id, {}).get(seat, []))
            return view

    def push_action(self, room_id, action):
        with self._lock:
            self._actions.setdefault(room_id, []).append(action)
        self._notify(room_id, ACTION_QUEUED)

    def pop_actions(self, room_id):
        with self._lock:
            return self._actions.pop(room_id, [])

    def subscribe(self, room_id, listener):
        with self._lock:
            self._listeners.setdefault(room_id, []).append(listener)

        def unsubscribe():
            with self._lock:
                listeners = self._listeners.get(room_id, [])
                if listener in listeners:
                    listeners.remove(listener)
        return unsubscribe

    def _notify(self, room_id: str, kind: str):
        with self._lock:
            listeners = list(self._listeners.get(room_id, []))
        for listener in listeners:
            listener(room_id, kind)


def public_document(game: TwentyFiveGame, version: int,
                    results: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    """
    The shared view of a game: everything except cards nobody else may see.

    Hands, the undealt pack and the discard pile are replaced by counts.
    """
    snapshot = game.serialize()
    for player in snapshot["players"]:
        player["hand_count"] = len(player.pop("hand"))
    snapshot["pack_size"] = len(snapshot.pop("pack"))
    snapshot["discard_size"] = len(snapshot.pop("discard"))
    snapshot["document_version"] = version
    snapshot["results"] = dict(results)
    return snapshot


def private_hands(game: TwentyFiveGame) -> Dict[int, List[Dict[str, str]]]:
    return {player.player_id: [card.to_dict() for card in player.hand]
            for player in game.players}


class HostSession:
    """
    The authoritative participant of a room.

    Every action, the host's own included, is validated by the game
    before it is applied. Tricks and hands are resolved only here.
    """

    def __init__(self, store: DocumentStore, room_id: str, game: TwentyFiveGame,
                 seat: int = 0):
        self.store = store
        self.room_id = room_id
        self.game = game
        self.seat = seat
        self.version = 0
        self.results: Dict[str, Dict[str, Any]] = OrderedDict()
        self._lock = threading.RLock()
        self._processing = False
        self._unsubscribe = None

    def start(self):
        """Publish the current state and begin draining the action queue."""
        self._unsubscribe = self.store.subscribe(self.room_id, self._on_store_change)
        self.publish()

    def stop(self):
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def publish(self):
        with self._lock:
            self.version += 1
            document = public_document(self.game, self.version, self.results)
            hands = private_hands(self.game)
        self.store.publish(self.room_id, document, hands)

    def _on_store_change(self, room_id: str, kind: str):
        if kind == ACTION_QUEUED:
            self.process_pending_actions()

    def process_pending_actions(self) -> List[ActionResult]:
        """
        Apply every queued action in arrival order and publish once.

        Actions queued while publishing (for example by a client reacting
        to the new document) are drained in the same call.
        """
        with self._lock:
            if self._processing:
                return []
            self._processing = True
        outcomes: List[ActionResult] = []
        try:
            while True:
                queued = self.store.pop_actions(self.room_id)
                if not queued:
                    break
                with self._lock:
                    for data in queued:
                        outcomes.append(self._apply_queued(data))
                self.publish()
        finally:
            with self._lock:
                self._processing = False
        return outcomes

    def _apply_queued(self, data: Dict[str, Any]) -> ActionResult:
        try:
            action = GameAction.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Dropping malformed action in room {self.room_id}: {e}")
            return ActionResult(False, UNKNOWN_ACTION)
        result = self.apply(action)
        self._record(action.action_id, result)
        return result

    def apply(self, action: GameAction) -> ActionResult:
        """Validate and apply one action against the authoritative game."""
        game = self.game
        if action.type == ACTION_PLAY:
            if action.card is None:
                return ActionResult(False, NOT_IN_HAND)
            return game.play_card(action.player_index, action.card)
        if action.type == ACTION_ROB:
            # Remote input must never reach rob_pack's precondition check
            if game.phase != GamePhase.ROBBING or action.card is None:
                return ActionResult(False, NO_ROB_OFFER)
            return game.rob_pack(action.card, action.player_index)
        if action.type == ACTION_DECLINE:
            return game.decline_rob(action.player_index)
        logger.warning(f"Unknown action type {action.type!r} in room {self.room_id}")
        return ActionResult(False, UNKNOWN_ACTION)

    def _record(self, action_id: str, result: ActionResult):
        self.results[action_id] = {"ok": result.ok, "reason": result.reason}
        while len(self.results) > MAX_RESULTS:
            self.results.popitem(last=False)

    def submit(self, action: GameAction) -> ActionResult:
        """Apply one of the host's own actions directly and publish it."""
        with self._lock:
            result = self.apply(action)
            self._record(action.action_id, result)
        if result.ok:
            self.publish()
        return result

    def commit_trick(self) -> ActionResult:
        with self._lock:
            result = self.game.complete_trick()
        if result.ok:
            self.publish()
        return result

    def commit_hand(self, deal_result: Optional[DealResult] = None) -> ActionResult:
        with self._lock:
            result = self.game.complete_hand(deal_result)
        if result.ok:
            self.publish()
        return result


class ClientSession:
    """
    A non-host participant's mirror of a room.

    Each document arrival replaces the mirror in one step and recomputes
    the local seat's legal moves. A submitted move is applied to the
    mirror straight away and stays pending until the host's result for
    it appears in the document.
    """

    def __init__(self, store: DocumentStore, room_id: str, seat: int):
        self.store = store
        self.room_id = room_id
        self.seat = seat
        self.document: Optional[Dict[str, Any]] = None
        self.hand: List[Card] = []
        self.valid_moves: List[Card] = []
        self.pending: Optional[GameAction] = None
        self.last_result: Optional[ActionResult] = None
        self._lock = threading.Lock()
        self._unsubscribe = None

    def connect(self):
        self._unsubscribe = self.store.subscribe(self.room_id, self._on_store_change)
        self.refresh()

    def disconnect(self):
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_store_change(self, room_id: str, kind: str):
        if kind == DOCUMENT_CHANGED:
            self.refresh()

    # ------------------------------------------------------------------
    # Mirror

    @property
    def phase(self) -> Optional[GamePhase]:
        if self.document is None:
            return None
        return GamePhase(self.document["phase"])

    @property
    def trump_suit(self) -> Optional[Suit]:
        trump = self.document.get("trump_card") if self.document else None
        return Card.from_dict(trump).suit if trump else None

    @property
    def trick_cards(self) -> List[Card]:
        if self.document is None:
            return []
        return [Card.from_dict(entry["card"]) for entry in self.document.get("trick", [])]

    @property
    def is_my_turn(self) -> bool:
        return (self.phase == GamePhase.PLAYING
                and self.document.get("current_player") == self.seat)

    @property
    def is_my_rob(self) -> bool:
        return (self.phase == GamePhase.ROBBING
                and self.document.get("robber_index") == self.seat)

    def refresh(self):
        """Pull this seat's view of the room and replace the mirror."""
        view = self.store.read(self.room_id, self.seat)
        if view is not None:
            self.on_document(view)

    def on_document(self, view: Dict[str, Any]):
        hand = [Card.from_dict(c) for c in view.get("hand", [])]
        valid_moves = self._compute_valid_moves(view, hand)
        with self._lock:
            if self.document is not None and (
                    view.get("document_version", 0) < self.document.get("document_version", 0)):
                return
            pending = self.pending
            if pending is not None:
                outcome = view.get("results", {}).get(pending.action_id)
                if outcome is None:
                    # Not processed yet: keep the optimistic hand
                    if pending.type == ACTION_PLAY:
                        hand = [card for card in hand if card != pending.card]
                    valid_moves = []
                else:
                    self.last_result = ActionResult(outcome["ok"], outcome.get("reason"))
                    self.pending = None
                    if not outcome["ok"]:
                        logger.info(f"Seat {self.seat} move rejected: {outcome.get('reason')}")
            self.document = view
            self.hand = hand
            self.valid_moves = valid_moves

    def _compute_valid_moves(self, view: Dict[str, Any], hand: List[Card]) -> List[Card]:
        if view.get("phase") != GamePhase.PLAYING.value or view.get("current_player") != self.seat:
            return []
        trump = view.get("trump_card")
        if not trump:
            return []
        trick = [Card.from_dict(entry["card"]) for entry in view.get("trick", [])]
        options = RuleOptions.from_dict((view.get("config") or {}).get("rule_options"))
        return get_valid_moves(hand, trick, Card.from_dict(trump).suit, options)

    # ------------------------------------------------------------------
    # Intents

    def _push(self, action: GameAction) -> ActionResult:
        with self._lock:
            self.pending = action
            if action.type == ACTION_PLAY:
                self.hand = [card for card in self.hand if card != action.card]
            self.valid_moves = []
        self.store.push_action(self.room_id, action.to_dict())
        return ActionResult(True)

    def submit_play(self, card: Card) -> ActionResult:
        """Check the play locally, then send it to the host."""
        if self.pending is not None:
            return ActionResult(False, ACTION_PENDING)
        if not self.is_my_turn:
            return ActionResult(False, NOT_YOUR_TURN)
        options = RuleOptions.from_dict(self.document.get("config", {}).get("rule_options"))
        validation = is_legal_play(card, self.hand, self.trick_cards, self.trump_suit, options)
        if not validation.valid:
            return ActionResult(False, validation.reason)
        return self._push(GameAction(ACTION_PLAY, self.seat, card))

    def submit_rob(self, card_to_discard: Card) -> ActionResult:
        if self.pending is not None:
            return ActionResult(False, ACTION_PENDING)
        if not self.is_my_rob:
            return ActionResult(False, NO_ROB_OFFER)
        if card_to_discard not in self.hand:
            return ActionResult(False, NOT_IN_HAND)
        return self._push(GameAction(ACTION_ROB, self.seat, card_to_discard))

    def submit_decline(self) -> ActionResult:
        if self.pending is not None:
            return ActionResult(False, ACTION_PENDING)
        if not self.is_my_rob:
            return ActionResult(False, NO_ROB_OFFER)
        return self._push(GameAction(ACTION_DECLINE, self.seat))

    def commit_trick(self) -> ActionResult:
        return ActionResult(False, HOST_ONLY)

    def commit_hand(self) -> ActionResult:
        return ActionResult(False, HOST_ONLY)
