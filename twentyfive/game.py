"""
Main game module for the "25" card game.
Owns the canonical game state and is the only place it changes: dealing,
robbing, trick play, and hand/game progression.
"""

import logging
import random
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional
from twentyfive.card import Card, Suit, effective_suit
from twentyfive.config import GameConfig
from twentyfive.deck import CARDS_PER_PLAYER, DealResult, deal, redeal
from twentyfive.events import EventBus, EventType, GameEvent
from twentyfive.player import Player
from twentyfive.rules import (
    NOT_IN_HAND, find_players_who_can_rob, get_valid_moves,
    is_legal_play, is_trump_card_ace,
)
from twentyfive.scoring import ScoreBoard, trick_winner

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1

# Rejection reasons
NOT_YOUR_TURN = "Not your turn"
NOT_PLAYING = "Cards cannot be played right now"
NO_ROB_OFFER = "There is no rob on offer"
ROB_OUT_OF_TURN = "It is not your turn to rob"
MUST_TAKE_ACE = "The dealer must take a turned-up ace"
TRICK_NOT_COMPLETE = "The trick is not complete"
HAND_NOT_COMPLETE = "The hand is not complete"


class GamePhase(Enum):
    SETUP = "setup"
    DEALING = "dealing"
    ROBBING = "robbing"
    PLAYING = "playing"
    TRICK_COMPLETE = "trick_complete"
    HAND_COMPLETE = "hand_complete"
    GAME_OVER = "game_over"


class TrickCard(NamedTuple):
    player_index: int
    card: Card


class ActionResult(NamedTuple):
    """Outcome of a player intent. Rejections never change state."""
    ok: bool
    reason: Optional[str] = None


class GameStateError(RuntimeError):
    """An operation was invoked in a state the engine should never reach."""


_ACCEPTED = ActionResult(True)


class TwentyFiveGame:
    """Main game controller for 25."""

    def __init__(self, config: GameConfig = None, rng: random.Random = None):
        self.config = config or GameConfig()
        self.config.validate()
        self.rng = rng or random.Random()
        self.events = EventBus()

        self.players: List[Player] = []
        self.score_board = ScoreBoard.for_config(self.config)
        self.phase = GamePhase.SETUP

        self.dealer = 0
        self.current_player = 0
        self.leader = 0  # First player of the current trick
        self.hand_number = 0
        self.tricks_played = 0

        self.trump_card: Optional[Card] = None
        self.trump_suit: Optional[Suit] = None
        self.trick: List[TrickCard] = []
        self.pack: List[Card] = []
        self.discard: List[Card] = []

        self.robbed = False
        self.robber_index: Optional[int] = None
        self.players_who_can_rob: List[int] = []
        self.trump_card_is_ace = False

        self.last_trick_winner: Optional[int] = None
        self.hand_winner: Optional[int] = None
        self.game_winner: Optional[int] = None

    # ------------------------------------------------------------------
    # Read-only views

    @property
    def num_players(self) -> int:
        return self.config.player_count

    @property
    def scores(self) -> Dict[int, int]:
        return dict(self.score_board.scores)

    @property
    def hands_won(self) -> Dict[int, int]:
        return dict(self.score_board.hands_won)

    @property
    def led_suit(self) -> Optional[Suit]:
        if not self.trick:
            return None
        return effective_suit(self.trick[0].card, self.trump_suit)

    @property
    def trick_cards(self) -> List[Card]:
        return [entry.card for entry in self.trick]

    @property
    def acting_player(self) -> Optional[int]:
        """Seat that owes the next action, if any."""
        if self.phase == GamePhase.ROBBING:
            return self.robber_index
        if self.phase == GamePhase.PLAYING:
            return self.current_player
        return None

    @property
    def valid_moves(self) -> List[Card]:
        """Legal cards for the seat whose turn it is."""
        if self.phase != GamePhase.PLAYING:
            return []
        return self.valid_moves_for(self.current_player)

    def valid_moves_for(self, player_index: int) -> List[Card]:
        if self.phase != GamePhase.PLAYING or player_index != self.current_player:
            return []
        return get_valid_moves(
            self.players[player_index].hand, self.trick_cards,
            self.trump_suit, self.config.rule_options,
        )

    def entity_label(self, entity: int) -> str:
        if self.config.is_team_game:
            return self.score_board.entity_name(entity)
        return self.players[entity].name

    def accounted_cards(self) -> List[Card]:
        """Every card the game currently holds, wherever it sits."""
        cards = [card for player in self.players for card in player.hand]
        cards.extend(self.trick_cards)
        cards.extend(self.pack)
        cards.extend(self.discard)
        if self.trump_card is not None and not self.robbed:
            cards.append(self.trump_card)
        return cards

    # ------------------------------------------------------------------
    # Internals

    def _emit(self, event_type: EventType, message: str, **details):
        logger.debug(message)
        self.events.emit(GameEvent(event_type, message, **details))

    def _reject(self, reason: str, player_index: Optional[int] = None,
                card: Optional[Card] = None) -> ActionResult:
        name = self.players[player_index].name if player_index is not None else "Player"
        self._emit(EventType.INVALID_PLAY, f"{name}: {reason}",
                   player_index=player_index, card=card)
        return ActionResult(False, reason)

    def _require_phase(self, phase: GamePhase, operation: str):
        if self.phase != phase:
            raise GameStateError(f"{operation} requires phase {phase.value}, game is {self.phase.value}")

    def _next_seat(self, seat: int) -> int:
        return (seat + 1) % self.num_players

    def _start_play(self):
        self.robber_index = None
        self.players_who_can_rob = []
        self.current_player = self.leader
        self.phase = GamePhase.PLAYING

    def _finish_hand(self, entity: int):
        self.hand_winner = entity
        self.score_board.record_hand_win(entity)
        self.phase = GamePhase.HAND_COMPLETE
        self._emit(EventType.HAND_WON,
                   f"{self.entity_label(entity)} wins hand {self.hand_number} "
                   f"with {self.score_board.scores[entity]} points",
                   entity=entity, points=self.score_board.scores[entity])

    # ------------------------------------------------------------------
    # Transitions

    def initialize(self):
        """Seat the players, pick a random dealer and get ready to deal."""
        self._require_phase(GamePhase.SETUP, "initialize")

        self.players = []
        for seat in range(self.num_players):
            is_ai = seat not in self.config.human_players
            self.players.append(Player(
                seat, self.config.player_names[seat],
                team_id=self.score_board.entity_for(seat),
                is_ai=is_ai,
                difficulty=self.config.ai_difficulty if is_ai else None,
            ))

        self.dealer = self.rng.randrange(self.num_players)
        self.phase = GamePhase.DEALING
        self._emit(EventType.GAME_START,
                   f"New game: {', '.join(p.name for p in self.players)} "
                   f"({self.score_board.mode} scoring), {self.players[self.dealer].name} deals")

    def deal_new_hand(self, deal_result: Optional[DealResult] = None):
        """
        Deal five cards each, turn up trump and offer the rob.

        Args:
            deal_result: Pre-arranged deal (replays and tests); shuffled fresh if omitted
        """
        self._require_phase(GamePhase.DEALING, "deal_new_hand")

        if deal_result is None:
            deal_result = deal(self.num_players, self.rng)
            if deal_result is None:
                raise GameStateError(f"Cannot deal to {self.num_players} players")
        elif len(deal_result.hands) != self.num_players or any(
                len(hand) != CARDS_PER_PLAYER for hand in deal_result.hands):
            raise ValueError("Deal must give five cards to every player")

        for player, hand in zip(self.players, deal_result.hands):
            player.receive_cards(hand)

        self.hand_number += 1
        self.tricks_played = 0
        self.trump_card = deal_result.trump_card
        self.trump_suit = deal_result.trump_card.suit
        self.pack = list(deal_result.pack)
        self.discard = []
        self.trick = []
        self.robbed = False
        self.hand_winner = None
        self.last_trick_winner = None
        self.leader = self._next_seat(self.dealer)
        self.current_player = self.leader

        self._emit(EventType.HAND_START,
                   f"Hand {self.hand_number}: {self.players[self.dealer].name} deals",
                   player_index=self.dealer)
        self._emit(EventType.TRUMP_REVEALED, f"Trump card is {self.trump_card}",
                   card=self.trump_card)

        self.trump_card_is_ace = is_trump_card_ace(self.trump_card)
        self.players_who_can_rob = find_players_who_can_rob(
            [p.hand for p in self.players], self.trump_card,
            self.dealer, self.config.rule_options,
        )

        if self.players_who_can_rob:
            self.robber_index = self.players_who_can_rob[0]
            self.phase = GamePhase.ROBBING
            self._emit(EventType.ROB_OFFERED,
                       f"{self.players[self.robber_index].name} may rob the {self.trump_card}",
                       player_index=self.robber_index, card=self.trump_card)
        else:
            self._start_play()

    def rob_pack(self, card_to_discard: Card, player_index: Optional[int] = None) -> ActionResult:
        """
        Take the face-up trump card in exchange for a card from hand.

        Args:
            card_to_discard: Card leaving the robber's hand
            player_index: Seat attempting the rob (defaults to the active robber)

        Raises:
            GameStateError: If nobody is being offered the rob
        """
        if self.phase != GamePhase.ROBBING or self.robber_index is None:
            raise GameStateError("rob_pack called with no active robber")

        robber = self.robber_index
        if player_index is not None and player_index != robber:
            return self._reject(ROB_OUT_OF_TURN, player_index, card_to_discard)

        player = self.players[robber]
        if not player.has_card(card_to_discard):
            return self._reject(NOT_IN_HAND, robber, card_to_discard)

        player.swap_card(card_to_discard, self.trump_card)
        self.discard.append(card_to_discard)
        self.robbed = True
        self._emit(EventType.ROB_ACCEPTED,
                   f"{player.name} robs the {self.trump_card}",
                   player_index=robber, card=self.trump_card)
        self._start_play()
        return _ACCEPTED

    def decline_rob(self, player_index: Optional[int] = None) -> ActionResult:
        """Pass the rob to the next eligible player, or start play after the last."""
        if self.phase != GamePhase.ROBBING or self.robber_index is None:
            return ActionResult(False, NO_ROB_OFFER)

        robber = self.robber_index
        if player_index is not None and player_index != robber:
            return self._reject(ROB_OUT_OF_TURN, player_index)
        if self.trump_card_is_ace:
            return self._reject(MUST_TAKE_ACE, robber)

        self._emit(EventType.ROB_DECLINED, f"{self.players[robber].name} declines to rob",
                   player_index=robber)

        position = self.players_who_can_rob.index(robber)
        if position + 1 < len(self.players_who_can_rob):
            self.robber_index = self.players_who_can_rob[position + 1]
            self._emit(EventType.ROB_OFFERED,
                       f"{self.players[self.robber_index].name} may rob the {self.trump_card}",
                       player_index=self.robber_index, card=self.trump_card)
        else:
            self._start_play()
        return _ACCEPTED

    def play_card(self, player_index: int, card: Card) -> ActionResult:
        """
        Play a card into the current trick.

        Args:
            player_index: Seat playing
            card: Card to play

        Returns:
            ActionResult; on rejection nothing changes
        """
        if self.phase != GamePhase.PLAYING:
            return self._reject(NOT_PLAYING, player_index, card)
        if player_index != self.current_player:
            return self._reject(NOT_YOUR_TURN, player_index, card)

        player = self.players[player_index]
        validation = is_legal_play(card, player.hand, self.trick_cards,
                                   self.trump_suit, self.config.rule_options)
        if not validation.valid:
            return self._reject(validation.reason, player_index, card)

        player.play_card(card)
        self.trick.append(TrickCard(player_index, card))
        self._emit(EventType.CARD_PLAYED, f"{player.name} plays {card}",
                   player_index=player_index, card=card)

        self.current_player = self._next_seat(player_index)
        if len(self.trick) == self.num_players:
            self.phase = GamePhase.TRICK_COMPLETE
        return _ACCEPTED

    def complete_trick(self) -> ActionResult:
        """
        Resolve a full trick and decide what happens next.

        The winner's entity gets five points. The hand ends as soon as an
        entity reaches the target. Otherwise play continues, with a redeal
        from the pack once every hand is empty; when the pack is too short
        the hand goes to the highest scorer.
        """
        if self.phase != GamePhase.TRICK_COMPLETE:
            return ActionResult(False, TRICK_NOT_COMPLETE)

        cards = self.trick_cards
        winner = trick_winner(cards, self.led_suit, self.trump_suit,
                              self.leader, self.num_players)
        entity = self.score_board.add_trick(winner)

        self.discard.extend(cards)
        self.trick = []
        self.tricks_played += 1
        self.last_trick_winner = winner
        self.leader = winner
        self.current_player = winner
        self._emit(EventType.TRICK_WON, f"{self.players[winner].name} wins the trick",
                   player_index=winner, entity=entity, points=self.score_board.scores[entity])

        hand_winner = self.score_board.hand_winner()
        if hand_winner is not None:
            self._finish_hand(hand_winner)
            return _ACCEPTED

        if any(player.hand for player in self.players):
            self.phase = GamePhase.PLAYING
            return _ACCEPTED

        redealt = redeal(self.pack, self.num_players)
        if redealt is not None:
            hands, self.pack = redealt
            for player, hand in zip(self.players, hands):
                player.receive_cards(hand)
            self.phase = GamePhase.PLAYING
            self._emit(EventType.REDEAL, f"Nobody has {self.config.target_score} yet: "
                       f"five more each, {len(self.pack)} left in the pack")
            return _ACCEPTED

        # Pack exhausted: highest scorer takes the hand
        self._finish_hand(self.score_board.leader())
        return _ACCEPTED

    def complete_hand(self, deal_result: Optional[DealResult] = None) -> ActionResult:
        """End the game if someone has enough hands, otherwise pass the deal and deal again."""
        if self.phase != GamePhase.HAND_COMPLETE:
            return ActionResult(False, HAND_NOT_COMPLETE)

        game_winner = self.score_board.game_winner()
        if game_winner is not None:
            self.game_winner = game_winner
            self.phase = GamePhase.GAME_OVER
            self._emit(EventType.GAME_WON, f"{self.entity_label(game_winner)} wins the game",
                       entity=game_winner)
            return _ACCEPTED

        self.dealer = self._next_seat(self.dealer)
        self.score_board.reset_hand()
        self.phase = GamePhase.DEALING
        self.deal_new_hand(deal_result)
        return _ACCEPTED

    # ------------------------------------------------------------------
    # Persistence

    def serialize(self) -> Dict[str, Any]:
        """Plain snapshot of the whole game, suitable for JSON."""
        return {
            "version": SNAPSHOT_VERSION,
            "player_count": self.num_players,
            "scoring_mode": self.score_board.mode,
            "config": self.config.to_dict(),
            "players": [p.to_dict() for p in self.players],
            "phase": self.phase.value,
            "dealer": self.dealer,
            "current_player": self.current_player,
            "leader": self.leader,
            "hand_number": self.hand_number,
            "tricks_played": self.tricks_played,
            "trump_card": self.trump_card.to_dict() if self.trump_card else None,
            "trick": [{"player_index": t.player_index, "card": t.card.to_dict()}
                      for t in self.trick],
            "pack": [c.to_dict() for c in self.pack],
            "discard": [c.to_dict() for c in self.discard],
            "robbed": self.robbed,
            "robber_index": self.robber_index,
            "players_who_can_rob": list(self.players_who_can_rob),
            "trump_card_is_ace": self.trump_card_is_ace,
            "last_trick_winner": self.last_trick_winner,
            "hand_winner": self.hand_winner,
            "game_winner": self.game_winner,
            "score_board": self.score_board.to_dict(),
        }

    @classmethod
    def restore(cls, snapshot: Optional[Dict[str, Any]],
                rng: random.Random = None) -> Optional['TwentyFiveGame']:
        """
        Rebuild a game from ``serialize()`` output.

        Returns:
            The restored game, or None if the snapshot is unusable
        """
        required = ("player_count", "scoring_mode", "config", "players", "phase", "score_board")
        if not snapshot or any(snapshot.get(key) is None for key in required):
            logger.warning("Discarding game snapshot with missing fields")
            return None

        try:
            config = GameConfig.from_dict(snapshot["config"])
            if (config.player_count != snapshot["player_count"]
                    or config.scoring_mode != snapshot["scoring_mode"]):
                logger.warning("Discarding game snapshot with inconsistent configuration")
                return None

            game = cls(config, rng)
            game.players = [Player.from_dict(p) for p in snapshot["players"]]
            game.score_board = ScoreBoard.from_dict(snapshot["score_board"])
            game.phase = GamePhase(snapshot["phase"])
            game.dealer = snapshot.get("dealer", 0)
            game.current_player = snapshot.get("current_player", 0)
            game.leader = snapshot.get("leader", 0)
            game.hand_number = snapshot.get("hand_number", 0)
            game.tricks_played = snapshot.get("tricks_played", 0)
            trump = snapshot.get("trump_card")
            game.trump_card = Card.from_dict(trump) if trump else None
            game.trump_suit = game.trump_card.suit if game.trump_card else None
            game.trick = [TrickCard(t["player_index"], Card.from_dict(t["card"]))
                          for t in snapshot.get("trick", [])]
            game.pack = [Card.from_dict(c) for c in snapshot.get("pack", [])]
            game.discard = [Card.from_dict(c) for c in snapshot.get("discard", [])]
            game.robbed = bool(snapshot.get("robbed", False))
            game.robber_index = snapshot.get("robber_index")
            game.players_who_can_rob = list(snapshot.get("players_who_can_rob", []))
            game.trump_card_is_ace = bool(snapshot.get("trump_card_is_ace", False))
            game.last_trick_winner = snapshot.get("last_trick_winner")
            game.hand_winner = snapshot.get("hand_winner")
            game.game_winner = snapshot.get("game_winner")
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Discarding corrupt game snapshot: {e}")
            return None

        if len(game.players) != config.player_count:
            logger.warning("Discarding game snapshot with wrong number of players")
            return None
        return game
