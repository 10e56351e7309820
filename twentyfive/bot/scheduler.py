"""
Driving AI seats: immediate turns for simulations and delayed,
cancellable turns for interactive play.
"""

import logging
import random
import threading
from typing import Callable, Dict, Optional
from twentyfive.config import Difficulty
from twentyfive.game import ActionResult, GamePhase, TwentyFiveGame
from twentyfive.bot import create_bot, get_ai_delay, select_ai_card
from twentyfive.bot.base import BotInterface, context_for

logger = logging.getLogger(__name__)


def play_ai_turn(game: TwentyFiveGame, bots: Optional[Dict[int, BotInterface]] = None,
                 rng: Optional[random.Random] = None) -> Optional[ActionResult]:
    """
    Perform whatever action the acting AI seat owes: a rob decision or a card.

    Goes through the same entry points a human would use.

    Returns:
        The game's ActionResult, or None when no AI seat is due to act
    """
    seat = game.acting_player
    if seat is None or not game.players[seat].is_ai:
        return None

    player = game.players[seat]
    difficulty = player.difficulty or Difficulty.MEDIUM
    bot = (bots or {}).get(seat) or create_bot(difficulty, rng)

    if game.phase == GamePhase.ROBBING:
        if game.trump_card_is_ace or bot.should_rob(player.hand, game.trump_card):
            discard = bot.choose_rob_discard(player.hand, game.trump_card)
            return game.rob_pack(discard, seat)
        return game.decline_rob(seat)

    context = context_for(game, seat)
    if bots and seat in bots:
        card = bot.choose_card(context, context.valid_moves())
    else:
        card = select_ai_card(context, difficulty, rng)
    return game.play_card(seat, card)


class AITurnScheduler:
    """
    Runs AI turns after a thinking delay on a background timer.

    At most one timer is pending. A timer that fires after the game has
    moved on, or after ``cancel()``, does nothing.

    Every game transition made by a timer happens while holding ``game_lock``.
    Callers that also change the game from another thread (a UI applying a
    human move, say) must hold the same lock while they do so.
    """

    def __init__(self, game: TwentyFiveGame,
                 delay_fn: Callable[[Difficulty], float] = get_ai_delay,
                 on_action: Optional[Callable[[ActionResult], None]] = None,
                 game_lock: Optional[threading.RLock] = None):
        self.game = game
        self.delay_fn = delay_fn
        self.on_action = on_action
        self.game_lock = game_lock or threading.RLock()
        self._timer: Optional[threading.Timer] = None
        self._last_timer: Optional[threading.Timer] = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self._timer is not None and self._timer.is_alive()

    def schedule(self) -> bool:
        """Start a timer if an AI seat is due to act. Returns True if one was started."""
        with self.game_lock:
            seat = self.game.acting_player
            if seat is None or not self.game.players[seat].is_ai:
                return False
            if self.pending:
                return False

            self._generation += 1
            delay = self.delay_fn(self.game.players[seat].difficulty or Difficulty.MEDIUM)
            token = (self.game.hand_number, self.game.phase, seat, len(self.game.trick))
            self._timer = threading.Timer(delay, self._fire, args=(self._generation, token))
            self._timer.daemon = True
            self._last_timer = self._timer
            self._timer.start()
        return True

    def cancel(self):
        """Stop the pending timer, including one that is already waiting on the lock."""
        with self.game_lock:
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def wait(self, timeout: Optional[float] = None):
        """Block until the pending timer (if any) has run."""
        timer = self._last_timer
        if timer is not None:
            timer.join(timeout)

    def _fire(self, generation: int, token):
        with self.game_lock:
            if generation != self._generation:
                logger.debug("Cancelled AI timer ignored")
                return
            self._timer = None
            game = self.game
            current = (game.hand_number, game.phase, game.acting_player, len(game.trick))
            if current != token:
                logger.debug("Stale AI timer ignored")
                return
            result = play_ai_turn(game)
        if result is not None and self.on_action:
            self.on_action(result)
