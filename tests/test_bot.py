"""
Tests for the AI players and the turn scheduler.
"""

import random
import threading
import time
import pytest
from twentyfive.card import Suit
from twentyfive.config import Difficulty, GameConfig
from twentyfive.game import GamePhase, TwentyFiveGame
from twentyfive.scoring import IndividualScore, TeamScore
from twentyfive.bot import (
    AdvancedHeuristicBot, AIGameContext, HeuristicBot, RandomBot, context_for,
    create_bot, get_ai_delay, select_ai_card, weakest_card,
)
from twentyfive.bot.scheduler import AITurnScheduler, play_ai_turn
from tests.helpers import card, cards, make_deal

CLUBS = Suit.CLUBS


def make_context(hand, trick=(), current_player=0, num_players=2, score_board=None):
    trick = [(seat, card(label)) for seat, label in trick]
    leader = trick[0][0] if trick else current_player
    return AIGameContext(
        hand=cards(hand),
        trick=trick,
        trump_suit=CLUBS,
        current_player=current_player,
        leader=leader,
        num_players=num_players,
        score_board=score_board or IndividualScore(list(range(num_players)), 25, 5),
    )


class TestContext:

    def test_winning_seat(self):
        context = make_context("Qd 3d", trick=[(1, "Kd"), (2, "2c")], current_player=0,
                               num_players=3)
        assert context.winning_seat() == 2
        assert context.winning_card() == card("2c")
        assert context.led_suit == Suit.DIAMONDS
        assert not context.would_beat_trick(card("Qd"))

    def test_valid_moves_follow_rules(self):
        context = make_context("Qd 3d 9s", trick=[(1, "Jd")])
        assert context.valid_moves() == cards("Qd 3d")

    def test_context_only_holds_own_hand(self):
        game = TwentyFiveGame(GameConfig(player_count=2, human_players=[0, 1]), random.Random(0))
        game.initialize()
        game.dealer = 1
        game.deal_new_hand(make_deal(["Kd 2d 7s 8s 9s", "Qd 3d 4s 5s 6s"], "3c"))
        context = context_for(game, 0)
        assert context.hand == game.players[0].hand
        assert context.hand is not game.players[0].hand
        assert context.trump_suit == CLUBS
        assert context.is_leading


class TestRobDecision:

    def test_always_robs(self):
        assert HeuristicBot().should_rob(cards("2d 3s"), card("7c"))

    def test_discards_lowest_card(self):
        bot = RandomBot(rng=random.Random(1))
        assert bot.choose_rob_discard(cards("Kd 2s Ac"), card("7c")) == card("2s")

    def test_weakest_falls_back_to_trump(self):
        assert weakest_card(cards("Ac 2c 5h"), CLUBS) == card("2c")


class TestRandomBot:

    def test_plays_a_valid_card(self):
        bot = RandomBot(rng=random.Random(4))
        valid = cards("Qd 3d")
        for _ in range(10):
            assert bot.choose_card(make_context("Qd 3d 9s", trick=[(1, "Jd")]), valid) in valid

    def test_no_valid_plays(self):
        with pytest.raises(ValueError):
            RandomBot().choose_card(make_context(""), [])


class TestHeuristicBot:

    def test_leads_top_trump_when_long_in_trumps(self):
        context = make_context("2c Jc Kd 3s 4s")
        assert HeuristicBot().choose_card(context, context.valid_moves()) == card("Jc")

    def test_leads_low_from_longest_plain_suit(self):
        context = make_context("2c Kd 3s 4s 9h")
        assert HeuristicBot().choose_card(context, context.valid_moves()) == card("3s")

    def test_leads_low_trump_with_nothing_else(self):
        context = make_context("2c")
        assert HeuristicBot().choose_card(context, context.valid_moves()) == card("2c")

    def test_saves_cards_when_partner_winning(self):
        board = TeamScore([0, 1, 0, 1], 25, 5)
        context = make_context("Qd 3d 9s", trick=[(1, "Kd"), (2, "2d")], current_player=3,
                               num_players=4, score_board=board)
        assert context.teammate_winning()
        assert HeuristicBot().choose_card(context, context.valid_moves()) == card("3d")

    def test_wins_as_cheaply_as_possible(self):
        context = make_context("Qd 3d 2c", trick=[(1, "Jd")])
        # Qd and 2c both win; Qd is the cheaper winner
        assert HeuristicBot().choose_card(context, context.valid_moves()) == card("Qd")

    def test_throws_lowest_when_it_cannot_win(self):
        context = make_context("Qd 3d 9s", trick=[(1, "Kd")])
        assert HeuristicBot().choose_card(context, context.valid_moves()) == card("3d")


class TestAdvancedHeuristicBot:

    def test_presses_with_biggest_trump_when_behind(self):
        board = IndividualScore([0, 1], 25, 5)
        board.add_trick(1)
        context = make_context("Jc 2c 3d", trick=[(1, "Kd")], score_board=board)
        assert HeuristicBot().choose_card(context, context.valid_moves()) == card("2c")
        assert AdvancedHeuristicBot().choose_card(context, context.valid_moves()) == card("Jc")

    def test_hoards_top_trumps_when_level(self):
        context = make_context("Jc 3d", trick=[(1, "Kd")])
        assert context.valid_moves() == cards("Jc 3d")
        assert HeuristicBot().choose_card(context, context.valid_moves()) == card("Jc")
        assert AdvancedHeuristicBot().choose_card(context, context.valid_moves()) == card("3d")

    def test_single_option(self):
        context = make_context("Jc", trick=[(1, "2c")])
        assert AdvancedHeuristicBot().choose_card(context, [card("Jc")]) == card("Jc")


class TestSelection:

    def test_create_bot(self):
        assert isinstance(create_bot(Difficulty.EASY), RandomBot)
        assert type(create_bot(Difficulty.MEDIUM)) is HeuristicBot
        assert isinstance(create_bot(Difficulty.HARD), AdvancedHeuristicBot)

    def test_select_card_is_legal(self):
        context = make_context("Qd 3d 9s", trick=[(1, "Jd")])
        for difficulty in Difficulty:
            assert select_ai_card(context, difficulty, random.Random(2)) in cards("Qd 3d")

    def test_no_moves_is_an_error(self):
        with pytest.raises(ValueError):
            select_ai_card(make_context(""), Difficulty.MEDIUM)

    @pytest.mark.parametrize("difficulty,spread", [
        (Difficulty.EASY, 0.3), (Difficulty.MEDIUM, 0.4), (Difficulty.HARD, 0.5),
    ])
    def test_thinking_time(self, difficulty, spread):
        rng = random.Random(5)
        for _ in range(20):
            delay = get_ai_delay(difficulty, rng)
            assert 1.5 <= delay <= 1.5 + spread


def ai_game(human_players=(), hands=None, trump="3c"):
    game = TwentyFiveGame(GameConfig(player_count=2, human_players=list(human_players)),
                          random.Random(0))
    game.initialize()
    game.dealer = 1
    game.deal_new_hand(make_deal(hands or ["Kd 2d 7s 8s 9s", "Qd 3d 4s 5s 6s"], trump))
    return game


class TestPlayAITurn:

    def test_plays_for_ai_seat(self):
        game = ai_game()
        result = play_ai_turn(game)
        assert result.ok
        assert len(game.trick) == 1
        assert game.current_player == 1

    def test_leaves_human_seat_alone(self):
        game = ai_game(human_players=[0])
        assert play_ai_turn(game) is None
        assert game.trick == []

    def test_nothing_to_do_between_tricks(self):
        game = ai_game()
        play_ai_turn(game)
        play_ai_turn(game)
        assert game.phase == GamePhase.TRICK_COMPLETE
        assert play_ai_turn(game) is None

    def test_robs_for_ai_seat(self):
        game = ai_game(hands=["Ac 2d 7s 8s 9s", "Qd 3d 4s 5s 6s"])
        assert game.phase == GamePhase.ROBBING
        assert play_ai_turn(game).ok
        assert game.robbed
        assert card("2d") in game.discard
        assert game.phase == GamePhase.PLAYING

    def test_takes_turned_ace(self):
        game = ai_game(trump="Ac")
        assert play_ai_turn(game).ok
        assert card("Ac") in game.players[1].hand


class TestAITurnScheduler:

    def test_fires_after_delay(self):
        game = ai_game()
        done = threading.Event()
        scheduler = AITurnScheduler(game, delay_fn=lambda d: 0.2,
                                    on_action=lambda result: done.set())
        assert scheduler.schedule()
        assert not scheduler.schedule()
        assert done.wait(2)
        scheduler.wait(2)
        assert len(game.trick) == 1

    def test_cancel(self):
        game = ai_game()
        scheduler = AITurnScheduler(game, delay_fn=lambda d: 5)
        assert scheduler.schedule()
        scheduler.cancel()
        assert not scheduler.pending
        assert game.trick == []

    def test_human_turn_not_scheduled(self):
        game = ai_game(human_players=[0])
        assert not AITurnScheduler(game).schedule()

    def test_stale_timer_does_nothing(self):
        game = ai_game(human_players=[1])
        scheduler = AITurnScheduler(game, delay_fn=lambda d: 0.3)
        assert scheduler.schedule()
        # Seat 0 moves before the timer fires
        with scheduler.game_lock:
            game.play_card(0, card("Kd"))
        scheduler.wait(2)
        assert len(game.trick) == 1

    def test_cancel_beats_a_timer_already_firing(self):
        game = ai_game()
        scheduler = AITurnScheduler(game, delay_fn=lambda d: 0.01)
        with scheduler.game_lock:
            assert scheduler.schedule()
            # The timer fires and blocks on the lock held here
            time.sleep(0.2)
            scheduler.cancel()
        scheduler.wait(2)
        assert game.trick == []
        assert game.current_player == 0

    def test_shared_lock(self):
        lock = threading.RLock()
        assert AITurnScheduler(ai_game(), game_lock=lock).game_lock is lock
