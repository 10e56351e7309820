"""
Self-play runner for "25" bots.
Plays complete AI-only games and measures how the difficulty tiers fare.
"""

import json
import logging
import os
import random
import time
from datetime import datetime
from typing import Any, Dict, List, Optional
import numpy as np
from twentyfive.config import Difficulty, GameConfig, TeamMode
from twentyfive.game import GamePhase, GameStateError, TwentyFiveGame
from twentyfive.bot import create_bot
from twentyfive.bot.base import BotInterface
from twentyfive.bot.scheduler import play_ai_turn

logger = logging.getLogger(__name__)

# Far beyond any real game; hitting it means the game stopped advancing
MAX_STEPS = 20000


def play_game(game: TwentyFiveGame, bots: Optional[Dict[int, BotInterface]] = None,
              rng: Optional[random.Random] = None) -> int:
    """
    Drive a game of AI seats to the end.

    Returns:
        The winning entity

    Raises:
        GameStateError: If an AI action is rejected or the game stalls
    """
    if game.phase == GamePhase.SETUP:
        game.initialize()
    if game.phase == GamePhase.DEALING:
        game.deal_new_hand()

    for _ in range(MAX_STEPS):
        if game.phase == GamePhase.GAME_OVER:
            return game.game_winner
        if game.phase == GamePhase.TRICK_COMPLETE:
            game.complete_trick()
        elif game.phase == GamePhase.HAND_COMPLETE:
            game.complete_hand()
        else:
            result = play_ai_turn(game, bots, rng)
            if result is None:
                raise GameStateError(f"No AI seat can act in phase {game.phase.value}")
            if not result.ok:
                raise GameStateError(f"AI action rejected: {result.reason}")
    raise GameStateError("Game did not finish")


class SelfPlayTrainer:
    """Runs bot-only games and collects results."""

    def __init__(self, seed: Optional[int] = None, results_dir: str = "data/logs"):
        self.rng = random.Random(seed)
        self.results_dir = results_dir
        self.results: List[Dict[str, Any]] = []

    def run_single_game(self, difficulties: List[Difficulty],
                        team_mode: Optional[TeamMode] = None,
                        target_score: int = 25) -> Dict[str, Any]:
        """Play one game with one bot per seat, at the given difficulties."""
        config = GameConfig(
            player_count=len(difficulties),
            team_mode=team_mode,
            target_score=target_score,
            human_players=[],
        )
        game = TwentyFiveGame(config, random.Random(self.rng.random()))
        bots = {seat: create_bot(difficulty, self.rng)
                for seat, difficulty in enumerate(difficulties)}

        start_time = time.time()
        winner = play_game(game, bots, self.rng)
        result = {
            'timestamp': datetime.now().isoformat(),
            'difficulties': [d.value for d in difficulties],
            'scoring_mode': config.scoring_mode,
            'winner': winner,
            'winner_seats': [seat for seat in range(config.player_count)
                             if game.score_board.entity_for(seat) == winner],
            'hands_won': {str(entity): hands for entity, hands in game.hands_won.items()},
            'hands_played': game.hand_number,
            'duration_seconds': time.time() - start_time,
        }
        self.results.append(result)
        return result

    def evaluate(self, difficulty: Difficulty, opponent: Difficulty,
                 num_games: int = 100, player_count: int = 4,
                 save: bool = False) -> Dict[str, Any]:
        """
        Measure one difficulty against a field of another.

        The evaluated bot sits in a different seat each game.

        Returns:
            Summary with win rate and hand statistics
        """
        logger.info(f"Evaluating {difficulty.value} against {opponent.value} "
                    f"over {num_games} games")

        wins = np.zeros(num_games, dtype=int)
        hands_played = np.zeros(num_games, dtype=int)
        winner_seats: List[int] = []

        for game_num in range(num_games):
            seat = game_num % player_count
            difficulties = [opponent] * player_count
            difficulties[seat] = difficulty
            result = self.run_single_game(difficulties)

            wins[game_num] = int(seat in result['winner_seats'])
            hands_played[game_num] = result['hands_played']
            winner_seats.extend(result['winner_seats'])

            if (game_num + 1) % 50 == 0:
                logger.info(f"Progress: {game_num + 1}/{num_games}, "
                            f"win rate: {wins[:game_num + 1].mean():.3f}")

        evaluation = {
            'difficulty': difficulty.value,
            'opponent': opponent.value,
            'player_count': player_count,
            'num_games': num_games,
            'wins': int(wins.sum()),
            'win_rate': float(wins.mean()) if num_games else 0.0,
            'mean_hands_per_game': float(hands_played.mean()) if num_games else 0.0,
            'seat_wins': np.bincount(np.array(winner_seats, dtype=int),
                                     minlength=player_count).tolist(),
            'timestamp': datetime.now().isoformat(),
        }

        if save:
            filename = f"evaluation_{difficulty.value}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"
            self.save_results(evaluation, os.path.join(self.results_dir, filename))

        logger.info(f"Evaluation complete: {difficulty.value} win rate = {evaluation['win_rate']:.3f}")
        return evaluation

    @staticmethod
    def save_results(data: Dict[str, Any], filename: str):
        directory = os.path.dirname(filename)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(filename, 'w') as f:
            json.dump(data, f, indent=2)
