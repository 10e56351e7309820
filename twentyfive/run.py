#!/usr/bin/env python3
"""
Main entry point for the "25" card game.
Simulate bot games, evaluate difficulty tiers, or play a seat yourself.
"""

import argparse
import logging
import random
from typing import List, Optional
from twentyfive.card import Card
from twentyfive.config import Difficulty, GameConfig, TeamMode
from twentyfive.game import GamePhase, TwentyFiveGame
from twentyfive.utils import GameLogger, format_hand, format_scores, save_game, setup_logging
from twentyfive.bot.scheduler import play_ai_turn
from twentyfive.bot.trainer import SelfPlayTrainer, play_game


def run_bot_game(config: GameConfig, seed: Optional[int] = None) -> dict:
    """Run a game with only bots."""
    game = TwentyFiveGame(config, random.Random(seed))
    GameLogger(game)
    winner = play_game(game, rng=random.Random(seed))
    return {
        'winner': game.entity_label(winner),
        'hands_won': {game.entity_label(e): n for e, n in game.hands_won.items()},
        'hands_played': game.hand_number,
    }


def _choose(prompt: str, options: List[Card]) -> Optional[Card]:
    for i, card in enumerate(options, 1):
        print(f"  {i}. {card}")
    while True:
        answer = input(prompt).strip().lower()
        if answer in ('n', 'no', ''):
            return None
        if answer.isdigit() and 1 <= int(answer) <= len(options):
            return options[int(answer) - 1]
        print("Enter a number from the list, or n")


def run_interactive_game(config: GameConfig, seed: Optional[int] = None,
                         save_file: Optional[str] = None) -> dict:
    """Run a game where seat 0 is played from the terminal."""
    game = TwentyFiveGame(config, random.Random(seed))
    GameLogger(game)
    game.initialize()
    game.deal_new_hand()
    me = 0

    try:
        while game.phase != GamePhase.GAME_OVER:
            if game.phase == GamePhase.TRICK_COMPLETE:
                game.complete_trick()
                print(format_scores(game))
            elif game.phase == GamePhase.HAND_COMPLETE:
                game.complete_hand()
            elif game.acting_player != me:
                play_ai_turn(game)
            elif game.phase == GamePhase.ROBBING:
                print(f"\nYour hand: {format_hand(game.players[me].hand)}")
                print(f"You may rob the {game.trump_card}. Discard which card?")
                card = _choose("Card to discard (n to decline): ", game.players[me].hand)
                if card is None:
                    result = game.decline_rob(me)
                else:
                    result = game.rob_pack(card, me)
                if not result.ok:
                    print(result.reason)
            else:
                print(f"\nTrump: {game.trump_suit}  Trick: "
                      f"{' '.join(str(c) for c in game.trick_cards) or '(you lead)'}")
                print(f"Your hand: {format_hand(game.players[me].hand)}")
                card = _choose("Card to play: ", game.valid_moves)
                if card is not None:
                    result = game.play_card(me, card)
                    if not result.ok:
                        print(result.reason)
    except KeyboardInterrupt:
        print("\nGame interrupted by user")
        if save_file and save_game(game, save_file):
            print(f"Game saved to {save_file}")
        return {'interrupted': True}

    return {'winner': game.entity_label(game.game_winner)}


def main():
    parser = argparse.ArgumentParser(description="Play the 25 card game")
    parser.add_argument('--players', type=int, default=4,
                        help='Number of players (2-10)')
    parser.add_argument('--teams', choices=[m.value for m in TeamMode],
                        help='Partnership mode (default: two teams for 4 players)')
    parser.add_argument('--difficulty', choices=[d.value for d in Difficulty],
                        default=Difficulty.MEDIUM.value, help='AI difficulty')
    parser.add_argument('--target', type=int, choices=[25, 45], default=25,
                        help='Points needed to win a hand')
    parser.add_argument('--games', type=int, default=1,
                        help='Number of games to simulate')
    parser.add_argument('--seed', type=int, help='Random seed')
    parser.add_argument('--human', action='store_true',
                        help='Play seat 1 yourself')
    parser.add_argument('--save', type=str, help='Save an interrupted game here')
    parser.add_argument('--evaluate', choices=[d.value for d in Difficulty],
                        help='Evaluate this difficulty against --difficulty opponents')
    parser.add_argument('--log-file', type=str, help='Write the log here too')
    parser.add_argument('--verbose', action='store_true',
                        help='Enable verbose logging')

    args = parser.parse_args()

    setup_logging(args.log_file, logging.DEBUG if args.verbose else logging.INFO)

    config = GameConfig(
        player_count=args.players,
        team_mode=TeamMode(args.teams) if args.teams else None,
        target_score=args.target,
        human_players=[0] if args.human else [],
        ai_difficulty=Difficulty(args.difficulty),
    )
    try:
        config.validate()
    except ValueError as e:
        parser.error(str(e))

    if args.evaluate:
        trainer = SelfPlayTrainer(seed=args.seed)
        evaluation = trainer.evaluate(Difficulty(args.evaluate), Difficulty(args.difficulty),
                                      num_games=args.games, player_count=args.players)
        print(f"{args.evaluate} vs {args.difficulty}: "
              f"{evaluation['win_rate']:.3f} win rate over {args.games} games")
        return

    if args.human:
        result = run_interactive_game(config, args.seed, args.save)
        if not result.get('interrupted'):
            print(f"\n{result['winner']} wins the game!")
        return

    for game_num in range(args.games):
        seed = None if args.seed is None else args.seed + game_num
        result = run_bot_game(config, seed)
        print(f"Game {game_num + 1}: {result['winner']} wins "
              f"after {result['hands_played']} hands")


if __name__ == "__main__":
    main()
