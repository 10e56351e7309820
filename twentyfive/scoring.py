"""
Scoring module for the "25" card game.
Trick resolution, point accumulation and hand/game win detection for
team and individual play.
"""

from typing import Any, Dict, List, Optional
from twentyfive.card import Card, Suit, winning_index
from twentyfive.config import GameConfig, TeamMode
from twentyfive.rules import POINTS_PER_TRICK


def create_team_assignment(player_count: int, team_mode: TeamMode) -> List[int]:
    """
    Map each seat to a scoring entity.

    - two teams: alternating (0, 1, 0, 1, ...)
    - three teams: round-robin (0, 1, 2, 0, 1, 2, ...)
    - free-for-all: each player is their own entity
    """
    if team_mode == TeamMode.TWO_TEAMS:
        return [seat % 2 for seat in range(player_count)]
    if team_mode == TeamMode.THREE_TEAMS:
        return [seat % 3 for seat in range(player_count)]
    return list(range(player_count))


def trick_winner(trick: List[Card], led_suit: Suit, trump_suit: Suit,
                 first_player: int, num_players: int) -> int:
    """
    Get the seat that won a trick.

    Args:
        trick: Cards in play order
        led_suit: Effective suit of the first card
        trump_suit: Current trump suit
        first_player: Seat that led
        num_players: Number of players at the table

    Returns:
        Seat of the winning player
    """
    return (first_player + winning_index(trick, led_suit, trump_suit)) % num_players


class ScoreBoard:
    """
    Hand scores and hands won, keyed by scoring entity.

    Subclasses decide what an entity is (a team or a single player); all
    other logic is shared so call sites never branch on the scoring mode.
    """

    mode = ""

    def __init__(self, player_entities: List[int], target_score: int, hands_to_win: int):
        self.player_entities = list(player_entities)
        self.target_score = target_score
        self.hands_to_win = hands_to_win
        self.entities = sorted(set(self.player_entities))
        self.scores: Dict[int, int] = {e: 0 for e in self.entities}
        self.hands_won: Dict[int, int] = {e: 0 for e in self.entities}

    @staticmethod
    def for_config(config: GameConfig) -> 'ScoreBoard':
        """Pick the scoring variant once, at configuration time."""
        entities = create_team_assignment(config.player_count, config.team_mode)
        cls = TeamScore if config.is_team_game else IndividualScore
        return cls(entities, config.target_score, config.hands_to_win)

    def entity_for(self, player_index: int) -> int:
        return self.player_entities[player_index]

    def teammates(self, player_index: int) -> List[int]:
        """Other seats scoring for the same entity."""
        entity = self.entity_for(player_index)
        return [seat for seat, e in enumerate(self.player_entities)
                if e == entity and seat != player_index]

    def entity_name(self, entity: int) -> str:
        raise NotImplementedError

    def add_trick(self, winner: int, points: int = POINTS_PER_TRICK) -> int:
        """Credit a trick to the winning seat's entity. Returns the entity."""
        entity = self.entity_for(winner)
        self.scores[entity] += points
        return entity

    def hand_winner(self) -> Optional[int]:
        """First entity (in iteration order) at or above the target score."""
        for entity in self.entities:
            if self.scores[entity] >= self.target_score:
                return entity
        return None

    def leader(self) -> int:
        """Highest hand score; the first entity encountered wins exact ties."""
        best = self.entities[0]
        for entity in self.entities[1:]:
            if self.scores[entity] > self.scores[best]:
                best = entity
        return best

    def record_hand_win(self, entity: int):
        self.hands_won[entity] += 1

    def game_winner(self) -> Optional[int]:
        for entity in self.entities:
            if self.hands_won[entity] >= self.hands_to_win:
                return entity
        return None

    def reset_hand(self):
        self.scores = {e: 0 for e in self.entities}

    def is_behind(self, player_index: int) -> bool:
        """Own score strictly below the best opposing score."""
        own = self.entity_for(player_index)
        opposing = [self.scores[e] for e in self.entities if e != own]
        return bool(opposing) and self.scores[own] < max(opposing)

    def total_points(self) -> int:
        return sum(self.scores.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "player_entities": list(self.player_entities),
            "target_score": self.target_score,
            "hands_to_win": self.hands_to_win,
            "scores": {str(e): s for e, s in self.scores.items()},
            "hands_won": {str(e): h for e, h in self.hands_won.items()},
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'ScoreBoard':
        cls = TeamScore if data["mode"] == TeamScore.mode else IndividualScore
        board = cls(data["player_entities"], data["target_score"], data["hands_to_win"])
        board.scores = {int(e): s for e, s in data["scores"].items()}
        board.hands_won = {int(e): h for e, h in data["hands_won"].items()}
        return board


class TeamScore(ScoreBoard):
    """Partnership scoring: entities are team ids."""

    mode = "team"

    def entity_name(self, entity: int) -> str:
        return f"Team {entity + 1}"


class IndividualScore(ScoreBoard):
    """Every player scores alone: entities are seat indices."""

    mode = "individual"

    def entity_name(self, entity: int) -> str:
        return f"Player {entity + 1}"
