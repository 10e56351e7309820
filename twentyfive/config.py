"""
Game configuration for the "25" card game.
Player count, team scheme, rule variations and targets.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
from twentyfive.rules import (
    ALLOWED_TARGET_SCORES, DEFAULT_TARGET_SCORE, HANDS_TO_WIN_GAME,
    MAX_PLAYERS, MIN_PLAYERS, RuleOptions,
)


AI_NAMES = [
    "Seamus", "Aoife", "Padraig", "Siobhan", "Cormac",
    "Niamh", "Declan", "Roisin", "Eamon",
]


class TeamMode(Enum):
    """How players are grouped into scoring entities."""
    TWO_TEAMS = "two-teams"
    THREE_TEAMS = "three-teams"
    FREE_FOR_ALL = "ffa"


class Difficulty(Enum):
    """AI difficulty tiers."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


def default_team_mode(player_count: int) -> TeamMode:
    """Partnerships for four players, everyone for themselves otherwise."""
    return TeamMode.TWO_TEAMS if player_count == 4 else TeamMode.FREE_FOR_ALL


@dataclass
class GameConfig:
    """Settings fixed for the life of one game."""
    player_count: int = 4
    team_mode: Optional[TeamMode] = None
    rule_options: RuleOptions = field(default_factory=RuleOptions)
    target_score: int = DEFAULT_TARGET_SCORE
    hands_to_win: int = HANDS_TO_WIN_GAME
    player_names: List[str] = field(default_factory=list)
    human_players: List[int] = field(default_factory=list)
    ai_difficulty: Difficulty = Difficulty.MEDIUM

    def __post_init__(self):
        if self.team_mode is None:
            self.team_mode = default_team_mode(self.player_count)
        if not self.player_names:
            self.player_names = self._default_names()

    def _default_names(self) -> List[str]:
        names = []
        ai_idx = 0
        for seat in range(self.player_count):
            if seat in self.human_players:
                names.append(f"Player {seat + 1}")
            else:
                names.append(AI_NAMES[ai_idx] if ai_idx < len(AI_NAMES) else f"AI {ai_idx + 1}")
                ai_idx += 1
        return names

    @property
    def is_team_game(self) -> bool:
        return self.team_mode != TeamMode.FREE_FOR_ALL

    @property
    def scoring_mode(self) -> str:
        return "team" if self.is_team_game else "individual"

    def validate(self):
        """
        Check the configuration can be played.

        Raises:
            ValueError: If any setting is out of range
        """
        if not (MIN_PLAYERS <= self.player_count <= MAX_PLAYERS):
            raise ValueError(
                f"25 needs {MIN_PLAYERS}-{MAX_PLAYERS} players, got {self.player_count}"
            )
        if self.team_mode == TeamMode.TWO_TEAMS and (
                self.player_count < 4 or self.player_count % 2 != 0):
            raise ValueError("Two teams need an even number of players (at least 4)")
        if self.team_mode == TeamMode.THREE_TEAMS and (
                self.player_count < 6 or self.player_count % 3 != 0):
            raise ValueError("Three teams need a multiple of 3 players (at least 6)")
        if self.target_score not in ALLOWED_TARGET_SCORES:
            raise ValueError(f"Target score must be one of {ALLOWED_TARGET_SCORES}")
        if self.hands_to_win < 1:
            raise ValueError("Hands to win must be positive")
        if len(self.player_names) != self.player_count:
            raise ValueError("Need one name per player")
        for seat in self.human_players:
            if not (0 <= seat < self.player_count):
                raise ValueError(f"Human seat {seat} out of range")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_count": self.player_count,
            "team_mode": self.team_mode.value,
            "rule_options": self.rule_options.to_dict(),
            "target_score": self.target_score,
            "hands_to_win": self.hands_to_win,
            "player_names": list(self.player_names),
            "human_players": list(self.human_players),
            "ai_difficulty": self.ai_difficulty.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GameConfig':
        team_mode = data.get("team_mode")
        return cls(
            player_count=int(data.get("player_count", 4)),
            team_mode=TeamMode(team_mode) if team_mode else None,
            rule_options=RuleOptions.from_dict(data.get("rule_options")),
            target_score=int(data.get("target_score", DEFAULT_TARGET_SCORE)),
            hands_to_win=int(data.get("hands_to_win", HANDS_TO_WIN_GAME)),
            player_names=list(data.get("player_names") or []),
            human_players=list(data.get("human_players") or []),
            ai_difficulty=Difficulty(data.get("ai_difficulty", Difficulty.MEDIUM.value)),
        )


def load_config(filename: str) -> GameConfig:
    """Load and validate a game configuration from a JSON file."""
    with open(filename, 'r') as f:
        config = GameConfig.from_dict(json.load(f))
    config.validate()
    return config
