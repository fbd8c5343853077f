"""
Game Configuration - Everything that varies between matches.

A GameConfig is plain data validated by pydantic. It can be built in code,
loaded from a JSON file, or pointed to by the KINGDOM_CONFIG environment
variable. KINGDOM_SEED overrides the seed of whatever config is loaded.
"""

from __future__ import annotations
import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

CONFIG_ENV = "KINGDOM_CONFIG"
SEED_ENV = "KINGDOM_SEED"

# Recommended first game: only simple interactions.
FIRST_GAME = [
    "Cellar",
    "Market",
    "Militia",
    "Mine",
    "Moat",
    "Remodel",
    "Smithy",
    "Village",
    "Woodcutter",
    "Workshop",
]

KINGDOM_SIZE = 10
MIN_PLAYERS = 2
MAX_PLAYERS = 6


class GameConfig(BaseModel):
    """Match configuration."""
    player_names: list[str] = Field(
        default_factory=lambda: ["Player 1", "Player 2"],
        min_length=MIN_PLAYERS,
        max_length=MAX_PLAYERS,
    )
    kingdom: list[str] = Field(default_factory=lambda: list(FIRST_GAME))
    pile_sizes: dict[str, int] = Field(
        default_factory=dict,
        description="Overrides for starting Supply pile sizes, by card identity",
    )
    hand_size: int = Field(5, ge=1)
    empty_piles_to_end: Optional[int] = Field(None, ge=1)
    seed: Optional[int] = None
    max_decision_retries: Optional[int] = Field(None, ge=0)
    check_conservation: bool = True

    model_config = {"extra": "forbid"}

    @field_validator("kingdom")
    @classmethod
    def _unique_kingdom(cls, value: list[str]) -> list[str]:
        if len(set(value)) != len(value):
            raise ValueError("kingdom cards must be distinct")
        return value

    @field_validator("pile_sizes")
    @classmethod
    def _non_negative_piles(cls, value: dict[str, int]) -> dict[str, int]:
        for card, size in value.items():
            if size < 0:
                raise ValueError(f"pile size for {card} is negative")
        return value

    @model_validator(mode="after")
    def _unique_names(self) -> GameConfig:
        if len(set(self.player_names)) != len(self.player_names):
            raise ValueError("player names must be distinct")
        return self

    @property
    def num_players(self) -> int:
        return len(self.player_names)

    def empty_pile_limit(self) -> int:
        """Empty Supply piles that end the game: 3 for 2-4 players, 4 for 5-6."""
        if self.empty_piles_to_end is not None:
            return self.empty_piles_to_end
        return 3 if self.num_players <= 4 else 4


def load_config(path: str | Path | None = None) -> GameConfig:
    """
    Load a GameConfig from ``path``, else from $KINGDOM_CONFIG, else defaults.

    Raises pydantic.ValidationError on malformed content.
    """
    path = path or os.getenv(CONFIG_ENV)
    if path:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    else:
        data = {}

    seed = os.getenv(SEED_ENV)
    if seed is not None and seed.strip():
        data["seed"] = int(seed)

    return GameConfig.model_validate(data)
