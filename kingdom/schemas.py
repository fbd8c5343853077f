"""
Pydantic Schemas - Read-only snapshot models of a game in progress.

These models are the observation contract for drivers: a snapshot is a
detached copy, so nothing a driver does with it can reach the live state.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class PhaseName(str, Enum):
    """Turn phases as exposed to drivers."""
    ACTION = "action"
    BUY = "buy"
    CLEANUP = "cleanup"
    GAME_OVER = "game_over"


# =============================================================================
# Shared Models
# =============================================================================

class PileInfo(BaseModel):
    """One Supply pile."""
    card: str
    count: int = Field(ge=0)
    cost: int = 0

    model_config = {"frozen": True}


class PlayerInfo(BaseModel):
    """
    Player information.

    Hand contents are included; hidden-information filtering is left to the
    driver that renders the snapshot.
    """
    player_id: int
    name: str
    is_current_turn: bool = False
    hand: list[str] = Field(default_factory=list)
    play: list[str] = Field(default_factory=list)
    set_aside: list[str] = Field(default_factory=list)
    deck_count: int = 0
    discard_count: int = 0
    discard_top: Optional[str] = None
    actions: int = 0
    buys: int = 0
    coins: int = 0
    pending_effects: int = 0

    model_config = {"frozen": True}


class StateSnapshot(BaseModel):
    """Complete read-only view of a game."""
    turn_number: int
    phase: PhaseName
    current_player_idx: int
    players: list[PlayerInfo] = Field(default_factory=list)
    supply: list[PileInfo] = Field(default_factory=list)
    trash: list[str] = Field(default_factory=list)
    empty_piles: int = 0
    log_length: int = 0
    game_over: bool = False

    model_config = {"frozen": True}

    def pile(self, card: str) -> Optional[PileInfo]:
        for pile in self.supply:
            if pile.card == card:
                return pile
        return None
