"""
Action System - Top-level actions, payloads, and results.

Top-level actions are the only moves a player makes outside of effect
resolution:
1. Play an Action card (Action phase)
2. Play Treasures (Buy phase)
3. Buy a card (Buy phase)
4. End the current phase

Everything that happens inside a card's script is driven by decision
requests instead. All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from .effect_resolver import EffectReport
    from .state import GameState


class ActionType(Enum):
    """Types of top-level actions."""
    PLAY_ACTION = "play_action"
    PLAY_TREASURE = "play_treasure"
    PLAY_ALL_TREASURES = "play_all_treasures"
    BUY = "buy"
    END_PHASE = "end_phase"


@dataclass(frozen=True)
class ActionPayload:
    """Parameters of an action. Validation happens in the reducer."""
    player_id: int | None = None
    card: str | None = None


@dataclass(frozen=True)
class Action:
    """
    A complete action to be applied to the game state.

    Actions are:
    - Recorded for replay
    - Validated before application
    - Applied by the reducer
    """
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @property
    def player_id(self) -> int | None:
        return self.payload.player_id

    @property
    def card(self) -> str | None:
        return self.payload.card

    @classmethod
    def play_action(cls, player_id: int, card: str) -> Action:
        return cls(ActionType.PLAY_ACTION, ActionPayload(player_id=player_id, card=card))

    @classmethod
    def play_treasure(cls, player_id: int, card: str) -> Action:
        return cls(ActionType.PLAY_TREASURE, ActionPayload(player_id=player_id, card=card))

    @classmethod
    def play_all_treasures(cls, player_id: int) -> Action:
        return cls(ActionType.PLAY_ALL_TREASURES, ActionPayload(player_id=player_id))

    @classmethod
    def buy(cls, player_id: int, card: str) -> Action:
        return cls(ActionType.BUY, ActionPayload(player_id=player_id, card=card))

    @classmethod
    def end_phase(cls, player_id: int) -> Action:
        return cls(ActionType.END_PHASE, ActionPayload(player_id=player_id))

    def describe(self) -> str:
        if self.card:
            return f"{self.action_type.value} {self.card}"
        return self.action_type.value

    def to_dict(self) -> dict[str, Any]:
        return {
            "action_type": self.action_type.value,
            "player_id": self.payload.player_id,
            "card": self.payload.card,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Action:
        return cls(
            ActionType(data["action_type"]),
            ActionPayload(player_id=data.get("player_id"), card=data.get("card")),
        )


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether the action succeeded
    - The state (the same mutable root, on success)
    - Error and error code (on failure; nothing was mutated)
    - Effect reports for any scripts that ran
    """
    success: bool
    new_state: GameState | None = None
    error: str | None = None
    error_code: str | None = None

    state_changes: list[str] = field(default_factory=list)
    reports: list[EffectReport] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: GameState,
        changes: list[str] | None = None,
        reports: list[EffectReport] | None = None,
    ) -> ActionResult:
        """Create a success result."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
            reports=reports or [],
        )
