"""
Engine Core - Deterministic game state management and effect resolution.

The engine is the runtime that:
1. Holds the GameState and its atomic mutations
2. Generates legal actions
3. Applies actions via the reducer (the turn-phase state machine)
4. Resolves card effect scripts, asking players through the decision protocol
"""

from .errors import (
    KingdomError,
    IllegalMove,
    InvalidDecisionResponse,
    EffectNoOp,
    ConservationViolation,
    CatalogValidationError,
)
from .state import GameState, PlayerState, Zone, Phase, LogEntry, PendingEffect
from .action import Action, ActionType, ActionPayload, ActionResult
from .decision import (
    DecisionKind,
    DecisionRequest,
    DecisionResponse,
    DecisionSource,
    DecisionProtocol,
)
from .reaction import ReactionWindow, WindowState
from .effect_resolver import EffectResolver, EffectContext, EffectReport
from .action_generator import ActionGenerator, legal_actions, is_legal
from .reducer import Reducer

__all__ = [
    "KingdomError",
    "IllegalMove",
    "InvalidDecisionResponse",
    "EffectNoOp",
    "ConservationViolation",
    "CatalogValidationError",
    "GameState",
    "PlayerState",
    "Zone",
    "Phase",
    "LogEntry",
    "PendingEffect",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "DecisionKind",
    "DecisionRequest",
    "DecisionResponse",
    "DecisionSource",
    "DecisionProtocol",
    "ReactionWindow",
    "WindowState",
    "EffectResolver",
    "EffectContext",
    "EffectReport",
    "ActionGenerator",
    "legal_actions",
    "is_legal",
    "Reducer",
]
