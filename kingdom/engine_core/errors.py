"""
Engine Errors - The error taxonomy of the rules engine.

- IllegalMove: a top-level action outside its legal window. Recoverable,
  nothing is mutated, the driver re-prompts.
- InvalidDecisionResponse: a decision response outside the offered legal set.
  The decision protocol re-issues the same request.
- EffectNoOp: a primitive effect whose precondition failed mid-script.
  Logged and absorbed by the resolver; the script continues.
- ConservationViolation: an internal invariant failure (engine bug). Fatal.
"""

from __future__ import annotations
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from .decision import DecisionRequest, DecisionResponse


class KingdomError(Exception):
    """Base class for all engine errors."""


class IllegalMove(KingdomError):
    """Raised when a top-level action is not legal in the current state."""

    def __init__(self, reason: str, code: str = "ILLEGAL_MOVE"):
        self.reason = reason
        self.code = code
        super().__init__(reason)


class InvalidDecisionResponse(KingdomError):
    """Raised when a decision response is not a legal answer to its request."""

    def __init__(
        self,
        request: DecisionRequest,
        response: DecisionResponse | None,
        reason: str,
    ):
        self.request = request
        self.response = response
        self.reason = reason
        super().__init__(f"Invalid response to '{request.prompt}': {reason}")


class EffectNoOp(KingdomError):
    """Raised by a state mutation whose precondition is unmet."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class ConservationViolation(KingdomError):
    """
    Raised when a card identity's total count drifts from its starting total.

    Carries a full state dump for diagnosis. Never caught by the engine.
    """

    def __init__(self, card: str, expected: int, actual: int, dump: dict[str, Any]):
        self.card = card
        self.expected = expected
        self.actual = actual
        self.dump = dump
        super().__init__(
            f"Card count for '{card}' is {actual}, expected {expected}"
        )


class CatalogValidationError(KingdomError):
    """Raised when a card catalog is not structurally well-formed."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Catalog validation failed with {len(errors)} error(s)")
