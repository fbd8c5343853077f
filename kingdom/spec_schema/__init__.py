"""Card schema - effect DSL, card definitions and catalog validation."""

from .catalog import CardType, CardDefinition, Reaction, Catalog
from .effect_dsl import (
    Effect,
    EffectKind,
    Amount,
    AmountKind,
    CardFilter,
    ChoiceSpec,
    Condition,
    ConditionKind,
)
from .validation import validate_catalog, ValidationResult

__all__ = [
    "CardType",
    "CardDefinition",
    "Reaction",
    "Catalog",
    "Effect",
    "EffectKind",
    "Amount",
    "AmountKind",
    "CardFilter",
    "ChoiceSpec",
    "Condition",
    "ConditionKind",
    "validate_catalog",
    "ValidationResult",
]
