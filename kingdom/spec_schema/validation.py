"""
Catalog Validation - Structural well-formedness of a card catalog.

Validates that:
1. Required fields are present and sane (name, cost, type tags)
2. References are valid (every card identity an effect names exists)
3. Effect DSL is well-formed (choices have specs, composites have children)
4. Variables consumed by a script are bound earlier in that script

Card *content* (balance, wording) is never judged.
"""

from __future__ import annotations
from dataclasses import dataclass

from ..engine_core.errors import CatalogValidationError
from .catalog import Catalog, CardDefinition, CardType
from .effect_dsl import (
    Amount,
    AmountKind,
    CHOICE_SOURCES,
    ConditionKind,
    Effect,
    EffectKind,
    GAIN_DESTINATIONS,
    NESTING_KINDS,
    SOURCE_CARD,
)


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def validate_catalog(catalog: Catalog, raise_on_error: bool = False) -> ValidationResult:
    """
    Validate a complete card catalog.

    Returns ValidationResult with errors and warnings.
    Raises CatalogValidationError if raise_on_error=True and errors exist.
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not catalog.catalog_id:
        errors.append("catalog_id is required")
    if not catalog.cards:
        warnings.append("No cards defined - catalog may be incomplete")

    card_ids = set(catalog.cards)

    for key, card in catalog.cards.items():
        if key != card.name:
            errors.append(f"Card registered as '{key}' is named '{card.name}'")
        errors.extend(_validate_card(card))

        if card.effect is not None:
            effect_errors, effect_warnings = _validate_effect(card.effect, card_ids)
            errors.extend(f"Card '{card.name}': {e}" for e in effect_errors)
            warnings.extend(f"Card '{card.name}': {w}" for w in effect_warnings)

        if card.reaction and card.reaction.effect is not None:
            effect_errors, _ = _validate_effect(card.reaction.effect, card_ids)
            errors.extend(f"Card '{card.name}' reaction: {e}" for e in effect_errors)

    result = ValidationResult(valid=not errors, errors=errors, warnings=warnings)
    if raise_on_error and errors:
        raise CatalogValidationError(errors)
    return result


def _validate_card(card: CardDefinition) -> list[str]:
    """Validate a single card definition."""
    errors = []
    if not card.name:
        errors.append("Card has empty name")
    if card.cost < 0:
        errors.append(f"Card '{card.name}' has negative cost")
    if not card.types:
        errors.append(f"Card '{card.name}' has no types")

    if card.is_action and card.effect is None:
        errors.append(f"Action card '{card.name}' has no effect script")
    if card.is_treasure and card.treasure_value <= 0:
        errors.append(f"Treasure card '{card.name}' has no treasure value")
    if card.is_reaction and card.reaction is None:
        errors.append(f"Reaction card '{card.name}' has no reaction")
    if card.has_type(CardType.ATTACK) and card.effect is not None and not card.effect.is_attack():
        errors.append(f"Attack card '{card.name}' never attacks")
    if not card.has_type(CardType.ATTACK) and card.effect is not None and card.effect.is_attack():
        errors.append(f"Card '{card.name}' attacks but is not an Attack")
    return errors


def _validate_effect(effect: Effect, card_ids: set[str]) -> tuple[list[str], list[str]]:
    """Validate an effect tree: structure, references and variable bindings."""
    errors: list[str] = []
    warnings: list[str] = []
    _check_node(effect, card_ids, bound=set(), errors=errors, warnings=warnings)
    return errors, warnings


def _check_node(
    node: Effect,
    card_ids: set[str],
    bound: set[str],
    errors: list[str],
    warnings: list[str],
) -> None:
    """Check one node, then its children in script order."""
    kind = node.kind

    if kind in NESTING_KINDS and not node.children:
        errors.append(f"{kind.value} has no child effects")

    if kind == EffectKind.CHOOSE:
        spec = node.choice
        if spec is None:
            errors.append("choose step has no choice spec")
        else:
            if spec.source not in CHOICE_SOURCES:
                errors.append(f"choose step has unknown source '{spec.source}'")
            if spec.min_choices < 0:
                errors.append("choose step has negative min_choices")
            if isinstance(spec.max_choices, int) and spec.max_choices < spec.min_choices:
                errors.append("choose step has max_choices < min_choices")
            if spec.filter:
                for name in spec.filter.names:
                    if name not in card_ids:
                        errors.append(f"choose filter references unknown card '{name}'")
                _check_amount(spec.filter.max_cost, bound, warnings)
            _check_amount(spec.max_choices, bound, warnings)
            bound.add(spec.bind)

    if kind == EffectKind.GAIN:
        if node.card is None and node.var is None:
            errors.append("gain step names no card and no variable")
        if node.card is not None and node.card not in card_ids:
            errors.append(f"gain step references unknown card '{node.card}'")
        if node.destination not in GAIN_DESTINATIONS:
            errors.append(f"gain step has unknown destination '{node.destination}'")

    if kind in {EffectKind.GAIN, EffectKind.TRASH, EffectKind.DISCARD,
                EffectKind.TOPDECK, EffectKind.DUPLICATE}:
        if kind != EffectKind.GAIN and node.var is None:
            errors.append(f"{kind.value} step names no variable")
        if node.var and node.var != SOURCE_CARD and node.var not in bound:
            warnings.append(f"{kind.value} step uses '{node.var}' before it is bound")

    if kind == EffectKind.CONDITIONAL:
        condition = node.condition
        if condition is None:
            errors.append("conditional step has no condition")
        elif condition.kind == ConditionKind.HAND_CONTAINS and condition.card not in card_ids:
            errors.append(f"condition references unknown card '{condition.card}'")
        elif condition.kind == ConditionKind.BOUND and condition.var not in bound:
            warnings.append(f"condition tests '{condition.var}' before it is bound")

    if kind in {EffectKind.DRAW, EffectKind.PLUS_ACTIONS, EffectKind.PLUS_BUYS,
                EffectKind.PLUS_COINS, EffectKind.REPEAT, EffectKind.DUPLICATE}:
        _check_amount(node.amount, bound, warnings)

    for child in node.children:
        _check_node(child, card_ids, bound, errors, warnings)
    for child in node.else_children:
        _check_node(child, card_ids, bound, errors, warnings)


def _check_amount(amount, bound: set[str], warnings: list[str]) -> None:
    if isinstance(amount, Amount) and amount.kind in {AmountKind.BOUND_COUNT, AmountKind.COST_OF}:
        if amount.var not in bound:
            warnings.append(f"amount reads '{amount.var}' before it is bound")
