"""
Effect DSL - Tagged-variant effect scripts.

This module defines the DSL for describing what a card does when played.
Effects are:
- Pure data: frozen nodes that own no state, shared by reference
- Composable: composites hold child effects
- Deterministic: given the same state and decisions, produce the same result
- Interpreted by a single engine (EffectResolver), never subclassed

Key design decisions:
- One node type (Effect) tagged by EffectKind, instead of effect classes
- Player choices are explicit (ChoiceSpec) and bind their result to a variable
- Later steps consume bound cards by variable name ("$name" style lookups)
- Magnitudes may be Amount expressions re-evaluated against live state
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Union

from .catalog import CardType


# Variable name that refers to the card whose script is running.
SOURCE_CARD = "@source"

# Zones an effect may read from or put cards into.
HAND = "hand"
DECK = "deck"
DISCARD = "discard"
SUPPLY = "supply"

GAIN_DESTINATIONS = {HAND, DECK, DISCARD}
CHOICE_SOURCES = {HAND, SUPPLY}


class EffectKind(Enum):
    """Types of effect nodes."""
    # Primitives
    DRAW = "draw"
    PLUS_ACTIONS = "plus_actions"
    PLUS_BUYS = "plus_buys"
    PLUS_COINS = "plus_coins"
    GAIN = "gain"
    TRASH = "trash"
    DISCARD = "discard"
    TOPDECK = "topdeck"
    DISCARD_DOWN_TO = "discard_down_to"
    DISCARD_DECK = "discard_deck"
    NEXT_TURN = "next_turn"
    REVEAL_REACTION_WINDOW = "reveal_reaction_window"

    # Composites
    SEQUENCE = "sequence"
    REPEAT = "repeat"
    CHOOSE = "choose"
    CONDITIONAL = "conditional"
    PER_OTHER_PLAYER = "per_other_player"
    DUPLICATE = "duplicate"


COMPOSITE_KINDS = {
    EffectKind.SEQUENCE,
    EffectKind.REPEAT,
    EffectKind.CHOOSE,
    EffectKind.CONDITIONAL,
    EffectKind.PER_OTHER_PLAYER,
    EffectKind.DUPLICATE,
}

# Kinds that must carry at least one child effect.
NESTING_KINDS = {
    EffectKind.SEQUENCE,
    EffectKind.REPEAT,
    EffectKind.PER_OTHER_PLAYER,
    EffectKind.NEXT_TURN,
}


class AmountKind(Enum):
    """How an Amount is computed."""
    FIXED = "fixed"
    BOUND_COUNT = "bound_count"  # number of cards bound to a variable
    EMPTY_PILES = "empty_piles"  # number of empty supply piles
    HAND_SIZE = "hand_size"  # cards in the acting player's hand
    COST_OF = "cost_of"  # cost of the first card bound to a variable


@dataclass(frozen=True)
class Amount:
    """
    A number computed from state at the moment it is needed.

    The result is always ``base + offset`` where base depends on kind.
    """
    kind: AmountKind
    offset: int = 0
    var: str | None = None

    @classmethod
    def fixed(cls, value: int) -> Amount:
        return cls(kind=AmountKind.FIXED, offset=value)

    @classmethod
    def bound_count(cls, var: str) -> Amount:
        return cls(kind=AmountKind.BOUND_COUNT, var=var)

    @classmethod
    def empty_piles(cls, offset: int = 0) -> Amount:
        return cls(kind=AmountKind.EMPTY_PILES, offset=offset)

    @classmethod
    def hand_size(cls, offset: int = 0) -> Amount:
        return cls(kind=AmountKind.HAND_SIZE, offset=offset)

    @classmethod
    def cost_of(cls, var: str, plus: int = 0) -> Amount:
        return cls(kind=AmountKind.COST_OF, var=var, offset=plus)


AmountLike = Union[int, Amount]


@dataclass(frozen=True)
class CardFilter:
    """
    Restricts which cards are legal options for a choice.

    A card passes when it has any of ``types`` (if given), is one of
    ``names`` (if given) and costs at most ``max_cost`` (if given).
    """
    types: tuple[CardType, ...] = ()
    names: tuple[str, ...] = ()
    max_cost: AmountLike | None = None


class ConditionKind(Enum):
    """Types of conditions for conditional effects."""
    ASK = "ask"  # yes/no decision by the acting player
    BOUND = "bound"  # a variable holds at least one card
    HAND_CONTAINS = "hand_contains"  # acting player's hand holds a card


@dataclass(frozen=True)
class Condition:
    """A condition evaluated when a conditional effect runs."""
    kind: ConditionKind
    prompt: str = ""
    var: str | None = None
    card: str | None = None


@dataclass(frozen=True)
class ChoiceSpec:
    """
    Specifies a player choice within an effect.

    Used by the engine to:
    1. Compute the legal option set at the instant the choice is reached
    2. Present the request to the decision source
    3. Validate the response and bind it to ``bind``

    ``max_choices`` of None means "any number" (up to the option count).
    """
    source: str  # HAND or SUPPLY
    bind: str = "chosen"
    min_choices: int = 1
    max_choices: AmountLike | None = 1
    filter: CardFilter | None = None
    prompt: str = ""


@dataclass(frozen=True)
class Effect:
    """
    A node in a card's effect script.

    Field use by kind:
    - DRAW / PLUS_*: ``amount``
    - GAIN: ``card`` or ``var``, ``destination``
    - TRASH / DISCARD / TOPDECK: ``var`` (SOURCE_CARD for the playing card)
    - DISCARD_DOWN_TO: ``amount`` is the hand size to discard down to
    - NEXT_TURN: ``children`` run at the start of the owner's next turn
    - SEQUENCE: ``children``
    - REPEAT: ``amount`` (re-evaluated per iteration), ``children``
    - CHOOSE: ``choice``
    - CONDITIONAL: ``condition``, ``children`` (then), ``else_children``
    - PER_OTHER_PLAYER: ``children``, ``attack``
    - DUPLICATE: ``var`` (the chosen action card), ``amount`` (times)
    """
    kind: EffectKind
    amount: AmountLike = 1
    card: str | None = None
    var: str | None = None
    destination: str = DISCARD
    choice: ChoiceSpec | None = None
    condition: Condition | None = None
    children: tuple[Effect, ...] = ()
    else_children: tuple[Effect, ...] = ()
    attack: bool = False
    max_iterations: int = 100  # Safety bound for REPEAT

    @property
    def is_composite(self) -> bool:
        return self.kind in COMPOSITE_KINDS

    def walk(self) -> Iterator[Effect]:
        """Yield this node and every nested node, depth first."""
        yield self
        for child in self.children + self.else_children:
            yield from child.walk()

    def is_attack(self) -> bool:
        """True if any node of this script is an attacking per-other-player."""
        return any(
            node.kind == EffectKind.PER_OTHER_PLAYER and node.attack
            for node in self.walk()
        )


# ============================================================================
# Factory functions for common effect patterns
# ============================================================================

def draw(count: AmountLike = 1) -> Effect:
    """+N Cards."""
    return Effect(kind=EffectKind.DRAW, amount=count)


def plus_actions(count: AmountLike = 1) -> Effect:
    return Effect(kind=EffectKind.PLUS_ACTIONS, amount=count)


def plus_buys(count: AmountLike = 1) -> Effect:
    return Effect(kind=EffectKind.PLUS_BUYS, amount=count)


def plus_coins(count: AmountLike = 1) -> Effect:
    return Effect(kind=EffectKind.PLUS_COINS, amount=count)


def gain(card: str | None = None, var: str | None = None, to: str = DISCARD) -> Effect:
    """Gain a named card, or the card bound to ``var``, from the Supply."""
    return Effect(kind=EffectKind.GAIN, card=card, var=var, destination=to)


def trash(var: str) -> Effect:
    """Trash the cards bound to ``var`` from hand."""
    return Effect(kind=EffectKind.TRASH, var=var)


def trash_self() -> Effect:
    """Trash the card whose script is running from the play area."""
    return Effect(kind=EffectKind.TRASH, var=SOURCE_CARD)


def discard(var: str) -> Effect:
    return Effect(kind=EffectKind.DISCARD, var=var)


def topdeck(var: str) -> Effect:
    """Put the cards bound to ``var`` from hand onto the draw pile."""
    return Effect(kind=EffectKind.TOPDECK, var=var)


def discard_down_to(size: int) -> Effect:
    return Effect(kind=EffectKind.DISCARD_DOWN_TO, amount=size)


def discard_deck() -> Effect:
    """Put the whole draw pile into the discard pile."""
    return Effect(kind=EffectKind.DISCARD_DECK)


def next_turn(*effects: Effect) -> Effect:
    """Run ``effects`` at the start of the acting player's next turn."""
    return Effect(kind=EffectKind.NEXT_TURN, children=tuple(effects))


def reaction_window() -> Effect:
    """Offer the current target a chance to reveal a Reaction."""
    return Effect(kind=EffectKind.REVEAL_REACTION_WINDOW)


def sequence(*effects: Effect) -> Effect:
    return Effect(kind=EffectKind.SEQUENCE, children=tuple(effects))


def repeat(times: AmountLike, *effects: Effect, max_iterations: int = 100) -> Effect:
    """Run ``effects`` while the iteration index is below ``times``."""
    return Effect(
        kind=EffectKind.REPEAT,
        amount=times,
        children=tuple(effects),
        max_iterations=max_iterations,
    )


def choose(
    source: str,
    bind: str = "chosen",
    min_choices: int = 1,
    max_choices: AmountLike | None = 1,
    types: tuple[CardType, ...] = (),
    names: tuple[str, ...] = (),
    max_cost: AmountLike | None = None,
    prompt: str = "",
) -> Effect:
    """Create a choose step that binds the chosen cards to ``bind``."""
    card_filter = None
    if types or names or max_cost is not None:
        card_filter = CardFilter(types=types, names=names, max_cost=max_cost)
    return Effect(
        kind=EffectKind.CHOOSE,
        choice=ChoiceSpec(
            source=source,
            bind=bind,
            min_choices=min_choices,
            max_choices=max_choices,
            filter=card_filter,
            prompt=prompt,
        ),
    )


def conditional(
    condition: Condition,
    then: tuple[Effect, ...] | list[Effect],
    otherwise: tuple[Effect, ...] | list[Effect] = (),
) -> Effect:
    return Effect(
        kind=EffectKind.CONDITIONAL,
        condition=condition,
        children=tuple(then),
        else_children=tuple(otherwise),
    )


def ask(prompt: str) -> Condition:
    return Condition(kind=ConditionKind.ASK, prompt=prompt)


def is_bound(var: str) -> Condition:
    return Condition(kind=ConditionKind.BOUND, var=var)


def hand_contains(card: str) -> Condition:
    return Condition(kind=ConditionKind.HAND_CONTAINS, card=card)


def per_other_player(*effects: Effect, attack: bool = False) -> Effect:
    return Effect(
        kind=EffectKind.PER_OTHER_PLAYER,
        children=tuple(effects),
        attack=attack,
    )


def attack(*effects: Effect) -> Effect:
    """Each other player, after a reaction window, suffers ``effects``."""
    return per_other_player(*effects, attack=True)


def duplicate(var: str, times: AmountLike = 2) -> Effect:
    """Play the action bound to ``var`` from hand, running its script ``times`` times."""
    return Effect(kind=EffectKind.DUPLICATE, var=var, amount=times)
