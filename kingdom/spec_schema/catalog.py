"""
Card Catalog - Static card definitions consumed by the engine.

A CardDefinition is the immutable identity of a card: its cost, type tags,
effect script and scoring data. The engine never copies or mutates a
definition; every zone refers to cards by identity (the card name) and looks
the definition up in the Catalog.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, TYPE_CHECKING

if TYPE_CHECKING:
    from .effect_dsl import Effect


class CardType(Enum):
    """Type tags printed on a card."""
    ACTION = "Action"
    TREASURE = "Treasure"
    VICTORY = "Victory"
    CURSE = "Curse"
    ATTACK = "Attack"
    REACTION = "Reaction"
    DURATION = "Duration"


@dataclass(frozen=True)
class Reaction:
    """
    What revealing a Reaction card does when an Attack targets its holder.

    ``effect`` runs for the revealing player before the attack would apply.
    """
    negates_attack: bool = True
    effect: Effect | None = None


@dataclass(frozen=True)
class CardDefinition:
    """
    Card definition with full metadata.

    ``points_per_cards`` scores 1 VP per that many cards owned (Gardens).
    """
    name: str
    cost: int
    types: tuple[CardType, ...]
    effect: Effect | None = None
    treasure_value: int = 0
    victory_points: int = 0
    points_per_cards: int = 0
    reaction: Reaction | None = None
    text: str = ""

    def has_type(self, card_type: CardType) -> bool:
        return card_type in self.types

    @property
    def is_action(self) -> bool:
        return CardType.ACTION in self.types

    @property
    def is_treasure(self) -> bool:
        return CardType.TREASURE in self.types

    @property
    def is_victory(self) -> bool:
        return CardType.VICTORY in self.types

    @property
    def is_attack(self) -> bool:
        return CardType.ATTACK in self.types

    @property
    def is_reaction(self) -> bool:
        return CardType.REACTION in self.types

    @property
    def is_duration(self) -> bool:
        return CardType.DURATION in self.types


@dataclass
class Catalog:
    """
    Mapping from card identity to definition.

    Catalog content is read-only to the engine.
    """
    catalog_id: str
    cards: dict[str, CardDefinition] = field(default_factory=dict)

    @classmethod
    def from_cards(cls, catalog_id: str, cards: Iterable[CardDefinition]) -> Catalog:
        return cls(catalog_id=catalog_id, cards={c.name: c for c in cards})

    def card(self, name: str) -> CardDefinition:
        """Get a card by identity, raising KeyError if unknown."""
        try:
            return self.cards[name]
        except KeyError:
            raise KeyError(f"Unknown card: {name}") from None

    def cost(self, name: str) -> int:
        return self.card(name).cost

    def __contains__(self, name: object) -> bool:
        return name in self.cards

    def __iter__(self) -> Iterator[CardDefinition]:
        return iter(self.cards.values())

    def __len__(self) -> int:
        return len(self.cards)

    def names(self) -> list[str]:
        return list(self.cards)
