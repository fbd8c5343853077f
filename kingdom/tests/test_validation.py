"""
Tests for catalog validation.
"""

import pytest

from ..engine_core.errors import CatalogValidationError
from ..games.dominion.cards import get_card
from ..spec_schema.catalog import Catalog, CardDefinition, CardType, Reaction
from ..spec_schema.effect_dsl import (
    Effect,
    EffectKind,
    HAND,
    attack,
    choose,
    draw,
    gain,
    per_other_player,
    sequence,
    trash,
)
from ..spec_schema.validation import validate_catalog

A = CardType.ACTION


def catalog_of(*cards):
    return Catalog.from_cards("test", cards)


class TestValidateCatalog:
    """Tests for validate_catalog."""

    def test_base_set_is_valid(self, catalog):
        result = validate_catalog(catalog)

        assert result.valid
        assert result.errors == []
        assert result.warnings == []

    def test_unknown_card_reference(self):
        card = CardDefinition(name="Beggar", cost=2, types=(A,), effect=gain("Platinum"))

        result = validate_catalog(catalog_of(card))

        assert not result.valid
        assert any("Platinum" in e for e in result.errors)

    def test_action_without_effect(self):
        result = validate_catalog(catalog_of(CardDefinition(name="Blank", cost=1, types=(A,))))

        assert not result.valid

    def test_treasure_without_value(self):
        card = CardDefinition(name="Lead", cost=0, types=(CardType.TREASURE,))

        assert not validate_catalog(catalog_of(card)).valid

    def test_reaction_without_reaction(self):
        card = CardDefinition(name="Shield", cost=2, types=(A, CardType.REACTION), effect=draw(1))

        assert not validate_catalog(catalog_of(card)).valid

    def test_attack_that_never_attacks(self):
        card = CardDefinition(name="Bluff", cost=2, types=(A, CardType.ATTACK), effect=draw(1))

        result = validate_catalog(catalog_of(card))

        assert any("never attacks" in e for e in result.errors)

    def test_attack_without_attack_type(self):
        """A script that attacks must belong to an Attack card."""
        card = CardDefinition(name="Ambush", cost=4, types=(A,), effect=attack(gain("Curse")))

        result = validate_catalog(catalog_of(card))

        assert not result.valid
        assert any("is not an Attack" in e for e in result.errors)

    def test_plain_per_other_player_needs_no_attack_type(self):
        card = CardDefinition(name="Feast Day", cost=3, types=(A,), effect=per_other_player(draw(1)))

        assert validate_catalog(catalog_of(card)).valid

    def test_composite_without_children(self):
        card = CardDefinition(name="Empty", cost=2, types=(A,), effect=Effect(kind=EffectKind.SEQUENCE))

        assert not validate_catalog(catalog_of(card)).valid

    def test_choose_without_spec(self):
        card = CardDefinition(name="Vague", cost=2, types=(A,), effect=Effect(kind=EffectKind.CHOOSE))

        result = validate_catalog(catalog_of(card))

        assert any("no choice spec" in e for e in result.errors)

    def test_unbound_variable_is_a_warning(self):
        card = CardDefinition(name="Hasty", cost=2, types=(A,), effect=trash("victims"))

        result = validate_catalog(catalog_of(card))

        assert result.valid
        assert any("victims" in w for w in result.warnings)

    def test_bound_variable(self):
        card = CardDefinition(
            name="Careful",
            cost=2,
            types=(A,),
            effect=sequence(choose(HAND, bind="victims"), trash("victims")),
        )

        assert validate_catalog(catalog_of(card)).warnings == []

    def test_reaction_effect_is_checked(self):
        card = CardDefinition(
            name="Odd Moat",
            cost=2,
            types=(A, CardType.REACTION),
            effect=draw(1),
            reaction=Reaction(effect=gain("Platinum")),
        )

        assert not validate_catalog(catalog_of(card)).valid

    def test_raise_on_error(self):
        card = CardDefinition(name="Blank", cost=1, types=(A,))

        with pytest.raises(CatalogValidationError) as excinfo:
            validate_catalog(catalog_of(card), raise_on_error=True)

        assert excinfo.value.errors


class TestBaseCards:
    """Tests for the base-set card table."""

    def test_get_card(self):
        assert get_card("Moat").is_reaction
        assert get_card("Gardens").points_per_cards == 10
        assert get_card("Platinum") is None

    def test_every_attack_attacks(self, catalog):
        for card in catalog:
            if card.is_attack:
                assert card.effect.is_attack(), card.name
