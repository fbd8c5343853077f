"""
Dominion Cards - Card definitions for the base set.

Every card is an already-parsed effect script built from the DSL factory
functions; nothing here parses card text. Cards whose rules need a
reveal-until primitive (Adventurer, Library, Spy, Thief) are not included.

Card structure:
- Name (the card's identity everywhere in the engine)
- Cost in coins
- Type tags
- Effect script, treasure value and/or victory points
"""

from __future__ import annotations

from ...spec_schema.catalog import Catalog, CardDefinition, CardType, Reaction
from ...spec_schema.effect_dsl import (
    Amount,
    DECK,
    HAND,
    SUPPLY,
    ask,
    attack,
    choose,
    conditional,
    discard,
    discard_deck,
    discard_down_to,
    draw,
    duplicate,
    gain,
    is_bound,
    next_turn,
    per_other_player,
    plus_actions,
    plus_buys,
    plus_coins,
    repeat,
    sequence,
    topdeck,
    trash,
    trash_self,
)

CATALOG_ID = "dominion_base"

A = CardType.ACTION
T = CardType.TREASURE
V = CardType.VICTORY


# ============================================================================
# Basic cards
# ============================================================================

COPPER = CardDefinition(name="Copper", cost=0, types=(T,), treasure_value=1, text="$1")
SILVER = CardDefinition(name="Silver", cost=3, types=(T,), treasure_value=2, text="$2")
GOLD = CardDefinition(name="Gold", cost=6, types=(T,), treasure_value=3, text="$3")

ESTATE = CardDefinition(name="Estate", cost=2, types=(V,), victory_points=1, text="1 VP")
DUCHY = CardDefinition(name="Duchy", cost=5, types=(V,), victory_points=3, text="3 VP")
PROVINCE = CardDefinition(name="Province", cost=8, types=(V,), victory_points=6, text="6 VP")

CURSE = CardDefinition(name="Curse", cost=0, types=(CardType.CURSE,), victory_points=-1, text="-1 VP")


# ============================================================================
# Kingdom cards
# ============================================================================

CELLAR = CardDefinition(
    name="Cellar",
    cost=2,
    types=(A,),
    effect=sequence(
        plus_actions(1),
        choose(HAND, bind="discarded", min_choices=0, max_choices=None,
               prompt="Discard any number of cards"),
        discard("discarded"),
        draw(Amount.bound_count("discarded")),
    ),
    text="+1 Action. Discard any number of cards, then draw that many.",
)

CHAPEL = CardDefinition(
    name="Chapel",
    cost=2,
    types=(A,),
    effect=sequence(
        choose(HAND, bind="trashed", min_choices=0, max_choices=4,
               prompt="Trash up to 4 cards from your hand"),
        trash("trashed"),
    ),
    text="Trash up to 4 cards from your hand.",
)

MOAT = CardDefinition(
    name="Moat",
    cost=2,
    types=(A, CardType.REACTION),
    effect=draw(2),
    reaction=Reaction(negates_attack=True),
    text="+2 Cards. When another player plays an Attack card, you may first "
         "reveal this from your hand, to be unaffected by it.",
)

CHANCELLOR = CardDefinition(
    name="Chancellor",
    cost=3,
    types=(A,),
    effect=sequence(
        plus_coins(2),
        conditional(ask("Put your deck into your discard pile?"), then=[discard_deck()]),
    ),
    text="+$2. You may immediately put your deck into your discard pile.",
)

VILLAGE = CardDefinition(
    name="Village",
    cost=3,
    types=(A,),
    effect=sequence(draw(1), plus_actions(2)),
    text="+1 Card, +2 Actions.",
)

WOODCUTTER = CardDefinition(
    name="Woodcutter",
    cost=3,
    types=(A,),
    effect=sequence(plus_buys(1), plus_coins(2)),
    text="+1 Buy, +$2.",
)

WORKSHOP = CardDefinition(
    name="Workshop",
    cost=3,
    types=(A,),
    effect=sequence(
        choose(SUPPLY, bind="gained", max_cost=4, prompt="Gain a card costing up to $4"),
        gain(var="gained"),
    ),
    text="Gain a card costing up to $4.",
)

BUREAUCRAT = CardDefinition(
    name="Bureaucrat",
    cost=4,
    types=(A, CardType.ATTACK),
    effect=sequence(
        gain("Silver", to=DECK),
        attack(
            choose(HAND, bind="victory", types=(V,),
                   prompt="Put a Victory card from your hand onto your deck"),
            topdeck("victory"),
        ),
    ),
    text="Gain a Silver onto your deck. Each other player puts a Victory card "
         "from their hand onto their deck.",
)

FEAST = CardDefinition(
    name="Feast",
    cost=4,
    types=(A,),
    effect=sequence(
        trash_self(),
        choose(SUPPLY, bind="gained", max_cost=5, prompt="Gain a card costing up to $5"),
        gain(var="gained"),
    ),
    text="Trash this card. Gain a card costing up to $5.",
)

GARDENS = CardDefinition(
    name="Gardens",
    cost=4,
    types=(V,),
    points_per_cards=10,
    text="Worth 1 VP per 10 cards you have (round down).",
)

MILITIA = CardDefinition(
    name="Militia",
    cost=4,
    types=(A, CardType.ATTACK),
    effect=sequence(plus_coins(2), attack(discard_down_to(3))),
    text="+$2. Each other player discards down to 3 cards in hand.",
)

MONEYLENDER = CardDefinition(
    name="Moneylender",
    cost=4,
    types=(A,),
    effect=sequence(
        choose(HAND, bind="copper", min_choices=0, max_choices=1, names=("Copper",),
               prompt="You may trash a Copper from your hand"),
        conditional(is_bound("copper"), then=[trash("copper"), plus_coins(3)]),
    ),
    text="You may trash a Copper from your hand for +$3.",
)

POACHER = CardDefinition(
    name="Poacher",
    cost=4,
    types=(A,),
    effect=sequence(
        draw(1),
        plus_actions(1),
        plus_coins(1),
        repeat(
            Amount.empty_piles(),
            choose(HAND, bind="discarded", prompt="Discard a card"),
            discard("discarded"),
        ),
    ),
    text="+1 Card, +1 Action, +$1. Discard a card per empty Supply pile.",
)

REMODEL = CardDefinition(
    name="Remodel",
    cost=4,
    types=(A,),
    effect=sequence(
        choose(HAND, bind="trashed", prompt="Trash a card from your hand"),
        trash("trashed"),
        choose(SUPPLY, bind="gained", max_cost=Amount.cost_of("trashed", plus=2),
               prompt="Gain a card costing up to $2 more"),
        gain(var="gained"),
    ),
    text="Trash a card from your hand. Gain a card costing up to $2 more than it.",
)

SMITHY = CardDefinition(
    name="Smithy",
    cost=4,
    types=(A,),
    effect=draw(3),
    text="+3 Cards.",
)

THRONE_ROOM = CardDefinition(
    name="Throne Room",
    cost=4,
    types=(A,),
    effect=sequence(
        choose(HAND, bind="doubled", min_choices=0, max_choices=1, types=(A,),
               prompt="You may play an Action card from your hand twice"),
        duplicate("doubled", times=2),
    ),
    text="You may play an Action card from your hand twice.",
)

CARAVAN = CardDefinition(
    name="Caravan",
    cost=4,
    types=(A, CardType.DURATION),
    effect=sequence(draw(1), plus_actions(1), next_turn(draw(1))),
    text="+1 Card, +1 Action. At the start of your next turn, +1 Card.",
)

COUNCIL_ROOM = CardDefinition(
    name="Council Room",
    cost=5,
    types=(A,),
    effect=sequence(draw(4), plus_buys(1), per_other_player(draw(1))),
    text="+4 Cards, +1 Buy. Each other player draws a card.",
)

FESTIVAL = CardDefinition(
    name="Festival",
    cost=5,
    types=(A,),
    effect=sequence(plus_actions(2), plus_buys(1), plus_coins(2)),
    text="+2 Actions, +1 Buy, +$2.",
)

LABORATORY = CardDefinition(
    name="Laboratory",
    cost=5,
    types=(A,),
    effect=sequence(draw(2), plus_actions(1)),
    text="+2 Cards, +1 Action.",
)

MARKET = CardDefinition(
    name="Market",
    cost=5,
    types=(A,),
    effect=sequence(draw(1), plus_actions(1), plus_buys(1), plus_coins(1)),
    text="+1 Card, +1 Action, +1 Buy, +$1.",
)

MINE = CardDefinition(
    name="Mine",
    cost=5,
    types=(A,),
    effect=sequence(
        choose(HAND, bind="trashed", min_choices=0, max_choices=1, types=(T,),
               prompt="You may trash a Treasure from your hand"),
        trash("trashed"),
        choose(SUPPLY, bind="gained", types=(T,), max_cost=Amount.cost_of("trashed", plus=3),
               prompt="Gain a Treasure costing up to $3 more"),
        gain(var="gained", to=HAND),
    ),
    text="You may trash a Treasure from your hand. Gain a Treasure to your hand "
         "costing up to $3 more than it.",
)

WITCH = CardDefinition(
    name="Witch",
    cost=5,
    types=(A, CardType.ATTACK),
    effect=sequence(draw(2), attack(gain("Curse"))),
    text="+2 Cards. Each other player gains a Curse.",
)

ARTISAN = CardDefinition(
    name="Artisan",
    cost=6,
    types=(A,),
    effect=sequence(
        choose(SUPPLY, bind="gained", max_cost=5, prompt="Gain a card to your hand costing up to $5"),
        gain(var="gained", to=HAND),
        choose(HAND, bind="topdecked", prompt="Put a card from your hand onto your deck"),
        topdeck("topdecked"),
    ),
    text="Gain a card to your hand costing up to $5. Put a card from your hand onto your deck.",
)


# ============================================================================
# Card lists
# ============================================================================

BASIC_CARDS = [COPPER, SILVER, GOLD, ESTATE, DUCHY, PROVINCE, CURSE]

KINGDOM_CARDS = [
    CELLAR,
    CHAPEL,
    MOAT,
    CHANCELLOR,
    VILLAGE,
    WOODCUTTER,
    WORKSHOP,
    BUREAUCRAT,
    FEAST,
    GARDENS,
    MILITIA,
    MONEYLENDER,
    POACHER,
    REMODEL,
    SMITHY,
    THRONE_ROOM,
    CARAVAN,
    COUNCIL_ROOM,
    FESTIVAL,
    LABORATORY,
    MARKET,
    MINE,
    WITCH,
    ARTISAN,
]

ALL_CARDS = BASIC_CARDS + KINGDOM_CARDS


def create_base_catalog() -> Catalog:
    """Build the catalog of every card in this module."""
    return Catalog.from_cards(CATALOG_ID, ALL_CARDS)


def get_card(name: str) -> CardDefinition | None:
    """Look up a card by name."""
    for card in ALL_CARDS:
        if card.name == name:
            return card
    return None
