"""
Dominion Game Setup - Creates the initial game state.

This module handles:
- Building the Supply (basic piles plus the kingdom) sized by player count
- Dealing each player 7 Coppers and 3 Estates, shuffled with the game seed
- Drawing the opening hands
- Recording the conservation baseline

Starting decks are dealt on top of the Supply counts, not taken from them.
"""

from __future__ import annotations
import logging
import random

from ...config import GameConfig
from ...engine_core.state import GameState, Phase, PlayerState
from ...spec_schema.catalog import Catalog
from ...spec_schema.validation import validate_catalog
from .cards import create_base_catalog

logger = logging.getLogger(__name__)

STARTING_DECK = ["Copper"] * 7 + ["Estate"] * 3
BASIC_SUPPLY = ["Copper", "Silver", "Gold", "Estate", "Duchy", "Province", "Curse"]
KINGDOM_PILE = 10


def supply_sizes(config: GameConfig, catalog: Catalog) -> dict[str, int]:
    """
    Starting Supply pile sizes for ``config``.

    Victory piles hold 8 cards in a 2-player game and 12 otherwise; Curses
    are 10 per opponent; Coppers are what is left of 60 after dealing.
    """
    n = config.num_players
    victory = 8 if n == 2 else 12
    sizes = {
        "Copper": 60 - 7 * n,
        "Silver": 40,
        "Gold": 30,
        "Estate": victory,
        "Duchy": victory,
        "Province": victory,
        "Curse": 10 * (n - 1),
    }
    for card in config.kingdom:
        sizes[card] = victory if catalog.card(card).is_victory else KINGDOM_PILE

    for card, size in config.pile_sizes.items():
        if card not in sizes:
            raise ValueError(f"Pile size given for {card}, which is not in the Supply")
        sizes[card] = size
    return sizes


def setup_game(config: GameConfig | None = None, catalog: Catalog | None = None) -> GameState:
    """
    Set up a new game.

    Args:
        config: Match configuration (defaults apply if not provided)
        catalog: Card catalog (the base set if not provided)

    Returns:
        Initial GameState: player 0, turn 1, Action phase, 5 cards in every hand
    """
    config = config or GameConfig()
    catalog = catalog or create_base_catalog()
    validate_catalog(catalog, raise_on_error=True)

    for card in config.kingdom:
        if card not in catalog:
            raise ValueError(f"Unknown kingdom card: {card}")
        if card in BASIC_SUPPLY:
            raise ValueError(f"{card} is a basic card, not a kingdom card")
    if len(config.kingdom) != KINGDOM_PILE:
        logger.warning("Kingdom has %d cards instead of %d", len(config.kingdom), KINGDOM_PILE)

    # Pick a concrete seed so the match can always be replayed
    seed = config.seed if config.seed is not None else random.randrange(2 ** 32)

    state = GameState(
        catalog=catalog,
        players=[
            PlayerState(player_id=i, name=name)
            for i, name in enumerate(config.player_names)
        ],
        supply=supply_sizes(config, catalog),
        phase=Phase.ACTION,
        turn_number=1,
        current_player_idx=0,
        empty_piles_to_end=config.empty_pile_limit(),
        seed=seed,
        rng=random.Random(seed),
    )

    for player in state.players:
        player.deck = list(STARTING_DECK)
        state.rng.shuffle(player.deck)
    state.record_initial_totals()
    state.record_event("setup", None, f"seed={seed} players={state.num_players}")

    for player in state.players:
        state.draw(player.player_id, config.hand_size)

    logger.info(
        "New game: %d players, seed %d, kingdom %s",
        state.num_players, seed, ", ".join(config.kingdom),
    )
    return state
