"""
Dominion - The base set

Dominion is a deck-building game: everyone starts with the same small deck
and buys cards from a shared Supply to improve it. Key mechanics:
- Each turn runs Action -> Buy -> Cleanup
- Action cards run effect scripts, Treasures make coins
- Attacks hit every other player unless a Reaction stops them
- The game ends when the Provinces or enough Supply piles run out

This module contains:
- Card definitions for the base set
- Seeded game setup
"""

from .cards import ALL_CARDS, BASIC_CARDS, KINGDOM_CARDS, create_base_catalog, get_card
from .setup import setup_game, supply_sizes

__all__ = [
    "ALL_CARDS",
    "BASIC_CARDS",
    "KINGDOM_CARDS",
    "create_base_catalog",
    "get_card",
    "setup_game",
    "supply_sizes",
]
