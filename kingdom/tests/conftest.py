"""
Pytest fixtures for Kingdom tests.
"""

import random

import pytest

from ..bots.policy import ScriptedPolicy
from ..config import FIRST_GAME, GameConfig
from ..engine_core.decision import DecisionProtocol
from ..engine_core.reducer import Reducer
from ..engine_core.state import GameState, PlayerState
from ..games.dominion.cards import create_base_catalog
from ..games.dominion.setup import setup_game
from ..spec_schema.catalog import Catalog


def default_supply() -> dict[str, int]:
    """A 2-player Supply with the first-game kingdom."""
    supply = {
        "Copper": 46,
        "Silver": 40,
        "Gold": 30,
        "Estate": 8,
        "Duchy": 8,
        "Province": 8,
        "Curse": 10,
    }
    supply.update({card: 10 for card in FIRST_GAME})
    return supply


@pytest.fixture
def catalog() -> Catalog:
    """The base-set catalog."""
    return create_base_catalog()


@pytest.fixture
def make_state(catalog):
    """
    Factory for hand-built states.

    ``hands`` has one list per player and fixes the player count. Player 0
    is in the Action phase of turn 1 with counters 1/1/0.
    """
    def _make(
        hands,
        decks=None,
        discards=None,
        supply=None,
        seed=7,
        empty_piles_to_end=3,
        card_catalog=None,
    ) -> GameState:
        decks = decks or [[] for _ in hands]
        discards = discards or [[] for _ in hands]
        state = GameState(
            catalog=card_catalog or catalog,
            players=[
                PlayerState(
                    player_id=i,
                    name=f"P{i}",
                    hand=list(hands[i]),
                    deck=list(decks[i]),
                    discard=list(discards[i]),
                )
                for i in range(len(hands))
            ],
            supply=default_supply() if supply is None else dict(supply),
            empty_piles_to_end=empty_piles_to_end,
            seed=seed,
            rng=random.Random(seed),
        )
        state.record_initial_totals()
        return state

    return _make


@pytest.fixture
def make_reducer():
    """
    Factory for a reducer whose players answer from fixed scripts.

    ``decisions`` maps player id to that player's responses, in order. A
    request beyond the script raises ScriptExhausted.
    """
    def _make(state, decisions=None, max_retries=None) -> Reducer:
        decisions = decisions or {}
        policies = [ScriptedPolicy(decisions=decisions.get(i, ())) for i in range(state.num_players)]
        protocol = DecisionProtocol(policies, state, max_retries=max_retries)
        return Reducer(state, protocol)

    return _make


@pytest.fixture
def new_game() -> GameState:
    """A freshly set-up 2-player game with a fixed seed."""
    return setup_game(GameConfig(seed=1234))
