"""
Tests for reaction windows and Attacks.

Tests:
- Window state transitions
- Moat shielding one target but not another
- Declining to reveal
- Reactions with their own effect
- Abandoned reveal requests
"""

import pytest

from ..bots.policy import ScriptedPolicy
from ..engine_core.action import Action
from ..engine_core.decision import DecisionProtocol
from ..engine_core.reaction import ReactionWindow, WindowState
from ..games.dominion.cards import ALL_CARDS
from ..spec_schema.catalog import Catalog, CardDefinition, CardType, Reaction
from ..spec_schema.effect_dsl import plus_coins


def watchtower_catalog():
    """The base set plus a reaction that gives +1 coin and does not block."""
    watchtower = CardDefinition(
        name="Watchtower Lite",
        cost=3,
        types=(CardType.ACTION, CardType.REACTION),
        effect=plus_coins(1),
        reaction=Reaction(effect=plus_coins(1), negates_attack=False),
    )
    return Catalog.from_cards("custom", ALL_CARDS + [watchtower])


class TestReactionWindow:
    """Tests for ReactionWindow on its own."""

    def test_no_reactions_no_request(self, make_state):
        """Without a Reaction in hand the window closes without asking."""
        state = make_state([["Militia"], ["Copper", "Estate"]])
        protocol = DecisionProtocol([ScriptedPolicy(), ScriptedPolicy()], state)
        window = ReactionWindow(target_id=1, attacker_id=0, attack_card="Militia")

        shielded = window.run(state, protocol)

        assert shielded is False
        assert window.state == WindowState.RESOLVED
        assert window.options == ()

    def test_reveal_moat(self, make_state):
        state = make_state([["Militia"], ["Moat", "Copper"]])
        protocol = DecisionProtocol([ScriptedPolicy(), ScriptedPolicy(decisions=[("Moat",)])], state)
        window = ReactionWindow(target_id=1, attacker_id=0, attack_card="Militia")

        assert window.run(state, protocol) is True
        assert window.revealed == "Moat"
        # Revealing keeps the card in hand
        assert state.players[1].hand == ["Moat", "Copper"]
        assert state.log[-1].op == "reveal"

    def test_window_opens_once(self, make_state):
        state = make_state([["Militia"], ["Copper"]])
        protocol = DecisionProtocol([ScriptedPolicy(), ScriptedPolicy()], state)
        window = ReactionWindow(target_id=1, attacker_id=0, attack_card="Militia")
        window.run(state, protocol)

        with pytest.raises(RuntimeError):
            window.open(state)


class TestAttacks:
    """Tests for Attacks resolved through the reducer."""

    def test_moat_shields_only_its_owner(self, make_state, make_reducer):
        """One target reveals Moat and is unaffected; the other discards."""
        state = make_state([
            ["Militia"],
            ["Moat", "Estate", "Copper", "Copper", "Copper"],
            ["Estate", "Estate", "Copper", "Copper", "Copper"],
        ])
        reducer = make_reducer(state, {1: [("Moat",)], 2: [("Estate", "Estate")]})

        result = reducer.apply(Action.play_action(0, "Militia"))

        assert result.success
        assert state.players[0].coins == 2
        assert len(state.players[1].hand) == 5
        assert sorted(state.players[2].hand) == ["Copper", "Copper", "Copper"]
        assert state.players[2].discard == ["Estate", "Estate"]
        shielded = [s for s in result.reports[0].noops if s.reason == "shielded by reaction"]
        assert [s.player for s in shielded] == [1]

    def test_declining_the_reveal(self, make_state, make_reducer):
        state = make_state([
            ["Militia"],
            ["Moat", "Estate", "Estate", "Copper", "Copper"],
        ])
        reducer = make_reducer(state, {1: [(), ("Estate", "Estate")]})

        reducer.apply(Action.play_action(0, "Militia"))

        assert sorted(state.players[1].hand) == ["Copper", "Copper", "Moat"]

    def test_small_hand_is_not_asked(self, make_state, make_reducer):
        """A target already at 3 cards discards nothing."""
        state = make_state([["Militia"], ["Copper", "Copper", "Estate"]])
        reducer = make_reducer(state)

        result = reducer.apply(Action.play_action(0, "Militia"))

        assert result.success
        assert state.players[1].hand == ["Copper", "Copper", "Estate"]

    def test_reaction_with_effect(self, make_state, make_reducer):
        """A revealed reaction runs its own script for the revealing player."""
        state = make_state([["Witch"], ["Watchtower Lite"]], card_catalog=watchtower_catalog())
        reducer = make_reducer(state, {1: [("Watchtower Lite",)]})

        reducer.apply(Action.play_action(0, "Witch"))

        target = state.players[1]
        assert target.coins == 1
        assert target.discard == ["Curse"]

    def test_off_turn_coins_reset_for_next_turn(self, make_state, make_reducer):
        """Coins a reaction gave during another player's turn are gone when the target's turn starts."""
        state = make_state([["Witch"], ["Watchtower Lite"]], card_catalog=watchtower_catalog())
        reducer = make_reducer(state, {1: [("Watchtower Lite",)]})
        reducer.apply(Action.play_action(0, "Witch"))
        assert state.players[1].coins == 1

        assert reducer.apply(Action.end_phase(0)).success
        assert reducer.apply(Action.end_phase(0)).success

        target = state.players[1]
        assert state.current_player_idx == 1
        assert (target.actions, target.buys, target.coins) == (1, 1, 0)

    def test_abandoned_reveal_is_a_decline(self, make_state, make_reducer):
        """A target who never gives a valid reveal answer is attacked normally."""
        state = make_state([
            ["Militia"],
            ["Moat", "Estate", "Estate", "Copper", "Copper"],
        ])
        reducer = make_reducer(state, {1: [("Gold",), ("Estate", "Estate")]}, max_retries=0)

        result = reducer.apply(Action.play_action(0, "Militia"))

        assert result.success
        assert sorted(state.players[1].hand) == ["Copper", "Copper", "Moat"]
        assert not any(entry.op == "reveal" for entry in state.log)
