"""
Tests for the reducer.

Tests:
- Illegal actions are rejected without mutating anything
- Treasures and buys
- Phase transitions and Cleanup
- Duration cards across turns
- The terminal condition
"""

import pytest

from ..engine_core.action import Action
from ..engine_core.state import Phase
from ..spec_schema.catalog import Catalog, CardDefinition, CardType
from ..spec_schema.effect_dsl import gain, plus_actions, repeat, sequence


def end_turn(reducer, player_id):
    """Leave the Action phase and end the Buy phase."""
    assert reducer.apply(Action.end_phase(player_id)).success
    assert reducer.apply(Action.end_phase(player_id)).success


class TestIllegalMoves:
    """Tests for actions outside their legal window."""

    @pytest.mark.parametrize("action, code", [
        (Action.play_action(1, "Village"), "NOT_YOUR_TURN"),
        (Action.buy(0, "Silver"), "WRONG_PHASE"),
        (Action.play_treasure(0, "Copper"), "WRONG_PHASE"),
        (Action.play_action(0, "Smithy"), "NOT_IN_HAND"),
        (Action.play_action(0, "Copper"), "NOT_AN_ACTION"),
        (Action.play_action(0, "Platinum"), "UNKNOWN_CARD"),
    ])
    def test_rejected_in_action_phase(self, make_state, make_reducer, action, code):
        """A rejected action reports why and leaves the state as it was."""
        state = make_state([["Village", "Copper"], ["Village"]])
        reducer = make_reducer(state)
        before = state.snapshot()

        result = reducer.apply(action)

        assert not result.success
        assert result.error_code == code
        assert state.snapshot() == before

    def test_no_actions_left(self, make_state, make_reducer):
        state = make_state([["Smithy", "Smithy"], []])
        reducer = make_reducer(state)
        reducer.apply(Action.play_action(0, "Smithy"))

        result = reducer.apply(Action.play_action(0, "Smithy"))

        assert result.error_code == "NO_ACTIONS"

    @pytest.mark.parametrize("card, supply, code", [
        ("Gold", None, "NOT_ENOUGH_MONEY"),
        ("Chapel", None, "NOT_IN_SUPPLY"),
        ("Silver", {"Silver": 0, "Province": 8}, "EMPTY_PILE"),
    ])
    def test_rejected_buys(self, make_state, make_reducer, card, supply, code):
        state = make_state([["Copper", "Copper", "Copper"], []], supply=supply)
        reducer = make_reducer(state)
        reducer.apply(Action.end_phase(0))
        reducer.apply(Action.play_all_treasures(0))
        before = state.snapshot()

        result = reducer.apply(Action.buy(0, card))

        assert result.error_code == code
        assert state.snapshot() == before

    def test_no_buys_left(self, make_state, make_reducer):
        state = make_state([["Gold", "Gold"], []])
        reducer = make_reducer(state)
        reducer.apply(Action.end_phase(0))
        reducer.apply(Action.play_all_treasures(0))
        assert reducer.apply(Action.buy(0, "Silver")).success

        result = reducer.apply(Action.buy(0, "Silver"))

        assert result.error_code == "NO_BUYS"


class TestBuyPhase:
    """Tests for treasures and buying."""

    def test_play_treasures_and_buy(self, make_state, make_reducer):
        state = make_state([["Copper", "Silver", "Estate"], []])
        reducer = make_reducer(state)
        reducer.apply(Action.end_phase(0))

        assert reducer.apply(Action.play_treasure(0, "Silver")).success
        assert reducer.apply(Action.play_treasure(0, "Copper")).success
        result = reducer.apply(Action.buy(0, "Silver"))

        player = state.players[0]
        assert result.success
        assert player.play == ["Silver", "Copper"]
        assert player.coins == 0
        assert player.buys == 0
        assert player.discard == ["Silver"]
        assert state.supply["Silver"] == 39

    def test_play_all_treasures(self, make_state, make_reducer):
        state = make_state([["Copper", "Estate", "Gold", "Copper"], []])
        reducer = make_reducer(state)
        reducer.apply(Action.end_phase(0))

        result = reducer.apply(Action.play_all_treasures(0))

        assert result.success
        assert state.players[0].coins == 5
        assert state.players[0].hand == ["Estate"]

    def test_coins_from_actions_carry_into_buy(self, make_state, make_reducer):
        state = make_state([["Woodcutter", "Copper"], []])
        reducer = make_reducer(state)
        reducer.apply(Action.play_action(0, "Woodcutter"))
        reducer.apply(Action.end_phase(0))
        reducer.apply(Action.play_all_treasures(0))

        assert state.players[0].coins == 3
        assert state.players[0].buys == 2


class TestCleanup:
    """Tests for Cleanup and turn order."""

    def test_cleanup_and_next_player(self, make_state, make_reducer):
        state = make_state([["Copper", "Estate"], []], decks=[["Silver"] * 6, []])
        reducer = make_reducer(state)
        reducer.apply(Action.end_phase(0))
        reducer.apply(Action.play_treasure(0, "Copper"))

        reducer.apply(Action.end_phase(0))

        player = state.players[0]
        assert sorted(player.discard) == ["Copper", "Estate"]
        assert player.play == []
        assert player.hand == ["Silver"] * 5
        assert (player.actions, player.buys, player.coins) == (1, 1, 0)
        assert state.current_player_idx == 1
        assert state.turn_number == 1
        assert state.phase == Phase.ACTION

    def test_turn_number_advances_after_last_player(self, make_state, make_reducer):
        state = make_state([[], []])
        reducer = make_reducer(state)

        end_turn(reducer, 0)
        end_turn(reducer, 1)

        assert state.current_player_idx == 0
        assert state.turn_number == 2

    def test_cleanup_reshuffles_for_new_hand(self, make_state, make_reducer):
        """Drawing the next hand may shuffle this turn's discards."""
        state = make_state([["Copper", "Copper", "Estate"], []], decks=[["Gold", "Gold"], []])
        reducer = make_reducer(state)

        end_turn(reducer, 0)

        assert len(state.players[0].hand) == 5
        assert state.players[0].discard == []

    def test_duration_stays_out_until_next_turn(self, make_state, make_reducer):
        """Caravan waits in set-aside, then draws at the start of its owner's turn."""
        state = make_state(
            [["Caravan"], []],
            decks=[["Copper"] + ["Estate"] * 5 + ["Gold"], []],
        )
        reducer = make_reducer(state)
        reducer.apply(Action.play_action(0, "Caravan"))

        end_turn(reducer, 0)

        player = state.players[0]
        assert player.set_aside == ["Caravan"]
        assert len(player.pending_effects) == 1

        end_turn(reducer, 1)

        assert sorted(player.hand) == ["Estate"] * 5 + ["Gold"]
        assert player.play == ["Caravan"]
        assert player.set_aside == []
        assert player.pending_effects == []

        end_turn(reducer, 0)

        assert "Caravan" in player.discard


class TestGameEnd:
    """Tests for the terminal condition."""

    def test_last_province_ends_game_at_cleanup(self, make_state, make_reducer):
        supply = {"Province": 1, "Copper": 40}
        state = make_state([["Gold", "Gold", "Silver"], []], supply=supply)
        reducer = make_reducer(state)
        reducer.apply(Action.end_phase(0))
        reducer.apply(Action.play_all_treasures(0))
        reducer.apply(Action.buy(0, "Province"))

        assert state.phase == Phase.BUY

        reducer.apply(Action.end_phase(0))

        assert state.phase == Phase.GAME_OVER
        assert reducer.generator.winners(state) == [0]
        assert state.log[-1].op == "game_over"

    def test_empty_piles_end_game(self, make_state, make_reducer):
        supply = {"Province": 8, "Curse": 0, "Copper": 0, "Estate": 1}
        state = make_state([["Copper", "Copper"], []], supply=supply)
        reducer = make_reducer(state)
        reducer.apply(Action.end_phase(0))
        reducer.apply(Action.play_all_treasures(0))
        reducer.apply(Action.buy(0, "Estate"))

        reducer.apply(Action.end_phase(0))

        assert state.phase == Phase.GAME_OVER

    def test_two_empty_piles_do_not_end_game(self, make_state, make_reducer):
        supply = {"Province": 8, "Curse": 0, "Copper": 0, "Estate": 5}
        state = make_state([[], []], supply=supply)
        reducer = make_reducer(state)

        end_turn(reducer, 0)

        assert state.phase == Phase.ACTION

    def test_no_actions_after_game_over(self, make_state, make_reducer):
        supply = {"Province": 0, "Copper": 40}
        state = make_state([[], []], supply=supply)
        reducer = make_reducer(state)
        end_turn(reducer, 0)

        result = reducer.apply(Action.end_phase(1))

        assert result.error_code == "GAME_OVER"

    def test_province_gains_end_game_only_at_turn_boundary(self, catalog, make_state, make_reducer):
        """Emptying the Province pile mid-script does not stop the turn."""
        coronation = CardDefinition(
            name="Coronation",
            cost=5,
            types=(CardType.ACTION,),
            effect=sequence(repeat(2, gain("Province")), plus_actions(1)),
        )
        custom = Catalog.from_cards("custom", list(catalog) + [coronation])
        state = make_state([["Coronation", "Village"], []], supply={"Province": 1}, card_catalog=custom)
        reducer = make_reducer(state)

        reducer.apply(Action.play_action(0, "Coronation"))

        assert state.supply["Province"] == 0
        assert state.phase == Phase.ACTION
        assert reducer.apply(Action.play_action(0, "Village")).success

        end_turn(reducer, 0)

        assert state.phase == Phase.GAME_OVER


class TestOpeningTurn:
    """A full first turn from a real setup."""

    def test_play_buy_and_pass(self, new_game, make_reducer):
        state = new_game
        reducer = make_reducer(state)
        player = state.players[0]
        coins = player.hand.count("Copper")

        reducer.apply(Action.end_phase(0))
        reducer.apply(Action.play_all_treasures(0))
        card = "Silver" if coins >= 3 else "Cellar"
        supply_before = state.supply[card]
        assert reducer.apply(Action.buy(0, card)).success
        reducer.apply(Action.end_phase(0))

        assert state.supply[card] == supply_before - 1
        assert card in player.discard
        assert len(player.discard) == 6
        assert len(player.hand) == 5
        assert state.current_player_idx == 1
        assert state.phase == Phase.ACTION
        state.check_conservation()
