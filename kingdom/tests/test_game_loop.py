"""
Integration tests: whole matches, records and replays.

Tests:
- Matches between policies run to completion with conservation checked
- Match records survive a JSON round trip
- Replays reproduce the state and log exactly, abandoned decisions included
"""

import json

import pytest

from ..bots.policy import BotDecision, FirstLegalPolicy, RandomPolicy
from ..config import GameConfig
from ..engine_core.action import Action, ActionType
from ..engine_core.decision import DecisionResponse
from ..engine_core.state import Phase
from ..session import GameLoop, MatchRecord, ReplayDivergence, replay


class BigMoneyPolicy(FirstLegalPolicy):
    """Plays all treasures, then buys the best of Province, Gold or Silver."""

    PRIORITY = ["Province", "Gold", "Silver"]

    def select_action(self, state, legal_actions):
        by_key = {(a.action_type, a.card): a for a in legal_actions}
        all_treasures = by_key.get((ActionType.PLAY_ALL_TREASURES, None))
        if all_treasures is not None:
            return BotDecision(all_treasures)
        for card in self.PRIORITY:
            buy = by_key.get((ActionType.BUY, card))
            if buy is not None:
                return BotDecision(buy)
        return BotDecision(by_key[(ActionType.END_PHASE, None)])


class StubbornChapelPolicy(FirstLegalPolicy):
    """Buys one Chapel, plays it whenever it can, and never answers a choice legally."""

    def select_action(self, state, legal_actions):
        by_key = {(a.action_type, a.card): a for a in legal_actions}
        owns_chapel = "Chapel" in state.current_player.all_cards()
        for key in [
            (ActionType.PLAY_ACTION, "Chapel"),
            (ActionType.PLAY_ALL_TREASURES, None),
        ]:
            if key in by_key:
                return BotDecision(by_key[key])
        if not owns_chapel and (ActionType.BUY, "Chapel") in by_key:
            return BotDecision(by_key[(ActionType.BUY, "Chapel")])
        return BotDecision(by_key[(ActionType.END_PHASE, None)])

    def select_choice(self, state, request):
        return DecisionResponse.of("Platinum")


class TestMatches:
    """Tests for full matches."""

    def test_big_money_finishes(self):
        loop = GameLoop(GameConfig(seed=11), [BigMoneyPolicy(), BigMoneyPolicy()])

        result = loop.run(max_turns=200)

        assert result.finished
        assert loop.state.phase == Phase.GAME_OVER
        assert loop.state.supply["Province"] == 0
        assert result.winners
        assert sum(p.all_cards().count("Province") for p in loop.state.players) == 8

    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_random_play_conserves_cards(self, seed):
        """Random legal play, including every card script, never breaks conservation."""
        kingdom = [
            "Throne Room", "Feast", "Militia", "Moat", "Witch",
            "Chapel", "Remodel", "Caravan", "Poacher", "Bureaucrat",
        ]
        config = GameConfig(player_names=["A", "B", "C"], kingdom=kingdom, seed=seed)
        policies = [RandomPolicy(seed * 10 + i) for i in range(3)]
        loop = GameLoop(config, policies)

        loop.run(max_turns=40)

        loop.state.check_conservation()
        assert loop.record.actions

    def test_policy_count_must_match(self):
        with pytest.raises(ValueError):
            GameLoop(GameConfig(), [FirstLegalPolicy()])

    def test_turn_limit(self):
        loop = GameLoop(GameConfig(seed=5), [FirstLegalPolicy(), FirstLegalPolicy()])

        result = loop.run(max_turns=3)

        assert not result.finished
        assert result.turns == 4
        assert result.winners == []

    def test_rejected_actions_are_not_recorded(self):
        loop = GameLoop(GameConfig(seed=5), [FirstLegalPolicy(), FirstLegalPolicy()])

        result = loop.apply(Action.buy(0, "Province"))

        assert not result.success
        assert loop.record.actions == []


class TestReplay:
    """Tests for records and replay."""

    def play_random(self, seed=21, turns=25):
        kingdom = [
            "Cellar", "Chancellor", "Throne Room", "Militia", "Moat",
            "Mine", "Artisan", "Council Room", "Workshop", "Moneylender",
        ]
        config = GameConfig(kingdom=kingdom, seed=seed)
        loop = GameLoop(config, [RandomPolicy(seed + 1), RandomPolicy(seed + 2)])
        loop.run(max_turns=turns)
        return loop

    def test_replay_reproduces_log(self):
        original = self.play_random()

        replayed = replay(original.record)

        assert replayed.state.log == original.state.log
        assert replayed.state.snapshot() == original.state.snapshot()

    def test_record_json_round_trip(self):
        original = self.play_random(seed=8)
        data = json.loads(json.dumps(original.record.to_dict()))

        record = MatchRecord.from_dict(data)
        replayed = replay(record)

        assert record.seed == original.record.seed
        assert replayed.state.log == original.state.log

    def test_unseeded_match_is_replayable(self):
        """A missing seed is filled in at setup and kept in the record."""
        loop = GameLoop(GameConfig(), [FirstLegalPolicy(), FirstLegalPolicy()])
        loop.run(max_turns=2)

        assert loop.record.config.seed == loop.state.seed
        assert replay(loop.record).state.log == loop.state.log

    def test_divergence(self):
        original = self.play_random(turns=2)
        record = original.record
        record.actions.insert(0, Action.buy(0, "Province"))

        with pytest.raises(ReplayDivergence):
            replay(record)

    def test_abandoned_decisions_are_recorded_and_replayed(self):
        """A play whose choice was abandoned is kept in the record and replays identically."""
        kingdom = [
            "Throne Room", "Feast", "Militia", "Moat", "Witch",
            "Chapel", "Remodel", "Caravan", "Poacher", "Bureaucrat",
        ]
        config = GameConfig(kingdom=kingdom, seed=13, max_decision_retries=0)
        loop = GameLoop(config, [StubbornChapelPolicy(), StubbornChapelPolicy()])

        loop.run(max_turns=6)

        assert any(d.abandoned for d in loop.record.decisions)
        assert Action.play_action(0, "Chapel") in loop.record.actions
        assert loop.state.trash == []
        loop.state.check_conservation()

        data = json.loads(json.dumps(loop.record.to_dict()))
        replayed = replay(MatchRecord.from_dict(data))

        assert replayed.state.log == loop.state.log
