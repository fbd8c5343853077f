"""
Game Loop - Drives a match from setup to game over.

The loop:
1. Ask the current player's policy for a top-level action
2. Apply it through the reducer (decisions are asked for mid-script)
3. Record every accepted action and decision response (and every decision
   abandoned after too many invalid responses)
4. Repeat until the game is over (or a turn limit is hit)

A MatchRecord holds everything needed to rebuild the match: the seed, the
config, and the ordered actions and decision responses. replay() feeds a
record back through scripted policies and yields an identical state and log.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from ..bots.policy import BotPolicy, ScriptedPolicy
from ..config import GameConfig
from ..engine_core.action import Action, ActionResult
from ..engine_core.decision import DecisionProtocol, DecisionRequest, DecisionResponse
from ..engine_core.reducer import Reducer
from ..engine_core.state import GameState
from ..games.dominion.setup import setup_game
from ..spec_schema.catalog import Catalog


logger = logging.getLogger(__name__)


class ReplayDivergence(RuntimeError):
    """Raised when a recorded action is rejected during replay."""


# Never a legal answer; replays a request the player failed to answer.
UNANSWERED = DecisionResponse(choices=(None,))


@dataclass
class DecisionRecord:
    player_id: int
    choices: tuple[Any, ...]
    abandoned: bool = False


@dataclass
class MatchRecord:
    """Everything needed to replay a match."""
    seed: int
    config: GameConfig
    actions: list[Action] = field(default_factory=list)
    decisions: list[DecisionRecord] = field(default_factory=list)

    def decisions_for(self, player_id: int) -> list[DecisionResponse]:
        """
        The responses ``player_id`` gave, in order.

        An abandoned request expands to one invalid response per attempt the
        protocol allowed, so that replay abandons it again.
        """
        attempts = (self.config.max_decision_retries or 0) + 1
        responses = []
        for d in self.decisions:
            if d.player_id != player_id:
                continue
            if d.abandoned:
                responses.extend([UNANSWERED] * attempts)
            else:
                responses.append(DecisionResponse(choices=d.choices))
        return responses

    def actions_for(self, player_id: int) -> list[Action]:
        return [a for a in self.actions if a.player_id == player_id]

    def to_dict(self) -> dict[str, Any]:
        return {
            "seed": self.seed,
            "config": self.config.model_dump(),
            "actions": [a.to_dict() for a in self.actions],
            "decisions": [
                {"player_id": d.player_id, "choices": list(d.choices), "abandoned": d.abandoned}
                for d in self.decisions
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MatchRecord:
        return cls(
            seed=data["seed"],
            config=GameConfig.model_validate(data["config"]),
            actions=[Action.from_dict(a) for a in data["actions"]],
            decisions=[
                DecisionRecord(
                    player_id=d["player_id"],
                    choices=tuple(d["choices"]),
                    abandoned=d.get("abandoned", False),
                )
                for d in data["decisions"]
            ],
        )


@dataclass
class MatchResult:
    """Outcome of a finished (or abandoned) match."""
    finished: bool
    turns: int
    scores: dict[int, int]
    winners: list[int]
    record: MatchRecord


class GameLoop:
    """
    The main game loop driver.

    Usage:
        loop = GameLoop(config, [RandomPolicy(1), FirstLegalPolicy()])
        result = loop.run(max_turns=200)
    """

    def __init__(
        self,
        config: GameConfig,
        policies: Sequence[BotPolicy],
        catalog: Catalog | None = None,
        max_failures: int = 100,
    ):
        if len(policies) != config.num_players:
            raise ValueError(f"{config.num_players} players but {len(policies)} policies")

        self.state: GameState = setup_game(config, catalog)
        self.config = config.model_copy(update={"seed": self.state.seed})
        self.policies = list(policies)
        self.protocol = DecisionProtocol(
            self.policies,
            self.state,
            max_retries=config.max_decision_retries,
        )
        self.reducer = Reducer(
            self.state,
            self.protocol,
            hand_size=config.hand_size,
            check_conservation=config.check_conservation,
        )
        self.generator = self.reducer.generator
        self.record = MatchRecord(seed=self.state.seed, config=self.config)
        self.max_failures = max_failures
        self._failures = 0
        self.protocol.add_listener(self._record_decision)

    def _record_decision(self, request: DecisionRequest, response: DecisionResponse | None) -> None:
        if response is None:
            self.record.decisions.append(DecisionRecord(request.player_id, (), abandoned=True))
        else:
            self.record.decisions.append(DecisionRecord(request.player_id, response.choices))

    @property
    def is_over(self) -> bool:
        return self.state.is_game_over

    def apply(self, action: Action) -> ActionResult:
        """Apply one action, recording it if accepted."""
        result = self.reducer.apply(action)
        if result.success:
            self.record.actions.append(action)
            self._failures = 0
        else:
            self._failures += 1
            if self._failures > self.max_failures:
                raise RuntimeError(f"{self._failures} illegal actions in a row, last: {result.error}")
        return result

    def step(self) -> ActionResult:
        """Let the current player's policy take one action."""
        state = self.state
        policy = self.policies[state.current_player_idx]
        legal = self.generator.legal_actions(state)
        decision = policy.select_action(state, legal)
        logger.debug("%s chose %s: %s", policy.get_name(), decision.action.describe(), decision.explanation)
        return self.apply(decision.action)

    def run(self, max_turns: int | None = None) -> MatchResult:
        """Play until the game ends or ``max_turns`` full rounds have passed."""
        while not self.is_over:
            if max_turns is not None and self.state.turn_number > max_turns:
                logger.info("Stopping at turn limit %d", max_turns)
                break
            self.step()
        return self.result()

    def result(self) -> MatchResult:
        return MatchResult(
            finished=self.is_over,
            turns=self.state.turn_number,
            scores=self.generator.scores(self.state),
            winners=self.generator.winners(self.state) if self.is_over else [],
            record=self.record,
        )


def replay(record: MatchRecord, catalog: Catalog | None = None) -> GameLoop:
    """
    Rebuild a match from its record.

    Returns the loop after every recorded action has been re-applied; its
    state and log are identical to the original match's.
    """
    config = record.config.model_copy(update={"seed": record.seed})
    policies = [ScriptedPolicy(decisions=record.decisions_for(i)) for i in range(config.num_players)]
    loop = GameLoop(config, policies, catalog)

    for i, action in enumerate(record.actions):
        result = loop.apply(action)
        if not result.success:
            raise ReplayDivergence(f"Recorded action {i} ({action.describe()}) rejected: {result.error}")
    return loop
