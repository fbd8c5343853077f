"""
Bot Policy - Reference decision sources.

A BotPolicy answers two kinds of question:
- Which top-level action to take (select_action)
- How to answer a decision request raised mid-script (select_choice)

Every policy is also a DecisionSource, so it can be handed straight to the
DecisionProtocol. None of these policies plays well; they exist to drive the
engine in tests, simulations, replays and at a terminal.
"""

from __future__ import annotations
import logging
import random
from abc import abstractmethod
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Iterable, TYPE_CHECKING

from ..engine_core.decision import (
    DecisionKind,
    DecisionRequest,
    DecisionResponse,
    DecisionSource,
    NO,
    YES,
)

if TYPE_CHECKING:
    from ..engine_core.action import Action
    from ..engine_core.state import GameState


logger = logging.getLogger(__name__)


@dataclass
class BotDecision:
    """A top-level action chosen by a policy, with an explanation for logs."""
    action: Action
    explanation: str = ""
    evaluated_actions: int = 0


class BotPolicy(DecisionSource):
    """
    Abstract base class for policies.

    Implementations range from trivial baselines to interactive prompts.
    """

    @abstractmethod
    def select_action(self, state: GameState, legal_actions: list[Action]) -> BotDecision:
        """
        Select an action from the legal actions.

        Args:
            state: Current game state (read only)
            legal_actions: List of legal actions to choose from

        Returns:
            BotDecision with the selected action
        """
        pass

    @abstractmethod
    def select_choice(self, state: GameState, request: DecisionRequest) -> DecisionResponse:
        """Answer a decision request raised during effect resolution."""
        pass

    def request(self, request: DecisionRequest, state: GameState) -> DecisionResponse:
        return self.select_choice(state, request)

    def get_name(self) -> str:
        """Get the policy's name/identifier."""
        return self.__class__.__name__


class RandomPolicy(BotPolicy):
    """
    Random policy - selects actions and answers uniformly at random.

    Used for:
    - Testing (fuzzing the engine with legal but odd play)
    - Baseline comparison
    """

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def select_action(self, state: GameState, legal_actions: list[Action]) -> BotDecision:
        if not legal_actions:
            raise ValueError("No legal actions available")

        action = self.rng.choice(legal_actions)
        return BotDecision(
            action=action,
            explanation="Selected randomly",
            evaluated_actions=len(legal_actions),
        )

    def select_choice(self, state: GameState, request: DecisionRequest) -> DecisionResponse:
        options = list(request.options)
        if request.kind == DecisionKind.YES_NO:
            return DecisionResponse.of(self.rng.choice([YES, NO]))
        if request.kind == DecisionKind.CHOOSE_ORDER:
            self.rng.shuffle(options)
            return DecisionResponse.of(*options)

        upper = min(request.max_choices, len(options))
        count = self.rng.randint(min(request.min_choices, upper), upper)
        return DecisionResponse.of(*self.rng.sample(options, count))


class FirstLegalPolicy(BotPolicy):
    """
    First-legal policy - always the first legal action, always the fewest options.

    Used for:
    - Deterministic testing
    - Baseline comparison
    """

    def select_action(self, state: GameState, legal_actions: list[Action]) -> BotDecision:
        if not legal_actions:
            raise ValueError("No legal actions available")

        return BotDecision(
            action=legal_actions[0],
            explanation="Selected first legal action",
            evaluated_actions=1,
        )

    def select_choice(self, state: GameState, request: DecisionRequest) -> DecisionResponse:
        if request.kind == DecisionKind.YES_NO:
            return DecisionResponse.yes()
        if request.kind == DecisionKind.CHOOSE_ORDER:
            return DecisionResponse.of(*request.options)
        return DecisionResponse.of(*request.options[:request.min_choices])


class ScriptExhausted(LookupError):
    """Raised when a ScriptedPolicy runs out of recorded moves."""


class ScriptedPolicy(BotPolicy):
    """
    Plays back a fixed script of actions and decision responses.

    Used for replays and for tests that need exact control. When a queue
    runs dry the ``fallback`` policy answers, or ScriptExhausted is raised.
    """

    def __init__(
        self,
        actions: Iterable[Action] = (),
        decisions: Iterable[DecisionResponse | Iterable[Any]] = (),
        fallback: BotPolicy | None = None,
    ):
        self.actions: deque[Action] = deque(actions)
        self.decisions: deque[DecisionResponse] = deque(
            d if isinstance(d, DecisionResponse) else DecisionResponse(choices=tuple(d))
            for d in decisions
        )
        self.fallback = fallback

    def select_action(self, state: GameState, legal_actions: list[Action]) -> BotDecision:
        if self.actions:
            return BotDecision(action=self.actions.popleft(), explanation="Scripted")
        if self.fallback is not None:
            return self.fallback.select_action(state, legal_actions)
        raise ScriptExhausted("No scripted actions left")

    def select_choice(self, state: GameState, request: DecisionRequest) -> DecisionResponse:
        if self.decisions:
            return self.decisions.popleft()
        if self.fallback is not None:
            return self.fallback.select_choice(state, request)
        raise ScriptExhausted(f"No scripted decision left for '{request.prompt}'")

    @property
    def exhausted(self) -> bool:
        return not self.actions and not self.decisions


class ConsolePolicy(BotPolicy):
    """
    Interactive policy - asks a person at the terminal.

    Options are listed with numbers; the answer is one or more numbers
    separated by spaces (an empty line chooses nothing).
    """

    def __init__(
        self,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
    ):
        self.input_fn = input_fn
        self.output_fn = output_fn

    def select_action(self, state: GameState, legal_actions: list[Action]) -> BotDecision:
        if not legal_actions:
            raise ValueError("No legal actions available")

        player = state.current_player
        self.output_fn(
            f"\n{player.name} - turn {state.turn_number}, {state.phase.value} phase "
            f"(actions {player.actions}, buys {player.buys}, coins {player.coins})"
        )
        self.output_fn(f"Hand: {', '.join(player.hand) or '-'}")
        for i, action in enumerate(legal_actions, 1):
            self.output_fn(f"  {i}. {action.describe()}")

        while True:
            picked = self._read_indices("Action: ", len(legal_actions))
            if picked is not None and len(picked) == 1:
                return BotDecision(action=legal_actions[picked[0]], explanation="Chosen at console")
            self.output_fn("Enter one number.")

    def select_choice(self, state: GameState, request: DecisionRequest) -> DecisionResponse:
        name = state.get_player(request.player_id).name
        self.output_fn(f"\n{name}: {request.prompt}")
        if request.kind != DecisionKind.YES_NO:
            skip = " (empty line for none)" if request.optional else ""
            self.output_fn(f"Choose {request.min_choices} to {request.max_choices}{skip}:")
        for i, option in enumerate(request.options, 1):
            self.output_fn(f"  {i}. {option}")

        while True:
            picked = self._read_indices("> ", len(request.options))
            if picked is not None:
                return DecisionResponse.of(*(request.options[i] for i in picked))
            self.output_fn("Enter option numbers separated by spaces.")

    def _read_indices(self, prompt: str, count: int) -> list[int] | None:
        """Parse a line of 1-based option numbers; None if it does not parse."""
        line = self.input_fn(prompt).strip()
        if not line:
            return []
        try:
            picked = [int(token) - 1 for token in line.replace(",", " ").split()]
        except ValueError:
            return None
        if any(i < 0 or i >= count for i in picked):
            return None
        return picked
