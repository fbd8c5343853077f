"""
Decision Protocol - How the engine asks drivers to make choices.

The resolver never decides anything on a player's behalf. Whenever a script
needs input it builds a DecisionRequest carrying the full legal option set,
hands it to the DecisionProtocol, and blocks until a valid DecisionResponse
comes back. Invalid responses are rejected and the identical request is
issued again.

Only one request is ever outstanding.
"""

from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Sequence, TYPE_CHECKING

from .errors import InvalidDecisionResponse

if TYPE_CHECKING:
    from .state import GameState


logger = logging.getLogger(__name__)

YES = "yes"
NO = "no"


class DecisionKind(Enum):
    """
    Kinds of decision a player can be asked for.

    The base set only issues CHOOSE_CARDS, YES_NO and REVEAL_REACTION.
    CHOOSE_ORDER and CHOOSE_PLAYER are validated and answered by every
    policy so that catalog extensions can build requests of those kinds.
    """
    CHOOSE_CARDS = "choose_cards"  # pick min..max cards from a multiset
    CHOOSE_ORDER = "choose_order"  # return every option, in a chosen order
    YES_NO = "yes_no"
    CHOOSE_PLAYER = "choose_player"
    REVEAL_REACTION = "reveal_reaction"  # pick 0 or 1 Reaction to reveal


@dataclass(frozen=True)
class DecisionRequest:
    """
    A choice that must be made by a player.

    ``options`` is a multiset: the same identity appears once per copy the
    player could pick.
    """
    player_id: int
    kind: DecisionKind
    prompt: str
    options: tuple[Any, ...]
    min_choices: int = 1
    max_choices: int = 1
    source_card: str | None = None

    @property
    def optional(self) -> bool:
        return self.min_choices == 0

    @classmethod
    def yes_no(cls, player_id: int, prompt: str, source_card: str | None = None) -> DecisionRequest:
        return cls(
            player_id=player_id,
            kind=DecisionKind.YES_NO,
            prompt=prompt,
            options=(YES, NO),
            min_choices=1,
            max_choices=1,
            source_card=source_card,
        )


@dataclass(frozen=True)
class DecisionResponse:
    """The answer to a DecisionRequest: the chosen options, in order."""
    choices: tuple[Any, ...] = ()

    @classmethod
    def of(cls, *choices: Any) -> DecisionResponse:
        return cls(choices=tuple(choices))

    @classmethod
    def yes(cls) -> DecisionResponse:
        return cls(choices=(YES,))

    @classmethod
    def no(cls) -> DecisionResponse:
        return cls(choices=(NO,))

    @classmethod
    def decline(cls) -> DecisionResponse:
        return cls(choices=())

    @property
    def is_yes(self) -> bool:
        return self.choices == (YES,)


class DecisionSource(ABC):
    """
    Anything that can answer decision requests: a bot, a console, a script.

    ``state`` is passed for observation only; sources must not mutate it.
    """

    @abstractmethod
    def request(self, request: DecisionRequest, state: GameState) -> DecisionResponse:
        """Answer a decision request."""
        pass


def validate_response(request: DecisionRequest, response: DecisionResponse | None) -> None:
    """Raise InvalidDecisionResponse unless ``response`` legally answers ``request``."""
    if not isinstance(response, DecisionResponse):
        raise InvalidDecisionResponse(request, response, "not a DecisionResponse")

    choices = response.choices

    if request.kind == DecisionKind.YES_NO:
        if len(choices) != 1 or choices[0] not in (YES, NO):
            raise InvalidDecisionResponse(request, response, "expected exactly one of yes/no")
        return

    if request.kind == DecisionKind.CHOOSE_ORDER:
        if Counter(choices) != Counter(request.options):
            raise InvalidDecisionResponse(request, response, "not a permutation of the options")
        return

    if len(choices) < request.min_choices:
        raise InvalidDecisionResponse(
            request, response, f"chose {len(choices)}, need at least {request.min_choices}"
        )
    if len(choices) > request.max_choices:
        raise InvalidDecisionResponse(
            request, response, f"chose {len(choices)}, at most {request.max_choices} allowed"
        )

    available = Counter(request.options)
    for choice, count in Counter(choices).items():
        if available[choice] < count:
            raise InvalidDecisionResponse(request, response, f"'{choice}' is not a legal option")


class DecisionProtocol:
    """
    Routes decision requests to per-player sources and enforces legality.

    ``max_retries`` bounds how many invalid responses are tolerated for one
    request; None means re-issue forever. When exceeded, the request is
    logged as abandoned, listeners are told with a response of None, and
    the last InvalidDecisionResponse propagates.
    """

    def __init__(
        self,
        sources: Mapping[int, DecisionSource] | Sequence[DecisionSource],
        state: GameState,
        max_retries: int | None = None,
    ):
        if isinstance(sources, Mapping):
            self.sources = dict(sources)
        else:
            self.sources = dict(enumerate(sources))
        self.state = state
        self.max_retries = max_retries
        self.listeners: list[Callable[[DecisionRequest, DecisionResponse | None], None]] = []
        self._outstanding: DecisionRequest | None = None

    def add_listener(self, listener: Callable[[DecisionRequest, DecisionResponse | None], None]) -> None:
        """
        Call ``listener`` with every accepted request/response pair.

        An abandoned request is passed with a response of None.
        """
        self.listeners.append(listener)

    def request(self, request: DecisionRequest) -> DecisionResponse:
        """Issue ``request`` until a valid response arrives."""
        if self._outstanding is not None:
            raise RuntimeError("A decision request is already outstanding")

        source = self.sources.get(request.player_id)
        if source is None:
            raise KeyError(f"No decision source for player {request.player_id}")

        self._outstanding = request
        rejected = 0
        try:
            while True:
                response = source.request(request, self.state)
                try:
                    validate_response(request, response)
                except InvalidDecisionResponse as e:
                    rejected += 1
                    logger.warning(
                        "Player %d gave an invalid response (%d): %s",
                        request.player_id, rejected, e.reason,
                    )
                    if self.max_retries is not None and rejected > self.max_retries:
                        self._abandon(request, rejected)
                        raise
                    continue
                break
        finally:
            self._outstanding = None

        logger.debug("Player %d answered '%s' with %s", request.player_id, request.prompt, response.choices)
        self.state.record_event(
            "decision",
            request.player_id,
            f"{request.kind.value}: {', '.join(str(c) for c in response.choices) or '-'}",
        )
        for listener in self.listeners:
            listener(request, response)
        return response

    def _abandon(self, request: DecisionRequest, rejected: int) -> None:
        logger.error(
            "Player %d gave %d invalid responses to '%s'; abandoning the request",
            request.player_id, rejected, request.prompt,
        )
        self.state.record_event("decision", request.player_id, f"{request.kind.value}: abandoned")
        for listener in self.listeners:
            listener(request, None)
