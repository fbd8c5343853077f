"""
Reaction Window - The interrupt offered to an Attack's target.

A window moves CLOSED -> OPEN -> RESOLVED exactly once. Opening collects the
Reaction cards in the target's hand; if there are any, the target gets one
combined reveal request (reveal one, or decline with an empty response).
A reveal request the protocol abandons counts as a decline.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, TYPE_CHECKING

from .decision import DecisionKind, DecisionRequest, DecisionResponse
from .errors import InvalidDecisionResponse

if TYPE_CHECKING:
    from .decision import DecisionProtocol
    from .state import GameState
    from ..spec_schema.effect_dsl import Effect


logger = logging.getLogger(__name__)


class WindowState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    RESOLVED = "resolved"


@dataclass
class ReactionWindow:
    """One target's chance to respond to one Attack."""
    target_id: int
    attacker_id: int
    attack_card: str
    state: WindowState = WindowState.CLOSED
    options: tuple[str, ...] = ()
    revealed: str | None = None
    shielded: bool = False

    def open(self, game_state: GameState) -> tuple[str, ...]:
        """Collect the Reaction cards the target could reveal."""
        if self.state != WindowState.CLOSED:
            raise RuntimeError(f"Reaction window is already {self.state.value}")
        catalog = game_state.catalog
        hand = game_state.get_player(self.target_id).hand
        self.options = tuple(
            card for card in hand
            if catalog.card(card).is_reaction and catalog.card(card).reaction is not None
        )
        self.state = WindowState.OPEN
        return self.options

    def run(
        self,
        game_state: GameState,
        protocol: DecisionProtocol,
        run_reaction: Callable[[Effect, int, str], None] | None = None,
    ) -> bool:
        """
        Open, ask, apply and resolve the window.

        ``run_reaction(effect, player_id, card)`` executes a revealed
        reaction's own script. Returns True if the target is shielded.
        """
        options = self.open(game_state)
        if options:
            try:
                response = protocol.request(DecisionRequest(
                    player_id=self.target_id,
                    kind=DecisionKind.REVEAL_REACTION,
                    prompt=f"Reveal a Reaction to {self.attack_card}?",
                    options=options,
                    min_choices=0,
                    max_choices=1,
                    source_card=self.attack_card,
                ))
            except InvalidDecisionResponse:
                logger.warning("Player %d abandoned the reveal against %s", self.target_id, self.attack_card)
                response = DecisionResponse.decline()
            if response.choices:
                self._apply(game_state, response.choices[0], run_reaction)
        self.state = WindowState.RESOLVED
        return self.shielded

    def _apply(
        self,
        game_state: GameState,
        card: str,
        run_reaction: Callable[[Effect, int, str], None] | None,
    ) -> None:
        self.revealed = card
        reaction = game_state.catalog.card(card).reaction
        game_state.record_event("reveal", self.target_id, f"{card} against {self.attack_card}")
        logger.info("Player %d reveals %s against %s", self.target_id, card, self.attack_card)

        if reaction.effect is not None and run_reaction is not None:
            run_reaction(reaction.effect, self.target_id, card)
        if reaction.negates_attack:
            self.shielded = True
