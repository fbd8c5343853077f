"""
Reducer - Applies top-level actions to the game state.

The reducer is the turn-phase state machine:

    Action -> Buy -> Cleanup -> next player's Action ... -> GameOver

Design principles:
- Validates before applying: an illegal action raises IllegalMove
  internally and comes back as a failed ActionResult, with nothing mutated
- Cleanup is not a player action; it runs automatically when the Buy phase ends
- Delegates card scripts to EffectResolver
- The terminal condition is only checked at turn boundaries
"""

from __future__ import annotations
import logging
from collections import Counter
from typing import Callable

from .action import Action, ActionResult, ActionType
from .action_generator import ActionGenerator
from .decision import DecisionProtocol
from .effect_resolver import EffectReport, EffectResolver
from .errors import IllegalMove
from .state import GameState, Phase, Zone


logger = logging.getLogger(__name__)


class Reducer:
    """
    Reducer applies actions to a live game state.

    Owns the EffectResolver for ``state``; the state itself holds all game
    data.
    """

    def __init__(
        self,
        state: GameState,
        protocol: DecisionProtocol,
        hand_size: int = 5,
        check_conservation: bool = True,
    ):
        self.state = state
        self.protocol = protocol
        self.hand_size = hand_size
        self.check_conservation = check_conservation
        self.catalog = state.catalog
        self.resolver = EffectResolver(state, protocol)
        self.generator = ActionGenerator(catalog=state.catalog)
        self._handlers: dict[ActionType, Callable[[Action], ActionResult]] = {
            ActionType.PLAY_ACTION: self._handle_play_action,
            ActionType.PLAY_TREASURE: self._handle_play_treasure,
            ActionType.PLAY_ALL_TREASURES: self._handle_play_all_treasures,
            ActionType.BUY: self._handle_buy,
            ActionType.END_PHASE: self._handle_end_phase,
        }

    def apply(self, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult; failures leave the state untouched.
        """
        try:
            self._validate_action(action)
        except IllegalMove as e:
            logger.warning("Illegal move %s by player %s: %s", action.describe(), action.player_id, e.reason)
            return ActionResult.failure(e.reason, error_code=e.code)

        logger.debug("Player %d: %s", action.player_id, action.describe())
        result = self._handlers[action.action_type](action)

        if self.check_conservation:
            self.state.check_conservation()
        return result

    def _validate_action(self, action: Action) -> None:
        """Raise IllegalMove unless ``action`` is legal right now."""
        state = self.state

        if state.phase == Phase.GAME_OVER:
            raise IllegalMove("Game is over - no actions allowed", "GAME_OVER")

        if action.player_id != state.current_player_idx:
            raise IllegalMove(f"Not player {action.player_id}'s turn", "NOT_YOUR_TURN")

        player = state.current_player
        kind = action.action_type
        card = action.card

        if kind == ActionType.END_PHASE:
            return

        if kind == ActionType.PLAY_ACTION:
            if state.phase != Phase.ACTION:
                raise IllegalMove("Action cards can only be played in the Action phase", "WRONG_PHASE")
            if player.actions <= 0:
                raise IllegalMove("No actions remaining", "NO_ACTIONS")
            self._require_in_hand(card)
            if not self.catalog.card(card).is_action:
                raise IllegalMove(f"{card} is not an Action", "NOT_AN_ACTION")
            return

        if state.phase != Phase.BUY:
            raise IllegalMove(f"{kind.value} is only legal in the Buy phase", "WRONG_PHASE")

        if kind == ActionType.PLAY_TREASURE:
            self._require_in_hand(card)
            if not self.catalog.card(card).is_treasure:
                raise IllegalMove(f"{card} is not a Treasure", "NOT_A_TREASURE")
        elif kind == ActionType.PLAY_ALL_TREASURES:
            if not any(self.catalog.card(c).is_treasure for c in player.hand):
                raise IllegalMove("No Treasures in hand", "NOT_A_TREASURE")
        elif kind == ActionType.BUY:
            if player.buys <= 0:
                raise IllegalMove("No buys remaining", "NO_BUYS")
            if card not in state.supply:
                raise IllegalMove(f"{card} is not in the Supply", "NOT_IN_SUPPLY")
            if state.supply[card] == 0:
                raise IllegalMove(f"The {card} pile is empty", "EMPTY_PILE")
            if self.catalog.cost(card) > player.coins:
                raise IllegalMove(
                    f"{card} costs {self.catalog.cost(card)}, only {player.coins} coins available",
                    "NOT_ENOUGH_MONEY",
                )

    def _require_in_hand(self, card: str | None) -> None:
        if card is None or card not in self.catalog:
            raise IllegalMove(f"Unknown card: {card}", "UNKNOWN_CARD")
        if card not in self.state.current_player.hand:
            raise IllegalMove(f"{card} is not in hand", "NOT_IN_HAND")

    # ========================================================================
    # Handlers
    # ========================================================================

    def _handle_play_action(self, action: Action) -> ActionResult:
        pid, card = action.player_id, action.card
        self.state.adjust_counter(pid, "actions", -1)
        self.state.move_card(pid, card, Zone.HAND, Zone.PLAY)
        report = self.resolver.resolve_card(pid, card)
        return ActionResult.success_with_state(self.state, changes=[f"played {card}"], reports=[report])

    def _handle_play_treasure(self, action: Action) -> ActionResult:
        report = self._play_treasure(action.player_id, action.card)
        changes = [f"played {action.card}"]
        return ActionResult.success_with_state(self.state, changes, [report] if report is not None else None)

    def _handle_play_all_treasures(self, action: Action) -> ActionResult:
        pid = action.player_id
        treasures = [c for c in self.state.current_player.hand if self.catalog.card(c).is_treasure]
        reports = []
        for card in treasures:
            report = self._play_treasure(pid, card)
            if report is not None:
                reports.append(report)
        return ActionResult.success_with_state(self.state, [f"played {c}" for c in treasures], reports)

    def _play_treasure(self, pid: int, card: str) -> EffectReport | None:
        definition = self.catalog.card(card)
        self.state.move_card(pid, card, Zone.HAND, Zone.PLAY)
        self.state.adjust_counter(pid, "coins", definition.treasure_value)
        if definition.effect is not None:
            return self.resolver.resolve_card(pid, card)
        return None

    def _handle_buy(self, action: Action) -> ActionResult:
        pid, card = action.player_id, action.card
        self.state.adjust_counter(pid, "buys", -1)
        self.state.adjust_counter(pid, "coins", -self.catalog.cost(card))
        self.state.gain_from_supply(pid, card, Zone.DISCARD)
        logger.info("Player %d buys %s", pid, card)
        return ActionResult.success_with_state(self.state, changes=[f"bought {card}"])

    def _handle_end_phase(self, action: Action) -> ActionResult:
        if self.state.phase == Phase.ACTION:
            self._enter_phase(Phase.BUY)
            return ActionResult.success_with_state(self.state, changes=["buy phase"])

        reports = self._cleanup()
        return ActionResult.success_with_state(self.state, changes=["cleanup"], reports=reports)

    # ========================================================================
    # Phase transitions
    # ========================================================================

    def _enter_phase(self, phase: Phase) -> None:
        self.state.phase = phase
        self.state.record_event("phase", self.state.current_player_idx, phase.value)
        logger.info("Turn %d, player %d: %s phase", self.state.turn_number, self.state.current_player_idx, phase.value)

    def _cleanup(self) -> list[EffectReport]:
        """
        Run Cleanup for the current player and start the next turn.

        Duration cards with a pending next-turn effect go to set-aside
        instead of the discard pile. The outgoing and the incoming player
        both leave Cleanup with actions=1, buys=1, coins=0.
        """
        state = self.state
        self._enter_phase(Phase.CLEANUP)
        player = state.current_player
        pid = player.player_id

        waiting = Counter(p.source_card for p in player.pending_effects)
        for card in list(player.play):
            if waiting[card] > 0 and self.catalog.card(card).is_duration:
                waiting[card] -= 1
                state.move_card(pid, card, Zone.PLAY, Zone.SET_ASIDE)
            else:
                state.move_card(pid, card, Zone.PLAY, Zone.DISCARD)
        for card in list(player.hand):
            state.move_card(pid, card, Zone.HAND, Zone.DISCARD)

        state.draw(pid, self.hand_size)
        player.reset_counters()
        state.record_event("reset", pid, "actions=1 buys=1 coins=0")

        state.current_player_idx = (pid + 1) % state.num_players
        if state.current_player_idx == 0:
            state.turn_number += 1

        # Reaction scripts can move counters off-turn
        incoming = state.current_player
        if incoming.player_id != pid:
            incoming.reset_counters()
            state.record_event("reset", incoming.player_id, "actions=1 buys=1 coins=0")

        reports = []
        if state.current_player.pending_effects:
            reports.append(self.resolver.resolve_pending(state.current_player_idx))

        if self.generator.is_game_over(state):
            self._end_game()
        else:
            self._enter_phase(Phase.ACTION)
        return reports

    def _end_game(self) -> None:
        state = self.state
        state.phase = Phase.GAME_OVER
        scores = self.generator.scores(state)
        state.record_event("game_over", None, ", ".join(f"p{pid}={s}" for pid, s in scores.items()))
        logger.info("Game over after turn %d: %s", state.turn_number, scores)
