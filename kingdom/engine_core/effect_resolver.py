"""
Effect Resolver - Interprets card effect scripts against the game state.

This module handles the logic of resolving card effects, including:
- Primitive steps (draw, gain, trash, counters, ...)
- Player choices bound to variables and consumed by later steps
- Repeats whose count is recomputed at every iteration
- Per-other-player effects and Attacks with reaction windows
- Duplicated plays (one card, its whole script run several times)
- Next-turn modifiers

Resolution is a synchronous depth-first walk. When a choice is needed the
resolver blocks inside the DecisionProtocol. A primitive whose precondition
fails raises EffectNoOp; the resolver logs it, records it in the report and
carries on with the next step. A decision the protocol abandons after too
many invalid responses turns the step that asked for it into a no-op too.
"""

from __future__ import annotations
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable

from .decision import DecisionKind, DecisionProtocol, DecisionRequest
from .errors import EffectNoOp, InvalidDecisionResponse
from .reaction import ReactionWindow
from .state import GameState, PendingEffect, Zone
from ..spec_schema.effect_dsl import (
    Amount,
    AmountKind,
    AmountLike,
    CardFilter,
    ConditionKind,
    Effect,
    EffectKind,
    SOURCE_CARD,
    SUPPLY,
    sequence,
)


logger = logging.getLogger(__name__)


@dataclass
class EffectContext:
    """
    Context for one run of a script.

    ``active_player`` is whoever played the card; ``target_player`` is who
    the current steps act on (the same, except inside per-other-player).
    """
    active_player: int
    target_player: int
    source_card: str
    bindings: dict[str, list[str]] = field(default_factory=dict)
    shielded: bool = False

    def bound(self, var: str) -> list[str]:
        if var == SOURCE_CARD:
            return [self.source_card]
        return self.bindings.get(var, [])

    def for_target(self, target: int) -> EffectContext:
        """Fresh context acting on ``target`` for the same play."""
        return EffectContext(
            active_player=self.active_player,
            target_player=target,
            source_card=self.source_card,
        )


@dataclass
class StepOutcome:
    """Outcome of one step."""
    kind: EffectKind
    player: int
    applied: bool
    reason: str = ""


@dataclass
class EffectReport:
    """Aggregated outcome of one top-level play."""
    source_card: str
    player_id: int
    steps: list[StepOutcome] = field(default_factory=list)

    @property
    def applied(self) -> list[StepOutcome]:
        return [s for s in self.steps if s.applied]

    @property
    def noops(self) -> list[StepOutcome]:
        return [s for s in self.steps if not s.applied]


class EffectResolver:
    """
    Resolves effects against a live GameState.

    The resolver owns no game data; it mutates ``state`` only through the
    state's atomic operations.
    """

    def __init__(self, state: GameState, protocol: DecisionProtocol):
        self.state = state
        self.protocol = protocol
        self._report: EffectReport | None = None
        self._handlers: dict[EffectKind, Callable[[Effect, EffectContext], None]] = {
            EffectKind.DRAW: self._step_draw,
            EffectKind.PLUS_ACTIONS: self._step_counter,
            EffectKind.PLUS_BUYS: self._step_counter,
            EffectKind.PLUS_COINS: self._step_counter,
            EffectKind.GAIN: self._step_gain,
            EffectKind.TRASH: self._step_trash,
            EffectKind.DISCARD: self._step_move,
            EffectKind.TOPDECK: self._step_move,
            EffectKind.DISCARD_DOWN_TO: self._step_discard_down_to,
            EffectKind.DISCARD_DECK: self._step_discard_deck,
            EffectKind.NEXT_TURN: self._step_next_turn,
            EffectKind.REVEAL_REACTION_WINDOW: self._step_reaction_window,
            EffectKind.SEQUENCE: self._step_sequence,
            EffectKind.REPEAT: self._step_repeat,
            EffectKind.CHOOSE: self._step_choose,
            EffectKind.CONDITIONAL: self._step_conditional,
            EffectKind.PER_OTHER_PLAYER: self._step_per_other_player,
            EffectKind.DUPLICATE: self._step_duplicate,
        }

    # ========================================================================
    # Entry points
    # ========================================================================

    def resolve_card(self, player_id: int, card: str) -> EffectReport:
        """
        Run the script of ``card``, already in play, for ``player_id``.

        Returns one report covering every step of the play, including
        nested duplicated plays.
        """
        definition = self.state.catalog.card(card)
        report = EffectReport(source_card=card, player_id=player_id)
        if definition.effect is None:
            return report

        logger.info("Player %d resolves %s", player_id, card)
        outer, self._report = self._report, report
        try:
            ctx = EffectContext(active_player=player_id, target_player=player_id, source_card=card)
            self.resolve(definition.effect, ctx)
        finally:
            self._report = outer
        return report

    def resolve_pending(self, player_id: int) -> EffectReport:
        """
        Resolve a player's next-turn modifiers, then return their Duration
        cards from set-aside to play.
        """
        player = self.state.get_player(player_id)
        pending, player.pending_effects = player.pending_effects, []
        report = EffectReport(source_card="", player_id=player_id)

        outer, self._report = self._report, report
        try:
            for item in pending:
                logger.info("Player %d resolves next-turn effect of %s", player_id, item.source_card)
                ctx = EffectContext(
                    active_player=player_id,
                    target_player=player_id,
                    source_card=item.source_card,
                )
                self.resolve(item.effect, ctx)
                if item.source_card in player.set_aside:
                    self.state.move_card(player_id, item.source_card, Zone.SET_ASIDE, Zone.PLAY)
        finally:
            self._report = outer
        return report

    def resolve(self, effect: Effect, ctx: EffectContext) -> None:
        """Resolve one node. EffectNoOp and abandoned decisions are absorbed here."""
        if ctx.shielded and ctx.target_player != ctx.active_player:
            self._noop(effect, ctx, "shielded by reaction")
            return

        handler = self._handlers.get(effect.kind)
        if handler is None:
            raise ValueError(f"Unknown effect kind: {effect.kind}")

        try:
            handler(effect, ctx)
        except EffectNoOp as e:
            self._noop(effect, ctx, e.reason)
            return
        except InvalidDecisionResponse:
            # The protocol gave up on the player; the asking step does nothing.
            self._noop(effect, ctx, "decision abandoned")
            return

        if not effect.is_composite:
            self._outcome(StepOutcome(effect.kind, ctx.target_player, applied=True))

    def _noop(self, effect: Effect, ctx: EffectContext, reason: str) -> None:
        logger.debug("No-op %s for player %d: %s", effect.kind.value, ctx.target_player, reason)
        self.state.record_noop(ctx.target_player, f"{effect.kind.value}: {reason}", card=ctx.source_card)
        self._outcome(StepOutcome(effect.kind, ctx.target_player, applied=False, reason=reason))

    def _outcome(self, outcome: StepOutcome) -> None:
        if self._report is not None:
            self._report.steps.append(outcome)

    # ========================================================================
    # Amounts and filters
    # ========================================================================

    def amount(self, value: AmountLike, ctx: EffectContext) -> int:
        """Evaluate an amount against the live state."""
        if isinstance(value, int):
            return value
        if not isinstance(value, Amount):
            raise TypeError(f"Not an amount: {value!r}")

        if value.kind == AmountKind.FIXED:
            base = 0
        elif value.kind == AmountKind.BOUND_COUNT:
            base = len(ctx.bound(value.var))
        elif value.kind == AmountKind.EMPTY_PILES:
            base = self.state.empty_piles()
        elif value.kind == AmountKind.HAND_SIZE:
            base = len(self.state.get_player(ctx.target_player).hand)
        elif value.kind == AmountKind.COST_OF:
            cards = ctx.bound(value.var)
            if not cards:
                raise EffectNoOp(f"nothing bound to '{value.var}'")
            base = self.state.catalog.cost(cards[0])
        else:
            raise ValueError(f"Unknown amount kind: {value.kind}")
        return base + value.offset

    def _passes(self, card: str, card_filter: CardFilter | None, ctx: EffectContext) -> bool:
        if card_filter is None:
            return True
        definition = self.state.catalog.card(card)
        if card_filter.types and not any(definition.has_type(t) for t in card_filter.types):
            return False
        if card_filter.names and card not in card_filter.names:
            return False
        if card_filter.max_cost is not None:
            if definition.cost > self.amount(card_filter.max_cost, ctx):
                return False
        return True

    # ========================================================================
    # Primitive steps
    # ========================================================================

    def _step_draw(self, effect: Effect, ctx: EffectContext) -> None:
        count = self.amount(effect.amount, ctx)
        if count <= 0:
            raise EffectNoOp("nothing to draw")
        self.state.draw(ctx.target_player, count)

    def _step_counter(self, effect: Effect, ctx: EffectContext) -> None:
        name = {
            EffectKind.PLUS_ACTIONS: "actions",
            EffectKind.PLUS_BUYS: "buys",
            EffectKind.PLUS_COINS: "coins",
        }[effect.kind]
        self.state.adjust_counter(ctx.target_player, name, self.amount(effect.amount, ctx))

    def _step_gain(self, effect: Effect, ctx: EffectContext) -> None:
        if effect.card is not None:
            card = effect.card
        else:
            cards = ctx.bound(effect.var)
            if not cards:
                raise EffectNoOp(f"nothing bound to '{effect.var}'")
            card = cards[0]
        self.state.gain_from_supply(ctx.target_player, card, effect.destination)

    def _step_trash(self, effect: Effect, ctx: EffectContext) -> None:
        if effect.var == SOURCE_CARD:
            self.state.move_to_trash(ctx.target_player, ctx.source_card, Zone.PLAY)
            return
        cards = self._bound_in_hand(effect, ctx)
        for card in cards:
            self.state.move_to_trash(ctx.target_player, card, Zone.HAND)

    def _step_move(self, effect: Effect, ctx: EffectContext) -> None:
        dst = Zone.DISCARD if effect.kind == EffectKind.DISCARD else Zone.DECK
        if effect.var == SOURCE_CARD:
            self.state.move_card(ctx.target_player, ctx.source_card, Zone.PLAY, dst)
            return
        for card in self._bound_in_hand(effect, ctx):
            self.state.move_card(ctx.target_player, card, Zone.HAND, dst)

    def _bound_in_hand(self, effect: Effect, ctx: EffectContext) -> list[str]:
        """The cards bound to the step's variable, checked to all be in hand."""
        cards = ctx.bound(effect.var)
        if not cards:
            raise EffectNoOp(f"nothing bound to '{effect.var}'")
        hand = Counter(self.state.get_player(ctx.target_player).hand)
        for card, count in Counter(cards).items():
            if hand[card] < count:
                raise EffectNoOp(f"'{card}' is not in hand")
        return cards

    def _step_discard_down_to(self, effect: Effect, ctx: EffectContext) -> None:
        size = self.amount(effect.amount, ctx)
        hand = self.state.get_player(ctx.target_player).hand
        excess = len(hand) - size
        if excess <= 0:
            raise EffectNoOp(f"hand already at {len(hand)} cards")
        response = self.protocol.request(DecisionRequest(
            player_id=ctx.target_player,
            kind=DecisionKind.CHOOSE_CARDS,
            prompt=f"Discard down to {size} cards",
            options=tuple(hand),
            min_choices=excess,
            max_choices=excess,
            source_card=ctx.source_card,
        ))
        for card in response.choices:
            self.state.move_card(ctx.target_player, card, Zone.HAND, Zone.DISCARD)

    def _step_discard_deck(self, effect: Effect, ctx: EffectContext) -> None:
        self.state.discard_draw_pile(ctx.target_player)

    def _step_next_turn(self, effect: Effect, ctx: EffectContext) -> None:
        body = effect.children[0] if len(effect.children) == 1 else sequence(*effect.children)
        player = self.state.get_player(ctx.target_player)
        player.pending_effects.append(PendingEffect(effect=body, source_card=ctx.source_card))
        self.state.record_event("next_turn", ctx.target_player, f"from {ctx.source_card}")

    def _step_reaction_window(self, effect: Effect, ctx: EffectContext) -> None:
        if ctx.target_player == ctx.active_player:
            raise EffectNoOp("no target to react")
        ctx.shielded = self._run_window(ctx)

    def _run_window(self, ctx: EffectContext) -> bool:
        window = ReactionWindow(
            target_id=ctx.target_player,
            attacker_id=ctx.active_player,
            attack_card=ctx.source_card,
        )
        return window.run(self.state, self.protocol, self._run_reaction)

    def _run_reaction(self, effect: Effect, player_id: int, card: str) -> None:
        ctx = EffectContext(active_player=player_id, target_player=player_id, source_card=card)
        self.resolve(effect, ctx)

    # ========================================================================
    # Composite steps
    # ========================================================================

    def _step_sequence(self, effect: Effect, ctx: EffectContext) -> None:
        for child in effect.children:
            self.resolve(child, ctx)

    def _step_repeat(self, effect: Effect, ctx: EffectContext) -> None:
        i = 0
        while i < self.amount(effect.amount, ctx):
            if i >= effect.max_iterations:
                logger.warning("Repeat in %s hit its %d iteration bound", ctx.source_card, effect.max_iterations)
                break
            for child in effect.children:
                self.resolve(child, ctx)
            i += 1

    def _step_choose(self, effect: Effect, ctx: EffectContext) -> None:
        spec = effect.choice
        ctx.bindings[spec.bind] = []

        if spec.source == SUPPLY:
            candidates = [card for card, count in self.state.supply.items() if count > 0]
        else:
            candidates = list(self.state.get_player(ctx.target_player).hand)
        options = tuple(c for c in candidates if self._passes(c, spec.filter, ctx))

        if spec.max_choices is None:
            max_choices = len(options)
        else:
            max_choices = min(self.amount(spec.max_choices, ctx), len(options))
        min_choices = min(spec.min_choices, max_choices)

        if not options:
            if spec.min_choices > 0:
                raise EffectNoOp("no legal choice")
            return
        if max_choices <= 0:
            return

        response = self.protocol.request(DecisionRequest(
            player_id=ctx.target_player,
            kind=DecisionKind.CHOOSE_CARDS,
            prompt=spec.prompt or f"Choose from {spec.source}",
            options=options,
            min_choices=min_choices,
            max_choices=max_choices,
            source_card=ctx.source_card,
        ))
        ctx.bindings[spec.bind] = list(response.choices)

    def _step_conditional(self, effect: Effect, ctx: EffectContext) -> None:
        condition = effect.condition
        if condition.kind == ConditionKind.ASK:
            response = self.protocol.request(DecisionRequest.yes_no(
                ctx.target_player, condition.prompt, source_card=ctx.source_card,
            ))
            holds = response.is_yes
        elif condition.kind == ConditionKind.BOUND:
            holds = bool(ctx.bound(condition.var))
        elif condition.kind == ConditionKind.HAND_CONTAINS:
            holds = condition.card in self.state.get_player(ctx.target_player).hand
        else:
            raise ValueError(f"Unknown condition kind: {condition.kind}")

        for child in effect.children if holds else effect.else_children:
            self.resolve(child, ctx)

    def _step_per_other_player(self, effect: Effect, ctx: EffectContext) -> None:
        for target in self.state.other_players(ctx.active_player):
            target_ctx = ctx.for_target(target.player_id)
            if effect.attack:
                target_ctx.shielded = self._run_window(target_ctx)
                if target_ctx.shielded:
                    self._noop(effect, target_ctx, "shielded by reaction")
                    continue
            for child in effect.children:
                self.resolve(child, target_ctx)

    def _step_duplicate(self, effect: Effect, ctx: EffectContext) -> None:
        cards = ctx.bound(effect.var)
        if not cards:
            raise EffectNoOp(f"nothing bound to '{effect.var}'")
        card = cards[0]
        definition = self.state.catalog.card(card)
        if not definition.is_action or definition.effect is None:
            raise EffectNoOp(f"'{card}' is not an Action")

        self.state.move_card(ctx.target_player, card, Zone.HAND, Zone.PLAY)
        times = self.amount(effect.amount, ctx)
        for i in range(times):
            logger.info("Player %d plays %s (%d of %d)", ctx.target_player, card, i + 1, times)
            run_ctx = EffectContext(
                active_player=ctx.target_player,
                target_player=ctx.target_player,
                source_card=card,
            )
            self.resolve(definition.effect, run_ctx)
