"""
Game State - The single mutable root of a game in progress.

Design principles:
- Identity-based: every zone is an ordered list of card identities (names);
  definitions live in the Catalog and are never copied
- Atomic: each mutation either fully applies or raises EffectNoOp untouched
- Auditable: every mutation appends a LogEntry to the game log
- Conserved: for each identity, supply + player zones + trash never changes
"""

from __future__ import annotations
import logging
import random
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TYPE_CHECKING

from .errors import ConservationViolation, EffectNoOp
from ..schemas import PileInfo, PlayerInfo, StateSnapshot
from ..spec_schema.catalog import Catalog

if TYPE_CHECKING:
    from ..spec_schema.effect_dsl import Effect


logger = logging.getLogger(__name__)


class Phase(Enum):
    """Turn phases."""
    ACTION = "action"
    BUY = "buy"
    CLEANUP = "cleanup"
    GAME_OVER = "game_over"


class Zone(str, Enum):
    """Player zones. Values match the zone names used by effect scripts."""
    HAND = "hand"
    DECK = "deck"
    DISCARD = "discard"
    PLAY = "play"
    SET_ASIDE = "set_aside"


COUNTERS = ("actions", "buys", "coins")


@dataclass(frozen=True)
class LogEntry:
    """One auditable state change."""
    seq: int
    turn: int
    player: int | None
    op: str
    card: str | None = None
    detail: str = ""


@dataclass
class PendingEffect:
    """A one-shot modifier that resolves at the start of its owner's next turn."""
    effect: Effect
    source_card: str


@dataclass
class PlayerState:
    """
    State for a single player.

    The draw pile's top is index 0; the top of the discard is the last item.
    """
    player_id: int
    name: str

    hand: list[str] = field(default_factory=list)
    deck: list[str] = field(default_factory=list)
    discard: list[str] = field(default_factory=list)
    play: list[str] = field(default_factory=list)
    set_aside: list[str] = field(default_factory=list)

    actions: int = 1
    buys: int = 1
    coins: int = 0

    pending_effects: list[PendingEffect] = field(default_factory=list)

    def zone(self, zone: Zone | str) -> list[str]:
        """Get the list backing a zone."""
        return getattr(self, Zone(zone).value)

    def all_cards(self) -> list[str]:
        """Every card this player owns, across all zones."""
        return self.hand + self.deck + self.discard + self.play + self.set_aside

    def reset_counters(self) -> None:
        self.actions = 1
        self.buys = 1
        self.coins = 0


@dataclass
class GameState:
    """
    Complete game state.

    This is the canonical state that the engine operates on. Only the
    reducer and the effect resolver call the mutation methods below.
    """
    catalog: Catalog
    players: list[PlayerState] = field(default_factory=list)
    supply: dict[str, int] = field(default_factory=dict)
    trash: list[str] = field(default_factory=list)

    phase: Phase = Phase.ACTION
    turn_number: int = 1
    current_player_idx: int = 0
    empty_piles_to_end: int = 3

    seed: int | None = None
    rng: random.Random = field(default_factory=random.Random)

    log: list[LogEntry] = field(default_factory=list)
    initial_totals: dict[str, int] = field(default_factory=dict)

    @property
    def current_player(self) -> PlayerState:
        return self.players[self.current_player_idx]

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def is_game_over(self) -> bool:
        return self.phase == Phase.GAME_OVER

    def get_player(self, player_id: int) -> PlayerState:
        return self.players[player_id]

    def other_players(self, player_id: int) -> list[PlayerState]:
        """All other players in turn order, starting after ``player_id``."""
        n = len(self.players)
        return [self.players[(player_id + i) % n] for i in range(1, n)]

    def empty_piles(self) -> int:
        """Number of Supply piles at zero."""
        return sum(1 for count in self.supply.values() if count == 0)

    # ========================================================================
    # Log
    # ========================================================================

    def _record(
        self,
        op: str,
        player: int | None,
        card: str | None = None,
        detail: str = "",
    ) -> LogEntry:
        entry = LogEntry(
            seq=len(self.log),
            turn=self.turn_number,
            player=player,
            op=op,
            card=card,
            detail=detail,
        )
        self.log.append(entry)
        logger.debug("log %d: p%s %s %s %s", entry.seq, player, op, card or "", detail)
        return entry

    def record_event(self, op: str, player: int | None = None, detail: str = "") -> None:
        """Log a non-mutating event (phase change, reveal, decision)."""
        self._record(op, player, detail=detail)

    def record_noop(self, player: int | None, reason: str, card: str | None = None) -> None:
        """Log an EffectNoOp that the resolver absorbed."""
        self._record("noop", player, card=card, detail=reason)

    # ========================================================================
    # Atomic mutations
    # ========================================================================

    def move_card(self, player_id: int, card: str, src: Zone | str, dst: Zone | str) -> None:
        """
        Move one copy of ``card`` between two of a player's zones.

        Moving to the deck puts the card on top.
        """
        player = self.players[player_id]
        src_zone = player.zone(src)
        if card not in src_zone:
            raise EffectNoOp(f"'{card}' is not in {Zone(src).value}")
        src_zone.remove(card)
        self._put(player, card, Zone(dst))
        self._record("move", player_id, card, f"{Zone(src).value}->{Zone(dst).value}")

    def move_to_trash(self, player_id: int, card: str, src: Zone | str) -> None:
        player = self.players[player_id]
        src_zone = player.zone(src)
        if card not in src_zone:
            raise EffectNoOp(f"'{card}' is not in {Zone(src).value}")
        src_zone.remove(card)
        self.trash.append(card)
        self._record("trash", player_id, card, f"from {Zone(src).value}")

    def gain_from_supply(self, player_id: int, card: str, dst: Zone | str = Zone.DISCARD) -> None:
        """Move one card from its Supply pile to a player's zone."""
        if card not in self.supply:
            raise EffectNoOp(f"'{card}' is not in supply")
        if self.supply[card] <= 0:
            raise EffectNoOp(f"'{card}' pile empty")
        self.supply[card] -= 1
        self._put(self.players[player_id], card, Zone(dst))
        self._record("gain", player_id, card, f"to {Zone(dst).value}")

    def adjust_counter(self, player_id: int, name: str, delta: int) -> None:
        """Change a turn counter (actions, buys, coins). Counters never go negative."""
        if name not in COUNTERS:
            raise ValueError(f"Unknown counter: {name}")
        player = self.players[player_id]
        value = getattr(player, name) + delta
        if value < 0:
            raise EffectNoOp(f"not enough {name}")
        setattr(player, name, value)
        self._record(name, player_id, detail=f"{delta:+d} -> {value}")

    def draw(self, player_id: int, n: int) -> list[str]:
        """
        Draw up to ``n`` cards into hand.

        When the draw pile runs out mid-draw the discard is shuffled into it.
        Returns the cards drawn, which is fewer than ``n`` only when both the
        draw pile and discard are exhausted.
        """
        player = self.players[player_id]
        drawn: list[str] = []
        for _ in range(n):
            if not player.deck:
                if not player.discard:
                    break
                self.shuffle_discard_into_deck(player_id)
            card = player.deck.pop(0)
            player.hand.append(card)
            drawn.append(card)
        if drawn:
            self._record("draw", player_id, detail=", ".join(drawn))
        if len(drawn) < n:
            self._record("draw_short", player_id, detail=f"drew {len(drawn)} of {n}")
        return drawn

    def shuffle_discard_into_deck(self, player_id: int) -> None:
        """Put a seeded permutation of the discard pile under the draw pile."""
        player = self.players[player_id]
        shuffled = list(player.discard)
        self.rng.shuffle(shuffled)
        player.discard.clear()
        player.deck.extend(shuffled)
        self._record("shuffle", player_id, detail=f"{len(shuffled)} cards")

    def discard_draw_pile(self, player_id: int) -> None:
        """Put the whole draw pile into the discard pile."""
        player = self.players[player_id]
        if not player.deck:
            raise EffectNoOp("draw pile is empty")
        moved = len(player.deck)
        player.discard.extend(player.deck)
        player.deck.clear()
        self._record("discard_deck", player_id, detail=f"{moved} cards")

    def _put(self, player: PlayerState, card: str, dst: Zone) -> None:
        if dst == Zone.DECK:
            player.deck.insert(0, card)
        else:
            player.zone(dst).append(card)

    # ========================================================================
    # Invariants and observation
    # ========================================================================

    def card_totals(self) -> Counter:
        """Count every identity across supply, player zones and trash."""
        totals: Counter = Counter()
        for card, count in self.supply.items():
            totals[card] += count
        for player in self.players:
            totals.update(player.all_cards())
        totals.update(self.trash)
        return totals

    def record_initial_totals(self) -> None:
        """Fix the conservation baseline. Called once by setup."""
        self.initial_totals = dict(self.card_totals())

    def check_conservation(self) -> None:
        """Raise ConservationViolation if any identity's total drifted."""
        totals = self.card_totals()
        for card in set(self.initial_totals) | set(totals):
            expected = self.initial_totals.get(card, 0)
            actual = totals.get(card, 0)
            if expected != actual:
                logger.error("Conservation violated for %s: %d != %d", card, actual, expected)
                raise ConservationViolation(card, expected, actual, self.dump())

    def dump(self) -> dict[str, Any]:
        """Full plain-data dump for diagnostics."""
        return {
            "turn_number": self.turn_number,
            "phase": self.phase.value,
            "current_player_idx": self.current_player_idx,
            "supply": dict(self.supply),
            "trash": list(self.trash),
            "players": [
                {
                    "player_id": p.player_id,
                    "name": p.name,
                    "hand": list(p.hand),
                    "deck": list(p.deck),
                    "discard": list(p.discard),
                    "play": list(p.play),
                    "set_aside": list(p.set_aside),
                    "actions": p.actions,
                    "buys": p.buys,
                    "coins": p.coins,
                }
                for p in self.players
            ],
            "initial_totals": dict(self.initial_totals),
        }

    def snapshot(self) -> StateSnapshot:
        """Read-only copy of the observable state."""
        return StateSnapshot(
            turn_number=self.turn_number,
            phase=self.phase.value,
            current_player_idx=self.current_player_idx,
            players=[
                PlayerInfo(
                    player_id=p.player_id,
                    name=p.name,
                    is_current_turn=p.player_id == self.current_player_idx,
                    hand=list(p.hand),
                    play=list(p.play),
                    set_aside=list(p.set_aside),
                    deck_count=len(p.deck),
                    discard_count=len(p.discard),
                    discard_top=p.discard[-1] if p.discard else None,
                    actions=p.actions,
                    buys=p.buys,
                    coins=p.coins,
                    pending_effects=len(p.pending_effects),
                )
                for p in self.players
            ],
            supply=[
                PileInfo(card=card, count=count, cost=self.catalog.cost(card))
                for card, count in self.supply.items()
            ],
            trash=list(self.trash),
            empty_piles=self.empty_piles(),
            log_length=len(self.log),
            game_over=self.is_game_over,
        )
