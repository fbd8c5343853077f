"""
Action Generator - Legal actions and read-only queries over a game state.

The action generator is used by:
1. Decision sources to enumerate possible moves
2. The reducer (is this action in legal_actions?)
3. The game loop to detect the end of the game and score it

Design: Generates Action objects, not just action types.
This ensures all generated actions are fully specified.
"""

from __future__ import annotations
from dataclasses import dataclass

from .state import GameState, Phase, PlayerState
from .action import Action, ActionType
from ..spec_schema.catalog import Catalog

PROVINCE = "Province"


@dataclass
class ActionGenerator:
    """
    Generates legal actions for the current game state.

    Uses the Catalog to determine card types, costs and victory points.
    """
    catalog: Catalog

    def legal_actions(self, state: GameState) -> list[Action]:
        """
        Generate all legal top-level actions for the current player.

        One action per distinct card identity; END_PHASE is always last.
        """
        if state.phase == Phase.GAME_OVER:
            return []

        player = state.current_player
        pid = player.player_id

        if state.phase == Phase.ACTION:
            actions = []
            if player.actions > 0:
                actions.extend(
                    Action.play_action(pid, card)
                    for card in _distinct(player.hand)
                    if self.catalog.card(card).is_action
                )
            actions.append(Action.end_phase(pid))
            return actions

        if state.phase == Phase.BUY:
            treasures = [c for c in _distinct(player.hand) if self.catalog.card(c).is_treasure]
            actions = [Action.play_treasure(pid, card) for card in treasures]
            if treasures:
                actions.append(Action.play_all_treasures(pid))
            if player.buys > 0:
                actions.extend(
                    Action.buy(pid, card)
                    for card, count in state.supply.items()
                    if count > 0 and self.catalog.cost(card) <= player.coins
                )
            actions.append(Action.end_phase(pid))
            return actions

        # Cleanup runs automatically inside END_PHASE
        return []

    def is_legal(self, state: GameState, action: Action) -> bool:
        """Check if a specific action is legal."""
        return any(
            a.action_type == action.action_type
            and a.payload.player_id == action.payload.player_id
            and a.payload.card == action.payload.card
            for a in self.legal_actions(state)
        )

    def legal_buys(self, state: GameState) -> list[str]:
        return [a.card for a in self.legal_actions(state) if a.action_type == ActionType.BUY]

    # ========================================================================
    # End condition and scoring
    # ========================================================================

    def empty_pile_count(self, state: GameState) -> int:
        return state.empty_piles()

    def is_game_over(self, state: GameState) -> bool:
        """
        Check the terminal condition.

        The game ends when the Province pile is empty or enough Supply
        piles are empty.
        """
        if state.phase == Phase.GAME_OVER:
            return True
        if state.supply.get(PROVINCE, 1) == 0:
            return True
        return self.empty_pile_count(state) >= state.empty_piles_to_end

    def score(self, player: PlayerState) -> int:
        """Victory points across every card the player owns."""
        owned = player.all_cards()
        total = 0
        for card in owned:
            definition = self.catalog.card(card)
            total += definition.victory_points
            if definition.points_per_cards:
                total += len(owned) // definition.points_per_cards
        return total

    def scores(self, state: GameState) -> dict[int, int]:
        return {p.player_id: self.score(p) for p in state.players}

    def winners(self, state: GameState) -> list[int]:
        """Ids of every player sharing the highest score."""
        scores = self.scores(state)
        if not scores:
            return []
        best = max(scores.values())
        return [pid for pid, score in scores.items() if score == best]


def _distinct(cards: list[str]) -> list[str]:
    """Card identities in first-seen order, without repeats."""
    return list(dict.fromkeys(cards))


def legal_actions(catalog: Catalog, state: GameState) -> list[Action]:
    """Convenience function to get legal actions."""
    return ActionGenerator(catalog=catalog).legal_actions(state)


def is_legal(catalog: Catalog, state: GameState, action: Action) -> bool:
    """Check if a specific action is legal."""
    return ActionGenerator(catalog=catalog).is_legal(state, action)
