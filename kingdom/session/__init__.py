"""Session module - match driving, recording and replay."""

from .game_loop import GameLoop, MatchRecord, MatchResult, DecisionRecord, ReplayDivergence, replay

__all__ = [
    "GameLoop",
    "MatchRecord",
    "MatchResult",
    "DecisionRecord",
    "ReplayDivergence",
    "replay",
]
