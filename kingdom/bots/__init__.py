"""
Bots module - Reference decision sources.

Provides:
- BotPolicy: Interface for choosing top-level actions and answering decisions
- RandomPolicy / FirstLegalPolicy: Trivial baselines
- ScriptedPolicy: Replays a recorded script
- ConsolePolicy: A person at the terminal
"""

from .policy import (
    BotPolicy,
    BotDecision,
    RandomPolicy,
    FirstLegalPolicy,
    ScriptedPolicy,
    ScriptExhausted,
    ConsolePolicy,
)

__all__ = [
    "BotPolicy",
    "BotDecision",
    "RandomPolicy",
    "FirstLegalPolicy",
    "ScriptedPolicy",
    "ScriptExhausted",
    "ConsolePolicy",
]
