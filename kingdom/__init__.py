"""
Kingdom - Deck-Building Card Game Rules Engine

A deterministic, rules-driven engine for Dominion-style deck-building games.
The engine consumes a card catalog (already-parsed effect scripts) and provides:
- State management with an auditable mutation log
- Legal action generation
- Effect resolution with player decisions and attack reactions
- A turn-phase state machine
- Reference decision sources for automated play and replay
"""

__version__ = "0.1.0"
