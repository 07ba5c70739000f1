"""
Hosting layer for the deck/turn state machine.
"""

from turndeck.engine.session import DeckSession

__all__ = ["DeckSession"]
