"""
Turndeck: a turn-based card-deck engine.

The core is a pure state machine: ``transition(state, action)`` computes the
next immutable ``DeckState`` from the current one.
"""

__version__ = "0.1.0"
