"""Decree data models.

This module exports the world state and the decision content types.
"""

from .decisions import (
    Change,
    Choice,
    Decision,
    Delta,
    apply_delta,
    round_half_away,
    validate_delta,
)
from .world import World

__all__ = [
    # World state
    "World",
    # Decision content
    "Change",
    "Choice",
    "Decision",
    "Delta",
    # Delta functions
    "apply_delta",
    "round_half_away",
    "validate_delta",
]
