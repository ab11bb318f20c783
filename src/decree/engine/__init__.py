"""Decree engine module.

This module contains the core game logic:
- guards: Condition compilation and evaluation
- rules: Rules, scenarios and the decision engine
- handoff: Single-slot blocking channels
- turn_loop: Turn orchestration and run endings

Usage:
    import random

    from decree.engine import Rule, Scenario, TurnLoop
    from decree.models import Choice, Decision, World

    rule = Rule.compile("World.Resources.Money > 1000", 1.0, decision)
    scenario = Scenario([rule])
    offers = scenario.decisions(world, 3, random.Random(0))
"""

from decree.engine.guards import (
    ExpressionGuard,
    Guard,
    GuardCompiler,
    compile_guard,
)
from decree.engine.handoff import Handoff, HandoffClosed, HandoffTimeout
from decree.engine.rules import Candidate, RandomSource, Rule, Scenario
from decree.engine.turn_loop import (
    EndingType,
    GameEnding,
    TurnLoop,
    TurnPhase,
    TurnRecord,
)

__all__ = [
    # Guards
    "Guard",
    "GuardCompiler",
    "ExpressionGuard",
    "compile_guard",
    # Rules and decision engine
    "Candidate",
    "RandomSource",
    "Rule",
    "Scenario",
    # Coordination
    "Handoff",
    "HandoffClosed",
    "HandoffTimeout",
    # Turn loop
    "EndingType",
    "GameEnding",
    "TurnLoop",
    "TurnPhase",
    "TurnRecord",
]
