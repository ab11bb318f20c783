"""Headless play for Decree.

Key classes:
- GameRunner: Drives a TurnLoop with a choice policy
- GameResult: Outcome and history of a run

Usage:
    from decree.testing import run_game, first_choice_policy

    result = run_game(scenario, world, first_choice_policy, random_seed=0)
    print(result.ending.description)

Batch playtests:
    from decree.testing import run_playtest

    report = run_playtest(definition, games=100, policy="random", seed=1)
"""

from .game_runner import (
    ChoicePolicy,
    GameResult,
    GameRunner,
    first_choice_policy,
    random_choice_policy,
    run_game,
    scripted_policy,
)
from .playtest import POLICIES, run_playtest, summarize

__all__ = [
    # Single games
    "ChoicePolicy",
    "GameResult",
    "GameRunner",
    "first_choice_policy",
    "random_choice_policy",
    "run_game",
    "scripted_policy",
    # Batches
    "POLICIES",
    "run_playtest",
    "summarize",
]
