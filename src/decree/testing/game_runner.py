"""Headless game runner for Decree.

Drives a real TurnLoop with a choice policy instead of a human. It serves as
the foundation for:
- End-to-end tests
- Batch playtesting of scenario content

Key principle: one turn loop, many controllers. The TurnLoop handles all
mechanics; the runner only plays the consumer side of the handoffs.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from decree.engine.handoff import HandoffClosed
from decree.engine.rules import RandomSource, Scenario
from decree.engine.turn_loop import EndingType, GameEnding, TurnLoop, TurnRecord
from decree.models.decisions import Choice, Decision
from decree.models.world import World
from decree.parameters import DEFAULT_MAX_DECISIONS

logger = logging.getLogger(__name__)

# Picks one choice from the decisions offered for a world snapshot.
ChoicePolicy = Callable[[World, Sequence[Decision]], Choice]


def first_choice_policy(world: World, decisions: Sequence[Decision]) -> Choice:
    """Always take the first choice of the first decision offered."""
    return decisions[0].choices[0]


def random_choice_policy(rng: random.Random) -> ChoicePolicy:
    """Policy taking a uniformly random choice across all offered decisions."""

    def choose(world: World, decisions: Sequence[Decision]) -> Choice:
        choices = [choice for decision in decisions for choice in decision.choices]
        return rng.choice(choices)

    return choose


def scripted_policy(script: Sequence[tuple[str, str]]) -> ChoicePolicy:
    """Policy replaying (decision description, choice description) pairs.

    Raises:
        LookupError: When the script is exhausted or the scripted choice is
            not on offer.
    """
    steps = iter(script)

    def choose(world: World, decisions: Sequence[Decision]) -> Choice:
        try:
            decision_text, choice_text = next(steps)
        except StopIteration:
            raise LookupError("Script exhausted") from None
        for decision in decisions:
            if decision.description != decision_text:
                continue
            for choice in decision.choices:
                if choice.description == choice_text:
                    return choice
        offered = [d.description for d in decisions]
        raise LookupError(f"'{decision_text}' -> '{choice_text}' not offered; offered: {offered}")

    return choose


@dataclass
class GameResult:
    """Result of a completed run.

    Captures all relevant data for analysis and statistics.
    """

    ending: GameEnding
    turns_played: int
    final_world: World
    history: list[TurnRecord] = field(default_factory=list)

    @property
    def ending_type(self) -> EndingType:
        return self.ending.ending_type

    def choices_taken(self) -> list[str]:
        return [record.choice.description for record in self.history]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "ending_type": self.ending.ending_type.value,
            "ending": self.ending.description,
            "turns_played": self.turns_played,
            "final_resources": dict(self.final_world.resources),
            "final_powers": dict(self.final_world.powers),
            "history": [
                (record.turn, record.choice.description) for record in self.history
            ],
        }


class GameRunner:
    """Runs a single game with a choice policy using the real TurnLoop.

    Usage:
        runner = GameRunner(scenario, world, first_choice_policy, random_seed=0)
        result = runner.run_game()
    """

    def __init__(
        self,
        scenario: Scenario,
        world: World,
        policy: ChoicePolicy,
        rng: Optional[RandomSource] = None,
        random_seed: Optional[int] = None,
        max_decisions: int = DEFAULT_MAX_DECISIONS,
        max_turns: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize the game runner.

        Args:
            scenario: Rules to play
            world: Initial world
            policy: Picks a choice each turn
            rng: Random source for the decision engine (takes precedence)
            random_seed: Seed for a fresh random.Random when rng is not given
            max_decisions: Per-turn decision cap
            max_turns: Optional limit on completed turns
            timeout: Seconds to wait on each handoff; None waits forever
        """
        self.scenario = scenario
        self.world = world
        self.policy = policy
        self.rng = rng if rng is not None else random.Random(random_seed)
        self.max_decisions = max_decisions
        self.max_turns = max_turns
        self.timeout = timeout

    def run_game(self) -> GameResult:
        """Play until the loop terminates.

        Policy errors cancel the loop and propagate.
        """
        loop = TurnLoop(
            self.scenario,
            self.world,
            self.rng,
            max_decisions=self.max_decisions,
            max_turns=self.max_turns,
        )
        loop.start()
        try:
            while True:
                try:
                    world = loop.worlds.get(self.timeout)
                    offer = loop.offers.get(self.timeout)
                except HandoffClosed:
                    break
                choice = self.policy(world, offer)
                if not loop.submit(choice):
                    break
        except Exception:
            loop.cancel()
            loop.join(self.timeout)
            raise

        ending = loop.join(self.timeout)
        if not loop.is_over():
            loop.cancel()
            raise RuntimeError("Turn loop did not finish")
        history = loop.get_history()
        logger.info(f"Run finished after {len(history)} turns: {ending.description}")
        return GameResult(
            ending=ending,
            turns_played=len(history),
            final_world=ending.world,
            history=history,
        )


def run_game(
    scenario: Scenario,
    world: World,
    policy: ChoicePolicy = first_choice_policy,
    **kwargs,
) -> GameResult:
    """Convenience wrapper: build a GameRunner and run it."""
    return GameRunner(scenario, world, policy, **kwargs).run_game()
