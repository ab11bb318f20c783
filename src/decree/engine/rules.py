"""Rules, scenarios and the decision engine.

A Rule pairs a compiled guard with a weight and a Decision. A Scenario is the
ordered, fixed list of rules for a run. Each turn the decision engine turns a
world snapshot into the list of decisions offered to the player:

1. Evaluate every rule in declaration order. A rule whose guard is false
   weighs 0; otherwise it weighs its static weight.
2. Sort the candidates by ascending weight. Equal weights keep declaration
   order (the sort is stable).
3. Walk the sorted candidates, drawing one random value per candidate. A
   candidate is accepted when the draw is strictly below its weight.
4. Stop as soon as more than `max_decisions` candidates have been accepted.
   A turn therefore offers at most max_decisions + 1 decisions; a cap of 0
   still lets one decision through.

Low weights go first so that rare content gets a chance at the limited slots
before an always-applicable rule takes them.

The random source is injected. Any object with a `random()` method returning
a float in [0, 1) works, including `random.Random`.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Protocol, Sequence

from decree.engine.guards import Guard, GuardCompiler, compile_guard
from decree.models.decisions import Decision
from decree.models.world import World

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    """Source of uniform draws in [0, 1)."""

    def random(self) -> float: ...


@dataclass(frozen=True)
class Rule:
    """Guard + weight + decision, the atomic unit of scenario content.

    Attributes:
        guard: Compiled predicate gating the rule
        weight: Per-turn acceptance probability when the guard holds (>= 0)
        decision: Decision offered when the rule is accepted
    """

    guard: Guard
    weight: float
    decision: Decision

    def __post_init__(self) -> None:
        if isinstance(self.weight, bool) or not isinstance(self.weight, (int, float)):
            raise ValueError(f"Rule weight must be a number, got {self.weight!r}")
        if not math.isfinite(self.weight) or self.weight < 0:
            raise ValueError(f"Rule weight must be finite and >= 0, got {self.weight}")

    @classmethod
    def compile(
        cls,
        condition: str,
        weight: float,
        decision: Decision,
        compiler: GuardCompiler = compile_guard,
    ) -> Rule:
        """Build a rule, compiling its condition exactly once.

        Raises:
            GuardCompileError: If the condition does not compile.
            ValueError: If the weight is negative or not finite.
        """
        return cls(guard=compiler(condition), weight=float(weight), decision=decision)

    def evaluate(self, world: World) -> float:
        """Return the rule's weight if its guard holds on `world`, else 0.

        Guard evaluation errors propagate unchanged.
        """
        if not self.guard(world):
            return 0.0
        return self.weight


@dataclass(frozen=True)
class Candidate:
    """A rule's weight for one decision round, paired with its decision."""

    weight: float
    decision: Decision


class Scenario:
    """Ordered, immutable collection of rules."""

    def __init__(self, rules: Sequence[Rule], title: str = "Untitled") -> None:
        self._rules = tuple(rules)
        self.title = title

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"Scenario(title={self.title!r}, rules={len(self._rules)})"

    def rank(self, world: World) -> list[Candidate]:
        """Evaluate every rule and sort the candidates by ascending weight.

        Ties keep declaration order. Any guard evaluation error aborts the
        whole ranking.
        """
        candidates = [Candidate(weight=rule.evaluate(world), decision=rule.decision) for rule in self._rules]
        return sorted(candidates, key=lambda c: c.weight)

    def decisions(
        self,
        world: World,
        max_decisions: int,
        rng: RandomSource,
    ) -> list[Decision]:
        """Sample the decisions offered for `world`.

        Args:
            world: World snapshot to evaluate guards against
            max_decisions: Sampling stops once more than this many are accepted
            rng: Injected random source, one draw per visited candidate

        Returns:
            Accepted decisions in acceptance order (ascending weight), at most
            max_decisions + 1 of them.

        Raises:
            GuardEvaluationError: If any rule's guard fails; no partial result.
            ValueError: If max_decisions is negative.
        """
        if isinstance(max_decisions, bool) or not isinstance(max_decisions, int) or max_decisions < 0:
            raise ValueError(f"max_decisions must be a non-negative int, got {max_decisions!r}")

        ranking = self.rank(world)

        accepted: list[Decision] = []
        for candidate in ranking:
            if rng.random() < candidate.weight:
                accepted.append(candidate.decision)
                if len(accepted) > max_decisions:
                    break

        logger.debug(
            f"Offered {len(accepted)} of {len(ranking)} decisions: "
            f"{[d.description for d in accepted]}"
        )
        return accepted
