"""Decision content models for Decree.

A Decision is what the player is offered on a turn: a description plus a
non-empty list of Choices. Each Choice carries the Change that is applied to
the world when it is selected.

Changes are sparse. Each named entry holds a Delta, an affine transform
(multiplier, additive) evaluated as:

    new = round(multiplier * old + additive)

with ties rounded away from zero. Deltas are kept as raw tuples so that a
malformed one can still be represented and reported precisely by
validate_delta() rather than being silently coerced.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, field_validator

from decree.errors import MalformedDeltaError

# (multiplier, additive)
Delta = tuple[float, float]

# Raw delta component as stored; bools and numeric strings are rejected.
DeltaComponent = Union[StrictFloat, StrictInt]


def validate_delta(name: str, delta: Sequence) -> Delta:
    """Check that a delta has exactly two finite numeric components.

    Args:
        name: Resource or power the delta targets (used in the error message)
        delta: Candidate delta

    Returns:
        The delta as a (multiplier, additive) tuple of floats.

    Raises:
        MalformedDeltaError: If the delta is not a pair of finite numbers.
    """
    if isinstance(delta, (str, bytes)) or not isinstance(delta, Sequence):
        raise MalformedDeltaError(
            f"Delta for '{name}' must be a [multiplier, additive] pair, got {delta!r}"
        )
    if len(delta) != 2:
        raise MalformedDeltaError(
            f"Delta for '{name}' must have exactly 2 components, got {len(delta)}: {list(delta)!r}"
        )
    for component in delta:
        if isinstance(component, bool) or not isinstance(component, (int, float)):
            raise MalformedDeltaError(
                f"Delta for '{name}' has non-numeric component {component!r}"
            )
        if not math.isfinite(component):
            raise MalformedDeltaError(
                f"Delta for '{name}' has non-finite component {component!r}"
            )
    return float(delta[0]), float(delta[1])


def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def apply_delta(old: int, delta: Delta, name: str = "value") -> int:
    """Apply a validated delta to an integer value.

    Raises:
        MalformedDeltaError: If the result is not finite.
    """
    multiplier, additive = delta
    result = multiplier * old + additive
    if not math.isfinite(result):
        raise MalformedDeltaError(
            f"Delta for '{name}' {list(delta)!r} applied to {old} does not give a finite value"
        )
    return round_half_away(result)


class Change(BaseModel):
    """Sparse per-name deltas for resources and powers.

    Attributes:
        resources: Resource name -> delta
        powers: Power name -> delta
    """

    model_config = ConfigDict(frozen=True)

    resources: dict[str, tuple[DeltaComponent, ...]] = Field(default_factory=dict)
    powers: dict[str, tuple[DeltaComponent, ...]] = Field(default_factory=dict)

    def validated(self) -> tuple[dict[str, Delta], dict[str, Delta]]:
        """Validate every delta and return them as (resources, powers).

        Raises:
            MalformedDeltaError: On the first malformed delta found.
        """
        resources = {name: validate_delta(name, d) for name, d in self.resources.items()}
        powers = {name: validate_delta(name, d) for name, d in self.powers.items()}
        return resources, powers

    def is_empty(self) -> bool:
        """True when the change names no resource and no power."""
        return not self.resources and not self.powers


class Choice(BaseModel):
    """One selectable outcome of a Decision."""

    model_config = ConfigDict(frozen=True)

    description: str
    change: Change = Field(default_factory=Change)


class Decision(BaseModel):
    """A described set of Choices offered together.

    Attributes:
        description: What the player is deciding
        choices: Ordered, non-empty list of choices
    """

    model_config = ConfigDict(frozen=True)

    description: str
    choices: tuple[Choice, ...]

    @field_validator("choices")
    @classmethod
    def require_choices(cls, v: tuple[Choice, ...]) -> tuple[Choice, ...]:
        """A decision without choices cannot be answered."""
        if not v:
            raise ValueError("Decision must have at least one choice")
        return v
