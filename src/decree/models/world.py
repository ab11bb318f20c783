"""World state model for Decree.

The World is the only mutable state of a run: named integer resources and
named integer powers. Values are unbounded; nothing is clamped.

Names that are absent read as 0, both in guards and when a Change is applied.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from decree.models.decisions import Choice, apply_delta

logger = logging.getLogger(__name__)


class World(BaseModel):
    """Named integer state of a run.

    Attributes:
        resources: Resource name -> value (e.g. Money)
        powers: Power name -> value (e.g. Military, Legislation)
    """

    resources: dict[str, int] = Field(default_factory=dict)
    powers: dict[str, int] = Field(default_factory=dict)

    def resource(self, name: str) -> int:
        """Value of a resource, 0 when absent."""
        return self.resources.get(name, 0)

    def power(self, name: str) -> int:
        """Value of a power, 0 when absent."""
        return self.powers.get(name, 0)

    def snapshot(self) -> World:
        """Return a structurally independent copy safe to hand to a consumer."""
        return self.model_copy(deep=True)

    def apply(self, choice: Choice) -> World:
        """Apply a choice's Change to this world in place.

        Every delta is validated and every new value computed before anything
        is written, so a malformed change leaves the world exactly as it was.

        Args:
            choice: The selected choice

        Returns:
            This world, for chaining.

        Raises:
            MalformedDeltaError: If any delta is malformed or gives a non-finite value.
        """
        resource_deltas, power_deltas = choice.change.validated()

        resources = {
            name: apply_delta(self.resources.get(name, 0), delta, name)
            for name, delta in resource_deltas.items()
        }
        powers = {
            name: apply_delta(self.powers.get(name, 0), delta, name)
            for name, delta in power_deltas.items()
        }

        self.resources.update(resources)
        self.powers.update(powers)

        logger.debug(f"Applied '{choice.description}': resources={self.resources} powers={self.powers}")
        return self
