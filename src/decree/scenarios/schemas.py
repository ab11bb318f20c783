"""JSON schemas for Decree scenarios.

This module defines Pydantic models for the scenario file format and turns a
validated file into engine objects. Every delta is checked and every
condition compiled at load time, so a scenario that loads cannot fail later
on a malformed change.

File format:
    {
      "title": "Putsch",
      "world": {"resources": {"Money": 4000}, "powers": {"Military": 90}},
      "rules": [
        {
          "condition": "World.Resources.Money > 1000",
          "weight": 1.0,
          "decision": {
            "description": "Make putsch",
            "choices": [
              {"description": "Accept",
               "change": {"resources": {"Money": [0.5, 0]}, "powers": {}}}
            ]
          }
        }
      ]
    }

"conditionText" is accepted as an alias of "condition".
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from decree.engine.guards import GuardCompiler, compile_guard
from decree.engine.rules import Rule, Scenario
from decree.models.decisions import Change, Choice, Decision, DeltaComponent, validate_delta
from decree.models.world import World


class ChangeDefinition(BaseModel):
    """Per-name [multiplier, additive] deltas for resources and powers."""

    model_config = ConfigDict(extra="forbid")

    resources: dict[str, list[DeltaComponent]] = Field(default_factory=dict)
    powers: dict[str, list[DeltaComponent]] = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_deltas(self) -> "ChangeDefinition":
        """Reject malformed deltas at load time rather than at apply time."""
        for name, delta in self.resources.items():
            validate_delta(name, delta)
        for name, delta in self.powers.items():
            validate_delta(name, delta)
        return self

    def to_change(self) -> Change:
        return Change(
            resources={name: tuple(d) for name, d in self.resources.items()},
            powers={name: tuple(d) for name, d in self.powers.items()},
        )


class ChoiceDefinition(BaseModel):
    """A choice as written in a scenario file."""

    model_config = ConfigDict(extra="forbid")

    description: str = Field(min_length=1)
    change: ChangeDefinition = Field(default_factory=ChangeDefinition)

    def to_choice(self) -> Choice:
        return Choice(description=self.description, change=self.change.to_change())


class DecisionDefinition(BaseModel):
    """A decision as written in a scenario file."""

    model_config = ConfigDict(extra="forbid")

    description: str = Field(min_length=1)
    choices: list[ChoiceDefinition] = Field(
        min_length=1,
        description="Choices offered together; at least one"
    )

    def to_decision(self) -> Decision:
        return Decision(
            description=self.description,
            choices=tuple(c.to_choice() for c in self.choices),
        )


class RuleDefinition(BaseModel):
    """A rule as written in a scenario file."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    condition: str = Field(
        min_length=1,
        validation_alias=AliasChoices("condition", "conditionText"),
        description="Guard expression over World.Resources.* and World.Powers.*"
    )
    weight: float = Field(
        ge=0.0,
        allow_inf_nan=False,
        description="Per-turn acceptance probability when the guard holds"
    )
    decision: DecisionDefinition

    def build(self, compiler: GuardCompiler = compile_guard) -> Rule:
        """Compile the condition and build the engine rule.

        Raises:
            GuardCompileError: If the condition does not compile.
        """
        return Rule.compile(self.condition, self.weight, self.decision.to_decision(), compiler)


class WorldDefinition(BaseModel):
    """Initial world values."""

    model_config = ConfigDict(extra="forbid")

    resources: dict[str, int] = Field(default_factory=dict)
    powers: dict[str, int] = Field(default_factory=dict)

    def to_world(self) -> World:
        return World(resources=dict(self.resources), powers=dict(self.powers))


class ScenarioDefinition(BaseModel):
    """Complete scenario file: metadata, initial world and rules."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(default="Untitled", min_length=1)
    description: str = Field(default="")
    world: WorldDefinition = Field(default_factory=WorldDefinition)
    rules: list[RuleDefinition] = Field(
        min_length=1,
        description="Rules in declaration order"
    )

    def build(self, compiler: GuardCompiler = compile_guard) -> Scenario:
        """Compile every rule into an engine Scenario.

        Raises:
            GuardCompileError: If any condition does not compile.
        """
        return Scenario([rule.build(compiler) for rule in self.rules], title=self.title)

    def initial_world(self) -> World:
        """Fresh World built from the file's initial values."""
        return self.world.to_world()

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)
