"""Scenario files for Decree.

Usage:
    from decree.scenarios import load_scenario

    definition = load_scenario("scenarios/putsch.json")
    scenario = definition.build()
    world = definition.initial_world()
"""

from .loader import (
    DATA_DIR,
    list_scenarios,
    load_default_scenario,
    load_scenario,
    scenario_from_dict,
)
from .schemas import (
    ChangeDefinition,
    ChoiceDefinition,
    DecisionDefinition,
    RuleDefinition,
    ScenarioDefinition,
    WorldDefinition,
)

__all__ = [
    # Schemas
    "ChangeDefinition",
    "ChoiceDefinition",
    "DecisionDefinition",
    "RuleDefinition",
    "ScenarioDefinition",
    "WorldDefinition",
    # Loading
    "DATA_DIR",
    "list_scenarios",
    "load_default_scenario",
    "load_scenario",
    "scenario_from_dict",
]
