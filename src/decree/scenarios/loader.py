"""Scenario loading for Decree.

Loads scenario files, validates them against the schemas and compiles them
into engine objects. The bundled default scenario lives in the package's
data directory.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from decree.errors import ScenarioLoadError
from decree.parameters import DEFAULT_SCENARIO_FILE
from decree.scenarios.schemas import ScenarioDefinition

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"


def scenario_from_dict(data: dict) -> ScenarioDefinition:
    """Validate scenario data.

    Conditions are compiled here too, so a definition that comes back can
    always be built.

    Raises:
        ScenarioLoadError: If the data does not match the schema, a delta is
            malformed or a condition does not compile.
    """
    try:
        definition = ScenarioDefinition.model_validate(data)
    except ValidationError as e:
        raise ScenarioLoadError(f"Invalid scenario: {e}") from e
    # Compile once up front so bad conditions fail the load.
    try:
        definition.build()
    except ValueError as e:
        raise ScenarioLoadError(f"Invalid scenario '{definition.title}': {e}") from e
    return definition


def load_scenario(scenario_path: str | Path) -> ScenarioDefinition:
    """Load and validate a scenario from a JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ScenarioLoadError: If the file is not valid JSON or fails validation
    """
    path = Path(scenario_path)
    with path.open(encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ScenarioLoadError(f"Scenario file {path} is not valid JSON: {e}") from e

    definition = scenario_from_dict(data)
    logger.info(f"Loaded scenario '{definition.title}' from {path} ({len(definition.rules)} rules)")
    return definition


def load_default_scenario() -> ScenarioDefinition:
    """Load the bundled default scenario."""
    return load_scenario(DATA_DIR / DEFAULT_SCENARIO_FILE)


def list_scenarios(directory: str | Path) -> list[dict]:
    """Return metadata for every scenario file in a directory.

    Returns:
        List of dicts containing: {path, title, rules}, sorted by title.
        Files that fail to load are skipped with a warning.
    """
    scenarios = []
    for path in Path(directory).glob("*.json"):
        try:
            definition = load_scenario(path)
        except ScenarioLoadError as e:
            logger.warning(f"Skipping {path}: {e}")
            continue
        scenarios.append({
            "path": str(path),
            "title": definition.title,
            "rules": len(definition.rules),
        })
    return sorted(scenarios, key=lambda x: x["title"])
