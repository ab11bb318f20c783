"""Runtime configuration for Decree.

Defaults come from decree.parameters and can be overridden via environment
variables:
    DECREE_SCENARIO_PATH: Scenario JSON file (default: bundled putsch.json)
    DECREE_SEED: Seed for the random source (default: 0)
    DECREE_MAX_DECISIONS: Per-turn decision cap (default: 3)
    DECREE_TRACE_DIR: Directory for trace files (default: "traces")

CLI flags take precedence over the environment.
"""

import os
from typing import Optional

from decree.parameters import DEFAULT_MAX_DECISIONS, DEFAULT_SEED, DEFAULT_TRACE_DIR


def _get_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def get_scenario_path() -> Optional[str]:
    """Get configured scenario path, or None for the bundled scenario."""
    return os.environ.get("DECREE_SCENARIO_PATH") or None


def get_seed() -> int:
    """Get configured random seed from environment."""
    return _get_int("DECREE_SEED", DEFAULT_SEED)


def get_max_decisions() -> int:
    """Get configured per-turn decision cap from environment."""
    value = _get_int("DECREE_MAX_DECISIONS", DEFAULT_MAX_DECISIONS)
    if value < 0:
        raise ValueError(f"DECREE_MAX_DECISIONS must be >= 0, got {value}")
    return value


def get_trace_dir() -> str:
    """Get configured trace directory from environment."""
    return os.environ.get("DECREE_TRACE_DIR", DEFAULT_TRACE_DIR)
