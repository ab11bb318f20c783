"""Tunable constants for Decree.

This module is the single source of truth for engine defaults. Runtime
overrides come from environment variables (see decree.config) or CLI flags.

Usage:
    from decree.parameters import DEFAULT_MAX_DECISIONS
"""

DEFAULT_MAX_DECISIONS = 3
"""Per-turn cap handed to the decision engine.

The engine stops sampling once it has accepted more than this many
decisions, so a turn offers at most DEFAULT_MAX_DECISIONS + 1 decisions.

Tuning:
    - If the choice table feels crowded: decrease
    - If rare rules never surface: increase
"""

DEFAULT_SEED = 0
"""Seed for the per-run random source.

A fixed seed makes every run with the same scenario and the same choices
replay identically.
"""

DEFAULT_TRACE_DIR = "traces"
"""Directory that receives JSON trace files when tracing is enabled."""

DEFAULT_SCENARIO_FILE = "putsch.json"
"""Bundled scenario loaded when no scenario path is configured."""
