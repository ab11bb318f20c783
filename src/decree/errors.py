"""Error types raised by the Decree engine.

Every error is a ValueError subclass so callers that only care about
"bad content" can catch ValueError, while the engine and the turn loop can
tell a load-time problem from a run-time one.
"""


class DecreeError(ValueError):
    """Base class for all Decree errors."""


class GuardCompileError(DecreeError):
    """Condition text could not be compiled into a guard.

    Raised for syntax errors, unsupported constructs and references to
    fields outside the World.Resources / World.Powers namespaces.
    """


class GuardEvaluationError(DecreeError):
    """A compiled guard failed while being evaluated against a world."""


class MalformedDeltaError(DecreeError):
    """A delta does not carry exactly two finite numeric components."""


class ScenarioLoadError(DecreeError):
    """Scenario data could not be turned into a playable scenario."""
