"""Shared pytest fixtures and markers for all tests."""

import pytest

from decree.engine.rules import Rule, Scenario
from decree.models.decisions import Change, Choice, Decision
from decree.models.world import World

PUTSCH_CONDITION = "World.Resources.Money > 1000 and World.Powers.Military >= 90"


class ReplayRandom:
    """Random source replaying a fixed sequence of draws, cycling at the end."""

    def __init__(self, draws):
        self.draws = list(draws)
        self.calls = 0

    def random(self) -> float:
        value = self.draws[self.calls % len(self.draws)]
        self.calls += 1
        return value


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def replay_random():
    """Factory for random sources replaying fixed draws."""
    return ReplayRandom


@pytest.fixture
def always_zero():
    """Random source that always draws 0.0."""
    return ReplayRandom([0.0])


@pytest.fixture
def acceptance_world():
    """World used by the acceptance scenario."""
    return World(resources={"Money": 4000}, powers={"Military": 90, "Legislation": 10})


@pytest.fixture
def accept_choice():
    """Halve Money, set Legislation to 100."""
    return Choice(
        description="Accept",
        change=Change(resources={"Money": (0.5, 0)}, powers={"Legislation": (0, 100)}),
    )


@pytest.fixture
def putsch_decision(accept_choice):
    return Decision(
        description="Make putsch",
        choices=(
            accept_choice,
            Choice(description="Reject", change=Change(powers={"Military": (0.1, 0)})),
        ),
    )


@pytest.fixture
def putsch_rule(putsch_decision):
    return Rule.compile(PUTSCH_CONDITION, 1.0, putsch_decision)


@pytest.fixture
def putsch_scenario(putsch_rule):
    return Scenario([putsch_rule], title="Putsch")


@pytest.fixture
def quit_decision():
    return Decision(description="Quit", choices=(Choice(description="Accept"),))
