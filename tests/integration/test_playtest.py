"""Integration tests for decree.testing.playtest."""

import pytest

from decree.scenarios import load_default_scenario
from decree.testing import run_playtest

WAIT = 5.0


@pytest.fixture
def definition():
    return load_default_scenario()


@pytest.mark.slow
class TestRunPlaytest:
    def test_first_choice_batch(self, definition) -> None:
        results = run_playtest(definition, games=3, policy="first", seed=1, max_turns=4, timeout=WAIT)

        aggregate = results["aggregate"]
        assert results["metadata"]["games"] == 3
        assert results["metadata"]["seed"] == 1
        assert aggregate["total_games"] == 3
        assert aggregate["endings"] == {"turn_limit": 3}
        assert aggregate["avg_turns"] == 4
        assert aggregate["stuck_rate"] == 0
        assert aggregate["choices"]["Make putsch -> Accept"] == 6
        assert aggregate["choices"]["Quit -> Accept"] == 6
        assert aggregate["mean_final_resources"]["Money"] == 1000
        assert aggregate["mean_final_powers"]["Legislation"] == 100

    def test_same_seed_same_outcome(self, definition) -> None:
        first = run_playtest(definition, games=5, policy="random", seed=9, max_turns=6, timeout=WAIT)
        second = run_playtest(definition, games=5, policy="random", seed=9, max_turns=6, timeout=WAIT)

        assert first["aggregate"] == second["aggregate"]

    def test_unknown_policy(self, definition) -> None:
        with pytest.raises(ValueError, match="Unknown policy"):
            run_playtest(definition, games=1, policy="greedy")

    def test_games_must_be_positive(self, definition) -> None:
        with pytest.raises(ValueError):
            run_playtest(definition, games=0)
