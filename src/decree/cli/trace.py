"""Game trace logging for the Decree CLI.

Records every run event for debugging:
- Decisions offered each turn
- The choice taken and the world before and after it
- How the run ended
"""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from decree.engine.turn_loop import GameEnding, TurnRecord
from decree.models.world import World


@dataclass
class WorldSnapshot:
    """Plain copy of world values at a point in time."""

    resources: dict[str, int]
    powers: dict[str, int]


@dataclass
class TurnTrace:
    """Record of a complete turn."""

    turn_number: int
    world_before: WorldSnapshot
    offered: list[str]
    decision: str
    choice: str
    world_after: WorldSnapshot
    deltas: dict[str, int] = field(default_factory=dict)


@dataclass
class GameTrace:
    """Complete trace of a run."""

    game_id: str
    scenario: str
    seed: int | None
    start_time: str
    end_time: str | None = None
    turns: list[TurnTrace] = field(default_factory=list)
    ending: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "game_id": self.game_id,
            "scenario": self.scenario,
            "seed": self.seed,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "turns": [asdict(t) for t in self.turns],
            "ending": self.ending,
        }


def capture_world(world: World) -> WorldSnapshot:
    return WorldSnapshot(resources=dict(world.resources), powers=dict(world.powers))


def world_deltas(before: World, after: World) -> dict[str, int]:
    """Per-name differences between two worlds, omitting unchanged names."""
    deltas: dict[str, int] = {}
    for label, old, new in (
        ("resources", before.resources, after.resources),
        ("powers", before.powers, after.powers),
    ):
        for name in sorted(set(old) | set(new)):
            diff = new.get(name, 0) - old.get(name, 0)
            if diff:
                deltas[f"{label}.{name}"] = diff
    return deltas


class TraceLogger:
    """Logger for run trace events."""

    def __init__(
        self,
        scenario: str,
        seed: int | None = None,
        output_dir: Path | None = None,
    ):
        """Initialize trace logger.

        Args:
            scenario: Title of the scenario being played
            seed: Seed of the run's random source, if known
            output_dir: Directory for trace files (default: ./traces)
        """
        self.output_dir = Path(output_dir or "traces")
        self.output_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        slug = "-".join(scenario.lower().split()) or "scenario"
        game_id = f"{slug}_{timestamp}"

        self.trace = GameTrace(
            game_id=game_id,
            scenario=scenario,
            seed=seed,
            start_time=datetime.now().isoformat(),
        )
        self._output_file = self.output_dir / f"{game_id}.json"

    @property
    def output_file(self) -> Path:
        return self._output_file

    def record_turn(self, record: TurnRecord) -> None:
        """Record a completed turn and save the trace."""
        decision = next(
            (d.description for d in record.decisions if record.choice in d.choices),
            "",
        )
        self.trace.turns.append(
            TurnTrace(
                turn_number=record.turn,
                world_before=capture_world(record.world_before),
                offered=[d.description for d in record.decisions],
                decision=decision,
                choice=record.choice.description,
                world_after=capture_world(record.world_after),
                deltas=world_deltas(record.world_before, record.world_after),
            )
        )
        self.save()

    def record_ending(self, ending: GameEnding) -> None:
        """Record how the run ended and save the trace."""
        self.trace.end_time = datetime.now().isoformat()
        self.trace.ending = {
            "type": ending.ending_type.value,
            "turn": ending.turn,
            "description": ending.description,
            "world": asdict(capture_world(ending.world)),
        }
        self.save()

    def save(self) -> Path:
        """Save the trace to a JSON file.

        Returns:
            Path to the saved file
        """
        with open(self._output_file, "w") as f:
            json.dump(self.trace.to_dict(), f, indent=2)
        return self._output_file

    def get_summary(self) -> str:
        """Get a human-readable summary of the trace."""
        lines = [
            f"Game: {self.trace.game_id}",
            f"Scenario: {self.trace.scenario}",
            f"Turns played: {len(self.trace.turns)}",
            "",
            "Turn History:",
        ]

        for turn in self.trace.turns:
            lines.append(f"  T{turn.turn_number}: {turn.decision[:30]} -> {turn.choice[:30]}")
            if turn.deltas:
                changes = ", ".join(f"{name} {diff:+d}" for name, diff in turn.deltas.items())
                lines.append(f"         {changes}")

        if self.trace.ending:
            lines.append("")
            lines.append(f"Ending: {self.trace.ending['type']}")
            lines.append(f"  {self.trace.ending['description']}")

        lines.append("")
        lines.append(f"Trace saved to: {self._output_file}")

        return "\n".join(lines)
