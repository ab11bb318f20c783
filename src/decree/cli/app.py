"""Decree CLI Application.

A Textual-based terminal interface for playing a Decree scenario.

Layout:
- Choice table: one row per (decision, choice); Enter takes the choice
- Debug window: pretty dump of the decisions currently offered
- Status bars: resources and powers of the latest world snapshot
- ESC to quit

The TurnLoop runs on its own thread. A worker thread takes world snapshots
and offers from it and hands them to the UI with call_from_thread; a chosen
row is submitted from another worker since submit() blocks until the loop
takes the choice.
"""

from __future__ import annotations

import argparse
import logging
import random
from typing import Optional, Sequence

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import Screen
from textual.widgets import DataTable, Footer, Header, Pretty, Static

from decree.cli.trace import TraceLogger
from decree.config import get_max_decisions, get_scenario_path, get_seed, get_trace_dir
from decree.engine.handoff import HandoffClosed
from decree.engine.turn_loop import GameEnding, TurnLoop
from decree.models.decisions import Choice, Decision
from decree.models.world import World
from decree.scenarios import ScenarioDefinition, load_default_scenario, load_scenario

logger = logging.getLogger(__name__)


CSS = """
#main-row {
    height: 1fr;
}

#choice-panel {
    width: 1fr;
}

#debug-window {
    width: 1fr;
    border: solid $primary;
}

#status-row {
    height: 4;
}

#status-bars {
    width: 1fr;
}

#quit-hint {
    width: auto;
    content-align: right bottom;
    color: $text-muted;
}

#ending {
    color: $warning;
}
"""


# =============================================================================
# Formatting helpers
# =============================================================================


def format_values(values: dict[str, int]) -> str:
    """Render named values as 'Name: value' pairs, sorted by name."""
    return " ".join(f"{name}: {value}" for name, value in sorted(values.items()))


def flatten_offer(decisions: Sequence[Decision]) -> list[tuple[str, str, Choice]]:
    """One (decision, choice, Choice) row per choice, in offer order."""
    return [
        (decision.description, choice.description, choice)
        for decision in decisions
        for choice in decision.choices
    ]


def dump_offer(decisions: Sequence[Decision]) -> list[dict]:
    """Plain data for the debug window."""
    return [decision.model_dump() for decision in decisions]


# =============================================================================
# Screens
# =============================================================================


class GameScreen(Screen):
    """Main game screen: choice table, debug window and status bars."""

    BINDINGS = [
        Binding("escape", "quit_game", "Quit"),
    ]

    def __init__(
        self,
        definition: ScenarioDefinition,
        seed: int,
        max_decisions: int,
        trace_logger: Optional[TraceLogger] = None,
    ) -> None:
        super().__init__()
        self.definition = definition
        self.seed = seed
        self.max_decisions = max_decisions
        self.trace_logger = trace_logger
        self.loop: Optional[TurnLoop] = None
        self._rows: list[tuple[str, str, Choice]] = []
        self._awaiting_choice = False

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-row"):
            with Vertical(id="choice-panel"):
                yield DataTable(id="choice-table", cursor_type="row", zebra_stripes=True)
                yield Static("", id="ending")
            with VerticalScroll(id="debug-window"):
                yield Pretty([], id="debug-dump")
        with Horizontal(id="status-row"):
            with Vertical(id="status-bars"):
                yield Static("", id="resource-status")
                yield Static("", id="power-status")
            yield Static("ESC to quit", id="quit-hint")
        yield Footer()

    def on_mount(self) -> None:
        """Start the turn loop when the screen mounts."""
        table = self.query_one("#choice-table", DataTable)
        table.add_columns("Decision", "Choice")
        table.focus()

        on_turn = self.trace_logger.record_turn if self.trace_logger else None
        self.loop = TurnLoop(
            self.definition.build(),
            self.definition.initial_world(),
            random.Random(self.seed),
            max_decisions=self.max_decisions,
            on_turn=on_turn,
        )
        self.loop.start()
        self.consume_turns()

    def on_unmount(self) -> None:
        if self.loop is not None:
            self.loop.cancel()

    @work(thread=True)
    def consume_turns(self) -> None:
        """Take world snapshots and offers from the loop until it ends."""
        loop = self.loop
        while True:
            try:
                world = loop.worlds.get()
                self.app.call_from_thread(self.show_world, world)
                offer = loop.offers.get()
                self.app.call_from_thread(self.show_offer, offer)
            except HandoffClosed:
                break
        ending = loop.join()
        if ending is not None:
            self.app.call_from_thread(self.show_ending, ending)

    def show_world(self, world: World) -> None:
        self.query_one("#resource-status", Static).update(format_values(world.resources))
        self.query_one("#power-status", Static).update(format_values(world.powers))

    def show_offer(self, decisions: tuple[Decision, ...]) -> None:
        self.query_one("#debug-dump", Pretty).update(dump_offer(decisions))
        table = self.query_one("#choice-table", DataTable)
        table.clear()
        self._rows = flatten_offer(decisions)
        for decision_text, choice_text, _ in self._rows:
            table.add_row(decision_text, choice_text)
        self._awaiting_choice = True

    def show_ending(self, ending: GameEnding) -> None:
        self._awaiting_choice = False
        self.query_one("#choice-table", DataTable).clear()
        self.query_one("#ending", Static).update(f"Game over (turn {ending.turn}): {ending.description}")
        severity = "error" if ending.is_failure else "information"
        self.notify(ending.description, severity=severity, timeout=10)
        if self.trace_logger:
            self.trace_logger.record_ending(ending)
            self.notify(f"Trace saved: {self.trace_logger.output_file}", timeout=10)

    @on(DataTable.RowSelected, "#choice-table")
    def choice_selected(self, event: DataTable.RowSelected) -> None:
        # One choice per round: ignore input until the next offer arrives.
        if not self._awaiting_choice or not 0 <= event.cursor_row < len(self._rows):
            return
        self._awaiting_choice = False
        self.submit_choice(self._rows[event.cursor_row][2])

    @work(thread=True)
    def submit_choice(self, choice: Choice) -> None:
        """Submit in a worker since submit blocks until the loop takes it."""
        if self.loop is not None:
            self.loop.submit(choice)

    def action_quit_game(self) -> None:
        if self.loop is not None:
            self.loop.cancel()
        self.app.exit()


class DecreeApp(App):
    """Main Decree CLI application."""

    TITLE = "Decree"
    SUB_TITLE = "Rule-gated decisions"
    CSS = CSS

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", show=True, priority=True),
    ]

    def __init__(
        self,
        definition: ScenarioDefinition,
        seed: int,
        max_decisions: int,
        trace_logger: Optional[TraceLogger] = None,
    ) -> None:
        super().__init__()
        self.definition = definition
        self.seed = seed
        self.max_decisions = max_decisions
        self.trace_logger = trace_logger

    def on_mount(self) -> None:
        """Show the game screen when the app starts."""
        self.sub_title = self.definition.title
        self.push_screen(
            GameScreen(self.definition, self.seed, self.max_decisions, self.trace_logger)
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="decree",
        description="Play a Decree scenario in the terminal.",
    )
    parser.add_argument(
        "--scenario",
        default=get_scenario_path(),
        help="Scenario JSON file (default: bundled putsch scenario)",
    )
    parser.add_argument("--seed", type=int, default=get_seed(), help="Random seed")
    parser.add_argument(
        "--max-decisions",
        type=int,
        default=get_max_decisions(),
        help="Per-turn decision cap (a turn offers at most this many plus one)",
    )
    parser.add_argument("--trace", action="store_true", help="Write a JSON trace of the run")
    parser.add_argument("--trace-dir", default=get_trace_dir(), help="Directory for trace files")
    parser.add_argument("--log-file", help="Write engine logs to this file")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for --log-file",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Entry point for the CLI application.

    For debugging with Textual devtools:
        1. In one terminal: textual console
        2. In another terminal: textual run --dev src/decree/cli/app.py
    """
    args = build_parser().parse_args(argv)
    if args.max_decisions < 0:
        raise SystemExit("--max-decisions must be >= 0")

    # The terminal belongs to Textual, so logs only go to a file.
    if args.log_file:
        logging.basicConfig(
            filename=args.log_file,
            level=getattr(logging, args.log_level),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    definition = load_scenario(args.scenario) if args.scenario else load_default_scenario()
    trace_logger = None
    if args.trace:
        trace_logger = TraceLogger(definition.title, seed=args.seed, output_dir=args.trace_dir)

    app = DecreeApp(definition, args.seed, args.max_decisions, trace_logger)
    app.run()

    if trace_logger:
        print(trace_logger.get_summary())


if __name__ == "__main__":
    main()
