"""Turn orchestration for Decree.

The TurnLoop owns the World for the whole run and is its only writer. Each
turn it cycles through:

1. OFFERING - publish a world snapshot, ask the decision engine for offers
2. AWAITING_CHOICE - publish the decisions, block for exactly one Choice
3. APPLYING - apply the choice to the world, record the turn
4. IDLE - start the next turn

The run ends in TERMINATED with a GameEnding that says why:

- CANCELLED: the consumer cancelled (choice intake closed)
- STUCK: no decision was offered this turn; policy is left to the caller
- EVALUATION_FAILED: a guard failed while ranking rules
- MALFORMED_DELTA: the chosen change carried a malformed delta
- TURN_LIMIT: the optional max_turns was reached

Coordination uses three single-slot handoffs (see decree.engine.handoff):
`worlds` and `offers` flow to the consumer, choices flow back via submit().
Published worlds are deep copies, never the live instance.

Usage:
    loop = TurnLoop(scenario, world, random.Random(0))
    loop.start()
    world = loop.worlds.get()
    offer = loop.offers.get()
    loop.submit(offer[0].choices[0])
    ...
    loop.cancel()
    ending = loop.join()
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from decree.engine.handoff import Handoff, HandoffClosed
from decree.engine.rules import RandomSource, Scenario
from decree.errors import GuardEvaluationError, MalformedDeltaError
from decree.models.decisions import Choice, Decision
from decree.models.world import World
from decree.parameters import DEFAULT_MAX_DECISIONS

logger = logging.getLogger(__name__)


class TurnPhase(Enum):
    """Current phase of the turn loop."""

    IDLE = "idle"
    OFFERING = "offering"
    AWAITING_CHOICE = "awaiting_choice"
    APPLYING = "applying"
    TERMINATED = "terminated"


class EndingType(Enum):
    """Why a run terminated."""

    CANCELLED = "cancelled"
    STUCK = "stuck"
    EVALUATION_FAILED = "evaluation_failed"
    MALFORMED_DELTA = "malformed_delta"
    TURN_LIMIT = "turn_limit"


_ENDING_DESCRIPTIONS = {
    EndingType.CANCELLED: "Run cancelled by the player",
    EndingType.STUCK: "No decisions could be offered",
    EndingType.EVALUATION_FAILED: "A rule's condition failed to evaluate",
    EndingType.MALFORMED_DELTA: "The chosen change was malformed",
    EndingType.TURN_LIMIT: "Turn limit reached",
}


@dataclass
class GameEnding:
    """How and when a run ended.

    Attributes:
        ending_type: Why the run terminated
        turn: Turn during which the run ended (1-indexed)
        world: Snapshot of the world at termination
        error: Error message for failure endings
    """

    ending_type: EndingType
    turn: int
    world: World
    error: Optional[str] = None

    @property
    def is_failure(self) -> bool:
        return self.ending_type in (EndingType.EVALUATION_FAILED, EndingType.MALFORMED_DELTA)

    @property
    def description(self) -> str:
        text = _ENDING_DESCRIPTIONS[self.ending_type]
        if self.error:
            return f"{text}: {self.error}"
        return text


@dataclass
class TurnRecord:
    """Record of one completed turn.

    Attributes:
        turn: Turn number (1-indexed)
        world_before: World snapshot published at the start of the turn
        decisions: Decisions offered
        choice: Choice that was applied
        world_after: World snapshot after the choice was applied
    """

    turn: int
    world_before: World
    decisions: tuple[Decision, ...]
    choice: Choice
    world_after: World


class TurnLoop:
    """Drives the offer/choose/apply cycle for one run."""

    def __init__(
        self,
        scenario: Scenario,
        world: World,
        rng: RandomSource,
        max_decisions: int = DEFAULT_MAX_DECISIONS,
        max_turns: Optional[int] = None,
        on_turn: Optional[Callable[[TurnRecord], None]] = None,
    ) -> None:
        """Initialize the loop.

        Args:
            scenario: Rules for the run
            world: Initial world; the loop keeps its own copy
            rng: Random source handed to the decision engine
            max_decisions: Per-turn cap for the decision engine
            max_turns: Optional limit on completed turns
            on_turn: Called from the loop thread after each applied turn
        """
        if max_decisions < 0:
            raise ValueError(f"max_decisions must be >= 0, got {max_decisions}")
        if max_turns is not None and max_turns < 0:
            raise ValueError(f"max_turns must be >= 0, got {max_turns}")

        self.scenario = scenario
        self.rng = rng
        self.max_decisions = max_decisions
        self.max_turns = max_turns
        self.on_turn = on_turn

        self.worlds: Handoff[World] = Handoff("worlds")
        self.offers: Handoff[tuple[Decision, ...]] = Handoff("offers")
        self._choices: Handoff[Choice] = Handoff("choices")

        self._world = world.snapshot()
        self._phase = TurnPhase.IDLE
        self._turn = 1
        self._current_offer: tuple[Decision, ...] = ()
        self._history: list[TurnRecord] = []
        self._ending: Optional[GameEnding] = None
        self._thread: Optional[threading.Thread] = None

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------

    @property
    def phase(self) -> TurnPhase:
        return self._phase

    @property
    def turn(self) -> int:
        return self._turn

    @property
    def ending(self) -> Optional[GameEnding]:
        return self._ending

    def get_world(self) -> World:
        """Snapshot of the current world."""
        return self._world.snapshot()

    def get_history(self) -> list[TurnRecord]:
        return list(self._history)

    def is_over(self) -> bool:
        return self._ending is not None

    # -------------------------------------------------------------------------
    # Consumer side
    # -------------------------------------------------------------------------

    def submit(self, choice: Choice) -> bool:
        """Hand the loop the choice for the current round.

        Blocks until the loop takes it. Only one choice is accepted per
        round; callers with several input sources must serialize upstream.

        Returns:
            True if the loop took the choice, False if the run was cancelled
            or has ended.

        Raises:
            ValueError: If the choice is not part of the current offer.
        """
        if self._choices.closed:
            return False
        if not any(choice in decision.choices for decision in self._current_offer):
            raise ValueError(f"Choice '{choice.description}' is not part of the current offer")
        return self._choices.put(choice)

    def cancel(self) -> None:
        """Cancel the run.

        Closing the choice intake is the cancellation signal. The outbound
        handoffs are closed too so a loop blocked on publishing is released.
        The loop only observes this at its blocking points, so a world
        mutation in progress always completes first.
        """
        logger.info("Cancellation requested")
        self._choices.close()
        self.worlds.close()
        self.offers.close()

    # -------------------------------------------------------------------------
    # Running
    # -------------------------------------------------------------------------

    def start(self) -> threading.Thread:
        """Run the loop on a daemon thread."""
        if self._thread is not None:
            raise RuntimeError("Turn loop already started")
        self._thread = threading.Thread(target=self.run, name="decree-turn-loop", daemon=True)
        self._thread.start()
        return self._thread

    def join(self, timeout: Optional[float] = None) -> Optional[GameEnding]:
        """Wait for a started loop to finish and return its ending."""
        if self._thread is not None:
            self._thread.join(timeout)
        return self._ending

    def run(self) -> GameEnding:
        """Run turns until the loop terminates, in the calling thread."""
        logger.info(
            f"Starting '{self.scenario.title}' with {len(self.scenario)} rules, "
            f"max_decisions={self.max_decisions}"
        )
        try:
            ending = self._run_turns()
        finally:
            self._choices.close()
            self.worlds.close()
            self.offers.close()
        self._ending = ending
        self._phase = TurnPhase.TERMINATED
        logger.info(f"Run ended on turn {ending.turn}: {ending.description}")
        return ending

    def _run_turns(self) -> GameEnding:
        while True:
            self._phase = TurnPhase.IDLE
            if self.max_turns is not None and len(self._history) >= self.max_turns:
                return self._end(EndingType.TURN_LIMIT)

            # OFFERING
            self._phase = TurnPhase.OFFERING
            snapshot = self._world.snapshot()
            if not self.worlds.put(snapshot.snapshot()):
                return self._end(EndingType.CANCELLED)

            try:
                decisions = self.scenario.decisions(snapshot, self.max_decisions, self.rng)
            except GuardEvaluationError as e:
                logger.error(f"Error getting decisions on turn {self._turn}: {e}")
                return self._end(EndingType.EVALUATION_FAILED, str(e))

            if not decisions:
                logger.warning(f"No decisions offered on turn {self._turn}; run is stuck")
                return self._end(EndingType.STUCK)

            # AWAITING_CHOICE
            offer = tuple(decisions)
            self._current_offer = offer
            if not self.offers.put(offer):
                return self._end(EndingType.CANCELLED)

            self._phase = TurnPhase.AWAITING_CHOICE
            try:
                choice = self._choices.get()
            except HandoffClosed:
                return self._end(EndingType.CANCELLED)
            self._current_offer = ()

            # APPLYING
            self._phase = TurnPhase.APPLYING
            try:
                self._world.apply(choice)
            except MalformedDeltaError as e:
                logger.error(f"Error applying choice '{choice.description}' to world: {e}")
                return self._end(EndingType.MALFORMED_DELTA, str(e))

            record = TurnRecord(
                turn=self._turn,
                world_before=snapshot,
                decisions=offer,
                choice=choice,
                world_after=self._world.snapshot(),
            )
            self._history.append(record)
            logger.debug(f"Turn {self._turn}: applied '{choice.description}'")
            if self.on_turn is not None:
                self.on_turn(record)
            self._turn += 1

    def _end(self, ending_type: EndingType, error: Optional[str] = None) -> GameEnding:
        self._current_offer = ()
        return GameEnding(
            ending_type=ending_type,
            turn=self._turn,
            world=self._world.snapshot(),
            error=error,
        )
