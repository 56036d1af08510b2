"""Randomized shuffle-then-select state machine."""

import random
import time
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Sequence, Tuple, Union

from ..detection.candidates import Candidate, CandidateId
from .feedback import Feedback, NullFeedback, Signal, emit_safely


@dataclass(frozen=True)
class Idle:
    """No shuffle running and nothing selected."""


@dataclass(frozen=True)
class Shuffling:
    """A shuffle is running with one candidate highlighted."""

    highlighted: CandidateId


@dataclass(frozen=True)
class Selected:
    """A shuffle finished and landed on a candidate."""

    id: CandidateId


ShuffleState = Union[Idle, Shuffling, Selected]


class ShuffleRun:
    """One cancellable shuffle.

    The run advances only when its consumer calls tick() (or iterates it),
    so ticks never overlap. Once cancelled it publishes nothing further.
    """

    def __init__(self, selector: "ShuffleSelector", candidates: Tuple[Candidate, ...]):
        self._selector = selector
        self._candidates = candidates
        self._tick = 0
        self._cancelled = False
        self._done = False
        # Drawn up front so the selector can publish it as soon as the run starts
        self._opening = self._draw()

    @property
    def opening(self) -> Candidate:
        """The candidate highlighted by tick 0."""
        return self._opening

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        """True once the run has published its Selected state."""
        return self._done

    @property
    def ticks_elapsed(self) -> int:
        return self._tick

    def cancel(self) -> None:
        """Abandon the run; the selector's state is left untouched."""
        self._cancelled = True

    def _draw(self) -> Candidate:
        index = self._selector.rng.randrange(len(self._candidates))
        return self._candidates[index]

    def tick(self) -> Optional[ShuffleState]:
        """Advance one step and publish the resulting state.

        Returns:
            The published state, or None if the run is finished or cancelled.
        """
        if self._cancelled or self._done:
            return None

        selector = self._selector
        if self._tick < selector.ticks:
            candidate = self._opening if self._tick == 0 else self._draw()
            state: ShuffleState = Shuffling(highlighted=candidate.id)
            selector._publish(self, state)
            if 1 <= self._tick < selector.ticks - selector.silent_tail:
                emit_safely(selector.feedback, Signal.TICK)
            self._tick += 1
            return state

        # Independent of whichever candidate the last tick highlighted
        state = Selected(id=self._draw().id)
        self._done = True
        selector._publish(self, state)
        emit_safely(selector.feedback, Signal.RESULT)
        return state

    def __iter__(self) -> Iterator[ShuffleState]:
        while True:
            state = self.tick()
            if state is None:
                return
            yield state

    def play(self, sleep: Callable[[float], None] = time.sleep) -> Iterator[ShuffleState]:
        """Yield states in real time, sleeping one interval before each tick.

        The final selection lands straight after the last tick.

        Args:
            sleep: Sleep function taking seconds.
        """
        delay = self._selector.interval_ms / 1000.0
        while not (self._done or self._cancelled):
            if self._tick < self._selector.ticks:
                sleep(delay)
            state = self.tick()
            if state is None:
                return
            yield state


class ShuffleSelector:
    """Owns the live candidate list and the current ShuffleState.

    Attributes:
        ticks: Highlight steps per run.
        interval_ms: Time between ticks in milliseconds.
        silent_tail: Number of final ticks that emit no feedback.
        rng: Random source; draws are uniform over candidates.
        feedback: Channel receiving tick/result signals.
    """

    def __init__(
        self,
        candidates: Sequence[Candidate] = (),
        ticks: int = 15,
        interval_ms: int = 150,
        silent_tail: int = 2,
        rng: Optional[random.Random] = None,
        feedback: Optional[Feedback] = None,
    ):
        """Initialize the selector.

        Args:
            candidates: Initial candidate list.
            ticks: Highlight steps per run (at least 1).
            interval_ms: Time between ticks in milliseconds.
            silent_tail: Final ticks that emit no tick signal.
            rng: Random source; a fresh unseeded one by default.
            feedback: Feedback channel; signals are dropped by default.

        Raises:
            ValueError: If ticks < 1 or interval_ms < 0.
        """
        if ticks < 1:
            raise ValueError(f"ticks must be at least 1, got {ticks}")
        if interval_ms < 0:
            raise ValueError(f"interval_ms must be non-negative, got {interval_ms}")
        self.ticks = ticks
        self.interval_ms = interval_ms
        self.silent_tail = silent_tail
        self.rng = rng or random.Random()
        self.feedback = feedback or NullFeedback()
        self._candidates: List[Candidate] = list(candidates)
        self._state: ShuffleState = Idle()
        self._run: Optional[ShuffleRun] = None

    @property
    def state(self) -> ShuffleState:
        return self._state

    @property
    def candidates(self) -> Tuple[Candidate, ...]:
        return tuple(self._candidates)

    @property
    def is_shuffling(self) -> bool:
        return self._run is not None

    def replace_candidates(self, candidates: Sequence[Candidate]) -> None:
        """Swap in a new candidate list, abandoning any running shuffle.

        The state returns to Idle since ids from the old list may no longer
        exist.
        """
        self._cancel_run()
        self._candidates = list(candidates)
        self._state = Idle()

    def start(self, candidates: Optional[Sequence[Candidate]] = None) -> Optional[ShuffleRun]:
        """Begin a shuffle run.

        Args:
            candidates: Replaces the live list first when given.

        Returns:
            The new run, or None if a run is already active or there are no
            candidates.
        """
        if self.is_shuffling:
            return None
        if candidates is not None:
            self.replace_candidates(candidates)
        if not self._candidates:
            return None

        self._run = ShuffleRun(self, tuple(self._candidates))
        self._state = Shuffling(highlighted=self._run.opening.id)
        return self._run

    def reset(self) -> None:
        """Cancel any run and return to Idle."""
        self._cancel_run()
        self._state = Idle()

    def _cancel_run(self) -> None:
        if self._run is not None:
            self._run.cancel()
            self._run = None

    def _publish(self, run: ShuffleRun, state: ShuffleState) -> None:
        if run is not self._run or run.cancelled:
            return
        self._state = state
        if isinstance(state, Selected):
            self._run = None
