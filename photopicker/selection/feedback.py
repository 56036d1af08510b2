"""Feedback signals emitted while shuffling."""

import enum
import sys
from typing import Protocol, TextIO


class Signal(enum.Enum):
    """Feedback signal kinds."""

    TICK = "tick"
    RESULT = "result"


class Feedback(Protocol):
    """Protocol for feedback channels (sound cues and the like)."""

    def emit(self, signal: Signal) -> None:
        """Deliver a signal. Fire-and-forget."""
        ...


class NullFeedback:
    """Feedback channel that drops every signal."""

    def emit(self, signal: Signal) -> None:
        pass


class BellFeedback:
    """Terminal bell: one BEL per tick, two for the result."""

    def __init__(self, stream: TextIO = sys.stdout):
        self.stream = stream

    def emit(self, signal: Signal) -> None:
        self.stream.write("\a\a" if signal is Signal.RESULT else "\a")
        self.stream.flush()


def emit_safely(feedback: Feedback, signal: Signal) -> None:
    """Emit a signal; delivery failures are reported and otherwise ignored."""
    try:
        feedback.emit(signal)
    except Exception as e:
        print(f"Feedback delivery failed ({signal.value}): {e}", file=sys.stderr)
