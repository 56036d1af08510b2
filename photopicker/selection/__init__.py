"""Selection module: shuffle state machine, feedback and session."""

from .feedback import BellFeedback, Feedback, NullFeedback, Signal, emit_safely
from .session import DetectionSession
from .shuffle import Idle, Selected, ShuffleRun, ShuffleSelector, ShuffleState, Shuffling

__all__ = [
    "BellFeedback",
    "DetectionSession",
    "Feedback",
    "Idle",
    "NullFeedback",
    "Selected",
    "ShuffleRun",
    "ShuffleSelector",
    "ShuffleState",
    "Shuffling",
    "Signal",
    "emit_safely",
]
