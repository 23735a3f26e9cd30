"""Abstract interfaces and shared enums for the trainer layer.

Delayed work and sound are capabilities handed to each component at
construction, so the state machines stay testable without a running
Qt event loop.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum, StrEnum, auto

# ── Puzzle FSM states ────────────────────────────────────────────────────────


class PuzzlePhase(IntEnum):
    """Finite-state-machine states for one guided puzzle attempt.

    Correct-move feedback is not a phase: it is carried by
    ``PuzzleSession.feedback`` while the session sits in
    ``AWAITING_OPPONENT_REPLY`` or ``REVIEWING``.
    """

    AWAITING_USER_MOVE = auto()
    AWAITING_PROMOTION_CHOICE = auto()
    AWAITING_OPPONENT_REPLY = auto()  # timed
    SHOWING_INCORRECT_FEEDBACK = auto()  # timed
    REVERTING = auto()  # timed
    REVIEWING = auto()  # terminal

    @property
    def accepts_board_input(self) -> bool:
        return self == PuzzlePhase.AWAITING_USER_MOVE


class FeedbackKind(StrEnum):
    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass(slots=True, frozen=True)
class Feedback:
    """Marker drawn on *square* after the user's move was judged."""

    kind: FeedbackKind
    square: str


# ── Sound cue names ──────────────────────────────────────────────────────────

SOUND_MOVE = "move"
SOUND_CAPTURE = "capture"
SOUND_FAILURE = "failure"


# ── Abstract interfaces ─────────────────────────────────────────────────────


class ScheduledTask(ABC):
    """Handle for a callback scheduled through an :class:`IScheduler`."""

    @abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from running. No-op once it has fired."""

    @property
    @abstractmethod
    def is_active(self) -> bool:
        """Is the callback still waiting to run?"""


class IScheduler(ABC):
    """Runs callbacks after a delay on the caller's thread."""

    @abstractmethod
    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledTask:
        """Run *callback* once after *delay_ms* milliseconds."""


class ISoundPlayer(ABC):
    """Plays named sound cues (``move``, ``capture``, ``failure``)."""

    @abstractmethod
    def play(self, name: str) -> None: ...


class SilentSoundPlayer(ISoundPlayer):
    """Sound capability that plays nothing."""

    def play(self, name: str) -> None:
        pass
