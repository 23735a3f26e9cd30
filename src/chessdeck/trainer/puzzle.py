"""PuzzleSession — one guided attempt at a puzzle's reference line.

The user plays their side of the line; correct moves are answered by the
opponent's reply after a short pause, wrong moves are shown briefly and
then taken back.  Once the line is exhausted the session switches to a
read-only review of the solution.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import chess

from chessdeck.core import engine
from chessdeck.core.replay import replay_board
from chessdeck.settings import TrainerSettings
from chessdeck.trainer.interfaces import (
    SOUND_CAPTURE,
    SOUND_FAILURE,
    SOUND_MOVE,
    Feedback,
    FeedbackKind,
    IScheduler,
    ISoundPlayer,
    PuzzlePhase,
    ScheduledTask,
    SilentSoundPlayer,
)

_LOGGER = logging.getLogger(__name__)

# ── Event definitions ────────────────────────────────────────────────────────

PhaseCallback = Callable[[PuzzlePhase], None]
PositionCallback = Callable[[str], None]  # fen
FeedbackCallback = Callable[[Feedback | None], None]
PromotionCallback = Callable[[str, str], None]  # origin, destination


@dataclass
class PuzzleEvents:
    """Observable callbacks. Multiple handlers per event."""

    on_phase_changed: list[PhaseCallback] = field(default_factory=list)
    on_position_changed: list[PositionCallback] = field(default_factory=list)
    on_feedback: list[FeedbackCallback] = field(default_factory=list)
    on_promotion_requested: list[PromotionCallback] = field(default_factory=list)
    on_puzzle_solved: list[Callable[[], None]] = field(default_factory=list)
    on_incorrect_move: list[Callable[[], None]] = field(default_factory=list)


def _default_scheduler() -> IScheduler:
    from chessdeck.ui.scheduler import QtScheduler

    return QtScheduler()


# ── Session ──────────────────────────────────────────────────────────────────


class PuzzleSession:
    """Drives a puzzle attempt as a finite state machine.

    At most one move is being resolved at any time: every timed phase
    refuses board input, and :meth:`reset` cancels all pending callbacks
    before reinitialising.
    """

    __slots__ = (
        "_scheduler",
        "_sound_player",
        "_settings",
        "_orientation",
        "_root_fen",
        "_line",
        "_setup_move",
        "_is_valid_fen",
        "_board",
        "_current_index",
        "_phase",
        "_feedback",
        "_pending_promotion",
        "_review_index",
        "_tasks",
        "_generation",
        "events",
    )

    def __init__(
        self,
        fen: str,
        line: Sequence[str],
        *,
        setup_move: bool = False,
        orientation: chess.Color = chess.WHITE,
        scheduler: IScheduler | None = None,
        sound_player: ISoundPlayer | None = None,
        settings: TrainerSettings | None = None,
    ) -> None:
        self._scheduler = scheduler or _default_scheduler()
        self._sound_player = sound_player or SilentSoundPlayer()
        self._settings = settings or TrainerSettings()
        self._orientation = orientation
        self._tasks: list[ScheduledTask] = []
        self._generation = 0
        self._phase = PuzzlePhase.AWAITING_USER_MOVE
        self._feedback: Feedback | None = None
        self.events = PuzzleEvents()
        self._start(fen, line, setup_move)

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def phase(self) -> PuzzlePhase:
        return self._phase

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def reference_line(self) -> tuple[str, ...]:
        return self._line

    @property
    def setup_move(self) -> bool:
        return self._setup_move

    @property
    def orientation(self) -> chess.Color:
        return self._orientation

    @property
    def root_fen(self) -> str:
        return self._root_fen

    @property
    def is_valid_fen(self) -> bool:
        return self._is_valid_fen

    @property
    def fen(self) -> str:
        """FEN of the position currently on display."""
        return engine.to_fen(self._board)

    @property
    def board(self) -> chess.Board:
        return self._board.copy(stack=False)

    @property
    def is_check(self) -> bool:
        return engine.is_check(self._board)

    @property
    def feedback(self) -> Feedback | None:
        return self._feedback

    @property
    def pending_promotion(self) -> tuple[str, str] | None:
        return self._pending_promotion

    @property
    def is_reviewing(self) -> bool:
        return self._phase == PuzzlePhase.REVIEWING

    @property
    def review_index(self) -> int:
        """Index of the last reference move shown in review; ``-1`` is the root."""
        return self._review_index

    @property
    def legal_destinations(self) -> dict[str, frozenset[str]]:
        """Destinations the board may offer; empty while input is suspended."""
        if not self._phase.accepts_board_input:
            return {}
        return engine.legal_destinations(self._board)

    # ── Public API ───────────────────────────────────────────────────────

    def reset(self, fen: str, line: Sequence[str], setup_move: bool = False) -> None:
        """Abandon the current attempt and start over with new parameters."""
        self._start(fen, line, setup_move)

    def submit_move(self, origin: str, destination: str) -> bool:
        """Handle a move dragged on the board. Returns True if it was taken up."""
        if self._phase != PuzzlePhase.AWAITING_USER_MOVE:
            _LOGGER.debug("Ignoring %s%s in phase %s", origin, destination, self._phase.name)
            return False

        if engine.needs_promotion_choice(self._board, origin, destination):
            self._pending_promotion = (origin, destination)
            self._set_phase(PuzzlePhase.AWAITING_PROMOTION_CHOICE)
            for cb in self.events.on_promotion_requested:
                cb(origin, destination)
            return True

        return self._resolve(f"{origin}{destination}")

    def resolve_promotion(self, role: str) -> bool:
        """Complete a suspended promotion with *role* (``"queen"``, ``"knight"``…)."""
        if self._phase != PuzzlePhase.AWAITING_PROMOTION_CHOICE:
            return False
        if self._pending_promotion is None:
            return False

        origin, destination = self._pending_promotion
        uci = engine.promotion_uci(origin, destination, role)
        self._pending_promotion = None
        self._set_phase(PuzzlePhase.AWAITING_USER_MOVE)
        return self._resolve(uci)

    def hint(self) -> tuple[str, str] | None:
        """Origin and destination of the expected move, while it is the user's turn."""
        if self._phase != PuzzlePhase.AWAITING_USER_MOVE:
            return None
        if self._current_index >= len(self._line):
            return None
        expected = self._line[self._current_index]
        return expected[0:2], expected[2:4]

    # Review navigation

    def go_to_start(self) -> None:
        self._set_review_index(-1)

    def previous(self) -> None:
        self._set_review_index(max(-1, self._review_index - 1))

    def next(self) -> None:
        self._set_review_index(min(len(self._line) - 1, self._review_index + 1))

    def go_to_end(self) -> None:
        self._set_review_index(len(self._line) - 1)

    # ── Move resolution ──────────────────────────────────────────────────

    def _resolve(self, uci: str) -> bool:
        if not self._is_users_turn():
            _LOGGER.debug("Ignoring %s: index %d is the opponent's ply", uci, self._current_index)
            return False

        move = engine.parse_uci(self._board, uci)
        if move is None:
            _LOGGER.debug("Ignoring illegal move %s", uci)
            return False

        expected = self._expected_move()
        normalized = engine.to_uci(self._board, move)
        destination = normalized[2:4]
        capture = engine.is_capture(self._board, normalized)
        correct = expected is not None and engine.same_move(self._board, normalized, expected)

        self._board = engine.apply_move(self._board, move)
        self._emit_position()

        if correct:
            self._on_correct(destination, capture)
        else:
            self._on_incorrect(destination)
        return True

    def _on_correct(self, destination: str, capture: bool) -> None:
        self._set_feedback(Feedback(FeedbackKind.CORRECT, destination))
        self._sound_player.play(SOUND_CAPTURE if capture else SOUND_MOVE)
        self._current_index += 1

        if self._current_index < len(self._line):
            self._set_phase(PuzzlePhase.AWAITING_OPPONENT_REPLY)
            self._schedule(self._settings.opponent_reply_delay_ms, self._play_opponent_move)
            return

        self._schedule(self._settings.correct_feedback_ms, self._clear_feedback)
        self._enter_review(solved=True)

    def _on_incorrect(self, destination: str) -> None:
        self._set_feedback(Feedback(FeedbackKind.INCORRECT, destination))
        self._sound_player.play(SOUND_FAILURE)
        self._set_phase(PuzzlePhase.SHOWING_INCORRECT_FEEDBACK)
        for cb in self.events.on_incorrect_move:
            cb()
        self._schedule(self._settings.incorrect_feedback_ms, self._begin_revert)

    def _begin_revert(self) -> None:
        self._set_phase(PuzzlePhase.REVERTING)
        self._schedule(self._settings.revert_delay_ms, self._finish_revert)

    def _finish_revert(self) -> None:
        self._board = replay_board(self._root_fen, self._line[: self._current_index])
        self._set_feedback(None)
        self._emit_position()
        self._set_phase(PuzzlePhase.AWAITING_USER_MOVE)

    def _play_opponent_move(self) -> None:
        self._set_feedback(None)
        uci = self._line[self._current_index]
        move = engine.parse_uci(self._board, uci)
        if move is None:
            _LOGGER.warning(
                "Reference move %r at index %d is not playable; ending attempt",
                uci,
                self._current_index,
            )
            self._enter_review(solved=False)
            return

        capture = engine.is_capture(self._board, engine.to_uci(self._board, move))
        self._board = engine.apply_move(self._board, move)
        self._sound_player.play(SOUND_CAPTURE if capture else SOUND_MOVE)
        self._current_index += 1
        self._emit_position()

        if self._current_index >= len(self._line):
            self._enter_review(solved=True)
        else:
            self._set_phase(PuzzlePhase.AWAITING_USER_MOVE)

    def _enter_review(self, *, solved: bool) -> None:
        self._review_index = len(self._line) - 1
        self._set_phase(PuzzlePhase.REVIEWING)
        if solved:
            for cb in self.events.on_puzzle_solved:
                cb()

    def _set_review_index(self, index: int) -> None:
        if self._phase != PuzzlePhase.REVIEWING:
            return
        self._review_index = index
        self._board = replay_board(self._root_fen, self._line[: index + 1])
        self._emit_position()

    # ── Internal helpers ─────────────────────────────────────────────────

    def _start(self, fen: str, line: Sequence[str], setup_move: bool) -> None:
        self._cancel_pending()
        self._board, self._is_valid_fen = engine.position_from_fen(fen)
        self._root_fen = engine.to_fen(self._board)
        self._line = tuple(line)
        self._setup_move = setup_move
        self._current_index = 0
        self._pending_promotion = None
        self._review_index = -1
        self._set_feedback(None)
        self._emit_position()

        if setup_move and self._line:
            self._set_phase(PuzzlePhase.AWAITING_OPPONENT_REPLY)
            self._schedule(self._settings.setup_move_delay_ms, self._play_opponent_move)
        else:
            self._set_phase(PuzzlePhase.AWAITING_USER_MOVE)

    def _is_users_turn(self) -> bool:
        user_parity = 1 if self._setup_move else 0
        return self._current_index % 2 == user_parity

    def _expected_move(self) -> str | None:
        if self._current_index < len(self._line):
            return self._line[self._current_index]
        return None

    def _schedule(self, delay_ms: int, callback: Callable[[], None]) -> None:
        generation = self._generation

        def _fire() -> None:
            # A task that outlived its puzzle must not touch the new one.
            if generation != self._generation:
                return
            callback()

        self._tasks = [task for task in self._tasks if task.is_active]
        self._tasks.append(self._scheduler.schedule(delay_ms, _fire))

    def _cancel_pending(self) -> None:
        self._generation += 1
        for task in self._tasks:
            task.cancel()
        self._tasks.clear()

    def _clear_feedback(self) -> None:
        self._set_feedback(None)

    def _set_feedback(self, feedback: Feedback | None) -> None:
        if feedback == self._feedback:
            return
        self._feedback = feedback
        for cb in self.events.on_feedback:
            cb(feedback)

    def _set_phase(self, phase: PuzzlePhase) -> None:
        if phase == self._phase:
            return
        self._phase = phase
        for cb in self.events.on_phase_changed:
            cb(phase)

    def _emit_position(self) -> None:
        fen = engine.to_fen(self._board)
        for cb in self.events.on_position_changed:
            cb(fen)
