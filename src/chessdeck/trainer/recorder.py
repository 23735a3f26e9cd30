"""SolutionRecorder — linear undo/redo history used to author a reference line."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from chessdeck.core import engine
from chessdeck.core.models import LinearStep
from chessdeck.core.replay import replay
from chessdeck.trainer.interfaces import (
    SOUND_CAPTURE,
    SOUND_MOVE,
    ISoundPlayer,
    SilentSoundPlayer,
)

_LOGGER = logging.getLogger(__name__)

SolutionCallback = Callable[[list[str]], None]
FenCallback = Callable[[str], None]


@dataclass
class RecorderEvents:
    on_solution_changed: list[SolutionCallback] = field(default_factory=list)
    on_current_fen_changed: list[FenCallback] = field(default_factory=list)
    on_promotion_requested: list[Callable[[str, str], None]] = field(default_factory=list)


class SolutionRecorder:
    """Records moves played on the board as a solution line.

    Stepping back keeps the later moves around; playing a new move from
    an earlier step discards everything after it.
    """

    __slots__ = (
        "_sound_player",
        "_root_fen",
        "_is_valid_fen",
        "_steps",
        "_current_index",
        "_pending_promotion",
        "events",
    )

    def __init__(
        self,
        initial_fen: str = engine.STARTING_FEN,
        move_list: Iterable[str] = (),
        *,
        sound_player: ISoundPlayer | None = None,
    ) -> None:
        self._sound_player = sound_player or SilentSoundPlayer()
        self._pending_promotion: tuple[str, str] | None = None
        self.events = RecorderEvents()
        self.set_root(initial_fen)
        moves = list(move_list)
        if moves:
            self._rebuild(moves)

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def root_fen(self) -> str:
        return self._root_fen

    @property
    def is_valid_fen(self) -> bool:
        return self._is_valid_fen

    @property
    def steps(self) -> tuple[LinearStep, ...]:
        return tuple(self._steps)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def current_step(self) -> LinearStep:
        return self._steps[self._current_index]

    @property
    def fen(self) -> str:
        return self.current_step.fen

    @property
    def legal_destinations(self) -> engine.Destinations:
        if self._pending_promotion is not None:
            return {}
        return self.current_step.legal_destinations

    @property
    def solution(self) -> list[str]:
        """UCIs of every recorded step, including those after the cursor."""
        return [step.uci for step in self._steps if step.uci is not None]

    @property
    def pending_promotion(self) -> tuple[str, str] | None:
        return self._pending_promotion

    # ── Recording ────────────────────────────────────────────────────────

    def set_root(self, fen: str) -> None:
        """Start an empty history from *fen*."""
        board, self._is_valid_fen = engine.position_from_fen(fen)
        self._root_fen = engine.to_fen(board)
        self._steps = [LinearStep.from_board(board)]
        self._current_index = 0
        self._pending_promotion = None
        self._emit_fen()

    def record_move(self, uci: str) -> LinearStep | None:
        """Play *uci* from the current step, overwriting any later steps."""
        board = engine.parse_fen(self.current_step.fen)
        move = engine.parse_uci(board, uci)
        if move is None:
            _LOGGER.debug("Ignoring unplayable move %r at step %d", uci, self._current_index)
            return None

        normalized = engine.to_uci(board, move)
        san = engine.to_san(board, move)
        step = LinearStep.from_board(engine.apply_move(board, move), normalized, san)

        del self._steps[self._current_index + 1 :]
        self._steps.append(step)
        self._current_index = len(self._steps) - 1
        self._pending_promotion = None

        self._sound_player.play(SOUND_CAPTURE if "x" in san else SOUND_MOVE)
        self._emit_fen()
        self._emit_solution(self.solution)
        return step

    def submit_move(self, origin: str, destination: str) -> LinearStep | None:
        """Board entry point; pawn moves onto the last rank wait for a piece choice."""
        if self._pending_promotion is not None:
            return None
        board = engine.parse_fen(self.current_step.fen)
        if engine.needs_promotion_choice(board, origin, destination):
            self._pending_promotion = (origin, destination)
            for cb in self.events.on_promotion_requested:
                cb(origin, destination)
            return None
        return self.record_move(f"{origin}{destination}")

    def resolve_promotion(self, role: str) -> LinearStep | None:
        if self._pending_promotion is None:
            return None
        origin, destination = self._pending_promotion
        uci = engine.promotion_uci(origin, destination, role)
        self._pending_promotion = None
        return self.record_move(uci)

    def sync_from_external(self, ucis: Iterable[str]) -> bool:
        """Adopt a solution coming from outside. Returns True if history was rebuilt.

        A list equal to what is already recorded is ignored, so echoing our
        own ``solution_changed`` back does not rebuild anything.
        """
        moves = list(ucis)
        if moves == self.solution:
            return False
        self._rebuild(moves)
        return True

    # ── Navigation ───────────────────────────────────────────────────────

    def go_to(self, index: int) -> bool:
        if not 0 <= index < len(self._steps):
            return False
        self._current_index = index
        self._pending_promotion = None
        self._sound_player.play(SOUND_MOVE)
        self._emit_fen()
        return True

    def previous(self) -> bool:
        return self.go_to(self._current_index - 1)

    def next(self) -> bool:
        return self.go_to(self._current_index + 1)

    def jump_to_end(self) -> bool:
        return self.go_to(len(self._steps) - 1)

    def reset(self) -> None:
        """Return to the root and publish an empty solution."""
        self.go_to(0)
        self._emit_solution([])

    # ── Internal helpers ─────────────────────────────────────────────────

    def _rebuild(self, ucis: list[str]) -> None:
        result = replay(self._root_fen, ucis)
        if not result.is_complete:
            _LOGGER.info(
                "Solution truncated to %d of %d moves", len(result.steps), result.requested
            )
        root = self._steps[0]
        self._steps = [root]
        for step in result.steps:
            board = engine.parse_fen(step.fen)
            self._steps.append(LinearStep.from_board(board, step.uci, step.san))
        self._current_index = len(self._steps) - 1
        self._pending_promotion = None
        self._emit_fen()

    def _emit_fen(self) -> None:
        fen = self.fen
        for cb in self.events.on_current_fen_changed:
            cb(fen)

    def _emit_solution(self, ucis: list[str]) -> None:
        for cb in self.events.on_solution_changed:
            cb(list(ucis))
