"""Replay of a UCI move sequence from a root position."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

import chess

from chessdeck.core import engine
from chessdeck.core.models import MoveRecord

_LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ReplayStep:
    """Position reached after one replayed move."""

    fen: str
    uci: str
    san: str
    is_capture: bool

    @property
    def record(self) -> MoveRecord:
        return MoveRecord(self.uci, self.san, self.is_capture)


@dataclass(slots=True, frozen=True)
class ReplayResult:
    board: chess.Board
    steps: tuple[ReplayStep, ...]
    requested: int
    valid_root: bool

    @property
    def fen(self) -> str:
        return engine.to_fen(self.board)

    @property
    def ucis(self) -> list[str]:
        return [step.uci for step in self.steps]

    @property
    def is_complete(self) -> bool:
        """Were all requested moves playable?"""
        return len(self.steps) == self.requested


def replay(root_fen: str, ucis: Iterable[str]) -> ReplayResult:
    """Play *ucis* from *root_fen*, stopping at the first unplayable move.

    Moves before the bad entry are kept; nothing after it is produced.
    Stored UCIs use the standard castling encoding.
    """
    board, valid_root = engine.position_from_fen(root_fen)
    moves = list(ucis)
    steps: list[ReplayStep] = []
    for uci in moves:
        move = engine.parse_uci(board, uci)
        if move is None:
            _LOGGER.debug("Replay stopped at %r (ply %d)", uci, len(steps) + 1)
            break
        normalized = engine.to_uci(board, move)
        san = engine.to_san(board, move)
        capture = engine.is_capture(board, normalized)
        board = engine.apply_move(board, move)
        steps.append(ReplayStep(engine.to_fen(board), normalized, san, capture))
    return ReplayResult(
        board=board,
        steps=tuple(steps),
        requested=len(moves),
        valid_root=valid_root,
    )


def replay_board(root_fen: str, ucis: Iterable[str]) -> chess.Board:
    return replay(root_fen, ucis).board
