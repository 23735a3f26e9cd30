"""Trainer layer — puzzle FSM, analysis tree, solution recorder, comment links.

Quick start::

    from chessdeck.trainer import PuzzleSession

    session = PuzzleSession(fen, ["e2e4", "e7e5", "g1f3"])
    session.events.on_puzzle_solved.append(lambda: print("solved"))
    session.submit_move("e2", "e4")
"""

from chessdeck.trainer.analysis_tree import AnalysisNode, AnalysisTree, TreeEvents
from chessdeck.trainer.comments import (
    CommentEvents,
    CommentMoveResolver,
    PositionMatch,
    clean_san,
    find_position_at,
)
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
from chessdeck.trainer.puzzle import PuzzleEvents, PuzzleSession
from chessdeck.trainer.recorder import RecorderEvents, SolutionRecorder

__all__ = [
    # Interfaces
    "IScheduler",
    "ISoundPlayer",
    "ScheduledTask",
    "SilentSoundPlayer",
    # Enums / values
    "Feedback",
    "FeedbackKind",
    "PuzzlePhase",
    "SOUND_CAPTURE",
    "SOUND_FAILURE",
    "SOUND_MOVE",
    # Concrete
    "AnalysisNode",
    "AnalysisTree",
    "CommentEvents",
    "CommentMoveResolver",
    "PositionMatch",
    "PuzzleEvents",
    "PuzzleSession",
    "RecorderEvents",
    "SolutionRecorder",
    "TreeEvents",
    "clean_san",
    "find_position_at",
]
