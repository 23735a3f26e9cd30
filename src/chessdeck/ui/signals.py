"""Qt signal bridge re-publishing trainer events to widgets."""

from __future__ import annotations

from PyQt6.QtCore import QObject, pyqtSignal

from chessdeck.trainer.analysis_tree import AnalysisNode, AnalysisTree
from chessdeck.trainer.comments import CommentMoveResolver
from chessdeck.trainer.interfaces import PuzzlePhase
from chessdeck.trainer.puzzle import PuzzleSession
from chessdeck.trainer.recorder import SolutionRecorder


class TrainerSignals(QObject):
    """One QObject per view; bind the components the view shows."""

    puzzle_solved = pyqtSignal()
    incorrect_move = pyqtSignal()
    phase_changed = pyqtSignal(int)
    promotion_requested = pyqtSignal(str, str)  # origin, destination
    solution_changed = pyqtSignal(list)
    current_fen_changed = pyqtSignal(str)
    variation_selected = pyqtSignal(list)

    def bind_puzzle(self, session: PuzzleSession) -> None:
        events = session.events
        events.on_puzzle_solved.append(self.puzzle_solved.emit)
        events.on_incorrect_move.append(self.incorrect_move.emit)
        events.on_position_changed.append(self.current_fen_changed.emit)
        events.on_promotion_requested.append(self.promotion_requested.emit)
        events.on_phase_changed.append(self._emit_phase)

    def bind_tree(self, tree: AnalysisTree) -> None:
        tree.events.on_current_changed.append(self._emit_node)
        tree.events.on_promotion_requested.append(self.promotion_requested.emit)

    def bind_recorder(self, recorder: SolutionRecorder) -> None:
        events = recorder.events
        events.on_solution_changed.append(self.solution_changed.emit)
        events.on_current_fen_changed.append(self.current_fen_changed.emit)
        events.on_promotion_requested.append(self.promotion_requested.emit)

    def bind_comments(self, resolver: CommentMoveResolver) -> None:
        resolver.events.on_variation_selected.append(self.variation_selected.emit)

    def _emit_phase(self, phase: PuzzlePhase) -> None:
        self.phase_changed.emit(int(phase))

    def _emit_node(self, node: AnalysisNode) -> None:
        self.current_fen_changed.emit(node.fen)
