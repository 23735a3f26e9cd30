"""AnalysisTree — a branching move tree for free exploration."""

from __future__ import annotations

import logging
import weakref
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

import chess

from chessdeck.core import engine
from chessdeck.core.replay import replay
from chessdeck.trainer.interfaces import (
    SOUND_CAPTURE,
    SOUND_MOVE,
    ISoundPlayer,
    SilentSoundPlayer,
)

_LOGGER = logging.getLogger(__name__)


class AnalysisNode:
    """A position in the tree.

    Children are owned by their parent; the parent link is a weak
    reference, so a node keeps its subtree alive but not its ancestors.
    """

    __slots__ = ("node_id", "ply", "fen", "uci", "san", "children", "_parent", "__weakref__")

    def __init__(
        self,
        *,
        node_id: str,
        ply: int,
        fen: str,
        uci: str | None = None,
        san: str | None = None,
        parent: AnalysisNode | None = None,
    ) -> None:
        self.node_id = node_id
        self.ply = ply
        self.fen = fen
        self.uci = uci
        self.san = san
        self.children: list[AnalysisNode] = []
        self._parent = weakref.ref(parent) if parent is not None else None

    @property
    def parent(self) -> AnalysisNode | None:
        return self._parent() if self._parent is not None else None

    @property
    def is_root(self) -> bool:
        return self._parent is None

    @property
    def board(self) -> chess.Board:
        return engine.parse_fen(self.fen)

    @property
    def legal_destinations(self) -> dict[str, frozenset[str]]:
        return engine.legal_destinations(self.board)

    @property
    def is_capture(self) -> bool:
        return self.san is not None and "x" in self.san

    def child(self, uci: str) -> AnalysisNode | None:
        for node in self.children:
            if node.uci == uci:
                return node
        return None

    def __repr__(self) -> str:
        return f"AnalysisNode({self.node_id!r}, ply={self.ply}, san={self.san!r})"


NodeCallback = Callable[[AnalysisNode], None]


@dataclass
class TreeEvents:
    on_current_changed: list[NodeCallback] = field(default_factory=list)
    on_promotion_requested: list[Callable[[str, str], None]] = field(default_factory=list)


class AnalysisTree:
    """Navigable move tree seeded from an initial line.

    The seed line becomes the first-child chain of the root; the cursor
    starts at the root.  Moves played from any node extend the tree, and
    nothing is ever removed until the whole tree is reloaded.
    """

    __slots__ = (
        "_sound_player",
        "_root",
        "_current",
        "_is_valid_fen",
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
        self.events = TreeEvents()
        self.load(initial_fen, move_list)

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def root(self) -> AnalysisNode:
        return self._root

    @property
    def current(self) -> AnalysisNode:
        return self._current

    @property
    def fen(self) -> str:
        return self._current.fen

    @property
    def turn(self) -> chess.Color:
        return self._current.board.turn

    @property
    def is_valid_fen(self) -> bool:
        return self._is_valid_fen

    @property
    def legal_destinations(self) -> dict[str, frozenset[str]]:
        if self._pending_promotion is not None:
            return {}
        return self._current.legal_destinations

    @property
    def pending_promotion(self) -> tuple[str, str] | None:
        return self._pending_promotion

    # ── Construction ─────────────────────────────────────────────────────

    def load(self, initial_fen: str, move_list: Iterable[str] = ()) -> None:
        """Discard the tree and rebuild it from *initial_fen* and *move_list*."""
        board, self._is_valid_fen = engine.position_from_fen(initial_fen)
        root_fen = engine.to_fen(board)
        self._root = AnalysisNode(node_id="root", ply=engine.root_ply(board), fen=root_fen)

        head = self._root
        for step in replay(root_fen, move_list).steps:
            node = AnalysisNode(
                node_id=f"{head.node_id}-{step.uci}",
                ply=head.ply + 1,
                fen=step.fen,
                uci=step.uci,
                san=step.san,
                parent=head,
            )
            head.children.append(node)
            head = node

        self._current = self._root
        self._pending_promotion = None
        self._emit_current()

    # ── Moves ────────────────────────────────────────────────────────────

    def apply_move(self, uci: str) -> AnalysisNode | None:
        """Play *uci* from the current node and move there.

        An existing child for the same move is reused.  Returns the new
        current node, or ``None`` if the move is not legal here.
        """
        node = self._current
        board = node.board
        move = engine.parse_uci(board, uci)
        if move is None:
            _LOGGER.debug("Ignoring unplayable move %r at %s", uci, node.node_id)
            return None

        normalized = engine.to_uci(board, move)
        child = node.child(normalized)
        if child is None:
            child = AnalysisNode(
                node_id=f"{node.node_id}-{normalized}",
                ply=node.ply + 1,
                fen=engine.to_fen(engine.apply_move(board, move)),
                uci=normalized,
                san=engine.to_san(board, move),
                parent=node,
            )
            node.children.append(child)

        self._set_current(child)
        return child

    def submit_move(self, origin: str, destination: str) -> AnalysisNode | None:
        """Board entry point; pawn moves onto the last rank wait for a piece choice."""
        if self._pending_promotion is not None:
            return None
        if engine.needs_promotion_choice(self._current.board, origin, destination):
            self._pending_promotion = (origin, destination)
            for cb in self.events.on_promotion_requested:
                cb(origin, destination)
            return None
        return self.apply_move(f"{origin}{destination}")

    def resolve_promotion(self, role: str) -> AnalysisNode | None:
        if self._pending_promotion is None:
            return None
        origin, destination = self._pending_promotion
        uci = engine.promotion_uci(origin, destination, role)
        self._pending_promotion = None
        return self.apply_move(uci)

    def play_variation(self, uci_moves: Iterable[str]) -> AnalysisNode:
        """Replay *uci_moves* from the root, extending the tree where needed."""
        self.reset()
        for uci in uci_moves:
            self.apply_move(uci)
        return self._current

    # ── Navigation ───────────────────────────────────────────────────────

    def jump_to(self, node: AnalysisNode) -> None:
        if not self._owns(node):
            _LOGGER.debug("Ignoring jump to foreign node %r", node)
            return
        self._set_current(node)

    def next(self) -> None:
        if self._current.children:
            self._set_current(self._current.children[0])

    def previous(self) -> None:
        parent = self._current.parent
        if parent is not None:
            self._set_current(parent)

    def reset(self) -> None:
        self._set_current(self._root)

    def jump_to_end(self) -> None:
        node = self._current
        while node.children:
            node = node.children[0]
        self._set_current(node)

    # ── Queries ──────────────────────────────────────────────────────────

    def path(self, node: AnalysisNode | None = None) -> list[AnalysisNode]:
        """Nodes from the root down to *node* (default: current), inclusive."""
        nodes: list[AnalysisNode] = []
        cursor: AnalysisNode | None = node or self._current
        while cursor is not None:
            nodes.append(cursor)
            cursor = cursor.parent
        nodes.reverse()
        return nodes

    def uci_path(self, node: AnalysisNode | None = None) -> list[str]:
        return [n.uci for n in self.path(node) if n.uci is not None]

    def mainline(self) -> list[AnalysisNode]:
        """First-child chain below the root."""
        nodes: list[AnalysisNode] = []
        node = self._root
        while node.children:
            node = node.children[0]
            nodes.append(node)
        return nodes

    def iter_nodes(self) -> list[AnalysisNode]:
        """All nodes, depth first, children in insertion order."""
        out: list[AnalysisNode] = []
        stack = [self._root]
        while stack:
            node = stack.pop()
            out.append(node)
            stack.extend(reversed(node.children))
        return out

    # ── Internal helpers ─────────────────────────────────────────────────

    def _owns(self, node: AnalysisNode) -> bool:
        top = node
        while top.parent is not None:
            top = top.parent
        return top is self._root

    def _set_current(self, node: AnalysisNode) -> None:
        if node is self._current:
            return
        self._current = node
        self._pending_promotion = None
        if node.uci is not None:
            self._sound_player.play(SOUND_CAPTURE if node.is_capture else SOUND_MOVE)
        self._emit_current()

    def _emit_current(self) -> None:
        for cb in self.events.on_current_changed:
            cb(self._current)
