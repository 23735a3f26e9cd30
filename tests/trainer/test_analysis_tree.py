"""Tests for the branching analysis tree."""

from __future__ import annotations

import gc
from typing import Any

import chess

from chessdeck.core import engine
from chessdeck.core.engine import STARTING_FEN
from chessdeck.core.replay import replay_board
from chessdeck.trainer.analysis_tree import AnalysisNode, AnalysisTree

CASTLING_FEN = "r3k2r/pppppppp/8/8/8/8/PPPPPPPP/R3K2R w KQkq - 0 1"
PROMOTION_FEN = "8/4P3/8/8/8/8/k7/4K3 w - - 0 1"


class TestSeeding:
    def test_seed_line_becomes_mainline(self) -> None:
        tree = AnalysisTree(STARTING_FEN, ["e2e4", "e7e5", "g1f3"])
        assert [n.san for n in tree.mainline()] == ["e4", "e5", "Nf3"]
        assert tree.current is tree.root
        assert tree.fen == STARTING_FEN

    def test_root_ply_from_fen(self) -> None:
        tree = AnalysisTree("4k3/8/8/8/8/8/8/4K3 b - - 0 5")
        assert tree.root.ply == 9
        assert tree.turn == chess.BLACK

    def test_seed_stops_at_bad_move(self) -> None:
        tree = AnalysisTree(STARTING_FEN, ["e2e4", "e7e4", "g1f3"])
        assert [n.uci for n in tree.mainline()] == ["e2e4"]

    def test_invalid_fen(self) -> None:
        tree = AnalysisTree("invalid", ["e2e4"])
        assert not tree.is_valid_fen
        assert tree.root.fen == STARTING_FEN
        assert len(tree.mainline()) == 1

    def test_every_node_matches_replay_of_its_path(self) -> None:
        tree = AnalysisTree(STARTING_FEN, ["e2e4", "e7e5", "g1f3"])
        tree.next()
        tree.apply_move("c7c5")
        tree.apply_move("g1f3")
        tree.reset()
        tree.apply_move("d2d4")

        for node in tree.iter_nodes():
            path = tree.uci_path(node)
            assert node.fen == replay_board(tree.root.fen, path).fen()
            assert node.ply == tree.root.ply + len(path)


class TestApplyMove:
    def test_new_child(self) -> None:
        tree = AnalysisTree()
        node = tree.apply_move("e2e4")
        assert node is not None
        assert node is tree.current
        assert node.san == "e4"
        assert node.parent is tree.root
        assert node.ply == 1

    def test_existing_child_is_reused(self) -> None:
        tree = AnalysisTree(STARTING_FEN, ["e2e4"])
        seeded = tree.root.children[0]
        assert tree.apply_move("e2e4") is seeded
        assert len(tree.root.children) == 1

    def test_idempotent_after_step_back(self) -> None:
        tree = AnalysisTree()
        first = tree.apply_move("g1f3")
        tree.previous()
        second = tree.apply_move("g1f3")
        assert first is second
        assert len(tree.root.children) == 1

    def test_branching_keeps_insertion_order(self) -> None:
        tree = AnalysisTree(STARTING_FEN, ["e2e4", "e7e5"])
        tree.next()
        tree.apply_move("c7c5")
        e4 = tree.root.children[0]
        assert [c.san for c in e4.children] == ["e5", "c5"]

        # Main continuation is still the first child.
        tree.jump_to(e4)
        tree.next()
        assert tree.current.san == "e5"

    def test_illegal_move(self) -> None:
        tree = AnalysisTree()
        assert tree.apply_move("e2e5") is None
        assert tree.apply_move("nonsense") is None
        assert tree.current is tree.root
        assert tree.root.children == []

    def test_castling_stored_normalised(self) -> None:
        tree = AnalysisTree(CASTLING_FEN)
        via_rook = tree.apply_move("e1h1")
        assert via_rook is not None
        assert via_rook.uci == "e1g1"
        assert via_rook.san == "O-O"
        tree.previous()
        assert tree.apply_move("e1g1") is via_rook

    def test_capture_flag_from_san(self) -> None:
        tree = AnalysisTree(STARTING_FEN, ["e2e4", "d7d5", "e4d5"])
        assert [n.is_capture for n in tree.mainline()] == [False, False, True]


class TestNavigation:
    def test_boundaries_are_no_ops(self) -> None:
        tree = AnalysisTree(STARTING_FEN, ["e2e4"])
        tree.previous()
        assert tree.current is tree.root
        tree.next()
        tree.next()
        assert tree.current.uci == "e2e4"

    def test_jump_to_end_follows_first_children(self) -> None:
        tree = AnalysisTree(STARTING_FEN, ["e2e4", "e7e5", "g1f3"])
        tree.jump_to_end()
        assert tree.current.san == "Nf3"
        tree.reset()
        assert tree.current is tree.root

    def test_path_and_uci_path(self) -> None:
        tree = AnalysisTree(STARTING_FEN, ["e2e4", "e7e5"])
        tree.jump_to_end()
        assert [n.node_id for n in tree.path()][0] == "root"
        assert tree.uci_path() == ["e2e4", "e7e5"]
        assert tree.uci_path(tree.root) == []

    def test_foreign_node_is_ignored(self) -> None:
        tree = AnalysisTree(STARTING_FEN, ["e2e4"])
        other = AnalysisTree(STARTING_FEN, ["d2d4"])
        tree.jump_to(other.root.children[0])
        assert tree.current is tree.root

    def test_parent_link_is_weak(self) -> None:
        tree = AnalysisTree(STARTING_FEN, ["e2e4"])
        orphan = tree.root.children[0]
        tree.load(STARTING_FEN)
        gc.collect()
        assert orphan.parent is None
        tree.jump_to(orphan)
        assert tree.current is tree.root


class TestPlayVariation:
    def test_builds_branch_from_root(self) -> None:
        tree = AnalysisTree(STARTING_FEN, ["e2e4", "e7e5"])
        tree.jump_to_end()
        node = tree.play_variation(["e2e4", "c7c5", "g1f3"])
        assert node.san == "Nf3"
        assert tree.uci_path() == ["e2e4", "c7c5", "g1f3"]
        assert len(tree.root.children) == 1

    def test_skips_unplayable_moves(self) -> None:
        tree = AnalysisTree()
        node = tree.play_variation(["e2e4", "zzzz", "e7e5"])
        assert node.san == "e5"
        assert tree.uci_path() == ["e2e4", "e7e5"]

    def test_illegal_move_left_out(self) -> None:
        tree = AnalysisTree()
        tree.play_variation(["d2d4", "d2d4", "g8f6"])
        assert tree.uci_path() == ["d2d4", "g8f6"]


class TestPromotion:
    def test_submit_waits_for_choice(self) -> None:
        tree = AnalysisTree(PROMOTION_FEN)
        requested: list[tuple[str, str]] = []
        tree.events.on_promotion_requested.append(lambda o, d: requested.append((o, d)))

        assert tree.submit_move("e7", "e8") is None
        assert tree.pending_promotion == ("e7", "e8")
        assert requested == [("e7", "e8")]
        assert tree.legal_destinations == {}

        node = tree.resolve_promotion("rook")
        assert node is not None
        assert node.uci == "e7e8r"
        assert node.san == "e8=R"
        assert tree.pending_promotion is None

    def test_navigation_drops_pending_choice(self) -> None:
        tree = AnalysisTree(PROMOTION_FEN, ["e1d1"])
        tree.submit_move("e7", "e8")
        tree.next()
        assert tree.pending_promotion is None

    def test_resolve_without_pending(self) -> None:
        assert AnalysisTree().resolve_promotion("queen") is None

    def test_plain_submit(self) -> None:
        tree = AnalysisTree()
        node = tree.submit_move("e2", "e4")
        assert node is not None
        assert node.san == "e4"


class TestEvents:
    def test_current_changed_fires_once_per_move(self) -> None:
        tree = AnalysisTree(STARTING_FEN, ["e2e4"])
        seen: list[AnalysisNode] = []
        tree.events.on_current_changed.append(seen.append)

        tree.next()
        tree.next()
        tree.previous()
        assert [n.node_id for n in seen] == ["root-e2e4", "root"]

    def test_sounds(self, sounds: Any) -> None:
        tree = AnalysisTree(STARTING_FEN, ["e2e4", "d7d5"], sound_player=sounds)
        tree.jump_to_end()
        tree.apply_move("e4d5")
        tree.reset()
        assert sounds.played == ["move", "capture"]

    def test_legal_destinations_follow_current(self) -> None:
        tree = AnalysisTree(STARTING_FEN, ["e2e4"])
        tree.next()
        dests = tree.legal_destinations
        assert "e7" in dests
        assert "e2" not in dests
        assert dests == engine.legal_destinations(replay_board(STARTING_FEN, ["e2e4"]))
