"""Tests for move-sequence replay."""

import chess

from chessdeck.core import engine
from chessdeck.core.engine import STARTING_FEN
from chessdeck.core.models import LinearStep, MoveRecord
from chessdeck.core.replay import replay, replay_board


class TestReplay:
    def test_empty_line(self) -> None:
        result = replay(STARTING_FEN, [])
        assert result.steps == ()
        assert result.fen == STARTING_FEN
        assert result.is_complete
        assert result.valid_root

    def test_steps_carry_san_and_fen(self) -> None:
        result = replay(STARTING_FEN, ["e2e4", "e7e5", "g1f3"])
        assert [s.san for s in result.steps] == ["e4", "e5", "Nf3"]
        assert result.ucis == ["e2e4", "e7e5", "g1f3"]
        assert result.steps[-1].fen == result.fen
        assert result.board.turn == chess.BLACK

    def test_each_fen_matches_single_move_application(self) -> None:
        ucis = ["e2e4", "d7d5", "e4d5", "d8d5", "b1c3"]
        board = engine.parse_fen(STARTING_FEN)
        for step, uci in zip(replay(STARTING_FEN, ucis).steps, ucis, strict=True):
            move = engine.parse_uci(board, uci)
            assert move is not None
            board = engine.apply_move(board, move)
            assert step.fen == engine.to_fen(board)

    def test_capture_flag(self) -> None:
        result = replay(STARTING_FEN, ["e2e4", "d7d5", "e4d5"])
        assert [s.is_capture for s in result.steps] == [False, False, True]
        assert result.steps[2].record == MoveRecord("e4d5", "exd5", True)

    def test_stops_at_first_illegal_move(self) -> None:
        result = replay(STARTING_FEN, ["e2e4", "e2e4", "g1f3"])
        assert result.ucis == ["e2e4"]
        assert not result.is_complete
        assert result.requested == 3

    def test_stops_at_unparsable_move(self) -> None:
        result = replay(STARTING_FEN, ["e2e4", "???", "e7e5"])
        assert result.ucis == ["e2e4"]

    def test_castling_stored_in_standard_form(self) -> None:
        fen = "r3k2r/pppppppp/8/8/8/8/PPPPPPPP/R3K2R w KQkq - 0 1"
        result = replay(fen, ["e1h1", "e8a8"])
        assert result.ucis == ["e1g1", "e8c8"]
        assert [s.san for s in result.steps] == ["O-O", "O-O-O"]

    def test_invalid_root_replays_from_start(self) -> None:
        result = replay("nonsense", ["e2e4"])
        assert not result.valid_root
        assert result.ucis == ["e2e4"]

    def test_replay_board(self) -> None:
        board = replay_board(STARTING_FEN, ["e2e4"])
        assert board.piece_at(chess.E4) == chess.Piece(chess.PAWN, chess.WHITE)


class TestLinearStep:
    def test_root_step(self) -> None:
        step = LinearStep.from_board(engine.parse_fen(STARTING_FEN))
        assert step.is_root
        assert step.fen == STARTING_FEN
        assert step.legal_destinations["b1"] == frozenset({"a3", "c3"})
