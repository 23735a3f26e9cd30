"""Core move-sequence layer — python-chess adapter, replay and value objects.

Quick start::

    from chessdeck.core import STARTING_FEN, replay

    result = replay(STARTING_FEN, ["e2e4", "e7e5", "g1f3"])
    for step in result.steps:
        print(step.san, step.fen)
"""

from chessdeck.core.engine import (
    CASTLING_ALIASES,
    PROMOTION_ROLES,
    STARTING_FEN,
    InvalidFenError,
    apply_move,
    is_capture,
    is_check,
    is_promotion_move,
    legal_destinations,
    needs_promotion_choice,
    parse_fen,
    parse_san,
    parse_uci,
    position_from_fen,
    promotion_uci,
    root_ply,
    same_move,
    to_fen,
    to_san,
    to_uci,
)
from chessdeck.core.models import CommentToken, LinearStep, MoveRecord, TokenKind
from chessdeck.core.replay import ReplayResult, ReplayStep, replay, replay_board

__all__ = [
    # Constants
    "CASTLING_ALIASES",
    "PROMOTION_ROLES",
    "STARTING_FEN",
    # Errors
    "InvalidFenError",
    # Engine adapter
    "apply_move",
    "is_capture",
    "is_check",
    "is_promotion_move",
    "legal_destinations",
    "needs_promotion_choice",
    "parse_fen",
    "parse_san",
    "parse_uci",
    "position_from_fen",
    "promotion_uci",
    "root_ply",
    "same_move",
    "to_fen",
    "to_san",
    "to_uci",
    # Value objects
    "CommentToken",
    "LinearStep",
    "MoveRecord",
    "TokenKind",
    # Replay
    "ReplayResult",
    "ReplayStep",
    "replay",
    "replay_board",
]
