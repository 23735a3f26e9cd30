"""Value objects shared by the trainer components."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

import chess

from chessdeck.core import engine


@dataclass(slots=True, frozen=True)
class MoveRecord:
    """A move as derived from a position; never built by hand."""

    uci: str
    san: str
    is_capture: bool


@dataclass(slots=True, frozen=True)
class LinearStep:
    """One entry of a linear history. The root step has no move."""

    fen: str
    uci: str | None
    san: str | None
    legal_destinations: engine.Destinations

    @classmethod
    def from_board(
        cls,
        board: chess.Board,
        uci: str | None = None,
        san: str | None = None,
    ) -> LinearStep:
        return cls(
            fen=engine.to_fen(board),
            uci=uci,
            san=san,
            legal_destinations=engine.legal_destinations(board),
        )

    @property
    def is_root(self) -> bool:
        return self.uci is None


class TokenKind(StrEnum):
    TEXT = "text"
    MOVE = "move"


@dataclass(slots=True, frozen=True)
class CommentToken:
    """A slice of annotation text; ``MOVE`` tokens carry the line reaching them."""

    kind: TokenKind
    content: str
    uci: str | None = None
    resolved_uci_sequence: tuple[str, ...] | None = None

    @classmethod
    def plain(cls, content: str) -> CommentToken:
        return cls(TokenKind.TEXT, content)

    @property
    def is_move(self) -> bool:
        return self.kind == TokenKind.MOVE
