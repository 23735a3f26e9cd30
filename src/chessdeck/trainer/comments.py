"""Resolution of move references (``12.Nf3``, ``3...Qxd5``) inside annotation text."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import chess

from chessdeck.core import engine
from chessdeck.core.models import CommentToken, TokenKind

_LOGGER = logging.getLogger(__name__)

_WHITESPACE_SPLIT = re.compile(r"(\s+)")
_MOVE_REFERENCE = re.compile(r"^(\d+)(\.+)(.*)$")
_TRAILING_PUNCTUATION = re.compile(r"[?!.,;)]+$")


@dataclass(slots=True, frozen=True)
class PositionMatch:
    """A position on the reference line and the UCIs that reach it."""

    board: chess.Board
    sequence: tuple[str, ...]


def _is_at(board: chess.Board, fullmove: int, side: chess.Color) -> bool:
    return board.fullmove_number == fullmove and board.turn == side


def clean_san(raw: str) -> str:
    """Strip trailing annotation punctuation and a leading ``(`` from *raw*."""
    san = _TRAILING_PUNCTUATION.sub("", raw)
    if san.startswith("("):
        san = san[1:]
    return san


def find_position_at(
    root_fen: str,
    line: Sequence[str],
    fullmove: int,
    side: chess.Color,
) -> PositionMatch | None:
    """First position along *line* with the given fullmove number and side to move.

    The scan is a fresh replay from *root_fen*; it stops at the first
    unplayable move of the line.
    """
    board, _ = engine.position_from_fen(root_fen)
    if _is_at(board, fullmove, side):
        return PositionMatch(board, ())

    sequence: list[str] = []
    for uci in line:
        move = engine.parse_uci(board, uci)
        if move is None:
            break
        sequence.append(engine.to_uci(board, move))
        board = engine.apply_move(board, move)
        if _is_at(board, fullmove, side):
            return PositionMatch(board, tuple(sequence))
    return None


VariationCallback = Callable[[list[str]], None]


@dataclass
class CommentEvents:
    on_variation_selected: list[VariationCallback] = field(default_factory=list)


class CommentMoveResolver:
    """Turns annotation text into text and clickable move tokens.

    A walking cursor follows the resolved moves, so ``1.e4 e5 2.Nf3``
    style runs are read in sequence.  A reference that does not fit the
    cursor is looked up on the reference line instead; the first position
    with the right move number and side wins.
    """

    __slots__ = ("_root_fen", "_line", "_is_valid_fen", "_tokens", "events")

    def __init__(self, root_fen: str = engine.STARTING_FEN, line: Sequence[str] = ()) -> None:
        self._tokens: list[CommentToken] = []
        self.events = CommentEvents()
        self.set_context(root_fen, line)

    @property
    def root_fen(self) -> str:
        return self._root_fen

    @property
    def reference_line(self) -> tuple[str, ...]:
        return self._line

    @property
    def is_valid_fen(self) -> bool:
        return self._is_valid_fen

    @property
    def tokens(self) -> list[CommentToken]:
        """Tokens produced by the last :meth:`resolve` call."""
        return list(self._tokens)

    def set_context(self, root_fen: str, line: Sequence[str]) -> None:
        board, self._is_valid_fen = engine.position_from_fen(root_fen)
        self._root_fen = engine.to_fen(board)
        self._line = tuple(line)

    def find_position_at(self, fullmove: int, side: chess.Color) -> PositionMatch | None:
        return find_position_at(self._root_fen, self._line, fullmove, side)

    def resolve(self, text: str) -> list[CommentToken]:
        """Split *text* into tokens covering all of it, whitespace included."""
        tokens: list[CommentToken] = []
        board, _ = engine.position_from_fen(self._root_fen)
        sequence: list[str] = []

        for word in _WHITESPACE_SPLIT.split(text or ""):
            if not word:
                continue
            if word.isspace():
                tokens.append(CommentToken.plain(word))
                continue

            reference = _MOVE_REFERENCE.match(word)
            if reference is None:
                tokens.append(CommentToken.plain(word))
                continue

            fullmove = int(reference.group(1))
            side = chess.BLACK if len(reference.group(2)) > 1 else chess.WHITE
            san = clean_san(reference.group(3))

            move: chess.Move | None = None
            if _is_at(board, fullmove, side):
                move = engine.parse_san(board, san)

            if move is None:
                found = self.find_position_at(fullmove, side)
                if found is not None:
                    move = engine.parse_san(found.board, san)
                    if move is not None:
                        board = found.board
                        sequence = list(found.sequence)

            if move is None:
                _LOGGER.debug("Unresolved move reference %r", word)
                tokens.append(CommentToken.plain(word))
                continue

            uci = engine.to_uci(board, move)
            board = engine.apply_move(board, move)
            sequence.append(uci)
            tokens.append(
                CommentToken(
                    kind=TokenKind.MOVE,
                    content=word,
                    uci=uci,
                    resolved_uci_sequence=tuple(sequence),
                )
            )

        self._tokens = tokens
        return list(tokens)

    def on_token_activated(self, token: CommentToken) -> list[str] | None:
        """Publish the line behind a clicked move token; text tokens do nothing."""
        if token.kind != TokenKind.MOVE or token.resolved_uci_sequence is None:
            return None
        variation = list(token.resolved_uci_sequence)
        for cb in self.events.on_variation_selected:
            cb(list(variation))
        return variation
