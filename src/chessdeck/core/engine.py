"""Position engine adapter over python-chess.

Every transform here is non-mutating: boards passed in are never pushed to,
a fresh copy is returned instead.  Squares are exchanged as their algebraic
names (``"e2"``) and moves as UCI strings, which is what the board widget
and the stored reference lines speak.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

import chess

_LOGGER = logging.getLogger(__name__)

STARTING_FEN = chess.STARTING_FEN

PROMOTION_ROLES: tuple[str, ...] = ("queen", "rook", "bishop", "knight")

# King-to-destination and king-captures-rook encode the same castling move.
CASTLING_ALIASES: dict[str, str] = {
    # White king side
    "e1g1": "e1h1",
    "e1h1": "e1g1",
    # White queen side
    "e1c1": "e1a1",
    "e1a1": "e1c1",
    # Black king side
    "e8g8": "e8h8",
    "e8h8": "e8g8",
    # Black queen side
    "e8c8": "e8a8",
    "e8a8": "e8c8",
}

Destinations = Mapping[str, frozenset[str]]


class InvalidFenError(ValueError):
    """Raised when a FEN cannot be turned into a legal position."""


# ── FEN ──────────────────────────────────────────────────────────────────────


def parse_fen(fen: str) -> chess.Board:
    """Parse *fen* into a board, rejecting malformed or impossible setups."""
    try:
        board = chess.Board(fen)
    except ValueError as exc:
        raise InvalidFenError(f"Malformed FEN {fen!r}: {exc}") from exc
    if not board.is_valid():
        raise InvalidFenError(f"Illegal position in FEN {fen!r}: {board.status()!r}")
    return board


def position_from_fen(fen: str | None) -> tuple[chess.Board, bool]:
    """Return ``(board, is_valid)``; invalid input falls back to the start position."""
    if not fen:
        return chess.Board(STARTING_FEN), False
    try:
        return parse_fen(fen), True
    except InvalidFenError as exc:
        _LOGGER.warning("%s; using the standard starting position", exc)
        return chess.Board(STARTING_FEN), False


def to_fen(board: chess.Board) -> str:
    return board.fen()


def root_ply(board: chess.Board) -> int:
    """Half-move index of *board* counted from the start of the game."""
    return (board.fullmove_number - 1) * 2 + (0 if board.turn == chess.WHITE else 1)


# ── Moves ────────────────────────────────────────────────────────────────────


def parse_uci(board: chess.Board, uci: str) -> chess.Move | None:
    """Parse *uci* as a legal move in *board*, or ``None``.

    Both castling encodings are accepted; the returned move uses the
    standard king-to-destination form.
    """
    try:
        move = board.parse_uci(uci)
    except ValueError:
        return None
    if not move:
        # Null moves are never part of a line.
        return None
    return move


def parse_san(board: chess.Board, san: str) -> chess.Move | None:
    if not san:
        return None
    try:
        move = board.parse_san(san)
    except ValueError:
        return None
    if not move:
        return None
    return move


def apply_move(board: chess.Board, move: chess.Move) -> chess.Board:
    """Return the position after *move*; *board* itself is left untouched."""
    new_board = board.copy(stack=False)
    new_board.push(move)
    return new_board


def to_san(board: chess.Board, move: chess.Move) -> str:
    return board.san(move)


def to_uci(board: chess.Board, move: chess.Move) -> str:
    return board.uci(move)


def is_check(board: chess.Board) -> bool:
    return board.is_check()


def is_capture(board: chess.Board, uci: str) -> bool:
    """Capture heuristic used for sound cues.

    A move captures if its destination is occupied, or if a pawn changes
    file (which covers en passant).
    """
    try:
        origin = chess.parse_square(uci[0:2])
        destination = chess.parse_square(uci[2:4])
    except ValueError:
        return False
    if board.piece_at(destination) is not None:
        return True
    piece = board.piece_at(origin)
    if piece is not None and piece.piece_type == chess.PAWN:
        return chess.square_file(origin) != chess.square_file(destination)
    return False


def legal_destinations(board: chess.Board) -> dict[str, frozenset[str]]:
    """Map each origin square to the squares its piece may legally reach.

    Castling is offered both on the king's target square and on the rook's
    square, so either way of dragging the king is accepted.
    """
    dests: dict[str, set[str]] = {}
    for move in board.legal_moves:
        targets = dests.setdefault(chess.square_name(move.from_square), set())
        targets.add(chess.square_name(move.to_square))
        if board.is_castling(move):
            rook_file = 7 if board.is_kingside_castling(move) else 0
            rank = chess.square_rank(move.from_square)
            targets.add(chess.square_name(chess.square(rook_file, rank)))
    return {origin: frozenset(targets) for origin, targets in dests.items()}


def same_move(board: chess.Board, uci: str, expected: str) -> bool:
    """Compare two UCI strings played from *board*.

    Both castling encodings count as equal, but only when a king is on the
    origin square; a rook moving e1h1 is not castling.
    """
    if uci == expected:
        return True
    try:
        origin = chess.parse_square(uci[0:2])
    except ValueError:
        return False
    piece = board.piece_at(origin)
    if piece is None or piece.piece_type != chess.KING:
        return False
    return CASTLING_ALIASES.get(uci) == expected


# ── Promotion ────────────────────────────────────────────────────────────────


def is_promotion_move(board: chess.Board, origin: str, destination: str) -> bool:
    """Does moving from *origin* to *destination* push a pawn onto its last rank?"""
    try:
        from_sq = chess.parse_square(origin)
        to_sq = chess.parse_square(destination)
    except ValueError:
        return False
    piece = board.piece_at(from_sq)
    if piece is None or piece.piece_type != chess.PAWN or piece.color != board.turn:
        return False
    last_rank = 7 if piece.color == chess.WHITE else 0
    return chess.square_rank(to_sq) == last_rank


def promotion_uci(origin: str, destination: str, role: str) -> str:
    """Build a 5-character promotion UCI, e.g. ``("e7", "e8", "knight") -> "e7e8n"``."""
    role = role.lower()
    if role not in PROMOTION_ROLES:
        raise ValueError(f"Unknown promotion role: {role!r}")
    letter = "n" if role == "knight" else role[0]
    return f"{origin}{destination}{letter}"


def needs_promotion_choice(board: chess.Board, origin: str, destination: str) -> bool:
    """Is *origin*→*destination* a legal pawn move that still lacks a piece choice?"""
    if not is_promotion_move(board, origin, destination):
        return False
    return parse_uci(board, promotion_uci(origin, destination, "queen")) is not None
