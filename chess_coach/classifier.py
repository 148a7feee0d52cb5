"""Move quality classification from material and simple positional cues."""

from __future__ import annotations

import chess

from chess_coach import rules
from chess_coach.analyzer import CENTER_SQUARES, piece_value
from chess_coach.models import MoveDescriptor, MoveQuality

_DEVELOPING_TYPES = (chess.KNIGHT, chess.BISHOP)

# Minimum rank distance for a development or pawn-advance bonus
_LONG_STEP = 2


def _capture_quality(target_value: int, mover_value: int) -> MoveQuality:
    if target_value > mover_value:
        return MoveQuality.EXCELLENT
    if target_value == mover_value:
        return MoveQuality.GOOD
    return MoveQuality.ACCEPTABLE


def classify_move(position: str | chess.Board, move: MoveDescriptor) -> MoveQuality:
    """Label a move played from ``position``.

    Rules are checked in order and the first match wins:

    1. Captures (destination occupied before the move), graded by the
       captured piece's value against the mover's.
    2. A knight or bishop travelling two or more ranks (development).
    3. A pawn landing on a center square, or advancing two ranks.
    4. Anything else is normal.

    Args:
        position: Position BEFORE the move is played.
        move: The move to classify.

    Returns:
        The move's quality label.
    """
    board = rules.board_from(position)
    from_sq = chess.parse_square(move.from_square)
    to_sq = chess.parse_square(move.to_square)

    mover_type = move.piece_type
    if mover_type is None:
        mover = board.piece_at(from_sq)
        mover_type = mover.piece_type if mover is not None else None

    target = board.piece_at(to_sq)
    if target is not None:
        return _capture_quality(
            piece_value(target.piece_type),
            piece_value(mover_type) if mover_type is not None else 0,
        )

    rank_distance = abs(chess.square_rank(to_sq) - chess.square_rank(from_sq))

    if mover_type in _DEVELOPING_TYPES and rank_distance >= _LONG_STEP:
        return MoveQuality.GOOD

    if mover_type == chess.PAWN:
        if to_sq in CENTER_SQUARES:
            return MoveQuality.GOOD
        if rank_distance >= _LONG_STEP:
            return MoveQuality.ACCEPTABLE

    return MoveQuality.NORMAL
