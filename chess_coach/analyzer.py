"""Heuristic position metrics.

Computes material, king shelter, pawn structure, center control, piece
coordination and a rough tactical count from a single position. All of
it is intentionally coarse: the numbers feed coaching sentences, not a
search, so none of them is normalized or tuned for playing strength.
"""

from __future__ import annotations

from collections import Counter

import chess

from chess_coach import rules
from chess_coach.models import (
    Analysis,
    CenterControl,
    KingSafety,
    MaterialCount,
    PawnStructure,
    PieceCoordination,
    SidePawns,
    TacticalPatterns,
)


# Standard material values; the king carries no material weight
_PIECE_VALUES: dict[int, int] = {
    chess.PAWN: 1,
    chess.KNIGHT: 3,
    chess.BISHOP: 3,
    chess.ROOK: 5,
    chess.QUEEN: 9,
    chess.KING: 0,
}

# Mobility multipliers per piece type for coordination scoring
_COORDINATION_WEIGHTS: dict[int, float] = {
    chess.QUEEN: 0.8,
    chess.ROOK: 0.7,
    chess.BISHOP: 0.6,
    chess.KNIGHT: 0.5,
    chess.PAWN: 0.3,
}
_DEFAULT_COORDINATION_WEIGHT = 0.4

CENTER_SQUARES = (chess.D4, chess.E4, chess.D5, chess.E5)

_CENTER_OCCUPANCY = 1.0
_CENTER_ATTACK = 0.5


def piece_value(piece_type: int) -> int:
    """Return the material value of a piece type (king is 0)."""
    return _PIECE_VALUES.get(piece_type, 0)


def _material(board: chess.Board) -> MaterialCount:
    totals = {chess.WHITE: 0, chess.BLACK: 0}
    for sq in chess.SQUARES:
        piece = board.piece_at(sq)
        if piece is not None:
            totals[piece.color] += piece_value(piece.piece_type)
    return MaterialCount(white=totals[chess.WHITE], black=totals[chess.BLACK])


def _king_shield(board: chess.Board, color: chess.Color) -> int:
    """Count friendly pawns on the three squares in front of the king."""
    king_sq = board.king(color)
    if king_sq is None:
        return 0

    shield_rank = chess.square_rank(king_sq) + (1 if color == chess.WHITE else -1)
    if not 0 <= shield_rank <= 7:
        return 0

    king_file = chess.square_file(king_sq)
    count = 0
    for f in range(max(0, king_file - 1), min(8, king_file + 2)):
        piece = board.piece_at(chess.square(f, shield_rank))
        if piece is not None and piece.color == color and piece.piece_type == chess.PAWN:
            count += 1
    return count


def _pawn_structure(board: chess.Board, color: chess.Color) -> SidePawns:
    """Count pawns, doubled pawns and isolated pawns for one side."""
    per_file = [0] * 8
    for sq in board.pieces(chess.PAWN, color):
        per_file[chess.square_file(sq)] += 1

    doubled = sum(n - 1 for n in per_file if n > 1)

    isolated = 0
    for f, count in enumerate(per_file):
        if count == 0:
            continue
        left = per_file[f - 1] if f > 0 else 0
        right = per_file[f + 1] if f < 7 else 0
        if left == 0 and right == 0:
            isolated += count

    return SidePawns(total=sum(per_file), doubled=doubled, isolated=isolated)


def _center_control(
    board: chess.Board,
    moves: dict[chess.Color, list[chess.Move]],
) -> CenterControl:
    """Score occupancy of and legal moves into the four center squares."""
    scores = {chess.WHITE: 0.0, chess.BLACK: 0.0}
    for sq in CENTER_SQUARES:
        occupant = board.piece_at(sq)
        if occupant is not None:
            scores[occupant.color] += _CENTER_OCCUPANCY
        for color in chess.COLORS:
            reaching = sum(1 for m in moves[color] if m.to_square == sq)
            scores[color] += _CENTER_ATTACK * reaching
    return CenterControl(white=scores[chess.WHITE], black=scores[chess.BLACK])


def _coordination(
    board: chess.Board,
    moves: dict[chess.Color, list[chess.Move]],
) -> PieceCoordination:
    """Sum each piece's legal-move count weighted by its type."""
    scores = {chess.WHITE: 0.0, chess.BLACK: 0.0}
    for color in chess.COLORS:
        per_origin = Counter(m.from_square for m in moves[color])
        for sq in chess.scan_forward(board.occupied_co[color]):
            piece = board.piece_at(sq)
            weight = _COORDINATION_WEIGHTS.get(
                piece.piece_type, _DEFAULT_COORDINATION_WEIGHT
            )
            scores[color] += weight * per_origin[sq]
    return PieceCoordination(white=scores[chess.WHITE], black=scores[chess.BLACK])


def _tactical_patterns(board: chess.Board, moves: list[chess.Move]) -> TacticalPatterns:
    """Count capture moves by pieces that have more than two destinations.

    This is a loose stand-in for fork detection: it does not check that
    the other destinations actually hit undefended targets.
    """
    per_origin = Counter(m.from_square for m in moves)
    forks = sum(
        1 for m in moves
        if board.is_capture(m) and per_origin[m.from_square] > 2
    )
    return TacticalPatterns(forks=forks)


def moves_by_color(board: chess.Board) -> dict[chess.Color, list[chess.Move]]:
    """Legal moves for both sides, side to move first in iteration order."""
    ordered = (board.turn, not board.turn)
    return {color: rules.legal_moves(board, color=color) for color in ordered}


def analyze_position(position: str | chess.Board) -> Analysis:
    """Compute every positional metric for a position.

    Args:
        position: FEN string or board. A board is only read, never changed.

    Returns:
        A fresh Analysis for the position.
    """
    board = rules.board_from(position)
    moves = moves_by_color(board)

    return Analysis(
        fen=board.fen(),
        turn=board.turn,
        material=_material(board),
        piece_activity=len(moves[board.turn]),
        king_safety=KingSafety(
            white=_king_shield(board, chess.WHITE),
            black=_king_shield(board, chess.BLACK),
        ),
        pawn_structure=PawnStructure(
            white=_pawn_structure(board, chess.WHITE),
            black=_pawn_structure(board, chess.BLACK),
        ),
        center_control=_center_control(board, moves),
        coordination=_coordination(board, moves),
        tactics=_tactical_patterns(board, moves[board.turn]),
        is_check=board.is_check(),
        is_checkmate=board.is_checkmate(),
        is_draw=rules.is_draw(board),
    )
