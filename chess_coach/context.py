"""Strategic context: game phase, initiative and immediate threats."""

from __future__ import annotations

import chess

from chess_coach import rules
from chess_coach.analyzer import analyze_position, moves_by_color
from chess_coach.models import Analysis, Initiative, Phase, StrategicContext

# Total non-king material thresholds (starting position is 78)
_OPENING_MATERIAL = 60
_MIDDLEGAME_MATERIAL = 30

_MATERIAL_LEAD = 3

_THREATENED_TYPES = (chess.QUEEN, chess.KING)


def game_phase(total_material: int) -> Phase:
    """Map remaining material (both sides, kings excluded) to a phase."""
    if total_material > _OPENING_MATERIAL:
        return Phase.OPENING
    if total_material > _MIDDLEGAME_MATERIAL:
        return Phase.MIDDLEGAME
    return Phase.ENDGAME


def initiative(analysis: Analysis) -> Initiative:
    """Pick the first matching initiative rule.

    Check beats a material lead, which beats a difference in isolated
    pawns.
    """
    if analysis.is_check:
        return Initiative.ATTACKING
    if abs(analysis.material.diff) > _MATERIAL_LEAD:
        return Initiative.MATERIAL_ADVANTAGE
    pawns = analysis.pawn_structure
    if pawns.white.isolated != pawns.black.isolated:
        return Initiative.POSITIONAL_ADVANTAGE
    return Initiative.BALANCED


def _threat_sentence(piece: chess.Piece, square: chess.Square) -> str:
    color = "White" if piece.color == chess.WHITE else "Black"
    return (
        f"{color} {chess.piece_name(piece.piece_type)} on "
        f"{chess.square_name(square)} is under attack"
    )


def find_threats(board: chess.Board) -> list[str]:
    """List attacks on queens and kings in move generation order.

    Moves of the side to move come first, then the other side's.
    """
    threats: list[str] = []
    for color, moves in moves_by_color(board).items():
        for move in moves:
            target = board.piece_at(move.to_square)
            if (
                target is not None
                and target.color != color
                and target.piece_type in _THREATENED_TYPES
            ):
                threats.append(_threat_sentence(target, move.to_square))
    return threats


def build_context(position: str | chess.Board) -> StrategicContext:
    """Analyze a position and derive its strategic context.

    Args:
        position: FEN string or board.

    Returns:
        StrategicContext wrapping a fresh Analysis.
    """
    board = rules.board_from(position)
    analysis = analyze_position(board)
    return StrategicContext(
        analysis=analysis,
        phase=game_phase(analysis.material.total),
        initiative=initiative(analysis),
        threats=tuple(find_threats(board)),
    )
