"""Pytest tests for phase, initiative and threat detection."""

from __future__ import annotations

import chess
import pytest

from chess_coach.context import build_context, find_threats, game_phase
from chess_coach.models import Initiative, Phase


class TestPhase:

    @pytest.mark.parametrize("material, phase", [
        (78, Phase.OPENING),
        (61, Phase.OPENING),
        (60, Phase.MIDDLEGAME),
        (31, Phase.MIDDLEGAME),
        (30, Phase.ENDGAME),
        (0, Phase.ENDGAME),
    ])
    def test_boundaries(self, material, phase):
        assert game_phase(material) == phase

    def test_start_is_opening(self):
        assert build_context(chess.STARTING_FEN).phase == Phase.OPENING

    def test_bare_kings_is_endgame(self):
        assert build_context("8/8/8/8/8/8/8/k6K w - - 0 1").phase == Phase.ENDGAME


class TestInitiative:

    def test_balanced_start(self):
        assert build_context(chess.STARTING_FEN).initiative == Initiative.BALANCED

    def test_check_means_attacking(self):
        fen = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"
        assert build_context(fen).initiative == Initiative.ATTACKING

    def test_check_beats_material(self):
        # White is 4 points up but in check from the rook
        context = build_context("4k3/8/8/8/8/8/8/Q3K2r w - - 0 1")
        assert abs(context.analysis.material.diff) > 3
        assert context.initiative == Initiative.ATTACKING

    def test_material_advantage(self):
        context = build_context("4k3/8/8/8/8/8/8/Q3K3 w - - 0 1")
        assert context.initiative == Initiative.MATERIAL_ADVANTAGE

    def test_three_points_is_not_enough(self):
        context = build_context("4k3/8/8/8/8/8/8/N3K3 w - - 0 1")
        assert context.initiative == Initiative.BALANCED

    def test_isolated_pawn_difference(self):
        context = build_context("4k3/pp6/8/8/8/8/P7/4K3 w - - 0 1")
        assert context.initiative == Initiative.POSITIONAL_ADVANTAGE


class TestThreats:

    def test_no_threats_at_start(self):
        assert build_context(chess.STARTING_FEN).threats == ()

    def test_attacked_queen(self):
        context = build_context("4k3/8/8/3q4/8/8/8/3RK3 w - - 0 1")
        assert context.threats == ("Black queen on d5 is under attack",)

    def test_checking_side_attacks_king(self):
        context = build_context("4k3/8/8/8/8/8/8/Q3K2r w - - 0 1")
        assert context.threats == ("White king on e1 is under attack",)

    def test_side_to_move_listed_first(self):
        # White rook and queen both hit d5; the black queen hits back at a2
        board = chess.Board("4k3/8/8/3q4/8/8/Q7/3RK3 w - - 0 1")
        threats = find_threats(board)
        assert threats[0] == "Black queen on d5 is under attack"
        assert threats[-1] == "White queen on a2 is under attack"

    def test_threats_are_deterministic(self):
        fen = "4k3/8/8/3q4/8/8/Q7/3RK3 w - - 0 1"
        assert build_context(fen).threats == build_context(fen).threats
