"""Pytest tests for the python-chess rules adapter."""

from __future__ import annotations

import chess
import pytest

from chess_coach import rules
from chess_coach.models import MoveDescriptor, PieceRef

_FOOLS_MATE = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"
_PROMOTION = "8/4P3/8/8/8/8/k7/4K3 w - - 0 1"


class TestApplyMove:

    def test_legal_move_returns_new_fen(self):
        fen = rules.apply_move(rules.STARTING_FEN, "e2", "e4")
        assert fen is not None
        assert chess.Board(fen).piece_at(chess.E4) == chess.Piece(chess.PAWN, chess.WHITE)

    def test_illegal_move_returns_none(self):
        assert rules.apply_move(rules.STARTING_FEN, "e2", "e5") is None

    def test_bad_square_returns_none(self):
        assert rules.apply_move(rules.STARTING_FEN, "z9", "e4") is None

    def test_input_fen_untouched(self):
        board = chess.Board()
        rules.apply_move(board, "g1", "f3")
        assert board.fen() == chess.STARTING_FEN

    def test_promotes_to_queen_by_default(self):
        fen = rules.apply_move(_PROMOTION, "e7", "e8")
        assert chess.Board(fen).piece_at(chess.E8).piece_type == chess.QUEEN

    def test_promotion_hint(self):
        fen = rules.apply_move(_PROMOTION, "e7", "e8", promotion="n")
        assert chess.Board(fen).piece_at(chess.E8).piece_type == chess.KNIGHT


class TestLegalMoves:

    def test_start_position_count(self):
        assert len(rules.legal_moves(rules.STARTING_FEN)) == 20

    def test_filter_by_square(self):
        moves = rules.legal_moves(rules.STARTING_FEN, "g1")
        assert {chess.square_name(m.to_square) for m in moves} == {"f3", "h3"}

    def test_other_side_moves(self):
        moves = rules.legal_moves(rules.STARTING_FEN, color=chess.BLACK)
        assert len(moves) == 20
        assert all(chess.square_rank(m.from_square) >= 6 for m in moves)

    def test_empty_square(self):
        assert rules.legal_moves(rules.STARTING_FEN, "e4") == []


class TestQueries:

    def test_piece_at(self):
        assert rules.piece_at(rules.STARTING_FEN, "d1") == PieceRef(chess.QUEEN, chess.WHITE, "d1")
        assert rules.piece_at(rules.STARTING_FEN, "d4") is None

    def test_describe_move(self):
        board = chess.Board()
        descriptor = rules.describe_move(board, chess.Move.from_uci("g1f3"))
        assert descriptor == MoveDescriptor("g1", "f3", chess.KNIGHT, chess.WHITE)
        assert descriptor.uci == "g1f3"
        assert descriptor.piece_name == "knight"

    def test_checkmate_flags(self):
        assert rules.is_check(_FOOLS_MATE)
        assert rules.is_checkmate(_FOOLS_MATE)
        assert rules.is_game_over(_FOOLS_MATE)
        assert not rules.is_draw(_FOOLS_MATE)

    def test_stalemate_is_draw(self):
        fen = "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"
        assert rules.is_stalemate(fen)
        assert rules.is_draw(fen)

    def test_insufficient_material_is_draw(self):
        assert rules.is_draw("8/8/8/8/8/8/8/k6K w - - 0 1")

    @pytest.mark.parametrize("fen", [rules.STARTING_FEN, _PROMOTION])
    def test_playing_positions(self, fen):
        assert not rules.is_game_over(fen)
