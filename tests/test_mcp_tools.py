"""Per-tool MCP tests for the coaching server.

The engine bridge is replaced by a FakeEngineChannel-backed bridge from
conftest.py, so these run without Stockfish.

Run:
    pytest tests/test_mcp_tools.py -v
"""

from __future__ import annotations

import importlib.util
import sys
from pathlib import Path
from unittest.mock import AsyncMock, patch

import chess
import pytest

# Add project root so imports resolve
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_PROJECT_ROOT))

# Import server module from hyphenated directory via importlib
_server_path = _PROJECT_ROOT / "mcp-server" / "server.py"
_spec = importlib.util.spec_from_file_location("mcp_server_tools_test", _server_path)
_server = importlib.util.module_from_spec(_spec)
_spec.loader.exec_module(_server)

_games = _server._games

# Server tool functions
new_game = _server.new_game
get_board = _server.get_board
get_move_options = _server.get_move_options
make_move = _server.make_move
engine_move = _server.engine_move
get_hint = _server.get_hint
set_tier = _server.set_tier
list_tiers = _server.list_tiers
analyze_position = _server.analyze_position
explain_move = _server.explain_move


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_GAME_STATE_FIELDS = {
    "game_id", "fen", "player_color", "tier", "turn", "status",
    "status_message", "last_move", "legal_moves_count", "engine_stalled",
    "thinking", "feedback",
}


@pytest.fixture(autouse=True)
def _clean_games():
    """Drop all in-memory games around each test."""
    _games.clear()
    yield
    _games.clear()


@pytest.fixture()
def fake_spawn(make_bridge, legal_reply):
    """Patch EngineBridge.spawn to hand out fake bridges."""
    bridges = []

    async def _spawn(tier, stockfish_path=None, timeout=None):
        bridge, channel = make_bridge(reply=legal_reply, tier=tier.name)
        bridges.append((bridge, channel))
        return bridge

    with patch.object(_server.EngineBridge, "spawn", new=AsyncMock(side_effect=_spawn)):
        yield bridges


# ---------------------------------------------------------------------------
# Game lifecycle
# ---------------------------------------------------------------------------


class TestNewGame:

    def test_default_game(self):
        state = new_game()
        assert set(state) == _GAME_STATE_FIELDS
        assert state["fen"] == chess.STARTING_FEN
        assert state["tier"] == "Medium"
        assert state["status"] == "playing"
        assert state["legal_moves_count"] == 20
        assert state["feedback"] is None
        assert state["thinking"] is False

    def test_tier_is_case_insensitive(self):
        assert new_game(tier="hard")["tier"] == "Hard"

    def test_black_player(self):
        state = new_game(player_color="black")
        assert state["player_color"] == "black"
        assert state["turn"] == "white"

    def test_custom_start(self):
        fen = "4k3/8/8/8/8/8/4P3/4K3 w - - 0 1"
        assert new_game(starting_fen=fen)["fen"] == fen

    def test_unknown_tier(self):
        assert "Unknown tier" in new_game(tier="Grandmaster")["error"]

    def test_invalid_fen(self):
        assert "error" in new_game(starting_fen="not a fen")

    def test_impossible_position(self):
        # No kings
        assert "error" in new_game(starting_fen="8/8/8/8/8/8/8/8 w - - 0 1")


class TestGetBoard:

    def test_returns_state(self):
        game_id = new_game()["game_id"]
        assert get_board(game_id)["game_id"] == game_id

    def test_error_on_invalid_game(self):
        assert "Game not found" in get_board("nonexistent-id")["error"]


class TestMoveOptions:

    def test_knight_options(self):
        game_id = new_game()["game_id"]
        result = get_move_options(game_id, "g1")
        assert result["options"] == {"f3": "move", "h3": "move", "g1": "selected"}

    def test_error_on_invalid_game(self):
        assert "error" in get_move_options("nonexistent-id", "e2")


class TestMakeMove:

    def test_san_move(self):
        game_id = new_game()["game_id"]
        state = make_move(game_id, "e4")
        assert state["last_move"] == "e2e4"
        assert state["turn"] == "black"
        assert state["feedback"]["quality"] == "good"

    def test_uci_move(self):
        game_id = new_game()["game_id"]
        assert make_move(game_id, "g1f3")["last_move"] == "g1f3"

    def test_underpromotion(self):
        game_id = new_game(starting_fen="8/4P3/8/8/8/8/k7/4K3 w - - 0 1")["game_id"]
        state = make_move(game_id, "e7e8n")
        assert state["last_move"] == "e7e8n"
        assert chess.Board(state["fen"]).piece_at(chess.E8).piece_type == chess.KNIGHT

    def test_san_promotion(self):
        game_id = new_game(starting_fen="8/4P3/8/8/8/8/k7/4K3 w - - 0 1")["game_id"]
        state = make_move(game_id, "e8=Q")
        assert chess.Board(state["fen"]).piece_at(chess.E8).piece_type == chess.QUEEN

    def test_illegal_move(self):
        game_id = new_game()["game_id"]
        result = make_move(game_id, "e5")
        assert "Illegal move" in result["error"]
        assert get_board(game_id)["fen"] == chess.STARTING_FEN

    def test_engine_turn(self):
        game_id = new_game()["game_id"]
        make_move(game_id, "e4")
        assert "engine's turn" in make_move(game_id, "e5")["error"]

    def test_game_over(self):
        fen = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"
        game_id = new_game(starting_fen=fen)["game_id"]
        assert "already over" in make_move(game_id, "a3")["error"]


# ---------------------------------------------------------------------------
# Engine tools
# ---------------------------------------------------------------------------


class TestEngineMove:

    @pytest.mark.asyncio
    async def test_engine_replies(self, fake_spawn):
        game_id = new_game()["game_id"]
        make_move(game_id, "e4")

        state = await engine_move(game_id)
        assert state["turn"] == "white"
        assert state["feedback"]["move"] == state["last_move"]
        assert len(fake_spawn) == 1

    @pytest.mark.asyncio
    async def test_refuses_on_player_turn(self, fake_spawn):
        game_id = new_game()["game_id"]
        result = await engine_move(game_id)
        assert "your turn" in result["error"]
        assert fake_spawn == []
        assert get_board(game_id)["fen"] == chess.STARTING_FEN

    @pytest.mark.asyncio
    async def test_bridge_is_reused(self, fake_spawn):
        game_id = new_game(player_color="black")["game_id"]
        await engine_move(game_id)
        make_move(game_id, "e5")
        await engine_move(game_id)
        assert len(fake_spawn) == 1

    @pytest.mark.asyncio
    async def test_stalled_engine(self, make_bridge):
        bridge, _ = make_bridge(timeout=0.01)
        game_id = new_game(player_color="black")["game_id"]
        with patch.object(_server.EngineBridge, "spawn", new=AsyncMock(return_value=bridge)):
            result = await engine_move(game_id)
        assert "error" in result
        assert result["engine_stalled"] is True

    @pytest.mark.asyncio
    async def test_engine_missing(self):
        game_id = new_game(player_color="black")["game_id"]
        missing = AsyncMock(side_effect=FileNotFoundError("Stockfish not found."))
        with patch.object(_server.EngineBridge, "spawn", new=missing):
            result = await engine_move(game_id)
        assert "Stockfish not found" in result["error"]

    @pytest.mark.asyncio
    async def test_error_on_invalid_game(self):
        assert "error" in await engine_move("nonexistent-id")


class TestGetHint:

    @pytest.mark.asyncio
    async def test_hint_leaves_position(self, fake_spawn):
        game_id = new_game()["game_id"]
        result = await get_hint(game_id)
        assert result["hint"]["quality"] in {"excellent", "good", "acceptable", "normal"}
        assert get_board(game_id)["fen"] == chess.STARTING_FEN


class TestSetTier:

    @pytest.mark.asyncio
    async def test_changes_tier_and_closes_engine(self, fake_spawn):
        game_id = new_game()["game_id"]
        await get_hint(game_id)
        _, channel = fake_spawn[0]

        state = await set_tier(game_id, "expert")
        assert state["tier"] == "Expert"
        assert channel.closed
        assert _games[game_id]["bridge"] is None

    @pytest.mark.asyncio
    async def test_new_bridge_uses_new_tier(self, fake_spawn):
        game_id = new_game()["game_id"]
        await set_tier(game_id, "Beginner")
        await get_hint(game_id)
        _, channel = fake_spawn[0]
        assert channel.sent[-1] == "go depth 5"

    @pytest.mark.asyncio
    async def test_unknown_tier(self):
        game_id = new_game()["game_id"]
        assert "error" in await set_tier(game_id, "Grandmaster")
        assert get_board(game_id)["tier"] == "Medium"


class TestListTiers:

    def test_all_tiers(self):
        tiers = list_tiers()["tiers"]
        assert [t["name"] for t in tiers] == ["Beginner", "Easy", "Medium", "Hard", "Expert"]
        assert tiers[0] == {"name": "Beginner", "skill": 0, "contempt": 100, "depth": 5}


# ---------------------------------------------------------------------------
# Analysis tools
# ---------------------------------------------------------------------------


class TestAnalyzePosition:

    def test_start_position(self):
        result = analyze_position(chess.STARTING_FEN)
        assert result["phase"] == "opening"
        assert result["initiative"] == "balanced"
        assert result["threats"] == []
        assert result["analysis"]["material"] == {"white": 39, "black": 39, "diff": 0}

    def test_invalid_fen_returns_error(self):
        assert "error" in analyze_position("not a fen")


class TestExplainMove:

    def test_explains_move(self):
        result = explain_move(chess.STARTING_FEN, "Nf3")
        assert result["move"] == "g1f3"
        assert result["quality"] == "good"

    def test_voice(self):
        result = explain_move(chess.STARTING_FEN, "e4", voice="would")
        assert "would" in result["message"]

    def test_unknown_voice(self):
        assert "Unknown voice" in explain_move(chess.STARTING_FEN, "e4", voice="their")["error"]

    def test_illegal_move(self):
        assert "Illegal move" in explain_move(chess.STARTING_FEN, "e5")["error"]

    def test_invalid_fen(self):
        assert "error" in explain_move("not a fen", "e4")
