"""MCP server for the chess coach.

Exposes coached play and position explanations as FastMCP tools.
Games are stored in memory keyed by UUID. Each game gets its own
engine bridge, started on first use and replaced when the tier changes.
"""

from __future__ import annotations

import sys
import uuid
from dataclasses import asdict
from pathlib import Path

# Add project root to path so the package imports from a checkout
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_PROJECT_ROOT))

import chess
from mcp.server.fastmcp import FastMCP

from chess_coach.bridge import EngineBridge
from chess_coach.config import load_config
from chess_coach.context import build_context
from chess_coach.difficulty import TIERS, get_tier
from chess_coach.errors import CoachError
from chess_coach.game import CoachingGame, Feedback, explain_move as _explain
from chess_coach.log import setup_logging
from chess_coach.models import MoveDescriptor, Perspective

mcp = FastMCP("chess-coach")

# In-memory game store: game_id -> {game, tier, bridge, feedback}
_games: dict[str, dict] = {}

_config = load_config()

_VOICES = {p.value: p for p in Perspective}


def _get_game(game_id: str) -> dict | None:
    return _games.get(game_id)


def _feedback_dict(feedback: Feedback | None) -> dict | None:
    if feedback is None:
        return None
    return {
        "move": feedback.move.uci,
        "quality": feedback.quality.value,
        "message": feedback.message,
        "phase": feedback.context.phase.value,
        "initiative": feedback.context.initiative.value,
        "threats": list(feedback.context.threats),
    }


def _build_game_state(game_id: str, record: dict) -> dict:
    """Summarize a game record for a tool response."""
    game: CoachingGame = record["game"]
    status = game.status()
    board = chess.Board(game.fen)
    return {
        "game_id": game_id,
        "fen": game.fen,
        "player_color": "white" if game.player_color == chess.WHITE else "black",
        "tier": record["tier"],
        "turn": "white" if board.turn == chess.WHITE else "black",
        "status": status.state,
        "status_message": status.message,
        "last_move": game.last_move.uci if game.last_move else None,
        "legal_moves_count": board.legal_moves.count(),
        "engine_stalled": game.engine_stalled,
        "thinking": game.is_thinking,
        "feedback": _feedback_dict(record.get("feedback")),
    }


def _parse_move(board: chess.Board, move: str) -> MoveDescriptor | None:
    """Parse SAN or UCI into a descriptor, or None if it doesn't parse."""
    try:
        parsed = board.parse_san(move)
    except ValueError:
        try:
            parsed = chess.Move.from_uci(move)
        except ValueError:
            return None
    return MoveDescriptor(
        chess.square_name(parsed.from_square),
        chess.square_name(parsed.to_square),
        promotion=parsed.promotion,
    )


async def _ensure_bridge(record: dict) -> EngineBridge:
    """Start the game's engine bridge on first use."""
    if record.get("bridge") is None:
        bridge = await EngineBridge.spawn(
            get_tier(record["tier"]),
            stockfish_path=_config.stockfish_path,
            timeout=_config.timeout,
        )
        record["bridge"] = bridge
        record["game"].use_bridge(bridge)
    return record["bridge"]


# ---------------------------------------------------------------------------
# Game tools
# ---------------------------------------------------------------------------


@mcp.tool()
def new_game(
    player_color: str = "white",
    tier: str = "Medium",
    starting_fen: str | None = None,
) -> dict:
    """Start a new coached game against Stockfish.

    Args:
        player_color: 'white' or 'black'. Default 'white'.
        tier: Difficulty tier (Beginner, Easy, Medium, Hard, Expert).
        starting_fen: Optional custom starting position FEN.

    Returns:
        Game state dict with the initial position.
    """
    try:
        tier_name = get_tier(tier).name
    except KeyError as exc:
        return {"error": exc.args[0]}

    fen = starting_fen or chess.STARTING_FEN
    try:
        board = chess.Board(fen)
        if not board.is_valid():
            return {"error": f"Invalid FEN position: {fen}"}
    except ValueError as exc:
        return {"error": f"Invalid FEN: {exc}"}

    color = chess.BLACK if player_color == "black" else chess.WHITE
    game_id = str(uuid.uuid4())
    _games[game_id] = {
        "game": CoachingGame(player_color=color, starting_fen=board.fen()),
        "tier": tier_name,
        "bridge": None,
        "feedback": None,
    }
    return _build_game_state(game_id, _games[game_id])


@mcp.tool()
def get_board(game_id: str) -> dict:
    """Get the current state of a game.

    Args:
        game_id: UUID of the game.
    """
    record = _get_game(game_id)
    if record is None:
        return {"error": f"Game not found: {game_id}"}
    return _build_game_state(game_id, record)


@mcp.tool()
def get_move_options(game_id: str, square: str) -> dict:
    """List where the piece on a square can go.

    Args:
        game_id: UUID of the game.
        square: Square name, e.g. 'g1'.

    Returns:
        Dict mapping destination squares to 'move' or 'capture', with the
        origin marked 'selected'. Empty when the piece cannot move.
    """
    record = _get_game(game_id)
    if record is None:
        return {"error": f"Game not found: {game_id}"}
    return {"square": square, "options": record["game"].move_options(square)}


@mcp.tool()
def make_move(game_id: str, move: str) -> dict:
    """Play the player's move and get coaching feedback on it.

    Args:
        game_id: UUID of the game.
        move: Move in SAN ('Nf3') or UCI ('g1f3').

    Returns:
        Updated game state, including the feedback for the move.
    """
    record = _get_game(game_id)
    if record is None:
        return {"error": f"Game not found: {game_id}"}

    game: CoachingGame = record["game"]
    if game.status().is_over:
        return {"error": f"Game is already over. {game.status().message}"}
    if not game.is_player_turn:
        return {"error": "It is the engine's turn. Call engine_move first."}

    descriptor = _parse_move(chess.Board(game.fen), move)
    feedback = None
    if descriptor is not None:
        feedback = game.play(
            descriptor.from_square, descriptor.to_square, descriptor.promotion
        )
    if feedback is None:
        board = chess.Board(game.fen)
        legal = [board.san(m) for m in board.legal_moves]
        return {"error": f"Illegal move: {move}. Legal moves: {legal}"}

    record["feedback"] = feedback
    return _build_game_state(game_id, record)


@mcp.tool()
async def engine_move(game_id: str) -> dict:
    """Have the engine play its move, with its own commentary.

    Args:
        game_id: UUID of the game.
    """
    record = _get_game(game_id)
    if record is None:
        return {"error": f"Game not found: {game_id}"}

    game: CoachingGame = record["game"]
    if game.status().is_over:
        return {"error": f"Game is already over. {game.status().message}"}
    if game.is_player_turn:
        return {"error": "It is your turn. Call make_move first."}

    try:
        await _ensure_bridge(record)
        feedback = await game.engine_reply()
    except (CoachError, FileNotFoundError) as exc:
        return {"error": str(exc), "engine_stalled": game.engine_stalled}
    if feedback is None:
        return {"error": "Engine did not produce a legal move"}

    record["feedback"] = feedback
    return _build_game_state(game_id, record)


@mcp.tool()
async def get_hint(game_id: str) -> dict:
    """Ask the engine for a suggestion, phrased as a hint.

    Args:
        game_id: UUID of the game.
    """
    record = _get_game(game_id)
    if record is None:
        return {"error": f"Game not found: {game_id}"}

    game: CoachingGame = record["game"]
    try:
        await _ensure_bridge(record)
        feedback = await game.hint()
    except (CoachError, FileNotFoundError) as exc:
        return {"error": str(exc), "engine_stalled": game.engine_stalled}
    if feedback is None:
        return {"error": "No hint available"}
    return {"game_id": game_id, "hint": _feedback_dict(feedback)}


@mcp.tool()
async def set_tier(game_id: str, tier: str) -> dict:
    """Change the engine difficulty for a game.

    The current engine is shut down; a new one starts on next use.

    Args:
        game_id: UUID of the game.
        tier: Difficulty tier name.
    """
    record = _get_game(game_id)
    if record is None:
        return {"error": f"Game not found: {game_id}"}
    try:
        record["tier"] = get_tier(tier).name
    except KeyError as exc:
        return {"error": exc.args[0]}

    bridge = record.get("bridge")
    record["bridge"] = None
    record["game"].use_bridge(None)
    if bridge is not None:
        await bridge.close()
    return _build_game_state(game_id, record)


@mcp.tool()
def list_tiers() -> dict:
    """List the engine difficulty tiers."""
    return {"tiers": [asdict(tier) for tier in TIERS.values()]}


# ---------------------------------------------------------------------------
# Analysis tools
# ---------------------------------------------------------------------------


@mcp.tool()
def analyze_position(fen: str) -> dict:
    """Compute heuristic metrics and strategic context for a position.

    Args:
        fen: FEN string of the position.

    Returns:
        Dict with material, king safety, pawn structure, center control,
        coordination, tactics, phase, initiative and threats.
    """
    try:
        board = chess.Board(fen)
        if not board.is_valid():
            return {"error": f"Invalid FEN position: {fen}"}
    except ValueError as exc:
        return {"error": f"Invalid FEN: {exc}"}

    context = build_context(board)
    analysis = asdict(context.analysis)
    analysis["material"]["diff"] = context.analysis.material.diff
    return {
        "fen": board.fen(),
        "analysis": analysis,
        "phase": context.phase.value,
        "initiative": context.initiative.value,
        "threats": list(context.threats),
    }


@mcp.tool()
def explain_move(fen: str, move: str, voice: str = "your") -> dict:
    """Explain a move in a position without an active game.

    Args:
        fen: Position before the move.
        move: Move in SAN or UCI.
        voice: 'your' (player), 'my' (engine) or 'would' (hint).
    """
    if voice not in _VOICES:
        return {"error": f"Unknown voice {voice!r}. Use one of {sorted(_VOICES)}"}
    try:
        board = chess.Board(fen)
    except ValueError as exc:
        return {"error": f"Invalid FEN: {exc}"}

    descriptor = _parse_move(board, move)
    feedback = _explain(fen, descriptor, _VOICES[voice]) if descriptor else None
    if feedback is None:
        return {"error": f"Illegal move: {move}"}
    return {"fen": feedback.fen, **_feedback_dict(feedback)}


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    setup_logging(_config.log_level)
    mcp.run()
