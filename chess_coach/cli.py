"""Command line interface for the chess coach.

Subcommands:
    analyze FEN             Print positional metrics and strategic context
    explain FEN MOVE        Print the coaching remark for a move
    play [--tier T]         Play a coached game against Stockfish
    tiers                   List the difficulty tiers
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import sys

import chess
from rich.console import Console
from rich.table import Table

from chess_coach.bridge import EngineBridge
from chess_coach.config import CoachConfig, load_config
from chess_coach.context import build_context
from chess_coach.difficulty import TIERS, get_tier
from chess_coach.errors import CoachError
from chess_coach.game import CoachingGame, explain_move
from chess_coach.log import setup_logging
from chess_coach.models import MoveDescriptor, Perspective
from chess_coach.tui import render_analysis, render_board, render_feedback, render_game

_VOICES = {p.value: p for p in Perspective}


def _parse_move(board: chess.Board, text: str) -> chess.Move | None:
    """Parse SAN first, then UCI. Returns None if neither parses."""
    try:
        return board.parse_san(text)
    except ValueError:
        pass
    try:
        return chess.Move.from_uci(text)
    except ValueError:
        return None


def _cli_analyze(console: Console, fen: str) -> None:
    context = build_context(fen)
    console.print(render_board(fen))
    console.print(render_analysis(context.analysis, context))
    for threat in context.threats:
        console.print(f"[red]{threat}[/red]")


def _cli_explain(console: Console, fen: str, text: str, voice: str) -> int:
    board = chess.Board(fen)
    move = _parse_move(board, text)
    feedback = None
    if move is not None:
        descriptor = MoveDescriptor(
            chess.square_name(move.from_square),
            chess.square_name(move.to_square),
            promotion=move.promotion,
        )
        feedback = explain_move(fen, descriptor, _VOICES[voice])
    if feedback is None:
        console.print(f"[red]Illegal move: {text}[/red]")
        return 1
    console.print(f"[bold]{feedback.quality.value}[/bold]: {feedback.message}")
    return 0


def _cli_tiers(console: Console) -> None:
    table = Table(title="Difficulty tiers")
    table.add_column("Tier")
    table.add_column("Skill", justify="right")
    table.add_column("Contempt", justify="right")
    table.add_column("Depth", justify="right")
    for tier in TIERS.values():
        table.add_row(tier.name, str(tier.skill), f"{tier.contempt:+d}", str(tier.depth))
    console.print(table)


async def _cli_play(console: Console, config: CoachConfig, color: chess.Color) -> None:
    """Interactive coached game. The engine plays the other side."""
    bridge = await EngineBridge.spawn(
        get_tier(config.tier),
        stockfish_path=config.resolve_stockfish(),
        timeout=config.timeout,
    )
    game = CoachingGame(player_color=color, bridge=bridge)
    flipped = color == chess.BLACK
    feedback = None
    console.print(f"New game against {bridge.tier.label}. Type a move, 'hint' or 'q'.")

    try:
        while True:
            console.print(render_game(game.fen, feedback, game.status(), game.highlights, flipped))
            if game.status().is_over:
                return

            if not game.is_player_turn:
                console.print(render_feedback(None, game.status(), thinking=True))
                feedback = await game.engine_reply()
                continue

            text = (await asyncio.to_thread(input, "Your move: ")).strip()
            if text.lower() == "q":
                console.print("Game ended by user.")
                return
            if text.lower() == "hint":
                suggestion = await game.hint()
                if suggestion is not None:
                    console.print(f"[cyan]{suggestion.message}[/cyan]")
                continue

            move = _parse_move(chess.Board(game.fen), text)
            played = None
            if move is not None:
                played = game.play(
                    chess.square_name(move.from_square),
                    chess.square_name(move.to_square),
                    move.promotion,
                )
            if played is None:
                console.print("Illegal move. Try again (SAN like Nf3 or UCI like g1f3).")
                continue
            feedback = played
    finally:
        await bridge.close()


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Chess coach - explain moves and play coached games"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    analyze_parser = subparsers.add_parser("analyze", help="Analyze a FEN position")
    analyze_parser.add_argument("fen", type=str, help="FEN string to analyze")

    explain_parser = subparsers.add_parser("explain", help="Explain a move")
    explain_parser.add_argument("fen", type=str, help="Position before the move")
    explain_parser.add_argument("move", type=str, help="Move in SAN or UCI")
    explain_parser.add_argument(
        "--voice", choices=sorted(_VOICES), default="your",
        help="Voice of the remark (default: your)",
    )

    play_parser = subparsers.add_parser("play", help="Play against the engine")
    play_parser.add_argument("--tier", type=str, default=None, help="Difficulty tier")
    play_parser.add_argument(
        "--color", choices=["white", "black"], default="white",
        help="Your colour (default: white)",
    )

    subparsers.add_parser("tiers", help="List difficulty tiers")

    args = parser.parse_args(argv)
    console = Console()

    try:
        config = load_config()
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        sys.exit(2)
    setup_logging(config.log_level)

    try:
        if args.command == "analyze":
            _cli_analyze(console, args.fen)
        elif args.command == "explain":
            sys.exit(_cli_explain(console, args.fen, args.move, args.voice))
        elif args.command == "play":
            if args.tier is not None:
                config = dataclasses.replace(config, tier=get_tier(args.tier).name)
            color = chess.WHITE if args.color == "white" else chess.BLACK
            asyncio.run(_cli_play(console, config, color))
        elif args.command == "tiers":
            _cli_tiers(console)
        else:
            parser.print_help()
            sys.exit(1)
    except (CoachError, FileNotFoundError, KeyError, ValueError) as exc:
        console.print(f"[red]{exc}[/red]")
        sys.exit(1)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
