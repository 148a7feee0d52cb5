"""Rich rendering of the board, move highlights and coaching remarks."""

from __future__ import annotations

import chess
from rich.layout import Layout
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from chess_coach.game import CAPTURE, MOVE, SELECTED, Feedback, GameStatus
from chess_coach.models import Analysis, MoveDescriptor, StrategicContext

# Unicode piece symbols
_PIECE_SYMBOLS = {
    "K": "♔", "Q": "♕", "R": "♖", "B": "♗",
    "N": "♘", "P": "♙",
    "k": "♚", "q": "♛", "r": "♜", "b": "♝",
    "n": "♞", "p": "♟",
}

_LIGHT_SQ = "grey85"
_DARK_SQ = "grey50"
_LAST_MOVE = "yellow"
_HIGHLIGHT_STYLES = {
    SELECTED: "gold1",
    MOVE: "pale_green3",
    CAPTURE: "indian_red",
}


def render_board(
    fen: str,
    highlights: dict[str, str] | None = None,
    last_move: MoveDescriptor | None = None,
    flipped: bool = False,
    title: str = "Chess Coach",
) -> Panel:
    """Render a position as a Rich Panel.

    Args:
        fen: Position to draw.
        highlights: Square name to highlight style (selected/move/capture).
        last_move: Move whose squares are tinted.
        flipped: Draw from Black's side.
        title: Panel title.

    Returns:
        Panel containing the board.
    """
    board = chess.Board(fen)
    highlights = highlights or {}

    last_squares: set[str] = set()
    if last_move is not None:
        last_squares = {last_move.from_square, last_move.to_square}

    table = Table(show_header=False, show_edge=False, pad_edge=False,
                  box=None, padding=(0, 1))
    table.add_column(width=2, justify="right")
    for _ in range(8):
        table.add_column(width=3, justify="center")

    ranks = range(8) if flipped else range(7, -1, -1)
    files = list(range(7, -1, -1)) if flipped else list(range(8))

    for rank in ranks:
        row: list[Text] = [Text(str(rank + 1), style="bold")]
        for file in files:
            sq = chess.square(file, rank)
            name = chess.square_name(sq)

            is_light = (rank + file) % 2 == 1
            bg = _LIGHT_SQ if is_light else _DARK_SQ
            if name in last_squares:
                bg = _LAST_MOVE
            if name in highlights:
                bg = _HIGHLIGHT_STYLES.get(highlights[name], bg)

            piece = board.piece_at(sq)
            if piece is not None:
                symbol = _PIECE_SYMBOLS.get(piece.symbol(), "?")
                row.append(Text(f" {symbol} ", style=f"on {bg}"))
            else:
                row.append(Text("   ", style=f"on {bg}"))
        table.add_row(*row)

    file_labels = [Text("  ")]
    for f in files:
        file_labels.append(Text(f" {chr(ord('a') + f)} ", style="bold"))
    table.add_row(*file_labels)

    return Panel(table, title=title, border_style="blue")


def render_analysis(analysis: Analysis, context: StrategicContext | None = None) -> Table:
    """Tabulate the positional metrics, side by side."""
    table = Table(title="Position", show_lines=False)
    table.add_column("Metric")
    table.add_column("White", justify="right")
    table.add_column("Black", justify="right")

    pawns = analysis.pawn_structure
    table.add_row("Material", str(analysis.material.white), str(analysis.material.black))
    table.add_row("King shelter", str(analysis.king_safety.white), str(analysis.king_safety.black))
    table.add_row("Pawns", str(pawns.white.total), str(pawns.black.total))
    table.add_row("Doubled pawns", str(pawns.white.doubled), str(pawns.black.doubled))
    table.add_row("Isolated pawns", str(pawns.white.isolated), str(pawns.black.isolated))
    table.add_row(
        "Center control",
        f"{analysis.center_control.white:.1f}",
        f"{analysis.center_control.black:.1f}",
    )
    table.add_row(
        "Coordination",
        f"{analysis.coordination.white:.1f}",
        f"{analysis.coordination.black:.1f}",
    )

    caption = [
        f"Mobility (side to move): {analysis.piece_activity}",
        f"Forks: {analysis.tactics.forks}",
    ]
    if context is not None:
        caption.append(f"Phase: {context.phase.value}")
        caption.append(f"Initiative: {context.initiative.value}")
    table.caption = "  |  ".join(caption)
    return table


def render_feedback(feedback: Feedback | None, status: GameStatus, thinking: bool = False) -> Panel:
    """Render the latest coaching remark and the game status."""
    parts: list[str] = []
    if feedback is not None:
        parts.append(f"[bold]{feedback.move.uci}[/bold] ({feedback.quality.value})")
        parts.append(feedback.message)
        for threat in feedback.context.threats:
            parts.append(f"[red]{threat}[/red]")
    if thinking:
        parts.append("[blue]Engine is thinking...[/blue]")
    if status.is_over:
        parts.append(f"[bold green]{status.message}[/bold green]")
    content = "\n".join(parts) or "Make a move to get feedback."
    return Panel(content, title="Coach", border_style="green")


def render_game(
    fen: str,
    feedback: Feedback | None,
    status: GameStatus,
    highlights: dict[str, str] | None = None,
    flipped: bool = False,
) -> Layout:
    """Board on the left, coaching panel on the right."""
    layout = Layout()
    layout.split_row(
        Layout(name="board", ratio=2),
        Layout(name="coach", ratio=1),
    )
    last_move = feedback.move if feedback is not None else None
    layout["board"].update(render_board(fen, highlights, last_move, flipped))
    layout["coach"].update(render_feedback(feedback, status))
    return layout
