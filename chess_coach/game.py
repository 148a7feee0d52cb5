"""Game controller for a coached game against the engine.

The controller owns the current position as a FEN string and replaces
it after every validated move. Player input (clicks, drags, right
clicks) comes in as square names; each played move yields a Feedback
with the coaching remark for it.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace

import chess

from chess_coach import rules
from chess_coach.bridge import BridgeState, EngineBridge
from chess_coach.classifier import classify_move
from chess_coach.context import build_context
from chess_coach.feedback import Chooser, select_message
from chess_coach.models import (
    MoveDescriptor,
    MoveQuality,
    Perspective,
    StrategicContext,
)

logger = logging.getLogger(__name__)

# Highlight styles handed to the board renderer
SELECTED = "selected"
CAPTURE = "capture"
MOVE = "move"


@dataclass(frozen=True)
class GameStatus:
    state: str = "playing"
    message: str = ""

    @property
    def is_over(self) -> bool:
        return self.state != "playing"


@dataclass(frozen=True)
class Feedback:
    """A move together with the coaching remark about it."""

    fen: str
    move: MoveDescriptor
    quality: MoveQuality
    message: str
    context: StrategicContext
    status: GameStatus


def _repetition_key(fen: str) -> str:
    # Placement, turn, castling and en passant identify a repeated position
    return " ".join(fen.split()[:4])


def game_status(fen: str, history: tuple[str, ...] = ()) -> GameStatus:
    """Report whether the game in ``fen`` is still going.

    Args:
        fen: Current position.
        history: Earlier FENs of the game, for threefold repetition.

    Returns:
        GameStatus with the end-of-game message, if any.
    """
    board = chess.Board(fen)
    if board.is_checkmate():
        winner = "Black" if board.turn == chess.WHITE else "White"
        return GameStatus("checkmate", f"{winner} wins by checkmate!")
    if board.is_stalemate():
        return GameStatus("stalemate", "Game ended in a stalemate!")

    key = _repetition_key(fen)
    repeated = sum(1 for earlier in history if _repetition_key(earlier) == key)
    if rules.is_draw(board) or repeated >= 2:
        return GameStatus("draw", "Game ended in a draw!")
    return GameStatus()


def explain_move(
    fen: str,
    move: MoveDescriptor,
    perspective: Perspective,
    choice: Chooser = random.choice,
) -> Feedback | None:
    """Classify a move, analyse the result and phrase a remark.

    Args:
        fen: Position before the move.
        move: Move to explain. Piece and colour are filled in from the
            position when missing.
        perspective: Voice of the remark.
        choice: Random pick used by the template selector.

    Returns:
        Feedback for the move, or None if the move is illegal.
    """
    board = chess.Board(fen)
    legal = rules.to_move(board, move)
    if legal is None:
        return None

    descriptor = rules.describe_move(board, legal)
    quality = classify_move(board, descriptor)

    after = board.copy()
    after.push(legal)
    context = build_context(after)
    message = select_message(context, quality, descriptor, perspective, choice)

    return Feedback(
        fen=after.fen(),
        move=descriptor,
        quality=quality,
        message=message,
        context=context,
        status=game_status(after.fen()),
    )


class CoachingGame:
    """One game between a human player and the engine, with coaching."""

    def __init__(
        self,
        player_color: chess.Color = chess.WHITE,
        bridge: EngineBridge | None = None,
        choice: Chooser = random.choice,
        starting_fen: str = rules.STARTING_FEN,
    ) -> None:
        self.player_color = player_color
        self._bridge = bridge
        self._choice = choice
        self._thinking = False
        self.reset(starting_fen)

    def reset(self, starting_fen: str = rules.STARTING_FEN) -> None:
        """Start over from ``starting_fen``."""
        self._fen = chess.Board(starting_fen).fen()
        self._history: list[str] = []
        self._selected: str | None = None
        self._highlights: dict[str, str] = {}
        self._last_move: MoveDescriptor | None = None

    def use_bridge(self, bridge: EngineBridge | None) -> None:
        """Swap the engine bridge, e.g. after a tier change."""
        self._bridge = bridge

    @property
    def fen(self) -> str:
        return self._fen

    @property
    def selected(self) -> str | None:
        return self._selected

    @property
    def highlights(self) -> dict[str, str]:
        return dict(self._highlights)

    @property
    def last_move(self) -> MoveDescriptor | None:
        return self._last_move

    @property
    def is_thinking(self) -> bool:
        return self._thinking

    @property
    def engine_stalled(self) -> bool:
        return self._bridge is not None and self._bridge.state == BridgeState.STALLED

    @property
    def is_player_turn(self) -> bool:
        return chess.Board(self._fen).turn == self.player_color

    def status(self) -> GameStatus:
        return game_status(self._fen, tuple(self._history))

    # ── Board interaction ────────────────────────────────────────────

    def move_options(self, square: str) -> dict[str, str]:
        """Highlight the legal destinations of the piece on ``square``.

        Returns:
            Square name to style mapping, empty if the piece cannot move.
            The mapping also becomes the current highlights.
        """
        board = chess.Board(self._fen)
        try:
            moves = rules.legal_moves(board, square)
        except ValueError:
            moves = []
        if not moves:
            self._highlights = {}
            return {}

        mover = board.piece_at(moves[0].from_square)
        options: dict[str, str] = {}
        for move in moves:
            target = board.piece_at(move.to_square)
            is_capture = target is not None and target.color != mover.color
            options[chess.square_name(move.to_square)] = CAPTURE if is_capture else MOVE
        options[square.lower()] = SELECTED

        self._highlights = options
        return dict(options)

    def click_square(self, square: str) -> Feedback | None:
        """Handle a click: select a piece, or move the selected one.

        Returns:
            Feedback when the click completed a legal move, else None.
        """
        square = square.lower()
        if self._selected is None:
            if self.move_options(square):
                self._selected = square
            return None

        targets = {
            chess.square_name(m.to_square)
            for m in rules.legal_moves(self._fen, self._selected)
        }
        if square in targets:
            feedback = self.play(self._selected, square)
            if feedback is not None:
                return feedback

        # Not a move from the selection: try selecting the clicked piece
        self._selected = square if self.move_options(square) else None
        return None

    def drop_piece(self, source: str, target: str | None) -> Feedback | None:
        """Handle a drag and drop; dropping off the board does nothing."""
        if not target:
            return None
        return self.play(source, target)

    def begin_drag(self, square: str) -> dict[str, str]:
        return self.move_options(square)

    def right_click(self) -> None:
        """Clear the selection and highlights."""
        self._selected = None
        self._highlights = {}

    # ── Moves ────────────────────────────────────────────────────────

    def _adopt(self, feedback: Feedback) -> Feedback:
        self._history.append(self._fen)
        self._fen = feedback.fen
        self._last_move = feedback.move
        self._selected = None
        self._highlights = {}
        # Repetition draws need the game history
        return replace(feedback, status=self.status())

    def play(
        self,
        from_square: str,
        to_square: str,
        promotion: chess.PieceType | None = None,
    ) -> Feedback | None:
        """Play the player's move and coach it.

        Args:
            from_square: Origin square name.
            to_square: Destination square name.
            promotion: Piece a pawn reaching the last rank becomes.
                Defaults to a queen.

        Returns:
            Feedback in the player's voice, or None if the move is illegal,
            out of turn, or the game is over. Nothing changes in that case.
        """
        if not self.is_player_turn or self.status().is_over:
            logger.debug("Ignoring %s%s: not the player's turn", from_square, to_square)
            return None
        try:
            proposal = MoveDescriptor(
                from_square.lower(), to_square.lower(), promotion=promotion
            )
            feedback = explain_move(
                self._fen, proposal, Perspective.SECOND_PERSON, self._choice
            )
        except ValueError:
            feedback = None
        if feedback is None:
            logger.debug("Illegal move attempt %s%s", from_square, to_square)
            return None

        return self._adopt(feedback)

    def _require_bridge(self) -> EngineBridge:
        if self._bridge is None:
            raise RuntimeError("No engine bridge configured for this game")
        return self._bridge

    async def _ask_engine(self) -> MoveDescriptor:
        bridge = self._require_bridge()
        self._thinking = True
        try:
            return await bridge.request_move(self._fen)
        finally:
            self._thinking = False

    async def engine_reply(self) -> Feedback | None:
        """Let the engine play its move and coach it in its own voice.

        Returns:
            Feedback for the engine's move, or None if the game is over,
            it is the player's turn, or the engine proposed an illegal move.

        Raises:
            BridgeBusyError: If the engine is still busy with a request.
            UnresponsiveEngineError: If the engine stalls.
        """
        if self.status().is_over:
            return None
        if self.is_player_turn:
            logger.debug("Ignoring engine request: it is the player's turn")
            return None

        proposal = await self._ask_engine()
        feedback = explain_move(
            self._fen, proposal, Perspective.FIRST_PERSON, self._choice
        )
        if feedback is None:
            logger.warning("Engine proposed illegal move %s", proposal.uci)
            return None

        return self._adopt(feedback)

    async def hint(self) -> Feedback | None:
        """Ask the engine what it would play here, without playing it."""
        if self.status().is_over:
            return None

        proposal = await self._ask_engine()
        feedback = explain_move(
            self._fen, proposal, Perspective.CONDITIONAL, self._choice
        )
        if feedback is None:
            logger.warning("Engine suggested illegal move %s", proposal.uci)
        return feedback
