"""Chess rules adapter built on python-chess.

Positions travel through the coaching layer as FEN strings. Every
function here reads a position and, where a new one results, returns a
new FEN; no board object is shared or mutated across calls.
"""

from __future__ import annotations

import chess

from chess_coach.models import MoveDescriptor, PieceRef

STARTING_FEN = chess.STARTING_FEN


def board_from(position: str | chess.Board) -> chess.Board:
    """Return a board for a FEN string, or the board itself."""
    if isinstance(position, chess.Board):
        return position
    return chess.Board(position)


def _parse_square(square: str | int) -> int:
    if isinstance(square, int):
        return square
    return chess.parse_square(square.lower())


def _view_for(board: chess.Board, color: chess.Color | None) -> chess.Board:
    """Return a board where ``color`` is the side to move.

    The side not on move is handled by passing the turn with a null move,
    which also clears any en passant target.
    """
    if color is None or color == board.turn:
        return board
    view = board.copy(stack=False)
    view.push(chess.Move.null())
    return view


def legal_moves(
    position: str | chess.Board,
    square: str | int | None = None,
    color: chess.Color | None = None,
) -> list[chess.Move]:
    """List legal moves, optionally only those leaving ``square``.

    Args:
        position: FEN string or board.
        square: Origin square filter (name or index).
        color: Side to enumerate for. Defaults to the side to move.

    Returns:
        Moves in python-chess generation order.
    """
    board = _view_for(board_from(position), color)
    moves = list(board.legal_moves)
    if square is None:
        return moves
    origin = _parse_square(square)
    return [m for m in moves if m.from_square == origin]


def piece_at(position: str | chess.Board, square: str | int) -> PieceRef | None:
    board = board_from(position)
    sq = _parse_square(square)
    piece = board.piece_at(sq)
    if piece is None:
        return None
    return PieceRef(piece.piece_type, piece.color, chess.square_name(sq))


def describe_move(
    position: str | chess.Board,
    move: chess.Move,
) -> MoveDescriptor:
    """Build a MoveDescriptor for ``move`` played from ``position``."""
    board = board_from(position)
    piece = board.piece_at(move.from_square)
    return MoveDescriptor(
        from_square=chess.square_name(move.from_square),
        to_square=chess.square_name(move.to_square),
        piece_type=piece.piece_type if piece else None,
        color=piece.color if piece else None,
        promotion=move.promotion,
    )


def to_move(position: str | chess.Board, descriptor: MoveDescriptor) -> chess.Move | None:
    """Resolve a descriptor to a legal move, or None if it is not legal.

    Pawns reaching the last rank promote to the descriptor's promotion
    piece, or to a queen when none is given.
    """
    board = board_from(position)
    try:
        from_sq = _parse_square(descriptor.from_square)
        to_sq = _parse_square(descriptor.to_square)
    except ValueError:
        return None

    promotion = None
    piece = board.piece_at(from_sq)
    if (
        piece is not None
        and piece.piece_type == chess.PAWN
        and chess.square_rank(to_sq) in (0, 7)
    ):
        promotion = descriptor.promotion or chess.QUEEN

    move = chess.Move(from_sq, to_sq, promotion=promotion)
    if move not in board.legal_moves:
        return None
    return move


def apply_move(
    position: str | chess.Board,
    from_square: str,
    to_square: str,
    promotion: str = "q",
) -> str | None:
    """Play a move and return the resulting FEN.

    Args:
        position: Position before the move.
        from_square: Origin square name, e.g. "e2".
        to_square: Destination square name, e.g. "e4".
        promotion: Piece letter used if a pawn reaches the last rank.

    Returns:
        The new FEN, or None if the move is illegal.
    """
    board = board_from(position)
    promo_type = chess.Piece.from_symbol(promotion).piece_type if promotion else None
    descriptor = MoveDescriptor(from_square, to_square, promotion=promo_type)
    move = to_move(board, descriptor)
    if move is None:
        return None
    after = board.copy()
    after.push(move)
    return after.fen()


def is_check(position: str | chess.Board) -> bool:
    return board_from(position).is_check()


def is_checkmate(position: str | chess.Board) -> bool:
    return board_from(position).is_checkmate()


def is_stalemate(position: str | chess.Board) -> bool:
    return board_from(position).is_stalemate()


def is_draw(position: str | chess.Board) -> bool:
    """True for stalemate, insufficient material, fifty moves or repetition."""
    board = board_from(position)
    return (
        board.is_stalemate()
        or board.is_insufficient_material()
        or board.is_fifty_moves()
        or board.is_repetition(3)
    )


def is_game_over(position: str | chess.Board) -> bool:
    return is_checkmate(position) or is_draw(position)
