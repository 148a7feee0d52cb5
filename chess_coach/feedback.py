"""Feedback message selection.

Builds a pool of candidate sentences for a move from the game phase,
the move's quality and the strategic context, then draws one at
random. Situational pools only ever add to the base pool.
"""

from __future__ import annotations

import random
from typing import Callable, Sequence

import chess

from chess_coach.errors import TemplatePoolError
from chess_coach.models import (
    MoveDescriptor,
    MoveQuality,
    Perspective,
    StrategicContext,
)
from chess_coach.templates import (
    BASE_TEMPLATES,
    CENTER_TEMPLATES,
    CHECK_TEMPLATES,
    MATERIAL_TEMPLATES,
    TACTICAL_TEMPLATES,
    THREAT_TEMPLATES,
)

Chooser = Callable[[Sequence[str]], str]

# Material lead (in points) that earns a remark
_MATERIAL_REMARK = 2


def _voice_color(context: StrategicContext, move: MoveDescriptor) -> chess.Color:
    """Colour the message speaks for.

    Falls back to the side that just moved, i.e. the side not on move in
    the analysed position.
    """
    if move.color is not None:
        return move.color
    return not context.analysis.turn


def _material_pool(
    context: StrategicContext,
    perspective: Perspective,
    color: chess.Color,
) -> list[str]:
    diff = context.analysis.material.diff
    if abs(diff) <= _MATERIAL_REMARK:
        return []
    leader = chess.WHITE if diff > 0 else chess.BLACK
    standing = "ahead" if leader == color else "behind"
    advantage = str(abs(diff))
    return [
        t.replace("{advantage}", advantage)
        for t in MATERIAL_TEMPLATES[perspective][standing]
    ]


def build_pool(
    context: StrategicContext,
    quality: MoveQuality,
    move: MoveDescriptor,
    perspective: Perspective,
) -> list[str]:
    """Assemble the candidate templates for a move.

    Args:
        context: Strategic context of the position after the move.
        quality: The move's quality label.
        move: The move being described.
        perspective: Voice of the message.

    Returns:
        Templates still holding ``{piece}`` and ``{square}`` placeholders.
    """
    pool = list(
        BASE_TEMPLATES.get(perspective, {})
        .get(context.phase, {})
        .get(quality, ())
    )

    analysis = context.analysis
    color = _voice_color(context, move)

    if analysis.is_check:
        pool.extend(CHECK_TEMPLATES[perspective])

    pool.extend(_material_pool(context, perspective, color))

    center = analysis.center_control
    if center.of(color) > center.of(not color):
        pool.extend(CENTER_TEMPLATES[perspective])

    if analysis.tactics.forks > 0:
        pool.extend(TACTICAL_TEMPLATES[perspective])

    if context.threats:
        pool.append(THREAT_TEMPLATES[perspective].replace("{threat}", context.threats[0]))

    return pool


def render(template: str, move: MoveDescriptor) -> str:
    """Fill the piece and square placeholders of a template."""
    return (
        template
        .replace("{piece}", move.piece_name)
        .replace("{square}", move.to_square.lower())
    )


def select_message(
    context: StrategicContext,
    quality: MoveQuality,
    move: MoveDescriptor,
    perspective: Perspective,
    choice: Chooser = random.choice,
) -> str:
    """Pick one feedback sentence for a move.

    Args:
        context: Strategic context of the position after the move.
        quality: The move's quality label.
        move: The move being described.
        perspective: Voice of the message.
        choice: Draws one element from a sequence. Defaults to a uniform
            random draw; pass a deterministic picker in tests.

    Returns:
        The fully substituted message.

    Raises:
        TemplatePoolError: If no template is configured for the situation.
    """
    pool = build_pool(context, quality, move, perspective)
    if not pool:
        raise TemplatePoolError(
            f"No feedback templates for {perspective.value}/"
            f"{context.phase.value}/{quality.value}"
        )
    return render(choice(pool), move)
