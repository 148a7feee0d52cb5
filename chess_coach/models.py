"""Shared data models for the coaching layer.

Every record here is derived from a single position and is rebuilt on
each call. Nothing is cached between moves.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import chess


class Phase(str, Enum):
    OPENING = "opening"
    MIDDLEGAME = "middlegame"
    ENDGAME = "endgame"


class Initiative(str, Enum):
    ATTACKING = "attacking"
    MATERIAL_ADVANTAGE = "material_advantage"
    POSITIONAL_ADVANTAGE = "positional_advantage"
    BALANCED = "balanced"


class MoveQuality(str, Enum):
    """Move quality labels, most desirable first."""

    EXCELLENT = "excellent"
    GOOD = "good"
    ACCEPTABLE = "acceptable"
    NORMAL = "normal"


class Perspective(str, Enum):
    """Voice a feedback message is written in.

    FIRST_PERSON is used for the engine's own moves ("my"), SECOND_PERSON
    for the human player ("your") and CONDITIONAL for hints ("would").
    """

    FIRST_PERSON = "my"
    SECOND_PERSON = "your"
    CONDITIONAL = "would"


class _BySide:
    """Mixin for records holding one value per colour."""

    def of(self, color: chess.Color):
        return self.white if color == chess.WHITE else self.black


@dataclass(frozen=True)
class PieceRef:
    piece_type: chess.PieceType
    color: chess.Color
    square: str

    @property
    def name(self) -> str:
        return chess.piece_name(self.piece_type)


@dataclass(frozen=True)
class MoveDescriptor:
    """A single ply as produced by the player, the engine or a hint."""

    from_square: str
    to_square: str
    piece_type: chess.PieceType | None = None
    color: chess.Color | None = None
    promotion: chess.PieceType | None = None

    @property
    def uci(self) -> str:
        suffix = chess.piece_symbol(self.promotion) if self.promotion else ""
        return f"{self.from_square}{self.to_square}{suffix}"

    @property
    def piece_name(self) -> str:
        if self.piece_type is None:
            return "piece"
        return chess.piece_name(self.piece_type)


@dataclass(frozen=True)
class MaterialCount(_BySide):
    white: int
    black: int

    @property
    def diff(self) -> int:
        return self.white - self.black

    @property
    def total(self) -> int:
        return self.white + self.black


@dataclass(frozen=True)
class KingSafety(_BySide):
    """Friendly pawns directly in front of each king."""

    white: int
    black: int


@dataclass(frozen=True)
class SidePawns:
    total: int
    doubled: int
    isolated: int


@dataclass(frozen=True)
class PawnStructure(_BySide):
    white: SidePawns
    black: SidePawns


@dataclass(frozen=True)
class CenterControl(_BySide):
    white: float
    black: float


@dataclass(frozen=True)
class PieceCoordination(_BySide):
    white: float
    black: float


@dataclass(frozen=True)
class TacticalPatterns:
    forks: int = 0
    # Pins and skewers are not detected yet; they always read zero.
    pins: int = 0
    skewers: int = 0


@dataclass(frozen=True)
class Analysis:
    """Raw positional metrics for one position."""

    fen: str
    turn: chess.Color
    material: MaterialCount
    piece_activity: int
    king_safety: KingSafety
    pawn_structure: PawnStructure
    center_control: CenterControl
    coordination: PieceCoordination
    tactics: TacticalPatterns
    is_check: bool = False
    is_checkmate: bool = False
    is_draw: bool = False


@dataclass(frozen=True)
class StrategicContext:
    analysis: Analysis
    phase: Phase
    initiative: Initiative
    threats: tuple[str, ...] = ()
