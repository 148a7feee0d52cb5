"""Engine difficulty tiers.

Each tier is a fixed (skill, contempt, depth) triple sent to the engine
before every search. Changing tier means building a new bridge.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DifficultyTier:
    name: str
    skill: int
    # Positive contempt makes the engine avoid draws and play riskier moves
    contempt: int
    depth: int

    @property
    def label(self) -> str:
        return f"{self.name} (Skill {self.skill}, Depth {self.depth})"

    def directives(self) -> list[str]:
        """Configuration lines sent after the position."""
        return [
            f"setoption name Skill Level value {self.skill}",
            f"setoption name Contempt value {self.contempt}",
        ]

    def go_command(self) -> str:
        return f"go depth {self.depth}"


TIERS: dict[str, DifficultyTier] = {
    tier.name: tier
    for tier in (
        DifficultyTier("Beginner", skill=0, contempt=100, depth=5),
        DifficultyTier("Easy", skill=1, contempt=50, depth=10),
        DifficultyTier("Medium", skill=5, contempt=0, depth=15),
        DifficultyTier("Hard", skill=10, contempt=-50, depth=20),
        DifficultyTier("Expert", skill=20, contempt=-100, depth=25),
    )
}

DEFAULT_TIER = "Medium"


def get_tier(name: str) -> DifficultyTier:
    """Look up a tier by name, ignoring case.

    Raises:
        KeyError: If no tier has that name.
    """
    for tier_name, tier in TIERS.items():
        if tier_name.lower() == name.strip().lower():
            return tier
    raise KeyError(f"Unknown tier {name!r}. Choose from: {', '.join(TIERS)}")
