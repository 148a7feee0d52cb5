"""Runtime configuration for the coach.

Settings come from environment variables:

    CHESS_COACH_STOCKFISH   Path to the engine binary (auto-detected if unset)
    CHESS_COACH_TIER        Difficulty tier name (default: Medium)
    CHESS_COACH_TIMEOUT     Seconds to wait for an engine move (default: 30)
    CHESS_COACH_LOG_LEVEL   Logging level name (default: WARNING)
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from chess_coach.difficulty import DEFAULT_TIER, get_tier

# Stockfish search paths in priority order
_STOCKFISH_PATHS = [
    "/opt/homebrew/bin/stockfish",
    "/usr/local/bin/stockfish",
    "/usr/bin/stockfish",
    "/usr/games/stockfish",
]

_ENV_STOCKFISH = "CHESS_COACH_STOCKFISH"
_ENV_TIER = "CHESS_COACH_TIER"
_ENV_TIMEOUT = "CHESS_COACH_TIMEOUT"
_ENV_LOG_LEVEL = "CHESS_COACH_LOG_LEVEL"

# Seconds an engine gets to answer before it is reported as stalled
DEFAULT_MOVE_TIMEOUT = 30.0


def find_stockfish() -> str:
    """Auto-detect Stockfish binary path.

    Checks known install paths, then falls back to PATH lookup.

    Returns:
        Path to Stockfish binary.

    Raises:
        FileNotFoundError: If Stockfish is not found anywhere.
    """
    for path_str in _STOCKFISH_PATHS:
        if Path(path_str).is_file():
            return path_str

    which_result = shutil.which("stockfish")
    if which_result is not None:
        return which_result

    raise FileNotFoundError(
        f"Stockfish not found. Install it or set {_ENV_STOCKFISH}."
    )


@dataclass(frozen=True)
class CoachConfig:
    stockfish_path: str | None = None
    tier: str = DEFAULT_TIER
    timeout: float = DEFAULT_MOVE_TIMEOUT
    log_level: str = "WARNING"

    def resolve_stockfish(self) -> str:
        """Return the configured engine path, or auto-detect one."""
        return self.stockfish_path or find_stockfish()


def _parse_timeout(raw: str | None) -> float:
    if raw is None or not raw.strip():
        return DEFAULT_MOVE_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{_ENV_TIMEOUT} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{_ENV_TIMEOUT} must be positive, got {raw!r}")
    return value


def load_config(environ: Mapping[str, str] | None = None) -> CoachConfig:
    """Read configuration from the environment.

    Args:
        environ: Mapping to read instead of ``os.environ``.

    Returns:
        Validated CoachConfig.

    Raises:
        ValueError: If a variable holds an invalid value.
    """
    env = os.environ if environ is None else environ

    tier_name = env.get(_ENV_TIER) or DEFAULT_TIER
    try:
        tier = get_tier(tier_name).name
    except KeyError as exc:
        raise ValueError(f"{_ENV_TIER}: {exc.args[0]}") from None

    log_level = (env.get(_ENV_LOG_LEVEL) or "WARNING").upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ValueError(f"{_ENV_LOG_LEVEL} is not a logging level: {log_level!r}")

    return CoachConfig(
        stockfish_path=env.get(_ENV_STOCKFISH) or None,
        tier=tier,
        timeout=_parse_timeout(env.get(_ENV_TIMEOUT)),
        log_level=log_level,
    )
