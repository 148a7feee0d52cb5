"""Shared test fixtures.

Usage:
    pytest tests/            # Fake in-memory engine (no Stockfish)
    pytest tests/ --e2e      # Also run tests against a real Stockfish

Fixtures:
    first_choice  - Template picker that always takes the first entry.
    make_bridge   - Builds an EngineBridge over a FakeEngineChannel.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Callable

import chess
import pytest

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_PROJECT_ROOT))

from chess_coach.bridge import EngineBridge  # noqa: E402
from chess_coach.difficulty import get_tier  # noqa: E402


# ---------------------------------------------------------------------------
# CLI option and marker registration
# ---------------------------------------------------------------------------


def pytest_addoption(parser):
    """Register --e2e CLI flag for real Stockfish tests."""
    parser.addoption(
        "--e2e",
        action="store_true",
        default=False,
        help="Run with real Stockfish engine (no fakes).",
    )


def pytest_configure(config):
    """Register the e2e marker."""
    config.addinivalue_line(
        "markers", "e2e: mark test as end-to-end (requires real Stockfish)"
    )


def pytest_collection_modifyitems(config, items):
    """Skip e2e tests unless --e2e is given."""
    if config.getoption("--e2e"):
        return
    skip_e2e = pytest.mark.skip(reason="needs --e2e and a Stockfish binary")
    for item in items:
        if "e2e" in item.keywords:
            item.add_marker(skip_e2e)


# ---------------------------------------------------------------------------
# Fake engine
# ---------------------------------------------------------------------------


def first_legal_reply(fen: str) -> str:
    """Answer with the first legal move in the position."""
    return next(iter(chess.Board(fen).legal_moves)).uci()


def scripted_reply(moves: list[str]) -> Callable[[str], str]:
    """Answer with the given UCI moves in order."""
    queue = list(moves)
    return lambda fen: queue.pop(0)


class FakeEngineChannel:
    """In-memory stand-in for the engine's stdin.

    Records every line sent. When a reply function is set, a ``go``
    command schedules a ``bestmove`` line back into the attached bridge,
    the way a real engine answers asynchronously.
    """

    def __init__(self, reply: Callable[[str], str] | None = None) -> None:
        self.sent: list[str] = []
        self.closed = False
        self.broken = False
        self._reply = reply
        self._bridge: EngineBridge | None = None
        self._fen: str | None = None

    def attach(self, bridge: EngineBridge) -> None:
        self._bridge = bridge

    def send(self, line: str) -> None:
        if self.broken:
            raise BrokenPipeError("engine stdin closed")
        self.sent.append(line)
        if line.startswith("position fen "):
            self._fen = line[len("position fen "):]
        elif line.startswith("go ") and self._reply and self._bridge:
            answer = f"bestmove {self._reply(self._fen)}"
            asyncio.get_running_loop().call_soon(self._bridge.handle_line, answer)

    async def flush(self) -> None:
        return None

    async def close(self) -> None:
        self.closed = True


@pytest.fixture()
def first_choice():
    """Deterministic template picker."""
    return lambda pool: pool[0]


@pytest.fixture()
def make_bridge():
    """Factory for (bridge, channel) pairs over a fake engine."""

    def _make(
        reply: Callable[[str], str] | None = None,
        timeout: float | None = None,
        tier: str = "Medium",
    ) -> tuple[EngineBridge, FakeEngineChannel]:
        channel = FakeEngineChannel(reply)
        bridge = EngineBridge(get_tier(tier), channel, timeout=timeout)
        channel.attach(bridge)
        return bridge, channel

    return _make


@pytest.fixture()
def legal_reply():
    """Reply function answering with the first legal move."""
    return first_legal_reply


@pytest.fixture()
def scripted():
    """Factory for reply functions playing a fixed move list."""
    return scripted_reply
