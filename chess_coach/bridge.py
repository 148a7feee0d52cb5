"""Single-flight bridge to an external UCI engine process.

The bridge sends a position plus the tier's configuration lines to the
engine and waits for the ``bestmove`` line that answers it. Only one
request may be outstanding at a time: responses carry no request id,
so a second request would make the answer ambiguous. Asking again while
a request is in flight fails at once instead of queueing.

The pipe is driven line by line rather than through python-chess's
``chess.engine`` transport, whose option handling validates against the
engine's advertised options and would refuse the ``Contempt`` line that
every request sends.
"""

from __future__ import annotations

import asyncio
import logging
import re
from enum import Enum
from typing import AsyncIterator, Protocol

import chess

from chess_coach import config
from chess_coach.difficulty import DifficultyTier
from chess_coach.errors import BridgeBusyError, UnresponsiveEngineError
from chess_coach.models import MoveDescriptor

logger = logging.getLogger(__name__)

_BESTMOVE_RE = re.compile(r"^bestmove\s([a-h][1-8])([a-h][1-8])([qrbn])?")

_QUIT_GRACE_SECONDS = 5.0

# Sentinel: use the default timeout
_DEFAULT = object()


class BridgeState(str, Enum):
    IDLE = "idle"
    AWAITING = "awaiting"
    # The engine missed a deadline or exited; the bridge cannot be reused
    STALLED = "stalled"


class EngineChannel(Protocol):
    """Outbound half of the line protocol."""

    def send(self, line: str) -> None: ...

    async def flush(self) -> None: ...

    async def close(self) -> None: ...


class UciProcess:
    """Line-oriented pipe to an engine subprocess."""

    def __init__(self, process: asyncio.subprocess.Process) -> None:
        self._process = process

    @classmethod
    async def open(cls, path: str) -> UciProcess:
        """Start the engine binary at ``path``."""
        process = await asyncio.create_subprocess_exec(
            path,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
        )
        logger.info("Started engine %s (pid %s)", path, process.pid)
        return cls(process)

    def send(self, line: str) -> None:
        self._process.stdin.write(f"{line}\n".encode())

    async def flush(self) -> None:
        await self._process.stdin.drain()

    async def lines(self) -> AsyncIterator[str]:
        """Yield decoded output lines until the engine closes stdout."""
        while True:
            raw = await self._process.stdout.readline()
            if not raw:
                return
            yield raw.decode(errors="replace").rstrip("\r\n")

    async def close(self) -> None:
        """Ask the engine to quit, killing it if it does not."""
        if self._process.returncode is not None:
            return
        try:
            self.send("quit")
            await self.flush()
            self._process.stdin.close()
        except (BrokenPipeError, ConnectionResetError):
            pass
        try:
            await asyncio.wait_for(self._process.wait(), _QUIT_GRACE_SECONDS)
        except asyncio.TimeoutError:
            self._process.kill()
            await self._process.wait()


def parse_bestmove(line: str) -> MoveDescriptor | None:
    """Parse a ``bestmove`` line into a move, or None for any other line."""
    match = _BESTMOVE_RE.match(line.strip())
    if match is None:
        return None
    origin, destination, promo = match.groups()
    promotion = chess.Piece.from_symbol(promo).piece_type if promo else None
    return MoveDescriptor(origin, destination, promotion=promotion)


class EngineBridge:
    """Requests moves from an engine, one at a time."""

    def __init__(
        self,
        tier: DifficultyTier,
        channel: EngineChannel,
        timeout=_DEFAULT,
    ) -> None:
        """Wrap an already open channel.

        Args:
            tier: Difficulty settings sent with every request.
            channel: Outbound line channel. Inbound lines are fed to
                handle_line() by whoever reads the engine's output.
            timeout: Default seconds to wait for a move, 30 unless given.
                None waits indefinitely.
        """
        self._tier = tier
        self._channel = channel
        self._timeout = config.DEFAULT_MOVE_TIMEOUT if timeout is _DEFAULT else timeout
        self._pending: asyncio.Future[MoveDescriptor] | None = None
        self._stalled = False
        self._reader: asyncio.Task | None = None

    @classmethod
    async def spawn(
        cls,
        tier: DifficultyTier,
        stockfish_path: str | None = None,
        timeout=_DEFAULT,
    ) -> EngineBridge:
        """Start an engine process and return a bridge reading from it.

        Raises:
            FileNotFoundError: If no path is given and Stockfish is not found.
        """
        process = await UciProcess.open(stockfish_path or config.find_stockfish())
        bridge = cls(tier, process, timeout)
        bridge._reader = asyncio.create_task(bridge._pump(process))
        return bridge

    @property
    def tier(self) -> DifficultyTier:
        return self._tier

    @property
    def timeout(self) -> float | None:
        return self._timeout

    @property
    def state(self) -> BridgeState:
        if self._stalled:
            return BridgeState.STALLED
        if self._pending is not None:
            return BridgeState.AWAITING
        return BridgeState.IDLE

    def _commands(self, fen: str) -> list[str]:
        return [f"position fen {fen}", *self._tier.directives(), self._tier.go_command()]

    def _stall(self, reason: str) -> None:
        self._stalled = True
        # The outstanding request, if any, is abandoned with the bridge
        self._pending = None
        logger.warning("Engine bridge stalled: %s", reason)

    async def request_move(self, fen: str, timeout=_DEFAULT) -> MoveDescriptor:
        """Ask the engine for a move in ``fen``.

        Args:
            fen: Position to search.
            timeout: Seconds to wait, overriding the bridge default. None
                waits indefinitely.

        Returns:
            The engine's move (origin, destination and any promotion).

        Raises:
            BridgeBusyError: If a request is already outstanding.
            UnresponsiveEngineError: If the engine misses the deadline, has
                exited, or already stalled on an earlier request.
        """
        if self._stalled:
            raise UnresponsiveEngineError(
                "Engine stopped responding; create a new bridge"
            )
        if self._pending is not None:
            logger.warning("Rejected move request: another request is pending")
            raise BridgeBusyError("Pending move in progress")

        pending: asyncio.Future[MoveDescriptor] = asyncio.get_running_loop().create_future()
        self._pending = pending

        try:
            for line in self._commands(fen):
                logger.debug(">> %s", line)
                self._channel.send(line)
            await self._channel.flush()
        except (BrokenPipeError, ConnectionResetError) as exc:
            self._stall(f"write failed: {exc}")
            raise UnresponsiveEngineError("Engine input is closed") from exc

        limit = self._timeout if timeout is _DEFAULT else timeout
        try:
            # Shielded: the request stays outstanding even if the caller
            # gives up, so its answer is still consumed.
            return await asyncio.wait_for(asyncio.shield(pending), limit)
        except asyncio.TimeoutError:
            self._stall(f"no bestmove within {limit}s")
            raise UnresponsiveEngineError(
                f"Engine did not answer within {limit} seconds"
            ) from None

    def handle_line(self, line: str) -> None:
        """Feed one line of engine output to the bridge."""
        logger.debug("<< %s", line)
        move = parse_bestmove(line)
        if move is None:
            return
        pending = self._pending
        if pending is None or self._stalled:
            logger.debug("Ignoring unsolicited %r", line)
            return
        self._pending = None
        if not pending.done():
            pending.set_result(move)

    async def _pump(self, process: UciProcess) -> None:
        async for line in process.lines():
            self.handle_line(line)
        pending = self._pending
        self._stall("engine output closed")
        if pending is not None and not pending.done():
            pending.set_exception(UnresponsiveEngineError("Engine process exited"))

    async def close(self) -> None:
        """Stop reading and shut the engine down."""
        if self._reader is not None:
            self._reader.cancel()
            try:
                await self._reader
            except asyncio.CancelledError:
                pass
            self._reader = None
        await self._channel.close()
