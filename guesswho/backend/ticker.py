"""Periodic timer task that drives the active round."""

from __future__ import annotations

import asyncio
import logging

from .session import GameSession

logger = logging.getLogger(__name__)


class RoundTicker:
    """Calls ``GameSession.tick`` once per tick while it runs.

    One ticker serves one session. A tick on a locked-in or finished round is
    a no-op, so a lock-in between two ticks never leads to a second transition.
    """

    def __init__(self, session: GameSession, tick_seconds: float = 1.0) -> None:
        self._session = session
        self._tick_seconds = tick_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._tick_seconds)
            try:
                applied = self._session.tick()
            except Exception:
                logger.exception("Tick failed for round %d", self._session.current_round_index)
                continue
            if applied:
                logger.debug("Tick applied to round %d", self._session.current_round_index)
