"""Activity context: owns the providers, the session and its background tasks."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable

from .config import GameSettings
from .content import ContentProvider
from .errors import PreconditionError, ProviderError
from .roster import ReconcilingRosterFeed, RosterProvider, Unsubscribe
from .session import GameSession, create_score_recorder
from .ticker import RoundTicker

logger = logging.getLogger(__name__)

Connector = Callable[[], Awaitable[None]]


class ActivityContext:
    """Created at app start and closed at teardown.

    ``start()`` is single-flight: concurrent callers share one initialization
    and receive the same session or the same failure. After a failure the next
    call starts a fresh attempt.
    """

    def __init__(
        self,
        roster: RosterProvider,
        content: ContentProvider,
        settings: GameSettings | None = None,
        connect: Connector | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings or GameSettings()
        self._roster = roster
        self._content = content
        self._connect = connect
        self._rng = rng
        self._lock = asyncio.Lock()
        self._startup: asyncio.Task[GameSession] | None = None
        self._feed: ReconcilingRosterFeed | None = None
        self._ticker: RoundTicker | None = None
        self._unsubscribe: Unsubscribe | None = None
        self.session: GameSession | None = None

    async def start(self) -> GameSession:
        async with self._lock:
            if self._startup is None:
                self._startup = asyncio.get_running_loop().create_task(self._initialize())
            startup = self._startup
        try:
            return await asyncio.shield(startup)
        except Exception:
            async with self._lock:
                if self._startup is startup:
                    self._startup = None
            raise

    async def close(self) -> None:
        async with self._lock:
            startup, self._startup = self._startup, None
        if startup is not None and not startup.done():
            startup.cancel()
            try:
                await startup
            except (asyncio.CancelledError, Exception):
                logger.debug("Startup abandoned during close", exc_info=True)
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._ticker is not None:
            await self._ticker.stop()
            self._ticker = None
        if self._feed is not None:
            await self._feed.close()
            self._feed = None
        if self.session is not None and self.session.round is not None:
            self.session.round.cancel()
        self.session = None

    async def _initialize(self) -> GameSession:
        if self._connect is not None:
            try:
                await self._connect()
            except Exception as exc:
                logger.warning("Connecting to the roster provider failed: %s", exc)
                raise ProviderError("roster", exc) from exc

        feed = ReconcilingRosterFeed(self._roster, poll_seconds=self.settings.roster_poll_seconds)
        session = GameSession(
            roster=feed,
            content=self._content,
            settings=self.settings,
            score_recorder=create_score_recorder(self.settings.scoring_scope),
            rng=self._rng,
        )
        session.refresh_identity()
        if not session.local_player_id:
            raise PreconditionError("Failed to get the authenticated participant")
        session.reload_roster()

        self._unsubscribe = feed.subscribe(session.sync_roster)
        feed.start()
        self._feed = feed
        self._ticker = RoundTicker(session, tick_seconds=self.settings.tick_seconds)
        self._ticker.start()
        self.session = session
        logger.info("Activity ready for participant %s", session.local_player_id)
        return session
