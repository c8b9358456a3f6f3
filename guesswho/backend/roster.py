"""Roster provider interface and implementations."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Iterable, Protocol, Sequence

from .models import Participant

logger = logging.getLogger(__name__)

RosterListener = Callable[[list[Participant]], None]
Unsubscribe = Callable[[], None]


class RosterProvider(Protocol):
    def get_current_participant_id(self) -> str | None:
        """Return the id of the local participant, if known."""

    def get_participants(self) -> list[Participant]:
        """Return the participants in provider-defined order."""

    def is_host(self, participant_id: str) -> bool:
        """Return whether the participant controls the session start."""

    def subscribe(self, listener: RosterListener) -> Unsubscribe:
        """Register a listener for participant list changes."""


def determine_host(participants: Iterable[Participant]) -> str | None:
    """The first non-bot participant in provider order is the host."""
    for participant in participants:
        if not participant.bot:
            return participant.id
    return None


class _ListenerSet:
    def __init__(self) -> None:
        self._listeners: list[RosterListener] = []

    def add(self, listener: RosterListener) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self, participants: list[Participant]) -> None:
        for listener in list(self._listeners):
            listener(list(participants))


class InMemoryRosterProvider:
    """Roster fed by explicit pushes, used by the relay endpoint and in dev mode."""

    def __init__(self, participants: Sequence[Participant] = (), current_participant_id: str | None = None) -> None:
        self._participants = list(participants)
        self.current_participant_id = current_participant_id
        self._listeners = _ListenerSet()

    def get_current_participant_id(self) -> str | None:
        return self.current_participant_id

    def get_participants(self) -> list[Participant]:
        return list(self._participants)

    def is_host(self, participant_id: str) -> bool:
        return determine_host(self._participants) == participant_id

    def subscribe(self, listener: RosterListener) -> Unsubscribe:
        return self._listeners.add(listener)

    def set_participants(self, participants: Sequence[Participant]) -> None:
        updated = list(participants)
        if updated == self._participants:
            return
        self._participants = updated
        self._listeners.notify(updated)

    def add_participant(self, participant: Participant) -> None:
        remaining = [existing for existing in self._participants if existing.id != participant.id]
        self.set_participants([*remaining, participant])

    def remove_participant(self, participant_id: str) -> None:
        self.set_participants([existing for existing in self._participants if existing.id != participant_id])


class ReconcilingRosterFeed:
    """Merges push updates with a periodic authoritative pull.

    Listeners only see a snapshot when it differs from the last one delivered,
    whichever path produced it.
    """

    def __init__(self, provider: RosterProvider, poll_seconds: float = 2.0) -> None:
        self._provider = provider
        self._poll_seconds = poll_seconds
        self._listeners = _ListenerSet()
        self._last: list[Participant] | None = None
        self._unsubscribe_push: Unsubscribe | None = None
        self._poll_task: asyncio.Task[None] | None = None

    def get_current_participant_id(self) -> str | None:
        return self._provider.get_current_participant_id()

    def get_participants(self) -> list[Participant]:
        if self._last is None:
            return self.refresh()
        return list(self._last)

    def is_host(self, participant_id: str) -> bool:
        return self._provider.is_host(participant_id)

    def subscribe(self, listener: RosterListener) -> Unsubscribe:
        return self._listeners.add(listener)

    def refresh(self) -> list[Participant]:
        """Pull the roster now and deliver it if it changed."""
        participants = self._provider.get_participants()
        self._publish(participants)
        return list(participants)

    def start(self) -> None:
        if self._unsubscribe_push is None:
            self._unsubscribe_push = self._provider.subscribe(self._publish)
        if self._poll_task is None:
            self._poll_task = asyncio.get_running_loop().create_task(self._poll())

    async def close(self) -> None:
        if self._unsubscribe_push is not None:
            self._unsubscribe_push()
            self._unsubscribe_push = None
        task, self._poll_task = self._poll_task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _poll(self) -> None:
        while True:
            await asyncio.sleep(self._poll_seconds)
            try:
                self.refresh()
            except Exception:
                logger.warning("Roster poll failed; keeping the last snapshot", exc_info=True)

    def _publish(self, participants: list[Participant]) -> None:
        snapshot = list(participants)
        if snapshot == self._last:
            return
        logger.debug("Roster changed: %d participants", len(snapshot))
        self._listeners.notify(snapshot)
        # only a delivered snapshot suppresses repeats; a failed one is retried on the next pull
        self._last = snapshot
