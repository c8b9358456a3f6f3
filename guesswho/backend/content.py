"""Content provider interface and the in-memory message pool."""

from __future__ import annotations

import random
from typing import Collection, Protocol, Sequence

from .config import MESSAGE_MAX_WORDS, MESSAGE_MIN_WORDS
from .models import Message
from .scoring import shuffle


class ContentProvider(Protocol):
    def get_rounds(self, count: int, eligible_author_ids: Collection[str]) -> list[Message]:
        """Return at most ``count`` messages by eligible authors in random order."""


def is_playable(message: Message) -> bool:
    return MESSAGE_MIN_WORDS <= message.word_count <= MESSAGE_MAX_WORDS


class InMemoryContentProvider:
    def __init__(self, messages: Sequence[Message], rng: random.Random | None = None) -> None:
        self._messages = list(messages)
        self._rng = rng or random.Random()

    def get_rounds(self, count: int, eligible_author_ids: Collection[str]) -> list[Message]:
        if count <= 0:
            return []
        eligible = set(eligible_author_ids)
        seen: set[str] = set()
        pool: list[Message] = []
        for message in self._messages:
            if message.author_id not in eligible or message.id in seen or not is_playable(message):
                continue
            seen.add(message.id)
            pool.append(message)
        return shuffle(pool, self._rng)[:count]
