"""Sample friend group used when the game runs without Discord."""

from __future__ import annotations

import random
from datetime import datetime

from .content import InMemoryContentProvider
from .models import Message, Participant
from .roster import InMemoryRosterProvider


def _avatar(index: int) -> str:
    return f"https://cdn.discordapp.com/embed/avatars/{index}.png"


SAMPLE_PARTICIPANTS: tuple[Participant, ...] = (
    Participant(id="123456789012345678", display_name="xX_DarkNinja_Xx", avatar_ref=_avatar(0)),
    Participant(id="234567890123456789", display_name="CoffeeAddict42", avatar_ref=_avatar(1)),
    Participant(id="345678901234567890", display_name="PotatoLord", avatar_ref=_avatar(2)),
    Participant(id="456789012345678901", display_name="sleepy_cat_vibes", avatar_ref=_avatar(3)),
    Participant(id="567890123456789012", display_name="TacoTuesday", avatar_ref=_avatar(4)),
)

_NINJA, _COFFEE, _POTATO, _CAT, _TACO = (participant.id for participant in SAMPLE_PARTICIPANTS)

SAMPLE_MESSAGES: tuple[Message, ...] = (
    Message(
        id="msg_001",
        content="honestly i think pineapple on pizza is criminally underrated and i will die on this hill",
        author_id=_NINJA,
        timestamp=datetime(2024, 11, 15, 14, 23),
    ),
    Message(
        id="msg_002",
        content="just spent 3 hours debugging only to find a missing semicolon lmao",
        author_id=_COFFEE,
        timestamp=datetime(2024, 11, 12, 9, 45),
    ),
    Message(
        id="msg_003",
        content="why do we park in driveways but drive on parkways this keeps me up at night",
        author_id=_POTATO,
        timestamp=datetime(2024, 10, 28, 23, 15),
    ),
    Message(
        id="msg_004",
        content="my cat just knocked over my coffee and stared at me like i was the problem",
        author_id=_CAT,
        timestamp=datetime(2024, 11, 8, 16, 30),
    ),
    Message(
        id="msg_005",
        content="anyone else get anxiety when someone says we need to talk or is that just me",
        author_id=_TACO,
        timestamp=datetime(2024, 11, 1, 11, 0),
    ),
    Message(
        id="msg_006",
        content="bro i just saw a guy walking his cat on a leash this city is wild",
        author_id=_NINJA,
        timestamp=datetime(2024, 9, 20, 18, 45),
    ),
    Message(
        id="msg_007",
        content="reminder that water is just boneless ice and you cannot change my mind about this",
        author_id=_POTATO,
        timestamp=datetime(2024, 10, 5, 20, 30),
    ),
    Message(
        id="msg_008",
        content="i have a meeting in 5 minutes that could have been an email send help",
        author_id=_COFFEE,
        timestamp=datetime(2024, 11, 18, 8, 55),
    ),
    Message(
        id="msg_009",
        content="just realized i have been pronouncing quinoa wrong my entire life feeling betrayed",
        author_id=_TACO,
        timestamp=datetime(2024, 8, 14, 12, 20),
    ),
    Message(
        id="msg_010",
        content="the urge to adopt every dog i see on the street is getting out of control",
        author_id=_CAT,
        timestamp=datetime(2024, 10, 22, 15, 10),
    ),
    Message(
        id="msg_011",
        content="just got absolutely destroyed in valorant by what i assume was a 12 year old",
        author_id=_NINJA,
        timestamp=datetime(2024, 11, 10, 21, 0),
    ),
    Message(
        id="msg_012",
        content="if bread is bad for ducks why do they keep eating it checkmate scientists",
        author_id=_POTATO,
        timestamp=datetime(2024, 9, 8, 13, 40),
    ),
    Message(
        id="msg_013",
        content="fourth coffee of the day and i can hear colors now is this normal",
        author_id=_COFFEE,
        timestamp=datetime(2024, 11, 5, 14, 0),
    ),
    Message(
        id="msg_014",
        content="napped so hard i woke up in a different dimension where is everyone",
        author_id=_CAT,
        timestamp=datetime(2024, 10, 30, 17, 45),
    ),
    Message(
        id="msg_015",
        content="tried to make homemade tacos and set off the smoke alarm twice new record",
        author_id=_TACO,
        timestamp=datetime(2024, 11, 20, 19, 30),
    ),
)


def create_sample_roster(current_participant_id: str | None = None) -> InMemoryRosterProvider:
    local_id = current_participant_id if current_participant_id is not None else SAMPLE_PARTICIPANTS[0].id
    return InMemoryRosterProvider(participants=SAMPLE_PARTICIPANTS, current_participant_id=local_id)


def create_sample_content(rng: random.Random | None = None) -> InMemoryContentProvider:
    return InMemoryContentProvider(messages=SAMPLE_MESSAGES, rng=rng)
