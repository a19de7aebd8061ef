"""
Demo roster and event log for the chat mockup and dashboard.
"""

import random
from datetime import datetime, timedelta

from models.events import EventKind, TimeEvent, User

MOCK_USERS = [
    User(id="u1", display_name="AlexEngineer", avatar_ref="https://picsum.photos/id/64/100/100"),
    User(id="u2", display_name="SarahDesign", avatar_ref="https://picsum.photos/id/65/100/100"),
    User(id="u3", display_name="MikeManager", avatar_ref="https://picsum.photos/id/103/100/100", role="admin"),
    User(id="u4", display_name="DevDave", avatar_ref="https://picsum.photos/id/177/100/100"),
]


def generate_mock_events(
    now: datetime, users: list[User] = MOCK_USERS, seed: int | None = None
) -> list[TimeEvent]:
    """
    One recent shift per user: a clock-in 6-15 hours ago, and for roughly
    70% of users a clock-out within the last hour.
    """
    rng = random.Random(seed)
    events = []

    for user in users:
        worked_minutes = (6 + rng.random() * 4) * 60
        start = now - timedelta(minutes=worked_minutes + rng.random() * 300)
        events.append(
            TimeEvent(
                id=f"{user.id}-seed-in",
                user_id=user.id,
                kind=EventKind.CLOCK_IN,
                occurred_at=start,
            )
        )

        # Some users are still on shift
        if rng.random() > 0.3:
            events.append(
                TimeEvent(
                    id=f"{user.id}-seed-out",
                    user_id=user.id,
                    kind=EventKind.CLOCK_OUT,
                    occurred_at=now - timedelta(minutes=rng.random() * 60),
                )
            )

    return events
