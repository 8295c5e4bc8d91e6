from datetime import datetime, timedelta, timezone
from typing import Optional

from cottagetrip.core.config import settings

DEFAULT_COOLDOWN = timedelta(days=settings.REMINDER_COOLDOWN_DAYS)


def as_utc(ts: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def next_allowed_at(last_sent_at: datetime, cooldown: timedelta = DEFAULT_COOLDOWN) -> datetime:
    return as_utc(last_sent_at) + cooldown


def can_send(
    last_sent_at: Optional[datetime],
    now: datetime,
    cooldown: timedelta = DEFAULT_COOLDOWN,
) -> bool:
    if last_sent_at is None:
        return True
    return as_utc(now) >= next_allowed_at(last_sent_at, cooldown)
