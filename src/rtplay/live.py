from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

# Elapsed time since the show start during which it counts as live.
LIVE_WINDOW_MINUTES = 300

_FRACTION = re.compile(r"\.(\d+)(?=[+-]\d{2}:\d{2}$|$)")


@dataclass(frozen=True)
class LiveStatus:
    started_at: datetime
    is_live: bool
    minutes_since_start: float


def parse_timestamp(text: str) -> datetime:
    """Read an RFC3339 timestamp; naive values are taken as UTC.

    Fractions of a second may carry any number of digits. Older
    ``fromisoformat`` only takes 3 or 6, so the fraction is padded or cut
    to microseconds first.
    """
    s = (text or "").strip()
    if s.endswith("Z") or s.endswith("z"):
        s = s[:-1] + "+00:00"
    s = _FRACTION.sub(lambda m: "." + (m.group(1) + "000000")[:6], s)
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def parse_started(text: str) -> datetime:
    return parse_timestamp(text)


def evaluate_live_status(
    started: datetime,
    *,
    now: Optional[datetime] = None,
    window_minutes: float = LIVE_WINDOW_MINUTES,
) -> LiveStatus:
    if started.tzinfo is None:
        started = started.replace(tzinfo=timezone.utc)
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    minutes = (now - started).total_seconds() / 60.0
    return LiveStatus(
        started_at=started,
        is_live=0 <= minutes <= window_minutes,
        minutes_since_start=minutes,
    )
