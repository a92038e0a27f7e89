from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Optional, Protocol, Tuple, TypeVar

from rtplay.api.client import RadioTClient
from rtplay.episodes import Episode, TimeLabel
from rtplay.live import parse_timestamp

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEBOUNCE_SECONDS = 0.3
TOPIC_TITLE_MAX = 45


class Cancellable(Protocol):
    def cancel(self) -> Any: ...


Schedule = Callable[[float, Callable[[], None]], Cancellable]


def thread_timer(delay: float, fn: Callable[[], None]) -> Cancellable:
    t = threading.Timer(delay, fn)
    t.daemon = True
    t.start()
    return t


class Debouncer(Generic[T]):
    """Hold back a value until it has been left alone for ``delay`` seconds.

    Every ``push`` cancels whatever was pending, so a burst of updates fires
    ``callback`` once, with the last value.
    """

    def __init__(
        self,
        callback: Callable[[T], None],
        *,
        delay: float = DEBOUNCE_SECONDS,
        schedule: Optional[Schedule] = None,
    ) -> None:
        self.callback = callback
        self.delay = delay
        self._schedule = schedule or thread_timer
        self._pending: Optional[Cancellable] = None
        self._lock = threading.RLock()

    def push(self, value: T) -> None:
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
            self._pending = self._schedule(self.delay, lambda: self._fire(value))

    def cancel(self) -> None:
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None

    def _fire(self, value: T) -> None:
        with self._lock:
            self._pending = None
        self.callback(value)


class EpisodeSearch:
    """Picks between search results and the latest episodes.

    ``displayed`` only changes once a load has finished, so the previous
    rows stay on screen while the next set is being fetched.
    """

    def __init__(self, client: RadioTClient, *, limit: int = 9, latest_limit: Optional[int] = None) -> None:
        self.client = client
        self.limit = limit
        self.latest_limit = latest_limit or limit
        self.query = ""
        self.displayed: List[Episode] = []

    def fetch(self, query: str) -> List[Episode]:
        q = (query or "").strip()
        if q:
            return self.client.search_episodes(q, self.limit)
        return self.client.fetch_latest_episodes(self.latest_limit)

    def apply(self, query: str, episodes: List[Episode]) -> None:
        self.query = (query or "").strip()
        self.displayed = list(episodes)
        logger.debug("showing %d episodes for %r", len(episodes), self.query)


def format_time_offset(seconds: int) -> str:
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def topic_start_times(labels: List[TimeLabel]) -> List[str]:
    out: List[str] = []
    elapsed = 0
    for label in labels:
        out.append(format_time_offset(elapsed))
        elapsed += label.duration
    return out


def trim_topic_title(title: str, max_length: int = TOPIC_TITLE_MAX) -> str:
    if len(title) <= max_length:
        return title
    return title[: max_length - 3] + "..."


def format_date(text: str) -> str:
    s = (text or "").strip()
    if not s:
        return ""
    try:
        dt = parse_timestamp(s)
    except ValueError:
        return s
    return dt.astimezone().strftime("%d.%m.%Y")


@dataclass(frozen=True)
class EpisodeRow:
    key: str
    title: str
    date: str
    topics: List[Tuple[str, str]]
    url: str


def build_episode_row(episode: Episode) -> EpisodeRow:
    starts = topic_start_times(episode.time_labels)
    return EpisodeRow(
        key=episode.file_name or episode.url,
        title=episode.title,
        date=format_date(episode.date),
        topics=[(trim_topic_title(label.topic), start) for label, start in zip(episode.time_labels, starts)],
        url=episode.url,
    )
