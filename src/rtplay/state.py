from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from rtplay.config import config_dir
from rtplay.episodes import Episode

logger = logging.getLogger(__name__)

IS_PLAYING_KEY = "rt-playing:playing"
PLAYING_TYPE_KEY = "rt-playing"
EPISODE_KEY = "rt-playing:episode"
STREAM_ID_KEY = "rt-episode-name"


class Storage(Protocol):
    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self.data: Dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any:
        return self.data.get(key)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStore:
    """Key-value store kept in a single JSON object on disk.

    Every write rewrites the whole file through a temp file + replace, so a
    crash mid-write leaves the previous contents intact.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except Exception as exc:
            logger.warning("ignoring unreadable store %s: %s", self.path, exc)
            return {}
        return raw if isinstance(raw, dict) else {}

    def _save(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        tmp.replace(self.path)

    def get(self, key: str) -> Any:
        return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


class PlayingType(str, enum.Enum):
    NOTHING = "nothing"
    EPISODE = "episode"
    LIVE = "live"


@dataclass(frozen=True)
class PlaybackState:
    playing_type: PlayingType = PlayingType.NOTHING
    is_playing: bool = False
    stream_id: Optional[str] = None
    episode: Optional[Episode] = None

    def stopped(self) -> "PlaybackState":
        return PlaybackState()

    def paused(self) -> "PlaybackState":
        return replace(self, is_playing=False)

    def resumed(self) -> "PlaybackState":
        return replace(self, is_playing=True)

    @classmethod
    def streaming_episode(cls, stream_id: str, episode: Episode) -> "PlaybackState":
        return cls(
            playing_type=PlayingType.EPISODE,
            is_playing=True,
            stream_id=stream_id,
            episode=episode,
        )

    @classmethod
    def streaming_live(cls, stream_id: str) -> "PlaybackState":
        return cls(playing_type=PlayingType.LIVE, is_playing=True, stream_id=stream_id)


def load_state(store: Storage) -> PlaybackState:
    try:
        playing_type = PlayingType(store.get(PLAYING_TYPE_KEY) or PlayingType.NOTHING.value)
    except ValueError:
        playing_type = PlayingType.NOTHING

    stream_id = store.get(STREAM_ID_KEY)
    if not isinstance(stream_id, str) or not stream_id:
        stream_id = None

    episode: Optional[Episode] = None
    raw_episode = store.get(EPISODE_KEY)
    if playing_type is PlayingType.EPISODE and raw_episode:
        try:
            data = json.loads(raw_episode) if isinstance(raw_episode, str) else raw_episode
            episode = Episode.from_dict(data)
        except Exception as exc:
            logger.warning("dropping unreadable stored episode: %s", exc)
            episode = None

    return PlaybackState(
        playing_type=playing_type,
        is_playing=bool(store.get(IS_PLAYING_KEY)),
        stream_id=stream_id,
        episode=episode,
    )


def save_state(store: Storage, state: PlaybackState) -> None:
    store.set(IS_PLAYING_KEY, bool(state.is_playing))
    store.set(PLAYING_TYPE_KEY, state.playing_type.value)
    if state.stream_id:
        store.set(STREAM_ID_KEY, state.stream_id)
    else:
        store.remove(STREAM_ID_KEY)
    if state.episode is not None and state.playing_type is PlayingType.EPISODE:
        store.set(EPISODE_KEY, json.dumps(state.episode.to_dict()))
    else:
        store.remove(EPISODE_KEY)


def default_store() -> JsonFileStore:
    return JsonFileStore(config_dir() / "storage.json")
