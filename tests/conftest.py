"""
Shared fixtures: a scripted media bridge, in-memory storage and sample payloads.
"""
from typing import List, Optional

import pytest

from rtplay.episodes import Episode
from rtplay.notify import LaunchType, RecordingNotifier
from rtplay.playback import PlaybackController
from rtplay.state import MemoryStore


class FakeBridge:
    def __init__(self, stream_ids: Optional[List[Optional[str]]] = None):
        self.calls = []
        self._ids = list(stream_ids) if stream_ids is not None else [f"track-{i}" for i in range(1, 10)]
        self.start_error = None
        self.play_error = None
        self.pause_error = None
        self.stop_error = None

    def start_stream(self, url, label):
        self.calls.append(("start", url, label))
        if self.start_error is not None:
            raise self.start_error
        return self._ids.pop(0) if self._ids else None

    def play(self, stream_id):
        self.calls.append(("play", stream_id))
        if self.play_error is not None:
            raise self.play_error

    def pause(self):
        self.calls.append(("pause",))
        if self.pause_error is not None:
            raise self.pause_error

    def stop(self, stream_id):
        self.calls.append(("stop", stream_id))
        if self.stop_error is not None:
            raise self.stop_error

    def ops(self):
        return [c[0] for c in self.calls]


@pytest.fixture
def episode_payload():
    return {
        "url": "https://radio-t.com/p/2024/03/02/podcast-900/",
        "title": "Радио-Т 900",
        "date": "2024-03-02T12:00:00Z",
        "categories": ["podcast"],
        "image": "https://radio-t.com/images/radio-t/rt900.jpg",
        "file_name": "rt_podcast900",
        "body": "<p>body</p>",
        "show_notes": "notes",
        "audio_url": "https://cdn.radio-t.com/rt_podcast900.mp3",
        "time_labels": [
            {"topic": "Вступление", "time": "2024-03-02T20:00:00Z", "duration": 600},
            {"topic": "Новости", "time": "2024-03-02T20:10:00Z", "duration": 300},
            {"topic": "Темы слушателей", "time": "2024-03-02T20:15:00Z", "duration": 1500},
        ],
        "show_num": 900,
    }


@pytest.fixture
def episode(episode_payload):
    return Episode.from_dict(episode_payload)


@pytest.fixture
def bridge():
    return FakeBridge()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def notifier():
    return RecordingNotifier(launch_type=LaunchType.USER_INITIATED)


@pytest.fixture
def controller(bridge, store, notifier):
    return PlaybackController(bridge=bridge, store=store, notifier=notifier)


@pytest.fixture
def bridge_factory():
    return FakeBridge
