from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple, Type

from rtplay.bridge.base import MediaBridge, stream_label
from rtplay.episodes import Episode
from rtplay.errors import BridgeCommandFailed, BridgeError, BridgeUnavailable, NotFound
from rtplay.notify import Notifier, ToastStyle
from rtplay.state import PlaybackState, Storage, save_state

logger = logging.getLogger(__name__)

LIVE_STREAM_URL = "https://stream.radio-t.com"

# Bridge errors each operation swallows without telling the user.
SUPPRESSED_ERRORS: Dict[str, Tuple[Type[BridgeError], ...]] = {
    "play": (),
    "pause": (BridgeCommandFailed, NotFound),
    "stop": (NotFound,),
}


def is_suppressed(operation: str, exc: BaseException) -> bool:
    return isinstance(exc, SUPPRESSED_ERRORS.get(operation, ()))


class PlaybackController:
    """Maps "what should be playing" onto media bridge commands.

    Every operation takes the current state and returns the new one; the new
    state is written to ``store`` before the result is handed back. Bridge
    failures never escape: they end up as a notification or, when
    ``is_suppressed`` says so, only in the log.
    """

    def __init__(
        self,
        *,
        bridge: MediaBridge,
        store: Storage,
        notifier: Notifier,
        live_stream_url: str = LIVE_STREAM_URL,
    ) -> None:
        self.bridge = bridge
        self.store = store
        self.notifier = notifier
        self.live_stream_url = live_stream_url

    def _commit(self, state: PlaybackState) -> PlaybackState:
        save_state(self.store, state)
        return state

    def _start(self, url: str, failure_title: str) -> Optional[str]:
        try:
            stream_id = self.bridge.start_stream(url, stream_label(url))
        except BridgeUnavailable as exc:
            logger.warning("start_stream(%s): %s", url, exc)
            self.notifier.hud(f"Error: {exc}")
            return None
        except BridgeError as exc:
            logger.warning("start_stream(%s): %s", url, exc)
            self.notifier.toast(f"{failure_title}: {exc}", style=ToastStyle.FAILURE)
            return None
        if not stream_id:
            logger.warning("start_stream(%s) returned no stream id", url)
            self.notifier.toast(failure_title, style=ToastStyle.FAILURE)
            return None
        return stream_id

    def stream_episode(self, state: PlaybackState, episode: Episode) -> PlaybackState:
        state = self.stop(state)
        stream_id = self._start(episode.audio_url, "Failed to stream episode")
        if not stream_id:
            return state
        logger.info("streaming episode %s as %s", episode.file_name, stream_id)
        return self._commit(PlaybackState.streaming_episode(stream_id, episode))

    def stream_live(self, state: PlaybackState) -> PlaybackState:
        state = self.stop(state)
        stream_id = self._start(self.live_stream_url, "Failed to stream live")
        if not stream_id:
            return state
        logger.info("streaming live as %s", stream_id)
        return self._commit(PlaybackState.streaming_live(stream_id))

    def play(self, state: PlaybackState) -> PlaybackState:
        if not state.stream_id:
            logger.info("play: nothing loaded")
            return state

        # Optimistic: the flag flips even when the bridge call fails.
        new_state = self._commit(state.resumed())
        try:
            self.bridge.play(state.stream_id)
        except BridgeError as exc:
            if is_suppressed("play", exc):
                logger.info("play: ignoring %s", exc)
            else:
                logger.warning("play(%s): %s", state.stream_id, exc)
                self.notifier.toast("Error: Failed to play track", style=ToastStyle.FAILURE)
        return new_state

    def pause(self, state: PlaybackState) -> PlaybackState:
        new_state = self._commit(state.paused())
        try:
            self.bridge.pause()
        except BridgeError as exc:
            if not is_suppressed("pause", exc):
                logger.warning("pause: %s", exc)
                self.notifier.toast("Error: Failed to pause playback", style=ToastStyle.FAILURE)
            else:
                logger.info("pause: ignoring %s", exc)
        return new_state

    def stop(self, state: PlaybackState) -> PlaybackState:
        new_state = self._commit(state.stopped())
        try:
            self.bridge.stop(state.stream_id)
        except BridgeError as exc:
            if is_suppressed("stop", exc):
                logger.debug("stop: %s", exc)
            else:
                logger.warning("stop(%s): %s", state.stream_id, exc)
                self.notifier.toast("Error: Failed to stop playback", style=ToastStyle.FAILURE)
        return new_state

    def toggle(self, state: PlaybackState) -> PlaybackState:
        was_playing = state.is_playing
        new_state = self.pause(state) if was_playing else self.play(state)
        if state.stream_id and self.notifier.user_initiated:
            self.notifier.toast("Playback paused" if was_playing else "Playback resumed")
        return new_state
