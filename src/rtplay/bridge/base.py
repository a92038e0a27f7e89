from __future__ import annotations

from typing import Optional, Protocol


def stream_label(url: str) -> str:
    return f"Radio-T: {url}"


class MediaBridge(Protocol):
    """What the playback controller needs from a media player.

    ``start_stream`` returns an opaque stream id, or ``None`` when the player
    accepted the command but produced no track. The other operations raise
    ``BridgeUnavailable``, ``BridgeCommandFailed`` or ``NotFound``.
    """

    def start_stream(self, url: str, label: str) -> Optional[str]: ...

    def play(self, stream_id: str) -> None: ...

    def pause(self) -> None: ...

    def stop(self, stream_id: Optional[str]) -> None: ...
