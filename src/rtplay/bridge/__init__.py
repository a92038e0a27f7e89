from __future__ import annotations

import sys

from rtplay.bridge.base import MediaBridge, stream_label


def make_bridge(kind: str = "auto") -> MediaBridge:
    k = (kind or "auto").strip().lower()
    if k == "auto":
        k = "music" if sys.platform == "darwin" else "mpv"
    if k == "music":
        from rtplay.bridge.music import MusicAppBridge

        return MusicAppBridge()
    if k == "mpv":
        from rtplay.bridge.mpv import MpvBridge

        return MpvBridge()
    raise ValueError(f"unknown bridge: {kind!r}")


__all__ = ["MediaBridge", "make_bridge", "stream_label"]
