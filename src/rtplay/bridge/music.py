from __future__ import annotations

import logging
import shutil
import subprocess
from typing import Optional

from rtplay.errors import BridgeCommandFailed, BridgeUnavailable, NotFound

logger = logging.getLogger(__name__)

# AppleScript error number for "Can't get <object>".
_ERR_NO_SUCH_OBJECT = -1728

_START_SCRIPT = """try
  tell application "Music"
    launch
    tell application "System Events"
      repeat while "Music" is not in (name of every process whose background only is false)
        delay 0.5
      end repeat
    end tell

    try
      set knownIDs to get id of URL tracks
      open location "{url}"
      repeat with newID in (get id of URL tracks)
        if newID is not in knownIDs then
          set name of (track id newID) to "{label}"
          return contents of newID
        end if
      end repeat
    on error
      open location "{url}"
      delay 0.5
      try
        set name of URL track 1 to "{label}"
        return id of URL track 1
      on error
        return ""
      end try
    end try
  end tell
on error
  return "err:noapp"
end try
"""

_PLAY_SCRIPT = """tell application "Music"
  try
    play (first track whose id is {stream_id})
    return "ok"
  on error errMsg number errNum
    if errNum is {not_found} then return "err:notfound"
    return "err:" & errMsg
  end try
end tell
"""

_PAUSE_SCRIPT = """tell application "Music"
  try
    pause
    return "ok"
  on error errMsg
    return "err:" & errMsg
  end try
end tell
"""

_STOP_SCRIPT = """tell application "Music"
  set outcome to "ok"
  try
    delete (first track whose id is {stream_id})
  on error errMsg number errNum
    if errNum is {not_found} then
      set outcome to "err:notfound"
    else
      set outcome to "err:" & errMsg
    end if
  end try
  stop
  return outcome
end tell
"""


_HARD_STOP_SCRIPT = """tell application "Music"
  try
    stop
    return "ok"
  on error errMsg
    return "err:" & errMsg
  end try
end tell
"""


def _quote(value: str) -> str:
    return (value or "").replace("\\", "\\\\").replace('"', '\\"')


def _id_literal(stream_id: Optional[str]) -> str:
    s = (stream_id or "").strip()
    if s.isdigit():
        return s
    return f'"{_quote(s)}"'


def check_result(result: str) -> str:
    """Turn the ``err:`` convention used by the scripts into exceptions."""
    if not result.startswith("err:"):
        return result
    reason = result[4:]
    if reason == "noapp":
        raise BridgeUnavailable("Music application not found")
    if reason == "notfound":
        raise NotFound("track no longer exists")
    raise BridgeCommandFailed(reason or "Music reported an error")


class MusicAppBridge:
    """Drives the macOS Music app through ``osascript``."""

    def __init__(self, *, osascript: str = "osascript") -> None:
        self.osascript = osascript

    def _run(self, script: str) -> str:
        exe = shutil.which(self.osascript)
        if not exe:
            raise BridgeUnavailable(f"{self.osascript} not found (the Music bridge needs macOS)")
        logger.debug("osascript:\n%s", script)
        proc = subprocess.run(
            [exe, "-"],
            input=script,
            capture_output=True,
            text=True,
        )
        if proc.returncode != 0:
            msg = (proc.stderr or proc.stdout or "").strip()
            raise BridgeCommandFailed(f"AppleScript exited with code {proc.returncode}: {msg}")
        out = (proc.stdout or "").strip()
        logger.debug("osascript result: %r", out)
        return out

    def start_stream(self, url: str, label: str) -> Optional[str]:
        result = check_result(self._run(_START_SCRIPT.format(url=_quote(url), label=_quote(label))))
        return result or None

    def play(self, stream_id: str) -> None:
        check_result(
            self._run(_PLAY_SCRIPT.format(stream_id=_id_literal(stream_id), not_found=_ERR_NO_SUCH_OBJECT))
        )

    def pause(self) -> None:
        check_result(self._run(_PAUSE_SCRIPT))

    def stop(self, stream_id: Optional[str]) -> None:
        if not stream_id:
            check_result(self._run(_HARD_STOP_SCRIPT))
            return
        check_result(
            self._run(_STOP_SCRIPT.format(stream_id=_id_literal(stream_id), not_found=_ERR_NO_SUCH_OBJECT))
        )
