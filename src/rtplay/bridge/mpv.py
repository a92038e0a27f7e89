from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import List, Optional

from platformdirs import user_runtime_dir

from rtplay.config import APP_NAME
from rtplay.errors import BridgeCommandFailed, BridgeUnavailable, NotFound
from rtplay.player import build_player_command, mpv_ipc_request, run_player, wait_for_socket

logger = logging.getLogger(__name__)


class MpvBridge:
    """Plays streams in detached mpv processes.

    Each stream gets its own IPC socket named after its stream id, so a later
    invocation of the CLI can find the player again without any in-process
    state.
    """

    def __init__(self, *, runtime_dir: Optional[Path] = None, log_dir: Optional[Path] = None) -> None:
        self.runtime_dir = Path(runtime_dir or user_runtime_dir(APP_NAME))
        self.log_dir = log_dir

    def _socket_path(self, stream_id: str) -> Path:
        return self.runtime_dir / f"{stream_id}.sock"

    def _sockets(self) -> List[Path]:
        if not self.runtime_dir.exists():
            return []
        return sorted(self.runtime_dir.glob("rt-*.sock"))

    def _command(self, path: Path, args: list, *, reply_required: bool = True) -> None:
        try:
            resp = mpv_ipc_request(path, {"command": args})
        except (OSError, ValueError) as exc:
            raise BridgeCommandFailed(f"mpv {args[0]}: {exc}") from exc
        if resp is None:
            path.unlink(missing_ok=True)
            raise NotFound(f"no player listening on {path.name}")
        if not resp:
            # mpv may exit on "quit" before it gets to answer.
            if reply_required:
                raise BridgeCommandFailed(f"mpv {args[0]}: no reply")
            return
        err = resp.get("error", "success")
        if err != "success":
            raise BridgeCommandFailed(f"mpv {args[0]}: {err}")

    def _quit(self, path: Path) -> bool:
        try:
            self._command(path, ["quit"], reply_required=False)
        except NotFound:
            return False
        path.unlink(missing_ok=True)
        return True

    def start_stream(self, url: str, label: str) -> Optional[str]:
        # Leftover players from earlier invocations must not keep playing.
        for path in self._sockets():
            self._quit(path)

        self.runtime_dir.mkdir(parents=True, exist_ok=True)
        stream_id = f"rt-{uuid.uuid4().hex[:12]}"
        ipc = self._socket_path(stream_id)
        log_path = self.log_dir / f"mpv-{stream_id}.log" if self.log_dir else None

        cmd = build_player_command(url, ipc_path=ipc, title=label, log_path=log_path)
        if not cmd:
            raise BridgeUnavailable("No supported player found (install mpv)")
        try:
            run_player(cmd)
        except RuntimeError as exc:
            raise BridgeCommandFailed(str(exc)) from exc
        if not wait_for_socket(ipc):
            logger.warning("mpv started but never opened %s", ipc)
            return None
        return stream_id

    def play(self, stream_id: str) -> None:
        self._command(self._socket_path(stream_id), ["set_property", "pause", False])

    def pause(self) -> None:
        paused = 0
        for path in self._sockets():
            try:
                self._command(path, ["set_property", "pause", True])
                paused += 1
            except NotFound:
                continue
        if not paused:
            raise BridgeCommandFailed("no player is running")

    def stop(self, stream_id: Optional[str]) -> None:
        found = True
        if stream_id:
            found = self._quit(self._socket_path(stream_id))
        for path in self._sockets():
            self._quit(path)
        if not found:
            raise NotFound(f"stream {stream_id} is gone")
