from __future__ import annotations

import json
import logging
import os
import re
import shutil
import socket
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass
class PlayerCommand:
    argv: List[str]


def build_player_command(
    url: str,
    *,
    ipc_path: Path,
    title: str = "",
    log_path: Optional[Path] = None,
) -> Optional[PlayerCommand]:
    """Return an mpv command that plays ``url`` and listens on ``ipc_path``.

    Only mpv is supported: pause/resume/stop go through its JSON IPC socket.
    """

    exe = shutil.which("mpv")
    if not exe:
        return None

    argv = [
        exe,
        "--no-terminal",
        "--no-video",
        "--idle=no",
        f"--input-ipc-server={ipc_path}",
    ]
    if title:
        argv.append(f"--force-media-title={title}")
    if log_path is not None:
        argv += ["--msg-level=all=info", f"--log-file={log_path}"]
    else:
        argv.append("--msg-level=all=fatal")
    argv.append(url)
    return PlayerCommand(argv=argv)


def _player_env() -> dict:
    env = os.environ.copy()

    # Some PipeWire setups expose the Pulse socket somewhere other than the
    # default path; ask pactl when PULSE_SERVER isn't set.
    if not env.get("PULSE_SERVER") and shutil.which("pactl"):
        try:
            out = subprocess.check_output(["pactl", "info"], text=True, stderr=subprocess.DEVNULL)
            m = re.search(r"^Server String:\s*(.+)$", out, flags=re.MULTILINE)
            if m:
                env["PULSE_SERVER"] = m.group(1).strip()
        except (OSError, subprocess.CalledProcessError):
            pass
    return env


def run_player(cmd: PlayerCommand, *, settle_seconds: float = 0.6) -> subprocess.Popen:
    """Launch the player detached from this process.

    The player has to outlive the command that started it, so it gets its
    own session and no pipes back to us.
    """
    proc = subprocess.Popen(
        cmd.argv,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.PIPE,
        text=True,
        env=_player_env(),
        start_new_session=True,
    )

    # If the player dies immediately, surface the reason.
    time.sleep(settle_seconds)
    rc = proc.poll()
    if rc is not None and rc != 0:
        _, err = proc.communicate(timeout=2)
        msg = (err or "").strip()
        msg = msg[-1200:] if len(msg) > 1200 else msg
        raise RuntimeError(f"Player exited immediately (code {rc}). {msg}")

    logger.debug("player started: pid=%s argv=%s", proc.pid, cmd.argv)
    return proc


def wait_for_socket(path: Path, *, timeout: float = 3.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if path.exists():
            return True
        time.sleep(0.05)
    return path.exists()


def _reply_from(buf: bytes) -> Optional[dict]:
    # mpv may interleave event lines; the reply is the first line without "event".
    for line in buf.split(b"\n")[:-1]:
        line = line.strip()
        if not line:
            continue
        data = json.loads(line.decode("utf-8", errors="replace"))
        if isinstance(data, dict) and "event" not in data:
            return data
    return None


def mpv_ipc_request(path: Path, payload: dict, *, timeout: float = 0.5) -> Optional[dict]:
    """Send one JSON command to mpv and return its reply.

    Returns ``None`` when nobody is listening on ``path``.
    """
    if not path.exists():
        return None

    req = (json.dumps(payload) + "\n").encode("utf-8", errors="replace")
    s = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        s.settimeout(timeout)
        try:
            s.connect(str(path))
        except OSError:
            return None
        s.sendall(req)
        buf = b""
        while len(buf) < 1024 * 1024:
            reply = _reply_from(buf)
            if reply is not None:
                return reply
            try:
                chunk = s.recv(4096)
            except socket.timeout:
                break
            if not chunk:
                break
            buf += chunk
    finally:
        s.close()
    return {}
