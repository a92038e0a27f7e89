import argparse
import logging
import time
from pathlib import Path
from typing import Optional

from platformdirs import user_cache_dir

import rtplay
from rtplay.commands import (
    CommandContext,
    browse_command,
    live_command,
    status_command,
    stop_command,
    toggle_command,
)
from rtplay.config import APP_NAME, load_settings
from rtplay.notify import ConsoleNotifier, LaunchType

COMMANDS = {
    "toggle": toggle_command,
    "stop": stop_command,
    "live": live_command,
    "status": status_command,
    "browse": browse_command,
}


def setup_logging(debug: bool) -> Optional[Path]:
    """Debug runs log to a per-launch file; otherwise warnings go to stderr."""
    if not debug:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
        return None

    log_dir = Path(user_cache_dir(APP_NAME))
    log_dir.mkdir(parents=True, exist_ok=True)
    ts = time.strftime("%Y%m%d-%H%M%S", time.localtime())
    logging.basicConfig(
        level=logging.DEBUG,
        filename=str(log_dir / f"rtplay-{ts}.log"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("urllib3").setLevel(logging.INFO)
    return log_dir


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="rtplay")
    parser.add_argument("--debug", action="store_true")
    parser.add_argument("--version", action="store_true")
    parser.add_argument(
        "--background",
        action="store_true",
        help="run as a background launch: routine play/pause/stop messages are not shown",
    )
    parser.add_argument("command", nargs="?", choices=sorted(COMMANDS), default="browse")
    args = parser.parse_args(argv)

    if args.version:
        print(f"rtplay {rtplay.__version__} ({rtplay.__file__})")
        return 0

    log_dir = setup_logging(args.debug)

    launch_type = LaunchType.BACKGROUND if args.background else LaunchType.USER_INITIATED
    ctx = CommandContext.create(
        load_settings(),
        notifier=ConsoleNotifier(launch_type=launch_type),
        log_dir=log_dir,
    )
    return COMMANDS[args.command](ctx)
