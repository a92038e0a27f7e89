import json
import logging
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "rtplay"


@dataclass
class Settings:
    episodes_base_url: str = "https://radio-t.com/site-api"
    news_base_url: str = "https://news.radio-t.com/api/v1"
    live_stream_url: str = "https://stream.radio-t.com"

    live_window_minutes: int = 300
    next_show_hint: str = "Live: Saturday at 22:00 UTC"

    # Ask the player to resume explicitly after joining the live stream.
    play_after_join: bool = False

    search_limit: int = 9
    latest_limit: int = 9
    debounce_seconds: float = 0.3

    # "auto" picks the Music app on macOS and mpv elsewhere.
    bridge: str = "auto"

    http_timeout: float = 20.0


def config_dir() -> Path:
    cfg_dir = Path(user_config_dir(APP_NAME))
    cfg_dir.mkdir(parents=True, exist_ok=True)
    return cfg_dir


def config_path() -> Path:
    return config_dir() / "config.json"


def load_settings() -> Settings:
    path = config_path()
    if not path.exists():
        return Settings()
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        return Settings(**{k: v for k, v in raw.items() if k in Settings.__annotations__})
    except Exception as exc:
        logger.warning("ignoring unreadable config %s: %s", path, exc)
        return Settings()

