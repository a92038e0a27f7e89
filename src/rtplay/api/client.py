from __future__ import annotations

import logging
from typing import Any, List, Optional

import requests

from rtplay.episodes import Article, Episode, ShowStart, parse_episodes
from rtplay.errors import NetworkError

logger = logging.getLogger(__name__)

_NO_BODY = object()


class RadioTClient:
    BASE_URL = "https://radio-t.com/site-api"
    NEWS_BASE_URL = "https://news.radio-t.com/api/v1"

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        news_base_url: Optional[str] = None,
        timeout: float = 20,
    ) -> None:
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.news_base_url = (news_base_url or self.NEWS_BASE_URL).rstrip("/")
        self.timeout = timeout

        self.session = requests.Session()
        self.session.headers.update(
            {
                "User-Agent": "rtplay",
                "Accept": "application/json",
            }
        )

        self.last_status: Optional[int] = None

    def _get_json(self, url: str, **kwargs) -> Any:
        """GET ``url`` and decode its JSON body.

        Transport failures and non-2xx statuses raise ``NetworkError``. A body
        that isn't JSON returns the ``_NO_BODY`` sentinel so callers can decide
        how forgiving to be.
        """
        logger.debug("GET %s %s", url, kwargs.get("params") or "")
        try:
            r = self.session.request("GET", url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise NetworkError(f"GET {url} failed: {exc}") from exc
        self.last_status = r.status_code
        try:
            r.raise_for_status()
        except requests.HTTPError as exc:
            raise NetworkError(f"GET {url} returned {r.status_code}") from exc
        try:
            return r.json()
        except ValueError:
            logger.warning("GET %s: response is not JSON", url)
            return _NO_BODY

    def fetch_latest_episodes(self, limit: int) -> List[Episode]:
        payload = self._get_json(f"{self.base_url}/last/{int(limit)}")
        return parse_episodes(payload)

    def search_episodes(self, query: str, limit: int) -> List[Episode]:
        if not query:
            raise ValueError("search query must not be empty")
        payload = self._get_json(
            f"{self.base_url}/search",
            params={"q": query, "limit": int(limit)},
        )
        return parse_episodes(payload)

    def fetch_show_start(self) -> ShowStart:
        url = f"{self.news_base_url}/show/start"
        payload = self._get_json(url)
        start = ShowStart.from_dict(payload) if isinstance(payload, dict) else None
        if start is None:
            raise NetworkError(f"GET {url}: no start time in response")
        return start

    def fetch_active_news(self) -> Optional[Article]:
        """Only worth calling while the show is live."""
        payload = self._get_json(f"{self.news_base_url}/news/active")
        if not isinstance(payload, dict) or not payload:
            return None
        return Article.from_dict(payload)
