"""
Tests for the Radio-T metadata client. HTTP is faked at the session level.
"""
import pytest
import requests

from rtplay.api.client import RadioTClient
from rtplay.errors import NetworkError


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self._text = text

    def json(self):
        if self._text is not None:
            raise ValueError("not json")
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


@pytest.fixture
def client():
    return RadioTClient(base_url="https://site.test/api", news_base_url="https://news.test/v1/")


def fake_session(monkeypatch, client, response):
    seen = []

    def request(method, url, **kwargs):
        seen.append((method, url, kwargs))
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(client.session, "request", request)
    return seen


def test_latest_episodes(monkeypatch, client, episode_payload):
    seen = fake_session(monkeypatch, client, FakeResponse(payload=[episode_payload]))

    episodes = client.fetch_latest_episodes(9)

    assert seen[0][0] == "GET"
    assert seen[0][1] == "https://site.test/api/last/9"
    assert seen[0][2]["timeout"] == 20
    assert len(episodes) == 1
    assert episodes[0].file_name == "rt_podcast900"
    assert [t.duration for t in episodes[0].time_labels] == [600, 300, 1500]


def test_search_passes_query_params(monkeypatch, client, episode_payload):
    seen = fake_session(monkeypatch, client, FakeResponse(payload=[episode_payload]))

    client.search_episodes("rad io", 9)

    assert seen[0][1] == "https://site.test/api/search"
    assert seen[0][2]["params"] == {"q": "rad io", "limit": 9}


def test_search_refuses_empty_query(monkeypatch, client):
    seen = fake_session(monkeypatch, client, FakeResponse(payload=[]))

    with pytest.raises(ValueError):
        client.search_episodes("", 9)
    assert seen == []


def test_malformed_episode_payload_is_partial(monkeypatch, client, episode_payload):
    fake_session(monkeypatch, client, FakeResponse(payload=[episode_payload, "junk", 42]))
    assert [e.file_name for e in client.fetch_latest_episodes(3)] == ["rt_podcast900"]

    fake_session(monkeypatch, client, FakeResponse(payload={"error": "nope"}))
    assert client.fetch_latest_episodes(3) == []

    fake_session(monkeypatch, client, FakeResponse(text="<html>"))
    assert client.fetch_latest_episodes(3) == []


def test_transport_failure_is_network_error(monkeypatch, client):
    fake_session(monkeypatch, client, requests.ConnectionError("refused"))

    with pytest.raises(NetworkError):
        client.fetch_latest_episodes(9)


def test_http_error_is_network_error(monkeypatch, client):
    fake_session(monkeypatch, client, FakeResponse(status_code=502))

    with pytest.raises(NetworkError):
        client.fetch_show_start()
    assert client.last_status == 502


def test_show_start(monkeypatch, client):
    seen = fake_session(monkeypatch, client, FakeResponse(payload={"started": "2024-03-02T20:00:00Z"}))

    start = client.fetch_show_start()

    assert seen[0][1] == "https://news.test/v1/show/start"
    assert start.started == "2024-03-02T20:00:00Z"


def test_show_start_without_timestamp(monkeypatch, client):
    fake_session(monkeypatch, client, FakeResponse(payload={}))

    with pytest.raises(NetworkError):
        client.fetch_show_start()


def test_active_news(monkeypatch, client):
    seen = fake_session(
        monkeypatch,
        client,
        FakeResponse(payload={"title": "Big news", "del": False, "active": True, "votes": "12", "geek": True}),
    )

    article = client.fetch_active_news()

    assert seen[0][1] == "https://news.test/v1/news/active"
    assert article.title == "Big news"
    assert article.active
    assert article.geek
    assert not article.deleted
    assert article.votes == 12


def test_active_news_empty(monkeypatch, client):
    fake_session(monkeypatch, client, FakeResponse(payload=None))
    assert client.fetch_active_news() is None
