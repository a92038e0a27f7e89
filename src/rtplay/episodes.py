from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _int(value: Any) -> int:
    try:
        return int(value)
    except Exception:
        return 0


@dataclass(frozen=True)
class TimeLabel:
    topic: str
    time: str = ""
    duration: int = 0

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "TimeLabel":
        return cls(
            topic=_str(raw.get("topic")),
            time=_str(raw.get("time")),
            duration=_int(raw.get("duration")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"topic": self.topic, "time": self.time, "duration": self.duration}


@dataclass(frozen=True)
class Episode:
    url: str
    file_name: str
    title: str
    date: str = ""
    categories: List[str] = field(default_factory=list)
    image: str = ""
    body: str = ""
    show_notes: str = ""
    audio_url: str = ""
    time_labels: List[TimeLabel] = field(default_factory=list)
    show_num: int = 0

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Episode":
        labels: List[TimeLabel] = []
        for item in raw.get("time_labels") or []:
            if isinstance(item, dict):
                labels.append(TimeLabel.from_dict(item))
        categories = raw.get("categories") or []
        if not isinstance(categories, list):
            categories = []
        return cls(
            url=_str(raw.get("url")),
            file_name=_str(raw.get("file_name")),
            title=_str(raw.get("title")),
            date=_str(raw.get("date")),
            categories=[_str(c) for c in categories],
            image=_str(raw.get("image")),
            body=_str(raw.get("body")),
            show_notes=_str(raw.get("show_notes")),
            audio_url=_str(raw.get("audio_url")),
            time_labels=labels,
            show_num=_int(raw.get("show_num")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "file_name": self.file_name,
            "title": self.title,
            "date": self.date,
            "categories": list(self.categories),
            "image": self.image,
            "body": self.body,
            "show_notes": self.show_notes,
            "audio_url": self.audio_url,
            "time_labels": [t.to_dict() for t in self.time_labels],
            "show_num": self.show_num,
        }


def parse_episodes(payload: Any) -> List[Episode]:
    """Best-effort: anything that isn't a list of objects is dropped."""
    if not isinstance(payload, list):
        return []
    out: List[Episode] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        try:
            out.append(Episode.from_dict(item))
        except Exception:
            continue
    return out


@dataclass(frozen=True)
class Article:
    title: str
    content: str = ""
    snippet: str = ""
    pic: str = ""
    link: str = ""
    author: str = ""
    ts: str = ""
    ats: str = ""
    active: bool = False
    activets: str = ""
    geek: bool = False
    votes: int = 0
    deleted: bool = False
    archived: bool = False
    slug: str = ""
    feed: str = ""
    domain: str = ""
    comments: int = 0
    likes: int = 0
    show_num: int = 0

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Article":
        return cls(
            title=_str(raw.get("title")),
            content=_str(raw.get("content")),
            snippet=_str(raw.get("snippet")),
            pic=_str(raw.get("pic")),
            link=_str(raw.get("link")),
            author=_str(raw.get("author")),
            ts=_str(raw.get("ts")),
            ats=_str(raw.get("ats")),
            active=bool(raw.get("active")),
            activets=_str(raw.get("activets")),
            geek=bool(raw.get("geek")),
            votes=_int(raw.get("votes")),
            deleted=bool(raw.get("del")),
            archived=bool(raw.get("archived")),
            slug=_str(raw.get("slug")),
            feed=_str(raw.get("feed")),
            domain=_str(raw.get("domain")),
            comments=_int(raw.get("comments")),
            likes=_int(raw.get("likes")),
            show_num=_int(raw.get("show_num")),
        )


@dataclass(frozen=True)
class ShowStart:
    started: str

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> Optional["ShowStart"]:
        started = raw.get("started")
        if not isinstance(started, str) or not started.strip():
            return None
        return cls(started=started.strip())
