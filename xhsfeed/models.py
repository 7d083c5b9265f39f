from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Profile:
    user_id: str = ""
    nickname: str = ""
    desc: str = ""
    avatar: str = ""


@dataclass(frozen=True)
class PostSummary:
    note_id: str = ""
    author: str = ""
    title: str = ""
    cover: str = ""


@dataclass(frozen=True)
class PostDetail:
    title: str = ""
    desc: str = ""
    images: tuple[str, ...] = ()
    pub_date: Optional[datetime] = None


@dataclass(frozen=True)
class NoteContent:
    """What the cache keeps per note link."""
    title: str = ""
    description: str = ""
    pub_date: Optional[datetime] = None


@dataclass
class FeedItem:
    title: str = ""
    link: str = ""
    description: str = ""
    author: str = ""
    guid: str = ""
    pub_date: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "link": self.link,
            "description": self.description,
            "author": self.author,
            "guid": self.guid,
            "pubDate": self.pub_date.isoformat() if self.pub_date else None,
        }


@dataclass
class Feed:
    title: str = ""
    description: str = ""
    image: str = ""
    link: str = ""
    items: list[FeedItem] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "image": self.image,
            "link": self.link,
            "item": [item.to_dict() for item in self.items],
        }
