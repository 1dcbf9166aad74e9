from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass, field


WORDS_PER_MINUTE = 200


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def word_count(text: str) -> int:
    return len(text.split())


def reading_time(content: str) -> int:
    """Minutes to read ``content`` at 200 words per minute, never below 1."""
    return max(1, math.ceil(word_count(content) / WORDS_PER_MINUTE))


@dataclass
class Post:
    id: str
    title: str
    content: str
    excerpt: str
    author: str
    published_at: dt.datetime
    updated_at: dt.datetime
    tags: list[str] = field(default_factory=list)
    featured: bool = False
    reading_time: int = 1
    featured_image: str | None = None
    image_alt: str | None = None


@dataclass
class NewPost:
    title: str
    content: str
    excerpt: str
    author: str
    tags: list[str] = field(default_factory=list)
    featured: bool = False
    featured_image: str | None = None
    image_alt: str | None = None

    @property
    def reading_time(self) -> int:
        return reading_time(self.content)


@dataclass
class PostPage:
    items: list[Post]
    total: int
