from __future__ import annotations

import datetime as dt
from typing import Iterable, Optional

from sqlalchemy import JSON, Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..services.posts import Post


# unit separator; cannot appear in a stripped tag typed by a person
TAG_SEP = "\x1f"


def tag_index(tags: Iterable[str]) -> str:
    """Lower-cased tags wrapped in separators, e.g. ``\\x1fwelcome\\x1ftips\\x1f``."""
    lowered = [t.lower() for t in tags]
    if not lowered:
        return ""
    return TAG_SEP + TAG_SEP.join(lowered) + TAG_SEP


def _aware(value: dt.datetime) -> dt.datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    return value if value.tzinfo is not None else value.replace(tzinfo=dt.timezone.utc)


class Base(DeclarativeBase):
    pass


class PostRow(Base):
    __tablename__ = "blog_posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    excerpt: Mapped[str] = mapped_column(String(500), nullable=False)
    author: Mapped[str] = mapped_column(String(100), nullable=False)
    published_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    tag_index: Mapped[str] = mapped_column(Text, nullable=False, default="")
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reading_time: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    featured_image: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_alt: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        Index("idx_blog_posts_published_at", "published_at"),
        Index("idx_blog_posts_featured", "featured"),
    )

    def to_post(self) -> Post:
        return Post(
            id=str(self.id),
            title=self.title,
            content=self.content,
            excerpt=self.excerpt,
            author=self.author,
            published_at=_aware(self.published_at),
            updated_at=_aware(self.updated_at),
            tags=list(self.tags or []),
            featured=bool(self.featured),
            reading_time=self.reading_time,
            featured_image=self.featured_image,
            image_alt=self.image_alt,
        )
