"""Criteria for listing posts.

``PostQuery`` is the normalized form of the ``GET /posts`` query string. Both
storage backends consume it: the in-memory store through :meth:`matches` and
:meth:`paginate`, the SQL store by translating each present criterion into a
bound predicate.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from .posts import Post


DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

_TRUE = {"true", "1", "yes"}
_FALSE = {"false", "0", "no"}


def coerce_positive_int(value: Any, default: int) -> int:
    """Parse ``value`` as an integer >= 1, falling back to ``default``."""
    if value is None or isinstance(value, bool):
        return default
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return parsed if parsed >= 1 else default


def coerce_optional_bool(value: Any) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    return None


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class PostQuery:
    search: str | None = None
    tag: str | None = None
    featured: bool | None = None
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @classmethod
    def from_params(
        cls,
        search: Any = None,
        tag: Any = None,
        featured: Any = None,
        page: Any = None,
        limit: Any = None,
    ) -> "PostQuery":
        # bad pagination never errors; it collapses to the defaults
        return cls(
            search=_clean_text(search),
            tag=_clean_text(tag),
            featured=coerce_optional_bool(featured),
            page=coerce_positive_int(page, DEFAULT_PAGE),
            limit=min(coerce_positive_int(limit, DEFAULT_LIMIT), MAX_LIMIT),
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def matches(self, post: Post) -> bool:
        if self.search is not None:
            needle = self.search.lower()
            if not any(needle in text.lower() for text in (post.title, post.content, post.excerpt)):
                return False
        if self.tag is not None:
            wanted = self.tag.lower()
            if not any(t.lower() == wanted for t in post.tags):
                return False
        if self.featured is not None and post.featured != self.featured:
            return False
        return True

    def paginate(self, posts: Sequence[Post]) -> list[Post]:
        return list(posts[self.offset : self.offset + self.limit])

    def select(self, posts: Iterable[Post]) -> tuple[list[Post], int]:
        """Filter, order newest first and cut one page out of ``posts``.

        ``posts`` must be in insertion order; the sort is stable so equal
        ``published_at`` values keep that order.
        """
        hits = [p for p in posts if self.matches(p)]
        hits.sort(key=lambda p: p.published_at, reverse=True)
        return self.paginate(hits), len(hits)
