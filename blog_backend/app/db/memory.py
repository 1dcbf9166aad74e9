from __future__ import annotations

import asyncio
import datetime as dt
from dataclasses import replace
from typing import Callable, Dict

from ..services.posts import NewPost, Post, PostPage, utc_now
from ..services.query import PostQuery
from ..services.updates import PostChanges
from .base import PostStore


class MemoryPostStore(PostStore):
    """Process-local store used for tests and ``memory://`` URLs."""

    def __init__(self, clock: Callable[[], dt.datetime] = utc_now) -> None:
        super().__init__(clock)
        # dicts keep insertion order, which is the tie-break for equal timestamps
        self._posts: Dict[str, Post] = {}
        self._seq = 0
        self._lock = asyncio.Lock()

    async def insert(self, fields: NewPost) -> Post:
        async with self._lock:
            self._seq += 1
            now = self.clock()
            post = Post(
                id=str(self._seq),
                title=fields.title,
                content=fields.content,
                excerpt=fields.excerpt,
                author=fields.author,
                published_at=now,
                updated_at=now,
                tags=list(fields.tags),
                featured=fields.featured,
                reading_time=fields.reading_time,
                featured_image=fields.featured_image,
                image_alt=fields.image_alt,
            )
            self._posts[post.id] = post
            return replace(post, tags=list(post.tags))

    async def get_by_id(self, post_id: str) -> Post | None:
        async with self._lock:
            post = self._posts.get(post_id)
            return None if post is None else replace(post, tags=list(post.tags))

    async def delete_by_id(self, post_id: str) -> str | None:
        async with self._lock:
            post = self._posts.pop(post_id, None)
            return None if post is None else post.id

    async def list_all(self) -> list[Post]:
        async with self._lock:
            return [replace(p, tags=list(p.tags)) for p in self._posts.values()]

    async def find(self, query: PostQuery) -> PostPage:
        async with self._lock:
            items, total = query.select(self._posts.values())
            return PostPage(items=[replace(p, tags=list(p.tags)) for p in items], total=total)

    async def update(self, post_id: str, changes: PostChanges) -> Post | None:
        async with self._lock:
            post = self._posts.get(post_id)
            if post is None:
                return None
            updated = changes.apply_to(post)
            self._posts[post_id] = updated
            return replace(updated, tags=list(updated.tags))
