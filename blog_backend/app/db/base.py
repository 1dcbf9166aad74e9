from __future__ import annotations

import abc
import datetime as dt
from typing import Callable

from ..services.posts import NewPost, Post, PostPage, utc_now
from ..services.query import PostQuery
from ..services.updates import PostChanges


class StoreError(Exception):
    """Raised by a backend when the underlying storage fails."""


class StoreTimeoutError(StoreError):
    """Connection acquisition or a query ran past its deadline."""


class PostStore(abc.ABC):
    """Storage interface shared by the in-memory and SQL backends."""

    def __init__(self, clock: Callable[[], dt.datetime] = utc_now) -> None:
        self.clock = clock

    async def initialize(self, seed: list[NewPost] | None = None) -> bool:
        """Prepare the store for use; ``seed`` is inserted when the store is empty."""
        if seed and not await self.list_all():
            for item in seed:
                await self.insert(item)
        return True

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None

    @abc.abstractmethod
    async def insert(self, fields: NewPost) -> Post: ...

    @abc.abstractmethod
    async def get_by_id(self, post_id: str) -> Post | None: ...

    @abc.abstractmethod
    async def delete_by_id(self, post_id: str) -> str | None: ...

    @abc.abstractmethod
    async def list_all(self) -> list[Post]: ...

    @abc.abstractmethod
    async def find(self, query: PostQuery) -> PostPage: ...

    @abc.abstractmethod
    async def update(self, post_id: str, changes: PostChanges) -> Post | None: ...
