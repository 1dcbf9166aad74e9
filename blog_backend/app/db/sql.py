from __future__ import annotations

import asyncio
import datetime as dt
import logging
from typing import Any, Awaitable, Callable, TypeVar

from sqlalchemy import ColumnElement, delete, func, or_, select, text, update
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from ..services.posts import NewPost, Post, PostPage, utc_now
from ..services.query import PostQuery
from ..services.updates import PostChanges
from .base import PostStore, StoreError, StoreTimeoutError
from .models import TAG_SEP, Base, PostRow, tag_index


logger = logging.getLogger(__name__)

T = TypeVar("T")
# blog_posts.id is a 32-bit INTEGER on PostgreSQL
MAX_PK = 2**31 - 1

_DRIVERS = {
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}


def normalize_database_url(url: str) -> str:
    """Pick the async driver for bare ``postgres://`` / ``sqlite://`` URLs."""
    scheme, sep, rest = url.partition("://")
    if sep and scheme in _DRIVERS:
        return f"{_DRIVERS[scheme]}://{rest}"
    return url


def _pk(post_id: str) -> int | None:
    try:
        pk = int(str(post_id).strip())
    except (TypeError, ValueError):
        return None
    # ids outside the int4 column range cannot name a row
    return pk if 1 <= pk <= MAX_PK else None


def filter_clauses(query: PostQuery) -> list[ColumnElement[bool]]:
    """One bound predicate per criterion present in ``query``; combined with AND."""
    clauses: list[ColumnElement[bool]] = []
    if query.search is not None:
        clauses.append(
            or_(
                PostRow.title.icontains(query.search, autoescape=True),
                PostRow.content.icontains(query.search, autoescape=True),
                PostRow.excerpt.icontains(query.search, autoescape=True),
            )
        )
    if query.tag is not None:
        needle = TAG_SEP + query.tag.lower() + TAG_SEP
        clauses.append(PostRow.tag_index.contains(needle, autoescape=True))
    if query.featured is not None:
        clauses.append(PostRow.featured == query.featured)
    return clauses


class SqlPostStore(PostStore):
    """Relational backend on an async SQLAlchemy engine with a bounded pool."""

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 5,
        max_overflow: int = 5,
        pool_timeout: float = 10.0,
        query_timeout: float = 15.0,
        clock: Callable[[], dt.datetime] = utc_now,
    ) -> None:
        super().__init__(clock)
        self.url = normalize_database_url(url)
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.pool_timeout = pool_timeout
        self.query_timeout = query_timeout
        self._engine: AsyncEngine | None = None
        self._sessions: async_sessionmaker[AsyncSession] | None = None

    def _engine_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"pool_pre_ping": True}
        url = make_url(self.url)
        if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
            # in-memory SQLite runs on a single static connection
            return kwargs
        kwargs.update(pool_size=self.pool_size, max_overflow=self.max_overflow, pool_timeout=self.pool_timeout)
        return kwargs

    def _get_engine(self) -> AsyncEngine:
        if self._engine is None:
            try:
                self._engine = create_async_engine(self.url, **self._engine_kwargs())
            except (sa_exc.ArgumentError, ImportError) as exc:
                raise StoreError(f"cannot create engine: {exc}") from exc
            self._sessions = async_sessionmaker(self._engine, expire_on_commit=False)
        return self._engine

    def _get_sessions(self) -> async_sessionmaker[AsyncSession]:
        self._get_engine()
        if self._sessions is None:
            raise StoreError("session factory is not available")
        return self._sessions

    async def _with_deadline(self, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.query_timeout)
        except (asyncio.TimeoutError, sa_exc.TimeoutError) as exc:
            raise StoreTimeoutError("database operation timed out") from exc
        except (sa_exc.SQLAlchemyError, OSError) as exc:
            raise StoreError(str(exc)) from exc

    async def _run(self, op: Callable[[AsyncSession], Awaitable[T]]) -> T:
        sessions = self._get_sessions()

        async def scoped() -> T:
            # the connection goes back to the pool on every exit path
            async with sessions() as session:
                async with session.begin():
                    return await op(session)

        return await self._with_deadline(scoped())

    async def initialize(self, seed: list[NewPost] | None = None) -> bool:
        engine = self._get_engine()

        async def create_schema() -> None:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

        await self._with_deadline(create_schema())
        logger.info("blog_posts schema ready (%s)", make_url(self.url).get_backend_name())
        return await super().initialize(seed)

    async def ping(self) -> bool:
        engine = self._get_engine()

        async def select_one() -> bool:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True

        return await self._with_deadline(select_one())

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._sessions = None

    async def insert(self, fields: NewPost) -> Post:
        async def op(session: AsyncSession) -> Post:
            now = self.clock()
            row = PostRow(
                title=fields.title,
                content=fields.content,
                excerpt=fields.excerpt,
                author=fields.author,
                published_at=now,
                updated_at=now,
                tags=list(fields.tags),
                tag_index=tag_index(fields.tags),
                featured=fields.featured,
                reading_time=fields.reading_time,
                featured_image=fields.featured_image,
                image_alt=fields.image_alt,
            )
            session.add(row)
            await session.flush()
            return row.to_post()

        return await self._run(op)

    async def get_by_id(self, post_id: str) -> Post | None:
        pk = _pk(post_id)
        if pk is None:
            return None

        async def op(session: AsyncSession) -> Post | None:
            row = await session.get(PostRow, pk)
            return None if row is None else row.to_post()

        return await self._run(op)

    async def delete_by_id(self, post_id: str) -> str | None:
        pk = _pk(post_id)
        if pk is None:
            return None

        async def op(session: AsyncSession) -> str | None:
            result = await session.execute(delete(PostRow).where(PostRow.id == pk))
            return str(pk) if result.rowcount else None

        return await self._run(op)

    async def list_all(self) -> list[Post]:
        async def op(session: AsyncSession) -> list[Post]:
            rows = await session.scalars(select(PostRow).order_by(PostRow.id))
            return [row.to_post() for row in rows]

        return await self._run(op)

    async def find(self, query: PostQuery) -> PostPage:
        clauses = filter_clauses(query)

        async def op(session: AsyncSession) -> PostPage:
            total = await session.scalar(select(func.count()).select_from(PostRow).where(*clauses))
            stmt = (
                select(PostRow)
                .where(*clauses)
                .order_by(PostRow.published_at.desc(), PostRow.id.asc())
                .offset(query.offset)
                .limit(query.limit)
            )
            rows = await session.scalars(stmt)
            return PostPage(items=[row.to_post() for row in rows], total=int(total or 0))

        return await self._run(op)

    async def update(self, post_id: str, changes: PostChanges) -> Post | None:
        pk = _pk(post_id)
        if pk is None:
            return None

        async def op(session: AsyncSession) -> Post | None:
            row = await session.get(PostRow, pk)
            if row is None:
                return None
            values = dict(changes.values)
            if "tags" in values:
                values["tag_index"] = tag_index(values["tags"])
            values["updated_at"] = changes.stamp_for(row.to_post())
            await session.execute(
                update(PostRow).where(PostRow.id == pk).values(**values).execution_options(synchronize_session=False)
            )
            await session.refresh(row)
            return row.to_post()

        return await self._run(op)
