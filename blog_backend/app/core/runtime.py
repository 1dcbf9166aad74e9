from __future__ import annotations

import datetime as dt
import logging
from typing import Awaitable, Callable

from ..db.base import PostStore
from ..db.memory import MemoryPostStore
from ..db.sql import SqlPostStore
from ..services.images import ImageHost
from ..services.posts import utc_now
from ..services.samples import sample_posts
from .availability import AvailabilityGate
from .config import Settings
from .security import AdminGate


logger = logging.getLogger(__name__)


def build_store(settings: Settings, clock: Callable[[], dt.datetime] = utc_now) -> PostStore | None:
    if not settings.database_configured:
        return None
    url = settings.database_url or ""
    if url.startswith("memory://"):
        return MemoryPostStore(clock=clock)
    return SqlPostStore(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        query_timeout=settings.db_query_timeout,
        clock=clock,
    )


def _initializer(store: PostStore, settings: Settings) -> Callable[[], Awaitable[bool]]:
    async def initialize() -> bool:
        seed = sample_posts() if settings.seed_sample_posts else None
        return await store.initialize(seed)

    return initialize


class Runtime:
    """Process-scoped state handed to request handlers through ``app.state``."""

    def __init__(
        self,
        settings: Settings,
        store: PostStore | None,
        availability: AvailabilityGate,
        admin: AdminGate,
        images: ImageHost,
        clock: Callable[[], dt.datetime] = utc_now,
    ) -> None:
        self.settings = settings
        self.store = store
        self.availability = availability
        self.admin = admin
        self.images = images
        self.clock = clock

    @classmethod
    def from_settings(cls, settings: Settings, clock: Callable[[], dt.datetime] = utc_now) -> "Runtime":
        store = build_store(settings, clock)
        availability = AvailabilityGate(
            _initializer(store, settings) if store is not None else None,
            configured=settings.database_configured,
            timeout=settings.db_connect_timeout,
        )
        admin = AdminGate(settings.admin_password, settings.secret_key, settings.admin_token_ttl_seconds)
        images = ImageHost(
            settings.upload_dir,
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            folder=settings.cloudinary_folder,
        )
        return cls(settings, store, availability, admin, images, clock)

    async def close(self) -> None:
        if self.store is not None:
            try:
                await self.store.close()
            except Exception:
                logger.exception("Error while closing the post store")
        logger.info("Runtime closed")
