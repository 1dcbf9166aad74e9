"""Process-lifetime verdict on whether the post store can be used.

The first data request runs a single probe; whatever it decides is final
until the process restarts. Later requests never re-probe, so a store that
comes back after an outage needs a restart to be picked up again.
"""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable

from .errors import ServiceUnavailableError


logger = logging.getLogger(__name__)


class AvailabilityState(str, Enum):
    UNPROBED = "unprobed"
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


NOT_CONFIGURED = ("DATABASE_NOT_CONFIGURED", "Database configuration is missing. Please contact the administrator.")
INIT_FAILED = ("DATABASE_INITIALIZATION_FAILED", "Database is currently unavailable. Please try again later.")
CONNECTION_FAILED = ("DATABASE_CONNECTION_FAILED", "Database service is temporarily unavailable. Please try again later.")
UNAVAILABLE = ("SERVICE_UNAVAILABLE", "Database is currently unavailable. Please try again later.")


class AvailabilityGate:
    def __init__(
        self,
        probe: Callable[[], Awaitable[bool]] | None,
        configured: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self._probe = probe
        self.configured = configured and probe is not None
        self.timeout = timeout
        self.state = AvailabilityState.UNPROBED
        self.probe_calls = 0
        self._reason: tuple[str, str] | None = None
        self._lock = asyncio.Lock()

    @property
    def available(self) -> bool:
        return self.state is AvailabilityState.AVAILABLE

    async def _decide(self) -> None:
        if not self.configured or self._probe is None:
            logger.warning("DATABASE_URL not configured; data routes disabled")
            self._settle(AvailabilityState.UNAVAILABLE, NOT_CONFIGURED)
            return
        self.probe_calls += 1
        logger.info("Initializing database...")
        try:
            ok = await asyncio.wait_for(self._probe(), timeout=self.timeout)
        except Exception:
            logger.exception("Database initialization error")
            self._settle(AvailabilityState.UNAVAILABLE, CONNECTION_FAILED)
            return
        if ok:
            logger.info("Database initialized successfully")
            self._settle(AvailabilityState.AVAILABLE, None)
        else:
            logger.error("Database initialization failed")
            self._settle(AvailabilityState.UNAVAILABLE, INIT_FAILED)

    def _settle(self, state: AvailabilityState, reason: tuple[str, str] | None) -> None:
        self.state = state
        self._reason = reason

    async def resolve(self) -> tuple[AvailabilityState, bool]:
        """Return the verdict and whether this call was the one that decided it."""
        if self.state is not AvailabilityState.UNPROBED:
            return self.state, False
        async with self._lock:
            if self.state is not AvailabilityState.UNPROBED:
                return self.state, False
            await self._decide()
            return self.state, True

    async def ensure(self) -> None:
        state, decided_here = await self.resolve()
        if state is AvailabilityState.AVAILABLE:
            return
        code, message = (self._reason if decided_here and self._reason else UNAVAILABLE)
        raise ServiceUnavailableError(message, code=code)
