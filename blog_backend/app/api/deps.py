from __future__ import annotations

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials

from ..core.errors import ServiceUnavailableError, UnauthorizedError
from ..core.runtime import Runtime
from ..core.security import bearer_scheme
from ..db.base import PostStore


def get_runtime(request: Request) -> Runtime:
    return request.app.state.runtime


async def ensure_store_available(runtime: Runtime = Depends(get_runtime)) -> None:
    await runtime.availability.ensure()


async def get_store(runtime: Runtime = Depends(get_runtime)) -> PostStore:
    # data routers run ensure_store_available first; this only guards misuse
    if not runtime.availability.available or runtime.store is None:
        raise ServiceUnavailableError()
    return runtime.store


async def require_admin(
    runtime: Runtime = Depends(get_runtime),
    creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> None:
    if not runtime.settings.require_admin_token:
        return
    if creds is None or not creds.scheme.lower().startswith("bearer"):
        raise UnauthorizedError()
    if not runtime.admin.verify_token(creds.credentials):
        raise UnauthorizedError("Admin session is invalid or has expired. Please sign in again.")
