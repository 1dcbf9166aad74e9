from __future__ import annotations

import datetime as dt
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ....core.runtime import Runtime
from ....schemas.system import HealthResponse, HealthServices
from ...deps import get_runtime


logger = logging.getLogger(__name__)

router = APIRouter()

STATUS_CODES = {"healthy": 200, "degraded": 206, "unhealthy": 503}


def _now_iso() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


async def _database_status(runtime: Runtime) -> str:
    if runtime.store is None or not runtime.settings.database_configured:
        return "not_configured"
    try:
        ok = await runtime.store.ping()
    except Exception as e:
        logger.error("Database health check failed: %s", e)
        return "disconnected"
    return "connected" if ok else "disconnected"


@router.get("", response_model=HealthResponse)
async def health(runtime: Runtime = Depends(get_runtime)) -> JSONResponse:
    settings = runtime.settings
    try:
        database = await _database_status(runtime)
        if database == "disconnected":
            status = "degraded"
        else:
            status = "healthy"
        body = HealthResponse(
            status=status,
            timestamp=_now_iso(),
            services=HealthServices(
                database=database,
                environment="production" if settings.is_production else "development",
            ),
            availability=runtime.availability.state.value,
            version=settings.version,
        )
    except Exception:
        logger.exception("Health check error")
        body = HealthResponse(
            status="unhealthy",
            timestamp=_now_iso(),
            services=HealthServices(database="disconnected", environment="unknown"),
            availability=runtime.availability.state.value,
            version=settings.version,
        )
    return JSONResponse(status_code=STATUS_CODES[body.status], content=body.model_dump())
