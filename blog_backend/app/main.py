from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .api.v1.endpoints import auth, health, posts, upload
from .core.config import Settings
from .core.errors import install_error_handlers
from .core.logging_config import configure_logging
from .core.runtime import Runtime


logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, runtime: Runtime | None = None) -> FastAPI:
    if settings is None and runtime is not None:
        settings = runtime.settings
    elif settings is None:
        load_dotenv()
        settings = Settings.from_env()
    configure_logging(settings.log_level, settings.log_format)

    @asynccontextmanager
    async def lifespan(app: FastAPI):  # type: ignore[override]
        # the store itself is probed lazily by the first data request
        logger.info("Server starting; database will be initialized on first use")
        yield
        await app.state.runtime.close()

    app = FastAPI(title="Blog Backend", version=settings.version, lifespan=lifespan)
    app.state.runtime = runtime or Runtime.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)

    app.include_router(health.router, prefix="/health", tags=["health"])  # GET /health
    app.include_router(auth.router, prefix="/auth", tags=["auth"])  # POST /auth/admin
    app.include_router(posts.router, prefix="/posts", tags=["posts"])  # /posts, /posts/{id}
    app.include_router(upload.router, prefix="/upload", tags=["upload"])  # POST /upload

    upload_dir = app.state.runtime.images.ensure_upload_dir()
    app.mount("/uploads", StaticFiles(directory=upload_dir), name="uploads")
    return app


def serve() -> None:
    import uvicorn

    load_dotenv()
    settings = Settings.from_env()
    # `uvicorn app.main:create_app --factory` works as well
    options: dict[str, Any] = {
        "host": os.getenv("HOST", "0.0.0.0"),
        "port": int(os.getenv("PORT", "8000")),
    }
    uvicorn.run(create_app(settings), **options)


if __name__ == "__main__":
    serve()
