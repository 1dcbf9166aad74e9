from __future__ import annotations

import os
import secrets
from dataclasses import dataclass, field
from typing import Iterable, Mapping


TRUTHY = {"1", "true", "yes", "on"}


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    try:
        return int(env.get(name, str(default)))
    except Exception:
        return default


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    try:
        return float(env.get(name, str(default)))
    except Exception:
        return default


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in TRUTHY


def _env_str(env: Mapping[str, str], name: str) -> str | None:
    raw = env.get(name)
    if raw is None:
        return None
    raw = raw.strip()
    return raw or None


def parse_cors_origins(raw: str) -> list[str]:
    parts: Iterable[str] = (o.strip() for o in raw.split(","))
    return [o for o in parts if o]


@dataclass(frozen=True)
class Settings:
    database_url: str | None = None
    admin_password: str | None = None
    secret_key: str = field(default_factory=lambda: secrets.token_hex(32))
    admin_token_ttl_seconds: int = 604800  # 7 days
    require_admin_token: bool = True
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:3000"])
    db_pool_size: int = 5
    db_max_overflow: int = 5
    db_pool_timeout: float = 10.0
    db_connect_timeout: float = 10.0
    db_query_timeout: float = 15.0
    seed_sample_posts: bool = False
    environment: str = "development"
    log_level: str = "INFO"
    log_format: str = "simple"
    upload_dir: str = "uploads"
    cloudinary_cloud_name: str | None = None
    cloudinary_api_key: str | None = None
    cloudinary_api_secret: str | None = None
    cloudinary_folder: str = "blog-images"
    version: str = "1.0.0"

    @property
    def database_configured(self) -> bool:
        return bool(self.database_url) and "placeholder" not in (self.database_url or "")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if env is None else env
        defaults = cls()
        return cls(
            database_url=_env_str(env, "DATABASE_URL"),
            admin_password=env.get("ADMIN_PASSWORD") or None,
            secret_key=_env_str(env, "SECRET_KEY") or defaults.secret_key,
            admin_token_ttl_seconds=_env_int(env, "ADMIN_TOKEN_TTL_SECONDS", defaults.admin_token_ttl_seconds),
            require_admin_token=_env_bool(env, "REQUIRE_ADMIN_TOKEN", defaults.require_admin_token),
            cors_origins=parse_cors_origins(env.get("CORS_ALLOW_ORIGINS", "http://localhost:3000")),
            db_pool_size=_env_int(env, "DB_POOL_SIZE", defaults.db_pool_size),
            db_max_overflow=_env_int(env, "DB_MAX_OVERFLOW", defaults.db_max_overflow),
            db_pool_timeout=_env_float(env, "DB_POOL_TIMEOUT", defaults.db_pool_timeout),
            db_connect_timeout=_env_float(env, "DB_CONNECT_TIMEOUT", defaults.db_connect_timeout),
            db_query_timeout=_env_float(env, "DB_QUERY_TIMEOUT", defaults.db_query_timeout),
            seed_sample_posts=_env_bool(env, "SEED_SAMPLE_POSTS", defaults.seed_sample_posts),
            environment=_env_str(env, "APP_ENV") or defaults.environment,
            log_level=(_env_str(env, "LOG_LEVEL") or defaults.log_level).upper(),
            log_format=(_env_str(env, "LOG_FORMAT") or defaults.log_format).lower(),
            upload_dir=_env_str(env, "UPLOAD_DIR") or defaults.upload_dir,
            cloudinary_cloud_name=_env_str(env, "CLOUDINARY_CLOUD_NAME"),
            cloudinary_api_key=_env_str(env, "CLOUDINARY_API_KEY"),
            cloudinary_api_secret=_env_str(env, "CLOUDINARY_API_SECRET"),
            cloudinary_folder=_env_str(env, "CLOUDINARY_FOLDER") or defaults.cloudinary_folder,
        )
