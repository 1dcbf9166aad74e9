from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class AdminLoginRequest(BaseModel):
    # any JSON value; the route denies non-strings
    password: Any = Field(default=None)


class AdminLoginResponse(BaseModel):
    success: bool
    message: str
    token: str | None = None
