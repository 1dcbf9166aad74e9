from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from ....core.runtime import Runtime
from ....core.security import AuthResult
from ....schemas.auth import AdminLoginRequest, AdminLoginResponse
from ...deps import get_runtime


logger = logging.getLogger(__name__)

router = APIRouter()

# every outcome is a 200; only the message says why a login failed
MESSAGES = {
    AuthResult.AUTHORIZED: "Authentication successful",
    AuthResult.DENIED: "Invalid password",
    AuthResult.MISCONFIGURED: "Authentication service is not properly configured. Please contact the administrator.",
}


@router.post("/admin", response_model=AdminLoginResponse, response_model_exclude_none=True)
async def verify_admin_password(
    payload: AdminLoginRequest,
    runtime: Runtime = Depends(get_runtime),
) -> AdminLoginResponse:
    password = payload.password
    if password is None or password == "":
        return AdminLoginResponse(success=False, message="Password is required")

    result = runtime.admin.check_password(password if isinstance(password, str) else None)
    if result is AuthResult.MISCONFIGURED:
        logger.error("ADMIN_PASSWORD environment variable not set")
    elif result is AuthResult.DENIED:
        logger.info("rejected admin login attempt")

    if result is AuthResult.AUTHORIZED:
        return AdminLoginResponse(success=True, message=MESSAGES[result], token=runtime.admin.issue_token())
    return AdminLoginResponse(success=False, message=MESSAGES[result])
