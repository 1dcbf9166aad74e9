from __future__ import annotations

import secrets
from enum import Enum

from fastapi.security import HTTPBearer
from itsdangerous import BadSignature, TimestampSigner


bearer_scheme = HTTPBearer(auto_error=False)

ADMIN_SUBJECT = b"admin"


class AuthResult(str, Enum):
    AUTHORIZED = "authorized"
    DENIED = "denied"
    MISCONFIGURED = "misconfigured"


class AdminGate:
    """Shared-secret admin check plus short-lived signed admin tokens."""

    def __init__(self, secret: str | None, signing_key: str, token_ttl_seconds: int = 604800) -> None:
        self._secret = secret or None
        self._signer = TimestampSigner(signing_key, salt="admin-token")
        self.token_ttl_seconds = token_ttl_seconds

    def check_password(self, submitted: str | None) -> AuthResult:
        if self._secret is None:
            return AuthResult.MISCONFIGURED
        if submitted is None:
            return AuthResult.DENIED
        # exact equality, compared in constant time
        if secrets.compare_digest(submitted.encode("utf-8"), self._secret.encode("utf-8")):
            return AuthResult.AUTHORIZED
        return AuthResult.DENIED

    def issue_token(self) -> str:
        return self._signer.sign(ADMIN_SUBJECT).decode("ascii")

    def verify_token(self, token: str | None) -> bool:
        if not token:
            return False
        try:
            value = self._signer.unsign(token.strip(), max_age=self.token_ttl_seconds)
        except BadSignature:
            return False
        return value == ADMIN_SUBJECT
