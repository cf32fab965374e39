"""Signed session tokens.

Tokens are HS256 JWTs carrying the user id (``sub``), email and role. The
signing secret and lifetime come from ``STOREFRONT_JWT_SECRET`` and
``STOREFRONT_TOKEN_TTL_SECONDS``.
"""

import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import structlog
from jose import ExpiredSignatureError, JWTError, jwt

from storefront.errors import AccessDeniedError, AuthenticationError
from storefront.identity.user import UserRole

logger = structlog.get_logger(__name__)

ALGORITHM = "HS256"
DEFAULT_TOKEN_TTL_SECONDS = 60 * 60 * 24 * 7
_DEV_SECRET = "storefront-dev-secret"


@dataclass(frozen=True)
class SessionClaims:
    user_id: str
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


def _secret() -> str:
    return os.environ.get("STOREFRONT_JWT_SECRET", _DEV_SECRET)


def token_ttl() -> timedelta:
    return timedelta(seconds=int(os.environ.get("STOREFRONT_TOKEN_TTL_SECONDS", DEFAULT_TOKEN_TTL_SECONDS)))


def issue_token(user_id, email, role, now: datetime | None = None) -> str:
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "iat": issued_at,
        "exp": issued_at + token_ttl(),
    }
    return jwt.encode(payload, _secret(), algorithm=ALGORITHM)


def validate_token(token: str) -> SessionClaims:
    """Verify signature and expiry and return the session claims.

    Raises ``AuthenticationError`` for any token that cannot be trusted.
    """
    if not token:
        raise AuthenticationError("Missing session token")

    try:
        payload = jwt.decode(token, _secret(), algorithms=[ALGORITHM])
    except ExpiredSignatureError as exc:
        raise AuthenticationError("Session token has expired") from exc
    except JWTError as exc:
        logger.info("session_token_rejected", reason=str(exc))
        raise AuthenticationError("Invalid session token") from exc

    user_id = payload.get("sub")
    role = payload.get("role")
    if not user_id or role not in {r.value for r in UserRole}:
        raise AuthenticationError("Invalid session token")

    return SessionClaims(user_id=user_id, email=payload.get("email"), role=role)


def require_admin(claims: SessionClaims) -> SessionClaims:
    if not claims.is_admin:
        raise AccessDeniedError("Administrator role required")
    return claims
