"""FastAPI dependencies that resolve the caller's session.

The token is read from an ``Authorization: Bearer`` header, falling back to
the ``auth-token`` cookie set at login.
"""

from fastapi import Depends, Request

from storefront.errors import AuthenticationError
from storefront.identity.tokens import SessionClaims, require_admin, validate_token

SESSION_COOKIE = "auth-token"


def _token_from_request(request: Request):
    header = request.headers.get("Authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return request.cookies.get(SESSION_COOKIE)


def current_session(request: Request) -> SessionClaims:
    token = _token_from_request(request)
    if not token:
        raise AuthenticationError("Authentication required")
    return validate_token(token)


def optional_session(request: Request) -> SessionClaims | None:
    token = _token_from_request(request)
    if not token:
        return None
    return validate_token(token)


def admin_session(claims: SessionClaims = Depends(current_session)) -> SessionClaims:
    return require_admin(claims)
