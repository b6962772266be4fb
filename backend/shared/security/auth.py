"""
Authentication and authorization utilities.

Tokens are issued by the identity service; this service verifies them and
authorizes requests by the "permissions" and "roles" claims.
"""

from __future__ import annotations

import time
import uuid
from typing import Any, Callable

import jwt
from fastapi import Header, HTTPException, status

from shared.config.settings import (
    JWT_SECRET,
    JWT_ISSUER,
    JWT_AUDIENCE,
    settings,
)
from shared.config.logging import get_logger
from shared.utils.exceptions import ForbiddenError, MissingPermissionError

logger = get_logger(__name__)


# =============================================================================
# JWT Functions
# =============================================================================


def sign_jwt(
    payload: dict[str, Any],
    ttl_seconds: int | None = None,
) -> str:
    """
    Sign a JWT token with the given payload.

    Args:
        payload: Claims to include in the token (sub, email, roles, permissions).
        ttl_seconds: Token lifetime in seconds. Defaults to access token expiry.

    Returns:
        Signed JWT token string.
    """
    if ttl_seconds is None:
        ttl_seconds = settings.jwt_access_token_expire_minutes * 60

    now = int(time.time())
    data = {
        **payload,
        "iss": JWT_ISSUER,
        "aud": JWT_AUDIENCE,
        "iat": now,
        "exp": now + ttl_seconds,
        "type": "access",
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(data, JWT_SECRET, algorithm="HS256")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def verify_jwt(token: str) -> dict[str, Any]:
    """
    Decode a bearer token and check signature, expiry, issuer and audience.

    Raises:
        HTTPException: 401 for any token that cannot be trusted.
    """
    try:
        claims = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=["HS256"],
            audience=JWT_AUDIENCE,
            issuer=JWT_ISSUER,
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError as e:
        # Client gets a generic message; the reason stays in the log
        logger.warning("JWT validation failed", error=str(e))
        raise _unauthorized("Invalid token")

    subject = claims.get("sub")
    if not isinstance(subject, str) or not subject:
        raise _unauthorized("Invalid token: missing subject claim")
    if claims.get("type", "access") != "access":
        raise _unauthorized("Invalid token: not an access token")
    return claims


def get_bearer_token(authorization: str | None) -> str:
    """
    Raises:
        HTTPException: 401 when the header is missing or not "Bearer <token>".
    """
    if not authorization:
        raise _unauthorized("Missing Authorization header")
    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer" or not token.strip():
        raise _unauthorized("Invalid Authorization header format. Expected: Bearer <token>")
    return token.strip()


def current_user_context(
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> dict[str, Any]:
    """
    FastAPI dependency returning the verified claims of the caller:
    sub (user id), email, roles, permissions.
    """
    return verify_jwt(get_bearer_token(authorization))


# =============================================================================
# Authorization
# =============================================================================


def require_roles(ctx: dict[str, Any], allowed: list[str]) -> None:
    """
    Verify that the user has at least one of the allowed roles.

    Raises:
        ForbiddenError: If user lacks required role.
    """
    user_roles = set(ctx.get("roles") or [])
    if not user_roles.intersection(allowed):
        raise ForbiddenError(
            f"perform this action (requires role: one of {', '.join(allowed)})",
            user_id=ctx.get("sub"),
        )


def require_permissions(*required: str) -> Callable[..., dict[str, Any]]:
    """
    Build a dependency that requires every listed permission.

    Usage:
        @router.post("/backup")
        def create_backup(user: dict = Depends(require_permissions("backup:manage"))):
            ...
    """

    def dependency(
        authorization: str | None = Header(default=None, alias="Authorization"),
    ) -> dict[str, Any]:
        ctx = current_user_context(authorization)
        granted = set(ctx.get("permissions") or [])
        missing = [perm for perm in required if perm not in granted]
        if missing:
            raise MissingPermissionError(list(required), user_id=ctx.get("sub"))
        return ctx

    return dependency
