import os
from datetime import datetime, timedelta, timezone

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt

from core.errors import AuthenticationError, AuthorizationError
from utils.state import State
from utils.token import InvalidOrExpiredToken, decodeJWT, jwt_algorithm, jwt_secret

SESSION_TOKEN_TYPE = "access"
RESET_TOKEN_TYPE = "reset"


class JWTBearer(HTTPBearer):
    """Authentication guard returning the claims of a valid session token.

    No header (or a non-bearer scheme) is a 401; a token that fails the
    signature/expiry check is a 403.
    """

    def __init__(self):
        super(JWTBearer, self).__init__(auto_error=False)

    async def __call__(self, request: Request) -> dict:
        credentials: HTTPAuthorizationCredentials = await super(
            JWTBearer, self
        ).__call__(request)
        if not credentials or credentials.scheme.lower() != "bearer":
            raise AuthenticationError("Missing or invalid auth token")
        try:
            payload = decodeJWT(credentials.credentials)
        except InvalidOrExpiredToken as e:
            State.logger.warning(f"Rejected bearer token: {e}")
            raise AuthorizationError("Token invalid or expired")
        if payload.get("type") != SESSION_TOKEN_TYPE or "id" not in payload:
            raise AuthorizationError("Token invalid or expired")
        return payload


jwt_bearer = JWTBearer()


def require_admin(claims: dict = Depends(jwt_bearer)) -> dict:
    if claims.get("role") != "admin":
        raise AuthorizationError("Access denied")
    return claims


def _encode(claims: dict, expires_delta: timedelta) -> str:
    to_encode = dict(claims)
    to_encode["exp"] = datetime.now(timezone.utc) + expires_delta
    return jwt.encode(to_encode, jwt_secret(), algorithm=jwt_algorithm())


def create_session_token(user, expires_delta: timedelta = None) -> str:
    if expires_delta is None:
        expires_delta = timedelta(days=int(os.getenv("JWT_SESSION_EXPIRE_DAYS", "7")))
    return _encode(
        {
            "id": user.id,
            "email": user.email,
            "name": user.name,
            "role": user.role,
            "type": SESSION_TOKEN_TYPE,
        },
        expires_delta,
    )


def create_reset_token(user_id: str, expires_delta: timedelta = None) -> str:
    if expires_delta is None:
        expires_delta = timedelta(
            minutes=int(os.getenv("JWT_RESET_EXPIRE_MINUTES", "15"))
        )
    return _encode({"userId": user_id, "type": RESET_TOKEN_TYPE}, expires_delta)


def read_reset_token(token: str) -> str:
    """Return the user id carried by a password-reset token."""
    payload = decodeJWT(token)
    if payload.get("type") != RESET_TOKEN_TYPE or not payload.get("userId"):
        raise InvalidOrExpiredToken("Not a password reset token")
    return payload["userId"]
