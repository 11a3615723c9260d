import os

from jose import JWTError, jwt
from passlib.context import CryptContext

password_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class InvalidOrExpiredToken(Exception):
    """Token signature, format or expiry check failed."""


def get_hashed_password(password: str) -> str:
    return password_context.hash(password)


def verify_password(password: str, hashed_pass: str) -> bool:
    return password_context.verify(password, hashed_pass)


def jwt_secret() -> str:
    secret = os.getenv("JWT_SECRET_KEY")
    if not secret:
        raise RuntimeError("JWT_SECRET_KEY is not configured")
    return secret


def jwt_algorithm() -> str:
    return os.getenv("JWT_ALGORITHM", "HS256")


def decodeJWT(jwtoken: str) -> dict:
    """Check signature and expiry of ``jwtoken`` and return its claims.

    There is no revocation list, so a well-signed token is valid until
    its ``exp`` claim passes.
    """
    try:
        return jwt.decode(jwtoken, jwt_secret(), algorithms=[jwt_algorithm()])
    except JWTError as e:
        raise InvalidOrExpiredToken(str(e)) from e
