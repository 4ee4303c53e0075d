"""Password hashing and access tokens."""

import secrets
import string
from datetime import UTC, datetime, timedelta

import jwt
from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

JWT_ALG = "HS256"
_PASSWORD_ALPHABET = string.ascii_letters + string.digits + "!@#$%^&*"


def hash_password(password: str) -> str:
    """Return a bcrypt hash for a password."""
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Return True when the password matches the stored hash."""
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        return False


def generate_password(length: int = 12) -> str:
    """Return a random password for a newly created account."""
    return "".join(secrets.choice(_PASSWORD_ALPHABET) for _ in range(length))


def make_access_token(subject: str, secret: str, ttl_minutes: int) -> str:
    """Issue a signed access token for a user id."""
    now = datetime.now(tz=UTC)
    payload = {
        "sub": subject,
        "type": "access",
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=ttl_minutes)).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALG)


def decode_access_token(token: str, secret: str) -> str:
    """Return the user id carried by a valid access token.

    Raises ``jwt.InvalidTokenError`` for bad, expired or non-access tokens.
    """
    data = jwt.decode(token, secret, algorithms=[JWT_ALG])
    if data.get("type") != "access" or not data.get("sub"):
        raise jwt.InvalidTokenError("Wrong token type")
    return str(data["sub"])
