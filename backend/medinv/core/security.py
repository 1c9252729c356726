"""Password hashing (bcrypt) and session tokens (JWT, HS256).

Token verification is stateless: signature and expiry only, no database.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from medinv.core.config import Settings, settings as default_settings


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_access_token(
    subject: str,
    employee_id: Optional[int] = None,
    settings: Settings = default_settings,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Sign a session token naming the account `subject` (its username)."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload = {"sub": subject, "employeeId": employee_id, "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str, settings: Settings = default_settings) -> Optional[dict]:
    """Return the token claims, or None if the token is invalid, expired or names no account."""
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.InvalidTokenError:
        return None
    if not claims.get("sub"):
        return None
    return claims
