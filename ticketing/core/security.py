import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
from ticketing.core.config import settings

ALGORITHM = "HS256"

# Roles that may hold a back-office token
STAFF_ROLES = ("admin", "scanner")


def create_access_token(subject: str, role: str = "admin", expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {"exp": expire, "sub": str(subject), "role": role}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """Returns the token claims, or None if the token is invalid/expired."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if payload.get("role") not in STAFF_ROLES:
        return None
    return payload


def verify_admin_secret(candidate: str) -> bool:
    return secrets.compare_digest(candidate.encode(), settings.ADMIN_SECRET_KEY.encode())
