from jose import JWTError, jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
from tripcrew.core.config import settings
import uuid


def create_access_token(principal_id: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {
        "sub": str(principal_id),
        "exp": expire,
        "jti": str(uuid.uuid4()),
        "type": "access",
    }
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_principal(token: str) -> Optional[str]:
    """Return the principal id carried by an access token, or None if the token is not valid."""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError:
        return None

    if payload.get("type", "access") != "access":
        return None
    principal_id = payload.get("sub")
    if not principal_id:
        return None
    return str(principal_id)
