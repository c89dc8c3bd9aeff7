from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional

from tripcrew.core.errors import Unauthorized
from tripcrew.core.security import decode_principal

# auto_error=False so a missing header reaches our handler as UNAUTHORIZED
security = HTTPBearer(auto_error=False)


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """Principal id from the bearer token. There is no fallback identity."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthorized("Missing bearer token")

    principal_id = decode_principal(credentials.credentials)
    if principal_id is None:
        raise Unauthorized("Invalid token")
    return principal_id
