"""Bearer token verification for the synchronous API.

Tokens are issued elsewhere; this service only verifies them. The ``sub``
claim is the caller's user id.
"""

from datetime import UTC, datetime, timedelta

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from chat_companion.core.config import settings
from chat_companion.core.errors import AuthenticationError

bearer_scheme = HTTPBearer(auto_error=False)


class TokenData(BaseModel):
    """Token payload data."""

    user_id: str


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(UTC) + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> TokenData | None:
    """Verify and decode a JWT token."""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    user_id = payload.get("sub")
    if not user_id:
        return None
    return TokenData(user_id=str(user_id))


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing bearer token", details={"source": "api.auth", "operation": "authenticate"})
    token_data = verify_token(credentials.credentials)
    if token_data is None:
        raise AuthenticationError(
            "Invalid or expired token", details={"source": "api.auth", "operation": "authenticate"}
        )
    return token_data.user_id
