from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt
from jose.exceptions import JWTError
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

from fleet_tracker.core.config import settings

# Security scheme for Swagger UI
security = HTTPBearer()

TOKEN_ISSUER = "fleet-tracker"
TOKEN_AUDIENCE = "fleet-clients"

class TokenPayload(BaseModel):
    """Model representing JWT token payload."""
    sub: Optional[str] = None
    exp: Optional[int] = None

class TokenData(BaseModel):
    """Model representing extracted token data."""
    username: Optional[str] = None

def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    """Issue a signed token for ``subject``."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    claims = {
        "iss": TOKEN_ISSUER,
        "aud": TOKEN_AUDIENCE,
        "sub": subject,
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

def verify_token(token: str) -> TokenPayload:
    """Verify and decode JWT token. Expired tokens are rejected by jose."""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            audience=TOKEN_AUDIENCE,
            issuer=TOKEN_ISSUER,
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return TokenPayload(**payload)

def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> TokenData:
    """Dependency to get current user from token."""
    payload = verify_token(credentials.credentials)

    if payload.sub is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return TokenData(username=payload.sub)
