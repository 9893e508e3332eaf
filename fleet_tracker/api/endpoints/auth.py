import secrets

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from fleet_tracker.core.config import settings
from fleet_tracker.core.security import create_access_token

router = APIRouter()

class LoginRequest(BaseModel):
    """Credentials for the demo account."""
    username: str
    password: str

class TokenResponse(BaseModel):
    token: str

@router.post("/login", response_model=TokenResponse)
def login(credentials: LoginRequest) -> TokenResponse:
    """
    Exchange demo credentials for a bearer token.
    """
    username_ok = secrets.compare_digest(credentials.username.encode(), settings.DEMO_USERNAME.encode())
    password_ok = secrets.compare_digest(credentials.password.encode(), settings.DEMO_PASSWORD.encode())
    if not (username_ok and password_ok):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid credentials",
        )
    return TokenResponse(token=create_access_token(credentials.username))
