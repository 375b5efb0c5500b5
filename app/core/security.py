"""
Access check in front of the ledger API.

Credentials are verified here, outside the engine; the authenticated
username is what the engine records as the acting user.
"""
import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from app.core.config import Settings, get_settings


# HTTP Basic scheme
security_scheme = HTTPBasic(auto_error=True)


def verify_credentials(username: str, password: str, settings: Settings) -> bool:
    """Constant-time comparison against the configured admin account."""
    correct_username = secrets.compare_digest(
        username.encode("utf-8"), settings.admin_username.encode("utf-8")
    )
    correct_password = secrets.compare_digest(
        password.encode("utf-8"), settings.admin_password.encode("utf-8")
    )
    return correct_username and correct_password


def get_current_user_id(
    credentials: HTTPBasicCredentials = Depends(security_scheme),
    settings: Settings = Depends(get_settings),
) -> str:
    """
    Authenticate the request and return the acting-user reference.

    Raises:
        HTTPException: 401 if the credentials do not match
    """
    if not verify_credentials(credentials.username, credentials.password, settings):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return credentials.username
