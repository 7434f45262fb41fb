"""
FastAPI dependency functions for authentication.

These can be used in routes or routers with Depends() to protect endpoints.
"""

from typing import Callable, Dict

from fastapi import Depends
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from .service import authenticate_user

# HTTP Basic authentication scheme
security = HTTPBasic(realm="shortlink")


def require_user(users: Dict[str, str]) -> Callable[..., str]:
    """
    Build a dependency that validates Basic credentials against `users`.

    Args:
        users (Dict[str, str]): username -> password (plain or SHA-256 hex).

    Returns:
        Callable: A FastAPI dependency returning the authenticated username.
    """

    def get_current_user(credentials: HTTPBasicCredentials = Depends(security)) -> str:
        return authenticate_user(users, credentials.username, credentials.password)

    return get_current_user
