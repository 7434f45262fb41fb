"""
Core authentication logic.

This module handles validation of credentials against a configured
username -> password map.
"""

import secrets
from typing import Dict

from fastapi import HTTPException, status

from .utils import hash_password


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Basic"},
    )


def authenticate_user(users: Dict[str, str], username: str, password: str) -> str:
    """
    Authenticate a user by validating their username and password.

    Args:
        users (Dict[str, str]): Configured username -> password map.
        username (str): The username provided by the client.
        password (str): The password provided by the client.

    Returns:
        str: The authenticated username.

    Raises:
        HTTPException: If authentication fails (401 Unauthorized).
    """
    stored_password = users.get(username)

    if stored_password is None:
        raise _unauthorized("User not found")

    # Allow both plain-text and hashed password comparison
    stored = stored_password.encode()
    if secrets.compare_digest(stored, password.encode()) or secrets.compare_digest(
        stored, hash_password(password).encode()
    ):
        return username

    raise _unauthorized("Invalid password")
