"""
Configuration for the auth module.

Users come from shortlink settings: a single (user, password) pair, or no
users at all, in which case the write endpoints are left open.
The password may be stored in plain text or as a SHA-256 hex digest.
"""

from typing import Dict, Optional

from shortlink.config import settings


def load_users(user: Optional[str] = None, password: Optional[str] = None) -> Dict[str, str]:
    """
    Build the username -> password map from explicit values or settings.

    Returns:
        Dict[str, str]: Empty when no user is configured.
    """
    user = settings.HTTP_USER if user is None else user
    password = settings.HTTP_PASSWORD if password is None else password
    if not user:
        return {}
    return {user: password}
