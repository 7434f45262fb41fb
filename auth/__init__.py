"""
Auth package for the shortlink HTTP layer.

Provides HTTP Basic Auth for the write endpoints (create/delete mappings).
Redirects stay public. Auth is switched on by configuring a user
(SHORTLINK_HTTP_USER / SHORTLINK_HTTP_PASSWORD).
"""

from .config import load_users
from .dependencies import require_user
from .service import authenticate_user

__all__ = ["authenticate_user", "load_users", "require_user"]
