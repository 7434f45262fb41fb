"""
Utility functions for the auth module.
"""

import hashlib


def hash_password(password: str) -> str:
    """
    Return a SHA256 hex digest of the given password.

    Lets operators configure SHORTLINK_HTTP_PASSWORD as a digest instead of
    the plain secret.
    """
    return hashlib.sha256(password.encode()).hexdigest()
