"""Authentication package."""

from paysheet.auth.security import (
    AuthService,
    ForbiddenError,
    UnauthorizedError,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)

__all__ = [
    "AuthService",
    "ForbiddenError",
    "UnauthorizedError",
    "create_access_token",
    "decode_access_token",
    "hash_password",
    "verify_password",
]
