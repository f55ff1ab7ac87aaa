import time
from typing import Optional

import jwt
from passlib.context import CryptContext
from pydantic import ValidationError

from paysheet.config import AuthSettings, get_settings
from paysheet.models.user import TokenUser, User
from paysheet.services.storage import UserStorageInterface


# pbkdf2_sha256 for new hashes; bcrypt only to verify hashes written by
# earlier deployments of the tracker.
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")


class UnauthorizedError(Exception):
    """Missing, invalid or expired credentials."""
    pass


class ForbiddenError(Exception):
    """Authenticated, but not allowed to do this."""
    pass


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        # Not a hash any configured scheme recognises.
        return False


def create_access_token(
    user: User,
    settings: Optional[AuthSettings] = None,
    expires_in: Optional[int] = None,
) -> str:
    settings = settings or get_settings().auth
    now = int(time.time())
    exp = now + (expires_in if expires_in is not None else settings.expires_in_seconds)
    payload = {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role.value,
        "iat": now,
        "exp": exp,
    }
    return jwt.encode(payload, settings.secret, algorithm=settings.algorithm)


def decode_access_token(token: str, settings: Optional[AuthSettings] = None) -> TokenUser:
    settings = settings or get_settings().auth
    try:
        payload = jwt.decode(token, settings.secret, algorithms=[settings.algorithm])
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token expired")
    except jwt.PyJWTError:
        raise UnauthorizedError("Invalid token")

    try:
        return TokenUser(**payload)
    except ValidationError:
        raise UnauthorizedError("Invalid token")


class AuthService:
    """Checks email/password pairs against the Users sheet."""

    def __init__(self, users: UserStorageInterface):
        self._users = users

    def authenticate(self, email: str, password: str) -> User:
        """
        Return the matching user.

        Unknown email and wrong password fail with the same message so
        the response does not reveal which emails exist.
        """
        user = self._users.find_user_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise UnauthorizedError("Invalid email or password")
        return user
