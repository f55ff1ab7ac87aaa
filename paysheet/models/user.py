"""
User Models

A user is a row in the Users sheet. The password hash lives on the
stored record only; everything that leaves the service goes through
UserPublic so the hash can never leak into a response.
"""

import secrets
import string
import time
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


_BASE36 = string.digits + string.ascii_lowercase


def generate_id(prefix: str) -> str:
    """Opaque record id: ``<PREFIX>-<epoch ms>-<9 base36 chars>``."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"{prefix}-{int(time.time() * 1000)}-{suffix}"


def generate_user_id() -> str:
    return generate_id("USR")


class Role(str, Enum):
    """Authorization roles. Anything missing from the sheet is a plain user."""
    USER = "user"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Role":
        """Lenient parse used for stored rows and inbound payloads."""
        if not value or not value.strip():
            return cls.USER
        return cls(value.strip().lower())


class User(BaseModel):
    """
    A stored user record.

    row_position is the record's sheet row at read time. It is
    recomputed on every read and is not part of the logical entity,
    so it is excluded from equality and serialization.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        default_factory=generate_user_id,
        min_length=1,
        description="Opaque unique id, immutable"
    )
    email: str = Field(
        ...,
        description="Login key; exact-match lookups"
    )
    password_hash: str = Field(
        default="",
        repr=False,
        description="Salted one-way hash"
    )
    name: str = Field(
        default="",
        description="Display name"
    )
    role: Role = Field(
        default=Role.USER,
        description="Authorization role"
    )
    row_position: Optional[int] = Field(
        default=None,
        exclude=True,
        description="Transient sheet row number"
    )

    @field_validator("role", mode="before")
    @classmethod
    def parse_role(cls, v):
        if isinstance(v, Role):
            return v
        return Role.parse(v)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def display_name(self) -> str:
        return self.name or self.email

    def to_public(self) -> "UserPublic":
        return UserPublic(
            id=self.id,
            email=self.email,
            name=self.name,
            role=self.role,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, User):
            return NotImplemented
        return self.model_dump() == other.model_dump()


class UserPublic(BaseModel):
    """Outward view of a user (no password hash)."""
    id: str
    email: str
    name: str
    role: Role = Role.USER


class TokenUser(BaseModel):
    """Identity carried inside a signed access token."""
    id: str
    email: str
    name: str = ""
    role: Role = Role.USER

    @field_validator("role", mode="before")
    @classmethod
    def parse_role(cls, v):
        if isinstance(v, Role):
            return v
        return Role.parse(v)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def display_name(self) -> str:
        return self.name or self.email
