"""User schemas: request validation and the public projection of an account."""

from datetime import datetime
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field, field_validator


def _not_blank(value: str) -> str:
    if not value or not value.strip():
        raise ValueError("must not be blank")
    return value.strip()


class UserCreate(BaseModel):
    """Registration payload. Read-only fields (id, account_created...) are ignored.

    ``username`` must be a well-formed address but is stored exactly as sent;
    email-validator's normalized form is not used.
    """
    username: str
    password: str = Field(min_length=1)
    first_name: str
    last_name: str

    @field_validator("username")
    @classmethod
    def username_is_email(cls, v: str) -> str:
        try:
            validate_email(v, check_deliverability=False)
        except EmailNotValidError as exc:
            raise ValueError(f"not a valid email address: {exc}") from exc
        return v

    @field_validator("password")
    @classmethod
    def password_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("first_name", "last_name")
    @classmethod
    def names_not_blank(cls, v: str) -> str:
        return _not_blank(v)


class UserUpdate(BaseModel):
    """Profile update. ``username`` is accepted only so its presence can be rejected."""
    first_name: str
    last_name: str
    password: Optional[str] = None
    username: Optional[str] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def names_not_blank(cls, v: str) -> str:
        return _not_blank(v)


class UserResponse(BaseModel):
    id: int
    username: str
    firstName: str
    lastName: str
    accountCreated: datetime
    accountUpdated: datetime

    @classmethod
    def from_model(cls, user) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.email,
            firstName=user.first_name,
            lastName=user.last_name,
            accountCreated=user.account_created,
            accountUpdated=user.account_updated,
        )
