from __future__ import annotations

from typing import Annotated, Any

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, BeforeValidator, Field
from pydantic_core import PydanticCustomError

PASSWORD_MIN_LENGTH = 5


def _check_email(value: str) -> str:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise PydanticCustomError("invalid_email", "Invalid email")
    return value


def _check_password(value: str) -> str:
    if len(value) < PASSWORD_MIN_LENGTH:
        raise PydanticCustomError("password_too_short", "It must be 5 dude")
    return value


def _checkbox(value: Any) -> bool:
    # a browser sends "on" for a ticked box and nothing for an unticked one
    if isinstance(value, bool):
        return value
    if value == "on":
        return True
    raise PydanticCustomError("bool_parsing", "Expected boolean")


Email = Annotated[str, AfterValidator(_check_email)]
Checkbox = Annotated[bool, BeforeValidator(_checkbox)]


class Thing(BaseModel):
    name: str


class ClientUserForm(BaseModel):
    """What the form checks before submitting: shape only, no password policy."""

    email: Email
    password: str
    thing: Thing | None = None
    remember: Checkbox = False
    tasks: list[str] = Field(default_factory=list)


class UserForm(ClientUserForm):
    """Server-side schema: the client shape plus the password length rule."""

    password: Annotated[str, AfterValidator(_check_password)]
