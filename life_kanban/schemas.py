from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, Field
from pydantic.networks import validate_email

from .models import NOTES_MAX, TAG_MAX, TITLE_MAX, CardChanges, CardStatus


def checked_email(value: str) -> str:
    """Reject malformed addresses but keep the address exactly as sent."""
    _, normalized = validate_email(value)
    if normalized.lower() != value.lower():
        # "Name <addr>" forms parse but are not a bare address
        raise ValueError("not a bare email address")
    return value


Email = Annotated[str, AfterValidator(checked_email)]


class ErrorOut(BaseModel):
    error: str


class Ok(BaseModel):
    ok: bool = True


class Health(BaseModel):
    status: str = "ok"


class RegisterIn(BaseModel):
    email: Email
    password: str = Field(min_length=8)


class LoginIn(BaseModel):
    email: Email
    password: str = Field(min_length=1)


class UserOut(BaseModel):
    id: str
    email: str


class CardIn(BaseModel):
    title: str = Field(min_length=1, max_length=TITLE_MAX)
    notes: Optional[str] = Field(default=None, max_length=NOTES_MAX)
    tag: Optional[str] = Field(default=None, max_length=TAG_MAX)


class CardPatch(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=TITLE_MAX)
    notes: Optional[str] = Field(default=None, max_length=NOTES_MAX)
    tag: Optional[str] = Field(default=None, max_length=TAG_MAX)
    status: Optional[CardStatus] = None

    def to_changes(self) -> CardChanges:
        """Only the fields the client actually sent, explicit nulls included."""
        return CardChanges(**{name: getattr(self, name) for name in self.model_fields_set})


class CardOut(BaseModel):
    id: str
    userId: str
    title: str
    notes: Optional[str]
    tag: Optional[str]
    status: CardStatus
    createdAt: datetime
    updatedAt: datetime
