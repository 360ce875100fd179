from __future__ import annotations

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .db import User
from .errors import Conflict, InvalidCredentials, Unauthenticated
from .models import UserPublic
from .security import dummy_hash, hash_password, verify_password

logger = logging.getLogger("life_kanban.credentials")


def user_public(user: User) -> UserPublic:
    return UserPublic(id=user.id, email=user.email)


class CredentialStore:
    """Users and their password hashes."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def register(self, email: str, password: str) -> UserPublic:
        user = User(id=str(uuid.uuid4()), email=email, password_hash=hash_password(password))
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            logger.info("Registration rejected, email already in use")
            raise Conflict() from exc
        logger.info("Registered user %s", user.id)
        return user_public(user)

    def verify(self, email: str, password: str) -> UserPublic:
        user = self.session.scalars(select(User).where(User.email == email)).first()
        if user is None:
            verify_password(password, dummy_hash())
            raise InvalidCredentials()
        if not verify_password(password, user.password_hash):
            raise InvalidCredentials()
        return user_public(user)

    def get(self, user_id: str) -> UserPublic:
        user = self.session.get(User, user_id)
        if user is None:
            # token outlived its user
            raise Unauthenticated("Invalid token")
        return user_public(user)
