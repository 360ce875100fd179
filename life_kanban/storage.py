from __future__ import annotations

import logging
import uuid
from typing import Any, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from .db import Card, now_utc
from .errors import NotFound, ValidationError
from .models import NOTES_MAX, TAG_MAX, TITLE_MAX, CardChanges, CardStatus

logger = logging.getLogger("life_kanban.storage")


# === Field validation ===


def validate_title(title: Any) -> str:
    if not isinstance(title, str) or not 1 <= len(title) <= TITLE_MAX:
        raise ValidationError()
    return title


def validate_optional_text(value: Any, max_length: int) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str) or len(value) > max_length:
        raise ValidationError()
    return value


def validate_status(status: Any) -> CardStatus:
    try:
        return CardStatus(status)
    except ValueError as exc:
        raise ValidationError() from exc


class CardRepository:
    """Cards, always scoped to the user that owns them.

    A card owned by someone else behaves exactly like a card that does not
    exist, so callers can never learn about other users' cards.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    # === Reads ===
    def list(self, user_id: str) -> List[Card]:
        stmt = (
            select(Card)
            .where(Card.owner_id == user_id)
            .order_by(Card.created_at.desc(), Card.id.desc())
        )
        return list(self.session.scalars(stmt))

    def get(self, user_id: str, card_id: str) -> Card:
        stmt = select(Card).where(Card.id == card_id, Card.owner_id == user_id)
        card = self.session.scalars(stmt).first()
        if card is None:
            raise NotFound()
        return card

    # === Writes ===
    def create(
        self,
        user_id: str,
        title: str,
        notes: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> Card:
        now = now_utc()
        card = Card(
            id=str(uuid.uuid4()),
            owner_id=user_id,
            title=validate_title(title),
            notes=validate_optional_text(notes, NOTES_MAX),
            tag=validate_optional_text(tag, TAG_MAX),
            status=CardStatus.INBOX,
            created_at=now,
            updated_at=now,
        )
        self.session.add(card)
        self.session.commit()
        logger.info("Created card %s for user %s", card.id, user_id)
        return card

    def update(self, user_id: str, card_id: str, changes: CardChanges) -> Card:
        values: dict[str, Any] = {}
        for name, value in changes.present().items():
            if name == "title":
                values[name] = validate_title(value)
            elif name == "notes":
                values[name] = validate_optional_text(value, NOTES_MAX)
            elif name == "tag":
                values[name] = validate_optional_text(value, TAG_MAX)
            elif name == "status":
                values[name] = validate_status(value)
        values["updated_at"] = now_utc()

        # ownership and mutation in one statement
        stmt = (
            update(Card)
            .where(Card.id == card_id, Card.owner_id == user_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        if result.rowcount == 0:
            self.session.rollback()
            raise NotFound()
        self.session.commit()
        logger.info("Updated card %s (%s)", card_id, ", ".join(sorted(values)))
        return self.get(user_id, card_id)

    def delete(self, user_id: str, card_id: str) -> None:
        stmt = (
            delete(Card)
            .where(Card.id == card_id, Card.owner_id == user_id)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        if result.rowcount == 0:
            self.session.rollback()
            raise NotFound()
        self.session.commit()
        logger.info("Deleted card %s", card_id)
