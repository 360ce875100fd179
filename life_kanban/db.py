from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterator

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    Text,
    create_engine,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, relationship, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import DATABASE_URL
from .models import NOTES_MAX, TAG_MAX, TITLE_MAX, CardStatus


def now_utc() -> datetime:
    return datetime.now(tz=timezone.utc)


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(128))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now_utc)

    cards: Mapped[list[Card]] = relationship(back_populates="owner")


class Card(Base):
    __tablename__ = "cards"
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"))
    title: Mapped[str] = mapped_column(String(TITLE_MAX))
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    tag: Mapped[str | None] = mapped_column(String(TAG_MAX), nullable=True)
    status: Mapped[CardStatus] = mapped_column(
        Enum(CardStatus, native_enum=False, create_constraint=True, name="card_status", length=16),
        default=CardStatus.INBOX,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now_utc)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now_utc)

    owner: Mapped[User] = relationship(back_populates="cards")

    __table_args__ = (
        CheckConstraint(f"length(title) BETWEEN 1 AND {TITLE_MAX}", name="ck_cards_title"),
        CheckConstraint(f"notes IS NULL OR length(notes) <= {NOTES_MAX}", name="ck_cards_notes"),
        Index("ix_cards_owner_created", "owner_id", "created_at"),
    )


def create_db_engine(url: str = DATABASE_URL) -> Engine:
    kwargs: dict = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # an in-memory database lives on a single connection
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


engine = create_db_engine()
SessionLocal = sessionmaker(autoflush=False, bind=engine)


def init_db(bind: Engine | None = None) -> None:
    Base.metadata.create_all(bind=bind or engine)


def get_db() -> Iterator[Session]:
    with SessionLocal() as session:
        yield session
