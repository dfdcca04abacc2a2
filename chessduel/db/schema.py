"""Database tables / schema"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBMatch(Base):
    __tablename__ = "matches"
    id: Mapped[UUID] = mapped_column(primary_key=True)
    white_model: Mapped[str]
    black_model: Mapped[str]
    current_fen: Mapped[str]
    moves: Mapped[list[str]] = mapped_column(JSON, default=list)
    result: Mapped[str]
    last_move: Mapped[Optional[str]]
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)


class DBCredential(Base):
    """A stored API key. The value is base64 encoded, not encrypted."""

    __tablename__ = "credentials"
    name: Mapped[str] = mapped_column(primary_key=True)
    encoded_value: Mapped[str]
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)
