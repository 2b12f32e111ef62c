"""Employee Onboarding - SQLAlchemy ORM models.

Backs the SQL document store: one row per logical collection, the
collection body stored as a JSON document.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(UTC)


class Document(Base):
    """A named JSON document (e.g. the "users" collection)."""

    __tablename__ = "documents"

    # Collection name is the key
    name: Mapped[str] = mapped_column(String(64), primary_key=True)

    # Ordered collection of records, replaced wholesale on save
    body: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )
