from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

APP_IDS_TABLE = "appids"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Declarative base for all maids models."""

    pass


class AppIdRow(Base):
    """One allocated application ID.

    The primary key on ``id`` is the only unique constraint and is what
    ``INSERT ... ON CONFLICT DO NOTHING`` guards.
    """

    __tablename__ = APP_IDS_TABLE

    id: Mapped[str] = mapped_column(String, primary_key=True)
    created_by: Mapped[str] = mapped_column("createdBy", String, nullable=False)
    created_on: Mapped[datetime] = mapped_column(
        "createdOn",
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
    )
    is_generated: Mapped[bool] = mapped_column(
        "isGenerated", Boolean, nullable=False, default=False
    )
