from datetime import datetime, UTC
from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    """Naive UTC timestamp (columns are stored without timezone)."""
    return datetime.now(UTC).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Declarative base shared by all models."""

    pass


class TimestampMixin:
    """Adds created_at / updated_at maintained on insert and update."""

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )


def enum_values(enum_cls) -> list[str]:
    """values_callable for SQLAlchemy Enum columns: persist the .value strings."""
    return [e.value for e in enum_cls]
