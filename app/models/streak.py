"""
Streak - one contiguous run of posting days for a user.

Append-only history: closed rows (is_active = false) are never touched again.
At most one active row per user, enforced by the partial unique index
`uq_streaks_user_active` as well as by the engine.
"""
from datetime import datetime, date
from sqlalchemy import (
    Integer, String, Boolean, DateTime, Date, ForeignKey, Index, func, text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Streak(Base):
    __tablename__ = "streaks"
    __table_args__ = (
        Index(
            "uq_streaks_user_active",
            "user_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("users.id"), nullable=False, index=True
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    length: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1,
        comment="Days covered, inclusive: end_date - start_date + 1",
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
