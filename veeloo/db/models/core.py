"""SQLAlchemy models for users and their daily message counters."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from veeloo.db.base import Base
from veeloo.domain.plans import UserRole
from veeloo.utils.datetime import utc_now


class User(Base):
    """User profile as written by the identity and payment services.

    ``plan`` is stored as free text: whatever the payment confirmation wrote,
    including values this package does not recognise.
    """

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("telegram_id", name="uq_users_telegram_id"),
        UniqueConstraint("username", name="uq_users_username"),
    )

    telegram_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    username: Mapped[str | None] = mapped_column(String(32))
    display_name: Mapped[str | None] = mapped_column(String(128))
    language_code: Mapped[str | None] = mapped_column(String(8))
    plan: Mapped[str | None] = mapped_column(String(32))
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", values_callable=lambda roles: [r.value for r in roles]),
        default=UserRole.MEMBER,
        nullable=False,
    )
    subscription_status: Mapped[str | None] = mapped_column(String(32))
    last_seen_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    message_counts: Mapped[list["MessageCount"]] = relationship(back_populates="user")


class MessageCount(Base):
    """Messages sent by one user on one calendar day.

    ``doc_id`` is ``"<user_id>_<YYYY-MM-DD>"``. Rows are created on the first
    message of the day and only ever incremented.
    """

    __tablename__ = "message_counts"
    __table_args__ = (UniqueConstraint("doc_id", name="uq_message_counts_doc_id"),)

    doc_id: Mapped[str] = mapped_column(String(64), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    date: Mapped[str] = mapped_column(String(10), nullable=False)
    count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    user: Mapped[User] = relationship(back_populates="message_counts")


__all__ = ["MessageCount", "User"]
