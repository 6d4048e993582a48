"""Users, companies and memberships — read-only for the report engine."""

import uuid
from typing import Optional

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from constructo.db.session import Base, TimestampMixin, UUIDPrimaryKey
from constructo.domain.enums import WorkerStatus


class User(UUIDPrimaryKey, TimestampMixin, Base):
    __tablename__ = "users"

    first_name: Mapped[str] = mapped_column(String(100))
    last_name: Mapped[str] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(String(255), unique=True)


class Company(UUIDPrimaryKey, TimestampMixin, Base):
    __tablename__ = "companies"

    name: Mapped[str] = mapped_column(String(255))

    workers: Mapped[list["Worker"]] = relationship(back_populates="company", lazy="selectin")


class Worker(UUIDPrimaryKey, TimestampMixin, Base):
    """Membership of a user in a company."""

    __tablename__ = "workers"

    company_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("companies.id"), index=True)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), index=True)
    position: Mapped[Optional[str]] = mapped_column(String(100), default=None)
    status: Mapped[str] = mapped_column(String(20), default=WorkerStatus.ACTIVE.value)

    company: Mapped[Company] = relationship(back_populates="workers")
    user: Mapped[User] = relationship(lazy="selectin")


class Subscription(UUIDPrimaryKey, TimestampMixin, Base):
    """Billing entitlement snapshot; only the reporting flag matters here."""

    __tablename__ = "subscriptions"

    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), unique=True)
    plan_name: Mapped[str] = mapped_column(String(50), default="free")
    status: Mapped[str] = mapped_column(String(20), default="ACTIVE")  # ACTIVE / CANCELLED / EXPIRED
    has_advanced_reports: Mapped[bool] = mapped_column(default=False)
