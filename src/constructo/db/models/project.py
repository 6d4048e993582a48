"""Projects, tasks and materials — read-only for the report engine."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from constructo.db.session import Base, TimestampMixin, UUIDPrimaryKey
from constructo.domain.enums import TaskPriority, TaskStatus


class Project(UUIDPrimaryKey, TimestampMixin, Base):
    __tablename__ = "projects"

    company_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("companies.id"), index=True)
    name: Mapped[str] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(String(20), default="ACTIVE")
    budget: Mapped[Optional[float]] = mapped_column(Numeric(14, 2, asdecimal=False), default=None)

    tasks: Mapped[list["Task"]] = relationship(back_populates="project", lazy="selectin")
    materials: Mapped[list["Material"]] = relationship(back_populates="project", lazy="selectin")


class Task(UUIDPrimaryKey, TimestampMixin, Base):
    __tablename__ = "tasks"

    project_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("projects.id"), index=True)
    title: Mapped[str] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(String(20), default=TaskStatus.TODO.value)
    priority: Mapped[str] = mapped_column(String(20), default=TaskPriority.MEDIUM.value)
    assigned_to_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("users.id"), default=None)
    estimated_hours: Mapped[Optional[float]] = mapped_column(default=None)
    actual_hours: Mapped[Optional[float]] = mapped_column(default=None)
    due_date: Mapped[Optional[datetime]] = mapped_column(default=None)

    project: Mapped[Project] = relationship(back_populates="tasks")
    assigned_to: Mapped[Optional["User"]] = relationship(lazy="selectin")  # noqa: F821


class Material(UUIDPrimaryKey, TimestampMixin, Base):
    __tablename__ = "materials"

    company_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("companies.id"), index=True)
    project_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("projects.id"), default=None)
    name: Mapped[str] = mapped_column(String(255))
    category: Mapped[Optional[str]] = mapped_column(String(100), default=None)
    quantity: Mapped[float] = mapped_column(default=0.0)
    unit: Mapped[str] = mapped_column(String(20), default="szt")
    price: Mapped[Optional[float]] = mapped_column(Numeric(14, 2, asdecimal=False), default=None)
    min_quantity: Mapped[Optional[float]] = mapped_column(default=None)
    location: Mapped[Optional[str]] = mapped_column(String(255), default=None)

    project: Mapped[Optional[Project]] = relationship(back_populates="materials")
