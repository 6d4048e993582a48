"""Read-only domain records handed to the aggregation layer.

The domain gateway converts rows of the business store into these
records; aggregation never sees ORM objects.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from constructo.domain.enums import TaskPriority, TaskStatus


class PersonRef(BaseModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class TaskRecord(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    project_name: str
    title: str
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    assignee: Optional[PersonRef] = None
    estimated_hours: float = 0.0
    actual_hours: float = 0.0
    due_date: Optional[datetime] = None
    created_at: Optional[datetime] = None


class MaterialRecord(BaseModel):
    id: uuid.UUID
    name: str
    category: Optional[str] = None
    quantity: float = 0.0
    unit: str = ""
    price: float = 0.0
    min_quantity: Optional[float] = None
    location: Optional[str] = None
    project_id: Optional[uuid.UUID] = None

    @property
    def value(self) -> float:
        return self.quantity * self.price


class ProjectRecord(BaseModel):
    id: uuid.UUID
    company_id: uuid.UUID
    name: str
    status: str = "ACTIVE"
    budget: float = 0.0
    tasks: list[TaskRecord] = []
    materials: list[MaterialRecord] = []


class WorkerRecord(BaseModel):
    """An active member of a company."""

    user: PersonRef
    position: Optional[str] = None
