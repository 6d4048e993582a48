"""DomainGateway — read-only queries against the business store."""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from constructo.db.models.company import Company, User, Worker
from constructo.db.models.project import Material, Project, Task
from constructo.domain.enums import WorkerStatus
from constructo.domain.models.records import (
    MaterialRecord,
    PersonRef,
    ProjectRecord,
    TaskRecord,
    WorkerRecord,
)


def _person(user: Optional[User]) -> Optional[PersonRef]:
    if user is None:
        return None
    return PersonRef(id=user.id, first_name=user.first_name, last_name=user.last_name, email=user.email)


def _task(task: Task, project_name: str) -> TaskRecord:
    return TaskRecord(
        id=task.id,
        project_id=task.project_id,
        project_name=project_name,
        title=task.title,
        status=task.status,
        priority=task.priority,
        assignee=_person(task.assigned_to),
        estimated_hours=task.estimated_hours or 0.0,
        actual_hours=task.actual_hours or 0.0,
        due_date=task.due_date,
        created_at=task.created_at,
    )


def _material(material: Material) -> MaterialRecord:
    return MaterialRecord(
        id=material.id,
        name=material.name,
        category=material.category,
        quantity=material.quantity or 0.0,
        unit=material.unit,
        price=material.price or 0.0,
        min_quantity=material.min_quantity,
        location=material.location,
        project_id=material.project_id,
    )


def _project(project: Project) -> ProjectRecord:
    return ProjectRecord(
        id=project.id,
        company_id=project.company_id,
        name=project.name,
        status=project.status,
        budget=project.budget or 0.0,
        tasks=[_task(t, project.name) for t in sorted(project.tasks, key=lambda t: t.title)],
        materials=[_material(m) for m in sorted(project.materials, key=lambda m: m.name)],
    )


class DomainGateway:
    """Loads domain records for aggregation. Never writes."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def company_exists(self, company_id: uuid.UUID) -> bool:
        result = await self._session.execute(select(Company.id).where(Company.id == company_id))
        return result.scalar_one_or_none() is not None

    async def get_project(self, project_id: uuid.UUID) -> Optional[ProjectRecord]:
        result = await self._session.execute(
            select(Project)
            .where(Project.id == project_id)
            .options(
                selectinload(Project.tasks).selectinload(Task.assigned_to),
                selectinload(Project.materials),
            )
        )
        project = result.scalar_one_or_none()
        return _project(project) if project is not None else None

    async def list_projects(self, company_id: uuid.UUID) -> list[ProjectRecord]:
        result = await self._session.execute(
            select(Project)
            .where(Project.company_id == company_id)
            .options(
                selectinload(Project.tasks).selectinload(Task.assigned_to),
                selectinload(Project.materials),
            )
            .order_by(Project.name.asc())
        )
        return [_project(p) for p in result.scalars().all()]

    async def list_tasks(
        self, company_id: uuid.UUID, project_id: Optional[uuid.UUID] = None
    ) -> list[TaskRecord]:
        stmt = (
            select(Task, Project.name)
            .join(Project, Task.project_id == Project.id)
            .where(Project.company_id == company_id)
            .options(selectinload(Task.assigned_to))
            .order_by(Task.created_at.desc(), Task.title.asc())
        )
        if project_id is not None:
            stmt = stmt.where(Task.project_id == project_id)
        result = await self._session.execute(stmt)
        return [_task(task, project_name) for task, project_name in result.all()]

    async def list_materials(self, company_id: uuid.UUID) -> list[MaterialRecord]:
        result = await self._session.execute(
            select(Material).where(Material.company_id == company_id).order_by(Material.name.asc())
        )
        return [_material(m) for m in result.scalars().all()]

    async def list_active_workers(self, company_id: uuid.UUID) -> list[WorkerRecord]:
        result = await self._session.execute(
            select(Worker)
            .join(User, Worker.user_id == User.id)
            .where(Worker.company_id == company_id, Worker.status == WorkerStatus.ACTIVE.value)
            .options(selectinload(Worker.user))
            .order_by(User.last_name.asc(), User.first_name.asc())
        )
        return [
            WorkerRecord(user=_person(w.user), position=w.position)
            for w in result.scalars().all()
        ]
