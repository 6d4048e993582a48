import uuid
from dataclasses import dataclass, field
from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from constructo.common.time import utcnow
from constructo.config import Settings
from constructo.db.models import Company, Material, Project, Subscription, Task, User, Worker
from constructo.db.session import Base
import constructo.db.models  # noqa: F401  register all models


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture()
async def engine():
    eng = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest.fixture()
async def session(engine) -> AsyncSession:
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as sess:
        yield sess


@pytest.fixture()
async def file_engine(tmp_path):
    """File-backed sqlite, shared by every session the pipeline opens."""
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'reports.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture()
def session_factory(file_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(file_engine, expire_on_commit=False)


@pytest.fixture()
def test_settings(tmp_path) -> Settings:
    return Settings(
        artifact_dir=str(tmp_path / "artifacts"),
        generation_timeout_seconds=30.0,
        scheduler_enabled=False,
        _env_file=None,
    )


@dataclass
class SeededCompany:
    company: Company
    owner: User
    outsider: User
    project: Project
    other_project: Project
    tasks: list[Task] = field(default_factory=list)
    materials: list[Material] = field(default_factory=list)


async def seed_company(session: AsyncSession, advanced: bool = True) -> SeededCompany:
    """One company with an active member, a non-member, two projects and some work."""
    now = utcnow()
    owner = User(first_name="Anna", last_name="Nowak", email=f"anna-{uuid.uuid4().hex[:6]}@example.com")
    builder = User(first_name="Jan", last_name="Kowalski", email=f"jan-{uuid.uuid4().hex[:6]}@example.com")
    outsider = User(first_name="Ola", last_name="Zielinska", email=f"ola-{uuid.uuid4().hex[:6]}@example.com")
    company = Company(name="Budimex Test")
    session.add_all([owner, builder, outsider, company])
    await session.flush()

    session.add_all([
        Worker(company_id=company.id, user_id=owner.id, position="Manager", status="ACTIVE"),
        Worker(company_id=company.id, user_id=builder.id, position="Builder", status="ACTIVE"),
        Subscription(user_id=owner.id, plan_name="pro" if advanced else "basic", has_advanced_reports=advanced),
    ])

    project = Project(company_id=company.id, name="Osiedle Zielone", budget=100000.0)
    other_project = Project(company_id=company.id, name="Hala Magazynowa", budget=50000.0)
    session.add_all([project, other_project])
    await session.flush()

    tasks = [
        Task(
            project_id=project.id, title="Foundations", status="DONE", priority="HIGH",
            assigned_to_id=builder.id, estimated_hours=40, actual_hours=50,
            due_date=now - timedelta(days=10), created_at=now - timedelta(days=20),
        ),
        Task(
            project_id=project.id, title="Walls", status="IN_PROGRESS", priority="MEDIUM",
            assigned_to_id=builder.id, estimated_hours=80, actual_hours=30,
            due_date=now - timedelta(days=1), created_at=now - timedelta(days=5),
        ),
        Task(
            project_id=other_project.id, title="Roof", status="TODO", priority="LOW",
            created_at=now - timedelta(days=2),
        ),
    ]
    materials = [
        Material(company_id=company.id, project_id=project.id, name="Cement", category="Binders",
                 quantity=100, unit="bag", price=25.0, min_quantity=20),
        Material(company_id=company.id, project_id=project.id, name="Rebar", category="Steel",
                 quantity=5, unit="t", price=3000.0, min_quantity=10),
        Material(company_id=company.id, name="Nails", quantity=1000, unit="szt", price=0.1),
    ]
    session.add_all(tasks + materials)
    await session.commit()
    return SeededCompany(company, owner, outsider, project, other_project, tasks, materials)


@pytest.fixture()
async def seeded(session) -> SeededCompany:
    return await seed_company(session)


@pytest.fixture()
async def seeded_db(session_factory) -> SeededCompany:
    async with session_factory() as sess:
        return await seed_company(sess)
