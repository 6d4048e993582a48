"""Seed a demo construction company for trying out report generation.

Usage:
    PYTHONPATH=src python scripts/seed_demo_company.py

Idempotent: skips the company if one with the same name already exists.
Creates a manager with the advanced reporting plan, one builder, two projects
with tasks and a small material inventory.

After seeding, request a report with the printed ids:
    curl -X POST localhost:8000/api/reports/generate -H "X-User-Id: <manager id>" \\
         -H "Content-Type: application/json" \\
         -d '{"name": "Status", "type": "PROJECT_SUMMARY", "config": {"companyId": "...", "projectId": "..."}}'
"""

import asyncio
import logging
import sys
from datetime import timedelta

from constructo.logging import configure_logging

configure_logging("INFO")
logger = logging.getLogger("seed_demo_company")

COMPANY_NAME = "Demo Budownictwo Sp. z o.o."

PROJECTS = [
    {
        "name": "Osiedle Słoneczne",
        "budget": 250000.0,
        "tasks": [
            # title, status, priority, estimated, actual, due in days
            ("Wykopy", "DONE", "HIGH", 60, 72, -30),
            ("Fundamenty", "DONE", "URGENT", 120, 110, -10),
            ("Ściany parteru", "IN_PROGRESS", "HIGH", 200, 90, 14),
            ("Instalacja elektryczna", "TODO", "MEDIUM", 80, None, 45),
        ],
        "materials": [
            # name, category, quantity, unit, price, min quantity
            ("Cement CEM II", "Spoiwa", 120, "worek", 28.5, 40),
            ("Pręt zbrojeniowy 12mm", "Stal", 8, "t", 3400.0, 10),
            ("Bloczek betonowy", "Murowe", 2500, "szt", 4.2, 500),
        ],
    },
    {
        "name": "Hala Logistyczna B",
        "budget": 480000.0,
        "tasks": [
            ("Projekt wykonawczy", "REVIEW", "MEDIUM", 40, 44, -5),
            ("Konstrukcja stalowa", "TODO", "HIGH", 320, None, 60),
        ],
        "materials": [
            ("Blacha trapezowa", "Pokrycia", 300, "m2", 45.0, 100),
        ],
    },
]


def separator(title: str) -> None:
    print(f"\n{'=' * 60}")
    print(f"  {title}")
    print(f"{'=' * 60}\n")


async def main() -> None:
    from constructo.config import settings
    from constructo.db.session import build_engine, build_session_factory

    separator("Seed: Demo Construction Company")
    print(f"Database: {settings.db_host}:{settings.db_port}/{settings.db_name}\n")

    engine = build_engine(settings.database_url, echo=False)
    session_factory = build_session_factory(engine)

    async with session_factory() as session:
        try:
            await seed(session)
            await session.commit()
        except Exception:
            await session.rollback()
            logger.exception("Seeding failed")
            sys.exit(1)

    await engine.dispose()
    separator("Seeding Complete")


async def seed(session) -> None:
    from sqlalchemy import select

    from constructo.common.time import utcnow
    from constructo.db.models import Company, Material, Project, Subscription, Task, User, Worker

    existing = (await session.execute(select(Company).where(Company.name == COMPANY_NAME))).scalar_one_or_none()
    if existing is not None:
        print(f"Company: {existing.name}  [existing]  id={existing.id}")
        return

    now = utcnow()
    manager = User(first_name="Katarzyna", last_name="Wiśniewska", email="manager@demo-budownictwo.pl")
    builder = User(first_name="Piotr", last_name="Mazur", email="builder@demo-budownictwo.pl")
    company = Company(name=COMPANY_NAME)
    session.add_all([manager, builder, company])
    await session.flush()

    session.add_all([
        Worker(company_id=company.id, user_id=manager.id, position="Kierownik budowy"),
        Worker(company_id=company.id, user_id=builder.id, position="Murarz"),
        Subscription(user_id=manager.id, plan_name="business", has_advanced_reports=True),
    ])

    print(f"Company: {company.name}  [created]  id={company.id}")
    print(f"  Manager: {manager.first_name} {manager.last_name}  id={manager.id}")
    print(f"  Builder: {builder.first_name} {builder.last_name}  id={builder.id}\n")

    total_tasks = 0
    total_materials = 0
    for definition in PROJECTS:
        project = Project(company_id=company.id, name=definition["name"], budget=definition["budget"])
        session.add(project)
        await session.flush()

        for title, status, priority, estimated, actual, due_in in definition["tasks"]:
            session.add(Task(
                project_id=project.id,
                title=title,
                status=status,
                priority=priority,
                assigned_to_id=builder.id if actual is not None else None,
                estimated_hours=estimated,
                actual_hours=actual,
                due_date=now + timedelta(days=due_in),
            ))
            total_tasks += 1

        for name, category, quantity, unit, price, min_quantity in definition["materials"]:
            session.add(Material(
                company_id=company.id,
                project_id=project.id,
                name=name,
                category=category,
                quantity=quantity,
                unit=unit,
                price=price,
                min_quantity=min_quantity,
            ))
            total_materials += 1

        print(f"  Project: {project.name:<30s}  id={project.id}")

    print(f"\nDone. {len(PROJECTS)} projects, {total_tasks} tasks, {total_materials} materials created.")


if __name__ == "__main__":
    asyncio.run(main())
