import uuid
from typing import AsyncGenerator, Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from constructo.container import Container
from constructo.report.artifact_store import ArtifactStore
from constructo.report.service import ReportService
from constructo.workers.executor import ReportExecutor
from constructo.workers.scheduler import ReportScheduler


@inject
async def get_db(
    session_factory: async_sessionmaker[AsyncSession] = Depends(Provide[Container.session_factory]),
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@inject
def get_executor(executor: ReportExecutor = Depends(Provide[Container.executor])) -> ReportExecutor:
    return executor


@inject
def get_scheduler(scheduler: ReportScheduler = Depends(Provide[Container.scheduler])) -> ReportScheduler:
    return scheduler


@inject
def get_artifact_store(store: ArtifactStore = Depends(Provide[Container.artifact_store])) -> ArtifactStore:
    return store


async def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> uuid.UUID:
    """Caller identity as established by the authentication layer in front of us."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        return uuid.UUID(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid user id")


def get_report_service(
    db: AsyncSession = Depends(get_db),
    executor: ReportExecutor = Depends(get_executor),
    scheduler: ReportScheduler = Depends(get_scheduler),
    artifact_store: ArtifactStore = Depends(get_artifact_store),
) -> ReportService:
    return ReportService(db, executor, scheduler, artifact_store)
