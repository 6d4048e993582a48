import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from constructo.db.models.company import Subscription, Worker
from constructo.domain.enums import WorkerStatus


class AccessRepo:
    """Membership and entitlement checks used when a report is requested."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def has_active_membership(self, user_id: uuid.UUID, company_id: uuid.UUID) -> bool:
        result = await self._session.execute(
            select(Worker.id).where(
                Worker.user_id == user_id,
                Worker.company_id == company_id,
                Worker.status == WorkerStatus.ACTIVE.value,
            ).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def has_advanced_reporting(self, user_id: uuid.UUID) -> bool:
        result = await self._session.execute(
            select(Subscription).where(Subscription.user_id == user_id)
        )
        subscription = result.scalar_one_or_none()
        if subscription is None:
            return False
        return subscription.status == "ACTIVE" and subscription.has_advanced_reports
