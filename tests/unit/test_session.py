"""Tests for the declarative base and session helpers."""

from datetime import timedelta

from sqlalchemy import update

from constructo.common.time import utcnow
from constructo.db.models import Company
from constructo.db.session import build_session_factory


class TestTimestampMixin:
    async def test_timestamps_filled_on_insert(self, session):
        before = utcnow()
        company = Company(name="Timestamps Sp. z o.o.")
        session.add(company)
        await session.flush()

        assert company.created_at.tzinfo is None
        assert company.created_at >= before
        assert company.updated_at >= before

    async def test_updated_at_moves_on_update(self, session):
        company = Company(name="Before")
        session.add(company)
        await session.flush()
        old = utcnow() - timedelta(days=1)
        await session.execute(update(Company).where(Company.id == company.id).values(updated_at=old))
        await session.refresh(company)
        assert company.updated_at == old

        company.name = "After"
        await session.flush()
        assert company.updated_at > old


class TestSessionFactory:
    async def test_rows_readable_after_commit(self, engine):
        factory = build_session_factory(engine)
        async with factory() as session:
            company = Company(name="Committed")
            session.add(company)
            await session.commit()
            # No lazy refresh is needed once the transaction is closed
            assert company.name == "Committed"
            assert company.created_at is not None
