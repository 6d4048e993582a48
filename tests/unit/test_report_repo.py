"""Tests for ReportJobRepo and AccessRepo against in-memory sqlite."""

import uuid
from datetime import timedelta

from constructo.common.time import utcnow
from constructo.db.models import ReportJob, Subscription, Worker
from constructo.db.repos.access_repo import AccessRepo
from constructo.db.repos.report_repo import ReportJobRepo
from constructo.domain.enums import ReportStatus


async def _job(repo: ReportJobRepo, seeded, **kwargs) -> ReportJob:
    defaults = dict(
        name="Monthly",
        report_type="TASK_COMPLETION",
        scope={"company_id": str(seeded.company.id)},
        file_format="PDF",
        owner_id=seeded.owner.id,
        company_id=seeded.company.id,
    )
    defaults.update(kwargs)
    return await repo.create_job(**defaults)


class TestReportJobRepo:
    async def test_create_job_is_generating(self, session, seeded):
        repo = ReportJobRepo(session)
        job = await _job(repo, seeded)
        assert job.status == ReportStatus.GENERATING.value
        assert job.artifact_ref is None
        assert job.is_recurring is False

    async def test_create_template(self, session, seeded):
        repo = ReportJobRepo(session)
        template = await repo.create_template(
            name="Weekly", report_type="MATERIAL_INVENTORY", scope={"company_id": str(seeded.company.id)},
            file_format="EXCEL", schedule="0 8 * * 1", owner_id=seeded.owner.id, company_id=seeded.company.id,
        )
        assert template.status == ReportStatus.SCHEDULED.value
        assert template.is_recurring is True
        assert [t.id for t in await repo.list_templates()] == [template.id]

    async def test_mark_completed_sets_artifact(self, session, seeded):
        repo = ReportJobRepo(session)
        job = await _job(repo, seeded)
        job_id = job.id
        now = utcnow()
        assert await repo.mark_completed(job_id, "report_x.pdf", {"title": "T"}, now) is True
        await session.commit()
        session.expire_all()

        stored = await repo.get_by_id(job_id)
        assert stored.status == ReportStatus.COMPLETED.value
        assert stored.artifact_ref == "report_x.pdf"
        assert stored.data_snapshot == {"title": "T"}
        assert stored.generated_at == now

    async def test_terminal_status_is_final(self, session, seeded):
        repo = ReportJobRepo(session)
        job = await _job(repo, seeded)
        job_id = job.id
        assert await repo.mark_failed(job_id, "boom") is True
        assert await repo.mark_completed(job_id, "report_x.pdf", {}, utcnow()) is False
        await session.commit()
        session.expire_all()

        stored = await repo.get_by_id(job_id)
        assert stored.status == ReportStatus.FAILED.value
        assert stored.artifact_ref is None
        assert stored.error_message == "boom"

    async def test_finish_on_deleted_row(self, session, seeded):
        repo = ReportJobRepo(session)
        job = await _job(repo, seeded)
        job_id = job.id
        await repo.delete(job)
        assert await repo.mark_completed(job_id, "report_x.pdf", {}, utcnow()) is False

    async def test_fail_stuck_jobs(self, session, seeded):
        repo = ReportJobRepo(session)
        stuck = await _job(repo, seeded, name="Stuck")
        fresh = await _job(repo, seeded, name="Fresh")
        stuck.created_at = utcnow() - timedelta(hours=2)
        stuck_id, fresh_id = stuck.id, fresh.id
        await session.flush()

        count = await repo.fail_stuck_jobs(utcnow() - timedelta(minutes=30))
        await session.commit()
        session.expire_all()

        assert count == 1
        assert (await repo.get_by_id(stuck_id)).status == ReportStatus.FAILED.value
        assert (await repo.get_by_id(fresh_id)).status == ReportStatus.GENERATING.value

    async def test_list_for_owner_filters(self, session, seeded):
        repo = ReportJobRepo(session)
        await _job(repo, seeded, report_type="TASK_COMPLETION")
        await _job(repo, seeded, report_type="MATERIAL_INVENTORY")
        await _job(repo, seeded, owner_id=seeded.outsider.id)

        assert len(await repo.list_for_owner(seeded.owner.id)) == 2
        only = await repo.list_for_owner(seeded.owner.id, report_type="MATERIAL_INVENTORY")
        assert [j.report_type for j in only] == ["MATERIAL_INVENTORY"]
        assert await repo.list_for_owner(seeded.owner.id, company_id=uuid.uuid4()) == []

    async def test_get_for_owner_hides_other_users_jobs(self, session, seeded):
        repo = ReportJobRepo(session)
        job = await _job(repo, seeded)
        assert await repo.get_for_owner(job.id, seeded.outsider.id) is None
        assert (await repo.get_for_owner(job.id, seeded.owner.id)).id == job.id


class TestAccessRepo:
    async def test_active_member(self, session, seeded):
        access = AccessRepo(session)
        assert await access.has_active_membership(seeded.owner.id, seeded.company.id) is True
        assert await access.has_active_membership(seeded.outsider.id, seeded.company.id) is False

    async def test_inactive_member(self, session, seeded):
        session.add(Worker(company_id=seeded.company.id, user_id=seeded.outsider.id, status="INACTIVE"))
        await session.flush()
        assert await AccessRepo(session).has_active_membership(seeded.outsider.id, seeded.company.id) is False

    async def test_advanced_reporting(self, session, seeded):
        access = AccessRepo(session)
        assert await access.has_advanced_reporting(seeded.owner.id) is True
        assert await access.has_advanced_reporting(seeded.outsider.id) is False

    async def test_cancelled_subscription(self, session, seeded):
        session.add(Subscription(user_id=seeded.outsider.id, status="CANCELLED", has_advanced_reports=True))
        await session.flush()
        assert await AccessRepo(session).has_advanced_reporting(seeded.outsider.id) is False
