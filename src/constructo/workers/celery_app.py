"""Celery application for out-of-process report generation."""

from celery import Celery

from constructo.config import settings

celery_app = Celery(
    "constructo",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["constructo.workers.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=int(settings.generation_timeout_seconds * 2),
    worker_prefetch_multiplier=1,
    task_acks_late=True,  # Re-queue on worker crash
    task_reject_on_worker_lost=True,
    result_expires=86400,
)

celery_app.conf.beat_schedule = {
    "reconcile-stuck-reports": {
        "task": "constructo.reconcile_stuck_reports",
        "schedule": settings.sweep_interval_seconds,
    },
}
