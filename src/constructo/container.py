from dependency_injector import containers, providers

from constructo.config import Settings
from constructo.db.session import build_engine, build_session_factory
from constructo.report.artifact_store import LocalArtifactStore
from constructo.report.pipeline import ReportPipeline
from constructo.workers.executor import build_executor
from constructo.workers.scheduler import ReportScheduler


class Container(containers.DeclarativeContainer):
    wiring_config = containers.WiringConfiguration(modules=["constructo.api.deps"])

    settings = providers.Singleton(Settings)

    engine = providers.Singleton(
        build_engine,
        database_url=settings.provided.database_url,
        echo=settings.provided.debug,
    )

    session_factory = providers.Singleton(
        build_session_factory,
        engine=engine,
    )

    artifact_store = providers.Singleton(
        LocalArtifactStore,
        base_dir=settings.provided.artifact_dir,
    )

    pipeline = providers.Singleton(
        ReportPipeline,
        session_factory=session_factory,
        artifact_store=artifact_store,
        settings=settings,
    )

    executor = providers.Singleton(
        build_executor,
        backend=settings.provided.executor_backend,
        pipeline=pipeline,
        session_factory=session_factory,
        stuck_job_threshold_minutes=settings.provided.stuck_job_threshold_minutes,
        sweep_interval_seconds=settings.provided.sweep_interval_seconds,
    )

    scheduler = providers.Singleton(
        ReportScheduler,
        session_factory=session_factory,
        executor=executor,
    )
