import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from constructo.api.reports import router as reports_router
from constructo.container import Container
from constructo.exceptions import ReportError
from constructo.logging import configure_logging
from constructo.report.pipeline import reconcile_stuck_jobs

logger = logging.getLogger("constructo.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = Container()
    app.state.container = container
    settings = container.settings()
    configure_logging(settings.log_level)

    session_factory = container.session_factory()
    # Jobs left GENERATING by a previous process will never finish
    await reconcile_stuck_jobs(session_factory, settings.stuck_job_threshold_minutes)

    executor = container.executor()
    await executor.start()
    scheduler = container.scheduler()
    if settings.scheduler_enabled:
        await scheduler.start()

    yield

    await scheduler.stop()
    await executor.stop()
    engine = container.engine()
    await engine.dispose()


app = FastAPI(title="Constructo Reports", version="0.1.0", lifespan=lifespan)


@app.exception_handler(ReportError)
async def report_error_handler(request: Request, exc: ReportError):
    if exc.status_code >= 500:
        logger.error("Report error on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error("Unhandled error on %s %s:\n%s", request.method, request.url.path, "".join(tb))
    return JSONResponse(status_code=500, content={"detail": str(exc)})


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(reports_router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}
