# cleverbadge/main.py
import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cleverbadge.core.config import settings
from cleverbadge.db.init_db import create_tables
from cleverbadge.db.session import SessionLocal, engine
from cleverbadge.jobs.assessment_cleanup import cleanup_loop

# Import routers (router objects, not modules)
from cleverbadge.api.assessment import router as assessment_router
from cleverbadge.api.assessment_report import router as assessment_report_router
from cleverbadge.api.questions import router as questions_router
from cleverbadge.api.tests import router as tests_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting Clever Badge API (assessment timeout {settings.ASSESSMENT_TIMEOUT_HOURS}h)")
    if settings.AUTO_CREATE_TABLES:
        create_tables(engine)

    task = None
    if settings.CLEANUP_ENABLED:
        task = asyncio.create_task(cleanup_loop(SessionLocal))
    try:
        yield
    finally:
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task


app = FastAPI(
    title="Clever Badge",
    version="1.0.0",
    lifespan=lifespan,
)

# --------------------------------------------------
# CORS CONFIG
# --------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    # allow origin variations on localhost (ports) during development
    allow_origin_regex=r"http://localhost(:[0-9]+)?",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --------------------------------------------------
# API ROUTES
# --------------------------------------------------

# Question bank (create, list)
app.include_router(
    questions_router,
    prefix="/api",
)

# Tests (create, list, public landing, analytics)
app.include_router(
    tests_router,
    prefix="/api",
)

# Assessments (start, answer, resume check, submit, review)
app.include_router(
    assessment_router,
    prefix="/api",
)

# Assessment Reports (view / download report)
app.include_router(
    assessment_report_router,
    prefix="/api",
)

# --------------------------------------------------
# ROOT HEALTH CHECK
# --------------------------------------------------
@app.get("/")
def health_check():
    return {
        "status": "ok",
        "service": "Clever Badge",
        "version": "1.0.0"
    }
