"""
Periodic sweep marking stale STARTED assessments as ABANDONED.

Runs once at application startup, then every CLEANUP_INTERVAL_SECONDS.
"""

import asyncio
import logging
from typing import Callable

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cleverbadge.core.config import settings
from cleverbadge.services.assessment import AssessmentService

logger = logging.getLogger(__name__)


def run_cleanup(session_factory: Callable[[], Session]) -> int:
    db = session_factory()
    try:
        return AssessmentService.mark_expired_assessments(db)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Assessment cleanup failed: {exc}")
        return 0
    finally:
        db.close()


async def cleanup_loop(session_factory: Callable[[], Session]) -> None:
    logger.info(
        f"Assessment cleanup job started (every {settings.CLEANUP_INTERVAL_SECONDS}s, "
        f"timeout {settings.ASSESSMENT_TIMEOUT_HOURS}h)"
    )
    while True:
        await run_in_threadpool(run_cleanup, session_factory)
        await asyncio.sleep(settings.CLEANUP_INTERVAL_SECONDS)
