import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .config import settings
from .db.database import local_session
from .services.verification import purge_expired_codes

logger = logging.getLogger(__name__)


async def purge_expired_codes_async(session_factory: async_sessionmaker[AsyncSession] = local_session) -> int:
    """Scheduled task that drops verification codes past their expiry."""
    try:
        async with session_factory() as db:
            removed = await purge_expired_codes(db)
    except SQLAlchemyError:
        logger.exception("[APScheduler] Failed to purge expired verification codes")
        return 0

    if removed:
        logger.info("[APScheduler] Purged %d expired verification codes", removed)
    return removed


def schedule_apscheduler_job(app: FastAPI) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        purge_expired_codes_async,
        "interval",
        minutes=settings.VERIFICATION_PURGE_INTERVAL_MINUTES,
        id="purge_expired_codes",
        replace_existing=True,
    )
    scheduler.start()
    app.state.apscheduler = scheduler
    return scheduler


def shutdown_apscheduler(app: FastAPI) -> None:
    scheduler: AsyncIOScheduler | None = getattr(app.state, "apscheduler", None)
    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=False)
