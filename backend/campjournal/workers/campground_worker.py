"""
Campground maintenance tasks.
"""
import asyncio
import logging

from celery import Task

from campjournal.celery_app import celery_app
from campjournal.core.config import settings
from campjournal.core.database import Database
from campjournal.services.campground_service import backfill_missing_coordinates
from campjournal.services.places_service import PlacesClient

logger = logging.getLogger(__name__)


class LoggedTask(Task):
    def on_failure(self, exc, task_id, args, kwargs, einfo):
        logger.error(f"Task {task_id} failed: {exc}")


async def run_backfill(database: Database, places: PlacesClient, delay: float) -> dict:
    async with database.sessionmaker() as db:
        return await backfill_missing_coordinates(db, places, delay=delay)


async def _backfill(delay: float) -> dict:
    database = Database()
    places = PlacesClient()
    try:
        return await run_backfill(database, places, delay)
    finally:
        await places.aclose()
        await database.dispose()


@celery_app.task(
    name="campjournal.workers.campground_worker.backfill_coordinates",
    base=LoggedTask,
)
def backfill_coordinates(delay: float = None):
    """
    Fill missing latitude/longitude for campgrounds from place details.
    Returns counts of updated, skipped, and failed campgrounds.
    """
    if delay is None:
        delay = settings.BACKFILL_DELAY_SECONDS
    counts = asyncio.run(_backfill(delay))
    logger.info(f"Coordinate backfill finished: {counts}")
    return counts
