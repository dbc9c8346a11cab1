"""
Campground lookups, lazy creation, and per-campground social data.
"""
import asyncio
import logging
import uuid
from typing import List, Optional

from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from campjournal.core.exceptions import NotFoundError
from campjournal.models.campground import Campground
from campjournal.models.journal_entry import JournalEntry, STATUS_PUBLISHED
from campjournal.models.photo import Photo
from campjournal.models.user import Profile
from campjournal.schemas.campground import CampgroundFields, CampgroundStats
from campjournal.services.journal_service import entry_load_options

logger = logging.getLogger(__name__)


async def get_campground_by_place_id(db: AsyncSession, google_place_id: str) -> Optional[Campground]:
    result = await db.execute(select(Campground).where(Campground.google_place_id == google_place_id))
    return result.scalar_one_or_none()


async def get_campground_by_id(db: AsyncSession, campground_id: uuid.UUID) -> Campground:
    campground = await db.get(Campground, campground_id)
    if not campground:
        raise NotFoundError("Campground not found")
    return campground


async def create_campground(db: AsyncSession, google_place_id: str, fields: CampgroundFields) -> Campground:
    """Insert a campground. Raises IntegrityError when the place id exists."""
    campground = Campground(google_place_id=google_place_id, **fields.model_dump())
    async with db.begin_nested():
        db.add(campground)
        await db.flush()
    await db.commit()
    logger.info(f"Created campground {campground.id} for place {google_place_id}")
    return campground


async def get_or_create_campground(db: AsyncSession, google_place_id: str, fields: CampgroundFields) -> Campground:
    """
    Return the campground for a place id, creating it on first use.

    An existing row missing coordinates is patched when `fields` carries them.
    A unique violation on insert means a concurrent caller created the row
    first; the winner's row is fetched and returned.
    """
    existing = await get_campground_by_place_id(db, google_place_id)
    if existing:
        if not existing.has_coordinates and fields.latitude is not None and fields.longitude is not None:
            existing.latitude = fields.latitude
            existing.longitude = fields.longitude
            await db.commit()
            logger.info(f"Filled missing coordinates for campground {existing.id}")
        return existing

    try:
        return await create_campground(db, google_place_id, fields)
    except IntegrityError:
        logger.info(f"Campground for place {google_place_id} already exists, fetching")
        winner = await get_campground_by_place_id(db, google_place_id)
        if winner:
            return winner
        raise


async def list_campgrounds(db: AsyncSession, limit: int = 50) -> List[Campground]:
    result = await db.execute(
        select(Campground).order_by(Campground.created_at.desc()).limit(limit)
    )
    return list(result.scalars().all())


async def get_campground_stats(db: AsyncSession, campground_id: uuid.UUID) -> CampgroundStats:
    campground = await get_campground_by_id(db, campground_id)

    visits = await db.execute(
        select(func.count(JournalEntry.id), func.count(func.distinct(JournalEntry.user_id))).where(
            JournalEntry.campground_id == campground_id,
            JournalEntry.status == STATUS_PUBLISHED,
        )
    )
    total_visits, total_visitors = visits.one()

    photos = await db.execute(select(func.count(Photo.id)).where(Photo.campground_id == campground_id))

    return CampgroundStats(
        id=campground.id,
        name=campground.name,
        total_visits=total_visits or 0,
        total_visitors=total_visitors or 0,
        total_photos=photos.scalar() or 0,
    )


async def get_campground_visitors(db: AsyncSession, campground_id: uuid.UUID) -> List[Profile]:
    """Profiles of everyone with a published entry at this campground."""
    result = await db.execute(
        select(Profile)
        .join(JournalEntry, JournalEntry.user_id == Profile.id)
        .where(
            JournalEntry.campground_id == campground_id,
            JournalEntry.status == STATUS_PUBLISHED,
        )
        .distinct()
        .order_by(Profile.username)
    )
    return list(result.scalars().all())


async def get_campground_journal_entries(db: AsyncSession, campground_id: uuid.UUID, limit: int = 50) -> List[JournalEntry]:
    result = await db.execute(
        select(JournalEntry)
        .options(*entry_load_options())
        .where(
            JournalEntry.campground_id == campground_id,
            JournalEntry.status == STATUS_PUBLISHED,
        )
        .order_by(JournalEntry.start_date.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def backfill_missing_coordinates(db: AsyncSession, places, delay: float = 0.0) -> dict:
    """
    Fill latitude/longitude for campgrounds created without them.

    Each campground is looked up independently; a failed lookup is logged and
    skipped. Returns counts of updated, skipped, and failed campgrounds.
    """
    result = await db.execute(
        select(Campground).where(or_(Campground.latitude.is_(None), Campground.longitude.is_(None)))
    )
    campgrounds = result.scalars().all()

    counts = {"updated": 0, "skipped": 0, "failed": 0}
    if not campgrounds:
        logger.info("All campgrounds already have coordinates")
        return counts

    logger.info(f"Found {len(campgrounds)} campgrounds missing coordinates")

    for campground in campgrounds:
        try:
            details = await places.get_place_details(campground.google_place_id)
        except Exception as e:
            logger.error(f"Error fetching details for {campground.name}: {e}")
            counts["failed"] += 1
            continue

        if details.latitude is not None and details.longitude is not None:
            campground.latitude = details.latitude
            campground.longitude = details.longitude
            await db.commit()
            counts["updated"] += 1
            logger.info(f"Updated {campground.name} with coords: {details.latitude}, {details.longitude}")
        else:
            counts["skipped"] += 1
            logger.warning(f"No coordinates found for {campground.name}")

        if delay:
            await asyncio.sleep(delay)

    return counts
