"""
Journal entry queries and owner-side mutations.
"""
import logging
import uuid
from datetime import date
from typing import List, Optional

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from campjournal.core.exceptions import NotFoundError, ValidationFailedError
from campjournal.models.campground import Campground
from campjournal.models.follow import Follow
from campjournal.models.journal_entry import JournalEntry, ENTRY_STATUSES, STATUS_PUBLISHED
from campjournal.models.photo import Photo
from campjournal.schemas.journal import JournalEntryCreate, JournalEntryUpdate, MapLocation

logger = logging.getLogger(__name__)


def entry_load_options():
    """Eager loads for everything a JournalEntryResponse reads."""
    return (
        selectinload(JournalEntry.campground),
        selectinload(JournalEntry.photos),
        selectinload(JournalEntry.profile),
        selectinload(JournalEntry.shared_from_profile),
        selectinload(JournalEntry.shared_with_profile),
    )


def validate_date_range(start_date: date, end_date: date):
    if end_date < start_date:
        raise ValidationFailedError("End date must be on or after start date")


async def load_entry(db: AsyncSession, entry_id: uuid.UUID, *criteria) -> Optional[JournalEntry]:
    """Fetch one entry with its relationships, or None."""
    result = await db.execute(
        select(JournalEntry)
        .options(*entry_load_options())
        .where(JournalEntry.id == entry_id, *criteria)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_user_journal_entries(db: AsyncSession, user_id: uuid.UUID, status: Optional[str] = None) -> List[JournalEntry]:
    query = select(JournalEntry).options(*entry_load_options()).where(JournalEntry.user_id == user_id)
    if status is not None:
        if status not in ENTRY_STATUSES:
            raise ValidationFailedError(f"Unknown status '{status}'")
        query = query.where(JournalEntry.status == status)
    result = await db.execute(query.order_by(JournalEntry.start_date.desc(), JournalEntry.created_at.desc()))
    return list(result.scalars().all())


async def get_journal_entry(db: AsyncSession, entry_id: uuid.UUID) -> JournalEntry:
    entry = await load_entry(db, entry_id)
    if not entry:
        raise NotFoundError("Journal entry not found")
    return entry


async def create_journal_entry(db: AsyncSession, user_id: uuid.UUID, data: JournalEntryCreate) -> JournalEntry:
    validate_date_range(data.start_date, data.end_date)

    if not await db.get(Campground, data.campground_id):
        raise NotFoundError("Campground not found")

    entry = JournalEntry(
        user_id=user_id,
        campground_id=data.campground_id,
        start_date=data.start_date,
        end_date=data.end_date,
        notes=data.notes,
        video_url=data.video_url,
        is_favorite=data.is_favorite,
        status=STATUS_PUBLISHED,
    )
    db.add(entry)
    await db.commit()
    logger.info(f"Created journal entry {entry.id} for user {user_id} at campground {data.campground_id}")

    return await load_entry(db, entry.id)


async def update_journal_entry(db: AsyncSession, entry_id: uuid.UUID, user_id: uuid.UUID, updates: JournalEntryUpdate) -> JournalEntry:
    entry = await load_entry(db, entry_id, JournalEntry.user_id == user_id)
    if not entry:
        raise NotFoundError("Journal entry not found")

    changes = updates.model_dump(exclude_unset=True)
    # Required columns: an explicit null leaves the stored value
    for field in ("start_date", "end_date", "is_favorite"):
        if field in changes and changes[field] is None:
            del changes[field]

    validate_date_range(
        changes.get("start_date", entry.start_date),
        changes.get("end_date", entry.end_date),
    )

    for field, value in changes.items():
        setattr(entry, field, value)

    await db.commit()
    return await load_entry(db, entry.id)


async def delete_entry_rows(db: AsyncSession, entry_id: uuid.UUID):
    """Delete an entry and its photo rows. Stored objects are left alone."""
    await db.execute(delete(Photo).where(Photo.journal_entry_id == entry_id))
    await db.execute(delete(JournalEntry).where(JournalEntry.id == entry_id))


async def delete_journal_entry(db: AsyncSession, entry_id: uuid.UUID, user_id: uuid.UUID):
    result = await db.execute(
        select(JournalEntry.id).where(JournalEntry.id == entry_id, JournalEntry.user_id == user_id)
    )
    if result.scalar_one_or_none() is None:
        raise NotFoundError("Journal entry not found")

    await delete_entry_rows(db, entry_id)
    await db.commit()
    logger.info(f"Deleted journal entry {entry_id}")


async def get_entries_for_campground(db: AsyncSession, user_id: uuid.UUID, campground_id: uuid.UUID) -> List[JournalEntry]:
    result = await db.execute(
        select(JournalEntry)
        .options(*entry_load_options())
        .where(JournalEntry.user_id == user_id, JournalEntry.campground_id == campground_id)
        .order_by(JournalEntry.start_date.desc())
    )
    return list(result.scalars().all())


async def get_feed_entries(db: AsyncSession, user_id: uuid.UUID, limit: int = 50) -> List[JournalEntry]:
    """Published entries from everyone the user follows, newest first."""
    following = select(Follow.following_id).where(Follow.follower_id == user_id)

    result = await db.execute(
        select(JournalEntry)
        .options(*entry_load_options())
        .where(
            JournalEntry.user_id.in_(following),
            JournalEntry.status == STATUS_PUBLISHED,
        )
        .order_by(JournalEntry.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_visited_locations(db: AsyncSession, user_id: uuid.UUID) -> List[MapLocation]:
    """One map marker per campground the user has a published entry for."""
    result = await db.execute(
        select(JournalEntry, Campground)
        .join(Campground, JournalEntry.campground_id == Campground.id)
        .where(
            JournalEntry.user_id == user_id,
            JournalEntry.status == STATUS_PUBLISHED,
            Campground.latitude.is_not(None),
            Campground.longitude.is_not(None),
        )
        .order_by(JournalEntry.start_date)
    )

    markers = {}
    for entry, campground in result.all():
        marker = markers.get(campground.id)
        if marker is None:
            markers[campground.id] = MapLocation(
                campground_id=campground.id,
                name=campground.name,
                latitude=campground.latitude,
                longitude=campground.longitude,
                visit_count=1,
                last_visited=entry.end_date,
                is_favorite=entry.is_favorite,
            )
        else:
            marker.visit_count += 1
            marker.last_visited = max(marker.last_visited, entry.end_date)
            marker.is_favorite = marker.is_favorite or entry.is_favorite

    return list(markers.values())
