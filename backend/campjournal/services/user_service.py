"""
Profile lookups, edits, and per-user stats.
"""
import logging
import uuid
from typing import List, Optional

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from campjournal.core.exceptions import AlreadyExistsError, NotFoundError
from campjournal.models.journal_entry import JournalEntry
from campjournal.models.photo import Photo
from campjournal.models.user import Profile
from campjournal.schemas.user import ProfileUpdate, UserStats

logger = logging.getLogger(__name__)


async def get_profile_by_username(db: AsyncSession, username: str) -> Optional[Profile]:
    result = await db.execute(select(Profile).where(Profile.username == username))
    return result.scalar_one_or_none()


async def get_profile_by_id(db: AsyncSession, user_id: uuid.UUID) -> Profile:
    profile = await db.get(Profile, user_id)
    if not profile:
        raise NotFoundError("Profile not found")
    return profile


async def update_profile(db: AsyncSession, user_id: uuid.UUID, updates: ProfileUpdate) -> Profile:
    profile = await get_profile_by_id(db, user_id)
    changes = updates.model_dump(exclude_unset=True)

    new_username = changes.get("username")
    if new_username and new_username != profile.username:
        taken = await get_profile_by_username(db, new_username)
        if taken:
            raise AlreadyExistsError("Username already taken")
    elif "username" in changes and not new_username:
        changes.pop("username")

    for field, value in changes.items():
        setattr(profile, field, value)

    await db.commit()
    await db.refresh(profile)
    return profile


async def get_user_stats(db: AsyncSession, user_id: uuid.UUID) -> UserStats:
    entries = await db.execute(select(func.count(JournalEntry.id)).where(JournalEntry.user_id == user_id))
    photos = await db.execute(select(func.count(Photo.id)).where(Photo.user_id == user_id))
    return UserStats(
        total_campgrounds=entries.scalar() or 0,
        total_photos=photos.scalar() or 0,
    )


async def search_users(db: AsyncSession, query: str, limit: int = 20) -> List[Profile]:
    """Case-insensitive substring match on username or full name."""
    pattern = f"%{query.strip()}%"
    result = await db.execute(
        select(Profile)
        .where(or_(Profile.username.ilike(pattern), Profile.full_name.ilike(pattern)))
        .order_by(Profile.username)
        .limit(limit)
    )
    return list(result.scalars().all())
