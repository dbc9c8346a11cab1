"""
Follow edges between users.
"""
import logging
import uuid
from typing import List

from sqlalchemy import select, delete, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from campjournal.core.exceptions import AlreadyExistsError, NotFoundError, ValidationFailedError
from campjournal.models.follow import Follow
from campjournal.models.user import Profile
from campjournal.schemas.user import FollowStats

logger = logging.getLogger(__name__)


async def follow_user(db: AsyncSession, follower_id: uuid.UUID, following_id: uuid.UUID) -> Follow:
    if follower_id == following_id:
        raise ValidationFailedError("Cannot follow yourself")

    if not await db.get(Profile, following_id):
        raise NotFoundError("User not found")

    if await is_following(db, follower_id, following_id):
        raise AlreadyExistsError("Already following this user")

    follow = Follow(follower_id=follower_id, following_id=following_id)
    try:
        async with db.begin_nested():
            db.add(follow)
            await db.flush()
    except IntegrityError:
        raise AlreadyExistsError("Already following this user")
    await db.commit()

    logger.info(f"User {follower_id} followed {following_id}")
    return follow


async def unfollow_user(db: AsyncSession, follower_id: uuid.UUID, following_id: uuid.UUID):
    await db.execute(
        delete(Follow).where(Follow.follower_id == follower_id, Follow.following_id == following_id)
    )
    await db.commit()


async def is_following(db: AsyncSession, follower_id: uuid.UUID, following_id: uuid.UUID) -> bool:
    result = await db.execute(
        select(Follow.id).where(Follow.follower_id == follower_id, Follow.following_id == following_id)
    )
    return result.scalar_one_or_none() is not None


async def get_follow_stats(db: AsyncSession, user_id: uuid.UUID) -> FollowStats:
    followers = await db.execute(select(func.count(Follow.id)).where(Follow.following_id == user_id))
    following = await db.execute(select(func.count(Follow.id)).where(Follow.follower_id == user_id))
    return FollowStats(
        follower_count=followers.scalar() or 0,
        following_count=following.scalar() or 0,
    )


async def get_followers(db: AsyncSession, user_id: uuid.UUID) -> List[Profile]:
    result = await db.execute(
        select(Profile)
        .join(Follow, Follow.follower_id == Profile.id)
        .where(Follow.following_id == user_id)
        .order_by(Follow.created_at.desc())
    )
    return list(result.scalars().all())


async def get_following(db: AsyncSession, user_id: uuid.UUID) -> List[Profile]:
    result = await db.execute(
        select(Profile)
        .join(Follow, Follow.following_id == Profile.id)
        .where(Follow.follower_id == user_id)
        .order_by(Follow.created_at.desc())
    )
    return list(result.scalars().all())
