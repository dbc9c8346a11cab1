"""
User profile, follow and public journal endpoints.
"""
from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from campjournal.core.database import get_db
from campjournal.core.exceptions import NotFoundError
from campjournal.api.auth import get_current_user
from campjournal.models.journal_entry import STATUS_PUBLISHED
from campjournal.models.user import User, Profile
from campjournal.schemas.journal import JournalEntryResponse, MapLocation
from campjournal.schemas.user import (
    FollowStats,
    FollowStatus,
    ProfileResponse,
    ProfileSummary,
    ProfileUpdate,
    UserStats,
)
from campjournal.services import follow_service, journal_service, storage_service, user_service
from campjournal.services.storage_factory import get_default_storage
from campjournal.services.storage_interface import StorageInterface

router = APIRouter()


async def _profile_or_404(db: AsyncSession, username: str) -> Profile:
    profile = await user_service.get_profile_by_username(db, username)
    if not profile:
        raise NotFoundError("User not found")
    return profile


@router.get("/search", response_model=List[ProfileSummary])
async def search_users(
    q: str = Query(..., min_length=1, max_length=100),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await user_service.search_users(db, q, limit)


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    updates: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await user_service.update_profile(db, current_user.user_id, updates)


@router.post("/me/avatar", response_model=ProfileResponse)
async def upload_my_avatar(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    storage: StorageInterface = Depends(get_default_storage),
    db: AsyncSession = Depends(get_db)
):
    upload = storage_service.UploadedFile(
        filename=file.filename or "avatar",
        content_type=file.content_type or "application/octet-stream",
        data=await file.read(),
    )
    return await storage_service.upload_avatar(db, storage, current_user.user_id, upload)


@router.get("/{username}", response_model=ProfileResponse)
async def get_profile(username: str, db: AsyncSession = Depends(get_db)):
    return await _profile_or_404(db, username)


@router.get("/{username}/stats", response_model=UserStats)
async def get_user_stats(username: str, db: AsyncSession = Depends(get_db)):
    profile = await _profile_or_404(db, username)
    return await user_service.get_user_stats(db, profile.id)


@router.get("/{username}/follow-stats", response_model=FollowStats)
async def get_follow_stats(username: str, db: AsyncSession = Depends(get_db)):
    profile = await _profile_or_404(db, username)
    return await follow_service.get_follow_stats(db, profile.id)


@router.get("/{username}/followers", response_model=List[ProfileSummary])
async def get_followers(username: str, db: AsyncSession = Depends(get_db)):
    profile = await _profile_or_404(db, username)
    return await follow_service.get_followers(db, profile.id)


@router.get("/{username}/following", response_model=List[ProfileSummary])
async def get_following(username: str, db: AsyncSession = Depends(get_db)):
    profile = await _profile_or_404(db, username)
    return await follow_service.get_following(db, profile.id)


@router.get("/{username}/map", response_model=List[MapLocation])
async def get_user_map(username: str, db: AsyncSession = Depends(get_db)):
    profile = await _profile_or_404(db, username)
    return await journal_service.get_visited_locations(db, profile.id)


@router.get("/{username}/journal", response_model=List[JournalEntryResponse])
async def get_user_journal(username: str, db: AsyncSession = Depends(get_db)):
    """Another user's published entries. Drafts are never listed here."""
    profile = await _profile_or_404(db, username)
    return await journal_service.get_user_journal_entries(db, profile.id, STATUS_PUBLISHED)


@router.get("/{username}/is-following", response_model=FollowStatus)
async def get_is_following(
    username: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    profile = await _profile_or_404(db, username)
    following = await follow_service.is_following(db, current_user.user_id, profile.id)
    return FollowStatus(is_following=following)


@router.post("/{username}/follow", status_code=status.HTTP_201_CREATED)
async def follow(
    username: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    profile = await _profile_or_404(db, username)
    await follow_service.follow_user(db, current_user.user_id, profile.id)
    return {"message": f"Now following {profile.username}"}


@router.delete("/{username}/follow", status_code=status.HTTP_204_NO_CONTENT)
async def unfollow(
    username: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    profile = await _profile_or_404(db, username)
    await follow_service.unfollow_user(db, current_user.user_id, profile.id)
