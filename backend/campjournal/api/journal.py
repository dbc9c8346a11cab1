"""
Journal API endpoints: the user's own entries, the feed, photos, and the
share / accept / reject draft workflow.
"""
from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Literal, Optional
from uuid import UUID

from campjournal.core.database import get_db
from campjournal.core.exceptions import NotFoundError
from campjournal.api.auth import get_current_user
from campjournal.models.user import User
from campjournal.schemas.journal import (
    JournalEntryCreate,
    JournalEntryUpdate,
    JournalEntryResponse,
    MapLocation,
    PhotoResponse,
    ShareEntryRequest,
)
from campjournal.services import journal_service, sharing_service, storage_service
from campjournal.services.storage_factory import get_default_storage
from campjournal.services.storage_interface import StorageInterface

router = APIRouter()


@router.get("", response_model=List[JournalEntryResponse])
async def list_my_entries(
    status_filter: Optional[Literal["published", "draft"]] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List the current user's entries, newest visit first."""
    return await journal_service.get_user_journal_entries(db, current_user.user_id, status_filter)


@router.post("", response_model=JournalEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_entry(
    entry_data: JournalEntryCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await journal_service.create_journal_entry(db, current_user.user_id, entry_data)


@router.get("/feed", response_model=List[JournalEntryResponse])
async def get_feed(
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Published entries from followed users."""
    return await journal_service.get_feed_entries(db, current_user.user_id, limit)


@router.get("/map", response_model=List[MapLocation])
async def get_my_map(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await journal_service.get_visited_locations(db, current_user.user_id)


@router.get("/{entry_id}", response_model=JournalEntryResponse)
async def get_entry(
    entry_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get an entry. Drafts are visible to their owner only."""
    entry = await journal_service.get_journal_entry(db, entry_id)
    if entry.is_draft and entry.user_id != current_user.user_id:
        raise NotFoundError("Journal entry not found")
    return entry


@router.patch("/{entry_id}", response_model=JournalEntryResponse)
async def update_entry(
    entry_id: UUID,
    updates: JournalEntryUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await journal_service.update_journal_entry(db, entry_id, current_user.user_id, updates)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(
    entry_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await journal_service.delete_journal_entry(db, entry_id, current_user.user_id)


# --- Photos ---

@router.get("/{entry_id}/photos", response_model=List[PhotoResponse])
async def list_entry_photos(
    entry_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    entry = await journal_service.get_journal_entry(db, entry_id)
    if entry.is_draft and entry.user_id != current_user.user_id:
        raise NotFoundError("Journal entry not found")
    return await storage_service.get_photos_for_journal_entry(db, entry_id)


@router.post("/{entry_id}/photos", response_model=List[PhotoResponse], status_code=status.HTTP_201_CREATED)
async def upload_entry_photos(
    entry_id: UUID,
    files: List[UploadFile] = File(...),
    current_user: User = Depends(get_current_user),
    storage: StorageInterface = Depends(get_default_storage),
    db: AsyncSession = Depends(get_db)
):
    """
    Upload one or more photos to an entry.
    Photos that fail validation or upload are skipped; the response lists
    the ones that were saved.
    """
    entry = await journal_service.get_journal_entry(db, entry_id)
    if entry.user_id != current_user.user_id:
        raise NotFoundError("Journal entry not found")

    uploads = [
        storage_service.UploadedFile(
            filename=f.filename or "photo",
            content_type=f.content_type or "application/octet-stream",
            data=await f.read(),
        )
        for f in files
    ]
    return await storage_service.upload_entry_photos(db, storage, entry, current_user.user_id, uploads)


# --- Sharing ---

@router.post("/{entry_id}/share", response_model=JournalEntryResponse, status_code=status.HTTP_201_CREATED)
async def share_entry(
    entry_id: UUID,
    request: ShareEntryRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Copy an entry into another user's journal as a draft."""
    return await sharing_service.share_entry(db, entry_id, request.recipient_id, current_user.user_id)


@router.post("/{entry_id}/accept", response_model=JournalEntryResponse)
async def accept_draft(
    entry_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await sharing_service.accept_draft(db, entry_id, current_user.user_id)


@router.post("/{entry_id}/reject", status_code=status.HTTP_204_NO_CONTENT)
async def reject_draft(
    entry_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Permanently delete a draft shared with the current user."""
    await sharing_service.reject_draft(db, entry_id, current_user.user_id)
