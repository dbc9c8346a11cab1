"""
Campground API endpoints.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID

from campjournal.core.database import get_db
from campjournal.core.exceptions import NotFoundError
from campjournal.api.auth import get_current_user
from campjournal.models.user import User
from campjournal.schemas.campground import CampgroundCreate, CampgroundFields, CampgroundResponse, CampgroundStats
from campjournal.schemas.journal import JournalEntryResponse
from campjournal.schemas.user import ProfileSummary
from campjournal.services import campground_service, journal_service
from campjournal.services.places_service import PlacesClient, get_places_client

router = APIRouter()


@router.get("", response_model=List[CampgroundResponse])
async def list_campgrounds(
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db)
):
    return await campground_service.list_campgrounds(db, limit)


@router.post("", response_model=CampgroundResponse)
async def get_or_create_campground(
    campground_data: CampgroundCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Return the campground for a place id, creating it from the given fields if needed."""
    fields = CampgroundFields(**campground_data.model_dump(exclude={"google_place_id"}))
    return await campground_service.get_or_create_campground(db, campground_data.google_place_id, fields)


@router.post("/from-place/{place_id}", response_model=CampgroundResponse, status_code=status.HTTP_200_OK)
async def campground_from_place(
    place_id: str,
    current_user: User = Depends(get_current_user),
    places: PlacesClient = Depends(get_places_client),
    db: AsyncSession = Depends(get_db)
):
    """Look a place up in the places API and get-or-create its campground."""
    details = await places.get_place_details(place_id)
    return await campground_service.get_or_create_campground(db, place_id, details.to_campground_fields())


@router.get("/by-place/{place_id}", response_model=CampgroundResponse)
async def get_campground_by_place(place_id: str, db: AsyncSession = Depends(get_db)):
    campground = await campground_service.get_campground_by_place_id(db, place_id)
    if not campground:
        raise NotFoundError("Campground not found")
    return campground


@router.get("/{campground_id}", response_model=CampgroundResponse)
async def get_campground(campground_id: UUID, db: AsyncSession = Depends(get_db)):
    return await campground_service.get_campground_by_id(db, campground_id)


@router.get("/{campground_id}/stats", response_model=CampgroundStats)
async def get_campground_stats(campground_id: UUID, db: AsyncSession = Depends(get_db)):
    return await campground_service.get_campground_stats(db, campground_id)


@router.get("/{campground_id}/visitors", response_model=List[ProfileSummary])
async def get_campground_visitors(campground_id: UUID, db: AsyncSession = Depends(get_db)):
    return await campground_service.get_campground_visitors(db, campground_id)


@router.get("/{campground_id}/entries", response_model=List[JournalEntryResponse])
async def get_campground_entries(campground_id: UUID, db: AsyncSession = Depends(get_db)):
    """Published entries from every user at this campground."""
    return await campground_service.get_campground_journal_entries(db, campground_id)


@router.get("/{campground_id}/my-entries", response_model=List[JournalEntryResponse])
async def get_my_campground_entries(
    campground_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await journal_service.get_entries_for_campground(db, current_user.user_id, campground_id)
