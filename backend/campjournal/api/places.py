from fastapi import APIRouter, Depends, Query
from typing import List

from campjournal.api.auth import get_current_user
from campjournal.models.user import User
from campjournal.schemas.campground import PlaceResult, PlaceDetails
from campjournal.services.places_service import PlacesClient, get_places_client

router = APIRouter()


@router.get("/search", response_model=List[PlaceResult])
async def search_places(
    q: str = Query(..., min_length=1, max_length=200),
    current_user: User = Depends(get_current_user),
    places: PlacesClient = Depends(get_places_client)
):
    """Search campgrounds and RV parks by free text."""
    return await places.search_campgrounds(q)


@router.get("/{place_id}", response_model=PlaceDetails)
async def get_place(
    place_id: str,
    current_user: User = Depends(get_current_user),
    places: PlacesClient = Depends(get_places_client)
):
    return await places.get_place_details(place_id)
