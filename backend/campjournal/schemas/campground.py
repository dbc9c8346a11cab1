from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime
from uuid import UUID


class CampgroundFields(BaseModel):
    """Fields accepted when creating a campground from a place lookup."""
    name: str
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    google_rating: Optional[float] = None
    google_maps_url: Optional[str] = None


class CampgroundCreate(CampgroundFields):
    google_place_id: str


class CampgroundResponse(CampgroundFields):
    id: UUID
    google_place_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CampgroundStats(BaseModel):
    id: UUID
    name: str
    total_visits: int
    total_visitors: int
    total_photos: int


class PlaceResult(BaseModel):
    """A text-search hit from the places API."""
    place_id: str
    name: str
    formatted_address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    rating: Optional[float] = None


class PlaceDetails(PlaceResult):
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    url: Optional[str] = None

    def to_campground_fields(self) -> CampgroundFields:
        return CampgroundFields(
            name=self.name,
            address=self.formatted_address,
            city=self.city,
            state=self.state,
            country=self.country,
            latitude=self.latitude,
            longitude=self.longitude,
            phone=self.phone,
            website=self.website,
            google_rating=self.rating,
            google_maps_url=self.url,
        )
