from pydantic import BaseModel, ConfigDict, model_validator
from typing import Optional, List, Literal
from datetime import date, datetime
from uuid import UUID

from campjournal.schemas.campground import CampgroundResponse
from campjournal.schemas.user import ProfileSummary


class PhotoResponse(BaseModel):
    id: UUID
    user_id: UUID
    campground_id: UUID
    journal_entry_id: Optional[UUID] = None
    storage_path: str
    public_url: str
    caption: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class JournalEntryCreate(BaseModel):
    campground_id: UUID
    start_date: date
    end_date: date
    notes: Optional[str] = None
    video_url: Optional[str] = None
    is_favorite: bool = False

    @model_validator(mode="after")
    def check_date_range(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "campground_id": "0b9f1c4e-7a55-4d8e-9d0a-2f4f5a1e3c21",
                "start_date": "2024-06-01",
                "end_date": "2024-06-03",
                "notes": "Quiet site by the river.",
                "is_favorite": True,
            }
        }
    )


class JournalEntryUpdate(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None
    video_url: Optional[str] = None
    is_favorite: Optional[bool] = None


class JournalEntryResponse(BaseModel):
    id: UUID
    user_id: UUID
    campground_id: UUID
    start_date: date
    end_date: date
    notes: Optional[str] = None
    video_url: Optional[str] = None
    is_favorite: bool
    status: Literal["published", "draft"]
    shared_from_user_id: Optional[UUID] = None
    shared_with_user_id: Optional[UUID] = None
    original_entry_id: Optional[UUID] = None
    shared_accepted: Optional[bool] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    campground: Optional[CampgroundResponse] = None
    photos: List[PhotoResponse] = []
    profile: Optional[ProfileSummary] = None
    shared_from_profile: Optional[ProfileSummary] = None
    shared_with_profile: Optional[ProfileSummary] = None

    model_config = ConfigDict(from_attributes=True)


class ShareEntryRequest(BaseModel):
    recipient_id: UUID


class MapLocation(BaseModel):
    """One marker on a user's map of visited campgrounds."""
    campground_id: UUID
    name: str
    latitude: float
    longitude: float
    visit_count: int
    last_visited: date
    is_favorite: bool
