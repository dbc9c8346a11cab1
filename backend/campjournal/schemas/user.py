from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from uuid import UUID


class ProfileSummary(BaseModel):
    """Compact profile attached to feed items and shared entries."""
    id: UUID
    username: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ProfileResponse(ProfileSummary):
    bio: Optional[str] = None
    website: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProfileUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.]+$")
    full_name: Optional[str] = None
    bio: Optional[str] = None
    website: Optional[str] = None


class UserStats(BaseModel):
    total_campgrounds: int
    total_photos: int


class FollowStats(BaseModel):
    follower_count: int
    following_count: int


class FollowStatus(BaseModel):
    is_following: bool
