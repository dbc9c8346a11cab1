"""
Campground model, keyed by the external Google place id.
"""
from sqlalchemy import Column, String, Text, Float, TIMESTAMP, Uuid
from sqlalchemy.sql import func
import uuid

from campjournal.core.database import Base, table_args, utcnow


class Campground(Base):
    """Canonical location record; at most one row per google_place_id."""

    __tablename__ = "campgrounds"
    __table_args__ = table_args()

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    google_place_id = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(500), nullable=False)

    # Address
    address = Column(Text, nullable=True)
    city = Column(String(255), nullable=True)
    state = Column(String(255), nullable=True)
    country = Column(String(255), nullable=True)

    # Coordinates, may be missing until backfilled from place details
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    # Place details
    phone = Column(String(100), nullable=True)
    website = Column(Text, nullable=True)
    google_rating = Column(Float, nullable=True)
    google_maps_url = Column(Text, nullable=True)

    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow)

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def __repr__(self):
        return f"<Campground {self.name} ({self.google_place_id})>"
