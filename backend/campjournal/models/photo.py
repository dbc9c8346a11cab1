"""
Photo model. A row points at a stored object; several rows may point at
the same object once an entry has been shared.
"""
from sqlalchemy import Column, Text, TIMESTAMP, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from campjournal.core.database import Base, table_args, fk, utcnow


class Photo(Base):
    """Photo attached to a campground and, usually, a journal entry."""

    __tablename__ = "photos"
    __table_args__ = table_args(
        Index("idx_photos_journal_entry", "journal_entry_id"),
        Index("idx_photos_storage_path", "storage_path"),
        Index("idx_photos_user", "user_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey(fk("users.user_id"), ondelete="CASCADE"), nullable=False)
    campground_id = Column(Uuid, ForeignKey(fk("campgrounds.id"), ondelete="CASCADE"), nullable=False)
    journal_entry_id = Column(Uuid, ForeignKey(fk("journal_entries.id"), ondelete="CASCADE"), nullable=True)

    # Storage
    storage_path = Column(Text, nullable=False)
    public_url = Column(Text, nullable=False)

    caption = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now())

    # Relationships
    journal_entry = relationship("JournalEntry", back_populates="photos", lazy="raise")

    def __repr__(self):
        return f"<Photo {self.storage_path}>"
