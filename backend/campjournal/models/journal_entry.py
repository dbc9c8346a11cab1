"""
JournalEntry model: one visit to a campground.

Entries are either written by their owner (published) or created as drafts
when another user shares an entry with them.
"""
from sqlalchemy import Column, String, Text, Boolean, Date, TIMESTAMP, ForeignKey, CheckConstraint, Index, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from campjournal.core.database import Base, table_args, fk, utcnow

STATUS_PUBLISHED = "published"
STATUS_DRAFT = "draft"
ENTRY_STATUSES = (STATUS_PUBLISHED, STATUS_DRAFT)


class JournalEntry(Base):
    """Journal entry with sharing back-references."""

    __tablename__ = "journal_entries"
    __table_args__ = table_args(
        CheckConstraint("status IN ('published', 'draft')", name="valid_entry_status"),
        CheckConstraint("end_date >= start_date", name="valid_date_range"),
        Index("idx_journal_entries_user_start", "user_id", "start_date"),
        Index("idx_journal_entries_campground", "campground_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey(fk("users.user_id"), ondelete="CASCADE"), nullable=False)
    campground_id = Column(Uuid, ForeignKey(fk("campgrounds.id"), ondelete="CASCADE"), nullable=False)

    # Visit
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)
    video_url = Column(Text, nullable=True)
    is_favorite = Column(Boolean, default=False, nullable=False)
    status = Column(String(20), default=STATUS_PUBLISHED, nullable=False)

    # Sharing
    shared_from_user_id = Column(Uuid, ForeignKey(fk("users.user_id"), ondelete="SET NULL"), nullable=True)
    shared_with_user_id = Column(Uuid, ForeignKey(fk("users.user_id"), ondelete="SET NULL"), nullable=True)
    original_entry_id = Column(Uuid, ForeignKey(fk("journal_entries.id"), ondelete="SET NULL"), nullable=True)
    shared_accepted = Column(Boolean, nullable=True)  # None: not shared, False: pending, True: accepted

    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow)

    # Relationships
    campground = relationship("Campground", lazy="raise")
    photos = relationship(
        "Photo",
        back_populates="journal_entry",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Photo.created_at",
        lazy="raise",
    )
    profile = relationship(
        "Profile",
        primaryjoin="foreign(JournalEntry.user_id) == Profile.id",
        viewonly=True,
        lazy="raise",
    )
    shared_from_profile = relationship(
        "Profile",
        primaryjoin="foreign(JournalEntry.shared_from_user_id) == Profile.id",
        viewonly=True,
        lazy="raise",
    )
    shared_with_profile = relationship(
        "Profile",
        primaryjoin="foreign(JournalEntry.shared_with_user_id) == Profile.id",
        viewonly=True,
        lazy="raise",
    )

    @property
    def is_draft(self) -> bool:
        return self.status == STATUS_DRAFT

    def __repr__(self):
        return f"<JournalEntry {self.id} {self.status} {self.start_date}..{self.end_date}>"
