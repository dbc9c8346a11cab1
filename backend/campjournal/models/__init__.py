"""Models module initialization - import all models here."""
from campjournal.models.user import User, Profile
from campjournal.models.campground import Campground
from campjournal.models.journal_entry import JournalEntry, STATUS_PUBLISHED, STATUS_DRAFT
from campjournal.models.photo import Photo
from campjournal.models.follow import Follow

__all__ = [
    "User",
    "Profile",
    "Campground",
    "JournalEntry",
    "Photo",
    "Follow",
    "STATUS_PUBLISHED",
    "STATUS_DRAFT",
]
