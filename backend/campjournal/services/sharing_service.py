"""
Entry sharing: copy one user's entry into another user's journal as a
draft, then let the recipient accept or reject it.

The steps of a share are committed one after another. There is no
compensating rollback: if copying photos fails partway, the draft and the
photos copied so far remain, and the error propagates to the caller.
"""
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campjournal.core.exceptions import NotFoundError, AlreadyExistsError, ValidationFailedError
from campjournal.models.journal_entry import JournalEntry, STATUS_DRAFT, STATUS_PUBLISHED
from campjournal.models.photo import Photo
from campjournal.models.user import Profile
from campjournal.services.journal_service import load_entry, delete_entry_rows

logger = logging.getLogger(__name__)


async def _get_draft(db: AsyncSession, draft_id: uuid.UUID, recipient_id: uuid.UUID) -> JournalEntry:
    draft = await load_entry(
        db,
        draft_id,
        JournalEntry.user_id == recipient_id,
        JournalEntry.status == STATUS_DRAFT,
    )
    if not draft:
        raise NotFoundError("Draft not found")
    return draft


async def share_entry(db: AsyncSession, entry_id: uuid.UUID, recipient_id: uuid.UUID, sharer_id: uuid.UUID) -> JournalEntry:
    """
    Share `entry_id` (owned by `sharer_id`) with `recipient_id`.

    Returns the recipient's new draft entry.
    """
    if recipient_id == sharer_id:
        raise ValidationFailedError("Cannot share an entry with yourself")

    # 1. Source entry with photos
    source = await load_entry(db, entry_id, JournalEntry.user_id == sharer_id)
    if not source:
        raise NotFoundError("Journal entry not found")

    if not await db.get(Profile, recipient_id):
        raise NotFoundError("Recipient not found")

    # 2. Pending draft for the same visit already sent to this recipient
    existing = await db.execute(
        select(JournalEntry.id).where(
            JournalEntry.user_id == recipient_id,
            JournalEntry.campground_id == source.campground_id,
            JournalEntry.shared_from_user_id == sharer_id,
            JournalEntry.start_date == source.start_date,
            JournalEntry.end_date == source.end_date,
            JournalEntry.status == STATUS_DRAFT,
        ).limit(1)
    )
    if existing.scalar_one_or_none() is not None:
        raise AlreadyExistsError("This entry has already been shared with this user")

    # 3. Recipient's draft
    draft = JournalEntry(
        user_id=recipient_id,
        campground_id=source.campground_id,
        start_date=source.start_date,
        end_date=source.end_date,
        notes=source.notes,
        video_url=source.video_url,
        is_favorite=False,
        status=STATUS_DRAFT,
        shared_from_user_id=sharer_id,
        original_entry_id=source.id,
    )
    db.add(draft)
    await db.commit()
    logger.info(f"Created draft {draft.id} for user {recipient_id} from entry {source.id}")

    # 4. Mark the source as pending
    source.shared_with_user_id = recipient_id
    source.shared_accepted = False
    await db.commit()

    # 5. Photo rows for the draft; the stored objects are shared, not copied
    copied = 0
    try:
        for photo in source.photos:
            db.add(Photo(
                user_id=recipient_id,
                campground_id=photo.campground_id,
                journal_entry_id=draft.id,
                storage_path=photo.storage_path,
                public_url=photo.public_url,
                caption=photo.caption,
            ))
            await db.commit()
            copied += 1
    except Exception:
        logger.error(f"Copied {copied}/{len(source.photos)} photos to draft {draft.id} before failing")
        await db.rollback()
        raise

    logger.info(f"Shared entry {source.id} with user {recipient_id} ({copied} photos)")
    return await load_entry(db, draft.id)


async def accept_draft(db: AsyncSession, draft_id: uuid.UUID, recipient_id: uuid.UUID) -> JournalEntry:
    """Publish a draft. Marking the source entry accepted is best-effort."""
    draft = await _get_draft(db, draft_id, recipient_id)

    original_id = draft.original_entry_id
    draft.status = STATUS_PUBLISHED
    await db.commit()
    logger.info(f"Accepted draft {draft_id} for user {recipient_id}")

    if original_id:
        try:
            original = await db.get(JournalEntry, original_id)
            if original is None:
                logger.warning(f"Original entry {original_id} for draft {draft_id} no longer exists")
            else:
                original.shared_accepted = True
                await db.commit()
        except Exception as e:
            logger.error(f"Failed to mark original entry {original_id} accepted: {e}")
            await db.rollback()

    return await load_entry(db, draft_id)


async def reject_draft(db: AsyncSession, draft_id: uuid.UUID, recipient_id: uuid.UUID):
    """Permanently delete a draft and its photo rows."""
    draft = await _get_draft(db, draft_id, recipient_id)

    await delete_entry_rows(db, draft.id)
    await db.commit()
    logger.info(f"Rejected draft {draft_id} for user {recipient_id}")
