"""
Photo uploads and photo records.

Stored objects and photo rows are managed separately: a row points at an
object by `storage_path`, and shared drafts add rows that point at objects
they did not upload.
"""
import logging
import os
import time
import uuid
from typing import List, NamedTuple, Optional, Tuple

from sqlalchemy import select, func, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from campjournal.core.config import settings
from campjournal.core.exceptions import NotFoundError, RemoteServiceError, ValidationFailedError
from campjournal.models.journal_entry import JournalEntry
from campjournal.models.photo import Photo
from campjournal.models.user import Profile
from campjournal.services.storage_interface import StorageInterface

logger = logging.getLogger(__name__)

CAMPGROUND_PHOTOS_BUCKET = "campground-photos"
AVATARS_BUCKET = "avatars"
ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/webp")


class UploadedFile(NamedTuple):
    filename: str
    content_type: str
    data: bytes


def validate_image(data: bytes, content_type: str):
    if len(data) > settings.max_file_size_bytes:
        raise ValidationFailedError(f"File size must be less than {settings.MAX_FILE_SIZE_MB}MB")
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationFailedError("Only JPG, PNG, and WebP images are allowed")


def get_storage_path(user_id: uuid.UUID, campground_id: uuid.UUID, filename: str) -> str:
    """`{user}/{campground}/{epoch-ms}-{filename}`"""
    timestamp = int(time.time() * 1000)
    safe_name = os.path.basename(filename).replace(" ", "_") or "photo"
    return f"{user_id}/{campground_id}/{timestamp}-{safe_name}"


async def _upload(storage: StorageInterface, data: bytes, bucket: str, path: str, content_type: str, upsert: bool = False):
    try:
        await run_in_threadpool(storage.upload_bytes, data, bucket, path, content_type, upsert)
    except Exception as e:
        logger.error(f"Upload to {bucket}/{path} failed: {e}")
        raise RemoteServiceError(f"Upload failed: {e}") from e


async def upload_photo(
    storage: StorageInterface,
    upload: UploadedFile,
    user_id: uuid.UUID,
    campground_id: uuid.UUID,
) -> Tuple[str, str]:
    """Validate and store one photo. Returns (storage_path, public_url)."""
    validate_image(upload.data, upload.content_type)

    path = get_storage_path(user_id, campground_id, upload.filename)
    await _upload(storage, upload.data, CAMPGROUND_PHOTOS_BUCKET, path, upload.content_type)
    return path, storage.get_public_url(CAMPGROUND_PHOTOS_BUCKET, path)


async def save_photo_record(
    db: AsyncSession,
    user_id: uuid.UUID,
    campground_id: uuid.UUID,
    journal_entry_id: Optional[uuid.UUID],
    path: str,
    url: str,
    caption: Optional[str] = None,
) -> Photo:
    photo = Photo(
        user_id=user_id,
        campground_id=campground_id,
        journal_entry_id=journal_entry_id,
        storage_path=path,
        public_url=url,
        caption=caption or None,
    )
    db.add(photo)
    await db.commit()
    return photo


async def upload_entry_photos(
    db: AsyncSession,
    storage: StorageInterface,
    entry: JournalEntry,
    user_id: uuid.UUID,
    uploads: List[UploadedFile],
) -> List[Photo]:
    """
    Upload photos for an entry one at a time.
    A photo that fails to upload or save is logged and skipped.
    """
    entry_id, campground_id = entry.id, entry.campground_id
    saved = []
    rolled_back = False
    for upload in uploads:
        try:
            path, url = await upload_photo(storage, upload, user_id, campground_id)
            saved.append(await save_photo_record(db, user_id, campground_id, entry_id, path, url))
        except (ValidationFailedError, RemoteServiceError) as e:
            logger.warning(f"Failed to upload photo {upload.filename} for entry {entry_id}: {e}")
        except SQLAlchemyError as e:
            logger.error(f"Failed to save photo {upload.filename} for entry {entry_id}: {e}")
            await db.rollback()
            rolled_back = True

    # Rollback expires everything in the session
    if rolled_back:
        for photo in saved:
            await db.refresh(photo)

    logger.info(f"Uploaded {len(saved)}/{len(uploads)} photos for entry {entry_id}")
    return saved


async def get_photos_for_journal_entry(db: AsyncSession, journal_entry_id: uuid.UUID) -> List[Photo]:
    result = await db.execute(
        select(Photo).where(Photo.journal_entry_id == journal_entry_id).order_by(Photo.created_at.asc())
    )
    return list(result.scalars().all())


async def delete_photo(db: AsyncSession, storage: StorageInterface, photo_id: uuid.UUID, user_id: uuid.UUID):
    """
    Delete a photo row. The stored object is removed only when no other row
    still references it.
    """
    result = await db.execute(select(Photo).where(Photo.id == photo_id, Photo.user_id == user_id))
    photo = result.scalar_one_or_none()
    if not photo:
        raise NotFoundError("Photo not found")

    storage_path = photo.storage_path
    await db.execute(delete(Photo).where(Photo.id == photo_id))
    await db.commit()

    remaining = await db.execute(select(func.count(Photo.id)).where(Photo.storage_path == storage_path))
    if remaining.scalar():
        logger.info(f"Kept {storage_path}, still referenced by other photos")
        return

    try:
        await run_in_threadpool(storage.delete_file, CAMPGROUND_PHOTOS_BUCKET, storage_path)
    except Exception as e:
        logger.warning(f"Photo row {photo_id} deleted but object {storage_path} was not: {e}")


async def upload_avatar(
    db: AsyncSession,
    storage: StorageInterface,
    user_id: uuid.UUID,
    upload: UploadedFile,
) -> Profile:
    """Store a new avatar at `{user}/avatar.{ext}`, replacing the old one."""
    validate_image(upload.data, upload.content_type)

    profile = await db.get(Profile, user_id)
    if not profile:
        raise NotFoundError("Profile not found")

    ext = os.path.splitext(upload.filename)[1].lstrip(".").lower() or upload.content_type.split("/")[-1]
    path = f"{user_id}/avatar.{ext}"
    await _upload(storage, upload.data, AVATARS_BUCKET, path, upload.content_type, upsert=True)

    profile.avatar_url = storage.get_public_url(AVATARS_BUCKET, path)
    await db.commit()
    await db.refresh(profile)
    return profile
