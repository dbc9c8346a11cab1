from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from campjournal.core.database import get_db
from campjournal.api.auth import get_current_user
from campjournal.models.user import User
from campjournal.services import storage_service
from campjournal.services.storage_factory import get_default_storage
from campjournal.services.storage_interface import StorageInterface

router = APIRouter()


@router.delete("/{photo_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_photo(
    photo_id: UUID,
    current_user: User = Depends(get_current_user),
    storage: StorageInterface = Depends(get_default_storage),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete one of the current user's photos.
    The stored image survives while a shared copy still points at it.
    """
    await storage_service.delete_photo(db, storage, photo_id, current_user.user_id)
