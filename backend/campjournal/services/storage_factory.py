import logging

from campjournal.core.config import settings
from campjournal.services.storage_interface import StorageInterface
from campjournal.services.storage_providers.local_service import LocalStorageService
from campjournal.services.storage_providers.s3_service import S3Service

logger = logging.getLogger(__name__)

_storage_instances = {}


def get_storage_service(provider: str = None) -> StorageInterface:
    """
    Get storage provider instance.
    If provider is not specified, uses the default from settings.
    """
    if not provider:
        provider = settings.STORAGE_PROVIDER.lower()

    if provider in _storage_instances:
        return _storage_instances[provider]

    logger.info(f"Initializing Storage Provider: {provider}")

    if provider == "s3":
        instance = S3Service()
    elif provider == "local":
        instance = LocalStorageService()
    else:
        raise ValueError(f"Unknown storage provider '{provider}'")

    _storage_instances[provider] = instance
    return instance


def get_default_storage() -> StorageInterface:
    """FastAPI dependency for the configured storage provider."""
    return get_storage_service()
