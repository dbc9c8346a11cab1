from typing import Protocol, Dict, Any


class StorageInterface(Protocol):
    """
    Abstract interface for object storage providers (S3-compatible, local disk).
    Calls are synchronous; async callers run them in a threadpool.
    """

    def upload_bytes(
        self,
        data_bytes: bytes,
        bucket: str,
        key: str,
        content_type: str = "application/octet-stream",
        upsert: bool = False,
    ) -> Dict[str, Any]:
        """Upload bytes to `bucket/key`. Without `upsert`, an existing key is an error."""
        ...

    def get_public_url(self, bucket: str, key: str) -> str:
        """Public URL the object is served from."""
        ...

    def delete_file(self, bucket: str, key: str):
        """Delete file at key. Missing keys are not an error."""
        ...

    def file_exists(self, bucket: str, key: str) -> bool:
        """Check if file exists in storage."""
        ...
