import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Dict, Any

from campjournal.core.config import settings

logger = logging.getLogger(__name__)


class LocalStorageService:
    """
    Filesystem storage for development and tests.
    Implements StorageInterface; objects live at `{root}/{bucket}/{key}`.
    """

    def __init__(self, root: str = None, public_base_url: str = None):
        self.root = Path(root or settings.LOCAL_STORAGE_PATH)
        self.public_base_url = (public_base_url or settings.PUBLIC_STORAGE_URL).rstrip("/")

    def _path(self, bucket: str, key: str) -> Path:
        path = (self.root / bucket / key).resolve()
        if self.root.resolve() not in path.parents:
            raise ValueError(f"Key escapes storage root: {key}")
        return path

    def upload_bytes(
        self,
        data_bytes: bytes,
        bucket: str,
        key: str,
        content_type: str = "application/octet-stream",
        upsert: bool = False,
    ) -> Dict[str, Any]:
        path = self._path(bucket, key)
        if path.exists() and not upsert:
            raise FileExistsError(f"{bucket}/{key} already exists")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data_bytes)
        return {
            "file_id": key,
            "size": len(data_bytes),
            "upload_timestamp": int(datetime.now().timestamp() * 1000)
        }

    def get_public_url(self, bucket: str, key: str) -> str:
        return f"{self.public_base_url}/{bucket}/{key}"

    def delete_file(self, bucket: str, key: str):
        path = self._path(bucket, key)
        try:
            os.remove(path)
        except FileNotFoundError:
            logger.debug(f"Delete skipped, {bucket}/{key} does not exist")

    def file_exists(self, bucket: str, key: str) -> bool:
        return self._path(bucket, key).is_file()
