import logging
from datetime import datetime
from typing import Dict, Any

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from campjournal.core.config import settings

logger = logging.getLogger(__name__)


class S3Service:
    """
    S3 Compatible Storage Service (R2, AWS, MinIO, Supabase storage).
    Implements StorageInterface. Each logical bucket maps to an S3 bucket of
    the same name.
    """

    def __init__(self):
        self.endpoint_url = settings.S3_ENDPOINT_URL or None
        self.public_base_url = settings.PUBLIC_STORAGE_URL.rstrip("/")

        self.session = boto3.session.Session()
        self.s3_client = self.session.client(
            's3',
            endpoint_url=self.endpoint_url,
            aws_access_key_id=settings.S3_ACCESS_KEY_ID or None,
            aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY or None,
            region_name=settings.S3_REGION_NAME,
            config=Config(signature_version='s3v4')
        )

    def upload_bytes(
        self,
        data_bytes: bytes,
        bucket: str,
        key: str,
        content_type: str = "application/octet-stream",
        upsert: bool = False,
    ) -> Dict[str, Any]:
        """Upload bytes."""
        if not upsert and self.file_exists(bucket, key):
            raise FileExistsError(f"{bucket}/{key} already exists")
        try:
            self.s3_client.put_object(
                Bucket=bucket,
                Key=key,
                Body=data_bytes,
                ContentType=content_type
            )
        except ClientError as e:
            logger.error(f"S3 upload error for {bucket}/{key}: {e}")
            raise
        return {
            "file_id": key,
            "size": len(data_bytes),
            "upload_timestamp": int(datetime.now().timestamp() * 1000)
        }

    def get_public_url(self, bucket: str, key: str) -> str:
        return f"{self.public_base_url}/{bucket}/{key}"

    def delete_file(self, bucket: str, key: str):
        """Delete object."""
        try:
            self.s3_client.delete_object(Bucket=bucket, Key=key)
        except ClientError as e:
            logger.error(f"S3 delete error for {bucket}/{key}: {e}")
            raise

    def file_exists(self, bucket: str, key: str) -> bool:
        """Check if file exists in storage."""
        try:
            self.s3_client.head_object(Bucket=bucket, Key=key)
            return True
        except ClientError:
            return False
