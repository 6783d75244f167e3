"""
File ingestion for attachments.

Uploaded receipt images become an opaque string that is stored verbatim on
``Attachment.image``:

- ``encode_data_url``: self-contained ``data:`` URL (no external blob
  storage, used by the local store and by the remote store when no bucket
  is configured)
- ``StorageService``: S3-compatible object storage (MinIO, AWS S3,
  DigitalOcean Spaces) returning the object's public URL
"""
import base64
import json
import logging
import mimetypes
from typing import Optional

import boto3
from botocore.client import Config as BotoConfig
from botocore.exceptions import ClientError

from easystock.entities import new_id

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = 'application/octet-stream'


def guess_content_type(filename: Optional[str], content_type: Optional[str] = None) -> str:
    if content_type:
        return content_type
    if filename:
        return mimetypes.guess_type(filename)[0] or DEFAULT_CONTENT_TYPE
    return DEFAULT_CONTENT_TYPE


def encode_data_url(data: bytes, content_type: Optional[str] = None) -> str:
    """Encode raw bytes as a ``data:<mime>;base64,...`` URL."""
    encoded = base64.b64encode(data or b'').decode('ascii')
    return f"data:{content_type or DEFAULT_CONTENT_TYPE};base64,{encoded}"


class StorageService:
    """
    S3-compatible object storage service.

    Usage:
        storage = StorageService(Config)
        url = storage.upload_bytes(data, 'tenant-1/receipts/abc.jpg', 'image/jpeg')
        storage.delete_file('tenant-1/receipts/abc.jpg')
    """

    def __init__(self, config, client=None):
        """Initialize S3 client from the store configuration."""
        self.bucket = config.S3_BUCKET
        self.public_url = config.S3_PUBLIC_URL

        self.client = client or boto3.client(
            's3',
            endpoint_url=config.S3_ENDPOINT,
            aws_access_key_id=config.S3_ACCESS_KEY,
            aws_secret_access_key=config.S3_SECRET_KEY,
            region_name=config.S3_REGION,
            config=BotoConfig(signature_version='s3v4')
        )
        self._bucket_checked = False

    def _ensure_bucket_exists(self):
        """Create bucket (public-read) if it doesn't exist."""
        if self._bucket_checked:
            return
        try:
            self.client.head_bucket(Bucket=self.bucket)
            logger.info(f"[STORAGE] Bucket '{self.bucket}' exists")
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code')
            if error_code not in ('404', 'NoSuchBucket'):
                logger.error(f"[STORAGE] ✗ Failed to check bucket: {e}")
                raise
            self.client.create_bucket(Bucket=self.bucket)
            policy = {
                "Version": "2012-10-17",
                "Statement": [
                    {
                        "Effect": "Allow",
                        "Principal": {"AWS": "*"},
                        "Action": "s3:GetObject",
                        "Resource": f"arn:aws:s3:::{self.bucket}/*"
                    }
                ]
            }
            self.client.put_bucket_policy(Bucket=self.bucket, Policy=json.dumps(policy))
            logger.info(f"[STORAGE] ✓ Bucket '{self.bucket}' created with public-read policy")
        self._bucket_checked = True

    def object_name_for(self, tenant_id: str, filename: Optional[str], content_type: str) -> str:
        extension = mimetypes.guess_extension(content_type) or ''
        if filename and '.' in filename:
            extension = '.' + filename.rsplit('.', 1)[1].lower()
        return f"{tenant_id}/attachments/{new_id()}{extension}"

    def upload_bytes(self, data: bytes, object_name: str, content_type: str) -> str:
        """
        Upload raw bytes and return the object's public URL.

        The file is stored as-is; type and size are not validated here.

        Raises:
            ClientError: If upload fails
        """
        self._ensure_bucket_exists()
        try:
            logger.info(f"[STORAGE] Uploading '{object_name}' to bucket '{self.bucket}'...")
            self.client.put_object(
                Bucket=self.bucket,
                Key=object_name,
                Body=data,
                ContentType=content_type,
                ACL='public-read'
            )
        except ClientError as e:
            logger.exception(f"[STORAGE] ✗ Upload failed: {e}")
            raise

        url = self.get_public_url(object_name)
        logger.info(f"[STORAGE] ✓ File uploaded: {url}")
        return url

    def object_name_from_url(self, url: Optional[str]) -> Optional[str]:
        """Object key behind one of this bucket's public URLs; None for anything else."""
        prefix = self.get_public_url('')
        if url and url.startswith(prefix) and len(url) > len(prefix):
            return url[len(prefix):]
        return None

    def delete_file(self, object_name: str) -> bool:
        """Delete an object; failures are logged and reported as False."""
        try:
            self.client.delete_object(Bucket=self.bucket, Key=object_name)
            logger.info(f"[STORAGE] ✓ File deleted: {object_name}")
            return True
        except ClientError as e:
            logger.exception(f"[STORAGE] ✗ Delete failed: {e}")
            return False

    def get_public_url(self, object_name: str) -> str:
        return f"{self.public_url.rstrip('/')}/{self.bucket}/{object_name}"
