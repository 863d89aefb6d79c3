"""
Object Storage Service for S3-compatible storage (MinIO, AWS S3, DigitalOcean Spaces).

Product images are uploaded here and referenced from the catalog by
their public URL.

Architecture:
- Uses boto3 (AWS SDK for Python)
- Compatible with MinIO (local), AWS S3, DigitalOcean Spaces
- Objects are uploaded public-read so the client can load them directly
- Bucket is created lazily on first use
"""
import json
import logging
import mimetypes
import time
from typing import Optional

import boto3
from botocore.client import Config as BotoConfig
from botocore.exceptions import ClientError
from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)


class StorageService:
    """
    S3-compatible object storage service.

    Usage:
        storage = StorageService.from_config(current_app.config)
        url = storage.upload_file(file, 'phone_app/products/image.jpg', 'image/jpeg')
        storage.delete_file('phone_app/products/image.jpg')
    """

    def __init__(self, client, bucket: str, public_url: str, max_upload_size: int = 2 * 1024 * 1024,
                 allowed_mime_types=None, allowed_extensions=None, upload_prefix: str = 'products'):
        self.client = client
        self.bucket = bucket
        self.public_url = public_url.rstrip('/')
        self.max_upload_size = max_upload_size
        self.allowed_mime_types = set(allowed_mime_types or ())
        self.allowed_extensions = set(allowed_extensions or ())
        self.upload_prefix = upload_prefix.strip('/')
        self._bucket_checked = False

    @classmethod
    def from_config(cls, config) -> 'StorageService':
        """Initialize S3 client from Flask config."""
        client = boto3.client(
            's3',
            endpoint_url=config['S3_ENDPOINT'],
            aws_access_key_id=config['S3_ACCESS_KEY'],
            aws_secret_access_key=config['S3_SECRET_KEY'],
            region_name=config['S3_REGION'],
            config=BotoConfig(signature_version='s3v4')
        )
        return cls(
            client,
            bucket=config['S3_BUCKET'],
            public_url=config['S3_PUBLIC_URL'],
            max_upload_size=config.get('MAX_UPLOAD_SIZE', 2 * 1024 * 1024),
            allowed_mime_types=config.get('ALLOWED_MIME_TYPES'),
            allowed_extensions=config.get('ALLOWED_EXTENSIONS'),
            upload_prefix=config.get('S3_UPLOAD_PREFIX', 'products'),
        )

    def ensure_bucket_exists(self):
        """Create bucket if it doesn't exist."""
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

            try:
                self.client.create_bucket(Bucket=self.bucket)
                logger.info(f"[STORAGE] ✓ Bucket '{self.bucket}' created")

                # Set bucket policy for public read (for product images)
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
                self.client.put_bucket_policy(
                    Bucket=self.bucket,
                    Policy=json.dumps(policy)
                )
                logger.info(f"[STORAGE] ✓ Bucket '{self.bucket}' policy set to public-read")
            except ClientError as create_error:
                logger.error(f"[STORAGE] ✗ Failed to create bucket: {create_error}")
                raise

        self._bucket_checked = True

    def build_object_name(self, filename: str) -> str:
        """
        Build a unique object key for an uploaded file.

        Example:
            build_object_name('my phone.jpg') -> 'phone_app/products/1700000000000-my_phone.jpg'
        """
        safe_name = secure_filename(filename or '') or 'image'
        timestamp = int(time.time() * 1000)
        if self.upload_prefix:
            return f"{self.upload_prefix}/{timestamp}-{safe_name}"
        return f"{timestamp}-{safe_name}"

    def upload_file(
        self,
        file: FileStorage,
        object_name: str,
        content_type: Optional[str] = None,
        metadata: Optional[dict] = None
    ) -> str:
        """
        Upload file to S3-compatible storage.

        Args:
            file: Werkzeug FileStorage object from request.files
            object_name: S3 object key (path in bucket)
            content_type: MIME type (auto-detected if None)
            metadata: Optional metadata dict

        Returns:
            Public URL of uploaded file

        Raises:
            ValueError: If file validation fails
            ClientError: If upload fails
        """
        self._validate_file(file)
        self.ensure_bucket_exists()

        # Auto-detect content type
        if not content_type:
            content_type = file.content_type or mimetypes.guess_type(file.filename)[0] or 'application/octet-stream'

        extra_args = {
            'ContentType': content_type,
            'ACL': 'public-read'  # Make file publicly accessible
        }

        if metadata:
            extra_args['Metadata'] = metadata

        try:
            file.stream.seek(0)

            logger.info(f"[STORAGE] Uploading '{object_name}' to bucket '{self.bucket}'...")
            self.client.upload_fileobj(
                file.stream,
                self.bucket,
                object_name,
                ExtraArgs=extra_args
            )

            url = self.get_public_url(object_name)
            logger.info(f"[STORAGE] ✓ File uploaded: {url}")
            return url

        except ClientError as e:
            logger.exception(f"[STORAGE] ✗ Upload failed: {e}")
            raise

    def delete_file(self, object_name: str) -> bool:
        """
        Delete file from S3-compatible storage.

        Returns:
            True if deleted successfully, False otherwise
        """
        try:
            logger.info(f"[STORAGE] Deleting '{object_name}' from bucket '{self.bucket}'...")
            self.client.delete_object(Bucket=self.bucket, Key=object_name)
            logger.info(f"[STORAGE] ✓ File deleted: {object_name}")
            return True
        except ClientError as e:
            logger.exception(f"[STORAGE] ✗ Delete failed: {e}")
            return False

    def get_public_url(self, object_name: str) -> str:
        """
        Get public URL for an object.

        Returns:
            Public URL (e.g., 'http://localhost:9000/uploads/phone_app/products/image.jpg')
        """
        return f"{self.public_url}/{self.bucket}/{object_name.lstrip('/')}"

    def object_name_from_url(self, url: str) -> Optional[str]:
        """
        Recover the object key from a public URL.

        URLs that do not point into this bucket are returned unchanged,
        on the assumption that they already are object keys.
        """
        if not url:
            return None

        marker = f"/{self.bucket}/"
        if marker in url:
            return url.split(marker, 1)[1]
        return url

    def _validate_file(self, file: FileStorage):
        """
        Validate uploaded file (size, type, extension).

        Raises:
            ValueError: If validation fails
        """
        if not file or not file.filename:
            raise ValueError("No file was provided")

        extension = file.filename.rsplit('.', 1)[-1].lower() if '.' in file.filename else ''
        if self.allowed_extensions and extension not in self.allowed_extensions:
            raise ValueError(
                f"File extension not allowed: '{extension}'. Allowed: {', '.join(sorted(self.allowed_extensions))}"
            )

        # Check file size
        stream = file.stream
        stream.seek(0, 2)  # Seek to end
        file_size = stream.tell()
        stream.seek(0)  # Reset

        if file_size > self.max_upload_size:
            max_mb = self.max_upload_size / (1024 * 1024)
            raise ValueError(f"File is too large. Maximum {max_mb:.1f}MB")

        content_type = file.content_type
        if self.allowed_mime_types and content_type not in self.allowed_mime_types:
            raise ValueError(
                f"File type not allowed: {content_type}. Allowed: {', '.join(sorted(self.allowed_mime_types))}"
            )

        logger.info(f"[STORAGE] ✓ File validation passed: {file.filename} ({file_size} bytes, {content_type})")


# Singleton instance
_storage_service = None


def get_storage_service() -> StorageService:
    """
    Get or create StorageService singleton.

    Returns:
        StorageService instance
    """
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService.from_config(current_app.config)
    return _storage_service

