"""
Object storage adapter for product images.

Wraps the S3 helper functions with the folder/reference/filename layout the
API uses and derives public URLs for stored objects.
"""

import logging
import posixpath
import time
import uuid
from typing import TYPE_CHECKING, Optional, Protocol
from urllib.parse import quote, unquote, urlparse

import boto3

from products_api.config.settings import Settings
from products_api.s3.delete_objects import delete_s3_object
from products_api.s3.read_objects import bucket_exists, object_exists_in_s3
from products_api.s3.write_objects import upload_s3_object

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

logger = logging.getLogger(__name__)


class UploadedFile(Protocol):
    filename: str
    content_type: Optional[str]
    content: bytes


class ObjectStorage:
    """Stores files under ``folder/reference_id/name`` in one S3 bucket."""

    def __init__(
        self,
        bucket_name: str,
        s3_client: "S3Client",
        region: str = "us-east-1",
        endpoint_url: Optional[str] = None,
        public_base_url: Optional[str] = None,
        public_acl: bool = True,
    ):
        self.bucket_name = bucket_name
        self.s3_client = s3_client
        self.region = region
        self.endpoint_url = endpoint_url
        self.public_base_url = public_base_url
        self.public_acl = public_acl

    @classmethod
    def from_settings(cls, settings: Settings) -> "ObjectStorage":
        """Create the S3 client described by the settings."""
        s3_client = boto3.client(
            "s3",
            region_name=settings.aws_region,
            endpoint_url=settings.aws_endpoint_url,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
        )
        logger.info(f"Using S3 bucket: {settings.s3_bucket_name}")
        return cls(
            bucket_name=settings.s3_bucket_name,
            s3_client=s3_client,
            region=settings.aws_region,
            endpoint_url=settings.aws_endpoint_url,
            public_base_url=settings.public_base_url,
            public_acl=settings.s3_public_acl,
        )

    @staticmethod
    def object_key(folder: str, reference_id: Optional[str], file_name: str) -> str:
        return "/".join(part for part in (folder, reference_id, file_name) if part)

    @staticmethod
    def file_name_from_url(url: str) -> str:
        """Extract the decoded last path segment of a URL."""
        return posixpath.basename(unquote(urlparse(url).path))

    def public_url(self, object_key: str) -> str:
        quoted_key = quote(object_key, safe="/")
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{quoted_key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket_name}/{quoted_key}"
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{quoted_key}"

    def upload(self, file: Optional[UploadedFile], folder: str, reference_id: Optional[str] = None) -> Optional[str]:
        """
        Upload a file as a publicly readable object.

        The stored name is the upload's unix timestamp, a random token and the
        original file name, so two uploads of one name never share a key.

        :return: The public URL of the object, or None when no file was given.
        """
        if not file:
            return None

        file_name = f"{int(time.time())}_{uuid.uuid4().hex[:8]}_{posixpath.basename(file.filename)}"
        object_key = self.object_key(folder, reference_id, file_name)
        try:
            upload_s3_object(
                bucket_name=self.bucket_name,
                object_key=object_key,
                file_content=file.content,
                s3_client=self.s3_client,
                content_type=file.content_type,
                public=self.public_acl,
            )
        except Exception as e:
            logger.error(f"Error uploading {object_key} to S3: {str(e)}")
            raise

        logger.info(f"Uploaded {file.filename} to S3 as {object_key}")
        return self.public_url(object_key)

    def delete(self, url: Optional[str], folder: str, reference_id: Optional[str] = None) -> bool:
        """
        Delete the object a public URL points at.

        :return: False if the URL is empty or no object exists at the derived
            path, otherwise whether S3 acknowledged the delete.
        """
        if not url:
            return False

        object_key = self.object_key(folder, reference_id, self.file_name_from_url(url))
        try:
            if not object_exists_in_s3(self.bucket_name, object_key, self.s3_client):
                logger.warning(f"Object {object_key} not found, nothing to delete")
                return False
            deleted = delete_s3_object(self.bucket_name, object_key, self.s3_client)
        except Exception as e:
            logger.error(f"Error deleting {object_key} from S3: {str(e)}")
            raise

        logger.info(f"Deleted {object_key} from S3")
        return deleted

    def exists(self, object_key: str) -> bool:
        return object_exists_in_s3(self.bucket_name, object_key, self.s3_client)

    def ensure_bucket(self) -> None:
        """Create the bucket if it does not exist yet."""
        if bucket_exists(self.bucket_name, self.s3_client):
            return
        if self.region == "us-east-1":
            self.s3_client.create_bucket(Bucket=self.bucket_name)
        else:
            self.s3_client.create_bucket(
                Bucket=self.bucket_name,
                CreateBucketConfiguration={"LocationConstraint": self.region},
            )
        logger.info(f"Created S3 bucket: {self.bucket_name}")

    def ping(self) -> bool:
        return bucket_exists(self.bucket_name, self.s3_client)
