"""
S3 object storage backend. Keys map 1:1 to object names in one bucket.
"""

import logging
from typing import BinaryIO, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ...application.ports.storage_repo import StorageBackend
from ...exceptions import StorageError

logger = logging.getLogger(__name__)

MISSING_OBJECT_CODES = {"NoSuchKey", "404", "NotFound"}


def create_s3_client(access_key: str, secret_key: str, region: str, endpoint_url: Optional[str] = None):
    return boto3.client(
        "s3",
        endpoint_url=endpoint_url,
        aws_access_key_id=access_key,
        aws_secret_access_key=secret_key,
        region_name=region,
        config=Config(signature_version="s3v4"),
    )


class S3StorageBackend(StorageBackend):
    name = "s3"

    def __init__(self, bucket: str, client, url_expiry: int = 3600) -> None:
        """
        Args:
            bucket: Bucket holding originals and thumbnails
            client: boto3 S3 client
            url_expiry: Lifetime of pre-signed read URLs in seconds
        """
        self.bucket = bucket
        self._client = client
        self.url_expiry = url_expiry

    @property
    def client(self):
        """Return the underlying boto3 client."""
        return self._client

    def put(self, key: str, data: bytes, content_type: str) -> None:
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
                ServerSideEncryption="AES256",
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error uploading {key} to bucket {self.bucket}: {e}")
            raise StorageError(f"Could not upload {key}") from e
        logger.info(f"File {key} uploaded to S3 successfully")

    def get(self, key: str) -> Optional[BinaryIO]:
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in MISSING_OBJECT_CODES:
                logger.warning(f"File {key} not found in bucket {self.bucket}")
                return None
            logger.error(f"Error downloading {key} from bucket {self.bucket}: {e}")
            raise StorageError(f"Could not download {key}") from e
        except BotoCoreError as e:
            logger.error(f"Error downloading {key} from bucket {self.bucket}: {e}")
            raise StorageError(f"Could not download {key}") from e
        return response["Body"]

    def delete(self, key: str) -> bool:
        try:
            self._client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error deleting {key} from bucket {self.bucket}: {e}")
            raise StorageError(f"Could not delete {key}") from e
        logger.info(f"File {key} deleted from S3 successfully")
        return True

    def url_for(self, key: str) -> str:
        try:
            return self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=self.url_expiry,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error generating pre-signed URL for {key}: {e}")
            raise StorageError(f"Could not sign URL for {key}") from e
