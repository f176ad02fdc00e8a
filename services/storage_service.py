from functools import lru_cache
from urllib.parse import quote

import boto3

from core.config import settings

class ObjectStore:
    """
    Thin wrapper around an S3-compatible bucket.
    Errors from botocore are left to the caller, which decides what a failed write means.
    """

    def __init__(self, client, bucket: str, public_base_url: str):
        self.client = client
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")

    def put_object(self, key: str, data: bytes, content_type: str) -> None:
        """
        Writes bytes under the given key.

        :param key: The full path/key in the bucket (e.g., '<user_id>/1700000000000.pdf').
        :param data: File content.
        :param content_type: The MIME type stored as object metadata.
        :raises ClientError: If the store rejects the write.
        """
        self.client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=data,
            ContentType=content_type,
        )

    def public_url(self, key: str) -> str:
        """Public retrieval URL for a stored key."""
        return f"{self.public_base_url}/{quote(key)}"

    def delete_object(self, key: str) -> None:
        self.client.delete_object(Bucket=self.bucket, Key=key)

def create_s3_client():
    return boto3.client(
        "s3",
        region_name=settings.SPACES_REGION,
        endpoint_url=settings.SPACES_ENDPOINT,
        aws_access_key_id=settings.ACCESS_KEY,
        aws_secret_access_key=settings.SECRET_KEY,
    )

@lru_cache
def get_object_store() -> ObjectStore:
    """FastAPI dependency; one client per process."""
    return ObjectStore(
        client=create_s3_client(),
        bucket=settings.SPACES_NAME,
        public_base_url=settings.storage_public_base_url,
    )

