from abc import ABC, abstractmethod
import boto3
from botocore.exceptions import ClientError
from supabase import Client
from tenant_admin.config.settings import settings
import logging

logger = logging.getLogger(__name__)


def _is_already_exists(error: Exception) -> bool:
    status = getattr(error, "status", None) or getattr(error, "statusCode", None)
    if str(status) == "409":
        return True
    return "already exists" in str(error).lower()


class BucketStorage(ABC):
    """Object storage provider for tenant buckets"""

    @abstractmethod
    def bucket_exists(self, bucket_id: str) -> bool:
        ...

    @abstractmethod
    def ensure_bucket(self, bucket_id: str) -> bool:
        """Create a private bucket if missing. Returns True when it was created."""
        ...

    @abstractmethod
    def delete_bucket(self, bucket_id: str) -> None:
        """Empty and delete a bucket"""
        ...


class SupabaseBucketStorage(BucketStorage):
    def __init__(self, supabase: Client):
        self.storage = supabase.storage

    def bucket_exists(self, bucket_id: str) -> bool:
        try:
            return bool(self.storage.get_bucket(bucket_id))
        except Exception:
            return False

    def ensure_bucket(self, bucket_id: str) -> bool:
        if self.bucket_exists(bucket_id):
            return False
        try:
            self.storage.create_bucket(bucket_id, options={"public": False})
        except Exception as e:
            if _is_already_exists(e):
                return False
            raise
        logger.info(f"Created storage bucket {bucket_id}")
        return True

    def delete_bucket(self, bucket_id: str) -> None:
        self.storage.empty_bucket(bucket_id)
        self.storage.delete_bucket(bucket_id)
        logger.info(f"Deleted storage bucket {bucket_id}")


class S3BucketStorage(BucketStorage):
    def __init__(self):
        if not all([settings.aws_access_key_id, settings.aws_secret_access_key]):
            raise ValueError("AWS S3 credentials must be configured")

        self.s3_client = boto3.client(
            's3',
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region
        )
        self.prefix = settings.s3_bucket_prefix

    def _name(self, bucket_id: str) -> str:
        # S3 bucket names are global and disallow underscores
        return f"{self.prefix}{bucket_id}".replace("_", "-")

    def bucket_exists(self, bucket_id: str) -> bool:
        try:
            self.s3_client.head_bucket(Bucket=self._name(bucket_id))
            return True
        except ClientError:
            return False

    def ensure_bucket(self, bucket_id: str) -> bool:
        if self.bucket_exists(bucket_id):
            return False
        params = {"Bucket": self._name(bucket_id)}
        if settings.aws_region != "us-east-1":
            params["CreateBucketConfiguration"] = {"LocationConstraint": settings.aws_region}
        try:
            self.s3_client.create_bucket(**params)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "BucketAlreadyOwnedByYou":
                return False
            logger.error(f"Failed to create S3 bucket {params['Bucket']}: {str(e)}")
            raise
        logger.info(f"Created S3 bucket {params['Bucket']}")
        return True

    def delete_bucket(self, bucket_id: str) -> None:
        name = self._name(bucket_id)
        paginator = self.s3_client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=name):
            keys = [{"Key": obj["Key"]} for obj in page.get("Contents", [])]
            if keys:
                self.s3_client.delete_objects(Bucket=name, Delete={"Objects": keys})
        self.s3_client.delete_bucket(Bucket=name)
        logger.info(f"Deleted S3 bucket {name}")


def get_bucket_storage(supabase: Client) -> BucketStorage:
    if settings.storage_backend == "s3":
        return S3BucketStorage()
    return SupabaseBucketStorage(supabase)
