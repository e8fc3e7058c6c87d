import io
import logging
from datetime import timedelta
from functools import lru_cache
from typing import Dict, Optional

from fastapi import Depends
from minio import Minio
from minio.error import MinioException
from starlette.concurrency import run_in_threadpool

from filegate.core.config import Settings, get_settings
from filegate.core.errors import StorageError, StorageUnavailableError

logger = logging.getLogger(__name__)


class StorageService:
    """Private bucket access: put, presign, remove. Blocking SDK calls run in the threadpool."""

    def __init__(self, client: Minio, bucket_name: str):
        self.client = client
        self.bucket_name = bucket_name

    async def upload_object(
        self,
        object_name: str,
        data: bytes,
        content_type: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> None:
        try:
            await run_in_threadpool(
                self.client.put_object,
                bucket_name=self.bucket_name,
                object_name=object_name,
                data=io.BytesIO(data),
                length=len(data),
                content_type=content_type,
                metadata=metadata,
            )
        except (MinioException, ValueError) as e:
            raise StorageError(f"Failed to store file: {e}") from e

    async def generate_presigned_url(
        self,
        object_name: str,
        expires_in: int,
        content_disposition: Optional[str] = None,
    ) -> str:
        response_headers = None
        if content_disposition:
            response_headers = {"response-content-disposition": content_disposition}
        try:
            return await run_in_threadpool(
                self.client.presigned_get_object,
                bucket_name=self.bucket_name,
                object_name=object_name,
                expires=timedelta(seconds=expires_in),
                response_headers=response_headers,
            )
        except (MinioException, ValueError) as e:
            raise StorageError(f"Failed to generate signed URL: {e}") from e

    async def delete_object(self, object_name: str) -> None:
        try:
            await run_in_threadpool(
                self.client.remove_object,
                bucket_name=self.bucket_name,
                object_name=object_name,
            )
        except MinioException as e:
            raise StorageError(f"Failed to delete file: {e}") from e

    async def check_connection(self) -> None:
        try:
            exists = await run_in_threadpool(self.client.bucket_exists, bucket_name=self.bucket_name)
        except MinioException as e:
            raise StorageUnavailableError(f"Storage unreachable: {e}") from e
        if not exists:
            raise StorageUnavailableError(f"Bucket {self.bucket_name} does not exist")


@lru_cache(maxsize=8)
def build_storage_service(
    endpoint: str,
    access_key: str,
    secret_key: str,
    bucket_name: str,
    region: str,
    secure: bool,
) -> StorageService:
    # Passing the region keeps presigning offline (no bucket-location lookup).
    client = Minio(
        endpoint=endpoint,
        access_key=access_key,
        secret_key=secret_key,
        secure=secure,
        region=region,
    )
    logger.info("Storage client ready for %s/%s", endpoint, bucket_name)
    return StorageService(client, bucket_name)


def get_storage(settings: Settings = Depends(get_settings)) -> StorageService:
    settings.require_storage()
    return build_storage_service(
        settings.storage_endpoint,
        settings.STORAGE_ACCESS_KEY,
        settings.STORAGE_SECRET_KEY,
        settings.STORAGE_BUCKET,
        settings.STORAGE_REGION,
        settings.STORAGE_SECURE,
    )
