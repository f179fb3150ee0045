import asyncio
import logging
import re
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from common.errors import DependencyError
from settings.config import get_settings

logger = logging.getLogger(__name__)

LOCAL_SCHEME = "local"


@dataclass(frozen=True)
class StoredFile:
    url: str
    size: int
    mime_type: str


def build_object_key(key_prefix: str, filename: str) -> str:
    """
    Unique, path-safe object key, e.g. "vendor-registrations/<id>/3f2a...-pan_card.pdf".
    """
    safe_name = re.sub(r"[^A-Za-z0-9._-]", "_", Path(filename or "upload").name) or "upload"
    return f"{key_prefix.strip('/')}/{uuid.uuid4().hex}-{safe_name}"


class FileStore(ABC):
    """
    Opaque storage for uploaded documents. Callers only keep the returned URL.
    """

    @abstractmethod
    async def store(self, data: bytes, filename: str, mime_type: str, key_prefix: str) -> StoredFile:
        ...

    @abstractmethod
    async def fetch(self, url: str) -> bytes:
        ...

    @abstractmethod
    async def delete(self, url: str) -> None:
        ...


class S3FileStore(FileStore):
    def __init__(self, bucket: Optional[str] = None, client=None):
        settings = get_settings()
        self.bucket = bucket or settings.AWS_S3_BUCKET
        if not self.bucket:
            raise DependencyError("AWS_S3_BUCKET is not configured in environment.")
        self._client = client or self._get_client()

    @staticmethod
    def _get_client():
        """
        Construct a boto3 S3 client using application settings.
        Prefers explicit credentials from settings when provided.
        """
        settings = get_settings()
        kwargs: dict = {}
        if settings.AWS_REGION:
            kwargs["region_name"] = settings.AWS_REGION
        if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
            kwargs["aws_access_key_id"] = settings.AWS_ACCESS_KEY_ID
            kwargs["aws_secret_access_key"] = settings.AWS_SECRET_ACCESS_KEY
            if settings.AWS_SESSION_TOKEN:
                kwargs["aws_session_token"] = settings.AWS_SESSION_TOKEN
        return boto3.client("s3", **kwargs)

    def _key_from_url(self, url: str) -> str:
        key = (urlparse(url).path or "").lstrip("/")
        if not key:
            raise DependencyError(f"Could not extract S3 object key from URL: {url}")
        return key

    async def store(self, data: bytes, filename: str, mime_type: str, key_prefix: str) -> StoredFile:
        key = build_object_key(key_prefix, filename)

        def _upload() -> str:
            self._client.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=mime_type)
            # Virtual-hosted–style URL
            region = self._client.meta.region_name or "us-east-1"
            return f"https://{self.bucket}.s3.{region}.amazonaws.com/{key}"

        try:
            url = await asyncio.to_thread(_upload)
        except (BotoCoreError, ClientError) as exc:
            logger.exception("S3 upload failed for key %s", key)
            raise DependencyError("File storage is unavailable.") from exc
        return StoredFile(url=url, size=len(data), mime_type=mime_type)

    async def fetch(self, url: str) -> bytes:
        key = self._key_from_url(url)

        def _download() -> bytes:
            obj = self._client.get_object(Bucket=self.bucket, Key=key)
            return obj["Body"].read()

        try:
            return await asyncio.to_thread(_download)
        except (BotoCoreError, ClientError) as exc:
            logger.exception("S3 download failed for key %s", key)
            raise DependencyError("File storage is unavailable.") from exc

    async def delete(self, url: str) -> None:
        key = self._key_from_url(url)
        try:
            await asyncio.to_thread(self._client.delete_object, Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            logger.exception("S3 delete failed for key %s", key)
            raise DependencyError("File storage is unavailable.") from exc


class LocalFileStore(FileStore):
    """
    Stores files under a local directory; URLs look like "local://<key>".
    Meant for development and tests.
    """

    def __init__(self, root: Optional[str] = None):
        self.root = Path(root or get_settings().LOCAL_STORAGE_DIR).resolve()

    def _path_for(self, url: str) -> Path:
        parsed = urlparse(url)
        if parsed.scheme != LOCAL_SCHEME:
            raise DependencyError(f"Not a local storage URL: {url}")
        path = (self.root / (parsed.netloc + parsed.path)).resolve()
        if self.root not in path.parents:
            raise DependencyError(f"Storage URL escapes the storage root: {url}")
        return path

    async def store(self, data: bytes, filename: str, mime_type: str, key_prefix: str) -> StoredFile:
        key = build_object_key(key_prefix, filename)
        path = self.root / key

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as exc:
            logger.exception("Writing %s failed", path)
            raise DependencyError("File storage is unavailable.") from exc
        return StoredFile(url=f"{LOCAL_SCHEME}://{key}", size=len(data), mime_type=mime_type)

    async def fetch(self, url: str) -> bytes:
        path = self._path_for(url)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            raise DependencyError(f"Stored file could not be read: {url}") from exc

    async def delete(self, url: str) -> None:
        path = self._path_for(url)
        try:
            await asyncio.to_thread(path.unlink, True)
        except OSError as exc:
            raise DependencyError(f"Stored file could not be deleted: {url}") from exc


def get_file_store() -> FileStore:
    """
    FastAPI dependency selecting the configured storage backend.
    """
    settings = get_settings()
    if settings.STORAGE_BACKEND.lower() == "s3":
        return S3FileStore()
    return LocalFileStore()
