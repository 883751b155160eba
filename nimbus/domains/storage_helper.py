"""Google Cloud Storage helper."""
import asyncio
import logging
from pathlib import Path
from typing import Optional, Union

import filetype
from google.auth.credentials import Credentials
from google.cloud import storage

from ..errors import StorageError

logger = logging.getLogger(__name__)


class StorageHelper:
    """
    Wrapper around the synchronous Cloud Storage client.

    Blocking SDK calls run in the default executor so every operation can be
    awaited without stalling the event loop.
    """

    def __init__(self, client: storage.Client):
        self.client = client

    @classmethod
    def with_credentials(cls, credentials: Optional[Credentials] = None,
                         project: Optional[str] = None) -> "StorageHelper":
        """Create a helper backed by a new storage.Client."""
        logger.debug("Creating Cloud Storage client")
        return cls(storage.Client(project=project, credentials=credentials))

    def _blob(self, bucket: str, key: str) -> storage.Blob:
        return self.client.bucket(bucket).blob(key)

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    async def upload_from_bytes(self, bucket: str, key: str, data: bytes,
                                content_type: Optional[str] = None) -> None:
        """
        Upload bytes to bucket/key in a single request.

        Args:
            bucket: Bucket name
            key: Object name
            data: Payload
            content_type: MIME type; the store's default applies when None
        """
        blob = self._blob(bucket, key)

        def upload():
            blob.upload_from_string(data, content_type=content_type)

        await self._run(upload)
        logger.info(f"Uploaded {len(data)} bytes to gs://{bucket}/{key}")

    async def download_to_bytes(self, bucket: str, key: str) -> bytes:
        """
        Download bucket/key as bytes.

        Raises:
            google.api_core.exceptions.NotFound: If the object does not exist
        """
        blob = self._blob(bucket, key)
        data = await self._run(blob.download_as_bytes)
        logger.debug(f"Downloaded {len(data)} bytes from gs://{bucket}/{key}")
        return data

    async def delete_file(self, bucket: str, key: str) -> None:
        """
        Delete bucket/key.

        Raises:
            google.api_core.exceptions.NotFound: If the object does not exist
        """
        blob = self._blob(bucket, key)
        await self._run(blob.delete)
        logger.info(f"Deleted gs://{bucket}/{key}")

    async def upload_file(self, bucket: str, key: str, path: Union[str, Path],
                          content_type: Optional[str] = None) -> None:
        """
        Upload a local file to bucket/key.

        The local filename does not matter; the object is stored under key.
        """
        data = await self._run(Path(path).read_bytes)
        await self.upload_from_bytes(bucket, key, data, content_type)

    async def download_file(self, bucket: str, key: str, path_dir: Union[str, Path]) -> Path:
        """
        Download bucket/key into path_dir.

        The file is written to path_dir / key, so keys containing "/" produce
        nested directories.

        Args:
            bucket: Bucket name
            key: Object name
            path_dir: Destination directory, created if missing

        Returns:
            Path of the written file

        Raises:
            StorageError: If path_dir exists and is not a directory, or key
                resolves to a location outside path_dir
        """
        path_dir = Path(path_dir)
        if not await self._run(path_dir.exists):
            await self._run(lambda: path_dir.mkdir(parents=True, exist_ok=True))

        if not await self._run(path_dir.is_dir):
            raise StorageError(f"Path {path_dir} is not a directory")

        path = path_dir / key
        # Absolute keys replace path_dir and ".." segments climb out of it
        if path_dir.resolve() not in path.resolve().parents:
            raise StorageError(f"Object key {key!r} resolves outside {path_dir}")

        data = await self.download_to_bytes(bucket, key)
        await self._run(lambda: path.parent.mkdir(parents=True, exist_ok=True))

        await self._run(path.write_bytes, data)
        logger.info(f"Downloaded gs://{bucket}/{key} to {path}")
        return path

    @staticmethod
    def valid_file_type(data: bytes, expected: str) -> None:
        """
        Check that data looks like a file of the expected type.

        The type is sniffed from the leading magic bytes, so the object name
        and any declared content type are ignored.

        Args:
            data: File contents
            expected: Expected extension without the dot ("jpg", "png", "pdf", ...)

        Raises:
            StorageError: If no type is detected or it differs from expected
        """
        kind = filetype.guess(data)
        if kind is None:
            raise StorageError("Failed to get file type")

        if kind.extension != expected:
            raise StorageError(
                f"File type is not valid. Expected: {expected}, got: {kind.extension}"
            )
