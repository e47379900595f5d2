from __future__ import annotations

import logging
import os
import typing as tp
from pathlib import Path

from .._core.models import CacheRecord
from .._exceptions import ConfigurationError, StorageError
from .._files import AsyncFileManager
from .._keygen import CacheKey
from .._synchronization import LOCKS_DIRNAME, AsyncKeyLock

logger = logging.getLogger("cget.storages")

__all__ = (
    "AsyncBaseStorage",
    "AsyncFileStorage",
)


class AsyncBaseStorage:
    async def store(self, key: CacheKey, record: CacheRecord) -> None:
        raise NotImplementedError()

    async def remove(self, key: CacheKey) -> None:
        raise NotImplementedError()

    async def retrieve(self, key: CacheKey) -> tp.Optional[CacheRecord]:
        raise NotImplementedError()

    async def aclose(self) -> None:
        raise NotImplementedError()


def _same_filesystem(first: Path, second: Path) -> bool:
    return os.stat(first).st_dev == os.stat(second).st_dev


class AsyncFileStorage(AsyncBaseStorage):
    """
    A two-files-per-resource storage.

    Every cached resource is kept as a header file and a content file, both
    named after the cache key. A record is either complete or absent: a lone
    header or content file is deleted as soon as it is noticed.

    :param base_path: The cache directory, it must already exist
    :type base_path: tp.Union[str, Path]
    :param scratch_path: A directory for temporary files, defaults to None.
        It is only used when it lives on the same filesystem as the cache
        directory, otherwise temporary files are created in the cache directory.
    :type scratch_path: tp.Optional[tp.Union[str, Path]], optional
    """

    def __init__(
        self,
        base_path: tp.Union[str, Path],
        scratch_path: tp.Optional[tp.Union[str, Path]] = None,
    ) -> None:
        self._base_path = Path(base_path)
        if not self._base_path.is_dir():
            raise ConfigurationError(f"cache directory does not exist: {self._base_path}")

        staging_dir = None
        if scratch_path is not None:
            scratch = Path(scratch_path)
            if not scratch.is_dir():
                raise ConfigurationError(f"scratch directory does not exist: {scratch}")
            if _same_filesystem(scratch, self._base_path):
                staging_dir = scratch
            else:
                logger.debug(f"Scratch directory {scratch} is on another filesystem, staging in {self._base_path}.")

        self._file_manager = AsyncFileManager(staging_dir=staging_dir)
        self._lock = AsyncKeyLock(self._base_path / LOCKS_DIRNAME)

    @property
    def base_path(self) -> Path:
        return self._base_path

    def header_path(self, key: CacheKey) -> Path:
        return self._base_path / key.header_name

    def content_path(self, key: CacheKey) -> Path:
        return self._base_path / key.content_name

    async def store(self, key: CacheKey, record: CacheRecord) -> None:
        """
        Stores the record, replacing any previous one.

        The content file is replaced first and the header file second, so the
        validators never describe a body other than the one stored with them.
        If the header file cannot be replaced afterwards, or the store is
        interrupted (cancellation, KeyboardInterrupt), both files are removed
        so that no partial or mismatched record survives. A failure to write
        the content file leaves the previous record intact.

        :param key: The cache key of the resource
        :type key: CacheKey
        :param record: The header block and the content to store
        :type record: CacheRecord
        :raises StorageError: One of the files could not be written
        """
        header_path = self.header_path(key)
        content_path = self.content_path(key)

        try:
            async with self._lock.hold(str(key)):
                target, content_written = content_path, False
                try:
                    logger.debug(f"Writing cached content file: {content_path}")
                    await self._file_manager.write_to(content_path, record.content)
                    target, content_written = header_path, True
                    logger.debug(f"Writing cached header file: {header_path}")
                    await self._file_manager.write_to(header_path, record.header)
                except OSError as exc:
                    if content_written:
                        await self._discard(key)
                    raise StorageError(f"failed copy to file {target}: {exc}", operation="store") from exc
                except BaseException:
                    logger.warning(f"Storing cache record {key} was interrupted, removing it.")
                    await self._discard(key)
                    raise
        except OSError as exc:
            raise StorageError(f"unable to lock cache record {key}: {exc}", operation="store") from exc

    async def remove(self, key: CacheKey) -> None:
        """
        Removes both files of the record. Removing an absent record is not an error.
        """
        try:
            async with self._lock.hold(str(key)):
                await self._purge(key)
        except OSError as exc:
            raise StorageError(f"unable to lock cache record {key}: {exc}", operation="remove") from exc

    async def retrieve(self, key: CacheKey) -> tp.Optional[CacheRecord]:
        """
        Retrieves the record stored under the key.

        :param key: The cache key of the resource
        :type key: CacheKey
        :return: The complete record, or None if nothing (or only part of a record) is cached
        :rtype: tp.Optional[CacheRecord]
        """
        try:
            async with self._lock.hold(str(key)):
                return await self._read(key)
        except OSError as exc:
            raise StorageError(f"unable to lock cache record {key}: {exc}", operation="retrieve") from exc

    async def aclose(self) -> None:  # pragma: no cover
        return

    async def _read(self, key: CacheKey) -> tp.Optional[CacheRecord]:
        header_path = self.header_path(key)
        content_path = self.content_path(key)

        header_exists = await self._file_manager.exists(header_path)
        content_exists = await self._file_manager.exists(content_path)

        if not header_exists and not content_exists:
            return None

        if header_exists != content_exists:
            logger.warning(f"Removing partial cache record {key}.")
            await self._purge(key)
            return None

        try:
            header = await self._file_manager.read_from(header_path)
            content = await self._file_manager.read_from(content_path)
        except FileNotFoundError:
            logger.warning(f"Cache record {key} vanished while reading, removing it.")
            await self._purge(key)
            return None
        except OSError as exc:
            raise StorageError(f"unable to read cache record {key}: {exc}", operation="retrieve") from exc

        return CacheRecord(header=header, content=content)

    async def _purge(self, key: CacheKey) -> None:
        try:
            await self._file_manager.remove(self.content_path(key))
            await self._file_manager.remove(self.header_path(key))
        except OSError as exc:
            raise StorageError(f"unable to remove cache record {key}: {exc}", operation="remove") from exc

    async def _discard(self, key: CacheKey) -> None:
        # the store failure being handled is what the caller gets to see
        try:
            await self._purge(key)
        except StorageError as exc:
            logger.error(str(exc))
