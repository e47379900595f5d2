from __future__ import annotations

import os
import typing as tp
import uuid
from pathlib import Path

import anyio


def _staging_path(path: Path, staging_dir: tp.Optional[Path]) -> Path:
    directory = staging_dir if staging_dir is not None else path.parent
    return directory / f".{path.name}.{uuid.uuid4().hex}.tmp"


class AsyncBaseFileManager:
    def __init__(self, staging_dir: tp.Optional[Path] = None) -> None:
        self.staging_dir = staging_dir

    async def write_to(self, path: Path, data: bytes) -> None:
        raise NotImplementedError()

    async def read_from(self, path: Path) -> bytes:
        raise NotImplementedError()

    async def exists(self, path: Path) -> bool:
        raise NotImplementedError()

    async def remove(self, path: Path) -> None:
        raise NotImplementedError()


class AsyncFileManager(AsyncBaseFileManager):
    async def write_to(self, path: Path, data: bytes) -> None:
        """
        Replaces the file atomically: the data is written to a temporary file first,
        then renamed over the target. Readers see either the old or the new file.
        """
        tmp_path = anyio.Path(_staging_path(path, self.staging_dir))
        try:
            async with await anyio.open_file(tmp_path, "wb") as f:
                await f.write(data)
            await tmp_path.replace(path)
        except BaseException:
            with anyio.CancelScope(shield=True):
                await tmp_path.unlink(missing_ok=True)
            raise

    async def read_from(self, path: Path) -> bytes:
        async with await anyio.open_file(path, "rb") as f:
            return tp.cast(bytes, await f.read())

    async def exists(self, path: Path) -> bool:
        return await anyio.Path(path).is_file()

    async def remove(self, path: Path) -> None:
        # also runs while a cancelled store cleans up after itself
        with anyio.CancelScope(shield=True):
            await anyio.Path(path).unlink(missing_ok=True)


class BaseFileManager:
    def __init__(self, staging_dir: tp.Optional[Path] = None) -> None:
        self.staging_dir = staging_dir

    def write_to(self, path: Path, data: bytes) -> None:
        raise NotImplementedError()

    def read_from(self, path: Path) -> bytes:
        raise NotImplementedError()

    def exists(self, path: Path) -> bool:
        raise NotImplementedError()

    def remove(self, path: Path) -> None:
        raise NotImplementedError()


class FileManager(BaseFileManager):
    def write_to(self, path: Path, data: bytes) -> None:
        """
        Replaces the file atomically: the data is written to a temporary file first,
        then renamed over the target. Readers see either the old or the new file.
        """
        tmp_path = _staging_path(path, self.staging_dir)
        try:
            with open(tmp_path, "wb") as f:
                f.write(data)
            os.replace(tmp_path, path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

    def read_from(self, path: Path) -> bytes:
        with open(path, "rb") as f:
            return f.read()

    def exists(self, path: Path) -> bool:
        return path.is_file()

    def remove(self, path: Path) -> None:
        path.unlink(missing_ok=True)
