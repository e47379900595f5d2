from __future__ import annotations

import contextlib
import typing as tp
from pathlib import Path
from threading import Lock as T_LOCK

import anyio
from anyio import to_thread
from filelock import FileLock

LOCKS_DIRNAME = ".locks"


def _file_lock(lock_dir: Path, key: str) -> FileLock:
    lock_dir.mkdir(exist_ok=True)
    # released from whichever thread the holder ends up on
    return FileLock(str(lock_dir / f"{key}.lock"), thread_local=False)


class AsyncKeyLock:
    """
    Serialises access to one cache key.

    An anyio lock orders the tasks of this process, a lock file in ``lock_dir``
    orders the processes sharing the cache directory. Entries are dropped as
    soon as nobody holds or waits for them.
    """

    def __init__(self, lock_dir: Path) -> None:
        self._lock_dir = lock_dir
        self._locks: tp.Dict[str, anyio.Lock] = {}
        self._holders: tp.Dict[str, int] = {}

    @contextlib.asynccontextmanager
    async def hold(self, key: str) -> tp.AsyncIterator[None]:
        lock = self._locks.setdefault(key, anyio.Lock())
        self._holders[key] = self._holders.get(key, 0) + 1
        try:
            async with lock:
                file_lock = await to_thread.run_sync(_file_lock, self._lock_dir, key)
                with anyio.CancelScope(shield=True):
                    await to_thread.run_sync(file_lock.acquire)
                try:
                    yield
                finally:
                    file_lock.release()
        finally:
            self._holders[key] -= 1
            if not self._holders[key]:
                del self._holders[key]
                del self._locks[key]


class KeyLock:
    """
    Serialises access to one cache key.

    A thread lock orders the threads of this process, a lock file in ``lock_dir``
    orders the processes sharing the cache directory. Entries are dropped as
    soon as nobody holds or waits for them.
    """

    def __init__(self, lock_dir: Path) -> None:
        self._lock_dir = lock_dir
        self._guard = T_LOCK()
        self._locks: tp.Dict[str, T_LOCK] = {}
        self._holders: tp.Dict[str, int] = {}

    @contextlib.contextmanager
    def hold(self, key: str) -> tp.Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, T_LOCK())
            self._holders[key] = self._holders.get(key, 0) + 1
        try:
            with lock:
                with _file_lock(self._lock_dir, key):
                    yield
        finally:
            with self._guard:
                self._holders[key] -= 1
                if not self._holders[key]:
                    del self._holders[key]
                    del self._locks[key]
