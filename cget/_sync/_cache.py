from __future__ import annotations

import logging
import types
import typing as tp

from typing_extensions import assert_never

from .._core._spec import AnyState, CacheMiss, IdleClient, NeedRevalidation, StoreAndUse
from .._core.models import FreshFromCache, FreshFromNetwork, Outcome, QuietMiss
from .._exceptions import CgetError, ConfigurationError
from .._keygen import CacheKey, generate_key
from .._policies import Policy, RetrievalOptions
from ._fetcher import Fetcher
from ._storages import BaseStorage

if tp.TYPE_CHECKING:  # pragma: no cover
    from typing_extensions import Self

logger = logging.getLogger("cget.cache")

__all__ = ("ConditionalCache",)


class ConditionalCache:
    """
    Retrieves HTTP resources through a local cache using conditional requests.

    The retrieval itself is decided by the states in ``cget._core._spec``;
    this class only performs the storage and network I/O the states ask for.

    Args:
        storage: Where the records are kept.
        fetcher: Sends the HTTP requests. Defaults to a fetcher owning its own client.
        algorithm: The hashlib algorithm used to derive cache keys from locations.
    """

    def __init__(
        self,
        storage: BaseStorage,
        fetcher: tp.Optional[Fetcher] = None,
        algorithm: str = "md5",
    ) -> None:
        self.storage = storage
        self.fetcher = fetcher if fetcher is not None else Fetcher()
        self.algorithm = algorithm

    def key_for(self, location: str, compressed: bool = False) -> CacheKey:
        return generate_key(location, compressed, self.algorithm)

    def retrieve(
        self,
        location: str,
        policy: Policy = Policy.STANDARD,
        head_only: bool = False,
        compressed: bool = False,
        options: tp.Optional[RetrievalOptions] = None,
    ) -> Outcome:
        """
        Retrieves one resource under the given policy.

        :param location: The absolute URL of the resource
        :param policy: The retrieval policy, ignored when ``options`` is given
        :param head_only: Issue HEAD and deliver the header block, ignored when ``options`` is given
        :param compressed: Advertise HTTP compression, ignored when ``options`` is given
        :param options: A prepared, validated set of options
        :raises CgetError: A hard failure; the exception names the location and the failing operation
        :return: FreshFromNetwork, FreshFromCache or QuietMiss
        """
        if options is None:
            options = RetrievalOptions(policy=policy, head_only=head_only, compressed=compressed)
        if not location:
            raise ConfigurationError("empty location", operation="retrieve")

        try:
            key = self.key_for(location, options.compressed)
            return self._retrieve(location, key, options)
        except CgetError as exc:
            if exc.location is None:
                exc.location = location
            raise

    def retrieve_many(
        self,
        locations: tp.Iterable[str],
        policy: Policy = Policy.STANDARD,
        head_only: bool = False,
        compressed: bool = False,
    ) -> tp.Dict[str, tp.Union[Outcome, CgetError]]:
        """
        Retrieves the resources one after another.

        A hard failure is recorded for its location and the batch goes on.
        A location listed more than once is retrieved once, at its first position.
        """
        options = RetrievalOptions(policy=policy, head_only=head_only, compressed=compressed)
        results: tp.Dict[str, tp.Union[Outcome, CgetError]] = {}
        for location in dict.fromkeys(locations):
            try:
                results[location] = self.retrieve(location, options=options)
            except CgetError as exc:
                logger.error(str(exc))
                results[location] = exc
        return results

    def _retrieve(self, location: str, key: CacheKey, options: RetrievalOptions) -> Outcome:
        logger.debug(f"Using cache key {key} for {location}")
        state: tp.Union[AnyState, Outcome] = IdleClient(location=location, options=options)

        while True:
            logger.debug(f"Handling state: {state.__class__.__name__}")
            if isinstance(state, IdleClient):
                state = state.next(self.storage.retrieve(key))
            elif isinstance(state, (CacheMiss, NeedRevalidation)):
                state = state.next(self.fetcher.fetch(state.request))
            elif isinstance(state, StoreAndUse):
                if state.refreshing:
                    logger.debug(f"Refreshing cache files for {location}")
                else:
                    logger.debug(f"Initializing cache files for {location}")
                self.storage.store(key, state.record)
                state = state.next()
            elif isinstance(state, (FreshFromNetwork, FreshFromCache, QuietMiss)):
                return state
            else:
                assert_never(state)

    def close(self) -> None:
        self.fetcher.close()
        self.storage.close()

    def __enter__(self) -> "Self":
        return self

    def __exit__(
        self,
        exc_type: tp.Optional[tp.Type[BaseException]] = None,
        exc_value: tp.Optional[BaseException] = None,
        traceback: tp.Optional[types.TracebackType] = None,
    ) -> None:
        self.close()
