from cget._async._cache import AsyncConditionalCache as AsyncConditionalCache
from cget._async._fetcher import AsyncFetcher as AsyncFetcher
from cget._async._mock import MockAsyncTransport as MockAsyncTransport
from cget._async._storages import AsyncBaseStorage as AsyncBaseStorage, AsyncFileStorage as AsyncFileStorage
from cget._core._spec import (
    AnyState as AnyState,
    CacheMiss as CacheMiss,
    IdleClient as IdleClient,
    NeedRevalidation as NeedRevalidation,
    State as State,
    StoreAndUse as StoreAndUse,
)
from cget._core.models import (
    CacheRecord as CacheRecord,
    FetchRequest as FetchRequest,
    FetchResult as FetchResult,
    FreshFromCache as FreshFromCache,
    FreshFromNetwork as FreshFromNetwork,
    IfModifiedSince as IfModifiedSince,
    IfNoneMatch as IfNoneMatch,
    Outcome as Outcome,
    QuietMiss as QuietMiss,
)
from cget._exceptions import (
    CgetError as CgetError,
    ConfigurationError as ConfigurationError,
    IntegrityError as IntegrityError,
    MalformedResponseError as MalformedResponseError,
    NetworkError as NetworkError,
    StorageError as StorageError,
    UnexpectedResponseError as UnexpectedResponseError,
)
from cget._headers import header_value as header_value, status_code as status_code
from cget._keygen import CacheKey as CacheKey, generate_key as generate_key
from cget._policies import Policy as Policy, RetrievalOptions as RetrievalOptions
from cget._sync._cache import ConditionalCache as ConditionalCache
from cget._sync._fetcher import Fetcher as Fetcher
from cget._sync._mock import MockTransport as MockTransport
from cget._sync._storages import BaseStorage as BaseStorage, FileStorage as FileStorage
from cget._version import __version__ as __version__

__all__ = (
    # Engine
    "AsyncConditionalCache",
    "ConditionalCache",
    ## States
    "AnyState",
    "State",
    "IdleClient",
    "CacheMiss",
    "NeedRevalidation",
    "StoreAndUse",
    ## Outcomes
    "Outcome",
    "FreshFromNetwork",
    "FreshFromCache",
    "QuietMiss",
    # Models
    "CacheKey",
    "CacheRecord",
    "FetchRequest",
    "FetchResult",
    "IfNoneMatch",
    "IfModifiedSince",
    # Configuration
    "Policy",
    "RetrievalOptions",
    # Fetchers
    "AsyncFetcher",
    "Fetcher",
    "MockAsyncTransport",
    "MockTransport",
    # Storages
    "AsyncBaseStorage",
    "AsyncFileStorage",
    "BaseStorage",
    "FileStorage",
    # Helpers
    "generate_key",
    "header_value",
    "status_code",
    # Errors
    "CgetError",
    "ConfigurationError",
    "IntegrityError",
    "MalformedResponseError",
    "NetworkError",
    "StorageError",
    "UnexpectedResponseError",
    "__version__",
)
