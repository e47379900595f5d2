from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional, Tuple, Union

from cget._headers import header_value, status_code

__all__ = (
    "CacheRecord",
    "IfNoneMatch",
    "IfModifiedSince",
    "Validator",
    "FetchRequest",
    "FetchResult",
    "FreshFromNetwork",
    "FreshFromCache",
    "QuietMiss",
    "Outcome",
)


@dataclass(frozen=True)
class CacheRecord:
    """
    A complete cached resource: the raw header block and the body stored with it.
    """

    header: bytes
    content: bytes

    @property
    def etag(self) -> Optional[str]:
        return header_value(self.header, "ETag") or None

    @property
    def last_modified(self) -> Optional[str]:
        return header_value(self.header, "Last-Modified") or None


@dataclass(frozen=True)
class IfNoneMatch:
    etag: str

    def as_header(self) -> Tuple[str, str]:
        return ("If-None-Match", self.etag)


@dataclass(frozen=True)
class IfModifiedSince:
    date: str

    def as_header(self) -> Tuple[str, str]:
        return ("If-Modified-Since", self.date)


Validator = Union[IfNoneMatch, IfModifiedSince]


@dataclass(frozen=True)
class FetchRequest:
    location: str
    method: Literal["GET", "HEAD"] = "GET"
    validator: Optional[Validator] = None
    accept_compressed: bool = False

    @property
    def is_conditional(self) -> bool:
        return self.validator is not None

    def headers(self) -> List[Tuple[str, str]]:
        headers = [("Accept-Encoding", "gzip, deflate" if self.accept_compressed else "identity")]
        if self.validator is not None:
            headers.append(self.validator.as_header())
        return headers


@dataclass(frozen=True)
class FetchResult:
    """
    What the fetcher captured: the status, the raw header block and,
    for GET requests only, the (decoded) body.
    """

    status_code: int
    header: bytes
    content: Optional[bytes] = None

    @classmethod
    def from_header_block(cls, header: bytes, content: Optional[bytes] = None) -> "FetchResult":
        return cls(status_code=status_code(header), header=header, content=content)


@dataclass(frozen=True)
class FreshFromNetwork:
    """The server answered 200 and the new response is delivered."""

    header: bytes
    content: Optional[bytes] = None
    head_only: bool = False
    stored: bool = False

    @property
    def output(self) -> bytes:
        if self.head_only:
            return self.header
        assert self.content is not None
        return self.content


@dataclass(frozen=True)
class FreshFromCache:
    """The cached record is served, either confirmed by a 304 or read without network access."""

    header: bytes
    content: bytes
    head_only: bool = False
    revalidated: bool = False

    @property
    def output(self) -> bytes:
        return self.header if self.head_only else self.content


@dataclass(frozen=True)
class QuietMiss:
    """The policy precondition was not met. Not an error."""

    reason: str = field(default="")

    @property
    def output(self) -> bytes:
        return b""


Outcome = Union[FreshFromNetwork, FreshFromCache, QuietMiss]
