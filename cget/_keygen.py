from __future__ import annotations

import hashlib
from dataclasses import dataclass

from ._exceptions import ConfigurationError

__all__ = ("CacheKey", "generate_key")


@dataclass(frozen=True)
class CacheKey:
    """
    Names the two on-disk artifacts of one cached resource.

    Compressed and uncompressed variants of the same location share the
    digest but never the files.
    """

    digest: str
    compressed: bool = False

    @property
    def suffix(self) -> str:
        return "_compressed" if self.compressed else ""

    @property
    def header_name(self) -> str:
        return f"{self.digest}_headers{self.suffix}"

    @property
    def content_name(self) -> str:
        return f"{self.digest}_content{self.suffix}"

    def __str__(self) -> str:
        return f"{self.digest}{self.suffix}"


def generate_key(location: str, compressed: bool = False, algorithm: str = "md5") -> CacheKey:
    try:
        hasher = hashlib.new(algorithm)
    except ValueError as exc:
        raise ConfigurationError(f"unsupported hash algorithm: {algorithm}", location, "hash") from exc
    hasher.update(location.encode("utf-8"))
    return CacheKey(digest=hasher.hexdigest(), compressed=compressed)
