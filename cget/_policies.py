from __future__ import annotations

import enum
from dataclasses import dataclass

from cget._exceptions import ConfigurationError

__all__ = ("Policy", "RetrievalOptions")


class Policy(enum.Enum):
    STANDARD = "standard"
    """Conditional GET: serve the new content on 200, the cached one on 304."""

    FORCE_REFRESH = "force-refresh"
    """Fresh content or a quiet miss. A 304 cannot satisfy the request."""

    CHECK_ONLY = "check-only"
    """Serve the cached content only if the server confirms it is current. Never writes."""

    CACHE_ONLY = "cache-only"
    """Never touch the network."""


@dataclass(frozen=True)
class RetrievalOptions:
    """
    Immutable configuration of one retrieval.

    Attributes:
    ----------
    policy : Policy
        The trust posture toward the cache.
    head_only : bool
        Issue HEAD instead of GET and output the header block instead of the body.
        Cannot be combined with ``Policy.FORCE_REFRESH``, since forcing fresh
        content implies a cache write and HEAD responses are never stored.
    compressed : bool
        Advertise HTTP compression support. Compressed and uncompressed
        variants are cached separately.
    """

    policy: Policy = Policy.STANDARD
    head_only: bool = False
    compressed: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.policy, Policy):
            raise ConfigurationError(f"unknown retrieval policy: {self.policy!r}")
        if self.head_only and self.policy is Policy.FORCE_REFRESH:
            raise ConfigurationError("head-only mode may not be combined with force-refresh")

    @classmethod
    def from_flags(
        cls,
        force_refresh: bool = False,
        check_only: bool = False,
        cache_only: bool = False,
        head_only: bool = False,
        compressed: bool = False,
    ) -> "RetrievalOptions":
        """
        Builds options out of independent boolean switches, the way a command line provides them.

        :raises ConfigurationError: More than one of the exclusive switches is set
        """
        selected = [
            policy
            for policy, enabled in (
                (Policy.FORCE_REFRESH, force_refresh),
                (Policy.CHECK_ONLY, check_only),
                (Policy.CACHE_ONLY, cache_only),
            )
            if enabled
        ]
        if len(selected) > 1:
            names = " and ".join(policy.value for policy in selected)
            raise ConfigurationError(f"options {names} may not be used together")
        policy = selected[0] if selected else Policy.STANDARD
        return cls(policy=policy, head_only=head_only, compressed=compressed)

    @property
    def method(self) -> str:
        return "HEAD" if self.head_only else "GET"
