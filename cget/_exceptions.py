from __future__ import annotations

import typing as tp

__all__ = (
    "CgetError",
    "ConfigurationError",
    "IntegrityError",
    "NetworkError",
    "MalformedResponseError",
    "UnexpectedResponseError",
    "StorageError",
)


class CgetError(Exception):
    """
    Base class for every hard failure of a retrieval.

    :param message: Human readable description of the failure
    :type message: str
    :param location: The resource location the failure relates to, if any
    :type location: tp.Optional[str]
    :param operation: The failing sub-operation, e.g. "fetch" or "store"
    :type operation: tp.Optional[str]
    """

    exit_code: tp.ClassVar[int] = 3

    def __init__(self, message: str, location: tp.Optional[str] = None, operation: tp.Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.location = location
        self.operation = operation

    def __str__(self) -> str:
        prefix = f"{self.operation} failed" if self.operation else "failed"
        if self.location:
            return f"{prefix} on {self.location}: {self.message}"
        return f"{prefix}: {self.message}"


class ConfigurationError(CgetError):
    exit_code = 2


class IntegrityError(CgetError):
    exit_code = 3


class NetworkError(CgetError):
    exit_code = 5


class MalformedResponseError(CgetError):
    exit_code = 7


class UnexpectedResponseError(MalformedResponseError):
    exit_code = 9

    def __init__(
        self,
        message: str,
        status_code: int,
        location: tp.Optional[str] = None,
        operation: tp.Optional[str] = None,
    ) -> None:
        super().__init__(message, location=location, operation=operation)
        self.status_code = status_code


class StorageError(CgetError):
    exit_code = 8
