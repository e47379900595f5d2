from __future__ import annotations

import logging
import types
import typing as tp

import httpx

from .._core.models import FetchRequest, FetchResult
from .._exceptions import ConfigurationError, MalformedResponseError, NetworkError
from .._headers import render_header_block
from .._version import __version__

if tp.TYPE_CHECKING:  # pragma: no cover
    from typing_extensions import Self

logger = logging.getLogger("cget.fetcher")

__all__ = ("AsyncFetcher", "DEFAULT_TIMEOUT", "USER_AGENT")

DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=10.0)
USER_AGENT = f"cget/{__version__}"


class AsyncFetcher:
    """
    Issues exactly one GET or HEAD request per call and captures the response.

    Redirects are not followed and nothing is retried: a redirect is just an
    unexpected response and any transport failure is reported as is.

    :param client: An HTTPX client to send requests with, defaults to None
    :type client: tp.Optional[httpx.AsyncClient], optional
    :param transport: A transport for the client created when none is given, defaults to None
    :type transport: tp.Optional[httpx.AsyncBaseTransport], optional
    :param timeout: Timeout configuration for the client created when none is given
    :type timeout: tp.Union[httpx.Timeout, float, None]
    :param user_agent: The User-Agent header value, defaults to "cget/<version>"
    :type user_agent: tp.Optional[str], optional
    """

    def __init__(
        self,
        client: tp.Optional[httpx.AsyncClient] = None,
        transport: tp.Optional[httpx.AsyncBaseTransport] = None,
        timeout: tp.Union[httpx.Timeout, float, None] = DEFAULT_TIMEOUT,
        user_agent: tp.Optional[str] = None,
    ) -> None:
        self._owns_client = client is None
        self._client = (
            client if client is not None else httpx.AsyncClient(transport=transport, timeout=timeout)
        )
        self._user_agent = user_agent or USER_AGENT

    async def fetch(self, request: FetchRequest) -> FetchResult:
        """
        Sends the request and captures the status line, the headers and (for GET) the body.

        A compressed request gets the body decoded according to its
        Content-Encoding. Otherwise the body is kept exactly as it was sent,
        even if the server applied a Content-Encoding nobody asked for, so
        that it can be checked against Content-Length.

        :param request: What to request and how
        :type request: FetchRequest
        :raises ConfigurationError: The location is not a usable http(s) URL
        :raises MalformedResponseError: The response body could not be decoded
        :raises NetworkError: The request could not be completed
        :return: The captured response
        :rtype: FetchResult
        """
        headers = [("User-Agent", self._user_agent), *request.headers()]
        adjective = "compressed " if request.accept_compressed else ""
        logger.info(f"Issuing {request.method} request for {adjective}resource: {request.location}")

        content: tp.Optional[bytes] = None
        try:
            async with self._client.stream(
                request.method, request.location, headers=headers, follow_redirects=False
            ) as response:
                if request.method != "HEAD":
                    content = await self._read_body(response, decode=request.accept_compressed)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
            raise ConfigurationError(f"invalid location: {exc}", request.location, "fetch") from exc
        except httpx.DecodingError as exc:
            raise MalformedResponseError(f"unable to decode the response: {exc}", request.location, "fetch") from exc
        except httpx.TransportError as exc:
            raise NetworkError(f"{type(exc).__name__}: {exc}", request.location, "fetch") from exc

        logger.info(f"Received response code: {response.status_code}")

        header = render_header_block(
            response.http_version,
            response.status_code,
            response.reason_phrase,
            response.headers.raw,
        )
        return FetchResult(status_code=response.status_code, header=header, content=content)

    async def _read_body(self, response: httpx.Response, decode: bool) -> bytes:
        if decode:
            return await response.aread()
        return b"".join([chunk async for chunk in response.aiter_raw()])

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "Self":
        return self

    async def __aexit__(
        self,
        exc_type: tp.Optional[tp.Type[BaseException]] = None,
        exc_value: tp.Optional[BaseException] = None,
        traceback: tp.Optional[types.TracebackType] = None,
    ) -> None:
        await self.aclose()
