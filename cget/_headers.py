from __future__ import annotations

import re
import typing as tp

from ._exceptions import MalformedResponseError

HEADERS_ENCODING = "iso-8859-1"

# <protocol> <code> <reason>, the reason phrase may be empty (HTTP/2)
STATUS_LINE = re.compile(r"^(?P<protocol>[^ ]+) (?P<code>[0-9]{3})(?: (?P<reason>.*))?$")

# Names whose canonical form is not plain Title-Case
SPECIAL_HEADER_NAMES = {
    "etag": "ETag",
    "content-md5": "Content-MD5",
    "www-authenticate": "WWW-Authenticate",
    "x-xss-protection": "X-XSS-Protection",
    "dnt": "DNT",
    "te": "TE",
}

__all__ = (
    "status_code",
    "header_value",
    "canonical_header_name",
    "render_header_block",
)


def _as_text(header_blob: tp.Union[bytes, str]) -> str:
    if isinstance(header_blob, bytes):
        return header_blob.decode(HEADERS_ENCODING)
    return header_blob


def _lines(header_blob: tp.Union[bytes, str]) -> tp.List[str]:
    return [line.rstrip("\r") for line in _as_text(header_blob).split("\n")]


def status_code(header_blob: tp.Union[bytes, str]) -> int:
    """
    Extracts the numeric status code from the first line of a header block.

    :param header_blob: Raw response header block, status line first
    :type header_blob: tp.Union[bytes, str]
    :raises MalformedResponseError: The first line is not a status line
    :return: The HTTP status code
    :rtype: int
    """
    first_line = _lines(header_blob)[0]
    match = STATUS_LINE.match(first_line)
    if match is None:
        raise MalformedResponseError(f"not a status line: {first_line!r}", operation="parse")
    return int(match.group("code"))


def header_value(header_blob: tp.Union[bytes, str], name: str) -> tp.Optional[str]:
    """
    Returns the value of the first header line starting with ``"<name>:"``.

    The match is case-sensitive, the value is stripped of surrounding whitespace.
    An absent header is a legitimate result and yields None.
    """
    prefix = f"{name}:"
    for line in _lines(header_blob)[1:]:
        if not line:
            break
        if line.startswith(prefix):
            return line[len(prefix) :].strip()
    return None


def canonical_header_name(name: str) -> str:
    """
    Converts a header name to its conventional spelling.

    Examples:
        >>> canonical_header_name("last-modified")
        'Last-Modified'
        >>> canonical_header_name("etag")
        'ETag'
    """
    lowered = name.lower()
    if lowered in SPECIAL_HEADER_NAMES:
        return SPECIAL_HEADER_NAMES[lowered]
    return "-".join(word.capitalize() for word in lowered.split("-"))


def render_header_block(
    http_version: str,
    status: int,
    reason: str,
    headers: tp.Iterable[tp.Tuple[tp.Union[str, bytes], tp.Union[str, bytes]]],
) -> bytes:
    """
    Serializes a received response head into the raw header artifact.

    The status line comes first, lines are CRLF separated and the block
    is terminated by an empty line.
    """
    lines = [f"{http_version} {status} {reason}"]
    for key, value in headers:
        key = key.decode(HEADERS_ENCODING) if isinstance(key, bytes) else key
        value = value.decode(HEADERS_ENCODING) if isinstance(value, bytes) else value
        lines.append(f"{canonical_header_name(key)}: {value}")
    return ("\r\n".join(lines) + "\r\n\r\n").encode(HEADERS_ENCODING)
