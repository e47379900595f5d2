import hashlib

import pytest

from cget import CacheKey, ConfigurationError, generate_key


def test_generate_key_is_md5_of_location():
    key = generate_key("https://example.com/file.txt")

    assert key.digest == hashlib.md5(b"https://example.com/file.txt").hexdigest()
    assert key.header_name == f"{key.digest}_headers"
    assert key.content_name == f"{key.digest}_content"


def test_generate_key_compressed_variant():
    plain = generate_key("https://example.com/file.txt")
    compressed = generate_key("https://example.com/file.txt", compressed=True)

    assert plain.digest == compressed.digest
    assert plain != compressed
    assert compressed.header_name == f"{compressed.digest}_headers_compressed"
    assert compressed.content_name == f"{compressed.digest}_content_compressed"
    assert str(compressed) == f"{compressed.digest}_compressed"


def test_generate_key_is_deterministic():
    assert generate_key("https://example.com/a") == generate_key("https://example.com/a")
    assert generate_key("https://example.com/a") != generate_key("https://example.com/b")


def test_generate_key_other_algorithm():
    key = generate_key("https://example.com/", algorithm="sha256")
    assert key.digest == hashlib.sha256(b"https://example.com/").hexdigest()


def test_generate_key_unknown_algorithm():
    with pytest.raises(ConfigurationError) as exc_info:
        generate_key("https://example.com/", algorithm="not-a-hash")

    assert exc_info.value.operation == "hash"
    assert exc_info.value.location == "https://example.com/"


def test_cache_key_is_hashable():
    assert len({CacheKey("abc"), CacheKey("abc"), CacheKey("abc", compressed=True)}) == 2
