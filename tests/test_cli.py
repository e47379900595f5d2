from pathlib import Path

import httpx
import pytest
from click.testing import CliRunner

from cget import MockTransport, generate_key
from cget._cli import cli
from cget._synchronization import LOCKS_DIRNAME

LOCATION = "https://example.org/md.xml"
BODY = b"<EntityDescriptor/>\n"


def record_files(path: Path):
    return [entry for entry in path.iterdir() if entry.name != LOCKS_DIRNAME]


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def log_file(tmp_path: Path) -> Path:
    return tmp_path / "cget.log"


def invoke(runner: CliRunner, transport: MockTransport, cache_dir: Path, log_file: Path, *args: str):
    return runner.invoke(
        cli,
        ["-d", str(cache_dir), "--log-file", str(log_file), *args],
        obj={"transport": transport},
        env={"TMPDIR": None},
    )


def prime(cache_dir: Path, content: bytes = b"cached\n") -> None:
    key = generate_key(LOCATION)
    (cache_dir / key.header_name).write_bytes(b'HTTP/1.1 200 OK\r\nETag: "v1"\r\n\r\n')
    (cache_dir / key.content_name).write_bytes(content)


def test_cli_fetch(runner, cache_dir, log_file):
    with MockTransport() as transport:
        transport.add_responses([httpx.Response(200, content=BODY)])
        result = invoke(runner, transport, cache_dir, log_file, LOCATION)

    assert result.exit_code == 0
    assert result.stdout_bytes == BODY
    assert len(record_files(cache_dir)) == 2
    assert f"Requesting resource: {LOCATION}" in log_file.read_text()


def test_cli_not_modified(runner, cache_dir, log_file):
    prime(cache_dir)

    with MockTransport() as transport:
        transport.add_responses([httpx.Response(304)])
        result = invoke(runner, transport, cache_dir, log_file, LOCATION)

    assert result.exit_code == 0
    assert result.stdout_bytes == b"cached\n"
    assert transport.requests[0].headers["If-None-Match"] == '"v1"'


def test_cli_head(runner, cache_dir, log_file):
    with MockTransport() as transport:
        transport.add_responses([httpx.Response(200, headers={"ETag": '"v2"'})])
        result = invoke(runner, transport, cache_dir, log_file, "-I", LOCATION)

    assert result.exit_code == 0
    assert result.stdout_bytes.startswith(b"HTTP/1.1 200 OK\r\n")
    assert b'ETag: "v2"\r\n' in result.stdout_bytes
    assert record_files(cache_dir) == []


def test_cli_cache_only(runner, cache_dir, log_file):
    prime(cache_dir)

    with MockTransport() as transport:
        result = invoke(runner, transport, cache_dir, log_file, "-c", LOCATION)

    assert result.exit_code == 0
    assert result.stdout_bytes == b"cached\n"
    assert transport.requests == []


def test_cli_cache_only_miss(runner, cache_dir, log_file):
    with MockTransport() as transport:
        result = invoke(runner, transport, cache_dir, log_file, "-c", LOCATION)

    assert result.exit_code == 1
    assert result.stdout_bytes == b""


def test_cli_force_refresh_not_modified(runner, cache_dir, log_file):
    prime(cache_dir)

    with MockTransport() as transport:
        transport.add_responses([httpx.Response(304)])
        result = invoke(runner, transport, cache_dir, log_file, "-F", LOCATION)

    assert result.exit_code == 1
    assert result.stdout_bytes == b""
    assert "Fresh resource not available" in log_file.read_text()


def test_cli_check_only_modified(runner, cache_dir, log_file):
    prime(cache_dir)

    with MockTransport() as transport:
        transport.add_responses([httpx.Response(200, content=BODY)])
        result = invoke(runner, transport, cache_dir, log_file, "-C", LOCATION)

    assert result.exit_code == 1
    assert (cache_dir / generate_key(LOCATION).content_name).read_bytes() == b"cached\n"


def test_cli_compressed(runner, cache_dir, log_file):
    with MockTransport() as transport:
        transport.add_responses([httpx.Response(200, content=BODY)])
        result = invoke(runner, transport, cache_dir, log_file, "-x", LOCATION)

    assert result.exit_code == 0
    assert (cache_dir / generate_key(LOCATION, compressed=True).content_name).read_bytes() == BODY


@pytest.mark.parametrize(
    "flags",
    [
        ["-F", "-C"],
        ["-F", "-c"],
        ["-C", "-c"],
        ["-F", "-I"],
    ],
)
def test_cli_conflicting_options(runner, cache_dir, log_file, flags):
    with MockTransport() as transport:
        result = invoke(runner, transport, cache_dir, log_file, *flags, LOCATION)

    assert result.exit_code == 2
    assert transport.requests == []


def test_cli_missing_cache_dir(runner, tmp_path, log_file):
    with MockTransport() as transport:
        result = invoke(runner, transport, tmp_path / "missing", log_file, LOCATION)

    assert result.exit_code == 2
    assert "cache directory does not exist" in log_file.read_text()


def test_cli_cache_dir_from_environment(runner, cache_dir, log_file):
    prime(cache_dir)

    with MockTransport() as transport:
        result = runner.invoke(
            cli,
            ["--log-file", str(log_file), "-c", LOCATION],
            obj={"transport": transport},
            env={"CACHE_DIR": str(cache_dir), "TMPDIR": None},
        )

    assert result.exit_code == 0
    assert result.stdout_bytes == b"cached\n"


def test_cli_unexpected_response(runner, cache_dir, log_file):
    with MockTransport() as transport:
        transport.add_responses([httpx.Response(404)])
        result = invoke(runner, transport, cache_dir, log_file, LOCATION)

    assert result.exit_code == 9
    assert f"fetch failed on {LOCATION}: unexpected HTTP response code 404" in log_file.read_text()


def test_cli_integrity_error(runner, cache_dir, log_file):
    with MockTransport() as transport:
        transport.add_responses([httpx.Response(200, headers={"Content-Length": "42"}, content=b"short")])
        result = invoke(runner, transport, cache_dir, log_file, LOCATION)

    assert result.exit_code == 3
    assert record_files(cache_dir) == []


def test_cli_network_error(runner, cache_dir, log_file):
    with MockTransport() as transport:
        transport.add_responses([httpx.ConnectError("connection refused")])
        result = invoke(runner, transport, cache_dir, log_file, LOCATION)

    assert result.exit_code == 5


def test_cli_quiet_logging(runner, cache_dir, log_file):
    with MockTransport() as transport:
        transport.add_responses([httpx.Response(200, content=BODY)])
        result = invoke(runner, transport, cache_dir, log_file, "-q", LOCATION)

    assert result.exit_code == 0
    assert log_file.read_text() == ""


def test_cli_verbose_logging(runner, cache_dir, log_file):
    with MockTransport() as transport:
        transport.add_responses([httpx.Response(200, content=BODY)])
        result = invoke(runner, transport, cache_dir, log_file, "-v", LOCATION)

    assert result.exit_code == 0
    assert "DEBUG" in log_file.read_text()


def test_cli_scratch_dir(runner, cache_dir, scratch_dir, log_file):
    with MockTransport() as transport:
        transport.add_responses([httpx.Response(200, content=BODY)])
        result = invoke(runner, transport, cache_dir, log_file, "-T", str(scratch_dir), LOCATION)

    assert result.exit_code == 0
    assert list(scratch_dir.iterdir()) == []
    assert len(record_files(cache_dir)) == 2


def test_cli_help(runner):
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "--force-refresh" in result.output
    assert "LOCATION" in result.output
