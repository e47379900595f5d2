"""Command line entry point: ``cget [OPTIONS] LOCATION``."""

from __future__ import annotations

import logging
import sys
import typing as tp
from pathlib import Path

import click

from cget._core.models import QuietMiss
from cget._exceptions import CgetError
from cget._policies import RetrievalOptions
from cget._sync._cache import ConditionalCache
from cget._sync._fetcher import Fetcher
from cget._sync._storages import FileStorage

logger = logging.getLogger("cget.cli")

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

QUIET_MISS_EXIT_CODE = 1


def configure_logging(level: int, log_file: tp.Optional[Path] = None) -> None:
    handler: logging.Handler
    if log_file is not None:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    package_logger = logging.getLogger("cget")
    for existing in list(package_logger.handlers):
        package_logger.removeHandler(existing)
        existing.close()
    package_logger.addHandler(handler)
    package_logger.setLevel(level)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-v", "--verbose", is_flag=True, help="Log debug messages.")
@click.option("-q", "--quiet", is_flag=True, help="Log no messages other than warnings or errors.")
@click.option("-F", "--force-refresh", is_flag=True, help="Output the resource only if the server sends fresh content.")
@click.option("-C", "--check", "check_only", is_flag=True, help="Output the cached resource only if it is up-to-date.")
@click.option("-c", "--cache-only", is_flag=True, help="Output the cached resource without any network access.")
@click.option("-I", "--head", "head_only", is_flag=True, help="Issue HEAD and output the response header block.")
@click.option("-x", "--compressed", is_flag=True, help="Advertise support for HTTP compression.")
@click.option(
    "-d",
    "--cache-dir",
    envvar="CACHE_DIR",
    required=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="The persistent HTTP cache directory.",
)
@click.option(
    "-T",
    "--tmp-dir",
    envvar="TMPDIR",
    type=click.Path(file_okay=False, path_type=Path),
    help="A directory for temporary files.",
)
@click.option(
    "--log-file",
    envvar="LOG_FILE",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write log messages to this file instead of stderr.",
)
@click.argument("location")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    force_refresh: bool,
    check_only: bool,
    cache_only: bool,
    head_only: bool,
    compressed: bool,
    cache_dir: Path,
    tmp_dir: tp.Optional[Path],
    log_file: tp.Optional[Path],
    location: str,
) -> None:
    """
    Retrieves and caches the HTTP resource at LOCATION.

    A cached resource is revalidated with a conditional request (RFC 7232).
    On 200 the new resource is cached and written to stdout, on 304 the
    cached resource is written instead.

    Options -F, -C and -c are mutually exclusive. Option -I may be combined
    with -C or -c but not with -F. Compressed and uncompressed requests for
    the same location are cached separately.

    Exit codes: 0 success, 1 quiet miss, 2 configuration error, 3 integrity
    error, 5 network error, 7 malformed response, 8 storage error,
    9 unexpected HTTP response.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    configure_logging(level, log_file)

    transport = (ctx.obj or {}).get("transport")

    try:
        options = RetrievalOptions.from_flags(
            force_refresh=force_refresh,
            check_only=check_only,
            cache_only=cache_only,
            head_only=head_only,
            compressed=compressed,
        )
        storage = FileStorage(cache_dir, scratch_path=tmp_dir)
        logger.info(f"Requesting resource: {location}")
        with ConditionalCache(storage=storage, fetcher=Fetcher(transport=transport)) as cache:
            outcome = cache.retrieve(location, options=options)
    except CgetError as exc:
        logger.error(str(exc))
        ctx.exit(exc.exit_code)

    if isinstance(outcome, QuietMiss):
        ctx.exit(QUIET_MISS_EXIT_CODE)

    stdout = click.get_binary_stream("stdout")
    stdout.write(outcome.output)
    stdout.flush()
