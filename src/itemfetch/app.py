"""Typer application and CLI entry point for itemfetch.

This module wires together the top-level Typer application, the ``load``
command and the ``config`` sub-command group.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers, invokes the Typer app and
maps :class:`~itemfetch.exceptions.ItemfetchError` to its exit code.
Unhandled exceptions are written to a crash log under the data directory.

See Also:
    :mod:`itemfetch.config`: Configuration resolution used by ``load``.
    :mod:`itemfetch.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import asyncio
import json
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from itemfetch import __version__
from itemfetch.exit_codes import EXIT_GENERIC_FAILURE
from itemfetch.models import AppConfig, RuntimeState


app = typer.Typer(
    name="itemfetch",
    help="Fetch, cache and summarise an items list.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

from itemfetch.commands.config import config_app  # noqa: E402

app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"itemfetch {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show cache hits and expirations."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~itemfetch.output.OutputManager` from the
    CLI flags.
    """
    from itemfetch.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))


@app.command("load")
def load_command(
    path: str = typer.Option("/items", "--path", help="Items endpoint path."),
    param: Optional[list[str]] = typer.Option(
        None, "--param", "-P", help="Query parameter as key=value (repeatable)."
    ),
    min_score: float = typer.Option(
        3.0, "--min-score", help="Only show active items scoring above this."
    ),
    runs: int = typer.Option(2, "--runs", min=1, help="How many times to load."),
    live: bool = typer.Option(
        False, "--live", help="Call the configured base URL instead of the mock endpoint."
    ),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Override the base URL."),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Per-attempt timeout in seconds."
    ),
    retries: Optional[int] = typer.Option(
        None, "--retries", min=1, help="Attempts per request."
    ),
    no_cache: bool = typer.Option(False, "--no-cache", help="Disable the response cache."),
) -> None:
    """Load the items list and print the resulting state.

    Every run shares one client and one cache, so with the default two runs
    the second is served from the cache while its TTL lasts.

    Example::

        itemfetch load
        itemfetch -v load --param limit=5 --param sort=score
        itemfetch --json load --live --retries 3
    """
    from itemfetch.config import resolve_config
    from itemfetch.output import format_response, info

    config = resolve_config(
        cli_base_url=base_url,
        cli_timeout=timeout,
        cli_retry_count=retries,
        cli_cache_enabled=False if no_cache else None,
    )
    params = _parse_params(param) if param else None

    info(f"{config.app_name} v{__version__} booting...")
    state, exit_code = asyncio.run(_run_loads(config, path, params, min_score, runs, live))

    format_response(state.model_dump(mode="json"))
    if exit_code:
        raise typer.Exit(code=exit_code)


async def _run_loads(
    config: AppConfig,
    path: str,
    params: Optional[dict[str, Any]],
    min_score: float,
    runs: int,
    live: bool,
) -> tuple[RuntimeState, int]:
    """Run the loader *runs* times against one client and cache."""
    from itemfetch.cache import TTLCache
    from itemfetch.client import AsyncClient
    from itemfetch.loader import ItemLoader
    from itemfetch.transport import MockItemsEndpoint

    cache = TTLCache(default_ttl=config.cache.ttl_seconds)
    transport = None if live else MockItemsEndpoint().transport()

    async with AsyncClient(config.request, cache=cache, transport=transport) as client:
        loader = ItemLoader(client, min_score=min_score)
        for _ in range(runs):
            await loader.load_items(path, params)

    exit_code = loader.last_error.exit_code if loader.last_error is not None else 0
    return loader.state, exit_code


def _parse_params(pairs: list[str]) -> dict[str, Any]:
    """Turn ``key=value`` strings into a dict, decoding JSON scalars where possible."""
    from itemfetch.exceptions import InvalidArgumentError

    params: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise InvalidArgumentError(f"Expected key=value, got: {pair}")
        try:
            params[key] = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            params[key] = raw
    return params


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from itemfetch.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``itemfetch`` console script.

    :class:`~itemfetch.exceptions.ItemfetchError` instances cause a clean
    exit with the error's ``exit_code``. All other exceptions produce a
    crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from itemfetch.exceptions import ItemfetchError
        from itemfetch.output import error

        if isinstance(exc, ItemfetchError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
