"""``itemfetch config`` -- inspect the effective configuration."""

from __future__ import annotations

from pathlib import Path

import typer

from itemfetch.output import format_response, info


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Print the configuration a ``load`` run would use.

    The files consulted are listed on stderr; the merged configuration
    goes to stdout.

    Example::

        itemfetch config show
        ITEMFETCH_RETRY_COUNT=4 itemfetch --json config show
    """
    from itemfetch.config import get_config_dir, resolve_config

    config = resolve_config()
    for label, path in (
        ("User config", get_config_dir() / "config.json"),
        ("Project config", Path.cwd() / "itemfetch.json"),
    ):
        info(f"{label}: {path}{'' if path.is_file() else ' (not found)'}")
    format_response(config.model_dump(mode="json"))
