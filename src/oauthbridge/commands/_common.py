"""Helpers shared by the CLI sub-commands."""

from __future__ import annotations

from typing import Optional

import typer

from oauthbridge.exceptions import ConfigError
from oauthbridge.output import debug, error
from oauthbridge.registry import ProviderRegistry


def load_registry_or_exit(ctx: typer.Context) -> ProviderRegistry:
    """Load the registry from the settings file chosen on the command line.

    Raises:
        typer.Exit: With the config error exit code when loading fails.
    """
    from oauthbridge.config import load_registry, resolve_settings_path

    cli_path: Optional[str] = (ctx.obj or {}).get("config")
    path = resolve_settings_path(cli_path)
    debug(f"Loading settings from {path}")
    try:
        return load_registry(path)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
