"""Typer application and console-script entry point for oauthbridge.

The CLI is a diagnostic companion to the library. It lists configured
providers, prints authorization URLs, and completes a flow from a pasted
callback URL, so a provider description can be exercised without an
application around it::

    oauthbridge -c oauthbridge.yaml authorize github --state xyz
    oauthbridge -c oauthbridge.yaml --json callback github "https://app.example.com/cb?code=..."

Errors derived from :class:`~oauthbridge.exceptions.OAuthBridgeError` that
escape a command end the process with their ``exit_code``.

See Also:
    :mod:`oauthbridge.config` for settings file resolution.
    :mod:`oauthbridge.exit_codes` for the meaning of each exit status.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import typer

from oauthbridge import __version__
from oauthbridge.commands.flow import authorize_command, callback_command
from oauthbridge.commands.providers import catalog_command, providers_command
from oauthbridge.exceptions import OAuthBridgeError
from oauthbridge.exit_codes import EXIT_GENERIC_FAILURE
from oauthbridge.output import OutputFormat, OutputManager, error, set_output

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="oauthbridge",
    help="Drive OAuth2 Authorization Code flows from declarative provider descriptions.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("providers")(providers_command)
app.command("catalog")(catalog_command)
app.command("authorize")(authorize_command)
app.command("callback")(callback_command)


def _print_version(value: bool) -> None:
    if not value:
        return
    typer.echo(f"oauthbridge {__version__}")
    raise typer.Exit()


def _enable_debug_logging() -> None:
    """Send library log records to stderr at DEBUG level."""
    logging.basicConfig(
        level=logging.DEBUG,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_print_version,
        is_eager=True,
        help="Show version and exit.",
    ),
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Settings file (default: $OAUTHBRIDGE_CONFIG or ./oauthbridge.yaml).",
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.AUTO,
        "--format",
        "-f",
        case_sensitive=False,
        help="Output format for command results.",
    ),
    json_output: bool = typer.Option(False, "--json", help="Shorthand for --format json."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colour output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print results and errors."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log provider requests to stderr."),
) -> None:
    """Install output and logging, and remember the settings path for sub-commands."""
    if json_output:
        output_format = OutputFormat.JSON

    set_output(
        OutputManager(format=output_format, no_color=no_color, quiet=quiet, verbose=verbose)
    )
    if verbose:
        _enable_debug_logging()

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


def main() -> None:
    """Entry point of the ``oauthbridge`` console script.

    Ctrl-C exits with status 130.
    """
    try:
        app()
    except KeyboardInterrupt:
        sys.stderr.write("\nInterrupted.\n")
        sys.exit(130)
    except OAuthBridgeError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        logger.debug("Unhandled error", exc_info=True)
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
