"""Flow commands -- ``oauthbridge authorize`` and ``oauthbridge callback``.

These run the real protocol against a configured provider so a descriptor
can be checked end to end before wiring it into an application:

1. ``oauthbridge authorize github`` prints the URL to open in a browser.
2. After consenting, paste the URL the provider redirected to into
   ``oauthbridge callback github '<url>'`` to exchange the code and print
   the normalized profile.

The ``callback`` command's verification step accepts any profile that has a
derivable user id. Access tokens are never printed.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
import typer

from oauthbridge.commands._common import load_registry_or_exit
from oauthbridge.exit_codes import (
    EXIT_ACCESS_DENIED,
    EXIT_GENERIC_FAILURE,
    EXIT_PROVIDER_ERROR,
    EXIT_TRANSPORT_ERROR,
)
from oauthbridge.exceptions import ConfigError
from oauthbridge.models import TokenResponse, UserProfile
from oauthbridge.outcomes import (
    Denied,
    ProviderFailure,
    Redirect,
    Success,
    TransportFailure,
    VerifyErrored,
    VerifyFailed,
)
from oauthbridge.output import error, info, render, success, warning, write

_HIDDEN_TOKEN_FIELDS = ("access_token", "refresh_token", "id_token")


def accept_identified_profile(
    request: Any, token: TokenResponse, profile: UserProfile
) -> tuple[Optional[dict[str, Any]], Any]:
    """Verification used by ``callback``: accept any profile with a user id."""
    if profile.id is None:
        return None, "No user id could be derived from the provider profile"

    token_info = {
        key: value
        for key, value in token.to_dict().items()
        if key not in _HIDDEN_TOKEN_FIELDS
    }
    return profile.to_dict(), {"token": token_info}


def authorize_command(
    ctx: typer.Context,
    provider: str = typer.Argument(..., help="Provider id."),
    state: Optional[str] = typer.Option(None, "--state", help="Opaque state value."),
    prompt: Optional[str] = typer.Option(None, "--prompt", help="Forwarded prompt value."),
) -> None:
    """Print the authorization URL for PROVIDER."""
    registry = load_registry_or_exit(ctx)
    try:
        flow = registry.create_flow(provider, verify=accept_identified_profile)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    query = {"prompt": prompt} if prompt else {}
    redirect = flow.authorization_request(query, state=state)
    write(redirect.url)


def callback_command(
    ctx: typer.Context,
    provider: str = typer.Argument(..., help="Provider id."),
    callback_url: str = typer.Argument(..., help="Full URL the provider redirected to."),
    timeout: float = typer.Option(30.0, "--timeout", help="Request timeout in seconds."),
) -> None:
    """Complete a flow from the provider's callback URL and print the profile."""
    registry = load_registry_or_exit(ctx)
    try:
        flow = registry.create_flow(
            provider, verify=accept_identified_profile, timeout=timeout
        )
        query = dict(httpx.URL(callback_url).params)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    except httpx.InvalidURL as exc:
        error(f"Invalid callback URL: {exc}")
        raise typer.Exit(code=EXIT_GENERIC_FAILURE) from None

    outcome = flow.authenticate(query)

    if isinstance(outcome, Success):
        success(f"Authenticated with {flow.descriptor.display_name}")
        render({"profile": outcome.user, **(outcome.info or {})})
        return

    if isinstance(outcome, Redirect):
        warning("Callback URL carries no code; start the flow here:")
        write(outcome.url)
        return

    if isinstance(outcome, Denied):
        error(f"{outcome.reason} (HTTP {outcome.status})")
        raise typer.Exit(code=EXIT_ACCESS_DENIED)

    if isinstance(outcome, VerifyFailed):
        error(f"Verification failed: {outcome.info}")
        raise typer.Exit(code=EXIT_ACCESS_DENIED)

    if isinstance(outcome, ProviderFailure):
        error(str(outcome.error))
        if outcome.details is not None:
            info("Provider response:")
            render(outcome.details)
        raise typer.Exit(code=EXIT_PROVIDER_ERROR)

    if isinstance(outcome, TransportFailure):
        error(str(outcome.error))
        raise typer.Exit(code=EXIT_TRANSPORT_ERROR)

    if isinstance(outcome, VerifyErrored):
        error(f"Verification raised: {outcome.error}")
    raise typer.Exit(code=EXIT_GENERIC_FAILURE)
