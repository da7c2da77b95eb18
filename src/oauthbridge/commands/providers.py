"""Provider listing commands -- ``oauthbridge providers`` and ``oauthbridge catalog``."""

from __future__ import annotations

import typer

from oauthbridge.catalog import get_template, list_templates
from oauthbridge.commands._common import load_registry_or_exit
from oauthbridge.models import EndpointSpec, HeaderAuth, QueryAuth
from oauthbridge.output import info, render_table


def _describe_auth(endpoint: EndpointSpec) -> str:
    auth = endpoint.auth
    if auth is None:
        return "-"
    if isinstance(auth, HeaderAuth):
        return f"header {auth.header}: {auth.scheme}"
    if isinstance(auth, QueryAuth):
        return f"query {auth.query}"
    return auth.type


def providers_command(ctx: typer.Context) -> None:
    """List the providers configured in the settings file.

    Example::

        oauthbridge --config oauthbridge.yaml providers
    """
    registry = load_registry_or_exit(ctx)
    if not len(registry):
        info("No providers configured.")
        return

    rows: list[list[str]] = []
    for provider_id in registry.list_ids():
        descriptor = registry.descriptor(provider_id)
        endpoints = descriptor.endpoints
        rows.append([
            descriptor.id,
            descriptor.display_name,
            endpoints.authorize.url,
            _describe_auth(endpoints.token),
            _describe_auth(endpoints.user),
        ])

    render_table(
        ["ID", "Name", "Authorize URL", "Token auth", "User auth"],
        rows,
        title="Configured providers",
    )


def catalog_command() -> None:
    """List the built-in provider templates.

    A settings entry whose key matches one of these ids only needs a
    ``redirect_uri``.
    """
    rows: list[list[str]] = []
    for provider_id in list_templates():
        template = get_template(provider_id) or {}
        rows.append([
            provider_id,
            template.get("name", provider_id),
            " ".join(template.get("scope", [])),
            template.get("mapping", {}).get("id", "id"),
        ])

    render_table(
        ["ID", "Name", "Default scope", "User id field"],
        rows,
        title="Built-in providers",
    )
