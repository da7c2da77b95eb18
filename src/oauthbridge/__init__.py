"""oauthbridge -- a declarative OAuth2 Authorization Code client.

This package authenticates users against any OAuth2 provider that speaks the
Authorization Code grant, driven entirely by a declarative provider
description: endpoint URLs, how the client and the access token are
presented, how token responses are encoded, and which profile field holds
the user identifier.

Typical usage::

    from oauthbridge.config import load_registry

    registry = load_registry("oauthbridge.yaml")
    flow = registry.create_flow("github", verify=connect_user)
    outcome = flow.authenticate(request.query_params, state=csrf_token)

Modules:
    models: Pydantic models for descriptors, registrations, and flow data.
    protocol: Pure protocol helpers (authorize URL, callback, profile).
    client: Token exchange and user-info HTTP calls over httpx.
    flow: The Authorization Code state machine.
    outcomes: Terminal flow outcomes and host sink dispatch.
    registry: Provider registry with fail-fast validation.
    catalog: Built-in descriptor templates for well-known providers.
    config: Settings file loading and credential resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    app: Diagnostic Typer CLI.
"""

__version__ = "0.1.0"
