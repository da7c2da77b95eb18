"""Authenticated user-info fetch."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from oauthbridge.client.transport import decode_body, request_headers, send
from oauthbridge.exceptions import ProviderAuthError
from oauthbridge.models import (
    ClientRegistration,
    HeaderAuth,
    HTTPMethod,
    ProviderDescriptor,
    QueryAuth,
    ResponseParser,
)
from oauthbridge.protocol.credentials import registration_credentials

logger = logging.getLogger(__name__)


def user_info_auth(
    access_token: str,
    descriptor: ProviderDescriptor,
    registration: ClientRegistration,
) -> tuple[dict[str, str], dict[str, str]]:
    """Return the ``(headers, params)`` that present the token to the user endpoint.

    Header-based auth with the ``Basic`` scheme sends the client
    credentials; every other scheme sends ``"<scheme> <access_token>"``.
    Query-based auth adds the token under the declared parameter name.
    """
    auth = descriptor.endpoints.user.auth
    headers: dict[str, str] = {}
    params: dict[str, str] = {}

    if isinstance(auth, HeaderAuth):
        if auth.scheme == "Basic":
            headers[auth.header] = f"Basic {registration_credentials(registration)}"
        else:
            headers[auth.header] = f"{auth.scheme} {access_token}"
    elif isinstance(auth, QueryAuth):
        params[auth.query] = access_token

    return headers, params


def fetch_user_info(
    access_token: str,
    descriptor: ProviderDescriptor,
    registration: ClientRegistration,
    client: httpx.Client,
) -> dict[str, Any]:
    """Fetch the raw profile of the user the access token belongs to.

    Args:
        access_token: Token obtained from the token exchange.
        descriptor: The provider to query.
        registration: Client credentials, used by ``Basic`` header auth.
        client: The transport to send the request with.

    Returns:
        The decoded JSON object, unmodified. See
        :func:`~oauthbridge.protocol.profile.normalize_profile`.

    Raises:
        TransportError: If the user endpoint cannot be reached.
        ProviderAuthError: If the status is not 200, or the body is not a
            JSON object. The message is the body's ``error`` field when
            there is one.
    """
    endpoint = descriptor.endpoints.user
    method = (endpoint.method or HTTPMethod.GET).value

    auth_headers, auth_params = user_info_auth(access_token, descriptor, registration)
    headers = {**request_headers(endpoint), **auth_headers}
    params = {**endpoint.params, **auth_params}

    logger.debug("Fetching user info for '%s' from %s", descriptor.id, endpoint.url)
    response = send(client, method, endpoint.url, headers=headers, params=params)

    if response.status_code != 200:
        body = decode_body(response, ResponseParser.JSON)
        message = None
        if isinstance(body, dict) and body.get("error"):
            message = str(body["error"])
        logger.warning(
            "User endpoint for '%s' answered HTTP %d", descriptor.id, response.status_code
        )
        raise ProviderAuthError(body, message=message, status_code=response.status_code)

    payload = decode_body(response, endpoint.parser)
    if not isinstance(payload, dict):
        raise ProviderAuthError(
            payload,
            message="User info response is not a JSON object",
            status_code=response.status_code,
        )
    return payload
