"""Authorization code to access token exchange."""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from oauthbridge.client.transport import decode_body, request_headers, send
from oauthbridge.exceptions import ProviderAuthError
from oauthbridge.models import (
    ClientRegistration,
    ClientSecretBasic,
    ClientSecretPost,
    HTTPMethod,
    ProviderDescriptor,
    TokenResponse,
)
from oauthbridge.protocol.credentials import registration_credentials

logger = logging.getLogger(__name__)


def token_request_body(
    code: str,
    descriptor: ProviderDescriptor,
    registration: ClientRegistration,
) -> dict[str, str]:
    """Build the form body for the token request.

    ``redirect_uri`` must match the one sent in the authorization request;
    the provider enforces that, not this client. Client credentials are only
    added to the body for ``client_secret_post``.
    """
    data = {
        "grant_type": "authorization_code",
        "code": code,
        "redirect_uri": descriptor.redirect_uri,
    }
    if isinstance(descriptor.endpoints.token.auth, ClientSecretPost):
        data["client_id"] = registration.client_id
        data["client_secret"] = registration.client_secret.get_secret_value()
    return data


def exchange_code(
    code: str,
    descriptor: ProviderDescriptor,
    registration: ClientRegistration,
    client: httpx.Client,
) -> TokenResponse:
    """Exchange an authorization code for an access token.

    The request uses the token endpoint's declared method (POST by default)
    with a form-encoded body. For ``client_secret_basic`` the client
    authenticates with an ``Authorization: Basic`` header instead of body
    parameters.

    Args:
        code: The ``code`` parameter received on the callback.
        descriptor: The provider to exchange with.
        registration: The client credentials.
        client: The transport to send the request with.

    Returns:
        The decoded :class:`~oauthbridge.models.TokenResponse`.

    Raises:
        TransportError: If the token endpoint cannot be reached.
        ProviderAuthError: If the status is not 200 (the decoded body is
            kept as the error payload) or the body has no ``access_token``.
    """
    endpoint = descriptor.endpoints.token
    method = (endpoint.method or HTTPMethod.POST).value

    headers = request_headers(endpoint)
    if isinstance(endpoint.auth, ClientSecretBasic):
        headers["Authorization"] = f"Basic {registration_credentials(registration)}"

    data = token_request_body(code, descriptor, registration)

    logger.debug("Exchanging authorization code for '%s' at %s", descriptor.id, endpoint.url)
    response = send(client, method, endpoint.url, headers=headers, data=data)
    payload = decode_body(response, endpoint.parser)

    if response.status_code != 200:
        logger.warning(
            "Token endpoint for '%s' answered HTTP %d", descriptor.id, response.status_code
        )
        raise ProviderAuthError(payload, status_code=response.status_code)

    if not isinstance(payload, dict) or "access_token" not in payload:
        raise ProviderAuthError(
            payload,
            message="Token response missing 'access_token' field",
            status_code=response.status_code,
        )

    try:
        return TokenResponse.model_validate(payload)
    except ValidationError as exc:
        raise ProviderAuthError(
            payload,
            message=f"Malformed token response: {exc.errors()[0]['msg']}",
            status_code=response.status_code,
        ) from exc
