"""HTTP Basic credential encoding for client authentication."""

from __future__ import annotations

import base64

from oauthbridge.models import ClientRegistration


def encode_basic_credentials(client_id: str, client_secret: str) -> str:
    """Base64-encode ``client_id:client_secret`` for an HTTP Basic header.

    Both values may be empty strings but must be given.

    Args:
        client_id: The OAuth client identifier.
        client_secret: The OAuth client secret.

    Returns:
        The encoded credential, without the ``Basic`` prefix.

    Raises:
        TypeError: If either value is ``None``.
    """
    if client_id is None or client_secret is None:
        raise TypeError("client_id and client_secret must both be provided")
    credentials = f"{client_id}:{client_secret}"
    return base64.b64encode(credentials.encode("utf-8")).decode("ascii")


def registration_credentials(registration: ClientRegistration) -> str:
    """Encode the Basic credential for a :class:`ClientRegistration`."""
    return encode_basic_credentials(
        registration.client_id,
        registration.client_secret.get_secret_value(),
    )
