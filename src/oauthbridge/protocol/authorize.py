"""Build the redirect URL that starts an Authorization Code flow.

:func:`build_authorization_url` clones the provider's authorize endpoint
URL and sets the Authorization Code request parameters on it. Parameters
already present on the endpoint URL are kept unless they are overwritten.
No network I/O happens here; the endpoint URL was validated when the
:class:`~oauthbridge.models.ProviderDescriptor` was built.
"""

from __future__ import annotations

from typing import Optional

import httpx

from oauthbridge.models import ClientRegistration, ProviderDescriptor


def merge_scopes(
    descriptor: ProviderDescriptor, registration: ClientRegistration
) -> Optional[str]:
    """Join descriptor and registration scopes.

    Descriptor scopes come first and registration scopes are appended in
    order, without de-duplication.

    Returns:
        The joined scope string, or ``None`` when neither side declares
        scopes.
    """
    if descriptor.scope is None and registration.scope is None:
        return None
    scopes = list(descriptor.scope or ()) + list(registration.scope or ())
    return descriptor.separator.join(scopes)


def build_authorization_url(
    descriptor: ProviderDescriptor,
    registration: ClientRegistration,
    state: Optional[str] = None,
    prompt: Optional[str] = None,
) -> str:
    """Return the provider authorization URL for a new flow.

    Parameters are set in this order: ``response_type``, ``client_id``,
    ``redirect_uri``, then ``scope``, ``state`` and ``prompt`` when they
    apply. Identical inputs always produce an identical URL.

    Args:
        descriptor: The provider to redirect to.
        registration: The client registered with that provider.
        state: Opaque CSRF-binding value chosen by the caller.
        prompt: Value of the inbound request's ``prompt`` parameter,
            forwarded unvalidated.

    Returns:
        The fully-formed redirect URL.
    """
    url = httpx.URL(descriptor.endpoints.authorize.url)
    params = url.params

    params = params.set("response_type", "code")
    params = params.set("client_id", registration.client_id)
    params = params.set("redirect_uri", descriptor.redirect_uri)

    scope = merge_scopes(descriptor, registration)
    if scope is not None:
        params = params.set("scope", scope)

    if state:
        params = params.set("state", state)

    if prompt:
        params = params.set("prompt", prompt)

    return str(url.copy_with(params=params))
