"""Exception hierarchy for oauthbridge.

All exceptions inherit from :class:`OAuthBridgeError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`oauthbridge.exit_codes`. The protocol stages raise these exceptions
and :class:`~oauthbridge.flow.OAuth2Flow` turns them into flow outcomes;
the CLI entry point catches whatever escapes and exits with the matching
code.

Subclass hierarchy::

    OAuthBridgeError (exit 1)
    +-- ConfigError         (exit 2)
    +-- ProviderAuthError   (exit 4)
    +-- TransportError      (exit 5)

A user declining consent and the verification callback rejecting a user
are not exceptions: they are ordinary :mod:`~oauthbridge.outcomes`.
"""

from __future__ import annotations

from typing import Any

from oauthbridge.exit_codes import (
    EXIT_CONFIG_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_PROVIDER_ERROR,
    EXIT_TRANSPORT_ERROR,
)


class OAuthBridgeError(Exception):
    """Base exception for all oauthbridge errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(OAuthBridgeError):
    """Raised when a provider descriptor, client registration, or settings file is invalid.

    Always raised while loading or registering configuration, never in the
    middle of a flow.
    """

    exit_code = EXIT_CONFIG_ERROR


class ProviderAuthError(OAuthBridgeError):
    """Raised when the provider reports an OAuth protocol error.

    Covers an ``error`` parameter on the authorization callback and any
    non-200 answer from the token or user-info endpoint. The decoded
    provider payload is kept in :attr:`payload` so callers can surface the
    provider's own ``error`` / ``error_description`` fields.

    Args:
        payload: The provider-supplied detail (callback query or decoded
            response body). ``None`` when nothing could be decoded.
        message: Optional explicit message. Defaults to the payload's
            ``error_description`` or ``error`` field when present.
        status_code: HTTP status of the failing response, if any.
    """

    exit_code = EXIT_PROVIDER_ERROR

    def __init__(
        self,
        payload: Any = None,
        message: str | None = None,
        status_code: int | None = None,
    ):
        self.payload = payload
        self.status_code = status_code
        super().__init__(message or _describe(payload, status_code))


class TransportError(OAuthBridgeError):
    """Raised on network-level failures reaching a provider endpoint.

    The originating :mod:`httpx` exception is chained as ``__cause__``.
    """

    exit_code = EXIT_TRANSPORT_ERROR


def _describe(payload: Any, status_code: int | None) -> str:
    """Build a default message for :class:`ProviderAuthError`."""
    detail = ""
    if isinstance(payload, dict):
        detail = str(payload.get("error_description") or payload.get("error") or "")
    elif isinstance(payload, str):
        detail = payload[:200]

    prefix = "Provider error"
    if status_code is not None:
        prefix = f"{prefix} (HTTP {status_code})"
    return f"{prefix}: {detail}" if detail else prefix
