"""Terminal outcomes of an Authorization Code flow.

:meth:`~oauthbridge.flow.OAuth2Flow.authenticate` returns exactly one of
the dataclasses below instead of calling back into a host runtime. Hosts
that do work with callbacks (``redirect``, ``success``, ``fail``,
``error``) implement :class:`OutcomeSink` and pass the outcome to
:func:`dispatch`.

================  =====================================  ================
Outcome           Meaning                                Sink method
================  =====================================  ================
Redirect          flow initiation, send the user on      ``redirect_to``
Denied            user declined consent (HTTP 403 hint)  ``fail``
ProviderFailure   provider reported an OAuth error       ``error``
TransportFailure  a provider endpoint was unreachable    ``error``
VerifyFailed      verification rejected the user         ``fail``
VerifyErrored     verification raised                    ``error``
Success           verification accepted the user         ``succeed``
================  =====================================  ================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol, Union

from oauthbridge.exceptions import ProviderAuthError, TransportError

ACCESS_DENIED_REASON = "Access denied"
ACCESS_DENIED_STATUS = 403


@dataclass(frozen=True)
class Redirect:
    """Send the user agent to the provider's authorization URL."""

    url: str

    kind = "redirect"


@dataclass(frozen=True)
class Denied:
    """The user declined consent at the provider."""

    reason: str = ACCESS_DENIED_REASON
    status: int = ACCESS_DENIED_STATUS

    kind = "denied"


@dataclass(frozen=True)
class ProviderFailure:
    """The provider reported a protocol error.

    Attributes:
        error: The raised :class:`~oauthbridge.exceptions.ProviderAuthError`.
    """

    error: ProviderAuthError

    kind = "provider_error"

    @property
    def details(self) -> Any:
        """The provider-supplied payload (callback query or response body)."""
        return self.error.payload


@dataclass(frozen=True)
class TransportFailure:
    """A provider endpoint could not be reached."""

    error: TransportError

    kind = "transport_error"

    @property
    def cause(self) -> Optional[BaseException]:
        """The underlying :mod:`httpx` exception."""
        return self.error.__cause__


@dataclass(frozen=True)
class VerifyFailed:
    """The verification callback declined the user."""

    info: Any = None

    kind = "verify_failed"


@dataclass(frozen=True)
class VerifyErrored:
    """The verification callback raised."""

    error: Exception

    kind = "verify_error"


@dataclass(frozen=True)
class Success:
    """The verification callback accepted the user."""

    user: Any
    info: Any = None

    kind = "success"


FlowOutcome = Union[
    Redirect,
    Denied,
    ProviderFailure,
    TransportFailure,
    VerifyFailed,
    VerifyErrored,
    Success,
]


class OutcomeSink(Protocol):
    """Callbacks a host runtime exposes to receive a flow's result."""

    def redirect_to(self, url: str) -> Any: ...

    def succeed(self, user: Any, info: Any = None) -> Any: ...

    def fail(self, info: Any = None, status: Optional[int] = None) -> Any: ...

    def error(self, err: Exception) -> Any: ...


def dispatch(outcome: FlowOutcome, sink: OutcomeSink) -> Any:
    """Deliver *outcome* to exactly one method of *sink*.

    Returns:
        Whatever the sink method returns.

    Raises:
        TypeError: If *outcome* is not a known flow outcome.
    """
    if isinstance(outcome, Redirect):
        return sink.redirect_to(outcome.url)
    if isinstance(outcome, Success):
        return sink.succeed(outcome.user, outcome.info)
    if isinstance(outcome, Denied):
        return sink.fail(outcome.reason, outcome.status)
    if isinstance(outcome, VerifyFailed):
        return sink.fail(outcome.info)
    if isinstance(outcome, (ProviderFailure, TransportFailure, VerifyErrored)):
        return sink.error(outcome.error)
    raise TypeError(f"Unknown flow outcome: {outcome!r}")
