"""The Authorization Code flow state machine.

:class:`OAuth2Flow` drives one provider through the whole flow::

    classify callback
      +-- denied          -> Denied
      +-- provider error  -> ProviderFailure
      +-- no code         -> Redirect (authorization request)
      +-- code            -> token exchange -> user info -> normalize -> verify
                                                                   +-> Success / VerifyFailed

Every stage short-circuits to a terminal outcome on failure and nothing is
retried. The verification callback is the only place where a user is
accepted or rejected at the application level; the flow itself only
decides protocol-level outcomes.

An ``OAuth2Flow`` holds nothing but immutable configuration, so one
instance can serve any number of concurrent callbacks.

See Also:
    :mod:`oauthbridge.outcomes` for the outcome types.
    :class:`~oauthbridge.registry.ProviderRegistry` for building flows
    from configuration.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any, Callable, Optional

import httpx

from oauthbridge.client.token import exchange_code
from oauthbridge.client.transport import DEFAULT_TIMEOUT
from oauthbridge.client.userinfo import fetch_user_info
from oauthbridge.exceptions import ProviderAuthError, TransportError
from oauthbridge.models import (
    ClientRegistration,
    ProviderDescriptor,
    TokenResponse,
    UserProfile,
)
from oauthbridge.outcomes import (
    Denied,
    FlowOutcome,
    ProviderFailure,
    Redirect,
    Success,
    TransportFailure,
    VerifyErrored,
    VerifyFailed,
)
from oauthbridge.protocol.authorize import build_authorization_url
from oauthbridge.protocol.callback import CallbackKind, classify_callback
from oauthbridge.protocol.profile import normalize_profile

logger = logging.getLogger(__name__)

VerifyCallback = Callable[[Any, TokenResponse, UserProfile], "tuple[Any, Any]"]
"""``verify(request, token_response, profile) -> (user, info)``.

Return a falsy ``user`` to reject the login with ``info`` as the reason.
Raise to signal an unexpected failure.
"""


class OAuth2Flow:
    """Authorization Code flow for a single provider.

    Args:
        descriptor: The provider description.
        registration: The client registered with that provider.
        verify: Application callback that turns a token response and a
            normalized profile into an application user.
        client: Optional shared :class:`httpx.Client`. When omitted, each
            :meth:`authenticate` call opens and closes its own client.
        timeout: Request timeout in seconds for clients this flow opens.

    Example::

        flow = OAuth2Flow(descriptor, registration, verify=connect_user)
        outcome = flow.authenticate(request.query_params, state=csrf_token)
    """

    def __init__(
        self,
        descriptor: ProviderDescriptor,
        registration: ClientRegistration,
        verify: VerifyCallback,
        client: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.descriptor = descriptor
        self.registration = registration
        self.verify = verify
        self._client = client
        self._timeout = timeout

    @property
    def name(self) -> str:
        return self.descriptor.id

    # ------------------------------------------------------------------ #
    # Entry point
    # ------------------------------------------------------------------ #

    def authenticate(
        self,
        query: Mapping[str, Any],
        state: Optional[str] = None,
        request: Any = None,
    ) -> FlowOutcome:
        """Handle one inbound request and return its terminal outcome.

        Args:
            query: The inbound request's query parameters (single-valued).
            state: CSRF-binding value to put on a new authorization request.
                Ignored when the request is a callback.
            request: The host's request object, passed through to the
                verification callback. Defaults to *query*.

        Returns:
            One :data:`~oauthbridge.outcomes.FlowOutcome`.
        """
        kind = classify_callback(query)
        logger.debug("Callback for '%s' classified as %s", self.name, kind.value)

        if kind is CallbackKind.DENIED:
            return Denied()

        if kind is CallbackKind.PROVIDER_ERROR:
            logger.warning("Provider '%s' returned error '%s'", self.name, query.get("error"))
            return ProviderFailure(ProviderAuthError(dict(query)))

        if kind is CallbackKind.INITIATE:
            return self.authorization_request(query, state=state)

        return self._complete(str(query["code"]), request if request is not None else query)

    # ------------------------------------------------------------------ #
    # Stages
    # ------------------------------------------------------------------ #

    def authorization_request(
        self,
        query: Optional[Mapping[str, Any]] = None,
        state: Optional[str] = None,
    ) -> Redirect:
        """Build the redirect that starts the flow.

        A ``prompt`` parameter on the inbound query is forwarded as is.
        """
        prompt = (query or {}).get("prompt")
        url = build_authorization_url(
            self.descriptor, self.registration, state=state, prompt=prompt
        )
        return Redirect(url)

    def authorization_code_grant(self, code: str) -> TokenResponse:
        """Exchange *code* for a token.

        Raises:
            TransportError: If the token endpoint is unreachable.
            ProviderAuthError: If the provider rejects the exchange.
        """
        with self._transport() as client:
            return exchange_code(code, self.descriptor, self.registration, client)

    def user_info(self, access_token: str) -> UserProfile:
        """Fetch and normalize the profile for *access_token*.

        Raises:
            TransportError: If the user endpoint is unreachable.
            ProviderAuthError: If the provider rejects the request.
        """
        with self._transport() as client:
            payload = fetch_user_info(access_token, self.descriptor, self.registration, client)
        return normalize_profile(payload, self.descriptor)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _complete(self, code: str, request: Any) -> FlowOutcome:
        """Run exchange, user info, and verification for a callback code."""
        with self._transport() as client:
            try:
                token = exchange_code(code, self.descriptor, self.registration, client)
                payload = fetch_user_info(
                    token.access_token, self.descriptor, self.registration, client
                )
            except ProviderAuthError as exc:
                return ProviderFailure(exc)
            except TransportError as exc:
                logger.warning("Provider '%s' unreachable: %s", self.name, exc)
                return TransportFailure(exc)

        profile = normalize_profile(payload, self.descriptor)
        if profile.id is None:
            logger.debug("No user id could be derived from the '%s' profile", self.name)

        return self._verify(request, token, profile)

    def _verify(self, request: Any, token: TokenResponse, profile: UserProfile) -> FlowOutcome:
        try:
            user, info = self.verify(request, token, profile)
        except Exception as exc:
            logger.warning("Verification for '%s' raised: %s", self.name, exc)
            return VerifyErrored(exc)

        if not user:
            return VerifyFailed(info)
        return Success(user, info)

    @contextmanager
    def _transport(self) -> Iterator[httpx.Client]:
        """Yield the injected client, or a fresh one closed on exit."""
        if self._client is not None:
            yield self._client
            return
        with httpx.Client(timeout=self._timeout) as client:
            yield client
