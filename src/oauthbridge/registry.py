"""Provider registry -- validated descriptors and their client registrations.

:class:`ProviderRegistry` is the hand-off point between configuration and
flows. Everything is validated when it is registered, so a broken
descriptor surfaces as a :class:`~oauthbridge.exceptions.ConfigError` at
startup instead of half-way through a user's login.

See Also:
    :func:`oauthbridge.config.load_registry` to build a registry from a
    settings file.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional, Union

import httpx
from pydantic import ValidationError

from oauthbridge.client.transport import DEFAULT_TIMEOUT
from oauthbridge.exceptions import ConfigError
from oauthbridge.flow import OAuth2Flow, VerifyCallback
from oauthbridge.models import ClientRegistration, ProviderDescriptor


def format_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic error into one readable line per problem."""
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err["loc"]) or "(root)"
        problems.append(f"{location}: {err['msg']}")
    return "; ".join(problems)


class ProviderRegistry:
    """Registry of providers keyed by descriptor id.

    Example::

        registry = ProviderRegistry()
        registry.register(descriptor, registration)
        flow = registry.create_flow("github", verify=connect_user)
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[ProviderDescriptor, ClientRegistration]] = {}

    def register(
        self,
        descriptor: Union[ProviderDescriptor, Mapping[str, Any]],
        registration: Union[ClientRegistration, Mapping[str, Any]],
    ) -> ProviderDescriptor:
        """Validate and register a provider.

        Mappings are validated into models first. Registering the same id
        again replaces the previous entry.

        Args:
            descriptor: A descriptor, or its declarative mapping.
            registration: A client registration, or its mapping.

        Returns:
            The validated descriptor.

        Raises:
            ConfigError: If either argument fails validation.
        """
        if not isinstance(descriptor, ProviderDescriptor):
            try:
                descriptor = ProviderDescriptor.model_validate(dict(descriptor))
            except ValidationError as exc:
                raise ConfigError(
                    f"Invalid provider descriptor: {format_validation_error(exc)}"
                ) from exc

        if not isinstance(registration, ClientRegistration):
            try:
                registration = ClientRegistration.model_validate(dict(registration))
            except ValidationError as exc:
                raise ConfigError(
                    f"Invalid client registration for '{descriptor.id}': "
                    f"{format_validation_error(exc)}"
                ) from exc

        self._entries[descriptor.id] = (descriptor, registration)
        return descriptor

    def get(self, provider_id: str) -> tuple[ProviderDescriptor, ClientRegistration]:
        """Return the ``(descriptor, registration)`` pair for *provider_id*.

        Raises:
            ConfigError: If no provider is registered under that id.
        """
        entry = self._entries.get(provider_id)
        if entry is None:
            available = ", ".join(self.list_ids()) or "(none)"
            raise ConfigError(
                f"No provider registered with id '{provider_id}'. "
                f"Available providers: {available}"
            )
        return entry

    def descriptor(self, provider_id: str) -> ProviderDescriptor:
        return self.get(provider_id)[0]

    def list_ids(self) -> list[str]:
        return sorted(self._entries)

    def create_flow(
        self,
        provider_id: str,
        verify: VerifyCallback,
        client: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> OAuth2Flow:
        """Build an :class:`~oauthbridge.flow.OAuth2Flow` for a registered provider.

        Raises:
            ConfigError: If *provider_id* is not registered.
        """
        descriptor, registration = self.get(provider_id)
        return OAuth2Flow(descriptor, registration, verify, client=client, timeout=timeout)

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
