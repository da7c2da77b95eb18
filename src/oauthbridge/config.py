"""Settings loading, catalog merging, and credential resolution.

This module turns a settings file into a ready
:class:`~oauthbridge.registry.ProviderRegistry`:

* **Settings path** -- :func:`resolve_settings_path` picks the file from
  the CLI flag, the ``OAUTHBRIDGE_CONFIG`` environment variable, or
  ``./oauthbridge.yaml``, in that order.
* **Parsing** -- :func:`load_settings` reads JSON or YAML, choosing the
  format by file extension and falling back to content detection.
* **Descriptors** -- :func:`build_descriptor` merges a provider entry over
  its built-in :mod:`~oauthbridge.catalog` template when one exists.
* **Credentials** -- :func:`resolve_credential` reads secrets from
  environment variables or files so they never have to live in the
  settings file itself.

Every problem is reported as :class:`~oauthbridge.exceptions.ConfigError`
while loading, never later during a flow.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import SecretStr, ValidationError

from oauthbridge.catalog import get_template
from oauthbridge.exceptions import ConfigError
from oauthbridge.models import ClientConfig, ClientRegistration, ProviderDescriptor, Settings
from oauthbridge.registry import ProviderRegistry, format_validation_error

ENV_CONFIG = "OAUTHBRIDGE_CONFIG"
DEFAULT_SETTINGS_FILENAME = "oauthbridge.yaml"


# --- Settings file ---


def resolve_settings_path(cli_path: Optional[str] = None) -> Path:
    """Return the settings file path by precedence.

    1. *cli_path* (``--config``)
    2. ``$OAUTHBRIDGE_CONFIG``
    3. ``./oauthbridge.yaml``
    """
    if cli_path:
        return Path(cli_path).expanduser()
    env_value = os.environ.get(ENV_CONFIG, "")
    if env_value:
        return Path(env_value).expanduser()
    return Path.cwd() / DEFAULT_SETTINGS_FILENAME


def _parse_content(content: str, hint: str = "") -> Any:
    """Parse *content* as JSON or YAML.

    With a ``"json"`` or ``"yaml"`` hint only that format is tried;
    otherwise JSON is tried first and YAML second.
    """
    if hint != "yaml":
        try:
            return json.loads(content)
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise ConfigError(f"Invalid JSON: {exc}") from exc

    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML: {exc}") from exc


def load_settings(path: Union[str, Path]) -> Settings:
    """Load and validate a settings file.

    Args:
        path: Path to a ``.json``, ``.yaml`` or ``.yml`` file. Other
            extensions are detected from content.

    Returns:
        The validated :class:`~oauthbridge.models.Settings`.

    Raises:
        ConfigError: If the file is missing, unreadable, unparseable, or
            fails validation.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Settings file not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read settings file {path}: {exc}") from exc

    suffix = path.suffix.lower()
    hint = "json" if suffix == ".json" else "yaml" if suffix in (".yaml", ".yml") else ""
    data = _parse_content(content, hint=hint)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a mapping at the top level")

    try:
        return Settings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings in {path}: {format_validation_error(exc)}") from exc


# --- Descriptors and registrations ---


def build_descriptor(provider_id: str, entry: dict[str, Any]) -> ProviderDescriptor:
    """Build a descriptor from a settings entry.

    When *provider_id* names a built-in template, *entry* is merged over it
    key by key; otherwise *entry* must be a complete descriptor. The
    settings key always becomes the descriptor ``id``.

    Raises:
        ConfigError: If the merged mapping is not a valid descriptor.
    """
    data = get_template(provider_id) or {}
    data.update(entry)
    data["id"] = provider_id

    try:
        return ProviderDescriptor.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(
            f"Invalid provider '{provider_id}': {format_validation_error(exc)}"
        ) from exc


def build_registration(provider_id: str, client: ClientConfig) -> ClientRegistration:
    """Resolve a :class:`ClientConfig` into a :class:`ClientRegistration`.

    Raises:
        ConfigError: If a credential source cannot be resolved.
    """
    if client.client_id_source is not None:
        client_id = resolve_credential(client.client_id_source)
    else:
        client_id = client.client_id or ""

    if client.client_secret_source is not None:
        client_secret = SecretStr(resolve_credential(client.client_secret_source))
    else:
        client_secret = client.client_secret or SecretStr("")

    if not client_id:
        raise ConfigError(f"Client for provider '{provider_id}' has an empty client_id")

    return ClientRegistration(
        client_id=client_id,
        client_secret=client_secret,
        scope=client.scope,
    )


def build_registry(settings: Settings) -> ProviderRegistry:
    """Register every provider in *settings*.

    Each provider needs a matching ``clients`` entry and each client needs
    a matching ``providers`` entry.

    Raises:
        ConfigError: On any invalid or unmatched entry.
    """
    orphans = sorted(set(settings.clients) - set(settings.providers))
    if orphans:
        raise ConfigError(f"Clients without a provider entry: {', '.join(orphans)}")

    registry = ProviderRegistry()
    for provider_id, entry in settings.providers.items():
        client = settings.clients.get(provider_id)
        if client is None:
            raise ConfigError(f"Provider '{provider_id}' has no client credentials")
        registry.register(
            build_descriptor(provider_id, entry),
            build_registration(provider_id, client),
        )
    return registry


def load_registry(path: Union[str, Path, None] = None) -> ProviderRegistry:
    """Load a settings file and build its registry.

    Args:
        path: Explicit settings path. Resolved with
            :func:`resolve_settings_path` when ``None``.
    """
    settings_path = Path(path) if path is not None else resolve_settings_path()
    return build_registry(load_settings(settings_path))


# --- Credentials ---


def resolve_credential(source: str) -> str:
    """Read a client credential from where *source* points.

    ``env:NAME`` reads the environment variable ``NAME``; ``file:PATH``
    reads the file at ``PATH`` (``~`` expanded) with surrounding whitespace
    removed, so a trailing newline from ``echo secret > file`` is harmless.

    Raises:
        ConfigError: If the variable is unset, the file is missing or
            unreadable, or the prefix is neither ``env:`` nor ``file:``.
    """
    kind, _, ref = source.partition(":")

    if kind == "env":
        if ref not in os.environ:
            raise ConfigError(f"Environment variable '{ref}' is not set")
        return os.environ[ref]

    if kind == "file":
        secret_path = Path(ref).expanduser()
        if not secret_path.is_file():
            raise ConfigError(f"Credential file not found: {secret_path}")
        try:
            return secret_path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {secret_path}: {exc}") from exc

    raise ConfigError(
        f"Unknown credential source format: {source!r} (expected env:NAME or file:PATH)"
    )
