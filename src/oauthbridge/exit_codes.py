"""Numeric process exit codes used by the ``oauthbridge`` CLI.

Each constant maps to a failure class and is referenced by the
corresponding :class:`~oauthbridge.exceptions.OAuthBridgeError` subclass
or by the flow outcome that ended a ``callback`` run. Shell wrappers can
inspect the exit code to tell a rejected login from a network failure
without parsing stderr.

Example::

    $ oauthbridge callback github "https://app.example.com/cb?error=access_denied"
    $ echo $?
    3   # EXIT_ACCESS_DENIED -- the user declined consent
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_CONFIG_ERROR = 2
"""The settings file, a provider descriptor, or a client registration is invalid."""

EXIT_ACCESS_DENIED = 3
"""The user declined consent at the provider, or verification rejected the user."""

EXIT_PROVIDER_ERROR = 4
"""The provider answered with an OAuth ``error`` or a non-200 structured body."""

EXIT_TRANSPORT_ERROR = 5
"""A network-level error occurred (timeout, DNS failure, connection refused)."""
