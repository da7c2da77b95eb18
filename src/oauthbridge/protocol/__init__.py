"""Provider-agnostic pieces of the Authorization Code protocol.

Everything here is pure: no network I/O and no shared state.

- :func:`encode_basic_credentials` -- HTTP Basic client credentials.
- :func:`build_authorization_url` -- the redirect that starts a flow.
- :func:`classify_callback` -- what an inbound callback means.
- :func:`normalize_profile` -- provider payload to :class:`~oauthbridge.models.UserProfile`.
"""

from oauthbridge.protocol.authorize import build_authorization_url, merge_scopes
from oauthbridge.protocol.callback import CallbackKind, classify_callback
from oauthbridge.protocol.credentials import (
    encode_basic_credentials,
    registration_credentials,
)
from oauthbridge.protocol.profile import derive_user_id, normalize_profile

__all__ = [
    "CallbackKind",
    "build_authorization_url",
    "classify_callback",
    "derive_user_id",
    "encode_basic_credentials",
    "merge_scopes",
    "normalize_profile",
    "registration_credentials",
]
