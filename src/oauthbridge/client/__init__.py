"""HTTP calls to the provider's token and user-info endpoints.

Both calls take an :class:`httpx.Client` so that hosts can supply their own
transport (timeouts, proxies, mounts) and tests can plug in an
:class:`httpx.MockTransport`. Neither call retries.

Functions:
    :func:`exchange_code` -- authorization code to :class:`~oauthbridge.models.TokenResponse`.
    :func:`fetch_user_info` -- access token to raw profile payload.
"""

from oauthbridge.client.token import exchange_code, token_request_body
from oauthbridge.client.transport import USER_AGENT, decode_body, send
from oauthbridge.client.userinfo import fetch_user_info, user_info_auth

__all__ = [
    "USER_AGENT",
    "decode_body",
    "exchange_code",
    "fetch_user_info",
    "send",
    "token_request_body",
    "user_info_auth",
]
