"""Shared HTTP plumbing for the token and user-info clients.

Both provider calls go through :func:`send`, which turns connection-level
:mod:`httpx` failures into :class:`~oauthbridge.exceptions.TransportError`
and otherwise hands back the response untouched, whatever its status.
Status handling is left to the callers because a non-200 provider answer is
a protocol error, not a transport error.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from oauthbridge import __version__
from oauthbridge.exceptions import TransportError
from oauthbridge.models import EndpointSpec, ResponseParser

USER_AGENT = f"oauthbridge/{__version__}"
"""Identifying ``User-Agent`` sent with every provider request."""

DEFAULT_TIMEOUT = 30.0


def request_headers(endpoint: EndpointSpec) -> dict[str, str]:
    """Return the ``Accept`` and ``User-Agent`` headers for *endpoint*."""
    return {"Accept": endpoint.accept, "User-Agent": USER_AGENT}


def send(
    client: httpx.Client,
    method: str,
    url: str,
    headers: dict[str, str],
    params: Optional[dict[str, str]] = None,
    data: Optional[dict[str, str]] = None,
) -> httpx.Response:
    """Issue a single request, with no retry.

    Args:
        client: The transport to use.
        method: HTTP method.
        url: Absolute endpoint URL.
        headers: Request headers.
        params: Query parameters merged into any query string already on
            *url*; a key present in both takes the value from *params*.
        data: Form fields, sent ``application/x-www-form-urlencoded``.

    Returns:
        The :class:`httpx.Response`, whatever its status code.

    Raises:
        TransportError: On connection, timeout, or other network errors.
    """
    target = httpx.URL(url)
    if params:
        target = target.copy_merge_params(params)

    kwargs: dict[str, Any] = {"headers": headers}
    if data is not None:
        kwargs["data"] = data

    try:
        return client.request(method, target, **kwargs)
    except httpx.RequestError as exc:
        raise TransportError(f"{method} {url} failed: {exc}") from exc


def decode_body(response: httpx.Response, parser: ResponseParser) -> Any:
    """Decode a response body according to the endpoint's parser.

    Form-encoded bodies become a plain ``dict`` (first value wins for
    repeated keys). JSON bodies are decoded with :meth:`httpx.Response.json`;
    a body that is not valid JSON is returned as raw text, and an empty body
    as ``None``.
    """
    if parser == ResponseParser.FORM:
        return dict(httpx.QueryParams(response.text.strip()))

    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
