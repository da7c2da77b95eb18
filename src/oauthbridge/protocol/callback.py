"""Classify the query string of an inbound authorization callback."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from typing import Any


class CallbackKind(str, enum.Enum):
    """What an inbound request means for the flow."""

    DENIED = "denied"
    PROVIDER_ERROR = "provider_error"
    CODE = "code"
    INITIATE = "initiate"


def classify_callback(query: Mapping[str, Any]) -> CallbackKind:
    """Classify an inbound request by its query parameters.

    Checked in priority order, so a malformed callback carrying both
    ``error`` and ``code`` is always treated as an error:

    1. ``error=access_denied`` -- :attr:`CallbackKind.DENIED`
    2. any other ``error`` -- :attr:`CallbackKind.PROVIDER_ERROR`
    3. ``code`` present -- :attr:`CallbackKind.CODE`
    4. otherwise -- :attr:`CallbackKind.INITIATE`

    Args:
        query: The inbound request's query parameters.

    Returns:
        The matching :class:`CallbackKind`.
    """
    error = query.get("error")
    if error == "access_denied":
        return CallbackKind.DENIED
    if error:
        return CallbackKind.PROVIDER_ERROR
    if query.get("code"):
        return CallbackKind.CODE
    return CallbackKind.INITIATE
