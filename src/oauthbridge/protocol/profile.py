"""Normalize a provider user-info payload into a :class:`UserProfile`."""

from __future__ import annotations

from typing import Any, Optional

from oauthbridge.models import ProviderDescriptor, UserProfile


def _id_text(value: Any) -> Optional[str]:
    """Render a JSON id value as text; ``None`` for null or empty values."""
    if value is None:
        return None
    if isinstance(value, bool):
        text = "true" if value else "false"
    elif isinstance(value, float) and value.is_integer():
        text = str(int(value))
    else:
        text = str(value)
    return text or None


def derive_user_id(payload: dict[str, Any], mapping: dict[str, str]) -> Optional[str]:
    """Derive the canonical user identifier from a raw payload.

    A literal ``id`` field wins. Otherwise the field named by
    ``mapping["id"]`` is used. Null and empty values are skipped, so the
    result is never the empty string; ``None`` means no id was found.
    Booleans render as ``"true"``/``"false"`` and integral floats without
    a fractional part, as JSON numbers print.
    """
    user_id = _id_text(payload.get("id"))
    if user_id is not None:
        return user_id

    field = mapping.get("id")
    if field:
        return _id_text(payload.get(field))
    return None


def normalize_profile(payload: dict[str, Any], descriptor: ProviderDescriptor) -> UserProfile:
    """Stamp the provider id onto *payload* and derive its canonical ``id``.

    Args:
        payload: Decoded JSON object from the user-info endpoint.
        descriptor: The provider the payload came from.

    Returns:
        A :class:`UserProfile` holding every raw field plus ``provider``
        and ``id``.
    """
    data = dict(payload)
    data["provider"] = descriptor.id
    data["id"] = derive_user_id(payload, descriptor.mapping)
    return UserProfile.model_validate(data)
