"""Built-in descriptor templates for well-known providers.

Templates are plain mappings in the declarative shape accepted by
:class:`~oauthbridge.models.ProviderDescriptor`, minus the deployment
specific ``redirect_uri``. A settings file entry whose key matches a
template is merged over it (see :func:`~oauthbridge.config.build_descriptor`),
so the common case only needs a redirect URI::

    providers:
      github:
        redirect_uri: https://app.example.com/callback/github
"""

from __future__ import annotations

import copy
from typing import Any, Optional

BUILTIN_PROVIDERS: dict[str, dict[str, Any]] = {
    "dropbox": {
        "name": "Dropbox",
        "endpoints": {
            "authorize": {"url": "https://www.dropbox.com/oauth2/authorize"},
            "token": {
                "url": "https://api.dropboxapi.com/oauth2/token",
                "method": "POST",
                "auth": "client_secret_basic",
            },
            "user": {
                "url": "https://api.dropboxapi.com/2/users/get_current_account",
                "method": "POST",
                "auth": {"header": "Authorization", "scheme": "Bearer"},
            },
        },
        "mapping": {"id": "account_id"},
    },
    "facebook": {
        "name": "Facebook",
        "endpoints": {
            "authorize": {"url": "https://www.facebook.com/dialog/oauth"},
            "token": {
                "url": "https://graph.facebook.com/oauth/access_token",
                "method": "POST",
                "auth": "client_secret_post",
            },
            "user": {
                "url": "https://graph.facebook.com/me",
                "auth": {"query": "access_token"},
                "params": {"fields": "id,name,email,picture"},
            },
        },
        "scope": ["email", "public_profile"],
        "separator": ",",
        "mapping": {"id": "id"},
    },
    "github": {
        "name": "GitHub",
        "endpoints": {
            "authorize": {"url": "https://github.com/login/oauth/authorize"},
            "token": {
                "url": "https://github.com/login/oauth/access_token",
                "method": "POST",
                "auth": "client_secret_post",
            },
            "user": {
                "url": "https://api.github.com/user",
                "auth": {"header": "Authorization", "scheme": "token"},
                "accept": "application/vnd.github+json",
            },
        },
        "scope": ["user:email"],
        "mapping": {"id": "id"},
    },
    "google": {
        "name": "Google",
        "endpoints": {
            "authorize": {"url": "https://accounts.google.com/o/oauth2/v2/auth"},
            "token": {
                "url": "https://oauth2.googleapis.com/token",
                "method": "POST",
                "auth": "client_secret_post",
            },
            "user": {
                "url": "https://openidconnect.googleapis.com/v1/userinfo",
                "auth": {"header": "Authorization", "scheme": "Bearer"},
            },
        },
        "scope": ["openid", "profile", "email"],
        "mapping": {"id": "sub"},
    },
    "linkedin": {
        "name": "LinkedIn",
        "endpoints": {
            "authorize": {"url": "https://www.linkedin.com/oauth/v2/authorization"},
            "token": {
                "url": "https://www.linkedin.com/oauth/v2/accessToken",
                "method": "POST",
                "auth": "client_secret_post",
            },
            "user": {
                "url": "https://api.linkedin.com/v2/userinfo",
                "auth": {"header": "Authorization", "scheme": "Bearer"},
            },
        },
        "scope": ["openid", "profile", "email"],
        "mapping": {"id": "sub"},
    },
}


def list_templates() -> list[str]:
    """Return the ids of all built-in templates, sorted."""
    return sorted(BUILTIN_PROVIDERS)


def get_template(provider_id: str) -> Optional[dict[str, Any]]:
    """Return a deep copy of the template for *provider_id*, or ``None``."""
    template = BUILTIN_PROVIDERS.get(provider_id)
    if template is None:
        return None
    return copy.deepcopy(template)
