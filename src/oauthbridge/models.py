"""Canonical Pydantic models shared across all oauthbridge modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Configuration models** -- loaded once at process start and shared
read-only by every flow:
    :class:`ProviderDescriptor`, :class:`ProviderEndpoints`,
    :class:`EndpointSpec`, the auth scheme variants (:class:`HeaderAuth`,
    :class:`QueryAuth`, :class:`ClientSecretBasic`,
    :class:`ClientSecretPost`) and :class:`ClientRegistration`.

**Flow models** -- produced while a single flow runs:
    :class:`TokenResponse` and :class:`UserProfile`.

**Settings file models** -- the on-disk shape read by :mod:`oauthbridge.config`:
    :class:`ClientConfig` and :class:`Settings`.

Configuration models are frozen so that one descriptor can safely back any
number of concurrent flows. Validation happens at construction time: a
descriptor with a malformed endpoint URL, a missing endpoint, or an auth
scheme the endpoint cannot use never makes it into a flow.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Literal, Optional, Union

import httpx
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)


class HTTPMethod(str, enum.Enum):
    """HTTP methods an endpoint may declare."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class ResponseParser(str, enum.Enum):
    """How a provider response body is decoded."""

    JSON = "json"
    FORM = "x-www-form-urlencoded"


# --- Auth schemes ---


class HeaderAuth(BaseModel):
    """Present the access token (or client credentials) in a request header.

    With ``scheme="Basic"`` the header carries the Base64 client
    credentials; any other scheme yields ``"<scheme> <access_token>"``.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["header"] = "header"
    header: str = "Authorization"
    scheme: str = "Bearer"


class QueryAuth(BaseModel):
    """Present the access token as a query-string parameter."""

    model_config = ConfigDict(frozen=True)

    type: Literal["query"] = "query"
    query: str = "access_token"


class ClientSecretBasic(BaseModel):
    """Authenticate the client with HTTP Basic at the token endpoint."""

    model_config = ConfigDict(frozen=True)

    type: Literal["client_secret_basic"] = "client_secret_basic"


class ClientSecretPost(BaseModel):
    """Authenticate the client with ``client_id``/``client_secret`` body parameters."""

    model_config = ConfigDict(frozen=True)

    type: Literal["client_secret_post"] = "client_secret_post"


AuthScheme = Annotated[
    Union[HeaderAuth, QueryAuth, ClientSecretBasic, ClientSecretPost],
    Field(discriminator="type"),
]

TOKEN_AUTH_SCHEMES = (ClientSecretBasic, ClientSecretPost)
USER_AUTH_SCHEMES = (HeaderAuth, QueryAuth)


def _coerce_auth(value: Any) -> Any:
    """Translate declarative auth shorthands into tagged variants.

    Accepts ``"client_secret_basic"`` / ``"client_secret_post"``,
    ``{"header": ..., "scheme": ...}`` and ``{"query": ...}`` as found in
    provider catalogs.
    """
    if isinstance(value, str):
        if value in ("client_secret_basic", "client_secret_post"):
            return {"type": value}
        raise ValueError(f"Unknown auth scheme: {value!r}")
    if isinstance(value, dict) and "type" not in value:
        if "header" in value:
            return {"type": "header", **value}
        if "query" in value:
            return {"type": "query", **value}
    return value


# --- Endpoints ---


class EndpointSpec(BaseModel):
    """One provider endpoint (authorize, token, or user info).

    Example::

        EndpointSpec(
            url="https://github.com/login/oauth/access_token",
            method="POST",
            auth="client_secret_post",
        )
    """

    model_config = ConfigDict(frozen=True)

    url: str
    method: Optional[HTTPMethod] = Field(
        default=None, description="Defaults to GET for authorize/user, POST for token"
    )
    auth: Optional[AuthScheme] = None
    accept: str = "application/json"
    parser: ResponseParser = ResponseParser.JSON
    params: dict[str, str] = Field(
        default_factory=dict, description="Static query parameters added to every request"
    )

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        try:
            url = httpx.URL(value)
        except httpx.InvalidURL as exc:
            raise ValueError(f"Malformed endpoint URL {value!r}: {exc}") from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError(f"Endpoint URL must be an absolute http(s) URL: {value!r}")
        return value

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.upper()
        return value

    @field_validator("auth", mode="before")
    @classmethod
    def _auth_shorthand(cls, value: Any) -> Any:
        return _coerce_auth(value)


class ProviderEndpoints(BaseModel):
    """The three endpoints every Authorization Code provider must declare."""

    model_config = ConfigDict(frozen=True)

    authorize: EndpointSpec
    token: EndpointSpec
    user: EndpointSpec

    @model_validator(mode="after")
    def _check_auth_placement(self) -> ProviderEndpoints:
        if self.authorize.auth is not None:
            raise ValueError("The authorize endpoint does not take an auth scheme")
        if self.token.auth is not None and not isinstance(self.token.auth, TOKEN_AUTH_SCHEMES):
            raise ValueError(
                "Token endpoint auth must be client_secret_basic or client_secret_post, "
                f"got {self.token.auth.type!r}"
            )
        if self.user.auth is not None and not isinstance(self.user.auth, USER_AUTH_SCHEMES):
            raise ValueError(
                "User endpoint auth must be header or query based, "
                f"got {self.user.auth.type!r}"
            )
        return self


class ProviderDescriptor(BaseModel):
    """Static description of an identity provider.

    Loaded once at startup (see :mod:`oauthbridge.config`) and shared
    read-only by every flow for that provider.

    Attributes:
        id: Provider identifier, stamped onto every fetched profile.
        name: Optional display name.
        endpoints: Authorize, token, and user-info endpoint specs.
        scope: Default scopes. ``None`` means the provider declares none.
        separator: Joins scopes in the authorization request.
        mapping: Field-mapping rules; ``mapping["id"]`` names the profile
            field that holds the user identifier.
        redirect_uri: Callback URI registered with the provider.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: Optional[str] = None
    endpoints: ProviderEndpoints
    scope: Optional[tuple[str, ...]] = None
    separator: str = " "
    mapping: dict[str, str] = Field(default_factory=dict)
    redirect_uri: str = Field(min_length=1)

    @property
    def display_name(self) -> str:
        return self.name or self.id


class ClientRegistration(BaseModel):
    """Credentials a deployment registered with a provider.

    ``client_secret`` is a :class:`~pydantic.SecretStr` so that it never
    shows up in reprs, logs, or dumps. It may be empty but must be given.
    """

    model_config = ConfigDict(frozen=True)

    client_id: str
    client_secret: SecretStr
    scope: Optional[tuple[str, ...]] = None


# --- Flow models ---


class TokenResponse(BaseModel):
    """Decoded token endpoint response.

    Only ``access_token`` is interpreted; every other provider field is
    preserved in ``model_extra`` and passed through to the verification
    callback.
    """

    model_config = ConfigDict(extra="allow")

    access_token: str
    token_type: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class UserProfile(BaseModel):
    """Provider user-info payload with the provider id and canonical id injected.

    ``id`` is ``None`` when no identifier could be derived; it is never the
    empty string. :meth:`to_dict` omits it in that case.
    """

    model_config = ConfigDict(extra="allow")

    provider: str
    id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data = self.model_dump()
        if self.id is None:
            data.pop("id", None)
        return data

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a raw payload field by name."""
        return self.to_dict().get(key, default)


# --- Settings file ---


class ClientConfig(BaseModel):
    """Client credentials entry of the settings file.

    Each credential is given either literally (``client_id``,
    ``client_secret``) or as a source descriptor resolved by
    :func:`~oauthbridge.config.resolve_credential` (``client_id_source``,
    ``client_secret_source``).

    Example::

        ClientConfig(
            client_id_source="env:GITHUB_CLIENT_ID",
            client_secret_source="env:GITHUB_CLIENT_SECRET",
            scope=["read:user"],
        )
    """

    model_config = ConfigDict(extra="forbid")

    client_id: Optional[str] = None
    client_id_source: Optional[str] = Field(
        default=None, description="Credential source: env:VAR or file:/path"
    )
    client_secret: Optional[SecretStr] = None
    client_secret_source: Optional[str] = Field(
        default=None, description="Credential source: env:VAR or file:/path"
    )
    scope: Optional[list[str]] = None

    @model_validator(mode="after")
    def _one_of_each(self) -> ClientConfig:
        if (self.client_id is None) == (self.client_id_source is None):
            raise ValueError("Give exactly one of 'client_id' or 'client_id_source'")
        if (self.client_secret is None) == (self.client_secret_source is None):
            raise ValueError("Give exactly one of 'client_secret' or 'client_secret_source'")
        return self


class Settings(BaseModel):
    """Top-level settings file.

    ``providers`` entries stay raw mappings because they are merged over
    built-in catalog templates before being validated as
    :class:`ProviderDescriptor`.
    """

    model_config = ConfigDict(extra="forbid")

    providers: dict[str, dict[str, Any]] = Field(default_factory=dict)
    clients: dict[str, ClientConfig] = Field(default_factory=dict)
