"""Canonical Pydantic models shared across all oidc-client modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Protocol models** -- produced and consumed by the verification pipeline:
    :class:`ProviderConfiguration`, :class:`AccessToken`,
    :class:`VerifiedIdentity`, and :class:`AuthorizationRequest`.

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`RequestConfig`, :class:`OutputConfig`, :class:`ClientProfile`,
    and :class:`GlobalConfig`.

All models use Pydantic v2. :class:`ProviderConfiguration` is frozen: it is
built once and shared read-only by concurrent verification calls.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
    model_validator,
)

from oidc_client.exceptions import InvalidConfigurationError
from oidc_client.keys import SigningKeySet

OPENID_SCOPE = "openid"
DEFAULT_SIGNING_ALGORITHM = "RS256"


def normalize_scopes(scopes: Union[str, Iterable[str], None]) -> tuple[str, ...]:
    """Return *scopes* as a de-duplicated tuple that always contains ``openid``.

    A single string is treated as a one-element set; order of first
    appearance is preserved and ``openid`` is appended when missing.
    """
    if scopes is None:
        items: list[str] = []
    elif isinstance(scopes, str):
        items = [scopes]
    else:
        items = list(scopes)

    seen: list[str] = []
    for scope in items:
        if scope and scope not in seen:
            seen.append(scope)
    if OPENID_SCOPE not in seen:
        seen.append(OPENID_SCOPE)
    return tuple(seen)


# --- Protocol models ---


class ProviderConfiguration(BaseModel):
    """Resolved provider endpoints, scopes, issuer identity, and signing keys.

    Built either from static options or by
    :class:`~oidc_client.discovery.DiscoveryResolver`. Every required field
    must be present, non-empty and of the right type; otherwise construction
    raises :class:`~oidc_client.exceptions.InvalidConfigurationError`.

    Example::

        ProviderConfiguration(
            id_token_issuer="https://idp.example",
            authorization_endpoint="https://idp.example/authorize",
            token_endpoint="https://idp.example/token",
            signing_keys=[public_pem],
        )
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id_token_issuer: str
    authorization_endpoint: str
    token_endpoint: str
    userinfo_endpoint: Optional[str] = None
    scopes: tuple[str, ...] = (OPENID_SCOPE,)
    signing_keys: SigningKeySet
    signing_algorithm: str = DEFAULT_SIGNING_ALGORITHM

    @model_validator(mode="wrap")
    @classmethod
    def _report_invalid(cls, data: Any, handler: Any) -> ProviderConfiguration:
        try:
            return handler(data)
        except ValidationError as exc:
            first = exc.errors()[0]
            name = ".".join(str(part) for part in first["loc"]) or "configuration"
            if first["type"] == "missing":
                raise InvalidConfigurationError(
                    f"Required provider option '{name}' is missing"
                ) from exc
            raise InvalidConfigurationError(
                f"Invalid provider option '{name}': {first['msg']}"
            ) from exc

    @field_validator("scopes", mode="before")
    @classmethod
    def _normalize_scopes(cls, value: Any) -> tuple[str, ...]:
        return normalize_scopes(value)

    @field_validator("signing_keys", mode="before")
    @classmethod
    def _coerce_keys(cls, value: Any) -> SigningKeySet:
        return SigningKeySet(value)

    @model_validator(mode="after")
    def _check_required(self) -> ProviderConfiguration:
        for name in (
            "id_token_issuer",
            "authorization_endpoint",
            "token_endpoint",
            "signing_algorithm",
        ):
            if not getattr(self, name):
                raise InvalidConfigurationError(
                    f"Required provider option '{name}' is missing"
                )
        return self

    @field_serializer("signing_keys")
    def _describe_keys(self, keys: SigningKeySet) -> list[str]:
        return keys.describe()


class AccessToken(BaseModel):
    """Token-endpoint response.

    Extra response members (e.g. provider-specific fields) are preserved in
    ``model_extra``.
    """

    model_config = ConfigDict(extra="allow")

    access_token: str
    token_type: str = "Bearer"
    expires_in: Optional[int] = None
    refresh_token: Optional[str] = None
    scope: Optional[str] = None
    id_token: Optional[str] = Field(
        default=None, description="Raw compact-serialized identity token"
    )


class VerifiedIdentity(BaseModel):
    """Result of a successful login: the access token plus its verified ID token."""

    token: AccessToken
    id_token: str
    claims: dict[str, Any] = Field(default_factory=dict)

    @property
    def subject(self) -> Optional[str]:
        return self.claims.get("sub")

    @property
    def issuer(self) -> Optional[str]:
        return self.claims.get("iss")

    @property
    def audience(self) -> list[str]:
        aud = self.claims.get("aud")
        if aud is None:
            return []
        if isinstance(aud, str):
            return [aud]
        return list(aud)


class AuthorizationRequest(BaseModel):
    """Everything the caller must keep between redirecting the user and completing login."""

    url: str
    state: str
    nonce: str
    code_verifier: str
    redirect_uri: Optional[str] = None


# --- Configuration models ---


class RequestConfig(BaseModel):
    """HTTP settings applied to discovery and token-exchange calls."""

    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class ClientProfile(BaseModel):
    """Per-provider client settings stored as JSON under the ``profiles/`` directory.

    Either ``issuer`` is set (configuration is discovered from
    ``<issuer>/.well-known/openid-configuration``) or the static endpoint
    fields and ``public_keys`` are. Static values that are set alongside
    ``issuer`` take precedence over discovered ones.

    ``public_keys`` entries are PEM text or a credential source such as
    ``file:/etc/idp/signing.pem``.

    See Also:
        :func:`~oidc_client.config.load_profile`: Deserialise a profile by name.
        :meth:`~oidc_client.provider.OIDCClient.from_profile`: Build a client.
    """

    model_config = ConfigDict(extra="allow")

    name: str
    client_id: str
    client_secret_source: Optional[str] = Field(
        default=None,
        description="Credential source for the client secret: env:VAR, file:/path, prompt",
    )
    issuer: Optional[str] = Field(
        default=None, description="Issuer URL; enables discovery"
    )
    id_token_issuer: Optional[str] = None
    authorization_endpoint: Optional[str] = None
    token_endpoint: Optional[str] = None
    userinfo_endpoint: Optional[str] = None
    public_keys: list[str] = Field(default_factory=list)
    scopes: list[str] = Field(default_factory=lambda: [OPENID_SCOPE])
    signing_algorithm: str = DEFAULT_SIGNING_ALGORITHM
    redirect_uri: Optional[str] = None
    nbf_tolerance_seconds: int = Field(
        default=0, ge=0, description="Clock tolerance added to now when checking nbf"
    )
    request: RequestConfig = Field(default_factory=RequestConfig)


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/oidc-client/config.json``.

    Loaded and saved by :func:`~oidc_client.config.load_global_config` and
    :func:`~oidc_client.config.save_global_config`. See
    :func:`~oidc_client.config.resolve_profile` for the precedence chain.
    """

    default_profile: Optional[str] = None
    auto_select_single_profile: bool = True
    output: OutputConfig = Field(default_factory=OutputConfig)
