"""OpenID Connect relying-party client -- the login orchestrator.

:class:`OIDCClient` holds a resolved
:class:`~oidc_client.models.ProviderConfiguration` and composes the
collaborators of the login flow:

1. A :class:`~oidc_client.client.token_exchange.TokenExchange` trades the
   grant for an access token carrying an ``id_token``.
2. :class:`~oidc_client.verifier.TokenVerifier` checks the ID token's
   signature against the configured signing keys.
3. :class:`~oidc_client.validation.ValidatorChain` checks its claims
   against values expected right now (issuer, audience, time).

The configuration is either given statically or discovered from the
issuer's metadata at construction time; explicitly supplied options always
win over discovered ones. After construction the configuration is
read-only, so one client can verify tokens from many threads.

Example::

    client = OIDCClient("abc", issuer="https://idp.example", scopes=["profile"])
    request = client.authorization_request(redirect_uri="http://127.0.0.1:8400/cb")
    # ... send the user to request.url, receive ?code=...
    identity = client.exchange_code(code, request)
    print(identity.subject)

See Also:
    https://openid.net/specs/openid-connect-core-1_0.html#IDTokenValidation
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from oidc_client.authorization import SCOPE_SEPARATOR, build_authorization_request
from oidc_client.client.http import HttpClient
from oidc_client.client.token_exchange import HttpTokenExchange, TokenExchange
from oidc_client.discovery import DiscoveryResolver
from oidc_client.exceptions import InvalidConfigurationError, InvalidTokenError
from oidc_client.models import (
    DEFAULT_SIGNING_ALGORITHM,
    AuthorizationRequest,
    ClientProfile,
    ProviderConfiguration,
    VerifiedIdentity,
    normalize_scopes,
)
from oidc_client.tokens import TokenView
from oidc_client.validation import ValidatorChain, default_validator_chain
from oidc_client.verifier import TokenVerifier

logger = logging.getLogger(__name__)

_REQUIRED_OPTIONS = (
    "id_token_issuer",
    "authorization_endpoint",
    "token_endpoint",
    "signing_keys",
)


class OIDCClient:
    """Relying-party client that verifies ID tokens returned at login.

    Args:
        client_id: The client identifier registered at the provider. Used
            as the expected ``aud`` (and ``azp``) value.
        client_secret: Secret for confidential clients.
        issuer: Issuer URL. When given, provider metadata and signing keys
            are discovered from ``<issuer>/.well-known/openid-configuration``.
        id_token_issuer: Expected ``iss`` claim value.
        authorization_endpoint: Authorization endpoint URL.
        token_endpoint: Token endpoint URL.
        userinfo_endpoint: Optional UserInfo endpoint URL.
        public_key: One verification key or a list of keys, tried in order.
        scopes: A scope string or iterable of scopes; ``openid`` is always
            added.
        signing_algorithm: The only ID-token ``alg`` accepted.
        nbf_tolerance_seconds: Default clock tolerance for the ``nbf`` check.
        token_exchange: Token-endpoint collaborator. Defaults to
            :class:`~oidc_client.client.token_exchange.HttpTokenExchange`.
        discovery: Resolver used when *issuer* is given.
        verifier: Signature verifier.
        validator_chain: Claims rules; defaults to
            :func:`~oidc_client.validation.default_validator_chain`.
        http_client: JSON fetcher for discovery, also supplies the
            timeout/TLS settings of the default token exchange.
        clock: Returns the current UNIX time.

    Raises:
        InvalidConfigurationError: If a required option is missing after
            merging explicit options with discovered ones.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: Optional[str] = None,
        *,
        issuer: Optional[str] = None,
        id_token_issuer: Optional[str] = None,
        authorization_endpoint: Optional[str] = None,
        token_endpoint: Optional[str] = None,
        userinfo_endpoint: Optional[str] = None,
        public_key: Any = None,
        scopes: Union[str, Iterable[str], None] = None,
        signing_algorithm: str = DEFAULT_SIGNING_ALGORITHM,
        nbf_tolerance_seconds: int = 0,
        token_exchange: Optional[TokenExchange] = None,
        discovery: Optional[DiscoveryResolver] = None,
        verifier: Optional[TokenVerifier] = None,
        validator_chain: Optional[ValidatorChain] = None,
        http_client: Optional[HttpClient] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not client_id:
            raise InvalidConfigurationError("Required option 'client_id' is missing")

        self._client_id = client_id
        self._http = http_client or HttpClient()
        self._verifier = verifier or TokenVerifier()
        self._validator_chain = (
            validator_chain if validator_chain is not None else default_validator_chain()
        )
        self._clock = clock
        self.nbf_tolerance_seconds = int(nbf_tolerance_seconds)

        explicit: dict[str, Any] = {
            "id_token_issuer": id_token_issuer,
            "authorization_endpoint": authorization_endpoint,
            "token_endpoint": token_endpoint,
            "userinfo_endpoint": userinfo_endpoint,
            "signing_keys": public_key,
        }
        scope_set = normalize_scopes(scopes)

        merged: dict[str, Any] = {}
        if issuer:
            resolver = discovery or DiscoveryResolver(http_client=self._http)
            discovered = resolver.resolve(issuer, scope_set, signing_algorithm)
            merged = {name: getattr(discovered, name) for name in explicit}

        # Discovered values only fill gaps left by explicit options.
        for name, value in explicit.items():
            if value is not None:
                merged[name] = value

        for name in _REQUIRED_OPTIONS:
            if not merged.get(name):
                raise InvalidConfigurationError(
                    f"Required provider option '{name}' is missing"
                )

        self._config = ProviderConfiguration(
            **merged,
            scopes=scope_set,
            signing_algorithm=signing_algorithm,
        )

        self._token_exchange: TokenExchange = token_exchange or HttpTokenExchange(
            self._config.token_endpoint,
            client_id,
            client_secret,
            timeout=self._http.timeout,
            verify_ssl=self._http.verify_ssl,
        )

    @classmethod
    def from_profile(cls, profile: ClientProfile, **overrides: Any) -> OIDCClient:
        """Build a client from a stored :class:`~oidc_client.models.ClientProfile`.

        The client secret is resolved from ``client_secret_source``; each
        ``public_keys`` entry is either PEM text or a credential source such
        as ``file:/path/key.pem``.

        Args:
            profile: The stored profile.
            **overrides: Keyword arguments forwarded to the constructor,
                taking precedence over profile values.
        """
        from oidc_client.config import resolve_credential

        client_secret = None
        if profile.client_secret_source:
            client_secret = resolve_credential(profile.client_secret_source)

        keys = [
            entry if "-----BEGIN" in entry else resolve_credential(entry)
            for entry in profile.public_keys
        ]

        options: dict[str, Any] = {
            "client_secret": client_secret,
            "issuer": profile.issuer,
            "id_token_issuer": profile.id_token_issuer,
            "authorization_endpoint": profile.authorization_endpoint,
            "token_endpoint": profile.token_endpoint,
            "userinfo_endpoint": profile.userinfo_endpoint,
            "public_key": keys or None,
            "scopes": profile.scopes,
            "signing_algorithm": profile.signing_algorithm,
            "nbf_tolerance_seconds": profile.nbf_tolerance_seconds,
            "http_client": HttpClient.from_config(profile.request),
        }
        options.update(overrides)
        return cls(profile.client_id, **options)

    # ------------------------------------------------------------------ #
    # Accessors
    # ------------------------------------------------------------------ #

    @property
    def client_id(self) -> str:
        return self._client_id

    @property
    def configuration(self) -> ProviderConfiguration:
        return self._config

    @property
    def validator_chain(self) -> ValidatorChain:
        """The claims rules applied to ID tokens, in evaluation order.

        Rules may be added or replaced before the client is shared, e.g.
        ``client.validator_chain.replace(ValidationRule.equals("nonce", required=True))``.
        """
        return self._validator_chain

    @property
    def scope_separator(self) -> str:
        return SCOPE_SEPARATOR

    # ------------------------------------------------------------------ #
    # Login flow
    # ------------------------------------------------------------------ #

    def authorization_request(
        self,
        redirect_uri: Optional[str] = None,
        state: Optional[str] = None,
        nonce: Optional[str] = None,
        extra_params: Optional[Mapping[str, str]] = None,
    ) -> AuthorizationRequest:
        """Build the authorization URL plus the state, nonce and PKCE verifier to keep."""
        return build_authorization_request(
            self._config.authorization_endpoint,
            self._client_id,
            self._config.scopes,
            redirect_uri=redirect_uri,
            state=state,
            nonce=nonce,
            extra_params=extra_params,
        )

    def complete_login(
        self,
        grant: str = "authorization_code",
        *,
        nonce: Optional[str] = None,
        nbf_tolerance_seconds: Optional[int] = None,
        **params: Any,
    ) -> VerifiedIdentity:
        """Exchange a grant and verify the ID token that comes back.

        Args:
            grant: OAuth2 grant type.
            nonce: The nonce sent in the authorization request. When given,
                the ID token's ``nonce`` claim must equal it.
            nbf_tolerance_seconds: Seconds added to the current time for the
                ``nbf`` check. Defaults to the client's setting.
            **params: Grant parameters (``code``, ``redirect_uri``,
                ``code_verifier``...) forwarded to the token exchange.

        Returns:
            The :class:`~oidc_client.models.VerifiedIdentity`.

        Raises:
            InvalidTokenError: If no ID token is returned, its signature is
                invalid, or its claims fail validation.
            TransportError: If the token exchange fails.
        """
        access_token = self._token_exchange.exchange(grant, params)

        if access_token.id_token is None:
            raise InvalidTokenError("missing id_token")

        view = self.verify_id_token(
            access_token.id_token,
            nonce=nonce,
            nbf_tolerance_seconds=nbf_tolerance_seconds,
        )
        logger.debug("Login verified for subject %s", view.subject)
        return VerifiedIdentity(
            token=access_token,
            id_token=view.raw,
            claims=dict(view.claims),
        )

    def exchange_code(
        self,
        code: str,
        request: AuthorizationRequest,
        nbf_tolerance_seconds: Optional[int] = None,
    ) -> VerifiedIdentity:
        """Complete an authorization code login started with :meth:`authorization_request`."""
        params: dict[str, Any] = {
            "code": code,
            "code_verifier": request.code_verifier,
        }
        if request.redirect_uri:
            params["redirect_uri"] = request.redirect_uri
        return self.complete_login(
            "authorization_code",
            nonce=request.nonce,
            nbf_tolerance_seconds=nbf_tolerance_seconds,
            **params,
        )

    def verify_id_token(
        self,
        id_token: Optional[str],
        *,
        nonce: Optional[str] = None,
        nbf_tolerance_seconds: Optional[int] = None,
    ) -> TokenView:
        """Verify the signature and claims of a raw ID token.

        Raises:
            InvalidTokenError: ``missing id_token``, a malformed token,
                ``invalid signature``, or ``claims validation failed``.
        """
        if id_token is None:
            raise InvalidTokenError("missing id_token")

        view = TokenView.decode(id_token)
        try:
            self._verifier.verify(
                view, self._config.signing_keys, self._config.signing_algorithm
            )
        except InvalidTokenError as exc:
            raise InvalidTokenError("invalid signature") from exc

        expected = self.expected_claims(
            view, nonce=nonce, nbf_tolerance_seconds=nbf_tolerance_seconds
        )
        failed = self._validator_chain.first_failure(expected, view)
        if failed is not None:
            logger.warning("id_token rejected: claim '%s' failed validation", failed.claim)
            raise InvalidTokenError(
                f"claims validation failed (claim '{failed.claim}')",
                claim=failed.claim,
            )
        return view

    def expected_claims(
        self,
        token: TokenView,
        *,
        nonce: Optional[str] = None,
        nbf_tolerance_seconds: Optional[int] = None,
    ) -> dict[str, Any]:
        """Build the expected claim values for validating *token* now.

        ``azp`` is expected to be the client id only when the token carries
        an ``azp`` claim; ``nonce`` only when the caller supplies one.
        """
        if nbf_tolerance_seconds is None:
            nbf_tolerance_seconds = self.nbf_tolerance_seconds
        now = int(self._clock())

        expected: dict[str, Any] = {
            "iss": self._config.id_token_issuer,
            "exp": now,
            "auth_time": now,
            "iat": now,
            "nbf": now + int(nbf_tolerance_seconds),
            "aud": self._client_id,
        }
        if token.has_claim("azp"):
            expected["azp"] = self._client_id
        if nonce is not None:
            expected["nonce"] = nonce
        return expected
