"""OpenID Connect discovery -- provider metadata and signing keys.

:class:`DiscoveryResolver` fetches ``<issuer>/.well-known/openid-configuration``,
maps its endpoints, checks the requested scopes against
``scopes_supported``, then fetches the ``jwks_uri`` key-set document and
converts the keys usable for signature verification into PEM keys.

Discovery is all-or-nothing: any problem raises and no partial
:class:`~oidc_client.models.ProviderConfiguration` is ever returned. The
metadata fetch always completes before the key-set fetch because the
key-set URL comes from the metadata. Nothing is retried here.

See Also:
    https://openid.net/specs/openid-connect-discovery-1_0.html
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from oidc_client.client.http import HttpClient
from oidc_client.exceptions import InvalidConfigurationError
from oidc_client.keys import jwk_to_pem
from oidc_client.models import (
    DEFAULT_SIGNING_ALGORITHM,
    ProviderConfiguration,
    normalize_scopes,
)

logger = logging.getLogger(__name__)

WELL_KNOWN_PATH = "/.well-known/openid-configuration"

# configuration field -> (metadata member, required)
_OPTION_MAPPING: dict[str, tuple[str, bool]] = {
    "id_token_issuer": ("issuer", True),
    "authorization_endpoint": ("authorization_endpoint", True),
    "token_endpoint": ("token_endpoint", True),
    "userinfo_endpoint": ("userinfo_endpoint", False),
}

KeyConverter = Callable[[Mapping[str, Any]], Any]


def _expect_type(value: Any, expected: type, member: str, uri: str) -> None:
    if value is not None and not isinstance(value, expected):
        raise InvalidConfigurationError(
            f"Parameter {member} in discovery configuration at {uri} has invalid "
            f"type {type(value).__name__}, expected {expected.__name__}"
        )


def discovery_url(issuer_url: str) -> str:
    """Return the well-known metadata URL for *issuer_url*."""
    return issuer_url.rstrip("/") + WELL_KNOWN_PATH


def select_signing_keys(
    keys: Iterable[Any], signing_algorithm: str
) -> list[Mapping[str, Any]]:
    """Filter a key-set's ``keys`` down to those usable for verifying *signing_algorithm*.

    Entries that are not objects, that declare a ``use`` other than
    ``"sig"``, or whose ``alg`` is not exactly *signing_algorithm*
    (including a missing ``alg``) are excluded. A ``null`` ``use`` counts
    as undeclared. Order is preserved.
    """
    selected: list[Mapping[str, Any]] = []
    for jwk in keys:
        if not isinstance(jwk, Mapping):
            continue
        if jwk.get("use") not in (None, "sig"):
            continue
        if jwk.get("alg") != signing_algorithm:
            continue
        selected.append(jwk)
    return selected


class DiscoveryResolver:
    """Populate a :class:`~oidc_client.models.ProviderConfiguration` from provider metadata.

    Args:
        http_client: JSON fetcher. Defaults to a fresh
            :class:`~oidc_client.client.http.HttpClient`.
        key_converter: JWK to verification-key conversion. Defaults to
            :func:`~oidc_client.keys.jwk_to_pem`.
        retain_all_keys: Keep every matching signing key (in document
            order) so tokens signed with either key of a rotation overlap
            verify. ``False`` keeps only the first matching key.

    Example::

        config = DiscoveryResolver().resolve(
            "https://idp.example", ["openid", "profile"], "RS256"
        )
    """

    def __init__(
        self,
        http_client: Optional[HttpClient] = None,
        key_converter: KeyConverter = jwk_to_pem,
        retain_all_keys: bool = True,
    ) -> None:
        self._http = http_client or HttpClient()
        self._convert = key_converter
        self.retain_all_keys = retain_all_keys

    def fetch_metadata(self, issuer_url: str) -> dict[str, Any]:
        """Fetch the raw metadata document for *issuer_url*.

        Raises:
            InvalidConfigurationError: If the document is not a JSON object.
            TransportError: If the fetch fails.
        """
        uri = discovery_url(issuer_url)
        document = self._http.get_json(uri)
        if not isinstance(document, dict):
            raise InvalidConfigurationError(
                f"Invalid response received from discovery at {uri}. Expected JSON."
            )
        return document

    def resolve(
        self,
        issuer_url: str,
        requested_scopes: Union[str, Iterable[str], None] = None,
        signing_algorithm: str = DEFAULT_SIGNING_ALGORITHM,
    ) -> ProviderConfiguration:
        """Discover the provider configuration for *issuer_url*.

        Args:
            issuer_url: Issuer identifier URL (without the well-known suffix).
            requested_scopes: Scopes the client will request. ``openid`` is
                always included.
            signing_algorithm: The ID-token signing algorithm the client
                accepts; only keys declaring this ``alg`` are kept.

        Returns:
            A fully populated :class:`~oidc_client.models.ProviderConfiguration`.

        Raises:
            InvalidConfigurationError: If a document is malformed, a
                required member is missing, a scope is unsupported, or no
                usable signing key is published.
            TransportError: If either fetch fails.
            ConversionError: If a selected key cannot be converted.
        """
        uri = discovery_url(issuer_url)
        metadata = self.fetch_metadata(issuer_url)
        scopes = normalize_scopes(requested_scopes)

        options: dict[str, Any] = {}
        for option, (member, required) in _OPTION_MAPPING.items():
            value = metadata.get(member)
            if required and not value:
                raise InvalidConfigurationError(
                    f"Parameter {member} missing in discovery configuration at {uri}"
                )
            _expect_type(value, str, member, uri)
            options[option] = value

        supported = metadata.get("scopes_supported")
        if supported is not None:
            _expect_type(supported, list, "scopes_supported", uri)
            for scope in scopes:
                if scope not in supported:
                    raise InvalidConfigurationError(
                        f"Scope {scope} is not supported in discovery configuration at {uri}"
                    )

        jwks_uri = metadata.get("jwks_uri")
        if not jwks_uri:
            raise InvalidConfigurationError(
                f"Parameter jwks_uri missing in discovery configuration at {uri}"
            )
        _expect_type(jwks_uri, str, "jwks_uri", uri)

        key_set = self._http.get_json(jwks_uri)
        if not isinstance(key_set, dict) or not isinstance(key_set.get("keys"), list):
            raise InvalidConfigurationError(
                f"Invalid key set received from {jwks_uri}. Expected JSON with a 'keys' array."
            )

        usable = select_signing_keys(key_set["keys"], signing_algorithm)
        if not usable:
            raise InvalidConfigurationError(
                f"No valid signing keys found in discovery at {uri}"
            )
        if not self.retain_all_keys:
            usable = usable[:1]

        logger.debug(
            "Discovered %s: %d of %d published key(s) usable for %s",
            options["id_token_issuer"],
            len(usable),
            len(key_set["keys"]),
            signing_algorithm,
        )

        return ProviderConfiguration(
            **options,
            scopes=scopes,
            signing_keys=[self._convert(jwk) for jwk in usable],
            signing_algorithm=signing_algorithm,
        )
