"""Tests for provider discovery."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock, patch

import httpx
import pytest

from conftest import ISSUER
from oidc_client.discovery import DiscoveryResolver, discovery_url, select_signing_keys
from oidc_client.exceptions import (
    ConversionError,
    InvalidConfigurationError,
    TransportError,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _mock_httpx_get(
    json_response: Any = None,
    status_code: int = 200,
) -> MagicMock:
    """Create a mock for httpx.get that returns a JSON response."""
    mock_response = MagicMock(spec=httpx.Response)
    mock_response.status_code = status_code
    mock_response.json.return_value = json_response
    mock_response.text = str(json_response)

    if status_code >= 400:
        mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
            message=f"HTTP {status_code}",
            request=MagicMock(),
            response=mock_response,
        )
    else:
        mock_response.raise_for_status.return_value = None

    return mock_response


def _routes(documents: dict[str, Any]):  # noqa: ANN202
    """Side effect for httpx.get serving *documents* by URL."""

    def _get(url: str, **kwargs: Any) -> MagicMock:
        return _mock_httpx_get(documents[url])

    return _get


def _resolve(metadata: dict[str, Any], key_set: Any, **kwargs: Any):  # noqa: ANN202
    documents = {discovery_url(ISSUER): metadata}
    if isinstance(metadata.get("jwks_uri"), str):
        documents[metadata["jwks_uri"]] = key_set
    with patch("oidc_client.client.http.httpx.get", side_effect=_routes(documents)) as mock_get:
        resolver = DiscoveryResolver(retain_all_keys=kwargs.pop("retain_all_keys", True))
        return resolver.resolve(ISSUER, **kwargs), mock_get


# ---------------------------------------------------------------------------
# discovery_url / select_signing_keys
# ---------------------------------------------------------------------------


class TestDiscoveryUrl:
    def test_appends_well_known(self) -> None:
        assert discovery_url("https://idp") == "https://idp/.well-known/openid-configuration"

    def test_strips_trailing_slash(self) -> None:
        assert discovery_url("https://idp/") == "https://idp/.well-known/openid-configuration"


class TestSelectSigningKeys:
    def test_filters_by_alg_and_use(self) -> None:
        keys = [
            {"kid": "a", "alg": "RS256", "use": "sig"},
            {"kid": "b", "alg": "RS256", "use": "enc"},
            {"kid": "c", "alg": "ES256", "use": "sig"},
            {"kid": "d", "alg": "RS256"},
            {"kid": "e", "use": "sig"},
            "not-a-key",
        ]
        assert [k["kid"] for k in select_signing_keys(keys, "RS256")] == ["a", "d"]

    def test_null_use_counts_as_undeclared(self) -> None:
        keys = [{"kid": "a", "alg": "RS256", "use": None}]
        assert select_signing_keys(keys, "RS256") == keys

    def test_empty(self) -> None:
        assert select_signing_keys([], "RS256") == []


# ---------------------------------------------------------------------------
# DiscoveryResolver.resolve
# ---------------------------------------------------------------------------


class TestResolve:
    def test_populates_configuration(self, metadata, key_set, signing_key) -> None:
        config, mock_get = _resolve(metadata, key_set, requested_scopes=["profile"])

        assert config.id_token_issuer == ISSUER
        assert config.authorization_endpoint == f"{ISSUER}/authorize"
        assert config.token_endpoint == f"{ISSUER}/token"
        assert config.userinfo_endpoint == f"{ISSUER}/userinfo"
        assert config.scopes == ("profile", "openid")
        assert config.signing_algorithm == "RS256"
        assert [k.strip() for k in config.signing_keys] == [signing_key.public_pem.strip()]

        urls = [c.args[0] for c in mock_get.call_args_list]
        assert urls == [f"{ISSUER}/.well-known/openid-configuration", f"{ISSUER}/jwks"]

    def test_userinfo_endpoint_is_optional(self, metadata, key_set) -> None:
        del metadata["userinfo_endpoint"]
        config, _ = _resolve(metadata, key_set)
        assert config.userinfo_endpoint is None

    @pytest.mark.parametrize("member", ["issuer", "authorization_endpoint", "token_endpoint"])
    def test_missing_required_member(self, metadata, key_set, member: str) -> None:
        del metadata[member]
        with pytest.raises(InvalidConfigurationError, match=f"Parameter {member} missing"):
            _resolve(metadata, key_set)

    def test_missing_jwks_uri(self, metadata, key_set) -> None:
        del metadata["jwks_uri"]
        with pytest.raises(InvalidConfigurationError, match="Parameter jwks_uri missing"):
            _resolve(metadata, key_set)

    def test_unsupported_scope(self, metadata, key_set) -> None:
        with pytest.raises(
            InvalidConfigurationError, match="Scope address is not supported"
        ):
            _resolve(metadata, key_set, requested_scopes=["email", "address"])

    @pytest.mark.parametrize(
        ("member", "value"),
        [
            ("issuer", 123),
            ("authorization_endpoint", {"url": "x"}),
            ("token_endpoint", ["x"]),
            ("userinfo_endpoint", 42),
            ("jwks_uri", ["https://idp.example.com/jwks"]),
        ],
    )
    def test_member_of_wrong_type(self, metadata, key_set, member: str, value: Any) -> None:
        metadata[member] = value
        with pytest.raises(InvalidConfigurationError, match=f"Parameter {member} .* invalid type"):
            _resolve(metadata, key_set)

    @pytest.mark.parametrize("supported", [5, "openid profile", {"openid": True}])
    def test_scopes_supported_must_be_a_list(self, metadata, key_set, supported: Any) -> None:
        metadata["scopes_supported"] = supported
        with pytest.raises(InvalidConfigurationError, match="scopes_supported"):
            _resolve(metadata, key_set, requested_scopes=["profile"])

    def test_scopes_unchecked_without_scopes_supported(self, metadata, key_set) -> None:
        del metadata["scopes_supported"]
        config, _ = _resolve(metadata, key_set, requested_scopes=["anything"])
        assert "anything" in config.scopes

    def test_no_matching_keys(self, metadata, signing_key) -> None:
        key_set = {"keys": [signing_key.jwk(alg="RS512"), signing_key.jwk(use="enc")]}
        with pytest.raises(InvalidConfigurationError, match="No valid signing keys"):
            _resolve(metadata, key_set)

    def test_retains_all_matching_keys_in_order(self, metadata, signing_key, other_key) -> None:
        key_set = {"keys": [other_key.jwk(), signing_key.jwk()]}
        config, _ = _resolve(metadata, key_set)
        assert [k.strip() for k in config.signing_keys] == [
            other_key.public_pem.strip(),
            signing_key.public_pem.strip(),
        ]

    def test_first_key_only(self, metadata, signing_key, other_key) -> None:
        key_set = {"keys": [other_key.jwk(), signing_key.jwk()]}
        config, _ = _resolve(metadata, key_set, retain_all_keys=False)
        assert len(config.signing_keys) == 1
        assert config.signing_keys[0].strip() == other_key.public_pem.strip()

    @pytest.mark.parametrize("key_set", [[], {"keys": "nope"}, {"no_keys": []}])
    def test_malformed_key_set(self, metadata, key_set: Any) -> None:
        with pytest.raises(InvalidConfigurationError, match="Invalid key set"):
            _resolve(metadata, key_set)

    def test_unconvertible_key(self, metadata) -> None:
        key_set = {"keys": [{"kty": "RSA", "kid": "bad", "alg": "RS256", "n": "!!", "e": "AQAB"}]}
        with pytest.raises(ConversionError):
            _resolve(metadata, key_set)

    def test_custom_key_converter(self, metadata, key_set) -> None:
        documents = {discovery_url(ISSUER): metadata, metadata["jwks_uri"]: key_set}
        with patch("oidc_client.client.http.httpx.get", side_effect=_routes(documents)):
            config = DiscoveryResolver(key_converter=lambda jwk: jwk["kid"]).resolve(ISSUER)
        assert list(config.signing_keys) == ["key-1"]


class TestFetchMetadata:
    def test_non_object_document(self) -> None:
        with patch("oidc_client.client.http.httpx.get", return_value=_mock_httpx_get(["a"])):
            with pytest.raises(InvalidConfigurationError, match="Expected JSON"):
                DiscoveryResolver().fetch_metadata(ISSUER)

    def test_http_error(self) -> None:
        mock_resp = _mock_httpx_get({"error": "nope"}, status_code=404)
        with patch("oidc_client.client.http.httpx.get", return_value=mock_resp):
            with pytest.raises(TransportError) as exc_info:
                DiscoveryResolver().fetch_metadata(ISSUER)
        assert exc_info.value.status_code == 404

    def test_returns_raw_document(self, metadata) -> None:
        with patch("oidc_client.client.http.httpx.get", return_value=_mock_httpx_get(metadata)):
            assert DiscoveryResolver().fetch_metadata(ISSUER) == metadata
