"""Tests for the shared Pydantic models."""

from __future__ import annotations

import pytest

from oidc_client.exceptions import InvalidConfigurationError
from oidc_client.keys import SigningKeySet
from oidc_client.models import (
    AccessToken,
    ClientProfile,
    ProviderConfiguration,
    VerifiedIdentity,
    normalize_scopes,
)


def _config(**overrides: object) -> ProviderConfiguration:
    options: dict[str, object] = {
        "id_token_issuer": "https://idp",
        "authorization_endpoint": "https://idp/authorize",
        "token_endpoint": "https://idp/token",
        "signing_keys": ["-----BEGIN PUBLIC KEY-----\nx\n-----END PUBLIC KEY-----"],
    }
    options.update(overrides)
    return ProviderConfiguration(**options)


class TestNormalizeScopes:
    def test_none(self) -> None:
        assert normalize_scopes(None) == ("openid",)

    def test_single_string(self) -> None:
        assert normalize_scopes("email") == ("email", "openid")

    def test_dedupes_and_keeps_order(self) -> None:
        assert normalize_scopes(["email", "openid", "email", "profile"]) == (
            "email",
            "openid",
            "profile",
        )


class TestProviderConfiguration:
    def test_coerces_keys_and_scopes(self) -> None:
        config = _config(scopes=["profile"])
        assert isinstance(config.signing_keys, SigningKeySet)
        assert config.scopes == ("profile", "openid")
        assert config.signing_algorithm == "RS256"

    def test_frozen(self) -> None:
        config = _config()
        with pytest.raises(Exception):
            config.token_endpoint = "https://elsewhere"  # type: ignore[misc]

    @pytest.mark.parametrize(
        "field", ["id_token_issuer", "authorization_endpoint", "token_endpoint"]
    )
    def test_empty_required_field(self, field: str) -> None:
        with pytest.raises(InvalidConfigurationError, match=field):
            _config(**{field: ""})

    @pytest.mark.parametrize(
        "field", ["id_token_issuer", "authorization_endpoint", "token_endpoint", "signing_keys"]
    )
    def test_omitted_required_field(self, field: str) -> None:
        options: dict[str, object] = {
            "id_token_issuer": "https://idp",
            "authorization_endpoint": "https://idp/authorize",
            "token_endpoint": "https://idp/token",
            "signing_keys": ["k"],
        }
        del options[field]
        with pytest.raises(InvalidConfigurationError, match=f"'{field}' is missing"):
            ProviderConfiguration(**options)

    @pytest.mark.parametrize(
        ("field", "value"),
        [("id_token_issuer", 123), ("token_endpoint", ["x"]), ("scopes", [1])],
    )
    def test_wrong_type(self, field: str, value: object) -> None:
        with pytest.raises(InvalidConfigurationError, match=f"Invalid provider option '{field}"):
            _config(**{field: value})

    def test_no_signing_keys(self) -> None:
        with pytest.raises(InvalidConfigurationError, match="signing key"):
            _config(signing_keys=[])

    def test_dump_describes_keys(self) -> None:
        dumped = _config().model_dump(mode="json")
        assert dumped["signing_keys"] == ["pem public key"]
        assert dumped["scopes"] == ["openid"]


class TestVerifiedIdentity:
    def test_accessors(self) -> None:
        identity = VerifiedIdentity(
            token=AccessToken(access_token="at"),
            id_token="raw",
            claims={"sub": "u1", "iss": "https://idp", "aud": ["a", "b"]},
        )
        assert identity.subject == "u1"
        assert identity.issuer == "https://idp"
        assert identity.audience == ["a", "b"]

    def test_missing_audience(self) -> None:
        identity = VerifiedIdentity(token=AccessToken(access_token="at"), id_token="raw")
        assert identity.audience == []


class TestClientProfile:
    def test_defaults(self) -> None:
        profile = ClientProfile(name="p", client_id="c")
        assert profile.scopes == ["openid"]
        assert profile.public_keys == []
        assert profile.nbf_tolerance_seconds == 0
        assert profile.request.timeout == 30.0

    def test_negative_tolerance_rejected(self) -> None:
        with pytest.raises(ValueError):
            ClientProfile(name="p", client_id="c", nbf_tolerance_seconds=-1)
