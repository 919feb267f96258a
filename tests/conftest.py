"""Shared test fixtures for oidc-client.

Provides an RSA signing key pair, an ID-token factory, provider metadata
and key-set documents, isolated config environments, output state
management, and a CLI runner. These fixtures are automatically discovered
by pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

import base64
import time
from pathlib import Path
from typing import Any, Callable, Optional

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwt

from oidc_client.output import OutputFormat, OutputManager, reset_output, set_output

ISSUER = "https://idp.example.com"
CLIENT_ID = "client-abc"
NOW = 1_700_000_000


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; CliRunner swaps those streams per invocation.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


class RSAKeyPair:
    """An RSA key pair with PEM and JWK renderings."""

    def __init__(self, kid: str) -> None:
        self.kid = kid
        self._key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        self.private_pem = self._key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ).decode("ascii")
        self.public_pem = self._key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        ).decode("ascii")

    def jwk(self, alg: str = "RS256", use: Optional[str] = "sig") -> dict[str, Any]:
        numbers = self._key.public_key().public_numbers()
        jwk: dict[str, Any] = {
            "kty": "RSA",
            "kid": self.kid,
            "alg": alg,
            "n": _b64_uint(numbers.n),
            "e": _b64_uint(numbers.e),
        }
        if use is not None:
            jwk["use"] = use
        return jwk


def _b64_uint(value: int) -> str:
    raw = value.to_bytes((value.bit_length() + 7) // 8, "big")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


@pytest.fixture(scope="session")
def signing_key() -> RSAKeyPair:
    """The key the test provider signs ID tokens with."""
    return RSAKeyPair("key-1")


@pytest.fixture(scope="session")
def other_key() -> RSAKeyPair:
    """An unrelated key; tokens never verify against it."""
    return RSAKeyPair("key-2")


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


def default_claims(now: int = NOW) -> dict[str, Any]:
    return {
        "iss": ISSUER,
        "sub": "u1",
        "aud": CLIENT_ID,
        "iat": now,
        "exp": now + 300,
    }


@pytest.fixture
def make_id_token(signing_key: RSAKeyPair) -> Callable[..., str]:
    """Factory for signed ID tokens.

    Keyword arguments override default claims; a value of ``None`` removes
    the claim. ``key`` and ``algorithm`` override the signing key.
    """

    def _make(
        key: Optional[str] = None,
        algorithm: str = "RS256",
        headers: Optional[dict[str, Any]] = None,
        **overrides: Any,
    ) -> str:
        claims = default_claims()
        for name, value in overrides.items():
            if value is None:
                claims.pop(name, None)
            else:
                claims[name] = value
        return jwt.encode(
            claims,
            key if key is not None else signing_key.private_pem,
            algorithm=algorithm,
            headers=headers,
        )

    return _make


@pytest.fixture
def fixed_clock() -> Callable[[], float]:
    return lambda: float(NOW)


# ---------------------------------------------------------------------------
# Discovery documents
# ---------------------------------------------------------------------------


@pytest.fixture
def metadata() -> dict[str, Any]:
    """A provider metadata document for :data:`ISSUER`."""
    return {
        "issuer": ISSUER,
        "authorization_endpoint": f"{ISSUER}/authorize",
        "token_endpoint": f"{ISSUER}/token",
        "userinfo_endpoint": f"{ISSUER}/userinfo",
        "jwks_uri": f"{ISSUER}/jwks",
        "scopes_supported": ["openid", "profile", "email"],
    }


@pytest.fixture
def key_set(signing_key: RSAKeyPair) -> dict[str, Any]:
    return {"keys": [signing_key.jwk()]}


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path,
    clears ``OIDC_CLIENT_PROFILE``, and changes the working directory to
    tmp_path. Forces the XDG layout so paths are identical on every OS.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("OIDC_CLIENT_PROFILE", raising=False)
    monkeypatch.setattr("oidc_client.config._is_xdg_platform", lambda: True)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
