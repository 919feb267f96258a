"""oidc-client -- OpenID Connect relying-party core.

Verifies identity tokens returned by an OpenID Connect provider: the
signature against the provider's signing keys, then the claims against an
ordered, inspectable rule chain. Provider endpoints and keys are given
statically or discovered from the issuer's well-known metadata.

Typical use::

    from oidc_client import OIDCClient

    client = OIDCClient("my-client", "s3cret", issuer="https://idp.example")
    request = client.authorization_request(redirect_uri="https://app/cb")
    identity = client.exchange_code(code, request)

Modules:
    provider: The :class:`OIDCClient` login orchestrator.
    discovery: Provider metadata and key-set resolution.
    verifier: Signature verification over an ordered key set.
    validation: Claim rules and the validator chain.
    app: Typer application and CLI entry point.
"""

__version__ = "0.3.0"

from oidc_client.exceptions import (  # noqa: E402
    ConversionError,
    InvalidConfigurationError,
    InvalidTokenError,
    OIDCError,
    TransportError,
)
from oidc_client.models import ProviderConfiguration, VerifiedIdentity  # noqa: E402
from oidc_client.provider import OIDCClient  # noqa: E402
from oidc_client.validation import (  # noqa: E402
    Comparison,
    ValidationRule,
    ValidatorChain,
    default_validator_chain,
)

__all__ = [
    "Comparison",
    "ConversionError",
    "InvalidConfigurationError",
    "InvalidTokenError",
    "OIDCClient",
    "OIDCError",
    "ProviderConfiguration",
    "TransportError",
    "ValidationRule",
    "ValidatorChain",
    "VerifiedIdentity",
    "__version__",
    "default_validator_chain",
]
