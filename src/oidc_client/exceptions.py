"""Exception hierarchy for oidc-client.

All exceptions inherit from :class:`OIDCError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`oidc_client.exit_codes`.
The top-level error handler in :func:`oidc_client.app.main` catches
``OIDCError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    OIDCError                     (exit 1)
    +-- InvalidUsageError         (exit 2)
    +-- InvalidConfigurationError (exit 3)
    +-- InvalidTokenError         (exit 4)
    +-- ConversionError           (exit 5)
    +-- TransportError            (exit 6)
    +-- ConfigError               (exit 1)
"""

from __future__ import annotations

from typing import Optional

from oidc_client.exit_codes import (
    EXIT_CONVERSION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_CONFIGURATION,
    EXIT_INVALID_TOKEN,
    EXIT_INVALID_USAGE,
    EXIT_TRANSPORT_ERROR,
)


class OIDCError(Exception):
    """Base exception for all oidc-client errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`oidc_client.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(OIDCError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class InvalidConfigurationError(OIDCError):
    """Raised when provider configuration is incomplete or discovery metadata is malformed.

    Always fatal to the construction or discovery call that raised it.
    """

    exit_code = EXIT_INVALID_CONFIGURATION


class InvalidTokenError(OIDCError):
    """Raised when an identity token is missing, unverifiable, or fails claims validation.

    Args:
        message: Human-readable error description.
        claim: Name of the claim whose validation rule failed, when the
            failure came from the claims chain.
    """

    exit_code = EXIT_INVALID_TOKEN

    def __init__(self, message: str, claim: Optional[str] = None):
        super().__init__(message)
        self.claim = claim


class ConversionError(OIDCError):
    """Raised when a JSON Web Key cannot be turned into a verification key."""

    exit_code = EXIT_CONVERSION_ERROR


class TransportError(OIDCError):
    """Raised on HTTP status errors and network-level failures (timeout, DNS, refused).

    Args:
        message: Human-readable error description including the failing step.
        status_code: HTTP status code when the server answered with an error.
    """

    exit_code = EXIT_TRANSPORT_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ConfigError(OIDCError):
    """Raised for local configuration problems (missing profiles, invalid JSON, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE
