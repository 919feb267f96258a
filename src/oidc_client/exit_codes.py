"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~oidc_client.exceptions.OIDCError` subclass.
Shell wrappers can inspect the exit code to tell a rejected token apart
from a misconfigured provider without parsing stderr.

Example::

    $ oidc-client verify "$ID_TOKEN" --profile corp
    $ echo $?
    4   # EXIT_INVALID_TOKEN -- signature or claims were rejected
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_INVALID_CONFIGURATION = 3
"""Provider configuration or discovery metadata is missing or malformed."""

EXIT_INVALID_TOKEN = 4
"""The identity token was missing, had a bad signature, or failed claims validation."""

EXIT_CONVERSION_ERROR = 5
"""A published key could not be converted into a verification key."""

EXIT_TRANSPORT_ERROR = 6
"""A network-level or HTTP error occurred talking to the provider."""
