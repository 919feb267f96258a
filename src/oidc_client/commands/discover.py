"""Discover command -- resolve a provider configuration from its issuer URL.

Example::

    oidc-client discover https://accounts.example.com --scope email
    oidc-client --json discover https://accounts.example.com --raw
"""

from __future__ import annotations

from typing import Optional

import typer

from oidc_client.exceptions import OIDCError
from oidc_client.output import error, format_response, info


def discover_command(
    issuer: str = typer.Argument(help="Issuer URL (without the well-known suffix)."),
    scopes: Optional[list[str]] = typer.Option(
        None, "--scope", "-s", help="Scope the client will request (repeatable)."
    ),
    algorithm: str = typer.Option(
        "RS256", "--alg", help="Accepted ID-token signing algorithm."
    ),
    raw: bool = typer.Option(
        False, "--raw", help="Print the raw metadata document instead."
    ),
) -> None:
    """Resolve and print a provider configuration.

    Fetches the issuer's ``.well-known/openid-configuration`` document,
    checks the requested scopes against ``scopes_supported``, and converts
    the published signing keys matching ``--alg``.
    """
    from oidc_client.discovery import DiscoveryResolver, discovery_url

    resolver = DiscoveryResolver()
    info(f"Discovering {discovery_url(issuer)}")
    try:
        if raw:
            format_response(resolver.fetch_metadata(issuer))
            return
        config = resolver.resolve(issuer, scopes, algorithm)
    except OIDCError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    format_response(config.model_dump(mode="json"))
