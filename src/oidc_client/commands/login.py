"""Login commands -- verify ID tokens and build authorization URLs.

Both commands build an :class:`~oidc_client.provider.OIDCClient` either
from ``--issuer``/``--client-id`` (discovery) or from the active profile.

Example::

    oidc-client authorize-url --redirect-uri http://127.0.0.1:8400/cb
    oidc-client verify eyJhbGciOi... --nonce n-0S6_WzA2Mj
    oidc-client verify eyJhbGciOi... --issuer https://idp.example --client-id abc
"""

from __future__ import annotations

from typing import Optional

import typer

from oidc_client.exceptions import OIDCError
from oidc_client.exit_codes import EXIT_INVALID_USAGE
from oidc_client.output import error, format_response, success, suggest


def _build_client(
    ctx: typer.Context,
    profile_name: Optional[str],
    issuer: Optional[str],
    client_id: Optional[str],
    scopes: Optional[list[str]],
):  # noqa: ANN202
    """Return ``(client, profile)`` for the command options.

    ``profile`` is ``None`` when the client was built from ``--issuer``.

    Raises:
        typer.Exit: With code 2 when the options are inconsistent or no
            profile can be resolved.
        OIDCError: When discovery or client construction fails.
    """
    from oidc_client.config import resolve_profile
    from oidc_client.provider import OIDCClient

    if issuer is not None or client_id is not None:
        if not issuer or not client_id:
            error("--issuer and --client-id must be given together.")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        return OIDCClient(client_id, issuer=issuer, scopes=scopes), None

    if profile_name is None and ctx.obj:
        profile_name = ctx.obj.get("profile")

    profile = resolve_profile(profile_name)
    if profile is None:
        error("No active profile.")
        suggest("Run: oidc-client profile add <name> --client-id <id> --issuer <url>")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    if scopes:
        return OIDCClient.from_profile(profile, scopes=scopes), profile
    return OIDCClient.from_profile(profile), profile


def verify_command(
    ctx: typer.Context,
    id_token: str = typer.Argument(help="Raw compact-serialized ID token."),
    profile_name: Optional[str] = typer.Option(
        None, "--profile", "-p", help="Profile to verify against."
    ),
    issuer: Optional[str] = typer.Option(
        None, "--issuer", help="Issuer URL; discovers the provider instead of using a profile."
    ),
    client_id: Optional[str] = typer.Option(
        None, "--client-id", help="Client id expected in the audience (with --issuer)."
    ),
    nonce: Optional[str] = typer.Option(
        None, "--nonce", help="Nonce sent in the authorization request."
    ),
    nbf_tolerance: Optional[int] = typer.Option(
        None, "--nbf-tolerance", min=0, help="Seconds of clock tolerance for 'nbf'."
    ),
) -> None:
    """Verify an ID token's signature and claims, then print its claims.

    Exits with code 4 when the token is missing, malformed, carries an
    invalid signature, or fails claims validation.
    """
    try:
        client, _ = _build_client(ctx, profile_name, issuer, client_id, None)
        view = client.verify_id_token(
            id_token, nonce=nonce, nbf_tolerance_seconds=nbf_tolerance
        )
    except OIDCError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    success(f"id_token verified for subject {view.subject}")
    format_response(dict(view.claims))


def authorize_url_command(
    ctx: typer.Context,
    redirect_uri: Optional[str] = typer.Option(
        None, "--redirect-uri", help="Redirect URI registered for the client."
    ),
    profile_name: Optional[str] = typer.Option(
        None, "--profile", "-p", help="Profile to build the request for."
    ),
    issuer: Optional[str] = typer.Option(
        None, "--issuer", help="Issuer URL; discovers the provider instead of using a profile."
    ),
    client_id: Optional[str] = typer.Option(
        None, "--client-id", help="Client id (with --issuer)."
    ),
    scopes: Optional[list[str]] = typer.Option(
        None, "--scope", "-s", help="Scope to request (repeatable)."
    ),
    state: Optional[str] = typer.Option(None, "--state", help="Explicit state value."),
    nonce: Optional[str] = typer.Option(None, "--nonce", help="Explicit nonce value."),
) -> None:
    """Print an authorization URL with its state, nonce, and PKCE verifier.

    Keep the printed values: the nonce is needed to ``verify`` the returned
    ID token and the code verifier to redeem the authorization code.
    """
    try:
        client, profile = _build_client(ctx, profile_name, issuer, client_id, scopes)
        if redirect_uri is None and profile is not None:
            redirect_uri = profile.redirect_uri
        request = client.authorization_request(
            redirect_uri=redirect_uri, state=state, nonce=nonce
        )
    except OIDCError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    format_response(request.model_dump(mode="json"))
