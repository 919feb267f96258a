"""Profile commands -- manage stored client profiles.

A profile stores one client registration at one provider: either an
``--issuer`` (configuration discovered at run time) or static endpoints
plus ``--public-key`` entries. Secrets are never stored; only their
credential source (``env:VAR``, ``file:/path`` or ``prompt``).

Typical workflow::

    oidc-client profile add corp --client-id abc --issuer https://idp.example \\
        --secret-source env:CORP_CLIENT_SECRET --default
    oidc-client profile list
    oidc-client profile show corp
    oidc-client profile remove corp
"""

from __future__ import annotations

from typing import Optional

import typer

from oidc_client.exit_codes import EXIT_INVALID_USAGE
from oidc_client.output import error, format_response, info, print_table, success, suggest


profile_app = typer.Typer(no_args_is_help=True)


@profile_app.command("add")
def profile_add(
    ctx: typer.Context,
    name: str = typer.Argument(help="Profile name."),
    client_id: str = typer.Option(..., "--client-id", help="Registered client id."),
    issuer: Optional[str] = typer.Option(
        None, "--issuer", help="Issuer URL; enables discovery."
    ),
    secret_source: Optional[str] = typer.Option(
        None, "--secret-source", help="Client secret source: env:VAR, file:/path, or prompt."
    ),
    id_token_issuer: Optional[str] = typer.Option(
        None, "--id-token-issuer", help="Expected 'iss' claim (static configuration)."
    ),
    authorization_endpoint: Optional[str] = typer.Option(
        None, "--authorization-endpoint", help="Authorization endpoint URL."
    ),
    token_endpoint: Optional[str] = typer.Option(
        None, "--token-endpoint", help="Token endpoint URL."
    ),
    userinfo_endpoint: Optional[str] = typer.Option(
        None, "--userinfo-endpoint", help="UserInfo endpoint URL."
    ),
    public_keys: Optional[list[str]] = typer.Option(
        None, "--public-key", help="Verification key source, e.g. file:/path/key.pem (repeatable)."
    ),
    scopes: Optional[list[str]] = typer.Option(
        None, "--scope", "-s", help="Scope to request (repeatable)."
    ),
    algorithm: str = typer.Option("RS256", "--alg", help="ID-token signing algorithm."),
    redirect_uri: Optional[str] = typer.Option(
        None, "--redirect-uri", help="Default redirect URI."
    ),
    nbf_tolerance: int = typer.Option(
        0, "--nbf-tolerance", min=0, help="Seconds of clock tolerance for 'nbf'."
    ),
    make_default: bool = typer.Option(
        False, "--default", help="Make this the default profile."
    ),
) -> None:
    """Create or overwrite a client profile.

    Either ``--issuer`` or the full static configuration
    (``--id-token-issuer``, ``--authorization-endpoint``,
    ``--token-endpoint`` and at least one ``--public-key``) is required.
    Overwriting an existing profile requires ``--force``.
    """
    from oidc_client.config import (
        load_global_config,
        profile_exists,
        save_global_config,
        save_profile,
    )
    from oidc_client.models import OPENID_SCOPE, ClientProfile, normalize_scopes

    static = [id_token_issuer, authorization_endpoint, token_endpoint]
    if not issuer and (not all(static) or not public_keys):
        error(
            "Provide --issuer, or --id-token-issuer, --authorization-endpoint, "
            "--token-endpoint and --public-key."
        )
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    force = ctx.obj.get("force", False) if ctx.obj else False
    if profile_exists(name) and not force:
        error(f'Profile "{name}" already exists.')
        suggest("Use --force to overwrite it.")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    try:
        profile = ClientProfile(
            name=name,
            client_id=client_id,
            client_secret_source=secret_source,
            issuer=issuer,
            id_token_issuer=id_token_issuer,
            authorization_endpoint=authorization_endpoint,
            token_endpoint=token_endpoint,
            userinfo_endpoint=userinfo_endpoint,
            public_keys=list(public_keys or []),
            scopes=list(normalize_scopes(scopes or [OPENID_SCOPE])),
            signing_algorithm=algorithm,
            redirect_uri=redirect_uri,
            nbf_tolerance_seconds=nbf_tolerance,
        )
    except ValueError as exc:
        error(f"Invalid profile: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_profile(profile)
    success(f'Profile "{name}" saved.')

    if make_default:
        config = load_global_config()
        config.default_profile = name
        save_global_config(config)
        info(f'Default profile set to "{name}".')


@profile_app.command("list")
def profile_list() -> None:
    """List stored profiles."""
    from oidc_client.config import list_profiles, load_global_config, load_profile

    names = list_profiles()
    if not names:
        info("No profiles configured.")
        suggest("Run: oidc-client profile add <name> --client-id <id> --issuer <url>")
        return

    default = load_global_config().default_profile
    rows: list[list[str]] = []
    for name in names:
        profile = load_profile(name)
        source = profile.issuer or profile.id_token_issuer or ""
        rows.append([name, profile.client_id, source, "*" if name == default else ""])
    print_table(["Name", "Client ID", "Issuer", "Default"], rows, title="Profiles")


@profile_app.command("show")
def profile_show(
    name: str = typer.Argument(help="Profile name."),
) -> None:
    """Show a stored profile."""
    from oidc_client.config import load_profile
    from oidc_client.exceptions import ConfigError

    try:
        profile = load_profile(name)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None
    format_response(profile.model_dump(mode="json"))


@profile_app.command("remove")
def profile_remove(
    ctx: typer.Context,
    name: str = typer.Argument(help="Profile name."),
) -> None:
    """Remove a stored profile. Asks for confirmation unless ``--force`` is active."""
    from oidc_client.config import (
        delete_profile,
        load_global_config,
        profile_exists,
        save_global_config,
    )

    if not profile_exists(name):
        error(f'Profile "{name}" not found.')
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm(f'Remove profile "{name}"?')
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    delete_profile(name)
    config = load_global_config()
    if config.default_profile == name:
        config.default_profile = None
        save_global_config(config)
    success(f'Profile "{name}" removed.')
