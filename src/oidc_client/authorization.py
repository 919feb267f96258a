"""Authorization request construction (authorization code flow with PKCE).

Builds the URL the user agent is sent to, together with the ``state``,
``nonce`` and PKCE ``code_verifier`` the caller must keep until the
redirect comes back. The ``nonce`` is later handed to
:meth:`~oidc_client.provider.OIDCClient.complete_login` so the ID token's
``nonce`` claim is checked.
"""

from __future__ import annotations

import base64
import hashlib
import secrets
from typing import Iterable, Mapping, Optional
from urllib.parse import urlencode

from oidc_client.models import AuthorizationRequest

SCOPE_SEPARATOR = " "
"""OpenID Connect scopes are space separated."""


def generate_pkce_pair() -> tuple[str, str]:
    """Generate a PKCE code_verifier and code_challenge (S256).

    Returns:
        A tuple of ``(code_verifier, code_challenge)``.
    """
    # RFC 7636: 43-128 characters from unreserved character set
    code_verifier = secrets.token_urlsafe(64)[:128]
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    code_challenge = base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")
    return code_verifier, code_challenge


def build_authorization_request(
    authorization_endpoint: str,
    client_id: str,
    scopes: Iterable[str],
    redirect_uri: Optional[str] = None,
    state: Optional[str] = None,
    nonce: Optional[str] = None,
    extra_params: Optional[Mapping[str, str]] = None,
) -> AuthorizationRequest:
    """Build an authorization code request URL.

    Args:
        authorization_endpoint: The provider's authorization endpoint.
        client_id: Registered client identifier.
        scopes: Scopes to request, joined with :data:`SCOPE_SEPARATOR`.
        redirect_uri: Where the provider sends the user back.
        state: CSRF state; generated when omitted.
        nonce: Replay-protection nonce; generated when omitted.
        extra_params: Additional query parameters (``prompt``, ``max_age``,
            ``login_hint``...). They cannot override the core parameters.

    Returns:
        The :class:`~oidc_client.models.AuthorizationRequest`.
    """
    state = state or secrets.token_urlsafe(32)
    nonce = nonce or secrets.token_urlsafe(32)
    code_verifier, code_challenge = generate_pkce_pair()

    params: dict[str, str] = dict(extra_params or {})
    params.update(
        {
            "response_type": "code",
            "client_id": client_id,
            "scope": SCOPE_SEPARATOR.join(scopes),
            "state": state,
            "nonce": nonce,
            "code_challenge": code_challenge,
            "code_challenge_method": "S256",
        }
    )
    if redirect_uri:
        params["redirect_uri"] = redirect_uri

    separator = "&" if "?" in authorization_endpoint else "?"
    return AuthorizationRequest(
        url=f"{authorization_endpoint}{separator}{urlencode(params)}",
        state=state,
        nonce=nonce,
        code_verifier=code_verifier,
        redirect_uri=redirect_uri,
    )
