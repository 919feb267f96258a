"""Token-endpoint collaborator.

:class:`TokenExchange` is the narrow interface the login orchestrator
depends on; :class:`HttpTokenExchange` is the default implementation that
form-posts ``grant_type`` plus the caller's grant parameters and client
credentials to the token endpoint.

Example::

    exchange = HttpTokenExchange(
        "https://idp.example/token", client_id="abc", client_secret="s3cret"
    )
    token = exchange.exchange(
        "authorization_code",
        {"code": code, "redirect_uri": redirect_uri, "code_verifier": verifier},
    )
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Protocol

import httpx
from pydantic import ValidationError

from oidc_client.exceptions import InvalidTokenError, TransportError
from oidc_client.models import AccessToken

logger = logging.getLogger(__name__)


class TokenExchange(Protocol):
    """Anything that can trade a grant for an :class:`~oidc_client.models.AccessToken`."""

    def exchange(self, grant: str, params: Mapping[str, Any]) -> AccessToken:
        ...


class HttpTokenExchange:
    """Exchange grants at an OAuth2 token endpoint over HTTP.

    Args:
        token_endpoint: Absolute token endpoint URL.
        client_id: The registered client identifier.
        client_secret: Client secret for confidential clients; public
            clients (PKCE only) leave it ``None``.
        timeout: Request timeout in seconds.
        verify_ssl: Verify TLS certificates.
    """

    def __init__(
        self,
        token_endpoint: str,
        client_id: str,
        client_secret: Optional[str] = None,
        timeout: float = 30.0,
        verify_ssl: bool = True,
    ) -> None:
        self.token_endpoint = token_endpoint
        self.client_id = client_id
        self._client_secret = client_secret
        self.timeout = timeout
        self.verify_ssl = verify_ssl

    def exchange(self, grant: str, params: Mapping[str, Any]) -> AccessToken:
        """POST *grant* with *params* and parse the token response.

        Args:
            grant: OAuth2 ``grant_type`` (e.g. ``"authorization_code"``,
                ``"refresh_token"``).
            params: Grant-specific form parameters. ``None`` values are
                dropped.

        Returns:
            The parsed :class:`~oidc_client.models.AccessToken`.

        Raises:
            TransportError: On HTTP errors or network failures.
            InvalidTokenError: If the response has no ``access_token``.
        """
        data: dict[str, str] = {"grant_type": grant}
        for key, value in params.items():
            if value is not None:
                data[key] = str(value)
        data["client_id"] = self.client_id
        if self._client_secret:
            data["client_secret"] = self._client_secret

        logger.debug("POST %s (grant_type=%s)", self.token_endpoint, grant)
        try:
            response = httpx.post(
                self.token_endpoint,
                data=data,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
                verify=self.verify_ssl,
            )
            response.raise_for_status()
            token_data: dict[str, Any] = response.json()
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"Token exchange failed with status {exc.response.status_code}: "
                f"{exc.response.text}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Token exchange failed: {exc}") from exc
        except ValueError as exc:
            raise TransportError(
                f"Token exchange returned a non-JSON body: {exc}"
            ) from exc

        if not isinstance(token_data, dict) or "access_token" not in token_data:
            raise InvalidTokenError("Token response missing 'access_token' field")

        try:
            return AccessToken.model_validate(token_data)
        except ValidationError as exc:
            raise InvalidTokenError(f"Malformed token response: {exc}") from exc
