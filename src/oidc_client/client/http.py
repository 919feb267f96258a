"""JSON document fetcher used by discovery.

:class:`HttpClient` performs a single ``GET`` and returns the parsed JSON
body. HTTP status errors and network failures surface as
:class:`~oidc_client.exceptions.TransportError`; a body that is not JSON
surfaces as :class:`~oidc_client.exceptions.InvalidConfigurationError`
because every document fetched here is provider metadata.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from oidc_client.exceptions import InvalidConfigurationError, TransportError
from oidc_client.models import RequestConfig

logger = logging.getLogger(__name__)


class HttpClient:
    """Fetch JSON documents over HTTP(S).

    Args:
        timeout: Per-request timeout in seconds.
        verify_ssl: Verify TLS certificates.
    """

    def __init__(self, timeout: float = 30.0, verify_ssl: bool = True) -> None:
        self.timeout = timeout
        self.verify_ssl = verify_ssl

    @classmethod
    def from_config(cls, config: RequestConfig) -> HttpClient:
        return cls(timeout=config.timeout, verify_ssl=config.verify_ssl)

    def get_json(self, url: str) -> Any:
        """GET *url* and return the decoded JSON body.

        Args:
            url: Absolute document URL.

        Returns:
            Whatever JSON value the body holds; callers check its shape.

        Raises:
            TransportError: On a non-2xx status or a network-level failure.
            InvalidConfigurationError: If the body is not valid JSON.
        """
        logger.debug("GET %s", url)
        try:
            response = httpx.get(
                url,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
                verify=self.verify_ssl,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"GET {url} failed with status {exc.response.status_code}: "
                f"{exc.response.text}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"GET {url} failed: {exc}") from exc

        try:
            return response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            raise InvalidConfigurationError(
                f"Invalid response received from {url}. Expected JSON."
            ) from exc
