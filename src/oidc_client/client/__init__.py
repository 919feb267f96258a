"""HTTP collaborators for oidc-client.

Thin wrappers over :mod:`httpx` used by the verification core through
narrow interfaces:

Classes:
    :class:`HttpClient` -- fetches and parses JSON documents (discovery
    metadata and key sets).
    :class:`HttpTokenExchange` -- posts a grant to the token endpoint and
    returns an :class:`~oidc_client.models.AccessToken`.
    :class:`TokenExchange` -- the protocol any token-exchange
    collaborator satisfies.

Neither collaborator retries; retry policy belongs to the caller.

Example::

    from oidc_client.client import HttpClient

    doc = HttpClient(timeout=10).get_json("https://idp.example/.well-known/openid-configuration")
"""

from oidc_client.client.http import HttpClient
from oidc_client.client.token_exchange import HttpTokenExchange, TokenExchange

__all__ = ["HttpClient", "HttpTokenExchange", "TokenExchange"]
