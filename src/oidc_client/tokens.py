"""Read-only view over a decoded identity token.

:class:`TokenView` wraps a JWT compact serialization together with its
decoded header and claims. Decoding here does **not** verify anything --
signature checks belong to :class:`~oidc_client.verifier.TokenVerifier`
and claim checks to :class:`~oidc_client.validation.ValidatorChain`.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping, Optional

from jose import jwt
from jose.exceptions import JOSEError

from oidc_client.exceptions import InvalidTokenError


class TokenView:
    """Immutable decoded identity token.

    Args:
        raw: The compact-serialized token as returned by the authorization
            server.
        header: Decoded JOSE header.
        claims: Decoded payload claims.

    Use :meth:`decode` to build one from a raw token.
    """

    def __init__(
        self,
        raw: str,
        header: Mapping[str, Any],
        claims: Mapping[str, Any],
    ) -> None:
        self._raw = raw
        self._header = MappingProxyType(dict(header))
        self._claims = MappingProxyType(dict(claims))

    @classmethod
    def decode(cls, raw: str) -> TokenView:
        """Decode *raw* without verifying it.

        Raises:
            InvalidTokenError: If *raw* is not a well-formed JWT.
        """
        try:
            header = jwt.get_unverified_header(raw)
            claims = jwt.get_unverified_claims(raw)
        except JOSEError as exc:
            raise InvalidTokenError(f"malformed id_token: {exc}") from exc
        return cls(raw, header, claims)

    @property
    def raw(self) -> str:
        return self._raw

    @property
    def header(self) -> Mapping[str, Any]:
        return self._header

    @property
    def claims(self) -> Mapping[str, Any]:
        return self._claims

    @property
    def algorithm(self) -> Optional[str]:
        """The ``alg`` header parameter."""
        return self._header.get("alg")

    @property
    def subject(self) -> Optional[str]:
        return self._claims.get("sub")

    def claim(self, name: str) -> Any:
        """Return the value of claim *name*, or ``None`` when absent."""
        return self._claims.get(name)

    def has_claim(self, name: str) -> bool:
        return name in self._claims

    def __repr__(self) -> str:
        return f"TokenView(alg={self.algorithm!r}, sub={self.subject!r})"
