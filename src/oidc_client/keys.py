"""Signing keys trusted for identity-token verification.

This module defines :class:`SigningKeySet`, the ordered collection of
verification keys held by a
:class:`~oidc_client.models.ProviderConfiguration`, and
:func:`jwk_to_pem`, the JWK to PEM conversion used by discovery.

Key handles are opaque to the rest of the package: PEM strings, raw HMAC
secrets, or JWK dicts -- anything ``jose.jws.verify`` accepts as a key.
Order matters only as verification-attempt order.
"""

from __future__ import annotations

from typing import Any, Iterator, Mapping

from jose import jwk
from jose.exceptions import JOSEError

from oidc_client.exceptions import ConversionError, InvalidConfigurationError


class SigningKeySet:
    """Ordered, non-empty, immutable sequence of verification keys.

    Args:
        keys: A single key handle or an iterable of key handles. Strings
            and dicts count as single keys.

    Raises:
        InvalidConfigurationError: If no key is supplied.

    Example::

        keys = SigningKeySet([old_pem, new_pem])
        for key in keys:
            ...
    """

    def __init__(self, keys: Any) -> None:
        if isinstance(keys, SigningKeySet):
            items: tuple[Any, ...] = keys._keys
        elif isinstance(keys, (str, bytes, Mapping)):
            items = (keys,)
        elif keys is None:
            items = ()
        else:
            items = tuple(keys)

        items = tuple(k for k in items if k)
        if not items:
            raise InvalidConfigurationError(
                "At least one signing key is required"
            )
        self._keys = items

    def __iter__(self) -> Iterator[Any]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __getitem__(self, index: int) -> Any:
        return self._keys[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SigningKeySet):
            return NotImplemented
        return self._keys == other._keys

    def __hash__(self) -> int:
        return hash(tuple(repr(k) for k in self._keys))

    def __repr__(self) -> str:
        # Key material stays out of reprs and logs.
        return f"SigningKeySet(<{len(self._keys)} key(s)>)"

    def describe(self) -> list[str]:
        """Return a short, non-secret description of each key, in order."""
        described: list[str] = []
        for key in self._keys:
            if isinstance(key, Mapping):
                described.append(
                    f"jwk kty={key.get('kty', '?')} kid={key.get('kid', '-')}"
                )
            elif isinstance(key, (str, bytes)) and "PUBLIC KEY" in str(key):
                described.append("pem public key")
            else:
                described.append("shared secret")
        return described


def jwk_to_pem(key_data: Mapping[str, Any]) -> str:
    """Convert a public JSON Web Key into a PEM-encoded verification key.

    Args:
        key_data: A JWK object from a key-set document. Its ``alg`` member
            selects the key type.

    Returns:
        The PEM text (``-----BEGIN PUBLIC KEY-----`` ...).

    Raises:
        ConversionError: If python-jose cannot construct the key or the key
            type has no PEM form (e.g. symmetric ``oct`` keys).
    """
    kid = key_data.get("kid", "-")
    try:
        key = jwk.construct(dict(key_data), algorithm=key_data.get("alg"))
        pem = key.to_pem()
    except (JOSEError, NotImplementedError, ValueError, TypeError) as exc:
        raise ConversionError(
            f"Cannot convert JWK (kid={kid}) to a verification key: {exc}"
        ) from exc

    if isinstance(pem, bytes):
        return pem.decode("ascii")
    return pem

