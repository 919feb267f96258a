"""Identity-token signature verification.

:class:`TokenVerifier` tries each key of a
:class:`~oidc_client.keys.SigningKeySet` in order and accepts the token on
the first key whose signature check succeeds. The check itself is a
pluggable ``(raw_token, algorithm, key) -> bool`` callable; the default
wraps :func:`jose.jws.verify`.

The ``alg`` value SHOULD be the default of RS256 or the algorithm the
client registered as ``id_token_signed_response_alg``; only the configured
algorithm is ever accepted, so a token re-signed with ``none`` or an HMAC
algorithm over a public key cannot pass.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Union

from jose import jws
from jose.exceptions import JOSEError

from oidc_client.exceptions import InvalidTokenError
from oidc_client.keys import SigningKeySet
from oidc_client.tokens import TokenView

logger = logging.getLogger(__name__)

SignatureCheck = Callable[[str, str, Any], bool]
"""Signature primitive: ``(raw_token, algorithm, key) -> bool``."""


def jose_signature_check(raw: str, algorithm: str, key: Any) -> bool:
    """Verify the JWS signature of *raw* with *key* using python-jose.

    Returns ``False`` rather than raising for bad signatures, algorithm
    mismatches, and keys python-jose cannot use.
    """
    try:
        jws.verify(raw, key, algorithms=[algorithm])
    except JOSEError:
        return False
    return True


class TokenVerifier:
    """Verify an identity token's signature against an ordered key set.

    Args:
        signature_check: Signature primitive. Defaults to
            :func:`jose_signature_check`.
    """

    def __init__(self, signature_check: Optional[SignatureCheck] = None) -> None:
        self._check = signature_check or jose_signature_check

    def verify(
        self,
        token: Union[str, TokenView, None],
        key_set: SigningKeySet,
        signing_algorithm: str,
    ) -> TokenView:
        """Verify *token* and return its decoded view.

        Args:
            token: Raw compact token or an already decoded
                :class:`~oidc_client.tokens.TokenView`. ``None`` means the
                token endpoint returned no identity token.
            key_set: Keys to try, in order.
            signing_algorithm: The only algorithm accepted (e.g. ``"RS256"``).

        Returns:
            The decoded :class:`~oidc_client.tokens.TokenView`.

        Raises:
            InvalidTokenError: ``"missing id_token"`` when *token* is
                ``None``; ``"signature verification failed"`` when no key
                verifies; or a malformed-token error from decoding.
        """
        if token is None:
            raise InvalidTokenError("missing id_token")

        view = token if isinstance(token, TokenView) else TokenView.decode(token)

        for index, key in enumerate(key_set):
            if self._check(view.raw, signing_algorithm, key):
                logger.debug(
                    "id_token signature verified with key %d of %d",
                    index + 1,
                    len(key_set),
                )
                return view

        logger.warning(
            "id_token signature did not verify against any of %d key(s) (alg=%s)",
            len(key_set),
            signing_algorithm,
        )
        raise InvalidTokenError("signature verification failed")
