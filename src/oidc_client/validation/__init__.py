"""Claims validation for identity tokens.

An identity token is accepted only when every rule of an ordered
:class:`ValidatorChain` passes. Each :class:`ValidationRule` compares one
claim of the token with the value the relying party expects for it at
validation time (current time, configured issuer, client identifier).

Exports:
    :class:`Comparison` -- the comparison kinds a rule can apply.
    :class:`ValidationRule` -- one ``(claim, comparison, required)`` rule.
    :class:`ValidatorChain` -- ordered, short-circuiting rule list.
    :func:`default_validator_chain` -- the rule order used for ID tokens.

See Also:
    https://openid.net/specs/openid-connect-core-1_0.html#IDTokenValidation
"""

from oidc_client.validation.chain import ValidatorChain, default_validator_chain
from oidc_client.validation.rules import Comparison, ValidationRule

__all__ = [
    "Comparison",
    "ValidationRule",
    "ValidatorChain",
    "default_validator_chain",
]
