"""Ordered, short-circuiting chain of claim validation rules.

The production order checks issuance and expiry before issuer, and issuer
before audience and subject. Order is part of the contract: the first
failing rule ends evaluation and later rules are never run.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional

from oidc_client.tokens import TokenView
from oidc_client.validation.rules import ValidationRule

logger = logging.getLogger(__name__)


class ValidatorChain:
    """Ordered list of :class:`~oidc_client.validation.rules.ValidationRule`.

    The rule list is exposed for inspection and can be amended in place
    (e.g. to make ``nonce`` required) before the chain is shared between
    threads. Evaluation itself never mutates the chain.

    Args:
        rules: Initial rules, evaluated in the given order.
    """

    def __init__(self, rules: Iterable[ValidationRule] = ()) -> None:
        self._rules: list[ValidationRule] = list(rules)

    @property
    def rules(self) -> tuple[ValidationRule, ...]:
        return tuple(self._rules)

    def set_rules(self, rules: Iterable[ValidationRule]) -> None:
        """Replace the whole rule list."""
        self._rules = list(rules)

    def add(self, rule: ValidationRule) -> None:
        """Append *rule* at the end of the chain."""
        self._rules.append(rule)

    def replace(self, rule: ValidationRule) -> None:
        """Replace the rule for ``rule.claim`` in place, keeping its position.

        Raises:
            KeyError: If no rule exists for that claim.
        """
        for index, existing in enumerate(self._rules):
            if existing.claim == rule.claim:
                self._rules[index] = rule
                return
        raise KeyError(rule.claim)

    def remove(self, claim: str) -> None:
        """Drop every rule for *claim*."""
        self._rules = [r for r in self._rules if r.claim != claim]

    def first_failure(
        self, expected: Mapping[str, Any], token: TokenView
    ) -> Optional[ValidationRule]:
        """Return the first rule that *token* fails, or ``None`` if all pass."""
        for rule in self._rules:
            if not rule.evaluate(expected, token):
                logger.debug("Claim rule failed: %s (%s)", rule.claim, rule.comparison.value)
                return rule
        return None

    def validate(self, expected: Mapping[str, Any], token: TokenView) -> bool:
        """Return ``True`` when every rule passes, stopping at the first failure."""
        return self.first_failure(expected, token) is None

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        names = ", ".join(r.claim for r in self._rules)
        return f"ValidatorChain([{names}])"


def default_validator_chain() -> ValidatorChain:
    """Build the rule chain applied to ID tokens.

    ``jti``, ``azp`` and ``nonce`` are optional: they constrain the token
    only when an expected value is supplied for them.
    """
    return ValidatorChain(
        [
            ValidationRule.not_empty("iat", required=True),
            ValidationRule.greater_or_equal("exp", required=True),
            ValidationRule.equals("iss", required=True),
            ValidationRule.equals_or_contains("aud", required=True),
            ValidationRule.not_empty("sub", required=True),
            ValidationRule.lesser_or_equal("nbf"),
            ValidationRule.equals("jti"),
            ValidationRule.equals("azp"),
            ValidationRule.equals("nonce"),
        ]
    )
