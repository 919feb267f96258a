"""Single-claim validation rules.

A :class:`ValidationRule` is a pure, stateless ``(claim, comparison,
required)`` triple. It is evaluated against the token's actual claim value
(which may be absent) and the expected value for that claim (which may also
be absent).

When no expected value is supplied, a rule other than ``NOT_EMPTY`` fails
only if it is ``required``; an optional rule without an expectation is a
no-op. ``NOT_EMPTY`` never consults the expected value.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Mapping

from oidc_client.tokens import TokenView


class Comparison(str, enum.Enum):
    """How a rule compares the actual claim with the expected value."""

    NOT_EMPTY = "not_empty"
    EQUALS = "equals"
    EQUALS_OR_CONTAINS = "equals_or_contains"
    GREATER_OR_EQUAL = "greater_or_equal"
    LESSER_OR_EQUAL = "lesser_or_equal"


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


@dataclass(frozen=True)
class ValidationRule:
    """Validate one claim of an identity token.

    Attributes:
        claim: Claim name, e.g. ``"exp"``.
        comparison: The :class:`Comparison` applied.
        required: Whether a missing expectation (or, for ``NOT_EMPTY``, a
            missing claim) fails the rule.

    Example::

        rule = ValidationRule("exp", Comparison.GREATER_OR_EQUAL, required=True)
        rule.evaluate({"exp": time.time()}, token)
    """

    claim: str
    comparison: Comparison
    required: bool = False

    def evaluate(self, expected: Mapping[str, Any], token: TokenView) -> bool:
        """Return ``True`` when *token* satisfies this rule."""
        actual = token.claim(self.claim)

        if self.comparison is Comparison.NOT_EMPTY:
            return not (self.required and _is_empty(actual))

        wanted = expected.get(self.claim)
        if wanted is None:
            return not self.required

        if self.comparison is Comparison.EQUALS:
            return actual == wanted

        if self.comparison is Comparison.EQUALS_OR_CONTAINS:
            if isinstance(actual, (list, tuple)):
                return wanted in actual
            return actual == wanted

        if self.comparison is Comparison.GREATER_OR_EQUAL:
            if actual is None:
                return False
            try:
                return actual >= wanted
            except TypeError:
                return False

        if self.comparison is Comparison.LESSER_OR_EQUAL:
            if actual is None:
                return True
            try:
                return actual <= wanted
            except TypeError:
                return False

        raise ValueError(f"Unknown comparison: {self.comparison!r}")

    # Named constructors mirroring the rule table.

    @classmethod
    def not_empty(cls, claim: str, required: bool = False) -> ValidationRule:
        return cls(claim, Comparison.NOT_EMPTY, required)

    @classmethod
    def equals(cls, claim: str, required: bool = False) -> ValidationRule:
        return cls(claim, Comparison.EQUALS, required)

    @classmethod
    def equals_or_contains(cls, claim: str, required: bool = False) -> ValidationRule:
        return cls(claim, Comparison.EQUALS_OR_CONTAINS, required)

    @classmethod
    def greater_or_equal(cls, claim: str, required: bool = False) -> ValidationRule:
        return cls(claim, Comparison.GREATER_OR_EQUAL, required)

    @classmethod
    def lesser_or_equal(cls, claim: str, required: bool = False) -> ValidationRule:
        return cls(claim, Comparison.LESSER_OR_EQUAL, required)
