"""Tests for single-claim validation rules."""

from __future__ import annotations

from typing import Any

import pytest

from oidc_client.tokens import TokenView
from oidc_client.validation import Comparison, ValidationRule


def _token(**claims: Any) -> TokenView:
    return TokenView("header.payload.sig", {"alg": "RS256"}, claims)


# ---------------------------------------------------------------------------
# NOT_EMPTY
# ---------------------------------------------------------------------------


class TestNotEmpty:
    def test_required_present_passes(self) -> None:
        rule = ValidationRule.not_empty("sub", required=True)
        assert rule.evaluate({}, _token(sub="u1"))

    @pytest.mark.parametrize("value", [None, "", [], {}])
    def test_required_empty_fails(self, value: Any) -> None:
        rule = ValidationRule.not_empty("sub", required=True)
        assert not rule.evaluate({}, _token(sub=value))

    def test_required_absent_fails(self) -> None:
        rule = ValidationRule.not_empty("sub", required=True)
        assert not rule.evaluate({}, _token())

    def test_zero_is_not_empty(self) -> None:
        rule = ValidationRule.not_empty("iat", required=True)
        assert rule.evaluate({}, _token(iat=0))

    def test_optional_absent_passes(self) -> None:
        rule = ValidationRule.not_empty("sub")
        assert rule.evaluate({}, _token())

    def test_ignores_expected_value(self) -> None:
        rule = ValidationRule.not_empty("sub", required=True)
        assert rule.evaluate({"sub": "someone-else"}, _token(sub="u1"))


# ---------------------------------------------------------------------------
# EQUALS
# ---------------------------------------------------------------------------


class TestEquals:
    def test_match_passes(self) -> None:
        rule = ValidationRule.equals("iss", required=True)
        assert rule.evaluate({"iss": "https://a"}, _token(iss="https://a"))

    def test_mismatch_fails(self) -> None:
        rule = ValidationRule.equals("iss", required=True)
        assert not rule.evaluate({"iss": "https://a"}, _token(iss="https://b"))

    def test_absent_actual_fails_when_expected(self) -> None:
        rule = ValidationRule.equals("nonce")
        assert not rule.evaluate({"nonce": "n1"}, _token())

    def test_required_without_expected_fails(self) -> None:
        rule = ValidationRule.equals("iss", required=True)
        assert not rule.evaluate({}, _token(iss="https://a"))

    def test_optional_without_expected_is_noop(self) -> None:
        rule = ValidationRule.equals("jti")
        assert rule.evaluate({}, _token(jti="anything"))

    def test_expected_none_counts_as_absent(self) -> None:
        rule = ValidationRule.equals("azp")
        assert rule.evaluate({"azp": None}, _token(azp="other"))


# ---------------------------------------------------------------------------
# EQUALS_OR_CONTAINS
# ---------------------------------------------------------------------------


class TestEqualsOrContains:
    def test_scalar_match(self) -> None:
        rule = ValidationRule.equals_or_contains("aud", required=True)
        assert rule.evaluate({"aud": "c1"}, _token(aud="c1"))

    def test_scalar_mismatch(self) -> None:
        rule = ValidationRule.equals_or_contains("aud", required=True)
        assert not rule.evaluate({"aud": "c1"}, _token(aud="c2"))

    def test_array_contains(self) -> None:
        rule = ValidationRule.equals_or_contains("aud", required=True)
        assert rule.evaluate({"aud": "c1"}, _token(aud=["c0", "c1"]))

    def test_array_missing(self) -> None:
        rule = ValidationRule.equals_or_contains("aud", required=True)
        assert not rule.evaluate({"aud": "c1"}, _token(aud=["c0", "c2"]))

    def test_absent_actual_fails(self) -> None:
        rule = ValidationRule.equals_or_contains("aud", required=True)
        assert not rule.evaluate({"aud": "c1"}, _token())


# ---------------------------------------------------------------------------
# GREATER_OR_EQUAL / LESSER_OR_EQUAL
# ---------------------------------------------------------------------------


class TestGreaterOrEqual:
    def test_later_passes(self) -> None:
        rule = ValidationRule.greater_or_equal("exp", required=True)
        assert rule.evaluate({"exp": 100}, _token(exp=101))

    def test_equal_passes(self) -> None:
        rule = ValidationRule.greater_or_equal("exp", required=True)
        assert rule.evaluate({"exp": 100}, _token(exp=100))

    def test_earlier_fails(self) -> None:
        rule = ValidationRule.greater_or_equal("exp", required=True)
        assert not rule.evaluate({"exp": 100}, _token(exp=99))

    def test_absent_actual_fails(self) -> None:
        rule = ValidationRule.greater_or_equal("exp", required=True)
        assert not rule.evaluate({"exp": 100}, _token())

    def test_incomparable_actual_fails(self) -> None:
        rule = ValidationRule.greater_or_equal("exp", required=True)
        assert not rule.evaluate({"exp": 100}, _token(exp="tomorrow"))


class TestLesserOrEqual:
    def test_earlier_passes(self) -> None:
        rule = ValidationRule.lesser_or_equal("nbf")
        assert rule.evaluate({"nbf": 100}, _token(nbf=99))

    def test_later_fails(self) -> None:
        rule = ValidationRule.lesser_or_equal("nbf")
        assert not rule.evaluate({"nbf": 100}, _token(nbf=101))

    def test_absent_actual_passes(self) -> None:
        rule = ValidationRule.lesser_or_equal("nbf")
        assert rule.evaluate({"nbf": 100}, _token())

    def test_required_without_expected_fails(self) -> None:
        rule = ValidationRule.lesser_or_equal("nbf", required=True)
        assert not rule.evaluate({}, _token(nbf=1))


# ---------------------------------------------------------------------------
# Optional rules without an expected value never fail
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "comparison",
    [
        Comparison.EQUALS,
        Comparison.EQUALS_OR_CONTAINS,
        Comparison.GREATER_OR_EQUAL,
        Comparison.LESSER_OR_EQUAL,
    ],
)
@pytest.mark.parametrize("actual", [None, "x", 0, 10**10, ["a", "b"]])
def test_optional_rule_without_expected_passes(comparison: Comparison, actual: Any) -> None:
    rule = ValidationRule("claim", comparison, required=False)
    claims = {} if actual is None else {"claim": actual}
    assert rule.evaluate({}, _token(**claims))


def test_rules_are_hashable_and_immutable() -> None:
    rule = ValidationRule.equals("iss", required=True)
    assert rule == ValidationRule("iss", Comparison.EQUALS, True)
    assert len({rule, ValidationRule.equals("iss", required=True)}) == 1
    with pytest.raises(AttributeError):
        rule.required = False  # type: ignore[misc]
