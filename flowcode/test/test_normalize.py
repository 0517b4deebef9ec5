import pytest

from flowcode.compiler.normalize import normalize_condition, normalize_expr, split_csv, uses_math


class TestNormalizeExpr:

    def test_trims_whitespace(self):
        assert normalize_expr("   x + 1  ") == "x + 1"

    def test_sqrt_is_qualified(self):
        assert normalize_expr("sqrt(9)") == "math.sqrt(9)"
        assert normalize_expr("a + sqrt (b)") == "a + math.sqrt(b)"

    def test_already_qualified_sqrt_is_left_alone(self):
        assert normalize_expr("math.sqrt(9)") == "math.sqrt(9)"
        assert normalize_expr("np.sqrt(x)") == "np.sqrt(x)"

    def test_longer_names_are_not_rewritten(self):
        assert normalize_expr("isqrt(16)") == "isqrt(16)"

    def test_caret_becomes_power(self):
        assert normalize_expr("x^2 + y^2") == "x**2 + y**2"
        assert normalize_expr("x ** 2") == "x ** 2"

    def test_none_and_blank(self):
        assert normalize_expr(None) == ""
        assert normalize_expr("   ") == ""


class TestNormalizeCondition:

    @pytest.mark.parametrize("raw, expected", [
        ("x ≤ 3", "x <= 3"),
        ("x ≥ 10", "x >= 10"),
        ("a ≠ b", "a != b"),
    ])
    def test_unicode_comparisons(self, raw, expected):
        assert normalize_condition(raw) == expected

    def test_unicode_and_ascii_forms_agree(self):
        assert normalize_condition("x ≥ 10") == normalize_condition("x >= 10") == "x >= 10"

    def test_lone_equals_becomes_equality(self):
        assert normalize_condition("x = 3") == "x == 3"
        assert normalize_condition("n % 2 = 0") == "n % 2 == 0"

    @pytest.mark.parametrize("cond", ["x == 3", "x != 3", "x <= 3", "x >= 3"])
    def test_existing_comparisons_untouched(self, cond):
        assert normalize_condition(cond) == cond

    def test_expression_rules_still_apply(self):
        assert normalize_condition(" sqrt(x) = 2^2 ") == "math.sqrt(x) == 2**2"


class TestHelpers:

    def test_split_csv(self):
        assert split_csv(" a, b ,, c ") == ["a", "b", "c"]
        assert split_csv("") == []
        assert split_csv(None) == []

    def test_uses_math(self):
        assert uses_math("sqrt(2)")
        assert uses_math("math.pi * r")
        assert not uses_math("isqrt(2)")
        assert not uses_math("mathematics = 1")
        assert not uses_math("")
