"""
Comparison operator table.
"""

import pytest

from cadence_state import Comparison


class TestComparison:

    @pytest.mark.parametrize("comparison,expected", [
        (Comparison.GREATER, False),
        (Comparison.GREATER_OR_EQUAL, True),
        (Comparison.EQUAL, True),
        (Comparison.NOT_EQUAL, False),
        (Comparison.LESS_OR_EQUAL, True),
        (Comparison.LESS, False),
    ])
    def test_value_equal_to_threshold(self, comparison, expected):
        assert comparison.apply(5, 5) is expected

    def test_value_is_left_operand(self):
        assert Comparison.GREATER.apply(6, 5) is True
        assert Comparison.LESS.apply(6, 5) is False

    @pytest.mark.parametrize("text,expected", [
        (">=", Comparison.GREATER_OR_EQUAL),
        (" != ", Comparison.NOT_EQUAL),
        ("less", Comparison.LESS),
        ("GREATER_OR_EQUAL", Comparison.GREATER_OR_EQUAL),
        (Comparison.EQUAL, Comparison.EQUAL),
    ])
    def test_parse(self, text, expected):
        assert Comparison.parse(text) is expected

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown comparison"):
            Comparison.parse("=>")
