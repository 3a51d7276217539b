"""
Comparison operators applied as `counter_value OP threshold`.
"""

import operator
from enum import Enum
from typing import Callable, Dict


class Comparison(str, Enum):
    """Comparison operator; the value is the operator symbol."""
    GREATER = ">"
    GREATER_OR_EQUAL = ">="
    EQUAL = "=="
    NOT_EQUAL = "!="
    LESS_OR_EQUAL = "<="
    LESS = "<"

    def apply(self, value: int, threshold: int) -> bool:
        """Evaluate `value OP threshold`."""
        return _OPERATORS[self](value, threshold)

    @classmethod
    def parse(cls, text: str) -> "Comparison":
        """
        Parse a symbol (">=") or member name ("greater_or_equal").

        Raises:
            ValueError: If text names no operator
        """
        if isinstance(text, cls):
            return text
        cleaned = str(text).strip()
        try:
            return cls(cleaned)
        except ValueError:
            pass
        try:
            return cls[cleaned.upper()]
        except KeyError:
            valid = ", ".join(member.value for member in cls)
            raise ValueError(f"Unknown comparison: {text!r}. Must be one of {valid}") from None


_OPERATORS: Dict[Comparison, Callable[[int, int], bool]] = {
    Comparison.GREATER: operator.gt,
    Comparison.GREATER_OR_EQUAL: operator.ge,
    Comparison.EQUAL: operator.eq,
    Comparison.NOT_EQUAL: operator.ne,
    Comparison.LESS_OR_EQUAL: operator.le,
    Comparison.LESS: operator.lt,
}
