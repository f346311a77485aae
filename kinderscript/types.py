"""Value model and numeric helpers for KinderScript.

KinderScript has exactly two runtime value kinds: whole numbers and text.
They are represented directly by Python's `int` and `str`; every function
that inspects a value branches over those two cases. This module also holds
the `ErrorVal` record carried by interpreter errors and the integer helpers
shared by the parser and the evaluator.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union
import re


Value = Union[int, str]

_INT_RE = re.compile(r'[+-]?[0-9]+')


@dataclass
class ErrorVal:
    """Describes a KinderScript failure.

    `name` is the error kind (for example 'SyntaxError' or
    'DivisionByZeroError'). `offset` is the character offset in the source
    where the problem was detected, and `context` an optional pre-rendered
    snippet of the surrounding source text.
    """
    name: str
    message: str
    offset: Optional[int] = None
    context: Optional[str] = None

    def __repr__(self) -> str:
        return f"Error(name={self.name!r}, message={self.message!r}, offset={self.offset!r})"


def parse_int(text: str) -> Optional[int]:
    """Parse a whole number literal, returning None if `text` is not one.

    Only an optional sign followed by ASCII digits is accepted; surrounding
    whitespace, underscores and non-ASCII digits are rejected.
    """
    if _INT_RE.fullmatch(text):
        return int(text)
    return None


def literal_value(text: str) -> Value:
    """Interpret literal text: integer first, then a quoted string, else raw text."""
    number = parse_int(text)
    if number is not None:
        return number
    return strip_quotes(text)


def strip_quotes(text: str) -> str:
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        return text[1:-1]
    return text


def to_string(value: Value) -> str:
    return str(value)


def type_name(value: Value) -> str:
    """Return the KinderScript type name of a runtime value."""
    if isinstance(value, int):
        return 'Integer'
    if isinstance(value, str):
        return 'Text'
    return type(value).__name__


def truncate_divide(a: int, b: int) -> int:
    """Integer division rounding toward zero (Python's // floors)."""
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b >= 0) else -quotient


def truncate_remainder(a: int, b: int) -> int:
    """Remainder matching `truncate_divide`; takes the sign of the dividend."""
    return a - b * truncate_divide(a, b)
