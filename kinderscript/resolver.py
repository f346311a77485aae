"""Value and condition resolution for KinderScript.

Conditions in `if` statements are free text such as `$age >= 18` or
`$name`. They are split by a small Lark grammar into a left operand, an
optional comparison operator and a right operand. The operator is the first
one that occurs in the text; the two-character operators are matched before
their one-character prefixes so `<=` is never read as `<`. Everything after
the operator belongs to the right operand.

Operands are plain text resolved against the current scope by
`resolve_value`: a bound variable name (with or without `$`), else a whole
number, else a quoted string, else the raw text.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from lark import Lark, Transformer, v_args
from lark.exceptions import LarkError

from .environment import Scope
from .errors import KinderError
from .types import ErrorVal, Value, parse_int, strip_quotes


CONDITION_GRAMMAR = r"""
    ?start: comparison
          | operand

    comparison: [LEFT] COMPARATOR [RIGHT]
    operand: [LEFT]

    COMPARATOR: /==|!=|<=|>=|<|>/
    // any text up to the first comparison operator
    LEFT: /(?:[^=!<>]|[=!](?!=))+/
    RIGHT: /.+/s
"""


CONDITION_PARSER = Lark(
    CONDITION_GRAMMAR,
    parser='lalr',
    lexer='contextual',
    maybe_placeholders=True,
)


@dataclass(frozen=True)
class Condition:
    """A parsed condition: `left` alone, or `left operator right`."""
    left: str
    operator: Optional[str] = None
    right: str = ''


def _text(token) -> str:
    return str(token).strip() if token is not None else ''


@v_args(inline=True)
class ConditionTransformer(Transformer):
    """Transforms the condition parse tree into a `Condition`."""

    def comparison(self, left, operator, right):
        return Condition(_text(left), str(operator), _text(right))

    def operand(self, text):
        return Condition(_text(text))


@lru_cache(maxsize=None)
def parse_condition(text: str) -> Condition:
    try:
        tree = CONDITION_PARSER.parse(text.strip())
    except LarkError as e:
        raise KinderError(ErrorVal('SyntaxError', f"invalid condition {text!r}: {e}"))
    return ConditionTransformer().transform(tree)


def resolve_value(text: str, scope: Scope) -> Value:
    """Resolve operand text to a value.

    A leading `$` is optional. A bound variable wins over a literal reading
    of the same text.
    """
    name = text.removeprefix('$')
    bound = scope.get(name)
    if bound is not None:
        return bound
    number = parse_int(name)
    if number is not None:
        return number
    return strip_quotes(name)


def as_number(value: Value) -> float:
    # ordering comparisons treat text as 0
    if isinstance(value, int):
        return float(value)
    return 0.0


def is_truthy(value) -> bool:
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        return len(value) > 0 and value.lower() != 'false'
    return True


def compare(operator: str, left: Value, right: Value) -> bool:
    if operator == '==':
        return type(left) is type(right) and left == right
    if operator == '!=':
        return not (type(left) is type(right) and left == right)
    a, b = as_number(left), as_number(right)
    if operator == '<':
        return a < b
    if operator == '>':
        return a > b
    if operator == '<=':
        return a <= b
    if operator == '>=':
        return a >= b
    raise KinderError(ErrorVal('UnknownOperationError', f'unknown comparison operator {operator}'))


def evaluate_condition(text: str, scope: Scope) -> bool:
    condition = parse_condition(text)
    if condition.operator is None:
        return is_truthy(resolve_value(condition.left, scope))
    left = resolve_value(condition.left, scope)
    right = resolve_value(condition.right, scope)
    return compare(condition.operator, left, right)
