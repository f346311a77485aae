import pytest

from kinderscript.environment import Scope
from kinderscript.resolver import Condition, evaluate_condition, is_truthy, parse_condition, resolve_value


@pytest.fixture
def scope():
    root = Scope()
    root.set('five', 5)
    root.set('name', 'Ada')
    root.set('flag', 'False')
    return root


def test_resolve_prefers_bound_variable(scope):
    assert resolve_value('$five', scope) == 5
    assert resolve_value('five', scope) == 5
    scope.set('7', 'seven')
    assert resolve_value('7', scope) == 'seven'


def test_resolve_literals(scope):
    assert resolve_value('42', scope) == 42
    assert resolve_value('-3', scope) == -3
    assert resolve_value('"quoted"', scope) == 'quoted'
    assert resolve_value('$missing', scope) == 'missing'
    assert resolve_value('"', scope) == '"'
    assert resolve_value('4.5', scope) == '4.5'


def test_parse_condition_splits_on_first_operator():
    assert parse_condition('$x >= 3') == Condition('$x', '>=', '3')
    assert parse_condition('$a != $b') == Condition('$a', '!=', '$b')
    assert parse_condition('1 < 2 == 3') == Condition('1', '<', '2 == 3')
    assert parse_condition('  $ready ') == Condition('$ready')


def test_earliest_operator_wins_over_later_ones():
    # the right side keeps the later operator as plain text
    assert parse_condition('0 < 5 == 0 < 5') == Condition('0', '<', '5 == 0 < 5')
    assert not evaluate_condition('0 < 5 == 0 < 5', Scope())
    assert evaluate_condition('1 == 1 < 0', Scope()) is False


def test_parse_condition_single_equals_is_not_an_operator():
    assert parse_condition('a = b') == Condition('a = b')
    assert parse_condition('wow!') == Condition('wow!')


def test_parse_condition_empty_sides():
    assert parse_condition('== 3') == Condition('', '==', '3')
    assert parse_condition('3 <') == Condition('3', '<', '')
    assert parse_condition('') == Condition('')


def test_numeric_comparisons(scope):
    assert evaluate_condition('$five > 3', scope)
    assert not evaluate_condition('$five < 3', scope)
    assert evaluate_condition('$five <= 5', scope)
    assert evaluate_condition('$five >= 5', scope)
    assert not evaluate_condition('$five >= 6', scope)


def test_text_is_zero_in_ordering_comparisons(scope):
    assert evaluate_condition('$name < 1', scope)
    assert not evaluate_condition('$name > 0', scope)


def test_equality_is_structural(scope):
    assert evaluate_condition('$five == 5', scope)
    assert evaluate_condition('$name == "Ada"', scope)
    assert evaluate_condition('$name == Ada', scope)
    assert not evaluate_condition('$five == "five"', scope)
    assert evaluate_condition('$five != Ada', scope)


def test_truthiness_without_operator(scope):
    assert evaluate_condition('$five', scope)
    assert evaluate_condition('$name', scope)
    assert not evaluate_condition('0', scope)
    assert not evaluate_condition('$flag', scope)
    assert not evaluate_condition('FALSE', scope)
    assert not evaluate_condition('""', scope)


def test_is_truthy_rules():
    assert is_truthy(-1)
    assert not is_truthy(0)
    assert is_truthy('yes')
    assert not is_truthy('')
    assert not is_truthy('false')
    assert is_truthy(3.5)
