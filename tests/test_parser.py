import pytest

from kinderscript.ast import (
    Block, FunctionCall, FunctionDef, If, MathOp, MathOperator, Print, Repeat, SetVar,
)
from kinderscript.errors import KinderError
from kinderscript.parser import Cursor, parse_program


def parse_error(source):
    with pytest.raises(KinderError) as excinfo:
        parse_program(source)
    return excinfo.value.err


def test_say_keeps_raw_message():
    program = parse_program('say Hello, $name!\nsay  second line  ')
    assert program.body == [Print('Hello, $name!'), Print('second line')]


def test_statement_offsets():
    source = 'say a\n  say b'
    program = parse_program(source)
    assert [s.offset for s in program.body] == [0, source.index('say b')]


def test_keywords_are_case_insensitive():
    program = parse_program('SAY hi\nAdd(1, 2)')
    assert program.body == [Print('hi'), MathOp(MathOperator.ADD, [1, 2])]


def test_math_operations():
    program = parse_program('power(2, 3, 2)\nsubtract( -4 , +2 )')
    assert program.body == [
        MathOp(MathOperator.POWER, [2, 3, 2]),
        MathOp(MathOperator.SUBTRACT, [-4, 2]),
    ]


def test_math_requires_numbers():
    err = parse_error('add()')
    assert err.name == 'SyntaxError'
    assert 'at least one number' in err.message


def test_math_rejects_non_integer_token():
    source = 'multiply(2, x, 3)'
    err = parse_error(source)
    assert err.name == 'SyntaxError'
    assert err.offset == source.index('x')
    assert "'x'" in err.message


def test_math_keyword_without_parenthesis_is_unknown():
    err = parse_error('add 1 2')
    assert err.name == 'UnknownCommandError'
    assert "'add'" in err.message


def test_unknown_command_names_keyword():
    source = 'say ok\nshout hello'
    err = parse_error(source)
    assert err.name == 'UnknownCommandError'
    assert "'shout'" in err.message
    assert err.offset == source.index('shout')
    assert '^' in err.context


def test_function_definition_with_parentheses():
    program = parse_program('function greet(name, $greeting) {\n  say $greeting $name\n}')
    fn = program.body[0]
    assert fn == FunctionDef('greet', ['name', 'greeting'], Block([Print('$greeting $name')]))
    assert program.functions == {'greet': fn}


def test_function_definition_whitespace_parameters():
    program = parse_program('function add_two $a b {\n say $a $b\n}')
    assert program.body[0].parameters == ['a', 'b']
    assert program.body[0].name == 'add_two'


def test_function_without_body_fails():
    err = parse_error('function f(a)\nsay hi')
    assert err.name == 'SyntaxError'


def test_nested_functions_are_collected():
    program = parse_program('repeat 1 {\n function inner() { say in }\n}\nfunction outer() { say out }')
    assert set(program.functions) == {'inner', 'outer'}


def test_redefinition_keeps_last():
    program = parse_program('function f() { say one }\nfunction f() { say two }')
    assert program.functions['f'].body == Block([Print('two')])


def test_call_forms():
    program = parse_program('call f(1, $x, "hi there")\ncall g 1 $y')
    assert program.body == [
        FunctionCall('f', ['1', '$x', '"hi there"']),
        FunctionCall('g', ['1', '$y']),
    ]


def test_call_without_arguments():
    program = parse_program('call f()\ncall g')
    assert program.body == [FunctionCall('f', []), FunctionCall('g', [])]


def test_call_with_empty_argument_fails():
    err = parse_error('call f(1, )')
    assert err.name == 'SyntaxError'


def test_call_unclosed_parenthesis():
    err = parse_error('call f(1, 2')
    assert err.name == 'SyntaxError'
    assert err.offset == len('call f')


def test_trailing_content_starts_next_statement():
    program = parse_program('call f(1) add(1, 2) say done')
    assert program.body == [
        FunctionCall('f', ['1']),
        MathOp(MathOperator.ADD, [1, 2]),
        Print('done'),
    ]


def test_repeat():
    program = parse_program('repeat 3 {\n say hi\n}')
    assert program.body == [Repeat(3, Block([Print('hi')]))]


def test_repeat_count_must_be_integer():
    source = 'repeat many { say hi }'
    err = parse_error(source)
    assert err.name == 'SyntaxError'
    assert err.offset == source.index('many')


def test_repeat_requires_brace():
    err = parse_error('repeat 2 say hi')
    assert err.name == 'SyntaxError'


def test_one_line_block_stops_at_closing_brace():
    program = parse_program('repeat 2 { say hi } say done')
    assert program.body == [Repeat(2, Block([Print('hi')])), Print('done')]


def test_braces_inside_say_are_balanced_first():
    program = parse_program('repeat 1 { say {curly} }')
    assert program.body == [Repeat(1, Block([Print('{curly}')]))]


def test_if_else():
    program = parse_program('if $x > 3 { say Big } else { say Small }')
    assert program.body == [If('$x > 3', Block([Print('Big')]), Block([Print('Small')]))]


def test_if_without_else():
    program = parse_program('if $ok {\n say yes\n}\nsay after')
    assert program.body == [If('$ok', Block([Print('yes')])), Print('after')]


def test_else_on_following_line():
    program = parse_program('if 1 {\n say a\n}\n\nelse {\n say b\n}')
    assert program.body[0].else_branch == Block([Print('b')])


def test_else_if_chain():
    program = parse_program('if $x == 1 { say one } else if $x == 2 { say two } else { say many }')
    outer = program.body[0]
    assert outer.condition == '$x == 1'
    assert outer.else_branch == If('$x == 2', Block([Print('two')]), Block([Print('many')]))


def test_if_requires_condition():
    err = parse_error('if { say hi }')
    assert err.name == 'SyntaxError'
    assert 'condition' in err.message


def test_set_values():
    program = parse_program('set $a = 5\nset b = "two words"\nset c = $a\nset d = plain text')
    assert program.body == [
        SetVar('a', 5),
        SetVar('b', 'two words'),
        SetVar('c', '$a'),
        SetVar('d', 'plain text'),
    ]


def test_set_requires_equals_on_its_line():
    err = parse_error('set x\nset y = 1')
    assert err.name == 'SyntaxError'
    assert err.offset == 0


def test_set_requires_name():
    err = parse_error('set = 3')
    assert err.name == 'SyntaxError'


def test_bare_block_is_a_statement():
    program = parse_program('{\n set x = 1\n}')
    assert program.body == [Block([SetVar('x', 1)])]


def test_nested_blocks():
    program = parse_program('repeat 2 {\n if $x {\n repeat 3 { say deep }\n }\n}')
    inner = program.body[0].body.statements[0].then_branch.statements[0]
    assert inner == Repeat(3, Block([Print('deep')]))


def test_unclosed_block_is_an_error():
    source = 'repeat 2 {\n say hi\n'
    err = parse_error(source)
    assert err.name == 'SyntaxError'
    assert err.offset == source.index('{')


def test_stray_closing_brace_is_an_error():
    err = parse_error('say hi\n}')
    assert err.name == 'SyntaxError'
    assert err.offset == 7


def test_cursor_peek_word_does_not_consume():
    cursor = Cursor('   else { }')
    assert cursor.peek_word() == 'else'
    assert cursor.pos == 0


def test_cursor_rest_of_line():
    cursor = Cursor('hello { a } world } tail\nnext')
    assert cursor.read_rest_of_line(stop_at_close=True) == 'hello { a } world'
    cursor = Cursor('hello } tail\nnext')
    assert cursor.read_rest_of_line(stop_at_close=False) == 'hello } tail'
    assert cursor.peek() == '\n'
