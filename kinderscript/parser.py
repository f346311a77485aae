"""Parser for the KinderScript language.

KinderScript has no separate tokenizer: the parser walks the raw source with
a `Cursor`, reading a command keyword at the start of each statement and then
scanning just as much text as that command needs. Brace-delimited bodies are
parsed by recursing into the same statement dispatch, so loops, functions and
conditionals nest freely.

Statements are terminated by their own grammar: line-oriented commands
(`say`, `set`, `call name args`) stop at the end of the line, or inside a
block at the brace that closes it; parenthesized forms stop after the `)`.
Anything left over starts the next statement.

The `parse_program` function is the public entry point and returns a
`Program` AST node with the list of top-level statements and the table of
declared functions.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

from .ast import (
    Program, Print, MathOp, MathOperator, Block, Repeat, FunctionDef,
    FunctionCall, If, SetVar, Node, collect_functions,
)
from .errors import KinderError, context_snippet
from .types import ErrorVal, parse_int, literal_value


MATH_KEYWORDS = {op.value: op for op in MathOperator}

VALID_COMMANDS = ('say, function, call, repeat, if, set, '
                  'add(), subtract(), multiply(), divide(), modulo(), power()')


class Cursor:
    """Position bookkeeping over the source text.

    All offset arithmetic and bounds checks used by the parser live here so
    that error reporting can always point at a valid location.
    """
    def __init__(self, source: str):
        self.source = source
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self.source)

    def peek(self) -> str:
        if self.at_end():
            return ''
        return self.source[self.pos]

    def advance(self, n: int = 1):
        self.pos = min(self.pos + n, len(self.source))

    def skip_whitespace(self):
        while not self.at_end() and self.source[self.pos].isspace():
            self.pos += 1

    def skip_inline_whitespace(self):
        while not self.at_end() and self.source[self.pos] in ' \t\r\f\v':
            self.pos += 1

    def read_word(self) -> str:
        """Consume the longest run of characters that can form a command or name."""
        start = self.pos
        while not self.at_end():
            c = self.source[self.pos]
            if c.isspace() or c in '({}':
                break
            self.pos += 1
        return self.source[start:self.pos]

    def peek_word(self) -> str:
        """Return the head of the next statement without consuming anything."""
        saved = self.pos
        self.skip_whitespace()
        word = self.read_word()
        self.pos = saved
        return word

    def rest_of_line_end(self, stop_at_close: bool) -> int:
        """Find where a line-oriented statement starting here ends.

        The end is the next newline or end of input. With `stop_at_close`,
        a `}` that is not matched by a `{` opened earlier on the same line
        also ends the statement.
        """
        depth = 0
        i = self.pos
        length = len(self.source)
        while i < length:
            c = self.source[i]
            if c == '\n':
                break
            if stop_at_close:
                if c == '{':
                    depth += 1
                elif c == '}':
                    if depth == 0:
                        break
                    depth -= 1
            i += 1
        return i

    def read_rest_of_line(self, stop_at_close: bool) -> str:
        end = self.rest_of_line_end(stop_at_close)
        text = self.source[self.pos:end]
        self.pos = end
        return text.strip()

    def find(self, ch: str, start: Optional[int] = None, end: Optional[int] = None) -> int:
        if start is None:
            start = self.pos
        if end is None:
            end = len(self.source)
        return self.source.find(ch, start, end)

    def error(self, message: str, offset: Optional[int] = None,
              name: str = 'SyntaxError') -> KinderError:
        if offset is None:
            offset = self.pos
        offset = min(offset, len(self.source))
        return KinderError(ErrorVal(name, message, offset, context_snippet(self.source, offset)))


class Parser:
    def __init__(self, source: str):
        self.cursor = Cursor(source)
        self.depth = 0  # number of enclosing blocks

    def parse_program(self) -> Program:
        c = self.cursor
        body: List[Node] = []
        while True:
            c.skip_whitespace()
            if c.at_end():
                break
            body.append(self.parse_statement())
        return Program(body=body, functions=collect_functions(body))

    def parse_statement(self) -> Node:
        c = self.cursor
        c.skip_whitespace()
        start = c.pos
        if c.peek() == '{':
            return self.parse_block()
        if c.peek() == '}':
            raise c.error("unexpected '}' without a matching '{'")
        command = c.read_word()
        if not command:
            raise c.error(f"expected a command but found {c.peek()!r}")
        keyword = command.lower()
        handler = self.COMMANDS.get(keyword)
        if handler is not None:
            return handler(self, start)
        if keyword in MATH_KEYWORDS and c.peek() == '(':
            return self.parse_math(MATH_KEYWORDS[keyword], start)
        raise c.error(f"unknown command '{command}'. Valid commands are: {VALID_COMMANDS}",
                      start, name='UnknownCommandError')

    def parse_block(self) -> Block:
        c = self.cursor
        open_pos = c.pos
        c.advance()  # '{'
        self.depth += 1
        statements: List[Node] = []
        while True:
            c.skip_whitespace()
            if c.at_end():
                raise c.error("unclosed '{': missing '}'", open_pos)
            if c.peek() == '}':
                c.advance()
                break
            statements.append(self.parse_statement())
        self.depth -= 1
        return Block(statements, offset=open_pos)

    def expect_block(self, what: str) -> Block:
        c = self.cursor
        c.skip_whitespace()
        if c.peek() != '{':
            raise c.error(f"missing opening brace for {what}")
        return self.parse_block()

    def parse_paren_list(self, what: str) -> List[str]:
        """Parse `( item, item, ... )` starting at the opening parenthesis."""
        c = self.cursor
        open_pos = c.pos
        close_pos = c.find(')', open_pos)
        if close_pos == -1:
            raise c.error(f"unclosed parentheses in {what}", open_pos)
        inner = c.source[open_pos + 1:close_pos]
        c.pos = close_pos + 1
        if not inner.strip():
            return []
        items = [item.strip() for item in inner.split(',')]
        if any(not item for item in items):
            raise c.error(f"empty entry in {what}", open_pos)
        return items

    def parse_say(self, start: int) -> Print:
        c = self.cursor
        c.skip_inline_whitespace()
        message = c.read_rest_of_line(self.depth > 0)
        return Print(message, offset=start)

    def parse_function(self, start: int) -> FunctionDef:
        c = self.cursor
        c.skip_inline_whitespace()
        name = c.read_word()
        if not name:
            raise c.error("function definition requires a name")
        c.skip_inline_whitespace()
        if c.peek() == '(':
            params = self.parse_paren_list(f"definition of function '{name}'")
        else:
            brace = c.find('{')
            if brace == -1:
                raise c.error(f"missing body for function '{name}'")
            params = c.source[c.pos:brace].split()
            c.pos = brace
        params = [p.removeprefix('$') for p in params]
        if any(not p for p in params):
            raise c.error(f"empty parameter name in function '{name}'", start)
        body = self.expect_block(f"body of function '{name}'")
        return FunctionDef(name, params, body, offset=start)

    def parse_call(self, start: int) -> FunctionCall:
        c = self.cursor
        c.skip_inline_whitespace()
        name = c.read_word()
        if not name:
            raise c.error("call requires a function name")
        c.skip_inline_whitespace()
        if c.peek() == '(':
            args = self.parse_paren_list(f"call to '{name}'")
        else:
            args = c.read_rest_of_line(self.depth > 0).split()
        return FunctionCall(name, args, offset=start)

    def parse_repeat(self, start: int) -> Repeat:
        c = self.cursor
        c.skip_inline_whitespace()
        count_pos = c.pos
        count_text = c.read_word()
        count = parse_int(count_text)
        if count is None:
            raise c.error(f"repeat count must be a whole number, got '{count_text}'", count_pos)
        body = self.expect_block('repeat')
        return Repeat(count, body, offset=start)

    def parse_if(self, start: int) -> If:
        c = self.cursor
        c.skip_inline_whitespace()
        brace = c.find('{')
        if brace == -1:
            raise c.error("missing opening brace for if statement")
        condition = c.source[c.pos:brace].strip()
        if not condition:
            raise c.error("if statement requires a condition")
        c.pos = brace
        then_branch = self.parse_block()
        else_branch: Optional[Node] = None
        if c.peek_word().lower() == 'else':
            c.skip_whitespace()
            c.read_word()
            if c.peek_word().lower() == 'if':
                c.skip_whitespace()
                else_start = c.pos
                c.read_word()
                else_branch = self.parse_if(else_start)
            else:
                else_branch = self.expect_block('else')
        return If(condition, then_branch, else_branch, offset=start)

    def parse_set(self, start: int) -> SetVar:
        c = self.cursor
        c.skip_inline_whitespace()
        end = c.rest_of_line_end(self.depth > 0)
        eq = c.find('=', c.pos, end)
        if eq == -1:
            raise c.error("set requires '=' to assign a value", start)
        name = c.source[c.pos:eq].strip().removeprefix('$')
        if not name:
            raise c.error("set requires a variable name", start)
        c.pos = eq + 1
        value_text = c.read_rest_of_line(self.depth > 0)
        return SetVar(name, literal_value(value_text), offset=start)

    def parse_math(self, operator: MathOperator, start: int) -> MathOp:
        c = self.cursor
        open_pos = c.pos
        close_pos = c.find(')', open_pos)
        if close_pos == -1:
            raise c.error(f"unclosed parentheses in math operation '{operator.value}'", open_pos)
        operands: List[int] = []
        item_pos = open_pos + 1
        for item in c.source[open_pos + 1:close_pos].split(','):
            token = item.strip()
            if token:
                number = parse_int(token)
                if number is None:
                    token_pos = item_pos + item.index(token)
                    raise c.error(f"'{token}' is not a whole number in '{operator.value}'", token_pos)
                operands.append(number)
            item_pos += len(item) + 1
        if not operands:
            raise c.error(f"math operation '{operator.value}' requires at least one number", start)
        c.pos = close_pos + 1
        keyword = c.source[start:open_pos]
        return MathOp(operator, operands, keyword=keyword, offset=start)

    COMMANDS: Dict[str, Callable[..., Node]] = {
        'say': parse_say,
        'function': parse_function,
        'call': parse_call,
        'repeat': parse_repeat,
        'if': parse_if,
        'set': parse_set,
    }


def parse_program(source: str) -> Program:
    """Parse KinderScript source code into an AST Program.

    Raises KinderError (kind 'SyntaxError' or 'UnknownCommandError') with
    the offending offset and a context snippet on malformed input.
    """
    return Parser(source).parse_program()
