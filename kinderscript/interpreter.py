"""Interpreter for the KinderScript language.

This module implements the tree-walking evaluator. A program run creates a
root scope, registers every declared function in it, then executes the
top-level statements in order. Blocks and function calls run in fresh child
scopes; output lines (one per `say` and one per math result) go to the
`output` callable, which defaults to `print`.

Errors are fail-fast: the first `KinderError` aborts the run and propagates
to the caller.
"""

from __future__ import annotations

import math
import re
from typing import Callable, List, Optional

from .ast import (
    Program, Print, MathOp, MathOperator, Block, Repeat, FunctionDef,
    FunctionCall, VarDecl, If, SetVar, Node, collect_functions,
)
from .environment import Scope
from .errors import KinderError
from .parser import parse_program
from .resolver import evaluate_condition, resolve_value
from .types import ErrorVal, to_string, type_name, truncate_divide, truncate_remainder


VARIABLE_REF = re.compile(r'\$(\w+)', re.ASCII)

MIN_OPERANDS = {
    MathOperator.ADD: 0,
    MathOperator.SUBTRACT: 1,
    MathOperator.MULTIPLY: 1,
    MathOperator.DIVIDE: 1,
    MathOperator.MODULO: 2,
    MathOperator.POWER: 2,
}


class Interpreter:
    """Core interpreter that executes a KinderScript AST."""
    def __init__(self, output: Optional[Callable[[str], None]] = None,
                 debug_level: int = 0, debug_file: Optional[str] = 'debug.txt'):
        self.output = output if output is not None else print
        self.global_scope = Scope()
        self.debug_level = debug_level
        self.debug_file = debug_file
        self.debug_fp = None

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def emit(self, line: str):
        self.output(line)

    # Public API
    def run(self, program: Program) -> None:
        self.global_scope = Scope()
        functions = program.functions or collect_functions(program.body)
        for function in functions.values():
            self.global_scope.define_function(function)
        if self.debug_level > 0 and self.debug_file:
            self.debug_fp = open(self.debug_file, 'w', encoding='utf-8')
        try:
            self.execute_block(program.body, self.global_scope)
        finally:
            if self.debug_fp:
                self.debug_fp.close()
                self.debug_fp = None

    def execute_block(self, statements: List[Node], scope: Scope) -> None:
        for stmt in statements:
            self.execute(stmt, scope)

    def execute(self, node: Node, scope: Scope) -> None:
        if self.debug_level >= 1:
            self.debug(f"execute {type(node).__name__} at offset {getattr(node, 'offset', None)}")
        try:
            self.dispatch(node, scope)
        except KinderError as e:
            # innermost statement wins
            if e.err.offset is None:
                e.err.offset = getattr(node, 'offset', None)
            raise

    def dispatch(self, node: Node, scope: Scope) -> None:
        if isinstance(node, Print):
            self.emit(self.interpolate(node.message, scope))
            return
        if isinstance(node, MathOp):
            result = self.apply_math(node.operator, node.operands)
            self.emit(f"Result of {node.keyword or node.operator.value}: {result}")
            return
        if isinstance(node, Block):
            self.execute_block(node.statements, scope.child())
            return
        if isinstance(node, Repeat):
            for _ in range(node.count):
                self.execute(node.body, scope)
            return
        if isinstance(node, FunctionDef):
            # registered before the run starts
            return
        if isinstance(node, FunctionCall):
            self.call_function(node, scope)
            return
        if isinstance(node, VarDecl):
            scope.set(node.name, node.value)
            if self.debug_level >= 2:
                self.debug(f"declare {node.name}: {type_name(node.value)} = {node.value!r}")
            return
        if isinstance(node, If):
            truthy = evaluate_condition(node.condition, scope)
            if self.debug_level >= 3:
                self.debug(f"if condition {node.condition!r} -> {truthy}")
            if truthy:
                self.execute(node.then_branch, scope)
            elif node.else_branch is not None:
                self.execute(node.else_branch, scope)
            return
        if isinstance(node, SetVar):
            value = node.value
            if isinstance(value, str) and value.startswith('$'):
                bound = scope.get(value[1:])
                if bound is not None:
                    value = bound
            scope.set(node.name, value)
            if self.debug_level >= 2:
                self.debug(f"set {node.name}: {type_name(value)} = {value!r}")
            return
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def interpolate(self, message: str, scope: Scope) -> str:
        def replace(match: re.Match) -> str:
            value = scope.get(match.group(1))
            if value is None:
                return match.group(0)
            return to_string(value)
        return VARIABLE_REF.sub(replace, message)

    def call_function(self, call: FunctionCall, scope: Scope) -> None:
        function = scope.get_function(call.name)
        if function is None:
            raise KinderError(ErrorVal('UndefinedFunctionError', f"function '{call.name}' not found"))
        if len(function.parameters) != len(call.arguments):
            raise KinderError(ErrorVal(
                'ArityMismatchError',
                f"function '{call.name}' expects {len(function.parameters)} parameter(s), "
                f"but {len(call.arguments)} argument(s) were provided",
            ))
        if self.debug_level >= 2:
            self.debug(f"call {call.name}({', '.join(call.arguments)})")
        call_scope = scope.child()
        for param, arg in zip(function.parameters, call.arguments):
            self.execute(VarDecl(param, resolve_value(arg, scope)), call_scope)
        self.execute(function.body, call_scope)

    def apply_math(self, operator: MathOperator, operands: List[int]) -> int:
        if operator not in MIN_OPERANDS:
            raise KinderError(ErrorVal('UnknownOperationError', f'unknown operation {operator}'))
        name = operator.value
        required = MIN_OPERANDS[operator]
        if len(operands) < required:
            noun = 'number' if required == 1 else 'numbers'
            raise KinderError(ErrorVal('ArityMismatchError', f'{name} requires at least {required} {noun}'))
        if operator in (MathOperator.DIVIDE, MathOperator.MODULO) and 0 in operands[1:]:
            what = 'Division' if operator == MathOperator.DIVIDE else 'Modulo'
            raise KinderError(ErrorVal('DivisionByZeroError', f'{what} by zero is not allowed'))

        if operator == MathOperator.ADD:
            return sum(operands)
        if operator == MathOperator.POWER:
            return self.apply_power(operands)
        result = operands[0]
        for n in operands[1:]:
            if operator == MathOperator.SUBTRACT:
                result = result - n
            elif operator == MathOperator.MULTIPLY:
                result = result * n
            elif operator == MathOperator.DIVIDE:
                result = truncate_divide(result, n)
            else:
                result = truncate_remainder(result, n)
        return result

    def apply_power(self, operands: List[int]) -> int:
        # folds left to right in floating point, then truncates toward zero
        try:
            result = float(operands[0])
            for n in operands[1:]:
                if result == 0.0 and n < 0:
                    raise KinderError(ErrorVal('DivisionByZeroError', 'zero cannot be raised to a negative power'))
                result = math.pow(result, float(n))
        except OverflowError:
            raise KinderError(ErrorVal('ArithmeticOverflowError', 'power result is too large'))
        return int(result)


def run_program(source: str, output: Optional[Callable[[str], None]] = None,
                debug_level: int = 0) -> None:
    """Convenience function to parse and run a KinderScript program from a source string."""
    program = parse_program(source)
    interpreter = Interpreter(output=output, debug_level=debug_level)
    interpreter.run(program)


def run_file(file_path: str, debug_level: int = 0) -> Interpreter:
    """Parse and execute a KinderScript file, returning the interpreter instance."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    program = parse_program(source)
    interpreter = Interpreter(debug_level=debug_level)
    interpreter.run(program)
    return interpreter
