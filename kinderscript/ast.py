"""Abstract Syntax Tree (AST) definitions for KinderScript.

The parser produces a `Program` whose body is a list of the statement nodes
below. Every statement records the character offset where it starts in the
source; offsets are diagnostic only and do not take part in equality.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional

from .types import Value


class MathOperator(Enum):
    ADD = 'add'
    SUBTRACT = 'subtract'
    MULTIPLY = 'multiply'
    DIVIDE = 'divide'
    MODULO = 'modulo'
    POWER = 'power'


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass
class Program(Node):
    body: List[Node]
    # every FunctionDef in the tree, by name; the textually last one wins
    functions: Dict[str, 'FunctionDef'] = field(default_factory=dict)


@dataclass
class Print(Node):
    message: str  # raw text, `$name` markers substituted at run time
    offset: Optional[int] = field(default=None, compare=False)


@dataclass
class MathOp(Node):
    operator: MathOperator
    operands: List[int]
    # spelling used in the source, e.g. "ADD"
    keyword: Optional[str] = field(default=None, compare=False)
    offset: Optional[int] = field(default=None, compare=False)


@dataclass
class Block(Node):
    statements: List[Node]
    offset: Optional[int] = field(default=None, compare=False)


@dataclass
class Repeat(Node):
    count: int
    body: Node
    offset: Optional[int] = field(default=None, compare=False)


@dataclass
class FunctionDef(Node):
    name: str
    parameters: List[str]
    body: Node
    offset: Optional[int] = field(default=None, compare=False)


@dataclass
class FunctionCall(Node):
    name: str
    arguments: List[str]  # raw tokens, resolved at call time
    offset: Optional[int] = field(default=None, compare=False)


@dataclass
class VarDecl(Node):
    name: str
    value: Value
    offset: Optional[int] = field(default=None, compare=False)


@dataclass
class If(Node):
    condition: str
    then_branch: Node
    else_branch: Optional[Node] = None
    offset: Optional[int] = field(default=None, compare=False)


@dataclass
class SetVar(Node):
    name: str
    value: Value  # may be a `$name` reference resolved at run time
    offset: Optional[int] = field(default=None, compare=False)


def iter_children(node: Node) -> Iterator[Node]:
    if isinstance(node, Program):
        yield from node.body
    elif isinstance(node, Block):
        yield from node.statements
    elif isinstance(node, (Repeat, FunctionDef)):
        yield node.body
    elif isinstance(node, If):
        yield node.then_branch
        if node.else_branch is not None:
            yield node.else_branch


def collect_functions(statements: List[Node]) -> Dict[str, FunctionDef]:
    """Build the function side-table for a statement list.

    A definition is recorded after the definitions nested in its body, so a
    later definition of the same name replaces an earlier one.
    """
    functions: Dict[str, FunctionDef] = {}

    def visit(node: Node) -> None:
        for child in iter_children(node):
            visit(child)
        if isinstance(node, FunctionDef):
            functions[node.name] = node

    for stmt in statements:
        visit(stmt)
    return functions
