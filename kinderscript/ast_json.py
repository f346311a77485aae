"""JSON serialization/deserialization for the KinderScript AST.

This module converts between AST dataclasses and plain Python dict/list
structures suitable for JSON encoding. Every node is tagged with its class
name under "type"; math operators are stored as their keyword. The function
table of a `Program` is not stored: it is rebuilt from the body on load.
"""

from __future__ import annotations

from typing import Any

from .ast import (
    Program,
    Print,
    MathOp,
    MathOperator,
    Block,
    Repeat,
    FunctionDef,
    FunctionCall,
    VarDecl,
    If,
    SetVar,
    collect_functions,
)


def ast_to_obj(node: Any) -> Any:
    # Primitives
    if node is None:
        return None
    if isinstance(node, (int, str)):
        return node

    if isinstance(node, Program):
        return {"type": "Program", "body": [ast_to_obj(n) for n in node.body]}
    if isinstance(node, Print):
        return {"type": "Print", "message": node.message, "offset": node.offset}
    if isinstance(node, MathOp):
        return {
            "type": "MathOp",
            "operator": node.operator.value,
            "operands": list(node.operands),
            "keyword": node.keyword,
            "offset": node.offset,
        }
    if isinstance(node, Block):
        return {"type": "Block", "statements": [ast_to_obj(s) for s in node.statements], "offset": node.offset}
    if isinstance(node, Repeat):
        return {"type": "Repeat", "count": node.count, "body": ast_to_obj(node.body), "offset": node.offset}
    if isinstance(node, FunctionDef):
        return {
            "type": "FunctionDef",
            "name": node.name,
            "parameters": list(node.parameters),
            "body": ast_to_obj(node.body),
            "offset": node.offset,
        }
    if isinstance(node, FunctionCall):
        return {"type": "FunctionCall", "name": node.name, "arguments": list(node.arguments), "offset": node.offset}
    if isinstance(node, VarDecl):
        return {"type": "VarDecl", "name": node.name, "value": node.value, "offset": node.offset}
    if isinstance(node, If):
        return {
            "type": "If",
            "condition": node.condition,
            "then_branch": ast_to_obj(node.then_branch),
            "else_branch": ast_to_obj(node.else_branch),
            "offset": node.offset,
        }
    if isinstance(node, SetVar):
        return {"type": "SetVar", "name": node.name, "value": node.value, "offset": node.offset}

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None:
        return None
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    offset = obj.get("offset")
    if t == "Program":
        body = [ast_from_obj(n) for n in obj["body"]]
        return Program(body=body, functions=collect_functions(body))
    if t == "Print":
        return Print(message=obj["message"], offset=offset)
    if t == "MathOp":
        return MathOp(
            operator=MathOperator(obj["operator"]),
            operands=[int(n) for n in obj["operands"]],
            keyword=obj.get("keyword"),
            offset=offset,
        )
    if t == "Block":
        return Block(statements=[ast_from_obj(s) for s in obj["statements"]], offset=offset)
    if t == "Repeat":
        return Repeat(count=int(obj["count"]), body=ast_from_obj(obj["body"]), offset=offset)
    if t == "FunctionDef":
        return FunctionDef(
            name=obj["name"],
            parameters=list(obj["parameters"]),
            body=ast_from_obj(obj["body"]),
            offset=offset,
        )
    if t == "FunctionCall":
        return FunctionCall(name=obj["name"], arguments=list(obj["arguments"]), offset=offset)
    if t == "VarDecl":
        return VarDecl(name=obj["name"], value=obj["value"], offset=offset)
    if t == "If":
        return If(
            condition=obj["condition"],
            then_branch=ast_from_obj(obj["then_branch"]),
            else_branch=ast_from_obj(obj.get("else_branch")),
            offset=offset,
        )
    if t == "SetVar":
        return SetVar(name=obj["name"], value=obj["value"], offset=offset)

    raise ValueError(f"Unknown AST node type: {t}")
