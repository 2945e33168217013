"""JSON serialization/deserialization for hexcalc trees and values.

This module converts between tree dataclasses, `Value` records and plain
Python dict/list structures suitable for JSON encoding. `save` and `load`
use it to persist user variables and function bodies.
"""

from __future__ import annotations

from typing import Any, Dict

from .ast import Assign, BinaryOp, Call, FuncDef, Ident, Literal, Node, NoOp, UnaryOp
from .types import Kind, Value


def value_to_obj(v: Value) -> Dict[str, Any]:
    return {"kind": v.kind.value, "value": v.payload}


def value_from_obj(o: Dict[str, Any]) -> Value:
    kind = Kind(o["kind"])
    if kind is Kind.INT:
        return Value.integer(o["value"])
    if kind is Kind.FLOAT:
        return Value.floating(o["value"])
    if kind is Kind.BOOL:
        return Value.boolean(o["value"])
    if kind is Kind.STR:
        return Value.string(o["value"])
    return Value.void()


def ast_to_obj(node: Node) -> Dict[str, Any]:
    if isinstance(node, NoOp):
        return {"type": "NoOp"}
    if isinstance(node, Literal):
        return {"type": "Literal", "value": value_to_obj(node.value)}
    if isinstance(node, Ident):
        return {"type": "Ident", "name": node.name}
    if isinstance(node, UnaryOp):
        return {"type": "UnaryOp", "op": node.op, "operand": ast_to_obj(node.operand)}
    if isinstance(node, BinaryOp):
        return {
            "type": "BinaryOp",
            "op": node.op,
            "left": ast_to_obj(node.left),
            "right": ast_to_obj(node.right),
        }
    if isinstance(node, Call):
        return {"type": "Call", "name": node.name, "args": [ast_to_obj(a) for a in node.args]}
    if isinstance(node, Assign):
        return {"type": "Assign", "name": node.name, "value": ast_to_obj(node.value)}
    if isinstance(node, FuncDef):
        return {
            "type": "FuncDef",
            "name": node.name,
            "params": list(node.params),
            "body": ast_to_obj(node.body),
        }
    raise TypeError(f"Unsupported node type for serialization: {type(node).__name__}")


def ast_from_obj(o: Dict[str, Any]) -> Node:
    t = o.get("type")
    if t == "NoOp":
        return NoOp()
    if t == "Literal":
        return Literal(value_from_obj(o["value"]))
    if t == "Ident":
        return Ident(o["name"])
    if t == "UnaryOp":
        return UnaryOp(o["op"], ast_from_obj(o["operand"]))
    if t == "BinaryOp":
        return BinaryOp(o["op"], ast_from_obj(o["left"]), ast_from_obj(o["right"]))
    if t == "Call":
        return Call(o["name"], tuple(ast_from_obj(a) for a in o["args"]))
    if t == "Assign":
        return Assign(o["name"], ast_from_obj(o["value"]))
    if t == "FuncDef":
        return FuncDef(o["name"], tuple(o["params"]), ast_from_obj(o["body"]))
    raise ValueError(f"Unknown node type in object: {t}")
