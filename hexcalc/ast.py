"""Expression tree definitions for hexcalc.

The generator builds one tree per prompt out of these nodes and the
evaluator walks it. Nodes are frozen: a tree may be evaluated any number
of times and only `Assign` and `FuncDef` nodes change the environment
when they are.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple
import math

from .types import Kind, Value, to_string


@dataclass(frozen=True)
class Node:
    """Base class for all tree nodes."""
    pass


@dataclass(frozen=True)
class NoOp(Node):
    pass


@dataclass(frozen=True)
class Literal(Node):
    value: Value


@dataclass(frozen=True)
class Ident(Node):
    name: str


@dataclass(frozen=True)
class UnaryOp(Node):
    op: str
    operand: Node


@dataclass(frozen=True)
class BinaryOp(Node):
    op: str
    left: Node
    right: Node


@dataclass(frozen=True)
class Call(Node):
    name: str
    args: Tuple[Node, ...]


@dataclass(frozen=True)
class Assign(Node):
    name: str
    value: Node


@dataclass(frozen=True)
class FuncDef(Node):
    name: str
    params: Tuple[str, ...]
    body: Node


def to_source(node: Node) -> str:
    """Render a tree back to prompt text, parenthesizing every operation."""
    if isinstance(node, NoOp):
        return ''
    if isinstance(node, Literal):
        if node.value.kind is Kind.STR:
            escaped = node.value.payload.replace('\\', '\\\\').replace('"', '\\"')
            return f'"{escaped}"'
        if node.value.kind is Kind.FLOAT and math.isfinite(node.value.payload):
            return repr(node.value.payload)
        return to_string(node.value)
    if isinstance(node, Ident):
        return node.name
    if isinstance(node, UnaryOp):
        return f"{node.op}{to_source(node.operand)}"
    if isinstance(node, BinaryOp):
        return f"({to_source(node.left)} {node.op} {to_source(node.right)})"
    if isinstance(node, Call):
        return f"{node.name}({', '.join(to_source(a) for a in node.args)})"
    if isinstance(node, Assign):
        return f"{node.name} = {to_source(node.value)}"
    if isinstance(node, FuncDef):
        return f"{node.name}({', '.join(node.params)}) -> {to_source(node.body)}"
    raise TypeError(f"unsupported node type {type(node).__name__}")
