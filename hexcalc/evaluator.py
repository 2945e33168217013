"""Evaluator for hexcalc expression trees.

The evaluator walks a tree bottom-up and produces a single `Value`. Names
resolve through the scope chain (transient first, then persistent); user
function calls get a call scope of their own so their parameters and
local assignments never reach the persistent tier.
"""

from __future__ import annotations

from typing import Callable, List, Optional
import math

from .ast import Assign, BinaryOp, Call, FuncDef, Ident, Literal, Node, NoOp, UnaryOp
from .builtin_function import BuiltinFunction, UserFunction
from .environment import Environment, Scope, is_callable
from .errors import EvalError, ErrorKind
from .types import Kind, Value, VOID, is_truthy, to_string, type_name


MAX_CALL_DEPTH = 200

ARITHMETIC_OPS = ('+', '-', '*', '/', '%', '**')
BITWISE_OPS = ('&', '|', '^', '<<', '>>')
COMPARISON_OPS = ('==', '!=', '<', '>', '<=', '>=')


def _mismatch(op: str, a: Value, b: Value) -> EvalError:
    return EvalError(ErrorKind.TYPE_MISMATCH, f'unsupported {op} for {type_name(a)} and {type_name(b)}')


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


class Evaluator:
    """Core evaluator that computes the value of an expression tree."""
    def __init__(self, env: Environment, debug: Optional[Callable[[int, str], None]] = None):
        self.env = env
        self.debug = debug or (lambda level, msg: None)
        self.depth = 0

    def run(self, node: Node) -> Value:
        scope = self.env.transient()
        try:
            return self.evaluate(node, scope)
        except RecursionError:
            # deep bodies run out of interpreter stack before MAX_CALL_DEPTH
            raise EvalError(ErrorKind.RECURSION_LIMIT, 'expression nested too deeply') from None

    def evaluate(self, node: Node, scope: Scope) -> Value:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Ident):
            return self.resolve(node.name, scope)
        if isinstance(node, UnaryOp):
            operand = self.evaluate(node.operand, scope)
            return self.apply_unary_op(node.op, operand)
        if isinstance(node, BinaryOp):
            left = self.evaluate(node.left, scope)
            # Short-circuit for && and ||
            if node.op == '&&':
                if not is_truthy(left):
                    return Value.boolean(False)
                right = self.evaluate(node.right, scope)
                return Value.boolean(is_truthy(right))
            if node.op == '||':
                if is_truthy(left):
                    return Value.boolean(True)
                right = self.evaluate(node.right, scope)
                return Value.boolean(is_truthy(right))
            right = self.evaluate(node.right, scope)
            return self.apply_binary_op(node.op, left, right)
        if isinstance(node, Assign):
            value = self.evaluate(node.value, scope)
            self.debug(2, f"assign {node.name} = {to_string(value)}")
            return self.env.assign(node.name, value, scope)
        if isinstance(node, Call):
            func = scope.get(node.name)
            args = [self.evaluate(arg, scope) for arg in node.args]
            return self.call_function(func, args)
        if isinstance(node, FuncDef):
            self.env.define_function(UserFunction(node.name, node.params, node.body))
            self.debug(2, f"define function {node.name}({', '.join(node.params)})")
            return VOID
        if isinstance(node, NoOp):
            return VOID
        raise EvalError(ErrorKind.TYPE_MISMATCH, f'unexpected node type {type(node).__name__}')

    def resolve(self, name: str, scope: Scope) -> Value:
        binding = scope.get(name)
        if is_callable(binding):
            raise EvalError(ErrorKind.TYPE_MISMATCH, f'{name} is a function, call it with ()')
        return binding

    def call_function(self, func, args: List[Value]) -> Value:
        if isinstance(func, BuiltinFunction):
            # None arity means variadic
            if func.arity is not None and len(args) != func.arity:
                raise EvalError(ErrorKind.ARITY_MISMATCH, f"{func.name} expects {func.arity} arguments, got {len(args)}")
            self.debug(3, f"call builtin {func.name} with {len(args)} arguments")
            return func.fn(args)
        if isinstance(func, UserFunction):
            if len(args) != func.arity:
                raise EvalError(ErrorKind.ARITY_MISMATCH, f"{func.name} expects {func.arity} arguments, got {len(args)}")
            if self.depth >= MAX_CALL_DEPTH:
                raise EvalError(ErrorKind.RECURSION_LIMIT, f'call depth exceeded {MAX_CALL_DEPTH} in {func.name}')
            self.debug(3, f"call {func.name}({', '.join(to_string(a) for a in args)})")
            call_scope = self.env.call_scope()
            for param, arg in zip(func.params, args):
                call_scope.values[param] = arg
            self.depth += 1
            try:
                return self.evaluate(func.body, call_scope)
            finally:
                self.depth -= 1
        raise EvalError(ErrorKind.TYPE_MISMATCH, f'{func} is not callable')

    def apply_unary_op(self, op: str, operand: Value) -> Value:
        if op == '!':
            return Value.boolean(not is_truthy(operand))
        if op == '-':
            if operand.kind is Kind.INT:
                return Value.integer(-operand.payload)
            if operand.kind is Kind.FLOAT:
                return Value.floating(-operand.payload)
            raise EvalError(ErrorKind.TYPE_MISMATCH, f'unary - expects a number, got {type_name(operand)}')
        if op == '~':
            if operand.kind is Kind.INT:
                return Value.integer(~operand.payload)
            raise EvalError(ErrorKind.TYPE_MISMATCH, f'unary ~ expects an integer, got {type_name(operand)}')
        raise EvalError(ErrorKind.TYPE_MISMATCH, f'unsupported unary operator {op}')

    def apply_binary_op(self, op: str, a: Value, b: Value) -> Value:
        if op == '+' and (a.kind is Kind.STR or b.kind is Kind.STR):
            return Value.string(to_string(a) + to_string(b))
        if op in ARITHMETIC_OPS:
            return self.arithmetic(op, a, b)
        if op in BITWISE_OPS:
            return self.bitwise(op, a, b)
        if op in COMPARISON_OPS:
            return self.compare(op, a, b)
        raise EvalError(ErrorKind.TYPE_MISMATCH, f'unknown operator {op}')

    def arithmetic(self, op: str, a: Value, b: Value) -> Value:
        if not (a.is_numeric and b.is_numeric):
            raise _mismatch(op, a, b)
        if a.kind is Kind.INT and b.kind is Kind.INT:
            return self.int_arithmetic(op, a.payload, b.payload)
        x = float(a.payload)
        y = float(b.payload)
        if op == '+':
            return Value.floating(x + y)
        if op == '-':
            return Value.floating(x - y)
        if op == '*':
            return Value.floating(x * y)
        if op == '/':
            if y == 0.0:
                raise EvalError(ErrorKind.DIVISION_BY_ZERO, 'division by zero')
            return Value.floating(x / y)
        if op == '%':
            if y == 0.0:
                raise EvalError(ErrorKind.DIVISION_BY_ZERO, 'modulo by zero')
            if math.isinf(x):
                return Value.floating(math.nan)
            return Value.floating(math.fmod(x, y))
        if op == '**':
            if x == 0.0 and y < 0.0:
                raise EvalError(ErrorKind.DIVISION_BY_ZERO, 'zero raised to a negative power')
            try:
                return Value.floating(math.pow(x, y))
            except OverflowError:
                return Value.floating(math.inf)
            except ValueError:
                return Value.floating(math.nan)
        raise EvalError(ErrorKind.TYPE_MISMATCH, f'unknown operator {op}')

    def int_arithmetic(self, op: str, x: int, y: int) -> Value:
        if op == '+':
            return Value.integer(x + y)
        if op == '-':
            return Value.integer(x - y)
        if op == '*':
            return Value.integer(x * y)
        if op == '/':
            if y == 0:
                raise EvalError(ErrorKind.DIVISION_BY_ZERO, 'division by zero')
            # exact quotients stay integers
            if x % y == 0:
                return Value.integer(x // y)
            return Value.floating(x / y)
        if op == '%':
            if y == 0:
                raise EvalError(ErrorKind.DIVISION_BY_ZERO, 'modulo by zero')
            return Value.integer(x - y * _trunc_div(x, y))
        if op == '**':
            if y < 0:
                if x == 0:
                    raise EvalError(ErrorKind.DIVISION_BY_ZERO, 'zero raised to a negative power')
                return Value.floating(float(x) ** y)
            return Value.integer(pow(x, y, 1 << 64))
        raise EvalError(ErrorKind.TYPE_MISMATCH, f'unknown operator {op}')

    def bitwise(self, op: str, a: Value, b: Value) -> Value:
        if a.kind is not Kind.INT or b.kind is not Kind.INT:
            raise _mismatch(op, a, b)
        x, y = a.payload, b.payload
        if op == '&':
            return Value.integer(x & y)
        if op == '|':
            return Value.integer(x | y)
        if op == '^':
            return Value.integer(x ^ y)
        if y < 0:
            raise EvalError(ErrorKind.TYPE_MISMATCH, f'negative shift count {y}')
        if op == '<<':
            return Value.integer(x << y) if y < 64 else Value.integer(0)
        if op == '>>':
            return Value.integer(x >> min(y, 63))
        raise EvalError(ErrorKind.TYPE_MISMATCH, f'unknown operator {op}')

    def compare(self, op: str, a: Value, b: Value) -> Value:
        if a.is_numeric and b.is_numeric:
            x, y = a.payload, b.payload
        elif a.kind is b.kind:
            x, y = a.payload, b.payload
            if a.kind is Kind.VOID:
                if op in ('==', '!='):
                    return Value.boolean(op == '==')
                raise _mismatch(op, a, b)
        else:
            raise _mismatch(op, a, b)
        if op == '==':
            return Value.boolean(x == y)
        if op == '!=':
            return Value.boolean(x != y)
        if op == '<':
            return Value.boolean(x < y)
        if op == '>':
            return Value.boolean(x > y)
        if op == '<=':
            return Value.boolean(x <= y)
        if op == '>=':
            return Value.boolean(x >= y)
        raise EvalError(ErrorKind.TYPE_MISMATCH, f'unknown operator {op}')


def calculate(tree: Node, env: Environment) -> Value:
    """Evaluate one tree against the environment.

    Raises EvalError on the first failing node. Environment writes made
    before the failure are kept.
    """
    return Evaluator(env).run(tree)
