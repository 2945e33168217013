from hexcalc.builtin_function import BuiltinFunction
from hexcalc.environment import Environment
from hexcalc.errors import EvalError, ErrorKind
from hexcalc.types import (
    Domain, Kind, Value, round_to_int_away_from_zero, to_number, type_name,
)
from typing import Any, Callable, List
import math

CONSTANTS = {
    'pi': Value.floating(math.pi),
    'e': Value.floating(math.e),
    'phi': Value.floating((1 + math.sqrt(5)) / 2),
    'inf': Value.floating(math.inf),
    'nan': Value.floating(math.nan),
    'true': Value.boolean(True),
    'false': Value.boolean(False),
}


def _float_arg(name: str, value: Value) -> float:
    if not value.is_numeric:
        raise EvalError(ErrorKind.TYPE_MISMATCH, f'{name} expects a number, got {type_name(value)}')
    return to_number(value, Domain.FLOAT64)


def _ieee(fn: Callable[..., float], *xs: float) -> float:
    # math raises where IEEE arithmetic would produce nan or inf
    try:
        return fn(*xs)
    except OverflowError:
        return math.inf
    except ValueError:
        return math.nan


def _cbrt(x: float) -> float:
    return math.copysign(abs(x) ** (1.0 / 3.0), x)


UNARY_FLOAT_FUNCTIONS = {
    'sin': math.sin,
    'cos': math.cos,
    'tan': math.tan,
    'asin': math.asin,
    'acos': math.acos,
    'atan': math.atan,
    'sinh': math.sinh,
    'cosh': math.cosh,
    'tanh': math.tanh,
    'sqrt': math.sqrt,
    'cbrt': _cbrt,
    'exp': math.exp,
    'ln': math.log,
    'log2': math.log2,
    'log10': math.log10,
}


def populate_standard_environment(env: Environment) -> Environment:
        def unary_float(name: str, fn: Callable[[float], float]):
            def std_fn(args: List[Value]) -> Value:
                return Value.floating(_ieee(fn, _float_arg(name, args[0])))
            return std_fn

        def std_atan2(args: List[Value]) -> Value:
            y = _float_arg('atan2', args[0])
            x = _float_arg('atan2', args[1])
            return Value.floating(math.atan2(y, x))

        def std_log(args: List[Value]) -> Value:
            # log(x, base)
            x = _ieee(math.log, _float_arg('log', args[0]))
            base = _ieee(math.log, _float_arg('log', args[1]))
            if base == 0.0:
                # log base 1 divides by zero
                if x == 0.0 or math.isnan(x):
                    return Value.floating(math.nan)
                return Value.floating(math.copysign(math.inf, x))
            return Value.floating(x / base)

        def std_pow(args: List[Value]) -> Value:
            x = _float_arg('pow', args[0])
            y = _float_arg('pow', args[1])
            return Value.floating(_ieee(math.pow, x, y))

        def std_abs(args: List[Value]) -> Value:
            x = args[0]
            if x.kind is Kind.INT:
                return Value.integer(abs(x.payload))
            return Value.floating(abs(_float_arg('abs', x)))

        def rounding(name: str, fn: Callable[[float], int]):
            def std_fn(args: List[Value]) -> Value:
                x = args[0]
                if x.kind is Kind.INT:
                    return x
                f = _float_arg(name, x)
                if not math.isfinite(f):
                    return x
                return Value.integer(fn(f))
            return std_fn

        def extremum(name: str, pick: Callable[..., Any]):
            def std_fn(args: List[Value]) -> Value:
                if not args:
                    raise EvalError(ErrorKind.ARITY_MISMATCH, f'{name} expects at least 1 argument')
                for a in args:
                    _float_arg(name, a)
                return pick(args, key=lambda v: v.payload)
            return std_fn

        def std_int(args: List[Value]) -> Value:
            return Value.integer(to_number(args[0], Domain.INT64))

        def std_float(args: List[Value]) -> Value:
            return Value.floating(to_number(args[0], Domain.FLOAT64))

        def std_popcnt(args: List[Value]) -> Value:
            x = args[0]
            if x.kind is not Kind.INT:
                raise EvalError(ErrorKind.TYPE_MISMATCH, f'popcnt expects an integer, got {type_name(x)}')
            return Value.integer(bin(to_number(x, Domain.UINT64)).count('1'))

        for name, value in CONSTANTS.items():
            env.declare_builtin(name, value)

        for name, fn in UNARY_FLOAT_FUNCTIONS.items():
            env.declare_builtin(name, BuiltinFunction(name, 1, unary_float(name, fn)))

        env.declare_builtin('atan2', BuiltinFunction('atan2', 2, std_atan2))
        env.declare_builtin('log', BuiltinFunction('log', 2, std_log))
        env.declare_builtin('pow', BuiltinFunction('pow', 2, std_pow))
        env.declare_builtin('abs', BuiltinFunction('abs', 1, std_abs))
        env.declare_builtin('round', BuiltinFunction('round', 1, rounding('round', round_to_int_away_from_zero)))
        env.declare_builtin('floor', BuiltinFunction('floor', 1, rounding('floor', math.floor)))
        env.declare_builtin('ceil', BuiltinFunction('ceil', 1, rounding('ceil', math.ceil)))
        env.declare_builtin('trunc', BuiltinFunction('trunc', 1, rounding('trunc', math.trunc)))
        env.declare_builtin('min', BuiltinFunction('min', None, extremum('min', min)))
        env.declare_builtin('max', BuiltinFunction('max', None, extremum('max', max)))
        env.declare_builtin('int', BuiltinFunction('int', 1, std_int))
        env.declare_builtin('float', BuiltinFunction('float', 1, std_float))
        env.declare_builtin('popcnt', BuiltinFunction('popcnt', 1, std_popcnt))

        return env
