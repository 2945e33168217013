from typing import Any, Dict, List, Optional, Tuple, Union

from hexcalc.builtin_function import BuiltinFunction, UserFunction
from hexcalc.errors import EvalError, ErrorKind
from hexcalc.types import Value

Binding = Union[Value, BuiltinFunction, UserFunction]


def is_callable(binding: Any) -> bool:
    return isinstance(binding, (BuiltinFunction, UserFunction))


class Scope:
    """Represents one tier of name bindings.

    A scope without a parent is the persistent tier. Transient scopes
    point at the persistent tier; `is_call` marks the scope created for a
    single user function call.
    """
    def __init__(self, parent: Optional['Scope'] = None, is_call: bool = False):
        self.parent = parent
        self.is_call = is_call
        self.values: Dict[str, Binding] = {}
        self.consts: Dict[str, bool] = {}

    def lookup(self, name: str) -> Optional[Binding]:
        if name in self.values:
            return self.values[name]
        if self.parent:
            return self.parent.lookup(name)
        return None

    def get(self, name: str) -> Binding:
        binding = self.lookup(name)
        if binding is None:
            raise EvalError(ErrorKind.UNDEFINED_NAME, f'undefined name {name}')
        return binding

    def is_const(self, name: str) -> bool:
        if name in self.values:
            return self.consts.get(name, False)
        if self.parent:
            return self.parent.is_const(name)
        return False

    def set(self, name: str, binding: Binding):
        if self.consts.get(name):
            raise EvalError(ErrorKind.TYPE_MISMATCH, f'cannot assign to constant {name}')
        self.values[name] = binding

    def declare(self, name: str, binding: Binding, is_const: bool):
        self.values[name] = binding
        self.consts[name] = is_const

    def remove(self, name: str) -> bool:
        if name not in self.values or self.consts.get(name):
            return False
        del self.values[name]
        self.consts.pop(name, None)
        return True


class Environment:
    """Name registry shared by the generator and the evaluator.

    The persistent tier lives as long as the environment and holds the
    builtin library, constants, user variables and user functions. Every
    evaluation runs in a fresh transient scope, and every user function
    call in its own call scope; both are dropped when they finish.
    """
    def __init__(self):
        self.persistent = Scope()

    def transient(self) -> Scope:
        return Scope(parent=self.persistent)

    def call_scope(self) -> Scope:
        return Scope(parent=self.persistent, is_call=True)

    def lookup(self, name: str, scope: Optional[Scope] = None) -> Optional[Binding]:
        return (scope or self.persistent).lookup(name)

    def is_callable(self, name: str, scope: Optional[Scope] = None) -> bool:
        return is_callable(self.lookup(name, scope))

    def assign(self, name: str, value: Value, scope: Scope) -> Value:
        # Assignment only lands in the transient tier inside a function call
        if scope.is_call:
            if self.persistent.is_const(name):
                raise EvalError(ErrorKind.TYPE_MISMATCH, f'cannot assign to constant {name}')
            scope.values[name] = value
        else:
            self.persistent.set(name, value)
        return value

    def define_function(self, func: UserFunction):
        existing = self.persistent.lookup(func.name)
        if isinstance(existing, BuiltinFunction) or self.persistent.is_const(func.name):
            raise EvalError(ErrorKind.TYPE_MISMATCH, f'cannot redefine builtin {func.name}')
        self.persistent.set(func.name, func)

    def declare_builtin(self, name: str, binding: Binding):
        self.persistent.declare(name, binding, is_const=True)

    def remove(self, name: str) -> bool:
        return self.persistent.remove(name)

    def variables(self) -> List[Tuple[str, Value]]:
        return sorted(
            ((name, binding) for name, binding in self.persistent.values.items()
             if isinstance(binding, Value) and not self.persistent.consts.get(name)),
            key=lambda item: item[0],
        )

    def functions(self) -> List[Tuple[str, UserFunction]]:
        return sorted(
            ((name, binding) for name, binding in self.persistent.values.items()
             if isinstance(binding, UserFunction)),
            key=lambda item: item[0],
        )

    def clear_variables(self):
        for name, _ in self.variables():
            self.persistent.remove(name)

    def clear_functions(self):
        for name, _ in self.functions():
            self.persistent.remove(name)
