from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    DIVISION_BY_ZERO = 'DivisionByZero'
    TYPE_MISMATCH = 'TypeMismatch'
    UNDEFINED_NAME = 'UndefinedName'
    ARITY_MISMATCH = 'ArityMismatch'
    IO_FAILURE = 'IOFailure'
    RECURSION_LIMIT = 'RecursionLimit'


class CalcError(Exception):
    """Base class for every failure reported back to the host."""


class GenerateError(CalcError):
    """Malformed prompt detected while building the expression tree."""
    def __init__(self, message: str, pos: int):
        super().__init__(f"syntax error at {pos}: {message}")
        self.message = message
        self.pos = pos


class EvalError(CalcError):
    """Exception type used to propagate evaluation errors."""
    def __init__(self, kind: ErrorKind, message: str, code: Optional[int] = None):
        super().__init__(f"{kind.value}: {message}")
        self.kind = kind
        self.message = message
        self.code = code
