# hexcalc package
# This package provides an embeddable expression calculator engine.
from .calculator import Calculator, CalculationResult
from .environment import Environment
from .errors import CalcError, EvalError, GenerateError, ErrorKind
from .evaluator import calculate
from .generator import generate
from .lexer import tokenize, Word
from .types import Value, Kind

__all__ = [
    'Calculator',
    'CalculationResult',
    'Environment',
    'CalcError',
    'EvalError',
    'GenerateError',
    'ErrorKind',
    'calculate',
    'generate',
    'tokenize',
    'Word',
    'Value',
    'Kind',
]
