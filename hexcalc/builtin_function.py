from dataclasses import dataclass
from typing import Any, Optional, Tuple

from hexcalc.ast import Node


@dataclass
class BuiltinFunction:
    name: str
    arity: Optional[int]
    fn: Any
    def __repr__(self) -> str:
        return f"<builtin {self.name}>"


@dataclass
class UserFunction:
    """A function defined at the prompt with `name(params) -> body`."""
    name: str
    params: Tuple[str, ...]
    body: Node

    @property
    def arity(self) -> int:
        return len(self.params)

    def __repr__(self) -> str:
        return f"<function {self.name}({', '.join(self.params)})>"
