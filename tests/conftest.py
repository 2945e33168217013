from typing import Dict, List, Optional, Tuple

import pytest

from hexcalc.calculator import Calculator
from hexcalc.std.system import IOCode, System


class MemorySystem(System):
    """In-memory system services: output is collected, files live in a dict."""
    def __init__(self):
        self.output: List[str] = []
        self.clears = 0
        self.files: Dict[str, bytes] = {}
        self.current: Optional[str] = None
        self.mode = ''
        self.offset = 0

    def emit(self, text: str) -> int:
        self.output.append(text)
        return IOCode.NONE

    def clear(self) -> int:
        self.clears += 1
        return IOCode.NONE

    def list_files(self) -> Tuple[int, List[str]]:
        return IOCode.NONE, sorted(self.files)

    def open(self, name: str, mode: str) -> int:
        if mode == 'r' and name not in self.files:
            return IOCode.NOT_EXISTS
        if mode == 'w':
            self.files[name] = b''
        self.current = name
        self.mode = mode
        self.offset = 0
        return IOCode.NONE

    def close(self) -> int:
        self.current = None
        return IOCode.NONE

    def read(self, size: int) -> Tuple[int, bytes]:
        data = self.files[self.current][self.offset:self.offset + size]
        self.offset += len(data)
        return len(data), data

    def write(self, data: bytes) -> int:
        self.files[self.current] += data
        return len(data)


@pytest.fixture
def system():
    return MemorySystem()


@pytest.fixture
def calc(system):
    calculator = Calculator(system=system)
    yield calculator
    calculator.close()
