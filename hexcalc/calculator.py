"""Calculator facade for hexcalc.

A `Calculator` owns one persistent environment and one set of system
services. `calculate_prompt` runs the whole pipeline for a line of text
and packages the outcome as a `CalculationResult`; it never raises for
malformed prompts or failed evaluations.
"""

from __future__ import annotations

import sys
import threading
import time
from dataclasses import dataclass
from typing import Optional

from .ast import to_source
from .environment import Environment
from .errors import CalcError
from .evaluator import Evaluator
from .generator import generate
from .lexer import tokenize
from .std import populate_standard_environment
from .std.system import System, populate_system_environment
from .types import Kind, Value, render

LAST_RESULT = 'ans'


@dataclass
class CalculationResult:
    success: bool = False
    dec: str = ''
    hex: str = ''
    bin: str = ''
    elapsed_ms: int = 0
    error: Optional[str] = None


class Calculator:
    """Runs prompts against a persistent environment."""
    def __init__(self, system: Optional[System] = None, debug_level: int = 0, debug_file: Optional[str] = None):
        self.system = system or System()
        self.env = Environment()
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w') if debug_level > 0 and debug_file else None
        self._lock = threading.Lock()
        populate_standard_environment(self.env)
        populate_system_environment(self.env, self.system)

    def debug(self, level: int, msg: str):
        if self.debug_level >= level:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg, file=sys.stderr)

    def evaluate(self, prompt: str) -> Value:
        """Tokenize, build and evaluate one prompt, raising CalcError on failure."""
        words = tokenize(prompt)
        if self.debug_level >= 2:
            self.debug(2, 'words: ' + ' '.join(f'{w.kind}:{w.text}' for w in words))
        tree = generate(words, self.env)
        if self.debug_level >= 2:
            self.debug(2, f'tree: {to_source(tree)}')
        value = Evaluator(self.env, self.debug).run(tree)
        if value.kind is not Kind.VOID:
            self.env.persistent.set(LAST_RESULT, value)
        return value

    def calculate_prompt(self, prompt: str) -> CalculationResult:
        result = CalculationResult()
        begin = time.perf_counter()
        with self._lock:
            self.debug(1, f'prompt: {prompt}')
            try:
                value = self.evaluate(prompt)
            except CalcError as e:
                result.dec = result.error = str(e)
                self.debug(1, f'error: {e}')
            else:
                result.success = True
                result.dec, result.hex, result.bin = render(value)
                self.debug(1, f'result: {result.dec}')
        result.elapsed_ms = int((time.perf_counter() - begin) * 1000)
        return result

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None
