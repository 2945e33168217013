"""CLI entry point for the hexcalc calculator.

Usage:
    python -m hexcalc [-v|-vv|-vvv] [--storage DIR] [--time]
    python -m hexcalc [-v...] -e EXPR [-e EXPR ...]

Options:
  -v            Increase debug verbosity (can be repeated)
  --debug-file  Write the debug trace to this file instead of stderr
  --storage     Directory holding environments written by save(name)
  -e, --expr    Evaluate the expression and exit (can be repeated)
  --time        Show the calculation time of every prompt

Without -e the calculator reads prompts from standard input until end of
file or `exit`. Variables and functions persist from one prompt to the
next.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .calculator import Calculator, CalculationResult
from .std.system import FileSystem


def format_result(result: CalculationResult, show_time: bool = False) -> str:
    if not result.success:
        lines = [f"<: error occurred: {result.dec}"]
    else:
        lines = []
        if result.dec:
            lines.append(f"<: {result.dec}")
        if result.hex:
            lines.append(f"   {result.hex}")
        if result.bin:
            lines.append(f"   {result.bin}")
    if show_time:
        lines.append(f"   time: {result.elapsed_ms} ms")
    return '\n'.join(lines)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="hexcalc expression calculator")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--debug-file', metavar='FILE', help='write the debug trace to FILE')
    parser.add_argument('--storage', metavar='DIR', default=str(Path.home() / '.hexcalc'),
                        help='directory for environments written by save()')
    parser.add_argument('-e', '--expr', action='append', default=[], metavar='EXPR',
                        help='evaluate EXPR and exit (can be repeated)')
    parser.add_argument('--time', action='store_true', help='show calculation time')
    args = parser.parse_args(argv)

    calculator = Calculator(
        system=FileSystem(args.storage),
        debug_level=args.v,
        debug_file=args.debug_file,
    )
    try:
        # One-shot mode
        if args.expr:
            failed = False
            for expr in args.expr:
                result = calculator.calculate_prompt(expr)
                text = format_result(result, args.time)
                if text:
                    print(text)
                failed = failed or not result.success
            if failed:
                sys.exit(1)
            return

        # Interactive mode
        while True:
            try:
                prompt = input('>: ')
            except EOFError:
                print()
                break
            if prompt.strip() == 'exit':
                break
            text = format_result(calculator.calculate_prompt(prompt), args.time)
            if text:
                print(text)
    finally:
        calculator.close()


if __name__ == '__main__':
    main()
