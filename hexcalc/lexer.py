"""Tokenizer for hexcalc prompts.

The terminals are declared as a Lark grammar and only the lexing stage
of a basic Lark lexer is run; building the tree is left to
`hexcalc.generator`, which needs the environment to tell calls from
variables. Terminal priorities give the match order:

1. whitespace, which is skipped;
2. prefixed hex and binary numbers (the digit run may be empty, the
   generator rejects that with a precise position);
3. decimal numbers, identifiers and quoted strings;
4. operators, multi-character ones first, and punctuation;
5. any other single character, emitted as punctuation so the tokenizer
   never fails.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List
import re

from lark import Lark


CALC_GRAMMAR = r"""
    start: _word*

    _word: HEX_NUMBER | BIN_NUMBER | DEC_NUMBER | IDENT | STRING
         | OPERATOR | PUNCT | UNKNOWN

    HEX_NUMBER.4: /0[xX][0-9a-fA-F]*/
    BIN_NUMBER.4: /0[bB][01]*/
    DEC_NUMBER.3: /[0-9]+(?:\.[0-9]*)?/
    IDENT.3: /[A-Za-z_][A-Za-z0-9_]*/
    STRING.3: /"(?:\\.|[^"\\])*"/ | /'(?:\\.|[^'\\])*'/
    OPERATOR.2: /\*\*|<<|>>|<=|>=|==|!=|&&|\|\||->|[-+*\/%<>=!~&|^]/
    PUNCT.2: /[(),]/
    UNKNOWN.1: /./s

    WS.5: /\s+/
    %ignore WS
"""


CALC_LEXER = Lark(
    CALC_GRAMMAR,
    parser='lalr',
    lexer='basic',
)


NUMBER = 'number'
IDENTIFIER = 'identifier'
OPERATOR = 'operator'
PUNCTUATION = 'punctuation'
STRING = 'string'

# terminal name -> (word kind, numeric base)
_TERMINALS = {
    'HEX_NUMBER': (NUMBER, 16),
    'BIN_NUMBER': (NUMBER, 2),
    'DEC_NUMBER': (NUMBER, 10),
    'IDENT': (IDENTIFIER, 10),
    'STRING': (STRING, 10),
    'OPERATOR': (OPERATOR, 10),
    'PUNCT': (PUNCTUATION, 10),
    'UNKNOWN': (PUNCTUATION, 10),
}

_ESCAPE = re.compile(r'\\(["\'\\])')


@dataclass(frozen=True)
class Word:
    kind: str
    text: str
    pos: int
    base: int = 10

    def __str__(self) -> str:
        return self.text


def tokenize(text: str) -> List[Word]:
    """Split a prompt into words.

    Never raises on malformed input: characters that start no known word
    come back as one-character punctuation words.
    """
    words: List[Word] = []
    for token in CALC_LEXER.lex(text):
        kind, base = _TERMINALS[token.type]
        words.append(Word(kind, str(token), token.start_pos, base))
    return words


def string_value(word: Word) -> str:
    """Strip the quotes of a string word and resolve its escapes."""
    return _ESCAPE.sub(r'\1', word.text[1:-1])


def number_digits(word: Word) -> str:
    """Return the digits of a number word without its base prefix."""
    if word.base == 10:
        return word.text
    return word.text[2:]
