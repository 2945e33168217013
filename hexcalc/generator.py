"""Expression tree generator for hexcalc.

`generate` turns the words of one prompt into a tree of `hexcalc.ast`
nodes. It is a recursive-descent parser with one method per precedence
level, lowest first:

    definition   name(p, ...) -> expr        (whole prompt only)
    assignment   name = expr                 (right associative)
    ||  &&  |  ^  &  == !=  < > <= >=  << >>  + -  * / %
    unary        - ! ~                       (right associative)
    power        **                          (right associative)
    primary      literal, name, call, ( expr )

The environment is consulted to make sure every call names a callable.
Nothing here mutates the environment.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Set, Union

from .ast import Assign, BinaryOp, Call, FuncDef, Ident, Literal, Node, NoOp, UnaryOp
from .environment import Environment
from .errors import GenerateError
from .lexer import IDENTIFIER, NUMBER, OPERATOR, PUNCTUATION, STRING, Word, number_digits, string_value
from .types import Value, UINT64_MASK


BASE_NAMES = {16: 'hexadecimal', 2: 'binary', 10: 'decimal'}


class Generator:
    def __init__(self, words: Sequence[Word], env: Environment):
        self.words = list(words)
        self.env = env
        self.pos = 0
        # names callable before they exist: the function being defined
        self.pending: Set[str] = set()

    def peek(self, offset: int = 0) -> Optional[Word]:
        if self.pos + offset < len(self.words):
            return self.words[self.pos + offset]
        return None

    def end_pos(self) -> int:
        if not self.words:
            return 0
        last = self.words[-1]
        return last.pos + len(last.text)

    def match(self, expected: Union[str, List[str]]) -> bool:
        word = self.peek()
        if word is None or word.kind == STRING:
            return False
        if isinstance(expected, list):
            return word.text in expected
        return word.text == expected

    def consume(self, expected: str) -> Word:
        word = self.peek()
        if word is None:
            raise GenerateError(f"unexpected end of input, expected '{expected}'", self.end_pos())
        if word.text != expected or word.kind == STRING:
            raise GenerateError(f"expected '{expected}', got '{word.text}'", word.pos)
        self.pos += 1
        return word

    def advance(self) -> Word:
        word = self.words[self.pos]
        self.pos += 1
        return word

    def generate(self) -> Node:
        if not self.words:
            return NoOp()
        try:
            if self.definition_ahead():
                node = self.parse_definition()
            else:
                node = self.parse_expression()
        except RecursionError:
            raise GenerateError('expression nested too deeply', self.words[0].pos) from None
        word = self.peek()
        if word is not None:
            raise self.unexpected(word)
        return node

    def unexpected(self, word: Word) -> GenerateError:
        if word.text == ')':
            return GenerateError("unbalanced ')'", word.pos)
        if word.kind == PUNCTUATION and word.text in ('"', "'"):
            return GenerateError('unterminated string literal', word.pos)
        if word.kind == PUNCTUATION and word.text not in ('(', ','):
            return GenerateError(f"unknown symbol '{word.text}'", word.pos)
        if word.kind == OPERATOR:
            return GenerateError(f"unexpected operator '{word.text}'", word.pos)
        return GenerateError(f"unexpected {word.kind} '{word.text}'", word.pos)

    # name ( [IDENT (, IDENT)*] ) ->
    def definition_ahead(self) -> bool:
        if self.peek() is None or self.peek().kind != IDENTIFIER:
            return False
        if not self.match_at(1, '('):
            return False
        i = 2
        if self.match_at(i, ')'):
            return self.match_at(i + 1, '->')
        while True:
            word = self.peek(i)
            if word is None or word.kind != IDENTIFIER:
                return False
            i += 1
            if self.match_at(i, ')'):
                return self.match_at(i + 1, '->')
            if not self.match_at(i, ','):
                return False
            i += 1

    def match_at(self, offset: int, text: str) -> bool:
        word = self.peek(offset)
        return word is not None and word.kind != STRING and word.text == text

    def parse_definition(self) -> FuncDef:
        name_word = self.advance()
        name = name_word.text
        self.consume('(')
        params: List[str] = []
        if not self.match(')'):
            params.append(self.advance().text)
            while self.match(','):
                self.consume(',')
                param = self.advance()
                if param.text in params:
                    raise GenerateError(f"duplicate parameter '{param.text}'", param.pos)
                params.append(param.text)
        self.consume(')')
        arrow = self.consume('->')
        if self.peek() is None:
            raise GenerateError("missing function body after '->'", arrow.pos)
        self.pending.add(name)
        try:
            body = self.parse_expression()
        finally:
            self.pending.discard(name)
        return FuncDef(name, tuple(params), body)

    def parse_expression(self) -> Node:
        return self.parse_assign()

    # assignment: logic_or ('=' assign)?
    def parse_assign(self) -> Node:
        start = self.pos
        left = self.parse_logic_or()
        if self.match('='):
            op_word = self.consume('=')
            target = self.words[start]
            if self.pos - 1 != start + 1 or target.kind != IDENTIFIER:
                raise GenerateError('left side of assignment must be a name', target.pos)
            right = self.parse_operand(op_word, self.parse_assign)
            return Assign(left.name, right)
        return left

    def parse_operand(self, op_word: Word, parse) -> Node:
        # right-hand operand of a binary operator
        word = self.peek()
        if word is None:
            raise GenerateError(f"missing right operand after '{op_word.text}'", op_word.pos)
        if word.kind == OPERATOR and word.text not in ('-', '!', '~'):
            raise GenerateError(f"unexpected operator '{word.text}' after '{op_word.text}'", word.pos)
        return parse()

    def parse_binary(self, ops: List[str], parse_next) -> Node:
        node = parse_next()
        while self.match(ops):
            op_word = self.advance()
            right = self.parse_operand(op_word, parse_next)
            node = BinaryOp(op_word.text, node, right)
        return node

    def parse_logic_or(self) -> Node:
        return self.parse_binary(['||'], self.parse_logic_and)

    def parse_logic_and(self) -> Node:
        return self.parse_binary(['&&'], self.parse_bit_or)

    def parse_bit_or(self) -> Node:
        return self.parse_binary(['|'], self.parse_bit_xor)

    def parse_bit_xor(self) -> Node:
        return self.parse_binary(['^'], self.parse_bit_and)

    def parse_bit_and(self) -> Node:
        return self.parse_binary(['&'], self.parse_equality)

    def parse_equality(self) -> Node:
        return self.parse_binary(['==', '!='], self.parse_comparison)

    def parse_comparison(self) -> Node:
        return self.parse_binary(['<', '>', '<=', '>='], self.parse_shift)

    def parse_shift(self) -> Node:
        return self.parse_binary(['<<', '>>'], self.parse_term)

    def parse_term(self) -> Node:
        return self.parse_binary(['+', '-'], self.parse_factor)

    def parse_factor(self) -> Node:
        return self.parse_binary(['*', '/', '%'], self.parse_unary)

    def parse_unary(self) -> Node:
        if self.match(['-', '!', '~']):
            op_word = self.advance()
            if self.peek() is None:
                raise GenerateError(f"missing operand after '{op_word.text}'", op_word.pos)
            operand = self.parse_unary()
            return UnaryOp(op_word.text, operand)
        return self.parse_power()

    # power binds tighter than unary minus: -2 ** 2 == -(2 ** 2)
    def parse_power(self) -> Node:
        base = self.parse_primary()
        if self.match('**'):
            op_word = self.advance()
            exponent = self.parse_operand(op_word, self.parse_unary)
            return BinaryOp('**', base, exponent)
        return base

    def parse_primary(self) -> Node:
        word = self.peek()
        if word is None:
            raise GenerateError('unexpected end of input in expression', self.end_pos())
        if word.kind == NUMBER:
            self.advance()
            return Literal(self.number_value(word))
        if word.kind == STRING:
            self.advance()
            return Literal(Value.string(string_value(word)))
        if word.kind == IDENTIFIER:
            self.advance()
            if self.match('('):
                return self.parse_call(word)
            return Ident(word.text)
        if word.text == '(':
            open_word = self.advance()
            if self.peek() is None:
                raise GenerateError("unbalanced '('", open_word.pos)
            if self.match(')'):
                raise GenerateError("empty parentheses", open_word.pos)
            expr = self.parse_expression()
            if self.peek() is None:
                raise GenerateError("unbalanced '('", open_word.pos)
            self.consume(')')
            return expr
        raise self.unexpected(word)

    def parse_call(self, name_word: Word) -> Call:
        name = name_word.text
        if name not in self.pending:
            binding = self.env.lookup(name)
            if binding is None:
                raise GenerateError(f"call to undefined function '{name}'", name_word.pos)
            if not self.env.is_callable(name):
                raise GenerateError(f"'{name}' is not a function", name_word.pos)
        open_word = self.consume('(')
        if self.peek() is None:
            raise GenerateError("unbalanced '('", open_word.pos)
        args: List[Node] = []
        if not self.match(')'):
            args.append(self.parse_expression())
            while self.match(','):
                self.consume(',')
                args.append(self.parse_expression())
        if self.peek() is None:
            raise GenerateError("unbalanced '('", open_word.pos)
        self.consume(')')
        return Call(name, tuple(args))

    def number_value(self, word: Word) -> Value:
        digits = number_digits(word)
        if not digits:
            raise GenerateError(f"empty {BASE_NAMES[word.base]} literal", word.pos)
        if word.base == 10 and '.' in digits:
            return Value.floating(float(digits))
        n = int(digits, word.base)
        if n > UINT64_MASK:
            raise GenerateError(f"literal '{word.text}' does not fit in 64 bits", word.pos)
        return Value.integer(n)


def generate(words: Sequence[Word], env: Environment) -> Node:
    """Build the expression tree for one prompt.

    Raises GenerateError for malformed input. An empty word list yields a
    NoOp tree.
    """
    return Generator(words, env).generate()
