import pytest

from hexcalc.ast import Assign, BinaryOp, Call, FuncDef, Ident, Literal, NoOp, UnaryOp
from hexcalc.environment import Environment
from hexcalc.errors import GenerateError
from hexcalc.generator import generate
from hexcalc.lexer import tokenize
from hexcalc.std import populate_standard_environment
from hexcalc.types import Value


def lit(n):
    return Literal(Value.integer(n))


@pytest.fixture
def env():
    return populate_standard_environment(Environment())


def build(text, env):
    return generate(tokenize(text), env)


def test_multiplication_binds_tighter_than_addition(env):
    assert build('2 + 3 * 4', env) == BinaryOp('+', lit(2), BinaryOp('*', lit(3), lit(4)))
    assert build('(2 + 3) * 4', env) == BinaryOp('*', BinaryOp('+', lit(2), lit(3)), lit(4))


def test_binary_operators_are_left_associative(env):
    assert build('1 - 2 - 3', env) == BinaryOp('-', BinaryOp('-', lit(1), lit(2)), lit(3))


def test_bitwise_precedence_ladder(env):
    # | < ^ < & < == < shift < +
    tree = build('1 | 2 ^ 3 & 4 == 5 << 6 + 7', env)
    assert tree == BinaryOp('|', lit(1), BinaryOp('^', lit(2), BinaryOp('&', lit(3), BinaryOp(
        '==', lit(4), BinaryOp('<<', lit(5), BinaryOp('+', lit(6), lit(7)))))))


def test_logical_operators_sit_below_bitwise(env):
    tree = build('a || b && c | d', env)
    assert tree == BinaryOp('||', Ident('a'), BinaryOp('&&', Ident('b'), BinaryOp('|', Ident('c'), Ident('d'))))


def test_unary_and_power_associativity(env):
    assert build('-2 ** 2', env) == UnaryOp('-', BinaryOp('**', lit(2), lit(2)))
    assert build('2 ** 3 ** 2', env) == BinaryOp('**', lit(2), BinaryOp('**', lit(3), lit(2)))
    assert build('!~x', env) == UnaryOp('!', UnaryOp('~', Ident('x')))
    assert build('2 * -3', env) == BinaryOp('*', lit(2), UnaryOp('-', lit(3)))


def test_assignment_is_right_associative(env):
    assert build('a = b = 3', env) == Assign('a', Assign('b', lit(3)))


def test_generation_does_not_touch_environment(env):
    before = dict(env.persistent.values)
    build('x = 1', env)
    assert env.persistent.values == before


def test_calls_and_literals(env):
    tree = build('max(1, 2.5, "s")', env)
    assert tree == Call('max', (lit(1), Literal(Value.floating(2.5)), Literal(Value.string('s'))))
    assert build('0xFFFFFFFFFFFFFFFF', env) == lit(-1)


def test_function_definition(env):
    assert build('f(x, y) -> x * y', env) == FuncDef(
        'f', ('x', 'y'), BinaryOp('*', Ident('x'), Ident('y')))
    # the function being defined may call itself
    assert build('g(n) -> g(n - 1)', env) == FuncDef(
        'g', ('n',), Call('g', (BinaryOp('-', Ident('n'), lit(1)),)))


def test_empty_input_is_a_no_op(env):
    assert build('', env) == NoOp()
    assert build('   ', env) == NoOp()


@pytest.mark.parametrize('text, pos, message', [
    ('(', 0, "unbalanced '('"),
    ('(1 + 2', 0, "unbalanced '('"),
    ('2 + 3)', 5, "unbalanced ')'"),
    ('1 +', 2, "missing right operand after '+'"),
    ('1 + * 2', 4, "unexpected operator '*' after '+'"),
    ('* 2', 0, "unexpected operator '*'"),
    ('1 2', 2, "unexpected number '2'"),
    ('1 $ 2', 2, "unknown symbol '$'"),
    ('"abc', 0, 'unterminated string literal'),
    ('0x', 0, 'empty hexadecimal literal'),
    ('0b', 0, 'empty binary literal'),
    ('0x1FFFFFFFFFFFFFFFF', 0, "literal '0x1FFFFFFFFFFFFFFFF' does not fit in 64 bits"),
    ('foo(1)', 0, "call to undefined function 'foo'"),
    ('pi(1)', 0, "'pi' is not a function"),
    ('(x) = 3', 0, 'left side of assignment must be a name'),
    ('1 = 2', 0, 'left side of assignment must be a name'),
    ('f(x, x) -> x', 5, "duplicate parameter 'x'"),
    ('f(x) ->', 5, "missing function body after '->'"),
])
def test_syntax_errors_report_position(env, text, pos, message):
    with pytest.raises(GenerateError) as excinfo:
        build(text, env)
    assert excinfo.value.pos == pos
    assert excinfo.value.message == message


def test_deep_nesting_is_a_syntax_error(env):
    assert build('(' * 10 + '1' + ')' * 10, env) == lit(1)
    with pytest.raises(GenerateError) as excinfo:
        build('(' * 1000 + '1' + ')' * 1000, env)
    assert excinfo.value.pos == 0
    assert excinfo.value.message == 'expression nested too deeply'
