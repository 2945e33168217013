import math

import pytest

from hexcalc.errors import EvalError, ErrorKind
from hexcalc.types import Domain, Value, format_float, render, to_number


def test_to_number_domains():
    assert to_number(Value.integer(-1), Domain.UINT64) == 2 ** 64 - 1
    assert to_number(Value.integer(-1), Domain.INT64) == -1
    assert to_number(Value.boolean(True)) == 1
    assert to_number(Value.floating(3.9)) == 3
    assert to_number(Value.floating(-3.9)) == -3
    assert to_number(Value.integer(2), Domain.FLOAT64) == 2.0


@pytest.mark.parametrize('value', [
    Value.string('12'),
    Value.void(),
    Value.floating(math.nan),
    Value.floating(math.inf),
])
def test_to_number_refuses_non_numbers(value):
    with pytest.raises(EvalError) as excinfo:
        to_number(value, Domain.UINT64)
    assert excinfo.value.kind is ErrorKind.TYPE_MISMATCH


def test_render_numbers():
    assert render(Value.integer(27)) == ('27', '0x1B', '0b11011')
    assert render(Value.integer(-1)) == ('-1', '0xFFFFFFFFFFFFFFFF', '0b' + '1' * 64)
    assert render(Value.floating(2.5)) == ('2.5', '0x2', '0b10')
    assert render(Value.integer(0)) == ('0', '0x0', '0b0')


def test_render_non_numbers_has_no_hex_or_binary():
    assert render(Value.boolean(True)) == ('true', '', '')
    assert render(Value.boolean(False)) == ('false', '', '')
    assert render(Value.string('hi')) == ('hi', '', '')
    assert render(Value.void()) == ('', '', '')
    assert render(Value.floating(math.nan)) == ('nan', '', '')


def test_float_text():
    assert format_float(3.0) == '3'
    assert format_float(0.1) == '0.1'
    assert format_float(-math.inf) == '-inf'
    assert format_float(1e21) == '1e+21'


def test_integers_wrap_to_64_bits():
    assert Value.integer(2 ** 63) == Value.integer(-(2 ** 63))
    assert Value.integer(2 ** 64 + 5) == Value.integer(5)
