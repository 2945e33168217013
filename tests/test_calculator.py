import threading

import pytest

from hexcalc.calculator import Calculator


def test_hex_literal_sum(calc):
    result = calc.calculate_prompt('0x1A + 0x01')
    assert result.success
    assert (result.dec, result.hex, result.bin) == ('27', '0x1B', '0b11011')
    assert result.error is None
    assert isinstance(result.elapsed_ms, int) and result.elapsed_ms >= 0


@pytest.mark.parametrize('n', [0, 1, 42, 255, 65535, 2 ** 40 + 3, 2 ** 63 - 1])
def test_decimal_literal_renders_as_itself(calc, n):
    result = calc.calculate_prompt(str(n))
    assert result.dec == str(n)
    assert result.hex == f'0x{n:X}'
    assert result.bin == f'0b{n:b}'


def test_variables_survive_between_prompts(calc):
    assert calc.calculate_prompt('x = 10').dec == '10'
    assert calc.calculate_prompt('x + 5').dec == '15'


def test_failures_carry_message_and_no_hex(calc):
    result = calc.calculate_prompt('5 / 0')
    assert not result.success
    assert result.dec.startswith('DivisionByZero')
    assert result.error == result.dec
    assert (result.hex, result.bin) == ('', '')

    result = calc.calculate_prompt('(')
    assert not result.success
    assert result.dec == "syntax error at 0: unbalanced '('"

    result = calc.calculate_prompt('foo + 1')
    assert not result.success
    assert result.dec.startswith('UndefinedName')


def test_blank_prompt_is_a_successful_no_op(calc):
    result = calc.calculate_prompt('   ')
    assert result.success
    assert (result.dec, result.hex, result.bin) == ('', '', '')


def test_boolean_and_string_results(calc):
    result = calc.calculate_prompt('3 > 2')
    assert (result.dec, result.hex, result.bin) == ('true', '', '')
    result = calc.calculate_prompt('"v" + 1')
    assert (result.dec, result.hex, result.bin) == ('v1', '', '')


def test_last_result_is_bound_to_ans(calc):
    calc.calculate_prompt('6 * 7')
    # void results leave ans alone
    calc.calculate_prompt('print("hi")')
    assert calc.calculate_prompt('ans').dec == '42'
    assert calc.calculate_prompt('ans + 1').dec == '43'
    assert calc.calculate_prompt('ans').dec == '43'


def test_debug_trace_to_file(system, tmp_path):
    path = tmp_path / 'debug.txt'
    calculator = Calculator(system=system, debug_level=2, debug_file=str(path))
    calculator.calculate_prompt('1 + 2 * x')
    calculator.calculate_prompt('x = 2')
    calculator.close()
    trace = path.read_text()
    assert 'prompt: 1 + 2 * x' in trace
    assert 'tree: (1 + (2 * x))' in trace
    assert 'error: UndefinedName: undefined name x' in trace
    assert 'assign x = 2' in trace
    assert 'result: 2' in trace


def test_debug_trace_to_stderr(system, capsys):
    calculator = Calculator(system=system, debug_level=1)
    calculator.calculate_prompt('2')
    err = capsys.readouterr().err
    assert 'prompt: 2' in err
    assert 'result: 2' in err
    # level 1 does not trace trees
    assert 'tree:' not in err


def test_concurrent_prompts_are_serialized(calc):
    calc.calculate_prompt('n = 0')

    def bump():
        for _ in range(50):
            calc.calculate_prompt('n = n + 1')

    threads = [threading.Thread(target=bump) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert calc.calculate_prompt('n').dec == '200'


def test_runaway_nesting_is_reported_not_raised(calc):
    result = calc.calculate_prompt('(' * 1000 + '1' + ')' * 1000)
    assert not result.success
    assert result.dec == 'syntax error at 0: expression nested too deeply'
    calc.calculate_prompt('f(n) -> 1 + (1 + (1 + (1 + (1 + (1 + (1 + (1 + f(n + 1))))))))')
    result = calc.calculate_prompt('f(0)')
    assert not result.success
    assert result.dec.startswith('RecursionLimit')
