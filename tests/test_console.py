import pytest

from services.console import AbortInput, Console
from services.units import Unit


def _console(lines, **kwargs):
    answers = iter(lines)
    out = []

    def reader(prompt):
        try:
            return next(answers)
        except StopIteration:
            raise EOFError

    return Console(reader=reader, writer=out.append, **kwargs), out


def test_ask_text_repeats_on_blank_answer():
    console, out = _console(["", "  Milk  "])
    assert console.ask_text("Name?") == "Milk"
    assert "Input cannot be blank." in out


def test_ask_float_enforces_range_and_accepts_comma():
    console, out = _console(["abc", "-1", "2000", "12,5"])
    assert console.ask_float("Price?", minimum=0, maximum=1000) == pytest.approx(12.5)
    assert "Please enter a number." in out
    assert "The value must be at least 0." in out
    assert "The value must be at most 1000." in out


def test_ask_int_rejects_out_of_range():
    console, out = _console(["two", "0", "3"])
    assert console.ask_int("Pick", minimum=1, maximum=3) == 3
    assert "Please enter a whole number." in out
    assert "Please enter a number in the range 1..3." in out


def test_ask_quantity_reprompts_on_bad_unit():
    console, out = _console(["3 cups", "1.5 dl"])
    assert console.ask_quantity("Amount?") == (1.5, Unit.DL)
    assert any("Unsupported unit 'cups'" in line for line in out)


def test_abort_token_cancels_prompt():
    console, _ = _console(["ABORT"])
    with pytest.raises(AbortInput):
        console.ask_int("Days?")


def test_custom_abort_token():
    console, _ = _console(["stop"], abort_token="Stop")
    with pytest.raises(AbortInput):
        console.ask_text("Name?")


def test_choose_returns_zero_based_index():
    console, out = _console(["2"])
    assert console.choose(["first", "second"]) == 1
    assert out[:2] == ["1: first", "2: second"]


def test_end_of_input_propagates():
    console, _ = _console([])
    with pytest.raises(EOFError):
        console.read_command_line()


def test_ask_float_rejects_non_finite_numbers():
    console, out = _console(["nan", "inf", "1e999", "12"])
    assert console.ask_float("Price?", minimum=0, maximum=1000) == pytest.approx(12)
    assert out.count("Please enter a finite number.") == 3
