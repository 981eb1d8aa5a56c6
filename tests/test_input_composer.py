"""Tests de la composición de expresiones desde el teclado."""

import pytest

from calculator_engine import ERROR_SENTINEL
from input_composer import InputComposer
import main


@pytest.fixture
def composer():
    return InputComposer()


def test_initial_state(composer):
    assert composer.display == "0"
    assert composer.expression == ""
    assert composer.inverse is False


def test_simple_calculation(composer):
    assert composer.press_many(["7", "×", "6", "="]) == "42"
    assert composer.expression == "42"


def test_first_digit_replaces_zero(composer):
    composer.press_many(["0", "5"])
    assert composer.expression == "5"


def test_result_is_reused_by_next_expression(composer):
    composer.press_many(["2", "+", "2", "="])
    assert composer.press_many(["×", "3", "="]) == "12"


def test_error_clears_expression(composer):
    assert composer.press_many(["5", "÷", "0", "="]) == ERROR_SENTINEL
    assert composer.expression == ""
    composer.press("3")
    assert composer.display == "3"


def test_equals_on_empty_expression_does_nothing(composer):
    assert composer.press("=") == "0"


def test_clear(composer):
    composer.press_many(["1", "2", "+"])
    assert composer.press("AC") == "0"
    assert composer.expression == ""


def test_backspace(composer):
    composer.press_many(["1", "2", "⌫"])
    assert composer.expression == "1"
    assert composer.press("⌫") == "0"
    assert composer.expression == ""
    assert composer.press("⌫") == "0"


def test_function_buttons_open_parenthesis(composer):
    assert composer.press("sin") == "sin("
    assert composer.press_many(["0", ")", "="]) == "0"


def test_function_button_after_result_appends(composer):
    composer.press_many(["2", "="])
    assert composer.press("√") == "2√("


def test_inverse_mode_renames_trig(composer):
    composer.press("inv")
    assert composer.label("sin") == "sin⁻¹"
    assert composer.label("log") == "log"
    assert composer.press_many(["sin", "1", ")", "="]) == "1.5707963"


def test_inverse_mode_toggles_back(composer):
    composer.press_many(["inv", "inv"])
    assert composer.label("cos") == "cos"
    assert composer.press("cos") == "cos("


def test_square_root(composer):
    assert composer.press_many(["√", "1", "6", ")", "="]) == "4"


def test_factorial(composer):
    assert composer.press("x!") == "fact("
    assert composer.press_many(["5", ")", "="]) == "120"


def test_reciprocal(composer):
    assert composer.press_many(["4", "1/x"]) == "1/(4)"
    assert composer.press("=") == "0.25"


def test_reciprocal_on_blank_expression(composer):
    assert composer.press("1/x") == "1/"
    assert composer.press_many(["8", "="]) == "0.125"


def test_power(composer):
    assert composer.press_many(["2", "xʸ", "1", "0", ")", "="]) == "1024"


def test_pi(composer):
    assert composer.press_many(["2", "×", "π", "="]) == "6.2831853"


def test_percent_is_not_an_operator(composer):
    assert composer.press_many(["7", "%", "3", "="]) == ERROR_SENTINEL


def test_keypad_buttons_are_all_handled(composer):
    for row in InputComposer.KEYPAD:
        for button in row:
            assert isinstance(composer.press(button), str)
    # tras "AC" queda "%÷789×456-123+0.", que no es una expresión válida
    assert composer.display == ERROR_SENTINEL
    assert composer.expression == ""
    assert composer.inverse is True


def test_main_evaluates_arguments(capsys):
    main.main(["2+3", "5/0"])
    assert capsys.readouterr().out.splitlines() == ["5", "Error"]


def test_main_replays_keys(capsys):
    main.main(["--keys", "7", "×", "6", "="])
    assert capsys.readouterr().out.strip() == "42"


def test_main_interactive(monkeypatch, capsys):
    lines = iter(["1+1", "", "sqrt(9)", "quit"])
    monkeypatch.setattr("builtins.input", lambda _prompt: next(lines))
    main.main([])
    assert capsys.readouterr().out.splitlines() == ["2", "3"]
