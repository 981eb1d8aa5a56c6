"""Comprobaciones de regresión del motor contra una referencia mpmath."""

from __future__ import annotations

import sys

from calculator_engine import ERROR_SENTINEL, CalculatorEngine
from calculator_errors import CalculationError
from formula_evaluator import FormulaEvaluator

try:
	from mpmath import mp
except ImportError as exc:  # pragma: no cover
	raise ImportError(
		"mpmath no está instalado. Instala con: pip install mpmath"
	) from exc


REFERENCE_DIGITS = 50
TOLERANCE = "5e-8"


# (expresión, valor de referencia calculado con mpmath)
REFERENCE_CASES = [
	("sin(1)", lambda: mp.sin(1)),
	("cos(2)", lambda: mp.cos(2)),
	("tan(0.5)", lambda: mp.tan(mp.mpf("0.5"))),
	("asin(0.5)", lambda: mp.asin(mp.mpf("0.5"))),
	("acos(-0.3)", lambda: mp.acos(mp.mpf("-0.3"))),
	("atan(10)", lambda: mp.atan(10)),
	("log(2)", lambda: mp.log10(2)),
	("ln(10)", lambda: mp.log(10)),
	("√(2)", lambda: mp.sqrt(2)),
	("2^0.5", lambda: mp.power(2, mp.mpf("0.5"))),
	("3+4×sin(5)", lambda: 3 + 4 * mp.sin(5)),
	("π÷4", lambda: mp.pi / 4),
	("sin(π÷6)", lambda: mp.sin(mp.pi / 6)),
	("e^2", lambda: mp.e ** 2),
	("fact(10)÷fact(8)", lambda: mp.factorial(10) / mp.factorial(8)),
]

EXACT_CASES = [
	("2+3*4", "14"),
	("2^3^2", "512"),
	("-2^2", "-4"),
	("2*-3", "-6"),
	("2^-1", "0.5"),
	("(2+3)*4", "20"),
	("10/4", "2.5"),
	("1/3", "0.3333333"),
	("2/3", "0.6666667"),
	("sqrt(4)", "2"),
	("fact(5)", "120"),
	("fact(0)", "1"),
	("ln(1)", "0"),
	("log(1000)", "3"),
	("7-10", "-3"),
	("0.1+0.2", "0.3"),
	("-0.00000001", "0"),
	("5/0", ERROR_SENTINEL),
	("sqrt(-4)", ERROR_SENTINEL),
	("fact(-1)", ERROR_SENTINEL),
	("fact(2.5)", ERROR_SENTINEL),
	("fact(171)", ERROR_SENTINEL),
	("log(0)", ERROR_SENTINEL),
	("ln(-1)", ERROR_SENTINEL),
	("asin(2)", ERROR_SENTINEL),
	("(-8)^(1/3)", ERROR_SENTINEL),
	("(2+3", ERROR_SENTINEL),
	("2+3)", ERROR_SENTINEL),
	("2(3+4)", ERROR_SENTINEL),
	("sin 1", ERROR_SENTINEL),
	("1..2", ERROR_SENTINEL),
	("2+", ERROR_SENTINEL),
	("", ERROR_SENTINEL),
	("7%3", ERROR_SENTINEL),
]


def _close_to_reference(actual: str, reference) -> bool:
	if actual == ERROR_SENTINEL:
		return False
	return abs(mp.mpf(actual) - reference) <= mp.mpf(TOLERANCE)


def run_regressions():
	engine = CalculatorEngine()
	checks = []
	expected_actual = []

	for expr, expected in EXACT_CASES:
		actual = engine.display_result(expr)
		checks.append((f"{expr!r} -> {expected}", actual == expected))
		expected_actual.append((expr, expected, actual))

	with mp.workdps(REFERENCE_DIGITS):
		for expr, reference in REFERENCE_CASES:
			expected = reference()
			actual = engine.display_result(expr)
			checks.append((
				f"{expr} matches mpmath within {TOLERANCE}",
				_close_to_reference(actual, expected),
			))
			expected_actual.append((expr, mp.nstr(expected, 15), actual))

	for expr, _ in EXACT_CASES + REFERENCE_CASES:
		first = engine.display_result(expr)
		if first == ERROR_SENTINEL:
			continue
		checks.append((
			f"{expr} result re-evaluates to itself",
			engine.display_result(first) == first,
		))

	failed = [name for name, ok in checks if not ok]
	for name, ok in checks:
		print(f"{name}: {'OK' if ok else 'FAIL'}")

	print("\nExpected vs Actual:")
	for label, expected, actual in expected_actual:
		print(f"- {label}")
		print(f"  expected: {expected}")
		print(f"  actual:   {actual}")

	if failed:
		print("\nFAILED CHECKS:")
		for name in failed:
			print(f"- {name}")
		raise SystemExit(1)

	print("\nAll regression checks passed.")


def inspect_expression(expr: str):
	evaluator = FormulaEvaluator()
	normalized = evaluator.normalize(expr)
	print(f"expression: {expr!r}")
	print(f"normalized: {normalized!r}")
	try:
		tokens = evaluator.tokenize(normalized)
		for tok in tokens:
			print(f"  {tok.position:>3} {tok.kind:<9} {tok.text}")
		tree = evaluator.parse(tokens)
		print(f"tree: {tree}")
		print(f"result: {CalculatorEngine.format_result(evaluator.evaluate_tree(tree))}")
	except CalculationError as exc:
		print(f"{type(exc).__name__} ({exc.kind}): {exc}")


if __name__ == "__main__":
	# Uso rápido:
	#   python regression_checks.py
	#   python regression_checks.py --inspect "3+4×sin(5)"
	if "--inspect" in sys.argv:
		try:
			expr = sys.argv[sys.argv.index("--inspect") + 1]
		except (ValueError, IndexError):
			raise SystemExit("Missing expression after --inspect")
		inspect_expression(expr)
	else:
		run_regressions()
