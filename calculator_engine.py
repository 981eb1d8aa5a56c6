"""
Motor de cálculo para la calculadora.

Este módulo provee la clase CalculatorEngine que evalúa expresiones
matemáticas y da formato al resultado. La lógica de análisis vive en
formula_evaluator; aquí solo se decide cómo se muestra el valor y cómo
se reporta un fallo a la capa de presentación.

Contrato de interfaz:
    - evaluate(expression: str) -> str        (lanza CalculationError)
    - display_result(expression: str) -> str  (devuelve "Error" si falla)
"""

from __future__ import annotations

import logging
import math
from decimal import Decimal

from calculator_errors import CalculationError, DomainError, ResultOverflowError
from formula_evaluator import FormulaEvaluator, PythonMathProvider

logger = logging.getLogger(__name__)

RESULT_DECIMALS = 7
ERROR_SENTINEL = "Error"


class CalculatorEngine:
    """Evalúa expresiones matemáticas con funciones científicas."""

    def __init__(self, evaluator: FormulaEvaluator | None = None):
        if evaluator is None:
            evaluator = FormulaEvaluator(PythonMathProvider())
        self._evaluator = evaluator

    # ── Evaluación principal ─────────────────────────────────────

    def evaluate(self, expression: str) -> str:
        """Evalúa la expresión y devuelve el resultado como cadena.

        Raises:
            ExpressionSyntaxError: expresión mal formada.
            DomainError: operación indefinida o división por cero.
            ResultOverflowError: resultado demasiado grande.
        """
        result = self._evaluator.evaluate(expression)
        return self.format_result(result)

    def display_result(self, expression: str) -> str:
        """Como evaluate(), pero colapsa cualquier fallo en ERROR_SENTINEL."""
        try:
            return self.evaluate(expression)
        except CalculationError as exc:
            logger.debug("Fallo de %s al evaluar %r: %s", exc.kind, expression, exc)
            return ERROR_SENTINEL

    # ── Formato del resultado ────────────────────────────────────

    @staticmethod
    def format_result(value: float) -> str:
        if math.isnan(value):
            raise DomainError("Resultado indefinido")
        if math.isinf(value):
            raise ResultOverflowError("Resultado infinito")

        # repr() da los dígitos más cortos que reconstruyen el float.
        text = f"{Decimal(repr(value)):.{RESULT_DECIMALS}f}"
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        if text == "-0":
            return "0"
        return text
