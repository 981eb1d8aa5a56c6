"""Jerarquía de errores del evaluador de expresiones.

Las tres familias (sintaxis, dominio y desbordamiento) heredan además de la
excepción nativa equivalente, para que el código que ya captura
``ValueError``, ``ZeroDivisionError`` u ``OverflowError`` siga funcionando.
"""

from __future__ import annotations


class CalculationError(Exception):
    """Base de todos los fallos de evaluación."""

    kind = "error"


class ExpressionSyntaxError(CalculationError, ValueError):
    """Expresión mal formada: token desconocido, paréntesis, operador suelto."""

    kind = "syntax"

    def __init__(self, message: str, position: int | None = None):
        super().__init__(message)
        self.position = position


class DomainError(CalculationError, ValueError):
    """Operación bien formada pero indefinida en los reales."""

    kind = "domain"


class DivisionByZeroError(DomainError, ZeroDivisionError):
    pass


class ResultOverflowError(CalculationError, OverflowError):
    """El resultado excede el rango representable."""

    kind = "overflow"
