"""Composición de expresiones a partir de pulsaciones del teclado.

Reproduce la lógica del teclado de la calculadora sin depender de ningún
toolkit gráfico: cada botón modifica la expresión en curso y el texto que
se muestra en pantalla. La evaluación se delega en CalculatorEngine.
"""

from __future__ import annotations

import logging

from calculator_engine import ERROR_SENTINEL, CalculatorEngine

logger = logging.getLogger(__name__)


class InputComposer:
    """Estado de una sesión de teclado: pantalla, expresión y modo inverso."""

    # ── Definiciones de botones ──────────────────────────────────
    #  Filas tal como aparecen en el teclado, de arriba abajo.
    #  "%" no tiene operador asociado: la expresión que lo contiene da Error.

    KEYPAD = [
        ["inv", "sin", "ln", "cos", "log", "tan"],
        ["√", "xʸ", "x!", "(", ")", "π"],
        ["AC", "⌫", "%", "÷"],
        ["7", "8", "9", "×"],
        ["4", "5", "6", "-"],
        ["1", "2", "3", "+"],
        ["0", ".", "="],
    ]

    INVERSE_NAMES = {"sin": "asin", "cos": "acos", "tan": "atan"}
    INVERSE_LABELS = {
        "sin": "sin⁻¹",
        "cos": "cos⁻¹",
        "tan": "tan⁻¹",
    }
    FUNCTION_BUTTONS = {"sin", "cos", "tan", "asin", "acos", "atan", "log", "ln", "√"}

    CLEAR = "AC"
    BACKSPACE = "⌫"
    EQUALS = "="
    INVERSE = "inv"
    FACTORIAL = "x!"
    RECIPROCAL = "1/x"
    POWER = "xʸ"

    def __init__(self, engine: CalculatorEngine | None = None):
        self.engine = engine if engine is not None else CalculatorEngine()
        self.display = "0"
        self.expression = ""
        self.inverse = False

    def label(self, button: str) -> str:
        """Texto visible del botón según el modo inverso."""
        if self.inverse and button in self.INVERSE_LABELS:
            return self.INVERSE_LABELS[button]
        return button

    def press(self, button: str) -> str:
        """Aplica una pulsación y devuelve el texto que queda en pantalla."""
        if self.inverse:
            button = self.INVERSE_NAMES.get(button, button)

        if button == self.CLEAR:
            self.expression = ""
            self.display = "0"
        elif button == self.BACKSPACE:
            if self.expression:
                self.expression = self.expression[:-1]
                self.display = self.expression or "0"
        elif button == self.EQUALS:
            self._calculate()
        elif button == self.INVERSE:
            self.inverse = not self.inverse
        elif button in self.FUNCTION_BUTTONS:
            self._start_or_append(f"{button}(")
        elif button == self.FACTORIAL:
            self._append("fact(")
        elif button == self.RECIPROCAL:
            if self._is_blank():
                self._set_expression("1/")
            else:
                self._set_expression(f"1/({self.expression})")
        elif button == self.POWER:
            self._append("^(")
        elif self.display == "0":
            self._set_expression(button)
        else:
            self._append(button)

        return self.display

    def press_many(self, buttons) -> str:
        for button in buttons:
            self.press(button)
        return self.display

    # ── Acciones ─────────────────────────────────────────────────

    def _calculate(self):
        if not self.expression:
            return
        result = self.engine.display_result(self.expression)
        logger.debug("%r = %r", self.expression, result)
        self.display = result
        self.expression = result if result != ERROR_SENTINEL else ""

    def _is_blank(self) -> bool:
        return self.expression in ("", "0", ERROR_SENTINEL)

    def _start_or_append(self, text: str):
        if self._is_blank():
            self._set_expression(text)
        else:
            self._append(text)

    def _append(self, text: str):
        self._set_expression(self.expression + text)

    def _set_expression(self, text: str):
        self.expression = text
        self.display = text
