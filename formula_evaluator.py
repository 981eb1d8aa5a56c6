"""Normalización, análisis y evaluación de expresiones de la calculadora.

La evaluación recorre cuatro etapas puras, sin estado compartido entre
llamadas::

    texto -> normalize() -> tokenize() -> parse() -> evaluate_tree() -> float

Cualquier fallo corta la cadena con una excepción de ``calculator_errors``.
"""

from __future__ import annotations

import logging
import math
import re
from typing import NamedTuple, Union

from calculator_errors import (
    CalculationError,
    DivisionByZeroError,
    DomainError,
    ExpressionSyntaxError,
    ResultOverflowError,
)

logger = logging.getLogger(__name__)


# ── Tokens ───────────────────────────────────────────────────────

NUMBER = "number"
OPERATOR = "operator"
FUNCTION = "function"
CONSTANT = "constant"
LPAREN = "lparen"
RPAREN = "rparen"


class Token(NamedTuple):
    kind: str
    text: str
    position: int
    value: Union[float, None] = None


# ── Árbol de evaluación ──────────────────────────────────────────


class Number(NamedTuple):
    value: float


class UnaryOp(NamedTuple):
    op: str
    operand: "Node"


class BinaryOp(NamedTuple):
    op: str
    left: "Node"
    right: "Node"


class FunctionCall(NamedTuple):
    name: str
    argument: "Node"


Node = Union[Number, UnaryOp, BinaryOp, FunctionCall]


# símbolo -> (precedencia, asociatividad)
OPERATORS = {
    "+": (1, "left"),
    "-": (1, "left"),
    "*": (2, "left"),
    "/": (2, "left"),
    "^": (3, "right"),
}

# El signo unario solo cede ante '^': -2^2 == -(2^2), 2*-3 == 2*(-3).
UNARY_OPERAND_PRECEDENCE = OPERATORS["^"][0]


class PythonMathProvider:
    """Provee funciones y constantes matemáticas con validación de dominio.

    Los ángulos se expresan siempre en radianes.
    """

    def build_namespace(self) -> dict:
        return {
            "sin": math.sin,
            "cos": math.cos,
            "tan": math.tan,
            "asin": self._inv_trig(math.asin, "asin"),
            "acos": self._inv_trig(math.acos, "acos"),
            "atan": math.atan,
            "log": self._logarithm(math.log10, "log"),
            "ln": self._logarithm(math.log, "ln"),
            "sqrt": self._sqrt,
            "fact": self._factorial,
        }

    def build_constants(self) -> dict:
        return {
            "pi": math.pi,
            "e": math.e,
        }

    @staticmethod
    def _inv_trig(fn, name: str):
        def wrapped(x):
            if not -1.0 <= x <= 1.0:
                raise DomainError(f"{name} requiere un argumento en [-1, 1]")
            return fn(x)

        return wrapped

    @staticmethod
    def _logarithm(fn, name: str):
        def wrapped(x):
            if x <= 0:
                raise DomainError(f"{name} requiere un argumento positivo")
            return fn(x)

        return wrapped

    @staticmethod
    def _sqrt(x):
        if x < 0:
            raise DomainError("sqrt no admite argumentos negativos")
        return math.sqrt(x)

    @staticmethod
    def _factorial(x):
        if x < 0 or not float(x).is_integer():
            raise DomainError("factorial requiere entero no negativo")

        n = int(x)
        result = 1.0
        for i in range(2, n + 1):
            result *= i
            if math.isinf(result):
                raise ResultOverflowError(f"{n}! excede el rango representable")
        return result


class ExpressionParser:
    """Construye el árbol de una secuencia de tokens por escalada de precedencia.

    Cada instancia analiza una única secuencia; no se reutiliza.
    """

    def __init__(self, tokens: list[Token]):
        self._tokens = tokens
        self._index = 0

    def parse(self) -> Node:
        if not self._tokens:
            raise ExpressionSyntaxError("Expresión vacía")

        tree = self._parse_expression(1)

        token = self._peek()
        if token is not None:
            if token.kind == RPAREN:
                raise ExpressionSyntaxError(
                    f"')' sin '(' correspondiente en la posición {token.position}",
                    token.position,
                )
            raise ExpressionSyntaxError(
                f"Token inesperado '{token.text}' en la posición {token.position}",
                token.position,
            )
        return tree

    def _peek(self) -> Token | None:
        if self._index < len(self._tokens):
            return self._tokens[self._index]
        return None

    def _advance(self) -> Token | None:
        token = self._peek()
        if token is not None:
            self._index += 1
        return token

    def _parse_expression(self, min_precedence: int) -> Node:
        left = self._parse_operand()

        while True:
            token = self._peek()
            if token is None or token.kind != OPERATOR:
                return left

            precedence, associativity = OPERATORS[token.text]
            if precedence < min_precedence:
                return left

            self._index += 1
            if associativity == "left":
                right = self._parse_expression(precedence + 1)
            else:
                right = self._parse_expression(precedence)
            left = BinaryOp(token.text, left, right)

    def _parse_operand(self) -> Node:
        token = self._advance()
        if token is None:
            raise ExpressionSyntaxError("Falta un operando al final de la expresión")

        if token.kind == OPERATOR and token.text in ("+", "-"):
            return UnaryOp(token.text, self._parse_expression(UNARY_OPERAND_PRECEDENCE))

        if token.kind in (NUMBER, CONSTANT):
            return Number(token.value)

        if token.kind == FUNCTION:
            opening = self._advance()
            if opening is None or opening.kind != LPAREN:
                raise ExpressionSyntaxError(
                    f"Falta '(' después de {token.text}", token.position
                )
            argument = self._parse_expression(1)
            self._expect_closing(opening)
            return FunctionCall(token.text, argument)

        if token.kind == LPAREN:
            inner = self._parse_expression(1)
            self._expect_closing(token)
            return inner

        raise ExpressionSyntaxError(
            f"Se esperaba un operando en la posición {token.position}",
            token.position,
        )

    def _expect_closing(self, opening: Token):
        token = self._advance()
        if token is None:
            raise ExpressionSyntaxError(
                f"Falta ')' para el '(' de la posición {opening.position}",
                opening.position,
            )
        if token.kind != RPAREN:
            raise ExpressionSyntaxError(
                f"Se esperaba ')' en la posición {token.position}",
                token.position,
            )


class FormulaEvaluator:
    """Transforma expresiones de UI y evalúa su valor numérico."""

    _REPLACEMENTS = (
        ("×", "*"),
        ("÷", "/"),
        ("−", "-"),
        ("√", "sqrt"),
        ("π", repr(math.pi)),
    )

    _TOKEN_PATTERN = re.compile(
        r"(?P<space>\s+)"
        r"|(?P<number>[0-9.]+)"
        r"|(?P<name>[A-Za-z]+)"
        r"|(?P<operator>[-+*/^])"
        r"|(?P<lparen>\()"
        r"|(?P<rparen>\))"
    )

    def __init__(self, provider: PythonMathProvider | None = None):
        self._provider = provider if provider is not None else PythonMathProvider()
        self._functions = self._provider.build_namespace()
        self._constants = self._provider.build_constants()

    @property
    def function_names(self) -> frozenset:
        return frozenset(self._functions)

    def evaluate(self, expression: str) -> float:
        """Evalúa la expresión completa y devuelve un real finito.

        Raises:
            ExpressionSyntaxError: expresión mal formada.
            DomainError: operación indefinida (incluye división por cero).
            ResultOverflowError: resultado fuera de rango.
        """
        normalized = self.normalize(expression)
        logger.debug("Evaluando %r (normalizada: %r)", expression, normalized)
        tokens = self.tokenize(normalized)
        tree = self.parse(tokens)
        return self.evaluate_tree(tree)

    # ── Normalización ────────────────────────────────────────────

    @classmethod
    def normalize(cls, expression: str) -> str:
        for symbol, replacement in cls._REPLACEMENTS:
            expression = expression.replace(symbol, replacement)
        return expression

    # ── Análisis léxico ──────────────────────────────────────────

    def tokenize(self, expression: str) -> list[Token]:
        tokens = []
        pos = 0

        while pos < len(expression):
            match = self._TOKEN_PATTERN.match(expression, pos)
            if match is None:
                raise ExpressionSyntaxError(
                    f"Carácter no válido '{expression[pos]}' en la posición {pos}",
                    pos,
                )

            kind = match.lastgroup
            text = match.group()
            if kind == "number":
                tokens.append(Token(NUMBER, text, pos, self._parse_number(text, pos)))
            elif kind == "name":
                tokens.append(self._classify_name(text, pos))
            elif kind == "operator":
                tokens.append(Token(OPERATOR, text, pos))
            elif kind == "lparen":
                tokens.append(Token(LPAREN, text, pos))
            elif kind == "rparen":
                tokens.append(Token(RPAREN, text, pos))
            pos = match.end()

        return tokens

    @staticmethod
    def _parse_number(text: str, pos: int) -> float:
        if text == "." or text.count(".") > 1:
            raise ExpressionSyntaxError(
                f"Número mal formado '{text}' en la posición {pos}", pos
            )
        return float(text)

    def _classify_name(self, name: str, pos: int) -> Token:
        if name in self._functions:
            return Token(FUNCTION, name, pos)
        if name in self._constants:
            return Token(CONSTANT, name, pos, self._constants[name])
        raise ExpressionSyntaxError(
            f"Identificador no permitido '{name}' en la posición {pos}", pos
        )

    # ── Análisis sintáctico ──────────────────────────────────────

    @staticmethod
    def parse(tokens: list[Token]) -> Node:
        try:
            return ExpressionParser(tokens).parse()
        except RecursionError as exc:
            raise ExpressionSyntaxError("Expresión demasiado anidada") from exc

    # ── Evaluación ───────────────────────────────────────────────

    def evaluate_tree(self, tree: Node) -> float:
        try:
            return self._evaluate_node(tree)
        except RecursionError as exc:
            raise ExpressionSyntaxError("Expresión demasiado anidada") from exc

    def _evaluate_node(self, node: Node) -> float:
        if isinstance(node, Number):
            value = node.value
        elif isinstance(node, UnaryOp):
            operand = self._evaluate_node(node.operand)
            value = -operand if node.op == "-" else operand
        elif isinstance(node, BinaryOp):
            value = self._evaluate_chain(node)
        else:
            argument = self._evaluate_node(node.argument)
            value = self._apply_function(node.name, argument)

        if not math.isfinite(value):
            raise ResultOverflowError("El resultado excede el rango representable")
        return value

    def _evaluate_chain(self, node: BinaryOp) -> float:
        # Las cadenas asociativas por la izquierda ("1+1+1...") se recorren
        # sin recursión sobre el hijo izquierdo.
        pending = []
        while isinstance(node, BinaryOp):
            pending.append(node)
            node = node.left

        value = self._evaluate_node(node)
        for binary in reversed(pending):
            right = self._evaluate_node(binary.right)
            value = self._apply_operator(binary.op, value, right)
            if not math.isfinite(value):
                raise ResultOverflowError("El resultado excede el rango representable")
        return value

    def _apply_operator(self, op: str, left: float, right: float) -> float:
        if op == "+":
            return left + right
        if op == "-":
            return left - right
        if op == "*":
            return left * right
        if op == "/":
            if right == 0:
                raise DivisionByZeroError("División por cero")
            return left / right
        return self._power(left, right)

    @staticmethod
    def _power(base: float, exponent: float) -> float:
        if base < 0 and not exponent.is_integer():
            raise DomainError("Potencia no entera de una base negativa")
        if base == 0 and exponent < 0:
            raise DomainError("Cero elevado a un exponente negativo")
        try:
            return math.pow(base, exponent)
        except OverflowError as exc:
            raise ResultOverflowError("La potencia excede el rango representable") from exc

    def _apply_function(self, name: str, argument: float) -> float:
        try:
            return self._functions[name](argument)
        except CalculationError:
            raise
        except ValueError as exc:
            raise DomainError(f"{name}: {exc}") from exc
        except OverflowError as exc:
            raise ResultOverflowError(f"{name}: {exc}") from exc
