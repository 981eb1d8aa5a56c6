"""Punto de entrada de la calculadora en consola.

Uso:
    python main.py "2+3*4" "sqrt(16)"
    python main.py --keys 7 × 6 =
    python main.py            (modo interactivo, una expresión por línea)
"""

import logging
import sys

from calculator_engine import CalculatorEngine
from input_composer import InputComposer


LOG_LEVEL = logging.WARNING
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"
PROMPT = "> "
EXIT_COMMANDS = {"quit", "exit", "salir"}


def run_interactive(engine: CalculatorEngine):
    while True:
        try:
            line = input(PROMPT)
        except EOFError:
            print()
            return
        line = line.strip()
        if not line:
            continue
        if line in EXIT_COMMANDS:
            return
        print(engine.display_result(line))


def main(argv=None):
    args = list(sys.argv[1:] if argv is None else argv)

    level = LOG_LEVEL
    if "--debug" in args:
        args.remove("--debug")
        level = logging.DEBUG
    logging.basicConfig(level=level, format=LOG_FORMAT)

    engine = CalculatorEngine()

    if args and args[0] == "--keys":
        composer = InputComposer(engine)
        print(composer.press_many(args[1:]))
    elif args:
        for expression in args:
            print(engine.display_result(expression))
    else:
        run_interactive(engine)


if __name__ == "__main__":
    main()
