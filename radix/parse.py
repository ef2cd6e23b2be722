"""
Textual input formats for RADIX.

Two notations are supported:

Polish notation (prefix, one expression per line):
    + x 1               -> x + 1
    * 2 ^ x 3           -> 2 * x^3
    - x / y 2           -> x - y/2

    Operators are binary: + - * / ^
    Leaves are variable names ([A-Za-z]+) or integers (-?[0-9]+)

Straight-line program (one definition per line, numbered from 0):
    . x                 -> [0] x
    . 2                 -> [1] 2
    ^ 0 1               -> [2] x^2
    + 2 0 1             -> [3] x^2 + x + 2

    ". leaf" defines a variable or integer leaf.
    "op i j ..." applies op to the expressions defined on lines i, j, ...
    Exponentiation is right associative: "^ a b c" is a^(b^c).
"""

import logging
import re
from typing import Iterable, List, Optional

from .errors import InvalidExponent, MalformedTree, ParseError
from .nodes import VARIABLE_NAME, Node, Number, Power, Product, Sum, Variable

logger = logging.getLogger("radix.parse")

POLISH_FORMAT = "Polish notation"
PROGRAM_FORMAT = "Straight-line program"

INTEGER = re.compile(r'-?[0-9]+')

OPERATORS = ('+', '-', '*', '/', '^')


def _leaf(token: str) -> Optional[Node]:
    """Parse a variable or integer token, None if it is neither."""
    if VARIABLE_NAME.fullmatch(token):
        return Variable(token)
    if INTEGER.fullmatch(token):
        return Number(int(token))
    return None


def _power(base: Node, exponent: Node, format_name: str) -> Power:
    try:
        return Power.from_expr(base, exponent)
    except InvalidExponent:
        raise ParseError("Cannot simplify exponent to a rational number", format_name) from None


def _operation(operator: str, operands: List[Node], format_name: str) -> Node:
    """Apply one of the five operators to its operands."""
    if len(operands) < 2:
        raise ParseError("Not enough operands", format_name)

    if operator == '+':
        return Sum(*operands)
    if operator == '-':
        return Sum.from_sub(operands)
    if operator == '*':
        return Product(*operands)
    if operator == '/':
        return Product.from_div(operands)

    # a ^ b ^ c == a ^ (b ^ c)
    result = operands[-1]
    for base in reversed(operands[:-1]):
        result = _power(base, result, format_name)
    return result


# ============================================================
# Polish Notation
# ============================================================

def parse_polish(text: str) -> Node:
    """
    Parse a Polish (prefix) notation expression.

    Tokens are read right to left onto an operand stack; each operator pops
    its two operands, the first popped being the left one.

    Examples:
        parse_polish("+ x 1")       -> Sum(Number(1), Variable('x'))
        parse_polish("^ x / 1 2")   -> Power(Variable('x'), 1/2)

    Raises:
        ParseError: If the text is empty, malformed, or an exponent is not rational
    """
    stack: List[Node] = []

    for token in reversed(text.split()):
        if token in OPERATORS:
            if len(stack) < 2:
                raise ParseError("Not enough operands", POLISH_FORMAT)
            lhs = stack.pop()
            rhs = stack.pop()
            stack.append(_operation(token, [lhs, rhs], POLISH_FORMAT))
            continue

        leaf = _leaf(token)
        if leaf is None:
            raise ParseError("Invalid number", POLISH_FORMAT)
        stack.append(leaf)

    if not stack:
        raise ParseError("Cannot parse empty string", POLISH_FORMAT)
    if len(stack) > 1:
        raise ParseError("Too many operands", POLISH_FORMAT)
    return stack[0]


# ============================================================
# Straight-line Programs
# ============================================================

class StraightLineParser:
    """
    Incremental parser for straight-line programs.

    Every successfully parsed line is appended to the history and can be
    referenced by its index from later lines. A line that fails to parse
    leaves the history untouched.

    Example:
        parser = StraightLineParser()
        parser.parse(". x")        # 0
        parser.parse(". 3")        # 1
        parser.parse("* 0 1")      # 2 -> *(3, x)
        parser.last()              # *(3, x)
        parser[0]                  # x
    """

    def __init__(self):
        self._history: List[Node] = []

    def parse(self, line: str) -> Node:
        """
        Parse one line and append the result to the history.

        Raises:
            ParseError: If the line is malformed or references an unknown index
        """
        node = self._parse_line(line)
        self._history.append(node)
        logger.debug("Defined expression %d: %s", len(self._history) - 1, node)
        return node

    def last(self) -> Node:
        """
        The most recently defined expression.

        Raises:
            IndexError: If nothing has been parsed yet
        """
        if not self._history:
            raise IndexError("Cannot get last expression, no line has been parsed")
        return self._history[-1]

    def reset(self) -> None:
        """Forget every defined expression."""
        self._history.clear()

    def _parse_line(self, line: str) -> Node:
        parts = line.split()
        if not parts:
            raise ParseError("Invalid empty string", PROGRAM_FORMAT)

        operator, arguments = parts[0], parts[1:]

        if operator == '.':
            if len(arguments) != 1:
                raise ParseError("Invalid number of arguments after a dot", PROGRAM_FORMAT)
            leaf = _leaf(arguments[0])
            if leaf is None:
                raise ParseError("Invalid syntax", PROGRAM_FORMAT)
            return leaf

        if operator not in OPERATORS:
            raise ParseError("First part must be a dot or an operator", PROGRAM_FORMAT)

        operands = [self._resolve(argument) for argument in arguments]
        try:
            return _operation(operator, operands, PROGRAM_FORMAT)
        except MalformedTree as e:
            raise ParseError(str(e), PROGRAM_FORMAT) from e

    def _resolve(self, argument: str) -> Node:
        """Look up the expression referenced by an index argument."""
        if not INTEGER.fullmatch(argument):
            raise ParseError("Invalid syntax", PROGRAM_FORMAT)
        index = int(argument)
        if index < 0:
            raise ParseError("Invalid negative index", PROGRAM_FORMAT)
        if index >= len(self._history):
            raise ParseError("Index out of bounds", PROGRAM_FORMAT)
        return self._history[index]

    def __len__(self) -> int:
        return len(self._history)

    def __getitem__(self, index: int) -> Node:
        return self._history[index]

    def __iter__(self):
        return iter(self._history)

    def __repr__(self) -> str:
        return f"StraightLineParser({len(self._history)} expressions)"


def parse_program(lines: Iterable[str]) -> Node:
    """
    Parse a whole straight-line program and return its last expression.

    Blank lines and lines starting with # are skipped.

    Raises:
        ParseError: If any line fails to parse, or the program is empty
    """
    parser = StraightLineParser()
    for line in lines:
        stripped = line.strip()
        if stripped and not stripped.startswith('#'):
            parser.parse(stripped)

    if not parser:
        raise ParseError("Empty program", PROGRAM_FORMAT)
    return parser.last()
