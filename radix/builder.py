"""
Expression builder for RADIX.

E parses Polish notation and builds trees programmatically:

    from radix import E

    # Parse Polish notation
    expr = E("+ x * 2 y")

    # Build with constructors, plain ints and names are coerced
    x, y = E.vars("x", "y")
    expr = E.sum(x, E.mul(2, y))
    half = E.pow(x, E.num(1, 2))

    # Parse a straight-line program, returning its last expression
    expr = E.program([". x", ". 2", "^ 0 1"])
"""

from typing import Iterable, Tuple, Union

from .errors import MalformedTree
from .nodes import Node, Number, Power, Product, Sum, Variable
from .parse import parse_polish, parse_program
from .rational import Rational

Operand = Union[Node, int, str, Rational]


def _node(value: Operand) -> Node:
    """Coerce an int, Rational or variable name to a node."""
    if isinstance(value, Node):
        return value
    if isinstance(value, (int, Rational)) and not isinstance(value, bool):
        return Number(value)
    if isinstance(value, str):
        return Variable(value)
    raise MalformedTree(f"Cannot build an expression from {type(value).__name__}")


class _ExprBuilder:
    """
    Expression builder for RADIX.

    Examples:
        E("^ x 2")               -> Power(Variable('x'), 2)
        E.num(3)                 -> Number(3)
        E.num(1, 2)              -> Number(1/2)
        E.sum("x", 1)            -> Sum(Number(1), Variable('x'))
        E.sub("x", "y")          -> Sum(Variable('x'), Product(Number(-1), Variable('y')))
        E.div(1, "x")            -> Product(Number(1), Power(Variable('x'), -1))
    """

    def __call__(self, s: str) -> Node:
        """
        Parse a Polish notation string.

        Examples:
            E("+ x 1") -> Sum(Number(1), Variable('x'))
            E("* 2 ^ x 3") -> Product(Number(2), Power(Variable('x'), 3))
        """
        return parse_polish(s)

    def num(self, value: Union[int, str, Rational], den: int = 1) -> Number:
        """
        Create a rational constant.

        Example:
            E.num(5) -> Number(5)
            E.num(3, 4) -> Number(3/4)
            E.num("-6/4") -> Number(-3/2)
        """
        if isinstance(value, str):
            value = Rational.parse(value)
        if isinstance(value, Rational):
            return Number(value / den)
        return Number(Rational(value, den))

    def var(self, name: str) -> Variable:
        """
        Create a variable.

        Example:
            E.var("x") -> Variable('x')
        """
        return Variable(name)

    def vars(self, *names: str) -> Tuple[Variable, ...]:
        """
        Create multiple variables for unpacking.

        Example:
            x, y, z = E.vars("x", "y", "z")
        """
        return tuple(Variable(name) for name in names)

    def sum(self, *operands: Operand) -> Sum:
        """Build a Sum of two or more operands."""
        return Sum(*(_node(op) for op in operands))

    def mul(self, *operands: Operand) -> Product:
        """Build a Product of two or more operands."""
        return Product(*(_node(op) for op in operands))

    def sub(self, *operands: Operand) -> Sum:
        """Build a - b - ... as a Sum of negated terms."""
        return Sum.from_sub(_node(op) for op in operands)

    def div(self, *operands: Operand) -> Product:
        """Build a / b / ... as a Product of reciprocal powers."""
        return Product.from_div(_node(op) for op in operands)

    def pow(self, base: Operand, exponent: Union[int, Rational, Node]) -> Power:
        """
        Build a Power.

        The exponent may be an int, a Rational, or a node that simplifies
        to a Number.

        Example:
            E.pow("x", 2) -> Power(Variable('x'), 2)
            E.pow("x", E("/ 1 2")) -> Power(Variable('x'), 1/2)
        """
        return Power(_node(base), exponent)

    def program(self, lines: Union[str, Iterable[str]]) -> Node:
        """
        Parse a straight-line program and return its last expression.

        Lines may be given as an iterable or a single newline-separated string.
        """
        if isinstance(lines, str):
            lines = lines.splitlines()
        return parse_program(lines)

    def __repr__(self) -> str:
        return "E (expression builder)"


# Singleton instance
E = _ExprBuilder()
