"""
Rewrite passes for RADIX expression trees.

Three tree-to-tree transforms are provided:

    Simplify        - fold constants, group like terms and like factors
    Expand          - distribute products over sums, unroll integer powers
    Differentiate   - symbolic derivative with respect to one variable

Each pass is a Transform[Node] holding no mutable state, so an instance
can be reused and shared. The module-level functions are shortcuts:

    simplify(E("* x x"))                  # => ^(x, 2)
    expand(E("* + x 1 + x 1"))            # => +(*(1, 1), *(1, x), ...)
    simplify(differentiate(E("^ x 2"), "x"))   # => *(2, x)

Rewrites keep exact equivalence: every coefficient and exponent is a
Rational and no evaluation ever rounds.
"""

import itertools
from typing import Dict, List

from .errors import Indeterminate, InvalidOperation, MalformedTree
from .nodes import (
    ONE, VARIABLE_NAME, ZERO,
    Node, Number, Power, Product, Sum, Transform, Variable,
)
from .rational import Rational


def _is_literal(node: Node, value: int) -> bool:
    """True if node is a Number equal to value."""
    return isinstance(node, Number) and node.value == value


def _check_zero_exponent(base: Node) -> None:
    """
    Reject base^0 when the result is not defined.

    Raises:
        InvalidOperation: For the literal 0^0
        Indeterminate: If base contains variables, since it could evaluate to 0
    """
    if _is_literal(base, 0):
        raise InvalidOperation("Cannot evaluate 0^0")
    if base.contains_variables():
        raise Indeterminate(f"{base}^0 is undefined when {base} is 0")


def _assemble(cls, operands: List[Node], empty: Node) -> Node:
    """Wrap operands in cls, unless there are fewer than two."""
    if not operands:
        return empty
    if len(operands) == 1:
        return operands[0]
    return cls(*operands)


# ============================================================
# Simplify
# ============================================================

class Simplify(Transform[Node]):
    """
    Bring a tree to its simplified canonical form.

    Sums fold their constants and add the coefficients of equal terms:
        + x x           -> *(2, x)
        + 1 + 2 x       -> +(3, x)

    Products fold their constants and add the exponents of equal bases:
        * x x           -> ^(x, 2)
        * 0 x           -> 0

    Powers evaluate exact rational results and flatten nested powers:
        ^ 4 / 1 2       -> 2
        ^ ^ x 2 3       -> ^(x, 6)

    The result is a fixed point: simplifying it again changes nothing.
    """

    name = "simplify"

    def visit_number(self, node: Number) -> Node:
        return node

    def visit_variable(self, node: Variable) -> Node:
        return node

    def visit_sum(self, node: Sum) -> Node:
        constant = Rational.ZERO
        coefficients: Dict[Node, Rational] = {}

        for operand in self._flattened(node, Sum):
            if isinstance(operand, Number):
                constant = constant + operand.value
                continue

            term, coefficient = operand, Rational.ONE
            # A simplified Product keeps its only Number first
            if isinstance(operand, Product) and isinstance(operand.operands[0], Number):
                coefficient = operand.operands[0].value
                rest = operand.operands[1:]
                term = rest[0] if len(rest) == 1 else Product(*rest)

            coefficients[term] = coefficients.get(term, Rational.ZERO) + coefficient

        terms: List[Node] = []
        if constant != 0:
            terms.append(Number(constant))

        for term, coefficient in coefficients.items():
            if coefficient == 0:
                continue
            if coefficient == 1:
                terms.append(term)
            elif isinstance(term, Product):
                terms.append(Product(*term.operands, Number(coefficient)))
            else:
                terms.append(Product(Number(coefficient), term))

        return _assemble(Sum, terms, ZERO)

    def visit_product(self, node: Product) -> Node:
        coefficient = Rational.ONE
        exponents: Dict[Node, Rational] = {}

        for operand in self._flattened(node, Product):
            if isinstance(operand, Number):
                coefficient = coefficient * operand.value
                if coefficient == 0:
                    return ZERO
                continue

            if isinstance(operand, Power):
                base, exponent = operand.base, operand.exponent
            else:
                base, exponent = operand, Rational.ONE

            exponents[base] = exponents.get(base, Rational.ZERO) + exponent

        factors: List[Node] = []
        for base, exponent in exponents.items():
            if exponent == 0:
                if _is_literal(base, 0):
                    raise InvalidOperation("Cannot evaluate 0^0")
                continue

            factor = base if exponent == 1 else self.visit_power(Power(base, exponent))
            if isinstance(factor, Number):
                coefficient = coefficient * factor.value
            else:
                factors.append(factor)

        if coefficient == 0:
            return ZERO
        if coefficient != 1:
            factors.append(Number(coefficient))

        return _assemble(Product, factors, ONE)

    def visit_power(self, node: Power) -> Node:
        base = node.base.transform(self)
        exponent = node.exponent

        if exponent == 0:
            _check_zero_exponent(base)
            return ONE

        if exponent == 1:
            return base

        if isinstance(base, Number):
            value = base.value.pow(exponent)
            if value is not None:
                return Number(value)
            # Keep the exponent positive: b^-e == (1/b)^e
            if exponent < 0:
                return Power(Number(base.value.reciprocal()), -exponent)
            return Power(base, exponent)

        if isinstance(base, Power):
            # (b^e)^f == b^(e*f), simplified again to fold the new exponent
            return self.visit_power(Power(base.base, base.exponent * exponent))

        return Power(base, exponent)

    def _flattened(self, node: Node, kind) -> List[Node]:
        """Simplify the operands of node, splicing in those of the same kind."""
        operands: List[Node] = []
        for operand in node.operands:
            simplified = operand.transform(self)
            if isinstance(simplified, kind):
                operands.extend(simplified.operands)
            else:
                operands.append(simplified)
        return operands


# ============================================================
# Expand
# ============================================================

class Expand(Transform[Node]):
    """
    Distribute products over sums and unroll powers into products.

    The result is not simplified: coefficients and repeated factors are
    left as products, ready for a Simplify pass to collect:

        * + x 1 y       -> +(*(1, y), *(x, y))
        ^ + x 1 2       -> +(*(1, 1), *(1, x), *(1, x), *(x, x))
        ^ x / 3 2       -> ^(*(x, x, x), 1/2)
    """

    name = "expand"

    def visit_number(self, node: Number) -> Node:
        return node

    def visit_variable(self, node: Variable) -> Node:
        return node

    def visit_sum(self, node: Sum) -> Node:
        terms: List[Node] = []
        for operand in node.operands:
            expanded = operand.transform(self)
            # Distributed products come back as sums; keep one level of terms
            if isinstance(expanded, Sum):
                terms.extend(expanded.operands)
            else:
                terms.append(expanded)
        return Sum(*terms)

    def visit_product(self, node: Product) -> Node:
        expanded = [operand.transform(self) for operand in node.operands]
        result = expanded[0]
        for operand in expanded[1:]:
            result = self._distribute(result, operand)
        return result

    def visit_power(self, node: Power) -> Node:
        exponent = node.exponent

        if exponent == 0:
            _check_zero_exponent(node.base)
            return ONE

        base = node.base.transform(self)
        if exponent == 1:
            return base

        repetitions = abs(exponent.num)
        if isinstance(base, Sum):
            # One term per ordered choice of an operand for every factor
            terms = [
                selection[0] if repetitions == 1 else Product(*selection)
                for selection in itertools.product(base.operands, repeat=repetitions)
            ]
            expanded = _assemble(Sum, terms, ZERO)
        elif repetitions > 1:
            expanded = Product(*([base] * repetitions))
        else:
            expanded = base

        if exponent.is_integer() and exponent > 0:
            return expanded
        return Power(expanded, Rational(exponent.sign, exponent.den))

    @staticmethod
    def _distribute(lhs: Node, rhs: Node) -> Node:
        """Multiply two expanded nodes, distributing over either side's sum."""
        lhs_terms = lhs.operands if isinstance(lhs, Sum) else (lhs,)
        rhs_terms = rhs.operands if isinstance(rhs, Sum) else (rhs,)
        terms = [Product(left, right) for left in lhs_terms for right in rhs_terms]
        return _assemble(Sum, terms, ZERO)


# ============================================================
# Differentiate
# ============================================================

class Differentiate(Transform[Node]):
    """
    Symbolic derivative with respect to a single variable.

    The result is correct but raw; run Simplify afterwards to tidy it:

        d = Differentiate("x")
        d(E("^ x 2"))                # => *(2, ^(x, 1))
        simplify(d(E("^ x 2")))      # => *(2, x)

    Args:
        variable: Name of the variable, must match [A-Za-z]+

    Raises:
        MalformedTree: If the variable name is invalid
    """

    def __init__(self, variable: str):
        if not isinstance(variable, str) or not VARIABLE_NAME.fullmatch(variable):
            raise MalformedTree(f"Invalid variable name: {variable!r}")
        self._variable = variable

    @property
    def variable(self) -> str:
        return self._variable

    @property
    def name(self) -> str:
        return f"differentiate:{self._variable}"

    def visit_number(self, node: Number) -> Node:
        return ZERO

    def visit_variable(self, node: Variable) -> Node:
        return ONE if node.name == self._variable else ZERO

    def visit_sum(self, node: Sum) -> Node:
        derivatives = [operand.transform(self) for operand in node.operands]
        return _assemble(Sum, [d for d in derivatives if not _is_literal(d, 0)], ZERO)

    def visit_product(self, node: Product) -> Node:
        constants: List[Node] = []
        factors: List[Node] = []
        derivatives: List[Node] = []

        for operand in node.operands:
            derivative = operand.transform(self)
            if _is_literal(derivative, 0):
                constants.append(operand)
            else:
                factors.append(operand)
                derivatives.append(derivative)

        if not factors:
            return ZERO

        # (c * f)' = c * f'
        if len(factors) == 1:
            return Product(*constants, derivatives[0])

        # (f * g * ...)' = f' * g * ... + f * g' * ... + ...
        terms = []
        for i, derivative in enumerate(derivatives):
            others = factors[:i] + factors[i + 1:]
            terms.append(Product(*others, derivative, *constants))
        return Sum(*terms)

    def visit_power(self, node: Power) -> Node:
        exponent = node.exponent

        if exponent == 0:
            return ZERO
        if exponent == 1:
            return node.base.transform(self)

        chain = node.base.transform(self)
        if _is_literal(chain, 0):
            return ZERO

        # (f^e)' = e * f^(e-1) * f'
        coefficient = Number(exponent)
        power = Power(node.base, exponent - 1)
        if _is_literal(chain, 1):
            return Product(coefficient, power)
        return Product(coefficient, power, chain)

    def __repr__(self) -> str:
        return f"Differentiate({self._variable!r})"


# ============================================================
# Drivers
# ============================================================

def simplify(tree: Node) -> Node:
    """Simplify tree to its canonical form."""
    return tree.transform(Simplify())


def expand(tree: Node) -> Node:
    """Distribute products over sums and unroll powers."""
    return tree.transform(Expand())


def differentiate(tree: Node, variable: str) -> Node:
    """
    Differentiate tree with respect to variable.

    The result is not simplified.

    Raises:
        MalformedTree: If variable is not a valid variable name
    """
    return tree.transform(Differentiate(variable))
