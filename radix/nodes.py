"""
Expression node model for RADIX.

RADIX - Rational Algebra: Differentiation, Identities and eXpansion

An expression is a tree of immutable nodes of five kinds:

    Number(value)          - a rational constant
    Variable(name)         - a symbol, name matches [A-Za-z]+
    Sum(a, b, ...)         - commutative n-ary addition
    Product(a, b, ...)     - commutative n-ary multiplication
    Power(base, exponent)  - base raised to a rational exponent

Nodes are ordered by a canonical total order:

    Number < Variable < Power < Product < Sum

Nodes of the same kind compare by value (Number), name (Variable),
base then exponent (Power) or lexicographically by operands (Sum, Product).
Sum and Product always store their operands sorted by this order, so two
sums of the same terms are equal no matter how they were written:

    Sum(Variable("y"), Variable("x")) == Sum(Variable("x"), Variable("y"))

Rewrites are implemented as Transforms: an object with one handler per node
kind. node.transform(t) dispatches to the handler for the node's kind.
"""

import re
from typing import Generic, Iterable, Tuple, TypeVar, Union

from .errors import InvalidExponent, MalformedTree
from .rational import Rational

T = TypeVar('T')

VARIABLE_NAME = re.compile(r'[A-Za-z]+')


def _set(node, name: str, value) -> None:
    """Assign a slot on an immutable node during construction."""
    object.__setattr__(node, name, value)


# ============================================================
# Transform Contract
# ============================================================

class Transform(Generic[T]):
    """
    A pass over an expression tree, with one handler per node kind.

    Subclasses implement the five visit_* handlers and recurse by calling
    child.transform(self). A transform holds no mutable state, so applying
    it twice to the same tree yields the same result.

    A transform can be called directly: t(node) is node.transform(t).
    Two tree-to-tree transforms combine with >> into a Pipeline.

    Example:
        class CountLeaves(Transform[int]):
            name = "count-leaves"

            def visit_number(self, node): return 1
            def visit_variable(self, node): return 1
            def visit_sum(self, node): return sum(op.transform(self) for op in node.operands)
            visit_product = visit_sum
            def visit_power(self, node): return node.base.transform(self)
    """

    name = "transform"

    def visit_number(self, node: 'Number') -> T:
        raise NotImplementedError(f"{type(self).__name__} does not handle Number")

    def visit_variable(self, node: 'Variable') -> T:
        raise NotImplementedError(f"{type(self).__name__} does not handle Variable")

    def visit_sum(self, node: 'Sum') -> T:
        raise NotImplementedError(f"{type(self).__name__} does not handle Sum")

    def visit_product(self, node: 'Product') -> T:
        raise NotImplementedError(f"{type(self).__name__} does not handle Product")

    def visit_power(self, node: 'Power') -> T:
        raise NotImplementedError(f"{type(self).__name__} does not handle Power")

    def __call__(self, node: 'Node') -> T:
        """Apply this transform: t(node) is node.transform(t)."""
        return node.transform(self)

    def __rshift__(self, other):
        """Sequence two passes: Simplify() >> Expand()."""
        from .pipeline import Pipeline
        if not isinstance(other, (Transform, Pipeline)):
            return NotImplemented
        return Pipeline([self]) >> other

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


# ============================================================
# Nodes
# ============================================================

class Node:
    """
    Base class of all expression nodes.

    Nodes are immutable and hashable; equality is structural and the
    comparison operators follow the canonical total order.
    """

    __slots__ = ('_hash',)

    # Position of the node kind in the canonical order
    RANK = -1

    def transform(self, transform: Transform[T]) -> T:
        """Dispatch to the handler of transform matching this node's kind."""
        raise NotImplementedError

    def contains_variables(self) -> bool:
        """True if a Variable leaf is reachable from this node."""
        raise NotImplementedError

    def children(self) -> Tuple['Node', ...]:
        """The direct sub-nodes of this node."""
        return ()

    def _key(self):
        raise NotImplementedError

    def _compare_same(self, other: 'Node') -> int:
        raise NotImplementedError

    def compare(self, other: 'Node') -> int:
        """
        Three-way comparison under the canonical order.

        Returns:
            -1, 0 or 1
        """
        if not isinstance(other, Node):
            raise TypeError(f"Cannot compare Node with {type(other).__name__}")
        if self is other:
            return 0
        if self.RANK != other.RANK:
            return -1 if self.RANK < other.RANK else 1
        return self._compare_same(other)

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, Node):
            return NotImplemented
        return (self.RANK == other.RANK
                and self._hash == other._hash
                and self._key() == other._key())

    def __hash__(self):
        return self._hash

    def __lt__(self, other):
        if not isinstance(other, Node):
            return NotImplemented
        return self.compare(other) < 0

    def __le__(self, other):
        if not isinstance(other, Node):
            return NotImplemented
        return self.compare(other) <= 0

    def __gt__(self, other):
        if not isinstance(other, Node):
            return NotImplemented
        return self.compare(other) > 0

    def __ge__(self, other):
        if not isinstance(other, Node):
            return NotImplemented
        return self.compare(other) >= 0

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __str__(self) -> str:
        from .printers import format_linear
        return format_linear(self)


class Number(Node):
    """A rational constant leaf."""

    __slots__ = ('_value',)
    RANK = 0

    def __init__(self, value: Union[Rational, int]):
        if isinstance(value, int) and not isinstance(value, bool):
            value = Rational.from_int(value)
        if not isinstance(value, Rational):
            raise MalformedTree("Number value must be a Rational or int")
        _set(self, '_value', value)
        _set(self, '_hash', hash((self.RANK, value)))

    @property
    def value(self) -> Rational:
        return self._value

    def transform(self, transform: Transform[T]) -> T:
        return transform.visit_number(self)

    def contains_variables(self) -> bool:
        return False

    def _key(self):
        return self._value

    def _compare_same(self, other: 'Number') -> int:
        return self._value.compare(other._value)

    def __repr__(self) -> str:
        return f"Number({self._value})"

    def __reduce__(self):
        return (Number, (self._value,))


class Variable(Node):
    """A symbol leaf, named by one or more ASCII letters."""

    __slots__ = ('_name',)
    RANK = 1

    def __init__(self, name: str):
        if not isinstance(name, str) or not VARIABLE_NAME.fullmatch(name):
            raise MalformedTree(f"Invalid variable name: {name!r}")
        _set(self, '_name', name)
        _set(self, '_hash', hash((self.RANK, name)))

    @property
    def name(self) -> str:
        return self._name

    def transform(self, transform: Transform[T]) -> T:
        return transform.visit_variable(self)

    def contains_variables(self) -> bool:
        return True

    def _key(self):
        return self._name

    def _compare_same(self, other: 'Variable') -> int:
        return (self._name > other._name) - (self._name < other._name)

    def __repr__(self) -> str:
        return f"Variable({self._name!r})"

    def __reduce__(self):
        return (Variable, (self._name,))


class _Operation(Node):
    """Shared behavior of the commutative n-ary operators."""

    __slots__ = ('_operands',)

    def __init__(self, *operands: Node):
        kind = type(self).__name__
        if len(operands) < 2:
            raise MalformedTree(f"{kind} requires at least two operands, got {len(operands)}")
        for operand in operands:
            if operand is None:
                raise MalformedTree(f"{kind} operand cannot be None")
            if not isinstance(operand, Node):
                raise MalformedTree(f"{kind} operand must be a Node, got {type(operand).__name__}")

        ordered = tuple(sorted(operands))
        _set(self, '_operands', ordered)
        _set(self, '_hash', hash((self.RANK, ordered)))

    @property
    def operands(self) -> Tuple[Node, ...]:
        """The operands, sorted by the canonical order."""
        return self._operands

    def children(self) -> Tuple[Node, ...]:
        return self._operands

    def contains_variables(self) -> bool:
        return any(op.contains_variables() for op in self._operands)

    def _key(self):
        return self._operands

    def _compare_same(self, other: '_Operation') -> int:
        for lhs, rhs in zip(self._operands, other._operands):
            order = lhs.compare(rhs)
            if order != 0:
                return order
        size, other_size = len(self._operands), len(other._operands)
        return (size > other_size) - (size < other_size)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(repr(op) for op in self._operands)})"

    def __reduce__(self):
        return (type(self), self._operands)


class Sum(_Operation):
    """Commutative n-ary addition of at least two operands."""

    __slots__ = ()
    RANK = 4

    @classmethod
    def from_sub(cls, operands: Iterable[Node]) -> 'Sum':
        """
        Represent a subtraction a - b - c as a + (-1 * b) + (-1 * c).

        Raises:
            MalformedTree: If fewer than two operands are given
        """
        operands = list(operands)
        if len(operands) < 2:
            raise MalformedTree(f"Subtraction requires at least two operands, got {len(operands)}")
        first, rest = operands[0], operands[1:]
        return cls(first, *(Product(NEG_ONE, op) for op in rest))

    def transform(self, transform: Transform[T]) -> T:
        return transform.visit_sum(self)


class Product(_Operation):
    """Commutative n-ary multiplication of at least two operands."""

    __slots__ = ()
    RANK = 3

    @classmethod
    def from_div(cls, operands: Iterable[Node]) -> 'Product':
        """
        Represent a division a / b / c as a * b^-1 * c^-1.

        Raises:
            MalformedTree: If fewer than two operands are given
        """
        operands = list(operands)
        if len(operands) < 2:
            raise MalformedTree(f"Division requires at least two operands, got {len(operands)}")
        first, rest = operands[0], operands[1:]
        return cls(first, *(Power(op, Rational.NEG_ONE) for op in rest))

    def transform(self, transform: Transform[T]) -> T:
        return transform.visit_product(self)


class Power(Node):
    """
    A base raised to a rational exponent.

    The exponent may also be given as an expression node, in which case it
    is simplified first and must reduce to a Number:

        Power(Variable("x"), Rational(1, 2))
        Power.from_expr(Variable("x"), Product.from_div([Number(1), Number(2)]))
    """

    __slots__ = ('_base', '_exponent')
    RANK = 2

    def __init__(self, base: Node, exponent: Union[Rational, int, Node]):
        if base is None or not isinstance(base, Node):
            raise MalformedTree("Power base must be a Node")
        if isinstance(exponent, Node):
            exponent = _exponent_value(exponent)
        elif isinstance(exponent, int) and not isinstance(exponent, bool):
            exponent = Rational.from_int(exponent)
        if not isinstance(exponent, Rational):
            raise MalformedTree("Power exponent must be a Rational, int or Node")

        _set(self, '_base', base)
        _set(self, '_exponent', exponent)
        _set(self, '_hash', hash((self.RANK, base, exponent)))

    @classmethod
    def from_expr(cls, base: Node, exponent: Node) -> 'Power':
        """
        Build a Power from an exponent expression.

        Raises:
            InvalidExponent: If the exponent does not simplify to a Number
        """
        return cls(base, _exponent_value(exponent))

    @property
    def base(self) -> Node:
        return self._base

    @property
    def exponent(self) -> Rational:
        return self._exponent

    def transform(self, transform: Transform[T]) -> T:
        return transform.visit_power(self)

    def contains_variables(self) -> bool:
        return self._base.contains_variables()

    def children(self) -> Tuple[Node, ...]:
        return (self._base,)

    def _key(self):
        return (self._base, self._exponent)

    def _compare_same(self, other: 'Power') -> int:
        order = self._base.compare(other._base)
        if order != 0:
            return order
        return self._exponent.compare(other._exponent)

    def __repr__(self) -> str:
        return f"Power({self._base!r}, {self._exponent})"

    def __reduce__(self):
        return (Power, (self._base, self._exponent))


def _exponent_value(exponent: Node) -> Rational:
    """Simplify an exponent expression down to its rational value."""
    if not isinstance(exponent, Node):
        raise MalformedTree("Power exponent must be a Node")

    from .passes import Simplify
    simplified = exponent.transform(Simplify())
    if isinstance(simplified, Number):
        return simplified.value
    raise InvalidExponent("Exponent cannot be converted to a rational number")


ZERO = Number(Rational.ZERO)
ONE = Number(Rational.ONE)
NEG_ONE = Number(Rational.NEG_ONE)
