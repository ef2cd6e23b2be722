"""Tests for expression nodes and the canonical order."""

import copy
import pickle
from itertools import combinations

import pytest
from radix import (
    Number, Variable, Sum, Product, Power, Rational, Transform,
    ZERO, ONE, NEG_ONE, E,
    MalformedTree, InvalidExponent,
)


def sample_nodes():
    """A spread of nodes of every kind, in no particular order."""
    x, y = Variable("x"), Variable("y")
    return [
        Sum(x, Number(1)),
        Number(Rational(1, 2)),
        Power(x, 2),
        Product(Number(2), x),
        Variable("b"),
        Number(-3),
        Power(y, Rational(1, 2)),
        Sum(x, y, Number(1)),
        Product(x, y),
        x,
        Power(x, -1),
        Product(Number(2), x, y),
        Sum(y, Product(x, x)),
    ]


class TestConstruction:
    """Tests for node constructors and their invariants."""

    def test_number(self):
        assert Number(3).value == 3
        assert Number(Rational(1, 2)).value == Rational(1, 2)

    def test_number_invalid(self):
        with pytest.raises(MalformedTree):
            Number("3")
        with pytest.raises(MalformedTree):
            Number(None)

    def test_variable(self):
        assert Variable("abc").name == "abc"
        assert Variable("XyZ").name == "XyZ"

    @pytest.mark.parametrize("name", ["", "x1", "x_y", "1", "x y", None])
    def test_variable_invalid(self, name):
        with pytest.raises(MalformedTree):
            Variable(name)

    def test_operation_needs_two_operands(self):
        with pytest.raises(MalformedTree):
            Sum(Variable("x"))
        with pytest.raises(MalformedTree):
            Product()

    def test_operation_rejects_none(self):
        with pytest.raises(MalformedTree):
            Sum(Variable("x"), None)

    def test_operation_rejects_non_nodes(self):
        with pytest.raises(MalformedTree):
            Product(Variable("x"), 2)

    def test_operands_sorted(self):
        """Operands are stored in canonical order."""
        x, y = Variable("x"), Variable("y")
        s = Sum(Product(x, y), y, Number(3), x)
        assert s.operands == (Number(3), x, y, Product(x, y))

    def test_operand_order_irrelevant(self):
        x, y = Variable("x"), Variable("y")
        assert Sum(x, y) == Sum(y, x)
        assert Product(Number(2), x, y) == Product(y, Number(2), x)

    def test_from_sub(self):
        """a - b is a + (-1 * b)."""
        x, y = Variable("x"), Variable("y")
        assert Sum.from_sub([x, y]) == Sum(x, Product(NEG_ONE, y))

    def test_from_sub_many(self):
        x, y, z = E.vars("x", "y", "z")
        result = Sum.from_sub([x, y, z])
        assert len(result.operands) == 3
        assert Product(NEG_ONE, z) in result.operands

    def test_from_div(self):
        """a / b is a * b^-1."""
        x, y = Variable("x"), Variable("y")
        assert Product.from_div([x, y]) == Product(x, Power(y, -1))

    def test_from_sub_needs_two(self):
        with pytest.raises(MalformedTree):
            Sum.from_sub([Variable("x")])
        with pytest.raises(MalformedTree):
            Product.from_div([])

    def test_power(self):
        p = Power(Variable("x"), Rational(1, 2))
        assert p.base == Variable("x")
        assert p.exponent == Rational(1, 2)
        assert Power(Variable("x"), 2).exponent == 2

    def test_power_from_expr(self):
        """An exponent expression is simplified to a rational."""
        half = Product.from_div([Number(1), Number(2)])
        assert Power.from_expr(Variable("x"), half) == Power(Variable("x"), Rational(1, 2))
        assert Power(Variable("x"), Sum(Number(1), Number(2))).exponent == 3

    def test_power_non_rational_exponent(self):
        with pytest.raises(InvalidExponent):
            Power.from_expr(Variable("x"), Variable("y"))

    def test_power_invalid_base(self):
        with pytest.raises(MalformedTree):
            Power(None, 2)
        with pytest.raises(MalformedTree):
            Power(Variable("x"), 0.5)

    def test_immutable(self):
        x = Variable("x")
        with pytest.raises(AttributeError):
            x._name = "y"
        s = Sum(x, ONE)
        with pytest.raises(AttributeError):
            s.operands = ()

    def test_constants(self):
        assert ZERO == Number(0)
        assert ONE == Number(1)
        assert NEG_ONE == Number(-1)


class TestQueries:
    """Tests for contains_variables and children."""

    def test_contains_variables(self):
        assert not Number(3).contains_variables()
        assert Variable("x").contains_variables()
        assert E("+ 1 x").contains_variables()
        assert not E("+ 1 2").contains_variables()
        assert E("^ x 2").contains_variables()
        assert not Power(Number(2), Rational(1, 2)).contains_variables()

    def test_children(self):
        x = Variable("x")
        assert Number(1).children() == ()
        assert x.children() == ()
        assert Sum(x, ONE).children() == (ONE, x)
        assert Power(x, 3).children() == (x,)


class TestCanonicalOrder:
    """Tests for the canonical total order."""

    def test_kind_ranks(self):
        """Number < Variable < Power < Product < Sum."""
        x = Variable("x")
        ordered = [Number(100), Variable("a"), Power(x, 2), Product(x, x), Sum(ONE, ONE)]
        assert sorted(reversed(ordered)) == ordered

    def test_numbers_by_value(self):
        assert Number(Rational(-1, 2)) < Number(0) < Number(Rational(1, 3))

    def test_variables_by_name(self):
        assert Variable("a") < Variable("b") < Variable("ba")
        assert Variable("X") < Variable("x")

    def test_powers_by_base_then_exponent(self):
        x, y = Variable("x"), Variable("y")
        assert Power(x, 3) < Power(y, 2)
        assert Power(x, 2) < Power(x, 3)

    def test_operations_lexicographic(self):
        x, y, z = E.vars("x", "y", "z")
        assert Sum(x, y) < Sum(x, z)
        assert Product(x, y) < Product(x, y, z)
        assert Product(Number(2), x) < Product(x, x)

    def test_compare_three_way(self):
        x = Variable("x")
        assert x.compare(x) == 0
        assert x.compare(Variable("x")) == 0
        assert Number(1).compare(x) == -1
        assert x.compare(Number(1)) == 1

    def test_compare_non_node(self):
        with pytest.raises(TypeError):
            Variable("x").compare(3)

    def test_total(self):
        """Every pair of distinct nodes is strictly ordered one way."""
        nodes = sample_nodes()
        for a, b in combinations(nodes, 2):
            assert a.compare(b) == -b.compare(a)
            assert a.compare(b) != 0

    def test_transitive(self):
        nodes = sample_nodes()
        for a in nodes:
            for b in nodes:
                for c in nodes:
                    if a <= b and b <= c:
                        assert a <= c

    def test_sorting_stable_under_permutation(self):
        nodes = sample_nodes()
        assert sorted(nodes) == sorted(reversed(nodes))


class TestEqualityAndHashing:
    """Tests for structural equality."""

    def test_structural_equality(self):
        assert E("+ x * 2 y") == E("+ * y 2 x")
        assert E("^ x 2") != E("^ x 3")

    def test_different_kinds_unequal(self):
        assert Number(1) != Variable("x")
        assert Sum(Variable("x"), ONE) != Product(Variable("x"), ONE)

    def test_not_equal_to_other_types(self):
        assert Number(1) != 1
        assert Variable("x") != "x"

    def test_dict_keys(self):
        terms = {E("* x y"): 1, E("* y x"): 2}
        assert len(terms) == 1

    def test_hash_consistent(self):
        assert hash(E("+ x y")) == hash(E("+ y x"))


class TestFormatting:
    """Tests for str and repr."""

    def test_str_is_linear(self):
        assert str(E("+ x * 2 ^ y 3")) == "+(x, *(2, ^(y, 3)))"

    def test_repr(self):
        assert repr(Number(Rational(1, 2))) == "Number(1/2)"
        assert repr(Variable("x")) == "Variable('x')"
        assert repr(Power(Variable("x"), 2)) == "Power(Variable('x'), 2)"
        assert repr(Sum(Variable("x"), ONE)) == "Sum(Number(1), Variable('x'))"


class TestCopying:
    """Immutable nodes survive pickling and copying."""

    def test_pickle(self):
        tree = E("+ x * 2 ^ y / 1 2")
        assert pickle.loads(pickle.dumps(tree)) == tree

    def test_deepcopy(self):
        tree = E("* x + y 1")
        assert copy.deepcopy(tree) == tree


class TestTransformDispatch:
    """Tests for double dispatch through Transform."""

    class KindNames(Transform[str]):
        name = "kinds"

        def visit_number(self, node):
            return "number"

        def visit_variable(self, node):
            return "variable"

        def visit_sum(self, node):
            return "sum"

        def visit_product(self, node):
            return "product"

        def visit_power(self, node):
            return "power"

    def test_dispatch_by_kind(self):
        t = self.KindNames()
        assert Number(1).transform(t) == "number"
        assert Variable("x").transform(t) == "variable"
        assert E("+ x 1").transform(t) == "sum"
        assert E("* x 2").transform(t) == "product"
        assert E("^ x 2").transform(t) == "power"

    def test_call_shorthand(self):
        t = self.KindNames()
        assert t(E("+ x 1")) == "sum"

    def test_unhandled_kind(self):
        """Handlers default to NotImplementedError."""
        class OnlyNumbers(Transform[int]):
            def visit_number(self, node):
                return 1

        assert OnlyNumbers()(Number(5)) == 1
        with pytest.raises(NotImplementedError):
            OnlyNumbers()(Variable("x"))

    def test_recursive_transform(self):
        """A transform recurses through child.transform(self)."""
        class CountLeaves(Transform[int]):
            def visit_number(self, node):
                return 1

            def visit_variable(self, node):
                return 1

            def visit_sum(self, node):
                return sum(op.transform(self) for op in node.operands)

            visit_product = visit_sum

            def visit_power(self, node):
                return node.base.transform(self)

        assert CountLeaves()(E("+ x * 2 ^ y 3")) == 3
