"""Tests for the E expression builder."""

import pytest
from radix import (
    E, Number, Variable, Sum, Product, Power, Rational, NEG_ONE,
    MalformedTree, ParseError,
)


class TestEBuilder:
    """Tests for E expression builder."""

    def test_parse_polish(self):
        """E() parses Polish notation."""
        assert E("+ x 1") == Sum(Variable("x"), Number(1))
        assert E("^ x 2") == Power(Variable("x"), 2)

    def test_parse_error(self):
        with pytest.raises(ParseError):
            E("+ x")

    def test_num(self):
        """E.num() builds rational constants."""
        assert E.num(5) == Number(5)
        assert E.num(3, 4) == Number(Rational(3, 4))
        assert E.num(6, -4) == Number(Rational(-3, 2))
        assert E.num("-6/4") == Number(Rational(-3, 2))
        assert E.num(Rational(1, 2), 2) == Number(Rational(1, 4))

    def test_num_zero_denominator(self):
        with pytest.raises(ZeroDivisionError):
            E.num(1, 0)

    def test_var(self):
        """E.var() builds a variable."""
        assert E.var("x") == Variable("x")
        with pytest.raises(MalformedTree):
            E.var("x1")

    def test_vars(self):
        """E.vars() allows unpacking."""
        x, y, z = E.vars("x", "y", "z")
        assert (x, y, z) == (Variable("x"), Variable("y"), Variable("z"))

    def test_sum_and_mul_coerce(self):
        """Plain ints and names become nodes."""
        assert E.sum("x", 1) == Sum(Variable("x"), Number(1))
        assert E.mul(2, "y", Rational(1, 3)) == Product(Number(2), Variable("y"), Number(Rational(1, 3)))

    def test_sub_and_div(self):
        x, y = E.vars("x", "y")
        assert E.sub(x, y) == Sum(x, Product(NEG_ONE, y))
        assert E.div(1, "x") == Product(Number(1), Power(x, -1))

    def test_pow(self):
        x = Variable("x")
        assert E.pow("x", 2) == Power(x, 2)
        assert E.pow(x, Rational(1, 3)) == Power(x, Rational(1, 3))
        assert E.pow(x, E("/ 1 2")) == Power(x, Rational(1, 2))

    def test_combined_with_parse(self):
        """Builder and parser agree."""
        x, y = E.vars("x", "y")
        assert E.sum(x, E.mul(2, y)) == E("+ x * 2 y")

    def test_invalid_operand(self):
        with pytest.raises(MalformedTree):
            E.sum("x", 1.5)
        with pytest.raises(MalformedTree):
            E.sum("x")

    def test_program(self):
        x = Variable("x")
        assert E.program([". x", ". 2", "^ 0 1"]) == Power(x, 2)
        assert E.program(". x\n. 3\n* 0 1") == Product(Number(3), x)

    def test_repr(self):
        assert "expression builder" in repr(E)
