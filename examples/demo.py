#!/usr/bin/env python3
"""
RADIX Feature Demonstration

This script walks through the major features of the RADIX library.
"""

from radix import (
    E, Rational, Number, Power,
    Simplify, Expand, Differentiate, simplify, expand, differentiate,
    StraightLineParser, parse_pipeline,
    format_linear, format_tree,
    RadixError,
)


def section(title: str):
    """Print a section header."""
    print(f"\n{'='*60}")
    print(f" {title}")
    print('='*60)


def demo_rationals():
    """Demonstrate exact rational arithmetic."""
    section("Exact Rationals")

    half = Rational(1, 2)
    third = Rational(-2, 6)
    print(f"  1/2 + -1/3 = {half + third}")
    print(f"  1/2 * -1/3 = {half * third}")
    print(f"  (4/9)^(1/2) = {Rational(4, 9).pow(half)}")
    print(f"  (8/27)^(-2/3) = {Rational(8, 27).pow(Rational(-2, 3))}")
    print(f"  2^(1/2) = {Rational(2).pow(half)}  (no exact root)")


def demo_parsing():
    """Demonstrate both input formats."""
    section("Parsing")

    for text in ["+ x * 2 y", "- x y", "/ 1 x", "^ x / 1 2"]:
        print(f"  {text:12} => {format_linear(E(text))}")

    print("\n  Straight-line program:")
    parser = StraightLineParser()
    for line in [". x", ". 1", "+ 0 1", ". 3", "^ 2 3"]:
        print(f"    [{len(parser)}] {line:8} => {format_linear(parser.parse(line))}")


def demo_canonical_order():
    """Demonstrate that operand order does not matter."""
    section("Canonical Order")

    a, b = E("+ y + x 1"), E("+ + 1 x y")
    print(f"  {format_linear(a)} == {format_linear(b)}: {a == b}")
    print(f"  Sorted operands: {format_linear(E.sum('z', 3, E.mul('x', 2), 'a'))}")


def demo_simplify():
    """Demonstrate simplification."""
    section("Simplify")

    examples = [
        "+ x x",
        "* x * x x",
        "+ * 2 x * 3 x",
        "^ ^ x 2 / 1 2",
        "^ 8 / 1 3",
        "+ * x y * -1 * y x",
    ]
    for text in examples:
        print(f"  {format_linear(E(text)):28} => {format_linear(simplify(E(text)))}")


def demo_expand():
    """Demonstrate expansion into a sum of products."""
    section("Expand")

    for text in ["* + x 1 + x -1", "^ + x y 2", "^ + a 1 3"]:
        result = simplify(expand(E(text)))
        print(f"  {format_linear(E(text)):20} => {format_linear(result)}")


def demo_differentiate():
    """Demonstrate symbolic differentiation."""
    section("Differentiate")

    for text in ["^ x 3", "* x y", "/ 1 x", "^ + * 2 x 1 / 1 2"]:
        result = simplify(differentiate(E(text), "x"))
        print(f"  d/dx {format_linear(E(text)):22} => {format_linear(result)}")


def demo_pipelines():
    """Demonstrate pass pipelines and tracing."""
    section("Pipelines and Tracing")

    normalize = Expand() >> Simplify() >> Differentiate("x") >> Simplify()
    result, trace = normalize(E("^ + x 1 3"), trace=True)

    print(f"  {normalize}")
    for line in trace.format("chain").split('\n'):
        print(f"    {line}")

    print(f"\n  Compact: {trace.format('compact')}")
    print(f"  Summary: {trace.summary()}")

    derive = parse_pipeline("d:y, simplify")
    print(f"\n  {derive} on *(x, ^(y, 2)) => {format_linear(derive(E('* x ^ y 2')))}")


def demo_tree_output():
    """Demonstrate the tree renderer."""
    section("Tree Output")

    print(format_tree(E("+ 3 + x * 2 ^ y / 1 2")), end="")


def demo_errors():
    """Demonstrate error reporting."""
    section("Errors")

    for thunk, label in [
        (lambda: E("+ x"), "+ x"),
        (lambda: E("^ x y"), "^ x y"),
        (lambda: simplify(Power(Number(0), 0)), "simplify 0^0"),
        (lambda: Rational(1, 0), "1/0"),
    ]:
        try:
            thunk()
        except RadixError as e:
            print(f"  {label:14} => {type(e).__name__}: {e}")


def main():
    """Run all demonstrations."""
    print("RADIX - Rational Algebra: Differentiation, Identities and eXpansion")
    print("Feature Demonstration")

    demo_rationals()
    demo_parsing()
    demo_canonical_order()
    demo_simplify()
    demo_expand()
    demo_differentiate()
    demo_pipelines()
    demo_tree_output()
    demo_errors()

    print("\n" + "="*60)
    print(" Demo complete!")
    print("="*60)


if __name__ == "__main__":
    main()
