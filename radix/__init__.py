"""
RADIX - Rational Algebra: Differentiation, Identities and eXpansion

Exact rational expression trees with simplification, expansion and
symbolic differentiation.

Quick Start:
    from radix import E, simplify, expand, differentiate

    simplify(E("* x x"))                       # => ^(x, 2)
    simplify(E("+ x x"))                       # => *(2, x)
    simplify(expand(E("^ + x 1 2")))           # => +(1, ^(x, 2), *(2, x))
    simplify(differentiate(E("^ x 2"), "x"))   # => *(2, x)

Polish Notation:
    + x 1              x + 1
    * 2 ^ x 3          2 * x^3
    / 1 x              1 / x
    ^ x / 1 2          x^(1/2)

Pipelines:
    from radix import Expand, Simplify

    normalize = Expand() >> Simplify()
    result, trace = normalize(E("* + x 1 + x 1"), trace=True)
    print(trace.format("chain"))
"""

__version__ = "0.1.0"

# Errors
from .errors import (
    RadixError,
    DivisionByZero,
    InvalidOperation,
    Indeterminate,
    InvalidExponent,
    MalformedTree,
    ParseError,
)

# Rational arithmetic
from .rational import Rational, gcd, lcm, ipow, perfect_root

# Expression nodes and the transform contract
from .nodes import (
    Node,
    Number,
    Variable,
    Sum,
    Product,
    Power,
    Transform,
    ZERO,
    ONE,
    NEG_ONE,
)

# Rewrite passes
from .passes import (
    Simplify,
    Expand,
    Differentiate,
    simplify,
    expand,
    differentiate,
)

# Input formats
from .parse import (
    StraightLineParser,
    parse_polish,
    parse_program,
    POLISH_FORMAT,
    PROGRAM_FORMAT,
)

# Renderers
from .printers import LinearPrinter, TreePrinter, format_linear, format_tree

# Pipelines
from .pipeline import (
    Pipeline,
    PassStep,
    PassTrace,
    BUILTIN_PASSES,
    build_pass,
    parse_pipeline,
)

# Expression builder
from .builder import E

# Public API
__all__ = [
    # Version
    "__version__",
    # Errors
    "RadixError",
    "DivisionByZero",
    "InvalidOperation",
    "Indeterminate",
    "InvalidExponent",
    "MalformedTree",
    "ParseError",
    # Rational arithmetic
    "Rational",
    "gcd",
    "lcm",
    "ipow",
    "perfect_root",
    # Nodes
    "Node",
    "Number",
    "Variable",
    "Sum",
    "Product",
    "Power",
    "ZERO",
    "ONE",
    "NEG_ONE",
    # Transforms
    "Transform",
    "Simplify",
    "Expand",
    "Differentiate",
    "simplify",
    "expand",
    "differentiate",
    # Parsers
    "StraightLineParser",
    "parse_polish",
    "parse_program",
    "POLISH_FORMAT",
    "PROGRAM_FORMAT",
    # Printers
    "LinearPrinter",
    "TreePrinter",
    "format_linear",
    "format_tree",
    # Pipelines
    "Pipeline",
    "PassStep",
    "PassTrace",
    "BUILTIN_PASSES",
    "build_pass",
    "parse_pipeline",
    # Expression builder
    "E",
]
