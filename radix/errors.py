"""
Error taxonomy for RADIX.

RADIX - Rational Algebra: Differentiation, Identities and eXpansion

Every error raised by the library derives from RadixError, and also from
the builtin exception that best describes it, so callers can catch either:

    try:
        simplify(tree)
    except ZeroDivisionError:
        ...

Errors are raised at the point of violation and propagate untouched;
no pass recovers from them.
"""


class RadixError(Exception):
    """Base class for all RADIX errors."""


class DivisionByZero(RadixError, ZeroDivisionError):
    """A rational with a zero denominator, or the reciprocal of zero."""


class InvalidOperation(RadixError, ArithmeticError):
    """An operation with no defined result, such as the literal 0^0."""


class Indeterminate(InvalidOperation):
    """
    An expression whose value depends on an assignment that could make it 0^0.

    Raised for a variable-containing base raised to the literal exponent 0,
    since the base could evaluate to zero.
    """


class InvalidExponent(RadixError, ValueError):
    """An exponent expression that cannot be reduced to a rational number."""


class MalformedTree(RadixError, ValueError):
    """A node construction that violates the tree invariants."""


class ParseError(RadixError, ValueError):
    """
    Raised when a textual expression cannot be parsed.

    Args:
        description: What went wrong
        format_name: Name of the notation being parsed
    """

    def __init__(self, description: str, format_name: str):
        super().__init__(f"Parse exception (format: {format_name}): {description}")
        self.description = description
        self.format_name = format_name
