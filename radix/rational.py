"""
Exact rational arithmetic for RADIX.

RADIX - Rational Algebra: Differentiation, Identities and eXpansion

This module provides the number-theoretic primitives (binary GCD, LCM,
square-and-multiply exponentiation, perfect integer roots) and the
immutable Rational value type that every Number leaf carries.

Rationals are always kept in lowest terms with a positive denominator:

    Rational(6, -4)      # => -3/2
    Rational(1, 2) + Rational(1, 3)   # => 5/6
    Rational(4).pow(Rational(1, 2))   # => 2
    Rational(2).pow(Rational(1, 2))   # => None (not rational)

Magnitudes are not bounded or checked: Python integers never overflow, so
keeping numerators and denominators within a fixed width is left to the
caller.
"""

from typing import Optional, Union

from .errors import DivisionByZero, Indeterminate


# ============================================================
# Integer Primitives
# ============================================================

def _trailing_zeros(n: int) -> int:
    """Number of trailing zero bits of a positive integer."""
    return (n & -n).bit_length() - 1


def gcd(a: int, b: int) -> int:
    """
    Greatest common divisor using the binary GCD algorithm.

    Only shifts and subtractions are used, no division.
    gcd(0, n) = gcd(n, 0) = |n|, and the result is never negative.

    Examples:
        gcd(12, 18)  -> 6
        gcd(-4, 6)   -> 2
        gcd(0, 5)    -> 5
    """
    a = -a if a < 0 else a
    b = -b if b < 0 else b

    if a == 0:
        return b
    if b == 0:
        return a

    # gcd(2^i * a, 2^j * b) = 2^min(i, j) * gcd(a, b)
    i = _trailing_zeros(a)
    j = _trailing_zeros(b)
    a >>= i
    b >>= j
    k = min(i, j)

    while True:
        # Both a and b are odd here
        if a > b:
            a, b = b, a

        # gcd(a, b) = gcd(a, b - a), and odd - odd is even
        b -= a
        if b == 0:
            return a << k

        b >>= _trailing_zeros(b)


def lcm(a: int, b: int) -> int:
    """
    Least common multiple, always non-negative.

    Examples:
        lcm(4, 6)   -> 12
        lcm(-3, 5)  -> 15
    """
    if a == 0 or b == 0:
        return 0
    result = a * b // gcd(a, b)
    return result if result >= 0 else -result


def ipow(base: int, exp: int) -> int:
    """
    Compute base^exp by binary (square-and-multiply) exponentiation.

    Args:
        base: Integer base
        exp: Non-negative integer exponent

    Returns:
        base raised to exp, with ipow(0, 0) == 1

    Raises:
        ValueError: If exp is negative
    """
    if exp < 0:
        raise ValueError("Exponent cannot be negative")

    result = 1
    while exp:
        if exp & 1:
            result *= base
        exp >>= 1
        base *= base
    return result


def _integer_root(n: int, degree: int) -> int:
    """Floor of the degree-th root of a non-negative integer (Newton's method)."""
    if n < 2:
        return n

    # Start above the true root so the iteration decreases monotonically
    x = 1 << ((n.bit_length() + degree - 1) // degree)
    while True:
        y = ((degree - 1) * x + n // ipow(x, degree - 1)) // degree
        if y >= x:
            return x
        x = y


def perfect_root(radicand: int, degree: int) -> Optional[int]:
    """
    Extract an exact integer root, if one exists.

    Args:
        radicand: The integer under the root
        degree: The root degree, must be positive

    Returns:
        The integer r with r^degree == radicand, or None if the root is not perfect

    Raises:
        ValueError: If degree <= 0, or radicand is negative and degree is even

    Examples:
        perfect_root(27, 3)   -> 3
        perfect_root(-8, 3)   -> -2
        perfect_root(2, 2)    -> None
    """
    if degree <= 0:
        raise ValueError("Invalid root degree")

    negative = radicand < 0
    if negative and degree % 2 == 0:
        raise ValueError("Even roots of negative numbers are not real")

    magnitude = -radicand if negative else radicand
    root = _integer_root(magnitude, degree)
    if ipow(root, degree) != magnitude:
        return None
    return -root if negative else root


# ============================================================
# Rational Numbers
# ============================================================

RationalLike = Union["Rational", int]


class Rational:
    """
    An immutable rational number in lowest terms.

    The sign is stored in the numerator, the denominator is always positive
    and gcd(|num|, den) == 1. Zero is represented as 0/1.

    Rationals compare by value, hash consistently with int for integral
    values, and support the arithmetic operators + - * / and unary -.

    Examples:
        r = Rational(2, 4)     # 1/2
        r.num, r.den           # (1, 2)
        r + 1                  # 3/2
        r.reciprocal()         # 2
        str(Rational(-3, 4))   # "-3/4"
    """

    __slots__ = ('_num', '_den')

    def __init__(self, num: int = 0, den: int = 1):
        """
        Construct and normalize num/den.

        Raises:
            DivisionByZero: If den == 0
            TypeError: If num or den is not an integer
        """
        if not isinstance(num, int) or not isinstance(den, int):
            raise TypeError("Rational numerator and denominator must be integers")
        if den == 0:
            raise DivisionByZero("rational number denominator cannot be zero")

        if den < 0:
            num, den = -num, -den

        divisor = gcd(num, den)
        object.__setattr__(self, '_num', num // divisor)
        object.__setattr__(self, '_den', den // divisor)

    @classmethod
    def _make(cls, num: int, den: int) -> 'Rational':
        """Build a Rational from an already normalized pair."""
        value = cls.__new__(cls)
        object.__setattr__(value, '_num', num)
        object.__setattr__(value, '_den', den)
        return value

    @classmethod
    def from_int(cls, value: int) -> 'Rational':
        """Construct an integral Rational."""
        if not isinstance(value, int):
            raise TypeError("Rational.from_int requires an integer")
        return cls._make(value, 1)

    @classmethod
    def from_num_den(cls, num: int, den: int) -> 'Rational':
        """Construct num/den in lowest terms. Raises DivisionByZero if den == 0."""
        return cls(num, den)

    @classmethod
    def parse(cls, text: str) -> 'Rational':
        """
        Parse "n" or "n/d".

        Examples:
            Rational.parse("3")     -> 3
            Rational.parse("-6/4")  -> -3/2

        Raises:
            ValueError: If the text is not an integer or a fraction of integers
            DivisionByZero: If the denominator is zero
        """
        num_text, sep, den_text = text.strip().partition('/')
        try:
            num = int(num_text)
            den = int(den_text) if sep else 1
        except ValueError:
            raise ValueError(f"Invalid rational number: {text!r}") from None
        return cls(num, den)

    def __setattr__(self, name, value):
        raise AttributeError("Rational is immutable")

    def __delattr__(self, name):
        raise AttributeError("Rational is immutable")

    @property
    def num(self) -> int:
        """The numerator (carries the sign)."""
        return self._num

    @property
    def den(self) -> int:
        """The denominator (always positive)."""
        return self._den

    @property
    def sign(self) -> int:
        """-1, 0 or 1."""
        return (self._num > 0) - (self._num < 0)

    def is_integer(self) -> bool:
        """True if the denominator is one."""
        return self._den == 1

    # ------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------

    def add(self, other: 'Rational') -> 'Rational':
        """Exact sum of two rationals."""
        den = lcm(self._den, other._den)
        num = self._num * (den // self._den) + other._num * (den // other._den)

        divisor = gcd(num, den)
        return Rational._make(num // divisor, den // divisor)

    def mul(self, other: 'Rational') -> 'Rational':
        """Exact product of two rationals."""
        # Reduce crosswise so the result needs no further normalization
        g1 = gcd(self._num, other._den)
        g2 = gcd(other._num, self._den)
        num = (self._num // g1) * (other._num // g2)
        den = (self._den // g2) * (other._den // g1)
        return Rational._make(num, den)

    def sub(self, other: 'Rational') -> 'Rational':
        """Exact difference of two rationals."""
        return self.add(other.opposite())

    def div(self, other: 'Rational') -> 'Rational':
        """Exact quotient. Raises DivisionByZero if other is zero."""
        return self.mul(other.reciprocal())

    def opposite(self) -> 'Rational':
        """The additive inverse, always defined."""
        return Rational._make(-self._num, self._den)

    def reciprocal(self) -> 'Rational':
        """
        The multiplicative inverse.

        Raises:
            DivisionByZero: If this rational is zero (the reciprocal is undefined)
        """
        if self._num == 0:
            raise DivisionByZero("Reciprocal of zero is undefined")
        if self._num < 0:
            return Rational._make(-self._den, -self._num)
        return Rational._make(self._den, self._num)

    def pow(self, exponent: RationalLike) -> Optional['Rational']:
        """
        Raise this rational to a rational exponent, if the result is rational.

        Policy:
            - b^0 = 1, except 0^0 which raises Indeterminate
            - b^1 = b
            - an even root of a negative base is not real: returns None
            - a negative exponent is applied to the reciprocal of the base
            - otherwise the exponent's denominator is taken as a root degree,
              and the result is rational only if both numerator and
              denominator of the base are perfect powers of that degree

        Args:
            exponent: The exponent, a Rational or int

        Returns:
            The exact result, or None if it is not a real rational number

        Raises:
            Indeterminate: For 0^0
            DivisionByZero: For 0 raised to a negative exponent

        Examples:
            Rational(4).pow(Rational(1, 2))     -> 2
            Rational(8, 27).pow(Rational(-2, 3)) -> 9/4
            Rational(2).pow(Rational(1, 2))     -> None
            Rational(-4).pow(Rational(1, 2))    -> None
        """
        exponent = _coerce(exponent)

        if exponent._num == 0:
            if self._num == 0:
                raise Indeterminate("Cannot evaluate 0^0")
            return Rational.ONE

        if exponent == Rational.ONE:
            return self

        if exponent._den % 2 == 0 and self._num < 0:
            return None

        base = self
        if exponent._num < 0:
            exponent = exponent.opposite()
            base = self.reciprocal()

        num_root = perfect_root(base._num, exponent._den)
        den_root = perfect_root(base._den, exponent._den)
        if num_root is None or den_root is None:
            return None

        return Rational(ipow(num_root, exponent._num), ipow(den_root, exponent._num))

    def compare(self, other: 'Rational') -> int:
        """Three-way comparison: -1, 0 or 1."""
        lhs = self._num * other._den
        rhs = other._num * self._den
        return (lhs > rhs) - (lhs < rhs)

    # ------------------------------------------------------------
    # Python protocol
    # ------------------------------------------------------------

    def __add__(self, other):
        other = _coerce_or_none(other)
        return NotImplemented if other is None else self.add(other)

    __radd__ = __add__

    def __mul__(self, other):
        other = _coerce_or_none(other)
        return NotImplemented if other is None else self.mul(other)

    __rmul__ = __mul__

    def __sub__(self, other):
        other = _coerce_or_none(other)
        return NotImplemented if other is None else self.sub(other)

    def __rsub__(self, other):
        other = _coerce_or_none(other)
        return NotImplemented if other is None else other.sub(self)

    def __truediv__(self, other):
        other = _coerce_or_none(other)
        return NotImplemented if other is None else self.div(other)

    def __rtruediv__(self, other):
        other = _coerce_or_none(other)
        return NotImplemented if other is None else other.div(self)

    def __neg__(self) -> 'Rational':
        return self.opposite()

    def __abs__(self) -> 'Rational':
        return self.opposite() if self._num < 0 else self

    def __bool__(self) -> bool:
        return self._num != 0

    def __eq__(self, other):
        if isinstance(other, Rational):
            return self._num == other._num and self._den == other._den
        if isinstance(other, int) and not isinstance(other, bool):
            return self._den == 1 and self._num == other
        return NotImplemented

    def __hash__(self):
        if self._den == 1:
            return hash(self._num)
        return hash((self._num, self._den))

    def __lt__(self, other):
        other = _coerce_or_none(other)
        return NotImplemented if other is None else self.compare(other) < 0

    def __le__(self, other):
        other = _coerce_or_none(other)
        return NotImplemented if other is None else self.compare(other) <= 0

    def __gt__(self, other):
        other = _coerce_or_none(other)
        return NotImplemented if other is None else self.compare(other) > 0

    def __ge__(self, other):
        other = _coerce_or_none(other)
        return NotImplemented if other is None else self.compare(other) >= 0

    def __str__(self) -> str:
        if self._den == 1:
            return str(self._num)
        return f"{self._num}/{self._den}"

    def __repr__(self) -> str:
        if self._den == 1:
            return f"Rational({self._num})"
        return f"Rational({self._num}, {self._den})"

    def __reduce__(self):
        return (Rational, (self._num, self._den))


def _coerce_or_none(value) -> Optional[Rational]:
    """Convert an int to a Rational; None for unsupported types."""
    if isinstance(value, Rational):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return Rational._make(value, 1)
    return None


def _coerce(value) -> Rational:
    """Convert an int to a Rational; TypeError for unsupported types."""
    result = _coerce_or_none(value)
    if result is None:
        raise TypeError(f"Expected a Rational or int, got {type(value).__name__}")
    return result


Rational.ZERO = Rational._make(0, 1)
Rational.ONE = Rational._make(1, 1)
Rational.NEG_ONE = Rational._make(-1, 1)
