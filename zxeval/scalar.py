"""
Exact and approximate complex scalars.

A `Scalar` is either `Exact`, an element of the cyclotomic field Q[omega]
where omega is a primitive 2N-th root of unity, stored as its first N
rational coefficients, or `Float`, a 64-bit complex number. Addition is
O(N) and multiplication O(N^2).

The coefficient storage is a class-level parameter (`coeffs_type`):
fixed-capacity storage (`Scalar1` ... `Scalar8`) keeps every value at the
same order, which is what tensor elements want, while growable storage
(`ScalarN`) picks the order at runtime. Whenever two exact values have no
common order the storage can hold, arithmetic silently falls back to
floating point.
"""

import abc
import cmath
import functools
import math
from fractions import Fraction
from typing import ClassVar, List, Optional, Sequence, Tuple, Type, Union

import numpy as np
import sympy
from attrs import field, frozen

from .log import get_logger
logger = get_logger(__name__)

DEFAULT_EPSILON = 1e-6
"""Tolerance used by `Scalar.approx_eq`, on each of the real/imaginary parts."""

Phase = Union[int, Fraction, sympy.Rational]
"""A rational multiple of pi, e.g. Fraction(1, 4) for e^(i pi/4)."""


def to_fraction(p) -> Fraction:
    """Coerce an int, Fraction or sympy.Rational into a Fraction."""
    if isinstance(p, Fraction):
        return p
    if isinstance(p, (bool, np.bool_)):
        raise TypeError(f"Phase must be a rational number, got bool: {p!r}")
    if isinstance(p, (int, np.integer)):
        return Fraction(int(p))
    if isinstance(p, sympy.Rational):
        return Fraction(int(p.p), int(p.q))
    raise TypeError(f"Phase must be a rational number, got {type(p).__name__}: {p!r}")


def mod2(p) -> Fraction:
    """Normalise a rational phase into the range (-1, 1]."""
    p = to_fraction(p)
    num = p.numerator % (2 * p.denominator)
    if num > p.denominator:
        num -= 2 * p.denominator
    return Fraction(num, p.denominator)


class Coeffs(abc.ABC):
    """Storage capability for the coefficient list of an exact scalar.

    `new(size)` returns a zeroed coefficient list able to hold a value of
    order `size`, together with the padding factor: coefficient i of an
    order-`size` value lives at index i * pad. It returns None when the
    storage cannot represent that order.
    """

    @classmethod
    @abc.abstractmethod
    def new(cls, size: int) -> Optional[Tuple[List[Fraction], int]]:
        ...

    @classmethod
    @abc.abstractmethod
    def zero(cls) -> Tuple[Fraction, ...]:
        ...

    @classmethod
    @abc.abstractmethod
    def one(cls) -> Tuple[Fraction, ...]:
        ...


class FixedCoeffs(Coeffs):
    """Coefficient lists of a fixed capacity `size`."""
    size: ClassVar[int] = 1

    @classmethod
    def new(cls, size):
        if size > 0 and cls.size % size == 0:
            return [Fraction(0)] * cls.size, cls.size // size
        return None

    @classmethod
    def zero(cls):
        return (Fraction(0),) * cls.size

    @classmethod
    def one(cls):
        return (Fraction(1),) + (Fraction(0),) * (cls.size - 1)


@functools.lru_cache(maxsize=None)
def fixed_coeffs(n: int) -> Type[FixedCoeffs]:
    if n < 1:
        raise ValueError(f"Coefficient capacity must be positive, got {n}")
    return type(f"Coeffs{n}", (FixedCoeffs,), {"size": n})


class VecCoeffs(Coeffs):
    """Growable coefficient lists; any order can be represented."""

    @classmethod
    def new(cls, size):
        if size < 1:
            return None
        return [Fraction(0)] * size, 1

    @classmethod
    def zero(cls):
        return (Fraction(0),)

    @classmethod
    def one(cls):
        return (Fraction(1),)


@frozen
class Exact:
    coeffs: Tuple[Fraction, ...] = field(converter=tuple)


@frozen
class Float:
    value: complex = field(converter=complex)


def _lcm_with_padding(n1: int, n2: int) -> Tuple[int, int, int]:
    if n1 == n2:
        return n1, 1, 1
    lcm = math.lcm(n1, n2)
    return lcm, lcm // n1, lcm // n2


class Scalar:
    """A complex number, either `Exact` (cyclotomic) or `Float`.

    Subclasses fix the coefficient storage through `coeffs_type`. Values are
    immutable; every operation returns a new Scalar of the left operand's
    class. Plain ints/Fractions act as exact order-1 values and floats/complex
    numbers as `Float`, so `2 * s` and `s + 1` work as expected.
    """

    coeffs_type: ClassVar[Type[Coeffs]] = VecCoeffs
    dtype: ClassVar[type] = object
    __slots__ = ("rep",)

    def __init__(self, rep):
        if not isinstance(rep, (Exact, Float)):
            raise TypeError(f"Scalar representation must be Exact or Float, got {type(rep).__name__}")
        self.rep = rep

    # ------------------------------------------------------------------
    # constructors
    # ------------------------------------------------------------------
    @classmethod
    def zero(cls) -> "Scalar":
        return cls(Exact(cls.coeffs_type.zero()))

    @classmethod
    def one(cls) -> "Scalar":
        return cls(Exact(cls.coeffs_type.one()))

    @classmethod
    def complex(cls, re: float, im: float) -> "Scalar":
        return cls(Float(complex(re, im)))

    @classmethod
    def real(cls, re: float) -> "Scalar":
        return cls(Float(complex(re, 0.0)))

    @classmethod
    def from_int_coeffs(cls, coeffs: Sequence) -> "Scalar":
        """Build sum(coeffs[i] * omega^i), with omega a 2*len(coeffs)-th root of unity."""
        res = cls.coeffs_type.new(len(coeffs))
        if res is None:
            raise ValueError(
                f"Wrong number of coefficients for scalar type {cls.__name__}: {len(coeffs)}"
            )
        out, pad = res
        for i, c in enumerate(coeffs):
            out[i * pad] = to_fraction(c)
        return cls(Exact(out))

    @classmethod
    def from_phase(cls, p: Phase) -> "Scalar":
        """Return e^(i pi p)."""
        p = to_fraction(p)
        res = cls.coeffs_type.new(p.denominator)
        if res is None:
            logger.debug(f"{cls.__name__} cannot hold phase {p}, falling back to float")
            return cls(Float(cmath.exp(1j * math.pi * float(p))))

        coeffs, pad = res
        numer = p.numerator * pad
        denom = p.denominator * pad
        numer %= 2 * denom
        if numer >= denom:
            coeffs[numer - denom] = Fraction(-1)
        else:
            coeffs[numer] = Fraction(1)
        return cls(Exact(coeffs))

    @classmethod
    def sqrt2_pow(cls, p: int) -> "Scalar":
        """Return sqrt(2)^p.

        Even powers are the rational 2^(p/2). Odd powers use omega - omega^3 =
        sqrt(2) for omega = e^(i pi/4), so they need storage of order 4.
        """
        p = int(p)
        if p % 2 == 0:
            res = cls.coeffs_type.new(1)
            if res is not None:
                coeffs, _ = res
                coeffs[0] = Fraction(2) ** (p // 2)
                return cls(Exact(coeffs))
        else:
            res = cls.coeffs_type.new(4)
            if res is not None:
                coeffs, pad = res
                r = Fraction(2) ** ((p - 1) // 2)
                coeffs[pad] = r
                coeffs[3 * pad] = -r
                return cls(Exact(coeffs))

        logger.debug(f"{cls.__name__} cannot hold sqrt(2)^{p} exactly, falling back to float")
        return cls(Float(complex(math.sqrt(2.0) ** p, 0.0)))

    @classmethod
    def sqrt2(cls) -> "Scalar":
        return cls.sqrt2_pow(1)

    @classmethod
    def one_over_sqrt2(cls) -> "Scalar":
        return cls.sqrt2_pow(-1)

    @classmethod
    def one_plus_phase(cls, p: Phase) -> "Scalar":
        return cls.one() + cls.from_phase(p)

    @classmethod
    def from_scalar(cls, s) -> "Scalar":
        """Re-express `s` with this class's coefficient storage.

        Falls back to `Float` when the source order does not fit the
        destination storage.
        """
        if not isinstance(s, Scalar):
            coerced = cls._from_number(s)
            if coerced is NotImplemented:
                raise TypeError(f"Cannot convert {type(s).__name__} to {cls.__name__}")
            return coerced
        if isinstance(s.rep, Float):
            return cls(Float(s.rep.value))

        src = s.rep.coeffs
        res = cls.coeffs_type.new(len(src))
        if res is None:
            logger.debug(f"{cls.__name__} cannot hold order {len(src)}, converting {type(s).__name__} to float")
            return cls(Float(s.float_value()))
        coeffs, pad = res
        for i, c in enumerate(src):
            coeffs[i * pad] = c
        return cls(Exact(coeffs))

    @classmethod
    def _from_number(cls, x):
        if isinstance(x, (bool, np.bool_)):
            x = int(x)
        if isinstance(x, (int, np.integer, Fraction, sympy.Rational)):
            coeffs, _ = cls.coeffs_type.new(1)
            coeffs[0] = to_fraction(x)
            return cls(Exact(coeffs))
        if isinstance(x, (float, complex, np.floating, np.complexfloating)):
            return cls(Float(complex(x)))
        return NotImplemented

    def _coerce(self, other):
        if isinstance(other, Scalar):
            if type(other) is type(self):
                return other
            return type(self).from_scalar(other)
        return type(self)._from_number(other)

    # ------------------------------------------------------------------
    # inspection
    # ------------------------------------------------------------------
    def is_exact(self) -> bool:
        return isinstance(self.rep, Exact)

    @property
    def order(self) -> Optional[int]:
        """Number of stored coefficients, or None for a Float."""
        if isinstance(self.rep, Exact):
            return len(self.rep.coeffs)
        return None

    @property
    def coeffs(self) -> Optional[Tuple[Fraction, ...]]:
        if isinstance(self.rep, Exact):
            return self.rep.coeffs
        return None

    def float_value(self) -> "complex":
        if isinstance(self.rep, Float):
            return self.rep.value
        coeffs = self.rep.coeffs
        n = len(coeffs)
        total = 0j
        for i, c in enumerate(coeffs):
            if c:
                total += float(c) * cmath.exp(1j * math.pi * i / n)
        return total

    def to_float(self) -> "Scalar":
        return type(self)(Float(self.float_value()))

    def to_sympy(self) -> sympy.Expr:
        if isinstance(self.rep, Float):
            v = self.rep.value
            return sympy.Float(v.real) + sympy.I * sympy.Float(v.imag)
        n = len(self.rep.coeffs)
        return sympy.Add(*[
            sympy.Rational(c.numerator, c.denominator) * sympy.exp(sympy.I * sympy.pi * sympy.Rational(i, n))
            for i, c in enumerate(self.rep.coeffs) if c
        ])

    def is_zero(self) -> bool:
        return self == type(self).zero()

    def is_one(self) -> bool:
        return self == type(self).one()

    def approx_eq(self, other, epsilon: float = DEFAULT_EPSILON) -> bool:
        """Compare floating values, within `epsilon` on the real and imaginary parts."""
        c1 = self.float_value()
        c2 = other.float_value() if isinstance(other, Scalar) else complex(other)
        return abs(c1.real - c2.real) <= epsilon and abs(c1.imag - c2.imag) <= epsilon

    # ------------------------------------------------------------------
    # arithmetic
    # ------------------------------------------------------------------
    def mul_phase(self, p: Phase) -> "Scalar":
        return self * type(self).from_phase(p)

    def mul_sqrt2_pow(self, p: int) -> "Scalar":
        return self * type(self).sqrt2_pow(p)

    def __mul__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        cls = type(self)
        if isinstance(self.rep, Float) or isinstance(other.rep, Float):
            return cls(Float(self.float_value() * other.float_value()))

        c0, c1 = self.rep.coeffs, other.rep.coeffs
        lcm, pad0, pad1 = _lcm_with_padding(len(c0), len(c1))
        res = cls.coeffs_type.new(lcm)
        if res is None:
            logger.debug(f"{cls.__name__} has no common order {lcm} for product, falling back to float")
            return cls(Float(self.float_value() * other.float_value()))

        coeffs, pad = res
        size = len(coeffs)
        # omega^size = -1, so positions past size wrap around with a sign flip
        for i, x in enumerate(c0):
            if not x:
                continue
            for j, y in enumerate(c1):
                if not y:
                    continue
                pos = (i * pad * pad0 + j * pad * pad1) % (2 * size)
                if pos < size:
                    coeffs[pos] += x * y
                else:
                    coeffs[pos - size] -= x * y
        return cls(Exact(coeffs))

    def __rmul__(self, other):
        return self.__mul__(other)

    def __add__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        cls = type(self)
        if isinstance(self.rep, Float) or isinstance(other.rep, Float):
            return cls(Float(self.float_value() + other.float_value()))

        c0, c1 = self.rep.coeffs, other.rep.coeffs
        lcm, pad0, pad1 = _lcm_with_padding(len(c0), len(c1))
        res = cls.coeffs_type.new(lcm)
        if res is None:
            logger.debug(f"{cls.__name__} has no common order {lcm} for sum, falling back to float")
            return cls(Float(self.float_value() + other.float_value()))

        coeffs, pad = res
        for i, x in enumerate(c0):
            coeffs[i * pad * pad0] += x
        for i, x in enumerate(c1):
            coeffs[i * pad * pad1] += x
        return cls(Exact(coeffs))

    def __radd__(self, other):
        return self.__add__(other)

    def __neg__(self):
        if isinstance(self.rep, Float):
            return type(self)(Float(-self.rep.value))
        return type(self)(Exact(-c for c in self.rep.coeffs))

    def __sub__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self + (-other)

    def __rsub__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return other + (-self)

    def __eq__(self, other):
        # Scalars of any storage type compare on their own coefficients
        if not isinstance(other, Scalar):
            other = self._coerce(other)
            if other is NotImplemented:
                return NotImplemented
        a, b = self.rep, other.rep
        if isinstance(a, Float) and isinstance(b, Float):
            return a.value == b.value
        if isinstance(a, Exact) and isinstance(b, Exact):
            c0, c1 = a.coeffs, b.coeffs
            lcm, pad0, pad1 = _lcm_with_padding(len(c0), len(c1))
            for i in range(lcm):
                x = c0[i // pad0] if i % pad0 == 0 else 0
                y = c1[i // pad1] if i % pad1 == 0 else 0
                if x != y:
                    return False
            return True
        return False

    __hash__ = None

    def __complex__(self):
        return self.float_value()

    def __str__(self):
        if isinstance(self.rep, Float):
            return str(self.rep.value)
        terms = []
        for i, c in enumerate(self.rep.coeffs):
            if c:
                terms.append(str(c) if i == 0 else f"{c} * om^{i}")
        return " + ".join(terms) if terms else "0"

    def __repr__(self):
        if isinstance(self.rep, Float):
            return f"{type(self).__name__}.complex({self.rep.value.real!r}, {self.rep.value.imag!r})"
        return f"{type(self).__name__}({self})"


class ScalarN(Scalar):
    """Scalar with growable coefficient storage (order chosen at runtime)."""
    coeffs_type = VecCoeffs
    __slots__ = ()


class Scalar1(Scalar):
    coeffs_type = fixed_coeffs(1)
    __slots__ = ()


class Scalar2(Scalar):
    coeffs_type = fixed_coeffs(2)
    __slots__ = ()


class Scalar3(Scalar):
    coeffs_type = fixed_coeffs(3)
    __slots__ = ()


class Scalar4(Scalar):
    """Fixed order 4 (omega = e^(i pi/4)): enough for Clifford+T."""
    coeffs_type = fixed_coeffs(4)
    __slots__ = ()


class Scalar5(Scalar):
    coeffs_type = fixed_coeffs(5)
    __slots__ = ()


class Scalar6(Scalar):
    coeffs_type = fixed_coeffs(6)
    __slots__ = ()


class Scalar7(Scalar):
    coeffs_type = fixed_coeffs(7)
    __slots__ = ()


class Scalar8(Scalar):
    coeffs_type = fixed_coeffs(8)
    __slots__ = ()
