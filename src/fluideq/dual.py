"""Forward mode automatic differentiation with dual numbers.

The equation of state is written once, generic in its number type, and evaluated with
the number types below to obtain exact partial derivatives:

- :class:`Dual`: value and first derivative in one direction.
- :class:`HyperDual`: value, first derivatives in two directions and the mixed second
  derivative.
- :class:`Dual3`: value and the first three derivatives in one direction.

The fields of all types can themselves be dual numbers, e.g. a :class:`HyperDual`
over :class:`Dual` yields a second derivative which is differentiable once more.
Arithmetic between numbers of different nesting depth treats the shallower operand as
a constant of the deeper one.

Elementary functions are provided on module level (:func:`sqrt`, :func:`log`,
:func:`exp`) and dispatch to numpy for plain floats.

"""

from __future__ import annotations

from typing import Any, Sequence, TypeVar, Union, cast

import numpy as np

__all__ = [
    "DualNumber",
    "Dual",
    "HyperDual",
    "Dual3",
    "sqrt",
    "log",
    "exp",
    "value",
    "re",
    "eps",
    "safe_sum",
]

Number = Union[float, "DualNumber"]
"""Any number the equation of state can be evaluated with."""

_SAME = 0
_SCALAR = 1


def depth(x: Any) -> int:
    """Nesting depth of a number; 0 for floats."""
    return x.depth if isinstance(x, DualNumber) else 0


def sqrt(x: Any) -> Any:
    """Square root of a float or dual number."""
    if isinstance(x, DualNumber):
        return x.sqrt()
    return np.sqrt(x)


def log(x: Any) -> Any:
    """Natural logarithm of a float or dual number."""
    if isinstance(x, DualNumber):
        return x.log()
    return np.log(x)


def exp(x: Any) -> Any:
    """Exponential function of a float or dual number."""
    if isinstance(x, DualNumber):
        return x.exp()
    return np.exp(x)


def value(x: Any) -> float:
    """Returns the real part of a (possibly nested) dual number as float."""
    while isinstance(x, DualNumber):
        x = x.re
    return float(x)


def re(x: Any) -> Any:
    """Returns the real part of a dual number, one level deep. Floats are returned
    unchanged."""
    return x.re if isinstance(x, DualNumber) else x


def eps(x: Any) -> Any:
    """Returns the derivative part of a :class:`Dual`. Floats have zero derivative."""
    return x.eps if isinstance(x, Dual) else 0.0


_Addable = TypeVar("_Addable")


def safe_sum(x: Sequence[_Addable]) -> _Addable:
    """Safely sum the elements, without creating a first addition with 0.

    Parameters:
        x: A sequence of any objects which support the ``+`` operation.

    Returns:
        The sum of ``x``.

    """
    if len(x) >= 1:
        sum_ = x[0]
        for i in range(1, len(x)):
            sum_ = sum_ + x[i]  # type: ignore[operator]
        return sum_
    else:
        return cast(_Addable, 0.0)


class DualNumber:
    """Base class of all dual number types.

    Subclasses store their fields in ``__slots__``, the first of which is the real part
    ``re``. They implement the product of fields and the chain rule up to their
    differentiation order.

    """

    __slots__ = ()

    order: int = 0
    """Highest derivative order carried by the type."""

    @property
    def parts(self) -> tuple:
        raise NotImplementedError

    @property
    def depth(self) -> int:
        return 1 + depth(self.parts[0])

    def _mul_parts(self, a: tuple, b: tuple) -> tuple:
        raise NotImplementedError

    def _chain(self, f: list) -> DualNumber:
        """Applies a scalar function given the derivatives ``f`` of the function at the
        real part, ``f[k]`` being the ``k``-th derivative."""
        raise NotImplementedError

    def _kind(self, other: Any) -> int | None:
        if isinstance(other, DualNumber):
            d_other = other.depth
            d_self = self.depth
            if d_other < d_self:
                return _SCALAR
            if d_other == d_self and type(other) is type(self):
                return _SAME
            if d_other == d_self:
                raise TypeError(
                    f"Incompatible dual numbers {type(self).__name__} and "
                    f"{type(other).__name__}."
                )
            return None
        if isinstance(other, np.ndarray):
            return None
        return _SCALAR

    def __add__(self, other):
        kind = self._kind(other)
        if kind == _SAME:
            return type(self)(*(a + b for a, b in zip(self.parts, other.parts)))
        if kind == _SCALAR:
            p = self.parts
            return type(self)(p[0] + other, *p[1:])
        return NotImplemented

    def __radd__(self, other):
        return self.__add__(other)

    def __sub__(self, other):
        kind = self._kind(other)
        if kind == _SAME:
            return type(self)(*(a - b for a, b in zip(self.parts, other.parts)))
        if kind == _SCALAR:
            p = self.parts
            return type(self)(p[0] - other, *p[1:])
        return NotImplemented

    def __rsub__(self, other):
        kind = self._kind(other)
        if kind == _SCALAR:
            p = self.parts
            return type(self)(other - p[0], *(-x for x in p[1:]))
        return NotImplemented

    def __mul__(self, other):
        kind = self._kind(other)
        if kind == _SAME:
            return type(self)(*self._mul_parts(self.parts, other.parts))
        if kind == _SCALAR:
            return type(self)(*(x * other for x in self.parts))
        return NotImplemented

    def __rmul__(self, other):
        return self.__mul__(other)

    def __truediv__(self, other):
        kind = self._kind(other)
        if kind == _SAME:
            return self * other.recip()
        if kind == _SCALAR:
            return type(self)(*(x / other for x in self.parts))
        return NotImplemented

    def __rtruediv__(self, other):
        kind = self._kind(other)
        if kind == _SCALAR:
            return self.recip() * other
        return NotImplemented

    def __pow__(self, other):
        if isinstance(other, DualNumber):
            return (other * self.log()).exp()
        return self.powf(other)

    def __rpow__(self, other):
        kind = self._kind(other)
        if kind == _SCALAR:
            return (self * log(other)).exp()
        return NotImplemented

    def __neg__(self):
        return type(self)(*(-x for x in self.parts))

    def __pos__(self):
        return self

    def __abs__(self):
        return -self if value(self) < 0.0 else self

    def __lt__(self, other):
        return value(self) < value(other)

    def __le__(self, other):
        return value(self) <= value(other)

    def __gt__(self, other):
        return value(self) > value(other)

    def __ge__(self, other):
        return value(self) >= value(other)

    def __repr__(self) -> str:
        fields = ", ".join(repr(p) for p in self.parts)
        return f"{type(self).__name__}({fields})"

    # region elementary functions

    def recip(self) -> DualNumber:
        x = self.parts[0]
        r = 1.0 / x
        f = [r, -r * r]
        if self.order >= 2:
            f.append(2.0 * r * r * r)
        if self.order >= 3:
            f.append(-6.0 * r * r * r * r)
        return self._chain(f)

    def sqrt(self) -> DualNumber:
        x = self.parts[0]
        s = sqrt(x)
        r = 1.0 / x
        f = [s, 0.5 * s * r]
        if self.order >= 2:
            f.append(-0.25 * s * r * r)
        if self.order >= 3:
            f.append(0.375 * s * r * r * r)
        return self._chain(f)

    def log(self) -> DualNumber:
        x = self.parts[0]
        r = 1.0 / x
        f = [log(x), r]
        if self.order >= 2:
            f.append(-r * r)
        if self.order >= 3:
            f.append(2.0 * r * r * r)
        return self._chain(f)

    def exp(self) -> DualNumber:
        e = exp(self.parts[0])
        return self._chain([e] * (self.order + 1))

    def powf(self, n: float) -> DualNumber:
        if n == 0:
            return type(self)(*([self.parts[0] * 0.0 + 1.0] + [0.0] * self.order))
        if n == 1:
            return self
        if n == 2:
            return self * self
        if n == 3:
            return self * self * self
        x = self.parts[0]
        f = [x**n, n * x ** (n - 1)]
        if self.order >= 2:
            f.append(n * (n - 1) * x ** (n - 2))
        if self.order >= 3:
            f.append(n * (n - 1) * (n - 2) * x ** (n - 3))
        return self._chain(f)

    # endregion


class Dual(DualNumber):
    """A dual number ``re + eps * e`` with ``e**2 = 0``.

    Parameters:
        re: Real part.
        eps: First derivative.

    """

    __slots__ = ("re", "eps")
    order = 1

    def __init__(self, re: Number, eps: Number = 0.0) -> None:
        self.re = re
        self.eps = eps

    @property
    def parts(self) -> tuple:
        return (self.re, self.eps)

    def _mul_parts(self, a: tuple, b: tuple) -> tuple:
        return (a[0] * b[0], a[0] * b[1] + a[1] * b[0])

    def _chain(self, f: list) -> Dual:
        return Dual(f[0], f[1] * self.eps)


class HyperDual(DualNumber):
    """A hyper-dual number with two independent infinitesimal directions.

    Parameters:
        re: Real part.
        eps1: First derivative in direction 1.
        eps2: First derivative in direction 2.
        eps1eps2: Mixed second derivative.

    """

    __slots__ = ("re", "eps1", "eps2", "eps1eps2")
    order = 2

    def __init__(
        self,
        re: Number,
        eps1: Number = 0.0,
        eps2: Number = 0.0,
        eps1eps2: Number = 0.0,
    ) -> None:
        self.re = re
        self.eps1 = eps1
        self.eps2 = eps2
        self.eps1eps2 = eps1eps2

    @property
    def parts(self) -> tuple:
        return (self.re, self.eps1, self.eps2, self.eps1eps2)

    def _mul_parts(self, a: tuple, b: tuple) -> tuple:
        return (
            a[0] * b[0],
            a[0] * b[1] + a[1] * b[0],
            a[0] * b[2] + a[2] * b[0],
            a[0] * b[3] + a[1] * b[2] + a[2] * b[1] + a[3] * b[0],
        )

    def _chain(self, f: list) -> HyperDual:
        return HyperDual(
            f[0],
            f[1] * self.eps1,
            f[1] * self.eps2,
            f[1] * self.eps1eps2 + f[2] * self.eps1 * self.eps2,
        )


class Dual3(DualNumber):
    """A dual number carrying the first three derivatives in one direction.

    Parameters:
        re: Real part.
        v1: First derivative.
        v2: Second derivative.
        v3: Third derivative.

    """

    __slots__ = ("re", "v1", "v2", "v3")
    order = 3

    def __init__(
        self, re: Number, v1: Number = 0.0, v2: Number = 0.0, v3: Number = 0.0
    ) -> None:
        self.re = re
        self.v1 = v1
        self.v2 = v2
        self.v3 = v3

    @property
    def parts(self) -> tuple:
        return (self.re, self.v1, self.v2, self.v3)

    def _mul_parts(self, a: tuple, b: tuple) -> tuple:
        return (
            a[0] * b[0],
            a[0] * b[1] + a[1] * b[0],
            a[0] * b[2] + 2.0 * a[1] * b[1] + a[2] * b[0],
            a[0] * b[3] + 3.0 * a[1] * b[2] + 3.0 * a[2] * b[1] + a[3] * b[0],
        )

    def _chain(self, f: list) -> Dual3:
        v1, v2, v3 = self.v1, self.v2, self.v3
        return Dual3(
            f[0],
            f[1] * v1,
            f[1] * v2 + f[2] * v1 * v1,
            f[1] * v3 + 3.0 * f[2] * v1 * v2 + f[3] * v1 * v1 * v1,
        )
