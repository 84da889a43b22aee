"""Fixed-point decimal arithmetic for the valuation engine.

Every amount is an arbitrary-precision Python int paired with a decimal
exponent. A "unit" at ``d`` decimals is ``10**d``.

This module is intentionally explicit about rounding: every division
truncates toward zero (big-integer semantics of the on-chain tooling).
Python's ``//`` floors toward -inf, so signed divisions go through
``trunc_div``. No half-up rounding is used anywhere in the engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .errors import DecimalMismatchError

# Domain constants
USD_DECIMALS: int = 20
FACTOR_DECIMALS: int = 20
BASIS_POINTS_DIVISOR: int = 10_000


def _require_int(value: object, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    return value


# -- Basic helpers -----------------------------------------------------------

def get_unit(decimals: int) -> int:
    """One whole unit at *decimals*: ``10**decimals``."""
    _require_int(decimals, name="decimals")
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative: {decimals}")
    return 10 ** decimals


def expand_decimals(n: int, decimals: int) -> int:
    """Lift a bare integer into *decimals* representation: ``n * 10**decimals``."""
    return _require_int(n, name="n") * get_unit(decimals)


def trunc_div(a: int, b: int) -> int:
    """Integer division truncating toward zero.

    Raises ``ZeroDivisionError`` on a zero divisor; callers that treat a zero
    denominator as "not computable" must check before calling.
    """
    if b == 0:
        raise ZeroDivisionError("trunc_div by zero")
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def mul_div(a: int, b: int, c: int) -> int:
    """``a * b / c`` with the product taken first, truncating toward zero."""
    return trunc_div(a * b, c)


# -- Scaled amounts ----------------------------------------------------------

@dataclass(frozen=True)
class ScaledAmount:
    """An integer paired with the decimal exponent it is expressed at.

    Addition, subtraction and ordering require equal exponents and raise
    ``DecimalMismatchError`` otherwise. ``rescale`` is the only way to move
    between exponents.

    Equality (``==``) is structural and never raises: amounts at different
    exponents compare unequal even when they denote the same quantity, and
    comparing against ``None`` is simply ``False``. Rescale first to compare
    across exponents.
    """

    value: int
    decimals: int

    def __post_init__(self) -> None:
        _require_int(self.value, name="value")
        _require_int(self.decimals, name="decimals")
        if self.decimals < 0:
            raise ValueError(f"decimals must be non-negative: {self.decimals}")

    @classmethod
    def zero(cls, decimals: int) -> "ScaledAmount":
        return cls(0, decimals)

    @classmethod
    def unit(cls, decimals: int) -> "ScaledAmount":
        return cls(get_unit(decimals), decimals)

    @classmethod
    def from_units(cls, n: int, decimals: int) -> "ScaledAmount":
        """Whole units, e.g. ``from_units(5, 20)`` is five dollars at USD decimals."""
        return cls(expand_decimals(n, decimals), decimals)

    def _same(self, other: object) -> "ScaledAmount":
        if not isinstance(other, ScaledAmount):
            raise TypeError(f"expected ScaledAmount, got {type(other).__name__}")
        if other.decimals != self.decimals:
            raise DecimalMismatchError(self.decimals, other.decimals)
        return other

    def __add__(self, other: "ScaledAmount") -> "ScaledAmount":
        return ScaledAmount(self.value + self._same(other).value, self.decimals)

    def __sub__(self, other: "ScaledAmount") -> "ScaledAmount":
        return ScaledAmount(self.value - self._same(other).value, self.decimals)

    def __neg__(self) -> "ScaledAmount":
        return ScaledAmount(-self.value, self.decimals)

    def __abs__(self) -> "ScaledAmount":
        return ScaledAmount(abs(self.value), self.decimals)

    def __lt__(self, other: "ScaledAmount") -> bool:
        return self.value < self._same(other).value

    def __le__(self, other: "ScaledAmount") -> bool:
        return self.value <= self._same(other).value

    def __gt__(self, other: "ScaledAmount") -> bool:
        return self.value > self._same(other).value

    def __ge__(self, other: "ScaledAmount") -> bool:
        return self.value >= self._same(other).value

    def is_zero(self) -> bool:
        return self.value == 0

    def is_positive(self) -> bool:
        return self.value > 0

    def is_negative(self) -> bool:
        return self.value < 0

    def rescale(self, decimals: int) -> "ScaledAmount":
        """Re-express at *decimals*; lowering the exponent truncates toward zero."""
        if decimals >= self.decimals:
            return ScaledAmount(self.value * get_unit(decimals - self.decimals), decimals)
        return ScaledAmount(trunc_div(self.value, get_unit(self.decimals - decimals)), decimals)

    def mul_div(self, numerator: int, denominator: int, decimals: Optional[int] = None) -> "ScaledAmount":
        """``value * numerator / denominator``, kept at *decimals* (default: own exponent)."""
        out_decimals = self.decimals if decimals is None else decimals
        return ScaledAmount(mul_div(self.value, numerator, denominator), out_decimals)


Numeric = Union[int, ScaledAmount]


def _raw_pair(numerator: Numeric, denominator: Numeric) -> tuple[int, int]:
    if isinstance(numerator, ScaledAmount) and isinstance(denominator, ScaledAmount):
        numerator._same(denominator)
        return numerator.value, denominator.value
    if isinstance(numerator, ScaledAmount) or isinstance(denominator, ScaledAmount):
        raise TypeError("numerator and denominator must both be ints or both be ScaledAmounts")
    return _require_int(numerator, name="numerator"), _require_int(denominator, name="denominator")


# -- Conversions -------------------------------------------------------------

def convert_to_usd(
    amount: Optional[ScaledAmount],
    token_decimals: Optional[int],
    price: Optional[ScaledAmount],
) -> Optional[ScaledAmount]:
    """USD value of a token-native *amount*: ``amount * price / 10**token_decimals``.

    The result carries the price's (USD) exponent. Any absent operand yields
    ``None``.
    """
    if amount is None or token_decimals is None or price is None:
        return None
    if amount.decimals != token_decimals:
        raise DecimalMismatchError(amount.decimals, token_decimals)
    return ScaledAmount(mul_div(amount.value, price.value, get_unit(token_decimals)), price.decimals)


def convert_to_token_amount(
    usd_amount: Optional[ScaledAmount],
    token_decimals: Optional[int],
    price: Optional[ScaledAmount],
) -> Optional[ScaledAmount]:
    """Token-native amount worth *usd_amount*: ``usd * 10**token_decimals / price``.

    ``None`` when any operand is absent or the price is zero.
    """
    if usd_amount is None or token_decimals is None or price is None:
        return None
    usd_amount._same(price)
    if price.value == 0:
        return None
    return ScaledAmount(mul_div(usd_amount.value, get_unit(token_decimals), price.value), token_decimals)


# -- Ratios / factors --------------------------------------------------------

def get_basis_points(
    numerator: Numeric,
    denominator: Numeric,
    round_up: bool = False,
    *,
    divisor: int = BASIS_POINTS_DIVISOR,
) -> Optional[int]:
    """``numerator * 10000 / denominator`` in basis points.

    With *round_up*, a nonzero remainder moves the result one unit away from
    zero (toward -inf for negative ratios). ``None`` for a zero denominator.
    """
    num, den = _raw_pair(numerator, denominator)
    if den == 0:
        return None
    scaled = num * divisor
    result = trunc_div(scaled, den)
    if round_up and scaled - result * den != 0:
        negative = (scaled < 0) != (den < 0)
        return result - 1 if negative else result + 1
    return result


def apply_factor(value: ScaledAmount, factor: int, *, factor_decimals: int = FACTOR_DECIMALS) -> ScaledAmount:
    """``value * factor / 10**factor_decimals`` (factors are fixed-point fractions)."""
    return value.mul_div(_require_int(factor, name="factor"), get_unit(factor_decimals))
