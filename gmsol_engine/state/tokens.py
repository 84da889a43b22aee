"""
Token metadata and oracle price records.

Units/conventions:
- token-native amounts are `ScaledAmount`s at the token's `decimals`.
- prices are USD-per-whole-token `ScaledAmount`s at the USD exponent (20).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.errors import DecimalMismatchError
from ..core.fixed_point import ScaledAmount


# Type aliases
Address = str  # base58 account address


def _require_str(value: object, *, name: str) -> str:
    if not isinstance(value, str) or not value:
        raise TypeError(f"{name} must be a non-empty string")
    return value


@dataclass(frozen=True)
class Token:
    """Immutable token metadata (from the deployment configuration)."""

    address: Address
    symbol: str
    decimals: int
    is_native: bool = False
    is_wrapped: bool = False
    is_synthetic: bool = False
    wrapped_address: Optional[Address] = None
    price_decimals: Optional[int] = None

    def __post_init__(self) -> None:
        _require_str(self.address, name="address")
        _require_str(self.symbol, name="symbol")
        if not isinstance(self.decimals, int) or isinstance(self.decimals, bool):
            raise TypeError("decimals must be an int")
        if self.decimals < 0:
            raise ValueError(f"decimals must be non-negative: {self.decimals}")
        if self.wrapped_address is not None:
            _require_str(self.wrapped_address, name="wrapped_address")

    def amount(self, value: int) -> ScaledAmount:
        """Wrap a raw token-native integer at this token's decimals."""
        return ScaledAmount(value, self.decimals)


@dataclass(frozen=True)
class TokenPrice:
    """Oracle bid/ask pair; callers pick a side by valuation direction."""

    min_price: ScaledAmount
    max_price: ScaledAmount

    def __post_init__(self) -> None:
        for name, v in (("min_price", self.min_price), ("max_price", self.max_price)):
            if not isinstance(v, ScaledAmount):
                raise TypeError(f"{name} must be a ScaledAmount")
            if v.is_negative():
                raise ValueError(f"{name} must be non-negative: {v.value}")
        if self.min_price.decimals != self.max_price.decimals:
            raise DecimalMismatchError(self.min_price.decimals, self.max_price.decimals)
        if self.min_price > self.max_price:
            raise ValueError(f"min_price must not exceed max_price: {self.min_price.value} > {self.max_price.value}")

    @classmethod
    def fixed(cls, price: ScaledAmount) -> "TokenPrice":
        """A price with no spread (``min == max``)."""
        return cls(min_price=price, max_price=price)


@dataclass(frozen=True)
class TokenData:
    """Token metadata joined with the latest snapshot values.

    Every snapshot field is optional: absent prices mean "not loaded yet".
    """

    token: Token
    prices: Optional[TokenPrice] = None
    balance: Optional[ScaledAmount] = None
    total_supply: Optional[ScaledAmount] = None

    def __post_init__(self) -> None:
        for name, v in (("balance", self.balance), ("total_supply", self.total_supply)):
            if v is not None and v.decimals != self.token.decimals:
                raise DecimalMismatchError(v.decimals, self.token.decimals)

    @property
    def address(self) -> Address:
        return self.token.address

    @property
    def symbol(self) -> str:
        return self.token.symbol

    @property
    def decimals(self) -> int:
        return self.token.decimals
