"""
Market records.

A `Market` is decoded from one chain snapshot and never mutated; the next
refresh replaces it wholesale.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.fixed_point import FACTOR_DECIMALS, ScaledAmount
from .tokens import Address, TokenData


# 1% at factor decimals (on-chain default).
DEFAULT_MIN_COLLATERAL_FACTOR: int = 10 ** (FACTOR_DECIMALS - 2)


@dataclass(frozen=True)
class Market:
    """Raw market record; pool amounts are token-native at each collateral token's decimals."""

    market_token_address: Address
    index_token_address: Address
    long_token_address: Address
    short_token_address: Address
    long_pool_amount: int = 0
    short_pool_amount: int = 0
    is_single: bool = False
    min_collateral_factor: int = DEFAULT_MIN_COLLATERAL_FACTOR
    is_disabled: bool = False
    is_spot_only: bool = False

    def __post_init__(self) -> None:
        for name, v in (
            ("long_pool_amount", self.long_pool_amount),
            ("short_pool_amount", self.short_pool_amount),
            ("min_collateral_factor", self.min_collateral_factor),
        ):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")
        same = self.long_token_address == self.short_token_address
        if self.is_single != same:
            raise ValueError(
                f"is_single={self.is_single} inconsistent with collateral tokens "
                f"({self.long_token_address}, {self.short_token_address})"
            )

    def pool_amount(self, is_long: bool) -> int:
        """Pool amount of one leg.

        A single-token market records its whole balance under the long leg;
        each leg is then exactly half of it (floor).
        """
        if self.is_single:
            return self.long_pool_amount // 2
        return self.long_pool_amount if is_long else self.short_pool_amount


@dataclass(frozen=True)
class MarketInfo:
    """A market joined with its index/long/short token data and derived pool values."""

    market: Market
    index_token: TokenData
    long_token: TokenData
    short_token: TokenData
    name: str = ""
    pool_value_max: Optional[ScaledAmount] = None
    pool_value_min: Optional[ScaledAmount] = None

    def __post_init__(self) -> None:
        for role, token, expected in (
            ("index", self.index_token, self.market.index_token_address),
            ("long", self.long_token, self.market.long_token_address),
            ("short", self.short_token, self.market.short_token_address),
        ):
            if token.address != expected:
                raise ValueError(f"{role} token {token.address} does not match market ({expected})")

    @property
    def market_token_address(self) -> Address:
        return self.market.market_token_address

    @property
    def is_single(self) -> bool:
        return self.market.is_single

    @property
    def min_collateral_factor(self) -> int:
        return self.market.min_collateral_factor

    @property
    def is_disabled(self) -> bool:
        return self.market.is_disabled

    @property
    def is_spot_only(self) -> bool:
        """Swap-only market: it has pools and GM but cannot carry positions."""
        return self.market.is_spot_only

    def collateral_token(self, is_long: bool) -> TokenData:
        return self.long_token if is_long else self.short_token

    def pool_amount(self, is_long: bool) -> ScaledAmount:
        return ScaledAmount(self.market.pool_amount(is_long), self.collateral_token(is_long).decimals)

    @property
    def long_pool_amount(self) -> ScaledAmount:
        return self.pool_amount(True)

    @property
    def short_pool_amount(self) -> ScaledAmount:
        return self.pool_amount(False)
