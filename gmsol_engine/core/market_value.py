"""Pool and market-token (GM) valuation.

Pool value excludes trader pnl. GM token price is pool value per unit of
supply, bootstrapped at one USD while the supply is empty.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..state.markets import MarketInfo
from ..state.tokens import TokenData, TokenPrice
from .fixed_point import (
    USD_DECIMALS,
    ScaledAmount,
    convert_to_token_amount,
    convert_to_usd,
    get_unit,
    mul_div,
    trunc_div,
)
from .pricing import PriceKind, get_price

# Precision of the long/short pool ratio used when balancing withdrawals.
SELLABLE_RATIO_DECIMALS: int = 8


def _one_usd(usd_decimals: int) -> ScaledAmount:
    return ScaledAmount.unit(usd_decimals)


def get_pool_usd_without_pnl(
    market_info: MarketInfo,
    is_long: bool,
    kind: PriceKind = PriceKind.MAX,
) -> Optional[ScaledAmount]:
    """USD value of one pool leg at the chosen price side."""
    token = market_info.collateral_token(is_long)
    return convert_to_usd(market_info.pool_amount(is_long), token.decimals, get_price(token.prices, kind))


def get_pool_value(market_info: MarketInfo, kind: PriceKind = PriceKind.MAX) -> Optional[ScaledAmount]:
    """Long leg + short leg; ``None`` if either leg has no price."""
    long_usd = get_pool_usd_without_pnl(market_info, True, kind)
    short_usd = get_pool_usd_without_pnl(market_info, False, kind)
    if long_usd is None or short_usd is None:
        return None
    return long_usd + short_usd


def get_market_token_price(
    pool_value_usd: Optional[ScaledAmount],
    market_token: TokenData,
    *,
    usd_decimals: int = USD_DECIMALS,
) -> Optional[TokenPrice]:
    """GM price as a spread-free TokenPrice.

    With no recorded supply the price is one USD. Otherwise it is
    ``pool_value * 10**gm_decimals / total_supply``.
    """
    supply = market_token.total_supply
    if supply is None or supply.is_zero():
        return TokenPrice.fixed(_one_usd(usd_decimals))
    if pool_value_usd is None:
        return None
    price = pool_value_usd.mul_div(get_unit(market_token.decimals), supply.value)
    return TokenPrice.fixed(price)


def usd_to_market_token_amount(
    pool_value: ScaledAmount,
    market_token: TokenData,
    usd_value: ScaledAmount,
) -> Optional[ScaledAmount]:
    """GM amount minted for *usd_value* of deposits.

    Bootstrap rules for an empty supply:
    - empty pool: priced at one USD;
    - non-empty pool: the pool value is added to the deposit so the
      post-mint GM price is one USD.
    """
    supply = market_token.total_supply
    if supply is None:
        return None
    pool_value._same(usd_value)
    one_usd = _one_usd(pool_value.decimals)
    if supply.is_zero():
        if pool_value.is_zero():
            return convert_to_token_amount(usd_value, market_token.decimals, one_usd)
        if pool_value.is_positive():
            return convert_to_token_amount(usd_value + pool_value, market_token.decimals, one_usd)
    if pool_value.is_zero():
        return ScaledAmount.zero(market_token.decimals)
    return ScaledAmount(mul_div(supply.value, usd_value.value, pool_value.value), market_token.decimals)


@dataclass(frozen=True)
class SellableInfo:
    """Maximum GM withdrawal that keeps the pool's long/short ratio."""

    max_long_sellable_usd: ScaledAmount
    max_short_sellable_usd: ScaledAmount
    max_long_sellable_amount: Optional[ScaledAmount] = None
    max_short_sellable_amount: Optional[ScaledAmount] = None

    @property
    def total_usd(self) -> ScaledAmount:
        return self.max_long_sellable_usd + self.max_short_sellable_usd

    @property
    def total_amount(self) -> Optional[ScaledAmount]:
        if self.max_long_sellable_amount is None or self.max_short_sellable_amount is None:
            return None
        return self.max_long_sellable_amount + self.max_short_sellable_amount


def get_sellable_market_token(market_info: MarketInfo, market_token: TokenData) -> Optional[SellableInfo]:
    """Sellable GM for a market, valuing both legs at their max price.

    Both legs are sold in the current pool ratio; an empty leg makes the
    market unsellable (zero). ``None`` when either leg lacks a price.
    """
    long_usd = get_pool_usd_without_pnl(market_info, True, PriceKind.MAX)
    short_usd = get_pool_usd_without_pnl(market_info, False, PriceKind.MAX)
    if long_usd is None or short_usd is None:
        return None
    if long_usd.is_zero() or short_usd.is_zero():
        zero = ScaledAmount.zero(long_usd.decimals)
        return SellableInfo(max_long_sellable_usd=zero, max_short_sellable_usd=zero)

    factor = get_unit(SELLABLE_RATIO_DECIMALS)
    ratio = mul_div(long_usd.value, factor, short_usd.value)
    long_from_short = short_usd.mul_div(ratio, factor)
    if long_from_short <= long_usd:
        max_long_usd = long_from_short
        max_short_usd = short_usd
    else:
        max_long_usd = long_usd
        max_short_usd = ScaledAmount(trunc_div(long_usd.value, ratio) * factor, long_usd.decimals)

    pool_value = long_usd + short_usd
    return SellableInfo(
        max_long_sellable_usd=max_long_usd,
        max_short_sellable_usd=max_short_usd,
        max_long_sellable_amount=usd_to_market_token_amount(pool_value, market_token, max_long_usd),
        max_short_sellable_amount=usd_to_market_token_amount(pool_value, market_token, max_short_usd),
    )


# -- Names -------------------------------------------------------------------

def get_market_index_name(market_info: MarketInfo) -> str:
    return f"{market_info.index_token.symbol}/USD"


def get_market_pool_name(market_info: MarketInfo) -> str:
    long_symbol = market_info.long_token.symbol
    short_symbol = market_info.short_token.symbol
    if market_info.is_single:
        return long_symbol
    return f"{long_symbol}-{short_symbol}"


def get_market_name(market_info: MarketInfo) -> str:
    """Display name ``"<INDEX>/USD[<LONG>-<SHORT>]"``."""
    return f"{get_market_index_name(market_info)}[{get_market_pool_name(market_info)}]"
