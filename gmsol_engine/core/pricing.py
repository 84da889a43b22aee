"""Token/price value model.

Read-only conversions between token-native amounts and USD amounts, plus the
price-side decision used for conservative valuation. Every function is pure;
an absent operand yields ``None`` rather than an arithmetic error.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Optional

from ..state.tokens import Token, TokenData, TokenPrice
from .fixed_point import (
    USD_DECIMALS,
    ScaledAmount,
    convert_to_token_amount,
    convert_to_usd,
    get_unit,
    mul_div,
)


@unique
class PriceKind(Enum):
    """Which side of the oracle spread to read."""
    MIN = "min_price"
    MAX = "max_price"
    MID = "mid_price"


# (is_increase, is_long) -> use max price.
# Increasing a long or decreasing a short reads the ask; the other two read the bid.
_USE_MAX_PRICE: dict[tuple[bool, bool], bool] = {
    (True, True): True,
    (True, False): False,
    (False, True): False,
    (False, False): True,
}


def get_should_use_max_price(is_increase: bool, is_long: bool) -> bool:
    return _USE_MAX_PRICE[(bool(is_increase), bool(is_long))]


def get_mid_price(prices: Optional[TokenPrice]) -> Optional[ScaledAmount]:
    """``(min + max) / 2`` (floor; prices are non-negative)."""
    if prices is None:
        return None
    total = prices.min_price + prices.max_price
    return ScaledAmount(total.value // 2, total.decimals)


def get_price(prices: Optional[TokenPrice], kind: PriceKind) -> Optional[ScaledAmount]:
    if prices is None:
        return None
    if kind is PriceKind.MIN:
        return prices.min_price
    if kind is PriceKind.MAX:
        return prices.max_price
    return get_mid_price(prices)


def get_mark_price(prices: Optional[TokenPrice], *, is_increase: bool, is_long: bool) -> Optional[ScaledAmount]:
    """Oracle side used to value a position for the given action direction."""
    if prices is None:
        return None
    kind = PriceKind.MAX if get_should_use_max_price(is_increase, is_long) else PriceKind.MIN
    return get_price(prices, kind)


def token_amount_to_usd(
    token: Optional[TokenData],
    amount: Optional[ScaledAmount],
    kind: PriceKind = PriceKind.MIN,
) -> Optional[ScaledAmount]:
    if token is None:
        return None
    return convert_to_usd(amount, token.decimals, get_price(token.prices, kind))


def usd_to_token_amount(
    token: Optional[TokenData],
    usd_amount: Optional[ScaledAmount],
    kind: PriceKind = PriceKind.MAX,
) -> Optional[ScaledAmount]:
    if token is None:
        return None
    return convert_to_token_amount(usd_amount, token.decimals, get_price(token.prices, kind))


def is_equivalent_tokens(a: Token, b: Token) -> bool:
    """True when *a* and *b* carry the same underlying value.

    Same address, a token and its wrapped form (linked by ``wrapped_address``
    or flagged native/wrapped), or a synthetic token and one of the same
    symbol.
    """
    if a.address == b.address:
        return True
    if a.wrapped_address == b.address or b.wrapped_address == a.address:
        return True
    if (a.is_native and b.is_wrapped) or (a.is_wrapped and b.is_native):
        return True
    if (a.is_synthetic or b.is_synthetic) and a.symbol == b.symbol:
        return True
    return False


@dataclass(frozen=True)
class TokensRatio:
    """Price of the dearer token expressed in the cheaper one, at USD decimals."""

    ratio: ScaledAmount
    largest_token: TokenData
    smallest_token: TokenData


def get_tokens_ratio_by_price(
    from_token: TokenData,
    to_token: TokenData,
    from_price: ScaledAmount,
    to_price: ScaledAmount,
    *,
    usd_decimals: int = USD_DECIMALS,
) -> Optional[TokensRatio]:
    if from_price > to_price:
        largest, smallest, largest_price, smallest_price = from_token, to_token, from_price, to_price
    else:
        largest, smallest, largest_price, smallest_price = to_token, from_token, to_price, from_price
    if smallest_price.is_zero():
        return None
    ratio = mul_div(largest_price.value, get_unit(usd_decimals), smallest_price.value)
    return TokensRatio(
        ratio=ScaledAmount(ratio, usd_decimals),
        largest_token=largest,
        smallest_token=smallest,
    )

