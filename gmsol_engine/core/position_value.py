"""Position valuation: entry price, fees, pnl, net value, leverage, liquidation price.

Every function is stateless and works on one position snapshot plus its
market/token context. Results that cannot be computed (absent input, zero
denominator, non-positive price) are ``None``, never zero.

Divisions producing a per-token price are taken first and then scaled by
``10**index_decimals``, matching the on-chain tooling bit for bit.
"""

from __future__ import annotations

from typing import Optional

from ..state.markets import MarketInfo
from ..state.positions import Position, PositionInfo
from ..state.tokens import Token, TokenData
from .errors import DecimalMismatchError
from .fixed_point import (
    BASIS_POINTS_DIVISOR,
    FACTOR_DECIMALS,
    ScaledAmount,
    apply_factor,
    convert_to_token_amount,
    convert_to_usd,
    expand_decimals,
    get_basis_points,
    trunc_div,
)
from .pnl_capping import PnlCapPolicy, identity_pnl_cap
from .pricing import get_mark_price, is_equivalent_tokens


def _per_token_price(usd: int, tokens: int, index_decimals: int, usd_decimals: int) -> ScaledAmount:
    return ScaledAmount(expand_decimals(trunc_div(usd, tokens), index_decimals), usd_decimals)


# -- Entry price / fees ------------------------------------------------------

def get_entry_price(
    *,
    size_in_usd: ScaledAmount,
    size_in_tokens: ScaledAmount,
    index_token: Token,
) -> Optional[ScaledAmount]:
    """``size_in_usd / size_in_tokens`` as USD per whole index token."""
    if size_in_tokens.decimals != index_token.decimals:
        raise DecimalMismatchError(size_in_tokens.decimals, index_token.decimals)
    if not size_in_tokens.is_positive():
        return None
    return _per_token_price(size_in_usd.value, size_in_tokens.value, index_token.decimals, size_in_usd.decimals)


def get_position_pending_fees_usd(
    *,
    pending_funding_fees_usd: ScaledAmount,
    pending_borrowing_fees_usd: ScaledAmount,
) -> ScaledAmount:
    return pending_borrowing_fees_usd + pending_funding_fees_usd


# -- Value / pnl -------------------------------------------------------------

def get_position_value_usd(
    *,
    index_token: Token,
    size_in_tokens: ScaledAmount,
    mark_price: Optional[ScaledAmount],
) -> Optional[ScaledAmount]:
    return convert_to_usd(size_in_tokens, index_token.decimals, mark_price)


def get_position_pnl_usd(
    *,
    market_info: MarketInfo,
    size_in_usd: ScaledAmount,
    size_in_tokens: ScaledAmount,
    mark_price: Optional[ScaledAmount],
    is_long: bool,
    pnl_cap_policy: PnlCapPolicy = identity_pnl_cap,
) -> Optional[ScaledAmount]:
    """Mark-to-market pnl: ``value - size`` for longs, ``size - value`` for shorts.

    Only positive pnl goes through *pnl_cap_policy*.
    """
    value_usd = get_position_value_usd(
        index_token=market_info.index_token.token,
        size_in_tokens=size_in_tokens,
        mark_price=mark_price,
    )
    if value_usd is None:
        return None
    total = value_usd - size_in_usd if is_long else size_in_usd - value_usd
    if not total.is_positive():
        return total
    return pnl_cap_policy(market_info, is_long, total)


def get_position_net_value(
    *,
    collateral_usd: ScaledAmount,
    pending_funding_fees_usd: ScaledAmount,
    pending_borrowing_fees_usd: ScaledAmount,
    pnl: Optional[ScaledAmount],
    closing_fee_usd: ScaledAmount,
    ui_fee_usd: ScaledAmount,
) -> Optional[ScaledAmount]:
    """``collateral - pending fees - closing fee - ui fee + pnl``."""
    if pnl is None:
        return None
    pending = get_position_pending_fees_usd(
        pending_funding_fees_usd=pending_funding_fees_usd,
        pending_borrowing_fees_usd=pending_borrowing_fees_usd,
    )
    return collateral_usd - pending - closing_fee_usd - ui_fee_usd + pnl


# -- Leverage ----------------------------------------------------------------

def get_leverage(
    *,
    size_in_usd: ScaledAmount,
    collateral_usd: ScaledAmount,
    pnl: Optional[ScaledAmount],
    pending_funding_fees_usd: ScaledAmount,
    pending_borrowing_fees_usd: ScaledAmount,
    divisor: int = BASIS_POINTS_DIVISOR,
) -> Optional[int]:
    """Leverage in basis points: ``size * 10000 / remaining collateral``.

    An absent pnl counts as zero. ``None`` when remaining collateral <= 0.
    """
    pending = get_position_pending_fees_usd(
        pending_funding_fees_usd=pending_funding_fees_usd,
        pending_borrowing_fees_usd=pending_borrowing_fees_usd,
    )
    remaining = collateral_usd - pending
    if pnl is not None:
        remaining = remaining + pnl
    if not remaining.is_positive():
        return None
    return get_basis_points(size_in_usd, remaining, divisor=divisor)


# -- Liquidation -------------------------------------------------------------

def get_liquidation_collateral_usd(
    *,
    size_in_usd: ScaledAmount,
    min_collateral_factor: int,
    min_collateral_usd: ScaledAmount,
    factor_decimals: int = FACTOR_DECIMALS,
) -> ScaledAmount:
    """``max(min_collateral_usd, size * min_collateral_factor)``."""
    by_factor = apply_factor(size_in_usd, min_collateral_factor, factor_decimals=factor_decimals)
    return min_collateral_usd if by_factor < min_collateral_usd else by_factor


def get_liquidation_price(
    *,
    size_in_usd: ScaledAmount,
    size_in_tokens: ScaledAmount,
    collateral_amount: ScaledAmount,
    collateral_usd: ScaledAmount,
    collateral_token: Token,
    market_info: MarketInfo,
    pending_funding_fees_usd: ScaledAmount,
    pending_borrowing_fees_usd: ScaledAmount,
    min_collateral_usd: ScaledAmount,
    is_long: bool,
    closing_fee_usd: Optional[ScaledAmount] = None,
    factor_decimals: int = FACTOR_DECIMALS,
) -> Optional[ScaledAmount]:
    """Index price at which remaining collateral reaches the liquidation threshold.

    Two branches:
    - collateral equivalent to the index token: solved in index-token units
      (collateral rescaled to the index decimals first), since the
      collateral moves with the index price;
    - otherwise: solved in USD space against the remaining collateral.
    """
    if not size_in_usd.is_positive() or not size_in_tokens.is_positive():
        return None

    index_token = market_info.index_token.token
    usd_decimals = size_in_usd.decimals
    if closing_fee_usd is None:
        closing_fee_usd = ScaledAmount.zero(usd_decimals)
    pending = get_position_pending_fees_usd(
        pending_funding_fees_usd=pending_funding_fees_usd,
        pending_borrowing_fees_usd=pending_borrowing_fees_usd,
    )
    total_fees = pending + closing_fee_usd
    liq_collateral = get_liquidation_collateral_usd(
        size_in_usd=size_in_usd,
        min_collateral_factor=market_info.min_collateral_factor,
        min_collateral_usd=min_collateral_usd,
        factor_decimals=factor_decimals,
    )

    if is_equivalent_tokens(collateral_token, index_token):
        # Equivalent tokens may still differ in decimals (wrapped or synthetic forms).
        collateral_in_index = collateral_amount.rescale(size_in_tokens.decimals)
        if is_long:
            denominator = size_in_tokens.value + collateral_in_index.value
            numerator = size_in_usd + liq_collateral + total_fees
        else:
            denominator = size_in_tokens.value - collateral_in_index.value
            numerator = size_in_usd - liq_collateral - total_fees
        if denominator == 0:
            return None
        price = _per_token_price(numerator.value, denominator, index_token.decimals, usd_decimals)
    else:
        remaining = collateral_usd - pending - closing_fee_usd
        if is_long:
            numerator = liq_collateral - remaining + size_in_usd
            denominator = size_in_tokens.value
        else:
            numerator = liq_collateral - remaining - size_in_usd
            denominator = -size_in_tokens.value
        price = _per_token_price(numerator.value, denominator, index_token.decimals, usd_decimals)

    if not price.is_positive():
        return None
    return price


# -- Aggregate ---------------------------------------------------------------

def get_position_info(
    position: Position,
    market_info: MarketInfo,
    collateral_token: TokenData,
    *,
    min_collateral_usd: ScaledAmount,
    pnl_cap_policy: PnlCapPolicy = identity_pnl_cap,
    basis_points_divisor: int = BASIS_POINTS_DIVISOR,
    factor_decimals: int = FACTOR_DECIMALS,
) -> Optional[PositionInfo]:
    """Derive every metric of an open position; ``None`` for a closed one.

    The position is valued for closing: the mark price is the index token's
    decrease-side price and collateral is valued at its bid.
    """
    if position.is_closed:
        return None
    if position.market_token_address != market_info.market_token_address:
        raise ValueError(f"position {position.address} does not belong to market {market_info.market_token_address}")
    if position.collateral_token_address != collateral_token.address:
        raise ValueError(f"collateral token mismatch for position {position.address}")

    index_token = market_info.index_token
    funding = position.fee_or_zero("pending_funding_fees_usd")
    borrowing = position.fee_or_zero("pending_borrowing_fees_usd")
    closing = position.fee_or_zero("closing_fee_usd")
    ui_fee = position.fee_or_zero("ui_fee_usd")

    mark_price = get_mark_price(index_token.prices, is_increase=False, is_long=position.is_long)
    collateral_min_price = collateral_token.prices.min_price if collateral_token.prices else None
    collateral_usd = convert_to_usd(position.collateral_amount, collateral_token.decimals, collateral_min_price)
    pending_fees = get_position_pending_fees_usd(
        pending_funding_fees_usd=funding,
        pending_borrowing_fees_usd=borrowing,
    )

    entry_price = get_entry_price(
        size_in_usd=position.size_in_usd,
        size_in_tokens=position.size_in_tokens,
        index_token=index_token.token,
    )
    value_usd = get_position_value_usd(
        index_token=index_token.token,
        size_in_tokens=position.size_in_tokens,
        mark_price=mark_price,
    )
    pnl = get_position_pnl_usd(
        market_info=market_info,
        size_in_usd=position.size_in_usd,
        size_in_tokens=position.size_in_tokens,
        mark_price=mark_price,
        is_long=position.is_long,
        pnl_cap_policy=pnl_cap_policy,
    )

    remaining_usd = None
    remaining_amount = None
    net_value = None
    leverage = None
    pnl_percentage = None
    liquidation_price = None
    if collateral_usd is not None:
        remaining_usd = collateral_usd - pending_fees
        remaining_amount = convert_to_token_amount(remaining_usd, collateral_token.decimals, collateral_min_price)
        net_value = get_position_net_value(
            collateral_usd=collateral_usd,
            pending_funding_fees_usd=funding,
            pending_borrowing_fees_usd=borrowing,
            pnl=pnl,
            closing_fee_usd=closing,
            ui_fee_usd=ui_fee,
        )
        leverage = get_leverage(
            size_in_usd=position.size_in_usd,
            collateral_usd=collateral_usd,
            pnl=pnl,
            pending_funding_fees_usd=funding,
            pending_borrowing_fees_usd=borrowing,
            divisor=basis_points_divisor,
        )
        if pnl is not None:
            pnl_percentage = get_basis_points(pnl, collateral_usd, divisor=basis_points_divisor)
        liquidation_price = get_liquidation_price(
            size_in_usd=position.size_in_usd,
            size_in_tokens=position.size_in_tokens,
            collateral_amount=position.collateral_amount,
            collateral_usd=collateral_usd,
            collateral_token=collateral_token.token,
            market_info=market_info,
            pending_funding_fees_usd=funding,
            pending_borrowing_fees_usd=borrowing,
            min_collateral_usd=min_collateral_usd,
            is_long=position.is_long,
            closing_fee_usd=closing,
            factor_decimals=factor_decimals,
        )

    return PositionInfo(
        position=position,
        market_info=market_info,
        collateral_token=collateral_token,
        entry_price=entry_price,
        mark_price=mark_price,
        collateral_usd=collateral_usd,
        pending_fees_usd=pending_fees,
        position_value_usd=value_usd,
        remaining_collateral_usd=remaining_usd,
        remaining_collateral_amount=remaining_amount,
        net_value=net_value,
        leverage=leverage,
        pnl=pnl,
        pnl_percentage=pnl_percentage,
        liquidation_price=liquidation_price,
    )
