"""Pnl capping policy hook.

Positive position pnl is passed through a policy before it is reported. The
default policy is the identity: pool-level pnl ceilings are not applied.
A policy receives the market, the position side and the uncapped pnl and
returns the pnl to report, at the same exponent.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from .fixed_point import ScaledAmount

if TYPE_CHECKING:
    from ..state.markets import MarketInfo

PnlCapPolicy = Callable[["MarketInfo", bool, ScaledAmount], ScaledAmount]


def identity_pnl_cap(market_info: "MarketInfo", is_long: bool, pnl: ScaledAmount) -> ScaledAmount:
    return pnl
