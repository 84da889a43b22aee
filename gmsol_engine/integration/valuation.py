"""
Snapshot-wide evaluation.

Joins a decoded `ChainSnapshot` with the deployment and runs the core
kernels over every market, market token and position. The result is a pure
function of its (hashable) inputs and is memoized per input identity.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from functools import lru_cache
import logging
from types import MappingProxyType
from typing import Dict, Mapping

from ..core.market_value import get_market_name, get_market_token_price, get_pool_value
from ..core.pnl_capping import PnlCapPolicy, identity_pnl_cap
from ..core.position_value import get_position_info
from ..core.pricing import PriceKind
from ..state.markets import MarketInfo
from ..state.positions import PositionInfo
from ..state.tokens import Address, TokenData
from .deployment import Deployment
from .snapshot import ChainSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapshotValuation:
    """Everything derived from one snapshot, keyed by address (read-only views)."""

    tokens: Mapping[Address, TokenData]
    market_infos: Mapping[Address, MarketInfo]
    market_tokens: Mapping[Address, TokenData]
    position_infos: Mapping[Address, PositionInfo]


def build_market_infos(deployment: Deployment, snapshot: ChainSnapshot) -> Dict[Address, MarketInfo]:
    tokens = snapshot.token_map()
    infos: Dict[Address, MarketInfo] = {}
    for market in snapshot.markets:
        if market.is_disabled:
            logger.debug("market %s is disabled; skipped", market.market_token_address)
            continue
        index_token = tokens.get(market.index_token_address)
        long_token = tokens.get(market.long_token_address)
        short_token = tokens.get(market.short_token_address)
        if index_token is None or long_token is None or short_token is None:
            logger.debug("market %s lacks token data; skipped", market.market_token_address)
            continue
        info = MarketInfo(market=market, index_token=index_token, long_token=long_token, short_token=short_token)
        infos[market.market_token_address] = replace(
            info,
            name=get_market_name(info),
            pool_value_max=get_pool_value(info, PriceKind.MAX),
            pool_value_min=get_pool_value(info, PriceKind.MIN),
        )
    return infos


def build_market_tokens(
    deployment: Deployment,
    snapshot: ChainSnapshot,
    market_infos: Mapping[Address, MarketInfo],
) -> Dict[Address, TokenData]:
    """GM token data with its price attached (pool value at max prices / supply)."""
    usd_decimals = deployment.constants.usd_decimals
    out: Dict[Address, TokenData] = {}
    for market_token in snapshot.market_tokens:
        info = market_infos.get(market_token.address)
        if info is None:
            continue
        prices = get_market_token_price(info.pool_value_max, market_token, usd_decimals=usd_decimals)
        if prices is None:
            logger.debug("no GM price for %s: pool value unavailable", market_token.address)
        out[market_token.address] = replace(market_token, prices=prices)
    return out


def build_position_infos(
    deployment: Deployment,
    snapshot: ChainSnapshot,
    market_infos: Mapping[Address, MarketInfo],
    pnl_cap_policy: PnlCapPolicy = identity_pnl_cap,
) -> Dict[Address, PositionInfo]:
    constants = deployment.constants
    tokens = snapshot.token_map()
    out: Dict[Address, PositionInfo] = {}
    for position in snapshot.positions:
        market_info = market_infos.get(position.market_token_address)
        if market_info is None:
            logger.debug("position %s: market %s not evaluated; skipped", position.address, position.market_token_address)
            continue
        if market_info.is_spot_only:
            logger.debug("position %s: market %s is spot-only; skipped", position.address, position.market_token_address)
            continue
        collateral_token = tokens[position.collateral_token_address]
        info = get_position_info(
            position,
            market_info,
            collateral_token,
            min_collateral_usd=constants.min_collateral_usd_amount,
            pnl_cap_policy=pnl_cap_policy,
            basis_points_divisor=constants.basis_points_divisor,
            factor_decimals=constants.factor_decimals,
        )
        if info is None:
            logger.debug("position %s is closed; skipped", position.address)
            continue
        out[position.address] = info
    return out


@lru_cache(maxsize=32)
def evaluate_snapshot(
    deployment: Deployment,
    snapshot: ChainSnapshot,
    pnl_cap_policy: PnlCapPolicy = identity_pnl_cap,
) -> SnapshotValuation:
    market_infos = build_market_infos(deployment, snapshot)
    market_tokens = build_market_tokens(deployment, snapshot, market_infos)
    position_infos = build_position_infos(deployment, snapshot, market_infos, pnl_cap_policy)
    logger.debug(
        "evaluated snapshot: markets=%d market_tokens=%d positions=%d",
        len(market_infos),
        len(market_tokens),
        len(position_infos),
    )
    return SnapshotValuation(
        tokens=MappingProxyType(snapshot.token_map()),
        market_infos=MappingProxyType(market_infos),
        market_tokens=MappingProxyType(market_tokens),
        position_infos=MappingProxyType(position_infos),
    )

