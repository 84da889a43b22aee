"""
Chain snapshot decoding.

The chain-data collaborator hands over raw records as plain mappings (JSON).
This module decodes them fail-closed into the typed, hashable state records,
attaching decimals from the deployment's token metadata.

Snapshot shape:

    {
      "prices":   {"<token>": {"min_price": "<u128>", "max_price": "<u128>"}},
      "balances": {"<token>": "<u64>"},
      "markets": [{"market_token", "index_token", "long_token", "short_token",
                   "long_pool_amount", "short_pool_amount", "is_single"?,
                   "min_collateral_factor"?, "is_disabled"?, "is_spot_only"?}],
      "market_tokens": {"<market token>": {"total_supply": "<u64>", "balance": "<u64>"?}},
      "positions": [{"address", "owner", "market_token", "collateral_token", "is_long",
                     "size_in_usd", "size_in_tokens", "collateral_amount",
                     "pending_funding_fees_usd"?, "pending_borrowing_fees_usd"?,
                     "closing_fee_usd"?, "ui_fee_usd"?}]
    }

Numeric fields are ints or base-10 strings. Markets referencing tokens the
deployment does not know, and positions referencing skipped markets, are
dropped (logged at debug level); malformed records raise `SnapshotError`.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..core.errors import SnapshotError
from ..core.fixed_point import ScaledAmount
from ..state.markets import DEFAULT_MIN_COLLATERAL_FACTOR, Market
from ..state.positions import Position
from ..state.tokens import Address, Token, TokenData, TokenPrice
from .deployment import Deployment

logger = logging.getLogger(__name__)

MARKET_TOKEN_SYMBOL = "GM"

_POSITION_FEE_FIELDS = (
    "pending_funding_fees_usd",
    "pending_borrowing_fees_usd",
    "closing_fee_usd",
    "ui_fee_usd",
)


def _require_int(value: Any, *, name: str, non_negative: bool = True) -> int:
    if isinstance(value, str):
        try:
            value = int(value, 10)
        except ValueError as exc:
            raise SnapshotError(f"{name} must be a base-10 integer: {value!r}") from exc
    if not isinstance(value, int) or isinstance(value, bool):
        raise SnapshotError(f"{name} must be an int")
    if non_negative and value < 0:
        raise SnapshotError(f"{name} must be non-negative")
    return value


def _require_str(value: Any, *, name: str) -> str:
    if not isinstance(value, str) or not value:
        raise SnapshotError(f"{name} must be a non-empty string")
    return value


def _require_bool(value: Any, *, name: str) -> bool:
    if not isinstance(value, bool):
        raise SnapshotError(f"{name} must be a bool")
    return value


def _require_mapping(value: Any, *, name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise SnapshotError(f"{name} must be a mapping")
    return value


def _require_list(value: Any, *, name: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise SnapshotError(f"{name} must be a list")
    return value


@dataclass(frozen=True)
class ChainSnapshot:
    """
    One point-in-time view of the chain, decoded.

    Hashable, so that whole-snapshot evaluation can be memoized.
    """

    tokens: Tuple[TokenData, ...]
    markets: Tuple[Market, ...]
    market_tokens: Tuple[TokenData, ...]
    positions: Tuple[Position, ...]

    def token_map(self) -> Dict[Address, TokenData]:
        return {t.address: t for t in self.tokens}

    def market_token_map(self) -> Dict[Address, TokenData]:
        return {t.address: t for t in self.market_tokens}


def _decode_price(token: Token, entry: Any, *, usd_decimals: int) -> TokenPrice:
    entry = _require_mapping(entry, name=f"prices.{token.address}")
    # Raw prices are USD per whole token at the token's price decimals (default: USD decimals).
    price_decimals = usd_decimals if token.price_decimals is None else token.price_decimals
    min_raw = _require_int(entry.get("min_price"), name=f"prices.{token.address}.min_price")
    max_raw = _require_int(entry.get("max_price"), name=f"prices.{token.address}.max_price")
    try:
        return TokenPrice(
            min_price=ScaledAmount(min_raw, price_decimals).rescale(usd_decimals),
            max_price=ScaledAmount(max_raw, price_decimals).rescale(usd_decimals),
        )
    except ValueError as exc:
        raise SnapshotError(f"invalid price for {token.address}: {exc}") from exc


def _decode_tokens(data: Mapping[str, Any], deployment: Deployment) -> Tuple[TokenData, ...]:
    prices = _require_mapping(data.get("prices"), name="prices")
    balances = _require_mapping(data.get("balances"), name="balances")
    usd_decimals = deployment.constants.usd_decimals
    for address in prices:
        if deployment.get_token(address) is None:
            logger.debug("ignoring price for unconfigured token %s", address)

    out = []
    for token in deployment.tokens:
        price = prices.get(token.address)
        balance = balances.get(token.address)
        out.append(
            TokenData(
                token=token,
                prices=None if price is None else _decode_price(token, price, usd_decimals=usd_decimals),
                balance=None
                if balance is None
                else token.amount(_require_int(balance, name=f"balances.{token.address}")),
            )
        )
    return tuple(out)


def _decode_market(entry: Any) -> Market:
    if not isinstance(entry, Mapping):
        raise SnapshotError("markets entries must be objects")
    market_token = _require_str(entry.get("market_token"), name="market.market_token")
    long_token = _require_str(entry.get("long_token"), name=f"market {market_token}.long_token")
    short_token = _require_str(entry.get("short_token"), name=f"market {market_token}.short_token")
    is_single = entry.get("is_single")
    is_single = long_token == short_token if is_single is None else _require_bool(is_single, name="is_single")
    try:
        return Market(
            market_token_address=market_token,
            index_token_address=_require_str(entry.get("index_token"), name=f"market {market_token}.index_token"),
            long_token_address=long_token,
            short_token_address=short_token,
            long_pool_amount=_require_int(entry.get("long_pool_amount", 0), name="long_pool_amount"),
            short_pool_amount=_require_int(entry.get("short_pool_amount", 0), name="short_pool_amount"),
            is_single=is_single,
            min_collateral_factor=_require_int(
                entry.get("min_collateral_factor", DEFAULT_MIN_COLLATERAL_FACTOR), name="min_collateral_factor"
            ),
            is_disabled=_require_bool(entry.get("is_disabled", False), name="is_disabled"),
            is_spot_only=_require_bool(entry.get("is_spot_only", False), name="is_spot_only"),
        )
    except (TypeError, ValueError) as exc:
        raise SnapshotError(f"invalid market {market_token}: {exc}") from exc


def _decode_markets(data: Mapping[str, Any], deployment: Deployment) -> Tuple[Market, ...]:
    out: Dict[str, Market] = {}
    for entry in _require_list(data.get("markets"), name="markets"):
        market = _decode_market(entry)
        if market.market_token_address in out:
            raise SnapshotError(f"duplicate market: {market.market_token_address}")
        if not deployment.allows_market(market.market_token_address):
            logger.debug("skipping market %s: not in deployment", market.market_token_address)
            continue
        missing = [
            a
            for a in (market.index_token_address, market.long_token_address, market.short_token_address)
            if deployment.get_token(a) is None
        ]
        if missing:
            logger.debug("skipping market %s: unknown tokens %s", market.market_token_address, missing)
            continue
        out[market.market_token_address] = market
    return tuple(out.values())


def _decode_market_tokens(
    data: Mapping[str, Any], markets: Tuple[Market, ...], deployment: Deployment
) -> Tuple[TokenData, ...]:
    raw = _require_mapping(data.get("market_tokens"), name="market_tokens")
    decimals = deployment.constants.market_token_decimals
    out = []
    for market in markets:
        entry = raw.get(market.market_token_address)
        if entry is None:
            logger.debug("no market token data for %s", market.market_token_address)
            continue
        entry = _require_mapping(entry, name=f"market_tokens.{market.market_token_address}")
        token = Token(address=market.market_token_address, symbol=MARKET_TOKEN_SYMBOL, decimals=decimals)
        supply = entry.get("total_supply")
        balance = entry.get("balance")
        out.append(
            TokenData(
                token=token,
                total_supply=None if supply is None else token.amount(_require_int(supply, name="total_supply")),
                balance=None if balance is None else token.amount(_require_int(balance, name="balance")),
            )
        )
    return tuple(out)


def _decode_position(entry: Any, market: Market, deployment: Deployment, address: str) -> Position:
    usd_decimals = deployment.constants.usd_decimals
    index_token = deployment.get_token(market.index_token_address)
    collateral_address = _require_str(entry.get("collateral_token"), name=f"position {address}.collateral_token")
    if collateral_address not in (market.long_token_address, market.short_token_address):
        raise SnapshotError(f"position {address}: collateral {collateral_address} is not a market collateral token")
    collateral_token = deployment.get_token(collateral_address)
    assert index_token is not None and collateral_token is not None

    def usd(name: str, *, required: bool = False) -> Optional[ScaledAmount]:
        raw = entry.get(name)
        if raw is None and not required:
            return None
        return ScaledAmount(_require_int(raw, name=f"position {address}.{name}"), usd_decimals)

    fees = {name: usd(name) for name in _POSITION_FEE_FIELDS}
    size_in_usd = usd("size_in_usd", required=True)
    assert size_in_usd is not None
    return Position(
        address=address,
        owner=_require_str(entry.get("owner"), name=f"position {address}.owner"),
        market_token_address=market.market_token_address,
        collateral_token_address=collateral_address,
        is_long=_require_bool(entry.get("is_long"), name=f"position {address}.is_long"),
        size_in_usd=size_in_usd,
        size_in_tokens=index_token.amount(
            _require_int(entry.get("size_in_tokens"), name=f"position {address}.size_in_tokens")
        ),
        collateral_amount=collateral_token.amount(
            _require_int(entry.get("collateral_amount"), name=f"position {address}.collateral_amount")
        ),
        **fees,
    )


def _decode_positions(
    data: Mapping[str, Any], markets: Tuple[Market, ...], deployment: Deployment
) -> Tuple[Position, ...]:
    by_token = {m.market_token_address: m for m in markets}
    out: Dict[str, Position] = {}
    for entry in _require_list(data.get("positions"), name="positions"):
        if not isinstance(entry, Mapping):
            raise SnapshotError("positions entries must be objects")
        address = _require_str(entry.get("address"), name="position.address")
        if address in out:
            raise SnapshotError(f"duplicate position: {address}")
        market_token = _require_str(entry.get("market_token"), name=f"position {address}.market_token")
        market = by_token.get(market_token)
        if market is None:
            logger.debug("skipping position %s: unknown market %s", address, market_token)
            continue
        out[address] = _decode_position(entry, market, deployment, address)
    return tuple(out.values())


def snapshot_from_dict(data: Any, deployment: Deployment) -> ChainSnapshot:
    if not isinstance(data, Mapping):
        raise SnapshotError("snapshot must be a mapping")
    markets = _decode_markets(data, deployment)
    return ChainSnapshot(
        tokens=_decode_tokens(data, deployment),
        markets=markets,
        market_tokens=_decode_market_tokens(data, markets, deployment),
        positions=_decode_positions(data, markets, deployment),
    )
