"""
Deployment configuration: the immutable context threaded into every evaluation.

A deployment names the store account, the token metadata the engine trusts
and the engine constants. It is loaded once (from YAML) and passed
explicitly; nothing here is a process-wide global.

YAML shape:

    store: <address>
    native_token: <address>          # optional
    markets: [<market token>, ...]   # optional allow-list; empty = all
    tokens:
      <address>: {symbol: WSOL, decimals: 9, is_native: false, ...}
    constants:                       # optional, defaults below
      usd_decimals: 20
      min_collateral_usd: "100000000000000000000"
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from functools import cached_property
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml

from ..core.errors import ConfigError
from ..core.fixed_point import BASIS_POINTS_DIVISOR, FACTOR_DECIMALS, USD_DECIMALS, ScaledAmount, get_unit
from ..state.tokens import Address, Token

logger = logging.getLogger(__name__)

DEFAULT_MARKET_TOKEN_DECIMALS = 9
# Transaction-layer constants (lamports); carried for callers, unused by valuation.
DEFAULT_EXECUTION_FEE = 5000
DEFAULT_RENT_EXEMPT_AMOUNT = 2_039_280


def _require_int(value: Any, *, name: str, non_negative: bool = True) -> int:
    """Accept an int or a base-10 integer string (u128 values often arrive as strings)."""
    if isinstance(value, str):
        try:
            value = int(value, 10)
        except ValueError as exc:
            raise ConfigError(f"{name} must be a base-10 integer: {value!r}") from exc
    if not isinstance(value, int) or isinstance(value, bool):
        raise ConfigError(f"{name} must be an int")
    if non_negative and value < 0:
        raise ConfigError(f"{name} must be non-negative")
    return value


def _require_str(value: Any, *, name: str) -> str:
    if not isinstance(value, str) or not value:
        raise ConfigError(f"{name} must be a non-empty string")
    return value


def _require_bool(value: Any, *, name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{name} must be a bool")
    return value


@dataclass(frozen=True)
class EngineConstants:
    usd_decimals: int = USD_DECIMALS
    basis_points_divisor: int = BASIS_POINTS_DIVISOR
    factor_decimals: int = FACTOR_DECIMALS
    # Raw, at `usd_decimals`; None means one USD.
    min_collateral_usd: Optional[int] = None
    market_token_decimals: int = DEFAULT_MARKET_TOKEN_DECIMALS
    execution_fee: int = DEFAULT_EXECUTION_FEE
    rent_exempt_amount: int = DEFAULT_RENT_EXEMPT_AMOUNT

    def __post_init__(self) -> None:
        for f in fields(self):
            v = getattr(self, f.name)
            if v is None:
                continue
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{f.name} must be an int")
            if v < 0:
                raise ValueError(f"{f.name} must be non-negative: {v}")
        if self.basis_points_divisor == 0:
            raise ValueError("basis_points_divisor must be positive")

    @property
    def min_collateral_usd_amount(self) -> ScaledAmount:
        if self.min_collateral_usd is None:
            return ScaledAmount(get_unit(self.usd_decimals), self.usd_decimals)
        return ScaledAmount(self.min_collateral_usd, self.usd_decimals)

    @property
    def one_usd(self) -> ScaledAmount:
        return ScaledAmount.unit(self.usd_decimals)


@dataclass(frozen=True)
class Deployment:
    store: Address
    tokens: Tuple[Token, ...]
    native_token_address: Optional[Address] = None
    markets: Tuple[Address, ...] = ()
    constants: EngineConstants = field(default_factory=EngineConstants)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for token in self.tokens:
            if token.address in seen:
                raise ValueError(f"duplicate token in deployment: {token.address}")
            seen.add(token.address)
        if self.native_token_address is not None and self.native_token_address not in seen:
            raise ValueError(f"native token {self.native_token_address} is not a configured token")

    @cached_property
    def token_map(self) -> Dict[Address, Token]:
        return {t.address: t for t in self.tokens}

    def get_token(self, address: Address) -> Optional[Token]:
        return self.token_map.get(address)

    def allows_market(self, market_token_address: Address) -> bool:
        return not self.markets or market_token_address in self.markets


def _token_from_dict(address: str, entry: Any) -> Token:
    if not isinstance(entry, Mapping):
        raise ConfigError(f"tokens.{address} must be a mapping")
    wrapped = entry.get("wrapped_address")
    price_decimals = entry.get("price_decimals")
    try:
        return Token(
            address=_require_str(address, name="token address"),
            symbol=_require_str(entry.get("symbol"), name=f"tokens.{address}.symbol"),
            decimals=_require_int(entry.get("decimals"), name=f"tokens.{address}.decimals"),
            is_native=_require_bool(entry.get("is_native", False), name=f"tokens.{address}.is_native"),
            is_wrapped=_require_bool(entry.get("is_wrapped", False), name=f"tokens.{address}.is_wrapped"),
            is_synthetic=_require_bool(entry.get("is_synthetic", False), name=f"tokens.{address}.is_synthetic"),
            wrapped_address=None if wrapped is None else _require_str(wrapped, name=f"tokens.{address}.wrapped_address"),
            price_decimals=None
            if price_decimals is None
            else _require_int(price_decimals, name=f"tokens.{address}.price_decimals"),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"invalid token {address}: {exc}") from exc


def _constants_from_dict(entry: Any) -> EngineConstants:
    if entry is None:
        return EngineConstants()
    if not isinstance(entry, Mapping):
        raise ConfigError("constants must be a mapping")
    known = {f.name for f in fields(EngineConstants)}
    unknown = sorted(set(entry) - known)
    if unknown:
        raise ConfigError(f"unknown constants: {', '.join(map(str, unknown))}")
    kwargs = {k: _require_int(v, name=f"constants.{k}") for k, v in entry.items()}
    try:
        return EngineConstants(**kwargs)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"invalid constants: {exc}") from exc


def deployment_from_dict(data: Any) -> Deployment:
    """Decode a deployment mapping fail-closed; every problem is a `ConfigError`."""
    if not isinstance(data, Mapping):
        raise ConfigError("deployment must be a mapping")

    store = _require_str(data.get("store"), name="store")

    tokens_entry = data.get("tokens")
    if not isinstance(tokens_entry, Mapping) or not tokens_entry:
        raise ConfigError("tokens must be a non-empty mapping")
    tokens = tuple(_token_from_dict(str(addr), entry) for addr, entry in tokens_entry.items())

    markets_entry = data.get("markets")
    if markets_entry is None:
        markets_entry = []
    if not isinstance(markets_entry, list):
        raise ConfigError("markets must be a list")
    markets = tuple(_require_str(m, name="markets[]") for m in markets_entry)

    native = data.get("native_token")
    try:
        return Deployment(
            store=store,
            tokens=tokens,
            native_token_address=None if native is None else _require_str(native, name="native_token"),
            markets=markets,
            constants=_constants_from_dict(data.get("constants")),
        )
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc


def load_deployment(path: Union[str, Path]) -> Deployment:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read deployment file {path}: {exc}") from exc
    try:
        obj = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    deployment = deployment_from_dict(obj)
    logger.info(
        "loaded deployment store=%s tokens=%d markets=%s",
        deployment.store,
        len(deployment.tokens),
        len(deployment.markets) or "all",
    )
    return deployment
