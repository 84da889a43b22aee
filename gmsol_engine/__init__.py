"""
gmsol-engine: fixed-point valuation for leveraged positions and GM liquidity markets.

Layout:
- `core/`: integer-only valuation kernels (no I/O).
- `state/`: immutable token, market and position records.
- `integration/`: deployment config, snapshot decoding and snapshot-wide evaluation.
"""

from .core.errors import ConfigError, DecimalMismatchError, SnapshotError
from .core.fixed_point import ScaledAmount
from .state.tokens import Token, TokenData, TokenPrice
from .state.markets import Market, MarketInfo
from .state.positions import Position, PositionInfo
from .core.pricing import PriceKind
from .core.position_value import get_position_info
from .integration.deployment import Deployment, EngineConstants, load_deployment
from .integration.snapshot import ChainSnapshot, snapshot_from_dict
from .integration.valuation import SnapshotValuation, evaluate_snapshot

__all__ = [
    "ConfigError",
    "DecimalMismatchError",
    "SnapshotError",
    "ScaledAmount",
    "Token",
    "TokenData",
    "TokenPrice",
    "Market",
    "MarketInfo",
    "Position",
    "PositionInfo",
    "PriceKind",
    "get_position_info",
    "Deployment",
    "EngineConstants",
    "load_deployment",
    "ChainSnapshot",
    "snapshot_from_dict",
    "SnapshotValuation",
    "evaluate_snapshot",
]
