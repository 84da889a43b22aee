"""
Core valuation kernels.

Only the arithmetic layer is re-exported here; the valuation modules
(`pricing`, `market_value`, `position_value`, `formatting`) depend on the
record types in `state/` and are imported by path.
"""

from .errors import ConfigError, DecimalMismatchError, SnapshotError
from .fixed_point import (
    BASIS_POINTS_DIVISOR,
    FACTOR_DECIMALS,
    USD_DECIMALS,
    ScaledAmount,
    apply_factor,
    convert_to_token_amount,
    convert_to_usd,
    expand_decimals,
    get_basis_points,
    get_unit,
    mul_div,
    trunc_div,
)

__all__ = [
    "ConfigError",
    "DecimalMismatchError",
    "SnapshotError",
    "BASIS_POINTS_DIVISOR",
    "FACTOR_DECIMALS",
    "USD_DECIMALS",
    "ScaledAmount",
    "apply_factor",
    "convert_to_token_amount",
    "convert_to_usd",
    "expand_decimals",
    "get_basis_points",
    "get_unit",
    "mul_div",
    "trunc_div",
]
