"""
Snapshot record types for gmsol-engine
"""

from .tokens import Address, Token, TokenData, TokenPrice
from .markets import DEFAULT_MIN_COLLATERAL_FACTOR, Market, MarketInfo
from .positions import Position, PositionInfo

__all__ = [
    "Address",
    "Token",
    "TokenData",
    "TokenPrice",
    "DEFAULT_MIN_COLLATERAL_FACTOR",
    "Market",
    "MarketInfo",
    "Position",
    "PositionInfo",
]
