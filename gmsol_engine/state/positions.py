"""
Position records (point-in-time snapshot) and derived position metrics.

The engine only reads positions; increases/decreases are performed by the
external program and arrive with the next snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.errors import DecimalMismatchError
from ..core.fixed_point import ScaledAmount
from .markets import MarketInfo
from .tokens import Address, TokenData


@dataclass(frozen=True)
class Position:
    """
    Snapshot of one leveraged position.

    - `size_in_usd` is at USD decimals.
    - `size_in_tokens` is at the index token's decimals.
    - `collateral_amount` is at the collateral token's decimals.
    - fee fields are pre-computed by the chain-data collaborator; `None` means zero.
    """

    address: Address
    owner: Address
    market_token_address: Address
    collateral_token_address: Address
    is_long: bool
    size_in_usd: ScaledAmount
    size_in_tokens: ScaledAmount
    collateral_amount: ScaledAmount
    pending_funding_fees_usd: Optional[ScaledAmount] = None
    pending_borrowing_fees_usd: Optional[ScaledAmount] = None
    closing_fee_usd: Optional[ScaledAmount] = None
    ui_fee_usd: Optional[ScaledAmount] = None

    def __post_init__(self) -> None:
        if not isinstance(self.is_long, bool):
            raise TypeError("is_long must be a bool")
        for name in (
            "pending_funding_fees_usd",
            "pending_borrowing_fees_usd",
            "closing_fee_usd",
            "ui_fee_usd",
        ):
            v = getattr(self, name)
            if v is not None and v.decimals != self.size_in_usd.decimals:
                raise DecimalMismatchError(v.decimals, self.size_in_usd.decimals)

    @property
    def is_closed(self) -> bool:
        return self.size_in_usd.is_zero()

    def fee_or_zero(self, name: str) -> ScaledAmount:
        v = getattr(self, name)
        return ScaledAmount.zero(self.size_in_usd.decimals) if v is None else v


@dataclass(frozen=True)
class PositionInfo:
    """Derived metrics for one open position. Any metric may be absent (`None`)."""

    position: Position
    market_info: MarketInfo
    collateral_token: TokenData
    entry_price: Optional[ScaledAmount] = None
    mark_price: Optional[ScaledAmount] = None
    collateral_usd: Optional[ScaledAmount] = None
    pending_fees_usd: Optional[ScaledAmount] = None
    position_value_usd: Optional[ScaledAmount] = None
    remaining_collateral_usd: Optional[ScaledAmount] = None
    remaining_collateral_amount: Optional[ScaledAmount] = None
    net_value: Optional[ScaledAmount] = None
    leverage: Optional[int] = None  # basis points
    pnl: Optional[ScaledAmount] = None
    pnl_percentage: Optional[int] = None  # basis points
    liquidation_price: Optional[ScaledAmount] = None

    @property
    def address(self) -> Address:
        return self.position.address

    @property
    def is_long(self) -> bool:
        return self.position.is_long
