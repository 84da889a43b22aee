"""Tests for gmsol_engine/state: record validation."""

from dataclasses import replace

import pytest

from gmsol_engine.core.errors import DecimalMismatchError
from gmsol_engine.core.fixed_point import ScaledAmount
from gmsol_engine.state.markets import DEFAULT_MIN_COLLATERAL_FACTOR, Market, MarketInfo
from gmsol_engine.state.positions import Position
from gmsol_engine.state.tokens import Token, TokenData, TokenPrice


def usd(units):
    return ScaledAmount.from_units(units, 20)


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

class TestToken:
    def test_amount_uses_token_decimals(self, sol_token):
        assert sol_token.amount(5) == ScaledAmount(5, 9)

    @pytest.mark.parametrize(
        "kwargs,exc",
        [
            ({"address": "", "symbol": "X", "decimals": 6}, TypeError),
            ({"address": "a", "symbol": "", "decimals": 6}, TypeError),
            ({"address": "a", "symbol": "X", "decimals": -1}, ValueError),
            ({"address": "a", "symbol": "X", "decimals": True}, TypeError),
            ({"address": "a", "symbol": "X", "decimals": 6, "wrapped_address": ""}, TypeError),
        ],
    )
    def test_rejects_bad_metadata(self, kwargs, exc):
        with pytest.raises(exc):
            Token(**kwargs)


class TestTokenPrice:
    def test_fixed(self):
        price = TokenPrice.fixed(usd(1))
        assert price.min_price == price.max_price == usd(1)

    def test_min_above_max_rejected(self):
        with pytest.raises(ValueError):
            TokenPrice(min_price=usd(2), max_price=usd(1))

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            TokenPrice(min_price=usd(-1), max_price=usd(1))

    def test_exponent_mismatch_rejected(self):
        with pytest.raises(DecimalMismatchError):
            TokenPrice(min_price=ScaledAmount(1, 18), max_price=usd(1))

    def test_non_scaled_rejected(self):
        with pytest.raises(TypeError):
            TokenPrice(min_price=1, max_price=usd(1))


class TestTokenData:
    def test_passthrough_properties(self, sol_data):
        assert sol_data.symbol == "WSOL"
        assert sol_data.decimals == 9
        assert sol_data.address == sol_data.token.address

    def test_balance_decimals_must_match(self, sol_token):
        with pytest.raises(DecimalMismatchError):
            TokenData(token=sol_token, balance=ScaledAmount(1, 6))
        with pytest.raises(DecimalMismatchError):
            TokenData(token=sol_token, total_supply=ScaledAmount(1, 6))


# ---------------------------------------------------------------------------
# Markets
# ---------------------------------------------------------------------------

class TestMarket:
    def test_defaults(self, sol_usdc_market):
        assert sol_usdc_market.min_collateral_factor == DEFAULT_MIN_COLLATERAL_FACTOR == 10**18
        assert sol_usdc_market.is_single is False

    def test_pool_amount_per_leg(self, sol_usdc_market):
        assert sol_usdc_market.pool_amount(True) == 1_000 * 10**9
        assert sol_usdc_market.pool_amount(False) == 100_000 * 10**6

    def test_is_single_must_match_tokens(self, sol_usdc_market):
        with pytest.raises(ValueError):
            replace(sol_usdc_market, is_single=True)
        with pytest.raises(ValueError):
            replace(sol_usdc_market, short_token_address=sol_usdc_market.long_token_address)

    @pytest.mark.parametrize("field,value,exc", [("long_pool_amount", -1, ValueError), ("short_pool_amount", "1", TypeError)])
    def test_pool_amounts_validated(self, sol_usdc_market, field, value, exc):
        with pytest.raises(exc):
            replace(sol_usdc_market, **{field: value})


class TestMarketInfo:
    def test_token_roles(self, sol_usdc_market_info, sol_data, usdc_data):
        assert sol_usdc_market_info.collateral_token(True) is sol_data
        assert sol_usdc_market_info.collateral_token(False) is usdc_data
        assert sol_usdc_market_info.long_pool_amount == ScaledAmount(1_000 * 10**9, 9)
        assert sol_usdc_market_info.short_pool_amount == ScaledAmount(100_000 * 10**6, 6)

    def test_flags_pass_through(self, sol_usdc_market_info):
        assert not sol_usdc_market_info.is_disabled
        assert not sol_usdc_market_info.is_spot_only
        flagged = replace(
            sol_usdc_market_info,
            market=replace(sol_usdc_market_info.market, is_disabled=True, is_spot_only=True),
        )
        assert flagged.is_disabled and flagged.is_spot_only

    def test_token_address_must_match_market(self, sol_usdc_market, sol_data):
        with pytest.raises(ValueError):
            MarketInfo(market=sol_usdc_market, index_token=sol_data, long_token=sol_data, short_token=sol_data)


# ---------------------------------------------------------------------------
# Positions
# ---------------------------------------------------------------------------

def _position(**overrides):
    kwargs = dict(
        address="pos1",
        owner="alice",
        market_token_address="GM",
        collateral_token_address="USDC",
        is_long=True,
        size_in_usd=usd(1000),
        size_in_tokens=ScaledAmount(10, 9),
        collateral_amount=ScaledAmount(100, 6),
    )
    kwargs.update(overrides)
    return Position(**kwargs)


class TestPosition:
    def test_fees_default_to_zero(self):
        position = _position()
        assert position.fee_or_zero("closing_fee_usd") == usd(0)
        assert not position.is_closed

    def test_closed(self):
        assert _position(size_in_usd=usd(0)).is_closed

    def test_fee_decimals_must_match_size(self):
        with pytest.raises(DecimalMismatchError):
            _position(ui_fee_usd=ScaledAmount(1, 6))

    def test_is_long_must_be_bool(self):
        with pytest.raises(TypeError):
            _position(is_long=1)

    def test_hashable(self):
        assert hash(_position()) == hash(_position())
