"""
Shared test fixtures: a SOL/USDC market plus a single-token SOL market.

Prices (USD per whole token, 20 decimals):
- WSOL: min $100, max $101
- USDC: $1
"""

import pytest

from gmsol_engine.core.fixed_point import ScaledAmount
from gmsol_engine.state.markets import Market, MarketInfo
from gmsol_engine.state.tokens import Token, TokenData, TokenPrice

SOL_ADDRESS = "So11111111111111111111111111111111111111112"
USDC_ADDRESS = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
GM_SOL_USDC = "GMsoLusdc1111111111111111111111111111111111"
GM_SOL = "GMsoL111111111111111111111111111111111111111"


def usd(units, decimals=20):
    return ScaledAmount.from_units(units, decimals)


@pytest.fixture
def sol_token():
    return Token(address=SOL_ADDRESS, symbol="WSOL", decimals=9, is_wrapped=True)


@pytest.fixture
def usdc_token():
    return Token(address=USDC_ADDRESS, symbol="USDC", decimals=6)


@pytest.fixture
def sol_data(sol_token):
    return TokenData(token=sol_token, prices=TokenPrice(min_price=usd(100), max_price=usd(101)))


@pytest.fixture
def usdc_data(usdc_token):
    return TokenData(token=usdc_token, prices=TokenPrice.fixed(usd(1)))


@pytest.fixture
def sol_usdc_market():
    return Market(
        market_token_address=GM_SOL_USDC,
        index_token_address=SOL_ADDRESS,
        long_token_address=SOL_ADDRESS,
        short_token_address=USDC_ADDRESS,
        long_pool_amount=1_000 * 10**9,
        short_pool_amount=100_000 * 10**6,
    )


@pytest.fixture
def sol_usdc_market_info(sol_usdc_market, sol_data, usdc_data):
    return MarketInfo(market=sol_usdc_market, index_token=sol_data, long_token=sol_data, short_token=usdc_data)


@pytest.fixture
def sol_single_market_info(sol_data):
    market = Market(
        market_token_address=GM_SOL,
        index_token_address=SOL_ADDRESS,
        long_token_address=SOL_ADDRESS,
        short_token_address=SOL_ADDRESS,
        long_pool_amount=1_001 * 10**9,
        is_single=True,
    )
    return MarketInfo(market=market, index_token=sol_data, long_token=sol_data, short_token=sol_data)


@pytest.fixture
def gm_token():
    return Token(address=GM_SOL_USDC, symbol="GM", decimals=9)
