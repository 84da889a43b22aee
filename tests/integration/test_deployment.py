from __future__ import annotations

import logging

import pytest

from gmsol_engine.core.errors import ConfigError
from gmsol_engine.core.fixed_point import ScaledAmount
from gmsol_engine.integration.deployment import (
    Deployment,
    EngineConstants,
    deployment_from_dict,
    load_deployment,
)

DEPLOYMENT_YAML = """\
store: Store1111111111111111111111111111111111111
native_token: So11111111111111111111111111111111111111112
markets:
  - GMsoLusdc1111111111111111111111111111111111
tokens:
  So11111111111111111111111111111111111111112:
    symbol: WSOL
    decimals: 9
    is_wrapped: true
  EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v:
    symbol: USDC
    decimals: 6
constants:
  min_collateral_usd: "500000000000000000000"
  market_token_decimals: 9
"""


def _minimal(**overrides):
    data = {
        "store": "store",
        "tokens": {"A": {"symbol": "A", "decimals": 6}},
    }
    data.update(overrides)
    return data


def test_load_deployment_from_yaml(tmp_path, caplog) -> None:
    path = tmp_path / "deployment.yaml"
    path.write_text(DEPLOYMENT_YAML, encoding="utf-8")

    with caplog.at_level(logging.INFO, logger="gmsol_engine.integration.deployment"):
        deployment = load_deployment(path)

    assert deployment.store == "Store1111111111111111111111111111111111111"
    assert deployment.native_token_address == "So11111111111111111111111111111111111111112"
    assert [t.symbol for t in deployment.tokens] == ["WSOL", "USDC"]
    wsol = deployment.get_token("So11111111111111111111111111111111111111112")
    assert wsol is not None and wsol.decimals == 9 and wsol.is_wrapped
    assert deployment.constants.min_collateral_usd_amount == ScaledAmount(5 * 10**20, 20)
    assert deployment.allows_market("GMsoLusdc1111111111111111111111111111111111")
    assert not deployment.allows_market("GMother")
    assert "loaded deployment" in caplog.text


def test_defaults() -> None:
    deployment = deployment_from_dict(_minimal())
    constants = deployment.constants
    assert constants == EngineConstants()
    assert constants.usd_decimals == 20
    assert constants.basis_points_divisor == 10_000
    assert constants.factor_decimals == 20
    assert constants.market_token_decimals == 9
    assert constants.execution_fee == 5000
    assert constants.rent_exempt_amount == 2_039_280
    assert constants.min_collateral_usd_amount == ScaledAmount.unit(20)
    assert deployment.allows_market("anything")
    assert deployment.get_token("missing") is None


def test_deployment_is_hashable() -> None:
    a = deployment_from_dict(_minimal())
    b = deployment_from_dict(_minimal())
    assert a == b
    assert hash(a) == hash(b)


@pytest.mark.parametrize(
    "data",
    [
        [],
        _minimal(store=""),
        _minimal(tokens={}),
        _minimal(tokens={"A": {"symbol": "A"}}),
        _minimal(tokens={"A": {"symbol": "A", "decimals": "six"}}),
        _minimal(tokens={"A": {"symbol": "A", "decimals": 6, "is_native": "yes"}}),
        _minimal(markets="GM"),
        _minimal(native_token="B"),
        _minimal(constants={"usd_decimal": 20}),
        _minimal(constants={"basis_points_divisor": 0}),
        _minimal(constants={"usd_decimals": -1}),
    ],
)
def test_rejects_malformed(data) -> None:
    with pytest.raises(ConfigError):
        deployment_from_dict(data)


def test_duplicate_tokens_rejected() -> None:
    from gmsol_engine.state.tokens import Token

    token = Token(address="A", symbol="A", decimals=6)
    with pytest.raises(ValueError):
        Deployment(store="s", tokens=(token, token))


def test_missing_file(tmp_path) -> None:
    with pytest.raises(ConfigError):
        load_deployment(tmp_path / "nope.yaml")


def test_invalid_yaml(tmp_path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("store: [unterminated\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_deployment(path)
