#!/usr/bin/env python3
"""
Print market and position valuations for one chain snapshot.

Inputs:
  - a deployment YAML (store, token metadata, constants)
  - a snapshot JSON as produced by the chain-data fetcher

Example:
  python3 tools/position_report.py --deployment deployment.yaml --snapshot snapshot.json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from gmsol_engine.core.errors import ConfigError
from gmsol_engine.core.formatting import (
    format_delta_usd,
    format_leverage,
    format_liquidation_price,
    format_token_amount,
    format_usd,
)
from gmsol_engine.core.market_value import get_sellable_market_token
from gmsol_engine.integration.deployment import load_deployment
from gmsol_engine.integration.snapshot import snapshot_from_dict
from gmsol_engine.integration.valuation import SnapshotValuation, evaluate_snapshot


def render_markets(valuation: SnapshotValuation) -> list[str]:
    lines = []
    for address, info in sorted(valuation.market_infos.items(), key=lambda kv: kv[1].name):
        gm = valuation.market_tokens.get(address)
        gm_price = gm.prices.max_price if gm is not None and gm.prices is not None else None
        line = f"{info.name:<24} pool={format_usd(info.pool_value_max) or '-'} gm={format_usd(gm_price, display_decimals=4) or '-'}"
        if gm is not None and gm.total_supply is not None:
            sellable = get_sellable_market_token(info, gm)
            if sellable is not None:
                line += f" sellable={format_usd(sellable.total_usd, fallback_to_zero=True)}"
        lines.append(line)
    return lines


def render_positions(valuation: SnapshotValuation) -> list[str]:
    lines = []
    for address in sorted(valuation.position_infos):
        info = valuation.position_infos[address]
        side = "LONG" if info.is_long else "SHORT"
        lines.append(
            " ".join(
                [
                    f"{address[:8]:<8}",
                    f"{info.market_info.name:<24}",
                    f"{side:<5}",
                    f"size={format_usd(info.position.size_in_usd)}",
                    f"collateral={format_token_amount(info.position.collateral_amount, info.collateral_token.symbol)}",
                    f"entry={format_usd(info.entry_price) or '-'}",
                    f"mark={format_usd(info.mark_price) or '-'}",
                    f"pnl={format_delta_usd(info.pnl, info.pnl_percentage) or '-'}",
                    f"net={format_usd(info.net_value) or '-'}",
                    f"lev={format_leverage(info.leverage) or '-'}",
                    f"liq={format_liquidation_price(info.liquidation_price)}",
                ]
            )
        )
    return lines


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Print market and position valuations for a chain snapshot.")
    p.add_argument("--deployment", required=True, type=Path, help="Path to deployment YAML")
    p.add_argument("--snapshot", required=True, type=Path, help="Path to snapshot JSON object")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = p.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        deployment = load_deployment(args.deployment)
        raw = json.loads(args.snapshot.read_text(encoding="utf-8"))
        snapshot = snapshot_from_dict(raw, deployment)
        valuation = evaluate_snapshot(deployment, snapshot)
    except (OSError, ValueError, ConfigError) as exc:
        print(f"position_report error: {exc}", file=sys.stderr)
        return 2

    print("# markets")
    for line in render_markets(valuation):
        print(line)
    print("# positions")
    for line in render_positions(valuation):
        print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
