"""
Chain-data integration layer
"""

from .deployment import Deployment, EngineConstants, deployment_from_dict, load_deployment
from .snapshot import ChainSnapshot, snapshot_from_dict
from .valuation import SnapshotValuation, evaluate_snapshot

__all__ = [
    "Deployment",
    "EngineConstants",
    "deployment_from_dict",
    "load_deployment",
    "ChainSnapshot",
    "snapshot_from_dict",
    "SnapshotValuation",
    "evaluate_snapshot",
]
