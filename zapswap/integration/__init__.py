"""
Integration layer: in-memory AMM backend, snapshots, config loading and CLI.
"""

from .config import load_config
from .memory_amm import AmmRevert, InMemoryAmm
from .snapshot import AmmSnapshot, amm_from_snapshot, snapshot_from_amm

__all__ = [
    "load_config",
    "AmmRevert",
    "InMemoryAmm",
    "AmmSnapshot",
    "amm_from_snapshot",
    "snapshot_from_amm",
]
