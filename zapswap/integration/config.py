"""
Config loading for the zap engine.

Precedence (lowest to highest): `ZapConfig` defaults, an optional YAML file,
then `ZAP_*` environment variables. Environment values that fail to parse
fall back to the lower layer; numeric values are clamped into range.

Environment:
- ZAP_CONFIG: path to a YAML file (used when `path` is not given)
- ZAP_ENGINE_ADDRESS
- ZAP_WRAPPED_NATIVE
- ZAP_SLIPPAGE_BPS (0..9999)
- ZAP_RESERVE_TOLERANCE_BPS (0..10000)
- ZAP_MIN_SHARES (>= 1)
"""

from __future__ import annotations

import os
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from ..core.zap import ZapConfig
from ..state.pools import BPS_DENOM

_MAX_MIN_SHARES = 2**128


def _env_int(env: Mapping[str, str], name: str, default: int, *, lo: int, hi: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return int(default)
    try:
        v = int(raw.strip())
    except ValueError:
        return int(default)
    if v < lo:
        return int(lo)
    if v > hi:
        return int(hi)
    return int(v)


def _env_str(env: Mapping[str, str], name: str, default: Optional[str]) -> Optional[str]:
    raw = env.get(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


def load_yaml_config(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a YAML mapping of `ZapConfig` fields. Unknown keys are rejected."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"config file {path} must contain a mapping")
    allowed = {f.name for f in fields(ZapConfig)}
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise ValueError(f"unknown config keys in {path}: {unknown}")
    return dict(data)


def load_config(path: Optional[Union[str, Path]] = None, env: Optional[Mapping[str, str]] = None) -> ZapConfig:
    if env is None:
        env = os.environ
    values: Dict[str, Any] = {}

    if path is None:
        path = _env_str(env, "ZAP_CONFIG", None)
    if path is not None:
        values.update(load_yaml_config(path))

    base = ZapConfig(**values)

    return ZapConfig(
        engine_address=_env_str(env, "ZAP_ENGINE_ADDRESS", base.engine_address),
        wrapped_native=_env_str(env, "ZAP_WRAPPED_NATIVE", base.wrapped_native),
        slippage_bps=_env_int(env, "ZAP_SLIPPAGE_BPS", base.slippage_bps, lo=0, hi=BPS_DENOM - 1),
        reserve_tolerance_bps=_env_int(
            env, "ZAP_RESERVE_TOLERANCE_BPS", base.reserve_tolerance_bps, lo=0, hi=BPS_DENOM
        ),
        min_shares=_env_int(env, "ZAP_MIN_SHARES", base.min_shares, lo=1, hi=_MAX_MIN_SHARES),
    )


__all__ = ["ZapConfig", "load_config", "load_yaml_config"]
