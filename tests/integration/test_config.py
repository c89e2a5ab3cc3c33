# [TESTER] v1

from __future__ import annotations

import pytest

from zapswap.core.zap import DEFAULT_ENGINE_ADDRESS, ZapConfig
from zapswap.integration.config import load_config


def test_defaults_without_env_or_file() -> None:
    cfg = load_config(env={})
    assert cfg == ZapConfig()
    assert cfg.engine_address == DEFAULT_ENGINE_ADDRESS
    assert cfg.slippage_bps == 50
    assert cfg.reserve_tolerance_bps == 0
    assert cfg.min_shares == 1
    assert cfg.wrapped_native is None


def test_yaml_file_then_env_override(tmp_path) -> None:
    path = tmp_path / "zap.yaml"
    path.write_text(
        "slippage_bps: 100\n"
        "reserve_tolerance_bps: 25\n"
        "wrapped_native: '0x" + "EE" * 20 + "'\n",
        encoding="utf-8",
    )
    cfg = load_config(path, env={"ZAP_SLIPPAGE_BPS": "75"})
    assert cfg.slippage_bps == 75
    assert cfg.reserve_tolerance_bps == 25
    assert cfg.wrapped_native == "0x" + "ee" * 20


def test_config_path_from_env(tmp_path) -> None:
    path = tmp_path / "zap.yaml"
    path.write_text("min_shares: 10\n", encoding="utf-8")
    assert load_config(env={"ZAP_CONFIG": str(path)}).min_shares == 10


def test_env_values_are_clamped_or_ignored() -> None:
    cfg = load_config(
        env={
            "ZAP_SLIPPAGE_BPS": "999999",
            "ZAP_RESERVE_TOLERANCE_BPS": "-4",
            "ZAP_MIN_SHARES": "lots",
            "ZAP_ENGINE_ADDRESS": "  ",
        }
    )
    assert cfg.slippage_bps == 9_999
    assert cfg.reserve_tolerance_bps == 0
    assert cfg.min_shares == 1
    assert cfg.engine_address == DEFAULT_ENGINE_ADDRESS


def test_yaml_rejects_unknown_keys_and_non_mappings(tmp_path) -> None:
    unknown = tmp_path / "unknown.yaml"
    unknown.write_text("slipage_bps: 1\n", encoding="utf-8")
    with pytest.raises(ValueError, match="unknown config keys"):
        load_config(unknown, env={})

    listy = tmp_path / "list.yaml"
    listy.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError, match="mapping"):
        load_config(listy, env={})


def test_empty_yaml_is_defaults(tmp_path) -> None:
    empty = tmp_path / "empty.yaml"
    empty.write_text("", encoding="utf-8")
    assert load_config(empty, env={}) == ZapConfig()
