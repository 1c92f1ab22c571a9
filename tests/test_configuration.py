from __future__ import annotations

from pathlib import Path

import pytest

from wagerledger.configuration import (
    ConfigurationError,
    RunConfig,
    load_run_config,
    validate_run_config,
)
from wagerledger.player import SettlementMode

REPO_CONFIG = Path(__file__).resolve().parents[1] / "config" / "wagerledger.yaml"


def test_repository_configuration_loads() -> None:
    config = load_run_config(base_path=REPO_CONFIG)
    assert isinstance(config, RunConfig)
    assert config.ledger.settlement is SettlementMode.NET
    assert config.inputs.match_data == "match_data.txt"
    assert validate_run_config(config) == []


def test_missing_default_file_falls_back_to_builtin_defaults(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    config = load_run_config()
    assert config == RunConfig()


def test_explicit_missing_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_run_config(base_path=tmp_path / "absent.yaml")


def test_configuration_layers_and_env_overrides(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    base = tmp_path / "wagerledger.yaml"
    base.write_text(
        """
inputs:
  match_data: base_match.txt
  player_data: base_player.txt
output:
  path: base_result.txt
"""
    )
    env_override = tmp_path / "wagerledger.audit.yaml"
    env_override.write_text(
        """
inputs:
  match_data: audit_match.txt
ledger:
  settlement: gross
"""
    )
    extra_override = tmp_path / "override.yaml"
    extra_override.write_text(
        """
output:
  path: extra_result.txt
"""
    )

    monkeypatch.setenv("WAGERLEDGER_ENV", "audit")
    monkeypatch.setenv("WAGERLEDGER_CONFIG", str(extra_override))
    monkeypatch.setenv("WAGERLEDGER__inputs__player_data", "env_player.txt")

    config = load_run_config(base_path=base)

    assert config.environment == "audit"
    assert config.inputs.match_data == "audit_match.txt"
    assert config.inputs.player_data == "env_player.txt"
    assert config.output.path == "extra_result.txt"
    assert config.ledger.settlement is SettlementMode.GROSS


def test_environment_token_substitution(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    base = tmp_path / "wagerledger.yaml"
    monkeypatch.setenv("LEDGER_DATA", str(tmp_path / "data"))
    base.write_text(
        """
inputs:
  match_data: "${LEDGER_DATA}/match_data.txt"
  player_data: "${LEDGER_DATA}/player_data.txt"
"""
    )

    config = load_run_config(base_path=base)
    assert Path(config.inputs.match_data) == tmp_path / "data" / "match_data.txt"


def test_non_mapping_configuration_is_rejected(tmp_path: Path) -> None:
    base = tmp_path / "wagerledger.yaml"
    base.write_text("- just\n- a list\n")
    with pytest.raises(TypeError):
        load_run_config(base_path=base)


def test_validation_collects_errors() -> None:
    config = RunConfig.model_validate(
        {
            "inputs": {"match_data": "same.txt", "player_data": "same.txt"},
            "output": {"path": " ", "tables_dir": ""},
        }
    )
    with pytest.raises(ConfigurationError) as excinfo:
        validate_run_config(config)
    message = str(excinfo.value)
    assert "must be different files" in message
    assert "output.path cannot be empty" in message
    assert "output.tables_dir cannot be empty" in message


def test_validation_warnings() -> None:
    config = RunConfig.model_validate(
        {"output": {"path": None}, "ledger": {"settlement": "gross"}}
    )
    warnings = validate_run_config(config)
    assert len(warnings) == 2
    assert any("stdout" in message for message in warnings)
    assert any(
        "debit the stake before crediting the payout" in message for message in warnings
    )


def test_unknown_settlement_is_rejected() -> None:
    with pytest.raises(ValueError):
        RunConfig.model_validate({"ledger": {"settlement": "double"}})


def test_environment_overrides_can_clear_output_path(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    base = tmp_path / "wagerledger.yaml"
    base.write_text(
        """
output:
  path: result.txt
ledger:
  settlement: net
"""
    )
    monkeypatch.setenv("WAGERLEDGER__output__path", "null")
    monkeypatch.setenv("WAGERLEDGER__OUTPUT__TABLES_DIR", "${LEDGER_TABLES}")
    monkeypatch.setenv("WAGERLEDGER__ledger__settlement", "gross")
    monkeypatch.setenv("LEDGER_TABLES", str(tmp_path / "tables"))

    config = load_run_config(base_path=base)

    assert config.output.path is None
    assert config.output.tables_dir == str(tmp_path / "tables")
    assert config.ledger.settlement is SettlementMode.GROSS
