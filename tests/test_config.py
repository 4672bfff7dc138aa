"""Tests for configuration models and load/save behavior."""

import json
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

from mac_rotator.config import AppConfig
from mac_rotator.constants import DEFAULT_EXCLUSIONS
from mac_rotator.exceptions import ConfigurationError


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def pascal_case_config() -> dict:
    """Configuration as written by existing deployments."""
    return {
        "Exclusions": ["Virtual", "VPN"],
        "HealthWaitSeconds": 45,
        "MaxDisableSeconds": 15,
        "RollbackOnNoIPv4": False,
        "ExternalVolumeLabels": ["AUDITLOG"],
        "FallbackLocal": False,
        "HashChainFile": "chain.hash",
    }


# ============================================================================
# Defaults and validation
# ============================================================================


class TestAppConfigDefaults:
    def test_defaults(self) -> None:
        # Act
        config = AppConfig()

        # Assert
        assert config.exclusions == list(DEFAULT_EXCLUSIONS)
        assert config.health_wait_seconds == 30
        assert config.max_disable_seconds == 10
        assert config.rollback_on_no_ipv4 is True
        assert config.external_volume_labels == []
        assert config.fallback_local is True
        assert config.hash_chain_file == "chain.state"
        assert config.log_level == "INFO"


class TestAppConfigValidation:
    def test_accepts_pascal_case_names(self, pascal_case_config: dict) -> None:
        config = AppConfig.model_validate(pascal_case_config)

        assert config.health_wait_seconds == 45
        assert config.rollback_on_no_ipv4 is False
        assert config.external_volume_labels == ["AUDITLOG"]
        assert config.hash_chain_file == "chain.hash"

    def test_accepts_snake_case_names(self) -> None:
        config = AppConfig.model_validate({"health_wait_seconds": 12, "fallback_local": False})

        assert config.health_wait_seconds == 12
        assert config.fallback_local is False

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("health_wait_seconds", 0),
            ("health_wait_seconds", 601),
            ("max_disable_seconds", 0),
            ("max_disable_seconds", 121),
            ("log_level", "TRACE"),
            ("hash_chain_file", "../chain.state"),
            ("hash_chain_file", "sub\\chain.state"),
            ("external_volume_labels", ["  "]),
        ],
    )
    def test_rejects_out_of_range(self, field: str, value: object) -> None:
        with pytest.raises(ValidationError):
            AppConfig.model_validate({field: value})

    def test_rejects_invalid_regex(self) -> None:
        with pytest.raises(ValidationError, match="invalid exclusion pattern"):
            AppConfig(exclusions=["[unclosed"])

    def test_rejects_unknown_fields(self) -> None:
        with pytest.raises(ValidationError):
            AppConfig.model_validate({"HealthWait": 5})


# ============================================================================
# Load/save
# ============================================================================


class TestLoadSave:
    def test_round_trip(self, tmp_path: Path) -> None:
        # Arrange
        path = tmp_path / "cfg" / "config.json"
        config = AppConfig(external_volume_labels=["AUDITLOG"], health_wait_seconds=20)

        # Act
        config.save_to_file(path)
        loaded = AppConfig.load_from_file(path)

        # Assert
        assert loaded == config
        assert json.loads(path.read_text(encoding="utf-8"))["health_wait_seconds"] == 20

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_saved_file_is_owner_only(self, tmp_path: Path) -> None:
        path = tmp_path / "cfg" / "config.json"

        AppConfig().save_to_file(path)

        assert path.stat().st_mode & 0o777 == 0o600
        assert path.parent.stat().st_mode & 0o777 == 0o700

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="mac-rotator init"):
            AppConfig.load_from_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            AppConfig.load_from_file(path)

    def test_validation_error_lists_field(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"HealthWaitSeconds": 0}), encoding="utf-8")

        with pytest.raises(ConfigurationError, match="HealthWaitSeconds"):
            AppConfig.load_from_file(path)

    def test_configuration_error_exit_code(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            AppConfig.load_from_file(tmp_path / "missing.json")

        assert exc_info.value.exit_code == 1
