"""Unit tests for CLI commands.

Tests CLI behavior using Click's CliRunner for isolated, fast testing.
Tests use the AAA pattern (Arrange-Act-Assert) for clarity.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from click.testing import CliRunner

from mac_rotator.cli import cli
from mac_rotator.cli.commands.schedule import build_cron_line, build_schtasks_command
from mac_rotator.config import AppConfig

if TYPE_CHECKING:
    from conftest import FakeBackend


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI runner for testing."""
    return CliRunner()


@pytest.fixture
def ledger_dir(tmp_path: Path) -> Path:
    return tmp_path / "ledger"


@pytest.fixture
def cli_backend(backend: FakeBackend, ledger_dir: Path, monkeypatch: pytest.MonkeyPatch) -> FakeBackend:
    """FakeBackend wired into every command, logging to ledger_dir."""
    backend.add("Ethernet", "AA:BB:CC:00:00:01", description="Realtek PCIe GbE")
    backend.add("vEthernet (WSL)", "00:15:5D:00:00:01", description="Hyper-V Virtual Ethernet Adapter")
    for module in ("run", "adapters", "verify"):
        monkeypatch.setattr(f"mac_rotator.cli.commands.{module}.get_backend", lambda: backend)
    monkeypatch.setattr("mac_rotator.orchestrator.user_log_dir", lambda *args, **kwargs: str(ledger_dir))
    return backend


@pytest.fixture
def config_file(tmp_path: Path) -> Iterator[Path]:
    """A valid config file using the local log fallback."""
    path = tmp_path / "config.json"
    AppConfig().save_to_file(path)
    yield path


class TestVersion:
    """Tests for --version flag."""

    def test_version_flag_shows_version(self, runner: CliRunner) -> None:
        """Given --version flag, returns version string."""
        # Act
        result = runner.invoke(cli, ["--version"])

        # Assert
        assert result.exit_code == 0
        assert "mac-rotator" in result.output

    def test_short_version_flag(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["-v"])

        assert result.exit_code == 0
        assert "mac-rotator" in result.output


class TestHelp:
    """Tests for help output."""

    def test_root_help_shows_commands(self, runner: CliRunner) -> None:
        # Act
        result = runner.invoke(cli, ["--help"])

        # Assert
        assert result.exit_code == 0
        for command in ("run", "adapters", "verify", "init", "schedule"):
            assert command in result.output

    def test_no_command_shows_help(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, [])

        assert result.exit_code == 0
        assert "Quick Start" in result.output


class TestInit:
    """Tests for init command."""

    def test_writes_default_config(self, runner: CliRunner, tmp_path: Path) -> None:
        # Arrange
        path = tmp_path / "config.json"

        # Act
        result = runner.invoke(cli, ["init", "--config", str(path), "--volume-label", "AUDITLOG"])

        # Assert
        assert result.exit_code == 0, result.output
        saved = json.loads(path.read_text(encoding="utf-8"))
        assert saved["external_volume_labels"] == ["AUDITLOG"]
        assert saved["fallback_local"] is True

    def test_refuses_overwrite_without_force(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(cli, ["init", "--config", str(config_file)])

        assert result.exit_code == 1
        assert "--force" in result.output

    def test_force_overwrites(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(cli, ["init", "--config", str(config_file), "--force", "--no-fallback-local"])

        assert result.exit_code == 0
        assert AppConfig.load_from_file(config_file).fallback_local is False


class TestRun:
    """Tests for run command."""

    def test_missing_config_exits_1(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["run", "--config", str(tmp_path / "nope.json")])

        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_audit_pass(
        self, runner: CliRunner, config_file: Path, cli_backend: FakeBackend, ledger_dir: Path
    ) -> None:
        """Audit run writes the ledger and touches nothing."""
        # Act
        result = runner.invoke(cli, ["run", "--audit", "--config", str(config_file)])

        # Assert
        assert result.exit_code == 0, result.output
        assert "audited" in result.output
        assert cli_backend.calls == []
        assert (ledger_dir / "records.jsonl").read_text(encoding="utf-8").count("\n") == 1

    def test_failed_attempts_still_exit_0(
        self, runner: CliRunner, config_file: Path, cli_backend: FakeBackend
    ) -> None:
        nic = cli_backend.nics["Ethernet"]
        nic.primary_available = False
        nic.device_key_present = False

        result = runner.invoke(cli, ["run", "--config", str(config_file)])

        assert result.exit_code == 0, result.output
        assert "FallbackKeyNotFound" in result.output

    def test_audit_failure_exits_10(
        self, runner: CliRunner, config_file: Path, cli_backend: FakeBackend, ledger_dir: Path
    ) -> None:
        ledger_dir.mkdir(parents=True)
        (ledger_dir / "chain.state").write_text("corrupt", encoding="utf-8")

        result = runner.invoke(cli, ["run", "--audit", "--config", str(config_file)])

        assert result.exit_code == 10

    def test_no_log_volume_exits_1(
        self, runner: CliRunner, tmp_path: Path, cli_backend: FakeBackend
    ) -> None:
        path = tmp_path / "strict.json"
        AppConfig(external_volume_labels=["MISSING"], fallback_local=False).save_to_file(path)

        result = runner.invoke(cli, ["run", "--config", str(path)])

        assert result.exit_code == 1
        assert cli_backend.calls == []

    def test_no_eligible_adapters_exit_0(
        self, runner: CliRunner, config_file: Path, cli_backend: FakeBackend
    ) -> None:
        cli_backend.nics.clear()

        result = runner.invoke(cli, ["run", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "No eligible adapters" in result.output


class TestAdapters:
    """Tests for adapters command."""

    def test_lists_eligible_only(self, runner: CliRunner, config_file: Path, cli_backend: FakeBackend) -> None:
        result = runner.invoke(cli, ["adapters", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "Ethernet" in result.output
        assert "vEthernet" not in result.output

    def test_all_shows_exclusion_reason(self, runner: CliRunner, config_file: Path, cli_backend: FakeBackend) -> None:
        result = runner.invoke(cli, ["adapters", "--all", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "vEthernet (WSL)" in result.output
        assert "excluded by 'Virtual'" in result.output


class TestVerify:
    """Tests for verify command."""

    def test_nothing_to_verify_exits_2(
        self, runner: CliRunner, config_file: Path, cli_backend: FakeBackend
    ) -> None:
        result = runner.invoke(cli, ["verify", "--config", str(config_file)])

        assert result.exit_code == 2

    def test_intact_ledger_passes(self, runner: CliRunner, config_file: Path, cli_backend: FakeBackend) -> None:
        # Arrange
        runner.invoke(cli, ["run", "--audit", "--config", str(config_file)])

        # Act
        result = runner.invoke(cli, ["verify", "--config", str(config_file)])

        # Assert
        assert result.exit_code == 0, result.output
        assert "Verification passed: 1 entries" in result.output

    def test_tampered_ledger_exits_1(
        self, runner: CliRunner, config_file: Path, cli_backend: FakeBackend, ledger_dir: Path
    ) -> None:
        # Arrange
        runner.invoke(cli, ["run", "--audit", "--config", str(config_file)])
        records = ledger_dir / "records.jsonl"
        records.write_text(records.read_text(encoding="utf-8").replace("Realtek", "Intel"), encoding="utf-8")

        # Act
        result = runner.invoke(cli, ["verify", "--config", str(config_file)])

        # Assert
        assert result.exit_code == 1
        assert "hash mismatch" in result.output

    def test_explicit_log_root(self, runner: CliRunner, config_file: Path, tmp_path: Path) -> None:
        empty = tmp_path / "elsewhere"
        empty.mkdir()

        result = runner.invoke(cli, ["verify", "--config", str(config_file), "--log-root", str(empty)])

        assert result.exit_code == 2


class TestSchedule:
    """Tests for scheduled-task command construction."""

    def test_schtasks_command(self, tmp_path: Path) -> None:
        args = build_schtasks_command(30, tmp_path / "config.json")

        assert args[:3] == ["schtasks", "/Create", "/F"]
        assert args[args.index("/MO") + 1] == "30"
        assert args[args.index("/RL") + 1] == "HIGHEST"
        assert "run" in args[args.index("/TR") + 1]

    @pytest.mark.parametrize(
        ("minutes", "timing"),
        [(15, "*/15 * * * *"), (60, "0 */1 * * *"), (180, "0 */3 * * *")],
    )
    def test_cron_timing(self, minutes: int, timing: str) -> None:
        line = build_cron_line(minutes, None)

        assert line.startswith(timing + " flock -n")
        assert "mac_rotator.cli.main run --config" in line

    def test_default_config_path_is_explicit(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Scheduled runs execute as SYSTEM/root, so the invoking user's config is always passed."""
        # Arrange
        user_config = tmp_path / "user" / "config.json"
        monkeypatch.setattr(
            "mac_rotator.cli.commands.schedule.default_config_path", lambda: user_config
        )

        # Act
        task_args = build_schtasks_command(30, None)
        cron = build_cron_line(30, None)

        # Assert
        task_run = task_args[task_args.index("/TR") + 1]
        assert "--config" in task_run
        assert str(user_config.resolve()) in task_run
        assert f"--config {user_config.resolve()}" in cron

    def test_explicit_config_path_is_absolute(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)

        cron = build_cron_line(30, Path("cfg.json"))

        assert f"--config {tmp_path.resolve() / 'cfg.json'}" in cron

    def test_cron_rejects_uneven_hours(self) -> None:
        import click

        with pytest.raises(click.BadParameter):
            build_cron_line(90, None)

    def test_schedule_prints_cron_line_off_windows(
        self, runner: CliRunner, config_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("mac_rotator.cli.commands.schedule.sys.platform", "linux")

        result = runner.invoke(cli, ["schedule", "--interval-minutes", "30", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "*/30 * * * *" in result.output
