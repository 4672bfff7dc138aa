"""Tests for the subprocess helper's error mapping."""

from __future__ import annotations

import subprocess
from types import SimpleNamespace

import pytest

from mac_rotator.exceptions import BackendError
from mac_rotator.platform import commands
from mac_rotator.platform.commands import run_command


def _completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> SimpleNamespace:
    return SimpleNamespace(returncode=returncode, stdout=stdout, stderr=stderr)


class TestRunCommand:
    def test_returns_stripped_stdout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        # Arrange
        seen: dict = {}

        def fake_run(args, **kwargs):
            seen["args"] = args
            seen["kwargs"] = kwargs
            return _completed(stdout="  hello\n")

        monkeypatch.setattr(commands.subprocess, "run", fake_run)

        # Act
        output = run_command(["ip", "link"], timeout=7)

        # Assert
        assert output == "hello"
        assert seen["args"] == ["ip", "link"]
        assert seen["kwargs"]["timeout"] == 7
        assert "shell" not in seen["kwargs"]

    def test_nonzero_exit_uses_stderr(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            commands.subprocess, "run", lambda args, **kwargs: _completed(2, stderr="RTNETLINK answers: Busy\n")
        )

        with pytest.raises(BackendError, match="RTNETLINK answers: Busy") as exc_info:
            run_command(["ip", "link", "set"])

        assert exc_info.value.command == "ip"

    def test_nonzero_exit_without_output(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(commands.subprocess, "run", lambda args, **kwargs: _completed(5))

        with pytest.raises(BackendError, match="exit code 5"):
            run_command(["ethtool", "-P", "eth0"])

    def test_missing_executable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def fake_run(args, **kwargs):
            raise FileNotFoundError(args[0])

        monkeypatch.setattr(commands.subprocess, "run", fake_run)

        with pytest.raises(BackendError, match="ifconfig not found"):
            run_command(["ifconfig", "eth0"])

    def test_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def fake_run(args, **kwargs):
            raise subprocess.TimeoutExpired(args, kwargs["timeout"])

        monkeypatch.setattr(commands.subprocess, "run", fake_run)

        with pytest.raises(BackendError, match="timed out after 3s"):
            run_command(["powershell"], timeout=3)
