from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from display_patcher.exceptions import ReSignError
from display_patcher.utils import external_tools
from display_patcher.utils.external_tools import CodesignResigner


def _fake_which(found: bool):
    return lambda name: f"/usr/bin/{name}" if found else None


def test_build_command_defaults_to_ad_hoc() -> None:
    assert CodesignResigner().build_command(Path("/tmp/claude")) == [
        "codesign", "--force", "--sign", "-", "/tmp/claude",
    ]
    assert CodesignResigner(identity="Dev ID").build_command("x")[3] == "Dev ID"


def test_successful_resign_runs_codesign(monkeypatch) -> None:
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append((cmd, kwargs))
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="replacing existing signature")

    monkeypatch.setattr(external_tools.shutil, "which", _fake_which(True))
    monkeypatch.setattr(external_tools.subprocess, "run", fake_run)

    CodesignResigner()(Path("/tmp/claude"))

    assert calls[0][0] == ["codesign", "--force", "--sign", "-", "/tmp/claude"]
    assert calls[0][1]["check"] is False


def test_missing_tool_raises(monkeypatch) -> None:
    monkeypatch.setattr(external_tools.shutil, "which", _fake_which(False))
    with pytest.raises(ReSignError, match="not found"):
        CodesignResigner()(Path("/tmp/claude"))


def test_nonzero_exit_raises_with_code(monkeypatch) -> None:
    monkeypatch.setattr(external_tools.shutil, "which", _fake_which(True))
    monkeypatch.setattr(
        external_tools.subprocess,
        "run",
        lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 1, stdout="", stderr="no identity found"),
    )
    with pytest.raises(ReSignError, match="no identity found") as excinfo:
        CodesignResigner(identity="Nobody")(Path("/tmp/claude"))
    assert excinfo.value.details["exit_code"] == 1


def test_timeout_raises(monkeypatch) -> None:
    def fake_run(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

    monkeypatch.setattr(external_tools.shutil, "which", _fake_which(True))
    monkeypatch.setattr(external_tools.subprocess, "run", fake_run)
    with pytest.raises(ReSignError, match="timed out"):
        CodesignResigner(timeout_sec=1)(Path("/tmp/claude"))
