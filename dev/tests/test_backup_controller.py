from __future__ import annotations

from pathlib import Path

import pytest

from display_patcher.app.controller import list_patches, resolve_target_path, restore_target, run_patch
from display_patcher.app.models import PatchOptions
from display_patcher.backup.backup_manager import BackupManager, backup_path_for
from display_patcher.exceptions import NotFoundError, ReSignError, UsageError

pytestmark = pytest.mark.integration


class _RecordingResigner:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.seen = []

    def __call__(self, path: Path) -> None:
        self.seen.append((path, path.read_bytes()))
        if self.fail:
            raise ReSignError("codesign exploded", file_path=str(path), exit_code=1)


def _write_target(tmp_path: Path, data: bytes, name: str = "cli.js") -> Path:
    target = tmp_path / name
    target.write_bytes(data)
    return target


def test_backup_path_uses_sibling_suffix(tmp_path: Path) -> None:
    assert backup_path_for(tmp_path / "claude") == tmp_path / "claude.display.backup"
    assert BackupManager(tmp_path / "claude", ".bak").backup_path == tmp_path / "claude.bak"


def test_snapshot_is_written_once(tmp_path: Path) -> None:
    target = _write_target(tmp_path, b"v1")
    manager = BackupManager(target)

    assert manager.snapshot_if_absent(b"v1") is True
    target.write_bytes(b"v2")
    assert manager.snapshot_if_absent(b"v2") is False
    assert manager.backup_path.read_bytes() == b"v1"


def test_restore_without_backup_raises(tmp_path: Path) -> None:
    target = _write_target(tmp_path, b"v1")
    with pytest.raises(NotFoundError):
        BackupManager(target).restore()
    with pytest.raises(NotFoundError, match="Backup file not found"):
        restore_target(str(target))


def test_patch_then_restore_round_trip(tmp_path: Path, text_bundle: bytes) -> None:
    target = _write_target(tmp_path, text_bundle)

    outcome = run_patch(PatchOptions(file=str(target)))

    assert outcome.status == "patched"
    assert outcome.backup_created
    assert outcome.backup_path.read_bytes() == text_bundle
    assert target.read_bytes() == outcome.run.content
    assert target.read_bytes() != text_bundle

    restored = restore_target(str(target))
    assert restored.status == "restored"
    assert target.read_bytes() == text_bundle


def test_repatch_keeps_first_backup(tmp_path: Path, text_bundle: bytes) -> None:
    target = _write_target(tmp_path, text_bundle)
    run_patch(PatchOptions(file=str(target)))

    second = run_patch(PatchOptions(file=str(target), enable=("shebang",)))

    assert second.status == "patched"
    assert not second.backup_created
    assert second.backup_path.read_bytes() == text_bundle
    assert target.read_bytes().startswith(b"#!/usr/bin/env bun\n")


def test_already_patched_target_is_left_alone(tmp_path: Path, text_bundle: bytes) -> None:
    target = _write_target(tmp_path, text_bundle)
    run_patch(PatchOptions(file=str(target)))
    patched = target.read_bytes()
    mtime = target.stat().st_mtime_ns

    outcome = run_patch(PatchOptions(file=str(target)))

    assert outcome.status == "no-changes"
    assert target.read_bytes() == patched
    assert target.stat().st_mtime_ns == mtime


def test_dry_run_writes_nothing(tmp_path: Path, text_bundle: bytes) -> None:
    target = _write_target(tmp_path, text_bundle)
    outcome = run_patch(PatchOptions(file=str(target), dry_run=True))

    assert outcome.status == "dry-run"
    assert outcome.run.total_patched == 3
    assert target.read_bytes() == text_bundle
    assert not outcome.backup_path.exists()


def test_restore_dry_run_keeps_target(tmp_path: Path, text_bundle: bytes) -> None:
    target = _write_target(tmp_path, text_bundle)
    run_patch(PatchOptions(file=str(target)))
    patched = target.read_bytes()

    outcome = restore_target(str(target), dry_run=True)

    assert outcome.status == "dry-run"
    assert target.read_bytes() == patched


def test_unknown_module_fails_before_touching_target(tmp_path: Path, text_bundle: bytes) -> None:
    target = _write_target(tmp_path, text_bundle)
    with pytest.raises(UsageError):
        run_patch(PatchOptions(file=str(target), enable=("bogus",)))
    assert target.read_bytes() == text_bundle
    assert not backup_path_for(target).exists()


def test_missing_target_raises(tmp_path: Path) -> None:
    with pytest.raises(NotFoundError, match="Target file not found"):
        run_patch(PatchOptions(file=str(tmp_path / "missing.js")))


def test_default_target_in_working_directory(tmp_path: Path, monkeypatch, text_bundle: bytes) -> None:
    monkeypatch.chdir(tmp_path)
    with pytest.raises(NotFoundError, match="No target file found"):
        resolve_target_path(None)

    _write_target(tmp_path, text_bundle, name="claude")
    assert resolve_target_path(None) == (tmp_path / "claude").resolve()


def test_binary_target_keeps_size_and_gets_resigned(tmp_path: Path, binary_bundle: bytes) -> None:
    target = _write_target(tmp_path, binary_bundle, name="claude")
    resigner = _RecordingResigner()

    outcome = run_patch(PatchOptions(file=str(target)), resigner=resigner)

    assert outcome.target.mode.preserve_length
    assert outcome.resigned
    assert len(target.read_bytes()) == len(binary_bundle)
    assert resigner.seen == [(target.resolve(), target.read_bytes())]


def test_resign_failure_leaves_patched_target(tmp_path: Path, binary_bundle: bytes) -> None:
    target = _write_target(tmp_path, binary_bundle, name="claude")

    with pytest.raises(ReSignError) as excinfo:
        run_patch(PatchOptions(file=str(target)), resigner=_RecordingResigner(fail=True))

    assert target.read_bytes() != binary_bundle
    assert backup_path_for(target).read_bytes() == binary_bundle
    written = excinfo.value.outcome
    assert written.status == "patched"
    assert written.backup_created
    assert not written.resigned
    assert written.run.content == target.read_bytes()


def test_no_changes_skips_resign(tmp_path: Path) -> None:
    target = _write_target(tmp_path, b"console.log('plain')\n")
    resigner = _RecordingResigner()

    outcome = run_patch(PatchOptions(file=str(target)), resigner=resigner)

    assert outcome.status == "no-changes"
    assert resigner.seen == []


def test_list_patches_covers_registry() -> None:
    lines = list_patches()
    assert len(lines) == 4
    assert lines[0].split()[0] == "shebang"
