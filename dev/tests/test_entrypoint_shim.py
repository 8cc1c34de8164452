"""Verify the startup shims delegate to the CLI entry points."""

from __future__ import annotations

import importlib
import importlib.util
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]


def test_package_main_and_start_script_expose_patch_main() -> None:
    from display_patcher.cli import patch_main

    assert importlib.import_module("display_patcher.__main__").patch_main is patch_main
    assert importlib.import_module("start_patcher").patch_main is patch_main


def test_extract_script_has_main() -> None:
    spec = importlib.util.spec_from_file_location("extract_payload_script", ROOT / "scripts" / "extract_payload.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    assert callable(module.main)


def test_package_version_is_set() -> None:
    import display_patcher

    assert display_patcher.__version__
