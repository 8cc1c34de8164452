#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
Display Patcher - Startup Script

Runs the patch CLI from a source checkout without installing the package.
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from display_patcher.cli import patch_main  # noqa: E402

if __name__ == "__main__":
    raise SystemExit(patch_main())
