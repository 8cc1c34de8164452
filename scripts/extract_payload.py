#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Extract color-diff.node from a native binary.

Usage:
  python scripts/extract_payload.py --input <native-binary> --output <color-diff.node>
"""

from __future__ import annotations

import sys
from pathlib import Path


def main() -> int:
    repo_root = Path(__file__).resolve().parents[1]
    repo_root_str = str(repo_root)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)

    from display_patcher.cli import extract_main

    return extract_main()


if __name__ == "__main__":
    raise SystemExit(main())
