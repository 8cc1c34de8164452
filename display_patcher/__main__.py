#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Display Patcher - module entry point (`python -m display_patcher`)."""

from __future__ import annotations

from .cli import patch_main

if __name__ == "__main__":
    raise SystemExit(patch_main())
