#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
Display Patcher - Command line entry points

patch_main:   apply, preview or restore display patches on a target.
extract_main: pull the embedded color-diff payload out of a native binary.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, Sequence

from .app.controller import list_patches, restore_target, run_patch
from .app.models import PatchOptions, PatchOutcome
from .config.io import load_config
from .config.models import PatcherConfig
from .exceptions import BaseError, ReSignError, UsageError
from .extraction.extractor import extract_to_file
from .logging_config import setup_logging
from .patching.registry import PATCH_MODULES
from .patching.selection import parse_id_list, resolve_selection
from .utils.external_tools import AD_HOC_IDENTITY
from .version import load_version

logger = logging.getLogger(__name__)


class _ArgumentParser(argparse.ArgumentParser):
    """argparse variant that reports usage problems as UsageError (exit 1)."""

    def error(self, message):
        raise UsageError(message)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", metavar="PATH", help="YAML config file (default: ./display_patcher.yaml)")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        default=None,
        help="Console log level (default from config: WARNING)",
    )
    parser.add_argument("--log-json", action="store_true", help="Emit structured JSON log lines")


def build_patch_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="display-patcher",
        description="Display patcher: toggleable, idempotent patches for a CLI bundle or native binary",
    )
    parser.add_argument("--file", metavar="PATH", help="Target file (auto-uses ./claude when present)")
    parser.add_argument("--dry-run", action="store_true", help="Show what would change without writing")
    parser.add_argument("--restore", action="store_true", help="Restore the target from its backup")
    parser.add_argument("--enable", metavar="IDS", action="append", default=[],
                        help="Comma-separated patch ids to enable (opt-in patches included)")
    parser.add_argument("--disable", metavar="IDS", action="append", default=[],
                        help="Comma-separated patch ids to disable")
    parser.add_argument("--list-patches", action="store_true", help="List available patches and exit")
    parser.add_argument("--codesign", nargs="?", const=AD_HOC_IDENTITY, default=None, metavar="IDENTITY",
                        help="Re-sign after writing (default identity: ad-hoc '-')")
    parser.add_argument("--allow-size-change", action="store_true",
                        help="Allow edits that change the size of a native binary")
    parser.add_argument("--version", action="version", version=f"%(prog)s {load_version()}")
    _add_common_arguments(parser)
    return parser


def build_extract_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="display-patcher-extract",
        description="Extract color-diff.node from a native binary",
    )
    parser.add_argument("--input", required=True, metavar="PATH", help="Native host binary")
    parser.add_argument("--output", required=True, metavar="PATH", help="Where to write the payload")
    _add_common_arguments(parser)
    return parser


def _merge_ids(config_ids: Sequence[str], cli_values: Sequence[str]) -> tuple:
    merged: List[str] = list(config_ids)
    for raw in cli_values:
        for module_id in parse_id_list(raw):
            if module_id not in merged:
                merged.append(module_id)
    return tuple(merged)


def _configure(args: argparse.Namespace) -> PatcherConfig:
    config = load_config(args.config)
    setup_logging(
        log_level=args.log_level or config.logging.level,
        structured_json=True if args.log_json else (config.logging.json_output or None),
        log_dir=config.logging.log_dir,
    )
    return config


def _print_summary(outcome: PatchOutcome) -> None:
    target = outcome.target
    kind = target.classification.format_tag
    preserve = " (size-preserving)" if target.mode.preserve_length else ""
    print(f"Target: {target.path} [{kind}]{preserve}")
    print("Patch summary:")
    for report in outcome.run.reports:
        print(f"  {report.summary()}")


def _print_written(outcome: PatchOutcome) -> None:
    if outcome.backup_created:
        print(f"Backup created: {outcome.backup_path}")
    print(f"Patched: {outcome.target.path}")


def _report_error(exc: BaseError) -> int:
    print(f"Error: {exc}", file=sys.stderr)
    logger.debug("Failure details: %s", exc.to_dict())
    return 1


def patch_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_patch_parser()
    try:
        args = parser.parse_args(argv)
    except UsageError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        print("", file=sys.stderr)
        parser.print_help(sys.stderr)
        return 1

    try:
        config = _configure(args)

        if args.list_patches:
            print("Available patches:")
            for line in list_patches():
                print(line)
            return 0

        enable = _merge_ids(config.enable, args.enable)
        disable = _merge_ids(config.disable, args.disable)
        # Bad ids are reported even when restoring.
        resolve_selection(PATCH_MODULES, enable, disable)

        if args.restore:
            outcome = restore_target(
                args.file,
                dry_run=args.dry_run,
                backup_suffix=config.backup_suffix,
                default_target=config.default_target,
            )
            if outcome.status == "dry-run":
                print(f"Would restore {outcome.target_path} from {outcome.backup_path}")
            else:
                print(f"Restored {outcome.target_path} from backup.")
            return 0

        options = PatchOptions(
            file=args.file,
            dry_run=args.dry_run,
            enable=enable,
            disable=disable,
            allow_size_change=args.allow_size_change or config.allow_size_change,
            codesign_identity=args.codesign if args.codesign is not None else config.codesign_identity,
            backup_suffix=config.backup_suffix,
            default_target=config.default_target,
        )
        try:
            outcome = run_patch(options)
        except ReSignError as exc:
            if exc.outcome is not None:
                _print_summary(exc.outcome)
                _print_written(exc.outcome)
            print(f"Error: {exc}", file=sys.stderr)
            print("The target was patched but is not signed; re-sign it manually.", file=sys.stderr)
            return 1

        _print_summary(outcome)
        if outcome.status == "no-changes":
            print("No changes needed.")
        elif outcome.status == "dry-run":
            print("Dry run complete. No files changed.")
        else:
            _print_written(outcome)
            if outcome.resigned:
                print(f"Re-signed: {outcome.target.path}")
        return 0

    except BaseError as exc:
        return _report_error(exc)


def extract_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_extract_parser()
    try:
        args = parser.parse_args(argv)
        config = _configure(args)
        payload = extract_to_file(
            args.input,
            args.output,
            markers=config.extraction.marker_bytes(),
            window=config.extraction.scan_window,
        )
    except BaseError as exc:
        return _report_error(exc)

    print(f"Extracted {payload.candidate.format_tag} payload ({payload.size} bytes) -> {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(patch_main())
