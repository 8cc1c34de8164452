"""Controller: patch run, restore and module listing.

The patch path reads the target once, assembles the complete output in
memory and writes it at most once. Selection is resolved before any file
access so bad ids never touch the target.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..backup.backup_manager import BackupManager
from ..config.models import DEFAULT_BACKUP_SUFFIX, DEFAULT_TARGET_NAME
from ..detectors.target_classifier import classify_bytes
from ..exceptions import NotFoundError, ReSignError
from ..patching.base import PatchMode, PatchModule
from ..patching.engine import PatchEngine
from ..patching.registry import PATCH_MODULES
from ..patching.selection import format_module_listing, resolve_selection
from ..utils.external_tools import CodesignResigner, Resigner
from .models import PatchOptions, PatchOutcome, RestoreOutcome, TargetArtifact

logger = logging.getLogger(__name__)


def list_patches(modules: Sequence[PatchModule] = PATCH_MODULES) -> List[str]:
    return format_module_listing(modules)


def resolve_target_path(file: Optional[Union[str, Path]], default_name: str = DEFAULT_TARGET_NAME) -> Path:
    """Explicit path, else ``./<default_name>`` when present."""
    if file:
        return Path(file).expanduser().resolve()

    local = Path(default_name).resolve()
    if local.is_file():
        return local

    raise NotFoundError(
        f"No target file found. Place `{default_name}` in current folder or pass --file <path>.",
        file_path=str(local),
    )


def load_target(path: Path, allow_size_change: bool = False) -> TargetArtifact:
    if not path.is_file():
        raise NotFoundError(f"Target file not found: {path}", file_path=str(path))

    data = path.read_bytes()
    classification = classify_bytes(data)
    mode = PatchMode.for_target(classification, allow_size_change)
    logger.info("Target %s: %d bytes, format=%s, preserve_length=%s",
                path, len(data), classification.format_tag, mode.preserve_length)
    if classification.is_binary and allow_size_change:
        logger.warning("Size changes allowed on a raw binary; embedded offsets may break")
    return TargetArtifact(path=path, data=data, classification=classification, mode=mode)


def run_patch(
    options: PatchOptions,
    resigner: Optional[Resigner] = None,
    engine: Optional[PatchEngine] = None,
) -> PatchOutcome:
    """Patch the target described by ``options``.

    Raises:
        UsageError: unknown or conflicting module ids (before any I/O).
        NotFoundError: the target does not exist.
        ReSignError: re-signing failed; the target is already written.
    """
    engine = engine or PatchEngine()
    selection = resolve_selection(engine.modules, options.enable, options.disable)

    target_path = resolve_target_path(options.file, options.default_target)
    target = load_target(target_path, options.allow_size_change)
    backups = BackupManager(target.path, options.backup_suffix)

    run = engine.run(target.data, target.mode, selection)

    if not run.changed:
        logger.info("No changes needed for %s", target.path)
        return PatchOutcome(status="no-changes", target=target, run=run, backup_path=backups.backup_path)

    if options.dry_run:
        logger.info("Dry run: %d edit(s) would be written to %s", run.total_patched, target.path)
        return PatchOutcome(status="dry-run", target=target, run=run, backup_path=backups.backup_path)

    backup_created = backups.snapshot_if_absent(target.data)
    target.path.write_bytes(run.content)
    logger.info("Patched: %s", target.path)

    if resigner is None and options.codesign_identity is not None:
        resigner = CodesignResigner(identity=options.codesign_identity)

    outcome = PatchOutcome(
        status="patched",
        target=target,
        run=run,
        backup_path=backups.backup_path,
        backup_created=backup_created,
    )
    if resigner is None:
        return outcome

    try:
        resigner(target.path)
    except ReSignError as exc:
        exc.outcome = outcome
        raise
    return replace(outcome, resigned=True)


def restore_target(
    file: Optional[Union[str, Path]],
    dry_run: bool = False,
    backup_suffix: str = DEFAULT_BACKUP_SUFFIX,
    default_target: str = DEFAULT_TARGET_NAME,
) -> RestoreOutcome:
    target_path = resolve_target_path(file, default_target)
    backups = BackupManager(target_path, backup_suffix)
    if not backups.exists():
        raise NotFoundError(f"Backup file not found: {backups.backup_path}", file_path=str(backups.backup_path))

    if dry_run:
        return RestoreOutcome(status="dry-run", target_path=target_path, backup_path=backups.backup_path)

    backups.restore()
    return RestoreOutcome(status="restored", target_path=target_path, backup_path=backups.backup_path)
