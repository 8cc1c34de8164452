"""One-time sibling backup of a patch target, and restore from it."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from ..config.models import DEFAULT_BACKUP_SUFFIX
from ..exceptions import NotFoundError

logger = logging.getLogger(__name__)


def backup_path_for(target: Union[str, Path], suffix: str = DEFAULT_BACKUP_SUFFIX) -> Path:
    target_path = Path(target)
    return target_path.with_name(target_path.name + suffix)


@dataclass(frozen=True)
class BackupManager:
    """Backup lives at ``<target><suffix>`` and is never overwritten."""

    target: Path
    suffix: str = DEFAULT_BACKUP_SUFFIX

    @property
    def backup_path(self) -> Path:
        return backup_path_for(self.target, self.suffix)

    def exists(self) -> bool:
        return self.backup_path.is_file()

    def snapshot_if_absent(self, original: bytes) -> bool:
        """Write ``original`` to the backup path unless a backup already exists.

        Returns True when a backup was created by this call.
        """
        backup = self.backup_path
        if backup.exists():
            logger.debug("Backup already present, keeping it: %s", backup)
            return False
        backup.write_bytes(original)
        try:
            shutil.copymode(self.target, backup)
        except OSError as exc:
            logger.warning("Could not copy permissions to backup %s: %s", backup, exc)
        logger.info("Backup created: %s", backup)
        return True

    def restore(self) -> Path:
        """Copy the backup over the target, byte for byte."""
        backup = self.backup_path
        if not backup.is_file():
            raise NotFoundError(f"Backup file not found: {backup}", file_path=str(backup))
        shutil.copy2(backup, self.target)
        logger.info("Restored %s from %s", self.target, backup)
        return self.target
