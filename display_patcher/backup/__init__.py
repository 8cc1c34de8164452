"""Backup helpers for patch targets."""

from .backup_manager import BackupManager, backup_path_for

__all__ = ["BackupManager", "backup_path_for"]
