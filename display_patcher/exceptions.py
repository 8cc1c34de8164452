#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
Display Patcher - Consolidated Exception Classes

All project-specific exceptions live here so the CLIs can map every
failure to a single exit path.
"""

from datetime import datetime
from typing import Dict, Any, Optional


class BaseError(Exception):
    """Base class for all project-specific errors."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.error_code = error_code or "ERROR"
        self.details = details or {}
        self.timestamp = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        """Converts the exception to a dictionary for structured logging."""
        return {
            'error_code': self.error_code,
            'message': str(self),
            'details': self.details,
            'timestamp': self.timestamp.isoformat()
        }


# =====================================================================================================
# Usage and configuration errors
# =====================================================================================================

class UsageError(BaseError):
    """Raised for bad flags and unknown or conflicting module ids."""

    def __init__(self, message: str, module_ids: Optional[list] = None,
                 details: Optional[Dict[str, Any]] = None):
        usage_details = details or {}
        if module_ids:
            usage_details['module_ids'] = sorted(module_ids)
        super().__init__(message, "USAGE_ERROR", usage_details)


class ConfigurationError(BaseError):
    """Raised when the config file cannot be read or validated."""

    def __init__(self, message: str, file_path: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        config_details = details or {}
        if file_path:
            config_details['file_path'] = str(file_path)
        super().__init__(message, "CONFIG_ERROR", config_details)


# =====================================================================================================
# File-system errors
# =====================================================================================================

class NotFoundError(BaseError):
    """Raised when the target or its backup does not exist."""

    def __init__(self, message: str, file_path: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        file_details = details or {}
        if file_path:
            file_details['file_path'] = str(file_path)
        super().__init__(message, "NOT_FOUND", file_details)


class ReSignError(BaseError):
    """Raised when the external code-signing tool fails after a write."""

    def __init__(self, message: str, file_path: Optional[str] = None,
                 exit_code: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        sign_details = details or {}
        if file_path:
            sign_details['file_path'] = str(file_path)
        if exit_code is not None:
            sign_details['exit_code'] = exit_code
        super().__init__(message, "RESIGN_ERROR", sign_details)
        # Set by the controller: the write that preceded the failed signing.
        self.outcome = None


# =====================================================================================================
# Processing errors
# =====================================================================================================

class SizeInvariantViolation(BaseError):
    """A module edit changed the byte length of a length-preserving target.

    Non-fatal: the engine discards the edit and continues.
    """

    def __init__(self, message: str, module_id: Optional[str] = None,
                 before: Optional[int] = None, after: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        size_details = details or {}
        if module_id:
            size_details['module_id'] = module_id
        if before is not None:
            size_details['before'] = before
        if after is not None:
            size_details['after'] = after
        super().__init__(message, "SIZE_INVARIANT", size_details)


class StructuralParseError(BaseError):
    """Raised when an embedded container header cannot be walked."""

    def __init__(self, message: str, format_tag: Optional[str] = None,
                 offset: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        parse_details = details or {}
        if format_tag:
            parse_details['format'] = format_tag
        if offset is not None:
            parse_details['offset'] = offset
        super().__init__(message, "STRUCTURAL_PARSE_ERROR", parse_details)


class UnsupportedFormatError(BaseError):
    """Raised when no marker + magic candidate yields a payload."""

    def __init__(self, message: str, last_error: Optional[Exception] = None,
                 details: Optional[Dict[str, Any]] = None):
        format_details = details or {}
        if last_error is not None:
            format_details['last_error'] = str(last_error)
        super().__init__(message, "UNSUPPORTED_FORMAT", format_details)
        self.last_error = last_error
