"""Utility helpers."""

from .external_tools import AD_HOC_IDENTITY, CodesignResigner, Resigner

__all__ = ["AD_HOC_IDENTITY", "CodesignResigner", "Resigner"]
