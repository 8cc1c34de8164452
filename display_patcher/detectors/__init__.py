"""Target detectors."""

from .target_classifier import TargetClassification, classify_bytes, detect_magic

__all__ = ["TargetClassification", "classify_bytes", "detect_magic"]
