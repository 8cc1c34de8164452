"""Concrete patch modules."""

from .collapsed_read_search import CollapsedReadSearchModule
from .installer_message import InstallerMessageModule
from .shebang import ShebangModule
from .thinking_transcript import ThinkingTranscriptModule

__all__ = [
    "CollapsedReadSearchModule",
    "InstallerMessageModule",
    "ShebangModule",
    "ThinkingTranscriptModule",
]
