"""Display Patcher.

Toggleable, idempotent patches for a CLI script bundle or its native
executable, plus an extractor for the payload embedded in the native build.
"""

from .version import load_version

__version__ = load_version()

__all__ = ["__version__", "load_version"]
