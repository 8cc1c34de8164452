"""External tool integration: re-signing a patched executable."""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Union

from ..exceptions import ReSignError

logger = logging.getLogger(__name__)

AD_HOC_IDENTITY = "-"
DEFAULT_TIMEOUT_SEC = 60.0


class Resigner(Protocol):
    """Port called once, after a successful patched write."""

    def __call__(self, path: Path) -> None:
        ...


def _stringify_command(cmd: List[str]) -> str:
    return " ".join(shlex.quote(part) for part in cmd)


@dataclass(frozen=True)
class CodesignResigner:
    """Re-sign with ``codesign --force --sign <identity> <path>``."""

    identity: str = AD_HOC_IDENTITY
    executable: str = "codesign"
    timeout_sec: Optional[float] = DEFAULT_TIMEOUT_SEC

    def build_command(self, path: Union[str, Path]) -> List[str]:
        return [self.executable, "--force", "--sign", self.identity or AD_HOC_IDENTITY, str(path)]

    def __call__(self, path: Path) -> None:
        cmd = self.build_command(path)
        if shutil.which(self.executable) is None:
            raise ReSignError(f"Code-signing tool not found: {self.executable}", file_path=str(path))

        logger.info("Re-signing: %s", _stringify_command(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout_sec,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise ReSignError(
                f"Code signing timed out after {self.timeout_sec}s", file_path=str(path)
            ) from exc
        except OSError as exc:
            raise ReSignError(f"Code signing could not start: {exc}", file_path=str(path)) from exc

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise ReSignError(
                f"Code signing failed (exit {result.returncode}): {stderr or 'no output'}",
                file_path=str(path),
                exit_code=result.returncode,
            )
        logger.debug("codesign output: %s", (result.stderr or result.stdout or "").strip())
